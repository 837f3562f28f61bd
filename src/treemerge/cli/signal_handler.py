"""Signal handling utilities for the treemerge CLI.

SIGINT (Ctrl+C) and, on Unix-like systems, SIGPIPE only set flags. The merge
loop notices them on its next write, stops, lets the output writer close the
file, and the process exits with the conventional status.
"""

import atexit
import os
import signal
import sys
from threading import Event
from types import FrameType
from typing import Dict, Optional

EXIT_SIGINT = 130
EXIT_SIGPIPE = 141


class SignalHandler:
    """Records interruption signals received during a merge.

    Attributes:
        sigpipe_received: Event that is set when a SIGPIPE signal is received.
        sigint_received: Event that is set when a SIGINT signal is received.
    """

    def __init__(self) -> None:
        self.sigpipe_received = Event()
        self.sigint_received = Event()
        self._original_handlers: Dict[int, object] = {}

    @property
    def interrupted(self) -> bool:
        return self.sigpipe_received.is_set() or self.sigint_received.is_set()

    def exit_code(self) -> Optional[int]:
        """Exit status matching the received signal, or None if none was received."""
        if self.sigpipe_received.is_set():
            return EXIT_SIGPIPE
        if self.sigint_received.is_set():
            return EXIT_SIGINT
        return None

    def _restore(self, signum: int) -> None:
        original = self._original_handlers.get(signum)
        if original is not None:
            signal.signal(signum, original)  # type: ignore[arg-type]

    def handle_sigpipe(self, signum: int, frame: Optional[FrameType]) -> None:
        self.sigpipe_received.set()
        self._restore(signum)

    def handle_sigint(self, signum: int, frame: Optional[FrameType]) -> None:
        self.sigint_received.set()
        self._restore(signum)

    def install(self) -> None:
        """Install the handlers, remembering the previous ones."""
        handlers = [(signal.SIGINT, self.handle_sigint)]
        if hasattr(signal, "SIGPIPE"):
            handlers.append((signal.SIGPIPE, self.handle_sigpipe))
        for signum, handler in handlers:
            self._original_handlers[signum] = signal.getsignal(signum)
            signal.signal(signum, handler)

    def reset(self) -> None:
        self.sigpipe_received.clear()
        self.sigint_received.clear()


# Create a singleton instance for the application
signal_handler = SignalHandler()


def setup_signal_handling() -> None:
    """Configure signal handlers for SIGPIPE and SIGINT."""
    signal_handler.install()


def cleanup() -> None:
    """Silence stdout after an interruption so shutdown produces no further errors."""
    if signal_handler.interrupted:
        devnull = os.open(os.devnull, os.O_WRONLY)
        os.dup2(devnull, sys.stdout.fileno())


atexit.register(cleanup)
