"""Signal-aware output writing for the treemerge CLI."""

import errno
import os
import types
from pathlib import Path
from typing import BinaryIO, Optional, Type, Union

from treemerge.cli.signal_handler import signal_handler


class SafeWriter:
    """Writes the merged document to a file or file descriptor.

    The target stays open for the whole merge and is closed when the context
    manager exits, whether the merge completed or failed. Every write first checks
    for SIGINT/SIGPIPE so an interrupted merge stops at the next chunk.

    Attributes:
        file: The file path or file descriptor given at construction.
        fd: The file descriptor being written to.
        bytes_written: Number of UTF-8 bytes written so far.

    Example:
        >>> import os, tempfile
        >>> path = os.path.join(tempfile.mkdtemp(), "merged.txt")
        >>> with SafeWriter(path) as writer:
        ...     writer.write("FILE: a.cs\\n")
        >>> writer.bytes_written
        11
    """

    def __init__(self, file: Union[int, str, "os.PathLike[str]"]):
        """Initialize the safe writer.

        Args:
            file: A file descriptor (e.g. ``sys.stdout.fileno()``) or a path. Paths
                are created or truncated.

        Raises:
            TypeError: If file is neither an int nor path-like.
            OSError: If the output file cannot be opened.
        """
        self.file = file
        self.bytes_written = 0
        self._closed = False
        self._file_obj: Optional[BinaryIO] = None

        if isinstance(file, bool):
            raise TypeError(f"Expected int, str, or PathLike, got {type(file).__name__}")
        if isinstance(file, int):
            self.fd = file
        elif isinstance(file, (str, os.PathLike)):
            self._file_obj = Path(file).open("wb")
            self.fd = self._file_obj.fileno()
        else:
            raise TypeError(f"Expected int, str, or PathLike, got {type(file).__name__}")

    @property
    def owns_file(self) -> bool:
        """Whether this writer opened (and will close) the target itself."""
        return self._file_obj is not None

    def write(self, data: str) -> None:
        """Write data encoded as UTF-8.

        Raises:
            BrokenPipeError: If SIGPIPE/SIGINT was received or the pipe is broken.
            OSError: If an I/O error occurs during writing.
            ValueError: If attempting to write to a closed writer.
        """
        if self._closed:
            raise ValueError("Cannot write to closed SafeWriter")

        if signal_handler.interrupted:
            raise BrokenPipeError()

        payload = data.encode("utf-8")
        view = memoryview(payload)
        try:
            # os.write may write fewer bytes than requested
            while view:
                written = os.write(self.fd, view)
                view = view[written:]
        except OSError as e:
            if e.errno == errno.EPIPE:
                raise BrokenPipeError() from e
            raise
        self.bytes_written += len(payload)

    def close(self) -> None:
        """Close the file if this writer opened it.

        The writer is marked closed even when closing fails with a broken pipe.
        """
        if self._closed:
            return

        try:
            if self._file_obj is not None:
                self._file_obj.close()
        except OSError as e:
            if e.errno != errno.EPIPE:
                raise
        finally:
            self._closed = True

    def __enter__(self) -> "SafeWriter":
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[types.TracebackType],
    ) -> None:
        """Close the writer, giving priority to an exception raised in the with block."""
        try:
            self.close()
        except OSError:
            if exc_type is None:
                raise
