"""Test configuration and fixtures for treemerge."""

import pytest

from treemerge.cli.signal_handler import signal_handler


def pytest_addoption(parser):
    """Add custom command-line options for tests."""
    parser.addoption("--run-cli-tests", action="store_true", default=False, help="Run CLI integration tests (slow)")


@pytest.fixture
def make_tree(tmp_path):
    """Create files below a project root from a mapping of relative path to content.

    Returns a function; calling it with ``{"src/a.cs": "int a;"}`` writes the files
    and returns the project root.
    """

    def _make(files, root_name="project"):
        root = tmp_path / root_name
        root.mkdir(exist_ok=True)
        for relative, content in files.items():
            path = root.joinpath(*relative.split("/"))
            if relative.endswith("/"):
                path.mkdir(parents=True, exist_ok=True)
                continue
            path.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, bytes):
                path.write_bytes(content)
            else:
                path.write_text(content, encoding="utf-8")
        return root

    return _make


@pytest.fixture
def clean_signal_state():
    """Make sure no interruption flag leaks between tests."""
    signal_handler.reset()
    yield signal_handler
    signal_handler.reset()
