"""Pytest configuration and shared fixtures for propconf tests."""

import tempfile
from pathlib import Path
from typing import Callable, Iterator

import pytest

from propconf import Properties


@pytest.fixture
def temp_dir() -> Iterator[Path]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmp_dir:
        yield Path(tmp_dir)


@pytest.fixture
def props() -> Properties:
    """Create an empty property store."""
    return Properties()


@pytest.fixture
def write_file(temp_dir: Path) -> Callable[[str, str], Path]:
    """Return a helper writing text files into the temporary directory."""

    def _write(name: str, content: str) -> Path:
        """Write content to a file.

        Args:
            name: File name relative to the temporary directory
            content: Text to write
        """
        path = temp_dir / name
        path.write_text(content, encoding="utf-8")
        return path

    return _write


class FailingStream:
    """Stream whose reads and writes always fail."""

    def read(self, *args):
        raise OSError("no progress")

    def write(self, *args):
        raise OSError("short write")


@pytest.fixture
def failing_stream() -> FailingStream:
    """Create a stream that fails on every read and write."""
    return FailingStream()
