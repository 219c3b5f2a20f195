"""In-memory property store backed by the properties text format."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import IO, Dict, Iterator, List, Tuple, Union

from .exceptions import PropertiesReadError
from .scanner import scan
from .writer import write_properties

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


class Properties:
    """Unordered mapping of property names to string values.

    Values are changed only through explicit ``set``, ``delete`` and ``clear``
    calls. There is no internal locking: callers mutating one store from
    several threads must synchronize themselves.
    """

    def __init__(self, values: Dict[str, str] | None = None):
        """Initialize property store.

        Args:
            values: Optional initial values  # (copied, not referenced)
        """
        self._values: Dict[str, str] = dict(values) if values else {}

    def get(self, name: str) -> Tuple[str, bool]:
        """Return the value of a property and whether it exists."""
        if name in self._values:
            return self._values[name], True
        return "", False

    def get_default(self, name: str, default: str) -> str:
        """Return the value of a property or ``default`` if it does not exist."""
        return self._values.get(name, default)

    def names(self) -> List[str]:
        """Return the names of all properties, in no particular order."""
        return list(self._values)

    def set(self, name: str, value: str) -> None:
        """Set a property, replacing any previous value."""
        self._values[name] = value

    def delete(self, name: str) -> None:
        """Remove a property if present."""
        self._values.pop(name, None)

    def clear(self) -> None:
        """Remove all properties."""
        self._values.clear()

    def items(self) -> List[Tuple[str, str]]:
        """Return a snapshot of (name, value) pairs."""
        return list(self._values.items())

    def load(self, stream: IO, source: str = "<stream>") -> None:
        """Read properties from a stream and add them to this store.

        The whole stream is read before anything is added, so a read failure
        leaves the store unchanged.

        Args:
            stream: Text or binary stream  # (bytes are decoded as UTF-8)
            source: Name of the stream used in error messages

        Raises:
            PropertiesReadError: If the stream cannot be read or decoded
        """
        try:
            content = stream.read()
        except (OSError, UnicodeDecodeError) as e:
            raise PropertiesReadError(source, e) from e

        if isinstance(content, (bytes, bytearray)):
            content = bytes(content).decode("utf-8", errors="replace")

        pairs = list(scan(content))
        for key, value in pairs:
            self._values[key] = value
        logger.debug("Loaded %d properties from %s", len(pairs), source)

    def load_path(self, path: PathLike) -> None:
        """Read properties from a file and add them to this store.

        Raises:
            PropertiesReadError: If the file cannot be opened or read
        """
        try:
            with open(path, "rb") as f:
                self.load(f, source=str(path))
        except PropertiesReadError:
            raise
        except OSError as e:
            raise PropertiesReadError(str(path), e) from e

    def write(self, sink: IO[str]) -> None:
        """Write all properties to a text stream, one ``key=value`` line each.

        Raises:
            PropertiesWriteError: If the sink rejects a write
        """
        write_properties(self.items(), sink)

    def save_path(self, path: PathLike) -> None:
        """Write all properties to a file, replacing its content."""
        with open(path, "w", encoding="utf-8", newline="\n") as f:
            self.write(f)

    def __getitem__(self, name: str) -> str:
        return self._values[name]

    def __setitem__(self, name: str, value: str) -> None:
        self.set(name, value)

    def __delitem__(self, name: str) -> None:
        del self._values[name]

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._values))

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Properties):
            return NotImplemented
        return self._values == other._values

    def __repr__(self) -> str:
        """String representation."""
        return f"Properties({self._values})"


def read(stream: IO, source: str = "<stream>") -> Properties:
    """Parse a stream into a new property store.

    Raises:
        PropertiesReadError: If the stream cannot be read; no store is returned
    """
    props = Properties()
    props.load(stream, source=source)
    return props


def read_path(path: PathLike) -> Properties:
    """Parse a properties file into a new property store."""
    props = Properties()
    props.load_path(path)
    return props
