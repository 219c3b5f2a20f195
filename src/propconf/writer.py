"""Writer that encodes properties back into the text format."""

from typing import Iterable, TextIO, Tuple

from .exceptions import PropertiesWriteError

ALWAYS_ESCAPED = {
    ":": "\\:",
    "=": "\\=",
    "#": "\\#",
    "!": "\\!",
    "\\": "\\\\",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\f": "\\f",
}


def _escape(text: str, escape_space: bool) -> str:
    out = []
    leading = True
    for char in text:
        if char == " ":
            out.append("\\ " if escape_space or leading else " ")
            continue
        leading = False

        if char in ALWAYS_ESCAPED:
            out.append(ALWAYS_ESCAPED[char])
        elif ord(char) >= 0x80:
            out.append(_unicode_escape(ord(char)))
        else:
            out.append(char)
    return "".join(out)


def _unicode_escape(code_point: int) -> str:
    """Encode a code point as one or two lowercase ``\\uXXXX`` escapes."""
    if code_point > 0xFFFF:
        code_point -= 0x10000
        high = 0xD800 + (code_point >> 10)
        low = 0xDC00 + (code_point & 0x3FF)
        return f"\\u{high:04x}\\u{low:04x}"
    return f"\\u{code_point:04x}"


def escape_key(key: str) -> str:
    """Escape a property name; every space is escaped."""
    return _escape(key, escape_space=True)


def escape_value(value: str) -> str:
    """Escape a property value; only leading spaces are escaped."""
    return _escape(value, escape_space=False)


def write_properties(items: Iterable[Tuple[str, str]], sink: TextIO) -> None:
    """Write key/value pairs as ``key=value`` lines.

    Args:
        items: Pairs to write  # (order is preserved but carries no meaning)
        sink: Text stream to write to

    Raises:
        PropertiesWriteError: If the sink rejects a write; output may be partial
    """
    try:
        for key, value in items:
            sink.write(f"{escape_key(key)}={escape_value(value)}\n")
    except OSError as e:
        raise PropertiesWriteError(e) from e
