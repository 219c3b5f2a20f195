"""Lexical scanner for the Java properties text format."""

import re
from typing import Iterator, List, Optional, Tuple

WHITESPACE = " \t\f"
SEPARATORS = "=:"
COMMENT_MARKERS = "#!"
REPLACEMENT_CHAR = "\ufffd"

HEX_DIGITS = frozenset("0123456789abcdefABCDEF")
SIMPLE_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "f": "\f"}

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


def scan(text: str) -> Iterator[Tuple[str, str]]:
    """Scan properties text and yield decoded key/value pairs.

    Args:
        text: Complete properties text  # (already decoded to str)

    Yields:
        One (key, value) tuple per logical line, in file order
    """
    for line in logical_lines(text):
        key, value = split_key_value(line)
        yield unescape(key), unescape(value)


def logical_lines(text: str) -> Iterator[str]:
    """Join continued physical lines, skipping comments and blank lines.

    The returned lines are still escaped; only the continuation backslash and
    the leading whitespace of every joined line are removed.
    """
    physical = _LINE_BREAK.split(text)
    index = 0
    while index < len(physical):
        line = physical[index].lstrip(WHITESPACE)
        index += 1

        # Only the first physical line of a logical line can be a comment
        if not line or line[0] in COMMENT_MARKERS:
            continue

        while _ends_with_continuation(line):
            line = line[:-1]
            if index >= len(physical):
                break
            line += physical[index].lstrip(WHITESPACE)
            index += 1

        yield line


def _ends_with_continuation(line: str) -> bool:
    """Check whether a line ends with an unescaped backslash."""
    count = len(line) - len(line.rstrip("\\"))
    return count % 2 == 1


def split_key_value(line: str) -> Tuple[str, str]:
    """Split an escaped logical line into its escaped key and value parts.

    The key ends at the first unescaped whitespace, ``=`` or ``:``. The
    separator is any whitespace, an optional single ``=`` or ``:`` and any
    further whitespace.

    Args:
        line: Logical line without leading whitespace

    Returns:
        Tuple of (raw key, raw value)  # (escape sequences still present)
    """
    length = len(line)
    index = 0
    while index < length:
        char = line[index]
        if char == "\\":
            # Skip whatever is escaped, it belongs to the key
            index += 2
            continue
        if char in WHITESPACE or char in SEPARATORS:
            break
        index += 1

    key = line[:index]

    while index < length and line[index] in WHITESPACE:
        index += 1
    if index < length and line[index] in SEPARATORS:
        index += 1
    while index < length and line[index] in WHITESPACE:
        index += 1

    return key, line[index:]


def unescape(text: str) -> str:
    """Decode escape sequences in a key or value.

    Malformed unicode escapes decode to U+FFFD and unknown escapes drop the
    backslash, so decoding never fails.

    Args:
        text: Raw key or value text

    Returns:
        Decoded text
    """
    if "\\" not in text:
        return text

    out: List[str] = []
    high: Optional[int] = None  # (pending high surrogate from a \u escape)
    length = len(text)
    index = 0

    while index < length:
        char = text[index]
        if char != "\\" or index + 1 >= length:
            if high is not None:
                out.append(REPLACEMENT_CHAR)
                high = None
            if char != "\\":
                out.append(char)
            index += 1
            continue

        escaped = text[index + 1]
        if escaped != "u":
            if high is not None:
                out.append(REPLACEMENT_CHAR)
                high = None
            out.append(SIMPLE_ESCAPES.get(escaped, escaped))
            index += 2
            continue

        unit, index = _read_unicode_escape(text, index + 2)
        if unit is None:
            if high is not None:
                out.append(REPLACEMENT_CHAR)
                high = None
            out.append(REPLACEMENT_CHAR)
        elif 0xD800 <= unit <= 0xDBFF:
            if high is not None:
                out.append(REPLACEMENT_CHAR)
            high = unit
        elif 0xDC00 <= unit <= 0xDFFF:
            if high is None:
                out.append(REPLACEMENT_CHAR)
            else:
                out.append(chr(0x10000 + ((high - 0xD800) << 10) + (unit - 0xDC00)))
                high = None
        else:
            if high is not None:
                out.append(REPLACEMENT_CHAR)
                high = None
            out.append(chr(unit))

    if high is not None:
        out.append(REPLACEMENT_CHAR)

    return "".join(out)


def _read_unicode_escape(text: str, index: int) -> Tuple[Optional[int], int]:
    """Read the hex part of a ``\\u`` escape starting just after the first ``u``.

    Args:
        text: Text being decoded
        index: Position right after ``\\u``

    Returns:
        Tuple of (code unit or None when malformed, position to resume at)
    """
    length = len(text)
    while index < length and text[index] == "u":
        index += 1

    digits = ""
    while len(digits) < 4 and index < length:
        char = text[index]
        index += 1
        if char not in HEX_DIGITS:
            return None, index
        digits += char

    if len(digits) < 4:
        return None, index
    return int(digits, 16), index
