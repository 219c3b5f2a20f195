"""Test cases for reading the properties text format.

This module tests comments, line continuation, separators and escape decoding.
"""

import io

import pytest

from propconf import PropertiesReadError, read
from propconf.scanner import logical_lines, split_key_value, unescape

COMMENTS = """
# line 1
! line 2
   # line 3
   ! line 4
  # line 5
  ! line 6
"""

CONTINUED = r"""
key1=abc\
    	def
key\
	2\
	3 = ghi\
	j\
	k\
	l
"""

KEYS = """
key1=a
key2:b
key3 c
key4 = d
key5 : e
key6   f
key7
key8=g
key9=
key10
key11"""

ESCAPES = r"""\key0=123
key\n1=a\nb\n
key\t2:c\td
key\f3 e\ff
key\\4=g\\h
key\r5:i\rj
key\z6 k\3l
key\u005a7=m\u2126n
key\uuu00478=o\uzp
key\uD834\uDD1E9=q\uD800\uDC00r
key\
    \f10=s\
	\ft
key11=\u
key12=\uZ
key13 \t =abc
key14     
"""


def test_comments_and_blank_lines_produce_nothing():
    """Given only comment and blank lines
    When the text is read
    Then the store is empty
    """
    props = read(io.StringIO(COMMENTS))

    assert len(props) == 0


def test_simple_pairs():
    props = read(io.StringIO("\nkey1=a\nkey2=b\nkey3=c\n"))

    assert dict(props.items()) == {"key1": "a", "key2": "b", "key3": "c"}


def test_line_continuation():
    """Given logical lines spread over several physical lines
    When the text is read
    Then continued lines are joined without their leading whitespace
    """
    props = read(io.StringIO(CONTINUED))

    assert dict(props.items()) == {"key1": "abcdef", "key23": "ghijkl"}


def test_separator_variants():
    """Given keys separated by '=', ':', whitespace or nothing at all
    When the text is read
    Then every separator and its surrounding whitespace is discarded
    """
    props = read(io.StringIO(KEYS))

    assert dict(props.items()) == {
        "key1": "a",
        "key2": "b",
        "key3": "c",
        "key4": "d",
        "key5": "e",
        "key6": "f",
        "key7": "",
        "key8": "g",
        "key9": "",
        "key10": "",
        "key11": "",
    }
    assert "key7" in props


def test_escape_table():
    """Given keys and values using every kind of escape sequence
    When the text is read
    Then escapes are decoded the same way in keys and values
    """
    props = read(io.StringIO(ESCAPES))

    assert dict(props.items()) == {
        "key0": "123",
        "key\n1": "a\nb\n",
        "key\t2": "c\td",
        "key\f3": "e\ff",
        "key\\4": "g\\h",
        "key\r5": "i\rj",
        "keyz6": "k3l",
        "keyZ7": "m\u2126n",
        "keyG8": "o\ufffdp",
        "key\U0001d11e9": "q\U00010000r",
        "key\f10": "s\ft",
        "key11": "\ufffd",
        "key12": "\ufffd",
        "key13": "\t =abc",
        "key14": "",
    }


def test_later_keys_overwrite_earlier_ones():
    props = read(io.StringIO("a=1\nb=2\na=3\n"))

    assert props["a"] == "3"
    assert props["b"] == "2"


def test_line_endings():
    """Given CRLF, CR and LF line endings mixed in one text
    When the text is read
    Then each is treated as the end of a physical line
    """
    props = read(io.StringIO("a=1\r\nb=2\rc=3\nd=4\\\r\n  5"))

    assert dict(props.items()) == {"a": "1", "b": "2", "c": "3", "d": "45"}


def test_bytes_are_decoded_as_utf8():
    props = read(io.BytesIO("name=café\nbad=\xff".encode("utf-8") + b"\xff"))

    assert props["name"] == "café"
    assert props["bad"].endswith("\ufffd")


def test_continuation_lines_are_never_comments():
    props = read(io.StringIO("key=a\\\n  # not a comment\n"))

    assert props["key"] == "a# not a comment"


def test_continuation_at_end_of_input():
    props = read(io.StringIO("key=abc\\"))

    assert props["key"] == "abc"


def test_escaped_trailing_backslash_is_not_a_continuation():
    props = read(io.StringIO("key=abc\\\\\nnext=1\n"))

    assert props["key"] == "abc\\"
    assert props["next"] == "1"


def test_trailing_whitespace_in_value_is_kept():
    props = read(io.StringIO("key = value  \n"))

    assert props["key"] == "value  "


def test_read_error(failing_stream):
    """Given a stream that fails on read
    When it is read
    Then the error surfaces and no store is returned
    """
    with pytest.raises(PropertiesReadError) as exc_info:
        read(failing_stream)

    assert isinstance(exc_info.value, OSError)


def test_load_failure_leaves_store_unchanged(props, failing_stream):
    props.set("keep", "me")

    with pytest.raises(PropertiesReadError):
        props.load(failing_stream)

    assert dict(props.items()) == {"keep": "me"}


def test_split_key_value_keeps_escapes():
    assert split_key_value(r"a\ b\=c = d\:e") == (r"a\ b\=c", r"d\:e")


def test_logical_lines_skip_comments():
    assert list(logical_lines("# c\n\n  ! c\nx=1\n")) == ["x=1"]


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("\\uD834", "\ufffd"),
        ("\\uDD1E", "\ufffd"),
        ("\\uD834x", "\ufffdx"),
        ("\\uD834\\uD834\\uDD1E", "\ufffd\U0001d11e"),
        ("\\u00", "\ufffd"),
        ("\\u004", "\ufffd"),
        ("\\u0041\\", "A"),
    ],
)
def test_unicode_escape_edge_cases(raw, expected):
    assert unescape(raw) == expected


def test_undecodable_text_stream_is_a_read_error(props):
    """Given a UTF-8 text stream holding invalid bytes
    When it is read
    Then the decoding failure surfaces as a read error and the store is unchanged
    """
    stream = io.TextIOWrapper(io.BytesIO(b"key=caf\xe9\n"), encoding="utf-8")

    with pytest.raises(PropertiesReadError) as exc_info:
        props.load(stream, source="broken.properties")

    assert isinstance(exc_info.value.cause, UnicodeDecodeError)
    assert "broken.properties" in str(exc_info.value)
    assert len(props) == 0
