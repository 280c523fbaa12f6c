"""TeamCity service message value escaping.

Attribute values of ``##teamcity[...]`` messages are single-quoted, so the
quote, the brackets, the escape character itself and line breaks have to be
escaped with ``|``.  Control characters, space and non-ASCII characters in
the Basic Multilingual Plane are written as ``|0xHHHH``.

Two modes are supported for ``|0xHHHH``:

* ``legacy`` – ``HHHH`` is the first byte of the character's UTF-8
  encoding.  Multi-byte characters are truncated to that byte.  This is
  what existing TeamCity builds fed by this converter have always seen.
* ``codepoint`` – ``HHHH`` is the character's code point.
"""

from __future__ import annotations

import re

LEGACY = "legacy"
CODEPOINT = "codepoint"
ESCAPE_MODES = frozenset({LEGACY, CODEPOINT})

SPECIAL_CHARS_PATTERN = re.compile(r"\n|\r|\[|\]|\||'")
NON_ASCII_CHARS_PATTERN = re.compile(r"[\x00-\x20]|[\x80-\uffff]")

# Undecodable input bytes arrive as lone surrogates (surrogateescape).
_ESCAPED_BYTE_MIN = 0xDC80
_ESCAPED_BYTE_MAX = 0xDCFF


def _first_byte(char: str) -> int:
    try:
        return char.encode("utf-8", "surrogateescape")[0]
    except UnicodeEncodeError:
        return char.encode("utf-8", "surrogatepass")[0]


def _code_point(char: str) -> int:
    value = ord(char)
    if _ESCAPED_BYTE_MIN <= value <= _ESCAPED_BYTE_MAX:
        return value - 0xDC00
    return value


def _escape_special(match: re.Match[str]) -> str:
    char = match.group(0)
    if char == "\n":
        return "|n"
    if char == "\r":
        return "|r"
    return "|" + char


def escape(value: str, mode: str = LEGACY) -> str:
    """Escape a string for use inside a service message attribute.

    Args:
        value: Raw attribute value.
        mode: ``legacy`` or ``codepoint``, see module docstring.

    Returns:
        The escaped value, without surrounding quotes.

    Raises:
        ValueError: If *mode* is not a known escape mode.
    """
    if mode not in ESCAPE_MODES:
        raise ValueError(f"Unknown escape mode: {mode}")

    encode = _first_byte if mode == LEGACY else _code_point
    value = SPECIAL_CHARS_PATTERN.sub(_escape_special, value)
    return NON_ASCII_CHARS_PATTERN.sub(
        lambda m: f"|0x{encode(m.group(0)):04x}", value
    )
