"""Tests for TeamCity service message value escaping."""

from __future__ import annotations

import re

import pytest

from teamcity_report.reporting.escaper import CODEPOINT, LEGACY, escape

_ESCAPE_PATTERN = re.compile(r"\|(0x[0-9a-f]{4}|.)", re.DOTALL)


def _unescape(value: str) -> str:
    """TeamCity's inverse of escape() for single-byte characters."""

    def repl(match):
        token = match.group(1)
        if token == "n":
            return "\n"
        if token == "r":
            return "\r"
        if token.startswith("0x"):
            return chr(int(token[2:], 16))
        return token

    return _ESCAPE_PATTERN.sub(repl, value)


class TestSpecialCharacters:
    """Tests for the ``|``-prefixed escapes."""

    def test_plain_value_unchanged(self):
        assert escape("TestParse") == "TestParse"

    def test_structural_characters(self):
        assert escape("a'b|c[d]e") == "a|'b||c|[d|]e"

    def test_line_breaks(self):
        assert escape("first\nsecond\r") == "first|nsecond|r"

    def test_crlf(self):
        assert escape("a\r\nb") == "a|r|nb"


class TestLowCharacters:
    """Tests for control characters and space."""

    def test_space_is_escaped(self):
        assert escape("a b") == "a|0x0020b"

    def test_control_byte(self):
        assert escape("\x01") == "|0x0001"

    def test_tab(self):
        assert escape("\t") == "|0x0009"

    def test_nul(self):
        assert escape("\x00") == "|0x0000"

    def test_delete_is_not_escaped(self):
        assert escape("\x7f") == "\x7f"


class TestNonAsciiLegacy:
    """Legacy mode writes the first UTF-8 byte of each character."""

    def test_two_byte_character(self):
        # U+00E9 is c3 a9 in UTF-8
        assert escape("é") == "|0x00c3"

    def test_three_byte_character(self):
        # U+65E5 is e6 97 a5 in UTF-8
        assert escape("日") == "|0x00e6"

    def test_characters_outside_bmp_unchanged(self):
        assert escape("\U0001f600") == "\U0001f600"

    def test_undecodable_byte(self):
        raw = b"\xff".decode("utf-8", "surrogateescape")
        assert escape(raw) == "|0x00ff"


class TestNonAsciiCodepoint:
    """Codepoint mode writes the full code point."""

    def test_two_byte_character(self):
        assert escape("é", CODEPOINT) == "|0x00e9"

    def test_three_byte_character(self):
        assert escape("日", CODEPOINT) == "|0x65e5"

    def test_undecodable_byte(self):
        raw = b"\xfe".decode("utf-8", "surrogateescape")
        assert escape(raw, CODEPOINT) == "|0x00fe"

    def test_ascii_same_as_legacy(self):
        value = "it's [a] |b|\n"
        assert escape(value, CODEPOINT) == escape(value, LEGACY)


class TestRoundTrip:
    """Escaped values unescape back to the original."""

    def test_ascii_round_trip(self):
        value = "it's a |[test]|\n\r\x01 end"
        assert _unescape(escape(value)) == value

    def test_multibyte_round_trip_loses_continuation_bytes(self):
        assert _unescape(escape("é")) == "\xc3"

    def test_codepoint_round_trip(self):
        value = "naïve 日本"
        assert _unescape(escape(value, CODEPOINT)) == value

    def test_escaped_value_has_no_bare_quote(self):
        escaped = escape("a'b'c")
        assert re.search(r"(?<!\|)'", escaped) is None


def test_unknown_mode_raises():
    with pytest.raises(ValueError, match="Unknown escape mode"):
        escape("x", "utf16")
