"""Tests for the data-literal parser."""

import pytest

from scripts.glyphs.errors import MalformedInputError
from scripts.glyphs.literal import parse_literal


class TestValues:
    """Tests for scalar and container values."""

    def test_object_with_bare_and_quoted_keys(self):
        """Keys may be identifiers, quoted strings or numbers."""
        result = parse_literal("{ library: 'Azure', \"is-new\": true, 42: null }")
        assert result == {"library": "Azure", "is-new": True, "42": None}

    def test_nested_containers(self):
        """Objects and arrays nest to any depth."""
        result = parse_literal('{a: {b: {c: [1, [2, [3]]]}}}')
        assert result == {"a": {"b": {"c": [1, [2, [3]]]}}}

    def test_trailing_commas(self):
        """Trailing commas are accepted in objects and arrays."""
        assert parse_literal("{a: [1, 2,], b: 'x',}") == {"a": [1, 2], "b": "x"}

    def test_numbers(self):
        """Integers stay int; fractions and exponents become float."""
        assert parse_literal("[0, -7, 1.5, 2e3, -1.25E-2]") == [0, -7, 1.5, 2000.0, -0.0125]

    def test_keywords(self):
        """true, false and null map to Python values."""
        assert parse_literal("[true, false, null]") == [True, False, None]

    def test_empty_containers(self):
        assert parse_literal("{}") == {}
        assert parse_literal("[ ]") == []

    def test_duplicate_key_last_value_wins(self):
        """Later duplicate keys overwrite, keeping the first position."""
        result = parse_literal("{a: 1, b: 2, a: 3}")
        assert result == {"a": 3, "b": 2}
        assert list(result) == ["a", "b"]

    def test_key_order_preserved(self):
        result = parse_literal("{zeta: 1, alpha: 2, mid: 3}")
        assert list(result) == ["zeta", "alpha", "mid"]


class TestStrings:
    """Tests for string escapes."""

    def test_escaped_quotes(self):
        assert parse_literal(r"'it\'s'") == "it's"
        assert parse_literal(r'"say \"hi\""') == 'say "hi"'

    def test_braces_inside_strings(self):
        """Braces in strings are plain characters."""
        assert parse_literal("{a: '{not} {an object'}") == {"a": "{not} {an object"}

    def test_standard_escapes(self):
        assert parse_literal(r"'a\nb\tc\\d\/e'") == "a\nb\tc\\d/e"

    def test_unicode_escapes(self):
        assert parse_literal(r"'\u00e9\x41\u{1F600}'") == "éA\U0001F600"

    def test_surrogate_pair(self):
        assert parse_literal(r"'\uD83D\uDE00'") == "\U0001F600"

    def test_line_continuation(self):
        assert parse_literal("'abc\\\ndef'") == "abcdef"

    def test_unknown_escape_is_literal_char(self):
        assert parse_literal(r"'\q'") == "q"


class TestRejections:
    """Constructs outside the grammar fail with MalformedInputError."""

    @pytest.mark.parametrize(
        "text",
        [
            "{a: foo}",
            "{a: fetch('x')}",
            "{a: `template ${x}`}",
            "{...other}",
            "{[key]: 1}",
            "[1,,2]",
            "{a: 1 // comment\n}",
            "{a: undefined}",
            "{a: /re/}",
        ],
    )
    def test_rejects_non_data_syntax(self, text):
        with pytest.raises(MalformedInputError):
            parse_literal(text)

    def test_unterminated_string(self):
        with pytest.raises(MalformedInputError, match="Unterminated string"):
            parse_literal("{a: 'open}")

    def test_newline_in_string(self):
        with pytest.raises(MalformedInputError):
            parse_literal("'line\nbreak'")

    def test_missing_colon(self):
        with pytest.raises(MalformedInputError, match="Expected ':'"):
            parse_literal("{a 1}")

    def test_trailing_content(self):
        with pytest.raises(MalformedInputError, match="trailing"):
            parse_literal("{} {}")

    def test_error_reports_position(self):
        """Errors carry 1-based line and column."""
        with pytest.raises(MalformedInputError) as exc_info:
            parse_literal("{\n  a: 1,\n  b: bogus\n}")
        assert exc_info.value.line == 3
        assert exc_info.value.column == 6
