"""Strict parser for JavaScript-style data literals.

Accepts the subset of object-literal syntax used by icon category
declarations:

- objects, with keys written as quoted strings, bare identifiers or numbers
- arrays
- single or double quoted strings with JavaScript escape sequences
- numbers, ``true``, ``false`` and ``null``
- trailing commas in objects and arrays

Nothing is ever evaluated. Function calls, other identifiers, template
literals, spreads, comments and array holes are rejected with
``MalformedInputError``.
"""

from __future__ import annotations

import re
from typing import Any, Optional

from scripts.glyphs.errors import MalformedInputError, line_and_column

_NUMBER_RE = re.compile(r"-?(?:0|[1-9][0-9]*)(?:\.[0-9]+)?(?:[eE][+-]?[0-9]+)?")
_IDENTIFIER_RE = re.compile(r"[A-Za-z_$][A-Za-z0-9_$]*")
_HEX4_RE = re.compile(r"[0-9A-Fa-f]{4}")
_HEX2_RE = re.compile(r"[0-9A-Fa-f]{2}")

_WHITESPACE = " \t\n\r\v\f\u00a0\ufeff\u2028\u2029"

_SIMPLE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "0": "\0",
}

_KEYWORDS = {"true": True, "false": False, "null": None}


class LiteralParser:
    """Recursive-descent parser over a single literal string."""

    def __init__(self, text: str, file: Optional[str] = None):
        self.text = text
        self.file = file
        self.pos = 0

    def parse(self) -> Any:
        """Parse the whole text as one value."""
        self._skip_whitespace()
        value = self._parse_value()
        self._skip_whitespace()
        if self.pos < len(self.text):
            self._fail(f"Unexpected trailing content {self.text[self.pos]!r}")
        return value

    def _fail(self, message: str, pos: Optional[int] = None) -> None:
        if pos is None:
            pos = self.pos
        line, column = line_and_column(self.text, pos)
        raise MalformedInputError(message, file=self.file, line=line, column=column)

    def _peek(self) -> str:
        if self.pos < len(self.text):
            return self.text[self.pos]
        return ""

    def _skip_whitespace(self) -> None:
        while self.pos < len(self.text) and self.text[self.pos] in _WHITESPACE:
            self.pos += 1

    def _expect(self, char: str) -> None:
        if self._peek() != char:
            found = self._peek() or "end of input"
            self._fail(f"Expected {char!r} but found {found!r}")
        self.pos += 1

    def _parse_value(self) -> Any:
        char = self._peek()
        if not char:
            self._fail("Unexpected end of input")
        if char == "{":
            return self._parse_object()
        if char == "[":
            return self._parse_array()
        if char in ("'", '"'):
            return self._parse_string()
        if char == "-" or char.isdigit():
            return self._parse_number()
        if char == "`":
            self._fail("Template literals are not supported")
        if char == "/":
            self._fail("Comments and regular expressions are not supported")
        if char == "." and self.text.startswith("...", self.pos):
            self._fail("Spread syntax is not supported")

        match = _IDENTIFIER_RE.match(self.text, self.pos)
        if match:
            word = match.group(0)
            if word in _KEYWORDS:
                self.pos = match.end()
                return _KEYWORDS[word]
            self._fail(f"Unexpected identifier {word!r}")

        self._fail(f"Unexpected character {char!r}")

    def _parse_object(self) -> dict[str, Any]:
        self._expect("{")
        result: dict[str, Any] = {}
        self._skip_whitespace()
        if self._peek() == "}":
            self.pos += 1
            return result

        while True:
            self._skip_whitespace()
            if self._peek() == "}":
                # Trailing comma
                self.pos += 1
                return result

            key = self._parse_key()
            self._skip_whitespace()
            self._expect(":")
            self._skip_whitespace()
            result[key] = self._parse_value()
            self._skip_whitespace()

            char = self._peek()
            if char == ",":
                self.pos += 1
                continue
            if char == "}":
                self.pos += 1
                return result
            found = char or "end of input"
            self._fail(f"Expected ',' or '}}' in object but found {found!r}")

    def _parse_key(self) -> str:
        char = self._peek()
        if char in ("'", '"'):
            return self._parse_string()
        if char.isdigit():
            number = self._parse_number()
            return str(number)
        if char == "[":
            self._fail("Computed property names are not supported")
        if char == "." and self.text.startswith("...", self.pos):
            self._fail("Spread syntax is not supported")

        match = _IDENTIFIER_RE.match(self.text, self.pos)
        if not match:
            found = char or "end of input"
            self._fail(f"Expected property name but found {found!r}")
        self.pos = match.end()
        return match.group(0)

    def _parse_array(self) -> list[Any]:
        self._expect("[")
        result: list[Any] = []
        self._skip_whitespace()
        if self._peek() == "]":
            self.pos += 1
            return result

        while True:
            self._skip_whitespace()
            char = self._peek()
            if char == "]":
                # Trailing comma
                self.pos += 1
                return result
            if char == ",":
                self._fail("Array holes are not supported")

            result.append(self._parse_value())
            self._skip_whitespace()

            char = self._peek()
            if char == ",":
                self.pos += 1
                continue
            if char == "]":
                self.pos += 1
                return result
            found = char or "end of input"
            self._fail(f"Expected ',' or ']' in array but found {found!r}")

    def _parse_string(self) -> str:
        quote = self.text[self.pos]
        start = self.pos
        self.pos += 1
        chunks: list[str] = []

        while True:
            if self.pos >= len(self.text):
                self._fail("Unterminated string", pos=start)
            char = self.text[self.pos]

            if char == quote:
                self.pos += 1
                return "".join(chunks)

            if char in ("\n", "\r"):
                self._fail("Unterminated string", pos=start)

            if char == "\\":
                self.pos += 1
                chunks.append(self._parse_escape(start))
                continue

            chunks.append(char)
            self.pos += 1

    def _parse_escape(self, string_start: int) -> str:
        if self.pos >= len(self.text):
            self._fail("Unterminated string", pos=string_start)
        char = self.text[self.pos]
        self.pos += 1

        if char in _SIMPLE_ESCAPES:
            return _SIMPLE_ESCAPES[char]

        if char == "\r":
            # Line continuation, CRLF form
            if self._peek() == "\n":
                self.pos += 1
            return ""
        if char in ("\n", "\u2028", "\u2029"):
            return ""

        if char == "x":
            match = _HEX2_RE.match(self.text, self.pos)
            if not match:
                self._fail("Invalid hexadecimal escape sequence")
            self.pos = match.end()
            return chr(int(match.group(0), 16))

        if char == "u":
            if self._peek() == "{":
                end = self.text.find("}", self.pos)
                digits = self.text[self.pos + 1:end] if end != -1 else ""
                if not digits or len(digits) > 6 or not all(c in "0123456789abcdefABCDEF" for c in digits):
                    self._fail("Invalid Unicode escape sequence")
                code_point = int(digits, 16)
                if code_point > 0x10FFFF:
                    self._fail("Invalid Unicode escape sequence")
                self.pos = end + 1
                return chr(code_point)

            match = _HEX4_RE.match(self.text, self.pos)
            if not match:
                self._fail("Invalid Unicode escape sequence")
            self.pos = match.end()
            code_unit = int(match.group(0), 16)

            # Combine surrogate pairs written as two \uXXXX escapes
            if 0xD800 <= code_unit <= 0xDBFF and self.text.startswith("\\u", self.pos):
                low = _HEX4_RE.match(self.text, self.pos + 2)
                if low:
                    low_unit = int(low.group(0), 16)
                    if 0xDC00 <= low_unit <= 0xDFFF:
                        self.pos = low.end()
                        return chr(0x10000 + ((code_unit - 0xD800) << 10) + (low_unit - 0xDC00))
            return chr(code_unit)

        # Unknown escapes stand for the character itself (\' \" \\ \/ ...)
        return char

    def _parse_number(self) -> int | float:
        match = _NUMBER_RE.match(self.text, self.pos)
        if not match:
            self._fail("Invalid number")
        self.pos = match.end()
        raw = match.group(0)
        if any(c in raw for c in ".eE"):
            return float(raw)
        return int(raw)


def parse_literal(text: str, file: Optional[str] = None) -> Any:
    """Parse a data literal string into native Python values.

    Args:
        text: Literal source, e.g. ``{ a: [1, 'two'], b: true }``.
        file: Optional file name reported in errors.

    Returns:
        The parsed dict / list / str / int / float / bool / None.

    Raises:
        MalformedInputError: If the text is outside the supported grammar.
    """
    return LiteralParser(text, file=file).parse()
