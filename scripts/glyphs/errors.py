"""Exceptions raised while locating and extracting icon category data."""

from __future__ import annotations

from typing import Any, Optional


class ExtractionError(Exception):
    """Base error for source lookup and literal extraction."""

    error_type = "extraction_failed"

    def __init__(
        self,
        message: str,
        file: Optional[str] = None,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.file = file
        self.line = line
        self.column = column

    def to_json(self) -> dict[str, Any]:
        """Serialize error to JSON format for machine parsing."""
        result: dict[str, Any] = {
            "error": self.error_type,
            "message": self.message,
        }
        if self.file:
            result["file"] = self.file
        if self.line:
            result["line"] = self.line
        if self.column:
            result["column"] = self.column
        return result

    def __str__(self) -> str:
        parts = [self.message]
        if self.file:
            parts.append(f"file: {self.file}")
        if self.line:
            location = f"line: {self.line}"
            if self.column:
                location += f", column: {self.column}"
            parts.append(location)
        return " | ".join(parts)


class SourceNotFoundError(ExtractionError):
    """None of the candidate source files exist."""

    error_type = "source_not_found"

    def __init__(self, checked: list[str], env_var: Optional[str] = None):
        checked_list = ", ".join(checked) if checked else "(no candidates configured)"
        message = f"Unable to locate the category source file. Checked: {checked_list}"
        if env_var:
            message += f". Set {env_var} to the file path."
        super().__init__(message)
        self.checked = checked
        self.env_var = env_var

    def to_json(self) -> dict[str, Any]:
        result = super().to_json()
        result["checked"] = self.checked
        if self.env_var:
            result["env_var"] = self.env_var
        return result


class MarkerNotFoundError(ExtractionError):
    """The declaration marker does not occur in the source text."""

    error_type = "marker_not_found"


class MalformedInputError(ExtractionError):
    """The literal block is unbalanced or outside the data-literal grammar."""

    error_type = "malformed_input"


def line_and_column(text: str, offset: int) -> tuple[int, int]:
    """Return the 1-based (line, column) of an offset into text."""
    offset = max(0, min(offset, len(text)))
    line = text.count("\n", 0, offset) + 1
    line_start = text.rfind("\n", 0, offset) + 1
    return line, offset - line_start + 1
