"""Locate and extract the icon category declaration from a source file.

The declaration is a plain object literal assigned after a marker such as
``const ALL_ICON_CATEGORIES``. The balanced-brace block following the marker
is cut out of the surrounding text without parsing the rest of the file, then
handed to the strict data-literal parser.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

from scripts.glyphs.errors import (
    MalformedInputError,
    MarkerNotFoundError,
    SourceNotFoundError,
    line_and_column,
)
from scripts.glyphs.literal import parse_literal

logger = logging.getLogger(__name__)

DEFAULT_LIBRARY = "Uncategorized"

_QUOTES = ("'", '"')


@dataclass(frozen=True)
class CategoryEntry:
    """One named category from the declaration."""

    name: str
    description: str = ""
    library: str = DEFAULT_LIBRARY
    is_new: bool = False
    icons: tuple[str, ...] = ()
    folder: Optional[str] = None

    @classmethod
    def from_literal(cls, name: str, data: Any) -> "CategoryEntry":
        """Build an entry from parsed literal data, defaulting bad fields."""
        if not isinstance(data, dict):
            logger.warning("Category %r is not an object; using defaults", name)
            return cls(name=name)

        raw_icons = data.get("icons")
        if raw_icons is None:
            icons: list[str] = []
        elif isinstance(raw_icons, list):
            icons = [icon for icon in raw_icons if isinstance(icon, str) and icon]
            if len(icons) != len(raw_icons):
                logger.warning("Category %r: ignored invalid icon entries", name)
        else:
            logger.warning("Category %r: 'icons' is not a list; treating as empty", name)
            icons = []

        library = data.get("library")
        description = data.get("description")
        folder = data.get("folder")

        return cls(
            name=name,
            description=description if isinstance(description, str) else "",
            library=library if isinstance(library, str) and library else DEFAULT_LIBRARY,
            is_new=bool(data.get("isNew")),
            icons=tuple(icons),
            folder=folder.strip("/") if isinstance(folder, str) and folder.strip("/") else None,
        )


def find_literal_span(text: str, marker: str, file: Optional[str] = None) -> tuple[int, int]:
    """Find the balanced brace block that follows a marker.

    Args:
        text: Buffer to scan.
        marker: Substring anchoring the declaration.
        file: Optional file name reported in errors.

    Returns:
        ``(start, end)`` where ``text[start:end]`` is the literal, braces
        included.

    Raises:
        MarkerNotFoundError: If the marker does not occur.
        MalformedInputError: If no ``{`` follows the marker, or the buffer
            ends before the braces balance.
    """
    marker_index = text.find(marker)
    if marker_index == -1:
        raise MarkerNotFoundError(f"Could not find '{marker}'", file=file)

    brace_start = text.find("{", marker_index)
    if brace_start == -1:
        line, column = line_and_column(text, marker_index)
        raise MalformedInputError(
            f"Could not locate opening brace after '{marker}'",
            file=file,
            line=line,
            column=column,
        )

    depth = 0
    in_string: Optional[str] = None
    escaped = False

    for index in range(brace_start, len(text)):
        char = text[index]

        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == in_string:
                in_string = None
            continue

        if char in _QUOTES:
            in_string = char
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return brace_start, index + 1

    line, column = line_and_column(text, brace_start)
    raise MalformedInputError(
        f"Unbalanced braces in block after '{marker}'",
        file=file,
        line=line,
        column=column,
    )


def extract_literal_text(text: str, marker: str, file: Optional[str] = None) -> str:
    """Return the raw object literal that follows a marker."""
    start, end = find_literal_span(text, marker, file=file)
    return text[start:end]


def extract_literal(text: str, marker: str, file: Optional[str] = None) -> Any:
    """Extract and parse the object literal that follows a marker.

    Parse errors are reported with line/column positions in ``text`` rather
    than in the extracted block.
    """
    start, end = find_literal_span(text, marker, file=file)
    try:
        return parse_literal(text[start:end], file=file)
    except MalformedInputError as e:
        if e.line:
            block_line, block_column = line_and_column(text, start)
            if e.line == 1 and e.column:
                e.column += block_column - 1
            e.line += block_line - 1
        raise


def resolve_source_path(
    candidates: list[str],
    env_var: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
    base_dir: Optional[Path] = None,
) -> Path:
    """Pick the category source file.

    Search order:
    1. The ``env_var`` environment variable, when set
    2. Each configured candidate, in order

    Relative candidates resolve against ``base_dir`` (default: cwd).

    Raises:
        SourceNotFoundError: If no candidate exists.
    """
    environ = os.environ if environ is None else environ
    base_dir = Path.cwd() if base_dir is None else Path(base_dir)

    ordered: list[str] = []
    if env_var and environ.get(env_var):
        ordered.append(environ[env_var])
    ordered.extend(c for c in candidates if c)

    checked: list[str] = []
    for candidate in ordered:
        path = Path(candidate).expanduser()
        if not path.is_absolute():
            path = base_dir / path
        checked.append(str(path))
        if path.is_file():
            return path

    raise SourceNotFoundError(checked, env_var=env_var)


def parse_categories(data: Any, file: Optional[str] = None) -> dict[str, CategoryEntry]:
    """Turn the parsed declaration into ordered CategoryEntry values."""
    if not isinstance(data, dict):
        raise MalformedInputError("Category declaration must be an object", file=file)
    return {
        str(name): CategoryEntry.from_literal(str(name), value)
        for name, value in data.items()
    }


def load_categories(source_path: Path | str, marker: str) -> dict[str, CategoryEntry]:
    """Read a source file and return its categories in declaration order.

    Raises:
        MarkerNotFoundError: If the marker is missing.
        MalformedInputError: If the block cannot be extracted or parsed.
    """
    source_path = Path(source_path)
    content = source_path.read_text(encoding="utf-8")
    data = extract_literal(content, marker, file=str(source_path))
    categories = parse_categories(data, file=str(source_path))
    logger.debug("Loaded %d categories from %s", len(categories), source_path)
    return categories
