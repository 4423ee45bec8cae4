"""One-time migration of a flat legacy icon folder into the catalog layout.

Destination rules, first match wins:

- listed in a category: ``<library>/<category>/<file>`` (``pideas`` icons go
  straight into ``pideas/``)
- ``sap*`` files: ``sap/legacy/<file>``
- UI family prefixes: ``ui/<family>/<shard>/<file>``
- everything else: ``uncategorized/<a>/<ab>/<file>``

Existing destinations are never overwritten.
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

from scripts.glyphs.builder import build_icon_index
from scripts.glyphs.classifier import UNCATEGORIZED_COLLECTION, library_folder
from scripts.glyphs.config import CatalogConfig
from scripts.glyphs.extractor import CategoryEntry
from scripts.glyphs.patterns import (
    SAP_PREFIX_RE,
    get_shard,
    ui_family_from_filename,
    ui_shard_for_file,
)
from scripts.glyphs.text import slugify

logger = logging.getLogger(__name__)

FLAT_LIBRARIES = ("pideas",)


class ReorgError(Exception):
    """The legacy folder cannot be migrated."""


@dataclass
class PlannedMove:
    """A single file move and why it goes there."""

    source: Path
    destination: Path
    reason: str  # category, sap, ui:<family>, uncategorized


@dataclass
class ReorgResult:
    """Summary of a reorganization run."""

    planned: list[PlannedMove] = field(default_factory=list)
    moved: int = 0
    skipped: int = 0
    remaining: int = 0
    legacy_removed: bool = False


def destination_for(
    file_name: str,
    icons_dir: Path,
    icon_index: Mapping[str, CategoryEntry],
    config: CatalogConfig,
) -> tuple[Path, str]:
    """Pick the destination path for one legacy file."""
    entry = icon_index.get(file_name)
    if entry is not None:
        library_slug = library_folder(entry.library, config)
        if library_slug in FLAT_LIBRARIES:
            return icons_dir / library_slug / file_name, "category"
        return icons_dir / library_slug / slugify(entry.name) / file_name, "category"

    if SAP_PREFIX_RE.search(file_name):
        return icons_dir / "sap" / "legacy" / file_name, "sap"

    family = ui_family_from_filename(file_name)
    if family is not None:
        shard = ui_shard_for_file(file_name, family)
        return (
            icons_dir / config.ui_collection / family.base_family / shard / file_name,
            f"ui:{family.name}",
        )

    return (
        icons_dir / UNCATEGORIZED_COLLECTION / get_shard(file_name, 1) / get_shard(file_name, 2) / file_name,
        UNCATEGORIZED_COLLECTION,
    )


def _legacy_files(legacy_dir: Path) -> list[Path]:
    return sorted(p for p in legacy_dir.iterdir() if p.is_file())


def plan_moves(
    legacy_dir: Path,
    icons_dir: Path,
    categories: Mapping[str, CategoryEntry],
    config: CatalogConfig,
) -> list[PlannedMove]:
    """Compute destinations for every file directly inside the legacy folder."""
    icon_index = build_icon_index(categories, config.warn_on_duplicates)
    moves = []
    for source in _legacy_files(legacy_dir):
        destination, reason = destination_for(source.name, icons_dir, icon_index, config)
        moves.append(PlannedMove(source=source, destination=destination, reason=reason))
    return moves


def move_file(source: Path, destination: Path, dry_run: bool = False) -> bool:
    """Move one file unless the destination already exists.

    Returns:
        True if the file was (or, in dry-run mode, would be) moved.
    """
    if source == destination:
        return False
    if destination.exists():
        logger.debug("Destination exists, skipping: %s", destination)
        return False
    if dry_run:
        print(f"[dry-run] {source} -> {destination}")
        return True
    destination.parent.mkdir(parents=True, exist_ok=True)
    shutil.move(str(source), str(destination))
    return True


def reorganize(
    icons_dir: Path | str,
    categories: Mapping[str, CategoryEntry],
    config: CatalogConfig,
    dry_run: bool = False,
) -> ReorgResult:
    """Move the legacy folder's files into the catalog layout.

    Args:
        icons_dir: Icon root directory.
        categories: Parsed category declaration.
        config: Catalog configuration (``reorg.legacy_dir`` is relative to
            ``icons_dir``).
        dry_run: Print intended moves without touching the filesystem.

    Raises:
        ReorgError: If the legacy folder does not exist.
    """
    icons_dir = Path(icons_dir)
    legacy_dir = icons_dir / config.reorg.legacy_dir
    if not legacy_dir.is_dir():
        raise ReorgError(f"Legacy folder not found: {legacy_dir}")

    result = ReorgResult(planned=plan_moves(legacy_dir, icons_dir, categories, config))
    for move in result.planned:
        if move_file(move.source, move.destination, dry_run=dry_run):
            result.moved += 1
        else:
            result.skipped += 1

    result.remaining = len(_legacy_files(legacy_dir))
    # Only an entirely empty folder is removed; leftover subdirectories stay.
    if not dry_run and config.reorg.remove_empty_legacy and not any(legacy_dir.iterdir()):
        legacy_dir.rmdir()
        result.legacy_removed = True

    return result
