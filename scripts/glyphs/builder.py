"""Assemble the icon catalog and category indexes."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping, Optional

from scripts.glyphs.classifier import (
    IconRecord,
    classify_directory,
    classify_manifest,
)
from scripts.glyphs.config import CatalogConfig
from scripts.glyphs.extractor import CategoryEntry
from scripts.glyphs.text import slugify

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 2


@dataclass
class CategoryAggregate:
    """Per-category totals; metadata comes from the first icon seen."""

    key: str  # "collection::category"
    name: str
    library: str
    collection: str
    description: str
    ui_set: Optional[str]
    is_new: bool = False
    folder: Optional[str] = None
    icon_count: int = 0
    existing_count: int = 0

    def to_json(self, mode: str = "walk") -> dict[str, Any]:
        if mode == "manifest":
            return {
                "id": slugify(self.key),
                "name": self.name,
                "library": self.library,
                "folder": self.folder,
                "description": self.description,
                "isNew": self.is_new,
                "iconCount": self.icon_count,
                "existingCount": self.existing_count,
            }
        return {
            "id": slugify(self.key),
            "name": self.name,
            "library": self.library,
            "collection": self.collection,
            "description": self.description,
            "iconCount": self.icon_count,
            "uiSet": self.ui_set,
        }


@dataclass
class BuildResult:
    """Everything one build run produces."""

    catalog: dict[str, Any]
    categories: dict[str, Any]
    skipped_count: int = 0
    skipped_files: list[str] = field(default_factory=list)

    @property
    def icon_count(self) -> int:
        return self.catalog["totalIcons"]

    @property
    def category_count(self) -> int:
        return self.categories["totalCategories"]


def build_icon_index(
    categories: Mapping[str, CategoryEntry],
    warn_on_duplicates: bool = False,
) -> dict[str, CategoryEntry]:
    """Map each icon filename to the first category that lists it.

    Later categories listing the same filename are ignored. With
    ``warn_on_duplicates`` each ignored listing is logged.
    """
    index: dict[str, CategoryEntry] = {}
    for entry in categories.values():
        for icon_file in entry.icons:
            existing = index.get(icon_file)
            if existing is None:
                index[icon_file] = entry
            elif warn_on_duplicates and existing.name != entry.name:
                logger.warning(
                    "Icon %s listed in both %r and %r; keeping %r",
                    icon_file,
                    existing.name,
                    entry.name,
                    existing.name,
                )
    return index


def category_key(collection: str, category: str) -> str:
    return f"{collection}::{category}"


def aggregate_categories(records: list[IconRecord]) -> dict[str, CategoryAggregate]:
    """Count icons per (collection, category) pair, in first-seen order."""
    aggregates: dict[str, CategoryAggregate] = {}
    for record in records:
        key = category_key(record.collection, record.category)
        aggregate = aggregates.get(key)
        if aggregate is None:
            aggregate = CategoryAggregate(
                key=key,
                name=record.category,
                library=record.library,
                collection=record.collection,
                description=record.description,
                ui_set=record.ui_set,
                is_new=record.is_new,
                folder=record.folder,
            )
            aggregates[key] = aggregate
        aggregate.icon_count += 1
        if record.exists is None or record.exists:
            aggregate.existing_count += 1
    return aggregates


def build_catalog(
    root_dir: Path | str,
    categories: Mapping[str, CategoryEntry],
    config: CatalogConfig,
    source_name: str,
    generated_at: Optional[str] = None,
    mode: Optional[str] = None,
) -> BuildResult:
    """Classify the icon tree and assemble both output documents.

    Args:
        root_dir: Icon root directory.
        categories: Parsed category declaration, in declaration order.
        config: Catalog configuration.
        source_name: Identifier stamped into both outputs (the source file
            name).
        generated_at: Timestamp for both outputs; defaults to now (UTC).
        mode: ``walk`` or ``manifest``; defaults to ``config.mode``.

    Returns:
        BuildResult with the catalog and categories documents.
    """
    mode = mode or config.mode
    generated_at = generated_at or datetime.now(timezone.utc).isoformat()

    if mode == "manifest":
        result = classify_manifest(root_dir, categories, config)
    else:
        icon_index = build_icon_index(categories, config.warn_on_duplicates)
        result = classify_directory(root_dir, icon_index, config)

    records = sorted(result.records, key=lambda r: r.path)
    aggregates = aggregate_categories(records)
    ordered = sorted(aggregates.values(), key=lambda a: (a.name, a.collection))

    catalog: dict[str, Any] = {
        "version": SCHEMA_VERSION,
        "generatedAt": generated_at,
        "source": source_name,
        "totalIcons": len(records),
        "icons": [r.to_json() for r in records],
    }
    category_doc: dict[str, Any] = {
        "version": SCHEMA_VERSION,
        "generatedAt": generated_at,
        "source": source_name,
        "totalCategories": len(ordered),
        "categories": [a.to_json(mode) for a in ordered],
    }

    if mode == "manifest":
        catalog["mode"] = mode
        catalog["missingIcons"] = sum(1 for r in records if not r.exists)
        category_doc["mode"] = mode

    return BuildResult(
        catalog=catalog,
        categories=category_doc,
        skipped_count=result.skipped_count,
        skipped_files=result.skipped_files,
    )


def _encode_json(data: Any, path: Path) -> bytes:
    text = json.dumps(data, indent=2, ensure_ascii=False) + "\n"
    try:
        return text.encode("utf-8")
    except UnicodeEncodeError:
        # Lone surrogates cannot be stored as UTF-8; \u escapes can
        logger.warning("%s contains unencodable characters; writing escaped JSON", path.name)
        return (json.dumps(data, indent=2, ensure_ascii=True) + "\n").encode("utf-8")


def write_json(path: Path, data: Any) -> None:
    """Write pretty-printed JSON with a trailing newline, atomically.

    The document is encoded before anything touches disk, then written to a
    temporary file in the same directory and renamed over ``path``, so a
    failed write leaves the previous file intact.
    """
    payload = _encode_json(data, path)
    fd, tmp_path = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(payload)
        os.chmod(tmp_path, 0o644)
        os.replace(tmp_path, str(path))
    except OSError:
        # Clean up temp file on failure
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise


def write_outputs(result: BuildResult, config: CatalogConfig, base_dir: Path | str) -> tuple[Path, Path]:
    """Write catalog and categories documents into the output directory.

    Returns:
        Paths of the written catalog and categories files.
    """
    output_dir = Path(base_dir) / config.output.output_dir

    # Handle broken symlinks: if path is a symlink but target doesn't exist
    if output_dir.is_symlink() and not output_dir.exists():
        output_dir.unlink()
    output_dir.mkdir(parents=True, exist_ok=True)

    catalog_path = output_dir / config.output.catalog_file
    categories_path = output_dir / config.output.categories_file
    write_json(catalog_path, result.catalog)
    write_json(categories_path, result.categories)
    return catalog_path, categories_path
