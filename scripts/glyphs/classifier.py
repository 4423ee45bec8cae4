"""Icon classification engine."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any, Mapping, Optional

from scripts.glyphs.config import UNKNOWN_META, CatalogConfig
from scripts.glyphs.extractor import CategoryEntry
from scripts.glyphs.patterns import build_family_key, parse_size_variant
from scripts.glyphs.text import slugify, to_title, unique_tokens

logger = logging.getLogger(__name__)

UNCATEGORIZED_COLLECTION = "uncategorized"
_META_FIELDS = ("source", "license", "brandOwner")


@dataclass
class IconRecord:
    """Catalog entry for a single icon file."""

    path: str  # Relative to the icon root, slash separated
    name: str
    title: str
    file_name: str
    extension: str
    category: str
    description: str
    library: str
    collection: str
    ui_set: Optional[str]
    is_new: bool
    size_bytes: int
    tags: list[str]
    source: str
    license: str
    brand_owner: str
    style: str
    size_variant: Optional[int] = None
    family_key: str = ""
    folder: Optional[str] = None  # manifest mode only
    exists: Optional[bool] = None  # manifest mode only

    @property
    def id(self) -> str:
        return self.path

    def to_json(self) -> dict[str, Any]:
        """Serialize with the field names the gallery reads."""
        result: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "title": self.title,
            "fileName": self.file_name,
            "extension": self.extension,
            "category": self.category,
            "description": self.description,
            "library": self.library,
            "collection": self.collection,
            "uiSet": self.ui_set,
            "isNew": self.is_new,
            "path": self.path,
            "sizeBytes": self.size_bytes,
            "tags": self.tags,
            "source": self.source,
            "license": self.license,
            "brandOwner": self.brand_owner,
            "style": self.style,
            "sizeVariant": self.size_variant,
            "familyKey": self.family_key,
        }
        if self.folder is not None:
            result["folder"] = self.folder
            result["exists"] = bool(self.exists)
        return result


@dataclass
class ClassificationResult:
    """Result of classifying an icon tree, including skipped files."""

    records: list[IconRecord]
    skipped_count: int = 0
    skipped_files: list[str] = field(default_factory=list)


def infer_style(
    file_name: str,
    extension: str,
    collection: str,
    ui_set: Optional[str],
    config: Optional[CatalogConfig] = None,
) -> str:
    """Infer the visual style of an icon from its name and location.

    First match wins:
    1. ``color`` in the name, or a raster extension -> ``color``
    2. ``filled`` / ``fill`` in the name -> ``filled``
    3. generic UI collection, or a known UI set -> ``line``
    4. otherwise ``flat``
    """
    config = config or CatalogConfig()
    lower = file_name.lower()
    if "color" in lower or extension.lower() in config.raster_extensions:
        return "color"
    if "filled" in lower or "fill" in lower:
        return "filled"
    if collection == config.ui_collection or ui_set:
        return "line"
    return "flat"


def lookup_source_meta(
    collection: str,
    ui_set: Optional[str],
    config: CatalogConfig,
) -> dict[str, str]:
    """Source, license and brand owner for an icon.

    UI set metadata overrides collection metadata field by field.
    """
    collection_meta: Mapping[str, str] = config.collections.get(collection, UNKNOWN_META)
    ui_meta: Mapping[str, str] = config.ui_sets.get(ui_set, {}) if ui_set else {}
    return {
        key: ui_meta.get(key) or collection_meta.get(key) or UNKNOWN_META[key]
        for key in _META_FIELDS
    }


def library_folder(library: str, config: CatalogConfig) -> str:
    """Top-level folder that holds a library's icons."""
    return config.library_slugs.get(library) or slugify(library) or UNCATEGORIZED_COLLECTION


def classify_icon(
    relative_path: str,
    size_bytes: int,
    entry: Optional[CategoryEntry],
    config: CatalogConfig,
) -> IconRecord:
    """Derive the catalog record for one icon.

    Args:
        relative_path: Slash-separated path from the icon root.
        size_bytes: File size (0 when the file is absent).
        entry: Category matched by filename, or None to fall back to
            path-derived defaults.
        config: Catalog configuration.

    Returns:
        IconRecord with all derived fields.
    """
    segments = relative_path.split("/")
    collection = segments[0] or UNCATEGORIZED_COLLECTION
    file_name = segments[-1]
    pure = PurePosixPath(file_name)
    extension = pure.suffix.lstrip(".").lower()
    base_name = pure.stem if pure.suffix else file_name

    deep = len(segments) > 2
    ui_set = segments[1] if deep and collection == config.ui_collection else None

    if entry is not None:
        category = entry.name
        library = entry.library
        description = entry.description
        is_new = entry.is_new
    else:
        category = to_title(segments[1]) if deep else to_title(collection)
        library = to_title(collection)
        description = ""
        is_new = False

    meta = lookup_source_meta(collection, ui_set, config)

    return IconRecord(
        path=relative_path,
        name=base_name,
        title=to_title(base_name),
        file_name=file_name,
        extension=extension,
        category=category,
        description=description,
        library=library,
        collection=collection,
        ui_set=ui_set,
        is_new=is_new,
        size_bytes=size_bytes,
        tags=unique_tokens(base_name, category, library, collection, ui_set),
        source=meta["source"],
        license=meta["license"],
        brand_owner=meta["brandOwner"],
        style=infer_style(file_name, extension, collection, ui_set, config),
        size_variant=parse_size_variant(file_name),
        family_key=build_family_key(file_name),
    )


def _should_skip_dir(dir_name: str, skip_dirs: list[str]) -> bool:
    """Check if a directory should be skipped."""
    return dir_name in skip_dirs or dir_name.startswith(".")


def _should_skip_file(file_path: Path) -> bool:
    """Check if a file should be skipped (hidden files)."""
    return file_path.name.startswith(".")


def _relative(path: Path, root_dir: Path) -> str:
    return path.relative_to(root_dir).as_posix()


def _is_utf8(value: str) -> bool:
    """False for names the OS returned with undecodable bytes (surrogate escapes)."""
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def _printable(value: str) -> str:
    return value.encode("utf-8", "backslashreplace").decode("utf-8")


def classify_directory(
    root_dir: Path | str,
    icon_index: Mapping[str, CategoryEntry],
    config: CatalogConfig,
) -> ClassificationResult:
    """Classify every icon file under the icon root.

    The walk is the source of truth for which icons exist; ``icon_index``
    only overlays category metadata by filename.

    Args:
        root_dir: Icon root directory.
        icon_index: Filename to CategoryEntry lookup.
        config: Catalog configuration.

    Returns:
        ClassificationResult containing records (walk order) and skipped
        file info.
    """
    root_dir = Path(root_dir)
    records: list[IconRecord] = []
    skipped_count = 0
    skipped_files: list[str] = []

    # Track visited inodes to detect circular symlinks
    visited_inodes: set[tuple[int, int]] = set()  # (device, inode) pairs

    for dirpath, dirnames, filenames in os.walk(root_dir, followlinks=config.follow_symlinks):
        current_dir = Path(dirpath)

        # Check for circular symlink on the directory itself
        if config.follow_symlinks:
            try:
                dir_stat = current_dir.stat()
                dir_inode = (dir_stat.st_dev, dir_stat.st_ino)
                if dir_inode in visited_inodes:
                    rel_path = _relative(current_dir, root_dir) if current_dir != root_dir else "."
                    logger.warning("Circular symlink detected, skipping: %s", rel_path)
                    skipped_count += 1
                    skipped_files.append(rel_path)
                    dirnames[:] = []  # Don't descend into subdirs
                    continue
                visited_inodes.add(dir_inode)
            except OSError:
                pass  # If we can't stat, continue anyway

        # Filter and order subdirectories in place to control descent
        dirnames[:] = sorted(
            d for d in dirnames
            if not _should_skip_dir(d, config.skip_dirs)
        )

        for filename in sorted(filenames):
            file_path = current_dir / filename

            if _should_skip_file(file_path):
                continue

            if file_path.is_symlink() and not config.follow_symlinks:
                continue

            rel_path = _relative(file_path, root_dir)
            if not _is_utf8(rel_path):
                rel_path = _printable(rel_path)
                logger.warning("Skipping %s: name is not valid UTF-8", rel_path)
                skipped_count += 1
                skipped_files.append(rel_path)
                continue

            try:
                if not file_path.is_file():
                    continue
                size_bytes = file_path.stat().st_size
            except OSError as e:
                # Graceful degradation - skip files that can't be stat'ed
                logger.warning("Skipping %s: %s", rel_path, e)
                skipped_count += 1
                skipped_files.append(rel_path)
                continue

            records.append(classify_icon(rel_path, size_bytes, icon_index.get(filename), config))

    return ClassificationResult(
        records=records,
        skipped_count=skipped_count,
        skipped_files=skipped_files,
    )


def classify_manifest(
    root_dir: Path | str,
    categories: Mapping[str, CategoryEntry],
    config: CatalogConfig,
) -> ClassificationResult:
    """Classify icons listed by the category declaration.

    Each category names its folder (or falls back to its library's folder);
    every listed icon gets a record whether or not the file exists, with
    presence recorded in ``exists``. The first record for a path wins.
    """
    root_dir = Path(root_dir)
    records: list[IconRecord] = []
    seen: set[str] = set()

    for entry in categories.values():
        folder = entry.folder or library_folder(entry.library, config)
        for file_name in entry.icons:
            rel_path = f"{folder}/{file_name}"
            if rel_path in seen:
                logger.debug("Duplicate manifest entry ignored: %s", rel_path)
                continue
            seen.add(rel_path)

            file_path = root_dir / folder / file_name
            try:
                exists = file_path.is_file()
                size_bytes = file_path.stat().st_size if exists else 0
            except OSError as e:
                logger.warning("Cannot stat %s: %s", rel_path, e)
                exists = False
                size_bytes = 0

            record = classify_icon(rel_path, size_bytes, entry, config)
            record.folder = folder
            record.exists = exists
            records.append(record)

    return ClassificationResult(records=records)
