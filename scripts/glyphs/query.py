"""Query interface and gallery state for the catalog indexes.

Gallery state is an immutable value; every user action (search, filter,
category pick, "load more") maps the current state to a new one, so the
filtering and paging logic can be exercised without a UI.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Optional

from scripts.glyphs.patterns import build_family_key, parse_size_variant
from scripts.glyphs.text import to_title

PAGE_SIZE = 180
ALL = "all"
DEFAULT_EXTENSIONS = frozenset({"svg", "png"})

LOAD_FAILURE_MESSAGE = (
    "Failed to load metadata. Serve the repository over HTTP "
    "(e.g. python -m http.server) instead of opening the page as a local file."
)
NO_MATCH_MESSAGE = "No icons match the current filters."

COLLECTION_LABELS = {
    "microsoft-365": "Microsoft 365",
    "azure": "Azure",
    "security": "Security",
    "ai": "AI",
    "sap": "SAP",
    "third-party": "Third Party",
    "ui": "UI",
    "pideas": "PiDEAS",
    "uncategorized": "Uncategorized",
}

_SEARCH_FIELDS = (
    "title",
    "name",
    "fileName",
    "category",
    "collection",
    "library",
    "source",
    "brandOwner",
    "description",
    "license",
    "style",
    "uiSet",
)


def _load_json(index_path: Path | str) -> Optional[dict[str, Any]]:
    index_path = Path(index_path)
    if not index_path.exists():
        return None

    try:
        content = index_path.read_text(encoding="utf-8")
        data = json.loads(content)
    except (json.JSONDecodeError, IOError, UnicodeDecodeError):
        return None
    return data if isinstance(data, dict) else None


def load_catalog_index(index_path: Path | str) -> Optional[dict[str, Any]]:
    """Load a catalog index from file.

    Args:
        index_path: Path to catalog.json.

    Returns:
        Index data or None if loading fails.
    """
    data = _load_json(index_path)
    if data is None:
        return None
    icons = data.get("icons")
    data["icons"] = [i for i in icons if isinstance(i, dict)] if isinstance(icons, list) else []
    for icon in data["icons"]:
        if not icon.get("collection"):
            collection = _collection_from_folder(icon.get("folder"))
            if collection:
                icon["collection"] = collection
    return data


def _collection_from_folder(folder: Any) -> str:
    if not isinstance(folder, str):
        return ""
    return folder.split("/")[0]


def _count(value: Any) -> int:
    try:
        return max(int(value or 0), 0)
    except (TypeError, ValueError, OverflowError):
        return 0


def normalize_category(category: dict[str, Any]) -> dict[str, Any]:
    """Bring a category from either generation mode into one shape."""
    normalized = dict(category)
    if not normalized.get("collection"):
        normalized["collection"] = _collection_from_folder(normalized.get("folder"))
    normalized.setdefault("uiSet", None)
    normalized.setdefault("description", "")
    normalized["iconCount"] = _count(normalized.get("iconCount"))
    normalized.setdefault("existingCount", normalized["iconCount"])
    return normalized


def load_categories_index(index_path: Path | str) -> Optional[dict[str, Any]]:
    """Load a categories index written in either generation mode.

    Returns:
        Index data with normalized ``categories`` and ``totalCategories``,
        or None if loading fails.
    """
    data = _load_json(index_path)
    if data is None:
        return None
    categories = data.get("categories")
    if not isinstance(categories, list):
        categories = []
    data["categories"] = [normalize_category(c) for c in categories if isinstance(c, dict)]
    data.setdefault("totalCategories", len(data["categories"]))
    return data


def enrich_icons(icons: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Add search text and size-family data to raw catalog icons.

    Icons sharing a family key (``home_24.svg``, ``home_48.svg``) learn the
    sorted sizes of their family and its member count. The result is sorted
    by name.
    """
    enriched = []
    for icon in icons:
        label = icon.get("fileName") or icon.get("path") or ""
        size_variant = icon.get("sizeVariant")
        if size_variant is None:
            size_variant = parse_size_variant(label)
        family_key = icon.get("familyKey") or build_family_key(label)
        haystack = [icon.get(name) for name in _SEARCH_FIELDS] + list(icon.get("tags") or [])
        enriched.append({
            **icon,
            "sizeVariant": size_variant,
            "familyKey": family_key,
            "search": " ".join(str(v) for v in haystack if v).lower(),
        })

    families: dict[str, dict[str, Any]] = {}
    for icon in enriched:
        key = _family_of(icon)
        family = families.setdefault(key, {"sizes": set(), "count": 0})
        if icon["sizeVariant"]:
            family["sizes"].add(icon["sizeVariant"])
        family["count"] += 1

    result = []
    for icon in enriched:
        family = families[_family_of(icon)]
        result.append({
            **icon,
            "sizeVariants": sorted(family["sizes"]),
            "familyCount": family["count"],
        })

    result.sort(key=lambda i: i.get("name") or "")
    return result


def _family_of(icon: dict[str, Any]) -> str:
    return icon.get("familyKey") or icon.get("name") or icon.get("fileName") or icon.get("path") or ""


@dataclass(frozen=True)
class Filters:
    """User-selected gallery filters."""

    search: str = ""
    collection: str = ALL
    category: str = ALL
    extensions: frozenset[str] = DEFAULT_EXTENSIONS


@dataclass(frozen=True)
class GalleryState:
    """Complete gallery state."""

    catalog: tuple[dict[str, Any], ...] = ()
    categories: tuple[dict[str, Any], ...] = ()
    filters: Filters = field(default_factory=Filters)
    filtered: tuple[dict[str, Any], ...] = ()
    page: int = 0  # pages shown so far
    page_size: int = PAGE_SIZE
    load_error: Optional[str] = None


def matches_filters(icon: dict[str, Any], filters: Filters) -> bool:
    """Whether one enriched icon passes the filters."""
    if filters.collection != ALL and icon.get("collection") != filters.collection:
        return False
    if filters.category != ALL and icon.get("category") != filters.category:
        return False
    if icon.get("extension") not in filters.extensions:
        return False
    tokens = filters.search.strip().lower().split()
    haystack = icon.get("search", "")
    return all(token in haystack for token in tokens)


def apply_filters(state: GalleryState, filters: Optional[Filters] = None) -> GalleryState:
    """Recompute the filtered list and show the first page."""
    filters = filters if filters is not None else state.filters
    filtered = tuple(icon for icon in state.catalog if matches_filters(icon, filters))
    return replace(state, filters=filters, filtered=filtered, page=1)


def create_state(
    catalog_index: Optional[dict[str, Any]],
    categories_index: Optional[dict[str, Any]],
    filters: Optional[Filters] = None,
    page_size: int = PAGE_SIZE,
) -> GalleryState:
    """Build the initial gallery state from loaded indexes.

    A missing index yields an empty state carrying ``LOAD_FAILURE_MESSAGE``.
    """
    if catalog_index is None or categories_index is None:
        return GalleryState(filters=filters or Filters(), page_size=page_size, load_error=LOAD_FAILURE_MESSAGE)

    state = GalleryState(
        catalog=tuple(enrich_icons(catalog_index.get("icons", []))),
        categories=tuple(categories_index.get("categories", [])),
        filters=filters or Filters(),
        page_size=page_size,
    )
    return apply_filters(state)


def select_category(state: GalleryState, category: str) -> GalleryState:
    """Pick a category from the sidebar (``all`` clears it)."""
    return apply_filters(state, replace(state.filters, category=category or ALL))


def load_more(state: GalleryState) -> GalleryState:
    """Reveal the next page, if any."""
    if not has_more(state):
        return state
    return replace(state, page=state.page + 1)


def visible_icons(state: GalleryState) -> tuple[dict[str, Any], ...]:
    """Icons on all pages revealed so far."""
    return state.filtered[: state.page * state.page_size]


def has_more(state: GalleryState) -> bool:
    return state.page * state.page_size < len(state.filtered)


def status_message(state: GalleryState) -> str:
    """Inline status text; empty when icons are shown."""
    if state.load_error:
        return state.load_error
    if not state.catalog:
        return ""
    if not state.filtered:
        return NO_MATCH_MESSAGE
    return ""


def sorted_categories(state: GalleryState) -> list[dict[str, Any]]:
    """Sidebar order: by collection, then name."""
    return sorted(state.categories, key=lambda c: (c.get("collection") or "", c.get("name") or ""))


def collection_options(state: GalleryState) -> list[tuple[str, str]]:
    """(value, label) pairs for the collection picker."""
    collections = sorted({icon.get("collection") or "" for icon in state.catalog})
    return [(c, collection_label(c)) for c in collections]


def collection_label(collection: Optional[str]) -> str:
    if not collection:
        return ""
    return COLLECTION_LABELS.get(collection) or to_title(collection.replace("-", " "))


def format_bytes(value: Optional[int]) -> str:
    """Human-readable size, e.g. ``1.5 KB``."""
    if not value:
        return "0 B"
    units = ["B", "KB", "MB"]
    size = float(value)
    idx = 0
    while size >= 1024 and idx < len(units) - 1:
        size /= 1024
        idx += 1
    return f"{size:.1f} {units[idx]}" if size < 10 else f"{size:.0f} {units[idx]}"


def build_meta_rows(icon: dict[str, Any]) -> list[tuple[str, str]]:
    """Label/value rows for the icon detail view."""
    sizes = icon.get("sizeVariants") or []
    if sizes:
        size_list = ", ".join(str(s) for s in sizes)
    elif icon.get("sizeVariant"):
        size_list = str(icon["sizeVariant"])
    else:
        size_list = "Standard"
    extension = icon.get("extension")

    rows: list[Optional[tuple[str, str]]] = [
        ("ID", icon["id"]) if icon.get("id") else None,
        ("Repo Path", f"icons/{icon['path']}") if icon.get("path") else None,
        ("Collection", collection_label(icon.get("collection"))),
        ("Category", icon.get("category") or "Uncategorized"),
        ("Library", icon.get("library") or "Unknown"),
        ("UI Set", icon["uiSet"]) if icon.get("uiSet") else None,
        ("Description", icon["description"]) if icon.get("description") else None,
        ("Source", icon.get("source") or "Unknown"),
        ("Brand Owner", icon["brandOwner"]) if icon.get("brandOwner") else None,
        ("License", icon.get("license") or "Unknown"),
        ("Style", icon["style"]) if icon.get("style") else None,
        ("File type", extension.upper() if extension else "Unknown"),
        ("File size", format_bytes(icon.get("sizeBytes"))),
        ("Sizes", size_list),
        ("Variants", str(icon.get("familyCount") or 1)),
    ]
    return [row for row in rows if row is not None]


def query_by_collection(index: dict[str, Any], collection: str) -> list[dict[str, Any]]:
    """Icons in one collection."""
    return [i for i in index.get("icons", []) if i.get("collection") == collection]


def query_by_category(index: dict[str, Any], category: str) -> list[dict[str, Any]]:
    """Icons assigned to one category."""
    return [i for i in index.get("icons", []) if i.get("category") == category]


def search_icons(
    index: dict[str, Any],
    text: str,
    extensions: Optional[frozenset[str]] = None,
) -> list[dict[str, Any]]:
    """Icons whose searchable fields contain every word of ``text``."""
    filters = Filters(search=text)
    if extensions is not None:
        filters = replace(filters, extensions=extensions)
    else:
        all_extensions = frozenset(i.get("extension") for i in index.get("icons", []))
        filters = replace(filters, extensions=all_extensions)
    return [i for i in enrich_icons(index.get("icons", [])) if matches_filters(i, filters)]


def get_summary(index: dict[str, Any]) -> dict[str, Any]:
    """Summary statistics without full icon data.

    Args:
        index: Catalog index data.

    Returns:
        Counts by collection, style and extension.
    """
    by_collection: dict[str, int] = {}
    by_style: dict[str, int] = {}
    by_extension: dict[str, int] = {}
    for icon in index.get("icons", []):
        for counts, key in (
            (by_collection, icon.get("collection") or "unknown"),
            (by_style, icon.get("style") or "unknown"),
            (by_extension, icon.get("extension") or "unknown"),
        ):
            counts[key] = counts.get(key, 0) + 1

    summary = {
        "generated": index.get("generatedAt", "unknown"),
        "source": index.get("source", "unknown"),
        "icon_count": index.get("totalIcons", len(index.get("icons", []))),
        "by_collection": dict(sorted(by_collection.items())),
        "by_style": dict(sorted(by_style.items())),
        "by_extension": dict(sorted(by_extension.items())),
    }
    if "missingIcons" in index:
        summary["missing_icons"] = index["missingIcons"]
    return summary
