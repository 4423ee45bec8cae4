"""Filename pattern tables for icon families, shards and size variants."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Optional

KNOWN_SIZES = frozenset({16, 20, 24, 28, 32, 36, 40, 48, 64, 72, 96, 128, 256, 512, 1024})

_SIZE_SUFFIX_RE = re.compile(r"(?:^|[_-])(\d{2,4})(?:px)?$")
_NON_ALNUM_RE = re.compile(r"[^a-zA-Z0-9]")


@dataclass(frozen=True)
class UIFamily:
    """A third-party icon set recognised by its filename prefix."""

    name: str
    prefix: re.Pattern
    base_family: str
    subdir: Optional[str] = None  # extra directory level under the family


def _prefix(pattern: str) -> re.Pattern:
    return re.compile(pattern, re.IGNORECASE)


# First match wins, so the specific font-awesome prefixes precede the generic one.
UI_FAMILIES: tuple[UIFamily, ...] = (
    UIFamily("tabler", _prefix(r"^tabler[_-]"), "tabler"),
    UIFamily("fontawesome-solid", _prefix(r"^fa_solid_"), "fontawesome", "solid"),
    UIFamily("fontawesome-brand", _prefix(r"^fa_brand_"), "fontawesome", "brand"),
    UIFamily("fontawesome-other", _prefix(r"^fa[_-]"), "fontawesome", "other"),
    UIFamily("mdi", _prefix(r"^mdi[_-]"), "mdi"),
    UIFamily("lucide", _prefix(r"^lucide[_-]"), "lucide"),
    UIFamily("phosphor", _prefix(r"^phosphor[_-]"), "phosphor"),
    UIFamily("cssgg", _prefix(r"^cssgg[_-]"), "cssgg"),
    UIFamily("heroicons", _prefix(r"^heroicons[_-]"), "heroicons"),
    UIFamily("feather", _prefix(r"^feather[_-]"), "feather"),
    UIFamily("ionicons", _prefix(r"^ionicons[_-]"), "ionicons"),
    UIFamily("octicons", _prefix(r"^octicons[_-]"), "octicons"),
    UIFamily("eva", _prefix(r"^eva[_-]"), "eva"),
    UIFamily("bootstrap", _prefix(r"^bootstrap[_-]"), "bootstrap"),
    UIFamily("remix", _prefix(r"^remix[_-]"), "remix"),
    UIFamily("brand", _prefix(r"^brand[_-]"), "brand"),
)

_FAMILIES_BY_NAME = {family.name: family for family in UI_FAMILIES}

SAP_PREFIX_RE = _prefix(r"^sap")


def get_shard(name: Optional[str], length: int = 1) -> str:
    """Bucket a filename by its first alphanumeric characters.

    Args:
        name: The filename (or remainder after a family prefix).
        length: Number of characters in the bucket name.

    Returns:
        Lowercase bucket, padded with ``_`` to ``length``; ``_`` if the name
        has no alphanumeric characters.
    """
    safe = _NON_ALNUM_RE.sub("", name or "")
    shard = safe[:length].lower()
    if not shard:
        return "_"
    return shard.ljust(length, "_")


def ui_family_from_filename(file_name: str) -> Optional[UIFamily]:
    """Identify the UI icon family a filename belongs to, if any."""
    for family in UI_FAMILIES:
        if family.prefix.search(file_name):
            return family
    return None


def get_ui_family(name: str) -> Optional[UIFamily]:
    """Look up a UI family by its table name."""
    return _FAMILIES_BY_NAME.get(name)


def ui_shard_for_file(file_name: str, family: UIFamily) -> str:
    """Relative shard directory (posix) for a UI family file.

    The family prefix is stripped before bucketing, so ``tabler_home.svg``
    lands in ``h``; font-awesome files get their style subdirectory first.
    """
    rest = family.prefix.sub("", file_name, count=1)
    shard = get_shard(rest, 1)
    if family.subdir:
        return str(PurePosixPath(family.subdir, shard))
    return shard


def _split_stem(value: str) -> str:
    base_name = value.rsplit("/", 1)[-1] or value
    if "." in base_name.lstrip("."):
        return base_name.rsplit(".", 1)[0]
    return base_name


def parse_size_variant(value: Optional[str]) -> Optional[int]:
    """Pixel size encoded in a filename suffix, e.g. ``icon_24.svg`` -> 24.

    Only sizes in ``KNOWN_SIZES`` count; anything else returns None.
    """
    if not value:
        return None
    match = _SIZE_SUFFIX_RE.search(_split_stem(value))
    if not match:
        return None
    size = int(match.group(1))
    return size if size in KNOWN_SIZES else None


def build_family_key(value: Optional[str]) -> str:
    """Group key shared by the size variants of one logical icon."""
    if not value:
        return ""
    base = _split_stem(value)
    match = _SIZE_SUFFIX_RE.search(base)
    if match and int(match.group(1)) in KNOWN_SIZES:
        base = base[: match.start()]
    return base.lower()
