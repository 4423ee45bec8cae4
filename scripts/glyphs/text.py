"""String helpers shared by the catalog builder and reorganizer."""

from __future__ import annotations

import re
from typing import Optional

_CAMEL_BOUNDARY_RE = re.compile(r"([a-z])([A-Z])")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")
_WHITESPACE_RE = re.compile(r"\s+")


def _normalize(value: str) -> str:
    """Expand underscores and lower-to-upper boundaries into spaces."""
    return _CAMEL_BOUNDARY_RE.sub(r"\1 \2", value.replace("_", " "))


def to_tokens(value: Optional[str]) -> list[str]:
    """Split a name into lowercase search tokens.

    >>> to_tokens("cloud_vmInstance")
    ['cloud', 'vm', 'instance']
    """
    if not value:
        return []
    return [token for token in _NON_ALNUM_RE.split(_normalize(value).lower()) if token]


def to_title(value: Optional[str]) -> str:
    """Humanize a name for display.

    Casing inside words is preserved; only the first letter of each word is
    raised.

    >>> to_title("cloud_vmInstance")
    'Cloud Vm Instance'
    """
    if not value:
        return ""
    words = _WHITESPACE_RE.sub(" ", _normalize(value)).strip().split(" ")
    return " ".join(word[:1].upper() + word[1:] for word in words if word)


def slugify(value: str) -> str:
    """Lowercase, hyphen-separated identifier for a name."""
    slug = value.lower().replace("&", "and")
    return _NON_ALNUM_RE.sub("-", slug).strip("-")


def unique_tokens(*values: Optional[str]) -> list[str]:
    """Order-preserving union of the tokens of several values."""
    seen: set[str] = set()
    tokens: list[str] = []
    for value in values:
        for token in to_tokens(value):
            if token not in seen:
                seen.add(token)
                tokens.append(token)
    return tokens
