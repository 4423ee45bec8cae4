"""Shared fixtures for glyphs tests."""

import os

import pytest

from scripts.glyphs.config import get_default_config


SAMPLE_SOURCE = '''import React from "react";

// Icon manager widget
const ALL_ICON_CATEGORIES = {
  "Cloud": {
    description: "Compute {and} storage",
    library: "Azure",
    isNew: true,
    icons: ["vm.svg", "storage_24.svg", "storage_48.svg"],
  },
  'Productivity': {
    description: 'Team\\'s apps',
    library: "Microsoft 365",
    icons: ["teams.svg", "vm.svg"],
  },
  "Studio": {
    library: "PiDEAS",
    icons: ["logo_color.png"]
  }
};

export default function Widget() {
  return null;
}
'''


@pytest.fixture
def source_file(tmp_path):
    """A component file containing the category declaration."""
    path = tmp_path / "Widget.jsx"
    path.write_text(SAMPLE_SOURCE, encoding="utf-8")
    return path


@pytest.fixture
def icon_tree(tmp_path):
    """A small icon tree matching SAMPLE_SOURCE."""
    icons = tmp_path / "icons"
    files = {
        "azure/vm.svg": b"<svg>vm</svg>",
        "azure/storage_24.svg": b"<svg>24</svg>",
        "azure/storage_48.svg": b"<svg>48</svg>",
        "microsoft-365/productivity/teams.svg": b"<svg>teams</svg>",
        "ui/tabler/home.svg": b"<svg>home</svg>",
        "ui/tabler/star-filled.svg": b"<svg>star</svg>",
        "pideas/logo_color.png": b"\x89PNG....",
        "uncategorized/misc.svg": b"<svg/>",
    }
    for rel, content in files.items():
        path = icons / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
    return icons


@pytest.fixture
def config():
    return get_default_config()


@pytest.fixture
def write_raw_name():
    """Create a file from a raw byte name; skips where the filesystem refuses it."""
    def _write(directory, name):
        path = os.path.join(os.fsencode(directory), name)
        try:
            with open(path, "wb") as f:
                f.write(b"<svg/>")
        except OSError:
            pytest.skip("filesystem rejects non-UTF-8 file names")
        return path
    return _write
