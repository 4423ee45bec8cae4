"""Tests for the query layer and gallery state."""

import json

import pytest

from scripts.glyphs.builder import build_catalog, write_outputs
from scripts.glyphs.config import DEFAULT_MARKER
from scripts.glyphs.extractor import load_categories
from scripts.glyphs.query import (
    ALL,
    LOAD_FAILURE_MESSAGE,
    NO_MATCH_MESSAGE,
    Filters,
    apply_filters,
    build_meta_rows,
    collection_label,
    collection_options,
    create_state,
    enrich_icons,
    format_bytes,
    get_summary,
    has_more,
    load_catalog_index,
    load_categories_index,
    load_more,
    normalize_category,
    query_by_category,
    query_by_collection,
    search_icons,
    select_category,
    sorted_categories,
    status_message,
    visible_icons,
)


def _icon(path, **fields):
    file_name = path.rsplit("/", 1)[-1]
    icon = {
        "id": path,
        "path": path,
        "name": file_name.rsplit(".", 1)[0],
        "fileName": file_name,
        "extension": file_name.rsplit(".", 1)[-1],
        "collection": path.split("/")[0],
        "category": "General",
    }
    icon.update(fields)
    return icon


@pytest.fixture
def index_files(icon_tree, source_file, config, tmp_path):
    """Catalog and categories files built from the sample tree."""
    categories = load_categories(source_file, DEFAULT_MARKER)
    result = build_catalog(icon_tree, categories, config, "Widget.jsx")
    return write_outputs(result, config, tmp_path)


class TestLoading:
    """Tests for reading index files."""

    def test_missing_file(self, tmp_path):
        assert load_catalog_index(tmp_path / "nope.json") is None
        assert load_categories_index(tmp_path / "nope.json") is None

    def test_corrupt_file(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text("{not json")
        assert load_catalog_index(path) is None

    def test_non_object_document(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text("[1, 2]")
        assert load_catalog_index(path) is None

    def test_bad_icons_filtered(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps({"icons": [{"path": "azure/a.svg"}, "junk", 3]}))
        assert load_catalog_index(path)["icons"] == [{"path": "azure/a.svg"}]

    def test_collection_derived_from_folder(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps({"icons": [{"path": "ui/tabler/a.svg", "folder": "ui/tabler"}]}))
        assert load_catalog_index(path)["icons"][0]["collection"] == "ui"

    def test_round_trip_from_build(self, index_files):
        catalog_path, categories_path = index_files
        catalog = load_catalog_index(catalog_path)
        categories = load_categories_index(categories_path)
        assert catalog["totalIcons"] == len(catalog["icons"])
        assert categories["totalCategories"] == len(categories["categories"])

    def test_normalize_manifest_category(self):
        category = normalize_category({"name": "Tabler", "folder": "ui/tabler", "iconCount": 2})
        assert category["collection"] == "ui"
        assert category["uiSet"] is None
        assert category["description"] == ""
        assert category["existingCount"] == 2

    def test_normalize_keeps_existing_count(self):
        category = normalize_category({"name": "A", "folder": "azure", "iconCount": 4, "existingCount": 1})
        assert category["existingCount"] == 1

    def test_non_string_folder_in_catalog(self, tmp_path):
        """A hand-edited folder value degrades instead of raising."""
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps({"icons": [{"path": "a.svg", "folder": 7}, {"path": "b.svg", "folder": ["ui"]}]}))
        icons = load_catalog_index(path)["icons"]
        assert [i["path"] for i in icons] == ["a.svg", "b.svg"]
        assert all("collection" not in i for i in icons)

    def test_non_string_folder_in_categories(self, tmp_path):
        path = tmp_path / "categories.json"
        path.write_text(json.dumps({"categories": [{"name": "A", "folder": {"x": 1}, "iconCount": "lots"}]}))
        category = load_categories_index(path)["categories"][0]
        assert category["collection"] == ""
        assert category["iconCount"] == 0
        assert category["existingCount"] == 0


class TestEnrichIcons:
    """Tests for search text and size families."""

    def test_size_families(self):
        icons = enrich_icons([
            _icon("azure/storage_48.svg"),
            _icon("azure/storage_24.svg"),
            _icon("azure/vm.svg"),
        ])
        by_name = {i["name"]: i for i in icons}
        assert by_name["storage_24"]["sizeVariants"] == [24, 48]
        assert by_name["storage_48"]["familyCount"] == 2
        assert by_name["vm"]["sizeVariants"] == []
        assert by_name["vm"]["familyCount"] == 1

    def test_sorted_by_name(self):
        icons = enrich_icons([_icon("azure/zeta.svg"), _icon("azure/alpha.svg")])
        assert [i["name"] for i in icons] == ["alpha", "zeta"]

    def test_search_haystack(self):
        icon = enrich_icons([_icon("azure/vm.svg", library="Azure", tags=["compute"])])[0]
        assert "azure" in icon["search"]
        assert "compute" in icon["search"]
        assert icon["search"] == icon["search"].lower()


class TestGalleryState:
    """Tests for filtering and paging transitions."""

    @pytest.fixture
    def state(self):
        catalog = {
            "icons": [
                _icon("azure/vm.svg", category="Cloud", library="Azure"),
                _icon("azure/disk.svg", category="Storage", library="Azure"),
                _icon("ui/tabler/home.svg", category="Tabler", uiSet="tabler"),
                _icon("pideas/logo.png", category="Studio"),
                _icon("pideas/photo.jpg", category="Studio"),
            ]
        }
        categories = {"categories": [{"name": "Tabler", "collection": "ui"}, {"name": "Cloud", "collection": "azure"}]}
        return create_state(catalog, categories)

    def test_initial_state(self, state):
        assert state.page == 1
        assert len(state.filtered) == 4  # jpg excluded by default
        assert status_message(state) == ""

    def test_collection_filter(self, state):
        new_state = apply_filters(state, Filters(collection="azure"))
        assert {i["name"] for i in new_state.filtered} == {"vm", "disk"}
        assert len(state.filtered) == 4  # previous state unchanged

    def test_search_requires_every_token(self, state):
        new_state = apply_filters(state, Filters(search="azure vm"))
        assert [i["name"] for i in new_state.filtered] == ["vm"]
        assert apply_filters(state, Filters(search="azure nothing")).filtered == ()

    def test_extension_filter(self, state):
        new_state = apply_filters(state, Filters(extensions=frozenset({"jpg"})))
        assert [i["name"] for i in new_state.filtered] == ["photo"]

    def test_select_category(self, state):
        new_state = select_category(load_more(state), "Studio")
        assert new_state.filters.category == "Studio"
        assert new_state.page == 1
        assert [i["name"] for i in new_state.filtered] == ["logo"]
        assert select_category(new_state, "").filters.category == ALL

    def test_no_matches_message(self, state):
        new_state = apply_filters(state, Filters(search="zzz"))
        assert status_message(new_state) == NO_MATCH_MESSAGE

    def test_load_failure(self):
        state = create_state(None, {"categories": []})
        assert state.load_error == LOAD_FAILURE_MESSAGE
        assert status_message(state) == LOAD_FAILURE_MESSAGE
        assert visible_icons(state) == ()

    def test_paging(self):
        catalog = {"icons": [_icon(f"azure/icon{n:03d}.svg") for n in range(400)]}
        state = create_state(catalog, {"categories": []})

        assert len(visible_icons(state)) == 180
        assert has_more(state)
        state = load_more(state)
        assert len(visible_icons(state)) == 360
        state = load_more(state)
        assert len(visible_icons(state)) == 400
        assert not has_more(state)
        assert load_more(state) is state

    def test_sorted_categories(self, state):
        assert [c["name"] for c in sorted_categories(state)] == ["Cloud", "Tabler"]

    def test_collection_options(self, state):
        assert collection_options(state) == [("azure", "Azure"), ("pideas", "PiDEAS"), ("ui", "UI")]


class TestPresentation:
    """Tests for labels and detail rows."""

    @pytest.mark.parametrize(
        "value,expected",
        [(0, "0 B"), (None, "0 B"), (5, "5.0 B"), (512, "512 B"), (1536, "1.5 KB"), (20480, "20 KB")],
    )
    def test_format_bytes(self, value, expected):
        assert format_bytes(value) == expected

    def test_collection_label(self):
        assert collection_label("microsoft-365") == "Microsoft 365"
        assert collection_label("my-pack") == "My Pack"
        assert collection_label(None) == ""

    def test_meta_rows(self):
        icon = {
            "id": "azure/vm_24.svg",
            "path": "azure/vm_24.svg",
            "collection": "azure",
            "extension": "svg",
            "sizeBytes": 1536,
            "sizeVariants": [24, 48],
            "familyCount": 2,
        }
        rows = dict(build_meta_rows(icon))
        assert rows["Repo Path"] == "icons/azure/vm_24.svg"
        assert rows["Collection"] == "Azure"
        assert rows["Category"] == "Uncategorized"
        assert rows["File type"] == "SVG"
        assert rows["File size"] == "1.5 KB"
        assert rows["Sizes"] == "24, 48"
        assert rows["Variants"] == "2"
        assert "UI Set" not in rows


class TestQueries:
    """Tests for index queries."""

    @pytest.fixture
    def index(self, index_files):
        return load_catalog_index(index_files[0])

    def test_by_collection(self, index):
        assert [i["path"] for i in query_by_collection(index, "ui")] == [
            "ui/tabler/home.svg",
            "ui/tabler/star-filled.svg",
        ]

    def test_by_category(self, index):
        assert len(query_by_category(index, "Cloud")) == 3

    def test_search_all_extensions(self, index):
        assert [i["path"] for i in search_icons(index, "logo")] == ["pideas/logo_color.png"]

    def test_search_restricted_extensions(self, index):
        assert search_icons(index, "logo", extensions=frozenset({"svg"})) == []

    def test_summary(self, index):
        summary = get_summary(index)
        assert summary["source"] == "Widget.jsx"
        assert summary["icon_count"] == 8
        assert summary["by_collection"]["azure"] == 3
        assert summary["by_style"] == {"color": 1, "filled": 1, "flat": 5, "line": 1}
        assert summary["by_extension"] == {"png": 1, "svg": 7}
        assert "missing_icons" not in summary
