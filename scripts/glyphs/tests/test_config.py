"""Tests for configuration loading."""

import pytest
import yaml

from scripts.glyphs.config import (
    DEFAULT_MARKER,
    CatalogConfig,
    ConfigError,
    get_default_config,
    load_config,
    validate_config,
)


class TestDefaults:
    """Tests for the default configuration."""

    def test_default_values(self):
        config = get_default_config()
        assert config.mode == "walk"
        assert config.icons_dir == "icons"
        assert config.follow_symlinks is False
        assert config.source.env_var == "GLYPHS_SOURCE"
        assert config.source.marker == DEFAULT_MARKER
        assert config.output.output_dir == "metadata"
        assert config.output.catalog_file == "catalog.json"
        assert config.output.categories_file == "categories.json"
        assert config.reorg.legacy_dir == "m365"

    def test_defaults_are_independent(self):
        """Mutating one config's tables does not leak into another."""
        first = get_default_config()
        first.collections["azure"]["source"] = "Changed"
        assert get_default_config().collections["azure"]["source"] == "Microsoft"


class TestLoadConfig:
    """Tests for load_config."""

    def test_missing_file_returns_defaults(self, tmp_path):
        assert load_config(tmp_path / "glyphs.yaml") == CatalogConfig()

    def test_empty_file_returns_defaults(self, tmp_path):
        path = tmp_path / "glyphs.yaml"
        path.write_text("   \n")
        assert load_config(path) == CatalogConfig()

    def test_values_merged_with_defaults(self, tmp_path):
        path = tmp_path / "glyphs.yaml"
        path.write_text(yaml.dump({
            "mode": "manifest",
            "icons_dir": "assets/icons",
            "source": {"candidates": ["src/Widget.jsx"]},
            "output": {"output_dir": "out"},
            "raster_extensions": [".PNG", "tiff"],
        }))

        config = load_config(path)
        assert config.mode == "manifest"
        assert config.icons_dir == "assets/icons"
        assert config.source.candidates == ["src/Widget.jsx"]
        assert config.source.marker == DEFAULT_MARKER
        assert config.output.output_dir == "out"
        assert config.output.catalog_file == "catalog.json"
        assert config.raster_extensions == ["png", "tiff"]

    def test_meta_tables_overlay(self, tmp_path):
        path = tmp_path / "glyphs.yaml"
        path.write_text(yaml.dump({
            "collections": {"azure": {"license": "Custom"}, "acme": {"source": "Acme"}},
            "library_slugs": {"Acme Pack": "acme"},
        }))

        config = load_config(path)
        assert config.collections["azure"] == {"source": "Microsoft", "license": "Custom", "brandOwner": "Microsoft"}
        assert config.collections["acme"] == {"source": "Acme", "license": "Unknown", "brandOwner": "Unknown"}
        assert config.library_slugs["Acme Pack"] == "acme"
        assert config.library_slugs["Azure"] == "azure"

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "glyphs.yaml"
        path.write_text("mode: walk\nsource: [unclosed\n")

        with pytest.raises(ConfigError) as exc_info:
            load_config(path)
        assert exc_info.value.file == str(path)
        assert exc_info.value.to_json()["error"] == "config_invalid"

    def test_top_level_must_be_mapping(self, tmp_path):
        path = tmp_path / "glyphs.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_config(path)

    def test_unknown_mode(self, tmp_path):
        path = tmp_path / "glyphs.yaml"
        path.write_text(yaml.dump({"mode": "crawl"}))
        with pytest.raises(ConfigError, match="Unknown mode"):
            load_config(path)

    def test_section_must_be_mapping(self, tmp_path):
        path = tmp_path / "glyphs.yaml"
        path.write_text(yaml.dump({"output": ["metadata"]}))
        with pytest.raises(ConfigError, match="'output' must be a mapping"):
            load_config(path)

    def test_candidates_must_be_strings(self, tmp_path):
        path = tmp_path / "glyphs.yaml"
        path.write_text(yaml.dump({"source": {"candidates": "src/Widget.jsx"}}))
        with pytest.raises(ConfigError, match="source.candidates"):
            load_config(path)


class TestValidateConfig:
    """Tests for validate_config."""

    def test_output_names_must_be_bare(self):
        config = CatalogConfig()
        config.output.catalog_file = "nested/catalog.json"
        with pytest.raises(ConfigError, match="bare file name"):
            validate_config(config)

    def test_output_names_must_differ(self):
        config = CatalogConfig()
        config.output.categories_file = "catalog.json"
        with pytest.raises(ConfigError, match="must differ"):
            validate_config(config)

    def test_empty_marker(self):
        config = CatalogConfig()
        config.source.marker = ""
        with pytest.raises(ConfigError, match="marker"):
            validate_config(config)
