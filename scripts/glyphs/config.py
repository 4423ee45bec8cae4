"""Configuration loading and validation for the icon catalog tooling."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml


class ConfigError(Exception):
    """Error in catalog configuration."""

    def __init__(
        self,
        message: str,
        file: Optional[str] = None,
        line: Optional[int] = None,
        error_type: str = "config_invalid",
    ):
        super().__init__(message)
        self.message = message
        self.file = file
        self.line = line
        self.error_type = error_type

    def to_json(self) -> dict[str, Any]:
        """Serialize error to JSON format for machine parsing."""
        result: dict[str, Any] = {
            "error": self.error_type,
            "message": self.message,
        }
        if self.file:
            result["file"] = self.file
        if self.line:
            result["line"] = self.line
        return result

    def __str__(self) -> str:
        parts = [self.message]
        if self.file:
            parts.append(f"file: {self.file}")
        if self.line:
            parts.append(f"line: {self.line}")
        return " | ".join(parts)


# Default paths, relative to the working directory
DEFAULT_CONFIG_PATH = "glyphs.yaml"
DEFAULT_ICONS_DIR = "icons"
DEFAULT_OUTPUT_DIR = "metadata"
DEFAULT_SOURCE_ENV = "GLYPHS_SOURCE"
DEFAULT_MARKER = "const ALL_ICON_CATEGORIES"

MODES = ("walk", "manifest")

UNKNOWN_META = {"source": "Unknown", "license": "Unknown", "brandOwner": "Unknown"}

DEFAULT_COLLECTIONS: dict[str, dict[str, str]] = {
    "microsoft-365": {"source": "Microsoft", "license": "Trademark", "brandOwner": "Microsoft"},
    "azure": {"source": "Microsoft", "license": "Trademark", "brandOwner": "Microsoft"},
    "security": {"source": "Microsoft", "license": "Trademark", "brandOwner": "Microsoft"},
    "sap": {"source": "SAP", "license": "Trademark", "brandOwner": "SAP"},
    "ai": {"source": "Various", "license": "Trademark", "brandOwner": "Various"},
    "third-party": {"source": "Various", "license": "Trademark", "brandOwner": "Various"},
    "ui": {"source": "Various", "license": "Varies", "brandOwner": "Various"},
    "pideas": {"source": "PiDEAS Studio", "license": "Proprietary", "brandOwner": "PiDEAS Studio"},
    "uncategorized": dict(UNKNOWN_META),
}

DEFAULT_UI_SETS: dict[str, dict[str, str]] = {
    "tabler": {"source": "Tabler Icons", "license": "MIT", "brandOwner": "Tabler"},
    "fontawesome": {"source": "Font Awesome Free", "license": "CC BY 4.0", "brandOwner": "Fonticons"},
    "mdi": {"source": "Material Design Icons", "license": "Apache-2.0", "brandOwner": "Templarian"},
    "lucide": {"source": "Lucide", "license": "ISC", "brandOwner": "Lucide"},
    "phosphor": {"source": "Phosphor Icons", "license": "MIT", "brandOwner": "Phosphor"},
    "cssgg": {"source": "css.gg", "license": "MIT", "brandOwner": "css.gg"},
    "heroicons": {"source": "Heroicons", "license": "MIT", "brandOwner": "Tailwind Labs"},
    "feather": {"source": "Feather", "license": "MIT", "brandOwner": "Feather"},
    "ionicons": {"source": "Ionicons", "license": "MIT", "brandOwner": "Ionic"},
    "octicons": {"source": "Octicons", "license": "MIT", "brandOwner": "GitHub"},
    "eva": {"source": "Eva Icons", "license": "MIT", "brandOwner": "Akveo"},
    "bootstrap": {"source": "Bootstrap Icons", "license": "MIT", "brandOwner": "Bootstrap"},
    "remix": {"source": "Remix Icon", "license": "Apache-2.0", "brandOwner": "Remix Design"},
    "brand": {"source": "Brand Icons", "license": "Trademark", "brandOwner": "Various"},
}

DEFAULT_LIBRARY_SLUGS: dict[str, str] = {
    "Microsoft 365": "microsoft-365",
    "AI": "ai",
    "Third Party": "third-party",
    "SAP": "sap",
    "Security": "security",
    "Azure": "azure",
    "PiDEAS": "pideas",
}


@dataclass
class SourceConfig:
    """Where the category declaration lives and how to find it."""

    env_var: str = DEFAULT_SOURCE_ENV
    candidates: list[str] = field(default_factory=list)
    marker: str = DEFAULT_MARKER


@dataclass
class OutputConfig:
    """Output configuration."""

    output_dir: str = DEFAULT_OUTPUT_DIR
    catalog_file: str = "catalog.json"
    categories_file: str = "categories.json"


@dataclass
class ReorgConfig:
    """Legacy directory migration settings."""

    legacy_dir: str = "m365"  # relative to icons_dir
    remove_empty_legacy: bool = True


@dataclass
class CatalogConfig:
    """Complete catalog configuration."""

    version: str = "1.0"
    mode: str = "walk"
    icons_dir: str = DEFAULT_ICONS_DIR
    skip_dirs: list[str] = field(default_factory=lambda: ["__pycache__", "node_modules"])
    follow_symlinks: bool = False
    warn_on_duplicates: bool = False
    ui_collection: str = "ui"
    raster_extensions: list[str] = field(
        default_factory=lambda: ["png", "jpg", "jpeg", "gif", "webp", "bmp"]
    )
    collections: dict[str, dict[str, str]] = field(
        default_factory=lambda: copy.deepcopy(DEFAULT_COLLECTIONS)
    )
    ui_sets: dict[str, dict[str, str]] = field(
        default_factory=lambda: copy.deepcopy(DEFAULT_UI_SETS)
    )
    library_slugs: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_LIBRARY_SLUGS))
    source: SourceConfig = field(default_factory=SourceConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    reorg: ReorgConfig = field(default_factory=ReorgConfig)


def get_default_config() -> CatalogConfig:
    """Return the default catalog configuration."""
    return CatalogConfig()


def _expect_mapping(value: Any, key: str, config_file: Optional[str]) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(
            f"'{key}' must be a mapping",
            file=config_file,
            error_type="config_invalid",
        )
    return value


def _expect_str_list(value: Any, key: str, config_file: Optional[str]) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(
            f"'{key}' must be a list of strings",
            file=config_file,
            error_type="config_invalid",
        )
    return value


def _parse_source(source_dict: dict[str, Any], config_file: Optional[str] = None) -> SourceConfig:
    """Parse source configuration."""
    defaults = SourceConfig()
    candidates = source_dict.get("candidates", defaults.candidates)
    return SourceConfig(
        env_var=source_dict.get("env_var", defaults.env_var),
        candidates=_expect_str_list(candidates, "source.candidates", config_file),
        marker=source_dict.get("marker", defaults.marker),
    )


def _parse_output(output_dict: dict[str, Any]) -> OutputConfig:
    """Parse output configuration."""
    return OutputConfig(
        output_dir=output_dict.get("output_dir", DEFAULT_OUTPUT_DIR),
        catalog_file=output_dict.get("catalog_file", "catalog.json"),
        categories_file=output_dict.get("categories_file", "categories.json"),
    )


def _parse_reorg(reorg_dict: dict[str, Any]) -> ReorgConfig:
    """Parse reorganizer configuration."""
    defaults = ReorgConfig()
    return ReorgConfig(
        legacy_dir=reorg_dict.get("legacy_dir", defaults.legacy_dir),
        remove_empty_legacy=reorg_dict.get("remove_empty_legacy", defaults.remove_empty_legacy),
    )


def _merge_meta_table(
    defaults: dict[str, dict[str, str]],
    overrides: dict[str, Any],
    key: str,
    config_file: Optional[str] = None,
) -> dict[str, dict[str, str]]:
    """Overlay per-entry metadata overrides onto a default table."""
    merged = copy.deepcopy(defaults)
    for name, meta in overrides.items():
        meta = _expect_mapping(meta, f"{key}.{name}", config_file)
        merged.setdefault(str(name), dict(UNKNOWN_META)).update(
            {k: str(v) for k, v in meta.items()}
        )
    return merged


def validate_config(config: CatalogConfig, config_file: Optional[str] = None) -> None:
    """Validate configuration values.

    Raises:
        ConfigError: If configuration is invalid.
    """
    if config.mode not in MODES:
        raise ConfigError(
            f"Unknown mode '{config.mode}'. Must be one of: {', '.join(MODES)}",
            file=config_file,
            error_type="config_invalid",
        )

    if not config.source.marker or not isinstance(config.source.marker, str):
        raise ConfigError(
            "source.marker must be a non-empty string",
            file=config_file,
            error_type="config_invalid",
        )

    for name in (config.output.catalog_file, config.output.categories_file):
        if not isinstance(name, str) or not name or "/" in name or "\\" in name:
            raise ConfigError(
                f"Output file name '{name}' must be a bare file name",
                file=config_file,
                error_type="config_invalid",
            )

    if config.output.catalog_file == config.output.categories_file:
        raise ConfigError(
            "catalog_file and categories_file must differ",
            file=config_file,
            error_type="config_invalid",
        )


def load_config(config_path: Path | str) -> CatalogConfig:
    """Load configuration from a YAML file.

    Args:
        config_path: Path to the glyphs.yaml file.

    Returns:
        CatalogConfig with loaded values merged with defaults.

    Raises:
        ConfigError: If the file exists but contains invalid configuration.
    """
    config_path = Path(config_path)
    config_file = str(config_path)

    # Start with defaults
    defaults = get_default_config()

    if not config_path.exists():
        return defaults

    try:
        content = config_path.read_text()
        if not content.strip():
            return defaults

        data = yaml.safe_load(content)
        if not data:
            return defaults
        if not isinstance(data, dict):
            raise ConfigError(
                "Top-level glyphs config must be a mapping",
                file=config_file,
                error_type="config_invalid",
            )

    except yaml.YAMLError as e:
        line = None
        mark = getattr(e, "problem_mark", None)
        if mark is not None:
            line = mark.line + 1
        raise ConfigError(
            f"Invalid YAML: {e}",
            file=config_file,
            line=line,
            error_type="config_invalid",
        )

    # Build config from data, using defaults for missing values
    config = CatalogConfig(
        version=str(data.get("version", defaults.version)),
        mode=data.get("mode", defaults.mode),
        icons_dir=data.get("icons_dir", defaults.icons_dir),
        skip_dirs=_expect_str_list(data.get("skip_dirs", defaults.skip_dirs), "skip_dirs", config_file),
        follow_symlinks=bool(data.get("follow_symlinks", defaults.follow_symlinks)),
        warn_on_duplicates=bool(data.get("warn_on_duplicates", defaults.warn_on_duplicates)),
        ui_collection=data.get("ui_collection", defaults.ui_collection),
        raster_extensions=[
            ext.lower().lstrip(".")
            for ext in _expect_str_list(
                data.get("raster_extensions", defaults.raster_extensions),
                "raster_extensions",
                config_file,
            )
        ],
        collections=_merge_meta_table(
            DEFAULT_COLLECTIONS,
            _expect_mapping(data.get("collections"), "collections", config_file),
            "collections",
            config_file,
        ),
        ui_sets=_merge_meta_table(
            DEFAULT_UI_SETS,
            _expect_mapping(data.get("ui_sets"), "ui_sets", config_file),
            "ui_sets",
            config_file,
        ),
        library_slugs={
            **DEFAULT_LIBRARY_SLUGS,
            **{
                str(k): str(v)
                for k, v in _expect_mapping(
                    data.get("library_slugs"), "library_slugs", config_file
                ).items()
            },
        },
        source=_parse_source(_expect_mapping(data.get("source"), "source", config_file), config_file),
        output=_parse_output(_expect_mapping(data.get("output"), "output", config_file)),
        reorg=_parse_reorg(_expect_mapping(data.get("reorg"), "reorg", config_file)),
    )

    # Validate the loaded config
    validate_config(config, config_file)

    return config
