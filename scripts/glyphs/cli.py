"""Command-line interface for the icon catalog tooling."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from enum import IntEnum
from pathlib import Path
from typing import Optional

from scripts.glyphs.builder import build_catalog, write_outputs
from scripts.glyphs.config import (
    DEFAULT_CONFIG_PATH,
    MODES,
    CatalogConfig,
    ConfigError,
    load_config,
)
from scripts.glyphs.errors import ExtractionError
from scripts.glyphs.extractor import CategoryEntry, load_categories, resolve_source_path
from scripts.glyphs.query import (
    PAGE_SIZE,
    create_state,
    get_summary,
    load_catalog_index,
    load_categories_index,
    query_by_category,
    query_by_collection,
    search_icons,
    status_message,
)
from scripts.glyphs.reorganizer import ReorgError, reorganize


class ExitCode(IntEnum):
    """Process exit codes."""

    SUCCESS = 0
    CONFIG_ERROR = 1
    FILE_SYSTEM_ERROR = 2
    PARTIAL_SUCCESS = 3
    SOURCE_ERROR = 4


def _get_config(config_path: Optional[str]) -> CatalogConfig:
    """Load config from path or use defaults.

    Search order:
    1. Explicit --config path
    2. glyphs.yaml in the working directory
    3. Built-in defaults
    """
    if config_path:
        return load_config(config_path)
    return load_config(Path.cwd() / DEFAULT_CONFIG_PATH)  # Defaults if absent


def _load_source(config: CatalogConfig, source_override: Optional[str] = None) -> tuple[Path, dict[str, CategoryEntry]]:
    """Resolve the declaration file and extract its categories."""
    if source_override:
        source_path = resolve_source_path([source_override])
    else:
        source_path = resolve_source_path(config.source.candidates, env_var=config.source.env_var)
    return source_path, load_categories(source_path, config.source.marker)


def _print_error(error: ConfigError | ExtractionError) -> None:
    print(json.dumps(error.to_json()), file=sys.stderr)


def cmd_build(args: argparse.Namespace) -> int:
    """Build catalog.json and categories.json."""
    try:
        config = _get_config(args.config)
    except ConfigError as e:
        _print_error(e)
        return ExitCode.CONFIG_ERROR

    root = Path.cwd()
    mode = args.mode or config.mode
    icons_dir = root / config.icons_dir
    if mode == "walk" and not icons_dir.is_dir():
        print(f"Icon directory not found: {icons_dir}", file=sys.stderr)
        return ExitCode.FILE_SYSTEM_ERROR

    try:
        source_path, categories = _load_source(config, args.source)
    except ExtractionError as e:
        _print_error(e)
        return ExitCode.SOURCE_ERROR
    except (IOError, OSError, UnicodeDecodeError) as e:
        print(f"Cannot read category source: {e}", file=sys.stderr)
        return ExitCode.FILE_SYSTEM_ERROR

    print(f"Building catalog ({mode})...")
    print(f"  Source: {source_path}")
    result = build_catalog(icons_dir, categories, config, source_path.name, mode=mode)

    try:
        catalog_path, _ = write_outputs(result, config, root)
    except (IOError, OSError, UnicodeError) as e:
        print(f"Cannot write outputs: {e}", file=sys.stderr)
        return ExitCode.FILE_SYSTEM_ERROR

    if result.skipped_count > 0:
        print(f"  Skipped {result.skipped_count} files due to errors")
    if "missingIcons" in result.catalog:
        print(f"  Missing on disk: {result.catalog['missingIcons']}")
    print(f"Output: {catalog_path.parent}")
    print(f"Generated {result.icon_count} icon entries across {result.category_count} categories.")

    # Return PARTIAL_SUCCESS if any files were skipped
    if result.skipped_count > 0:
        return ExitCode.PARTIAL_SUCCESS
    return ExitCode.SUCCESS


def cmd_reorg(args: argparse.Namespace) -> int:
    """Move legacy flat icons into the collection layout."""
    try:
        config = _get_config(args.config)
    except ConfigError as e:
        _print_error(e)
        return ExitCode.CONFIG_ERROR

    try:
        _, categories = _load_source(config)
    except ExtractionError as e:
        _print_error(e)
        return ExitCode.SOURCE_ERROR
    except (IOError, OSError, UnicodeDecodeError) as e:
        print(f"Cannot read category source: {e}", file=sys.stderr)
        return ExitCode.FILE_SYSTEM_ERROR

    try:
        result = reorganize(Path.cwd() / config.icons_dir, categories, config, dry_run=args.dry_run)
    except ReorgError as e:
        print(str(e), file=sys.stderr)
        return ExitCode.FILE_SYSTEM_ERROR
    except (IOError, OSError) as e:
        print(f"Reorg failed: {e}", file=sys.stderr)
        return ExitCode.FILE_SYSTEM_ERROR

    if args.dry_run:
        print("DRY RUN - No changes made")
        print(f"Would move {result.moved} files, skip {result.skipped} existing")
    else:
        print(f"  Moved {result.moved} files, skipped {result.skipped} existing")
        if result.legacy_removed:
            print(f"  Removed empty legacy folder {config.reorg.legacy_dir}")
    print(f"Reorg complete. Remaining legacy files: {result.remaining}")
    return ExitCode.SUCCESS


def _index_paths(config: CatalogConfig, root: Path) -> tuple[Path, Path]:
    output_dir = root / config.output.output_dir
    return output_dir / config.output.catalog_file, output_dir / config.output.categories_file


def cmd_query(args: argparse.Namespace) -> int:
    """Query the catalog."""
    try:
        config = _get_config(args.config)
    except ConfigError as e:
        _print_error(e)
        return ExitCode.CONFIG_ERROR

    catalog_path, _ = _index_paths(config, Path.cwd())
    index = load_catalog_index(catalog_path)
    if index is None:
        print("Catalog index not found. Run 'glyphs build' first.")
        return ExitCode.FILE_SYSTEM_ERROR

    if args.summary:
        print(json.dumps(get_summary(index), indent=2))
        return ExitCode.SUCCESS

    if args.search is not None:
        results = search_icons(index, args.search)
    elif args.collection:
        results = query_by_collection(index, args.collection)
    elif args.category:
        results = query_by_category(index, args.category)
    else:
        print("Please specify --search, --collection, --category, or --summary")
        return ExitCode.CONFIG_ERROR

    if not results:
        print("No icons match the query.")
        return ExitCode.SUCCESS

    pages = (len(results) + PAGE_SIZE - 1) // PAGE_SIZE
    if args.page < 1 or args.page > pages:
        print(f"Page {args.page} out of range (1-{pages})", file=sys.stderr)
        return ExitCode.CONFIG_ERROR

    start = (args.page - 1) * PAGE_SIZE
    for icon in results[start:start + PAGE_SIZE]:
        print(icon.get("path"))
    if pages > 1:
        print(f"Page {args.page} of {pages} ({len(results)} icons)")
    return ExitCode.SUCCESS


def cmd_status(args: argparse.Namespace) -> int:
    """Show catalog status."""
    try:
        config = _get_config(args.config)
    except ConfigError as e:
        _print_error(e)
        return ExitCode.CONFIG_ERROR

    catalog_path, categories_path = _index_paths(config, Path.cwd())

    print("Catalog Status")
    print("=" * 40)

    catalog_index = load_catalog_index(catalog_path)
    categories_index = load_categories_index(categories_path)

    if catalog_index:
        summary = get_summary(catalog_index)
        print(f"\nCatalog Index: {catalog_path}")
        print(f"  Generated: {summary['generated']}")
        print(f"  Source: {summary['source']}")
        print(f"  Icons: {summary['icon_count']}")
        print("  By collection:")
        for collection, count in summary["by_collection"].items():
            print(f"    {collection}: {count}")
    else:
        print("\nCatalog Index: NOT FOUND")
        print(f"  Expected at: {catalog_path}")

    if categories_index:
        print(f"\nCategories Index: {categories_path}")
        print(f"  Generated: {categories_index.get('generatedAt', 'unknown')}")
        print(f"  Categories: {categories_index['totalCategories']}")
    else:
        print("\nCategories Index: NOT FOUND")
        print(f"  Expected at: {categories_path}")

    message = status_message(create_state(catalog_index, categories_index))
    if message:
        print(f"\n{message}")

    return ExitCode.SUCCESS


STARTER_CONFIG = '''# Icon catalog configuration

version: "1.0"
mode: walk            # walk | manifest
icons_dir: icons

source:
  env_var: GLYPHS_SOURCE
  marker: "const ALL_ICON_CATEGORIES"
  candidates: []

output:
  output_dir: metadata
  catalog_file: catalog.json
  categories_file: categories.json

reorg:
  legacy_dir: m365

warn_on_duplicates: false
'''


def cmd_init(_args: argparse.Namespace) -> int:
    """Write a starter glyphs.yaml in the current directory."""
    config_path = Path.cwd() / DEFAULT_CONFIG_PATH
    if config_path.exists():
        print(f"Config already exists: {config_path}")
        return ExitCode.SUCCESS

    config_path.write_text(STARTER_CONFIG)
    print(f"Created {config_path}")
    print("\nNext steps:")
    print("  1. Point source.candidates (or GLYPHS_SOURCE) at the category declaration")
    print("  2. Run 'glyphs build' to write the indexes")
    return ExitCode.SUCCESS


def _add_config_arg(parser: argparse.ArgumentParser) -> None:
    """Add --config argument to a parser."""
    parser.add_argument(
        "--config",
        "-c",
        help=f"Path to config file (default: {DEFAULT_CONFIG_PATH})",
    )


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="glyphs",
        description="Build and query the icon catalog",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Show diagnostic log output")

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser(
        "init",
        help="Write a starter glyphs.yaml",
    )

    build_parser = subparsers.add_parser(
        "build",
        help="Build catalog.json and categories.json",
    )
    _add_config_arg(build_parser)
    build_parser.add_argument(
        "--mode",
        choices=MODES,
        help="walk: scan the icon tree; manifest: follow category icon lists",
    )
    build_parser.add_argument("--source", help="Category source file (overrides config and environment)")

    reorg_parser = subparsers.add_parser(
        "reorg",
        help="Move legacy flat icons into the collection layout",
    )
    _add_config_arg(reorg_parser)
    reorg_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print intended moves without changing anything",
    )

    query_parser = subparsers.add_parser(
        "query",
        help="Query the catalog",
    )
    _add_config_arg(query_parser)
    query_parser.add_argument("--search", help="Icons matching every word")
    query_parser.add_argument("--collection", help="Icons in a collection")
    query_parser.add_argument("--category", help="Icons in a category")
    query_parser.add_argument("--summary", action="store_true", help="Show summary stats without full data")
    query_parser.add_argument("--page", type=int, default=1, help=f"Result page, {PAGE_SIZE} icons per page (default: 1)")

    status_parser = subparsers.add_parser(
        "status",
        help="Show catalog status",
    )
    _add_config_arg(status_parser)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s: %(name)s: %(message)s",
    )

    commands = {
        "init": cmd_init,
        "build": cmd_build,
        "reorg": cmd_reorg,
        "query": cmd_query,
        "status": cmd_status,
    }

    return commands[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
