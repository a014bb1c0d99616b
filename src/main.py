# src/main.py — v1
"""CLI entry point — convert and cache commands.

Usage:
    inkrecipe convert <hex> [<hex> ...] [--json]
    inkrecipe cache
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from inkrecipe.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        _setup_logging(args.verbose)
        return asyncio.run(args.func(args))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="inkrecipe",
        description=f"inkrecipe v{__version__} — CMYK print recipes for hex colors",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- convert ---
    p_convert = subparsers.add_parser(
        "convert", help="Compute print recipes for one or more colors",
    )
    p_convert.add_argument("hex_codes", nargs="+", metavar="HEX", help="Hex colors")
    p_convert.add_argument(
        "--json", action="store_true", dest="as_json",
        help="Print results as JSON",
    )
    p_convert.set_defaults(func=_cmd_convert)

    # --- cache ---
    p_cache = subparsers.add_parser(
        "cache", help="Show recipe cache statistics",
    )
    p_cache.set_defaults(func=_cmd_cache)

    return parser


async def _cmd_convert(args: argparse.Namespace) -> int:
    """Resolve a batch and print both recipes per color."""
    from inkrecipe.api.facade import convert_colors
    from inkrecipe.config.settings import load_settings

    settings = load_settings()
    if not settings.remote_enabled:
        logger.info("No remote credential configured, using heuristic recipes")

    results = await convert_colors(args.hex_codes, settings=settings)

    if args.as_json:
        payload = [r.model_dump(mode="json") for r in results.values()]
        print(json.dumps(payload, indent=2))
        return 0

    for result in results.values():
        std = result.conversions.standard_auto
        smart = result.conversions.smart_print_recipe
        print(f"\n{result.input_hex}  ({result.source})")
        print(f"  Standard:  C{std.c} M{std.m} Y{std.y} K{std.k}")
        print(f"  Smart:     C{smart.c} M{smart.m} Y{smart.y} K{smart.k}  [{smart.paper_type}]")
        print(f"             {smart.modifications_made}")
    return 0


async def _cmd_cache(args: argparse.Namespace) -> int:
    """Display recipe cache statistics."""
    from inkrecipe.cache.cache_factory import create_recipe_cache
    from inkrecipe.config.settings import load_settings

    cache = create_recipe_cache(load_settings())
    try:
        stats = cache.stats()
    finally:
        cache.close()

    print(f"\nRecipe cache ({stats.backend}):")
    print(f"  Entries:    {stats.entry_count} / {stats.max_entries}")
    for source, count in sorted(stats.by_source.items()):
        print(f"  {source + ':':11s} {count}")
    return 0


def _setup_logging(verbose: bool) -> None:
    """Configure logging for CLI usage."""
    from inkrecipe.config.settings import load_settings
    from inkrecipe.logging.logger import setup_logging

    settings = load_settings()
    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=settings.log_file,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )


if __name__ == "__main__":
    sys.exit(main())
