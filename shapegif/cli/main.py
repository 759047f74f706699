"""Main CLI entry point for shapegif."""

from __future__ import annotations

import argparse
import logging
import sys

from .. import __version__
from .catalog_cli import build_catalog_parsers
from .render_cli import build_render_parser


def _common_options() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )
    return common


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="shapegif",
        description="Looping shape animations to animated GIF or PNG frames",
    )
    parser.add_argument("--version", action="version", version=f"shapegif {__version__}")
    subparsers = parser.add_subparsers(dest="command")
    common = [_common_options()]
    build_render_parser(subparsers, parents=common)
    build_catalog_parsers(subparsers, parents=common)
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return 0
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    return args.func(args)


def cli_entry() -> None:
    sys.exit(main())
