"""Burrow CLI: burrow build / burrow dev.

Entry point for the ``burrow`` command-line interface.
"""

from __future__ import annotations

import argparse
import sys


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the burrow CLI."""
    parser = argparse.ArgumentParser(
        prog="burrow",
        description="Route-directory site builder with an on-demand dev server.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {_get_version()}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # burrow build
    build_parser = subparsers.add_parser(
        "build",
        help="Build every route into the build directory",
    )
    build_parser.add_argument("root", nargs="?", default=".", help="Project root directory")
    build_parser.add_argument("--output", default=None, help="Build directory (default: from config)")
    build_parser.add_argument(
        "--watch", action="store_true", help="Rebuild whenever routes or config change",
    )

    # burrow dev
    dev_parser = subparsers.add_parser(
        "dev",
        help="Serve routes on demand with live reload",
    )
    dev_parser.add_argument("root", nargs="?", default=".", help="Project root directory")
    dev_parser.add_argument("--host", default=None, help="Bind address (default: 127.0.0.1)")
    dev_parser.add_argument("--port", type=int, default=None, help="Bind port (default: 8080)")

    return parser


def _get_version() -> str:
    """Get the package version."""
    from burrow import __version__

    return __version__


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    from burrow._errors import BurrowError
    from burrow.app import build, dev
    from burrow.banner import print_error

    try:
        if args.command == "build":
            build(root=args.root, watch=args.watch, build_dir=args.output)
        elif args.command == "dev":
            dev(root=args.root, host=args.host, port=args.port)
    except BurrowError as exc:
        print_error(str(exc))
        sys.exit(1)


if __name__ == "__main__":
    main()
