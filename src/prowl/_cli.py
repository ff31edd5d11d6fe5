"""Prowl CLI — prowl routes / prowl openapi.

Entry point for the ``prowl`` command-line interface.  TARGET names the
controllers to resolve as ``module:attribute``; the attribute may be a
controller instance, a controller class (instantiated with no
arguments), or a list/tuple of either.
"""

from __future__ import annotations

import argparse
import importlib
import sys
from pathlib import Path

from prowl._errors import ConfigError, ProwlError


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the prowl CLI."""
    parser = argparse.ArgumentParser(
        prog="prowl",
        description="Convention-based route tables for Python controllers.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {_get_version()}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # prowl routes
    routes_parser = subparsers.add_parser(
        "routes",
        help="List the routes resolved from controllers",
    )
    routes_parser.add_argument("target", help="Controllers as module:attribute")
    routes_parser.add_argument("--root", default=".", help="Directory holding prowl.yaml")
    routes_parser.add_argument(
        "--no-skipped", action="store_true", help="Hide skipped methods",
    )

    # prowl openapi
    openapi_parser = subparsers.add_parser(
        "openapi",
        help="Write an OpenAPI YAML document for the controllers",
    )
    openapi_parser.add_argument("target", help="Controllers as module:attribute")
    openapi_parser.add_argument("--root", default=".", help="Directory holding prowl.yaml")
    openapi_parser.add_argument("--output", default="openapi.yaml", help="Output file")
    openapi_parser.add_argument("--title", default=None, help="API title")

    return parser


def _get_version() -> str:
    """Get the package version."""
    from prowl import __version__

    return __version__


def load_target(target: str) -> tuple[object, ...]:
    """Import ``module:attribute`` and return the controller instances.

    Raises:
        ConfigError: If the target cannot be imported or resolved.

    """
    module_name, sep, attribute = target.partition(":")
    if not sep or not module_name or not attribute:
        msg = f"Target must look like 'module:attribute', got {target!r}"
        raise ConfigError(msg)

    if "" not in sys.path and "." not in sys.path:
        sys.path.insert(0, "")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        msg = f"Cannot import {module_name!r}: {exc}"
        raise ConfigError(msg) from exc

    value: object = module
    for part in attribute.split("."):
        try:
            value = getattr(value, part)
        except AttributeError as exc:
            msg = f"{module_name!r} has no attribute {attribute!r}"
            raise ConfigError(msg) from exc

    items = value if isinstance(value, (list, tuple)) else (value,)
    return tuple(item() if isinstance(item, type) else item for item in items)


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    from prowl.banner import print_routes
    from prowl.config_loader import load_config
    from prowl.engine import build

    try:
        config = load_config(Path(args.root))
        controllers = load_target(args.target)
        result = build(*controllers, config=config)

        if args.command == "routes":
            print_routes(result, show_skipped=not args.no_skipped)
        elif args.command == "openapi":
            from prowl.export.openapi import write_openapi_yaml

            written = write_openapi_yaml(
                result.metadata,
                Path(args.output),
                title=args.title or config.openapi_title,
                version=config.openapi_version,
            )
            print(f"Wrote {written}", file=sys.stderr)
    except ProwlError as exc:
        print(f"prowl: error: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
