"""Trellis CLI — inspect a route tree without running the app.

Entry point registered as ``trellis`` in ``pyproject.toml``::

    [project.scripts]
    trellis = "trellis.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``trellis`` command."""
    parser = argparse.ArgumentParser(
        prog="trellis",
        description="Trellis — nested route trees with vetoable transitions.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- trellis routes ---------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="Print the route tree")
    routes_parser.add_argument("router", help="Import string (e.g. myapp:router)")

    # -- trellis resolve --------------------------------------------------
    resolve_parser = subparsers.add_parser(
        "resolve", help="Show which routes a path would enter"
    )
    resolve_parser.add_argument("router", help="Import string (e.g. myapp:router)")
    resolve_parser.add_argument("path", help="Path to resolve (e.g. /users/42/profile)")

    # -- trellis url ------------------------------------------------------
    url_parser = subparsers.add_parser("url", help="Compose the address for a route")
    url_parser.add_argument("router", help="Import string (e.g. myapp:router)")
    url_parser.add_argument("route_path", help="Dotted route path (e.g. users.profile)")
    url_parser.add_argument(
        "params",
        nargs="*",
        metavar="KEY=VALUE",
        help="Route parameters",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "routes":
        from trellis.cli._routes import run_routes

        run_routes(args)
    elif args.command == "resolve":
        from trellis.cli._plan import run_resolve

        run_resolve(args)
    elif args.command == "url":
        from trellis.cli._url import run_url

        run_url(args)
