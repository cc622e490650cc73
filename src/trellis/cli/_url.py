"""``trellis url`` — compose the address for a dotted route path."""

import argparse
import sys

from trellis.cli._resolve import load_router
from trellis.errors import MissingParameterError, NoActiveRouteError, UnknownRouteError


def parse_params(pairs: list[str]) -> dict[str, str]:
    """Parse ``KEY=VALUE`` arguments. Raises ``ValueError`` on a missing ``=``."""
    params: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            msg = f"Expected KEY=VALUE, got {pair!r}"
            raise ValueError(msg)
        params[key] = value
    return params


def run_url(args: argparse.Namespace) -> None:
    router = load_router(args)
    try:
        params = parse_params(args.params)
        print(router.url_for(args.route_path, params))
    except (ValueError, UnknownRouteError, NoActiveRouteError, MissingParameterError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
