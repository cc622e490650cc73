"""``trellis routes`` — print the route tree.

One row per route with its dotted name, matcher, and flags.
"""

import argparse

from trellis.cli._resolve import load_router
from trellis.routing.tree import Route


def describe_matcher(route: Route) -> str:
    matcher = route.matcher
    template = getattr(matcher, "template", None)
    if isinstance(template, str):
        return template
    return repr(matcher)


def run_routes(args: argparse.Namespace) -> None:
    """Print every registered route, indented by depth."""
    router = load_router(args)
    routes = list(router.root.walk())
    if not routes:
        print("No routes registered.")
        return

    # Build rows: (indented name, matcher, flags)
    rows: list[tuple[str, str, str]] = []
    for route in routes:
        depth = route.dotted_name.count(".")
        flags: list[str] = []
        parent = route.parent
        if parent is not None and parent.default_route == route:
            flags.append("default")
        if route.is_active:
            flags.append("active")
        rows.append(("  " * depth + (route.name or ""), describe_matcher(route), ", ".join(flags)))

    max_name = max(max(len(r[0]) for r in rows), 5)  # "ROUTE" header
    max_path = max(max(len(r[1]) for r in rows), 4)  # "PATH" header

    fmt = f"{{:<{max_name}}}  {{:<{max_path}}}  {{}}"
    print(fmt.format("ROUTE", "PATH", "FLAGS").rstrip())
    sep_len = max_name + max_path + 4 + max((len(r[2]) for r in rows), default=0)
    print("-" * min(sep_len, 80))
    for name, path, flags in rows:
        print(fmt.format(name, path, flags).rstrip())
