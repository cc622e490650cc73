"""``trellis resolve`` — show the routes a path would enter.

Runs only the resolution pass, so no listener is called and the tree is
left untouched.
"""

import argparse
import sys

from trellis.cli._resolve import load_router
from trellis.errors import AmbiguousMatchError


def run_resolve(args: argparse.Namespace) -> None:
    router = load_router(args)
    try:
        plan = router.plan(args.path)
    except AmbiguousMatchError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    if not plan.steps:
        print(f"No route matches {args.path!r}")
        raise SystemExit(1)

    for step in plan.steps:
        params = ", ".join(f"{k}={v!r}" for k, v in step.match.parameters.items())
        matched = step.match.matched or "(default)"
        print(f"{router.tree.dotted_name(step.node)}  {matched}  {params}".rstrip())
    if plan.steps[-1].match.tail:
        print(f"unmatched: {plan.steps[-1].match.tail}")
