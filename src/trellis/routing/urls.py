"""URL composition from dotted route paths.

Two halves:

- ``build_tail`` walks *down* from a route through the named children,
  rendering each child's matcher with the caller's parameters layered
  over that child's last captured parameters.
- ``build_absolute`` walks *up* from a route, wrapping the tail in every
  ancestor's currently active match so branches outside the addressed
  subtree keep their current values.
"""

from collections.abc import Mapping
from typing import Any

from trellis.errors import NoActiveRouteError, UnknownRouteError
from trellis.routing.matcher import Matcher
from trellis.routing.tree import RouteTree


def build_tail(
    tree: RouteTree,
    key: int,
    route_path: str,
    parameters: Mapping[str, Any] | None = None,
) -> str:
    """Render the path below *key* for dotted *route_path*.

    Explicit *parameters* override those captured by the last match of
    each route on the way down.

    Raises ``UnknownRouteError`` if a name in *route_path* is not a child.
    """
    parameters = parameters or {}
    head, _, rest = route_path.partition(".")
    child_key = tree.child(key, head) if head else None
    if child_key is None:
        raise UnknownRouteError(head, route_path)

    tail = build_tail(tree, child_key, rest, parameters) if rest else ""
    child = tree.node(child_key)
    merged = _join_params(parameters, child.last_event.parameters if child.last_event else None)
    return _matcher(tree, child_key).render(merged, tail)


def build_absolute(tree: RouteTree, key: int, tail: str) -> str:
    """Wrap *tail* in the active matches of *key* and all its ancestors.

    Raises ``NoActiveRouteError`` if *key* is not on the active chain.
    """
    node = tree.node(key)
    if node.parent is None:
        return tail
    parent = tree.node(node.parent)
    if parent.active is None:
        msg = f"Route {tree.dotted_name(node.parent) or '<root>'} has no active route"
        raise NoActiveRouteError(msg)
    if parent.active != key:
        msg = (
            f"Route {tree.dotted_name(key)} is not active "
            f"(active sibling: {tree.dotted_name(parent.active)})"
        )
        raise NoActiveRouteError(msg)
    if node.last_event is None:
        msg = f"Route {tree.dotted_name(key)} is active but was never entered"
        raise RuntimeError(msg)
    head = _matcher(tree, key).render(node.last_event.parameters, tail)
    return build_absolute(tree, node.parent, head)


def render_url(
    tree: RouteTree,
    key: int,
    route_path: str,
    parameters: Mapping[str, Any] | None = None,
) -> str:
    """Absolute URL for *route_path* relative to *key*."""
    return build_absolute(tree, key, build_tail(tree, key, route_path, parameters))


def _matcher(tree: RouteTree, key: int) -> Matcher:
    matcher = tree.node(key).matcher
    if matcher is None:
        msg = f"Route {tree.dotted_name(key) or '<root>'} has no matcher"
        raise RuntimeError(msg)
    return matcher


def _join_params(
    parameters: Mapping[str, Any],
    captured: Mapping[str, Any] | None,
) -> dict[str, Any]:
    if not captured:
        return dict(parameters)
    return {**captured, **parameters}
