"""Path resolution — the pure half of a navigation.

``plan_transition`` walks the tree one level at a time and records what a
navigation *would* do without touching any node. The transition protocol
then runs the leave phase against the plan and, if allowed, commits it.
"""

import logging
import warnings
from dataclasses import dataclass

from trellis.errors import AmbiguousMatchError, AmbiguousMatchWarning
from trellis.routing.matcher import EMPTY_MATCH, UrlMatch
from trellis.routing.tree import RouteTree

logger = logging.getLogger("trellis.routing")


@dataclass(frozen=True, slots=True)
class LevelMatch:
    """The child selected at one level and how it matched."""

    node: int
    match: UrlMatch


@dataclass(frozen=True, slots=True)
class Step:
    """One level of a planned navigation.

    ``revalidate`` marks a level whose route is already entered with the
    same matched path: only its parameters are refreshed.
    """

    node: int
    match: UrlMatch
    revalidate: bool = False


@dataclass(frozen=True, slots=True)
class TransitionPlan:
    """Everything a navigation will change, computed up front.

    ``pivot`` is the deepest node whose active child stays as it is. When
    the plan enters something below it, the pivot's current active chain is
    what the leave phase asks about; otherwise that chain stays active.
    """

    start: int
    path: str
    pivot: int
    steps: tuple[Step, ...]

    @property
    def entering(self) -> tuple[Step, ...]:
        return tuple(s for s in self.steps if not s.revalidate)

    @property
    def replaces_chain(self) -> bool:
        """Whether the active chain below ``pivot`` is left and replaced."""
        return any(not s.revalidate for s in self.steps)

    @property
    def terminal(self) -> int:
        """Deepest node reached by this navigation."""
        return self.steps[-1].node if self.steps else self.start


def match_level(
    tree: RouteTree,
    key: int,
    path: str,
    *,
    strict: bool = False,
) -> LevelMatch | None:
    """Pick the child of *key* that accepts *path*.

    Every child is tried. When several match, the first registered wins
    and an ``AmbiguousMatchWarning`` is emitted (``AmbiguousMatchError``
    when *strict*). With no match the default child is selected with an
    empty match; without a default the level does not match.
    """
    node = tree.node(key)
    matches: list[LevelMatch] = []
    for child_key in node.children.values():
        matcher = tree.node(child_key).matcher
        if matcher is None:
            continue
        m = matcher.match(path)
        if m is not None:
            matches.append(LevelMatch(child_key, m))

    if len(matches) > 1:
        names = tuple(tree.node(lm.node).name or "" for lm in matches)
        if strict:
            raise AmbiguousMatchError(path, names)
        logger.warning("More than one route matches %r: %s", path, ", ".join(names))
        warnings.warn(
            f"More than one route matches {path!r}: {', '.join(names)}",
            AmbiguousMatchWarning,
            stacklevel=2,
        )

    if matches:
        return matches[0]
    if node.default is not None:
        return LevelMatch(node.default, EMPTY_MATCH)
    return None


def plan_transition(
    tree: RouteTree,
    start: int,
    path: str,
    *,
    strict: bool = False,
) -> TransitionPlan:
    """Resolve *path* below *start* into a ``TransitionPlan``.

    Descends while a level matches, feeding each winner's tail to the
    next level. Leading levels that are already entered with the same
    matched path become revalidation steps. A level that matches nothing
    ends the descent and leaves whatever is active below it in place.
    """
    steps: list[Step] = []
    pivot = start
    current = start
    remaining = path
    diverged = False

    while True:
        level = match_level(tree, current, remaining, strict=strict)
        if level is None:
            break
        if not diverged and _is_current(tree, current, level):
            steps.append(Step(level.node, level.match, revalidate=True))
            pivot = level.node
        else:
            diverged = True
            steps.append(Step(level.node, level.match))
        current = level.node
        remaining = level.match.tail

    logger.debug(
        "Resolved %r from %s: %s",
        path,
        tree.dotted_name(start) or "<root>",
        ".".join(tree.node(s.node).name or "" for s in steps) or "<no match>",
    )
    return TransitionPlan(start=start, path=path, pivot=pivot, steps=tuple(steps))


def _is_current(tree: RouteTree, parent: int, level: LevelMatch) -> bool:
    if tree.node(parent).active != level.node:
        return False
    last = tree.node(level.node).last_event
    return last is not None and last.path == level.match.matched
