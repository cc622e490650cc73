"""Transition protocol — leave, decide, commit.

Given a ``TransitionPlan``:

    1. Leave: when the plan enters a new route, publish a fresh
       ``LeaveEvent`` on every route of the active chain below the plan's
       pivot and collect the votes attached to them
    2. Decide: await all votes concurrently (anyio task group); any false
       vote aborts and the tree is left exactly as it was
    3. Commit: refresh revalidated levels, clear the old chain deepest
       first, then install and announce each entered route top-down

The tree is only mutated in step 3, which never suspends.
"""

import inspect
import logging
from collections.abc import Awaitable, Sequence
from typing import Any

import anyio

from trellis.routing.events import LeaveEvent, RouteEvent, Vote
from trellis.routing.resolver import TransitionPlan
from trellis.routing.tree import RouteTree

logger = logging.getLogger("trellis.routing")


def collect_leave_votes(tree: RouteTree, plan: TransitionPlan) -> tuple[Vote, ...]:
    """Notify the chain being left and return every vote cast.

    Each level gets its own ``LeaveEvent`` describing the incoming match,
    so votes stay attached to the event they were cast on. A plan that
    enters nothing leaves nothing.
    """
    if not plan.replaces_chain:
        return ()
    incoming = plan.entering[0].match
    votes: list[Vote] = []
    for key in tree.active_chain(plan.pivot):
        event = LeaveEvent(incoming.matched, dict(incoming.parameters))
        results = tree.node(key).on_leave.publish(event)
        votes.extend(event.votes)
        votes.extend(_as_vote(result) for result in results)
    return tuple(votes)


async def await_votes(votes: Sequence[Vote]) -> bool:
    """Resolve *votes* concurrently and AND them together.

    An empty set of votes allows the transition. A vote that raises is
    logged and counts as a rejection.
    """
    pending = [v for v in votes if not isinstance(v, bool)]
    if any(v is False for v in votes):
        # Already decided; still drive the pending votes so none leak
        # unawaited, but their answers cannot change the outcome.
        await _resolve_all(pending)
        return False
    if not pending:
        return True
    results = await _resolve_all(pending)
    return all(results)


async def _resolve_all(pending: Sequence[Awaitable[Any]]) -> list[bool]:
    results: list[bool] = [False] * len(pending)

    async def _resolve(index: int, awaitable: Awaitable[Any]) -> None:
        value = await awaitable
        results[index] = True if value is None else bool(value)

    try:
        async with anyio.create_task_group() as tg:
            for index, awaitable in enumerate(pending):
                tg.start_soon(_resolve, index, awaitable)
    except Exception:
        logger.exception("Leave vote failed; treating it as a veto")
        return [False]
    return results


def commit(tree: RouteTree, plan: TransitionPlan) -> list[Awaitable[Any]]:
    """Apply *plan* to the tree and fire enter events.

    Returns awaitables produced by enter listeners, for the caller to
    drive once the whole chain is installed.
    """
    pending: list[Awaitable[Any]] = []
    for step in plan.steps:
        if step.revalidate:
            tree.node(step.node).last_event = RouteEvent.from_match(step.match)

    if not plan.replaces_chain:
        return pending
    _clear_active(tree, plan.pivot)

    parent = plan.pivot
    for step in plan.entering:
        node = tree.node(step.node)
        event = RouteEvent.from_match(step.match)
        tree.node(parent).active = step.node
        node.last_event = event
        logger.debug("Entering %s with %r", tree.dotted_name(step.node), event.parameters)
        for result in node.on_enter.publish(event):
            if inspect.isawaitable(result):
                pending.append(result)
        parent = step.node
    return pending


def _clear_active(tree: RouteTree, key: int) -> None:
    """Unset the active chain below *key*, child before parent."""
    node = tree.node(key)
    if node.active is not None:
        _clear_active(tree, node.active)
        node.active = None


async def run_transition(tree: RouteTree, plan: TransitionPlan) -> bool:
    """Run the leave/decide/commit protocol for *plan*.

    Returns ``False`` when a leave vote rejected the navigation.
    """
    votes = collect_leave_votes(tree, plan)
    if votes and not await await_votes(votes):
        logger.info(
            "Navigation to %r vetoed while leaving %s",
            plan.path,
            ".".join(tree.node(k).name or "" for k in tree.active_chain(plan.pivot)),
        )
        return False

    pending = commit(tree, plan)
    if pending:
        await _drive_enter_listeners(pending)
    return True


async def _drive_enter_listeners(pending: list[Awaitable[Any]]) -> None:
    async def _run(awaitable: Awaitable[Any]) -> None:
        await awaitable

    try:
        async with anyio.create_task_group() as tg:
            for awaitable in pending:
                tg.start_soon(_run, awaitable)
    except Exception:
        logger.exception("Enter listener failed")


def _as_vote(result: object) -> Vote:
    if isinstance(result, bool) or inspect.isawaitable(result):
        return result
    return bool(result)
