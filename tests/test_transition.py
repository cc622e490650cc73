"""Tests for trellis.routing.transition — leave, decide, commit."""

from collections.abc import Mapping
from typing import Any

import anyio
import pytest

from trellis.routing.events import LeaveEvent, RouteEvent
from trellis.routing.matcher import UrlMatch
from trellis.routing.resolver import plan_transition
from trellis.routing.transition import await_votes, commit, run_transition
from trellis.routing.tree import RouteTree


async def _resolves(value: bool) -> bool:
    await anyio.sleep(0)
    return value


async def _raises() -> bool:
    raise RuntimeError("vote failed")


@pytest.fixture
def tree() -> RouteTree:
    tree = RouteTree()
    users = tree.root.add_route("users", "/users/:id")
    users.add_route("profile", "/profile")
    users.add_route("posts", "/posts")
    tree.root.add_route("about", "/about")
    return tree


async def _go(tree: RouteTree, path: str) -> bool:
    return await run_transition(tree, plan_transition(tree, 0, path))


def _snapshot(tree: RouteTree) -> list[tuple[int | None, RouteEvent | None]]:
    return [(tree.node(k).active, tree.node(k).last_event) for k in range(len(tree))]


class TestAwaitVotes:
    @pytest.mark.anyio
    async def test_empty_allows(self) -> None:
        assert await await_votes([]) is True

    @pytest.mark.anyio
    async def test_all_true(self) -> None:
        assert await await_votes([True, _resolves(True), _resolves(True)]) is True

    @pytest.mark.anyio
    async def test_one_false(self) -> None:
        assert await await_votes([_resolves(True), _resolves(False)]) is False

    @pytest.mark.anyio
    async def test_immediate_false(self) -> None:
        assert await await_votes([False, _resolves(True)]) is False

    @pytest.mark.anyio
    async def test_raising_vote_rejects(self, caplog: pytest.LogCaptureFixture) -> None:
        assert await await_votes([_resolves(True), _raises()]) is False
        assert "treating it as a veto" in caplog.text


class TestRunTransition:
    @pytest.mark.anyio
    async def test_enters_chain_top_down(self, tree: RouteTree) -> None:
        order: list[str] = []
        users = tree.root.child("users")
        users.on_enter.listen(lambda e: order.append(f"users {e.parameters}"))
        users.child("profile").on_enter.listen(lambda e: order.append(f"profile {e.path}"))

        assert await _go(tree, "/users/42/profile") is True

        assert order == ["users {'id': '42'}", "profile /profile"]
        assert tree.root.active_child == users
        assert users.active_child == users.child("profile")
        assert users.last_event == RouteEvent("/users/42", {"id": "42"})

    @pytest.mark.anyio
    async def test_leave_runs_over_whole_old_chain(self, tree: RouteTree) -> None:
        left: list[tuple[str, str]] = []
        users = tree.root.child("users")
        users.on_leave.listen(lambda e: left.append(("users", e.path)))
        users.child("profile").on_leave.listen(lambda e: left.append(("profile", e.path)))
        await _go(tree, "/users/42/profile")

        await _go(tree, "/about")

        # Every level sees the incoming match
        assert left == [("users", "/about"), ("profile", "/about")]
        assert tree.active_chain() == [tree.root.child("about").key]
        assert users.active_child is None

    @pytest.mark.anyio
    async def test_each_level_gets_its_own_event(self, tree: RouteTree) -> None:
        events: list[LeaveEvent] = []
        users = tree.root.child("users")
        users.on_leave.listen(events.append)
        users.child("profile").on_leave.listen(events.append)
        await _go(tree, "/users/42/profile")

        await _go(tree, "/about")

        assert len(events) == 2
        assert events[0] is not events[1]

    @pytest.mark.anyio
    async def test_veto_keeps_tree_untouched(self, tree: RouteTree) -> None:
        users = tree.root.child("users")
        await _go(tree, "/users/42/profile")
        users.child("profile").on_leave.listen(lambda e: e.allow_leave(_resolves(False)))
        before = _snapshot(tree)

        assert await _go(tree, "/users/7/posts") is False

        assert _snapshot(tree) == before

    @pytest.mark.anyio
    async def test_returned_awaitable_is_a_vote(self, tree: RouteTree) -> None:
        users = tree.root.child("users")
        users.on_leave.listen(lambda e: _resolves(False))
        await _go(tree, "/users/1")

        assert await _go(tree, "/about") is False
        assert tree.root.active_child == users

    @pytest.mark.anyio
    async def test_true_votes_allow(self, tree: RouteTree) -> None:
        users = tree.root.child("users")
        users.on_leave.listen(lambda e: e.allow_leave(_resolves(True)))
        users.on_leave.listen(lambda e: e.allow_leave(True))
        await _go(tree, "/users/1")

        assert await _go(tree, "/about") is True

    @pytest.mark.anyio
    async def test_revalidation_refreshes_without_enter(self, tree: RouteTree) -> None:
        users = tree.root.child("users")
        entered: list[str] = []
        users.on_enter.listen(lambda e: entered.append("users"))
        users.child("profile").on_enter.listen(lambda e: entered.append("profile"))
        users.child("posts").on_enter.listen(lambda e: entered.append("posts"))
        await _go(tree, "/users/42/profile")
        entered.clear()

        assert await _go(tree, "/users/42/posts") is True

        assert entered == ["posts"]
        assert users.active_child == users.child("posts")

    @pytest.mark.anyio
    async def test_same_path_twice_is_quiet(self, tree: RouteTree) -> None:
        entered: list[RouteEvent] = []
        left: list[LeaveEvent] = []
        users = tree.root.child("users")
        users.on_enter.listen(entered.append)
        users.on_leave.listen(left.append)
        await _go(tree, "/users/42/profile")

        assert await _go(tree, "/users/42/profile") is True

        assert len(entered) == 1
        assert left == []

    @pytest.mark.anyio
    async def test_unmatched_tail_keeps_deeper_chain(self, tree: RouteTree) -> None:
        users = tree.root.child("users")
        profile = users.child("profile")
        left: list[str] = []
        profile.on_leave.listen(lambda e: left.append(e.path))
        profile.on_leave.listen(lambda e: e.allow_leave(False))
        await _go(tree, "/users/42/profile")

        assert await _go(tree, "/users/42") is True

        assert left == []
        assert tree.active_chain() == [users.key, profile.key]

    @pytest.mark.anyio
    async def test_async_enter_listener_is_awaited(self, tree: RouteTree) -> None:
        done: list[str] = []

        async def on_enter(event: RouteEvent) -> None:
            await anyio.sleep(0)
            done.append(event.path)

        tree.root.child("about").on_enter.listen(on_enter)

        assert await _go(tree, "/about") is True
        assert done == ["/about"]


class TestCommit:
    def test_clears_old_chain_before_installing(self, tree: RouteTree) -> None:
        users = tree.root.child("users")
        profile = users.child("profile")
        commit(tree, plan_transition(tree, 0, "/users/1/profile"))
        seen: list[int | None] = []
        tree.root.child("about").on_enter.listen(
            lambda e: seen.append(tree.node(users.key).active)
        )

        commit(tree, plan_transition(tree, 0, "/about"))

        assert seen == [None]
        assert profile.is_active is False


class _QueryMatcher:
    """Consumes a fixed prefix; parameters come from the query string."""

    def __init__(self, prefix: str) -> None:
        self.prefix = prefix

    def match(self, path: str) -> UrlMatch | None:
        if not path.startswith(self.prefix):
            return None
        tail = path[len(self.prefix) :]
        query = tail.partition("?")[2]
        params = dict(pair.split("=", 1) for pair in query.split("&") if "=" in pair)
        return UrlMatch(self.prefix, tail, params)

    def render(self, parameters: Mapping[str, Any], tail: str = "") -> str:
        return self.prefix + tail


class TestRevalidatedParameters:
    @pytest.fixture
    def search_tree(self) -> RouteTree:
        tree = RouteTree()
        search = tree.root.add_route("search", _QueryMatcher("/search"))
        search.add_route("results", "/results")
        search.add_route("saved", "/saved")
        return tree

    @pytest.mark.anyio
    async def test_refreshes_parameters_without_enter(self, search_tree: RouteTree) -> None:
        search = search_tree.root.child("search")
        entered: list[RouteEvent] = []
        search.on_enter.listen(entered.append)
        await _go(search_tree, "/search/results?q=a")

        assert await _go(search_tree, "/search/results?q=b") is True

        assert len(entered) == 1
        assert search.last_event == RouteEvent("/search", {"q": "b"})

    @pytest.mark.anyio
    async def test_veto_below_keeps_snapshot(self, search_tree: RouteTree) -> None:
        search = search_tree.root.child("search")
        results = search.child("results")
        await _go(search_tree, "/search/results?q=a")
        results.on_leave.listen(lambda e: e.allow_leave(_resolves(False)))
        before = search.last_event

        assert await _go(search_tree, "/search/saved?q=b") is False

        assert search.last_event is before
        assert search.last_event == RouteEvent("/search", {"q": "a"})
        assert search.active_child == results
