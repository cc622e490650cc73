"""Trellis router.

Owns a route tree and exposes the public navigation operations:

- ``dispatch(path)``: resolve and enter *path*, no address change
- ``navigate(route_path, parameters)``: compose the address, dispatch,
  push it to the navigation source on success
- ``url_for(route_path, parameters)``: compose an address, no side effects
- ``bind(source)``: follow a navigation source's address changes and
  link activations until cancelled
"""

import logging
from collections.abc import Awaitable, Callable, Mapping
from functools import partial
from typing import Any

import anyio
from anyio.abc import TaskGroup, TaskStatus

from trellis.config import RouterConfig
from trellis.errors import NoActiveRouteError
from trellis.history import LinkActivation, NavigationSource
from trellis.routing.matcher import Matcher
from trellis.routing.resolver import TransitionPlan, plan_transition
from trellis.routing.transition import run_transition
from trellis.routing.tree import EventHandler, LeaveHandler, Mount, Route, RouteTree
from trellis.routing.urls import build_absolute, build_tail, render_url

logger = logging.getLogger("trellis.router")


class _NullLock:
    """Stand-in for ``anyio.Lock`` when navigations are not serialized."""

    async def __aenter__(self) -> None:
        return None

    async def __aexit__(self, *exc_info: object) -> None:
        return None


class Router:
    """Route tree plus the operations that navigate it.

    Usage::

        router = Router()
        users = router.add_route("users", "/users/:id")
        users.add_route("profile", "/profile")

        await router.navigate("users.profile", {"id": "42"})
        router.url_for("users.profile", {"id": "7"})  # "/users/7/profile"

    Thread safety:
        Registration is single-threaded (at startup). Navigations are
        serialized per router with an ``anyio.Lock`` so two overlapping
        navigations cannot race on the active chain.
    """

    __slots__ = ("_lock", "_source", "config", "tree")

    def __init__(
        self,
        config: RouterConfig | None = None,
        *,
        source: NavigationSource | None = None,
    ) -> None:
        self.config: RouterConfig = config or RouterConfig()
        self.tree: RouteTree = RouteTree()
        self._source: NavigationSource | None = source
        self._lock: anyio.Lock | _NullLock = (
            anyio.Lock() if self.config.serialize_navigations else _NullLock()
        )

    # -- Registration --

    @property
    def root(self) -> Route:
        return self.tree.root

    @property
    def source(self) -> NavigationSource | None:
        return self._source

    def add_route(
        self,
        name: str,
        path: str | Matcher,
        *,
        default: bool = False,
        enter: EventHandler | None = None,
        leave: LeaveHandler | None = None,
        mount: Mount | None = None,
    ) -> Route:
        """Register a top-level route. See ``Route.add_route``."""
        return self.root.add_route(
            name, path, default=default, enter=enter, leave=leave, mount=mount
        )

    def get_route(self, route_path: str) -> Route | None:
        """Return the route at dotted *route_path*, or ``None`` if unknown."""
        return self.root.get_route(route_path)

    @property
    def active_names(self) -> tuple[str, ...]:
        """Names along the active chain, root first."""
        return tuple(self.tree.node(k).name or "" for k in self.tree.active_chain())

    # -- Navigation --

    async def dispatch(self, path: str, *, start: Route | None = None) -> bool:
        """Resolve *path* below *start* (default: root) and enter it.

        Does not touch the navigation source; use ``navigate`` or
        ``goto_url`` for that. Returns ``False`` if a leave listener
        vetoed the transition.
        """
        async with self._lock:
            return await self._dispatch(self._strip(path), self._start_key(start))

    async def navigate(
        self,
        route_path: str,
        parameters: Mapping[str, Any] | None = None,
        *,
        start: Route | None = None,
        replace: bool = False,
        title: str | None = None,
    ) -> bool:
        """Navigate to dotted *route_path* with *parameters*.

        Composes the tail below *start* and the absolute address, dispatches
        the tail, and pushes the address to the navigation source only if
        the transition was accepted.

        Raises:
            UnknownRouteError: *route_path* names an unregistered route.
            NoActiveRouteError: *start* is not on the active chain.
            MissingParameterError: a matcher needs a parameter nobody supplied.
        """
        async with self._lock:
            key = self._start_key(start)
            tail = build_tail(self.tree, key, route_path, parameters)
            url = build_absolute(self.tree, key, tail)
            logger.debug("navigate %s -> %s", route_path, url)
            accepted = await self._dispatch(tail, key)
            if accepted:
                self._push(url, title, replace)
            return accepted

    async def goto_url(self, url: str, *, replace: bool = False, title: str | None = None) -> bool:
        """Dispatch a literal address and push it on success."""
        async with self._lock:
            path = self._strip(url)
            accepted = await self._dispatch(path, self.tree.root.key)
            if accepted:
                self._push(path, title, replace)
            return accepted

    def url_for(
        self,
        route_path: str,
        parameters: Mapping[str, Any] | None = None,
        *,
        start: Route | None = None,
    ) -> str:
        """Absolute address for *route_path*, without navigating.

        Routes outside the addressed subtree keep their current values.
        """
        key = self.tree.root.key if start is None else start.key
        url = render_url(self.tree, key, route_path, parameters)
        return self._address(url)

    def plan(self, path: str, *, start: Route | None = None) -> TransitionPlan:
        """Resolve *path* without entering anything."""
        key = self.tree.root.key if start is None else start.key
        return plan_transition(
            self.tree, key, self._strip(path), strict=self.config.strict_matching
        )

    async def _dispatch(self, path: str, key: int) -> bool:
        plan = plan_transition(self.tree, key, path, strict=self.config.strict_matching)
        return await run_transition(self.tree, plan)

    def _start_key(self, start: Route | None) -> int:
        if start is None:
            return self.tree.root.key
        if start.tree is not self.tree:
            msg = f"{start} belongs to a different router"
            raise ValueError(msg)
        if not start.is_active:
            msg = f"Cannot navigate from {start}: it is not on the active chain"
            raise NoActiveRouteError(msg)
        return start.key

    # -- Navigation source --

    async def bind(
        self,
        source: NavigationSource,
        *,
        task_status: TaskStatus[None] = anyio.TASK_STATUS_IGNORED,
    ) -> None:
        """Follow *source* until cancelled.

        Dispatches the current address (unless ``dispatch_initial`` is off),
        then dispatches every address change and, with ``intercept_links``,
        takes over same-origin link activations.

        Run it in a task group::

            async with anyio.create_task_group() as tg:
                await tg.start(router.bind, history)
                ...
                tg.cancel_scope.cancel()
        """
        self._source = source
        async with anyio.create_task_group() as tg:
            subscriptions = [
                source.on_address_change.listen(partial(self._on_address_change, tg))
            ]
            if self.config.intercept_links:
                subscriptions.append(
                    source.on_link_activated.listen(partial(self._on_link_activated, tg))
                )
            try:
                if self.config.dispatch_initial:
                    await self.dispatch(source.current_address())
                task_status.started()
                await anyio.sleep_forever()
            finally:
                for sub in subscriptions:
                    sub.cancel()

    def _on_address_change(self, tg: TaskGroup, address: str) -> None:
        tg.start_soon(self._follow, self.dispatch, address)

    def _on_link_activated(self, tg: TaskGroup, activation: LinkActivation) -> None:
        if activation.external:
            return
        activation.prevent_default()
        tg.start_soon(self._follow, self.goto_url, activation.path)

    async def _follow(
        self, operation: Callable[[str], Awaitable[bool]], address: str
    ) -> None:
        try:
            await operation(address)
        except Exception:
            logger.exception("Navigation to %r failed; still following the source", address)

    def _push(self, path: str, title: str | None, replace: bool) -> None:
        if self._source is None:
            logger.debug("No navigation source bound; not pushing %s", path)
            return
        title = self.config.default_title if title is None else title
        self._source.push(self._address(path), title, replace)

    def _address(self, path: str) -> str:
        return f"#{path}" if self.config.use_fragment else path

    def _strip(self, address: str) -> str:
        if self.config.use_fragment and address.startswith("#"):
            return address[1:]
        return address
