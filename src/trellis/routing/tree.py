"""Route tree — an arena of route nodes plus the ``Route`` handle.

Nodes live in a ``RouteTree`` and refer to each other by integer key:
the parent owns its children by key, the child records its parent's key.
Application code never touches ``RouteNode`` directly. It works with
``Route``, an immutable ``(tree, key)`` handle that exposes registration,
lookup and the enter/leave channels.

Only the transition protocol mutates ``RouteNode.active`` and
``RouteNode.last_event``. Everything else is fixed once registered.
"""

import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import Protocol, TypeAlias

from trellis.channel import EventChannel, Subscription
from trellis.errors import (
    DuplicateRouteError,
    MissingRouteNameError,
    MultipleDefaultRoutesError,
    UnknownRouteError,
)
from trellis.routing.events import LeaveEvent, RouteEvent
from trellis.routing.matcher import Matcher, as_matcher

logger = logging.getLogger("trellis.routing")

ROOT_KEY = 0


@dataclass(slots=True, eq=False)
class RouteNode:
    """State for one vertex of the tree. Mutable, owned by a ``RouteTree``."""

    key: int
    name: str | None
    matcher: Matcher | None
    parent: int | None
    children: dict[str, int] = field(default_factory=dict)
    default: int | None = None
    # Key of the child currently entered (the next link of the active chain)
    active: int | None = None
    last_event: RouteEvent | None = None
    on_enter: EventChannel[RouteEvent] = field(default_factory=EventChannel)
    on_leave: EventChannel[LeaveEvent] = field(default_factory=EventChannel)


class RouteTree:
    """Arena holding every node of one route tree.

    Key ``0`` is the unnamed root. Nodes are appended on registration and
    never removed.
    """

    __slots__ = ("_nodes",)

    def __init__(self) -> None:
        self._nodes: list[RouteNode] = [RouteNode(key=ROOT_KEY, name=None, matcher=None, parent=None)]

    def __len__(self) -> int:
        return len(self._nodes)

    def node(self, key: int) -> RouteNode:
        return self._nodes[key]

    @property
    def root(self) -> "Route":
        return Route(self, ROOT_KEY)

    def add_child(
        self,
        parent_key: int,
        name: str,
        matcher: Matcher,
        *,
        default: bool = False,
    ) -> int:
        """Register a child node and return its key.

        All validation happens before the node is created, so a failed
        registration leaves the tree unchanged.
        """
        parent = self._nodes[parent_key]
        if not name:
            raise MissingRouteNameError()
        if name in parent.children:
            raise DuplicateRouteError(name, self.dotted_name(parent_key))
        if default and parent.default is not None:
            raise MultipleDefaultRoutesError(name, self._nodes[parent.default].name or "")

        key = len(self._nodes)
        self._nodes.append(RouteNode(key=key, name=name, matcher=matcher, parent=parent_key))
        parent.children[name] = key
        if default:
            parent.default = key
        return key

    def child(self, key: int, name: str) -> int | None:
        return self._nodes[key].children.get(name)

    def descendant(self, key: int, route_path: str) -> int | None:
        """Follow a dotted name down from *key*. Unknown segments log a warning."""
        current = key
        for name in route_path.split("."):
            found = self._nodes[current].children.get(name)
            if found is None:
                logger.warning(
                    "Invalid route name: %r in %r (known: %s)",
                    name,
                    route_path,
                    ", ".join(self._nodes[current].children) or "none",
                )
                return None
            current = found
        return current

    def dotted_name(self, key: int) -> str:
        names: list[str] = []
        node = self._nodes[key]
        while node.parent is not None:
            names.append(node.name or "")
            node = self._nodes[node.parent]
        return ".".join(reversed(names))

    def active_chain(self, key: int = ROOT_KEY) -> list[int]:
        """Keys of the active chain below *key*, top-down."""
        chain: list[int] = []
        current = self._nodes[key].active
        while current is not None:
            chain.append(current)
            current = self._nodes[current].active
        return chain

    def is_active(self, key: int) -> bool:
        """True if *key* is the root or sits on the active chain."""
        node = self._nodes[key]
        while node.parent is not None:
            parent = self._nodes[node.parent]
            if parent.active != node.key:
                return False
            node = parent
        return True


class Mount(Protocol):
    """Configures a freshly registered route's subtree.

    Accepts both functions and callable objects::

        # Function mount
        def admin_routes(route: Route) -> None:
            route.add_route("users", "/users")

        # Class mount
        class Dashboard:
            def __call__(self, route: Route) -> None:
                route.add_route("overview", "/overview", default=True)
    """

    def __call__(self, route: "Route") -> None: ...


EventHandler: TypeAlias = Callable[[RouteEvent], object]
LeaveHandler: TypeAlias = Callable[[LeaveEvent], object]


@dataclass(frozen=True, slots=True)
class Route:
    """Handle to one node of a ``RouteTree``.

    Handles are cheap and compare equal when they address the same node::

        users = router.root.add_route("users", "/users/:id")
        users.add_route("profile", "/profile")
        assert router.get_route("users.profile") == users.child("profile")
    """

    tree: RouteTree = field(repr=False)
    key: int

    @property
    def _node(self) -> RouteNode:
        return self.tree.node(self.key)

    # -- Registration --

    def add_route(
        self,
        name: str,
        path: "str | Matcher",
        *,
        default: bool = False,
        enter: EventHandler | None = None,
        leave: LeaveHandler | None = None,
        mount: Mount | None = None,
    ) -> "Route":
        """Register a child route and return its handle.

        Args:
            name: Unique among this route's children. Used in dotted paths.
            path: A ``Matcher`` or a template string (see ``UrlTemplate``).
            default: Enter this child when no sibling matches. At most one
                per parent; a default route never consumes any of the path.
            enter: Listener subscribed to the child's ``on_enter`` channel.
            leave: Listener subscribed to the child's ``on_leave`` channel.
            mount: Called with the new child to configure its subtree.

        Raises:
            MissingRouteNameError: *name* is empty.
            DuplicateRouteError: *name* is already registered here.
            MultipleDefaultRoutesError: a default child already exists.
        """
        matcher = as_matcher(path)
        key = self.tree.add_child(self.key, name, matcher, default=default)
        route = Route(self.tree, key)
        if enter is not None:
            route.on_enter.listen(enter)
        if leave is not None:
            route.on_leave.listen(leave)
        if mount is not None:
            mount(route)
        return route

    # -- Lookup --

    def child(self, name: str) -> "Route":
        """Return the direct child *name*. Raises ``UnknownRouteError``."""
        key = self.tree.child(self.key, name)
        if key is None:
            raise UnknownRouteError(name)
        return Route(self.tree, key)

    def get_route(self, route_path: str) -> "Route | None":
        """Return the descendant at dotted *route_path*, or ``None`` if unknown."""
        key = self.tree.descendant(self.key, route_path)
        if key is None:
            return None
        return Route(self.tree, key)

    def walk(self) -> Iterator["Route"]:
        """Yield every descendant depth-first in registration order."""
        for key in self._node.children.values():
            route = Route(self.tree, key)
            yield route
            yield from route.walk()

    # -- Introspection --

    @property
    def name(self) -> str | None:
        return self._node.name

    @property
    def dotted_name(self) -> str:
        return self.tree.dotted_name(self.key)

    @property
    def matcher(self) -> Matcher | None:
        return self._node.matcher

    @property
    def parent(self) -> "Route | None":
        parent = self._node.parent
        return None if parent is None else Route(self.tree, parent)

    @property
    def children(self) -> dict[str, "Route"]:
        return {name: Route(self.tree, key) for name, key in self._node.children.items()}

    @property
    def default_route(self) -> "Route | None":
        default = self._node.default
        return None if default is None else Route(self.tree, default)

    @property
    def active_child(self) -> "Route | None":
        active = self._node.active
        return None if active is None else Route(self.tree, active)

    @property
    def last_event(self) -> RouteEvent | None:
        return self._node.last_event

    @property
    def is_active(self) -> bool:
        return self.tree.is_active(self.key)

    @property
    def on_enter(self) -> EventChannel[RouteEvent]:
        return self._node.on_enter

    @property
    def on_leave(self) -> EventChannel[LeaveEvent]:
        return self._node.on_leave

    def listen(
        self,
        *,
        enter: EventHandler | None = None,
        leave: LeaveHandler | None = None,
    ) -> list[Subscription]:
        """Attach enter and/or leave listeners after registration."""
        subs: list[Subscription] = []
        if enter is not None:
            subs.append(self.on_enter.listen(enter))
        if leave is not None:
            subs.append(self.on_leave.listen(leave))
        return subs

    def renotify(self) -> bool:
        """Re-emit the last enter event if this route is currently entered.

        Useful after a listener attaches late and needs the current state.
        Returns whether an event was emitted.
        """
        node = self._node
        if node.parent is None or node.last_event is None:
            return False
        if self.tree.node(node.parent).active != self.key:
            return False
        node.on_enter.publish(node.last_event)
        return True

    def __str__(self) -> str:
        return f"[Route: {self.dotted_name or '<root>'}]"
