"""Navigation sources — where addresses come from and go to.

A navigation source is anything with an address bar: a browser window
bridged over a websocket, a terminal UI's screen stack, or the in-memory
``MemoryHistory`` below. The Router consumes it through ``NavigationSource``
and never reimplements it.
"""

import logging
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from trellis.channel import EventChannel

logger = logging.getLogger("trellis.history")


@dataclass(slots=True)
class LinkActivation:
    """A link was activated. Listeners may take over its navigation."""

    path: str
    external: bool = False
    _prevented: bool = field(default=False, repr=False)

    def prevent_default(self) -> None:
        self._prevented = True

    @property
    def default_prevented(self) -> bool:
        return self._prevented


@runtime_checkable
class NavigationSource(Protocol):
    """Protocol for address sources the Router can bind to.

    ``on_address_change`` fires for navigation the app did not initiate
    (back/forward, typed addresses). ``push`` never fires it.
    """

    on_address_change: EventChannel[str]
    on_link_activated: EventChannel[LinkActivation]

    def current_address(self) -> str: ...

    def push(self, address: str, title: str = "", replace: bool = False) -> None: ...


class MemoryHistory:
    """In-memory navigation source with a back/forward stack.

    Usage::

        history = MemoryHistory("/")
        history.push("/users/42")
        history.back()          # emits "/" on on_address_change
        history.click("/about") # emits a LinkActivation
    """

    __slots__ = ("_entries", "_index", "on_address_change", "on_link_activated", "titles")

    def __init__(self, initial: str = "/") -> None:
        self._entries: list[str] = [initial]
        self._index = 0
        self.titles: list[str] = [""]
        self.on_address_change: EventChannel[str] = EventChannel()
        self.on_link_activated: EventChannel[LinkActivation] = EventChannel()

    @property
    def entries(self) -> tuple[str, ...]:
        return tuple(self._entries)

    @property
    def index(self) -> int:
        return self._index

    @property
    def title(self) -> str:
        return self.titles[self._index]

    def current_address(self) -> str:
        return self._entries[self._index]

    def push(self, address: str, title: str = "", replace: bool = False) -> None:
        """Record *address* without notifying ``on_address_change``.

        A push discards any forward entries, like a browser does.
        """
        if replace:
            self._entries[self._index] = address
            self.titles[self._index] = title
        else:
            del self._entries[self._index + 1 :]
            del self.titles[self._index + 1 :]
            self._entries.append(address)
            self.titles.append(title)
            self._index += 1
        logger.debug("%s %s", "replace" if replace else "push", address)

    def back(self) -> bool:
        """Step back one entry. Returns ``False`` at the start of history."""
        return self.go(-1)

    def forward(self) -> bool:
        """Step forward one entry. Returns ``False`` at the end of history."""
        return self.go(1)

    def go(self, delta: int) -> bool:
        target = self._index + delta
        if delta == 0 or not 0 <= target < len(self._entries):
            return False
        self._index = target
        self.on_address_change.publish(self.current_address())
        return True

    def visit(self, address: str) -> None:
        """Simulate an address typed by the user: push, then notify."""
        self.push(address)
        self.on_address_change.publish(address)

    def click(self, path: str, *, external: bool = False) -> LinkActivation:
        """Simulate a link click.

        Listeners see the activation first. Unless one of them prevents
        the default, the address is pushed as a plain navigation would.
        """
        activation = LinkActivation(path, external=external)
        self.on_link_activated.publish(activation)
        if not activation.default_prevented:
            self.push(path)
        return activation
