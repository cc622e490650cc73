"""RouteEvent and LeaveEvent frozen dataclasses.

Enter listeners receive a ``RouteEvent``. Leave listeners receive a
``LeaveEvent``, a fresh one per level of the chain being left, and may
attach votes to it. The transition protocol gathers the votes from the
events it published and decides from those values alone.
"""

import inspect
from collections.abc import Awaitable
from dataclasses import dataclass, field
from typing import Any, TypeAlias

from trellis.routing.matcher import UrlMatch

# A leave vote: an immediate answer or one that resolves later
Vote: TypeAlias = bool | Awaitable[bool]


@dataclass(frozen=True, slots=True)
class RouteEvent:
    """A successful match for one route.

    ``path`` is the segment the route's matcher consumed; ``parameters``
    holds only that matcher's parameters, not its ancestors'.
    """

    path: str
    parameters: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_match(cls, match: UrlMatch) -> "RouteEvent":
        return cls(match.matched, dict(match.parameters))


@dataclass(frozen=True, slots=True)
class LeaveEvent(RouteEvent):
    """Leave notification carrying the incoming match.

    Listeners can block the navigation by attaching a vote::

        def on_leave(event: LeaveEvent) -> None:
            event.allow_leave(confirm_discard_changes())  # awaitable[bool]
    """

    _votes: list[Vote] = field(default_factory=list, repr=False, compare=False)

    def allow_leave(self, vote: Vote) -> None:
        """Attach a vote. The navigation proceeds only if every vote is true."""
        if not isinstance(vote, bool) and not inspect.isawaitable(vote):
            msg = f"allow_leave() expects a bool or an awaitable, got {type(vote).__name__}"
            raise TypeError(msg)
        self._votes.append(vote)

    @property
    def votes(self) -> tuple[Vote, ...]:
        return tuple(self._votes)
