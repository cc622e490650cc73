"""Matcher capability and UrlMatch.

A matcher guards the edge leading into a route from its parent. The
engine is polymorphic over it: anything with ``match`` and ``render``
works. Plain strings are compiled to a ``UrlTemplate``.

Round-trip law, for every parameter mapping ``p`` and tail ``t`` the
matcher can produce::

    m = matcher.match(matcher.render(p, t))
    m.parameters == p and m.tail == t
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable


@dataclass(frozen=True, slots=True)
class UrlMatch:
    """Result of matching a path prefix.

    ``matched`` is the consumed prefix, ``tail`` the unconsumed rest.
    """

    matched: str
    tail: str = ""
    parameters: dict[str, Any] = field(default_factory=dict)


# Match result used for a default route, which never consumes input
EMPTY_MATCH = UrlMatch("", "", {})


@runtime_checkable
class Matcher(Protocol):
    """Protocol for route matchers.

    Accepts any object with this shape::

        class Exact:
            def __init__(self, text):
                self.text = text

            def match(self, path):
                if path == self.text:
                    return UrlMatch(path)
                return None

            def render(self, parameters, tail=""):
                return self.text + tail
    """

    def match(self, path: str) -> UrlMatch | None: ...

    def render(self, parameters: Mapping[str, Any], tail: str = "") -> str: ...


def as_matcher(path: "str | Matcher") -> Matcher:
    """Return *path* unchanged if it is a matcher, else compile it as a template."""
    if isinstance(path, str):
        from trellis.routing.template import UrlTemplate

        return UrlTemplate(path)
    if isinstance(path, Matcher):
        return path
    msg = f"Route path must be a template string or a Matcher, got {type(path).__name__}"
    raise TypeError(msg)
