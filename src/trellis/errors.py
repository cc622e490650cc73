"""Trellis exception hierarchy.

Shared across the route tree, resolver, URL composer, and Router so every
module raises and catches the same types.

A navigation that is vetoed by a leave listener is *not* an error: it is
reported as a ``False`` result from ``Router.dispatch`` / ``Router.navigate``.
"""


class TrellisError(Exception):
    """Base for all trellis-specific errors."""


class ConfigurationError(TrellisError, ValueError):
    """Raised when the route tree is configured incorrectly.

    Raised synchronously from ``Route.add_route`` so a broken tree fails
    at startup rather than on the first navigation.
    """


class MissingRouteNameError(ConfigurationError):
    """A route was registered without a name."""

    def __init__(self) -> None:
        super().__init__("name is required for all routes")


class DuplicateRouteError(ConfigurationError):
    """A route name is already registered under the same parent."""

    def __init__(self, name: str, parent: str = "") -> None:
        self.name = name
        where = f" under {parent}" if parent else ""
        super().__init__(f"Route {name!r} already exists{where}")


class MultipleDefaultRoutesError(ConfigurationError):
    """A second default route was registered under the same parent."""

    def __init__(self, name: str, existing: str) -> None:
        self.name = name
        self.existing = existing
        super().__init__(
            f"Only one default route can be added: {name!r} conflicts with {existing!r}"
        )


class AmbiguousMatchError(ConfigurationError):
    """More than one sibling route matches a path (strict matching only)."""

    def __init__(self, path: str, names: tuple[str, ...]) -> None:
        self.path = path
        self.names = names
        super().__init__(f"More than one route matches {path!r}: {', '.join(names)}")


class UnknownRouteError(TrellisError, LookupError):
    """A dotted route path names a route that is not registered."""

    def __init__(self, name: str, route_path: str = "") -> None:
        self.name = name
        self.route_path = route_path
        detail = f" in {route_path!r}" if route_path and route_path != name else ""
        super().__init__(f"Invalid route name: {name!r}{detail}")


class NoActiveRouteError(TrellisError):
    """An absolute URL was requested for a subtree whose ancestors are not active."""


class MissingParameterError(TrellisError, KeyError):
    """A matcher was asked to render without a required parameter."""

    def __init__(self, name: str, template: str) -> None:
        self.name = name
        self.template = template
        super().__init__(name)

    def __str__(self) -> str:
        return f"Missing parameter {self.name!r} for {self.template!r}"


class AmbiguousMatchWarning(UserWarning):
    """More than one sibling route matches the same path.

    Resolution still proceeds with the first route in registration order.
    Promote to an error with ``-W error::trellis.errors.AmbiguousMatchWarning``
    or ``RouterConfig(strict_matching=True)``.
    """
