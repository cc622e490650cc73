"""Trellis — nested route trees with vetoable transitions.

Resolves navigation paths against a tree of named routes, runs a
cancellable leave/enter transition across the matched chain, and composes
addresses back out of dotted route names and parameters.

Basic usage::

    from trellis import Router

    router = Router()
    users = router.add_route("users", "/users/:id")
    users.add_route("profile", "/profile", enter=lambda e: print("profile", e))

    await router.navigate("users.profile", {"id": "42"})
    router.url_for("users.profile", {"id": "7"})  # "/users/7/profile"

Following an address source::

    from trellis import MemoryHistory

    async with anyio.create_task_group() as tg:
        await tg.start(router.bind, MemoryHistory("/users/42"))
"""

__version__ = "0.1.0-dev"
__all__ = [
    "AmbiguousMatchError",
    "AmbiguousMatchWarning",
    "ConfigurationError",
    "DuplicateRouteError",
    "EventChannel",
    "LeaveEvent",
    "LinkActivation",
    "Matcher",
    "MemoryHistory",
    "MissingParameterError",
    "MissingRouteNameError",
    "Mount",
    "MultipleDefaultRoutesError",
    "NavigationSource",
    "NoActiveRouteError",
    "Route",
    "RouteEvent",
    "Router",
    "RouterConfig",
    "Subscription",
    "TrellisError",
    "UnknownRouteError",
    "UrlMatch",
    "UrlTemplate",
]

# name -> module that defines it
_LAZY_IMPORTS: dict[str, str] = {
    "AmbiguousMatchError": "trellis.errors",
    "AmbiguousMatchWarning": "trellis.errors",
    "ConfigurationError": "trellis.errors",
    "DuplicateRouteError": "trellis.errors",
    "EventChannel": "trellis.channel",
    "LeaveEvent": "trellis.routing.events",
    "LinkActivation": "trellis.history",
    "Matcher": "trellis.routing.matcher",
    "MemoryHistory": "trellis.history",
    "MissingParameterError": "trellis.errors",
    "MissingRouteNameError": "trellis.errors",
    "Mount": "trellis.routing.tree",
    "MultipleDefaultRoutesError": "trellis.errors",
    "NavigationSource": "trellis.history",
    "NoActiveRouteError": "trellis.errors",
    "Route": "trellis.routing.tree",
    "RouteEvent": "trellis.routing.events",
    "Router": "trellis.router",
    "RouterConfig": "trellis.config",
    "Subscription": "trellis.channel",
    "TrellisError": "trellis.errors",
    "UnknownRouteError": "trellis.errors",
    "UrlMatch": "trellis.routing.matcher",
    "UrlTemplate": "trellis.routing.template",
}


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import trellis`` fast while providing a clean top-level API.
    """
    module_name = _LAZY_IMPORTS.get(name)
    if module_name is None:
        msg = f"module {__name__!r} has no attribute {name!r}"
        raise AttributeError(msg)

    import importlib

    return getattr(importlib.import_module(module_name), name)
