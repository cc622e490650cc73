"""Router configuration.

RouterConfig is a frozen dataclass — immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class RouterConfig:
    """Router configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = RouterConfig(use_fragment=True, default_title="My App")
    """

    # Addresses
    use_fragment: bool = False  # Prefix generated URLs with "#" and strip it from incoming addresses
    default_title: str = ""  # Title passed to the navigation source on push

    # Binding
    intercept_links: bool = True  # Handle same-origin link activations in-app
    dispatch_initial: bool = True  # Dispatch the source's current address when binding

    # Transitions
    serialize_navigations: bool = True  # One navigation in flight per router
    strict_matching: bool = False  # Raise AmbiguousMatchError instead of warning
