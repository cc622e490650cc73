"""Tests for the top-level ``trellis`` namespace."""

import importlib

import pytest

import trellis


class TestExports:
    @pytest.mark.parametrize(("name", "module"), sorted(trellis._LAZY_IMPORTS.items()))
    def test_resolves_to_defining_module(self, name: str, module: str) -> None:
        assert getattr(trellis, name) is getattr(importlib.import_module(module), name)

    def test_all_matches_registry(self) -> None:
        assert sorted(trellis.__all__) == sorted(trellis._LAZY_IMPORTS)

    def test_router_surface(self) -> None:
        router = trellis.Router(trellis.RouterConfig(), source=trellis.MemoryHistory())
        route = router.add_route("home", "/home")
        assert isinstance(route, trellis.Route)
        assert isinstance(route.matcher, trellis.UrlTemplate)

    def test_unknown_name(self) -> None:
        with pytest.raises(AttributeError, match="'Dispatcher'"):
            getattr(trellis, "Dispatcher")
