"""Tests for trellis.cli._resolve — Router import resolution."""

import sys
import types

import pytest

from trellis.cli._resolve import resolve_router
from trellis.router import Router


def _factory() -> Router:
    return Router()


def _broken_factory() -> Router:
    raise RuntimeError("no config")


@pytest.fixture
def _fake_router_module(monkeypatch: pytest.MonkeyPatch) -> None:
    """Register a fake module with a trellis Router on sys.modules."""
    mod = types.ModuleType("_fake_trellis_router")
    mod.router = Router()  # type: ignore[attr-defined]
    mod.custom = Router()  # type: ignore[attr-defined]
    mod.create_router = _factory  # type: ignore[attr-defined]
    mod.broken = _broken_factory  # type: ignore[attr-defined]
    mod.not_a_router = "just a string"  # type: ignore[attr-defined]
    monkeypatch.setitem(sys.modules, "_fake_trellis_router", mod)


@pytest.mark.usefixtures("_fake_router_module")
class TestResolveRouter:
    def test_explicit_attribute(self) -> None:
        assert isinstance(resolve_router("_fake_trellis_router:router"), Router)

    def test_custom_attribute(self) -> None:
        router = resolve_router("_fake_trellis_router:custom")
        assert router is sys.modules["_fake_trellis_router"].custom

    def test_default_attribute(self) -> None:
        """Omitting :attr defaults to 'router'."""
        router = resolve_router("_fake_trellis_router")
        assert router is sys.modules["_fake_trellis_router"].router

    def test_factory(self) -> None:
        assert isinstance(resolve_router("_fake_trellis_router:create_router"), Router)

    def test_broken_factory(self) -> None:
        with pytest.raises(TypeError, match="raised an error: no config"):
            resolve_router("_fake_trellis_router:broken")

    def test_missing_module(self) -> None:
        with pytest.raises(ModuleNotFoundError):
            resolve_router("nonexistent_module_xyz:router")

    def test_missing_attribute(self) -> None:
        with pytest.raises(AttributeError):
            resolve_router("_fake_trellis_router:does_not_exist")

    def test_wrong_type(self) -> None:
        with pytest.raises(TypeError, match=r"not a trellis\.Router instance"):
            resolve_router("_fake_trellis_router:not_a_router")
