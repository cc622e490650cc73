"""Fixtures for the example apps.

Each example directory holds an ``app.py`` with a module-level ``router``
and the screen state its listeners write to. Tests get a freshly executed
copy per test so state from one navigation never leaks into the next.
"""

import importlib.util
from pathlib import Path

import pytest


@pytest.fixture
def example_module(request: pytest.FixtureRequest):
    """Execute the ``app.py`` beside the requesting test and return it."""
    app_path = Path(request.path).with_name("app.py")
    loader_spec = importlib.util.spec_from_file_location(
        f"trellis_example_{app_path.parent.name}", app_path
    )
    if loader_spec is None or loader_spec.loader is None:
        pytest.fail(f"Cannot load example app from {app_path}")
    module = importlib.util.module_from_spec(loader_spec)
    loader_spec.loader.exec_module(module)
    return module


@pytest.fixture
def example_router(example_module):
    """The example's ``router``, with no navigation source bound yet."""
    return example_module.router
