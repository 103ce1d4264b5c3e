"""Tests for the package-level public API.

Python 3.13+.
"""

from __future__ import annotations

import importlib

import pytest

import ccyregistry


@pytest.mark.parametrize(
    "module", ["ccyregistry", "ccyregistry.config", "ccyregistry.registry", "ccyregistry.diagnostics"]
)
def test_all_names_resolve(module: str) -> None:
    """Every exported name exists."""
    mod = importlib.import_module(module)
    for name in mod.__all__:
        assert hasattr(mod, name), f"{module}.{name}"


def test_version_string() -> None:
    """__version__ is populated from metadata or the development fallback."""
    assert isinstance(ccyregistry.__version__, str)
    assert ccyregistry.__version__


def test_end_to_end() -> None:
    """Configuration in, lookups out, through the top-level API only."""
    registry = ccyregistry.config_to_registry({
        "version": "api",
        "currencies": {"PLN": {"numeric": 985, "scale": 2, "countries": "PL"}},
    })
    with ccyregistry.using_registry(registry):
        current = ccyregistry.get_registry()
        assert current.of_country("PL").numeric == 985
        assert current.get(ccyregistry.Identifier(None, "PLN")).scale == 2
