"""Pytest configuration for the ccyregistry test suite.

Hypothesis profiles:
- dev: 500 examples per property (local default)
- ci: 50 derandomized examples, selected when CI=true
- verbose: 100 examples with progress output

HYPOTHESIS_PROFILE overrides the detection, e.g.
HYPOTHESIS_PROFILE=verbose pytest tests/

Property tests marked @pytest.mark.fuzz run only with: pytest -m fuzz
"""

from __future__ import annotations

import os

import pytest
from hypothesis import Verbosity, settings

from ccyregistry.registry import state
from tests.helpers.loaders import DictLoader

_PROFILES = ("dev", "ci", "verbose")

settings.register_profile("dev", max_examples=500)
settings.register_profile("ci", max_examples=50, derandomize=True, print_blob=True)
settings.register_profile("verbose", max_examples=100, verbosity=Verbosity.verbose)


def _profile_name() -> str:
    requested = os.environ.get("HYPOTHESIS_PROFILE")
    if requested in _PROFILES:
        return requested
    return "ci" if os.environ.get("CI") == "true" else "dev"


settings.load_profile(_profile_name())


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Skip fuzz-marked tests unless the run selects them with -m fuzz."""
    if "fuzz" in str(config.getoption("-m", default="")):
        return
    skip = pytest.mark.skip(reason="property fuzzing; run with: pytest -m fuzz")
    for item in items:
        if item.get_closest_marker("fuzz") is not None:
            item.add_marker(skip)


@pytest.fixture
def fresh_default_registry(monkeypatch: pytest.MonkeyPatch) -> None:
    """Start the test with no process-wide default registry installed."""
    monkeypatch.setattr(state, "_default_registry", None)


@pytest.fixture
def dict_loader() -> DictLoader:
    """In-memory loader with a primary and a distribution resource."""
    return DictLoader({
        "dist.yaml": (
            "version: dist-1\n"
            "currencies:\n"
            "  EUR: {numeric: 978, scale: 2, countries: [DE, FR]}\n"
            "  USD: {numeric: 840, scale: 2, countries: US, weight: 5}\n"
            "  ADP: {numeric: 20, scale: 0, countries: [AD]}\n"
        ),
        "user.yaml": (
            "version: user-1\n"
            "currencies:\n"
            "  EUR: {numeric: 978, scale: 3}\n"
            "  crypto/BTC: {scale: 8, countries: []}\n"
            "weights:\n"
            "  EUR: 7\n"
        ),
        "empty.yaml": "",
        "list.yaml": "- EUR\n- USD\n",
        "broken.yaml": "currencies: {EUR: [unclosed\n",
    })
