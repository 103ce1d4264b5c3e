"""Property tests for the configuration pipeline and overlay merging.

Marked fuzz: run with ``pytest -m fuzz``.

Python 3.13+.
"""

from __future__ import annotations

import pytest
from hypothesis import HealthCheck, event, given, settings

from ccyregistry.registry import MergeOptions, config_to_registry, merge_registries
from tests.strategies.config import raw_configs

pytestmark = pytest.mark.fuzz

_SETTINGS = settings(max_examples=1000, suppress_health_check=[HealthCheck.too_slow])


@_SETTINGS
@given(base_cfg=raw_configs(), overlay_cfg=raw_configs())
def test_overlay_wins_for_shared_ids(base_cfg: dict[object, object], overlay_cfg: dict[object, object]) -> None:
    """Merged currencies are the union; shared ids carry overlay attributes."""
    base = config_to_registry(base_cfg)
    overlay = config_to_registry(overlay_cfg)
    merged = merge_registries(base, overlay)
    event(f"shared={bool(set(base.currencies) & set(overlay.currencies))}")
    assert set(merged.currencies) == set(base.currencies) | set(overlay.currencies)
    for cid, currency in overlay.currencies.items():
        assert merged.currencies[cid] == currency


@_SETTINGS
@given(base_cfg=raw_configs(), overlay_cfg=raw_configs())
def test_preserved_weights_equal_base(base_cfg: dict[object, object], overlay_cfg: dict[object, object]) -> None:
    """Preserving weights keeps the base weights exactly."""
    base = config_to_registry(base_cfg)
    merged = merge_registries(base, config_to_registry(overlay_cfg), MergeOptions(preserve_fields=("weights",)))
    assert merged.weights == base.weights


@_SETTINGS
@given(base_cfg=raw_configs(), overlay_cfg=raw_configs())
def test_iso_like_keeps_non_iso_base(base_cfg: dict[object, object], overlay_cfg: dict[object, object]) -> None:
    """ISO-scoped merges never alter non-ISO base currencies."""
    base = config_to_registry(base_cfg)
    merged = merge_registries(base, config_to_registry(overlay_cfg), MergeOptions(iso_like=True))
    for cid, currency in base.currencies.items():
        if not base.is_iso_like_domain(currency.domain):
            assert merged.currencies[cid] == currency


@_SETTINGS
@given(cfg=raw_configs())
def test_export_rebuilds(cfg: dict[object, object]) -> None:
    """Exported configuration builds an equal registry."""
    registry = config_to_registry(cfg)
    assert config_to_registry(registry.to_config()) == registry
