"""Registry construction from normalized configuration.

Consumes the branches produced by the config pipeline (normalize, then
expand) and returns a Registry whose invariants hold by construction:
entries referring to unknown currencies are dropped before the Registry is
created, and reported as DANGLING_REFERENCE diagnostics.

Currency entry attributes:
    numeric (legacy: nr)   positive int, otherwise NO_NUMERIC
    scale   (legacy: sc)   non-negative int, otherwise AUTO_SCALE
    domain                 explicit domain, otherwise derived from the id
    kind                   identifier
    <propagate_keys>       copied (frozen) into Currency.extensions

Python 3.13+.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from ccyregistry.config.expand import expand_config, linearize
from ccyregistry.config.normalize import get_attribute, get_branch, normalize_config
from ccyregistry.constants import (
    AUTO_SCALE,
    INLINE_WEIGHT_KEY,
    LEGACY_NUMERIC_KEY,
    LEGACY_SCALE_KEY,
    LEGACY_WEIGHT_KEY,
    NO_NUMERIC,
    PROPAGATE_KEYS_ALIASES,
)
from ccyregistry.core.identifier import Identifier, RawId, attribute_key, normalize_id
from ccyregistry.core.values import ExtensionValue, freeze_mapping
from ccyregistry.diagnostics.codes import Diagnostic, DiagnosticCode, record_diagnostic
from ccyregistry.enums import ConfigBranch, CurrencyField
from ccyregistry.locale_utils import normalize_locale

from .currency import Currency
from .hierarchy import Hierarchies
from .model import Registry, default_version
from .weights import DEFAULT_POLICY, WeightPolicy

__all__ = [
    "RESERVED_KEYS",
    "build_currency",
    "build_registry",
    "config_to_registry",
    "propagate_keys",
]

logger = logging.getLogger(__name__)

RESERVED_KEYS: frozenset[str] = frozenset({
    *(str(f) for f in CurrencyField),
    LEGACY_NUMERIC_KEY,
    LEGACY_SCALE_KEY,
    INLINE_WEIGHT_KEY,
    LEGACY_WEIGHT_KEY,
    ConfigBranch.COUNTRIES,
    ConfigBranch.LOCALIZED,
    ConfigBranch.TRAITS,
})
"""Currency entry keys with a dedicated meaning; never propagated."""


def propagate_keys(config: Mapping[RawId, object]) -> tuple[str, ...]:
    """Return the attribute keys to copy onto currencies as extensions.

    Reads ``propagate_keys`` (or ``propagateKeys``), accepts a scalar or a
    collection, drops blank and reserved keys, keeps first occurrences.

    Example:
        >>> propagate_keys({"propagate_keys": ["foo", "scale", ":bar"]})
        ('foo', 'bar')
    """
    raw = get_attribute(config, *PROPAGATE_KEYS_ALIASES)
    keys: dict[str, None] = {}
    for element in linearize(raw):
        key = attribute_key(element)
        if key is not None and key not in RESERVED_KEYS:
            keys.setdefault(key, None)
    return tuple(keys)


def _int_or(value: object, fallback: int, *, minimum: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        return fallback
    return value if value >= minimum else fallback


def build_currency(
    currency_id: Identifier,
    entry: object,
    keys: Iterable[str] = (),
) -> Currency:
    """Build a Currency from one configuration entry.

    Malformed attribute values fall back to sentinels or derived defaults;
    a non-mapping entry yields a currency with only its identifier.

    Args:
        currency_id: Normalized currency identifier
        entry: Currency attribute map
        keys: Attribute keys to copy into extensions

    Returns:
        New Currency
    """
    if not isinstance(entry, Mapping):
        return Currency.create(currency_id)
    numeric = _int_or(
        get_attribute(entry, CurrencyField.NUMERIC, LEGACY_NUMERIC_KEY), NO_NUMERIC, minimum=1
    )
    scale = _int_or(get_attribute(entry, CurrencyField.SCALE, LEGACY_SCALE_KEY), AUTO_SCALE, minimum=0)
    domain = get_attribute(entry, CurrencyField.DOMAIN)
    kind = normalize_id(get_attribute(entry, CurrencyField.KIND))
    extensions: dict[str, object] = {}
    missing = object()
    for key in keys:
        value = get_attribute(entry, key, default=missing)
        if value is not missing:
            extensions[key] = value
    return Currency.create(
        currency_id,
        numeric,
        scale,
        domain=None if domain is None else str(normalize_id(domain) or ""),
        kind=kind,
        extensions=extensions,
    )


def build_registry(
    config: Mapping[RawId, object],
    *,
    policy: WeightPolicy = DEFAULT_POLICY,
    diagnostics: list[Diagnostic] | None = None,
) -> Registry:
    """Build a Registry from a normalized and expanded configuration.

    Args:
        config: Configuration map (output of expand_config)
        policy: Weight policy for canonical resolution
        diagnostics: Optional list collecting DANGLING_REFERENCE and
            INVALID_VALUE diagnostics (including skipped hierarchy relations)

    Returns:
        New Registry
    """
    keys = propagate_keys(config)

    currencies: dict[Identifier, Currency] = {}
    raw_currencies = get_branch(config, ConfigBranch.CURRENCIES)
    if isinstance(raw_currencies, Mapping):
        for raw_id, entry in raw_currencies.items():
            currency_id = normalize_id(raw_id)
            if currency_id is not None:
                currencies[currency_id] = build_currency(currency_id, entry, keys)

    countries: dict[Identifier, Identifier] = {}
    for country, cid in _branch_items(config, ConfigBranch.COUNTRIES):
        country_id = normalize_id(country)
        currency_id = normalize_id(cid)
        if country_id is None or currency_id is None:
            continue
        if currency_id not in currencies:
            _report_dangling(diagnostics, ConfigBranch.COUNTRIES, country_id, currency_id)
            continue
        countries[country_id] = currency_id

    localized: dict[Identifier, dict[str, Mapping[str, ExtensionValue]]] = {}
    for cid, locales in _branch_items(config, ConfigBranch.LOCALIZED):
        currency_id = normalize_id(cid)
        if currency_id is None or not isinstance(locales, Mapping):
            continue
        if currency_id not in currencies:
            _report_dangling(diagnostics, ConfigBranch.LOCALIZED, currency_id, currency_id)
            continue
        props_by_locale: dict[str, Mapping[str, ExtensionValue]] = {}
        for raw_locale, props in locales.items():
            locale = normalize_locale(raw_locale)
            if locale is None or not isinstance(props, Mapping):
                continue
            merged = {**props_by_locale.get(locale, {}), **freeze_mapping(props)}
            props_by_locale[locale] = merged
        if props_by_locale:
            localized[currency_id] = props_by_locale

    traits: dict[Identifier, tuple[Identifier, ...]] = {}
    for cid, raw_traits in _branch_items(config, ConfigBranch.TRAITS):
        currency_id = normalize_id(cid)
        if currency_id is None:
            continue
        if currency_id not in currencies:
            _report_dangling(diagnostics, ConfigBranch.TRAITS, currency_id, currency_id)
            continue
        ids = (normalize_id(t) for t in linearize(raw_traits))
        distinct = tuple(dict.fromkeys(t for t in ids if t is not None))
        if distinct:
            traits[currency_id] = distinct

    weights: dict[Identifier, int] = {}
    for cid, weight in _branch_items(config, ConfigBranch.WEIGHTS):
        currency_id = normalize_id(cid)
        if currency_id is None:
            continue
        if currency_id not in currencies:
            _report_dangling(diagnostics, ConfigBranch.WEIGHTS, currency_id, currency_id)
            continue
        if isinstance(weight, bool) or not isinstance(weight, int):
            record_diagnostic(
                diagnostics,
                Diagnostic(
                    code=DiagnosticCode.INVALID_VALUE,
                    message=f"Weight of {currency_id} is not an integer",
                    path=(str(ConfigBranch.WEIGHTS), str(currency_id)),
                    value=repr(weight),
                ),
            )
            continue
        weights[currency_id] = weight

    hierarchies = Hierarchies.create(
        get_branch(config, ConfigBranch.HIERARCHIES), strict=False, diagnostics=diagnostics
    )

    raw_ext = get_branch(config, ConfigBranch.EXT)
    ext = freeze_mapping(raw_ext) if isinstance(raw_ext, Mapping) else freeze_mapping({})

    raw_version = get_branch(config, ConfigBranch.VERSION)
    version = str(raw_version).strip() if raw_version is not None else ""

    registry = Registry(
        currencies=currencies,
        countries=countries,
        localized=localized,
        traits=traits,
        weights=weights,
        hierarchies=hierarchies,
        version=version or default_version(),
        ext=ext,
        policy=policy,
    )
    logger.debug(
        "Built registry version %s: %d currencies, %d countries",
        registry.version,
        len(registry.currencies),
        len(registry.countries),
    )
    return registry


def config_to_registry(
    config: Mapping[RawId, object],
    *,
    policy: WeightPolicy = DEFAULT_POLICY,
    diagnostics: list[Diagnostic] | None = None,
) -> Registry:
    """Run the full pipeline (normalize, expand, build) on a parsed config.

    Example:
        >>> reg = config_to_registry({"currencies": {"PLN": {"numeric": 985, "countries": ["PL"]}}})
        >>> reg.of_country("PL").code
        'PLN'
    """
    normalized = normalize_config(config, diagnostics=diagnostics)
    expanded = expand_config(normalized, diagnostics=diagnostics)
    if not isinstance(expanded, Mapping):
        return Registry.empty(policy=policy)
    return build_registry(expanded, policy=policy, diagnostics=diagnostics)


def _branch_items(config: Mapping[RawId, object], branch: str) -> Iterable[tuple[object, object]]:
    value = get_branch(config, branch)
    return value.items() if isinstance(value, Mapping) else ()


def _report_dangling(
    diagnostics: list[Diagnostic] | None,
    branch: str,
    key: Identifier,
    currency_id: Identifier,
) -> None:
    record_diagnostic(
        diagnostics,
        Diagnostic(
            code=DiagnosticCode.DANGLING_REFERENCE,
            message=f"Entry refers to unknown currency {currency_id}",
            path=(str(branch), str(key)),
            value=repr(str(currency_id)),
        ),
    )
