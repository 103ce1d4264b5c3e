"""Registry overlay merging.

Combines a baseline (distribution) registry with an overlay (user)
registry. The overlay wins by default; MergeOptions narrow its effect.

Default rules:
    currencies, countries, weights, ext   union, overlay wins on collision
    localized                             deep merge, overlay wins per property
    traits                                ordered union, base elements first
    hierarchies                           union of relations per axis; overlay
                                          relations closing a cycle are skipped
    version                               overlay's when non-empty

Preserved fields:
    Registry field names (currencies, countries, localized, traits, weights,
    hierarchies, ext, version) are taken wholesale from the base.
    Currency attribute names (numeric, scale, domain, kind, extensions) are
    kept from the base currency for identifiers present on both sides.

ISO-like scope:
    With ``iso_like`` the overlay only touches ISO-like currencies (domain
    ISO-4217, ISO-4217-LEGACY, or a domain deriving from ISO-4217). Base
    entries of other domains are never overwritten. An overlay currency in
    the legacy domain replaces the un-namespaced ISO currency of the same
    code, inheriting its countries, localized properties, traits and weight.
    Legacy currencies left with weight 0 get DEFAULT_LEGACY_WEIGHT.

Merging is pure: neither input changes.

Python 3.13+.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from ccyregistry.constants import DEFAULT_LEGACY_WEIGHT, ISO_DOMAIN, ISO_LEGACY_DOMAIN
from ccyregistry.core.identifier import Identifier, attribute_key
from ccyregistry.diagnostics.codes import Diagnostic
from ccyregistry.diagnostics.errors import InvalidRegistryValueError
from ccyregistry.enums import CurrencyField, RegistryField

from .currency import Currency
from .model import Registry

__all__ = [
    "MergeOptions",
    "merge_registries",
]

logger = logging.getLogger(__name__)

_REGISTRY_FIELDS: frozenset[str] = frozenset(RegistryField)
_CURRENCY_FIELDS: frozenset[str] = frozenset(CurrencyField)


@dataclass(frozen=True, slots=True)
class MergeOptions:
    """Policy of a registry merge.

    Attributes:
        preserve_fields: Registry field or currency attribute names kept
                         from the base registry
        iso_like: Restrict the overlay to ISO-like currencies and migrate
                  legacy ISO currencies
        verbose: Log new and updated currencies at INFO level
    """

    preserve_fields: tuple[str, ...] = ()
    iso_like: bool = False
    verbose: bool = False

    def __post_init__(self) -> None:
        """Canonicalize field names.

        Raises:
            InvalidRegistryValueError: If a name is not a registry field or
                currency attribute
        """
        names: list[str] = []
        raw = (self.preserve_fields,) if isinstance(self.preserve_fields, str) else self.preserve_fields
        for raw_name in raw:
            name = attribute_key(raw_name)
            if name in _REGISTRY_FIELDS or name in _CURRENCY_FIELDS:
                names.append(name)
                continue
            msg = f"Unknown field in preserve_fields: {raw_name!r}"
            raise InvalidRegistryValueError(msg)
        object.__setattr__(self, "preserve_fields", tuple(dict.fromkeys(names)))

    @property
    def registry_fields(self) -> frozenset[RegistryField]:
        """Registry fields taken wholesale from the base."""
        return frozenset(RegistryField(n) for n in self.preserve_fields if n in _REGISTRY_FIELDS)

    @property
    def currency_fields(self) -> frozenset[CurrencyField]:
        """Currency attributes kept from base currencies."""
        return frozenset(CurrencyField(n) for n in self.preserve_fields if n in _CURRENCY_FIELDS)


DEFAULT_MERGE_OPTIONS = MergeOptions()


def _is_iso_like(currency: Currency, base: Registry, overlay: Registry) -> bool:
    return base.is_iso_like_domain(currency.domain) or overlay.is_iso_like_domain(currency.domain)


def _legacy_renames(
    base: Registry,
    overlay_currencies: Iterable[Currency],
) -> dict[Identifier, Identifier]:
    renames: dict[Identifier, Identifier] = {}
    for currency in overlay_currencies:
        if currency.domain != ISO_LEGACY_DOMAIN:
            continue
        old_id = Identifier(None, currency.code)
        if old_id == currency.id or currency.id in base.currencies:
            continue
        old = base.currencies.get(old_id)
        if old is not None and old.domain == ISO_DOMAIN:
            renames[old_id] = currency.id
    return renames


def _rename_keys[V](
    mapping: Mapping[Identifier, V], renames: Mapping[Identifier, Identifier]
) -> dict[Identifier, V]:
    return {renames.get(k, k): v for k, v in mapping.items()}


def _merge_locales(
    base: Mapping[str, Mapping[str, object]], overlay: Mapping[str, Mapping[str, object]]
) -> dict[str, dict[str, object]]:
    result = {locale: dict(props) for locale, props in base.items()}
    for locale, props in overlay.items():
        result[locale] = {**result.get(locale, {}), **props}
    return result


def merge_registries(
    base: Registry,
    overlay: Registry | None,
    options: MergeOptions | None = None,
    *,
    diagnostics: list[Diagnostic] | None = None,
) -> Registry:
    """Merge an overlay registry onto a base registry.

    Args:
        base: Baseline registry
        overlay: Overlay registry; None returns base unchanged
        options: Merge policy (default: overlay wins, nothing preserved)
        diagnostics: Optional list collecting overlay hierarchy relations
            skipped because they contradict the base

    Returns:
        New merged Registry (or base itself when overlay is None)

    Example:
        >>> merged = merge_registries(dist, user, MergeOptions(preserve_fields=("weights",)))  # doctest: +SKIP
        >>> merged.weights == dist.weights  # doctest: +SKIP
        True
    """
    if overlay is None:
        return base
    opts = options or DEFAULT_MERGE_OPTIONS
    keep = opts.registry_fields
    keep_attrs = opts.currency_fields

    selected = [
        c for c in overlay.currencies.values() if not opts.iso_like or _is_iso_like(c, base, overlay)
    ]
    renames: dict[Identifier, Identifier] = {}
    if opts.iso_like and RegistryField.CURRENCIES not in keep:
        renames = _legacy_renames(base, selected)

    # Currencies
    currencies: dict[Identifier, Currency] = {}
    for cid, currency in base.currencies.items():
        if cid in renames:
            new_id = renames[cid]
            currencies[new_id] = currency.with_fields(id=new_id, domain=ISO_LEGACY_DOMAIN)
            if opts.verbose:
                logger.info("Migrated currency: %s -> %s", cid, new_id)
        else:
            currencies[cid] = currency

    applied: set[Identifier] = set()
    if RegistryField.CURRENCIES not in keep:
        for currency in selected:
            existing = currencies.get(currency.id)
            if opts.iso_like and existing is not None and not _is_iso_like(existing, base, overlay):
                continue
            if existing is not None and keep_attrs:
                currency = currency.with_fields(**{f.value: getattr(existing, f.value) for f in keep_attrs})
            applied.add(currency.id)
            if existing is None:
                if opts.verbose:
                    logger.info("New currency: %s", currency.id)
            elif existing != currency:
                if opts.verbose:
                    logger.info("Updated currency: %s", currency.id)
            currencies[currency.id] = currency
    else:
        applied = {c.id for c in selected if c.id in currencies}

    # Countries
    countries = {c: renames.get(cid, cid) for c, cid in base.countries.items()}
    if RegistryField.COUNTRIES not in keep:
        for country, cid in overlay.countries.items():
            if cid not in applied:
                continue
            current = currencies.get(countries[country]) if country in countries else None
            if opts.iso_like and current is not None and not _is_iso_like(current, base, overlay):
                continue
            countries[country] = cid

    # Localized
    localized = {
        cid: {loc: dict(props) for loc, props in locales.items()}
        for cid, locales in _rename_keys(base.localized, renames).items()
    }
    if RegistryField.LOCALIZED not in keep:
        for cid, locales in overlay.localized.items():
            if cid in applied:
                localized[cid] = _merge_locales(localized.get(cid, {}), locales)

    # Traits
    traits = _rename_keys(base.traits, renames)
    if RegistryField.TRAITS not in keep:
        for cid, own in overlay.traits.items():
            if cid in applied:
                traits[cid] = tuple(dict.fromkeys((*traits.get(cid, ()), *own)))

    # Weights
    weights = _rename_keys(base.weights, renames)
    if RegistryField.WEIGHTS not in keep:
        for cid, weight in overlay.weights.items():
            if cid in applied:
                weights[cid] = weight
        if opts.iso_like:
            for cid in (*applied, *renames.values()):
                currency = currencies.get(cid)
                if currency is not None and currency.domain == ISO_LEGACY_DOMAIN and not weights.get(cid):
                    weights[cid] = DEFAULT_LEGACY_WEIGHT

    hierarchies = (
        base.hierarchies
        if RegistryField.HIERARCHIES in keep
        else base.hierarchies.merge(overlay.hierarchies, strict=False, diagnostics=diagnostics)
    )
    ext = base.ext if RegistryField.EXT in keep else MappingProxyType({**base.ext, **overlay.ext})
    version = base.version if RegistryField.VERSION in keep else (overlay.version or base.version)

    return Registry(
        currencies=currencies,
        countries={k: v for k, v in countries.items() if v in currencies},
        localized={k: v for k, v in localized.items() if k in currencies},
        traits={k: v for k, v in traits.items() if k in currencies},
        weights={k: v for k, v in weights.items() if k in currencies},
        hierarchies=hierarchies,
        version=version,
        ext=ext,
        policy=base.policy,
    )
