"""Inline currency data expansion.

A currency entry may carry its own ``countries``, ``localized``, ``traits``
and ``weight`` attributes. Expansion projects those inline attributes into
the dedicated top-level branches so the registry builder only has to read
one place. Run once, after normalization.

Ordering rules:
    - Currencies are visited in source order (mapping insertion order of the
      ``currencies`` branch). A country claimed by several currencies ends up
      mapped to the last one visited.
    - Unordered collections (sets) are linearized by sorting on the canonical
      string form of their elements before use.

Expansion is additive: inline keys stay in the currency entries. Malformed
shapes are treated as absent. The input is never modified.

Python 3.13+.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Set

from ccyregistry.constants import INLINE_WEIGHT_KEY, LEGACY_WEIGHT_KEY
from ccyregistry.core.identifier import Identifier, Keyword, RawId, Symbol, normalize_id
from ccyregistry.diagnostics.codes import Diagnostic, DiagnosticCode, record_diagnostic
from ccyregistry.enums import ConfigBranch

from .normalize import get_attribute

__all__ = [
    "expand_config",
    "linearize",
    "merge_localized",
    "union_traits",
]

_SCALARS = (str, bytes, Identifier, Symbol, Keyword)


def linearize(value: object) -> tuple[object, ...]:
    """Turn a scalar or collection into a deterministic sequence.

    - None -> ()
    - str, identifiers and other scalars -> (value,)
    - sets -> elements sorted by canonical string form
    - mappings -> () (malformed)
    - other iterables -> elements in iteration order

    Args:
        value: Raw inline value

    Returns:
        Tuple of raw elements
    """
    match value:
        case None:
            return ()
        case _ if isinstance(value, _SCALARS):
            return (value,)
        case Mapping():
            return ()
        case Set():
            return tuple(sorted(value, key=_canonical_str))
        case Iterable():
            return tuple(value)
        case _:
            return (value,)


def union_traits(existing: object, new: object) -> tuple[Identifier, ...]:
    """Ordered union of trait identifiers.

    Existing elements are kept first, in their order; new distinct elements
    are appended in their normalized order. Elements that fail to normalize
    are skipped.

    Args:
        existing: Current traits value (any shape)
        new: Inline traits value (any shape)

    Returns:
        Tuple of distinct trait identifiers
    """
    result: dict[Identifier, None] = {}
    for element in (*linearize(existing), *linearize(new)):
        ident = normalize_id(element)
        if ident is not None:
            result.setdefault(ident, None)
    return tuple(result)


def merge_localized(existing: object, inline: Mapping[object, object]) -> dict[object, object]:
    """Deep-merge inline localized properties into an existing locale map.

    Property maps for the same locale are merged with the inline value
    winning on conflict. A non-mapping value on either side replaces the
    existing one.

    Args:
        existing: Current ``locale -> properties`` map (None or malformed -> empty)
        inline: Inline ``locale -> properties`` map

    Returns:
        New merged map

    Example:
        >>> merge_localized({"en": {"name": "Zloty"}}, {"en": {"symbol": "zl"}})
        {'en': {'name': 'Zloty', 'symbol': 'zl'}}
    """
    result: dict[object, object] = dict(existing) if isinstance(existing, Mapping) else {}
    for locale, props in inline.items():
        current = result.get(locale)
        if isinstance(props, Mapping) and isinstance(current, Mapping):
            result[locale] = {**current, **props}
        elif isinstance(props, Mapping):
            result[locale] = dict(props)
        else:
            result[locale] = props
    return result


def expand_config(
    config: object,
    *,
    diagnostics: list[Diagnostic] | None = None,
) -> object:
    """Project inline currency attributes into top-level branches.

    When ``currencies`` is not a mapping, the configuration is returned
    unchanged. Otherwise the result always carries mapping-valued
    ``countries``, ``localized``, ``traits`` and ``weights`` branches.

    For each currency (source order):
        countries: each country id -> this currency id (later wins)
        localized: deep-merged into localized[id], inline wins
        traits: ordered union into traits[id]
        weight (or legacy ``we``): overwrites weights[id] when an integer

    Idempotent on normalized input.

    Args:
        config: Normalized configuration
        diagnostics: Optional list collecting NORMALIZATION_DROP diagnostics

    Returns:
        New expanded configuration map (or the input itself)
    """
    if not isinstance(config, Mapping):
        return config
    currencies = config.get(ConfigBranch.CURRENCIES)
    if not isinstance(currencies, Mapping):
        return config

    countries = _branch_copy(config, ConfigBranch.COUNTRIES)
    localized = _branch_copy(config, ConfigBranch.LOCALIZED)
    traits = _branch_copy(config, ConfigBranch.TRAITS)
    weights = _branch_copy(config, ConfigBranch.WEIGHTS)

    for raw_id, entry in currencies.items():
        currency_id = normalize_id(raw_id)
        if currency_id is None:
            _report_drop(diagnostics, (ConfigBranch.CURRENCIES,), raw_id, "Currency skipped: invalid identifier")
            continue
        if not isinstance(entry, Mapping):
            continue

        for raw_country in linearize(get_attribute(entry, ConfigBranch.COUNTRIES)):
            country = normalize_id(raw_country)
            if country is None:
                _report_drop(
                    diagnostics,
                    (ConfigBranch.CURRENCIES, str(currency_id), ConfigBranch.COUNTRIES),
                    raw_country,
                    "Inline country skipped: invalid identifier",
                )
                continue
            countries[country] = currency_id

        inline_localized = get_attribute(entry, ConfigBranch.LOCALIZED)
        if isinstance(inline_localized, Mapping):
            localized[currency_id] = merge_localized(localized.get(currency_id), inline_localized)

        inline_traits = get_attribute(entry, ConfigBranch.TRAITS)
        if inline_traits is not None and not isinstance(inline_traits, Mapping):
            traits[currency_id] = union_traits(traits.get(currency_id), inline_traits)

        weight = get_attribute(entry, INLINE_WEIGHT_KEY, LEGACY_WEIGHT_KEY)
        if isinstance(weight, int) and not isinstance(weight, bool):
            weights[currency_id] = weight

    result = dict(config)
    result[ConfigBranch.COUNTRIES.value] = countries
    result[ConfigBranch.LOCALIZED.value] = localized
    result[ConfigBranch.TRAITS.value] = traits
    result[ConfigBranch.WEIGHTS.value] = weights
    return result


def _branch_copy(config: Mapping[RawId, object], branch: str) -> dict[object, object]:
    value = config.get(branch)
    return dict(value) if isinstance(value, Mapping) else {}


def _canonical_str(value: object) -> str:
    ident = normalize_id(value)
    return "" if ident is None else str(ident)


def _report_drop(
    diagnostics: list[Diagnostic] | None,
    path: tuple[str, ...],
    value: object,
    message: str,
) -> None:
    record_diagnostic(
        diagnostics,
        Diagnostic(
            code=DiagnosticCode.NORMALIZATION_DROP,
            message=message,
            path=tuple(str(p) for p in path),
            value=repr(value),
        ),
    )
