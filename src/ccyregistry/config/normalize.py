"""Configuration normalization.

Rewrites the known branches of a raw configuration map so that every
currency and country key (and every country -> currency value) is a
canonical Identifier. Entries that cannot be converted are dropped and
reported as NORMALIZATION_DROP diagnostics; nothing is ever raised.

The input is never modified: a new top-level dict is returned, with new
dicts for the rewritten branches and the original objects everywhere else.

Python 3.13+.
"""

from __future__ import annotations

from collections.abc import Mapping

from ccyregistry.constants import PROPAGATE_KEYS_ALIASES
from ccyregistry.core.identifier import Identifier, RawId, attribute_key, normalize_id
from ccyregistry.diagnostics.codes import Diagnostic, DiagnosticCode, record_diagnostic
from ccyregistry.enums import ConfigBranch

__all__ = [
    "KNOWN_BRANCHES",
    "get_attribute",
    "get_branch",
    "normalize_config",
]

# Branches keyed by currency identifier.
_CURRENCY_KEYED: frozenset[str] = frozenset({
    ConfigBranch.CURRENCIES,
    ConfigBranch.TRAITS,
    ConfigBranch.WEIGHTS,
    ConfigBranch.LOCALIZED,
})

KNOWN_BRANCHES: frozenset[str] = frozenset(
    {str(branch) for branch in ConfigBranch} | set(PROPAGATE_KEYS_ALIASES)
)
"""Top-level keys recognized by the pipeline."""

_MISSING = object()


def get_attribute(entry: Mapping[RawId, object], *names: str, default: object = None) -> object:
    """Look up an attribute of a map whose keys may be spelled in any raw form.

    Tries each name in order. Exact string keys are checked first; otherwise
    keys are compared by their plain attribute name, so ``":weight"`` and
    ``Keyword(None, "weight")`` both match ``"weight"``. An explicit null
    under an earlier name does not hide a later one (``weight: null`` falls
    back to ``we``); it is returned only when no later name has a value.

    Args:
        entry: Mapping to search
        *names: Attribute names in order of preference
        default: Value returned when no name matches

    Returns:
        Value of the first matching attribute, or default
    """
    if not isinstance(entry, Mapping):
        return default
    found: object = _MISSING
    for name in names:
        value = _lookup(entry, name)
        if value is not _MISSING and value is not None:
            return value
        if found is _MISSING:
            found = value
    return default if found is _MISSING else found


def _lookup(entry: Mapping[RawId, object], name: str) -> object:
    value = entry.get(name, _MISSING)
    if value is not _MISSING:
        return value
    for key, candidate in entry.items():
        if key != name and attribute_key(key) == name:
            return candidate
    return _MISSING


def get_branch(config: Mapping[RawId, object], branch: str) -> object:
    """Return a top-level branch of a configuration map, or None if absent."""
    return get_attribute(config, branch)


def normalize_config(
    config: object,
    *,
    diagnostics: list[Diagnostic] | None = None,
) -> object:
    """Normalize identifier keys of the known configuration branches.

    Branches rewritten:
        currencies, traits, weights, localized: keys -> Identifier
        countries: keys and values -> Identifier

    Top-level keys spelled as keywords, symbols or ':'-prefixed strings whose
    plain name is a recognized branch are renamed to that plain name. When
    two raw keys land on the same name, the later one wins.

    A branch that is not a mapping, unknown branches, and non-mapping input
    pass through unchanged. Idempotent.

    Args:
        config: Parsed configuration (any value)
        diagnostics: Optional list collecting NORMALIZATION_DROP diagnostics

    Returns:
        New configuration map (or the input itself if it is not a mapping)

    Example:
        >>> cfg = normalize_config({"currencies": {"PLN": {"scale": 2}}, "countries": {"PL": ":PLN"}})
        >>> cfg["countries"]
        {Identifier(namespace=None, name='PL'): Identifier(namespace=None, name='PLN')}
    """
    if not isinstance(config, Mapping):
        return config

    result: dict[RawId, object] = {}
    for raw_key, value in config.items():
        name = raw_key if isinstance(raw_key, str) and raw_key in KNOWN_BRANCHES else attribute_key(raw_key)
        if name not in KNOWN_BRANCHES:
            result[raw_key] = value
            continue
        if name in _CURRENCY_KEYED and isinstance(value, Mapping):
            value = _normalize_id_map(value, name, diagnostics)
        elif name == ConfigBranch.COUNTRIES and isinstance(value, Mapping):
            value = _normalize_countries_map(value, diagnostics)
        result[name] = value
    return result


def _normalize_id_map(
    branch: Mapping[RawId, object],
    branch_name: str,
    diagnostics: list[Diagnostic] | None,
) -> dict[Identifier, object]:
    result: dict[Identifier, object] = {}
    for key, value in branch.items():
        ident = normalize_id(key)
        if ident is None:
            _report_drop(diagnostics, branch_name, key, "Key cannot be converted to an identifier")
            continue
        result[ident] = value
    return result


def _normalize_countries_map(
    branch: Mapping[RawId, object],
    diagnostics: list[Diagnostic] | None,
) -> dict[Identifier, Identifier]:
    result: dict[Identifier, Identifier] = {}
    for key, value in branch.items():
        country = normalize_id(key)
        if country is None:
            _report_drop(
                diagnostics, ConfigBranch.COUNTRIES, key, "Country key cannot be converted to an identifier"
            )
            continue
        currency = normalize_id(value)
        if currency is None:
            _report_drop(
                diagnostics,
                ConfigBranch.COUNTRIES,
                value,
                f"Currency of country {country} cannot be converted to an identifier",
            )
            continue
        result[country] = currency
    return result


def _report_drop(
    diagnostics: list[Diagnostic] | None,
    branch_name: str,
    value: object,
    message: str,
) -> None:
    record_diagnostic(
        diagnostics,
        Diagnostic(
            code=DiagnosticCode.NORMALIZATION_DROP,
            message=message,
            path=(str(branch_name),),
            value=repr(value),
        ),
    )
