"""Frozen extension values.

Open-world data carried by a registry (currency extensions, the registry
``ext`` bucket, localized property values) is restricted to a small closed
set of immutable shapes so registries stay hashable-by-parts and safe to
share between threads.

Supported shapes:
    None, bool, int, float, Decimal, str, Identifier,
    tuple[ExtensionValue, ...], frozenset[ExtensionValue],
    Mapping[str, ExtensionValue] (read-only MappingProxyType)

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

from collections.abc import Mapping, Set
from decimal import Decimal
from types import MappingProxyType

from ccyregistry.core.identifier import Identifier, Keyword, Symbol, normalize_id

__all__ = [
    "EMPTY_MAPPING",
    "ExtensionValue",
    "freeze_mapping",
    "freeze_value",
    "thaw_value",
]

type ExtensionValue = (
    None
    | bool
    | int
    | float
    | Decimal
    | str
    | Identifier
    | tuple[ExtensionValue, ...]
    | frozenset[ExtensionValue]
    | Mapping[str, ExtensionValue]
)
"""Value shapes accepted in extension maps."""

EMPTY_MAPPING: Mapping[str, ExtensionValue] = MappingProxyType({})


def freeze_value(value: object) -> ExtensionValue:
    """Convert a parsed configuration value into a frozen extension value.

    Lists and tuples become tuples, sets become frozensets, mappings become
    read-only mappings with string keys, Symbol/Keyword become Identifiers.
    Values outside the supported shapes are converted to their string form.

    Args:
        value: Parsed configuration value

    Returns:
        Frozen equivalent
    """
    match value:
        case None | bool() | int() | float() | Decimal() | str() | Identifier():
            return value
        case Symbol() | Keyword():
            return normalize_id(value)
        case Mapping():
            return freeze_mapping(value)
        case Set():
            frozen = frozenset(freeze_value(item) for item in value)
            return frozen
        case list() | tuple():
            return tuple(freeze_value(item) for item in value)
        case _:
            return str(value)


def freeze_mapping(mapping: Mapping[object, object]) -> Mapping[str, ExtensionValue]:
    """Freeze a mapping, coercing keys to their string form.

    Args:
        mapping: Parsed configuration mapping

    Returns:
        Read-only mapping with string keys and frozen values
    """
    return MappingProxyType({_key_str(k): freeze_value(v) for k, v in mapping.items()})


def thaw_value(value: ExtensionValue) -> object:
    """Convert a frozen value back into plain mutable Python containers.

    Inverse of freeze_value for export (tuples become lists, frozensets become
    sorted lists, read-only mappings become dicts, identifiers become strings).

    Args:
        value: Frozen extension value

    Returns:
        Plain Python structure suitable for YAML/JSON serialization
    """
    match value:
        case Identifier():
            return str(value)
        case Mapping():
            return {k: thaw_value(v) for k, v in value.items()}
        case frozenset():
            return sorted((thaw_value(item) for item in value), key=str)
        case tuple():
            return [thaw_value(item) for item in value]
        case _:
            return value


def _key_str(key: object) -> str:
    if isinstance(key, str):
        return key
    ident = normalize_id(key)
    return str(key) if ident is None else str(ident)
