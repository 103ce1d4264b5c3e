"""Enumerations for ccyregistry type-safe constants.

Uses StrEnum (Python 3.11+) for automatic string conversion.
StrEnum members are strings themselves, so they compare equal to the plain
field names accepted in configuration and merge options.

Python 3.13+.
"""

from enum import StrEnum


class ConfigBranch(StrEnum):
    """Recognized top-level branch of a configuration map.

    StrEnum provides automatic string conversion: str(ConfigBranch.CURRENCIES) == "currencies"
    """

    VERSION = "version"
    """Version string of the configuration."""

    CURRENCIES = "currencies"
    """Currency id -> attribute map."""

    COUNTRIES = "countries"
    """Country id -> currency id."""

    LOCALIZED = "localized"
    """Currency id -> locale -> property map."""

    TRAITS = "traits"
    """Currency id -> sequence of trait ids."""

    WEIGHTS = "weights"
    """Currency id -> integer weight."""

    PROPAGATE_KEYS = "propagate_keys"
    """Attribute keys copied onto built currencies as extensions."""

    HIERARCHIES = "hierarchies"
    """Axis -> child -> parent(s) classification trees."""

    EXT = "ext"
    """Open extension bucket."""


class RegistryField(StrEnum):
    """Primary field of a Registry, as named in merge preserve lists.

    StrEnum provides automatic string conversion: str(RegistryField.WEIGHTS) == "weights"
    """

    CURRENCIES = "currencies"
    COUNTRIES = "countries"
    LOCALIZED = "localized"
    TRAITS = "traits"
    WEIGHTS = "weights"
    HIERARCHIES = "hierarchies"
    EXT = "ext"
    VERSION = "version"


class CurrencyField(StrEnum):
    """Attribute of a Currency that may be preserved during a merge.

    StrEnum provides automatic string conversion: str(CurrencyField.SCALE) == "scale"
    """

    NUMERIC = "numeric"
    SCALE = "scale"
    DOMAIN = "domain"
    KIND = "kind"
    EXTENSIONS = "extensions"


class LoadStatus(StrEnum):
    """Status of a configuration resource load attempt.

    StrEnum provides automatic string conversion: str(LoadStatus.SUCCESS) == "success"
    """

    SUCCESS = "success"
    """Resource resolved and parsed into a non-empty mapping."""

    NOT_FOUND = "not_found"
    """Resource could not be resolved."""

    MALFORMED = "malformed"
    """Resource resolved but did not parse into a non-empty mapping."""

    ERROR = "error"
    """Resource resolved but could not be read (permissions, encoding, bad path)."""


__all__ = [
    "ConfigBranch",
    "CurrencyField",
    "LoadStatus",
    "RegistryField",
]
