"""Hypothesis strategies for ccyregistry property-based testing.

Strategies are organized by domain:

- identifiers: canonical identifiers, their raw spellings, codes
- config: raw configurations with inline data and malformed shapes

Usage:
    from tests.strategies import identifiers, raw_configs
    from tests.strategies.identifiers import raw_spellings
"""

from .config import currency_entries, inline_countries, localized_maps, raw_configs
from .identifiers import (
    blank_texts,
    country_codes,
    currency_codes,
    identifiers,
    namespaces,
    raw_spellings,
    tagged_keys,
)

__all__ = [
    "blank_texts",
    "country_codes",
    "currency_codes",
    "currency_entries",
    "identifiers",
    "inline_countries",
    "localized_maps",
    "namespaces",
    "raw_configs",
    "raw_spellings",
    "tagged_keys",
]
