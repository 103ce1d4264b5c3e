"""Core value types shared by the config pipeline and the registry.

Python 3.13+.
"""

from .identifier import (
    Identifier,
    Keyword,
    RawId,
    Symbol,
    attribute_key,
    normalize_id,
    parse_identifier,
)
from .values import ExtensionValue, freeze_mapping, freeze_value, thaw_value

__all__ = [
    "ExtensionValue",
    "Identifier",
    "Keyword",
    "RawId",
    "Symbol",
    "attribute_key",
    "freeze_mapping",
    "freeze_value",
    "normalize_id",
    "parse_identifier",
    "thaw_value",
]
