"""Currency value type.

Python 3.13+.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType

from ccyregistry.constants import AUTO_SCALE, ISO_DOMAIN, NO_NUMERIC
from ccyregistry.core.identifier import Identifier
from ccyregistry.core.values import EMPTY_MAPPING, ExtensionValue, freeze_mapping, thaw_value
from ccyregistry.diagnostics.errors import InvalidRegistryValueError

__all__ = [
    "Currency",
    "derive_domain",
    "normalize_domain",
]


def derive_domain(currency_id: Identifier) -> str:
    """Return the default domain of a currency identifier.

    Un-namespaced identifiers belong to ISO 4217; namespaced identifiers
    belong to the upper-cased namespace (``crypto/BTC`` -> ``CRYPTO``).
    """
    if currency_id.namespace:
        return currency_id.namespace.upper()
    return ISO_DOMAIN


def normalize_domain(value: object) -> str | None:
    """Canonical form of an explicitly configured domain, or None if blank."""
    if value is None:
        return None
    text = str(value).strip().lstrip(":").strip()
    return text.upper() or None


@dataclass(frozen=True, slots=True)
class Currency:
    """Immutable currency reference data.

    Immutable, thread-safe, hashable. Extensions take no part in hashing but
    do in equality.

    Attributes:
        id: Unique identifier (primary key in a registry)
        numeric: ISO 4217 numeric code, or NO_NUMERIC (-1)
        scale: Number of decimal places, or AUTO_SCALE (-1) for variable scale
        domain: Domain name (e.g. 'ISO-4217', 'CRYPTO')
        kind: Optional classification (e.g. 'FIAT', 'DECENTRALIZED')
        extensions: Additional frozen attributes copied from configuration
    """

    id: Identifier
    numeric: int = NO_NUMERIC
    scale: int = AUTO_SCALE
    domain: str = ISO_DOMAIN
    kind: Identifier | None = None
    extensions: Mapping[str, ExtensionValue] = field(default=EMPTY_MAPPING, hash=False)

    def __post_init__(self) -> None:
        """Validate invariants and freeze extensions.

        Raises:
            InvalidRegistryValueError: If a field violates currency invariants
        """
        if not isinstance(self.id, Identifier):
            msg = f"Currency id must be an Identifier, got {type(self.id).__name__}"
            raise InvalidRegistryValueError(msg)
        if isinstance(self.numeric, bool) or not isinstance(self.numeric, int):
            msg = f"Currency {self.id} numeric code must be an int, got {self.numeric!r}"
            raise InvalidRegistryValueError(msg)
        if self.numeric <= 0 and self.numeric != NO_NUMERIC:
            msg = f"Currency {self.id} numeric code must be positive or {NO_NUMERIC}, got {self.numeric}"
            raise InvalidRegistryValueError(msg)
        if isinstance(self.scale, bool) or not isinstance(self.scale, int):
            msg = f"Currency {self.id} scale must be an int, got {self.scale!r}"
            raise InvalidRegistryValueError(msg)
        if self.scale < 0 and self.scale != AUTO_SCALE:
            msg = f"Currency {self.id} scale must be non-negative or {AUTO_SCALE}, got {self.scale}"
            raise InvalidRegistryValueError(msg)
        if not self.domain:
            msg = f"Currency {self.id} domain must not be empty"
            raise InvalidRegistryValueError(msg)
        if not isinstance(self.extensions, MappingProxyType):
            object.__setattr__(self, "extensions", freeze_mapping(self.extensions))

    @classmethod
    def create(
        cls,
        currency_id: Identifier,
        numeric: int = NO_NUMERIC,
        scale: int = AUTO_SCALE,
        *,
        domain: str | None = None,
        kind: Identifier | None = None,
        extensions: Mapping[str, object] | None = None,
    ) -> Currency:
        """Create a currency, deriving the domain from the identifier when not given.

        Example:
            >>> Currency.create(Identifier("crypto", "BTC"), scale=8).domain
            'CRYPTO'
        """
        return cls(
            id=currency_id,
            numeric=numeric,
            scale=scale,
            domain=normalize_domain(domain) or derive_domain(currency_id),
            kind=kind,
            extensions=freeze_mapping(extensions or {}),
        )

    @property
    def code(self) -> str:
        """Short human-facing code (the identifier name, e.g. 'USD')."""
        return self.id.name

    @property
    def has_numeric(self) -> bool:
        """Check if the currency has a numeric code."""
        return self.numeric != NO_NUMERIC

    @property
    def is_auto_scaled(self) -> bool:
        """Check if the currency has a variable scale."""
        return self.scale == AUTO_SCALE

    def with_fields(self, **changes: object) -> Currency:
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)  # type: ignore[arg-type]

    def to_config(self) -> dict[str, object]:
        """Export as a configuration entry (sentinel-valued fields omitted)."""
        entry: dict[str, object] = {}
        if self.has_numeric:
            entry["numeric"] = self.numeric
        if not self.is_auto_scaled:
            entry["scale"] = self.scale
        entry["domain"] = self.domain
        if self.kind is not None:
            entry["kind"] = str(self.kind)
        for key, value in self.extensions.items():
            entry[key] = thaw_value(value)
        return entry
