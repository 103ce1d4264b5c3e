"""Immutable currency registry.

A Registry is a multi-indexed snapshot of currency reference data. Primary
fields are what configuration describes; derived indices are computed once
at construction and answer lookups by numeric code, short code, domain and
country.

Invariants (checked at construction, never re-validated on read):
    - currencies[k].id == k for every key k
    - every key of localized, traits and weights, and every value of
      countries, names a currency present in currencies
    - collision-group indices contain each currency exactly under its own
      code, numeric code (sentinel excluded) and domain
    - by_numeric holds the canonical currency of each numeric group

Python 3.13+.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from types import MappingProxyType

from ccyregistry.constants import ISO_DOMAIN, ISO_LEGACY_DOMAIN, NO_NUMERIC
from ccyregistry.core.identifier import Identifier, RawId, normalize_id
from ccyregistry.core.values import EMPTY_MAPPING, ExtensionValue, freeze_mapping, thaw_value
from ccyregistry.diagnostics.errors import InvalidRegistryValueError
from ccyregistry.locale_utils import locale_fallbacks, normalize_locale

from .currency import Currency
from .hierarchy import Hierarchies
from .weights import DEFAULT_POLICY, WeightPolicy

__all__ = [
    "Registry",
    "default_version",
]

type _Localized = Mapping[Identifier, Mapping[str, Mapping[str, ExtensionValue]]]


def default_version() -> str:
    """Return a timestamp version string (YYYYMMDDHHMMSSff, UTC)."""
    return datetime.now(UTC).strftime("%Y%m%d%H%M%S%f")[:16]


def _empty() -> Mapping[object, object]:
    return MappingProxyType({})


def _group[K](items: Iterator[tuple[K, Currency]]) -> Mapping[K, frozenset[Currency]]:
    groups: dict[K, set[Currency]] = {}
    for key, currency in items:
        groups.setdefault(key, set()).add(currency)
    return MappingProxyType({key: frozenset(members) for key, members in groups.items()})


@dataclass(frozen=True, slots=True)
class Registry:
    """Immutable multi-index snapshot of currency reference data.

    Thread-safe: never mutated after construction. "Updates" (merge,
    replace) produce new registries.

    Attributes:
        currencies: Currency id -> Currency (insertion order = source order)
        countries: Country id -> currency id
        localized: Currency id -> locale -> property -> value
        traits: Currency id -> ordered distinct trait ids
        weights: Currency id -> weight
        hierarchies: Classification trees (domain, kind, traits, ...)
        version: Version string
        ext: Open extension bucket
        policy: Weight policy used for canonical resolution
    """

    currencies: Mapping[Identifier, Currency] = field(default_factory=_empty, hash=False)
    countries: Mapping[Identifier, Identifier] = field(default_factory=_empty, hash=False)
    localized: _Localized = field(default_factory=_empty, hash=False)
    traits: Mapping[Identifier, tuple[Identifier, ...]] = field(default_factory=_empty, hash=False)
    weights: Mapping[Identifier, int] = field(default_factory=_empty, hash=False)
    hierarchies: Hierarchies = field(default_factory=Hierarchies, hash=False)
    version: str = field(default_factory=default_version)
    ext: Mapping[str, ExtensionValue] = field(default=EMPTY_MAPPING, hash=False)
    policy: WeightPolicy = DEFAULT_POLICY

    # Derived indices
    by_numeric: Mapping[int, Currency] = field(init=False, repr=False, compare=False, hash=False)
    country_currency: Mapping[Identifier, Currency] = field(
        init=False, repr=False, compare=False, hash=False
    )
    currency_countries: Mapping[Identifier, frozenset[Identifier]] = field(
        init=False, repr=False, compare=False, hash=False
    )
    by_code: Mapping[str, frozenset[Currency]] = field(
        init=False, repr=False, compare=False, hash=False
    )
    by_numeric_group: Mapping[int, frozenset[Currency]] = field(
        init=False, repr=False, compare=False, hash=False
    )
    by_domain: Mapping[str, frozenset[Currency]] = field(
        init=False, repr=False, compare=False, hash=False
    )

    def __post_init__(self) -> None:
        """Freeze primary fields, validate references and compute indices.

        Raises:
            InvalidRegistryValueError: If an invariant does not hold
        """
        self._freeze_primary()
        self._validate()
        self._index()

    def _freeze_primary(self) -> None:
        setattr_ = object.__setattr__
        setattr_(self, "currencies", MappingProxyType(dict(self.currencies)))
        setattr_(self, "countries", MappingProxyType(dict(self.countries)))
        setattr_(
            self,
            "localized",
            MappingProxyType({
                cid: MappingProxyType({
                    str(locale): freeze_mapping(props) for locale, props in locales.items()
                })
                for cid, locales in self.localized.items()
            }),
        )
        setattr_(
            self,
            "traits",
            MappingProxyType({cid: tuple(dict.fromkeys(ts)) for cid, ts in self.traits.items()}),
        )
        setattr_(self, "weights", MappingProxyType(dict(self.weights)))
        if not isinstance(self.hierarchies, Hierarchies):
            setattr_(self, "hierarchies", Hierarchies.create(self.hierarchies))
        if not isinstance(self.ext, MappingProxyType):
            setattr_(self, "ext", freeze_mapping(self.ext))
        if self.version is None:
            setattr_(self, "version", "")

    def _validate(self) -> None:
        for key, currency in self.currencies.items():
            if not isinstance(currency, Currency) or currency.id != key:
                msg = f"Currency registered under {key} does not carry that id: {currency!r}"
                raise InvalidRegistryValueError(msg)
        for country, cid in self.countries.items():
            if not isinstance(country, Identifier):
                msg = f"Country key must be an Identifier, got {country!r}"
                raise InvalidRegistryValueError(msg)
            self._require_currency(cid, f"country {country}")
        for cid in self.localized:
            self._require_currency(cid, "localized properties")
        for cid, traits in self.traits.items():
            self._require_currency(cid, "traits")
            if not all(isinstance(t, Identifier) for t in traits):
                msg = f"Traits of {cid} must be Identifiers, got {traits!r}"
                raise InvalidRegistryValueError(msg)
        for cid, weight in self.weights.items():
            self._require_currency(cid, "weight")
            if isinstance(weight, bool) or not isinstance(weight, int):
                msg = f"Weight of {cid} must be an int, got {weight!r}"
                raise InvalidRegistryValueError(msg)

    def _require_currency(self, cid: object, what: str) -> None:
        if cid not in self.currencies:
            msg = f"Dangling reference: {what} refers to unknown currency {cid}"
            raise InvalidRegistryValueError(msg)

    def _index(self) -> None:
        setattr_ = object.__setattr__
        currencies = tuple(self.currencies.values())

        by_numeric_group = _group((c.numeric, c) for c in currencies if c.numeric != NO_NUMERIC)
        setattr_(self, "by_numeric_group", by_numeric_group)
        setattr_(
            self,
            "by_numeric",
            MappingProxyType({
                numeric: self.policy.canonical(group, self.weights)
                for numeric, group in by_numeric_group.items()
            }),
        )
        setattr_(self, "by_code", _group((c.code, c) for c in currencies))
        setattr_(self, "by_domain", _group((c.domain, c) for c in currencies))

        setattr_(
            self,
            "country_currency",
            MappingProxyType({
                country: self.currencies[cid] for country, cid in self.countries.items()
            }),
        )
        grouped: dict[Identifier, set[Identifier]] = {}
        for country, cid in self.countries.items():
            grouped.setdefault(cid, set()).add(country)
        setattr_(
            self,
            "currency_countries",
            MappingProxyType({cid: frozenset(cs) for cid, cs in grouped.items()}),
        )

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    @classmethod
    def empty(cls, *, version: str | None = None, policy: WeightPolicy = DEFAULT_POLICY) -> Registry:
        """Create a registry without currencies."""
        return cls(version=default_version() if version is None else version, policy=policy)

    def with_fields(self, **changes: object) -> Registry:
        """Return a new registry with primary fields replaced (indices recomputed)."""
        return replace(self, **changes)  # type: ignore[arg-type]

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self.currencies)

    def __iter__(self) -> Iterator[Currency]:
        return iter(self.currencies.values())

    def __contains__(self, key: object) -> bool:
        ident = key.id if isinstance(key, Currency) else normalize_id(key)
        return ident in self.currencies

    def __repr__(self) -> str:
        return (
            f"Registry(version={self.version!r}, currencies={len(self.currencies)}, "
            f"countries={len(self.countries)})"
        )

    def get(self, currency_id: RawId) -> Currency | None:
        """Return the currency with the given identifier, or None."""
        ident = normalize_id(currency_id)
        return None if ident is None else self.currencies.get(ident)

    def weight(self, currency_id: RawId) -> int:
        """Return the effective weight of a currency."""
        ident = normalize_id(currency_id)
        if ident is None:
            return self.policy.default_weight
        return self.policy.weight_of(ident, self.weights)

    def of_code(self, code: str) -> Currency | None:
        """Return the canonical currency with the given short code.

        Example:
            >>> registry.of_code("USD").id  # doctest: +SKIP
            Identifier(namespace=None, name='USD')
        """
        group = self._code_group(code)
        return None if not group else self.policy.canonical(group, self.weights)

    def of_numeric(self, numeric: int) -> Currency | None:
        """Return the canonical currency with the given numeric code."""
        return self.by_numeric.get(numeric)

    def of_country(self, country: RawId) -> Currency | None:
        """Return the currency used in a country."""
        ident = normalize_id(country)
        return None if ident is None else self.country_currency.get(ident)

    def countries_of(self, currency_id: RawId) -> frozenset[Identifier]:
        """Return countries using a currency."""
        ident = normalize_id(currency_id)
        return self.currency_countries.get(ident, frozenset()) if ident else frozenset()

    def ranked_by_code(self, code: str) -> tuple[Currency, ...]:
        """Return all currencies sharing a code, canonical first."""
        return self.policy.rank(self._code_group(code), self.weights)

    def _code_group(self, code: str) -> frozenset[Currency]:
        # Upper-cased first; codes configured in lower case still match verbatim
        stripped = code.strip()
        return self.by_code.get(stripped.upper()) or self.by_code.get(stripped, frozenset())

    def of_domain(self, domain: str) -> tuple[Currency, ...]:
        """Return currencies of a domain, canonical first."""
        return self.policy.rank(self.by_domain.get(domain.upper(), frozenset()), self.weights)

    def traits_of(self, currency_id: RawId) -> tuple[Identifier, ...]:
        """Return the traits of a currency."""
        ident = normalize_id(currency_id)
        return self.traits.get(ident, ()) if ident else ()

    def has_trait(self, currency_id: RawId, trait: RawId) -> bool:
        """Check if a currency has a trait, directly or through the traits hierarchy."""
        hierarchy = self.hierarchies.traits
        return any(hierarchy.isa(own, trait) for own in self.traits_of(currency_id))

    def is_kind(self, currency_id: RawId, kind: RawId) -> bool:
        """Check if a currency's kind equals or derives from kind."""
        currency = self.get(currency_id)
        if currency is None or currency.kind is None:
            return False
        return self.hierarchies.kind.isa(currency.kind, kind)

    def is_iso_like_domain(self, domain: str) -> bool:
        """Check if a domain is ISO 4217 or derives from it."""
        if domain in (ISO_DOMAIN, ISO_LEGACY_DOMAIN):
            return True
        return self.hierarchies.domain.isa(domain, ISO_DOMAIN)

    def localized_properties(self, currency_id: RawId, locale: object) -> Mapping[str, ExtensionValue]:
        """Return the property map of a currency for a locale (exact key only)."""
        ident = normalize_id(currency_id)
        locales = self.localized.get(ident, EMPTY_MAPPING) if ident else EMPTY_MAPPING
        key = normalize_locale(locale)
        return locales.get(key, EMPTY_MAPPING) if key else EMPTY_MAPPING  # type: ignore[return-value]

    def localized_property(
        self,
        currency_id: RawId,
        prop: str,
        locale: object,
        default: ExtensionValue = None,
    ) -> ExtensionValue:
        """Look up a localized property with locale fallback.

        Tries the locale itself, then its parents (``de_CH`` -> ``de``), then
        the wildcard locale ``*``.

        Args:
            currency_id: Currency identifier
            prop: Property name (e.g. 'name', 'symbol')
            locale: Locale code (BCP-47 or POSIX)
            default: Value returned when no locale defines the property

        Returns:
            Property value or default
        """
        ident = normalize_id(currency_id)
        locales = self.localized.get(ident) if ident else None
        if not locales:
            return default
        for key in locale_fallbacks(locale):
            props = locales.get(key)
            if props is not None and prop in props:
                return props[prop]
        return default

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def to_config(self) -> dict[str, object]:
        """Export as a plain configuration map that builds an equal registry."""
        config: dict[str, object] = {"version": self.version}
        config["currencies"] = {str(cid): c.to_config() for cid, c in self.currencies.items()}
        config["countries"] = {str(k): str(v) for k, v in self.countries.items()}
        config["localized"] = {
            str(cid): {locale: thaw_value(props) for locale, props in locales.items()}
            for cid, locales in self.localized.items()
        }
        config["traits"] = {str(cid): [str(t) for t in ts] for cid, ts in self.traits.items()}
        config["weights"] = {str(cid): w for cid, w in self.weights.items()}
        propagate = sorted({key for c in self.currencies.values() for key in c.extensions})
        if propagate:
            config["propagate_keys"] = propagate
        hierarchies = self.hierarchies.to_config()
        if hierarchies:
            config["hierarchies"] = hierarchies
        if self.ext:
            config["ext"] = thaw_value(self.ext)
        return config
