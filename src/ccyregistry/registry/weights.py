"""Weight policy for canonical currency resolution.

When several currencies share a code, a numeric code or a domain, exactly
one of them is the canonical representative. The policy orders candidates
by weight and then by identifier, which makes the order total: identifiers
are unique within a registry.

Python 3.13+.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from ccyregistry.constants import DEFAULT_WEIGHT
from ccyregistry.core.identifier import Identifier

from .currency import Currency

__all__ = [
    "DEFAULT_POLICY",
    "WeightPolicy",
]


@dataclass(frozen=True, slots=True)
class WeightPolicy:
    """Ordering of currencies competing for the same code.

    Attributes:
        default_weight: Weight of currencies without an explicit weight
        higher_wins: True if the highest weight is canonical, False if the
                     lowest is. Ties always go to the smaller identifier.
    """

    default_weight: int = DEFAULT_WEIGHT
    higher_wins: bool = True

    def weight_of(self, currency_id: Identifier, weights: Mapping[Identifier, int]) -> int:
        """Return the effective weight of a currency."""
        return weights.get(currency_id, self.default_weight)

    def sort_key(
        self, currency: Currency, weights: Mapping[Identifier, int]
    ) -> tuple[int, tuple[int, str, str]]:
        """Key sorting the canonical candidate first."""
        weight = self.weight_of(currency.id, weights)
        return (-weight if self.higher_wins else weight, currency.id.sort_key())

    def rank(
        self, currencies: Iterable[Currency], weights: Mapping[Identifier, int]
    ) -> tuple[Currency, ...]:
        """Order candidates from canonical to least preferred."""
        return tuple(sorted(currencies, key=lambda c: self.sort_key(c, weights)))

    def canonical(
        self, currencies: Iterable[Currency], weights: Mapping[Identifier, int]
    ) -> Currency | None:
        """Return the canonical candidate, or None if there are none.

        Example:
            >>> usd = Currency.create(Identifier(None, "USD"), 840, 2)
            >>> usdt = Currency.create(Identifier("crypto", "USD"), scale=8)
            >>> DEFAULT_POLICY.canonical([usdt, usd], {}).id
            Identifier(namespace=None, name='USD')
        """
        return min(currencies, key=lambda c: self.sort_key(c, weights), default=None)


DEFAULT_POLICY = WeightPolicy()
"""Higher weight wins, absent weight is 0, ties broken by identifier."""
