"""Seed configuration from Babel CLDR data.

Produces a raw configuration map, in the same shape as a YAML resource,
from the Unicode CLDR data bundled with Babel:

    - currencies: every currency that is active legal tender in at least
      one territory, with its CLDR precision as scale
    - countries: each territory mapped to its first active tender currency
    - localized: display name and symbol for each requested locale

CLDR carries no ISO 4217 numeric codes, so seeded currencies have none.
The result flows through the normal pipeline:

    >>> registry = config_to_registry(cldr_config(("en", "de")))  # doctest: +SKIP

Python 3.13+. Requires Babel.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from functools import lru_cache

from babel import __version__ as babel_version
from babel.core import get_global
from babel.numbers import get_currency_precision

from ccyregistry.constants import ISO_DOMAIN
from ccyregistry.locale_utils import get_babel_locale, normalize_locale

__all__ = [
    "active_territory_currencies",
    "cldr_config",
]

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def active_territory_currencies() -> dict[str, tuple[str, ...]]:
    """Return active legal tender currencies per territory.

    Territories and their currency lists keep CLDR order (primary currency
    first). Territories without an active tender currency are omitted.

    Returns:
        Mapping of ISO 3166-1 territory code to currency codes
    """
    # Data format: list of (code, start_date, end_date, tender)
    # end_date=None means still active; tender=True means legal tender
    territory_currencies = get_global("territory_currencies")
    result: dict[str, tuple[str, ...]] = {}
    for territory in sorted(territory_currencies):
        codes = tuple(c[0] for c in territory_currencies[territory] if c[2] is None and c[3])
        # Numeric "territories" are UN M.49 regions, not countries.
        if codes and territory.isalpha():
            result[territory] = codes
    return result


def cldr_config(locales: Iterable[str] = ("en",)) -> dict[str, object]:
    """Build a raw registry configuration from CLDR data.

    Args:
        locales: Locales whose currency names and symbols are included

    Returns:
        Configuration map with version, currencies, countries and localized
        branches

    Raises:
        babel.core.UnknownLocaleError: If a locale is not known to CLDR
        ValueError: If a locale code is malformed
    """
    by_territory = active_territory_currencies()
    codes = sorted({code for territory_codes in by_territory.values() for code in territory_codes})

    currencies: dict[str, dict[str, object]] = {
        code: {"scale": get_currency_precision(code), "domain": ISO_DOMAIN} for code in codes
    }
    countries = {territory: territory_codes[0] for territory, territory_codes in by_territory.items()}

    localized: dict[str, dict[str, dict[str, str]]] = {}
    for raw_locale in locales:
        locale_key = normalize_locale(raw_locale)
        if locale_key is None:
            continue
        locale = get_babel_locale(locale_key)
        for code in codes:
            props: dict[str, str] = {}
            name = locale.currencies.get(code)
            if name:
                props["name"] = name
            symbol = locale.currency_symbols.get(code)
            if symbol:
                props["symbol"] = symbol
            if props:
                localized.setdefault(code, {})[locale_key] = props

    logger.debug(
        "CLDR seed: %d currencies, %d territories, locales %s",
        len(currencies),
        len(countries),
        ", ".join(_localized_locales(localized)) or "-",
    )
    return {
        "version": f"cldr-babel-{babel_version}",
        "currencies": currencies,
        "countries": countries,
        "localized": localized,
    }


def _localized_locales(localized: dict[str, dict[str, dict[str, str]]]) -> list[str]:
    """Return the distinct locale keys of a localized branch, sorted."""
    return sorted({locale for per_locale in localized.values() for locale in per_locale})
