"""Locale utilities for localized currency properties.

Localized property maps are keyed by locale. Keys arrive from configuration
in BCP-47 form (``en-US``), POSIX form (``en_US``), as identifiers
(``:pl``), or as the wildcard ``*`` holding properties for every locale.
Keys are canonicalized once, when a registry is built, so lookups only ever
compare canonical strings.

Python 3.13+.
"""

from __future__ import annotations

import functools
from typing import TYPE_CHECKING

from ccyregistry.constants import DEFAULT_LOCALE_KEY
from ccyregistry.core.identifier import normalize_id

if TYPE_CHECKING:
    from babel import Locale

__all__ = [
    "get_babel_locale",
    "locale_fallbacks",
    "normalize_locale",
]


def normalize_locale(locale_code: object) -> str | None:
    """Convert a raw locale key to canonical POSIX form.

    BCP-47 uses hyphens (en-US), while Babel/POSIX uses underscores (en_US).
    Language subtags are lower-cased and territory subtags upper-cased, so
    ``EN-us`` and ``en_US`` name the same locale. The wildcard key is kept.

    Args:
        locale_code: Raw locale key (str, identifier, symbol or keyword)

    Returns:
        Canonical locale code, or None if the key is blank

    Example:
        >>> normalize_locale("en-US")
        'en_US'
        >>> normalize_locale(":pl")
        'pl'
        >>> normalize_locale("*")
        '*'
    """
    ident = normalize_id(locale_code)
    if ident is None:
        return None
    text = str(ident).replace("-", "_")
    if text == DEFAULT_LOCALE_KEY:
        return text
    language, sep, rest = text.partition("_")
    if not sep:
        return language.lower()
    parts = [language.lower()]
    for part in rest.split("_"):
        # Territory (2 letters or 3 digits) upper-case, script title-case.
        if len(part) == 4 and part.isalpha():
            parts.append(part.title())
        elif part:
            parts.append(part.upper() if len(part) <= 3 else part)
    return "_".join(parts)


def locale_fallbacks(locale_code: object) -> tuple[str, ...]:
    """Return lookup keys for a locale, most specific first.

    Example:
        >>> locale_fallbacks("de-CH")
        ('de_CH', 'de', '*')
    """
    canonical = normalize_locale(locale_code)
    if canonical is None or canonical == DEFAULT_LOCALE_KEY:
        return (DEFAULT_LOCALE_KEY,)
    keys: list[str] = []
    parts = canonical.split("_")
    for end in range(len(parts), 0, -1):
        keys.append("_".join(parts[:end]))
    keys.append(DEFAULT_LOCALE_KEY)
    return tuple(keys)


@functools.lru_cache(maxsize=128)
def get_babel_locale(locale_code: str) -> Locale:
    """Get a Babel Locale object with caching.

    Thread-safe via lru_cache internal locking.

    Args:
        locale_code: Locale code (BCP-47 or POSIX format accepted)

    Returns:
        Babel Locale object

    Raises:
        babel.core.UnknownLocaleError: If locale is not recognized
        ValueError: If locale format is invalid
    """
    # Lazy import: Babel loads CLDR data at import time; defer until needed
    from babel import Locale  # noqa: PLC0415

    normalized = normalize_locale(locale_code)
    if normalized is None or normalized == DEFAULT_LOCALE_KEY:
        msg = f"Not a concrete locale: {locale_code!r}"
        raise ValueError(msg)
    return Locale.parse(normalized)
