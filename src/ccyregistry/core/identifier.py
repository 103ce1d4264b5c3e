"""Canonical identifiers and raw key coercion.

Configuration written by hand (or produced by other tools) spells the same
key in several ways: plain strings, strings carrying a leading ``:`` marker,
and tagged symbol or keyword values. This module defines the canonical
Identifier type and the single total conversion from any of those raw forms.

Components:
    Identifier - Canonical, optionally namespaced key (frozen, ordered)
    Symbol - Raw symbolic key produced by the ``!sym`` YAML tag
    Keyword - Raw keyword key produced by the ``!kw`` YAML tag
    normalize_id - RawId -> Identifier | None (total, pure)
    attribute_key - RawId -> plain attribute name | None

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import total_ordering

from ccyregistry.constants import ID_MARKER

__all__ = [
    "Identifier",
    "Keyword",
    "RawId",
    "Symbol",
    "attribute_key",
    "normalize_id",
    "parse_identifier",
]


@total_ordering
@dataclass(frozen=True, slots=True)
class Identifier:
    """Canonical key used throughout the registry.

    Immutable, hashable and totally ordered: un-namespaced identifiers sort
    before namespaced ones, then by namespace, then by name.

    Attributes:
        namespace: Optional namespace (e.g. 'crypto', 'iso-4217-legacy')
        name: Local name (e.g. 'USD', 'BTC')

    Example:
        >>> str(Identifier("crypto", "USDT"))
        'crypto/USDT'
        >>> str(Identifier(None, "EUR"))
        'EUR'
    """

    namespace: str | None
    name: str

    def __str__(self) -> str:
        """Return printed form: 'name' or 'namespace/name'."""
        if self.namespace:
            return f"{self.namespace}/{self.name}"
        return self.name

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Identifier):
            return NotImplemented
        return self.sort_key() < other.sort_key()

    def sort_key(self) -> tuple[int, str, str]:
        """Return the key defining the total order of identifiers."""
        return (0 if self.namespace is None else 1, self.namespace or "", self.name)

    @classmethod
    def of(cls, text: str) -> Identifier:
        """Create an identifier from its printed form, raising on blank input.

        Args:
            text: Printed form ('EUR', 'crypto/USDT', ':PLN')

        Returns:
            Parsed Identifier

        Raises:
            ValueError: If text is blank
        """
        ident = parse_identifier(text)
        if ident is None:
            msg = f"Cannot create identifier from blank text: {text!r}"
            raise ValueError(msg)
        return ident


@dataclass(frozen=True, slots=True)
class Symbol:
    """Raw symbolic key as it appears in tagged configuration (``!sym ns/name``).

    Attributes:
        namespace: Optional namespace
        name: Local name
    """

    namespace: str | None
    name: str


@dataclass(frozen=True, slots=True)
class Keyword:
    """Raw keyword key as it appears in tagged configuration (``!kw ns/name``).

    Attributes:
        namespace: Optional namespace
        name: Local name
    """

    namespace: str | None
    name: str


type RawId = Identifier | Symbol | Keyword | str | object
"""Any value accepted where an identifier is expected."""


def parse_identifier(text: str) -> Identifier | None:
    """Parse the printed form of an identifier.

    Trims whitespace and strips a single leading ':' marker. Text of the form
    'ns/name' with both parts non-empty becomes a namespaced identifier;
    otherwise the whole text is the name.

    Args:
        text: Printed identifier

    Returns:
        Identifier, or None if nothing remains after trimming
    """
    stripped = text.strip()
    if stripped.startswith(ID_MARKER):
        stripped = stripped[len(ID_MARKER) :].strip()
    if not stripped:
        return None
    namespace, sep, name = stripped.partition("/")
    if sep and namespace and name:
        return Identifier(namespace, name)
    return Identifier(None, stripped)


def normalize_id(value: RawId) -> Identifier | None:
    """Convert a raw key representation into a canonical Identifier.

    Contract:
        - Identifier: returned unchanged
        - Symbol / Keyword: reinterpreted through the printed form, namespace
          preserved; a blank name yields None, a blank namespace is ignored
        - str: trimmed, one leading ':' stripped, blank -> None
        - None: None
        - anything else: converted via its string form

    Total and pure: never raises.

    Args:
        value: Raw key

    Returns:
        Canonical Identifier, or None if the value cannot name anything

    Example:
        >>> normalize_id("  :USD ")
        Identifier(namespace=None, name='USD')
        >>> normalize_id(Keyword("crypto", "BTC"))
        Identifier(namespace='crypto', name='BTC')
        >>> normalize_id("   ") is None
        True
    """
    match value:
        case None:
            return None
        case Identifier():
            return value
        case Symbol(namespace=namespace, name=name) | Keyword(namespace=namespace, name=name):
            if not name.strip():
                return None
            # Read back through the printed form so str() of the result reparses to it
            prefix = (namespace or "").strip()
            return parse_identifier(f"{prefix}/{name.strip()}" if prefix else name)
        case str():
            return parse_identifier(value)
        case _:
            try:
                text = str(value)
            except Exception:  # pylint: disable=broad-exception-caught
                # __str__ of arbitrary objects may fail; the contract is total.
                return None
            return parse_identifier(text)


def attribute_key(value: RawId) -> str | None:
    """Coerce a raw map key naming an attribute or branch to its plain name.

    ``"countries"``, ``":countries"``, ``Keyword(None, "countries")`` and
    ``Symbol(None, "countries")`` all yield ``"countries"``. Namespaced keys
    keep their printed form.

    Args:
        value: Raw key

    Returns:
        Plain attribute name, or None if the key is blank
    """
    ident = normalize_id(value)
    return None if ident is None else str(ident)
