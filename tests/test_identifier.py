"""Tests for identifier normalization and frozen extension values.

Python 3.13+.
"""

from __future__ import annotations

from decimal import Decimal
from types import MappingProxyType

import pytest
from hypothesis import event, given
from hypothesis import strategies as st

from ccyregistry.core.identifier import (
    Identifier,
    Keyword,
    Symbol,
    attribute_key,
    normalize_id,
    parse_identifier,
)
from ccyregistry.core.values import freeze_mapping, freeze_value, thaw_value
from tests.strategies.identifiers import blank_texts, identifiers, raw_spellings, tagged_keys


class _Unprintable:
    def __str__(self) -> str:
        msg = "no string form"
        raise RuntimeError(msg)


class TestIdentifier:
    """Test the canonical Identifier value type."""

    def test_printed_form_plain(self) -> None:
        """Un-namespaced identifiers print as their name."""
        assert str(Identifier(None, "EUR")) == "EUR"

    def test_printed_form_namespaced(self) -> None:
        """Namespaced identifiers print as namespace/name."""
        assert str(Identifier("crypto", "USDT")) == "crypto/USDT"

    def test_plain_sorts_before_namespaced(self) -> None:
        """Un-namespaced identifiers come first in the total order."""
        ids = [Identifier("crypto", "AAA"), Identifier(None, "ZZZ"), Identifier(None, "EUR")]
        assert sorted(ids) == [
            Identifier(None, "EUR"),
            Identifier(None, "ZZZ"),
            Identifier("crypto", "AAA"),
        ]

    def test_of_parses_printed_form(self) -> None:
        """Identifier.of parses the printed form."""
        assert Identifier.of(":crypto/BTC") == Identifier("crypto", "BTC")

    def test_of_rejects_blank(self) -> None:
        """Identifier.of raises on blank text."""
        with pytest.raises(ValueError, match="blank"):
            Identifier.of("  :  ")

    def test_hashable_and_equal_by_value(self) -> None:
        """Equal identifiers hash equally."""
        assert {Identifier(None, "PLN"), Identifier(None, "PLN")} == {Identifier(None, "PLN")}


class TestNormalizeId:
    """Test normalize_id conversion rules."""

    def test_identifier_returned_unchanged(self) -> None:
        """Identifier input is returned as is."""
        ident = Identifier("crypto", "ETH")
        assert normalize_id(ident) is ident

    def test_string_trimmed_and_marker_stripped(self) -> None:
        """One leading ':' and surrounding whitespace are removed."""
        assert normalize_id("  :USD ") == Identifier(None, "USD")

    def test_only_one_marker_stripped(self) -> None:
        """A second ':' is part of the name."""
        assert normalize_id("::USD") == Identifier(None, ":USD")

    def test_namespaced_string(self) -> None:
        """ns/name strings become namespaced identifiers."""
        assert normalize_id("iso-4217-legacy/ADP") == Identifier("iso-4217-legacy", "ADP")

    def test_slash_without_both_parts_is_plain(self) -> None:
        """A slash with an empty side does not create a namespace."""
        assert normalize_id("/USD") == Identifier(None, "/USD")
        assert normalize_id("crypto/") == Identifier(None, "crypto/")

    def test_symbol_and_keyword_preserve_namespace(self) -> None:
        """Symbol and Keyword keep their namespace."""
        assert normalize_id(Symbol("crypto", "BTC")) == Identifier("crypto", "BTC")
        assert normalize_id(Keyword(None, "EUR")) == Identifier(None, "EUR")

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            (Keyword(None, "crypto/BTC"), Identifier("crypto", "BTC")),
            (Keyword(None, ":EUR"), Identifier(None, "EUR")),
            (Symbol("  ", "EUR"), Identifier(None, "EUR")),
            (Symbol(" crypto ", " BTC "), Identifier("crypto", "BTC")),
            (Keyword("a/b", "c"), Identifier("a", "b/c")),
        ],
    )
    def test_tagged_keys_read_as_printed_form(self, raw: object, expected: Identifier) -> None:
        """Slashes, markers and padding inside tagged keys follow the printed-form rules."""
        assert normalize_id(raw) == expected

    @given(raw=tagged_keys())
    def test_tagged_key_result_round_trips(self, raw: Symbol | Keyword) -> None:
        """The printed form of a normalized tagged key reparses to the same identifier."""
        ident = normalize_id(raw)
        event(f"blank={ident is None}")
        if ident is not None:
            assert normalize_id(str(ident)) == ident

    def test_blank_keyword_name_is_none(self) -> None:
        """Keyword with a blank name cannot name anything."""
        assert normalize_id(Keyword("crypto", "  ")) is None

    def test_none_is_none(self) -> None:
        """None stays None."""
        assert normalize_id(None) is None

    def test_other_values_use_string_form(self) -> None:
        """Non-string values go through str()."""
        assert normalize_id(978) == Identifier(None, "978")

    def test_unprintable_value_is_none(self) -> None:
        """A value whose __str__ fails yields None instead of raising."""
        assert normalize_id(_Unprintable()) is None

    @given(text=blank_texts)
    def test_blank_strings_are_none(self, text: str) -> None:
        """Blank text after trimming yields None."""
        assert normalize_id(text) is None

    @given(ident=identifiers())
    def test_printed_form_round_trips(self, ident: Identifier) -> None:
        """normalize_id(str(k)) == k for canonical identifiers."""
        event(f"namespaced={ident.namespace is not None}")
        assert normalize_id(str(ident)) == ident

    @given(ident=identifiers(), data=st.data())
    def test_every_raw_spelling_normalizes_to_same_identifier(
        self, ident: Identifier, data: st.DataObject
    ) -> None:
        """All raw spellings of a key normalize to one identifier."""
        raw = data.draw(raw_spellings(ident))
        assert normalize_id(raw) == ident

    def test_parse_identifier_blank_is_none(self) -> None:
        """parse_identifier returns None on blank input."""
        assert parse_identifier(" ") is None


class TestAttributeKey:
    """Test attribute_key coercion of branch and attribute names."""

    @pytest.mark.parametrize(
        "raw", ["countries", ":countries", Keyword(None, "countries"), Symbol(None, "countries")]
    )
    def test_spellings_of_branch_name(self, raw: object) -> None:
        """All spellings yield the plain name."""
        assert attribute_key(raw) == "countries"

    def test_blank_is_none(self) -> None:
        """Blank keys yield None."""
        assert attribute_key(":") is None


class TestFrozenValues:
    """Test freezing of extension values."""

    def test_containers_frozen_recursively(self) -> None:
        """Lists, sets and dicts become tuples, frozensets and read-only maps."""
        frozen = freeze_value({"a": [1, {"b": {2, 3}}]})
        assert isinstance(frozen, MappingProxyType)
        assert frozen["a"] == (1, MappingProxyType({"b": frozenset({2, 3})}))

    def test_tagged_values_become_identifiers(self) -> None:
        """Keyword values become Identifiers."""
        assert freeze_value(Keyword("crypto", "BTC")) == Identifier("crypto", "BTC")

    def test_scalars_kept(self) -> None:
        """Supported scalars are kept as they are."""
        for value in (None, True, 3, 1.5, Decimal("0.01"), "text"):
            assert freeze_value(value) == value

    def test_unsupported_values_stringified(self) -> None:
        """Unsupported values are converted to their string form."""
        assert freeze_value(complex(1, 2)) == "(1+2j)"

    def test_mapping_keys_become_strings(self) -> None:
        """Keys of frozen mappings are strings."""
        assert dict(freeze_mapping({Keyword(None, "issuer"): "ECB", 7: "x"})) == {"issuer": "ECB", "7": "x"}

    def test_thaw_for_export(self) -> None:
        """thaw_value produces plain containers."""
        frozen = freeze_value({"ids": [Identifier(None, "EUR")], "tags": {"b", "a"}})
        assert thaw_value(frozen) == {"ids": ["EUR"], "tags": ["a", "b"]}
