"""Tests for domain value objects."""

from decimal import Decimal

import pytest

from storefront.domain import AdminContext, Price, Slug, dedupe_labels
from storefront.domain.exceptions import ValidationError


class TestSlug:
    """Tests for Slug value object."""

    def test_lowercases_and_hyphenates(self) -> None:
        """Spaces become hyphens and letters are lowercased."""
        assert Slug.from_name("Wrist Watches").value == "wrist-watches"

    def test_trims_surrounding_whitespace(self) -> None:
        """Leading and trailing whitespace is dropped."""
        assert Slug.from_name("  Rings  ").value == "rings"

    def test_collapses_whitespace_runs(self) -> None:
        """A run of mixed whitespace becomes a single hyphen."""
        assert Slug.from_name("Gold \t\n Chains").value == "gold-chains"

    def test_same_slug_for_case_and_padding_variants(self) -> None:
        """Names differing only in case or padding collide."""
        assert Slug.from_name("Shoes ") == Slug.from_name("shoes")

    def test_keeps_punctuation(self) -> None:
        """Characters other than whitespace are kept as-is."""
        assert Slug.from_name("Men's Rings & Bands").value == "men's-rings-&-bands"

    @pytest.mark.parametrize("name", ["", "   ", "\t\n"])
    def test_empty_name_raises(self, name: str) -> None:
        """Blank names are rejected."""
        with pytest.raises(ValidationError) as exc_info:
            Slug.from_name(name)
        assert exc_info.value.field == "name"

    def test_str(self) -> None:
        """String form is the slug value."""
        assert str(Slug.from_name("Necklaces")) == "necklaces"


class TestPrice:
    """Tests for Price value object."""

    def test_parse_integer_string(self) -> None:
        """Numeric strings are parsed."""
        assert Price.parse("125000").amount == Decimal("125000")

    def test_parse_decimal_string(self) -> None:
        """Fractional prices keep their precision."""
        assert Price.parse(" 19.99 ").amount == Decimal("19.99")

    def test_parse_number(self) -> None:
        """Numbers are accepted."""
        assert Price.parse(42).amount == Decimal("42")

    def test_zero_is_allowed(self) -> None:
        """Zero is a valid price."""
        assert Price.parse("0").amount == Decimal("0")

    def test_negative_raises(self) -> None:
        """Negative prices are rejected."""
        with pytest.raises(ValidationError) as exc_info:
            Price.parse("-1")
        assert exc_info.value.field == "price"

    def test_trailing_zeros_allowed(self) -> None:
        """Extra zero places do not change the value."""
        assert Price.parse("19.900").amount == Decimal("19.9")

    @pytest.mark.parametrize("raw", ["1.005", "0.001", "19.999"])
    def test_sub_cent_precision_raises(self, raw) -> None:
        """Prices with more than two decimal places are rejected, not rounded."""
        with pytest.raises(ValidationError) as exc_info:
            Price.parse(raw)
        assert exc_info.value.field == "price"

    def test_largest_storable_price(self) -> None:
        """The largest amount the price column holds is accepted."""
        assert Price.parse("9999999999.99").amount == Decimal("9999999999.99")

    @pytest.mark.parametrize("raw", ["10000000000", "1e12", "1e30"])
    def test_too_large_raises(self, raw) -> None:
        """Amounts the price column cannot hold are rejected."""
        with pytest.raises(ValidationError) as exc_info:
            Price.parse(raw)
        assert exc_info.value.field == "price"

    @pytest.mark.parametrize("raw", ["", "  ", "abc", "NaN", "Infinity", None, True])
    def test_invalid_values_raise(self, raw) -> None:
        """Non-numeric and non-finite values are rejected."""
        with pytest.raises(ValidationError) as exc_info:
            Price.parse(raw)
        assert exc_info.value.field == "price"


class TestDedupeLabels:
    """Tests for size/color label normalization."""

    def test_keeps_first_occurrence_order(self) -> None:
        """Repeats are dropped and order is kept."""
        assert dedupe_labels(["M", "L", "M", "S"]) == ("M", "L", "S")

    def test_trims_and_drops_blank(self) -> None:
        """Labels are trimmed and blanks removed."""
        assert dedupe_labels([" Gold ", "", "  ", "Gold"]) == ("Gold",)

    def test_none_is_empty(self) -> None:
        """Missing lists normalize to an empty tuple."""
        assert dedupe_labels(None) == ()


class TestAdminContext:
    """Tests for AdminContext capability."""

    def test_for_actor(self) -> None:
        """Capability records the actor and a UTC timestamp."""
        admin = AdminContext.for_actor("admin-1")
        assert admin.actor_id == "admin-1"
        assert admin.authenticated_at.tzinfo is not None

    def test_is_immutable(self) -> None:
        """Capabilities cannot be modified."""
        admin = AdminContext.for_actor("admin-1")
        with pytest.raises(AttributeError):
            admin.actor_id = "someone-else"  # type: ignore[misc]
