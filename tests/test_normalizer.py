# tests/test_normalizer.py

"""Tests for store, category, name and size normalisation."""

import unittest

from grocery_compare.filters.normalizer import (
    category_set,
    match_store,
    normalize_category,
    normalize_product_name,
    normalize_size_key,
    normalize_store_name,
)
from grocery_compare.models.records import ProductRecord, PromotionRecord


class TestNormalizeStoreName(unittest.TestCase):
    """normalize_store_name alias rules."""

    def test_winners_variants_share_token(self) -> None:
        """All spellings of Winners collapse to one token."""
        self.assertEqual(normalize_store_name("WINNERS"), "winners")
        self.assertEqual(
            normalize_store_name("Winner's Supermarket"), "winners"
        )
        self.assertEqual(normalize_store_name("winners"), "winners")

    def test_king_or_saver_maps_to_kingsavers(self) -> None:
        self.assertEqual(normalize_store_name("King Savers"), "kingsavers")
        self.assertEqual(normalize_store_name("SAVER plus"), "kingsavers")

    def test_super_or_u_maps_to_super_u(self) -> None:
        self.assertEqual(normalize_store_name("Super U"), "super u")
        self.assertEqual(normalize_store_name("Hyper U"), "super u")
        self.assertEqual(normalize_store_name("supermarket"), "super u")

    def test_unknown_store_passes_through_lowered(self) -> None:
        self.assertEqual(normalize_store_name("  Intermart "), "intermart")

    def test_winner_rule_precedes_super_rule(self) -> None:
        """'Winners Supermarket' contains 'super' but is still Winners."""
        self.assertEqual(
            normalize_store_name("Winners Supermarket"), "winners"
        )

    def test_empty_and_none(self) -> None:
        self.assertEqual(normalize_store_name(""), "")
        self.assertEqual(normalize_store_name(None), "")


class TestMatchStore(unittest.TestCase):
    """match_store tiered resolution."""

    def test_exact(self) -> None:
        result = match_store("winners")
        self.assertTrue(result.matched)
        self.assertEqual(result.store, "Winners")
        self.assertEqual(result.confidence, "exact")

    def test_alias(self) -> None:
        result = match_store("HyperU")
        self.assertEqual(result.store, "Super U")
        self.assertEqual(result.confidence, "alias")

    def test_partial(self) -> None:
        result = match_store("King Savers Flacq branch")
        self.assertEqual(result.store, "Kingsavers")
        self.assertEqual(result.confidence, "partial")

    def test_no_match(self) -> None:
        result = match_store("Intermart")
        self.assertFalse(result.matched)
        self.assertEqual(result.confidence, "none")

    def test_blank(self) -> None:
        self.assertFalse(match_store("   ").matched)
        self.assertFalse(match_store(None).matched)


class TestNormalizeCategory(unittest.TestCase):
    """normalize_category display form."""

    def test_capitalises(self) -> None:
        self.assertEqual(normalize_category("dAIRY"), "Dairy")
        self.assertEqual(normalize_category("frozen"), "Frozen")

    def test_empty(self) -> None:
        self.assertEqual(normalize_category(""), "")
        self.assertEqual(normalize_category(None), "")
        self.assertEqual(normalize_category("   "), "")

    def test_category_set_skips_empty_and_dedupes(self) -> None:
        items = [
            ProductRecord(
                id="1", name="Milk", price=45.0, store="Winners",
                categories=("dairy", ""),
            ),
            ProductRecord(
                id="2", name="Cheese", price=90.0, store="Winners",
                categories=("DAIRY",),
            ),
            PromotionRecord(
                id="p1", name="Chips", store="Super U", new_price=20.0,
                category="snacks",
            ),
            PromotionRecord(
                id="p2", name="Bread", store="Super U", new_price=12.0,
            ),
        ]
        self.assertEqual(category_set(items), ["Dairy", "Snacks"])


class TestNormalizeProductName(unittest.TestCase):

    def test_collapses_whitespace(self) -> None:
        self.assertEqual(
            normalize_product_name("  Basmati   Rice 1KG "),
            "basmati rice 1kg",
        )

    def test_none(self) -> None:
        self.assertEqual(normalize_product_name(None), "")


class TestNormalizeSizeKey(unittest.TestCase):
    """normalize_size_key unit conversion."""

    def test_weights_convert_to_grams(self) -> None:
        self.assertEqual(normalize_size_key("1kg"), "1000g")
        self.assertEqual(normalize_size_key("1000 g"), "1000g")
        self.assertEqual(normalize_size_key("500 grams"), "500g")

    def test_volumes_convert_to_millilitres(self) -> None:
        self.assertEqual(normalize_size_key("1L"), "1000ml")
        self.assertEqual(normalize_size_key("1.5 litres"), "1500ml")
        self.assertEqual(normalize_size_key("250ml"), "250ml")

    def test_counts(self) -> None:
        self.assertEqual(normalize_size_key("x12"), "12x")
        self.assertEqual(normalize_size_key("6 pcs"), "6x")
        self.assertEqual(normalize_size_key("6 x 200ml"), "6x")

    def test_unknown_and_empty(self) -> None:
        self.assertEqual(normalize_size_key("Family Pack"), "familypack")
        self.assertEqual(normalize_size_key(""), "NO_SIZE")
        self.assertEqual(normalize_size_key(None), "NO_SIZE")


if __name__ == "__main__":
    unittest.main()
