# tests/test_matcher.py

"""Tests for name, catalog and promotion matching."""

import unittest
from unittest.mock import patch

from grocery_compare.config.settings import Settings
from grocery_compare.filters.matcher import (
    SimilarityMatcher,
    SubstringMatcher,
    build_matcher,
    filter_promotions_by_catalog,
    find_promotion_for_product,
    is_in_catalog,
    names_match,
)
from grocery_compare.filters.normalizer import normalize_store_name
from grocery_compare.models.records import ProductRecord, PromotionRecord

def _product(
    name: str, store: str = "Winners", price: float = 50.0,
) -> ProductRecord:
    """Create a minimal ProductRecord."""
    return ProductRecord(id=f"p-{name}-{store}", name=name, price=price, store=store)

def _promo(
    name: str,
    store: str = "Winners",
    new_price: float = 40.0,
    promo_id: str | None = None,
    previous_price: float | None = None,
) -> PromotionRecord:
    """Create a minimal PromotionRecord."""
    return PromotionRecord(
        id=promo_id or f"promo-{name}-{store}",
        name=name,
        store=store,
        new_price=new_price,
        previous_price=previous_price,
    )

class TestNamesMatch(unittest.TestCase):
    """Bidirectional substring containment."""

    def test_longer_contains_shorter(self) -> None:
        self.assertTrue(names_match("Basmati Rice 1kg", "Basmati Rice"))
        self.assertTrue(names_match("Basmati Rice", "Basmati Rice 1kg"))

    def test_unrelated_names(self) -> None:
        self.assertFalse(names_match("Tea", "Apollo Noodle"))

    def test_case_and_whitespace_insensitive(self) -> None:
        self.assertTrue(names_match("  MILK ", "fresh milk 1l"))

    def test_short_token_is_permissive(self) -> None:
        """A short name matches anything containing it."""
        self.assertTrue(names_match("Rice", "Long Grain White Rice"))

    def test_empty_inputs_never_match(self) -> None:
        self.assertFalse(names_match("", "Milk"))
        self.assertFalse(names_match("Milk", None))
        self.assertFalse(names_match("   ", "Milk"))

class TestCatalog(unittest.TestCase):
    """is_in_catalog and promotion filtering."""

    def test_variant_of_catalog_item(self) -> None:
        self.assertTrue(is_in_catalog("Basmati Rice 1kg"))

    def test_french_keyword(self) -> None:
        self.assertTrue(is_in_catalog("Lait frais 1L"))

    def test_not_in_catalog(self) -> None:
        self.assertFalse(is_in_catalog("Dish Soap"))

    def test_custom_catalog(self) -> None:
        self.assertTrue(is_in_catalog("Dish Soap 500ml", ["dish soap"]))
        self.assertFalse(is_in_catalog("Milk", ["dish soap"]))

    def test_empty_name(self) -> None:
        self.assertFalse(is_in_catalog(""))
        self.assertFalse(is_in_catalog(None))

    def test_filter_keeps_order(self) -> None:
        promotions = [
            _promo("Sugar 1kg"),
            _promo("Dish Soap"),
            _promo("Weetabix 430g"),
        ]
        kept = filter_promotions_by_catalog(promotions)
        self.assertEqual(
            [p.name for p in kept], ["Sugar 1kg", "Weetabix 430g"]
        )

class TestFindPromotionForProduct(unittest.TestCase):
    """Store-scoped, first-match-wins promotion lookup."""

    def test_matches_same_store_and_name(self) -> None:
        product = _product("Basmati Rice 1kg", store="WINNERS")
        promo = _promo("Basmati Rice", store="Winner's Supermarket")
        self.assertIs(find_promotion_for_product(product, [promo]), promo)

    def test_other_store_is_ignored(self) -> None:
        product = _product("Basmati Rice", store="Winners")
        promo = _promo("Basmati Rice", store="Kingsavers")
        self.assertIsNone(find_promotion_for_product(product, [promo]))

    def test_name_mismatch_is_ignored(self) -> None:
        product = _product("Tea", store="Winners")
        promo = _promo("Apollo Noodle", store="Winners")
        self.assertIsNone(find_promotion_for_product(product, [promo]))

    def test_first_match_wins(self) -> None:
        """Earlier promotions in the input take precedence."""
        product = _product("Rice", store="Super U")
        first = _promo("Basmati Rice", store="Super U", promo_id="a")
        second = _promo("Rice", store="Super U", promo_id="b")
        result = find_promotion_for_product(product, [first, second])
        assert result is not None
        self.assertEqual(result.id, "a")

    def test_match_implies_store_equality(self) -> None:
        """Any returned promotion shares the product's canonical store."""
        stores = ["Winners", "King Savers", "Super U", "Intermart"]
        promotions = [_promo("Milk", store=s) for s in stores]
        for store in stores:
            with self.subTest(store=store):
                product = _product("Fresh Milk", store=store)
                promo = find_promotion_for_product(product, promotions)
                assert promo is not None
                self.assertEqual(
                    normalize_store_name(promo.store),
                    normalize_store_name(store),
                )
                self.assertTrue(names_match(product.name, promo.name))

    def test_missing_optional_fields_tolerated(self) -> None:
        product = _product("Milk", store="Winners")
        promo = PromotionRecord(
            id="x", name="Milk", store="Winners", new_price=10.0
        )
        self.assertIs(find_promotion_for_product(product, [promo]), promo)

    def test_empty_inputs(self) -> None:
        self.assertIsNone(
            find_promotion_for_product(_product("Milk"), [])
        )
        self.assertIsNone(
            find_promotion_for_product(
                _product("Milk", store=""), [_promo("Milk", store="")]
            )
        )

    def test_custom_matcher_is_used(self) -> None:
        """Promotion lookup accepts an alternative name matcher."""

        class ExactMatcher(SubstringMatcher):
            def names_match(self, a: str | None, b: str | None) -> bool:
                return bool(a) and a == b

        product = _product("Milk 1L")
        promo = _promo("Milk")
        self.assertIsNone(
            find_promotion_for_product(product, [promo], ExactMatcher())
        )


class TestSimilarityMatcher(unittest.TestCase):
    """Word-overlap similarity matching."""

    def setUp(self) -> None:
        self.matcher = SimilarityMatcher()

    def test_reordered_words_match(self) -> None:
        self.assertEqual(
            self.matcher.similarity("Basmati Rice", "Rice Basmati"), 1.0
        )
        self.assertTrue(
            self.matcher.names_match("Basmati Rice", "Rice Basmati")
        )

    def test_pack_sizes_are_ignored(self) -> None:
        self.assertEqual(
            SimilarityMatcher.clean_name("Basmati  Rice 1KG"), "basmati rice"
        )
        self.assertEqual(
            self.matcher.similarity("Basmati Rice 1kg", "basmati rice 500 g"),
            1.0,
        )

    def test_near_identical_words_get_partial_credit(self) -> None:
        score = self.matcher.similarity(
            "Chocolate Biscuits", "Chocolate Biscuit"
        )
        self.assertAlmostEqual(score, 0.9)
        self.assertTrue(self.matcher.similar_words("yoghurt", "yogurt"))
        self.assertFalse(self.matcher.similar_words("rice", "tea"))

    def test_unrelated_names(self) -> None:
        self.assertFalse(self.matcher.names_match("Basmati Rice", "Tea"))
        self.assertFalse(self.matcher.names_match("Milk", "Tea Bags"))

    def test_empty_inputs_score_zero(self) -> None:
        self.assertEqual(self.matcher.similarity(None, "Milk"), 0.0)
        self.assertEqual(self.matcher.similarity("Milk", ""), 0.0)
        self.assertEqual(self.matcher.similarity("1kg", "500g"), 0.0)
        self.assertFalse(self.matcher.names_match("1kg", "500g"))

    def test_threshold_from_settings(self) -> None:
        with patch.object(Settings, "NAME_SIMILARITY_THRESHOLD", 0.95):
            strict = SimilarityMatcher()
        self.assertEqual(strict.threshold, 0.95)
        self.assertFalse(
            strict.names_match("Chocolate Biscuits", "Chocolate Biscuit")
        )

    def test_promotion_lookup_with_similarity(self) -> None:
        product = _product("Rice Basmati 1kg")
        promo = _promo("Basmati Rice")
        self.assertIs(
            find_promotion_for_product(product, [promo], self.matcher), promo
        )


class TestBuildMatcher(unittest.TestCase):

    def test_default_comes_from_settings(self) -> None:
        self.assertIsInstance(build_matcher(), SubstringMatcher)
        with patch.object(Settings, "NAME_MATCHER", "similarity"):
            self.assertIsInstance(build_matcher(), SimilarityMatcher)

    def test_explicit_name(self) -> None:
        self.assertIsInstance(build_matcher(" Similarity "), SimilarityMatcher)

    def test_unknown_name(self) -> None:
        with self.assertRaises(ValueError):
            build_matcher("phonetic")


if __name__ == "__main__":
    unittest.main()
