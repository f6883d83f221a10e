# grocery_compare/filters/matcher.py

"""Identity decisions between product names, promotions and the catalog."""

import logging
import re
from collections.abc import Iterable, Sequence
from typing import Protocol

from rapidfuzz.distance import Levenshtein

from grocery_compare.config.catalog import MAIN_PRODUCT_LIST
from grocery_compare.config.settings import Settings
from grocery_compare.filters.normalizer import normalize_store_name
from grocery_compare.models.records import ProductRecord, PromotionRecord

logger = logging.getLogger("grocery_compare.filters")

_PACK_SIZE_RE = re.compile(r"\d+\s*(?:g|gm|kg|ml|l|pcs|x\d+)")


class NameMatcher(Protocol):
    """Decides whether two product names denote the same item."""

    def names_match(self, a: str | None, b: str | None) -> bool: ...


class SubstringMatcher:
    """Bidirectional, case-insensitive substring containment.

    Permissive on purpose: "Basmati Rice" matches "Basmati Rice 1kg",
    but a short name such as "Rice" also matches every rice product.
    Callers add store or category constraints to limit false positives.
    """

    def names_match(self, a: str | None, b: str | None) -> bool:
        if not a or not b:
            return False
        left = a.lower().strip()
        right = b.lower().strip()
        if not left or not right:
            return False
        return left in right or right in left


class SimilarityMatcher:
    """Word-overlap and edit-distance similarity between cleaned names.

    Pack sizes ("1kg", "500 ml") are stripped before comparing, so
    "Basmati Rice 1kg" and "Rice Basmati" score as the same item. The
    score is the best of word-set Jaccard, a word overlap ratio giving
    partial credit to near-identical words, and a damped edit similarity
    of the whole names.
    """

    def __init__(
        self,
        threshold: float | None = None,
        word_threshold: float | None = None,
    ) -> None:
        self.threshold = (
            Settings.NAME_SIMILARITY_THRESHOLD
            if threshold is None else threshold
        )
        self.word_threshold = (
            Settings.WORD_SIMILARITY_THRESHOLD
            if word_threshold is None else word_threshold
        )

    @staticmethod
    def clean_name(name: str) -> str:
        """Lower-case *name* and drop pack sizes and extra whitespace."""
        cleaned = _PACK_SIZE_RE.sub("", name.lower())
        return " ".join(cleaned.split())

    def similar_words(self, a: str, b: str) -> bool:
        if a in b or b in a:
            return True
        return Levenshtein.normalized_similarity(a, b) >= self.word_threshold

    def similarity(self, a: str | None, b: str | None) -> float:
        """Score in ``[0, 1]``; 1 means the cleaned names are equal."""
        if not a or not b:
            return 0.0
        left = self.clean_name(a)
        right = self.clean_name(b)
        if not left or not right:
            return 0.0
        if left == right:
            return 1.0

        left_words = [w for w in left.split() if len(w) > 1]
        right_words = [w for w in right.split() if len(w) > 1]
        if not left_words or not right_words:
            return 0.0

        left_set, right_set = set(left_words), set(right_words)
        jaccard = len(left_set & right_set) / len(left_set | right_set)

        overlap = 0.0
        for word in left_words:
            for other in right_words:
                if word == other:
                    overlap += 1.0
                    break
                if self.similar_words(word, other):
                    overlap += 0.8
                    break
        overlap_ratio = overlap / max(len(left_words), len(right_words))

        edit = Levenshtein.normalized_similarity(left, right) * 0.7
        return max(jaccard, overlap_ratio, edit)

    def names_match(self, a: str | None, b: str | None) -> bool:
        return self.similarity(a, b) >= self.threshold


DEFAULT_MATCHER: NameMatcher = SubstringMatcher()

_MATCHERS: dict[str, type[SubstringMatcher] | type[SimilarityMatcher]] = {
    "substring": SubstringMatcher,
    "similarity": SimilarityMatcher,
}


def build_matcher(name: str | None = None) -> NameMatcher:
    """Instantiate the matcher named *name*, defaulting to settings."""
    key = (name or Settings.NAME_MATCHER).strip().lower()
    if key not in _MATCHERS:
        raise ValueError(
            f"Unknown name matcher {key!r}; expected one of "
            f"{', '.join(sorted(_MATCHERS))}"
        )
    return _MATCHERS[key]()


def names_match(a: str | None, b: str | None) -> bool:
    """True if either name contains the other (case-insensitive)."""
    return DEFAULT_MATCHER.names_match(a, b)


def is_in_catalog(
    name: str | None,
    catalog: Iterable[str] = MAIN_PRODUCT_LIST,
    matcher: NameMatcher = DEFAULT_MATCHER,
) -> bool:
    """True if *name* matches any catalog keyword."""
    if not name:
        return False
    return any(matcher.names_match(name, keyword) for keyword in catalog)


def filter_promotions_by_catalog(
    promotions: Sequence[PromotionRecord],
    catalog: Iterable[str] = MAIN_PRODUCT_LIST,
    matcher: NameMatcher = DEFAULT_MATCHER,
) -> list[PromotionRecord]:
    """Keep promotions for tracked catalog products, order preserved."""
    keywords = list(catalog)
    kept = [
        promo
        for promo in promotions
        if is_in_catalog(promo.name, keywords, matcher)
    ]
    dropped = len(promotions) - len(kept)
    if dropped:
        logger.debug(
            "Catalog filter dropped %d of %d promotions",
            dropped,
            len(promotions),
        )
    return kept


def find_promotion_for_product(
    product: ProductRecord,
    promotions: Iterable[PromotionRecord],
    matcher: NameMatcher = DEFAULT_MATCHER,
) -> PromotionRecord | None:
    """Return the first promotion at the product's store with a matching name.

    Input order decides ties: when several promotions at the same store
    match a loosely named product, the earliest one wins. That is
    deterministic but not necessarily the closest name.
    """
    product_store = normalize_store_name(product.store)
    if not product_store:
        return None
    for promo in promotions:
        if normalize_store_name(promo.store) != product_store:
            continue
        if matcher.names_match(product.name, promo.name):
            return promo
    return None
