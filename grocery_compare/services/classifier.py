# grocery_compare/services/classifier.py

"""Client for the remote categorisation and text-structuring functions.

The collaborator is best effort: absent, unknown or low-confidence
answers, and transport failures, become explicit fallback results so
callers never mistake a guess for a classification.
"""

import logging
from typing import Any

from curl_cffi import requests as curl_requests

from grocery_compare.config.settings import Settings
from grocery_compare.filters.normalizer import match_store
from grocery_compare.filters.price import parse_price
from grocery_compare.models.classification import (
    ClassificationResult,
    ExtractedProduct,
)

logger = logging.getLogger("grocery_compare.classifier")


def _confidence(raw: Any) -> float:
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return 0.0
    return min(max(value, 0.0), 1.0)


def interpret_classification(payload: Any) -> ClassificationResult:
    """Turn a raw ``{category, confidence, isFood}`` answer into a result."""
    if not isinstance(payload, dict):
        result = ClassificationResult.fallback("no result")
    elif payload.get("isFood") is False:
        result = ClassificationResult.fallback("not a food item")
    else:
        category = str(payload.get("category") or "").strip().lower()
        confidence = _confidence(payload.get("confidence"))
        if not category:
            result = ClassificationResult.fallback("missing category")
        elif category not in Settings.CATEGORIES:
            result = ClassificationResult.fallback(
                f"unknown category '{category}'"
            )
        elif confidence < Settings.MIN_CLASSIFICATION_CONFIDENCE:
            result = ClassificationResult.fallback(
                f"low confidence {confidence:.2f} for '{category}'"
            )
        else:
            return ClassificationResult(
                category=category, confidence=confidence
            )

    logger.info("Using fallback category: %s", result.reason)
    return result


def interpret_extraction(payload: Any) -> ExtractedProduct | None:
    """Normalise a structured-text answer into an :class:`ExtractedProduct`.

    Returns ``None`` when no product name was recognised.
    """
    if not isinstance(payload, dict):
        logger.info("Extraction returned no product")
        return None

    name = str(payload.get("product") or payload.get("name") or "").strip()
    if not name:
        logger.info("Extraction returned no product name")
        return None

    raw_store = str(payload.get("store") or "").strip()
    store_match = match_store(raw_store)
    store = store_match.store if store_match.matched else raw_store

    categories = payload.get("categories")
    if isinstance(categories, list) and categories:
        raw_category: Any = categories[0]
    else:
        raw_category = payload.get("category")
    category = interpret_classification(
        {
            "category": raw_category,
            "confidence": payload.get(
                "confidence", Settings.MIN_CLASSIFICATION_CONFIDENCE
            ),
        }
    )

    return ExtractedProduct(
        name=name,
        price=parse_price(payload.get("price")),
        size=str(payload.get("size") or "").strip(),
        store=store,
        category=category,
        discount=str(payload.get("discount") or "").strip(),
    )


class CategoryClassifier:
    """Calls the classification collaborator's edge functions."""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
    ) -> None:
        self.settings = Settings()
        url = base_url or self.settings.SUPABASE_URL
        self.functions_url = f"{url.rstrip('/')}/functions/v1"
        self.api_key = api_key or self.settings.SUPABASE_ANON_KEY
        self.session = curl_requests.Session(
            impersonate=self.settings.IMPERSONATE_BROWSER
        )

    def _post(self, function: str, body: dict[str, Any]) -> Any:
        """POST to an edge function and return its ``data`` member.

        Returns ``None`` on any transport or protocol failure.
        """
        url = f"{self.functions_url}/{function}"
        try:
            resp = self.session.post(
                url,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                json=body,
                timeout=self.settings.REQUEST_TIMEOUT,
            )
            if resp.status_code != 200:
                logger.warning(
                    "Edge function %s returned HTTP %d",
                    function,
                    resp.status_code,
                )
                return None
            payload = resp.json()
        except Exception as exc:
            logger.warning(
                "Edge function %s unreachable: %s", function, exc,
                exc_info=True,
            )
            return None

        if not isinstance(payload, dict) or not payload.get("success"):
            logger.warning("Edge function %s reported failure", function)
            return None
        return payload.get("data")

    def classify(self, text: str) -> ClassificationResult:
        """Categorise a single product description."""
        if not text or not text.strip():
            return ClassificationResult.fallback("empty text")
        data = self._post(
            self.settings.CATEGORIZE_FUNCTION,
            {"texts": text, "mode": "single"},
        )
        return interpret_classification(data)

    def classify_batch(self, texts: list[str]) -> list[ClassificationResult]:
        """Categorise several descriptions in one call.

        Always returns one result per input text.
        """
        if not texts:
            return []
        data = self._post(
            self.settings.CATEGORIZE_FUNCTION,
            {"texts": texts, "mode": "batch"},
        )
        if not isinstance(data, list) or len(data) != len(texts):
            logger.info(
                "Batch classification unusable, %d texts uncategorised",
                len(texts),
            )
            return [
                ClassificationResult.fallback("batch failed") for _ in texts
            ]
        return [interpret_classification(item) for item in data]

    def extract_product(self, raw_text: str) -> ExtractedProduct | None:
        """Structure free OCR text into a product, if one is recognised."""
        if not raw_text or not raw_text.strip():
            return None
        data = self._post(
            self.settings.STRUCTURE_FUNCTION,
            {"rawText": raw_text, "action": "structure"},
        )
        return interpret_extraction(data)
