# grocery_compare/models/classification.py

"""Results returned by the external classification collaborator."""

from dataclasses import dataclass

from grocery_compare.config.settings import Settings


@dataclass(frozen=True)
class ClassificationResult:
    """A category label that is either confident or an explicit fallback.

    Downstream code must check ``is_fallback`` rather than trusting the
    category of an uncertain result.
    """

    category: str
    confidence: float
    is_fallback: bool = False
    reason: str = ""

    @classmethod
    def fallback(cls, reason: str) -> "ClassificationResult":
        """Uncategorised result carrying the reason it was not classified."""
        return cls(
            category=Settings.FALLBACK_CATEGORY,
            confidence=0.0,
            is_fallback=True,
            reason=reason,
        )


@dataclass(frozen=True)
class ExtractedProduct:
    """Best-effort structured product pulled out of raw text."""

    name: str
    price: float
    size: str
    store: str
    category: ClassificationResult
    discount: str = ""
