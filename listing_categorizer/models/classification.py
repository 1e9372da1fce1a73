"""Classification result types shared by the keyword, override and AI classifiers."""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from listing_categorizer.models.category import OTHER


class Confidence(str, Enum):
    """Confidence reported for a classification."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def is_actionable(self) -> bool:
        """Medium and high results may overwrite a stored category."""
        return self != Confidence.LOW


class ClassificationMethod(str, Enum):
    """How the category was determined."""
    OVERRIDE = "override"
    SOURCE = "source"
    KEYWORD = "keyword"
    AI = "ai"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class ClassificationResult:
    """Result of classifying one listing.

    Transient: only `category` is ever written onto a listing.
    """
    category: str
    confidence: Confidence
    method: ClassificationMethod
    reasoning: Optional[str] = None
    matched_pattern: Optional[str] = None

    @property
    def is_other(self) -> bool:
        return self.category == OTHER

    def to_dict(self) -> dict:
        """Convert to the {category, confidence, reasoning} wire shape."""
        result = {
            "category": self.category,
            "confidence": self.confidence.value,
        }
        if self.reasoning:
            result["reasoning"] = self.reasoning
        return result


def unknown_result(reasoning: str = "Could not parse AI response") -> ClassificationResult:
    """Low-confidence "other" used for every AI failure."""
    return ClassificationResult(
        category=OTHER,
        confidence=Confidence.LOW,
        method=ClassificationMethod.FALLBACK,
        reasoning=reasoning,
    )
