"""Category normalization for scraped listings.

Strategy (first hit wins):
1. Source override for the listing's raw external category
2. Source override for the scraper-provided category string
3. Scraper-provided category, when it is already a taxonomy id other than "other"
4. Keyword classifier over title + external category
5. Optional AI fallback for whatever is still "other"
"""
from typing import TYPE_CHECKING, Optional
from uuid import UUID

import structlog

from listing_categorizer.models.category import OTHER, is_valid_category
from listing_categorizer.models.classification import (
    ClassificationMethod,
    ClassificationResult,
    Confidence,
)
from listing_categorizer.services.classification.classifier import KeywordClassifier
from listing_categorizer.services.classification.overrides import MappingOverrideResolver

if TYPE_CHECKING:
    from listing_categorizer.services.llm.ai_classifier import AIFallbackClassifier

logger = structlog.get_logger(__name__)


class CategoryNormalizer:
    """Combines overrides, keyword heuristics and the AI fallback."""

    def __init__(
        self,
        resolver: Optional[MappingOverrideResolver] = None,
        keyword_classifier: Optional[KeywordClassifier] = None,
        ai_classifier: Optional["AIFallbackClassifier"] = None,
    ):
        self.resolver = resolver or MappingOverrideResolver()
        self.keyword_classifier = keyword_classifier or KeywordClassifier()
        self.ai_classifier = ai_classifier
        self._log = logger.bind(component="CategoryNormalizer")

    def normalize(
        self,
        title: str,
        source_id: Optional[UUID] = None,
        source_category: Optional[str] = None,
        scraper_category: Optional[str] = None,
    ) -> ClassificationResult:
        """Resolve a category without calling the AI service.

        Args:
            title: Listing title
            source_id: Source the listing was scraped from
            source_category: Raw external category string
            scraper_category: Category string the scraper assigned, if any

        Returns:
            ClassificationResult; category is "other" when nothing matched
        """
        for external in (source_category, scraper_category):
            override = self.resolver.resolve(source_id, external)
            if override:
                return ClassificationResult(
                    category=override,
                    confidence=Confidence.HIGH,
                    method=ClassificationMethod.OVERRIDE,
                    matched_pattern=external,
                )

        if scraper_category and scraper_category != OTHER and is_valid_category(scraper_category):
            return ClassificationResult(
                category=scraper_category,
                confidence=Confidence.MEDIUM,
                method=ClassificationMethod.SOURCE,
            )

        text = " ".join(part for part in (title, source_category) if part)
        match = self.keyword_classifier.match(text)
        if match:
            return ClassificationResult(
                category=match.category,
                confidence=Confidence.MEDIUM,
                method=ClassificationMethod.KEYWORD,
                matched_pattern=match.keyword,
            )

        return ClassificationResult(
            category=OTHER,
            confidence=Confidence.LOW,
            method=ClassificationMethod.KEYWORD,
        )

    async def normalize_with_fallback(
        self,
        title: str,
        source_id: Optional[UUID] = None,
        source_category: Optional[str] = None,
        scraper_category: Optional[str] = None,
        description: Optional[str] = None,
        image_url: Optional[str] = None,
    ) -> ClassificationResult:
        """Resolve a category, asking the AI classifier when heuristics give "other".

        The AI answer is only taken when it is a real category with medium
        or high confidence; otherwise the heuristic "other" result stands.
        """
        result = self.normalize(title, source_id, source_category, scraper_category)
        if not result.is_other or self.ai_classifier is None:
            return result

        ai_title = f"{title} ({source_category})" if source_category else title
        ai_result = await self.ai_classifier.classify(ai_title, description, image_url)

        if ai_result.confidence.is_actionable and not ai_result.is_other:
            self._log.info(
                "ai_fallback_applied",
                title=title[:50],
                category=ai_result.category,
                confidence=ai_result.confidence.value,
            )
            return ai_result

        self._log.debug(
            "ai_fallback_ignored",
            title=title[:50],
            category=ai_result.category,
            confidence=ai_result.confidence.value,
        )
        return result
