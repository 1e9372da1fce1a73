"""Unit tests for CategoryNormalizer and the end-to-end categorization scenarios.

Scenarios:
- "Fender Stratocaster 2019, Sunburst" is settled by keywords, no AI call
- "Klaviatur, övrig" without override falls to "other", the AI answers
  keys-pianos with high confidence and the stored listing is updated
"""
from uuid import uuid4

import pytest

from listing_categorizer.models.classification import ClassificationMethod, Confidence
from listing_categorizer.models.reclassify_messages import ReclassifyState
from listing_categorizer.services.classification import (
    CategoryNormalizer,
    KeywordClassifier,
    KeywordTable,
    MappingOverrideResolver,
)
from listing_categorizer.services.classification.keywords import (
    CATEGORY_KEYWORDS,
    CATEGORY_PRIORITY,
)
from listing_categorizer.services.llm import AIFallbackClassifier, MockLLMClient
from listing_categorizer.services.reclassification import BatchReclassifier
from tests.helpers import FakeListingStore, ScriptedAIClassifier, ai_result, make_record


def table_without(*removed: str) -> KeywordTable:
    """Default keyword table minus some keywords."""
    keywords = {
        category: [k for k in words if k not in removed]
        for category, words in CATEGORY_KEYWORDS.items()
    }
    return KeywordTable.from_mapping(keywords, order=CATEGORY_PRIORITY)


class TestNormalize:
    """Override, scraper category and keyword precedence."""

    def test_override_beats_keywords(self):
        """Overrides win even when keywords point elsewhere."""
        source_id = uuid4()
        resolver = MappingOverrideResolver.from_rows([(source_id, "Klaviatur", "keys-pianos")])
        normalizer = CategoryNormalizer(resolver=resolver)

        result = normalizer.normalize("Roland FP-30", source_id=source_id, source_category="Klaviatur")

        assert result.category == "keys-pianos"
        assert result.method == ClassificationMethod.OVERRIDE
        assert result.confidence == Confidence.HIGH

    def test_scraper_category_override(self):
        """The scraper-provided string is looked up after the external category."""
        source_id = uuid4()
        resolver = MappingOverrideResolver.from_rows([(source_id, "Gitarrer", "guitars-bass")])
        normalizer = CategoryNormalizer(resolver=resolver)

        result = normalizer.normalize("Något", source_id=source_id, scraper_category="Gitarrer")

        assert result.category == "guitars-bass"
        assert result.method == ClassificationMethod.OVERRIDE

    def test_source_category_override_checked_first(self):
        source_id = uuid4()
        resolver = MappingOverrideResolver.from_rows([
            (source_id, "Studio", "studio"),
            (source_id, "Gitarrer", "guitars-bass"),
        ])
        normalizer = CategoryNormalizer(resolver=resolver)

        result = normalizer.normalize(
            "Något", source_id=source_id, source_category="Studio", scraper_category="Gitarrer",
        )

        assert result.category == "studio"

    def test_valid_scraper_category_used(self):
        normalizer = CategoryNormalizer()

        result = normalizer.normalize("Något helt annat", scraper_category="studio")

        assert result.category == "studio"
        assert result.method == ClassificationMethod.SOURCE

    def test_scraper_other_falls_through_to_keywords(self):
        normalizer = CategoryNormalizer()

        result = normalizer.normalize("Moog Grandmother", scraper_category="other")

        assert result.category == "synth-modular"
        assert result.method == ClassificationMethod.KEYWORD
        assert result.matched_pattern == "moog"

    def test_keywords_see_external_category(self):
        """The external category is appended to the title for keyword matching."""
        normalizer = CategoryNormalizer()

        result = normalizer.normalize("Säljes", source_category="Trummor")

        assert result.category == "drums-percussion"

    def test_nothing_matches(self):
        result = CategoryNormalizer().normalize("Vintage konsertaffisch från 1975")

        assert result.category == "other"
        assert result.confidence == Confidence.LOW


class TestAIFallback:
    """normalize_with_fallback only consults the AI for "other"."""

    @pytest.mark.asyncio
    async def test_stratocaster_needs_no_ai_call(self):
        """Keyword hit is final; the AI client is never called."""
        client = MockLLMClient()
        normalizer = CategoryNormalizer(ai_classifier=AIFallbackClassifier(client=client))

        result = await normalizer.normalize_with_fallback("Fender Stratocaster 2019, Sunburst")

        assert result.category == "guitars-bass"
        assert result.method == ClassificationMethod.KEYWORD
        assert client.calls == []

    @pytest.mark.asyncio
    async def test_klaviatur_without_keyword_goes_to_ai(self):
        """Taxonomy variant without "klaviatur": heuristics give other, AI decides."""
        client = MockLLMClient(responses={
            "CT-S300": '{"category": "keys-pianos", "confidence": "high", "reasoning": "Keyboard"}',
        })
        normalizer = CategoryNormalizer(
            keyword_classifier=KeywordClassifier(table_without("klaviatur", "midiklaviatur")),
            ai_classifier=AIFallbackClassifier(client=client),
        )

        heuristic = normalizer.normalize("Säljes CT-S300", source_category="Klaviatur, övrig")
        result = await normalizer.normalize_with_fallback(
            "Säljes CT-S300", source_category="Klaviatur, övrig",
        )

        assert heuristic.category == "other"
        assert result.category == "keys-pianos"
        assert result.confidence == Confidence.HIGH
        assert result.method == ClassificationMethod.AI
        assert len(client.calls) == 1
        assert "Klaviatur, övrig" in client.calls[0]["prompt"]

    @pytest.mark.asyncio
    async def test_low_confidence_ai_answer_ignored(self):
        client = MockLLMClient(default_response='{"category": "studio", "confidence": "low"}')
        normalizer = CategoryNormalizer(ai_classifier=AIFallbackClassifier(client=client))

        result = await normalizer.normalize_with_fallback("Vintage konsertaffisch från 1975")

        assert result.category == "other"
        assert result.method == ClassificationMethod.KEYWORD

    @pytest.mark.asyncio
    async def test_without_ai_classifier(self):
        result = await CategoryNormalizer().normalize_with_fallback("Vintage konsertaffisch")

        assert result.category == "other"


class TestKlaviaturScenarioThroughBatch:
    """The "other" listing is updated by a reclassification run."""

    @pytest.mark.asyncio
    async def test_listing_updated(self, no_sleep):
        record = make_record("Säljes CT-S300", category="other")
        store = FakeListingStore([record])
        ai = ScriptedAIClassifier({"Säljes CT-S300": ai_result("keys-pianos", Confidence.HIGH)})
        driver = BatchReclassifier(store, ai, sleep=no_sleep)

        summary = await driver.run(category="other")

        assert summary.state == ReclassifyState.COMPLETED
        assert summary.updated == 1
        assert store.records[record.id].category == "keys-pianos"
