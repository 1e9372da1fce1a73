"""Unit tests for AIFallbackClassifier.

Every failure mode must collapse to a low-confidence "other" result.
"""
from unittest.mock import AsyncMock

import pytest

from listing_categorizer.errors import LLMError
from listing_categorizer.models.classification import ClassificationMethod, Confidence
from listing_categorizer.services.llm import AIFallbackClassifier, MockLLMClient
from listing_categorizer.services.llm.ai_classifier import is_usable_image_url
from listing_categorizer.services.llm.prompts import CLASSIFICATION_SYSTEM_PROMPT


class TestClassify:
    """Successful and failed classifications."""

    @pytest.mark.asyncio
    async def test_fenced_reply(self):
        client = MockLLMClient(default_response=(
            '```json\n{"category": "amplifiers", "confidence": "high", "reasoning": "Rörförstärkare"}\n```'
        ))
        classifier = AIFallbackClassifier(client=client)

        result = await classifier.classify("Fender Twin Reverb", description="Fin combo, 85 W")

        assert result.category == "amplifiers"
        assert result.confidence == Confidence.HIGH
        assert result.method == ClassificationMethod.AI
        call = client.calls[0]
        assert call["system_prompt"] == CLASSIFICATION_SYSTEM_PROMPT
        assert "Titel: Fender Twin Reverb" in call["prompt"]
        assert "Beskrivning: Fin combo, 85 W" in call["prompt"]

    @pytest.mark.asyncio
    async def test_unknown_category_is_fallback(self):
        client = MockLLMClient(default_response='{"category": "kitchenware", "confidence": "high"}')

        result = await AIFallbackClassifier(client=client).classify("Kaffebryggare")

        assert result.category == "other"
        assert result.confidence == Confidence.LOW
        assert result.method == ClassificationMethod.FALLBACK

    @pytest.mark.asyncio
    async def test_empty_title_skips_call(self):
        client = MockLLMClient()

        result = await AIFallbackClassifier(client=client).classify("   ")

        assert result.category == "other"
        assert result.reasoning == "Empty title"
        assert client.calls == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [
        LLMError("rate limited", status_code=429),
        LLMError("payment required", status_code=402),
        RuntimeError("unexpected"),
    ])
    async def test_failures_never_raise(self, error):
        client = MockLLMClient()
        client.complete = AsyncMock(side_effect=error)

        result = await AIFallbackClassifier(client=client).classify("Boss DS-1")

        assert result.category == "other"
        assert result.confidence == Confidence.LOW
        assert result.method == ClassificationMethod.FALLBACK
        assert result.reasoning.startswith("AI request failed")


class TestImages:
    """Only trusted listing photos are sent to the model."""

    @pytest.mark.parametrize("url,usable", [
        ("https://www.musikborsen.se/wp-content/uploads/1.jpg", True),
        ("https://cdn.blocket.se/item/1.jpg", True),
        ("https://images.gearshop.se/1.jpg", True),
        ("https://example.com/cdn.jpg", False),
        ("ftp://cdn.blocket.se/1.jpg", False),
        ("/uploads/1.jpg", False),
        ("https://randomhost.se/1.jpg", False),
        (None, False),
        ("", False),
    ])
    def test_is_usable_image_url(self, url, usable):
        assert is_usable_image_url(url) is usable

    @pytest.mark.asyncio
    async def test_trusted_image_forwarded(self):
        client = MockLLMClient()

        await AIFallbackClassifier(client=client).classify(
            "Okänd pedal", image_url="https://cdn.blocket.se/item/1.jpg",
        )

        assert client.calls[0]["image_url"] == "https://cdn.blocket.se/item/1.jpg"

    @pytest.mark.asyncio
    async def test_untrusted_image_dropped(self):
        client = MockLLMClient()

        await AIFallbackClassifier(client=client).classify(
            "Okänd pedal", image_url="https://example.com/placeholder.jpg",
        )

        assert client.calls[0]["image_url"] is None
