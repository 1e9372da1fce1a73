"""Unit tests for the pydantic models and the category taxonomy."""
from datetime import datetime, timezone
from uuid import UUID

import pytest
from pydantic import ValidationError as PydanticValidationError

from listing_categorizer.errors import ValidationError
from listing_categorizer.models import (
    CATEGORY_IDS,
    BatchCursor,
    BatchSummary,
    ClassificationMethod,
    ClassificationResult,
    Confidence,
    ListingChange,
    ReclassifyRequest,
    ReclassifyState,
    ScrapedListing,
    category_label,
    coerce_category,
    is_valid_category,
)

LISTING_ID = UUID("5f0c6e0e-8d44-4d59-9b7e-2f1e6f6f1a01")


class TestTaxonomy:
    """Fixed category ids."""

    def test_fourteen_categories(self):
        assert len(CATEGORY_IDS) == 14
        assert CATEGORY_IDS[-1] == "other"

    def test_validity(self):
        assert is_valid_category("synth-modular")
        assert not is_valid_category("synths")
        assert not is_valid_category(None)

    def test_coerce_and_label(self):
        assert coerce_category("guitars") == "other"
        assert coerce_category("studio") == "studio"
        assert category_label("amplifiers") == "Förstärkare"
        assert category_label("nope") == "Other"


class TestBatchCursor:
    """Opaque "<timestamp>|<uuid>" cursors."""

    def test_encode_decode(self):
        cursor = BatchCursor(created_at=datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc), id=LISTING_ID)

        encoded = cursor.encode()

        assert encoded == f"2024-03-01T12:00:00+00:00|{LISTING_ID}"
        assert BatchCursor.decode(encoded) == cursor

    @pytest.mark.parametrize("value", [
        "",
        "2024-03-01T12:00:00+00:00",
        "yesterday|5f0c6e0e-8d44-4d59-9b7e-2f1e6f6f1a01",
        "2024-03-01T12:00:00+00:00|not-a-uuid",
    ])
    def test_malformed(self, value):
        with pytest.raises(ValidationError):
            BatchCursor.decode(value)


class TestBatchSummary:
    """Run summary wire shape."""

    def test_to_dict(self):
        summary = BatchSummary(
            state=ReclassifyState.PAUSED,
            processed=2,
            updated=1,
            next_cursor="c",
            changes=[ListingChange(
                title="Fender Twin Reverb", from_category="other", to_category="amplifiers",
                confidence="high",
            )],
        )

        data = summary.to_dict()

        assert data["state"] == "paused"
        assert data["completed"] is False
        assert data["changes"] == [
            {"title": "Fender Twin Reverb", "from": "other", "to": "amplifiers", "confidence": "high"},
        ]


class TestReclassifyRequest:
    """Run parameters."""

    def test_scope(self):
        assert ReclassifyRequest(task_id="t").scope == "*:*"
        assert ReclassifyRequest(task_id="t", category="other").scope == "other:*"
        assert ReclassifyRequest(task_id="t", source_id=LISTING_ID).scope == f"*:{LISTING_ID}"

    def test_task_id_stripped(self):
        assert ReclassifyRequest(task_id="  run-1 ").task_id == "run-1"

    def test_limit_must_be_positive(self):
        with pytest.raises(PydanticValidationError):
            ReclassifyRequest(task_id="t", limit=0)


class TestScrapedListing:
    """Scraper payload validation."""

    def test_whitespace_collapsed(self):
        listing = ScrapedListing(url=" https://blocket.se/a ", title="Fender\n  Stratocaster ")

        assert listing.title == "Fender Stratocaster"
        assert listing.url == "https://blocket.se/a"

    @pytest.mark.parametrize("title", ["", "   "])
    def test_blank_title_rejected(self, title):
        with pytest.raises(PydanticValidationError):
            ScrapedListing(url="https://blocket.se/a", title=title)

    def test_short_title_rejected(self):
        with pytest.raises(PydanticValidationError):
            ScrapedListing(url="https://blocket.se/a", title=" ab ")

    @pytest.mark.parametrize("title", ["Logga in", "Visa kundvagn", "Kontakta oss", "Om oss", "Cookies"])
    def test_navigation_title_rejected(self, title):
        with pytest.raises(PydanticValidationError):
            ScrapedListing(url="https://blocket.se/a", title=title)

    def test_three_character_title_accepted(self):
        assert ScrapedListing(url="https://blocket.se/a", title="MPC").title == "MPC"


def test_classification_result_to_dict():
    result = ClassificationResult(
        category="studio", confidence=Confidence.HIGH, method=ClassificationMethod.AI, reasoning="Mikrofon",
    )

    assert result.to_dict() == {"category": "studio", "confidence": "high", "reasoning": "Mikrofon"}
    assert Confidence.MEDIUM.is_actionable
    assert not Confidence.LOW.is_actionable
