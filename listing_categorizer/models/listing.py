"""Pydantic models for scraped listings and the listing view used by the batch driver."""
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

MIN_TITLE_LENGTH = 3

# Navigation and shop chrome that scrapers pick up as listing titles
UI_TITLE_PHRASES = (
    "logga in", "kundvagn", "kassa", "konto", "meny", "sok", "cookies",
    "integritet", "villkor", "kontakta oss", "om oss",
)


def is_ui_title(title: str) -> bool:
    """Return True if the title looks like site navigation rather than an ad."""
    lowered = title.lower()
    return any(phrase in lowered for phrase in UI_TITLE_PHRASES)


class ScrapedListing(BaseModel):
    """A listing as delivered by a scraper, before normalization.

    Attributes:
        url: External ad URL (unique key across all sources)
        title: Ad title
        category: Category guessed by the scraper (site-specific maps), if any
        source_category: Raw external category string from the site
        price_text: Price as displayed on the site
        location: Seller location
        image_url: Primary image URL
        description: Ad body text, when the scraper fetched it
    """
    url: str = Field(..., min_length=1, description="External ad URL")
    title: str = Field(..., min_length=1, max_length=1000, description="Ad title")
    category: Optional[str] = Field(default=None, description="Scraper-provided category guess")
    source_category: Optional[str] = Field(default=None, description="Raw external category")
    price_text: Optional[str] = Field(default=None, description="Displayed price")
    location: Optional[str] = Field(default=None, description="Seller location")
    image_url: Optional[str] = Field(default=None, description="Primary image URL")
    description: Optional[str] = Field(default=None, description="Ad body text")

    @field_validator("url", "title")
    @classmethod
    def strip_whitespace(cls, v: str) -> str:
        """Collapse surrounding whitespace."""
        v = " ".join(v.split())
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator("title")
    @classmethod
    def reject_ui_titles(cls, v: str) -> str:
        """Reject titles too short to describe an item, or scraped page chrome."""
        if len(v) < MIN_TITLE_LENGTH:
            raise ValueError(f"must be at least {MIN_TITLE_LENGTH} characters")
        if is_ui_title(v):
            raise ValueError("looks like site navigation, not an ad")
        return v


class ListingRecord(BaseModel):
    """Storage-agnostic view of a persisted listing.

    Carries only what classification needs plus the (created_at, id)
    ordering key used for cursoring.
    """
    id: UUID
    url: str
    title: str
    category: str
    created_at: datetime
    source_id: Optional[UUID] = None
    source_category: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
