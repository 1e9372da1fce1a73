"""Data models for listing categorization."""
from listing_categorizer.models.category import (
    CATEGORIES,
    CATEGORY_IDS,
    OTHER,
    CategoryInfo,
    category_label,
    coerce_category,
    is_valid_category,
)
from listing_categorizer.models.classification import (
    ClassificationMethod,
    ClassificationResult,
    Confidence,
    unknown_result,
)
from listing_categorizer.models.listing import ListingRecord, ScrapedListing
from listing_categorizer.models.reclassify_messages import (
    BatchCursor,
    BatchSummary,
    ListingChange,
    ReclassifyRequest,
    ReclassifyState,
    ReclassifyStatusMessage,
)

__all__ = [
    # Taxonomy
    "CATEGORIES",
    "CATEGORY_IDS",
    "OTHER",
    "CategoryInfo",
    "category_label",
    "coerce_category",
    "is_valid_category",
    # Classification
    "ClassificationMethod",
    "ClassificationResult",
    "Confidence",
    "unknown_result",
    # Listings
    "ListingRecord",
    "ScrapedListing",
    # Batch reclassification
    "BatchCursor",
    "BatchSummary",
    "ListingChange",
    "ReclassifyRequest",
    "ReclassifyState",
    "ReclassifyStatusMessage",
]
