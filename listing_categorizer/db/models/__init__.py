"""Database models for cached listings and their sources."""
from listing_categorizer.db.models.scraping_source import ScrapingSource
from listing_categorizer.db.models.category_mapping import CategoryMapping
from listing_categorizer.db.models.listing import Listing

__all__ = [
    "ScrapingSource",
    "CategoryMapping",
    "Listing",
]
