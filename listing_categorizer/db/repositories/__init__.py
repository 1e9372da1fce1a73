"""Repositories for listings and category mappings."""
from listing_categorizer.db.repositories.listing_repo import (
    ListingRepository,
    SqlListingStore,
    to_record,
)
from listing_categorizer.db.repositories.mapping_repo import CategoryMappingRepository

__all__ = [
    "ListingRepository",
    "SqlListingStore",
    "to_record",
    "CategoryMappingRepository",
]
