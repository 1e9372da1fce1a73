"""Batch reclassification of stored listings."""
from listing_categorizer.services.reclassification.driver import BatchReclassifier
from listing_categorizer.services.reclassification.store import ListingStore

__all__ = ["BatchReclassifier", "ListingStore"]
