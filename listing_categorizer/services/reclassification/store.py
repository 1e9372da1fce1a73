"""Storage collaborator used by the batch reclassification driver."""
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence
from uuid import UUID

from listing_categorizer.models.listing import ListingRecord
from listing_categorizer.models.reclassify_messages import BatchCursor


class ListingStore(ABC):
    """Read/update access to active listings.

    Implementations raise StorageError on any backend failure.
    """

    @abstractmethod
    async def fetch_after(
        self,
        cursor: Optional[BatchCursor],
        limit: int,
        category: Optional[str] = None,
        source_id: Optional[UUID] = None,
    ) -> List[ListingRecord]:
        """Active listings with (created_at, id) strictly after cursor, ascending."""

    @abstractmethod
    async def update_category(self, listing_id: UUID, category: str) -> None:
        """Overwrite the category of one listing."""

    @abstractmethod
    async def count(
        self,
        category: Optional[str] = None,
        source_id: Optional[UUID] = None,
    ) -> int:
        """Number of active listings matching the filters."""

    @abstractmethod
    async def fetch_by_urls(
        self,
        urls: Sequence[str],
        category: Optional[str] = None,
    ) -> List[ListingRecord]:
        """Active listings whose URL is in urls, optionally in one category."""
