"""
Listing Repository
==================

Data access layer for the ad_listings_cache table.

ListingRepository works inside a caller-owned session (ingestion commits
once per scrape). SqlListingStore implements the ListingStore protocol used
by the batch driver and commits each category write on its own, so one
failed write never rolls back the others.
"""

from datetime import datetime
from typing import Dict, List, Optional, Sequence, Set
from uuid import UUID

import structlog
from sqlalchemy import case, func, select, tuple_, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from listing_categorizer.db.base import async_session_maker
from listing_categorizer.db.models import Listing
from listing_categorizer.errors import StorageError
from listing_categorizer.models.category import OTHER
from listing_categorizer.models.listing import ListingRecord
from listing_categorizer.models.reclassify_messages import BatchCursor
from listing_categorizer.services.reclassification.store import ListingStore

logger = structlog.get_logger(__name__)


def to_record(listing: Listing) -> ListingRecord:
    """Convert an ORM row into the storage-agnostic view."""
    return ListingRecord(
        id=listing.id,
        url=listing.ad_url,
        title=listing.title,
        category=listing.category,
        created_at=listing.created_at,
        source_id=listing.source_id,
        source_category=listing.source_category,
        description=listing.description,
        image_url=listing.image_url,
    )


class ListingRepository:
    """
    Repository for ad_listings_cache writes during ingestion.

    Constraints:
        - ad_url is unique; upserts are keyed by it
        - an incoming "other" never overwrites a category already assigned
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def existing_urls(self, urls: Sequence[str]) -> Set[str]:
        """Return the subset of urls already stored."""
        if not urls:
            return set()
        try:
            result = await self._session.execute(
                select(Listing.ad_url).where(Listing.ad_url.in_(list(urls)))
            )
            return set(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("existing_urls_failed", count=len(urls), error=str(e))
            raise StorageError(f"Failed to look up listings: {e}") from e

    async def upsert_many(self, rows: List[Dict]) -> None:
        """Insert or refresh listings (INSERT ... ON CONFLICT (ad_url) DO UPDATE).

        Args:
            rows: Column dicts for Listing; must include ad_url and last_seen_at
        """
        if not rows:
            return

        stmt = pg_insert(Listing).values(rows)
        excluded = stmt.excluded
        stmt = stmt.on_conflict_do_update(
            index_elements=[Listing.ad_url],
            set_={
                "title": excluded.title,
                "ad_path": excluded.ad_path,
                "category": case(
                    (excluded.category == OTHER, Listing.category),
                    else_=excluded.category,
                ),
                "source_category": excluded.source_category,
                "source_id": excluded.source_id,
                "source_name": excluded.source_name,
                "price_text": excluded.price_text,
                "price_amount": excluded.price_amount,
                "location": excluded.location,
                "image_url": excluded.image_url,
                "description": func.coalesce(excluded.description, Listing.description),
                "last_seen_at": excluded.last_seen_at,
                "is_active": True,
                "updated_at": func.now(),
            },
        )

        try:
            await self._session.execute(stmt)
        except SQLAlchemyError as e:
            logger.error("listing_upsert_failed", count=len(rows), error=str(e))
            raise StorageError(f"Failed to upsert listings: {e}") from e

    async def deactivate_missing(self, source_id: UUID, seen_before: datetime) -> int:
        """Mark active listings of a source not seen since seen_before as inactive.

        Returns:
            Number of listings deactivated
        """
        try:
            result = await self._session.execute(
                update(Listing)
                .where(Listing.source_id == source_id)
                .where(Listing.is_active.is_(True))
                .where(Listing.last_seen_at < seen_before)
                .values(is_active=False)
            )
            return result.rowcount or 0
        except SQLAlchemyError as e:
            logger.error("listing_deactivate_failed", source_id=str(source_id), error=str(e))
            raise StorageError(f"Failed to deactivate listings: {e}") from e


class SqlListingStore(ListingStore):
    """ListingStore backed by PostgreSQL via SQLAlchemy async sessions."""

    def __init__(self, session_factory=async_session_maker) -> None:
        self._session_factory = session_factory
        self._log = logger.bind(component="SqlListingStore")

    @staticmethod
    def _filtered(stmt, category: Optional[str], source_id: Optional[UUID]):
        stmt = stmt.where(Listing.is_active.is_(True))
        if category:
            stmt = stmt.where(Listing.category == category)
        if source_id:
            stmt = stmt.where(Listing.source_id == source_id)
        return stmt

    async def fetch_after(
        self,
        cursor: Optional[BatchCursor],
        limit: int,
        category: Optional[str] = None,
        source_id: Optional[UUID] = None,
    ) -> List[ListingRecord]:
        stmt = self._filtered(select(Listing), category, source_id)
        if cursor is not None:
            stmt = stmt.where(
                tuple_(Listing.created_at, Listing.id) > tuple_(cursor.created_at, cursor.id)
            )
        stmt = stmt.order_by(Listing.created_at.asc(), Listing.id.asc()).limit(limit)

        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                return [to_record(row) for row in result.scalars().all()]
        except SQLAlchemyError as e:
            self._log.error("listing_fetch_failed", error=str(e))
            raise StorageError(f"Failed to fetch listings: {e}") from e

    async def update_category(self, listing_id: UUID, category: str) -> None:
        try:
            async with self._session_factory() as session:
                await session.execute(
                    update(Listing)
                    .where(Listing.id == listing_id)
                    .values(category=category, updated_at=func.now())
                )
                await session.commit()
        except SQLAlchemyError as e:
            self._log.error("listing_category_update_failed", listing_id=str(listing_id), error=str(e))
            raise StorageError(f"Failed to update listing {listing_id}: {e}") from e

    async def count(
        self,
        category: Optional[str] = None,
        source_id: Optional[UUID] = None,
    ) -> int:
        stmt = self._filtered(select(func.count()).select_from(Listing), category, source_id)
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                return result.scalar_one()
        except SQLAlchemyError as e:
            self._log.error("listing_count_failed", error=str(e))
            raise StorageError(f"Failed to count listings: {e}") from e

    async def fetch_by_urls(
        self,
        urls: Sequence[str],
        category: Optional[str] = None,
    ) -> List[ListingRecord]:
        if not urls:
            return []
        stmt = self._filtered(select(Listing), category, None).where(Listing.ad_url.in_(list(urls)))
        stmt = stmt.order_by(Listing.created_at.asc(), Listing.id.asc())
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                return [to_record(row) for row in result.scalars().all()]
        except SQLAlchemyError as e:
            self._log.error("listing_fetch_by_urls_failed", count=len(urls), error=str(e))
            raise StorageError(f"Failed to fetch listings by URL: {e}") from e
