"""
Category Mapping Repository
===========================

Data access layer for the category_mappings table (administrator
overrides from a source's external category to an internal id).
"""

from typing import Iterable, List, Optional, Tuple
from uuid import UUID

import structlog
from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from listing_categorizer.db.models import CategoryMapping
from listing_categorizer.errors import StorageError, ValidationError
from listing_categorizer.models.category import is_valid_category
from listing_categorizer.services.classification.overrides import (
    MappingOverrideResolver,
    normalize_external_category,
)

logger = structlog.get_logger(__name__)


class CategoryMappingRepository:
    """Repository for category_mappings rows."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_rows(
        self,
        source_ids: Optional[Iterable[UUID]] = None,
    ) -> List[Tuple[UUID, str, str]]:
        """Return (source_id, external_category, internal_category) rows."""
        stmt = select(
            CategoryMapping.source_id,
            CategoryMapping.external_category,
            CategoryMapping.internal_category,
        )
        if source_ids is not None:
            stmt = stmt.where(CategoryMapping.source_id.in_(list(source_ids)))

        try:
            result = await self._session.execute(stmt)
            return [tuple(row) for row in result.all()]
        except SQLAlchemyError as e:
            logger.error("category_mappings_load_failed", error=str(e))
            raise StorageError(f"Failed to load category mappings: {e}") from e

    async def load_resolver(
        self,
        source_ids: Optional[Iterable[UUID]] = None,
    ) -> MappingOverrideResolver:
        """Build an override resolver for the given sources (all when None)."""
        rows = await self.list_rows(source_ids)
        resolver = MappingOverrideResolver.from_rows(rows)
        logger.debug("category_mappings_loaded", count=len(resolver))
        return resolver

    async def upsert_mapping(
        self,
        source_id: UUID,
        external_category: str,
        internal_category: str,
    ) -> None:
        """Create or replace the override for (source, external category).

        Raises:
            ValidationError: If the external category is blank or the
                internal category is not a taxonomy id
        """
        key = normalize_external_category(external_category)
        if not key:
            raise ValidationError("External category must not be blank")
        if not is_valid_category(internal_category):
            raise ValidationError(f"Unknown category id: {internal_category!r}")

        stmt = pg_insert(CategoryMapping).values(
            source_id=source_id,
            external_category=key,
            internal_category=internal_category,
        )
        stmt = stmt.on_conflict_do_update(
            constraint="unique_source_external_category",
            set_={"internal_category": stmt.excluded.internal_category},
        )

        try:
            await self._session.execute(stmt)
        except SQLAlchemyError as e:
            logger.error("category_mapping_upsert_failed", source_id=str(source_id), error=str(e))
            raise StorageError(f"Failed to save category mapping: {e}") from e

        logger.info(
            "category_mapping_saved",
            source_id=str(source_id),
            external_category=key,
            internal_category=internal_category,
        )

    async def delete_mapping(self, source_id: UUID, external_category: str) -> bool:
        """Remove an override. Returns True if a row was deleted."""
        try:
            result = await self._session.execute(
                delete(CategoryMapping)
                .where(CategoryMapping.source_id == source_id)
                .where(
                    CategoryMapping.external_category
                    == normalize_external_category(external_category)
                )
            )
        except SQLAlchemyError as e:
            logger.error("category_mapping_delete_failed", source_id=str(source_id), error=str(e))
            raise StorageError(f"Failed to delete category mapping: {e}") from e
        return bool(result.rowcount)
