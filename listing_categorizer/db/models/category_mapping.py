"""CategoryMapping ORM model: administrator overrides per source."""
from sqlalchemy import String, ForeignKey, UniqueConstraint, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column, relationship
from listing_categorizer.db.base import Base, UUIDMixin
from datetime import datetime
from typing import TYPE_CHECKING
import uuid

if TYPE_CHECKING:
    from listing_categorizer.db.models.scraping_source import ScrapingSource


class CategoryMapping(Base, UUIDMixin):
    """Maps a source's external category string to an internal category id.

    external_category is stored trimmed and lower-cased; lookups normalize
    the same way.
    """

    __tablename__ = "category_mappings"
    __table_args__ = (
        UniqueConstraint("source_id", "external_category", name="unique_source_external_category"),
    )

    source_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("scraping_sources.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    external_category: Mapped[str] = mapped_column(String(255), nullable=False)
    internal_category: Mapped[str] = mapped_column(String(50), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    # Relationships
    source: Mapped["ScrapingSource"] = relationship(back_populates="category_mappings")

    def __repr__(self) -> str:
        return (
            f"<CategoryMapping(source_id={self.source_id}, "
            f"'{self.external_category}' -> '{self.internal_category}')>"
        )
