"""ScrapingSource ORM model: one external marketplace or shop."""
from sqlalchemy import String, Text, Boolean, Integer, DateTime
from sqlalchemy.dialects import postgresql
from sqlalchemy.orm import Mapped, mapped_column, relationship
from listing_categorizer.db.base import Base, UUIDMixin
from sqlalchemy import func
from datetime import datetime
from typing import Dict, Any, List, TYPE_CHECKING

if TYPE_CHECKING:
    from listing_categorizer.db.models.listing import Listing
    from listing_categorizer.db.models.category_mapping import CategoryMapping


class ScrapingSource(Base, UUIDMixin):
    """External site listings are scraped from.

    Attributes:
        name: Display name, copied onto listings as source_name
        base_url: Site root used to absolutize relative links
        scrape_url: Listing page the scraper starts from
        source_type: Scraper implementation key
        config: Scraper-specific settings
        last_sync_at / last_sync_count / last_sync_status: Outcome of the last ingest
    """

    __tablename__ = "scraping_sources"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    base_url: Mapped[str] = mapped_column(Text, nullable=False)
    scrape_url: Mapped[str] = mapped_column(Text, nullable=False)
    source_type: Mapped[str] = mapped_column(String(50), nullable=False, server_default="custom")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default="true")
    config: Mapped[Dict[str, Any]] = mapped_column(
        postgresql.JSONB(astext_type=Text),
        nullable=False,
        server_default="{}",
    )
    last_sync_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    last_sync_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    last_sync_status: Mapped[str | None] = mapped_column(String(50), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    # Relationships
    listings: Mapped[List["Listing"]] = relationship(back_populates="source")
    category_mappings: Mapped[List["CategoryMapping"]] = relationship(
        back_populates="source",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<ScrapingSource(id={self.id}, name='{self.name}')>"
