"""Listing ORM model for scraped second-hand gear ads."""
from sqlalchemy import String, ForeignKey, Integer, Text, Boolean, DateTime, Index, func
from sqlalchemy.orm import Mapped, mapped_column, relationship
from listing_categorizer.db.base import Base, UUIDMixin, TimestampMixin
from datetime import datetime
from typing import TYPE_CHECKING
import uuid

if TYPE_CHECKING:
    from listing_categorizer.db.models.scraping_source import ScrapingSource


class Listing(Base, UUIDMixin, TimestampMixin):
    """A cached external ad.

    Attributes:
        ad_url: External URL, unique across all sources
        category: Internal category id ("other" until classified)
        source_category: Category string exactly as the site published it
        price_text / price_amount: Displayed price and its parsed integer amount
        first_seen_at / last_seen_at: Scrape timestamps
        is_active: False once the ad disappears from its source
    """

    __tablename__ = "ad_listings_cache"
    __table_args__ = (
        Index("idx_listings_cursor", "created_at", "id"),
        Index("idx_listings_active_category", "is_active", "category"),
    )

    ad_url: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    ad_path: Mapped[str | None] = mapped_column(Text, nullable=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default="other",
        server_default="other",
    )
    source_category: Mapped[str | None] = mapped_column(String(255), nullable=True)
    source_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("scraping_sources.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    source_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    price_text: Mapped[str | None] = mapped_column(String(255), nullable=True)
    price_amount: Mapped[int | None] = mapped_column(Integer, nullable=True)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    first_seen_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    last_seen_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default="true")

    # Relationships
    source: Mapped["ScrapingSource | None"] = relationship(back_populates="listings")

    def __repr__(self) -> str:
        return f"<Listing(id={self.id}, category='{self.category}', title='{self.title[:30]}')>"
