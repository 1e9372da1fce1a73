"""Ingestion of scraped listings into the listing cache.

One call handles one scrape of one source: every listing is normalized
(overrides, scraper category, keywords), upserted by URL, and listings of
the source that were not seen in this scrape are deactivated. A scrape that
fails the quality gate (see abort_reason) is not stored at all.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple
from urllib.parse import urljoin, urlparse
from uuid import UUID

import structlog

from listing_categorizer.config import IngestSettings, ingest_settings
from listing_categorizer.db.base import async_session_maker
from listing_categorizer.db.repositories import CategoryMappingRepository, ListingRepository
from listing_categorizer.models.listing import ScrapedListing
from listing_categorizer.services.classification.classifier import KeywordClassifier
from listing_categorizer.services.classification.normalizer import CategoryNormalizer
from listing_categorizer.services.classification.overrides import MappingOverrideResolver
from listing_categorizer.utils.price_parser import parse_price

logger = structlog.get_logger(__name__)

UPSERT_BATCH_SIZE = 100


def dedupe_by_url(scraped: Sequence[ScrapedListing]) -> List[ScrapedListing]:
    """Drop repeated URLs, keeping the first occurrence."""
    seen = set()
    unique: List[ScrapedListing] = []
    for listing in scraped:
        if listing.url in seen:
            continue
        seen.add(listing.url)
        unique.append(listing)
    return unique


@dataclass(frozen=True)
class ScrapeQualityReport:
    """How much of a raw scrape survived validation."""
    total: int
    valid: int

    @property
    def invalid(self) -> int:
        return max(0, self.total - self.valid)

    @property
    def invalid_ratio(self) -> float:
        """Share of invalid listings; an empty scrape counts as wholly invalid."""
        return self.invalid / self.total if self.total else 1.0


def is_same_host(url: str, base_url: str) -> bool:
    host = urlparse(url).hostname
    return bool(host) and host == urlparse(base_url).hostname


def validate_scrape(
    listings: Iterable[Dict[str, Any]],
    base_url: Optional[str] = None,
) -> Tuple[List[ScrapedListing], ScrapeQualityReport]:
    """Validate raw scraper dicts into ScrapedListing models.

    With a base_url, relative ad URLs are made absolute and listings that
    point off the source's host are dropped.

    Returns:
        (valid listings, quality report)
    """
    valid: List[ScrapedListing] = []
    total = 0

    for raw in listings:
        total += 1
        try:
            listing = ScrapedListing(**raw)
        except ValueError as e:
            logger.warning("scraped_listing_invalid", url=raw.get("url"), error=str(e))
            continue

        if base_url:
            url = urljoin(base_url, listing.url)
            if not is_same_host(url, base_url):
                logger.warning("scraped_listing_foreign_host", url=url, base_url=base_url)
                continue
            listing = listing.model_copy(update={"url": url})

        valid.append(listing)

    return valid, ScrapeQualityReport(total=total, valid=len(valid))


def abort_reason(
    source_name: str,
    report: ScrapeQualityReport,
    config: Optional[IngestSettings] = None,
) -> Optional[str]:
    """Return why a scrape must not be stored, or None if it passes.

    A rejected scrape is neither upserted nor used to deactivate listings.
    """
    config = config or ingest_settings

    if report.valid == 0:
        return f"Quality gate failed for {source_name}: no valid ads parsed"

    if report.total >= config.invalid_ratio_min_total and report.invalid_ratio > config.max_invalid_ratio:
        return f"Quality gate failed for {source_name}: invalid_ratio={report.invalid_ratio:.2f}"

    if report.valid < config.min_ads:
        return f"Quality gate failed for {source_name}: valid={report.valid} < min_ads={config.min_ads}"

    return None


class ListingIngestor:
    """Normalizes and stores the listings of one scrape."""

    def __init__(
        self,
        session_factory=async_session_maker,
        keyword_classifier: Optional[KeywordClassifier] = None,
    ):
        self._session_factory = session_factory
        self.keyword_classifier = keyword_classifier or KeywordClassifier()
        self._log = logger.bind(component="ListingIngestor")

    def build_rows(
        self,
        source_id: UUID,
        source_name: str,
        scraped: Sequence[ScrapedListing],
        resolver: MappingOverrideResolver,
        scraped_at: datetime,
    ) -> List[Dict[str, Any]]:
        """Turn scraped listings into ad_listings_cache rows."""
        normalizer = CategoryNormalizer(resolver=resolver, keyword_classifier=self.keyword_classifier)
        rows: List[Dict[str, Any]] = []

        for listing in dedupe_by_url(scraped):
            result = normalizer.normalize(
                listing.title,
                source_id=source_id,
                source_category=listing.source_category,
                scraper_category=listing.category,
            )
            price = parse_price(listing.price_text)
            rows.append({
                "ad_url": listing.url,
                "ad_path": urlparse(listing.url).path or None,
                "title": listing.title,
                "category": result.category,
                "source_category": listing.source_category or None,
                "source_id": source_id,
                "source_name": source_name,
                "price_text": price.text or None,
                "price_amount": price.amount,
                "location": listing.location or None,
                "image_url": listing.image_url or None,
                "description": listing.description or None,
                "is_active": True,
                "first_seen_at": scraped_at,
                "last_seen_at": scraped_at,
            })

        return rows

    async def ingest(
        self,
        source_id: UUID,
        source_name: str,
        scraped: Sequence[ScrapedListing],
        scraped_at: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """Store one scrape of a source.

        Returns:
            {ads_found, ads_new, ads_updated, deactivated, new_urls}

        Raises:
            StorageError: If any database operation fails (nothing is committed)
        """
        scraped_at = scraped_at or datetime.now(timezone.utc)
        log = self._log.bind(source_id=str(source_id), source_name=source_name)

        async with self._session_factory() as session:
            resolver = await CategoryMappingRepository(session).load_resolver([source_id])
            rows = self.build_rows(source_id, source_name, scraped, resolver, scraped_at)

            repo = ListingRepository(session)
            new_urls: List[str] = []
            for start in range(0, len(rows), UPSERT_BATCH_SIZE):
                batch = rows[start:start + UPSERT_BATCH_SIZE]
                existing = await repo.existing_urls([row["ad_url"] for row in batch])
                new_urls.extend(row["ad_url"] for row in batch if row["ad_url"] not in existing)
                await repo.upsert_many(batch)

            if rows:
                deactivated = await repo.deactivate_missing(source_id, scraped_at)
            else:
                deactivated = 0
                log.warning("deactivation_skipped_empty_scrape")
            await session.commit()

        result = {
            "ads_found": len(rows),
            "ads_new": len(new_urls),
            "ads_updated": len(rows) - len(new_urls),
            "deactivated": deactivated,
            "new_urls": new_urls,
        }
        log.info(
            "listings_ingested",
            ads_found=result["ads_found"],
            ads_new=result["ads_new"],
            ads_updated=result["ads_updated"],
            deactivated=deactivated,
        )
        return result
