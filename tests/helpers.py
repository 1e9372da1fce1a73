"""Test doubles and builders shared by the unit tests."""
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Sequence, Set
from uuid import UUID, uuid4

from listing_categorizer.errors import StorageError
from listing_categorizer.models.classification import (
    ClassificationMethod,
    ClassificationResult,
    Confidence,
    unknown_result,
)
from listing_categorizer.models.listing import ListingRecord
from listing_categorizer.models.reclassify_messages import BatchCursor
from listing_categorizer.services.reclassification.store import ListingStore

BASE_TIME = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_record(
    title: str,
    category: str = "other",
    minutes: int = 0,
    source_id: Optional[UUID] = None,
    url: Optional[str] = None,
) -> ListingRecord:
    """Listing record created `minutes` after BASE_TIME."""
    listing_id = uuid4()
    return ListingRecord(
        id=listing_id,
        url=url or f"https://www.blocket.se/annons/{listing_id.hex[:8]}",
        title=title,
        category=category,
        created_at=BASE_TIME + timedelta(minutes=minutes),
        source_id=source_id,
    )


def cursor_of(record: ListingRecord) -> str:
    return BatchCursor(created_at=record.created_at, id=record.id).encode()


def ai_result(category: str, confidence: Confidence = Confidence.HIGH) -> ClassificationResult:
    return ClassificationResult(
        category=category,
        confidence=confidence,
        method=ClassificationMethod.AI,
        reasoning="scripted",
    )


class FakeListingStore(ListingStore):
    """In-memory ListingStore keyed by listing id.

    Attributes:
        fail_updates_for: Listing ids whose update_category raises StorageError
        fail_fetch: When True, fetch_after and fetch_by_urls raise StorageError
        fetched_ids: Ids returned by fetch_after, in order
        updates: (listing_id, category) pairs written
    """

    def __init__(self, records: Sequence[ListingRecord] = ()):
        self.records: Dict[UUID, ListingRecord] = {r.id: r for r in records}
        self.fail_updates_for: Set[UUID] = set()
        self.fail_fetch = False
        self.fetched_ids: List[UUID] = []
        self.updates: List[tuple] = []

    def add(self, *records: ListingRecord) -> None:
        for record in records:
            self.records[record.id] = record

    def _matching(self, category: Optional[str], source_id: Optional[UUID]) -> List[ListingRecord]:
        rows = [
            r for r in self.records.values()
            if (category is None or r.category == category)
            and (source_id is None or r.source_id == source_id)
        ]
        return sorted(rows, key=lambda r: (r.created_at, str(r.id)))

    async def fetch_after(self, cursor, limit, category=None, source_id=None):
        if self.fail_fetch:
            raise StorageError("database unavailable")
        rows = self._matching(category, source_id)
        if cursor is not None:
            rows = [r for r in rows if (r.created_at, str(r.id)) > cursor.sort_key()]
        page = rows[:limit]
        self.fetched_ids.extend(r.id for r in page)
        return page

    async def update_category(self, listing_id, category):
        if listing_id in self.fail_updates_for:
            raise StorageError(f"write failed for {listing_id}")
        self.records[listing_id] = self.records[listing_id].model_copy(update={"category": category})
        self.updates.append((listing_id, category))

    async def count(self, category=None, source_id=None):
        return len(self._matching(category, source_id))

    async def fetch_by_urls(self, urls, category=None):
        if self.fail_fetch:
            raise StorageError("database unavailable")
        wanted = set(urls)
        return [r for r in self._matching(category, None) if r.url in wanted]


class ScriptedAIClassifier:
    """Stands in for AIFallbackClassifier with answers keyed by title.

    Titles without a script get the low-confidence fallback result.
    """

    def __init__(self, answers: Optional[Dict[str, ClassificationResult]] = None):
        self.answers = answers or {}
        self.calls: List[str] = []

    async def classify(self, title, description=None, image_url=None):
        self.calls.append(title)
        return self.answers.get(title, unknown_result())


class FakeClock:
    """Monotonic clock advanced by `step` seconds on every read."""

    def __init__(self, step: float = 0.0):
        self.now = 0.0
        self.step = step

    def __call__(self) -> float:
        self.now += self.step
        return self.now
