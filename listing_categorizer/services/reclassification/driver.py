"""Resumable batch reclassification of stored listings.

Walks active listings in ascending (created_at, id) order, asks the AI
classifier about each one and writes the category back only when the
answer is a real category with medium/high confidence that differs from
the stored one. Each invocation is bounded by a wall-clock budget and an
optional record cap, and returns a cursor from which the next invocation
continues.

Example:
    driver = BatchReclassifier(store, ai_classifier)
    summary = await driver.run(category="other")
    while summary.state == ReclassifyState.PAUSED:
        summary = await driver.run(category="other", cursor=summary.next_cursor)
"""
import asyncio
import time
from typing import Awaitable, Callable, Optional
from uuid import UUID

import structlog

from listing_categorizer.errors import StorageError
from listing_categorizer.models.classification import Confidence
from listing_categorizer.models.listing import ListingRecord
from listing_categorizer.models.reclassify_messages import (
    BatchCursor,
    BatchSummary,
    ListingChange,
    ReclassifyState,
)
from listing_categorizer.services.classification.classifier import KeywordClassifier
from listing_categorizer.services.llm.ai_classifier import AIFallbackClassifier
from listing_categorizer.services.reclassification.store import ListingStore

logger = structlog.get_logger(__name__)

Clock = Callable[[], float]
Sleep = Callable[[float], Awaitable[None]]


class BatchReclassifier:
    """Sequential, cursor-driven reclassification driver.

    Attributes:
        batch_size: Listings fetched per page
        time_budget_seconds: Wall-clock budget per run
        call_delay_ms: Fixed wait between AI calls
    """

    def __init__(
        self,
        store: ListingStore,
        ai_classifier: AIFallbackClassifier,
        keyword_classifier: Optional[KeywordClassifier] = None,
        batch_size: int = 50,
        time_budget_seconds: float = 50.0,
        call_delay_ms: int = 500,
        clock: Clock = time.monotonic,
        sleep: Sleep = asyncio.sleep,
    ):
        if batch_size < 1:
            raise ValueError("batch_size must be positive")
        self.store = store
        self.ai_classifier = ai_classifier
        self.keyword_classifier = keyword_classifier or KeywordClassifier()
        self.batch_size = batch_size
        self.time_budget_seconds = time_budget_seconds
        self.call_delay_ms = call_delay_ms
        self._clock = clock
        self._sleep = sleep
        self._log = logger.bind(component="BatchReclassifier")

    async def run(
        self,
        category: Optional[str] = None,
        source_id: Optional[UUID] = None,
        cursor: Optional[str] = None,
        max_records: Optional[int] = None,
    ) -> BatchSummary:
        """Run one bounded reclassification pass.

        Args:
            category: Only consider listings currently in this category
            source_id: Only consider listings from this source
            cursor: Encoded cursor returned by a previous run
            max_records: Stop (paused) after this many processed listings

        Returns:
            BatchSummary; `next_cursor` resumes exactly after the last
            processed listing unless the run completed

        Raises:
            ValidationError: If cursor is malformed
        """
        started = self._clock()
        position = BatchCursor.decode(cursor) if cursor else None
        summary = BatchSummary(state=ReclassifyState.RUNNING)
        calls_made = 0

        self._log.info(
            "reclassify_run_started",
            category=category,
            source_id=str(source_id) if source_id else None,
            cursor=cursor,
            max_records=max_records,
        )

        try:
            total_at_start = await self.store.count(category=category, source_id=source_id)
        except StorageError as e:
            return self._finish(summary, ReclassifyState.FAILED, position, started, error=e.message)

        while True:
            try:
                page = await self.store.fetch_after(
                    position,
                    self.batch_size,
                    category=category,
                    source_id=source_id,
                )
            except StorageError as e:
                self._log.error("reclassify_fetch_failed", error=e.message)
                return self._finish(
                    summary, ReclassifyState.FAILED, position, started,
                    total_at_start=total_at_start, error=e.message,
                )

            for record in page:
                if max_records is not None and summary.processed >= max_records:
                    return self._finish(
                        summary, ReclassifyState.PAUSED, position, started,
                        total_at_start=total_at_start,
                    )
                if self._clock() - started >= self.time_budget_seconds:
                    self._log.info("reclassify_time_budget_spent", processed=summary.processed)
                    return self._finish(
                        summary, ReclassifyState.PAUSED, position, started,
                        total_at_start=total_at_start,
                    )

                if calls_made and self.call_delay_ms:
                    await self._sleep(self.call_delay_ms / 1000)
                calls_made += 1

                await self._process(record, summary)
                position = BatchCursor(created_at=record.created_at, id=record.id)

            if len(page) < self.batch_size:
                return self._finish(
                    summary, ReclassifyState.COMPLETED, None, started,
                    total_at_start=total_at_start,
                )

    async def _process(self, record: ListingRecord, summary: BatchSummary) -> None:
        """Classify one listing and apply the update policy."""
        keyword_match = self.keyword_classifier.match(record.title)
        result = await self.ai_classifier.classify(
            record.title,
            record.description,
            record.image_url,
        )
        summary.processed += 1

        self._log.debug(
            "listing_reclassified",
            listing_id=str(record.id),
            current=record.category,
            ai_category=result.category,
            confidence=result.confidence.value,
            keyword_category=keyword_match.category if keyword_match else None,
        )

        if result.confidence == Confidence.LOW:
            summary.skipped_low_confidence += 1
            return
        if result.is_other:
            summary.skipped_still_other += 1
            return
        if result.category == record.category:
            summary.unchanged += 1
            return

        try:
            await self.store.update_category(record.id, result.category)
        except StorageError as e:
            summary.failed += 1
            self._log.error(
                "listing_update_failed",
                listing_id=str(record.id),
                category=result.category,
                error=e.message,
            )
            return

        summary.updated += 1
        summary.changes.append(
            ListingChange(
                title=record.title[:50],
                from_category=record.category,
                to_category=result.category,
                confidence=result.confidence.value,
            )
        )

    def _finish(
        self,
        summary: BatchSummary,
        state: ReclassifyState,
        position: Optional[BatchCursor],
        started: float,
        total_at_start: Optional[int] = None,
        error: Optional[str] = None,
    ) -> BatchSummary:
        summary.state = state
        summary.completed = state == ReclassifyState.COMPLETED
        summary.next_cursor = position.encode() if position and not summary.completed else None
        summary.elapsed_ms = int((self._clock() - started) * 1000)
        summary.error = error
        if total_at_start is not None:
            summary.remaining_estimate = max(total_at_start - summary.updated, 0)

        log = self._log.error if state == ReclassifyState.FAILED else self._log.info
        log(
            "reclassify_run_finished",
            state=state.value,
            processed=summary.processed,
            updated=summary.updated,
            unchanged=summary.unchanged,
            failed=summary.failed,
            skipped_low_confidence=summary.skipped_low_confidence,
            skipped_still_other=summary.skipped_still_other,
            next_cursor=summary.next_cursor,
            elapsed_ms=summary.elapsed_ms,
        )
        return summary
