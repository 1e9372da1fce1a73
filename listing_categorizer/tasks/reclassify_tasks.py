"""Queue tasks for listing ingestion and AI reclassification.

This module implements:
    - ingest_listings_task: Store one scrape of a source, then queue AI
      categorization of the new listings that stayed "other"
    - categorize_new_listings_task: AI-classify freshly ingested "other" listings
    - reclassify_listings_task: One resumable batch reclassification run
    - scheduled_cleanup_task: Cron wrapper reclassifying the "other" bucket
"""
import asyncio
import time
import uuid
from typing import Any, Dict, List, Optional

from arq.connections import ArqRedis
import structlog

from listing_categorizer.config import reclassify_settings, settings
from listing_categorizer.db.repositories import SqlListingStore
from listing_categorizer.errors import StorageError, ValidationError
from listing_categorizer.models.category import OTHER, is_valid_category
from listing_categorizer.models.reclassify_messages import (
    BatchSummary,
    ReclassifyRequest,
    ReclassifyState,
)
from listing_categorizer.services.ingestion import ListingIngestor, abort_reason, validate_scrape
from listing_categorizer.services.llm.ai_classifier import AIFallbackClassifier
from listing_categorizer.services.llm.integration import create_ai_classifier
from listing_categorizer.services.reclassification import BatchReclassifier, ListingStore
from listing_categorizer.services.reclassify_state import (
    clear_cursor,
    load_cursor,
    save_cursor,
    set_reclassify_finished,
    set_reclassify_running,
)

logger = structlog.get_logger(__name__)


# ============================================================================
# Observability Metrics Logging
# ============================================================================

def emit_metric(metric_name: str, value: float, labels: Dict[str, str] = None) -> None:
    """Emit a metric event as a structured log line.

    Args:
        metric_name: Name of the metric (e.g., "listings_reclassified_total")
        value: Numeric value of the metric
        labels: Optional labels/tags for the metric
    """
    labels = labels or {}
    logger.info(
        "metric",
        metric_name=metric_name,
        metric_value=value,
        **labels,
    )


def emit_reclassify_metrics(summary: BatchSummary, scope: str) -> None:
    emit_metric("listings_processed_total", summary.processed, {"scope": scope})
    emit_metric("listings_reclassified_total", summary.updated, {"scope": scope})
    emit_metric("reclassify_duration_seconds", summary.elapsed_ms / 1000, {"scope": scope})


# ============================================================================
# Context helpers
# ============================================================================

def _listing_store(ctx: Dict[str, Any]) -> ListingStore:
    store = ctx.get("listing_store")
    if store is None:
        store = SqlListingStore()
        ctx["listing_store"] = store
    return store


def _ai_classifier(ctx: Dict[str, Any]) -> AIFallbackClassifier:
    classifier = ctx.get("ai_classifier")
    if classifier is None:
        classifier = create_ai_classifier()
        ctx["ai_classifier"] = classifier
    return classifier


# ============================================================================
# Tasks
# ============================================================================

async def ingest_listings_task(
    ctx: Dict[str, Any],
    task_id: str,
    source_id: str,
    source_name: str,
    listings: List[Dict[str, Any]],
    base_url: Optional[str] = None,
) -> Dict[str, Any]:
    """Store one scrape of a source and queue AI categorization of new listings.

    A scrape that fails the quality gate is not stored: nothing is upserted
    and no listing of the source is deactivated.

    Args:
        ctx: arq context (contains Redis connection)
        task_id: Unique task identifier
        source_id: UUID of the scraping source
        source_name: Display name of the source
        listings: ScrapedListing dicts as produced by the scraper
        base_url: Source site root; ad URLs on other hosts are dropped

    Returns:
        {task_id, ads_found, ads_new, ads_updated, deactivated,
         skipped_invalid, invalid_ratio, abort_reason}
    """
    log = logger.bind(task_id=task_id, source_id=source_id)

    scraped, report = validate_scrape(listings, base_url=base_url)
    log.info(
        "scrape_quality_report",
        total=report.total,
        valid=report.valid,
        invalid=report.invalid,
        invalid_ratio=round(report.invalid_ratio, 2),
    )
    quality = {
        "skipped_invalid": report.invalid,
        "invalid_ratio": round(report.invalid_ratio, 3),
    }

    reason = abort_reason(source_name, report)
    if reason:
        log.warning("ingest_aborted", abort_reason=reason)
        emit_metric("ingest_aborted_total", 1, {"source": source_name})
        return {
            "task_id": task_id,
            "ads_found": 0,
            "ads_new": 0,
            "ads_updated": 0,
            "deactivated": 0,
            **quality,
            "abort_reason": reason,
        }

    ingestor = ctx.get("ingestor") or ListingIngestor()
    result = await ingestor.ingest(uuid.UUID(source_id), source_name, scraped)

    redis: Optional[ArqRedis] = ctx.get("redis")
    if result["new_urls"] and redis is not None:
        await redis.enqueue_job(
            "categorize_new_listings_task",
            task_id=f"{task_id}-categorize",
            urls=result["new_urls"],
            _queue_name=settings.queue_name,
        )
        log.info("categorize_new_listings_queued", count=len(result["new_urls"]))

    emit_metric("listings_ingested_total", result["ads_found"], {"source": source_name})

    return {
        "task_id": task_id,
        "ads_found": result["ads_found"],
        "ads_new": result["ads_new"],
        "ads_updated": result["ads_updated"],
        "deactivated": result["deactivated"],
        **quality,
        "abort_reason": None,
    }


async def categorize_new_listings_task(
    ctx: Dict[str, Any],
    task_id: str,
    urls: List[str],
) -> Dict[str, Any]:
    """AI-classify newly ingested listings that are still "other".

    Only medium/high non-"other" answers are written.

    Args:
        ctx: arq context
        task_id: Unique task identifier
        urls: Listing URLs inserted by the last ingest

    Returns:
        {task_id, processed, updated, skipped, failed}, plus error when the
        listings could not be loaded
    """
    log = logger.bind(task_id=task_id)
    store = _listing_store(ctx)
    classifier = _ai_classifier(ctx)
    delay = reclassify_settings.call_delay_ms / 1000

    counts = {"processed": 0, "updated": 0, "skipped": 0, "failed": 0}

    try:
        records = await store.fetch_by_urls(urls, category=OTHER)
    except StorageError as e:
        log.error("categorize_new_listings_fetch_failed", requested=len(urls), error=e.message)
        return {"task_id": task_id, **counts, "error": e.message}

    for index, record in enumerate(records):
        if index and delay:
            await asyncio.sleep(delay)

        result = await classifier.classify(record.title, record.description, record.image_url)
        counts["processed"] += 1

        if result.is_other or not result.confidence.is_actionable:
            counts["skipped"] += 1
            continue

        try:
            await store.update_category(record.id, result.category)
            counts["updated"] += 1
        except StorageError as e:
            counts["failed"] += 1
            log.error("listing_update_failed", listing_id=str(record.id), error=e.message)

    log.info("new_listings_categorized", requested=len(urls), **counts)
    emit_metric("listings_reclassified_total", counts["updated"], {"scope": "new"})
    return {"task_id": task_id, **counts}


async def reclassify_listings_task(
    ctx: Dict[str, Any],
    task_id: str,
    category: Optional[str] = None,
    source_id: Optional[str] = None,
    limit: Optional[int] = None,
    cursor: Optional[str] = None,
    reset: bool = False,
) -> Dict[str, Any]:
    """Run one bounded, resumable batch reclassification.

    The cursor is taken from the arguments, else from Redis (unless reset),
    and the resulting cursor is stored again so that the next invocation
    continues where this one stopped.

    Args:
        ctx: arq context (contains Redis connection)
        task_id: Unique task identifier
        category: Only reclassify listings currently in this category
        source_id: Only reclassify listings from this source (UUID string)
        limit: Maximum listings processed by this invocation
        cursor: Explicit cursor overriding the stored one
        reset: Start from the beginning, discarding the stored cursor

    Returns:
        BatchSummary dict plus task_id and scope

    Raises:
        ValidationError: If category is not a taxonomy id
    """
    request = ReclassifyRequest(
        task_id=task_id,
        category=category,
        source_id=source_id,
        limit=limit,
        cursor=cursor,
        reset=reset,
    )
    if request.category and not is_valid_category(request.category):
        raise ValidationError(f"Unknown category id: {request.category!r}")

    scope = request.scope
    log = logger.bind(task_id=request.task_id, scope=scope)
    redis: ArqRedis = ctx["redis"]
    start_time = time.time()

    if request.reset:
        await clear_cursor(redis, scope)
    start_cursor = request.cursor
    if start_cursor is None and not request.reset:
        start_cursor = await load_cursor(redis, scope)

    await set_reclassify_running(redis, scope, request.task_id)

    driver = BatchReclassifier(
        store=_listing_store(ctx),
        ai_classifier=_ai_classifier(ctx),
        batch_size=reclassify_settings.batch_size,
        time_budget_seconds=reclassify_settings.time_budget_seconds,
        call_delay_ms=reclassify_settings.call_delay_ms,
    )

    try:
        summary = await driver.run(
            category=request.category,
            source_id=request.source_id,
            cursor=start_cursor,
            max_records=request.limit or reclassify_settings.max_records,
        )
    except ValidationError as e:
        log.error("reclassify_cursor_invalid", cursor=start_cursor, error=e.message)
        await clear_cursor(redis, scope)
        summary = BatchSummary(state=ReclassifyState.FAILED, error=e.message)

    if summary.completed:
        await clear_cursor(redis, scope)
    elif summary.next_cursor:
        await save_cursor(redis, scope, summary.next_cursor)

    await set_reclassify_finished(redis, scope, request.task_id, summary)
    emit_reclassify_metrics(summary, scope)

    log.info(
        "reclassify_task_complete",
        state=summary.state.value,
        processed=summary.processed,
        updated=summary.updated,
        duration_seconds=round(time.time() - start_time, 3),
    )

    return {"task_id": request.task_id, "scope": scope, **summary.to_dict()}


async def scheduled_cleanup_task(ctx: Dict[str, Any]) -> Dict[str, Any]:
    """Cron wrapper: reclassify a small slice of the "other" bucket.

    Continues from the stored cursor, so successive runs walk the whole
    bucket and then start over.
    """
    task_id = f"cleanup-{uuid.uuid4().hex[:12]}"
    logger.info("scheduled_cleanup_started", task_id=task_id)

    return await reclassify_listings_task(
        ctx,
        task_id=task_id,
        category=OTHER,
        limit=reclassify_settings.cleanup_limit,
    )
