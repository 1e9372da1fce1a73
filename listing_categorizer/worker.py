"""arq worker configuration for listing categorization tasks.

This module configures the arq worker with:
    - ingest_listings_task: Store a scrape and queue AI categorization of new listings
    - categorize_new_listings_task: AI-classify new "other" listings
    - reclassify_listings_task: Resumable batch reclassification (admin action)
    - scheduled_cleanup_task: Cron job working through the "other" bucket
"""
from arq.connections import RedisSettings
from arq import cron
from typing import Dict, Any
import structlog
from listing_categorizer.config import settings, reclassify_settings, configure_logging
from listing_categorizer.db.repositories import SqlListingStore
from listing_categorizer.services.llm.ai_classifier import AIFallbackClassifier
from listing_categorizer.services.llm.integration import get_configured_llm_client
from listing_categorizer.tasks.reclassify_tasks import (
    ingest_listings_task,
    categorize_new_listings_task,
    reclassify_listings_task,
    scheduled_cleanup_task,
)

# Configure logging
configure_logging(settings.log_level)
logger = structlog.get_logger(__name__)


def get_cleanup_minutes() -> set:
    """Minutes of the hour at which the cleanup cron fires."""
    return set(range(0, 60, reclassify_settings.cleanup_interval_minutes))


async def on_startup(ctx: Dict[str, Any]) -> None:
    """Create the shared LLM client, AI classifier and listing store."""
    client = get_configured_llm_client()
    ctx["llm_client"] = client
    ctx["ai_classifier"] = AIFallbackClassifier(client=client)
    ctx["listing_store"] = SqlListingStore()

    logger.info(
        "worker_started",
        queue_name=settings.queue_name,
        llm_backend=client.config.backend.value,
        llm_model=client.config.model,
        llm_available=await client.is_available(),
    )


async def on_shutdown(ctx: Dict[str, Any]) -> None:
    """Close the LLM client's HTTP connections."""
    client = ctx.get("llm_client")
    if client is not None:
        await client.close()
    logger.info("worker_stopped")


class WorkerSettings:
    """arq worker configuration settings.

    This class is imported by arq CLI: `arq listing_categorizer.worker.WorkerSettings`

    Registered Tasks:
        - ingest_listings_task
        - categorize_new_listings_task
        - reclassify_listings_task

    Cron Jobs:
        - scheduled_cleanup_task: every RECLASSIFY_CLEANUP_INTERVAL_MINUTES
    """

    redis_settings = RedisSettings.from_dsn(settings.redis_url)
    queue_name = settings.queue_name
    max_jobs = settings.max_workers
    job_timeout = settings.job_timeout
    keep_result = 3600  # Keep results for 1 hour
    max_tries = 1  # Re-invocation resumes from the stored cursor

    functions = [
        ingest_listings_task,
        categorize_new_listings_task,
        reclassify_listings_task,
    ]

    on_startup = on_startup
    on_shutdown = on_shutdown

    cron_jobs = [
        cron(
            scheduled_cleanup_task,
            minute=get_cleanup_minutes(),
            run_at_startup=False,
            unique=True,
        ),
    ]
