"""Reclassification state management using Redis.

Stores, per reclassification scope (category/source filter):
- The cursor from which the next invocation continues
- The status of the last invocation, for admin feedback

Redis failures are logged and reported through return values; they never
abort a reclassification run.
"""
import json
from typing import Optional
import structlog
from redis.asyncio import Redis
from redis.exceptions import RedisError

from listing_categorizer.models.reclassify_messages import (
    BatchSummary,
    ReclassifyState,
    ReclassifyStatusMessage,
    utc_now_iso,
)

logger = structlog.get_logger(__name__)

# Redis key prefixes, suffixed with the request scope
CURSOR_KEY_PREFIX = "reclassify:cursor:"
STATUS_KEY_PREFIX = "reclassify:status:"

# Cursors of abandoned scopes expire after a week
CURSOR_TTL_SECONDS = 7 * 24 * 3600


def cursor_key(scope: str) -> str:
    return f"{CURSOR_KEY_PREFIX}{scope}"


def status_key(scope: str) -> str:
    return f"{STATUS_KEY_PREFIX}{scope}"


async def load_cursor(redis: Redis, scope: str) -> Optional[str]:
    """Get the stored cursor for a scope.

    Returns:
        Encoded cursor, or None when nothing is stored or Redis fails
    """
    try:
        value = await redis.get(cursor_key(scope))
    except RedisError as e:
        logger.error("load_cursor_failed", scope=scope, error=str(e))
        return None

    if value is None:
        return None
    return value.decode() if isinstance(value, bytes) else value


async def save_cursor(redis: Redis, scope: str, cursor: str) -> bool:
    """Persist the cursor for a scope.

    Returns:
        True if the cursor was stored
    """
    try:
        await redis.set(cursor_key(scope), cursor, ex=CURSOR_TTL_SECONDS)
        logger.debug("cursor_saved", scope=scope, cursor=cursor)
        return True
    except RedisError as e:
        logger.error("save_cursor_failed", scope=scope, error=str(e))
        return False


async def clear_cursor(redis: Redis, scope: str) -> bool:
    """Forget the cursor for a scope (next run starts from the beginning)."""
    try:
        await redis.delete(cursor_key(scope))
        logger.debug("cursor_cleared", scope=scope)
        return True
    except RedisError as e:
        logger.error("clear_cursor_failed", scope=scope, error=str(e))
        return False


async def get_reclassify_status(redis: Redis, scope: str) -> ReclassifyStatusMessage:
    """Get the last known status for a scope.

    Returns:
        ReclassifyStatusMessage (idle when nothing is stored or on error)
    """
    try:
        status_json = await redis.get(status_key(scope))

        if status_json:
            if isinstance(status_json, bytes):
                status_json = status_json.decode()
            return ReclassifyStatusMessage(**json.loads(status_json))
        return ReclassifyStatusMessage(state=ReclassifyState.IDLE)

    except (json.JSONDecodeError, RedisError) as e:
        logger.error("get_reclassify_status_failed", scope=scope, error=str(e))
        return ReclassifyStatusMessage(state=ReclassifyState.IDLE)


async def update_reclassify_status(
    redis: Redis,
    scope: str,
    status: ReclassifyStatusMessage,
) -> bool:
    """Store the status for a scope.

    Returns:
        True if status was updated successfully
    """
    log = logger.bind(scope=scope, state=status.state.value, task_id=status.task_id)

    try:
        await redis.set(status_key(scope), json.dumps(status.model_dump(mode="json")))
        log.debug("reclassify_status_updated")
        return True
    except RedisError as e:
        log.error("update_reclassify_status_failed", error=str(e))
        return False


async def set_reclassify_running(redis: Redis, scope: str, task_id: str) -> bool:
    """Mark a scope as running."""
    return await update_reclassify_status(
        redis,
        scope,
        ReclassifyStatusMessage(
            state=ReclassifyState.RUNNING,
            task_id=task_id,
            started_at=utc_now_iso(),
        ),
    )


async def set_reclassify_finished(
    redis: Redis,
    scope: str,
    task_id: str,
    summary: BatchSummary,
) -> bool:
    """Record the outcome of a run, keeping its start time."""
    current = await get_reclassify_status(redis, scope)
    return await update_reclassify_status(
        redis,
        scope,
        ReclassifyStatusMessage(
            state=summary.state,
            task_id=task_id,
            started_at=current.started_at,
            finished_at=utc_now_iso(),
            processed=summary.processed,
            updated=summary.updated,
            next_cursor=summary.next_cursor,
        ),
    )
