"""Unit tests for Redis-backed cursor and status storage."""
import json
from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from listing_categorizer.models.reclassify_messages import (
    BatchSummary,
    ReclassifyState,
    ReclassifyStatusMessage,
)
from listing_categorizer.services.reclassify_state import (
    CURSOR_TTL_SECONDS,
    clear_cursor,
    cursor_key,
    get_reclassify_status,
    load_cursor,
    save_cursor,
    set_reclassify_finished,
    set_reclassify_running,
    status_key,
)

SCOPE = "other:*"


@pytest.fixture
def redis():
    mock = AsyncMock()
    mock.get.return_value = None
    return mock


class TestCursor:
    """Cursor persistence per scope."""

    def test_keys(self):
        assert cursor_key(SCOPE) == "reclassify:cursor:other:*"
        assert status_key(SCOPE) == "reclassify:status:other:*"

    @pytest.mark.asyncio
    async def test_save_with_ttl(self, redis):
        assert await save_cursor(redis, SCOPE, "2024-03-01T12:00:00+00:00|abc")

        redis.set.assert_awaited_once_with(
            "reclassify:cursor:other:*",
            "2024-03-01T12:00:00+00:00|abc",
            ex=CURSOR_TTL_SECONDS,
        )

    @pytest.mark.asyncio
    async def test_load_decodes_bytes(self, redis):
        redis.get.return_value = b"2024-03-01T12:00:00+00:00|abc"

        assert await load_cursor(redis, SCOPE) == "2024-03-01T12:00:00+00:00|abc"

    @pytest.mark.asyncio
    async def test_load_missing(self, redis):
        assert await load_cursor(redis, SCOPE) is None

    @pytest.mark.asyncio
    async def test_clear(self, redis):
        assert await clear_cursor(redis, SCOPE)

        redis.delete.assert_awaited_once_with("reclassify:cursor:other:*")

    @pytest.mark.asyncio
    async def test_redis_errors_reported_not_raised(self, redis):
        redis.get.side_effect = RedisConnectionError("down")
        redis.set.side_effect = RedisConnectionError("down")
        redis.delete.side_effect = RedisConnectionError("down")

        assert await load_cursor(redis, SCOPE) is None
        assert await save_cursor(redis, SCOPE, "x|y") is False
        assert await clear_cursor(redis, SCOPE) is False


class TestStatus:
    """Status of the last run per scope."""

    @pytest.mark.asyncio
    async def test_idle_when_missing(self, redis):
        status = await get_reclassify_status(redis, SCOPE)

        assert status.state == ReclassifyState.IDLE

    @pytest.mark.asyncio
    async def test_idle_on_corrupt_json(self, redis):
        redis.get.return_value = b"{not json"

        status = await get_reclassify_status(redis, SCOPE)

        assert status.state == ReclassifyState.IDLE

    @pytest.mark.asyncio
    async def test_running(self, redis):
        await set_reclassify_running(redis, SCOPE, "task-1")

        key, payload = redis.set.await_args.args
        stored = json.loads(payload)
        assert key == "reclassify:status:other:*"
        assert stored["state"] == "running"
        assert stored["task_id"] == "task-1"
        assert stored["started_at"] is not None

    @pytest.mark.asyncio
    async def test_finished_keeps_started_at(self, redis):
        running = ReclassifyStatusMessage(
            state=ReclassifyState.RUNNING, task_id="task-1", started_at="2024-03-01T12:00:00+00:00",
        )
        redis.get.return_value = json.dumps(running.model_dump(mode="json")).encode()
        summary = BatchSummary(
            state=ReclassifyState.PAUSED, processed=20, updated=7, next_cursor="c|1",
        )

        await set_reclassify_finished(redis, SCOPE, "task-1", summary)

        stored = json.loads(redis.set.await_args.args[1])
        assert stored["state"] == "paused"
        assert stored["started_at"] == "2024-03-01T12:00:00+00:00"
        assert stored["finished_at"] is not None
        assert stored["processed"] == 20
        assert stored["updated"] == 7
        assert stored["next_cursor"] == "c|1"
