"""Pydantic models for batch reclassification runs, cursors and status tracking.

The cursor and status are stored in Redis between invocations so that a
scheduler (or an admin action) can re-invoke the batch until it completes.
"""
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from listing_categorizer.errors.exceptions import ValidationError


CURSOR_SEPARATOR = "|"


class ReclassifyState(str, Enum):
    """Batch driver states."""
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    PAUSED = "paused"
    FAILED = "failed"


class BatchCursor(BaseModel):
    """Ordering key of the last processed listing.

    Listings are processed in ascending (created_at, id) order; ties on
    created_at are broken by id so the order is total and stable.
    """
    created_at: datetime
    id: UUID

    def encode(self) -> str:
        """Serialize to the opaque "<iso timestamp>|<uuid>" form."""
        return f"{self.created_at.isoformat()}{CURSOR_SEPARATOR}{self.id}"

    @classmethod
    def decode(cls, value: str) -> "BatchCursor":
        """Parse a cursor produced by encode().

        Raises:
            ValidationError: If the value is not a valid cursor
        """
        timestamp, sep, listing_id = value.partition(CURSOR_SEPARATOR)
        if not sep:
            raise ValidationError(f"Malformed cursor: {value!r}")
        try:
            return cls(created_at=datetime.fromisoformat(timestamp), id=UUID(listing_id))
        except ValueError as e:
            raise ValidationError(f"Malformed cursor: {value!r}") from e

    def sort_key(self):
        return (self.created_at, str(self.id))


class ListingChange(BaseModel):
    """One category change applied by a batch run."""
    title: str
    from_category: str = Field(..., serialization_alias="from")
    to_category: str = Field(..., serialization_alias="to")
    confidence: str


class BatchSummary(BaseModel):
    """Result of one batch reclassification invocation.

    Attributes:
        remaining_estimate: Records in the filtered category at start minus
            records updated. A progress estimate only: items skipped as
            still-"other" are processed but stay in the bucket.
    """
    state: ReclassifyState = ReclassifyState.IDLE
    processed: int = 0
    updated: int = 0
    unchanged: int = 0
    failed: int = 0
    skipped_low_confidence: int = 0
    skipped_still_other: int = 0
    next_cursor: Optional[str] = None
    completed: bool = False
    elapsed_ms: int = 0
    remaining_estimate: Optional[int] = None
    error: Optional[str] = None
    changes: List[ListingChange] = Field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to dictionary for logging/response."""
        return self.model_dump(mode="json", by_alias=True)


class ReclassifyRequest(BaseModel):
    """Parameters of a reclassification run (admin action or scheduler).

    Attributes:
        task_id: Unique identifier for tracking the run
        category: Only reclassify listings currently in this category
        source_id: Only reclassify listings from this source
        limit: Maximum listings processed in this invocation
        cursor: Explicit cursor; overrides the stored one
        reset: Ignore the stored cursor and start from the beginning
    """
    task_id: str = Field(..., min_length=1, max_length=255)
    category: Optional[str] = None
    source_id: Optional[UUID] = None
    limit: Optional[int] = Field(default=None, ge=1)
    cursor: Optional[str] = None
    reset: bool = False

    @field_validator("task_id")
    @classmethod
    def validate_task_id(cls, v: str) -> str:
        """Strip whitespace from task_id."""
        return v.strip()

    @property
    def scope(self) -> str:
        """Redis key suffix identifying the filtered population."""
        return f"{self.category or '*'}:{self.source_id or '*'}"


class ReclassifyStatusMessage(BaseModel):
    """Last known status of a reclassification scope, stored in Redis."""
    state: ReclassifyState = ReclassifyState.IDLE
    task_id: Optional[str] = None
    started_at: Optional[str] = None
    finished_at: Optional[str] = None
    processed: int = Field(default=0, ge=0)
    updated: int = Field(default=0, ge=0)
    next_cursor: Optional[str] = None


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()
