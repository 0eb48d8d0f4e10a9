"""Lifecycle event types emitted by the record store."""
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from docsync.records.schemas import RecordDraft, SourceRecord

RECORD_MODEL = "api::document-store.document-store"


class LifecycleEventType(str, Enum):
    """Record lifecycle hooks, before and after each store mutation."""

    BEFORE_CREATE = "beforeCreate"
    BEFORE_UPDATE = "beforeUpdate"
    AFTER_CREATE = "afterCreate"
    AFTER_UPDATE = "afterUpdate"
    AFTER_DELETE = "afterDelete"


class LifecycleEvent(BaseModel):
    """Typed lifecycle event delivered to store subscribers.

    Pre-save events carry the pending ``data`` (and ``where`` on update),
    which handlers may mutate before it is persisted. Post-save events carry
    the persisted ``result``.

    Attributes:
        id: Unique event identifier (UUID).
        type: Lifecycle hook that fired.
        timestamp: Event timestamp in UTC.
        model: Record type the event belongs to.
        data: Pending payload for pre-save events.
        where: Lookup criteria of the record being updated.
        result: Persisted record for post-save events.
    """

    id: str = Field(description="Unique event identifier (UUID)")
    type: LifecycleEventType = Field(description="Lifecycle hook")
    timestamp: datetime = Field(description="Event timestamp (UTC)")
    model: str = Field(default=RECORD_MODEL, description="Record type")
    data: RecordDraft | None = Field(default=None, description="Pending payload")
    where: dict[str, int] | None = Field(default=None, description="Lookup criteria")
    result: SourceRecord | None = Field(default=None, description="Persisted record")
