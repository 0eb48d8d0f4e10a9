"""SQLite-backed source-of-truth store for document-store records."""

import asyncio
import json
import sqlite3
import threading
import uuid
from datetime import UTC, datetime
from typing import Any

import structlog

from docsync.events import LifecycleEvent, LifecycleEventType, LifecycleHooks
from docsync.records.schemas import RecordDraft, SourceRecord

logger = structlog.get_logger()

# Write-time control flags that never reach the stored record
_TRANSIENT_FIELDS = frozenset({"manual_override"})

# Identity and bookkeeping fields the store assigns; payloads cannot set them,
# under either the attribute name or the wire alias.
_STORE_MANAGED_KEYS = frozenset(
    key
    for name, field in SourceRecord.model_fields.items()
    if name not in RecordDraft.model_fields
    for key in (name, field.alias)
    if key
)


class RecordNotFoundError(Exception):
    """Raised when a record id does not exist in the store."""

    def __init__(self, record_id: int) -> None:
        """Initialize with the missing record id.

        Args:
            record_id: Internal id that was looked up.
        """
        self.record_id = record_id
        super().__init__(f"Record {record_id} not found")


def _now() -> str:
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _new_document_id() -> str:
    return uuid.uuid4().hex[:24]


class RecordStore:
    """Record store with lifecycle hooks around every mutation.

    Thread-safe via a lock; SQLite work runs in worker threads so hook
    handlers awaiting network calls never block on the database.
    """

    def __init__(self, path: str = ":memory:", hooks: LifecycleHooks | None = None) -> None:
        """Initialize store (call initialize() before use).

        Args:
            path: SQLite database file, or ":memory:".
            hooks: Hook registry notified around mutations.
        """
        self._path = path
        self._conn: sqlite3.Connection | None = None
        self._lock = threading.Lock()
        self.hooks = hooks or LifecycleHooks()

    def initialize(self) -> None:
        """Open the database and create the records table."""
        self._conn = sqlite3.connect(self._path, check_same_thread=False)
        self._conn.execute("""
            CREATE TABLE IF NOT EXISTS records (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                document_id TEXT NOT NULL UNIQUE,
                published_at TEXT,
                body TEXT NOT NULL
            )
            """)
        self._conn.commit()
        logger.info("record_store_initialized", path=self._path)

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            if self._conn:
                self._conn.close()
                self._conn = None
                logger.info("record_store_closed")

    def ping(self) -> None:
        """Run a trivial query; raises if the database is unusable."""
        with self._lock:
            if self._conn is None:
                raise sqlite3.ProgrammingError("Record store is not initialized")
            self._conn.execute("SELECT 1")

    async def get(self, record_id: int) -> SourceRecord | None:
        """Point lookup by internal id, without firing hooks.

        Args:
            record_id: Internal record id.

        Returns:
            The stored record, or None if absent.
        """
        return await asyncio.to_thread(self._select_one, record_id)

    async def find_published(self) -> list[SourceRecord]:
        """Return every published record, ordered by id.

        Returns:
            All records whose publication timestamp is set.
        """
        return await asyncio.to_thread(self._select_published)

    async def create(self, draft: RecordDraft) -> SourceRecord:
        """Create a record, running beforeCreate/afterCreate hooks.

        Args:
            draft: Pending payload; pre-save hooks may fill in fields.

        Returns:
            The persisted record.
        """
        event = self._event(LifecycleEventType.BEFORE_CREATE, data=draft)
        await self.hooks.dispatch(event)
        pending = event.data or draft

        timestamp = _now()
        values = self._draft_values(pending)
        values.update(
            document_id=_new_document_id(),
            created_at=timestamp,
            updated_at=timestamp,
        )
        record = await asyncio.to_thread(self._insert, values)
        logger.info(
            "record_created",
            record_id=record.id,
            document_id=record.document_id,
            published=record.is_published,
        )

        await self.hooks.dispatch(
            self._event(LifecycleEventType.AFTER_CREATE, result=record)
        )
        return record

    async def update(self, record_id: int, draft: RecordDraft) -> SourceRecord:
        """Update the fields a draft sets, running beforeUpdate/afterUpdate hooks.

        Args:
            record_id: Internal id of the record to update.
            draft: Partial payload; only fields it sets are written.

        Returns:
            The persisted record.

        Raises:
            RecordNotFoundError: If the record does not exist.
        """
        if await self.get(record_id) is None:
            raise RecordNotFoundError(record_id)

        event = self._event(
            LifecycleEventType.BEFORE_UPDATE, data=draft, where={"id": record_id}
        )
        await self.hooks.dispatch(event)
        pending = event.data or draft

        existing = await self.get(record_id)
        if existing is None:
            raise RecordNotFoundError(record_id)

        values = existing.model_dump()
        values.update(self._draft_values(pending))
        values["updated_at"] = _now()
        record = await asyncio.to_thread(self._replace, SourceRecord.model_validate(values))
        logger.info(
            "record_updated",
            record_id=record.id,
            document_id=record.document_id,
            published=record.is_published,
        )

        await self.hooks.dispatch(
            self._event(LifecycleEventType.AFTER_UPDATE, result=record)
        )
        return record

    async def publish(self, record_id: int) -> SourceRecord:
        """Set the publication timestamp to now.

        Args:
            record_id: Internal id of the record.

        Returns:
            The published record.
        """
        return await self.update(record_id, RecordDraft(published_at=_now()))

    async def unpublish(self, record_id: int) -> SourceRecord:
        """Clear the publication timestamp, turning the record into a draft.

        Args:
            record_id: Internal id of the record.

        Returns:
            The unpublished record.
        """
        return await self.update(record_id, RecordDraft(published_at=None))

    async def delete(self, record_id: int) -> SourceRecord:
        """Delete a record and fire afterDelete with its last state.

        Args:
            record_id: Internal id of the record.

        Returns:
            The deleted record.

        Raises:
            RecordNotFoundError: If the record does not exist.
        """
        record = await asyncio.to_thread(self._delete, record_id)
        logger.info("record_deleted", record_id=record.id, document_id=record.document_id)

        await self.hooks.dispatch(
            self._event(LifecycleEventType.AFTER_DELETE, result=record)
        )
        return record

    @staticmethod
    def _event(event_type: LifecycleEventType, **params: Any) -> LifecycleEvent:
        return LifecycleEvent(
            id=str(uuid.uuid4()),
            type=event_type,
            timestamp=datetime.now(UTC),
            **params,
        )

    @staticmethod
    def _draft_values(draft: RecordDraft) -> dict[str, Any]:
        """Fields the draft sets, including extras, minus control flags.

        Extra keys naming a store-managed field (``id``, ``documentId``,
        ``createdAt``, ``updatedAt``) are discarded so a payload can never
        retarget a write or rekey the indexed document.
        """
        values = draft.model_dump(exclude_unset=True)
        for name in _TRANSIENT_FIELDS:
            values.pop(name, None)
        ignored = sorted(key for key in values if key in _STORE_MANAGED_KEYS)
        for key in ignored:
            del values[key]
        if ignored:
            logger.warning("record_managed_fields_ignored", fields=ignored)
        if values.get("attachments") is None and "attachments" in values:
            values["attachments"] = []
        return values

    @staticmethod
    def _serialize(record: SourceRecord) -> str:
        return json.dumps(record.model_dump(mode="json", by_alias=True, exclude={"id"}))

    @staticmethod
    def _deserialize(row_id: int, body: str) -> SourceRecord:
        return SourceRecord.model_validate({**json.loads(body), "id": row_id})

    def _insert(self, values: dict[str, Any]) -> SourceRecord:
        with self._lock:
            assert self._conn is not None
            cursor = self._conn.execute(
                "INSERT INTO records (document_id, published_at, body) VALUES (?, ?, '{}')",
                (values["document_id"], values.get("published_at")),
            )
            assert cursor.lastrowid is not None
            record = SourceRecord.model_validate({**values, "id": cursor.lastrowid})
            self._conn.execute(
                "UPDATE records SET body = ? WHERE id = ?",
                (self._serialize(record), record.id),
            )
            self._conn.commit()
        return record

    def _replace(self, record: SourceRecord) -> SourceRecord:
        with self._lock:
            assert self._conn is not None
            self._conn.execute(
                "UPDATE records SET published_at = ?, body = ? WHERE id = ?",
                (record.published_at, self._serialize(record), record.id),
            )
            self._conn.commit()
        return record

    def _delete(self, record_id: int) -> SourceRecord:
        with self._lock:
            assert self._conn is not None
            row = self._conn.execute(
                "SELECT id, body FROM records WHERE id = ?", (record_id,)
            ).fetchone()
            if row is None:
                raise RecordNotFoundError(record_id)
            self._conn.execute("DELETE FROM records WHERE id = ?", (record_id,))
            self._conn.commit()
        return self._deserialize(*row)

    def _select_one(self, record_id: int) -> SourceRecord | None:
        with self._lock:
            assert self._conn is not None
            row = self._conn.execute(
                "SELECT id, body FROM records WHERE id = ?", (record_id,)
            ).fetchone()
        return self._deserialize(*row) if row else None

    def _select_published(self) -> list[SourceRecord]:
        with self._lock:
            assert self._conn is not None
            rows = self._conn.execute(
                "SELECT id, body FROM records WHERE published_at IS NOT NULL ORDER BY id"
            ).fetchall()
        return [self._deserialize(*row) for row in rows]
