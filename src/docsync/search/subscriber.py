"""Lifecycle subscriber keeping enrichment and the search index in sync."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Protocol

import structlog

from docsync.enrichment.client import EnrichmentResult
from docsync.enrichment.mapper import populate
from docsync.events.types import LifecycleEvent, LifecycleEventType
from docsync.records.schemas import RecordDraft, SourceRecord
from docsync.search.index import IndexManager

logger = structlog.get_logger()


class Enricher(Protocol):
    """Enrichment lookup by business key."""

    async def fetch(self, business_key: str) -> EnrichmentResult: ...


class RecordLookup(Protocol):
    """Point lookup into the source-of-truth store."""

    async def get(self, record_id: int) -> SourceRecord | None: ...


Guard = Callable[[LifecycleEvent], bool]
Action = Callable[[LifecycleEvent], Awaitable[None]]


@dataclass(frozen=True)
class Transition:
    """Guarded action taken for a lifecycle event.

    Attributes:
        name: Label used in logs.
        guard: Predicate over the event; the first passing transition runs.
        action: Coroutine performing the transition.
    """

    name: str
    guard: Guard
    action: Action


def always(event: LifecycleEvent) -> bool:
    return True


def is_publish_write(event: LifecycleEvent) -> bool:
    """Whether an update payload sets the publication timestamp."""
    return event.data is not None and "published_at" in event.data.model_fields_set


def wants_enrichment(event: LifecycleEvent) -> bool:
    """Whether a pending payload has a business key and no manual override."""
    data = event.data
    return data is not None and bool(data.sf_number) and not data.manual_override


def is_published(event: LifecycleEvent) -> bool:
    """Whether the persisted record carries a publication timestamp."""
    return event.result is not None and event.result.published_at is not None


class SyncOrchestrator:
    """Drives enrichment and index sync from record lifecycle events.

    Each event type maps to an ordered list of guarded transitions; the
    first transition whose guard passes runs. Failures are logged and
    swallowed: the store write is authoritative and the index may lag until
    the next refresh.
    """

    def __init__(
        self,
        index_manager: IndexManager,
        enricher: Enricher,
        records: RecordLookup,
    ) -> None:
        """Initialize orchestrator.

        Args:
            index_manager: Index manager used for upserts and removals.
            enricher: Enrichment client for pre-save backfill.
            records: Store used for point lookups.
        """
        self._index = index_manager
        self._enricher = enricher
        self._records = records
        self._transitions: dict[LifecycleEventType, list[Transition]] = {
            LifecycleEventType.BEFORE_CREATE: [
                Transition("enrich", wants_enrichment, self._enrich),
            ],
            LifecycleEventType.BEFORE_UPDATE: [
                Transition("skip_publish_write", is_publish_write, self._skip),
                Transition("enrich_on_key_change", wants_enrichment, self._enrich_if_key_changed),
            ],
            LifecycleEventType.AFTER_CREATE: [
                Transition("index", is_published, self._upsert),
                Transition("keep_draft_unindexed", always, self._skip),
            ],
            LifecycleEventType.AFTER_UPDATE: [
                Transition("index", is_published, self._upsert),
                Transition("unindex", always, self._remove),
            ],
            LifecycleEventType.AFTER_DELETE: [
                Transition("unindex", always, self._remove),
            ],
        }

    async def handle(self, event: LifecycleEvent) -> None:
        """Run the first transition whose guard accepts the event.

        Args:
            event: Lifecycle event from the record store.
        """
        if event.type in (LifecycleEventType.AFTER_CREATE, LifecycleEventType.AFTER_UPDATE):
            event = await self._with_stored_publication(event)

        for transition in self._transitions.get(event.type, []):
            if transition.guard(event):
                logger.debug(
                    "sync_transition",
                    event_type=event.type.value,
                    transition=transition.name,
                )
                await transition.action(event)
                return

    async def _with_stored_publication(self, event: LifecycleEvent) -> LifecycleEvent:
        """Take publication state from the persisted record.

        The event result is used when it carries publishedAt explicitly;
        otherwise the record is re-read from the store.
        """
        result = event.result
        if result is None or "published_at" in result.model_fields_set:
            return event

        try:
            stored = await self._records.get(result.id)
        except Exception as e:
            logger.error("sync_publication_lookup_failed", record_id=result.id, error=str(e))
            return event
        if stored is None:
            return event
        refreshed = result.model_copy(update={"published_at": stored.published_at})
        return event.model_copy(update={"result": refreshed})

    async def _skip(self, event: LifecycleEvent) -> None:
        logger.debug("sync_skipped", event_type=event.type.value)

    async def _enrich(self, event: LifecycleEvent) -> None:
        draft = event.data
        if draft is None or not draft.sf_number:
            return
        await self._populate_from_enrichment(draft, draft.sf_number)

    async def _enrich_if_key_changed(self, event: LifecycleEvent) -> None:
        draft = event.data
        if draft is None or not draft.sf_number:
            return
        record_id = (event.where or {}).get("id")

        try:
            existing = await self._records.get(record_id) if record_id is not None else None
        except Exception as e:
            logger.warning("enrichment_lookup_failed", record_id=record_id, error=str(e))
            return

        if existing is not None and existing.sf_number == draft.sf_number:
            logger.debug("enrichment_skipped_unchanged_key", sf_number=draft.sf_number)
            return
        await self._populate_from_enrichment(draft, draft.sf_number)

    async def _populate_from_enrichment(self, draft: RecordDraft, business_key: str) -> None:
        try:
            result = await self._enricher.fetch(business_key)
        except Exception as e:
            logger.warning("enrichment_failed", sf_number=business_key, error=str(e))
            return

        if not result.success:
            logger.warning("enrichment_failed", sf_number=business_key, error=result.error)
            return

        fields = populate(draft, result.data)
        logger.info("enrichment_applied", sf_number=business_key, fields=fields)

    async def _upsert(self, event: LifecycleEvent) -> None:
        record = event.result
        if record is None:
            logger.warning("sync_event_without_record", event_type=event.type.value)
            return
        try:
            await self._index.index_record(record)
        except Exception as e:
            logger.error(
                "search_sync_failed",
                action="upsert",
                document_id=record.document_id,
                error=str(e),
            )

    async def _remove(self, event: LifecycleEvent) -> None:
        record = event.result
        if record is None:
            logger.warning("sync_event_without_record", event_type=event.type.value)
            return
        try:
            await self._index.remove(record.document_id)
        except Exception as e:
            logger.error(
                "search_sync_failed",
                action="remove",
                document_id=record.document_id,
                error=str(e),
            )
