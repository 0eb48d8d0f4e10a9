"""Index manager owning every interaction with the search engine."""

import asyncio
import time
from typing import Any, Protocol

import structlog

from docsync.records.schemas import SourceRecord
from docsync.search.schemas import (
    FILTER_FIELDS,
    EngineStats,
    IndexedDocument,
    IndexSettings,
    IndexStats,
    RebuildResult,
    RefreshResult,
    SearchHits,
    SearchOptions,
    SettingsSnapshot,
)
from docsync.search.transformer import transform_record

logger = structlog.get_logger()

INDEX_SETTINGS = IndexSettings(
    searchable_attributes=[
        "SF_Number",
        "Client_Name",
        "Description",
        "Client_Contact_Buying_Center",
        "Document_Confidentiality",
        "searchableText",
        "Client_Type",
        "Document_Type",
        "Document_Sub_Type",
        "Unique_Id",
        "Client_Contact",
        "Industry",
        "Service",
        "Author",
        "SMEs",
        "Competitors",
        "attachments_text",
    ],
    filterable_attributes=[
        *(f"filters.{field}" for field in FILTER_FIELDS),
        "Client_Type",
        "Document_Type",
        "Document_Confidentiality",
        "Industry",
        "Region",
        "Business_Unit",
        "publishedAt",
        "createdAt",
        "updatedAt",
    ],
    sortable_attributes=[
        "createdAt",
        "updatedAt",
        "publishedAt",
        "Unique_Id",
        "Client_Name",
        "Last_Stage_Change_Date",
    ],
    ranking_rules=["words", "typo", "proximity", "attribute", "sort", "exactness"],
    synonyms={
        "proposal": ["rfp", "request for proposal", "tender"],
        "client": ["customer", "account", "company"],
        "document": ["doc", "file", "record"],
        "sme": ["subject matter expert", "expert", "specialist"],
        "won": ["successful", "awarded", "victory"],
        "lost": ["unsuccessful", "rejected", "defeat"],
    },
)


class SearchEngine(Protocol):
    """Engine operations used by the index manager."""

    async def add_documents(self, documents: list[dict[str, Any]]) -> None: ...

    async def delete_document(self, document_id: str) -> None: ...

    async def delete_all_documents(self) -> None: ...

    async def get_stats(self) -> EngineStats: ...

    async def get_settings(self) -> IndexSettings: ...

    async def update_settings(self, settings: IndexSettings) -> None: ...

    async def search(self, query: str, options: SearchOptions) -> SearchHits: ...


class PublishedRecordSource(Protocol):
    """Source of truth for the set of published records."""

    async def find_published(self) -> list[SourceRecord]: ...


class IndexManager:
    """Keeps the search index consistent with published records.

    Upserts are full-document replaces keyed by document identifier, so
    repeated syncs of the same record converge on a single entry.

    Attributes:
        batch_size: Documents submitted per engine call during rebuild.
    """

    def __init__(
        self,
        engine: SearchEngine,
        records: PublishedRecordSource,
        batch_size: int = 100,
        clear_timeout: float = 30.0,
        poll_interval: float = 1.0,
    ) -> None:
        """Initialize index manager.

        Args:
            engine: Search engine adapter for one index.
            records: Store providing published records for rebuilds.
            batch_size: Documents per rebuild batch.
            clear_timeout: Seconds to wait for the engine after a clear.
            poll_interval: Seconds between engine status polls.
        """
        self._engine = engine
        self._records = records
        self.batch_size = batch_size
        self._clear_timeout = clear_timeout
        self._poll_interval = poll_interval

    async def upsert(self, document: IndexedDocument) -> None:
        """Create or replace one document.

        Args:
            document: Indexed document keyed by documentId.
        """
        await self._engine.add_documents([document.to_engine()])
        logger.info("search_document_upserted", document_id=document.document_id)

    async def index_record(self, record: SourceRecord) -> None:
        """Transform a record and upsert the result.

        Args:
            record: Published source record.
        """
        await self.upsert(transform_record(record))

    async def remove(self, document_id: str) -> None:
        """Delete one document; an absent document is not an error.

        Args:
            document_id: Document identifier of the record.
        """
        await self._engine.delete_document(document_id)
        logger.info("search_document_removed", document_id=document_id)

    async def clear(self) -> None:
        """Delete every document and wait for the engine to settle."""
        await self._engine.delete_all_documents()
        logger.info("search_index_cleared")
        await self._wait_until_idle()

    async def _wait_until_idle(self) -> bool:
        """Poll engine stats until indexing finishes or the timeout elapses.

        Returns:
            True if the engine reported idle within the timeout.
        """
        deadline = time.monotonic() + self._clear_timeout
        while time.monotonic() < deadline:
            try:
                stats = await self._engine.get_stats()
            except Exception as e:
                logger.warning("search_index_poll_failed", error=str(e))
                return False
            if not stats.is_indexing:
                return True
            await asyncio.sleep(self._poll_interval)

        logger.warning("search_index_wait_timeout", timeout_seconds=self._clear_timeout)
        return False

    async def rebuild(self) -> RebuildResult:
        """Index every published record in fixed-size batches.

        Batches run one after another; a failed batch is counted as skipped
        and does not stop the remaining batches.

        Returns:
            Counts of indexed and skipped documents.
        """
        records = await self._records.find_published()
        if not records:
            logger.info("search_rebuild_empty")
            return RebuildResult()

        documents = [transform_record(record).to_engine() for record in records]
        logger.info("search_rebuild_started", document_count=len(documents))

        result = RebuildResult()
        for start in range(0, len(documents), self.batch_size):
            batch = documents[start : start + self.batch_size]
            batch_number = start // self.batch_size + 1
            try:
                await self._engine.add_documents(batch)
            except Exception as e:
                result.skipped += len(batch)
                logger.error(
                    "search_batch_failed",
                    batch=batch_number,
                    size=len(batch),
                    error=str(e),
                )
                continue
            result.indexed += len(batch)
            logger.info("search_batch_indexed", batch=batch_number, size=len(batch))

        logger.info(
            "search_rebuild_complete",
            indexed=result.indexed,
            skipped=result.skipped,
        )
        return result

    async def refresh(self) -> RefreshResult:
        """Clear the index and rebuild it from published records.

        Never raises; failures are reported in the result.

        Returns:
            Success flag, message and rebuild counts.
        """
        logger.info("search_refresh_started")
        try:
            await self.clear()
            stats = await self.rebuild()
        except Exception as e:
            logger.error("search_refresh_failed", error=str(e))
            return RefreshResult(success=False, message=f"Index refresh failed: {e}")

        return RefreshResult(
            success=True,
            message=f"Index refreshed successfully. Indexed {stats.indexed} documents.",
            stats=stats,
        )

    async def configure(self) -> None:
        """Apply searchable, filterable and sortable attributes, ranking rules and synonyms."""
        await self._engine.update_settings(INDEX_SETTINGS)
        logger.info("search_index_configured")

    async def search(self, query: str, options: SearchOptions) -> SearchHits:
        """Pass a query through to the engine.

        Args:
            query: Full-text query.
            options: Engine query options.

        Returns:
            Raw engine results.
        """
        return await self._engine.search(query, options)

    async def stats(self) -> IndexStats:
        """Report document count, indexing flag, field distribution and settings."""
        engine_stats = await self._engine.get_stats()
        settings = await self._engine.get_settings()
        return IndexStats(
            number_of_documents=engine_stats.number_of_documents,
            is_indexing=engine_stats.is_indexing,
            field_distribution=engine_stats.field_distribution,
            settings=SettingsSnapshot(
                searchable_attributes=settings.searchable_attributes,
                filterable_attributes=settings.filterable_attributes,
                sortable_attributes=settings.sortable_attributes,
            ),
        )
