"""Meilisearch adapter exposing the engine operations the index manager needs."""

from typing import Any

import structlog
from meilisearch_python_sdk import AsyncClient
from meilisearch_python_sdk.errors import MeilisearchApiError
from meilisearch_python_sdk.models.settings import MeilisearchSettings

from docsync.search.schemas import EngineStats, IndexSettings, SearchHits, SearchOptions

logger = structlog.get_logger()

PRIMARY_KEY = "documentId"


def _attribute_names(attributes: list[Any] | None) -> list[str]:
    """Flatten filterable attributes, which newer servers may return as
    pattern objects instead of plain names."""
    names: list[str] = []
    for attribute in attributes or []:
        if isinstance(attribute, str):
            names.append(attribute)
        else:
            names.extend(getattr(attribute, "attribute_patterns", None) or [])
    return names


class MeiliSearchEngine:
    """Single-index view of a Meilisearch server.

    Returns plain pydantic models from ``docsync.search.schemas`` so callers
    never depend on SDK types.
    """

    def __init__(
        self,
        host: str,
        api_key: str | None,
        index_name: str,
        timeout: int | None = 10,
    ) -> None:
        """Initialize the adapter (no network calls are made here).

        Args:
            host: Meilisearch base URL.
            api_key: API key, or None/empty for an unsecured server.
            index_name: Index holding the documents.
            timeout: Seconds before an engine request is abandoned.
        """
        self._client = AsyncClient(host, api_key or None, timeout=timeout)
        self._index_name = index_name
        self._index = self._client.index(index_name)

    @property
    def index_name(self) -> str:
        """Name of the managed index."""
        return self._index_name

    async def ensure_index(self) -> None:
        """Create the index with the document-id primary key if it is missing."""
        try:
            await self._client.get_index(self._index_name)
        except MeilisearchApiError as e:
            if e.code != "index_not_found":
                raise
            await self._client.create_index(self._index_name, primary_key=PRIMARY_KEY)
            logger.info("search_index_created", index=self._index_name)

    async def add_documents(self, documents: list[dict[str, Any]]) -> None:
        """Add or fully replace documents by primary key.

        Args:
            documents: Engine-shaped documents.
        """
        await self._index.add_documents(documents, primary_key=PRIMARY_KEY)

    async def delete_document(self, document_id: str) -> None:
        """Delete one document; deleting an absent id is not an error.

        Args:
            document_id: Primary key of the document.
        """
        await self._index.delete_document(document_id)

    async def delete_all_documents(self) -> None:
        """Delete every document in the index."""
        await self._index.delete_all_documents()

    async def get_stats(self) -> EngineStats:
        """Fetch document count, indexing flag and field distribution."""
        stats = await self._index.get_stats()
        return EngineStats(
            number_of_documents=stats.number_of_documents,
            is_indexing=stats.is_indexing,
            field_distribution=dict(stats.field_distribution or {}),
        )

    async def get_settings(self) -> IndexSettings:
        """Fetch the managed subset of index settings."""
        settings = await self._index.get_settings()
        return IndexSettings(
            searchable_attributes=list(settings.searchable_attributes or []),
            filterable_attributes=_attribute_names(settings.filterable_attributes),
            sortable_attributes=list(settings.sortable_attributes or []),
            ranking_rules=list(settings.ranking_rules or []),
            synonyms=dict(settings.synonyms or {}),
        )

    async def update_settings(self, settings: IndexSettings) -> None:
        """Replace the managed subset of index settings.

        Args:
            settings: Attribute lists, ranking rules and synonyms to apply.
        """
        await self._index.update_settings(
            MeilisearchSettings(
                searchable_attributes=settings.searchable_attributes,
                filterable_attributes=settings.filterable_attributes,
                sortable_attributes=settings.sortable_attributes,
                ranking_rules=settings.ranking_rules,
                synonyms=settings.synonyms,
            )
        )

    async def search(self, query: str, options: SearchOptions) -> SearchHits:
        """Run a query against the index.

        Args:
            query: Full-text query, may be empty.
            options: Pagination, filter, sort, facet and highlight options.

        Returns:
            Hits with total estimate, timing and facet distribution.
        """
        results = await self._index.search(
            query,
            offset=options.offset,
            limit=options.limit,
            filter=options.filter or None,
            sort=options.sort or None,
            facets=options.facets or None,
            attributes_to_highlight=options.attributes_to_highlight or None,
            attributes_to_crop=options.attributes_to_crop or None,
            crop_length=options.crop_length,
        )
        return SearchHits(
            hits=list(results.hits),
            query=results.query or query,
            estimated_total_hits=results.estimated_total_hits or 0,
            processing_time_ms=results.processing_time_ms,
            facet_distribution=results.facet_distribution or {},
        )

    async def is_healthy(self) -> bool:
        """Whether the engine reports itself available."""
        try:
            health = await self._client.health()
        except Exception as e:
            logger.warning("search_engine_unhealthy", error=str(e))
            return False
        return health.status == "available"

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()
