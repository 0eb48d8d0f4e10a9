"""Pytest configuration and fixtures."""

import sys
from collections.abc import Iterator
from pathlib import Path
from typing import Any

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest
from fastapi.testclient import TestClient

from docsync.app import create_app
from docsync.config import Settings
from docsync.enrichment.client import EnrichmentResult
from docsync.records.store import RecordStore
from docsync.search.schemas import EngineStats, IndexSettings, SearchHits, SearchOptions


class FakeSearchEngine:
    """In-memory stand-in for the Meilisearch adapter.

    Documents are keyed by documentId; search is a case-insensitive
    substring match over searchableText.
    """

    def __init__(self) -> None:
        self.documents: dict[str, dict[str, Any]] = {}
        self.settings = IndexSettings()
        self.add_calls: list[int] = []
        self.fail_add_calls: set[int] = set()
        self.fail_all = False
        self.indexing_polls = 0
        self.stats_calls = 0
        self.healthy = True
        self.closed = False

    def _check(self) -> None:
        if self.fail_all:
            raise ConnectionError("engine unreachable")

    async def ensure_index(self) -> None:
        self._check()

    async def add_documents(self, documents: list[dict[str, Any]]) -> None:
        self._check()
        self.add_calls.append(len(documents))
        if len(self.add_calls) in self.fail_add_calls:
            raise RuntimeError(f"batch {len(self.add_calls)} rejected")
        for document in documents:
            self.documents[document["documentId"]] = document

    async def delete_document(self, document_id: str) -> None:
        self._check()
        self.documents.pop(document_id, None)

    async def delete_all_documents(self) -> None:
        self._check()
        self.documents.clear()

    async def get_stats(self) -> EngineStats:
        self._check()
        self.stats_calls += 1
        is_indexing = self.indexing_polls > 0
        if is_indexing:
            self.indexing_polls -= 1
        distribution: dict[str, int] = {}
        for document in self.documents.values():
            for key in document:
                distribution[key] = distribution.get(key, 0) + 1
        return EngineStats(
            number_of_documents=len(self.documents),
            is_indexing=is_indexing,
            field_distribution=distribution,
        )

    async def get_settings(self) -> IndexSettings:
        self._check()
        return self.settings

    async def update_settings(self, settings: IndexSettings) -> None:
        self._check()
        self.settings = settings.model_copy(deep=True)

    async def search(self, query: str, options: SearchOptions) -> SearchHits:
        self._check()
        needle = query.lower()
        hits = [
            document
            for document in self.documents.values()
            if needle in document.get("searchableText", "")
        ]
        page = hits[options.offset : options.offset + options.limit]
        return SearchHits(
            hits=page,
            query=query,
            estimated_total_hits=len(hits),
            processing_time_ms=1,
        )

    async def is_healthy(self) -> bool:
        return self.healthy

    async def close(self) -> None:
        self.closed = True


class FakeEnrichmentClient:
    """Enrichment client returning canned payloads and recording calls."""

    def __init__(self, payloads: dict[str, dict[str, Any]] | None = None) -> None:
        self.payloads = payloads or {}
        self.calls: list[str] = []
        self.enabled = True
        self.closed = False

    async def fetch(self, business_key: str) -> EnrichmentResult:
        self.calls.append(business_key)
        if business_key not in self.payloads:
            return EnrichmentResult(success=False, error="http_404")
        return EnrichmentResult(success=True, data=self.payloads[business_key])

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def settings() -> Settings:
    """Create test settings."""
    return Settings(
        host="127.0.0.1",
        port=8000,
        debug=True,
        store_path=":memory:",
        clear_poll_interval=0.0,
        clear_timeout=1.0,
    )


@pytest.fixture
def engine() -> FakeSearchEngine:
    """In-memory search engine."""
    return FakeSearchEngine()


@pytest.fixture
def enrichment() -> FakeEnrichmentClient:
    """Enrichment client with one known business key."""
    return FakeEnrichmentClient(
        {
            "SF-1001": {
                "Unique_Id": "UID-1001",
                "Client_Name": "Acme Corp",
                "Industry": "Industry A",
                "Region": "Atlantis",
                "Description": "Hello world",
                "Last_Stage_Change_Date": "2024-03-15T10:00:00Z",
                "Author": ["Ada Lovelace", "Grace Hopper"],
                "SMEs": "Alan Turing",
            }
        }
    )


@pytest.fixture
def store() -> Iterator[RecordStore]:
    """Initialized in-memory record store."""
    record_store = RecordStore(":memory:")
    record_store.initialize()
    yield record_store
    record_store.close()


@pytest.fixture
def client(
    settings: Settings,
    engine: FakeSearchEngine,
    enrichment: FakeEnrichmentClient,
) -> Iterator[TestClient]:
    """Create test client with the app wired to in-memory collaborators."""
    app = create_app(
        settings,
        store=RecordStore(":memory:"),
        engine=engine,  # type: ignore[arg-type]
        enrichment=enrichment,  # type: ignore[arg-type]
    )
    with TestClient(app) as test_client:
        yield test_client
