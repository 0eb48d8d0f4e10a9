"""Search index synchronization: transform, index management and lifecycle sync."""

from docsync.search.engine import MeiliSearchEngine
from docsync.search.index import INDEX_SETTINGS, IndexManager
from docsync.search.schemas import IndexedDocument, RebuildResult, RefreshResult
from docsync.search.subscriber import SyncOrchestrator
from docsync.search.transformer import transform_record

__all__ = [
    "INDEX_SETTINGS",
    "IndexManager",
    "IndexedDocument",
    "MeiliSearchEngine",
    "RebuildResult",
    "RefreshResult",
    "SyncOrchestrator",
    "transform_record",
]
