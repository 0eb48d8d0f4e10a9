"""FastAPI application factory and lifespan management."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from docsync import __version__
from docsync.config import Settings
from docsync.enrichment.client import EnrichmentClient
from docsync.middleware.logging import REQUEST_ID_HEADER, RequestLoggingMiddleware
from docsync.records.store import RecordStore
from docsync.routes import health, index, records, search
from docsync.search.engine import MeiliSearchEngine
from docsync.search.index import IndexManager
from docsync.search.subscriber import SyncOrchestrator

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application lifecycle events.

    Builds the record store, search engine adapter, enrichment client,
    index manager and sync orchestrator (reusing any pre-built ones handed
    to create_app), subscribes the orchestrator to store lifecycle hooks,
    and shuts everything down in reverse order.

    Args:
        app: FastAPI application instance.

    Yields:
        None during application runtime.
    """
    settings: Settings = app.state.settings
    logger.info("api_startup", host=settings.host, port=settings.port)

    store: RecordStore = app.state.store or RecordStore(settings.store_path)
    store.initialize()

    engine = app.state.engine or MeiliSearchEngine(
        host=settings.meilisearch_host,
        api_key=settings.meilisearch_api_key,
        index_name=settings.index_name,
    )
    enrichment = app.state.enrichment or EnrichmentClient(
        base_url=settings.enrichment_base_url,
        token=settings.enrichment_token,
        timeout=settings.enrichment_timeout,
    )

    index_manager = IndexManager(
        engine,
        store,
        batch_size=settings.rebuild_batch_size,
        clear_timeout=settings.clear_timeout,
        poll_interval=settings.clear_poll_interval,
    )
    orchestrator = SyncOrchestrator(index_manager, enrichment, store)
    subscriber_id = store.hooks.subscribe(orchestrator.handle)

    try:
        await engine.ensure_index()
        if settings.configure_on_startup:
            await index_manager.configure()
    except Exception as e:
        logger.warning("search_index_setup_failed", error=str(e))

    app.state.store = store
    app.state.engine = engine
    app.state.enrichment = enrichment
    app.state.index_manager = index_manager
    app.state.orchestrator = orchestrator

    try:
        yield
    finally:
        store.hooks.unsubscribe(subscriber_id)
        await enrichment.aclose()
        await engine.close()
        store.close()
        logger.info("api_shutdown")


def create_app(
    settings: Settings | None = None,
    *,
    store: RecordStore | None = None,
    engine: MeiliSearchEngine | None = None,
    enrichment: EnrichmentClient | None = None,
) -> FastAPI:
    """Factory function to create configured FastAPI application.

    Args:
        settings: Configuration instance. Creates default if None.
        store: Pre-built record store, built from settings if None.
        engine: Pre-built search engine adapter, built from settings if None.
        enrichment: Pre-built enrichment client, built from settings if None.

    Returns:
        Configured FastAPI application.
    """
    if settings is None:
        settings = Settings()

    app = FastAPI(
        title="Document Search Sync",
        version=__version__,
        lifespan=lifespan,
        docs_url="/api/v1/docs" if settings.debug else None,
        redoc_url=None,
        openapi_url="/api/v1/openapi.json" if settings.debug else None,
    )
    app.state.settings = settings
    app.state.store = store
    app.state.engine = engine
    app.state.enrichment = enrichment

    # The CMS admin UI calls the management API from the browser.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
    )
    app.add_middleware(RequestLoggingMiddleware)

    app.include_router(health.router, prefix="/api/v1")
    app.include_router(index.router, prefix="/api/v1")
    app.include_router(search.router, prefix="/api/v1")
    app.include_router(records.router, prefix="/api/v1")

    return app
