"""Entry point for the sync service and its maintenance commands."""

import argparse
import asyncio
import contextlib
import signal
import sys

import structlog
import uvicorn
from pydantic import BaseModel

from docsync.app import create_app
from docsync.config import Settings
from docsync.logging import configure_logging
from docsync.records.store import RecordStore
from docsync.search.engine import MeiliSearchEngine
from docsync.search.index import IndexManager, SearchEngine

logger = structlog.get_logger()

MAINTENANCE_COMMANDS = ("refresh", "rebuild", "configure", "stats")


async def serve(settings: Settings) -> None:
    """Run uvicorn until SIGTERM or SIGINT, then drain in-flight requests.

    Args:
        settings: Server configuration.
    """
    server = uvicorn.Server(
        uvicorn.Config(
            create_app(settings),
            host=settings.host,
            port=settings.port,
            log_level="warning",
            access_log=False,
            timeout_graceful_shutdown=int(settings.shutdown_timeout),
        )
    )

    def request_exit() -> None:
        logger.info("shutdown_triggered", timeout_seconds=settings.shutdown_timeout)
        server.should_exit = True

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, request_exit)

    await server.serve()


async def run_maintenance(
    settings: Settings,
    command: str,
    *,
    store: RecordStore | None = None,
    engine: SearchEngine | None = None,
) -> tuple[bool, BaseModel | None]:
    """Run one index maintenance command outside the HTTP server.

    Args:
        settings: Store, engine and batching configuration.
        command: One of ``MAINTENANCE_COMMANDS``.
        store: Pre-built record store, built from settings if None.
        engine: Pre-built engine adapter, built from settings if None.

    Returns:
        Whether the command succeeded, and its result model if it has one.
    """
    store = store or RecordStore(settings.store_path)
    owns_engine = engine is None
    engine = engine or MeiliSearchEngine(
        host=settings.meilisearch_host,
        api_key=settings.meilisearch_api_key,
        index_name=settings.index_name,
    )
    manager = IndexManager(
        engine,
        store,
        batch_size=settings.rebuild_batch_size,
        clear_timeout=settings.clear_timeout,
        poll_interval=settings.clear_poll_interval,
    )

    store.initialize()
    try:
        if command == "refresh":
            refreshed = await manager.refresh()
            return refreshed.success, refreshed
        if command == "rebuild":
            rebuilt = await manager.rebuild()
            return rebuilt.skipped == 0, rebuilt
        if command == "configure":
            await manager.configure()
            return True, None
        if command == "stats":
            return True, await manager.stats()
        raise ValueError(f"Unknown maintenance command: {command}")
    except Exception as e:
        logger.error("maintenance_failed", command=command, error=str(e))
        return False, None
    finally:
        if owns_engine:
            await engine.close()  # type: ignore[union-attr]
        store.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docsync",
        description="Keep the document search index in sync with published records.",
    )
    parser.add_argument(
        "command",
        nargs="?",
        default="serve",
        choices=("serve", *MAINTENANCE_COMMANDS),
        help="serve the API (default) or run one maintenance command and exit",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """Entry point for python -m docsync."""
    args = build_parser().parse_args(argv)
    settings = Settings()
    configure_logging(debug=settings.debug)

    if args.command == "serve":
        with contextlib.suppress(KeyboardInterrupt):
            asyncio.run(serve(settings))
        sys.exit(0)

    ok, result = asyncio.run(run_maintenance(settings, args.command))
    if result is not None:
        print(result.model_dump_json(by_alias=True, indent=2))
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
