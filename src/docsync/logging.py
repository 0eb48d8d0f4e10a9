"""Structured logging configuration using structlog."""

import logging
import sys

import structlog

# Third-party loggers routed through the root handler, with their floor level.
_LIBRARY_LEVELS: dict[str, int | None] = {
    "uvicorn": None,
    "uvicorn.error": None,
    "uvicorn.access": logging.WARNING,
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "meilisearch_python_sdk": logging.WARNING,
}


def configure_logging(debug: bool = False, service: str = "docsync") -> None:
    """Configure structlog for one JSON object per line on stdout.

    Every event carries the service name, so sync, enrichment and request
    logs from one process can be separated downstream. Library loggers are
    stripped of their own handlers and propagate to the root handler.

    Args:
        debug: Enable debug-level logging when True.
        service: Value of the ``service`` key bound on every event.
    """
    level = logging.DEBUG if debug else logging.INFO

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )
    structlog.contextvars.bind_contextvars(service=service)

    logging.basicConfig(
        format="%(name)s %(levelname)s %(message)s",
        level=level,
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    for name, floor in _LIBRARY_LEVELS.items():
        library_logger = logging.getLogger(name)
        library_logger.handlers = []
        library_logger.propagate = True
        if floor is not None and not debug:
            library_logger.setLevel(floor)
