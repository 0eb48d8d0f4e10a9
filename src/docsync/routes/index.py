"""Search index management endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from fastapi import APIRouter, HTTPException, Request

from docsync.search.schemas import IndexStatsResponse, OperationResponse

if TYPE_CHECKING:
    from docsync.search.index import IndexManager

logger = structlog.get_logger()

router = APIRouter(prefix="/index", tags=["index"])


def _manager(request: Request) -> IndexManager:
    return request.app.state.index_manager


@router.post(
    "/refresh",
    response_model=OperationResponse,
    summary="Clear the index and rebuild it from published records",
)
async def refresh_index(request: Request) -> OperationResponse:
    """Clear and rebuild the index.

    Args:
        request: FastAPI request (provides access to app state).

    Returns:
        Outcome with indexed/skipped counts on success.
    """
    try:
        result = await _manager(request).refresh()
    except Exception as e:
        logger.error("index_refresh_endpoint_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Index refresh failed") from e

    return OperationResponse(success=result.success, message=result.message, data=result.stats)


@router.post(
    "/rebuild",
    response_model=OperationResponse,
    summary="Index every published record without clearing first",
)
async def rebuild_index(request: Request) -> OperationResponse:
    """Rebuild the index from published records.

    Args:
        request: FastAPI request (provides access to app state).

    Returns:
        Outcome with indexed/skipped counts.
    """
    try:
        result = await _manager(request).rebuild()
    except Exception as e:
        logger.error("index_rebuild_endpoint_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to rebuild index") from e

    return OperationResponse(
        success=True,
        message=f"Index rebuilt successfully. Indexed {result.indexed} documents.",
        data=result,
    )


@router.post("/clear", response_model=OperationResponse, summary="Delete all documents")
async def clear_index(request: Request) -> OperationResponse:
    """Delete every document from the index.

    Args:
        request: FastAPI request (provides access to app state).

    Returns:
        Outcome message.
    """
    try:
        await _manager(request).clear()
    except Exception as e:
        logger.error("index_clear_endpoint_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to clear index") from e

    return OperationResponse(success=True, message="Index cleared successfully")


@router.post(
    "/configure",
    response_model=OperationResponse,
    summary="Apply attribute, ranking and synonym settings",
)
async def configure_index(request: Request) -> OperationResponse:
    """Apply index settings; safe to repeat.

    Args:
        request: FastAPI request (provides access to app state).

    Returns:
        Outcome message.
    """
    try:
        await _manager(request).configure()
    except Exception as e:
        logger.error("index_configure_endpoint_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to configure index") from e

    return OperationResponse(success=True, message="Index configuration updated successfully")


@router.get("/stats", response_model=IndexStatsResponse, summary="Index statistics")
async def index_stats(request: Request) -> IndexStatsResponse:
    """Report document count, indexing state and settings.

    Args:
        request: FastAPI request (provides access to app state).

    Returns:
        Index statistics.
    """
    try:
        stats = await _manager(request).stats()
    except Exception as e:
        logger.error("index_stats_endpoint_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to get index stats") from e

    return IndexStatsResponse(data=stats)
