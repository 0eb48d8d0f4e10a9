"""Advanced search endpoint over the document index."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

import structlog
from fastapi import APIRouter, HTTPException, Query, Request

from docsync.search.schemas import (
    FILTER_FIELDS,
    AdvancedSearchResponse,
    Pagination,
    SearchMeta,
    SearchMetaInfo,
    SearchOptions,
)

if TYPE_CHECKING:
    from docsync.search.index import IndexManager

logger = structlog.get_logger()

router = APIRouter(tags=["search"])

DEFAULT_SORT = ["updatedAt:desc"]
DEFAULT_FACETS = [f"filters.{field}" for field in FILTER_FIELDS]
HIGHLIGHT_ATTRIBUTES = ["SF_Number", "Client_Name", "Description", "Industry", "Service"]
CROP_ATTRIBUTES = ["Description"]
CROP_LENGTH = 200

# filters[Industry]=... or filters.Industry=...
_FILTER_PARAM = re.compile(r"^filters(?:\[(\w+)\]|\.(\w+))$")


def build_filter_expressions(params: list[tuple[str, str]]) -> list[str]:
    """Translate filter query parameters into engine filter expressions.

    Args:
        params: Raw query string items.

    Returns:
        One ``filters.<key> = "<value>"`` expression per non-empty filter.
    """
    expressions: list[str] = []
    for key, value in params:
        match = _FILTER_PARAM.match(key)
        if not match or not value:
            continue
        field = match.group(1) or match.group(2)
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        expressions.append(f'filters.{field} = "{escaped}"')
    return expressions


def page_for(offset: int, limit: int) -> int:
    """Convert offset/limit to a 1-based page number."""
    return offset // limit + 1


@router.get(
    "/search",
    response_model=AdvancedSearchResponse,
    summary="Full-text search across published documents",
    description="Searches the index with facet filters, sorting, highlighting and pagination.",
)
async def advanced_search(
    request: Request,
    query: str = Query(default="", max_length=500, description="Search query string"),
    limit: int = Query(default=20, ge=1, le=1000, description="Results per page"),
    offset: int = Query(default=0, ge=0, description="Results to skip"),
    sort: list[str] = Query(default=[], description="Sort expressions, e.g. updatedAt:desc"),
    facets: list[str] = Query(default=[], description="Facet attributes"),
) -> AdvancedSearchResponse:
    """Search published documents.

    Filters are read from ``filters[<Field>]=<value>`` query parameters.

    Args:
        request: FastAPI request (provides access to app state and raw query).
        query: Full-text query.
        limit: Maximum results per page.
        offset: Pagination offset.
        sort: Sort expressions, defaults to most recently updated first.
        facets: Facet attributes, defaults to every filter field.

    Returns:
        Hits with pagination and search metadata.
    """
    manager: IndexManager = request.app.state.index_manager
    options = SearchOptions(
        limit=limit,
        offset=offset,
        filter=build_filter_expressions(list(request.query_params.multi_items())),
        sort=sort or DEFAULT_SORT,
        facets=facets or DEFAULT_FACETS,
        attributes_to_highlight=HIGHLIGHT_ATTRIBUTES,
        attributes_to_crop=CROP_ATTRIBUTES,
        crop_length=CROP_LENGTH,
    )

    try:
        results = await manager.search(query, options)
    except Exception as e:
        logger.error("advanced_search_failed", query=query, error=str(e))
        raise HTTPException(status_code=500, detail="Advanced search failed") from e

    return AdvancedSearchResponse(
        data=results.hits,
        meta=SearchMeta(
            pagination=Pagination(
                page=page_for(options.offset, options.limit),
                page_size=options.limit,
                total=results.estimated_total_hits,
            ),
            search=SearchMetaInfo(
                query=results.query,
                processing_time_ms=results.processing_time_ms,
                facet_distribution=results.facet_distribution,
            ),
        ),
    )
