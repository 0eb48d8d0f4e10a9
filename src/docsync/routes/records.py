"""Record API: writes go through the store, which fires lifecycle hooks."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from fastapi import APIRouter, HTTPException, Request, status

from docsync.records.schemas import RecordDraft, SourceRecord
from docsync.records.store import RecordNotFoundError

if TYPE_CHECKING:
    from docsync.records.store import RecordStore

logger = structlog.get_logger()

router = APIRouter(prefix="/records", tags=["records"])


def _store(request: Request) -> RecordStore:
    return request.app.state.store


def _not_found(e: RecordNotFoundError) -> HTTPException:
    return HTTPException(status_code=404, detail=f"Record {e.record_id} not found")


@router.post("", response_model=SourceRecord, status_code=status.HTTP_201_CREATED)
async def create_record(request: Request, draft: RecordDraft) -> SourceRecord:
    """Create a record (draft unless publishedAt is set).

    Args:
        request: FastAPI request (provides access to app state).
        draft: Record payload.

    Returns:
        The stored record.
    """
    return await _store(request).create(draft)


@router.get("/{record_id}", response_model=SourceRecord)
async def get_record(request: Request, record_id: int) -> SourceRecord:
    """Fetch one record by internal id."""
    record = await _store(request).get(record_id)
    if record is None:
        raise HTTPException(status_code=404, detail=f"Record {record_id} not found")
    return record


@router.put("/{record_id}", response_model=SourceRecord)
async def update_record(request: Request, record_id: int, draft: RecordDraft) -> SourceRecord:
    """Update the fields present in the payload.

    Args:
        request: FastAPI request (provides access to app state).
        record_id: Internal record id.
        draft: Partial record payload.

    Returns:
        The updated record.
    """
    try:
        return await _store(request).update(record_id, draft)
    except RecordNotFoundError as e:
        raise _not_found(e) from e


@router.post("/{record_id}/publish", response_model=SourceRecord)
async def publish_record(request: Request, record_id: int) -> SourceRecord:
    """Publish a record, making it searchable."""
    try:
        return await _store(request).publish(record_id)
    except RecordNotFoundError as e:
        raise _not_found(e) from e


@router.post("/{record_id}/unpublish", response_model=SourceRecord)
async def unpublish_record(request: Request, record_id: int) -> SourceRecord:
    """Revert a record to draft, removing it from search."""
    try:
        return await _store(request).unpublish(record_id)
    except RecordNotFoundError as e:
        raise _not_found(e) from e


@router.delete("/{record_id}", response_model=SourceRecord)
async def delete_record(request: Request, record_id: int) -> SourceRecord:
    """Delete a record and its search document.

    Args:
        request: FastAPI request (provides access to app state).
        record_id: Internal record id.

    Returns:
        The deleted record.
    """
    try:
        return await _store(request).delete(record_id)
    except RecordNotFoundError as e:
        raise _not_found(e) from e
