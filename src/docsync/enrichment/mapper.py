"""Merge enrichment payloads into pending records without overwriting."""

from collections.abc import Callable, Mapping
from datetime import UTC, date, datetime
from typing import Any

import structlog
from dateutil import parser as date_parser

from docsync.records.schemas import (
    ENUM_ALLOWED_VALUES,
    RecordDraft,
    is_allowed_enum_value,
)

logger = structlog.get_logger()

Transform = Callable[[Any], Any]

PLAIN_FIELDS: tuple[str, ...] = (
    "Unique_Id",
    "Client_Name",
    "Client_Contact",
    "Client_Contact_Buying_Center",
    "Client_Journey",
    "Document_Value_Range",
)

# Arrive as a list or an already joined string
NAME_LIST_FIELDS: tuple[str, ...] = ("Author", "SMEs", "Competitors")

_ATTRIBUTE_BY_ALIAS: dict[str, str] = {
    field.alias or name: name for name, field in RecordDraft.model_fields.items()
}


def _as_text(value: Any) -> str | None:
    if isinstance(value, str):
        return value
    if isinstance(value, int | float) and not isinstance(value, bool):
        return str(value)
    return None


def _allowed(field: str) -> Transform:
    def validate(value: Any) -> str | None:
        return value if is_allowed_enum_value(field, value) else None

    return validate


def to_rich_text(value: Any) -> Any:
    """Wrap a plain string into a single-paragraph rich-text block list.

    Args:
        value: Description from the enrichment payload.

    Returns:
        Block list for strings; any other value unchanged.
    """
    if isinstance(value, str):
        return [{"type": "paragraph", "children": [{"type": "text", "text": value}]}]
    return value


def to_calendar_date(value: Any) -> str | None:
    """Normalize a date-like value to a UTC calendar date (YYYY-MM-DD).

    Strings are parsed leniently: ISO 8601, ``03/15/2024`` (month first),
    ``March 15, 2024`` and RFC 2822 forms are all accepted. Values without
    an offset are taken as UTC.

    Args:
        value: Date string, date or datetime.

    Returns:
        The calendar date, or None when the value cannot be parsed.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        return value.isoformat()
    elif isinstance(value, str):
        try:
            parsed = date_parser.parse(value.strip())
        except (ValueError, OverflowError):
            logger.warning("enrichment_date_invalid", value=value)
            return None
    else:
        return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(UTC)
    return parsed.date().isoformat()


def join_names(value: Any) -> str | None:
    """Flatten a list of names into a comma-separated string.

    Args:
        value: List of names or an already joined string.

    Returns:
        The joined names, or None for unsupported types.
    """
    if isinstance(value, list | tuple):
        return ", ".join(str(name) for name in value if name not in (None, ""))
    return _as_text(value)


FIELD_TRANSFORMS: dict[str, Transform] = {
    **{field: _as_text for field in PLAIN_FIELDS},
    **{field: _allowed(field) for field in ENUM_ALLOWED_VALUES},
    "Description": to_rich_text,
    "Last_Stage_Change_Date": to_calendar_date,
    **{field: join_names for field in NAME_LIST_FIELDS},
}


def populate_field(
    target: RecordDraft,
    field: str,
    value: Any,
    transform: Transform | None = None,
) -> bool:
    """Copy one enrichment value into an empty target field.

    The value is written only when the target field is empty and the value
    is present. A transform returning None, or raising, drops the value.

    Args:
        target: Pending record, mutated in place.
        field: Wire name of the field (e.g. "Industry").
        value: Value from the enrichment payload.
        transform: Optional conversion applied before writing.

    Returns:
        True if the field was written.
    """
    attribute = _ATTRIBUTE_BY_ALIAS.get(field)
    if attribute is None:
        return False
    if getattr(target, attribute, None):
        return False
    if value is None or value == "":
        return False

    try:
        converted = transform(value) if transform else value
    except Exception as e:
        logger.warning("enrichment_field_skipped", field=field, error=str(e))
        return False

    if converted is None:
        logger.debug("enrichment_field_dropped", field=field)
        return False

    setattr(target, attribute, converted)
    return True


def populate(target: RecordDraft, source: Mapping[str, Any]) -> list[str]:
    """Backfill empty fields of a pending record from an enrichment payload.

    Never raises: a field whose conversion fails is skipped.

    Args:
        target: Pending record, mutated in place.
        source: Enrichment payload keyed by wire field name.

    Returns:
        Wire names of the fields that were written.
    """
    written = [
        field
        for field, transform in FIELD_TRANSFORMS.items()
        if populate_field(target, field, source.get(field), transform)
    ]
    logger.debug("enrichment_fields_populated", fields=written)
    return written
