"""Transform stored records into search-engine documents."""

from typing import Any

from docsync.records.schemas import Attachment, SourceRecord
from docsync.search.schemas import FILTER_FIELDS, DocumentFilters, IndexedDocument

# Record attributes copied verbatim (empty string when absent)
_PROJECTED_ATTRIBUTES: tuple[str, ...] = (
    "sf_number",
    "unique_id",
    "client_name",
    "client_type",
    "client_contact",
    "client_contact_buying_center",
    "client_journey",
    "document_confidentiality",
    "document_type",
    "document_sub_type",
    "document_value_range",
    "document_outcome",
    "last_stage_change_date",
    "industry",
    "sub_industry",
    "service",
    "sub_service",
    "business_unit",
    "region",
    "country",
    "state",
    "city",
    "author",
    "smes",
    "commercial_program",
    "competitors",
    "published_at",
    "created_at",
    "updated_at",
    "locale",
)


def extract_text_from_blocks(blocks: Any) -> str:
    """Render rich-text blocks as plain text.

    Concatenates the text of every text-typed child across all blocks,
    joined by single spaces.

    Args:
        blocks: Rich-text block list; any other value renders as "".

    Returns:
        Plain text, stripped of surrounding whitespace.
    """
    if not isinstance(blocks, list):
        return ""

    parts: list[str] = []
    for block in blocks:
        children = block.get("children") if isinstance(block, dict) else None
        if not isinstance(children, list):
            parts.append("")
            continue
        parts.append(
            " ".join(
                str(child.get("text") or "")
                for child in children
                if isinstance(child, dict) and child.get("type") == "text"
            )
        )
    return " ".join(parts).strip()


def format_attachments(attachments: list[Attachment]) -> str:
    """Render attachment metadata as plain text.

    Args:
        attachments: Attachments of a record.

    Returns:
        Name, alternative text and caption of each attachment, space-joined.
    """
    return " ".join(
        " ".join(
            part
            for part in (attachment.name, attachment.alternative_text, attachment.caption)
            if part
        )
        for attachment in attachments
    )


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def build_searchable_text(record: SourceRecord, description: str, attachments: str) -> str:
    """Build the lowercase composite text indexed as one full-text field.

    Args:
        record: Source record.
        description: Plain text of the record description.
        attachments: Plain text of the record attachments.

    Returns:
        Non-empty key fields in fixed order, space-joined and lowercased.
    """
    parts = [
        record.sf_number,
        record.unique_id,
        record.client_name,
        record.client_contact,
        record.client_contact_buying_center,
        description,
        record.document_confidentiality,
        record.industry,
        record.service,
        record.author,
        record.smes,
        record.competitors,
        attachments,
    ]
    return " ".join(_text(part) for part in parts if part).lower()


def transform_record(record: SourceRecord) -> IndexedDocument:
    """Project a record into the document shape held by the search engine.

    Pure and total: every document field is populated, absent values become
    empty strings.

    Args:
        record: Full source record, attachments populated.

    Returns:
        Indexed document keyed by the record's document identifier.
    """
    description = extract_text_from_blocks(record.description)
    attachments = format_attachments(record.attachments)

    projected = {name: _text(getattr(record, name)) for name in _PROJECTED_ATTRIBUTES}
    filters = DocumentFilters.model_validate(
        {field: _text(getattr(record, field.lower())) for field in FILTER_FIELDS}
    )

    return IndexedDocument(
        document_id=record.document_id,
        description=description,
        attachments_text=attachments,
        searchable_text=build_searchable_text(record, description, attachments),
        filters=filters,
        **projected,
    )
