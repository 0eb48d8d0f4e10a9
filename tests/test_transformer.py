"""Document transformer tests."""

from docsync.enrichment.mapper import populate
from docsync.records.schemas import RecordDraft, SourceRecord
from docsync.search.schemas import FILTER_FIELDS, IndexedDocument
from docsync.search.transformer import (
    extract_text_from_blocks,
    format_attachments,
    transform_record,
)


def _record(**fields: object) -> SourceRecord:
    return SourceRecord.model_validate({"id": 7, "documentId": "doc-7", **fields})


def test_primary_key_is_document_identifier() -> None:
    """Documents are keyed by documentId, not the internal id."""
    document = transform_record(_record()).to_engine()
    assert document["documentId"] == "doc-7"
    assert "id" not in document


def test_absent_fields_become_empty_strings() -> None:
    """Every projected field is a string, never None."""
    document = transform_record(_record()).to_engine()
    for key, value in document.items():
        if key == "filters":
            continue
        assert isinstance(value, str), key
    assert document["SF_Number"] == ""
    assert document["publishedAt"] == ""
    assert set(document["filters"]) == set(FILTER_FIELDS)
    assert all(value == "" for value in document["filters"].values())


def test_output_covers_every_document_field() -> None:
    """The transform is total over the indexed document shape."""
    document = transform_record(_record()).to_engine()
    expected = {
        field.alias or name for name, field in IndexedDocument.model_fields.items()
    }
    assert set(document) == expected


def test_rich_text_is_flattened() -> None:
    """Text children are joined across blocks; other nodes are ignored."""
    blocks = [
        {
            "type": "paragraph",
            "children": [
                {"type": "text", "text": "Hello"},
                {"type": "link", "url": "https://example.com"},
                {"type": "text", "text": "world"},
            ],
        },
        {"type": "paragraph", "children": [{"type": "text", "text": "again"}]},
    ]
    assert extract_text_from_blocks(blocks) == "Hello world again"
    assert extract_text_from_blocks(None) == ""
    assert extract_text_from_blocks("plain") == ""


def test_attachments_are_flattened() -> None:
    """Attachment name, alternative text and caption are space-joined."""
    record = _record(
        Attachments=[
            {"name": "deck.pdf", "alternativeText": None, "caption": "Final deck"},
            {"name": "logo.png", "alternativeText": "Logo", "caption": ""},
        ]
    )
    assert format_attachments(record.attachments) == "deck.pdf Final deck logo.png Logo"


def test_searchable_text_is_lowercase_and_ordered() -> None:
    """Composite text joins key fields in fixed order, lowercased."""
    record = _record(
        SF_Number="SF-42",
        Client_Name="Acme Corp",
        Industry="Industry A",
        Author="Ada Lovelace",
        Attachments=[{"name": "Deck.PDF"}],
    )
    document = transform_record(record)
    assert document.searchable_text == "sf-42 acme corp industry a ada lovelace deck.pdf"


def test_filters_mirror_business_fields() -> None:
    """The filters object duplicates facet fields."""
    document = transform_record(_record(Industry="Industry B", Region="Region C")).to_engine()
    assert document["filters"]["Industry"] == "Industry B"
    assert document["filters"]["Region"] == "Region C"
    assert document["Industry"] == "Industry B"


def test_transform_is_deterministic() -> None:
    """The same record always yields the same document."""
    record = _record(SF_Number="SF-1", Description=[])
    assert transform_record(record) == transform_record(record)


def test_mapped_description_reaches_searchable_text() -> None:
    """A description string mapped in is searchable after transform."""
    draft = RecordDraft()
    populate(draft, {"Description": "Hello world"})
    record = _record(Description=draft.description)
    document = transform_record(record)
    assert document.description == "Hello world"
    assert "hello world" in document.searchable_text
