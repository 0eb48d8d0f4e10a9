"""Field mapper tests."""

from docsync.enrichment.mapper import (
    FIELD_TRANSFORMS,
    join_names,
    populate,
    populate_field,
    to_calendar_date,
    to_rich_text,
)
from docsync.records.schemas import RecordDraft


def test_populate_fills_empty_fields() -> None:
    """Empty target fields receive enrichment values."""
    draft = RecordDraft(SF_Number="SF-1")
    written = populate(draft, {"Client_Name": "Acme", "Unique_Id": "U-1"})
    assert draft.client_name == "Acme"
    assert draft.unique_id == "U-1"
    assert set(written) == {"Client_Name", "Unique_Id"}


def test_populate_never_overwrites_existing_values() -> None:
    """Non-empty target fields are left untouched."""
    draft = RecordDraft(Client_Name="Original", Industry="Industry B")
    populate(draft, {"Client_Name": "Replacement", "Industry": "Industry A"})
    assert draft.client_name == "Original"
    assert draft.industry == "Industry B"


def test_populate_treats_empty_string_target_as_empty() -> None:
    """An empty-string target counts as missing."""
    draft = RecordDraft(Client_Name="")
    populate(draft, {"Client_Name": "Acme"})
    assert draft.client_name == "Acme"


def test_populate_ignores_missing_and_empty_source_values() -> None:
    """None and empty-string source values are not copied."""
    draft = RecordDraft()
    written = populate(draft, {"Client_Name": "", "Unique_Id": None})
    assert written == []
    assert draft.client_name is None
    assert "client_name" not in draft.model_fields_set


def test_enum_value_outside_allow_list_is_dropped() -> None:
    """An unknown enum value leaves the field absent."""
    draft = RecordDraft()
    assert not populate_field(draft, "Industry", "NotARealIndustry", FIELD_TRANSFORMS["Industry"])
    assert draft.industry is None


def test_enum_value_in_allow_list_is_set() -> None:
    """An allowed enum value is copied."""
    draft = RecordDraft()
    assert populate_field(draft, "Industry", "Industry A", FIELD_TRANSFORMS["Industry"])
    assert draft.industry == "Industry A"


def test_description_string_becomes_rich_text() -> None:
    """A plain description is wrapped in a paragraph block."""
    draft = RecordDraft()
    populate(draft, {"Description": "Hello world"})
    assert draft.description == [
        {"type": "paragraph", "children": [{"type": "text", "text": "Hello world"}]}
    ]


def test_description_blocks_pass_through() -> None:
    """Non-string descriptions are copied unchanged."""
    blocks = [{"type": "paragraph", "children": [{"type": "text", "text": "x"}]}]
    assert to_rich_text(blocks) is blocks


def test_date_is_normalized_to_calendar_date() -> None:
    """ISO timestamps become YYYY-MM-DD in UTC."""
    assert to_calendar_date("2024-03-15T10:00:00Z") == "2024-03-15"
    assert to_calendar_date("2024-03-15T23:30:00-05:00") == "2024-03-16"
    assert to_calendar_date("2024-03-15") == "2024-03-15"


def test_invalid_date_is_dropped() -> None:
    """Unparseable dates leave the field absent."""
    draft = RecordDraft()
    populate(draft, {"Last_Stage_Change_Date": "not-a-date"})
    assert draft.last_stage_change_date is None


def test_common_date_formats_are_accepted() -> None:
    """Month-first, long-form and RFC 2822 dates are normalized too."""
    assert to_calendar_date("03/15/2024") == "2024-03-15"
    assert to_calendar_date("March 15, 2024") == "2024-03-15"
    assert to_calendar_date("Fri, 15 Mar 2024 22:00:00 -0500") == "2024-03-16"


def test_competitor_lists_are_joined() -> None:
    """A list-valued Competitors payload is kept as a joined string."""
    draft = RecordDraft()
    populate(draft, {"Competitors": ["Globex", "Initech"]})
    assert draft.competitors == "Globex, Initech"


def test_people_lists_are_joined() -> None:
    """Author and SME lists become comma-separated strings."""
    draft = RecordDraft()
    populate(draft, {"Author": ["Ada", "Grace"], "SMEs": "Alan"})
    assert draft.author == "Ada, Grace"
    assert draft.smes == "Alan"
    assert join_names(("A", None, "B")) == "A, B"


def test_failing_transform_skips_only_that_field() -> None:
    """A transform error never aborts the merge."""

    def explode(value: object) -> object:
        raise TypeError("boom")

    draft = RecordDraft()
    assert not populate_field(draft, "Client_Name", "Acme", explode)
    populate(draft, {"Client_Name": {"nested": "object"}, "Unique_Id": "U-9"})
    assert draft.client_name is None
    assert draft.unique_id == "U-9"


def test_business_key_is_not_mapped() -> None:
    """SF_Number is the lookup key, not an enrichment target."""
    draft = RecordDraft()
    populate(draft, {"SF_Number": "SF-OTHER"})
    assert draft.sf_number is None
