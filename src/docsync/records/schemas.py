"""Pydantic schemas for document-store records."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

ENUM_ALLOWED_VALUES: dict[str, tuple[str, ...]] = {
    "Client_Type": (
        "Global Key Client",
        "Regional Key Client",
        "Regional Market Portfolio",
        "Client",
    ),
    "Document_Confidentiality": ("Not Confidential", "Confidential"),
    "Document_Type": (
        "Proposal",
        "External case study",
        "Internal win story",
        "Experience listing",
        "Pitch content",
        "Marketing material",
        "Thought leadership",
    ),
    "Document_Sub_Type": (
        "Sole-source",
        "RFP Response",
        "Competitive",
        "Change Order",
        "Standalone",
        "EOI",
        "RFI",
        "RFQ",
    ),
    "Document_Outcome": (
        "Won",
        "Lost",
        "Abandoned",
        "Decision in progress",
        "Scope changed (Proposal Revised)",
        "Full Proposal Not Yet Submitted",
    ),
    "Industry": ("Industry A", "Industry B", "Industry C"),
    "Sub_Industry": ("Sub A", "Sub B", "Sub C"),
    "Service": ("Service A", "Service B", "Service C"),
    "Sub_Service": ("Sub A", "Sub B", "Sub C"),
    "Business_Unit": ("BU A", "BU B", "BU C"),
    "Region": ("Region A", "Region B", "Region C"),
    "Country": ("India", "USA", "UK"),
    "State": ("Delhi", "California", "London"),
    "City": ("New Delhi", "San Francisco", "Manchester"),
    "Commercial_Program": ("R2L", "High Priority", "N/A"),
}

_ENUM_ATTRIBUTES = tuple(name.lower() for name in ENUM_ALLOWED_VALUES)


def is_allowed_enum_value(field: str, value: Any) -> bool:
    """Check a value against the allow-list of an enum-constrained field.

    Args:
        field: Wire name of the field (e.g. "Industry").
        value: Candidate value.

    Returns:
        True when the field is unconstrained or the value is allowed.
    """
    allowed = ENUM_ALLOWED_VALUES.get(field)
    if allowed is None:
        return True
    return value in allowed


class Attachment(BaseModel):
    """Media file attached to a record."""

    model_config = ConfigDict(populate_by_name=True)

    name: str | None = None
    alternative_text: str | None = Field(default=None, alias="alternativeText")
    caption: str | None = None
    url: str | None = None
    size: float | None = None
    mime: str | None = None


class BusinessFields(BaseModel):
    """Business fields shared by drafts and stored records.

    Field names are snake_case; aliases carry the document-store names used
    on the wire and in the search index. Unknown keys are kept in
    ``model_extra``.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    sf_number: str | None = Field(default=None, alias="SF_Number")
    unique_id: str | None = Field(default=None, alias="Unique_Id")
    client_name: str | None = Field(default=None, alias="Client_Name")
    client_type: str | None = Field(default=None, alias="Client_Type")
    client_contact: str | None = Field(default=None, alias="Client_Contact")
    client_contact_buying_center: str | None = Field(
        default=None, alias="Client_Contact_Buying_Center"
    )
    client_journey: str | None = Field(default=None, alias="Client_Journey")

    document_confidentiality: str | None = Field(
        default=None, alias="Document_Confidentiality"
    )
    document_type: str | None = Field(default=None, alias="Document_Type")
    document_sub_type: str | None = Field(default=None, alias="Document_Sub_Type")
    document_value_range: str | None = Field(
        default=None, alias="Document_Value_Range"
    )
    document_outcome: str | None = Field(default=None, alias="Document_Outcome")
    last_stage_change_date: str | None = Field(
        default=None,
        alias="Last_Stage_Change_Date",
        description="Calendar date (YYYY-MM-DD)",
    )

    industry: str | None = Field(default=None, alias="Industry")
    sub_industry: str | None = Field(default=None, alias="Sub_Industry")
    service: str | None = Field(default=None, alias="Service")
    sub_service: str | None = Field(default=None, alias="Sub_Service")
    business_unit: str | None = Field(default=None, alias="Business_Unit")
    region: str | None = Field(default=None, alias="Region")
    country: str | None = Field(default=None, alias="Country")
    state: str | None = Field(default=None, alias="State")
    city: str | None = Field(default=None, alias="City")

    author: str | None = Field(default=None, alias="Author")
    smes: str | None = Field(default=None, alias="SMEs")
    commercial_program: str | None = Field(default=None, alias="Commercial_Program")
    competitors: str | None = Field(default=None, alias="Competitors")

    description: Any = Field(
        default=None,
        alias="Description",
        description="Rich-text blocks: [{type, children: [{type, text}]}]",
    )


class RecordDraft(BusinessFields):
    """Pending create/update payload, mutable by pre-save hooks.

    ``model_fields_set`` tells which fields the payload actually sets, which
    is how publish-only writes are recognised.
    """

    manual_override: bool = Field(default=False, alias="manualOverride")
    published_at: str | None = Field(default=None, alias="publishedAt")
    locale: str | None = None
    attachments: list[Attachment] | None = Field(default=None, alias="Attachments")

    @field_validator(*_ENUM_ATTRIBUTES)
    @classmethod
    def validate_enum(cls, v: str | None, info: ValidationInfo) -> str | None:
        """Reject values outside the field's allow-list."""
        if v is None or v == "":
            return v
        alias = cls.model_fields[info.field_name].alias
        if not is_allowed_enum_value(alias, v):
            raise ValueError(f"{v!r} is not an allowed {alias} value")
        return v


class SourceRecord(BusinessFields):
    """Persisted document-store record."""

    id: int
    document_id: str = Field(alias="documentId")
    published_at: str | None = Field(default=None, alias="publishedAt")
    created_at: str | None = Field(default=None, alias="createdAt")
    updated_at: str | None = Field(default=None, alias="updatedAt")
    locale: str | None = None
    attachments: list[Attachment] = Field(default_factory=list, alias="Attachments")

    @property
    def is_published(self) -> bool:
        """Whether the record carries a publication timestamp."""
        return self.published_at is not None
