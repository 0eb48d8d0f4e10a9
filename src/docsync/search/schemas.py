"""Pydantic schemas for indexed documents, engine state and search API responses."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

FILTER_FIELDS: tuple[str, ...] = (
    "Client_Type",
    "Document_Type",
    "Document_Sub_Type",
    "Document_Confidentiality",
    "Industry",
    "Sub_Industry",
    "Service",
    "Sub_Service",
    "Business_Unit",
    "Region",
    "Country",
    "State",
    "City",
    "Commercial_Program",
    "Document_Outcome",
)


class DocumentFilters(BaseModel):
    """Facet fields duplicated under ``filters`` in every indexed document."""

    model_config = ConfigDict(populate_by_name=True)

    client_type: str = Field(default="", alias="Client_Type")
    document_type: str = Field(default="", alias="Document_Type")
    document_sub_type: str = Field(default="", alias="Document_Sub_Type")
    document_confidentiality: str = Field(default="", alias="Document_Confidentiality")
    industry: str = Field(default="", alias="Industry")
    sub_industry: str = Field(default="", alias="Sub_Industry")
    service: str = Field(default="", alias="Service")
    sub_service: str = Field(default="", alias="Sub_Service")
    business_unit: str = Field(default="", alias="Business_Unit")
    region: str = Field(default="", alias="Region")
    country: str = Field(default="", alias="Country")
    state: str = Field(default="", alias="State")
    city: str = Field(default="", alias="City")
    commercial_program: str = Field(default="", alias="Commercial_Program")
    document_outcome: str = Field(default="", alias="Document_Outcome")


class IndexedDocument(BaseModel):
    """Search-engine projection of a published record.

    Every field is a string (empty when the record has no value) because
    the engine's filter and sort attributes are typed as strings. Keyed by
    ``documentId`` so draft and published revisions share one entry.
    """

    model_config = ConfigDict(populate_by_name=True)

    document_id: str = Field(alias="documentId")

    sf_number: str = Field(default="", alias="SF_Number")
    unique_id: str = Field(default="", alias="Unique_Id")
    client_name: str = Field(default="", alias="Client_Name")
    client_type: str = Field(default="", alias="Client_Type")
    client_contact: str = Field(default="", alias="Client_Contact")
    client_contact_buying_center: str = Field(
        default="", alias="Client_Contact_Buying_Center"
    )
    client_journey: str = Field(default="", alias="Client_Journey")

    document_confidentiality: str = Field(default="", alias="Document_Confidentiality")
    document_type: str = Field(default="", alias="Document_Type")
    document_sub_type: str = Field(default="", alias="Document_Sub_Type")
    document_value_range: str = Field(default="", alias="Document_Value_Range")
    document_outcome: str = Field(default="", alias="Document_Outcome")
    last_stage_change_date: str = Field(default="", alias="Last_Stage_Change_Date")

    industry: str = Field(default="", alias="Industry")
    sub_industry: str = Field(default="", alias="Sub_Industry")
    service: str = Field(default="", alias="Service")
    sub_service: str = Field(default="", alias="Sub_Service")
    business_unit: str = Field(default="", alias="Business_Unit")
    region: str = Field(default="", alias="Region")
    country: str = Field(default="", alias="Country")
    state: str = Field(default="", alias="State")
    city: str = Field(default="", alias="City")

    author: str = Field(default="", alias="Author")
    smes: str = Field(default="", alias="SMEs")
    commercial_program: str = Field(default="", alias="Commercial_Program")
    competitors: str = Field(default="", alias="Competitors")

    published_at: str = Field(default="", alias="publishedAt")
    created_at: str = Field(default="", alias="createdAt")
    updated_at: str = Field(default="", alias="updatedAt")
    locale: str = ""

    description: str = Field(
        default="", alias="Description", description="Plain text of the rich-text body"
    )
    attachments_text: str = Field(default="", description="Attachment names and captions")
    searchable_text: str = Field(
        default="",
        alias="searchableText",
        description="Lowercase concatenation of the most relevant fields",
    )
    filters: DocumentFilters = Field(default_factory=DocumentFilters)

    def to_engine(self) -> dict[str, Any]:
        """Serialize with engine field names.

        Returns:
            JSON-compatible document for the search engine.
        """
        return self.model_dump(mode="json", by_alias=True)


class IndexSettings(BaseModel):
    """Subset of engine index settings managed by this service."""

    searchable_attributes: list[str] = Field(default_factory=list)
    filterable_attributes: list[str] = Field(default_factory=list)
    sortable_attributes: list[str] = Field(default_factory=list)
    ranking_rules: list[str] = Field(default_factory=list)
    synonyms: dict[str, list[str]] = Field(default_factory=dict)


class EngineStats(BaseModel):
    """Document statistics reported by the engine for one index."""

    number_of_documents: int = 0
    is_indexing: bool = False
    field_distribution: dict[str, int] = Field(default_factory=dict)


class SearchOptions(BaseModel):
    """Query options passed through to the engine."""

    limit: int = 20
    offset: int = 0
    filter: list[str] = Field(default_factory=list)
    sort: list[str] = Field(default_factory=list)
    facets: list[str] = Field(default_factory=list)
    attributes_to_highlight: list[str] = Field(default_factory=list)
    attributes_to_crop: list[str] = Field(default_factory=list)
    crop_length: int = 200


class SearchHits(BaseModel):
    """Raw engine search results."""

    hits: list[dict[str, Any]] = Field(default_factory=list)
    query: str = ""
    estimated_total_hits: int = 0
    processing_time_ms: int = 0
    facet_distribution: dict[str, dict[str, int]] = Field(default_factory=dict)


class RebuildResult(BaseModel):
    """Counts reported by a rebuild."""

    indexed: int = 0
    skipped: int = 0


class RefreshResult(BaseModel):
    """Outcome of a clear-and-rebuild refresh."""

    success: bool
    message: str
    stats: RebuildResult | None = None


class SettingsSnapshot(BaseModel):
    """Attribute settings included in index statistics."""

    searchable_attributes: list[str]
    filterable_attributes: list[str]
    sortable_attributes: list[str]


class IndexStats(BaseModel):
    """Index statistics with a projection of current settings."""

    number_of_documents: int
    is_indexing: bool
    field_distribution: dict[str, int]
    settings: SettingsSnapshot


class OperationResponse(BaseModel):
    """Response envelope for management operations.

    Attributes:
        success: Whether the operation completed.
        message: Human-readable outcome.
        data: Operation counts, when the operation produces any.
    """

    success: bool
    message: str
    data: RebuildResult | None = None


class IndexStatsResponse(BaseModel):
    """Response envelope for index statistics."""

    data: IndexStats


class Pagination(BaseModel):
    """Page-based pagination derived from offset/limit."""

    page: int
    page_size: int
    total: int


class SearchMetaInfo(BaseModel):
    """Engine-side details of an executed search."""

    query: str
    processing_time_ms: int
    facet_distribution: dict[str, dict[str, int]]


class SearchMeta(BaseModel):
    """Metadata block of an advanced search response."""

    pagination: Pagination
    search: SearchMetaInfo


class AdvancedSearchResponse(BaseModel):
    """Paginated advanced search response.

    Attributes:
        data: Matching documents as returned by the engine.
        meta: Pagination and search details.
    """

    data: list[dict[str, Any]]
    meta: SearchMeta
