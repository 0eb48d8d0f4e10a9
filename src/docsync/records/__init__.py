"""Document-store record schemas.

The store lives in ``docsync.records.store``; it is not re-exported here
because lifecycle events depend on these schemas.
"""

from docsync.records.schemas import (
    ENUM_ALLOWED_VALUES,
    Attachment,
    BusinessFields,
    RecordDraft,
    SourceRecord,
    is_allowed_enum_value,
)

__all__ = [
    "ENUM_ALLOWED_VALUES",
    "Attachment",
    "BusinessFields",
    "RecordDraft",
    "SourceRecord",
    "is_allowed_enum_value",
]
