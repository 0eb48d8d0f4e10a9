"""Write-time enrichment of records from the external enrichment service."""

from docsync.enrichment.client import EnrichmentClient, EnrichmentResult
from docsync.enrichment.mapper import populate, populate_field

__all__ = [
    "EnrichmentClient",
    "EnrichmentResult",
    "populate",
    "populate_field",
]
