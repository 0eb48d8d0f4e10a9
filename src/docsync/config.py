"""Service configuration loaded from environment variables."""
from pydantic import AliasChoices, Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Service configuration loaded from environment variables.

    Attributes:
        host: Bind address for the API server.
        port: Port number for the API server.
        debug: Enable debug mode and API documentation.
        cors_origins_raw: Raw comma-separated CORS origins string.
        shutdown_timeout: Seconds to wait for graceful shutdown.
        store_path: SQLite file backing the record store.
        meilisearch_host: Base URL of the Meilisearch server.
        meilisearch_api_key: Meilisearch API key.
        index_name: Name of the search index holding documents.
        enrichment_base_url: Base URL of the enrichment service.
        enrichment_token: Bearer token for the enrichment service.
        enrichment_timeout: Seconds before an enrichment call is abandoned.
        rebuild_batch_size: Documents submitted per batch during rebuild.
        clear_timeout: Seconds to wait for the engine after a clear.
        clear_poll_interval: Seconds between engine status polls.
        configure_on_startup: Apply index settings when the service starts.
    """

    model_config = SettingsConfigDict(
        env_prefix="DOCSYNC_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False
    cors_origins_raw: str = "http://localhost:1337"
    shutdown_timeout: float = 30.0

    store_path: str = "records.db"

    meilisearch_host: str = Field(
        default="http://localhost:7700",
        validation_alias=AliasChoices("DOCSYNC_MEILISEARCH_HOST", "MEILISEARCH_HOST"),
    )
    meilisearch_api_key: str = Field(
        default="",
        validation_alias=AliasChoices(
            "DOCSYNC_MEILISEARCH_API_KEY", "MEILISEARCH_API_KEY"
        ),
    )
    index_name: str = "document_stores"

    enrichment_base_url: str = Field(
        default="",
        validation_alias=AliasChoices("DOCSYNC_ENRICHMENT_BASE_URL", "FASTAPI_BASE_URL"),
    )
    enrichment_token: str = Field(
        default="",
        validation_alias=AliasChoices("DOCSYNC_ENRICHMENT_TOKEN", "FASTAPI_TOKEN"),
    )
    enrichment_timeout: float = 10.0

    rebuild_batch_size: int = Field(default=100, ge=1)
    clear_timeout: float = 30.0
    clear_poll_interval: float = 1.0
    configure_on_startup: bool = True

    @computed_field
    @property
    def cors_origins(self) -> list[str]:
        """Parse CORS origins from comma-separated string.

        Returns:
            List of allowed origin URLs.
        """
        return [
            origin.strip()
            for origin in self.cors_origins_raw.split(",")
            if origin.strip()
        ]
