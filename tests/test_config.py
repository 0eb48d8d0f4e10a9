"""Settings tests."""

import pytest

from docsync.config import Settings


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    """Defaults match the documented engine and batch settings."""
    for name in ("MEILISEARCH_HOST", "DOCSYNC_MEILISEARCH_HOST", "FASTAPI_BASE_URL"):
        monkeypatch.delenv(name, raising=False)
    settings = Settings(_env_file=None)
    assert settings.meilisearch_host == "http://localhost:7700"
    assert settings.index_name == "document_stores"
    assert settings.rebuild_batch_size == 100
    assert settings.enrichment_timeout == 10.0


def test_legacy_environment_names(monkeypatch: pytest.MonkeyPatch) -> None:
    """Unprefixed engine and enrichment variables are honoured."""
    monkeypatch.setenv("MEILISEARCH_HOST", "http://search:7700")
    monkeypatch.setenv("FASTAPI_BASE_URL", "http://enrich:8000")
    monkeypatch.setenv("FASTAPI_TOKEN", "token")
    settings = Settings(_env_file=None)
    assert settings.meilisearch_host == "http://search:7700"
    assert settings.enrichment_base_url == "http://enrich:8000"
    assert settings.enrichment_token == "token"


def test_prefixed_environment_names(monkeypatch: pytest.MonkeyPatch) -> None:
    """DOCSYNC_-prefixed variables configure the service."""
    monkeypatch.setenv("DOCSYNC_REBUILD_BATCH_SIZE", "25")
    monkeypatch.setenv("DOCSYNC_CORS_ORIGINS_RAW", "http://a.test, http://b.test")
    settings = Settings(_env_file=None)
    assert settings.rebuild_batch_size == 25
    assert settings.cors_origins == ["http://a.test", "http://b.test"]
