"""Enrichment client tests against a mocked transport."""

import asyncio

import httpx

from docsync.enrichment.client import EnrichmentClient, EnrichmentResult


def _fetch(handler, key: str = "SF-1", base_url: str = "https://enrich.test") -> EnrichmentResult:
    async def run() -> EnrichmentResult:
        client = EnrichmentClient(
            base_url,
            token="secret",
            timeout=1.0,
            transport=httpx.MockTransport(handler),
        )
        try:
            return await client.fetch(key)
        finally:
            await client.aclose()

    return asyncio.run(run())


def test_successful_lookup_returns_payload() -> None:
    """A success envelope yields its data."""
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"success": True, "data": {"Client_Name": "Acme"}})

    result = _fetch(handler)
    assert result.success
    assert result.data == {"Client_Name": "Acme"}
    assert seen[0].url.path == "/api/salesforce/document/SF-1"
    assert seen[0].headers["Authorization"] == "Bearer secret"


def test_business_key_is_url_encoded() -> None:
    """Keys with reserved characters stay in one path segment."""
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"success": True, "data": {}})

    _fetch(handler, key="SF/1 2")
    assert seen[0].url.raw_path.endswith(b"/api/salesforce/document/SF%2F1%202")


def test_error_status_is_a_failure() -> None:
    """Non-2xx responses are reported, not raised."""
    result = _fetch(lambda request: httpx.Response(503))
    assert not result.success
    assert result.error == "http_503"


def test_unsuccessful_envelope_is_a_failure() -> None:
    """success=false is a failure even with a 200 status."""
    result = _fetch(lambda request: httpx.Response(200, json={"success": False}))
    assert not result.success
    assert result.error == "unsuccessful_response"


def test_malformed_body_is_a_failure() -> None:
    """Non-JSON bodies are reported as malformed."""
    result = _fetch(lambda request: httpx.Response(200, text="<html>"))
    assert not result.success
    assert result.error is not None and result.error.startswith("malformed_response")


def test_timeout_is_a_failure() -> None:
    """Timeouts come back as failures."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("too slow", request=request)

    result = _fetch(handler)
    assert not result.success
    assert result.error == "timeout"


def test_unconfigured_client_makes_no_request() -> None:
    """Without a base URL the client fails fast."""
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200)

    result = _fetch(handler, base_url="")
    assert not result.success
    assert result.error == "not_configured"
    assert calls == []
