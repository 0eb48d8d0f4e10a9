"""HTTP client for the enrichment service.

Fail-open: every failure (timeout, error status, malformed body, or an
unsuccessful response) comes back as an unsuccessful EnrichmentResult so
record writes are never blocked by the enrichment service.
"""

from typing import Any
from urllib.parse import quote

import httpx
import structlog
from pydantic import BaseModel, Field

logger = structlog.get_logger()

TIMEOUT = 10.0
DOCUMENT_PATH = "/api/salesforce/document/{key}"


class EnrichmentResponse(BaseModel):
    """Response envelope returned by the enrichment service."""

    success: bool = False
    data: dict[str, Any] | None = None


class EnrichmentResult(BaseModel):
    """Outcome of a single enrichment lookup."""

    success: bool
    data: dict[str, Any] = Field(default_factory=dict)
    error: str | None = None


def _failure(error: str) -> EnrichmentResult:
    return EnrichmentResult(success=False, error=error)


class EnrichmentClient:
    """Fetches partial records from the enrichment service by business key."""

    def __init__(
        self,
        base_url: str,
        token: str = "",
        timeout: float = TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize client.

        Args:
            base_url: Service base URL. Empty disables enrichment.
            token: Bearer token sent with every request.
            timeout: Seconds before a request is abandoned.
            transport: Optional httpx transport (used by tests).
        """
        self._enabled = bool(base_url)
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    @property
    def enabled(self) -> bool:
        """Whether a service URL is configured."""
        return self._enabled

    async def fetch(self, business_key: str) -> EnrichmentResult:
        """Look up the enrichment record for a business key.

        Args:
            business_key: SF_Number of the record.

        Returns:
            EnrichmentResult with the payload on success, or an error.
        """
        if not self._enabled:
            return _failure("not_configured")

        path = DOCUMENT_PATH.format(key=quote(business_key, safe=""))
        try:
            response = await self._client.get(path)
            response.raise_for_status()
            envelope = EnrichmentResponse.model_validate(response.json())
        except httpx.TimeoutException:
            return _failure("timeout")
        except httpx.HTTPStatusError as e:
            return _failure(f"http_{e.response.status_code}")
        except httpx.HTTPError as e:
            return _failure(f"transport_error: {e}")
        except ValueError as e:
            # JSON decode and pydantic validation errors
            return _failure(f"malformed_response: {e}")

        if not envelope.success or envelope.data is None:
            return _failure("unsuccessful_response")

        logger.debug("enrichment_fetched", sf_number=business_key)
        return EnrichmentResult(success=True, data=envelope.data)

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()
