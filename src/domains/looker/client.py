"""HTTP client for the Looker REST API.

The client never holds a credential of its own: every call carries the
caller's bearer token. Non-success responses and transport failures are
normalized into UpstreamError.
"""

from typing import Any, Optional

import httpx
from pydantic import SecretStr

from shared.errors import UpstreamError, UpstreamTransportError
from shared.logging import get_logger

logger = get_logger(__name__)


class LookerClient:
    """
    Thin async client for the Looker API.

    One instance (and one connection pool) is shared by all requests;
    it carries no per-user state. No retries and no timeout override
    beyond the httpx defaults.
    """

    def __init__(
        self,
        base_url: str,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> None:
        """
        Initialize the Looker client.

        Args:
            base_url: Looker instance base URL
            transport: Optional httpx transport (used to mock the API in tests)
        """
        self.base_url = base_url.rstrip("/")
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    @staticmethod
    def _headers(credential: SecretStr) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {credential.get_secret_value()}",
            "Content-Type": "application/json",
        }

    async def call(
        self,
        credential: SecretStr,
        method: str,
        path: str,
        body: Optional[Any] = None,
        params: Optional[dict[str, Any]] = None
    ) -> Any:
        """
        Call a Looker API endpoint.

        Args:
            credential: Caller's bearer token
            method: HTTP method
            path: API path, e.g. /api/4.0/lookml_models
            body: Optional JSON body
            params: Optional query parameters; None values are dropped

        Returns:
            Parsed JSON for JSON responses, the raw text otherwise,
            None for an empty body

        Raises:
            UpstreamError: Non-success HTTP status
            UpstreamTransportError: The API could not be reached
        """
        client = await self._get_client()
        query = {k: v for k, v in (params or {}).items() if v is not None}

        logger.debug("Looker request", method=method, path=path)

        try:
            response = await client.request(
                method,
                path,
                headers=self._headers(credential),
                params=query or None,
                json=body,
            )
        except httpx.HTTPError as e:
            logger.error("Looker transport failure", method=method, path=path, error=str(e))
            raise UpstreamTransportError(str(e) or e.__class__.__name__) from e

        if not response.is_success:
            logger.warning(
                "Looker request failed",
                method=method,
                path=path,
                status=response.status_code
            )
            raise UpstreamError(response.status_code, response.text)

        if not response.content:
            return None

        content_type = response.headers.get("content-type", "")
        if "json" in content_type:
            return response.json()
        return response.text
