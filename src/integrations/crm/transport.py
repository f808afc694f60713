"""HTTP transport for the CRM adapter.

Performs the network call and hands back the raw status and body text. Every
failure on the way (DNS, connect, timeout, reset, token acquisition) collapses
into one ``CRMTransportError``; the cause is only visible in the logs.
"""

from __future__ import annotations

import logging

import httpx

from src.core.errors import mask_headers
from src.integrations.crm.base import CRMTransportError, RawResponse

logger = logging.getLogger(__name__)


class CRMTransport:
    """Thin wrapper over a shared ``httpx.AsyncClient`` connection pool."""

    def __init__(
        self,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize transport.

        Args:
            timeout: Request timeout in seconds (None = wait indefinitely)
            client: Pre-built client, mainly for tests (e.g. with httpx.MockTransport)
        """
        self.timeout = timeout
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def send(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        body: str | None = None,
    ) -> RawResponse:
        """Perform one request and return its status and text."""
        logger.debug("[CRM] %s %s headers=%s", method, url, mask_headers(headers))
        try:
            response = await self._client.request(
                method,
                url,
                headers=headers,
                content=body.encode("utf-8") if body is not None else None,
            )
            return RawResponse(status=response.status_code, text=response.text)
        except httpx.HTTPError as e:
            logger.error("[CRM] %s %s transport error: %s: %s", method, url, type(e).__name__, e)
            raise CRMTransportError(method) from e

    async def aclose(self) -> None:
        await self._client.aclose()
