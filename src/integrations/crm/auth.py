"""Token providers for the CRM adapter.

The adapter only needs ``await provider.acquire_token()`` returning a bearer
token string. Two providers ship here:

- StaticTokenProvider: a fixed token (tests, scripts, externally rotated tokens)
- ClientCredentialsTokenProvider: OAuth2 client-credentials grant against an
  Azure AD style token endpoint, cached until shortly before expiry
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Protocol, runtime_checkable

import httpx

logger = logging.getLogger(__name__)


class TokenAcquisitionError(Exception):
    """Raised when a bearer token cannot be obtained."""


@runtime_checkable
class TokenProvider(Protocol):
    async def acquire_token(self) -> str: ...


class StaticTokenProvider:
    """Always hands out the same token."""

    def __init__(self, token: str) -> None:
        if not token:
            raise ValueError("StaticTokenProvider requires a non-empty token")
        self._token = token

    async def acquire_token(self) -> str:
        return self._token


class ClientCredentialsTokenProvider:
    """OAuth2 client-credentials token provider with in-memory caching.

    Safe to share between concurrent requests: refreshes are serialized with an
    asyncio.Lock so a burst of callers triggers a single token request.
    """

    # Refresh this many seconds before the token actually expires
    EXPIRY_SKEW_SECONDS = 60.0

    def __init__(
        self,
        token_url: str,
        client_id: str,
        client_secret: str,
        resource: str,
        *,
        timeout: float = 15.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.token_url = token_url
        self.client_id = client_id
        self.resource = resource
        self._client_secret = client_secret
        self._client = client or httpx.AsyncClient(timeout=timeout)

        self._access_token: str | None = None
        self._expires_at: float = 0.0
        self._lock = asyncio.Lock()

    @property
    def is_expired(self) -> bool:
        return time.monotonic() >= self._expires_at - self.EXPIRY_SKEW_SECONDS

    async def acquire_token(self) -> str:
        if self._access_token and not self.is_expired:
            return self._access_token

        async with self._lock:
            # Another caller may have refreshed while we waited
            if self._access_token and not self.is_expired:
                return self._access_token
            return await self._refresh()

    async def _refresh(self) -> str:
        try:
            resp = await self._client.post(
                self.token_url,
                data={
                    "grant_type": "client_credentials",
                    "client_id": self.client_id,
                    "client_secret": self._client_secret,
                    "resource": self.resource,
                },
            )
            resp.raise_for_status()
            data = resp.json()
            access_token = data["access_token"]
            if not access_token:
                raise ValueError("token response carried an empty access_token")
        except (httpx.HTTPError, ValueError, KeyError) as e:
            logger.error("[CRM:AUTH] Token request to %s failed: %s", self.token_url, e)
            raise TokenAcquisitionError(f"Could not acquire CRM token: {e}") from e

        expires_in = float(data.get("expires_in", 3600))
        self._access_token = access_token
        self._expires_at = time.monotonic() + expires_in
        logger.info("[CRM:AUTH] Acquired token for %s (expires in %.0fs)", self.resource, expires_in)
        return access_token

    async def aclose(self) -> None:
        await self._client.aclose()
