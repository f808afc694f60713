"""Dynamics CRM client implementation.

Talks to the Dynamics 365 / Dataverse Web API over OData v4.

Every verb returns the response content on success and ``False`` on failure;
the reason for a failure only reaches the logs. The one failure that is raised
instead is ``CRMRetryExhaustedError``: the CRM kept answering with its
intermittent "Object reference not set" fault after all retries.

Usage:
    async with DynamicsCRMClient(CRMConfig.from_settings(settings), token_provider) as client:
        contacts = await client.get("contacts?$select=fullname")
        if contacts is not False:
            print(contacts["value"])
"""

from __future__ import annotations

import logging
from typing import Any, Literal

from src.conf.crm_config import BATCH_QUERY, CRMConfig
from src.core.http_retry import RetryExhaustedError, request_with_retry
from src.core.logging import log_with_root_cause
from src.integrations.crm.auth import TokenProvider
from src.integrations.crm.base import (
    BaseCRMClient,
    CRMRequest,
    CRMRetryExhaustedError,
    CRMTransportError,
    DecodedResult,
)
from src.integrations.crm.encoding import build_headers, encode_body, make_batch_body
from src.integrations.crm.error_handler import classify_failure, is_transient_fault
from src.integrations.crm.normalizer import decode_response
from src.integrations.crm.transport import CRMTransport

logger = logging.getLogger(__name__)


class DynamicsCRMClient(BaseCRMClient):
    """Dynamics Web API client."""

    def __init__(
        self,
        config: CRMConfig,
        token_provider: TokenProvider,
        transport: CRMTransport | None = None,
    ):
        """Initialize the client.

        Args:
            config: Immutable CRM configuration (host, path, retries, timeout)
            token_provider: Source of bearer tokens
            transport: HTTP transport (default: a new CRMTransport using config.timeout)
        """
        self.config = config
        self.token_provider = token_provider
        self._transport = transport or CRMTransport(timeout=config.timeout)

    @property
    def base_url(self) -> str:
        return self.config.base_url

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP pool and the token provider's pool, if it has one."""
        await self._transport.aclose()
        provider_close = getattr(self.token_provider, "aclose", None)
        if provider_close is not None:
            await provider_close()

    # =========================================================================
    # REQUEST PIPELINE
    # =========================================================================

    async def get_token(self) -> str:
        """Return an access token from the token provider."""
        return await self.token_provider.acquire_token()

    async def get_headers(self, is_batch: bool = False) -> dict[str, str]:
        """Return headers for a CRM request, with a freshly acquired token."""
        return build_headers(await self.get_token(), is_batch)

    async def fetch(
        self,
        method: str,
        query: str,
        data: Any = None,
        is_batch: bool = False,
    ) -> DecodedResult:
        """Send one request and decode the response.

        Returns a DecodedResult for any HTTP response, including non-2xx ones.

        Raises:
            CRMTransportError: If the token could not be acquired or the request
                never produced a response
        """
        try:
            headers = await self.get_headers(is_batch)
        except Exception as e:
            logger.exception("[CRM] Token acquisition failed for %s %s", method, query)
            raise CRMTransportError(method) from e

        body = encode_body(method, data)
        raw = await self._transport.send(method, f"{self.base_url}{query}", headers, body)
        return decode_response(raw.status, raw.text, is_batch)

    async def _fetch_absorbing(self, request: CRMRequest) -> DecodedResult:
        try:
            return await self.fetch(request.method, request.query, request.body, request.is_batch)
        except CRMTransportError as e:
            return DecodedResult.failure(None, str(e))

    async def fetch_with_retry(
        self,
        method: str,
        query: str,
        data: Any = None,
        is_batch: bool = False,
    ) -> DecodedResult:
        """``fetch`` with retry on the intermittent 'Object reference' fault.

        Transport failures are returned as a DecodedResult error, not retried.

        Raises:
            CRMRetryExhaustedError: If the fault persisted through every retry
        """
        request = CRMRequest(method=method, query=query, body=data, is_batch=is_batch)
        try:
            return await request_with_retry(
                lambda: self._fetch_absorbing(request),
                retries=self.config.retries,
                is_retryable=is_transient_fault,
                delay=self.config.retry_delay,
                description=f"{method} {query}",
            )
        except RetryExhaustedError as e:
            raise CRMRetryExhaustedError(e.result) from e

    async def _execute(self, request: CRMRequest, *, retry: bool) -> DecodedResult:
        if retry:
            return await self.fetch_with_retry(
                request.method, request.query, request.body, request.is_batch
            )
        return await self._fetch_absorbing(request)

    def _failed(self, request: CRMRequest, result: DecodedResult) -> Literal[False]:
        error_type = classify_failure(result)
        log_with_root_cause(
            logger,
            "warning",
            f"{request.method} request failed with status: {result.status}, "
            f"error: {result.error_message}",
            root_cause=f"CRM_{error_type.value.upper()}",
            error_type=error_type.value,
            method=request.method,
            query=request.query,
            status_code=result.status,
        )
        return False

    # =========================================================================
    # VERBS
    # =========================================================================

    async def get(self, query: str) -> Any:
        """Execute GET request with retry. Returns the normalized content, or False."""
        request = CRMRequest(method="GET", query=query)
        result = await self._execute(request, retry=True)
        if result.is_ok() and result.status == 200:
            return result.content
        return self._failed(request, result)

    async def patch(self, query: str, body: Any) -> Any:
        """Execute PATCH request. Returns the response content, or False."""
        request = CRMRequest(method="PATCH", query=query, body=body)
        result = await self._execute(request, retry=False)
        if result.is_ok() and result.status is not None and 200 <= result.status < 300:
            return result.content
        return self._failed(request, result)

    async def post(self, query: str, body: Any, is_batch: bool = False) -> Any:
        """Execute POST request, with retry for batches. Returns the response content, or False."""
        request = CRMRequest(method="POST", query=query, body=body, is_batch=is_batch)
        result = await self._execute(request, retry=is_batch)
        if result.is_ok() and result.status == 200:
            return result.content
        return self._failed(request, result)

    async def delete(self, query: str) -> Any:
        """Execute DELETE request. Returns the response content, or False."""
        request = CRMRequest(method="DELETE", query=query)
        result = await self._execute(request, retry=False)
        if result.is_ok() and result.status == 200:
            return result.content
        return self._failed(request, result)

    async def batch_post(self, query: str, fetch_xml: str) -> Any:
        """Run a FetchXML GET for ``query`` through $batch."""
        batch_body = make_batch_body(self.base_url, query, fetch_xml)
        return await self.post(BATCH_QUERY, batch_body, is_batch=True)
