"""Base CRM client interface.

This module defines the request/response envelope shared by the CRM adapter
layers, the CRM runtime errors, and the abstract verb interface every CRM
client implements.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Literal


class CRMErrorType(str, Enum):
    """Types of CRM errors."""

    CONNECTION = "connection"
    AUTHENTICATION = "authentication"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    RATE_LIMIT = "rate_limit"
    SERVER_ERROR = "server_error"
    TRANSIENT = "transient"
    DECODE = "decode"
    UNKNOWN = "unknown"


class CRMClientError(Exception):
    """Base class for CRM runtime failures."""


class CRMTransportError(CRMClientError):
    """Network-level failure. Deliberately carries no detail about the cause."""

    def __init__(self, method: str):
        super().__init__(f"CRMClient failed to do {method} request")
        self.method = method


class CRMRetryExhaustedError(CRMClientError):
    """The CRM kept answering with a transient fault until retries ran out."""

    def __init__(self, result: DecodedResult):
        self.result = result
        self.error = result.error or {}
        super().__init__(result.error_message or "CRM request failed after retries")

    @property
    def status(self) -> int | None:
        return self.result.status


@dataclass(frozen=True)
class CRMRequest:
    """One logical CRM request."""

    method: Literal["GET", "POST", "PATCH", "DELETE", "PUT"]
    query: str
    body: Any = None
    is_batch: bool = False


@dataclass(frozen=True)
class RawResponse:
    """Status and body text as received from the wire."""

    status: int
    text: str


@dataclass
class DecodedResult:
    """Decoded CRM response.

    ``content`` is either the normalized JSON value or ``{"error": {"message": ...}}``.
    ``status`` is None when no HTTP response was received at all.
    """

    status: int | None
    content: Any

    @property
    def error(self) -> dict[str, Any] | None:
        if isinstance(self.content, dict):
            error = self.content.get("error")
            if error is not None:
                return error if isinstance(error, dict) else {"message": str(error)}
        return None

    @property
    def error_message(self) -> str | None:
        error = self.error
        if error is None:
            return None
        message = error.get("message")
        return None if message is None else str(message)

    def is_ok(self) -> bool:
        return self.error is None

    @classmethod
    def failure(cls, status: int | None, message: str) -> DecodedResult:
        return cls(status=status, content={"error": {"message": message}})


class BaseCRMClient(ABC):
    """Abstract base class for CRM clients.

    Every verb returns the response content on success and ``False`` on failure.
    Failure details only reach the logs.
    """

    @abstractmethod
    async def get(self, query: str) -> Any:
        """Fetch an entity or collection. Returns normalized content or False."""

    @abstractmethod
    async def patch(self, query: str, body: Any) -> Any:
        """Update an entity. Returns response content or False."""

    @abstractmethod
    async def post(self, query: str, body: Any, is_batch: bool = False) -> Any:
        """Create an entity or send a batch. Returns response content or False."""

    @abstractmethod
    async def delete(self, query: str) -> Any:
        """Delete an entity. Returns response content or False."""

    @abstractmethod
    async def batch_post(self, query: str, fetch_xml: str) -> Any:
        """Run a FetchXML query through $batch. Returns response content or False."""
