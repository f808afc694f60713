"""CRM Error Handler - recognises transient faults and classifies failures."""

from __future__ import annotations

from typing import Any

from src.conf.crm_config import OBJECT_REFERENCE_ERROR
from src.integrations.crm.base import CRMErrorType, DecodedResult


def is_object_reference_error(error: dict[str, Any] | None) -> bool:
    """Return True if ``error`` is the intermittent 'Object reference' fault.

    The match is exact: any other message, even a similar one, is a real error.
    """
    if not error:
        return False
    return error.get("message") == OBJECT_REFERENCE_ERROR


def is_transient_fault(result: DecodedResult) -> bool:
    """Retry predicate for DecodedResult."""
    return is_object_reference_error(result.error)


def classify_failure(result: DecodedResult) -> CRMErrorType:
    """Map a failed DecodedResult to a CRMErrorType."""
    status = result.status

    if is_transient_fault(result):
        return CRMErrorType.TRANSIENT
    if status is None:
        return CRMErrorType.CONNECTION
    if status in (401, 403):
        return CRMErrorType.AUTHENTICATION
    if status == 404:
        return CRMErrorType.NOT_FOUND
    if status in (400, 422):
        return CRMErrorType.VALIDATION
    if status == 429:
        return CRMErrorType.RATE_LIMIT
    if status >= 500:
        return CRMErrorType.SERVER_ERROR
    if result.error is not None and 200 <= status < 300:
        return CRMErrorType.DECODE
    return CRMErrorType.UNKNOWN
