"""Tests for transient fault detection and failure classification."""

import pytest

from src.integrations.crm.base import CRMErrorType, DecodedResult
from src.integrations.crm.error_handler import (
    classify_failure,
    is_object_reference_error,
    is_transient_fault,
)

OBJECT_REFERENCE = "Object reference not set to an instance of an object."


class TestObjectReferenceError:
    def test_exact_message_matches(self):
        assert is_object_reference_error({"code": "0x0", "message": OBJECT_REFERENCE})

    @pytest.mark.parametrize(
        "error",
        [
            None,
            {},
            {"message": "Object reference not set"},
            {"message": OBJECT_REFERENCE.upper()},
            {"message": f" {OBJECT_REFERENCE}"},
            {"code": "0x0"},
        ],
    )
    def test_anything_else_does_not(self, error):
        assert not is_object_reference_error(error)

    def test_transient_fault_reads_decoded_result(self):
        assert is_transient_fault(DecodedResult.failure(500, OBJECT_REFERENCE))
        assert not is_transient_fault(DecodedResult(status=200, content={"value": []}))
        assert not is_transient_fault(DecodedResult(status=200, content=[1, 2]))


class TestClassifyFailure:
    @pytest.mark.parametrize(
        "status, message, expected",
        [
            (500, OBJECT_REFERENCE, CRMErrorType.TRANSIENT),
            (None, "CRMClient failed to do GET request", CRMErrorType.CONNECTION),
            (401, "Unauthorized", CRMErrorType.AUTHENTICATION),
            (403, "Forbidden", CRMErrorType.AUTHENTICATION),
            (404, "Does Not Exist", CRMErrorType.NOT_FOUND),
            (400, "Bad request", CRMErrorType.VALIDATION),
            (429, "Too many requests", CRMErrorType.RATE_LIMIT),
            (503, "Service Unavailable", CRMErrorType.SERVER_ERROR),
            (200, "--batchresponse_garbage", CRMErrorType.DECODE),
            (409, "Conflict", CRMErrorType.UNKNOWN),
        ],
    )
    def test_classification(self, status, message, expected):
        assert classify_failure(DecodedResult.failure(status, message)) == expected

    def test_unexpected_success_status_is_unknown(self):
        assert classify_failure(DecodedResult(status=204, content={})) == CRMErrorType.UNKNOWN
