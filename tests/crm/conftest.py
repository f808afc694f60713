"""
CRM Test Configuration and Fixtures
====================================

Shared fixtures for CRM client tests. The wire is replaced with
httpx.MockTransport so every test controls the exact responses the client sees.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from src.conf.crm_config import CRMConfig
from src.integrations.crm.auth import StaticTokenProvider
from src.integrations.crm.dynamics import DynamicsCRMClient
from src.integrations.crm.transport import CRMTransport


HOST = "https://test-org.crm.dynamics.com"
URL_PATH = "/api/data/v9.1/"
BASE_URL = HOST + URL_PATH
TOKEN = "test-token-123"

OBJECT_REFERENCE_BODY = json.dumps(
    {"error": {"code": "0x0", "message": "Object reference not set to an instance of an object."}}
)


class ResponseQueue:
    """MockTransport handler replaying queued responses and recording requests."""

    def __init__(self, responses: list[httpx.Response | Exception]):
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.responses:
            raise AssertionError(f"Unexpected request: {request.method} {request.url}")
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    @property
    def call_count(self) -> int:
        return len(self.requests)


@pytest.fixture
def crm_config() -> CRMConfig:
    return CRMConfig(host=HOST, url_path=URL_PATH, retries=1)


@pytest.fixture
def make_client(crm_config: CRMConfig) -> Callable[..., tuple[DynamicsCRMClient, ResponseQueue]]:
    """Build a client whose HTTP traffic is served from a ResponseQueue."""

    def _make(
        *responses: httpx.Response | Exception,
        retries: int | None = None,
    ) -> tuple[DynamicsCRMClient, ResponseQueue]:
        queue = ResponseQueue(list(responses))
        config = crm_config if retries is None else CRMConfig(host=HOST, url_path=URL_PATH, retries=retries)
        transport = CRMTransport(client=httpx.AsyncClient(transport=httpx.MockTransport(queue)))
        client = DynamicsCRMClient(config, StaticTokenProvider(TOKEN), transport=transport)
        return client, queue

    return _make


# Test utilities
class CRMTestHelper:
    """Helper class for building CRM wire responses."""

    OBJECT_REFERENCE_BODY = OBJECT_REFERENCE_BODY
    BASE_URL = BASE_URL
    TOKEN = TOKEN

    @staticmethod
    def json_response(status: int, payload: Any) -> httpx.Response:
        return httpx.Response(status, json=payload)

    @staticmethod
    def text_response(status: int, text: str) -> httpx.Response:
        return httpx.Response(status, text=text)

    @staticmethod
    def batch_response(inner_json: str, status_line: str = "HTTP/1.1 200 OK") -> str:
        return (
            "--batchresponse_5e8a1c2f-0b7d-4d36-9a2e-7f61c0d3b4a9\r\n"
            "Content-Type: application/http\r\n"
            "Content-Transfer-Encoding: binary\r\n"
            "\r\n"
            f"{status_line}\r\n"
            "Content-Type: application/json; odata.metadata=minimal\r\n"
            "OData-Version: 4.0\r\n"
            "\r\n"
            f"{inner_json}\r\n"
            "--batchresponse_5e8a1c2f-0b7d-4d36-9a2e-7f61c0d3b4a9--\r\n"
        )


@pytest.fixture
def crm_helper() -> CRMTestHelper:
    """CRM test helper fixture."""
    return CRMTestHelper()
