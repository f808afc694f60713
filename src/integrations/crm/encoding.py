"""Request encoding for the Dynamics Web API.

Builds request headers, serializes request bodies, and renders the multipart
body used to tunnel a FetchXML GET through ``$batch``.
"""

from __future__ import annotations

import json
from datetime import date, datetime
from typing import Any

from src.conf.crm_config import BATCH_NAME


def build_headers(token: str, is_batch: bool = False) -> dict[str, str]:
    """Return headers for a CRM request authorised with ``token``."""
    content_type = (
        f"multipart/mixed;boundary={BATCH_NAME}" if is_batch else "application/json; charset=utf-8"
    )
    return {
        "Accept-Encoding": "gzip, deflate",
        "Content-Type": content_type,
        "Authorization": f"Bearer {token}",
        "OData-MaxVersion": "4.0",
        "OData-Version": "4.0",
        "Accept": "application/json",
        "Prefer": 'odata.include-annotations="*"',
    }


def _json_default(value: Any) -> str:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def encode_body(method: str, data: Any) -> str | None:
    """Serialize a request body.

    GET requests and empty payloads carry no body. Strings are sent as-is,
    anything else is JSON encoded.
    """
    if method.upper() == "GET" or not data:
        return None
    if isinstance(data, str):
        return data
    return json.dumps(data, default=_json_default)


def make_batch_body(base_url: str, query: str, fetch_xml: str) -> str:
    """Render a single-GET ``$batch`` body for a FetchXML query.

    The layout is newline-sensitive. ``OData-MaxCersion`` is what the CRM has
    always been sent and is kept as-is.
    """
    return f"""
--{BATCH_NAME}
Content-Type: application/http
Content-Transfer-Encoding: binary

GET {base_url}{query}?fetchXml={fetch_xml} HTTP/1.1
Content-Type: application/json
OData-Version: 4.0
OData-MaxCersion: 4.0

--{BATCH_NAME}--
"""
