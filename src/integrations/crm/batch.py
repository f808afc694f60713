"""Batch response decoding.

A ``$batch`` response wraps the single sub-response we send in a multipart
envelope::

    --batchresponse_<uuid>
    Content-Type: application/http
    Content-Transfer-Encoding: binary

    HTTP/1.1 200 OK
    Content-Type: application/json; odata.metadata=minimal
    OData-Version: 4.0

    {...json...}
    --batchresponse_<uuid>--

Everything that knows about this layout lives here, behind ``extract_batch_data``.
"""

from __future__ import annotations

import re

_BATCH_START = r"--batchresponse_[-0-9a-fA-F]+\s"
_HEADERS = r"(?:[-\w\s/.;:=]+\s)\s"
_HTTP_STATUS = r"HTTP/\d\.\d\s\d+\s[-\s\w]+\s"
_JSON_DATA = r"(\{.*\})\s+"
_BATCH_END = r"--batchresponse_[-0-9a-fA-F]+--"

BATCH_RESPONSE_RE = re.compile(
    _BATCH_START + _HEADERS + _HTTP_STATUS + _HEADERS + _JSON_DATA + _BATCH_END,
    re.DOTALL,
)


def extract_batch_data(text: str | None) -> str | None:
    """Return the JSON payload embedded in a batch response, or None if malformed."""
    if not text:
        return None
    match = BATCH_RESPONSE_RE.search(text)
    if match:
        return match.group(1)
    return None
