"""CRM response normalizer.

Turns raw response text into a ``DecodedResult``:
- JSON is parsed with every date-looking string revived into a ``datetime``
- bodies that are not JSON become ``{"error": {"message": <text>}}``
- OData annotation suffixes on property names are rewritten to stable names
  (``name@OData.Community.Display.V1.FormattedValue`` -> ``name_formatted``)

Reviving is lossy by nature: a plain string that happens to be a valid ISO-8601
date is converted too.
"""

from __future__ import annotations

import json
import logging
from datetime import date, datetime
from typing import Any

from src.conf.crm_config import ANNOTATION_SUFFIXES, ENTITY_CONTEXT_MARKER
from src.core.logging import safe_preview
from src.integrations.crm.base import DecodedResult
from src.integrations.crm.batch import extract_batch_data

logger = logging.getLogger(__name__)


# =============================================================================
# DATE REVIVER
# =============================================================================


def parse_date(value: str) -> datetime | None:
    """Parse an ISO-8601 date or datetime string, or return None."""
    text = value.strip()
    if not text or not text[0].isdigit():
        return None
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        pass
    try:
        parsed = date.fromisoformat(text)
    except ValueError:
        return None
    return datetime(parsed.year, parsed.month, parsed.day)


def revive_dates(value: Any) -> Any:
    """Recursively convert date strings to datetimes. Other values are kept."""
    if isinstance(value, str):
        parsed = parse_date(value)
        return value if parsed is None else parsed
    if isinstance(value, dict):
        return {key: revive_dates(item) for key, item in value.items()}
    if isinstance(value, list):
        return [revive_dates(item) for item in value]
    return value


def parse_json(text: str) -> Any:
    """``json.loads`` with date reviving. Raises ValueError on invalid JSON."""
    return revive_dates(json.loads(text))


# =============================================================================
# PROPERTY NAMES
# =============================================================================


def normalize_property_name(property_name: str) -> str:
    """Return the normalized name for an annotated property, else the name itself."""
    index: int | None = None
    suffix: str | None = None

    for annotation, replacement in ANNOTATION_SUFFIXES:
        position = property_name.find(annotation)
        if position != -1:
            index, suffix = position, replacement

    # A bare annotation (nothing before the '@') has no base to attach to
    if index and suffix:
        return property_name[:index] + suffix
    return property_name


def normalize_entity(data: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of ``data`` with every property name normalized."""
    return {normalize_property_name(name): value for name, value in data.items()}


def process_response(content: Any) -> Any:
    """Normalize a single-entity or collection response. Anything else is returned as-is."""
    if not isinstance(content, dict):
        return content

    context = content.get("@odata.context")
    if isinstance(context, str) and ENTITY_CONTEXT_MARKER in context:
        return normalize_entity(content)

    if isinstance(content.get("value"), list):
        return {
            **content,
            "value": [
                normalize_entity(entity) if isinstance(entity, dict) else entity
                for entity in content["value"]
            ],
        }
    return content


# =============================================================================
# DECODE
# =============================================================================


def decode_response(status: int, text: str, is_batch: bool = False) -> DecodedResult:
    """Decode a raw CRM response body.

    Never raises on malformed input: bodies that cannot be parsed (including
    batch envelopes that do not match the expected layout) are returned as an
    error descriptor carrying the raw text.
    """
    payload: str | None = extract_batch_data(text) if is_batch else text

    if not is_batch and not text.strip():
        return DecodedResult(status=status, content={})

    if payload is None:
        logger.warning(
            "[CRM] Batch response did not match expected layout (status=%s): %s",
            status,
            safe_preview(text),
        )
        return DecodedResult.failure(status, text)

    try:
        content = parse_json(payload)
    except ValueError:
        # Some CRM errors come back as plain strings, not JSON
        logger.debug("[CRM] Non-JSON response body (status=%s): %s", status, safe_preview(text))
        return DecodedResult.failure(status, text)

    # Every verb, batch included, gets annotation renames here
    return DecodedResult(status=status, content=process_response(content))
