"""
CRM Configuration Constants.
============================
Protocol strings used when talking to the Dynamics Web API, and the immutable
client configuration built from settings once at startup.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from src.core.errors import ConfigurationError, get_configuration_validation_recommendations

if TYPE_CHECKING:
    from src.conf.config import Settings


# Multipart boundary used for $batch requests
BATCH_NAME = "batch"
BATCH_QUERY = "$batch"

# Intermittent upstream fault worth retrying
OBJECT_REFERENCE_ERROR = "Object reference not set to an instance of an object."

# OData annotation -> normalized suffix. Order matters: later entries win.
FORMATTED_VALUE = "@OData.Community.Display.V1.FormattedValue"
LOGICAL_NAME = "@Microsoft.Dynamics.CRM.lookuplogicalname"
NAVIGATION_PROPERTY = "@Microsoft.Dynamics.CRM.associatednavigationproperty"

ANNOTATION_SUFFIXES: tuple[tuple[str, str], ...] = (
    (FORMATTED_VALUE, "_formatted"),
    (LOGICAL_NAME, "_logical"),
    (NAVIGATION_PROPERTY, "_navigationproperty"),
)

ENTITY_CONTEXT_MARKER = "/$entity"


@dataclass(frozen=True)
class CRMConfig:
    """Immutable CRM client configuration."""

    host: str
    url_path: str
    retries: int = 1
    retry_delay: float = 0.0
    timeout: float | None = None

    def __post_init__(self) -> None:
        missing = [name for name, value in (("CRM_HOST", self.host), ("CRM_URL_PATH", self.url_path)) if not value]
        if missing:
            raise ConfigurationError(
                error_code="CRM_CONFIG_MISSING",
                message=f"Missing required CRM settings: {', '.join(missing)}",
                recommendations=get_configuration_validation_recommendations(
                    missing[0], "must be a non-empty string"
                ),
                context={"missing": missing},
            )
        if self.retries < 0:
            raise ConfigurationError(
                error_code="CRM_CONFIG_INVALID",
                message=f"OBJECT_REFERENCE_RETRIES must be >= 0, got {self.retries}",
                recommendations=get_configuration_validation_recommendations(
                    "OBJECT_REFERENCE_RETRIES", "non-negative integer"
                ),
            )

    @property
    def base_url(self) -> str:
        return f"{self.host}{self.url_path}"

    @classmethod
    def from_settings(cls, settings: Settings) -> CRMConfig:
        return cls(
            host=settings.CRM_HOST,
            url_path=settings.CRM_URL_PATH,
            retries=settings.OBJECT_REFERENCE_RETRIES,
            retry_delay=settings.CRM_RETRY_DELAY_SECONDS,
            timeout=settings.CRM_REQUEST_TIMEOUT,
        )
