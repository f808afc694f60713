"""Configuration for the CRM adapter.

Reads environment variables for CRM access and runtime tuning.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings

from src.core.errors import ConfigurationError, get_configuration_validation_recommendations

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Runtime configuration loaded from environment."""

    # =========================================================================
    # CRM ENDPOINT
    # =========================================================================
    CRM_HOST: str = Field(
        default="", description="CRM host, e.g. https://org.crm.dynamics.com (required)."
    )
    CRM_URL_PATH: str = Field(
        default="",
        description="Web API path prefix appended to CRM_HOST, e.g. /api/data/v9.1/ (required).",
    )
    OBJECT_REFERENCE_RETRIES: int = Field(
        default=1,
        ge=0,
        description=(
            "Extra attempts after the first one when the CRM answers with the intermittent "
            "'Object reference not set' fault."
        ),
    )
    CRM_RETRY_DELAY_SECONDS: float = Field(
        default=0.0,
        ge=0.0,
        description="Pause between retry attempts. 0 retries immediately.",
    )
    CRM_REQUEST_TIMEOUT: float | None = Field(
        default=None,
        gt=0,
        description="Per-request timeout in seconds. Unset means no timeout.",
    )

    # =========================================================================
    # CRM AUTH
    # =========================================================================
    CRM_TOKEN: SecretStr = Field(
        default=SecretStr(""),
        description="Static bearer token. Used only when client credentials are not configured.",
    )
    CRM_TOKEN_URL: str = Field(
        default="", description="OAuth2 token endpoint for the client-credentials grant."
    )
    CRM_CLIENT_ID: str = Field(default="", description="OAuth2 client (application) id.")
    CRM_CLIENT_SECRET: SecretStr = Field(
        default=SecretStr(""), description="OAuth2 client secret."
    )
    CRM_RESOURCE: str = Field(
        default="",
        description="Resource/scope the token is requested for. Defaults to CRM_HOST.",
    )

    # =========================================================================
    # LOGGING
    # =========================================================================
    LOG_LEVEL: str = Field(default="INFO", description="Root log level.")
    LOG_JSON: bool = Field(
        default=False, description="Emit JSON log lines instead of the pretty console format."
    )

    @property
    def crm_base_url(self) -> str:
        """Return CRM_HOST + CRM_URL_PATH."""
        return f"{self.CRM_HOST}{self.CRM_URL_PATH}"

    @property
    def crm_configured(self) -> bool:
        """Check if the CRM endpoint is configured."""
        return bool(self.CRM_HOST and self.CRM_URL_PATH)

    @property
    def client_credentials_configured(self) -> bool:
        return bool(
            self.CRM_TOKEN_URL
            and self.CRM_CLIENT_ID
            and self.CRM_CLIENT_SECRET.get_secret_value()
        )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()  # type: ignore[arg-type]


def validate_required_settings(settings_instance: Settings | None = None) -> None:
    """Validate that the CRM endpoint settings are present.

    Raises ConfigurationError if CRM_HOST or CRM_URL_PATH is missing.

    Args:
        settings_instance: Settings instance to validate. If None, uses global settings.
    """
    if settings_instance is None:
        settings_instance = get_settings()

    missing = [
        name
        for name in ("CRM_HOST", "CRM_URL_PATH")
        if not getattr(settings_instance, name)
    ]
    if missing:
        logger.error("Critical configuration errors: missing %s", ", ".join(missing))
        raise ConfigurationError(
            error_code="CRM_CONFIG_MISSING",
            message=f"Missing required CRM settings: {', '.join(missing)}",
            recommendations=get_configuration_validation_recommendations(
                missing[0], "must be a non-empty string"
            ),
            context={"missing": missing},
        )


settings = get_settings()
