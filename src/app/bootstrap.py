"""
Application bootstrap for the CRM adapter.
Central place to validate configuration and construct the CRM client.
"""

from __future__ import annotations

import logging

from src.conf.config import Settings, get_settings, validate_required_settings
from src.conf.crm_config import CRMConfig
from src.core.errors import ConfigurationError, get_configuration_validation_recommendations
from src.core.logging import setup_logging
from src.integrations.crm.auth import (
    ClientCredentialsTokenProvider,
    StaticTokenProvider,
    TokenProvider,
)
from src.integrations.crm.dynamics import DynamicsCRMClient

logger = logging.getLogger(__name__)


def build_token_provider(settings: Settings) -> TokenProvider:
    """Pick a token provider from settings.

    Client credentials win over a static token. Neither configured is fatal.
    """
    if settings.client_credentials_configured:
        return ClientCredentialsTokenProvider(
            token_url=settings.CRM_TOKEN_URL,
            client_id=settings.CRM_CLIENT_ID,
            client_secret=settings.CRM_CLIENT_SECRET.get_secret_value(),
            resource=settings.CRM_RESOURCE or settings.CRM_HOST,
        )

    static_token = settings.CRM_TOKEN.get_secret_value()
    if static_token:
        return StaticTokenProvider(static_token)

    raise ConfigurationError(
        error_code="CRM_AUTH_MISSING",
        message="No CRM credentials configured",
        recommendations=get_configuration_validation_recommendations(
            "CRM_TOKEN_URL/CRM_CLIENT_ID/CRM_CLIENT_SECRET",
            "set all three, or set CRM_TOKEN",
        ),
    )


def build_crm_client(
    settings: Settings | None = None,
    token_provider: TokenProvider | None = None,
    *,
    configure_logging: bool = False,
) -> DynamicsCRMClient:
    """Validate configuration and wire up a DynamicsCRMClient.

    Raises:
        ConfigurationError: If CRM_HOST/CRM_URL_PATH or credentials are missing
    """
    settings = settings or get_settings()
    if configure_logging:
        setup_logging(level=settings.LOG_LEVEL, json_format=settings.LOG_JSON)

    try:
        validate_required_settings(settings)
        config = CRMConfig.from_settings(settings)
        provider = token_provider or build_token_provider(settings)
    except ConfigurationError as e:
        error_dict = e.to_dict()
        log_fn = logger.critical if e.is_critical() else logger.warning
        log_fn(
            "[VALIDATION:CRM] %s [%s]: %s",
            error_dict["component"],
            error_dict["error_code"],
            error_dict["message"],
            extra={"context": error_dict["context"]},
        )
        raise

    logger.info(
        "[CRM] Client ready for %s (retries=%d, timeout=%s)",
        config.base_url,
        config.retries,
        config.timeout,
    )
    return DynamicsCRMClient(config, provider)


# Singleton instance
_crm_client: DynamicsCRMClient | None = None


def get_crm_client() -> DynamicsCRMClient:
    """Get or create the CRM client singleton."""
    global _crm_client
    if _crm_client is None:
        _crm_client = build_crm_client()
    return _crm_client
