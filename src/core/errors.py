"""Structured error system for service-level errors with actionable recommendations.

Each error includes:
- Component name (e.g., "configuration")
- Error code for automation (e.g., "CRM_CONFIG_MISSING")
- Actionable recommendations (list of steps to resolve)
- Severity level (critical, warning, info)
- Context (masked sensitive data)

Usage:
    from src.core.errors import ConfigurationError

    raise ConfigurationError(
        error_code="CRM_CONFIG_MISSING",
        message="Missing required CRM settings: CRM_HOST",
        recommendations=["1. Set CRM_HOST in the environment"],
        context={"missing": ["CRM_HOST"]},
    )
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Literal


def _mask_sensitive_data(value: str) -> str:
    """Mask sensitive data in strings (credentials, tokens, etc.).

    Examples:
        "Bearer eyJ0eXAiOiJKV1Qi..." -> "Bearer ***"
        "client_secret=abc123" -> "client_secret=***"
    """
    if not isinstance(value, str):
        return str(value)

    # Mask bearer tokens and API keys
    value = re.sub(
        r"(sk-|pk-|Bearer\s+)([a-zA-Z0-9._\-]{8,})",
        r"\1***",
        value,
        flags=re.IGNORECASE,
    )

    # Mask tokens: token=abc123 -> token=***
    value = re.sub(
        r"(token|key|secret|password|api_key)\s*=\s*([^\s&]+)",
        r"\1=***",
        value,
        flags=re.IGNORECASE,
    )

    return value


def _mask_dict_values(data: dict[str, Any]) -> dict[str, Any]:
    """Recursively mask sensitive data in dictionary values."""
    masked = {}
    sensitive_keys = {
        "password", "secret", "token", "key", "api_key", "authorization", "client_secret"
    }

    for key, value in data.items():
        key_lower = key.lower()

        if any(sensitive in key_lower for sensitive in sensitive_keys):
            if isinstance(value, str):
                masked[key] = _mask_sensitive_data(value)
            else:
                masked[key] = "***"
        elif isinstance(value, dict):
            masked[key] = _mask_dict_values(value)
        elif isinstance(value, str):
            masked[key] = _mask_sensitive_data(value)
        else:
            masked[key] = value

    return masked


def mask_headers(headers: dict[str, str]) -> dict[str, str]:
    """Return a copy of request headers that is safe to log."""
    return _mask_dict_values(dict(headers))


@dataclass
class ServiceError(Exception):
    """Base class for service errors with actionable recommendations.

    Attributes:
        component: Component name (e.g., "configuration")
        error_code: Unique error code for automation (e.g., "CRM_CONFIG_MISSING")
        message: Human-readable error message
        recommendations: List of actionable steps to resolve the issue
        severity: Error severity level (critical blocks startup, warning does not)
        context: Additional context - automatically masked in to_dict()
    """

    component: str
    error_code: str
    message: str
    recommendations: list[str]
    severity: Literal["critical", "warning", "info"] = "critical"
    context: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate error structure after initialization."""
        if not self.component:
            raise ValueError("ServiceError.component cannot be empty")
        if not self.error_code:
            raise ValueError("ServiceError.error_code cannot be empty")
        if not self.message:
            raise ValueError("ServiceError.message cannot be empty")
        if not self.recommendations:
            raise ValueError("ServiceError.recommendations cannot be empty")
        if self.severity not in ("critical", "warning", "info"):
            raise ValueError(f"ServiceError.severity must be 'critical', 'warning', or 'info', got '{self.severity}'")

    def __str__(self) -> str:
        """Human-readable error representation."""
        recs = "\n".join(f"  - {r}" for r in self.recommendations)
        return f"{self.component} [{self.error_code}]: {self.message}\nRecommendations:\n{recs}"

    def to_dict(self) -> dict[str, Any]:
        """Structured error representation for logging/monitoring.

        Automatically masks sensitive data in context.
        """
        return {
            "component": self.component,
            "error_code": self.error_code,
            "message": self.message,
            "recommendations": self.recommendations,
            "severity": self.severity,
            "context": _mask_dict_values(self.context),
        }

    def is_critical(self) -> bool:
        """Check if error is critical (blocks startup)."""
        return self.severity == "critical"


@dataclass
class ConfigurationError(ServiceError):
    """Error related to configuration validation.

    Used for missing or invalid environment variables. Raised at startup.
    """

    def __init__(
        self,
        error_code: str,
        message: str,
        recommendations: list[str],
        severity: Literal["critical", "warning", "info"] = "critical",
        context: dict[str, Any] | None = None,
    ):
        super().__init__(
            component="configuration",
            error_code=error_code,
            message=message,
            recommendations=recommendations,
            severity=severity,
            context=context or {},
        )


def get_configuration_validation_recommendations(setting_name: str, issue: str) -> list[str]:
    """Generate recommendations for configuration validation errors."""
    return [
        f"1. Verify {setting_name} is set correctly in environment variables",
        f"2. Check {setting_name} format: {issue}",
        "3. Review environment-specific configuration (.env file vs process environment)",
        "4. Ensure all required settings are present before startup",
    ]
