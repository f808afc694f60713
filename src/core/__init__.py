"""Core utilities for the CRM adapter.

This package contains the fundamental building blocks:
- errors: Structured service errors (configuration)
- logging: Structured logging configuration and root-cause tagging
- http_retry: Bounded retry for transient upstream faults
"""

from src.core.errors import ConfigurationError, ServiceError
from src.core.http_retry import request_with_retry
from src.core.logging import log_with_root_cause, setup_logging


__all__ = [
    # Errors
    "ConfigurationError",
    "ServiceError",
    # Logging
    "log_with_root_cause",
    "setup_logging",
    # Retry
    "request_with_retry",
]
