"""CRM integrations package."""
from src.integrations.crm.auth import (
    ClientCredentialsTokenProvider,
    StaticTokenProvider,
    TokenAcquisitionError,
    TokenProvider,
)
from src.integrations.crm.base import (
    BaseCRMClient,
    CRMClientError,
    CRMErrorType,
    CRMRequest,
    CRMRetryExhaustedError,
    CRMTransportError,
    DecodedResult,
    RawResponse,
)
from src.integrations.crm.dynamics import DynamicsCRMClient

__all__ = [
    "BaseCRMClient",
    "ClientCredentialsTokenProvider",
    "CRMClientError",
    "CRMErrorType",
    "CRMRequest",
    "CRMRetryExhaustedError",
    "CRMTransportError",
    "DecodedResult",
    "DynamicsCRMClient",
    "RawResponse",
    "StaticTokenProvider",
    "TokenAcquisitionError",
    "TokenProvider",
]
