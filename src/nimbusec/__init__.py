"""
nimbusec - Python client for the nimbusec website security monitoring API.

Manage monitored domains, users, bundles and agent tokens, and read the
scan results the service reports for them.
"""

__version__ = "2.0.0"

from .api_clients import EMPTY_FILTER, NimbusecAPI
from .config import DEFAULT_API, ClientConfig, load_config
from .exceptions import (
    AmbiguousMatchError,
    APIClientError,
    ConfigurationError,
    DecodeError,
    NotFoundError,
    ServiceError,
    UnexpectedStatusError,
)
from .models import (
    ROLE_ADMINISTRATOR,
    ROLE_USER,
    Agent,
    BillingChange,
    Bundle,
    Domain,
    DomainEvent,
    Result,
    Token,
    User,
)

__all__ = [
    "NimbusecAPI",
    "EMPTY_FILTER",
    "DEFAULT_API",
    "ClientConfig",
    "load_config",
    "APIClientError",
    "ServiceError",
    "UnexpectedStatusError",
    "DecodeError",
    "NotFoundError",
    "AmbiguousMatchError",
    "ConfigurationError",
    "ROLE_USER",
    "ROLE_ADMINISTRATOR",
    "Agent",
    "BillingChange",
    "Bundle",
    "Domain",
    "DomainEvent",
    "Result",
    "Token",
    "User",
]
