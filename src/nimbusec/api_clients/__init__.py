"""API Client Abstractions for the nimbusec API.

One client class per resource; NimbusecAPI combines them into the single
client most callers want.
"""

from .base_client import (
    EMPTY_FILTER,
    ERROR_HEADER,
    NimbusecAPIClient,
    classify_response,
)
from .agents_client import AgentsAPIClient
from .bundles_client import BundlesAPIClient
from .domains_client import DomainsAPIClient
from .resource import ResourceCollection
from .results_client import ResultsAPIClient
from .tokens_client import TokensAPIClient
from .users_client import UsersAPIClient


class NimbusecAPI(
    DomainsAPIClient,
    UsersAPIClient,
    ResultsAPIClient,
    BundlesAPIClient,
    TokensAPIClient,
    AgentsAPIClient,
):
    """Client for the whole nimbusec API."""


__all__ = [
    # Base client
    "NimbusecAPIClient",
    "EMPTY_FILTER",
    "ERROR_HEADER",
    "classify_response",
    "ResourceCollection",
    # Resource clients
    "DomainsAPIClient",
    "UsersAPIClient",
    "ResultsAPIClient",
    "BundlesAPIClient",
    "TokensAPIClient",
    "AgentsAPIClient",
    "NimbusecAPI",
]
