"""Exception classes for the nimbusec client.

Transport failures are not represented here: errors raised by httpx
(``httpx.TransportError`` and subclasses) reach the caller unchanged.
"""

from typing import Optional


class APIClientError(Exception):
    """Base exception for API client errors."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ServiceError(APIClientError):
    """The API rejected the request and said why in the error header.

    ``str(error)`` is exactly the text sent by the service.
    """

    pass


class UnexpectedStatusError(APIClientError):
    """The API answered with a non-success status but gave no error message."""

    def __init__(self, status_code: int, reason: str = ""):
        super().__init__(reason, status_code)
        self.reason = reason


class DecodeError(APIClientError):
    """A successful response body did not match the expected shape."""

    pass


class NotFoundError(APIClientError):
    """A lookup by name or login did not match any entity."""

    pass


class AmbiguousMatchError(APIClientError):
    """A lookup by name or login matched more than one entity."""

    pass


class ConfigurationError(APIClientError):
    """The client is not usable with the given endpoint or credentials."""

    pass
