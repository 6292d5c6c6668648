"""Base nimbusec API Client.

Provides the shared request plumbing for all resource clients: URL
building, OAuth request signing, error header interpretation and JSON or
plain-text body handling.
"""

import logging
from typing import Any, Dict, Mapping, Optional, Type, TypeVar, Union
from urllib.parse import quote

import httpx
from authlib.integrations.httpx_client import OAuth1Auth
from pydantic import TypeAdapter, ValidationError

from ..config import DEFAULT_API, ClientConfig
from ..models import NimbusecModel
from ..exceptions import (
    APIClientError,
    ConfigurationError,
    DecodeError,
    ServiceError,
    UnexpectedStatusError,
)

logger = logging.getLogger(__name__)

# Filter that matches all entities.
EMPTY_FILTER = ""

# Header carrying the human-readable message of a rejected request.
ERROR_HEADER = "x-nimbusec-error"

T = TypeVar("T")

Params = Dict[str, str]


def classify_response(
    status_code: int, headers: Mapping[str, str], reason: str = ""
) -> Optional[APIClientError]:
    """Decide whether a completed HTTP exchange is a failure.

    Args:
        status_code: HTTP status of the response
        headers: Response headers (case-insensitive lookup expected)
        reason: Reason phrase reported by the transport

    Returns:
        None for success, otherwise the error to raise
    """
    if status_code < 300:
        return None

    message = headers.get(ERROR_HEADER, "")
    if message:
        return ServiceError(message, status_code)

    return UnexpectedStatusError(status_code, reason)


def filter_params(filter: str) -> Params:
    """Build the query parameters for a search with an optional filter."""
    params: Params = {}
    if filter != EMPTY_FILTER:
        params["q"] = filter
    return params


def path_segment(value: Union[int, str]) -> str:
    """Render a url argument as a single percent-encoded path segment."""
    return quote(str(value), safe="")


def _decode(response: httpx.Response, response_type: Any) -> Any:
    try:
        return TypeAdapter(response_type).validate_json(response.content)
    except ValidationError as e:
        raise DecodeError(
            f"Invalid response from {response.request.url}: {e}",
            response.status_code,
        ) from e


def _encode(payload: Any) -> Any:
    if isinstance(payload, NimbusecModel):
        return payload.to_payload()
    if isinstance(payload, (list, tuple)):
        return [_encode(item) for item in payload]
    return payload


class NimbusecAPIClient:
    """Base API client with request signing and common HTTP functionality."""

    def __init__(
        self,
        url: str = DEFAULT_API,
        key: str = "",
        secret: str = "",
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize base API client.

        Args:
            url: Base URL of the nimbusec API
            key: OAuth consumer key
            secret: OAuth consumer secret
            timeout: Request timeout in seconds, None waits forever
            transport: Optional httpx transport, used instead of the network

        Raises:
            ConfigurationError: If the base URL cannot be parsed
        """
        self.config = ClientConfig(url=url, key=key, secret=secret, timeout=timeout)
        try:
            self._base_url = httpx.URL(url)
        except httpx.InvalidURL as e:
            raise ConfigurationError(f"Invalid API url {url!r}: {e}") from e
        self._transport = transport
        self._session: Optional[httpx.AsyncClient] = None

    @classmethod
    def from_config(
        cls: Type["ClientT"],
        config: ClientConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "ClientT":
        """Create a client from a loaded ClientConfig."""
        return cls(
            url=config.url,
            key=config.key,
            secret=config.secret,
            timeout=config.timeout,
            transport=transport,
        )

    @property
    def session(self) -> httpx.AsyncClient:
        """Get or create the signing HTTP session."""
        if self._session is None or self._session.is_closed:
            # two-legged OAuth: consumer credentials only, no access token.
            # Non-form bodies are dropped by the signer unless forced.
            auth = OAuth1Auth(
                self.config.key, self.config.secret, force_include_body=True
            )
            self._session = httpx.AsyncClient(
                auth=auth,
                timeout=httpx.Timeout(self.config.timeout),
                transport=self._transport,
                follow_redirects=True,
            )
        return self._session

    def _build_url(self, relpath: str, *args: Union[int, str]) -> str:
        """Build the fully qualified url for a path relative to the API base.

        String arguments are percent-encoded as a single path segment.
        Returns an empty string if the url cannot be resolved.
        """
        segments = [path_segment(arg) for arg in args]
        try:
            return str(self._base_url.join(relpath.format(*segments)))
        except httpx.InvalidURL:
            return ""

    async def _send(
        self,
        method: str,
        url: str,
        params: Optional[Params] = None,
        **kwargs: Any,
    ) -> httpx.Response:
        """Issue a signed request and raise the error it represents, if any.

        Raises:
            ConfigurationError: If url is empty
            ServiceError: If the API rejected the request with a message
            UnexpectedStatusError: If the API rejected the request without one
            httpx.TransportError: If the request could not be performed
        """
        if not url:
            raise ConfigurationError(
                f"Cannot build request url from base {self.config.url!r}"
            )

        logger.debug(f"{method} {url} params={params or {}}")
        response = await self.session.request(method, url, params=params or {}, **kwargs)

        error = classify_response(
            response.status_code, response.headers, response.reason_phrase
        )
        if error is not None:
            logger.debug(
                f"{method} {url} failed with HTTP {response.status_code}: {error}"
            )
            raise error

        return response

    async def _get(self, url: str, params: Params, response_type: Type[T]) -> T:
        """GET with a JSON response."""
        response = await self._send("GET", url, params)
        return _decode(response, response_type)  # type: ignore[no-any-return]

    async def _post(
        self, url: str, params: Params, payload: Any, response_type: Type[T]
    ) -> T:
        """POST a JSON payload and decode the JSON response."""
        response = await self._send("POST", url, params, json=_encode(payload))
        return _decode(response, response_type)  # type: ignore[no-any-return]

    async def _post_no_content(self, url: str, params: Params, payload: Any) -> None:
        """POST a JSON payload when only the side effect matters."""
        await self._send("POST", url, params, json=_encode(payload))

    async def _put(
        self, url: str, params: Params, payload: Any, response_type: Type[T]
    ) -> T:
        """PUT a JSON payload and decode the JSON response."""
        response = await self._send("PUT", url, params, json=_encode(payload))
        return _decode(response, response_type)  # type: ignore[no-any-return]

    async def _put_no_content(self, url: str, params: Params, payload: Any) -> None:
        """PUT a JSON payload when only the side effect matters."""
        await self._send("PUT", url, params, json=_encode(payload))

    async def _delete(self, url: str, params: Params) -> None:
        """DELETE, discarding the response body."""
        await self._send("DELETE", url, params)

    async def _get_text(self, url: str, params: Params) -> str:
        """GET with a plain text response."""
        response = await self._send("GET", url, params)
        return response.text

    async def _put_text(self, url: str, params: Params, payload: str) -> str:
        """PUT a plain text payload and return the plain text response."""
        response = await self._send(
            "PUT",
            url,
            params,
            content=payload.encode("utf-8"),
            headers={"Content-Type": "text/plain"},
        )
        return response.text

    async def _get_bytes(self, url: str, params: Params) -> bytes:
        """GET with a raw binary response."""
        response = await self._send("GET", url, params)
        return response.content

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session and not self._session.is_closed:
            await self._session.aclose()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()


ClientT = TypeVar("ClientT", bound=NimbusecAPIClient)
