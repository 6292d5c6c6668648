"""
Tests for NimbusecAPIClient request plumbing.

Covers URL building, the x-nimbusec-error interpretation, request signing
and the JSON / plain-text helpers, against an in-process fake API.
"""

import json
from unittest.mock import patch

import httpx
import pytest
from pydantic import ValidationError

from nimbusec import Domain, NimbusecAPI
from nimbusec.api_clients.base_client import (
    ERROR_HEADER,
    NimbusecAPIClient,
    classify_response,
    filter_params,
    path_segment,
)
from nimbusec.exceptions import (
    ConfigurationError,
    DecodeError,
    ServiceError,
    UnexpectedStatusError,
)


class TestClassifyResponse:
    """Test the status/header decision function."""

    def test_success_status_is_not_an_error(self):
        assert classify_response(200, {}) is None
        assert classify_response(204, {ERROR_HEADER: "ignored"}) is None
        assert classify_response(299, {}) is None

    def test_error_header_becomes_service_error_with_exact_message(self):
        error = classify_response(404, {ERROR_HEADER: "domain not found"}, "Not Found")

        assert isinstance(error, ServiceError)
        assert str(error) == "domain not found"
        assert error.status_code == 404

    def test_redirect_status_is_treated_as_failure(self):
        error = classify_response(302, {}, "Found")

        assert isinstance(error, UnexpectedStatusError)
        assert error.status_code == 302

    def test_missing_header_keeps_transport_reason(self):
        error = classify_response(500, {}, "Internal Server Error")

        assert isinstance(error, UnexpectedStatusError)
        assert not isinstance(error, ServiceError)
        assert str(error) == "Internal Server Error"
        assert error.status_code == 500

    def test_missing_header_and_reason_gives_empty_message(self):
        error = classify_response(503, {})

        assert isinstance(error, UnexpectedStatusError)
        assert str(error) == ""


class TestFilterParams:
    def test_empty_filter_sends_no_query(self):
        assert filter_params("") == {}

    def test_filter_is_sent_verbatim(self):
        assert filter_params('name eq "example.com"') == {"q": 'name eq "example.com"'}


class TestBuildUrl:
    """Test resolving relative paths against the API base url."""

    @pytest.fixture
    def client(self):
        return NimbusecAPIClient(url="https://api.nimbusec.test/", key="k", secret="s")

    def test_formats_integer_arguments(self, client):
        url = client._build_url("/v2/domain/{}/result/{}", 12, 34)
        assert url == "https://api.nimbusec.test/v2/domain/12/result/34"

    def test_string_arguments_are_one_path_segment(self, client):
        url = client._build_url("/v2/domain/{}/config/{}", 3, "a/b c")
        assert url == "https://api.nimbusec.test/v2/domain/3/config/a%2Fb%20c"

    def test_path_segment_quotes_separators(self):
        assert path_segment("a/b?c") == "a%2Fb%3Fc"
        assert path_segment(42) == "42"

    def test_absolute_path_replaces_base_path(self):
        client = NimbusecAPIClient(url="https://host.test/prefix/", key="k", secret="s")
        assert client._build_url("/v2/bundle") == "https://host.test/v2/bundle"

    def test_relative_path_is_resolved_below_base_path(self):
        client = NimbusecAPIClient(url="https://host.test/prefix/", key="k", secret="s")
        assert client._build_url("v2/bundle") == "https://host.test/prefix/v2/bundle"


class TestRequestHelpers:
    """Test the typed helpers against the fake API."""

    @pytest.mark.asyncio
    async def test_service_error_message_is_surfaced_verbatim(
        self, api, fake_server, make_error_response
    ):
        fake_server.route("GET", "/v2/domain/7", make_error_response(404, "domain not found"))

        with pytest.raises(ServiceError) as exc_info:
            await api.get_domain(7)

        assert str(exc_info.value) == "domain not found"
        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_error_without_header_is_unexpected_status(
        self, api, fake_server, make_error_response
    ):
        fake_server.route("GET", "/v2/domain/7", make_error_response(500))

        with pytest.raises(UnexpectedStatusError) as exc_info:
            await api.get_domain(7)

        assert exc_info.value.status_code == 500
        assert str(exc_info.value) == "Internal Server Error"

    @pytest.mark.asyncio
    async def test_malformed_json_is_decode_error(self, api, fake_server):
        fake_server.route("GET", "/v2/domain/7", httpx.Response(200, text="{not json"))

        with pytest.raises(DecodeError) as exc_info:
            await api.get_domain(7)

        assert not isinstance(exc_info.value, ServiceError)
        assert exc_info.value.status_code == 200
        assert isinstance(exc_info.value.__cause__, ValidationError)

    @pytest.mark.asyncio
    async def test_wrong_json_shape_is_decode_error(self, api, fake_server):
        fake_server.route("GET", "/v2/domain", httpx.Response(200, json={"id": 1}))

        with pytest.raises(DecodeError):
            await api.find_domains()

    @pytest.mark.asyncio
    async def test_service_error_is_raised_before_decoding(
        self, api, fake_server
    ):
        fake_server.route(
            "GET",
            "/v2/domain/7",
            httpx.Response(403, text="<html>nope</html>", headers={ERROR_HEADER: "forbidden"}),
        )

        with pytest.raises(ServiceError, match="^forbidden$"):
            await api.get_domain(7)

    @pytest.mark.asyncio
    async def test_transport_error_propagates_unchanged(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with NimbusecAPI(
            url="https://api.nimbusec.test/",
            key="k",
            secret="s",
            transport=httpx.MockTransport(handler),
        ) as api:
            with pytest.raises(httpx.ConnectError, match="connection refused"):
                await api.find_domains()

    @pytest.mark.asyncio
    async def test_requests_are_oauth_signed(self, api, fake_server):
        await api.find_domains()

        authorization = fake_server.last_request.headers["Authorization"]
        assert authorization.startswith("OAuth ")
        assert 'oauth_consumer_key="test-key"' in authorization
        assert 'oauth_signature_method="HMAC-SHA1"' in authorization
        assert "oauth_token=" not in authorization

    @pytest.mark.asyncio
    async def test_post_sends_json_body_without_unset_fields(self, api, fake_server):
        await api.create_domain(Domain(name="example.com", scheme="https"))

        request = fake_server.last_request
        assert request.method == "POST"
        assert request.headers["Content-Type"] == "application/json"
        body = json.loads(request.content)
        assert "id" not in body
        assert body["name"] == "example.com"
        assert body["fastScans"] == []

    @pytest.mark.asyncio
    async def test_signed_put_keeps_json_body(self, api, fake_server):
        created = await api.create_domain(Domain(name="example.com"))

        await api.update_domain(created.id, Domain(name="example.com", scheme="https"))

        request = fake_server.last_request
        assert request.method == "PUT"
        assert request.headers["Authorization"].startswith("OAuth ")
        assert int(request.headers["Content-Length"]) == len(request.content) > 0
        assert json.loads(request.content)["scheme"] == "https"

    @pytest.mark.asyncio
    async def test_post_no_content_ignores_response_body(self, api, fake_server):
        fake_server.route("POST", "/v2/anything", httpx.Response(201, text="not json"))

        url = api._build_url("/v2/anything")
        assert await api._post_no_content(url, {}, {"a": 1}) is None

    @pytest.mark.asyncio
    async def test_put_text_sends_plain_text(self, api, fake_server):
        def echo(request):
            return httpx.Response(200, text=request.content.decode())

        fake_server.route("PUT", "/v2/domain/1/config/robots", echo)

        result = await api.set_domain_config(1, "robots", "disallow")

        assert result == "disallow"
        assert fake_server.last_request.headers["Content-Type"] == "text/plain"
        assert fake_server.last_request.content == b"disallow"

    @pytest.mark.asyncio
    async def test_empty_url_is_configuration_error(self, api, fake_server):
        with patch.object(api, "_build_url", return_value=""):
            with pytest.raises(ConfigurationError):
                await api.get_domain(1)

        assert fake_server.requests == []


class TestClientLifecycle:
    @pytest.mark.asyncio
    async def test_context_manager_closes_session(self, fake_server):
        async with NimbusecAPI(
            url="https://api.nimbusec.test/",
            key="k",
            secret="s",
            transport=httpx.MockTransport(fake_server),
        ) as api:
            await api.find_domains()
            session = api.session

        assert session.is_closed

    def test_configuration_is_immutable(self):
        api = NimbusecAPI(url="https://api.nimbusec.test/", key="k", secret="s")

        with pytest.raises(ValidationError):
            api.config.key = "other"  # type: ignore[misc]

    def test_from_config_uses_loaded_values(self):
        from nimbusec.config import ClientConfig

        config = ClientConfig(url="https://other.test/", key="k", secret="s", timeout=5)
        api = NimbusecAPI.from_config(config)

        assert api.config == config
        assert api._build_url("/v2/user") == "https://other.test/v2/user"
