"""
Shared pytest fixtures for nimbusec client tests.

Provides an in-process fake of the nimbusec API served through
httpx.MockTransport, so tests exercise the real client, OAuth signing and
JSON decoding without network access.
"""

import itertools
import json
import re
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest
import pytest_asyncio

from nimbusec import NimbusecAPI

TEST_API_URL = "https://api.nimbusec.test/"

# collection path -> entity noun used in error messages
COLLECTIONS = {
    "/v2/domain": "domain",
    "/v2/user": "user",
    "/v2/bundle": "bundle",
    "/v2/agent/token": "token",
}

FILTER_PATTERN = re.compile(r'^(\w+) eq "(.*)"$')


class FakeNimbusecServer:
    """Minimal stateful stand-in for the nimbusec API.

    Implements the collection conventions (POST/GET on the collection,
    GET/PUT/DELETE on items, `upsert` flag, `name eq "..."` filters) for
    domains, users, bundles and tokens. Other paths can be answered with
    canned responses through `route`.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.store: Dict[str, Dict[int, Dict[str, Any]]] = {
            path: {} for path in COLLECTIONS
        }
        self.routes: Dict[tuple, Callable[[httpx.Request], httpx.Response]] = {}
        self._ids = itertools.count(1)

    def route(self, method: str, path: str, response: Any) -> None:
        """Answer method+path with a fixed httpx.Response or a callable."""
        if isinstance(response, httpx.Response):
            fixed = response
            self.routes[(method, path)] = lambda request: fixed
        else:
            self.routes[(method, path)] = response

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        handler = self.routes.get((request.method, path))
        if handler is not None:
            return handler(request)

        for collection, noun in COLLECTIONS.items():
            if path == collection:
                return self._handle_collection(request, collection, noun)
            if path.startswith(collection + "/"):
                item = path[len(collection) + 1 :]
                if item.isdigit():
                    return self._handle_item(request, collection, noun, int(item))

        return error_response(404, "no such endpoint")

    def _handle_collection(
        self, request: httpx.Request, collection: str, noun: str
    ) -> httpx.Response:
        entities = self.store[collection]

        if request.method == "GET":
            found = list(entities.values())
            query = request.url.params.get("q")
            if query is not None:
                match = FILTER_PATTERN.match(query)
                if not match:
                    return error_response(400, f"invalid filter {query}")
                field, value = match.groups()
                found = [e for e in found if str(e.get(field)) == value]
            return httpx.Response(200, json=found)

        if request.method == "POST":
            body = json.loads(request.content)
            key = "login" if noun == "user" else "name"
            existing = next(
                (e for e in entities.values() if e.get(key) == body.get(key)), None
            )
            upsert = request.url.params.get("upsert")
            if existing is not None:
                if upsert is None:
                    return error_response(409, f"{noun} already exists")
                if upsert == "true":
                    existing.update({k: v for k, v in body.items() if k != "id"})
                return httpx.Response(200, json=existing)
            body["id"] = next(self._ids)
            body.pop("password", None)
            body.pop("signatureKey", None)
            entities[body["id"]] = body
            return httpx.Response(200, json=body)

        return error_response(405, "method not allowed")

    def _handle_item(
        self, request: httpx.Request, collection: str, noun: str, item_id: int
    ) -> httpx.Response:
        entities = self.store[collection]
        if item_id not in entities:
            return error_response(404, f"{noun} not found")

        if request.method == "GET":
            return httpx.Response(200, json=entities[item_id])
        if request.method == "PUT":
            body = json.loads(request.content)
            body["id"] = item_id
            body.pop("password", None)
            body.pop("signatureKey", None)
            entities[item_id] = body
            return httpx.Response(200, json=body)
        if request.method == "DELETE":
            del entities[item_id]
            return httpx.Response(204)

        return error_response(405, "method not allowed")


def error_response(status_code: int, message: Optional[str] = None) -> httpx.Response:
    """Build a rejected response, with the nimbusec error header if message is set."""
    headers = {"x-nimbusec-error": message} if message else {}
    return httpx.Response(status_code, headers=headers)


@pytest.fixture
def fake_server() -> FakeNimbusecServer:
    """Fresh fake nimbusec API for one test."""
    return FakeNimbusecServer()


@pytest.fixture
def make_error_response():
    """Factory for rejected responses."""
    return error_response


@pytest_asyncio.fixture
async def api(fake_server):
    """NimbusecAPI client wired to the fake server."""
    client = NimbusecAPI(
        url=TEST_API_URL,
        key="test-key",
        secret="test-secret",
        transport=httpx.MockTransport(fake_server),
    )
    yield client
    await client.close()
