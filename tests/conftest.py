"""Pytest fixtures: a fake Contentstack API behind httpx.MockTransport."""

import json
from typing import Any, Callable, Dict, List, Optional, Tuple
from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from storefront.integrations.clients.real_http.contentstack import ContentstackClient
from storefront.integrations.contentstack.entries import CatalogService, EntriesService
from storefront.utils.config_loader import ContentstackSettings

Handler = Callable[[httpx.Request], httpx.Response]


class FakeContentstack:
    """
    Routes requests by (method, path). A route is either a static JSON body,
    a callable taking the request, or an (status, body) tuple.
    Every request is recorded for assertions.
    """

    def __init__(self):
        self.routes: Dict[Tuple[str, str], Any] = {}
        self.requests: List[httpx.Request] = []

    def add(self, path: str, response: Any, method: str = "GET") -> None:
        self.routes[(method, path)] = response

    def entries(self, content_type: str, response: Any) -> None:
        self.add(f"/v3/content_types/{content_type}/entries", response)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"error_message": f"No route for {request.url.path}"})
        if callable(route):
            route = route(request)
        if isinstance(route, httpx.Response):
            return route
        if isinstance(route, tuple):
            status, body = route
            return httpx.Response(status, json=body)
        return httpx.Response(200, json=route)

    def queries(self, content_type: Optional[str] = None) -> List[Optional[dict]]:
        """Decoded `query` parameters of recorded requests, in order."""
        out = []
        for request in self.requests:
            if content_type and f"/content_types/{content_type}/" not in request.url.path + "/":
                continue
            out.append(query_of(request))
        return out


def query_of(request: httpx.Request) -> Optional[dict]:
    values = parse_qs(urlparse(str(request.url)).query).get("query")
    return json.loads(values[0]) if values else None


def params_of(request: httpx.Request) -> Dict[str, List[str]]:
    return parse_qs(urlparse(str(request.url)).query)


@pytest.fixture
def settings():
    return ContentstackSettings(api_key="key-123", management_token="token-abc")


@pytest.fixture
def fake_cms():
    return FakeContentstack()


@pytest.fixture
def client(settings, fake_cms):
    return ContentstackClient(settings, transport=httpx.MockTransport(fake_cms))


@pytest.fixture
def entries_service(client):
    return EntriesService(client)


@pytest.fixture
def catalog(entries_service):
    return CatalogService(entries_service)
