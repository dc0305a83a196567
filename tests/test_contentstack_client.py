import json

import httpx
import pytest

from storefront.errors import ApiError, ConfigurationError, NotFoundError
from storefront.integrations.clients.real_http.contentstack import ContentstackClient
from storefront.utils.config_loader import ContentstackSettings

from tests.conftest import params_of


@pytest.mark.asyncio
async def test_request_sends_credentials_and_returns_json(client, fake_cms):
    fake_cms.entries("product", {"entries": [{"uid": "p1"}], "count": 1})

    data = await client.request("/content_types/product/entries")

    assert data == {"entries": [{"uid": "p1"}], "count": 1}
    sent = fake_cms.requests[0]
    assert sent.headers["api_key"] == "key-123"
    assert sent.headers["authorization"] == "token-abc"
    assert sent.headers["content-type"] == "application/json"
    assert sent.url.query == b""


@pytest.mark.asyncio
async def test_missing_credentials_fail_before_any_network_call(fake_cms):
    client = ContentstackClient(ContentstackSettings(api_key="key"), transport=httpx.MockTransport(fake_cms))

    with pytest.raises(ConfigurationError):
        await client.request("/content_types/product/entries")
    assert fake_cms.requests == []


@pytest.mark.asyncio
async def test_branch_is_merged_with_existing_query_parameters(fake_cms):
    settings = ContentstackSettings(api_key="k", management_token="t", branch="develop")
    client = ContentstackClient(settings, transport=httpx.MockTransport(fake_cms))
    fake_cms.entries("product", {"entries": []})

    await client.request("/content_types/product/entries?limit=5&skip=10")

    params = params_of(fake_cms.requests[0])
    assert params["branch"] == ["develop"]
    assert params["limit"] == ["5"]
    assert params["skip"] == ["10"]


@pytest.mark.asyncio
async def test_branch_already_in_endpoint_is_not_overwritten(fake_cms):
    settings = ContentstackSettings(api_key="k", management_token="t", branch="develop")
    client = ContentstackClient(settings, transport=httpx.MockTransport(fake_cms))
    fake_cms.entries("product", {"entries": []})

    await client.request("/content_types/product/entries?branch=main")

    assert params_of(fake_cms.requests[0])["branch"] == ["main"]


def test_build_url_without_branch_leaves_endpoint_untouched(settings):
    client = ContentstackClient(settings)
    assert client.build_url("/content_types/home/entries/blt1") == (
        "https://api.contentstack.io/v3/content_types/home/entries/blt1"
    )


@pytest.mark.parametrize(
    "body, expected",
    [
        ({"error_message": "Bad filter", "error": "ignored", "message": "ignored"}, "Bad filter"),
        ({"error": "Rate limited", "message": "ignored"}, "Rate limited"),
        ({"message": "Plain message"}, "Plain message"),
        ({"errors": {"query": ["bad"]}}, "Contentstack API error: 400 Bad Request"),
    ],
)
@pytest.mark.asyncio
async def test_error_message_aliases_are_checked_in_order(client, fake_cms, body, expected):
    fake_cms.entries("product", (400, body))

    with pytest.raises(ApiError) as exc_info:
        await client.request("/content_types/product/entries")

    assert str(exc_info.value) == expected
    assert exc_info.value.status_code == 400


@pytest.mark.asyncio
async def test_unparseable_error_body_falls_back_to_status_line(client, fake_cms):
    fake_cms.entries("product", lambda request: httpx.Response(500, text="<html>oops</html>"))

    with pytest.raises(ApiError) as exc_info:
        await client.request("/content_types/product/entries")

    assert str(exc_info.value) == "Contentstack API error: 500 Internal Server Error"
    assert exc_info.value.payload == {}


@pytest.mark.asyncio
async def test_404_raises_not_found(client, fake_cms):
    with pytest.raises(NotFoundError):
        await client.request("/content_types/home/entries/missing")


@pytest.mark.asyncio
async def test_transport_failure_becomes_api_error(settings):
    def broken(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = ContentstackClient(settings, transport=httpx.MockTransport(broken))
    with pytest.raises(ApiError) as exc_info:
        await client.request("/content_types/product/entries")
    assert exc_info.value.status_code is None


@pytest.mark.asyncio
async def test_post_sends_json_body_and_extra_headers(client, fake_cms):
    fake_cms.add("/v3/content_types/notify_user/entries", {"notice": "Entry created"}, method="POST")

    data = await client.request(
        "/content_types/notify_user/entries",
        method="POST",
        headers={"accept": "application/json"},
        json_body={"entry": {"title": "order1"}},
    )

    assert data == {"notice": "Entry created"}
    sent = fake_cms.requests[0]
    assert sent.method == "POST"
    assert sent.headers["accept"] == "application/json"
    assert json.loads(sent.read()) == {"entry": {"title": "order1"}}


@pytest.mark.asyncio
async def test_empty_success_body_returns_empty_dict(client, fake_cms):
    fake_cms.entries("product", lambda request: httpx.Response(204))
    assert await client.request("/content_types/product/entries") == {}


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, text="<html>maintenance</html>"),
        httpx.Response(200, json=[{"uid": "p1"}]),
    ],
)
@pytest.mark.asyncio
async def test_success_body_that_is_not_a_json_object_raises_api_error(client, fake_cms, response):
    fake_cms.entries("product", lambda request: response)

    with pytest.raises(ApiError) as exc_info:
        await client.request("/content_types/product/entries")
    assert exc_info.value.status_code == 200
