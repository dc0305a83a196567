"""Tests for checkout and the background order notification."""

import json

import httpx
import pytest

from storefront.integrations.clients.real_http.contentstack import ContentstackClient
from storefront.integrations.contentstack.orders import (
    CartLine,
    CheckoutService,
    OrderNotifier,
    cart_total,
    generate_order_id,
    validate_email,
)
from storefront.utils.config_loader import ContentstackSettings, OrderNotificationSettings

from tests.conftest import params_of

NOTIFY_PATH = "/v3/content_types/notify_user/entries"
LINES = [CartLine("p1", "Modern Sofa", 193, 2), CartLine("p2", "Arm Chair", 80, 1)]


@pytest.fixture
def notifier(client):
    return OrderNotifier(client, OrderNotificationSettings(customer_name="Jane Doe"))


@pytest.fixture
def checkout(notifier):
    return CheckoutService(notifier)


def test_cart_total_and_helpers():
    assert cart_total(LINES) == 466
    assert cart_total([]) == 0
    assert validate_email("jane@example.com")
    assert not validate_email("jane@example")
    assert not validate_email("jane @example.com")
    order_id = generate_order_id()
    assert order_id.startswith("order")
    assert 0 <= int(order_id[len("order"):]) <= 999999


def test_build_payload_carries_fixed_company_metadata(notifier):
    payload = notifier.build_payload("order42", "jane@example.com", 466)
    assert payload == {
        "entry": {
            "title": "order42",
            "email_id": "jane@example.com",
            "customer_name": "Jane Doe",
            "order_id": "order42",
            "order_total": 466,
            "company_name": "Multimart LTD",
            "year": "2006",
            "tags": [],
        }
    }


@pytest.mark.asyncio
async def test_notify_posts_entry_to_form_endpoint(notifier, fake_cms):
    fake_cms.add(NOTIFY_PATH, {"notice": "Entry created successfully."}, method="POST")

    response = await notifier.notify("order42", "jane@example.com", 466)

    assert response == {"notice": "Entry created successfully."}
    sent = fake_cms.requests[0]
    assert sent.method == "POST"
    assert params_of(sent)["form_uid"] == ["notify_user"]
    assert params_of(sent)["locale"] == ["en-us"]
    assert json.loads(sent.read())["entry"]["order_id"] == "order42"


@pytest.mark.asyncio
async def test_place_order_confirms_and_reports_notification_success(checkout, fake_cms):
    fake_cms.add(NOTIFY_PATH, {"notice": "ok"}, method="POST")

    confirmation = checkout.place_order(LINES, " jane@example.com ")
    result = await confirmation.notification

    assert confirmation.total == 466
    assert confirmation.email == "jane@example.com"
    assert result.success is True
    assert result.order_id == confirmation.order_id
    assert result.response == {"notice": "ok"}


@pytest.mark.asyncio
async def test_notification_failure_does_not_block_confirmation(checkout, fake_cms):
    fake_cms.add(NOTIFY_PATH, (422, {"error_message": "Invalid entry"}), method="POST")

    confirmation = checkout.place_order(LINES, "jane@example.com")
    result = await confirmation.notification

    assert confirmation.order_id.startswith("order")
    assert result.success is False
    assert result.error == "Invalid entry"


@pytest.mark.asyncio
async def test_notification_reports_configuration_error(fake_cms):
    client = ContentstackClient(ContentstackSettings(), transport=httpx.MockTransport(fake_cms))
    checkout = CheckoutService(OrderNotifier(client, OrderNotificationSettings()))

    confirmation = checkout.place_order(LINES, "jane@example.com")
    result = await confirmation.notification

    assert result.success is False
    assert "required" in result.error
    assert fake_cms.requests == []


@pytest.mark.parametrize(
    "lines, email, message",
    [
        ([], "jane@example.com", "Cart is empty"),
        (LINES, "   ", "Please enter your email address"),
        (LINES, "not-an-email", "Please enter a valid email address"),
    ],
)
def test_place_order_validation(checkout, lines, email, message):
    with pytest.raises(ValueError, match=message):
        checkout.place_order(lines, email)
