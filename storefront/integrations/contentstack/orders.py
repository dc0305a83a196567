"""
Checkout and order notification.

Placing an order records a `notify_user` entry in Contentstack, which triggers
the customer e-mail. The notification runs as a background task: the order is
confirmed whether or not the notification succeeds, and the task result says
which one happened.
"""

from __future__ import annotations

import asyncio
import logging
import random
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional

from storefront.integrations.clients.real_http.contentstack import ContentstackClient
from storefront.integrations.contentstack.query import entries_endpoint
from storefront.utils.config_loader import OrderNotificationSettings

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


@dataclass
class CartLine:
    product_id: str
    product_name: Optional[str]
    price: float
    qty: int = 1


@dataclass
class NotificationResult:
    order_id: str
    success: bool
    response: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None


@dataclass
class OrderConfirmation:
    order_id: str
    total: float
    email: str
    notification: "asyncio.Task[NotificationResult]"


def cart_total(lines: Iterable[CartLine]) -> float:
    return sum(line.price * line.qty for line in lines)


def generate_order_id() -> str:
    return f"order{random.randint(0, 999999)}"


def validate_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email or ""))


class OrderNotifier:
    def __init__(self, client: ContentstackClient, settings: OrderNotificationSettings) -> None:
        self.client = client
        self.settings = settings

    @property
    def endpoint(self) -> str:
        ct = self.settings.content_type
        return f"{entries_endpoint(ct)}?form_uid={ct}&locale={self.settings.locale}"

    def build_payload(self, order_id: str, email: str, total: float) -> Dict[str, Any]:
        return {
            "entry": {
                "title": order_id,
                "email_id": email,
                "customer_name": self.settings.customer_name,
                "order_id": order_id,
                "order_total": total,
                "company_name": self.settings.company_name,
                "year": self.settings.year,
                "tags": [],
            }
        }

    async def notify(self, order_id: str, email: str, total: float) -> Dict[str, Any]:
        response = await self.client.request(
            self.endpoint,
            method="POST",
            headers={"accept": "application/json, text/plain, */*"},
            json_body=self.build_payload(order_id, email, total),
        )
        logger.info("Order notification sent for %s", order_id)
        return response

    async def _notify_safely(self, order_id: str, email: str, total: float) -> NotificationResult:
        try:
            response = await self.notify(order_id, email, total)
        except Exception as e:
            logger.error("Error sending order notification for %s: %s", order_id, e)
            return NotificationResult(order_id=order_id, success=False, error=str(e))
        return NotificationResult(order_id=order_id, success=True, response=response)

    def dispatch(self, order_id: str, email: str, total: float) -> "asyncio.Task[NotificationResult]":
        return asyncio.create_task(self._notify_safely(order_id, email, total))


class CheckoutService:
    def __init__(self, notifier: OrderNotifier) -> None:
        self.notifier = notifier

    def place_order(self, lines: Iterable[CartLine], email: str) -> OrderConfirmation:
        """
        Confirm an order and start the customer notification in the background.

        Must be called from a running event loop.

        Raises:
            ValueError: If the cart is empty or the e-mail address is invalid
        """
        lines = list(lines)
        if not lines:
            raise ValueError("Cart is empty")
        email = (email or "").strip()
        if not email:
            raise ValueError("Please enter your email address")
        if not validate_email(email):
            raise ValueError("Please enter a valid email address")

        order_id = generate_order_id()
        total = cart_total(lines)
        task = self.notifier.dispatch(order_id, email, total)
        logger.info("Order %s confirmed (%d lines, total=%s)", order_id, len(lines), total)
        return OrderConfirmation(order_id=order_id, total=total, email=email, notification=task)
