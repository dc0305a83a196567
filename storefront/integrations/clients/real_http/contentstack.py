"""
Contentstack HTTP Client.

Used for every call to the Contentstack management API. Attaches the API key
and token headers, scopes requests to the configured branch, and turns every
non-success response into a single ApiError.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional
from urllib.parse import parse_qsl, urlencode

import httpx

from storefront.errors import ApiError, NotFoundError
from storefront.utils.config_loader import ContentstackSettings

logger = logging.getLogger(__name__)

ERROR_MESSAGE_KEYS = ("error_message", "error", "message")


class ContentstackClient:
    def __init__(
        self,
        settings: ContentstackSettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.settings = settings
        self.base_url = settings.base_url.rstrip("/")
        self.timeout_seconds = settings.timeout_seconds
        self._transport = transport

    def build_url(self, endpoint: str) -> str:
        base, _, existing_query = f"{self.base_url}{endpoint}".partition("?")
        params = parse_qsl(existing_query, keep_blank_values=True)
        branch = (self.settings.branch or "").strip()
        if branch and not any(key == "branch" for key, _ in params):
            params.append(("branch", branch))
        query = urlencode(params)
        return f"{base}?{query}" if query else base

    def _headers(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        headers = {
            "api_key": self.settings.api_key or "",
            "authorization": self.settings.management_token or "",
            "Content-Type": "application/json",
        }
        headers.update(extra or {})
        return headers

    async def request(
        self,
        endpoint: str,
        method: str = "GET",
        headers: Optional[Dict[str, str]] = None,
        json_body: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        self.settings.require_credentials()

        url = self.build_url(endpoint)
        base, _, query = url.partition("?")
        logger.info("Contentstack %s %s%s", method, base, f"?{query[:200]}" if query else "")

        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self._transport) as client:
                response = await client.request(method, url, json=json_body, headers=self._headers(headers))
        except httpx.RequestError as e:
            logger.error("Request error connecting to Contentstack: %s", e)
            raise ApiError(f"Contentstack API unreachable: {e}") from e

        logger.debug("Contentstack response status: %s", response.status_code)

        if not response.is_success:
            raise self._error_from_response(response)

        if not response.content:
            return {}
        try:
            data = response.json()
        except ValueError as e:
            logger.error("Could not parse Contentstack response: %r", response.text[:200])
            raise ApiError(
                f"Contentstack API returned an invalid response: {response.status_code}",
                status_code=response.status_code,
            ) from e
        if not isinstance(data, dict):
            raise ApiError(
                f"Contentstack API returned an unexpected response: {type(data).__name__}",
                status_code=response.status_code,
            )
        return data

    @staticmethod
    def _error_from_response(response: httpx.Response) -> ApiError:
        error_data: Dict[str, Any] = {}
        try:
            parsed = json.loads(response.text)
            if isinstance(parsed, dict):
                error_data = parsed
        except ValueError:
            logger.error("Could not parse Contentstack error response: %r", response.text[:200])

        message = next(
            (str(error_data[key]) for key in ERROR_MESSAGE_KEYS if error_data.get(key)),
            f"Contentstack API error: {response.status_code} {response.reason_phrase}",
        )
        logger.error("Contentstack API error (%s): %s", response.status_code, message)

        error_cls = NotFoundError if response.status_code == 404 else ApiError
        return error_cls(message, status_code=response.status_code, payload=error_data)
