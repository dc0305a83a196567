"""Error types and user-facing error payloads for the storefront content layer."""
from typing import Any, Dict, Optional
import logging

logger = logging.getLogger(__name__)


class StorefrontError(Exception):
    def __init__(self, message: str, *, payload: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.payload = payload or {}


class ConfigurationError(StorefrontError):
    """Required Contentstack credentials are missing."""


class ApiError(StorefrontError):
    """The CMS answered with a non-success status, or could not be reached."""

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, payload=payload)
        self.status_code = status_code


class NotFoundError(ApiError):
    """A single requested entry does not exist."""


class ErrorHandler:
    def handle_exception(self, exc: Exception, context: Dict[str, Any] = None) -> Dict[str, Any]:
        if isinstance(exc, NotFoundError):
            logger.info("Requested content not found: %s", exc)
            message = "The requested content could not be found."
        elif isinstance(exc, ConfigurationError):
            logger.error("Storefront is misconfigured: %s", exc)
            message = "The store is temporarily unavailable. Please try again later."
        else:
            logger.error("Unhandled exception in storefront content layer: %s", exc, exc_info=True)
            message = "We couldn't load this content right now. Please try again later."
        return {
            "message": message,
            "fallback": True,
            "metadata": {"error": str(exc), "context": context or {}},
        }
