"""
Storefront configuration loader (Contentstack credentials, order notifications, local storage).
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from storefront.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config" / "storefront.yml"

# env var -> (section, field); first non-empty env var wins for a field
ENV_OVERRIDES = (
    ("CONTENTSTACK_API_KEY", "contentstack", "api_key"),
    ("CONTENTSTACK_MANAGEMENT_TOKEN", "contentstack", "management_token"),
    ("CONTENTSTACK_DELIVERY_TOKEN", "contentstack", "management_token"),
    ("CONTENTSTACK_ENVIRONMENT", "contentstack", "environment"),
    ("CONTENTSTACK_BRANCH", "contentstack", "branch"),
    ("CONTENTSTACK_BASE_URL", "contentstack", "base_url"),
    ("CONTENTSTACK_HOME_ENTRY_UID", "contentstack", "home_entry_uid"),
    ("STOREFRONT_PREFERENCES_PATH", None, "preferences_path"),
)


class ContentstackSettings(BaseModel):
    api_key: Optional[str] = None
    management_token: Optional[str] = None
    environment: Optional[str] = None
    branch: Optional[str] = None
    base_url: str = "https://api.contentstack.io/v3"
    timeout_seconds: float = Field(default=20.0, gt=0)
    home_entry_uid: str = "bltbfc67d1a1215b35c"

    def require_credentials(self) -> None:
        if not (self.api_key or "").strip() or not (self.management_token or "").strip():
            raise ConfigurationError("Contentstack API Key and Management Token are required")


class OrderNotificationSettings(BaseModel):
    content_type: str = "notify_user"
    locale: str = "en-us"
    company_name: str = "Multimart LTD"
    year: str = "2006"
    customer_name: str = "Multimart Customer"


class StorefrontConfig(BaseModel):
    contentstack: ContentstackSettings = Field(default_factory=ContentstackSettings)
    notifications: OrderNotificationSettings = Field(default_factory=OrderNotificationSettings)
    preferences_path: Optional[str] = None


def _apply_env(data: Dict[str, Any], env: Mapping[str, str]) -> Dict[str, Any]:
    seen = set()
    for var, section, key in ENV_OVERRIDES:
        value = (env.get(var) or "").strip()
        if not value or (section, key) in seen:
            continue
        seen.add((section, key))
        target = data.setdefault(section, {}) if section else data
        if target is None:
            target = data[section] = {}
        target[key] = value
    return data


def load_config(config_path: Optional[Path] = None, env: Optional[Mapping[str, str]] = None) -> StorefrontConfig:
    """
    Load and validate storefront configuration.

    Values come from an optional YAML file, overlaid with environment variables.
    A missing YAML file is not an error; credentials are checked lazily by the
    HTTP client so the app can still report a configuration error cleanly.
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH
    if env is None:
        env = os.environ

    data: Dict[str, Any] = {}
    if config_path.exists():
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    else:
        logger.debug("Storefront config file not found at %s, using environment only", config_path)

    data = _apply_env(data, env)

    try:
        cfg = StorefrontConfig(**data)
        logger.info("Loaded storefront config (branch=%s)", cfg.contentstack.branch or "-")
        return cfg
    except ValidationError as e:
        logger.error("Storefront config validation failed: %s", e)
        raise
