"""
Utility modules for the storefront
"""
from .config_loader import ContentstackSettings, OrderNotificationSettings, StorefrontConfig, load_config
from .request_generation import RequestGeneration, StaleResultError

__all__ = [
    'ContentstackSettings',
    'OrderNotificationSettings',
    'StorefrontConfig',
    'load_config',
    'RequestGeneration',
    'StaleResultError',
]
