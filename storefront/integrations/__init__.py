"""
Integrations layer.
This package contains all code used to communicate with Contentstack:
- the HTTP client (credentials, branch scoping, error surfacing)
- entry retrieval, search and fallback chains
- home page reference resolution
- order notifications

Key rule:
- Routes MUST NOT call the Contentstack API directly.
- Raw entries are turned into contracts (contracts/catalog.py)
  by policy/entry_transformers.py before they leave this package.
"""

from .contracts.catalog import (
    Banner,
    ContactInfo,
    Footer,
    HomePageDocument,
    HomeSections,
    Product,
    SearchResult,
    Service,
)

__all__ = [
    "Banner", "ContactInfo", "Footer", "HomePageDocument", "HomeSections",
    "Product", "SearchResult", "Service",
]
