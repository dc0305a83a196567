"""
Entry retrieval services on top of the Contentstack client.

EntriesService works on raw entries (search, batch lookup by uid, full
collection). CatalogService turns them into canonical products, banners,
services and footers and owns the client-side fallback chains.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional
from urllib.parse import quote

from storefront.errors import ConfigurationError, NotFoundError
from storefront.integrations.clients.real_http.contentstack import ContentstackClient
from storefront.integrations.contentstack.query import (
    DEFAULT_LIMIT,
    Query,
    build_search_endpoint,
    clamp_limit,
    entries_endpoint,
    in_,
    or_,
    regex,
)
from storefront.integrations.contracts.catalog import Banner, Footer, Product, SearchResult, Service
from storefront.integrations.policy.entry_transformers import (
    transform_banner_entry,
    transform_footer_entry,
    transform_product_entry,
    transform_service_entry,
)

logger = logging.getLogger(__name__)

PRODUCT_TEXT_FIELDS = ("product_name", "title", "description", "short_description", "full_description")


def unique_uids(uids: Optional[Iterable[Any]]) -> List[str]:
    """De-duplicate uids keeping first-seen order; drop empty and non-string values."""
    seen = set()
    result = []
    for uid in uids or []:
        if not isinstance(uid, str) or not uid.strip() or uid in seen:
            continue
        seen.add(uid)
        result.append(uid)
    return result


class EntriesService:
    def __init__(self, client: ContentstackClient) -> None:
        self.client = client

    async def search_entries(
        self,
        content_type: str,
        query: Optional[Query] = None,
        skip: int = 0,
        limit: int = DEFAULT_LIMIT,
        sort: Optional[str] = None,
        include_count: bool = False,
    ) -> SearchResult:
        endpoint = build_search_endpoint(
            content_type, query, skip=skip, limit=limit, sort=sort, include_count=include_count
        )
        logger.debug(
            "Searching %s entries: query=%s skip=%s limit=%s sort=%s include_count=%s",
            content_type, query, skip, clamp_limit(limit), sort, include_count,
        )
        try:
            response = await self.client.request(endpoint)
        except Exception as e:
            logger.error("Error searching %s entries: %s", content_type, e)
            raise

        entries = response.get("entries") or []
        # count is only as good as the backend reports; without it we only know the page size
        count = response.get("count") or len(entries)
        logger.info("Query on %s returned %d entries (total matching: %d)", content_type, len(entries), count)
        return SearchResult(entries=entries, count=count, total=count)

    async def fetch_all_entries(self, content_type: str) -> List[Dict[str, Any]]:
        response = await self.client.request(entries_endpoint(content_type))
        return response.get("entries") or []

    async def fetch_entry(self, content_type: str, uid: str) -> Dict[str, Any]:
        response = await self.client.request(f"{entries_endpoint(content_type)}/{quote(uid, safe='')}")
        entry = response["entry"] if "entry" in response else response
        if not entry or not isinstance(entry, Mapping):
            raise NotFoundError(f"{content_type} entry {uid} not found", status_code=404)
        return entry

    async def fetch_entries_by_uids(self, content_type: str, uids: Optional[Iterable[Any]]) -> List[Dict[str, Any]]:
        wanted = unique_uids(uids)
        if not wanted:
            return []

        logger.info("Fetching %d %s entries by uid", len(wanted), content_type)
        try:
            result = await self.search_entries(
                content_type, {"uid": in_(wanted)}, limit=len(wanted), include_count=True
            )
        except ConfigurationError:
            raise
        except Exception as e:
            logger.warning("Search by uid failed for %s (%s); falling back to fetch all and filter", content_type, e)
            return await self._fetch_all_and_filter(content_type, wanted)

        entries = result.entries
        if len(entries) < len(wanted):
            fetched = {entry.get("uid") for entry in entries}
            missing = [uid for uid in wanted if uid not in fetched]
            logger.warning("Missing %d %s entries: %s", len(missing), content_type, missing)
        return entries

    async def _fetch_all_and_filter(self, content_type: str, wanted: List[str]) -> List[Dict[str, Any]]:
        try:
            all_entries = await self.fetch_all_entries(content_type)
        except ConfigurationError:
            raise
        except Exception as e:
            logger.error("Fallback fetch also failed for %s: %s", content_type, e)
            return []
        uid_set = set(wanted)
        filtered = [entry for entry in all_entries if entry.get("uid") in uid_set]
        logger.info("Fallback found %d of %d %s entries", len(filtered), len(wanted), content_type)
        return filtered

    async def fetch_multiple_entries_by_content_type(
        self, requests: Dict[str, Iterable[Any]]
    ) -> Dict[str, List[Dict[str, Any]]]:
        if not requests:
            return {}
        content_types = list(requests)
        results = await asyncio.gather(
            *(self.fetch_entries_by_uids(ct, requests[ct]) for ct in content_types)
        )
        return dict(zip(content_types, results))


class CatalogService:
    def __init__(self, entries: EntriesService) -> None:
        self.entries = entries

    async def fetch_products(self) -> List[Product]:
        return _transform_all(await self.entries.fetch_all_entries("product"), transform_product_entry)

    async def fetch_banners(self) -> List[Banner]:
        return _transform_all(await self.entries.fetch_all_entries("banner"), transform_banner_entry)

    async def fetch_services(self) -> List[Service]:
        return _transform_all(await self.entries.fetch_all_entries("service"), transform_service_entry)

    async def fetch_product_by_id(self, product_id: str) -> Product:
        entry = await self.entries.fetch_entry("product", product_id)
        product = transform_product_entry(entry)
        if product is None:
            raise NotFoundError(f"Product with ID {product_id} not found", status_code=404)
        return product

    async def fetch_footer_content(self) -> Optional[Footer]:
        entries = await self.entries.fetch_all_entries("footer")
        return transform_footer_entry(entries[0]) if entries else None

    async def fetch_products_by_category(self, category: str) -> List[Product]:
        chain: List[Query] = [
            {"category": category},
            {"product_category": category},
            or_({"category": regex(category)}, {"product_category": regex(category)}),
        ]
        try:
            for query in chain:
                result = await self.entries.search_entries("product", query)
                if result.entries:
                    return _transform_all(result.entries, transform_product_entry)
            logger.warning("No products found for category %r via search API, filtering full catalogue", category)
            return await self._filter_catalogue(lambda p: _same_category(p, category))
        except Exception as e:
            logger.error("Error fetching products by category %r: %s", category, e)
            return await self._fallback_filter(e, lambda p: _same_category(p, category))

    async def search_products(self, term: str) -> List[Product]:
        needle = term.lower()

        def matches(product: Product) -> bool:
            haystack = (product.product_name, product.description, product.short_desc)
            return any(needle in (text or "").lower() for text in haystack)

        query = or_(*({field: regex(term)} for field in PRODUCT_TEXT_FIELDS))
        try:
            result = await self.entries.search_entries("product", query)
            if result.entries:
                return _transform_all(result.entries, transform_product_entry)
            logger.warning("No products matched %r via search API, filtering full catalogue", term)
            return await self._filter_catalogue(matches)
        except Exception as e:
            logger.error("Error searching products for %r: %s", term, e)
            return await self._fallback_filter(e, matches)

    async def _filter_catalogue(self, predicate: Callable[[Product], bool]) -> List[Product]:
        return [product for product in await self.fetch_products() if predicate(product)]

    async def _fallback_filter(self, original: Exception, predicate: Callable[[Product], bool]) -> List[Product]:
        try:
            return await self._filter_catalogue(predicate)
        except Exception as fallback_error:
            logger.error("Catalogue fallback failed: %s", fallback_error)
            raise original from fallback_error


def _transform_all(entries: Iterable[Dict[str, Any]], transform: Callable[[Any], Any]) -> List[Any]:
    return [item for item in (transform(entry) for entry in entries) if item is not None]


def _same_category(product: Product, category: str) -> bool:
    value = product.category
    return isinstance(value, str) and value.lower() == category.lower()
