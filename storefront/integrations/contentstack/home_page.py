"""
Home page assembly.

The home entry carries `page_sections`, an ordered list of modular blocks:
  [{"slider": {"banner": [{"uid": ...}]}}, {"service": {"services": [...]}}, ...]
Each block references other entries by uid. All referenced uids are collected
per content type, fetched in one batch per type, and then put back in the
original block order.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Tuple

from storefront.integrations.contentstack.entries import CatalogService, EntriesService
from storefront.integrations.contracts.catalog import HomePageDocument
from storefront.integrations.policy.entry_transformers import (
    transform_banner_entry,
    transform_product_entry,
    transform_service_entry,
)

logger = logging.getLogger(__name__)

HOME_CONTENT_TYPE = "home"


@dataclass(frozen=True)
class BlockSpec:
    content_type: str
    reference_field: str
    section: str
    transform: Callable[[Any], Any]


BLOCK_SPECS: Dict[str, BlockSpec] = {
    "slider": BlockSpec("banner", "banner", "slider", transform_banner_entry),
    "service": BlockSpec("service", "services", "services", transform_service_entry),
    "discount": BlockSpec("product", "products", "discount_products", transform_product_entry),
    "new_arrivals": BlockSpec("product", "product", "new_arrivals", transform_product_entry),
    "best_sales": BlockSpec("product", "product", "best_sales", transform_product_entry),
}

HYDRATED_CONTENT_TYPES = ("banner", "service", "product")


class HomePageResolver:
    def __init__(
        self,
        entries: EntriesService,
        home_entry_uid: str,
        catalog: Optional[CatalogService] = None,
    ) -> None:
        self.entries = entries
        self.home_entry_uid = home_entry_uid
        self.catalog = catalog or CatalogService(entries)

    async def fetch_home_page(self, include_footer: bool = False) -> HomePageDocument:
        logger.info("Fetching home entry %s", self.home_entry_uid)
        entry = await self.entries.fetch_entry(HOME_CONTENT_TYPE, self.home_entry_uid)

        blocks = list(iter_blocks(entry.get("page_sections")))
        document = HomePageDocument(title=entry.get("title"))

        uids_by_type = collect_reference_uids(blocks)
        banners, services, products = await asyncio.gather(
            *(self.entries.fetch_entries_by_uids(ct, uids_by_type[ct]) for ct in HYDRATED_CONTENT_TYPES)
        )
        lookups = {
            "banner": _index_by_uid(banners),
            "service": _index_by_uid(services),
            "product": _index_by_uid(products),
        }

        for block_type, block in blocks:
            spec = BLOCK_SPECS.get(block_type)
            if spec is None:
                continue
            lookup = lookups[spec.content_type]
            hydrated = [
                item
                for item in (
                    spec.transform(lookup.get(uid)) for uid in _reference_uids(block, spec.reference_field)
                )
                if item is not None
            ]
            # an empty block never clears a section that is already populated
            if hydrated:
                setattr(document.sections, spec.section, hydrated)

        if include_footer:
            try:
                document.sections.footer = await self.catalog.fetch_footer_content()
            except Exception as e:
                logger.warning("Footer could not be loaded for home page: %s", e)

        return document


def iter_blocks(page_sections: Any) -> Iterator[Tuple[str, Mapping[str, Any]]]:
    """Yield (block_type, block) for every usable modular block, in document order."""
    if not isinstance(page_sections, list):
        return
    for item in page_sections:
        if not isinstance(item, Mapping) or not item:
            continue
        block_type = next(iter(item))
        block = item[block_type]
        if not isinstance(block, Mapping):
            continue
        if block_type not in BLOCK_SPECS:
            logger.warning("Unknown block type in home page: %s", block_type)
            continue
        yield block_type, block


def collect_reference_uids(blocks: List[Tuple[str, Mapping[str, Any]]]) -> Dict[str, List[str]]:
    uids: Dict[str, List[str]] = {ct: [] for ct in HYDRATED_CONTENT_TYPES}
    for block_type, block in blocks:
        spec = BLOCK_SPECS[block_type]
        uids[spec.content_type].extend(_reference_uids(block, spec.reference_field))
    return uids


def _reference_uids(block: Mapping[str, Any], field: str) -> List[str]:
    refs = block.get(field)
    if not isinstance(refs, list):
        return []
    return [ref["uid"] for ref in refs if isinstance(ref, Mapping) and isinstance(ref.get("uid"), str) and ref["uid"]]


def _index_by_uid(entries: List[Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
    return {entry["uid"]: entry for entry in entries if isinstance(entry, Mapping) and isinstance(entry.get("uid"), str)}
