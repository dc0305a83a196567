from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

from storefront.integrations.contracts.catalog import Banner, ContactInfo, Footer, Product, Service

logger = logging.getLogger(__name__)

DEFAULT_SERVICE_BG = "#fdefe6"
DEFAULT_FOOTER_LOGO = "Multimart"
MAX_RATING = 5


@dataclass(frozen=True)
class FieldRule:
    """Ordered raw field paths for one canonical field; the first present value wins."""
    paths: Tuple[str, ...]
    default: Any = None

    def resolve(self, entry: Mapping[str, Any]) -> Any:
        return first_present(entry, *self.paths, default=self.default)


ID_RULE = FieldRule(("uid", "id"))

PRODUCT_RULES: Dict[str, FieldRule] = {
    "product_name": FieldRule(("product_name", "title", "name", "productName")),
    "img_url": FieldRule(("product_image.url", "image.url", "imgUrl")),
    "category": FieldRule(("category", "product_category")),
    "price": FieldRule(("price",), 0),
    "discount": FieldRule(("discount",), 0),
    "short_desc": FieldRule(("short_description", "description", "shortDesc")),
    "description": FieldRule(("full_description", "description")),
    "reviews": FieldRule(("reviews",)),
    "avg_rating": FieldRule(("average_rating", "avgRating"), 0),
}

BANNER_RULES: Dict[str, FieldRule] = {
    "title": FieldRule(("title", "banner_title")),
    "desc": FieldRule(("description", "banner_description", "desc")),
    "cover": FieldRule(("banner_image.url", "image.url", "cover")),
}

SERVICE_RULES: Dict[str, FieldRule] = {
    "icon": FieldRule(("icon_name", "icon")),
    "title": FieldRule(("title", "service_title")),
    "subtitle": FieldRule(("subtitle", "description")),
    "bg": FieldRule(("background_color", "bg"), DEFAULT_SERVICE_BG),
}

FOOTER_RULES: Dict[str, FieldRule] = {
    "logo": FieldRule(("logo",), DEFAULT_FOOTER_LOGO),
    "description": FieldRule(("description", "footer_description")),
    "about_us": FieldRule(("about_us", "aboutUs")),
    "customer_care": FieldRule(("customer_care", "customerCare")),
}

CONTACT_RULES: Dict[str, FieldRule] = {
    "address": FieldRule(("address", "contact_address")),
    "email": FieldRule(("email", "contact_email")),
    "phone": FieldRule(("phone", "contact_phone")),
}


def first_present(data: Mapping[str, Any], *paths: str, default: Any = None) -> Any:
    """Return the value at the first dotted path that is neither None nor a blank string."""
    for path in paths:
        value = _lookup(data, path)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return default


def transform_product_entry(entry: Optional[Mapping[str, Any]]) -> Optional[Product]:
    entry_id = _entry_id(entry)
    if entry_id is None:
        return None
    values = _resolve(entry, PRODUCT_RULES)
    return Product(
        id=entry_id,
        product_name=values["product_name"],
        img_url=values["img_url"],
        category=values["category"],
        price=_coerce_amount(values["price"]),
        discount=_coerce_amount(values["discount"]),
        short_desc=values["short_desc"],
        description=values["description"],
        reviews=list(values["reviews"]) if isinstance(values["reviews"], list) else [],
        avg_rating=min(_coerce_amount(values["avg_rating"]), MAX_RATING),
    )


def transform_banner_entry(entry: Optional[Mapping[str, Any]]) -> Optional[Banner]:
    entry_id = _entry_id(entry)
    if entry_id is None:
        return None
    return Banner(id=entry_id, **_resolve(entry, BANNER_RULES))


def transform_service_entry(entry: Optional[Mapping[str, Any]]) -> Optional[Service]:
    entry_id = _entry_id(entry)
    if entry_id is None:
        return None
    values = _resolve(entry, SERVICE_RULES)
    values["bg"] = str(values["bg"])
    return Service(id=entry_id, **values)


def transform_footer_entry(entry: Optional[Mapping[str, Any]]) -> Optional[Footer]:
    # Footers are singletons and are not keyed by uid.
    if not isinstance(entry, Mapping):
        return None
    values = _resolve(entry, FOOTER_RULES)
    return Footer(
        logo=str(values["logo"]),
        description=values["description"],
        about_us=_coerce_string_list(values["about_us"]),
        customer_care=_coerce_string_list(values["customer_care"]),
        contact_info=ContactInfo(**_resolve(entry, CONTACT_RULES)),
    )


def _lookup(data: Mapping[str, Any], path: str) -> Any:
    value: Any = data
    for part in path.split("."):
        if not isinstance(value, Mapping):
            return None
        value = value.get(part)
    return value


def _resolve(entry: Mapping[str, Any], rules: Dict[str, FieldRule]) -> Dict[str, Any]:
    return {name: rule.resolve(entry) for name, rule in rules.items()}


def _entry_id(entry: Any) -> Optional[str]:
    if not isinstance(entry, Mapping):
        return None
    value = ID_RULE.resolve(entry)
    return None if value is None else str(value)


def _coerce_amount(value: Any) -> float:
    if isinstance(value, bool):
        return 0
    try:
        amount = float(value)
    except (TypeError, ValueError, OverflowError):
        return 0
    if not math.isfinite(amount) or amount < 0:
        return 0
    # keep ints as ints so "120" and 120 both come out as 120
    return int(amount) if amount.is_integer() and not isinstance(value, float) else amount


def _coerce_string_list(value: Any) -> List[str]:
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            logger.warning("Footer list field is not valid JSON: %r", value[:100])
            return []
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if item is not None]
