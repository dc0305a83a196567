from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

"""
Catalog contracts.

Canonical view models produced from raw Contentstack entries:
- Product, Banner, Service, Footer (one per content type)
- HomePageDocument (the composite home page)
- SearchResult (a page of raw entries from the query API)

Every CMS field-name variant is resolved in policy/entry_transformers.py;
nothing past that point should touch raw entry dicts.
"""

# ---------------------------------------------------------------------------
# Content models
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Product:
    id: str
    product_name: Optional[str] = None
    img_url: Optional[str] = None
    category: Optional[str] = None
    price: float = 0
    discount: float = 0
    short_desc: Optional[str] = None
    description: Optional[str] = None
    reviews: List[Any] = field(default_factory=list)
    avg_rating: float = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "productName": self.product_name,
            "imgUrl": self.img_url,
            "category": self.category,
            "price": self.price,
            "discount": self.discount,
            "shortDesc": self.short_desc,
            "description": self.description,
            "reviews": list(self.reviews),
            "avgRating": self.avg_rating,
        }


@dataclass(frozen=True)
class Banner:
    id: str
    title: Optional[str] = None
    desc: Optional[str] = None
    cover: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "title": self.title, "desc": self.desc, "cover": self.cover}


@dataclass(frozen=True)
class Service:
    id: str
    icon: Optional[str] = None
    title: Optional[str] = None
    subtitle: Optional[str] = None
    bg: str = "#fdefe6"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "icon": self.icon,
            "title": self.title,
            "subtitle": self.subtitle,
            "bg": self.bg,
        }


@dataclass(frozen=True)
class ContactInfo:
    address: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


@dataclass(frozen=True)
class Footer:
    logo: str = "Multimart"
    description: Optional[str] = None
    about_us: List[str] = field(default_factory=list)
    customer_care: List[str] = field(default_factory=list)
    contact_info: ContactInfo = field(default_factory=ContactInfo)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "logo": self.logo,
            "description": self.description,
            "aboutUs": list(self.about_us),
            "customerCare": list(self.customer_care),
            "contactInfo": {
                "address": self.contact_info.address,
                "email": self.contact_info.email,
                "phone": self.contact_info.phone,
            },
        }


# ---------------------------------------------------------------------------
# Composite documents
# ---------------------------------------------------------------------------


@dataclass
class HomeSections:
    slider: List[Banner] = field(default_factory=list)
    services: List[Service] = field(default_factory=list)
    discount_products: List[Product] = field(default_factory=list)
    new_arrivals: List[Product] = field(default_factory=list)
    best_sales: List[Product] = field(default_factory=list)
    footer: Optional[Footer] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "slider": [b.to_dict() for b in self.slider],
            "services": [s.to_dict() for s in self.services],
            "discountProducts": [p.to_dict() for p in self.discount_products],
            "newArrivals": [p.to_dict() for p in self.new_arrivals],
            "bestSales": [p.to_dict() for p in self.best_sales],
            "footer": self.footer.to_dict() if self.footer else None,
        }


@dataclass
class HomePageDocument:
    title: Optional[str] = None
    sections: HomeSections = field(default_factory=HomeSections)

    def to_dict(self) -> Dict[str, Any]:
        return {"title": self.title, "sections": self.sections.to_dict()}


@dataclass
class SearchResult:
    """A page of raw entries. `count`/`total` fall back to len(entries) when the API omits them."""
    entries: List[Dict[str, Any]] = field(default_factory=list)
    count: int = 0
    total: int = 0
