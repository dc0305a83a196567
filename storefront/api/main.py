"""
FastAPI application - Main entry point
"""

from dotenv import load_dotenv

load_dotenv()

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Set

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from storefront.database.preferences import InMemoryKeyValueStore, JsonFileKeyValueStore, PreferenceStore
from storefront.errors import ApiError, ConfigurationError, ErrorHandler, NotFoundError, StorefrontError
from storefront.integrations.clients.real_http.contentstack import ContentstackClient
from storefront.integrations.contentstack.entries import CatalogService, EntriesService
from storefront.integrations.contentstack.home_page import HomePageResolver
from storefront.integrations.contentstack.orders import CartLine, CheckoutService, OrderNotifier
from storefront.utils.config_loader import StorefrontConfig, load_config

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Multimart Storefront API",
    description="Catalog, home page and checkout content served from Contentstack",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

error_handler = ErrorHandler()


# ============================================================================
# DEPENDENCY INJECTION
# ============================================================================


@dataclass
class StorefrontServices:
    config: StorefrontConfig
    catalog: CatalogService
    home_page: HomePageResolver
    checkout: CheckoutService
    preferences: PreferenceStore
    pending_notifications: Set[Any] = field(default_factory=set)


def build_services(config: StorefrontConfig, transport=None) -> StorefrontServices:
    client = ContentstackClient(config.contentstack, transport=transport)
    entries = EntriesService(client)
    catalog = CatalogService(entries)
    if config.preferences_path:
        backend = JsonFileKeyValueStore(Path(config.preferences_path))
    else:
        backend = InMemoryKeyValueStore()
    return StorefrontServices(
        config=config,
        catalog=catalog,
        home_page=HomePageResolver(entries, config.contentstack.home_entry_uid, catalog=catalog),
        checkout=CheckoutService(OrderNotifier(client, config.notifications)),
        preferences=PreferenceStore(backend),
    )


@lru_cache(maxsize=1)
def get_services() -> StorefrontServices:
    return build_services(load_config())


# ============================================================================
# ERROR HANDLING
# ============================================================================


@app.exception_handler(StorefrontError)
async def storefront_error_handler(request: Request, exc: StorefrontError):
    if isinstance(exc, NotFoundError):
        status_code = 404
    elif isinstance(exc, ConfigurationError):
        status_code = 503
    elif isinstance(exc, ApiError):
        status_code = 502
    else:
        status_code = 500
    return JSONResponse(status_code=status_code, content=error_handler.handle_exception(exc, {"path": request.url.path}))


# ============================================================================
# REQUEST MODELS
# ============================================================================


class OrderItem(BaseModel):
    product_id: str
    product_name: Optional[str] = None
    price: float = Field(ge=0)
    qty: int = Field(default=1, ge=1)


class OrderRequest(BaseModel):
    email: str
    items: List[OrderItem] = Field(default_factory=list)


# ============================================================================
# ROUTES
# ============================================================================


@app.get("/health", tags=["Health"])
async def health():
    return {"status": "ok"}


@app.get("/api/v1/home", tags=["Content"])
async def home_page(services: StorefrontServices = Depends(get_services)):
    document = await services.home_page.fetch_home_page(include_footer=True)
    return document.to_dict()


@app.get("/api/v1/products", tags=["Catalog"])
async def list_products(services: StorefrontServices = Depends(get_services)):
    return [p.to_dict() for p in await services.catalog.fetch_products()]


@app.get("/api/v1/products/search", tags=["Catalog"])
async def search_products(
    q: str = Query(..., min_length=1),
    services: StorefrontServices = Depends(get_services),
):
    return [p.to_dict() for p in await services.catalog.search_products(q)]


@app.get("/api/v1/products/{product_id}", tags=["Catalog"])
async def get_product(product_id: str, services: StorefrontServices = Depends(get_services)):
    product = await services.catalog.fetch_product_by_id(product_id)
    return product.to_dict()


@app.get("/api/v1/categories/{category}/products", tags=["Catalog"])
async def products_by_category(category: str, services: StorefrontServices = Depends(get_services)):
    return [p.to_dict() for p in await services.catalog.fetch_products_by_category(category)]


@app.get("/api/v1/banners", tags=["Content"])
async def list_banners(services: StorefrontServices = Depends(get_services)):
    return [b.to_dict() for b in await services.catalog.fetch_banners()]


@app.get("/api/v1/services", tags=["Content"])
async def list_services(services: StorefrontServices = Depends(get_services)):
    return [s.to_dict() for s in await services.catalog.fetch_services()]


@app.get("/api/v1/footer", tags=["Content"])
async def footer(services: StorefrontServices = Depends(get_services)):
    content = await services.catalog.fetch_footer_content()
    return content.to_dict() if content else None


@app.post("/api/v1/orders", status_code=201, tags=["Checkout"])
async def place_order(body: OrderRequest, services: StorefrontServices = Depends(get_services)):
    lines = [CartLine(item.product_id, item.product_name, item.price, item.qty) for item in body.items]
    try:
        confirmation = services.checkout.place_order(lines, body.email)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    # hold a reference until the notification finishes
    services.pending_notifications.add(confirmation.notification)
    confirmation.notification.add_done_callback(services.pending_notifications.discard)

    return {
        "order_id": confirmation.order_id,
        "total": confirmation.total,
        "email": confirmation.email,
        "notification": "pending",
    }


@app.get("/api/v1/preferences", tags=["Preferences"])
async def get_preferences(services: StorefrontServices = Depends(get_services)):
    return services.preferences.get_preferences()


@app.patch("/api/v1/preferences", tags=["Preferences"])
async def update_preferences(updates: Dict[str, Any], services: StorefrontServices = Depends(get_services)):
    return services.preferences.update_preferences(updates)


@app.delete("/api/v1/preferences", status_code=204, tags=["Preferences"])
async def clear_preferences(services: StorefrontServices = Depends(get_services)):
    services.preferences.clear()
