import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from storefront.config import settings
from storefront.database import create_db_and_tables
from storefront.routes import (
    admin_coupons,
    admin_gst_settings,
    admin_orders,
    admin_products,
    admin_shipping,
    auth,
    cart,
    categories,
    checkout,
    health,
    products,
    review,
    user_orders,
    users,
)
from storefront.utils.cache_helpers import TTLCache

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Run DB creation ONLY in local
    if settings.ENV == "local":
        create_db_and_tables()
    yield


app = FastAPI(title="Storefront API", lifespan=lifespan)

# shipping regions and GST settings, read on every checkout
app.state.config_cache = TTLCache(default_ttl=settings.config_cache_ttl_seconds)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, prefix="/health", tags=["Health"])
app.include_router(auth.router, prefix="/auth", tags=["Authentication"])
app.include_router(users.router, prefix="/users", tags=["Users"])
app.include_router(products.router, prefix="/products", tags=["Catalog"])
app.include_router(categories.router, prefix="/categories", tags=["Catalog"])
app.include_router(review.router, prefix="/reviews", tags=["Reviews"])
app.include_router(cart.router, prefix="/cart", tags=["Cart"])
app.include_router(checkout.router, prefix="/checkout", tags=["Checkout"])
app.include_router(user_orders.router, prefix="/orders", tags=["Orders"])
app.include_router(admin_products.router, prefix="/admin", tags=["Admin Catalog"])
app.include_router(admin_coupons.router, prefix="/admin/coupons", tags=["Admin Coupons"])
app.include_router(admin_shipping.router, prefix="/admin/shipping-regions", tags=["Admin Shipping"])
app.include_router(admin_gst_settings.router, prefix="/admin/gst-settings", tags=["Admin GST"])
app.include_router(admin_orders.router, prefix="/admin/orders", tags=["Admin Orders"])


@app.get("/")
def root():
    return {
        "name": "Storefront API",
        "catalog": ["/products", "/products/{slug}", "/categories"],
        "cart": ["/cart", "/cart/add", "/cart/update/{id}", "/cart/remove/{id}", "/cart/clear"],
        "checkout": [
            "/checkout/address", "/checkout/addresses", "/checkout/summary",
            "/checkout/apply-coupon", "/checkout/place-order",
        ],
        "orders": [
            "/orders", "/orders/{id}", "/orders/{id}/track",
            "/orders/{id}/cancel", "/orders/{id}/invoice", "/orders/{id}/invoice/download",
        ],
    }
