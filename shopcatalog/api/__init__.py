"""API layer module.

Contains FastAPI routers, middleware and request/response schemas.
"""

from shopcatalog.api.categories import router as categories_router
from shopcatalog.api.health import router as health_router
from shopcatalog.api.products import router as products_router
from shopcatalog.api.reviews import router as reviews_router

__all__ = [
    "categories_router",
    "health_router",
    "products_router",
    "reviews_router",
]
