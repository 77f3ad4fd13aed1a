"""API layer module.

Contains FastAPI routers and request/response schemas.
"""

from shoestore.api.admin import router as admin_router
from shoestore.api.health import router as health_router
from shoestore.api.products import router as products_router

__all__ = [
    "admin_router",
    "health_router",
    "products_router",
]
