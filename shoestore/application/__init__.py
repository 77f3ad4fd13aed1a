"""Application layer module.

Contains application services (use cases) that orchestrate
catalog components and infrastructure.
"""

from shoestore.application.admin_service import (
    AdminService,
    OperatorContext,
    get_admin_service,
)
from shoestore.application.storefront_service import (
    StorefrontService,
    get_storefront_service,
)

__all__ = [
    "AdminService",
    "OperatorContext",
    "get_admin_service",
    "StorefrontService",
    "get_storefront_service",
]
