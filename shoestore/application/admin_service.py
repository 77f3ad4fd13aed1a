"""Admin application service.

Operator-only catalog maintenance and stock movements. Authentication is
done upstream; this service receives the opaque user id and role pair and
only checks that the role is an operator role.
"""

from dataclasses import dataclass
from datetime import datetime

import structlog

from shoestore.application.wiring import get_stock_ledger, get_variant_catalog
from shoestore.catalog.ledger import StockCheck, VariantStock
from shoestore.domain.entities import Color, LedgerEntry, Product, Size, Variant
from shoestore.domain.exceptions import AuthorizationError
from shoestore.infrastructure.config import settings

logger = structlog.get_logger()


@dataclass(frozen=True)
class OperatorContext:
    """Caller identity as supplied by the auth collaborator.

    Attributes:
        user_id: Opaque user identifier.
        role: Role name (e.g. "admin").
    """

    user_id: str | None
    role: str | None

    @property
    def is_operator(self) -> bool:
        return bool(self.user_id) and self.role in settings.operator_roles


class AdminService:
    """Service for operator actions.

    Every method checks the operator role first and raises
    AuthorizationError when it is missing.

    Example usage:
        service = get_admin_service(OperatorContext("u-1", "admin"))
        variant = await service.upsert_variant(product_id=1, color_id=2,
                                               size_id=9, sku="RX-BLK-9")
        await service.record_import(variant.id, quantity=10, unit_cost=4000)
    """

    def __init__(self, operator: OperatorContext, request_id: str | None = None) -> None:
        """Initialize admin service.

        Args:
            operator: Caller identity.
            request_id: Request ID for log correlation.
        """
        self.operator = operator
        self.request_id = request_id
        self.catalog = get_variant_catalog()
        self.ledger = get_stock_ledger()

    def _authorize(self, action: str) -> str:
        """Check the operator role.

        Returns:
            The operator's user id.

        Raises:
            AuthorizationError: If the caller is not an operator.
        """
        if not self.operator.is_operator:
            logger.warning(
                "Operator action denied",
                action=action,
                user_id=self.operator.user_id,
                role=self.operator.role,
                request_id=self.request_id,
            )
            raise AuthorizationError(action, self.operator.role)
        return str(self.operator.user_id)

    # ========================================================================
    # Catalog
    # ========================================================================

    async def create_product(
        self,
        name: str,
        base_price: int,
        category_id: int | None = None,
        description: str | None = None,
        image_url: str | None = None,
    ) -> Product:
        """Create a product."""
        self._authorize("create_product")
        return await self.catalog.create_product(
            name, base_price, category_id, description, image_url
        )

    async def deactivate_product(self, product_id: int) -> list[int]:
        """Soft-delete a product and its variants."""
        self._authorize("deactivate_product")
        return await self.catalog.deactivate_product(product_id)

    async def create_color(self, name: str, hex_code: str | None = None) -> Color:
        """Create a color."""
        self._authorize("create_color")
        return await self.catalog.create_color(name, hex_code)

    async def create_size(self, value: str, size_system: str = "US") -> Size:
        """Create a size."""
        self._authorize("create_size")
        return await self.catalog.create_size(value, size_system)

    async def upsert_variant(
        self,
        product_id: int,
        color_id: int,
        size_id: int,
        sku: str,
        price: int | None = None,
        is_active: bool = True,
        variant_id: int | None = None,
    ) -> Variant:
        """Create or update a variant."""
        self._authorize("upsert_variant")
        return await self.catalog.upsert_variant(
            product_id,
            color_id,
            size_id,
            sku,
            price=price,
            is_active=is_active,
            variant_id=variant_id,
        )

    async def set_variant_active(self, variant_id: int, active: bool) -> Variant:
        """Enable or disable a variant."""
        self._authorize("set_variant_active")
        return await self.catalog.set_active(variant_id, active)

    async def delete_variant(self, variant_id: int) -> None:
        """Delete a variant without stock history."""
        self._authorize("delete_variant")
        await self.catalog.delete_variant(variant_id)

    async def find_variant_by_sku(self, sku: str) -> Variant:
        """Look up a variant by SKU."""
        self._authorize("find_variant_by_sku")
        return await self.catalog.find_by_sku(sku)

    # ========================================================================
    # Stock
    # ========================================================================

    async def record_import(
        self,
        variant_id: int,
        quantity: int,
        unit_cost: int,
        note: str | None = None,
    ) -> LedgerEntry:
        """Record a stock-in as the calling operator."""
        operator_id = self._authorize("record_import")
        return await self.ledger.record_import(variant_id, quantity, unit_cost, operator_id, note)

    async def record_adjustment(
        self,
        variant_id: int,
        quantity: int,
        note: str | None = None,
    ) -> LedgerEntry:
        """Record a signed stock correction as the calling operator."""
        operator_id = self._authorize("record_adjustment")
        return await self.ledger.record_adjustment(variant_id, quantity, operator_id, note)

    async def list_entries(
        self,
        variant_id: int | None = None,
        operator_id: str | None = None,
        since: datetime | None = None,
        until: datetime | None = None,
    ) -> list[LedgerEntry]:
        """Ledger audit history."""
        self._authorize("list_entries")
        return await self.ledger.entries(variant_id, operator_id, since, until)

    async def check_stock(self, variant_id: int, quantity: int) -> StockCheck:
        """Whether a variant can supply a quantity right now."""
        self._authorize("check_stock")
        return await self.ledger.check_stock(variant_id, quantity)

    async def low_stock(self, threshold: int | None = None) -> list[VariantStock]:
        """Active variants at or below the operator low-stock threshold."""
        self._authorize("low_stock")
        return await self.ledger.low_stock(threshold)


def get_admin_service(
    operator: OperatorContext,
    request_id: str | None = None,
) -> AdminService:
    """Get admin service instance.

    Args:
        operator: Caller identity.
        request_id: Request ID for correlation.

    Returns:
        AdminService instance.
    """
    return AdminService(operator, request_id=request_id)
