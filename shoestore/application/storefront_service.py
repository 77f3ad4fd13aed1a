"""Storefront application service.

Shopper-facing use cases: the filtered product listing, the product detail
page with its full variant list, and a server-side run of the variant
selection state machine.
"""

from dataclasses import dataclass, field

import structlog

from shoestore.application.wiring import (
    get_attribute_index,
    get_catalog_repository,
    get_filter_resolver,
    get_stock_ledger,
    new_selection,
)
from shoestore.catalog.index import StockSummary
from shoestore.catalog.resolver import (
    PaginatedResult,
    PaginationParams,
    ProductFilter,
    ProductListing,
)
from shoestore.catalog.selection import ResolvedVariant, SizeOption
from shoestore.domain.entities import Color, Product, Size, Variant
from shoestore.domain.exceptions import NotFoundError

logger = structlog.get_logger()


# ============================================================================
# Service Result Types
# ============================================================================


@dataclass
class VariantDetail:
    """A variant as shown on the product page."""

    variant: Variant
    color: Color
    size: Size
    price: int
    stock: int


@dataclass
class ProductDetail:
    """A product with every variant (active and inactive) and its stock summary."""

    product: Product
    variants: list[VariantDetail]
    summary: StockSummary


@dataclass
class SelectionView:
    """Outcome of replaying a shopper's color/size choice."""

    state: dict
    colors: list[Color] = field(default_factory=list)
    sizes: list[SizeOption] = field(default_factory=list)
    resolved: ResolvedVariant | None = None


# ============================================================================
# Storefront Service
# ============================================================================


class StorefrontService:
    """Service for shopper-facing catalog reads.

    Example usage:
        service = get_storefront_service()
        page = await service.list_products(ProductFilter(color_ids={2}), PaginationParams())
        detail = await service.get_product_detail(page.items[0].product.id)
    """

    def __init__(self, request_id: str | None = None) -> None:
        """Initialize storefront service.

        Args:
            request_id: Request ID for log correlation.
        """
        self.request_id = request_id
        self.repository = get_catalog_repository()
        self.ledger = get_stock_ledger()
        self.index = get_attribute_index()
        self.resolver = get_filter_resolver()

    async def list_products(
        self,
        filters: ProductFilter,
        pagination: PaginationParams,
    ) -> PaginatedResult[ProductListing]:
        """Filtered, sorted, paginated product listing."""
        return await self.resolver.resolve(filters, pagination)

    async def get_product_detail(self, product_id: int) -> ProductDetail:
        """Product with its full variant list.

        Raises:
            NotFoundError: Product missing or deactivated.
        """
        product = await self._visible_product(product_id)

        variants = await self.repository.find_variants(product_id)
        colors = {c.id: c for c in await self.repository.list_colors({v.color_id for v in variants})}
        sizes = {s.id: s for s in await self.repository.list_sizes({v.size_id for v in variants})}
        stock = await self.ledger.current_stock_many(v.id for v in variants)

        details = [
            VariantDetail(
                variant=v,
                color=colors[v.color_id],
                size=sizes[v.size_id],
                price=v.effective_price(product),
                stock=stock[v.id],
            )
            for v in variants
        ]
        details.sort(
            key=lambda d: (d.color.name.casefold(), d.size.sort_key, d.variant.id)
        )

        return ProductDetail(
            product=product,
            variants=details,
            summary=await self.index.stock_summary(product_id),
        )

    async def run_selection(
        self,
        product_id: int,
        color_id: int | None = None,
        size_id: int | None = None,
    ) -> SelectionView:
        """Replay a shopper's choice through the selection state machine.

        Raises:
            NotFoundError: Product missing or deactivated.
            SelectionRejectedError: The choice is not legal right now.
        """
        await self._visible_product(product_id)
        selection = new_selection(product_id)

        if color_id is not None:
            await selection.select_color(color_id)
        if size_id is not None:
            await selection.select_size(size_id)

        resolved = await selection.resolved() if selection.status.is_complete() else None

        logger.debug(
            "Selection evaluated",
            product_id=product_id,
            status=selection.status.value,
            request_id=self.request_id,
        )
        return SelectionView(
            state=selection.snapshot(),
            colors=await selection.available_colors(),
            sizes=await selection.size_options(),
            resolved=resolved,
        )

    async def _visible_product(self, product_id: int) -> Product:
        product = await self.repository.get_product(product_id)
        if product is None or not product.is_active:
            raise NotFoundError("Product", product_id)
        return product


# ============================================================================
# Service Factory
# ============================================================================


def get_storefront_service(request_id: str | None = None) -> StorefrontService:
    """Get storefront service instance.

    Args:
        request_id: Request ID for correlation.

    Returns:
        StorefrontService instance.
    """
    return StorefrontService(request_id=request_id)
