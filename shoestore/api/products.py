"""Product API endpoints.

Shopper-facing listing, product detail and variant selection.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from shoestore.api.schemas import (
    ColorSchema,
    ErrorResponse,
    PaginationMeta,
    ProductDetailResponse,
    ProductListItem,
    ProductListResponse,
    ResolvedVariantSchema,
    SelectionResponse,
    SizeOptionSchema,
    SizeSchema,
    StockSummarySchema,
    VariantDetailSchema,
)
from shoestore.application.storefront_service import (
    ProductDetail,
    StorefrontService,
    get_storefront_service,
)
from shoestore.catalog.index import StockSummary
from shoestore.catalog.resolver import PaginationParams, ProductFilter, ProductListing
from shoestore.domain.entities import Color, Size
from shoestore.domain.exceptions import ValidationError
from shoestore.infrastructure.config import settings

router = APIRouter(prefix="/products", tags=["Products"])


# ============================================================================
# Dependencies
# ============================================================================


def get_service(request: Request) -> StorefrontService:
    """Get storefront service with request ID."""
    request_id = getattr(request.state, "request_id", None)
    return get_storefront_service(request_id=request_id)


def parse_id_list(field: str, raw: str | None) -> set[int] | None:
    """Parse a comma-separated id list ("1,2,3").

    Returns:
        Set of ids, or None when the parameter is absent or empty.

    Raises:
        ValidationError: If any element is not an integer.
    """
    if raw is None or not raw.strip():
        return None
    ids: set[int] = set()
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            ids.add(int(part))
        except ValueError:
            raise ValidationError.for_field(field, f"'{part}' is not an integer") from None
    return ids or None


# ============================================================================
# Converters
# ============================================================================


def color_to_schema(color: Color) -> ColorSchema:
    """Convert Color entity to schema."""
    return ColorSchema(id=color.id, name=color.name, hex_code=color.hex_code)


def size_to_schema(size: Size) -> SizeSchema:
    """Convert Size entity to schema."""
    return SizeSchema(id=size.id, value=size.value, size_system=size.size_system.value)


def summary_to_schema(summary: StockSummary) -> StockSummarySchema:
    """Convert StockSummary to schema."""
    return StockSummarySchema(
        total_stock=summary.total_stock,
        has_stock=summary.has_stock,
        variant_count=summary.variant_count,
        available_colors=[color_to_schema(c) for c in summary.available_colors],
        available_sizes=[size_to_schema(s) for s in summary.available_sizes],
    )


def listing_to_item(listing: ProductListing) -> ProductListItem:
    """Convert a listing entry to response schema."""
    product = listing.product
    return ProductListItem(
        id=product.id,
        name=product.name,
        description=product.description,
        base_price=product.base_price,
        min_price=listing.min_price,
        max_price=listing.max_price,
        category_id=product.category_id,
        image_url=product.image_url,
        in_stock=listing.summary.has_stock,
        stock=summary_to_schema(listing.summary),
        created_at=product.created_at,
        updated_at=product.updated_at,
    )


def detail_to_response(detail: ProductDetail) -> ProductDetailResponse:
    """Convert a product detail to response schema."""
    product = detail.product
    return ProductDetailResponse(
        id=product.id,
        name=product.name,
        description=product.description,
        base_price=product.base_price,
        category_id=product.category_id,
        image_url=product.image_url,
        is_active=product.is_active,
        variants=[
            VariantDetailSchema(
                id=v.variant.id,
                color=color_to_schema(v.color),
                size=size_to_schema(v.size),
                sku=v.variant.sku,
                price=v.price,
                stock=v.stock,
                is_active=v.variant.is_active,
            )
            for v in detail.variants
        ],
        stock=summary_to_schema(detail.summary),
        created_at=product.created_at,
        updated_at=product.updated_at,
    )


# ============================================================================
# Endpoints
# ============================================================================


@router.get(
    "",
    response_model=ProductListResponse,
    responses={400: {"model": ErrorResponse}},
    summary="List products",
    description="Filter products by category, price, text and in-stock color/size.",
)
async def list_products(
    service: Annotated[StorefrontService, Depends(get_service)],
    category_id: int | None = Query(default=None, description="Category ID"),
    min_price: int | None = Query(default=None, description="Minimum price in cents"),
    max_price: int | None = Query(default=None, description="Maximum price in cents"),
    search: str | None = Query(default=None, description="Text search"),
    color_ids: str | None = Query(default=None, description="Comma-separated color IDs"),
    size_ids: str | None = Query(default=None, description="Comma-separated size IDs"),
    sort_by: str = Query(default="created_at", description="Sort field"),
    sort_order: str = Query(default="desc", description="Sort order (asc/desc)"),
    page: int = Query(default=1, description="Page number"),
    limit: int = Query(default=settings.default_page_size, description="Items per page"),
) -> ProductListResponse:
    """List products matching the filters.

    When both color and size ids are given, a product qualifies only if a
    single in-stock variant matches both.
    """
    filters = ProductFilter(
        category_id=category_id,
        min_price=min_price,
        max_price=max_price,
        search=search,
        color_ids=parse_id_list("color_ids", color_ids),
        size_ids=parse_id_list("size_ids", size_ids),
    )
    pagination = PaginationParams(
        page=page,
        page_size=limit,
        sort_by=sort_by,
        sort_order=sort_order,
    )

    result = await service.list_products(filters, pagination)

    return ProductListResponse(
        items=[listing_to_item(listing) for listing in result.items],
        pagination=PaginationMeta(
            page=result.page,
            limit=result.page_size,
            total=result.total,
            total_pages=result.total_pages,
            has_next=result.has_next,
            has_prev=result.has_prev,
        ),
    )


@router.get(
    "/{product_id}",
    response_model=ProductDetailResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get product",
    description="Get a product with its full variant list and stock.",
)
async def get_product(
    product_id: int,
    service: Annotated[StorefrontService, Depends(get_service)],
) -> ProductDetailResponse:
    """Get product detail."""
    detail = await service.get_product_detail(product_id)
    return detail_to_response(detail)


@router.get(
    "/{product_id}/selection",
    response_model=SelectionResponse,
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
    summary="Evaluate variant selection",
    description="Run the color/size selection state machine for a product.",
)
async def get_selection(
    product_id: int,
    service: Annotated[StorefrontService, Depends(get_service)],
    color_id: int | None = Query(default=None, description="Chosen color"),
    size_id: int | None = Query(default=None, description="Chosen size"),
) -> SelectionResponse:
    """Evaluate a shopper's selection.

    Selecting a size without a color, an unknown combination or an
    out-of-stock size is rejected with 409.
    """
    view = await service.run_selection(product_id, color_id, size_id)
    state = view.state
    resolved = view.resolved

    return SelectionResponse(
        product_id=state["product_id"],
        status=state["status"],
        color_id=state["color_id"],
        size_id=state["size_id"],
        allowed_transitions=state["allowed_transitions"],
        colors=[color_to_schema(c) for c in view.colors],
        sizes=[
            SizeOptionSchema(
                size=size_to_schema(option.size),
                stock=option.stock,
                selectable=option.selectable,
                variant_id=option.variant_id,
            )
            for option in view.sizes
        ],
        resolved=(
            ResolvedVariantSchema(
                variant_id=resolved.variant_id,
                sku=resolved.sku,
                price=resolved.price,
                stock=resolved.stock,
                low_stock=resolved.low_stock,
            )
            if resolved
            else None
        ),
    )
