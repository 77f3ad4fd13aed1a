"""Admin API endpoints.

Operator-only catalog maintenance and stock movements. The caller identity
arrives as ``X-User-Id`` / ``X-User-Role`` headers set by the upstream auth
layer; the admin service rejects non-operator roles with 403.
"""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Header, Query, Request, status

from shoestore.api.products import color_to_schema, size_to_schema
from shoestore.api.schemas import (
    AdjustmentCreateRequest,
    ColorCreateRequest,
    ColorSchema,
    ErrorResponse,
    ImportCreateRequest,
    LedgerEntriesResponse,
    LedgerEntryResponse,
    LowStockItem,
    LowStockResponse,
    ProductCreateRequest,
    ProductDeactivatedResponse,
    ProductResponse,
    SizeCreateRequest,
    SizeSchema,
    StockCheckResponse,
    VariantActiveRequest,
    VariantResponse,
    VariantUpsertRequest,
)
from shoestore.application.admin_service import (
    AdminService,
    OperatorContext,
    get_admin_service,
)
from shoestore.domain.entities import LedgerEntry, Product, Variant

router = APIRouter(prefix="/admin", tags=["Admin"])

OPERATOR_ERRORS = {
    400: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
}


# ============================================================================
# Dependencies
# ============================================================================


def get_service(
    request: Request,
    x_user_id: Annotated[str | None, Header()] = None,
    x_user_role: Annotated[str | None, Header()] = None,
) -> AdminService:
    """Get admin service bound to the calling operator."""
    request_id = getattr(request.state, "request_id", None)
    return get_admin_service(OperatorContext(x_user_id, x_user_role), request_id=request_id)


# ============================================================================
# Converters
# ============================================================================


def product_to_response(product: Product) -> ProductResponse:
    """Convert Product entity to response schema."""
    return ProductResponse(
        id=product.id,
        name=product.name,
        description=product.description,
        base_price=product.base_price,
        category_id=product.category_id,
        image_url=product.image_url,
        is_active=product.is_active,
        created_at=product.created_at,
        updated_at=product.updated_at,
    )


def variant_to_response(variant: Variant) -> VariantResponse:
    """Convert Variant entity to response schema."""
    return VariantResponse(
        id=variant.id,
        product_id=variant.product_id,
        color_id=variant.color_id,
        size_id=variant.size_id,
        sku=variant.sku,
        price=variant.price,
        is_active=variant.is_active,
        created_at=variant.created_at,
        updated_at=variant.updated_at,
    )


def entry_to_response(entry: LedgerEntry) -> LedgerEntryResponse:
    """Convert LedgerEntry to response schema."""
    return LedgerEntryResponse(
        id=entry.id,
        variant_id=entry.variant_id,
        kind=entry.kind.value,
        quantity=entry.quantity,
        unit_cost=entry.unit_cost,
        operator_id=entry.operator_id,
        note=entry.note,
        created_at=entry.created_at,
    )


# ============================================================================
# Catalog Endpoints
# ============================================================================


@router.post(
    "/products",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    responses=OPERATOR_ERRORS,
    summary="Create product",
)
async def create_product(
    body: ProductCreateRequest,
    service: Annotated[AdminService, Depends(get_service)],
) -> ProductResponse:
    """Create a product."""
    product = await service.create_product(
        name=body.name,
        base_price=body.base_price,
        category_id=body.category_id,
        description=body.description,
        image_url=body.image_url,
    )
    return product_to_response(product)


@router.post(
    "/products/{product_id}/deactivate",
    response_model=ProductDeactivatedResponse,
    responses={**OPERATOR_ERRORS, 404: {"model": ErrorResponse}},
    summary="Deactivate product",
    description="Soft-delete a product and deactivate all its variants.",
)
async def deactivate_product(
    product_id: int,
    service: Annotated[AdminService, Depends(get_service)],
) -> ProductDeactivatedResponse:
    """Deactivate a product."""
    variant_ids = await service.deactivate_product(product_id)
    return ProductDeactivatedResponse(product_id=product_id, deactivated_variant_ids=variant_ids)


@router.post(
    "/colors",
    response_model=ColorSchema,
    status_code=status.HTTP_201_CREATED,
    responses=OPERATOR_ERRORS,
    summary="Create color",
)
async def create_color(
    body: ColorCreateRequest,
    service: Annotated[AdminService, Depends(get_service)],
) -> ColorSchema:
    """Create a color."""
    return color_to_schema(await service.create_color(body.name, body.hex_code))


@router.post(
    "/sizes",
    response_model=SizeSchema,
    status_code=status.HTTP_201_CREATED,
    responses=OPERATOR_ERRORS,
    summary="Create size",
)
async def create_size(
    body: SizeCreateRequest,
    service: Annotated[AdminService, Depends(get_service)],
) -> SizeSchema:
    """Create a size."""
    return size_to_schema(await service.create_size(body.value, body.size_system))


@router.post(
    "/variants",
    response_model=VariantResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        **OPERATOR_ERRORS,
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
    summary="Create variant",
    description="Create a color/size variant. 409 if the triple or SKU is taken.",
)
async def create_variant(
    body: VariantUpsertRequest,
    service: Annotated[AdminService, Depends(get_service)],
) -> VariantResponse:
    """Create a variant."""
    variant = await service.upsert_variant(
        product_id=body.product_id,
        color_id=body.color_id,
        size_id=body.size_id,
        sku=body.sku,
        price=body.price,
        is_active=body.is_active,
    )
    return variant_to_response(variant)


@router.put(
    "/variants/{variant_id}",
    response_model=VariantResponse,
    responses={
        **OPERATOR_ERRORS,
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
    summary="Update variant",
)
async def update_variant(
    variant_id: int,
    body: VariantUpsertRequest,
    service: Annotated[AdminService, Depends(get_service)],
) -> VariantResponse:
    """Replace a variant's attributes."""
    variant = await service.upsert_variant(
        product_id=body.product_id,
        color_id=body.color_id,
        size_id=body.size_id,
        sku=body.sku,
        price=body.price,
        is_active=body.is_active,
        variant_id=variant_id,
    )
    return variant_to_response(variant)


@router.patch(
    "/variants/{variant_id}/active",
    response_model=VariantResponse,
    responses={
        **OPERATOR_ERRORS,
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
    summary="Enable or disable variant",
)
async def set_variant_active(
    variant_id: int,
    body: VariantActiveRequest,
    service: Annotated[AdminService, Depends(get_service)],
) -> VariantResponse:
    """Toggle a variant's active flag."""
    return variant_to_response(await service.set_variant_active(variant_id, body.is_active))


@router.delete(
    "/variants/{variant_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={**OPERATOR_ERRORS, 404: {"model": ErrorResponse}},
    summary="Delete variant",
    description="Delete a variant that has no stock history.",
)
async def delete_variant(
    variant_id: int,
    service: Annotated[AdminService, Depends(get_service)],
) -> None:
    """Delete a variant."""
    await service.delete_variant(variant_id)


@router.get(
    "/variants/by-sku/{sku}",
    response_model=VariantResponse,
    responses={**OPERATOR_ERRORS, 404: {"model": ErrorResponse}},
    summary="Find variant by SKU",
)
async def get_variant_by_sku(
    sku: str,
    service: Annotated[AdminService, Depends(get_service)],
) -> VariantResponse:
    """Look up a variant by its SKU."""
    return variant_to_response(await service.find_variant_by_sku(sku))


@router.get(
    "/variants/low-stock",
    response_model=LowStockResponse,
    responses=OPERATOR_ERRORS,
    summary="Low stock variants",
)
async def low_stock(
    service: Annotated[AdminService, Depends(get_service)],
    threshold: int | None = Query(default=None, description="Inclusive stock limit"),
) -> LowStockResponse:
    """List active variants at or below the threshold."""
    items = await service.low_stock(threshold)
    return LowStockResponse(
        threshold=threshold if threshold is not None else service.ledger.low_stock_threshold,
        items=[LowStockItem(variant=variant_to_response(i.variant), stock=i.stock) for i in items],
    )


# ============================================================================
# Stock Endpoints
# ============================================================================


@router.post(
    "/imports",
    response_model=LedgerEntryResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**OPERATOR_ERRORS, 404: {"model": ErrorResponse}},
    summary="Record stock import",
)
async def record_import(
    body: ImportCreateRequest,
    service: Annotated[AdminService, Depends(get_service)],
) -> LedgerEntryResponse:
    """Append a stock-in entry."""
    entry = await service.record_import(
        variant_id=body.variant_id,
        quantity=body.quantity,
        unit_cost=body.unit_cost,
        note=body.note,
    )
    return entry_to_response(entry)


@router.post(
    "/adjustments",
    response_model=LedgerEntryResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**OPERATOR_ERRORS, 404: {"model": ErrorResponse}},
    summary="Record stock adjustment",
)
async def record_adjustment(
    body: AdjustmentCreateRequest,
    service: Annotated[AdminService, Depends(get_service)],
) -> LedgerEntryResponse:
    """Append a signed stock correction."""
    entry = await service.record_adjustment(
        variant_id=body.variant_id,
        quantity=body.quantity,
        note=body.note,
    )
    return entry_to_response(entry)


@router.get(
    "/variants/{variant_id}/stock-check",
    response_model=StockCheckResponse,
    responses={**OPERATOR_ERRORS, 404: {"model": ErrorResponse}},
    summary="Check stock for a quantity",
)
async def check_stock(
    variant_id: int,
    service: Annotated[AdminService, Depends(get_service)],
    quantity: int = Query(..., description="Units requested"),
) -> StockCheckResponse:
    """Report whether current stock covers the requested quantity."""
    check = await service.check_stock(variant_id, quantity)
    return StockCheckResponse(
        variant_id=check.variant_id,
        available=check.available,
        current_stock=check.current_stock,
        requested=check.requested,
        shortfall=check.shortfall,
    )


@router.get(
    "/imports",
    response_model=LedgerEntriesResponse,
    responses=OPERATOR_ERRORS,
    summary="Stock ledger history",
)
async def list_imports(
    service: Annotated[AdminService, Depends(get_service)],
    variant_id: int | None = Query(default=None, description="Filter by variant"),
    operator_id: str | None = Query(default=None, description="Filter by operator"),
    since: datetime | None = Query(default=None, description="Entries at or after"),
    until: datetime | None = Query(default=None, description="Entries at or before"),
) -> LedgerEntriesResponse:
    """List ledger entries, oldest first."""
    entries = await service.list_entries(variant_id, operator_id, since, until)
    return LedgerEntriesResponse(
        items=[entry_to_response(e) for e in entries],
        total=len(entries),
    )
