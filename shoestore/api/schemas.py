"""API schemas for the shoe storefront.

Pydantic models for request/response validation and serialization.
Request bodies only enforce types; business rules (positive quantities,
non-negative prices, SKU length) are checked by the catalog services so
every rule has one home and one error format.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Common Schemas
# ============================================================================


class ErrorDetail(BaseModel):
    """Detailed error information."""

    field: str | None = Field(default=None, description="Field that caused the error")
    message: str = Field(..., description="Error message")


class ErrorResponse(BaseModel):
    """Standard error response.

    All API errors follow this format for consistency.
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: list[ErrorDetail] = Field(
        default_factory=list, description="Field-level error details"
    )
    context: dict[str, Any] = Field(
        default_factory=dict, description="Additional error context"
    )
    request_id: str | None = Field(
        default=None, description="Request ID for correlation"
    )


class PaginationMeta(BaseModel):
    """Pagination metadata of a listing page."""

    model_config = ConfigDict(populate_by_name=True)

    page: int = Field(..., description="Current page number")
    limit: int = Field(..., description="Items per page")
    total: int = Field(..., description="Total number of matching items")
    total_pages: int = Field(..., alias="totalPages", description="Number of pages")
    has_next: bool = Field(..., alias="hasNext", description="Whether a next page exists")
    has_prev: bool = Field(..., alias="hasPrev", description="Whether a previous page exists")


# ============================================================================
# Attribute Schemas
# ============================================================================


class ColorSchema(BaseModel):
    """Color representation."""

    id: int
    name: str
    hex_code: str | None = None


class SizeSchema(BaseModel):
    """Size representation."""

    id: int
    value: str
    size_system: str


class StockSummarySchema(BaseModel):
    """Aggregate stock figures of a product."""

    total_stock: int = Field(..., description="Units across active variants")
    has_stock: bool = Field(..., description="Whether any active variant is in stock")
    variant_count: int = Field(..., description="Number of active variants")
    available_colors: list[ColorSchema] = Field(default_factory=list)
    available_sizes: list[SizeSchema] = Field(default_factory=list)


# ============================================================================
# Product Schemas
# ============================================================================


class ProductListItem(BaseModel):
    """Product as shown in the listing."""

    id: int
    name: str
    description: str | None = None
    base_price: int = Field(..., description="Base price in cents")
    min_price: int = Field(..., description="Lowest active variant price in cents")
    max_price: int = Field(..., description="Highest active variant price in cents")
    category_id: int | None = None
    image_url: str | None = None
    in_stock: bool
    stock: StockSummarySchema
    created_at: datetime
    updated_at: datetime


class ProductListResponse(BaseModel):
    """A page of products."""

    items: list[ProductListItem]
    pagination: PaginationMeta


class VariantDetailSchema(BaseModel):
    """Variant as embedded in the product detail."""

    id: int
    color: ColorSchema
    size: SizeSchema
    sku: str
    price: int = Field(..., description="Effective price in cents")
    stock: int
    is_active: bool


class ProductDetailResponse(BaseModel):
    """Product with its full variant list."""

    id: int
    name: str
    description: str | None = None
    base_price: int
    category_id: int | None = None
    image_url: str | None = None
    is_active: bool
    variants: list[VariantDetailSchema]
    stock: StockSummarySchema
    created_at: datetime
    updated_at: datetime


# ============================================================================
# Selection Schemas
# ============================================================================


class SizeOptionSchema(BaseModel):
    """A size button in the selector."""

    size: SizeSchema
    stock: int
    selectable: bool
    variant_id: int | None = None


class ResolvedVariantSchema(BaseModel):
    """Variant resolved by a complete selection."""

    variant_id: int
    sku: str
    price: int
    stock: int
    low_stock: bool


class SelectionResponse(BaseModel):
    """State of a color/size selection."""

    product_id: int
    status: str
    color_id: int | None = None
    size_id: int | None = None
    allowed_transitions: list[str]
    colors: list[ColorSchema]
    sizes: list[SizeOptionSchema]
    resolved: ResolvedVariantSchema | None = None


# ============================================================================
# Admin Schemas
# ============================================================================


class ProductCreateRequest(BaseModel):
    """Request to create a product."""

    name: str
    base_price: int = Field(..., description="Price in cents")
    category_id: int | None = None
    description: str | None = None
    image_url: str | None = None


class ProductResponse(BaseModel):
    """Product record."""

    id: int
    name: str
    description: str | None = None
    base_price: int
    category_id: int | None = None
    image_url: str | None = None
    is_active: bool
    created_at: datetime
    updated_at: datetime


class ProductDeactivatedResponse(BaseModel):
    """Result of deactivating a product."""

    product_id: int
    deactivated_variant_ids: list[int]


class ColorCreateRequest(BaseModel):
    """Request to create a color."""

    name: str
    hex_code: str | None = None


class SizeCreateRequest(BaseModel):
    """Request to create a size."""

    value: str
    size_system: str = "US"


class VariantUpsertRequest(BaseModel):
    """Request to create or replace a variant."""

    product_id: int
    color_id: int
    size_id: int
    sku: str
    price: int | None = Field(default=None, description="Override in cents")
    is_active: bool = True


class VariantActiveRequest(BaseModel):
    """Request to enable or disable a variant."""

    is_active: bool


class VariantResponse(BaseModel):
    """Variant record."""

    id: int
    product_id: int
    color_id: int
    size_id: int
    sku: str
    price: int | None = None
    is_active: bool
    created_at: datetime
    updated_at: datetime


class ImportCreateRequest(BaseModel):
    """Request to record a stock import."""

    variant_id: int
    quantity: int
    unit_cost: int = Field(..., description="Import price per unit in cents")
    note: str | None = None


class AdjustmentCreateRequest(BaseModel):
    """Request to record a signed stock correction."""

    variant_id: int
    quantity: int
    note: str | None = None


class LedgerEntryResponse(BaseModel):
    """Stock ledger entry."""

    id: int
    variant_id: int
    kind: str
    quantity: int
    unit_cost: int | None = None
    operator_id: str
    note: str | None = None
    created_at: datetime


class LedgerEntriesResponse(BaseModel):
    """Ledger history."""

    items: list[LedgerEntryResponse]
    total: int


class LowStockItem(BaseModel):
    """Variant with low stock."""

    variant: VariantResponse
    stock: int


class LowStockResponse(BaseModel):
    """Variants at or below the operator threshold."""

    threshold: int
    items: list[LowStockItem]


class StockCheckResponse(BaseModel):
    """Whether a variant can supply a requested quantity."""

    variant_id: int
    available: bool
    current_stock: int
    requested: int
    shortfall: int
