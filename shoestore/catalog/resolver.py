"""Filter resolver for the product listing.

Narrows the catalog by base predicates (category, price range, free text)
and by variant-level color/size constraints, then paginates the qualifying
set. Variant filtering only narrows: it never reorders the sorted
candidates.
"""

from dataclasses import dataclass, field
from typing import Generic, TypeVar

import structlog

from shoestore.catalog.index import AttributeIndex, StockSummary, VariantAvailability
from shoestore.catalog.repository import SORT_FIELDS, CatalogRepository
from shoestore.domain.entities import Product
from shoestore.domain.validation import FieldErrors
from shoestore.infrastructure.config import settings

logger = structlog.get_logger()

T = TypeVar("T")

SORT_ORDERS = ("asc", "desc")


@dataclass
class ProductFilter:
    """Filter parameters for the product listing.

    Attributes:
        category_id: Filter by category ID.
        min_price: Minimum base price in cents.
        max_price: Maximum base price in cents.
        search: Case-insensitive text search in name/description.
        color_ids: Variant must have one of these colors.
        size_ids: Variant must have one of these sizes.
    """

    category_id: int | None = None
    min_price: int | None = None
    max_price: int | None = None
    search: str | None = None
    color_ids: set[int] | None = None
    size_ids: set[int] | None = None

    @property
    def has_variant_constraint(self) -> bool:
        """True when colors or sizes narrow the listing."""
        return bool(self.color_ids) or bool(self.size_ids)

    def matches(self, row: VariantAvailability) -> bool:
        """Check one variant against the color/size constraint.

        Both sets apply to the same variant (conjunctive on the pair), and
        only in-stock variants qualify.
        """
        if not row.in_stock:
            return False
        if self.color_ids and row.color.id not in self.color_ids:
            return False
        if self.size_ids and row.size.id not in self.size_ids:
            return False
        return True

    def validate(self) -> None:
        """Raise ValidationError for malformed values."""
        errors = FieldErrors()
        if self.category_id is not None:
            errors.require_id("category_id", self.category_id)
        errors.require_non_negative("min_price", self.min_price, optional=True)
        errors.require_non_negative("max_price", self.max_price, optional=True)
        if (
            isinstance(self.min_price, int)
            and isinstance(self.max_price, int)
            and self.min_price > self.max_price
        ):
            errors.add("min_price", "must not exceed max_price")
        for name, ids in (("color_ids", self.color_ids), ("size_ids", self.size_ids)):
            if ids and any(isinstance(i, bool) or not isinstance(i, int) or i <= 0 for i in ids):
                errors.add(name, "must contain positive integers")
        errors.raise_if_any("Invalid product filter")


@dataclass
class PaginationParams:
    """Pagination parameters.

    Attributes:
        page: Page number (1-indexed).
        page_size: Items per page.
        sort_by: Sort field (created_at, updated_at, price, name, or the
            aliases created/updated).
        sort_order: Sort order (asc/desc).
    """

    page: int = 1
    page_size: int = settings.default_page_size
    sort_by: str = "created_at"
    sort_order: str = "desc"

    @property
    def offset(self) -> int:
        """Calculate offset from page number."""
        return (self.page - 1) * self.page_size

    @property
    def limit(self) -> int:
        """Get limit (alias for page_size)."""
        return self.page_size

    def validate(self) -> None:
        """Raise ValidationError for malformed values."""
        errors = FieldErrors()
        errors.require_id("page", self.page)
        errors.require_id("page_size", self.page_size)
        if isinstance(self.page_size, int) and self.page_size > settings.max_page_size:
            errors.add("page_size", f"must be at most {settings.max_page_size}")
        if self.sort_by not in SORT_FIELDS:
            errors.add("sort_by", f"must be one of {sorted(SORT_FIELDS)}")
        if str(self.sort_order).lower() not in SORT_ORDERS:
            errors.add("sort_order", "must be 'asc' or 'desc'")
        errors.raise_if_any("Invalid pagination")


@dataclass
class PaginatedResult(Generic[T]):
    """Paginated result container.

    Attributes:
        items: List of items.
        total: Total count of the filtered set.
        page: Current page.
        page_size: Items per page.
    """

    items: list[T]
    total: int
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        """Calculate total pages."""
        return (self.total + self.page_size - 1) // self.page_size

    @property
    def has_next(self) -> bool:
        """Check if there's a next page."""
        return self.page < self.total_pages

    @property
    def has_prev(self) -> bool:
        """Check if there's a previous page."""
        return self.page > 1


@dataclass
class ProductListing:
    """A product in the listing with its stock summary and price span."""

    product: Product
    summary: StockSummary
    min_price: int
    max_price: int
    matching_variant_ids: list[int] = field(default_factory=list)


class FilterResolver:
    """Resolves listing filters against the catalog and live stock.

    Example usage:
        resolver = FilterResolver(catalog_repo, index)
        page = await resolver.resolve(
            ProductFilter(color_ids={1}, size_ids={9}),
            PaginationParams(page=1, sort_by="price", sort_order="asc"),
        )
    """

    def __init__(self, repository: CatalogRepository, index: AttributeIndex) -> None:
        self.repository = repository
        self.index = index

    async def resolve(
        self,
        filters: ProductFilter,
        pagination: PaginationParams,
    ) -> PaginatedResult[ProductListing]:
        """Filter, sort and paginate the product listing.

        Args:
            filters: Base and variant-level predicates.
            pagination: Page, page size and sort order.

        Returns:
            One page of listings; totals count the filtered set.

        Raises:
            ValidationError: Malformed filter or pagination values.
        """
        filters.validate()
        pagination.validate()

        candidates = await self.repository.find_products(
            category_id=filters.category_id,
            min_price=filters.min_price,
            max_price=filters.max_price,
            search=filters.search.strip() if filters.search else None,
            active_only=True,
            sort_by=pagination.sort_by,
            sort_order=pagination.sort_order.lower(),
        )
        availability = await self.index.availability(p.id for p in candidates)

        qualifying: list[ProductListing] = []
        for product in candidates:
            rows = availability.get(product.id, [])
            matching = [row for row in rows if filters.matches(row)]
            if filters.has_variant_constraint and not matching:
                continue
            qualifying.append(self._listing(product, rows, matching))

        start = pagination.offset
        items = qualifying[start : start + pagination.limit]

        logger.debug(
            "Product listing resolved",
            candidates=len(candidates),
            total=len(qualifying),
            page=pagination.page,
            color_ids=sorted(filters.color_ids or []),
            size_ids=sorted(filters.size_ids or []),
        )
        return PaginatedResult(
            items=items,
            total=len(qualifying),
            page=pagination.page,
            page_size=pagination.page_size,
        )

    @staticmethod
    def _listing(
        product: Product,
        rows: list[VariantAvailability],
        matching: list[VariantAvailability],
    ) -> ProductListing:
        prices = [row.variant.effective_price(product) for row in rows] or [product.base_price]
        return ProductListing(
            product=product,
            summary=StockSummary.from_availability(rows),
            min_price=min(prices),
            max_price=max(prices),
            matching_variant_ids=[row.variant.id for row in matching],
        )
