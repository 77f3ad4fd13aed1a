"""Catalog and ledger repositories.

Defines the storage contracts used by the catalog services and their
SQLAlchemy implementations. Every repository call is its own unit of work:
it opens a session, commits (or rolls back) and closes it, so each catalog
or ledger mutation is independently committed.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import datetime
from typing import Any

from sqlalchemy import and_, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from shoestore.catalog.models import (
    ColorModel,
    ProductModel,
    SizeModel,
    StockImportModel,
    VariantModel,
)
from shoestore.domain.entities import Color, LedgerEntry, Product, Size, Variant
from shoestore.domain.exceptions import DuplicateVariantError, NotFoundError
from shoestore.domain.value_objects import VariantKey

# Public sort keys → product attribute
SORT_FIELDS: dict[str, str] = {
    "created_at": "created_at",
    "created": "created_at",
    "updated_at": "updated_at",
    "updated": "updated_at",
    "price": "base_price",
    "name": "name",
}


# ============================================================================
# Contracts
# ============================================================================


class CatalogRepository(ABC):
    """Storage contract for products, colors, sizes and variants.

    Implementations enforce the variant natural key (one active variant per
    product/color/size) and SKU uniqueness at write time, raising
    DuplicateVariantError, so concurrent writers cannot both succeed.
    """

    # Products

    @abstractmethod
    async def add_product(self, product: Product) -> Product:
        """Insert a product and assign its id."""

    @abstractmethod
    async def save_product(self, product: Product) -> Product:
        """Persist changes to an existing product."""

    @abstractmethod
    async def get_product(self, product_id: int) -> Product | None:
        """Get product by id."""

    @abstractmethod
    async def find_products(
        self,
        category_id: int | None = None,
        min_price: int | None = None,
        max_price: int | None = None,
        search: str | None = None,
        active_only: bool = True,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> list[Product]:
        """Find products by base predicates, sorted, ties broken by id."""

    @abstractmethod
    async def deactivate_product(self, product: Product) -> list[int]:
        """Persist a product deactivation and deactivate all its variants.

        Returns:
            Ids of variants that were deactivated.
        """

    # Colors and sizes

    @abstractmethod
    async def add_color(self, color: Color) -> Color:
        """Insert a color and assign its id."""

    @abstractmethod
    async def get_color(self, color_id: int) -> Color | None:
        """Get color by id."""

    @abstractmethod
    async def list_colors(self, color_ids: Iterable[int] | None = None) -> list[Color]:
        """List colors (optionally restricted to ids), ordered by id."""

    @abstractmethod
    async def add_size(self, size: Size) -> Size:
        """Insert a size and assign its id."""

    @abstractmethod
    async def get_size(self, size_id: int) -> Size | None:
        """Get size by id."""

    @abstractmethod
    async def list_sizes(self, size_ids: Iterable[int] | None = None) -> list[Size]:
        """List sizes (optionally restricted to ids), ordered by id."""

    # Variants

    @abstractmethod
    async def add_variant(self, variant: Variant) -> Variant:
        """Insert a variant and assign its id.

        Raises:
            DuplicateVariantError: Active triple or SKU already taken.
        """

    @abstractmethod
    async def save_variant(self, variant: Variant) -> Variant:
        """Persist changes to an existing variant.

        Raises:
            DuplicateVariantError: Active triple or SKU already taken.
            NotFoundError: Variant does not exist.
        """

    @abstractmethod
    async def delete_variant(self, variant_id: int) -> None:
        """Physically delete a variant."""

    @abstractmethod
    async def get_variant(self, variant_id: int) -> Variant | None:
        """Get variant by id."""

    @abstractmethod
    async def find_variants(self, product_id: int) -> list[Variant]:
        """All variants (active and inactive) of a product, ordered by id."""

    @abstractmethod
    async def find_variants_for_products(
        self, product_ids: Iterable[int]
    ) -> dict[int, list[Variant]]:
        """Variants grouped by product id (products without variants map to [])."""

    @abstractmethod
    async def find_active_variant(self, key: VariantKey) -> Variant | None:
        """Get the active variant holding a natural key."""

    @abstractmethod
    async def find_by_sku(self, sku: str) -> Variant | None:
        """Get variant by SKU."""

    @abstractmethod
    async def find_active_variants(self) -> list[Variant]:
        """All active variants of active products."""


class LedgerRepository(ABC):
    """Storage contract for the append-only stock ledger."""

    @abstractmethod
    async def append(self, entry: LedgerEntry) -> LedgerEntry:
        """Append an entry and return it with its sequence id."""

    @abstractmethod
    async def totals(self, variant_ids: Iterable[int]) -> dict[int, int]:
        """Sum of ledger quantities per variant (0 for variants without entries)."""

    @abstractmethod
    async def entries(
        self,
        variant_id: int | None = None,
        operator_id: str | None = None,
        since: datetime | None = None,
        until: datetime | None = None,
    ) -> list[LedgerEntry]:
        """Ledger history, oldest first."""

    @abstractmethod
    async def has_entries(self, variant_id: int) -> bool:
        """Check whether a variant has any ledger history."""


# ============================================================================
# SQLAlchemy Implementations
# ============================================================================


class SqlCatalogRepository(CatalogRepository):
    """Catalog repository backed by SQLAlchemy.

    Example usage:
        repo = SqlCatalogRepository(get_session_factory())
        products = await repo.find_products(category_id=3, sort_by="price")
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        """Initialize repository with a session factory.

        Args:
            session_factory: Async SQLAlchemy session factory.
        """
        self.session_factory = session_factory

    async def add_product(self, product: Product) -> Product:
        async with self.session_factory() as session, session.begin():
            row = ProductModel(created_at=product.created_at)
            row.apply(product)
            session.add(row)
            await session.flush()
            product.id = row.id
        return product

    async def save_product(self, product: Product) -> Product:
        async with self.session_factory() as session, session.begin():
            row = await session.get(ProductModel, product.id)
            if row is None:
                raise NotFoundError("Product", product.id)
            row.apply(product)
        return product

    async def get_product(self, product_id: int) -> Product | None:
        async with self.session_factory() as session:
            row = await session.get(ProductModel, product_id)
            return row.to_entity() if row else None

    async def find_products(
        self,
        category_id: int | None = None,
        min_price: int | None = None,
        max_price: int | None = None,
        search: str | None = None,
        active_only: bool = True,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> list[Product]:
        """Find products with filtering and sorting.

        Args:
            category_id: Filter by exact category ID.
            min_price: Minimum base price in cents.
            max_price: Maximum base price in cents.
            search: Search in name and description.
            active_only: Hide soft-deleted products.
            sort_by: Sort field (created_at, updated_at, price, name).
            sort_order: Sort order (asc, desc).

        Returns:
            Matching products.
        """
        query = select(ProductModel)

        # Build filter conditions
        conditions: list[Any] = []

        if active_only:
            conditions.append(ProductModel.is_active.is_(True))

        if category_id is not None:
            conditions.append(ProductModel.category_id == category_id)

        if min_price is not None:
            conditions.append(ProductModel.base_price >= min_price)

        if max_price is not None:
            conditions.append(ProductModel.base_price <= max_price)

        if search:
            search_pattern = f"%{search}%"
            conditions.append(
                or_(
                    ProductModel.name.ilike(search_pattern),
                    ProductModel.description.ilike(search_pattern),
                )
            )

        if conditions:
            query = query.where(and_(*conditions))

        # Sorting (id keeps ties stable across pages)
        sort_column = getattr(ProductModel, SORT_FIELDS.get(sort_by, "created_at"))
        if sort_order.lower() == "desc":
            query = query.order_by(sort_column.desc(), ProductModel.id.desc())
        else:
            query = query.order_by(sort_column.asc(), ProductModel.id.asc())

        async with self.session_factory() as session:
            result = await session.execute(query)
            return [row.to_entity() for row in result.scalars().all()]

    async def deactivate_product(self, product: Product) -> list[int]:
        async with self.session_factory() as session, session.begin():
            row = await session.get(ProductModel, product.id)
            if row is None:
                raise NotFoundError("Product", product.id)
            row.apply(product)
            result = await session.execute(
                select(VariantModel).where(
                    and_(
                        VariantModel.product_id == product.id,
                        VariantModel.is_active.is_(True),
                    )
                )
                .order_by(VariantModel.id)
            )
            variant_ids = []
            for variant in result.scalars().all():
                variant.is_active = False
                variant_ids.append(variant.id)
        return variant_ids

    async def add_color(self, color: Color) -> Color:
        async with self.session_factory() as session, session.begin():
            row = ColorModel(name=color.name, hex_code=color.hex_code, is_active=color.is_active)
            session.add(row)
            await session.flush()
            color.id = row.id
        return color

    async def get_color(self, color_id: int) -> Color | None:
        async with self.session_factory() as session:
            row = await session.get(ColorModel, color_id)
            return row.to_entity() if row else None

    async def list_colors(self, color_ids: Iterable[int] | None = None) -> list[Color]:
        query = select(ColorModel).order_by(ColorModel.id)
        if color_ids is not None:
            query = query.where(ColorModel.id.in_(list(color_ids)))
        async with self.session_factory() as session:
            result = await session.execute(query)
            return [row.to_entity() for row in result.scalars().all()]

    async def add_size(self, size: Size) -> Size:
        async with self.session_factory() as session, session.begin():
            row = SizeModel(
                value=size.value,
                size_system=size.size_system.value,
                is_active=size.is_active,
            )
            session.add(row)
            await session.flush()
            size.id = row.id
        return size

    async def get_size(self, size_id: int) -> Size | None:
        async with self.session_factory() as session:
            row = await session.get(SizeModel, size_id)
            return row.to_entity() if row else None

    async def list_sizes(self, size_ids: Iterable[int] | None = None) -> list[Size]:
        query = select(SizeModel).order_by(SizeModel.id)
        if size_ids is not None:
            query = query.where(SizeModel.id.in_(list(size_ids)))
        async with self.session_factory() as session:
            result = await session.execute(query)
            return [row.to_entity() for row in result.scalars().all()]

    async def add_variant(self, variant: Variant) -> Variant:
        try:
            async with self.session_factory() as session, session.begin():
                await self._check_conflicts(session, variant)
                row = VariantModel(
                    product_id=variant.product_id,
                    created_at=variant.created_at,
                )
                row.apply(variant)
                session.add(row)
                await session.flush()
                variant.id = row.id
        except IntegrityError:
            # Lost a race against a concurrent writer; report who holds the key
            async with self.session_factory() as session:
                await self._check_conflicts(session, variant)
            raise
        return variant

    async def save_variant(self, variant: Variant) -> Variant:
        try:
            async with self.session_factory() as session, session.begin():
                row = await session.get(VariantModel, variant.id)
                if row is None:
                    raise NotFoundError("Variant", variant.id)
                await self._check_conflicts(session, variant)
                row.apply(variant)
        except IntegrityError:
            async with self.session_factory() as session:
                await self._check_conflicts(session, variant)
            raise
        return variant

    async def delete_variant(self, variant_id: int) -> None:
        async with self.session_factory() as session, session.begin():
            row = await session.get(VariantModel, variant_id)
            if row is None:
                raise NotFoundError("Variant", variant_id)
            await session.delete(row)

    async def get_variant(self, variant_id: int) -> Variant | None:
        async with self.session_factory() as session:
            row = await session.get(VariantModel, variant_id)
            return row.to_entity() if row else None

    async def find_variants(self, product_id: int) -> list[Variant]:
        grouped = await self.find_variants_for_products([product_id])
        return grouped[product_id]

    async def find_variants_for_products(
        self, product_ids: Iterable[int]
    ) -> dict[int, list[Variant]]:
        ids = list(product_ids)
        grouped: dict[int, list[Variant]] = {product_id: [] for product_id in ids}
        if not ids:
            return grouped
        query = (
            select(VariantModel)
            .where(VariantModel.product_id.in_(ids))
            .order_by(VariantModel.id)
        )
        async with self.session_factory() as session:
            result = await session.execute(query)
            for row in result.scalars().all():
                grouped[row.product_id].append(row.to_entity())
        return grouped

    async def find_active_variant(self, key: VariantKey) -> Variant | None:
        query = select(VariantModel).where(
            and_(
                VariantModel.product_id == key.product_id,
                VariantModel.color_id == key.color_id,
                VariantModel.size_id == key.size_id,
                VariantModel.is_active.is_(True),
            )
        )
        async with self.session_factory() as session:
            row = (await session.execute(query)).scalar_one_or_none()
            return row.to_entity() if row else None

    async def find_by_sku(self, sku: str) -> Variant | None:
        async with self.session_factory() as session:
            row = (
                await session.execute(select(VariantModel).where(VariantModel.sku == sku))
            ).scalar_one_or_none()
            return row.to_entity() if row else None

    async def find_active_variants(self) -> list[Variant]:
        query = (
            select(VariantModel)
            .join(ProductModel, ProductModel.id == VariantModel.product_id)
            .where(
                and_(
                    VariantModel.is_active.is_(True),
                    ProductModel.is_active.is_(True),
                )
            )
            .order_by(VariantModel.id)
        )
        async with self.session_factory() as session:
            result = await session.execute(query)
            return [row.to_entity() for row in result.scalars().all()]

    async def _check_conflicts(self, session: AsyncSession, variant: Variant) -> None:
        """Raise DuplicateVariantError if the SKU or active triple is held by another row."""
        sku_holder = (
            await session.execute(select(VariantModel.id).where(VariantModel.sku == variant.sku))
        ).scalar_one_or_none()
        if sku_holder is not None and sku_holder != variant.id:
            raise DuplicateVariantError(sku_holder, sku=variant.sku)

        if not variant.is_active:
            return
        triple_holder = (
            await session.execute(
                select(VariantModel.id).where(
                    and_(
                        VariantModel.product_id == variant.product_id,
                        VariantModel.color_id == variant.color_id,
                        VariantModel.size_id == variant.size_id,
                        VariantModel.is_active.is_(True),
                    )
                )
            )
        ).scalar_one_or_none()
        if triple_holder is not None and triple_holder != variant.id:
            raise DuplicateVariantError(
                triple_holder,
                product_id=variant.product_id,
                color_id=variant.color_id,
                size_id=variant.size_id,
            )


class SqlLedgerRepository(LedgerRepository):
    """Append-only stock ledger backed by the ``stock_imports`` table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        """Initialize repository with a session factory.

        Args:
            session_factory: Async SQLAlchemy session factory.
        """
        self.session_factory = session_factory

    async def append(self, entry: LedgerEntry) -> LedgerEntry:
        async with self.session_factory() as session, session.begin():
            row = StockImportModel.from_entity(entry)
            session.add(row)
            await session.flush()
            saved = row.to_entity()
        return saved

    async def totals(self, variant_ids: Iterable[int]) -> dict[int, int]:
        ids = list(variant_ids)
        totals = {variant_id: 0 for variant_id in ids}
        if not ids:
            return totals
        query = (
            select(
                StockImportModel.variant_id,
                func.coalesce(func.sum(StockImportModel.quantity), 0),
            )
            .where(StockImportModel.variant_id.in_(ids))
            .group_by(StockImportModel.variant_id)
        )
        async with self.session_factory() as session:
            result = await session.execute(query)
            for variant_id, total in result.all():
                totals[variant_id] = int(total)
        return totals

    async def entries(
        self,
        variant_id: int | None = None,
        operator_id: str | None = None,
        since: datetime | None = None,
        until: datetime | None = None,
    ) -> list[LedgerEntry]:
        query = select(StockImportModel)

        conditions: list[Any] = []
        if variant_id is not None:
            conditions.append(StockImportModel.variant_id == variant_id)
        if operator_id is not None:
            conditions.append(StockImportModel.operator_id == operator_id)
        if since is not None:
            conditions.append(StockImportModel.created_at >= since)
        if until is not None:
            conditions.append(StockImportModel.created_at <= until)
        if conditions:
            query = query.where(and_(*conditions))

        query = query.order_by(StockImportModel.id.asc())

        async with self.session_factory() as session:
            result = await session.execute(query)
            return [row.to_entity() for row in result.scalars().all()]

    async def has_entries(self, variant_id: int) -> bool:
        query = select(func.count(StockImportModel.id)).where(
            StockImportModel.variant_id == variant_id
        )
        async with self.session_factory() as session:
            return (await session.execute(query)).scalar_one() > 0
