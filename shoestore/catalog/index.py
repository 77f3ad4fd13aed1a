"""Attribute index: per-product color/size availability.

Derives, from a product's active variants and the live stock projection,
which colors are offered, which sizes exist per color and how many units
each combination has. Structural data (variants, colors, sizes) is read
through the attribute cache; stock is always read from the ledger.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field

import structlog

from shoestore.catalog.cache import AttributeCache, CacheKey
from shoestore.catalog.ledger import StockLedger
from shoestore.catalog.repository import CatalogRepository
from shoestore.domain.entities import Color, Size, Variant
from shoestore.domain.exceptions import NotFoundError

logger = structlog.get_logger()

STRUCTURE_ENTITY = "product_structure"


# ============================================================================
# Result Types
# ============================================================================


@dataclass(frozen=True)
class ProductStructure:
    """Active variants of a product with the colors and sizes they reference."""

    product_id: int
    variants: tuple[Variant, ...]
    colors: dict[int, Color] = field(default_factory=dict)
    sizes: dict[int, Size] = field(default_factory=dict)


@dataclass(frozen=True)
class VariantAvailability:
    """One active variant with its resolved attributes and current stock."""

    variant: Variant
    color: Color
    size: Size
    stock: int

    @property
    def in_stock(self) -> bool:
        return self.stock > 0


@dataclass(frozen=True)
class SizeStock:
    """A size offered for a color, with the stock of that combination."""

    size: Size
    stock: int
    variant_id: int


@dataclass(frozen=True)
class StockSummary:
    """Aggregate stock figures for a product.

    Attributes:
        total_stock: Units across all active variants.
        has_stock: True when any active variant has units.
        variant_count: Number of active variants.
        available_colors: Colors with at least one in-stock variant, by name.
        available_sizes: Sizes with at least one in-stock variant, natural order.
    """

    total_stock: int
    has_stock: bool
    variant_count: int
    available_colors: list[Color]
    available_sizes: list[Size]

    @classmethod
    def from_availability(cls, rows: list[VariantAvailability]) -> "StockSummary":
        """Summarize a product's availability rows."""
        in_stock = [row for row in rows if row.in_stock]
        colors = {row.color.id: row.color for row in in_stock}
        sizes = {row.size.id: row.size for row in in_stock}
        return cls(
            total_stock=sum(row.stock for row in rows),
            has_stock=bool(in_stock),
            variant_count=len(rows),
            available_colors=sorted(colors.values(), key=_color_order),
            available_sizes=sorted(sizes.values(), key=_size_order),
        )


def _color_order(color: Color) -> tuple[str, int]:
    return (color.name.casefold(), color.id)


def _size_order(size: Size) -> tuple[tuple[int, float, str], int]:
    return (size.sort_key, size.id)


# ============================================================================
# Attribute Index
# ============================================================================


class AttributeIndex:
    """Derived color/size availability per product.

    All results are deterministic: colors ordered by name, sizes in natural
    size order, ties broken by id.

    Example usage:
        index = AttributeIndex(catalog_repo, ledger, cache)

        colors = await index.colors_for(product_id)
        sizes = await index.sizes_for(product_id, colors[0].id)
    """

    def __init__(
        self,
        repository: CatalogRepository,
        ledger: StockLedger,
        cache: AttributeCache | None = None,
    ) -> None:
        """Initialize index.

        Args:
            repository: Catalog storage.
            ledger: Stock projection.
            cache: Structural cache (a disabled cache when omitted).
        """
        self.repository = repository
        self.ledger = ledger
        self.cache = cache or AttributeCache(enabled=False)

    async def colors_for(self, product_id: int) -> list[Color]:
        """Colors with at least one active variant, regardless of stock."""
        structure = await self._structure(product_id)
        colors = {structure.colors[v.color_id] for v in structure.variants}
        return sorted(colors, key=_color_order)

    async def sizes_for(self, product_id: int, color_id: int) -> list[SizeStock]:
        """Sizes of the active variants in one color, with current stock."""
        rows = await self.availability_for(product_id)
        return [
            SizeStock(size=row.size, stock=row.stock, variant_id=row.variant.id)
            for row in rows
            if row.color.id == color_id
        ]

    async def has_any_stock(self, product_id: int) -> bool:
        """True when any active variant has units."""
        rows = await self.availability_for(product_id)
        return any(row.in_stock for row in rows)

    async def stock_summary(self, product_id: int) -> StockSummary:
        """Aggregate stock figures for one product."""
        return StockSummary.from_availability(await self.availability_for(product_id))

    async def availability_for(self, product_id: int) -> list[VariantAvailability]:
        """Active variants of one product with attributes and stock.

        Raises:
            NotFoundError: If the product does not exist.
        """
        await self._structure(product_id)
        grouped = await self.availability([product_id])
        return grouped[product_id]

    async def availability(
        self, product_ids: Iterable[int]
    ) -> dict[int, list[VariantAvailability]]:
        """Batch availability for many products.

        Rows per product are ordered by color name, then natural size order.
        """
        structures = await self._structures(product_ids)
        variant_ids = [v.id for s in structures.values() for v in s.variants]
        stock = await self.ledger.current_stock_many(variant_ids)

        result: dict[int, list[VariantAvailability]] = {}
        for product_id, structure in structures.items():
            rows = [
                VariantAvailability(
                    variant=v,
                    color=structure.colors[v.color_id],
                    size=structure.sizes[v.size_id],
                    stock=stock[v.id],
                )
                for v in structure.variants
            ]
            rows.sort(key=lambda r: (_color_order(r.color), _size_order(r.size), r.variant.id))
            result[product_id] = rows
        return result

    # ------------------------------------------------------------------
    # Structural data (cached)
    # ------------------------------------------------------------------

    async def _structure(self, product_id: int) -> ProductStructure:
        key = CacheKey.build(STRUCTURE_ENTITY, product_id)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        if await self.repository.get_product(product_id) is None:
            raise NotFoundError("Product", product_id)
        structures = await self._load([product_id])
        return structures[product_id]

    async def _structures(self, product_ids: Iterable[int]) -> dict[int, ProductStructure]:
        structures: dict[int, ProductStructure] = {}
        missing: list[int] = []
        for product_id in dict.fromkeys(product_ids):
            cached = self.cache.get(CacheKey.build(STRUCTURE_ENTITY, product_id))
            if cached is not None:
                structures[product_id] = cached
            else:
                missing.append(product_id)

        if missing:
            structures.update(await self._load(missing))
        return structures

    async def _load(self, product_ids: list[int]) -> dict[int, ProductStructure]:
        generations = {pid: self.cache.generation(pid) for pid in product_ids}
        grouped = await self.repository.find_variants_for_products(product_ids)
        active = {pid: [v for v in variants if v.is_active] for pid, variants in grouped.items()}

        color_ids = {v.color_id for variants in active.values() for v in variants}
        size_ids = {v.size_id for variants in active.values() for v in variants}
        colors = {c.id: c for c in await self.repository.list_colors(color_ids)} if color_ids else {}
        sizes = {s.id: s for s in await self.repository.list_sizes(size_ids)} if size_ids else {}

        structures: dict[int, ProductStructure] = {}
        for product_id in product_ids:
            variants = active.get(product_id, [])
            structure = ProductStructure(
                product_id=product_id,
                variants=tuple(variants),
                colors={v.color_id: colors[v.color_id] for v in variants},
                sizes={v.size_id: sizes[v.size_id] for v in variants},
            )
            self.cache.set(
                CacheKey.build(STRUCTURE_ENTITY, product_id),
                structure,
                generation=generations[product_id],
            )
            structures[product_id] = structure

        logger.debug("Attribute structure loaded", product_ids=product_ids)
        return structures
