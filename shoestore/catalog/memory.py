"""In-memory catalog and ledger repositories.

Used for tests, local development and the demo seed. They honor the same
write-time uniqueness rules as the database repositories. Mutations run
under an ``asyncio.Lock`` so the check-then-insert is atomic across
concurrent tasks.
"""

import asyncio
import copy
from collections.abc import Iterable
from dataclasses import replace
from datetime import datetime

from shoestore.catalog.repository import SORT_FIELDS, CatalogRepository, LedgerRepository
from shoestore.domain.entities import Color, LedgerEntry, Product, Size, Variant
from shoestore.domain.exceptions import DuplicateVariantError, NotFoundError
from shoestore.domain.value_objects import VariantKey


def _detached(entity):
    """Copy an entity so callers never mutate stored state in place."""
    clone = copy.copy(entity)
    if hasattr(clone, "_events"):
        clone._events = []
    return clone


class InMemoryCatalogRepository(CatalogRepository):
    """In-memory repository for products, colors, sizes and variants."""

    def __init__(self) -> None:
        self._products: dict[int, Product] = {}
        self._colors: dict[int, Color] = {}
        self._sizes: dict[int, Size] = {}
        self._variants: dict[int, Variant] = {}
        self._next_id = {"product": 1, "color": 1, "size": 1, "variant": 1}
        self._lock = asyncio.Lock()

    def _assign_id(self, kind: str) -> int:
        new_id = self._next_id[kind]
        self._next_id[kind] = new_id + 1
        return new_id

    # ------------------------------------------------------------------
    # Products
    # ------------------------------------------------------------------

    async def add_product(self, product: Product) -> Product:
        async with self._lock:
            product.id = self._assign_id("product")
            self._products[product.id] = _detached(product)
        return product

    async def save_product(self, product: Product) -> Product:
        async with self._lock:
            if product.id not in self._products:
                raise NotFoundError("Product", product.id)
            self._products[product.id] = _detached(product)
        return product

    async def get_product(self, product_id: int) -> Product | None:
        product = self._products.get(product_id)
        return _detached(product) if product else None

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
        products = list(self._products.values())

        if active_only:
            products = [p for p in products if p.is_active]
        if category_id is not None:
            products = [p for p in products if p.category_id == category_id]
        if min_price is not None:
            products = [p for p in products if p.base_price >= min_price]
        if max_price is not None:
            products = [p for p in products if p.base_price <= max_price]
        if search:
            needle = search.casefold()
            products = [
                p
                for p in products
                if needle in p.name.casefold() or needle in (p.description or "").casefold()
            ]

        attribute = SORT_FIELDS.get(sort_by, "created_at")
        reverse = sort_order.lower() == "desc"
        products.sort(key=lambda p: (getattr(p, attribute), p.id), reverse=reverse)
        return [_detached(p) for p in products]

    async def deactivate_product(self, product: Product) -> list[int]:
        async with self._lock:
            if product.id not in self._products:
                raise NotFoundError("Product", product.id)
            self._products[product.id] = _detached(product)
            variant_ids = []
            for variant in self._variants.values():
                if variant.product_id == product.id and variant.is_active:
                    variant.is_active = False
                    variant.updated_at = product.updated_at
                    variant_ids.append(variant.id)
        return sorted(variant_ids)

    # ------------------------------------------------------------------
    # Colors and sizes
    # ------------------------------------------------------------------

    async def add_color(self, color: Color) -> Color:
        async with self._lock:
            color.id = self._assign_id("color")
            self._colors[color.id] = _detached(color)
        return color

    async def get_color(self, color_id: int) -> Color | None:
        color = self._colors.get(color_id)
        return _detached(color) if color else None

    async def list_colors(self, color_ids: Iterable[int] | None = None) -> list[Color]:
        wanted = set(color_ids) if color_ids is not None else None
        return [
            _detached(c)
            for cid, c in sorted(self._colors.items())
            if wanted is None or cid in wanted
        ]

    async def add_size(self, size: Size) -> Size:
        async with self._lock:
            size.id = self._assign_id("size")
            self._sizes[size.id] = _detached(size)
        return size

    async def get_size(self, size_id: int) -> Size | None:
        size = self._sizes.get(size_id)
        return _detached(size) if size else None

    async def list_sizes(self, size_ids: Iterable[int] | None = None) -> list[Size]:
        wanted = set(size_ids) if size_ids is not None else None
        return [
            _detached(s)
            for sid, s in sorted(self._sizes.items())
            if wanted is None or sid in wanted
        ]

    # ------------------------------------------------------------------
    # Variants
    # ------------------------------------------------------------------

    async def add_variant(self, variant: Variant) -> Variant:
        async with self._lock:
            self._check_conflicts(variant)
            variant.id = self._assign_id("variant")
            self._variants[variant.id] = _detached(variant)
        return variant

    async def save_variant(self, variant: Variant) -> Variant:
        async with self._lock:
            if variant.id not in self._variants:
                raise NotFoundError("Variant", variant.id)
            self._check_conflicts(variant)
            self._variants[variant.id] = _detached(variant)
        return variant

    async def delete_variant(self, variant_id: int) -> None:
        async with self._lock:
            if self._variants.pop(variant_id, None) is None:
                raise NotFoundError("Variant", variant_id)

    async def get_variant(self, variant_id: int) -> Variant | None:
        variant = self._variants.get(variant_id)
        return _detached(variant) if variant else None

    async def find_variants(self, product_id: int) -> list[Variant]:
        grouped = await self.find_variants_for_products([product_id])
        return grouped[product_id]

    async def find_variants_for_products(
        self, product_ids: Iterable[int]
    ) -> dict[int, list[Variant]]:
        grouped: dict[int, list[Variant]] = {product_id: [] for product_id in product_ids}
        for variant_id in sorted(self._variants):
            variant = self._variants[variant_id]
            if variant.product_id in grouped:
                grouped[variant.product_id].append(_detached(variant))
        return grouped

    async def find_active_variant(self, key: VariantKey) -> Variant | None:
        for variant in self._variants.values():
            if variant.is_active and variant.key == key:
                return _detached(variant)
        return None

    async def find_by_sku(self, sku: str) -> Variant | None:
        for variant in self._variants.values():
            if variant.sku == sku:
                return _detached(variant)
        return None

    async def find_active_variants(self) -> list[Variant]:
        return [
            _detached(v)
            for _, v in sorted(self._variants.items())
            if v.is_active
            and v.product_id in self._products
            and self._products[v.product_id].is_active
        ]

    def _check_conflicts(self, variant: Variant) -> None:
        """Raise DuplicateVariantError if the SKU or active triple is held by another variant."""
        for other in self._variants.values():
            if other.id == variant.id:
                continue
            if other.sku == variant.sku:
                raise DuplicateVariantError(other.id, sku=variant.sku)
            if variant.is_active and other.is_active and other.key == variant.key:
                raise DuplicateVariantError(
                    other.id,
                    product_id=variant.product_id,
                    color_id=variant.color_id,
                    size_id=variant.size_id,
                )


class InMemoryLedgerRepository(LedgerRepository):
    """In-memory append-only stock ledger."""

    def __init__(self) -> None:
        self._entries: list[LedgerEntry] = []
        self._lock = asyncio.Lock()

    async def append(self, entry: LedgerEntry) -> LedgerEntry:
        async with self._lock:
            saved = replace(entry, id=len(self._entries) + 1)
            self._entries.append(saved)
        return saved

    async def totals(self, variant_ids: Iterable[int]) -> dict[int, int]:
        totals = {variant_id: 0 for variant_id in variant_ids}
        for entry in self._entries:
            if entry.variant_id in totals:
                totals[entry.variant_id] += entry.quantity
        return totals

    async def entries(
        self,
        variant_id: int | None = None,
        operator_id: str | None = None,
        since: datetime | None = None,
        until: datetime | None = None,
    ) -> list[LedgerEntry]:
        entries = self._entries
        if variant_id is not None:
            entries = [e for e in entries if e.variant_id == variant_id]
        if operator_id is not None:
            entries = [e for e in entries if e.operator_id == operator_id]
        if since is not None:
            entries = [e for e in entries if e.created_at >= since]
        if until is not None:
            entries = [e for e in entries if e.created_at <= until]
        return list(entries)

    async def has_entries(self, variant_id: int) -> bool:
        return any(e.variant_id == variant_id for e in self._entries)
