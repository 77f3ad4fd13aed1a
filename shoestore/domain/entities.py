"""Domain entities for the shoe catalog.

Products are sold as variants: one per (color, size) combination, each with
its own SKU and optional price override. Stock is not stored on the variant;
it is projected from the append-only stock ledger.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from shoestore.domain.base import UNSAVED_ID, AggregateRoot, Entity
from shoestore.domain.events import (
    ProductDeactivated,
    VariantActivationChanged,
    VariantUpserted,
)
from shoestore.domain.value_objects import SizeSystem, VariantKey, size_sort_key


# ============================================================================
# Lookup Entities
# ============================================================================


@dataclass(eq=False)
class Color(Entity[int]):
    """A color option, referenced (never owned) by variants."""

    name: str = ""
    hex_code: str | None = None
    is_active: bool = True


@dataclass(eq=False)
class Size(Entity[int]):
    """A size option, referenced (never owned) by variants."""

    value: str = ""
    size_system: SizeSystem = SizeSystem.US
    is_active: bool = True

    @property
    def sort_key(self) -> tuple[int, float, str]:
        """Natural ordering key (numeric, then letter sizes)."""
        return size_sort_key(self.value)


# ============================================================================
# Product Aggregate
# ============================================================================


@dataclass(kw_only=True, eq=False)
class Product(AggregateRoot[int]):
    """A shoe model listed in the storefront.

    Attributes:
        name: Display name.
        base_price: Price in cents used when a variant has no override.
        category_id: Category reference (owned by the category collaborator).
        description: Long description.
        image_url: Main image.
        is_active: Soft-delete flag; inactive products are hidden from shoppers.
    """

    id: int = UNSAVED_ID
    name: str
    base_price: int
    category_id: int | None = None
    description: str | None = None
    image_url: str | None = None
    is_active: bool = True

    def deactivate(self) -> bool:
        """Soft-delete the product.

        Returns:
            True if the product was active.
        """
        if not self.is_active:
            return False
        self.is_active = False
        self._touch()
        return True

    def mark_deactivated(self, variant_ids: list[int]) -> None:
        """Record the deactivation once the variant cascade is persisted.

        Args:
            variant_ids: Variants deactivated by the cascade.
        """
        self._record_event(
            ProductDeactivated(
                aggregate_id=str(self.id),
                aggregate_type="Product",
                product_id=self.id,
                deactivated_variant_ids=tuple(variant_ids),
            )
        )


# ============================================================================
# Variant Aggregate
# ============================================================================


@dataclass(kw_only=True, eq=False)
class Variant(AggregateRoot[int]):
    """A sellable color+size combination of a product.

    Attributes:
        product_id: Owning product.
        color_id: Color reference.
        size_id: Size reference.
        sku: Stock keeping unit (unique across the catalog).
        price: Price override in cents; None falls back to the product price.
        is_active: Soft-disable flag.
    """

    id: int = UNSAVED_ID
    product_id: int
    color_id: int
    size_id: int
    sku: str
    price: int | None = None
    is_active: bool = True

    @property
    def key(self) -> VariantKey:
        """Natural (product, color, size) key."""
        return VariantKey(self.product_id, self.color_id, self.size_id)

    def effective_price(self, product: Product) -> int:
        """Price in cents, taking the override when present."""
        return self.price if self.price is not None else product.base_price

    def update(
        self,
        color_id: int,
        size_id: int,
        sku: str,
        price: int | None,
        is_active: bool,
    ) -> None:
        """Replace the variant's identifying and pricing attributes."""
        self.color_id = color_id
        self.size_id = size_id
        self.sku = sku
        self.price = price
        self.is_active = is_active
        self._touch()

    def mark_upserted(self, created: bool) -> None:
        """Record that the variant was saved."""
        self._record_event(
            VariantUpserted(
                aggregate_id=str(self.id),
                aggregate_type="Variant",
                product_id=self.product_id,
                variant_id=self.id,
                color_id=self.color_id,
                size_id=self.size_id,
                sku=self.sku,
                created=created,
            )
        )

    def set_active(self, active: bool) -> bool:
        """Enable or disable the variant.

        Returns:
            True if the flag changed.
        """
        if self.is_active == active:
            return False
        self.is_active = active
        self._touch()
        self._record_event(
            VariantActivationChanged(
                aggregate_id=str(self.id),
                aggregate_type="Variant",
                product_id=self.product_id,
                variant_id=self.id,
                is_active=active,
            )
        )
        return True


# ============================================================================
# Stock Ledger Entry
# ============================================================================


class LedgerEntryKind(str, Enum):
    """Kinds of stock ledger entries."""

    IMPORT = "import"
    ADJUSTMENT = "adjustment"


@dataclass(frozen=True)
class LedgerEntry:
    """An immutable stock movement.

    Imports are always positive; adjustments are signed corrections.
    Entries are never edited or deleted.

    Attributes:
        id: Ledger sequence number (assigned on append).
        variant_id: Variant the movement applies to.
        quantity: Signed unit count.
        kind: Import or adjustment.
        operator_id: Operator who recorded the movement.
        unit_cost: Import cost per unit in cents (imports only).
        note: Free-form remark.
        created_at: When the entry was recorded.
    """

    variant_id: int
    quantity: int
    kind: LedgerEntryKind
    operator_id: str
    unit_cost: int | None = None
    note: str | None = None
    id: int = UNSAVED_ID
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
