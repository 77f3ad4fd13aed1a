"""Domain events for the storefront catalog.

Domain events represent significant occurrences in the domain.
They are used for:
- Invalidating derived attribute caches for the affected product
- Audit logging of catalog and stock changes
"""

from dataclasses import dataclass
from typing import Any, ClassVar

from shoestore.domain.base import DomainEvent


# ============================================================================
# Product Events
# ============================================================================


@dataclass(frozen=True)
class ProductDeactivated(DomainEvent):
    """Event raised when a product is soft-deleted and its variants cascade."""

    event_type: ClassVar[str] = "product.deactivated"

    deactivated_variant_ids: tuple[int, ...] = ()

    def _payload(self) -> dict[str, Any]:
        """Get event-specific payload."""
        return {"deactivated_variant_ids": list(self.deactivated_variant_ids)}


# ============================================================================
# Variant Events
# ============================================================================


@dataclass(frozen=True)
class VariantUpserted(DomainEvent):
    """Event raised when a variant is created or updated."""

    event_type: ClassVar[str] = "variant.upserted"

    variant_id: int = 0
    color_id: int = 0
    size_id: int = 0
    sku: str = ""
    created: bool = False

    def _payload(self) -> dict[str, Any]:
        """Get event-specific payload."""
        return {
            "variant_id": self.variant_id,
            "color_id": self.color_id,
            "size_id": self.size_id,
            "sku": self.sku,
            "created": self.created,
        }


@dataclass(frozen=True)
class VariantActivationChanged(DomainEvent):
    """Event raised when a variant is enabled or disabled."""

    event_type: ClassVar[str] = "variant.activation_changed"

    variant_id: int = 0
    is_active: bool = True

    def _payload(self) -> dict[str, Any]:
        """Get event-specific payload."""
        return {"variant_id": self.variant_id, "is_active": self.is_active}


@dataclass(frozen=True)
class VariantDeleted(DomainEvent):
    """Event raised when a variant without ledger history is removed."""

    event_type: ClassVar[str] = "variant.deleted"

    variant_id: int = 0

    def _payload(self) -> dict[str, Any]:
        """Get event-specific payload."""
        return {"variant_id": self.variant_id}


# ============================================================================
# Stock Events
# ============================================================================


@dataclass(frozen=True)
class StockImported(DomainEvent):
    """Event raised when a stock-in entry is appended to the ledger."""

    event_type: ClassVar[str] = "stock.imported"

    entry_id: int = 0
    variant_id: int = 0
    quantity: int = 0
    unit_cost: int = 0
    operator_id: str = ""

    def _payload(self) -> dict[str, Any]:
        """Get event-specific payload."""
        return {
            "entry_id": self.entry_id,
            "variant_id": self.variant_id,
            "quantity": self.quantity,
            "unit_cost": self.unit_cost,
            "operator_id": self.operator_id,
        }


@dataclass(frozen=True)
class StockAdjusted(DomainEvent):
    """Event raised when a signed correction is appended to the ledger."""

    event_type: ClassVar[str] = "stock.adjusted"

    entry_id: int = 0
    variant_id: int = 0
    quantity: int = 0
    operator_id: str = ""
    note: str | None = None

    def _payload(self) -> dict[str, Any]:
        """Get event-specific payload."""
        return {
            "entry_id": self.entry_id,
            "variant_id": self.variant_id,
            "quantity": self.quantity,
            "operator_id": self.operator_id,
            "note": self.note,
        }


# ============================================================================
# Event Registry
# ============================================================================


EVENT_REGISTRY: dict[str, type[DomainEvent]] = {
    ProductDeactivated.event_type: ProductDeactivated,
    VariantUpserted.event_type: VariantUpserted,
    VariantActivationChanged.event_type: VariantActivationChanged,
    VariantDeleted.event_type: VariantDeleted,
    StockImported.event_type: StockImported,
    StockAdjusted.event_type: StockAdjusted,
}


def get_event_class(event_type: str) -> type[DomainEvent] | None:
    """Get event class by event type string.

    Args:
        event_type: Event type identifier.

    Returns:
        Event class or None if not found.
    """
    return EVENT_REGISTRY.get(event_type)
