"""Domain layer - Entities, value objects, state machines, domain events.

This module exports the core domain building blocks following DDD patterns:

- **Entities**: Objects with identity (Product, Variant, Color, Size)
- **Ledger**: Immutable stock movements (LedgerEntry)
- **Value Objects**: Immutable objects compared by value (VariantKey)
- **State Machines**: Deterministic shopper selection (SelectionStatus)
- **Domain Events**: Catalog and stock changes that invalidate derived data
- **Exceptions**: Domain-specific errors and invariant violations

Example usage:
    from shoestore.domain import Product, Variant

    product = Product(name="Runner X", base_price=8999)
    variant = Variant(product_id=1, color_id=2, size_id=9, sku="RX-BLK-9")
    variant.effective_price(product)  # 8999
"""

# Base classes
from shoestore.domain.base import AggregateRoot, DomainEvent, Entity, ValueObject

# Entities
from shoestore.domain.entities import (
    Color,
    LedgerEntry,
    LedgerEntryKind,
    Product,
    Size,
    Variant,
)

# Domain Events
from shoestore.domain.events import (
    EVENT_REGISTRY,
    ProductDeactivated,
    StockAdjusted,
    StockImported,
    VariantActivationChanged,
    VariantDeleted,
    VariantUpserted,
)

# Exceptions
from shoestore.domain.exceptions import (
    AuthorizationError,
    DomainError,
    DuplicateVariantError,
    InvalidStateTransitionError,
    NotFoundError,
    SelectionRejectedError,
    StockIntegrityFault,
    ValidationError,
)

# State Machines
from shoestore.domain.state_machines import SelectionStatus, validate_selection_transition

# Value Objects
from shoestore.domain.value_objects import SizeSystem, VariantKey, size_sort_key

__all__ = [
    # Base
    "AggregateRoot",
    "DomainEvent",
    "Entity",
    "ValueObject",
    # Entities
    "Color",
    "LedgerEntry",
    "LedgerEntryKind",
    "Product",
    "Size",
    "Variant",
    # Events
    "EVENT_REGISTRY",
    "ProductDeactivated",
    "StockAdjusted",
    "StockImported",
    "VariantActivationChanged",
    "VariantDeleted",
    "VariantUpserted",
    # Exceptions
    "AuthorizationError",
    "DomainError",
    "DuplicateVariantError",
    "InvalidStateTransitionError",
    "NotFoundError",
    "SelectionRejectedError",
    "StockIntegrityFault",
    "ValidationError",
    # State machines
    "SelectionStatus",
    "validate_selection_transition",
    # Value objects
    "SizeSystem",
    "VariantKey",
    "size_sort_key",
]
