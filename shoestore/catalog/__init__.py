"""Catalog module for shoe variants and inventory.

This module provides:
- Variant catalog maintenance (products, colors, sizes, variants)
- Append-only stock ledger with a derived stock projection
- Attribute index with an event-invalidated structural cache
- Product listing filter resolver
- Shopper selection state machine
"""

from shoestore.catalog.cache import AttributeCache, CacheKey
from shoestore.catalog.index import AttributeIndex, SizeStock, StockSummary, VariantAvailability
from shoestore.catalog.ledger import (
    DecrementSource,
    RecordedDecrements,
    StockCheck,
    StockLedger,
    VariantStock,
)
from shoestore.catalog.memory import InMemoryCatalogRepository, InMemoryLedgerRepository
from shoestore.catalog.publisher import EventPublisher
from shoestore.catalog.repository import (
    CatalogRepository,
    LedgerRepository,
    SqlCatalogRepository,
    SqlLedgerRepository,
)
from shoestore.catalog.resolver import (
    FilterResolver,
    PaginatedResult,
    PaginationParams,
    ProductFilter,
    ProductListing,
)
from shoestore.catalog.selection import ResolvedVariant, SizeOption, VariantSelection
from shoestore.catalog.service import VariantCatalog

__all__ = [
    # Cache
    "AttributeCache",
    "CacheKey",
    # Index
    "AttributeIndex",
    "SizeStock",
    "StockSummary",
    "VariantAvailability",
    # Ledger
    "DecrementSource",
    "RecordedDecrements",
    "StockCheck",
    "StockLedger",
    "VariantStock",
    # Repositories
    "CatalogRepository",
    "LedgerRepository",
    "InMemoryCatalogRepository",
    "InMemoryLedgerRepository",
    "SqlCatalogRepository",
    "SqlLedgerRepository",
    # Events
    "EventPublisher",
    # Resolver
    "FilterResolver",
    "PaginatedResult",
    "PaginationParams",
    "ProductFilter",
    "ProductListing",
    # Selection
    "ResolvedVariant",
    "SizeOption",
    "VariantSelection",
    # Service
    "VariantCatalog",
]
