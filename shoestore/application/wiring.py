"""Component wiring.

Builds the catalog components once per process and hands out the shared
instances. The storage backend is picked from ``settings.storage_backend``;
the attribute cache is subscribed to the event publisher so every catalog
or ledger write invalidates the affected product.
"""

import structlog

from shoestore.catalog.cache import AttributeCache
from shoestore.catalog.index import AttributeIndex
from shoestore.catalog.ledger import DecrementSource, RecordedDecrements, StockLedger
from shoestore.catalog.memory import InMemoryCatalogRepository, InMemoryLedgerRepository
from shoestore.catalog.publisher import EventPublisher
from shoestore.catalog.repository import (
    CatalogRepository,
    LedgerRepository,
    SqlCatalogRepository,
    SqlLedgerRepository,
)
from shoestore.catalog.resolver import FilterResolver
from shoestore.catalog.selection import VariantSelection
from shoestore.catalog.service import VariantCatalog
from shoestore.infrastructure.config import settings
from shoestore.infrastructure.database import get_session_factory

logger = structlog.get_logger()

# Global instances
_catalog_repo: CatalogRepository | None = None
_ledger_repo: LedgerRepository | None = None
_decrements: DecrementSource | None = None
_publisher: EventPublisher | None = None
_cache: AttributeCache | None = None
_stock_ledger: StockLedger | None = None


def _use_database() -> bool:
    backend = settings.storage_backend.lower()
    if backend not in ("memory", "database"):
        raise ValueError(f"Unknown storage backend: {settings.storage_backend}")
    return backend == "database"


# ============================================================================
# Storage
# ============================================================================


def get_catalog_repository() -> CatalogRepository:
    """Get catalog repository singleton."""
    global _catalog_repo
    if _catalog_repo is None:
        if _use_database():
            _catalog_repo = SqlCatalogRepository(get_session_factory())
        else:
            _catalog_repo = InMemoryCatalogRepository()
        logger.info("Catalog repository created", backend=settings.storage_backend)
    return _catalog_repo


def get_ledger_repository() -> LedgerRepository:
    """Get ledger repository singleton."""
    global _ledger_repo
    if _ledger_repo is None:
        if _use_database():
            _ledger_repo = SqlLedgerRepository(get_session_factory())
        else:
            _ledger_repo = InMemoryLedgerRepository()
    return _ledger_repo


def get_decrement_source() -> DecrementSource:
    """Get decrement source singleton (order-side sold/reserved totals)."""
    global _decrements
    if _decrements is None:
        _decrements = RecordedDecrements()
    return _decrements


# ============================================================================
# Events and Cache
# ============================================================================


def get_event_publisher() -> EventPublisher:
    """Get event publisher singleton with the attribute cache subscribed."""
    global _publisher
    if _publisher is None:
        _publisher = EventPublisher()
        _publisher.subscribe(get_attribute_cache().handle_event)
    return _publisher


def get_attribute_cache() -> AttributeCache:
    """Get attribute cache singleton."""
    global _cache
    if _cache is None:
        _cache = AttributeCache(enabled=settings.cache_enabled)
    return _cache


# ============================================================================
# Services
# ============================================================================


def get_variant_catalog() -> VariantCatalog:
    """Get variant catalog service."""
    return VariantCatalog(
        get_catalog_repository(),
        get_ledger_repository(),
        get_event_publisher(),
    )


def get_stock_ledger() -> StockLedger:
    """Get stock ledger singleton.

    Shared so concurrent adjustments serialize on one lock.
    """
    global _stock_ledger
    if _stock_ledger is None:
        _stock_ledger = StockLedger(
            get_catalog_repository(),
            get_ledger_repository(),
            decrements=get_decrement_source(),
            publisher=get_event_publisher(),
            low_stock_threshold=settings.admin_low_stock_threshold,
        )
    return _stock_ledger


def get_attribute_index() -> AttributeIndex:
    """Get attribute index service."""
    return AttributeIndex(get_catalog_repository(), get_stock_ledger(), get_attribute_cache())


def get_filter_resolver() -> FilterResolver:
    """Get filter resolver service."""
    return FilterResolver(get_catalog_repository(), get_attribute_index())


def new_selection(product_id: int) -> VariantSelection:
    """Start a fresh selection for a product."""
    return VariantSelection(
        product_id,
        get_attribute_index(),
        get_stock_ledger(),
        low_stock_threshold=settings.low_stock_threshold,
    )


def reset_singletons() -> None:
    """Drop all shared instances (used by tests)."""
    global _catalog_repo, _ledger_repo, _decrements, _publisher, _cache, _stock_ledger
    _catalog_repo = None
    _ledger_repo = None
    _decrements = None
    _publisher = None
    _cache = None
    _stock_ledger = None
