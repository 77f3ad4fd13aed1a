"""Shared fixtures for catalog tests."""

from dataclasses import dataclass

import pytest
import pytest_asyncio

from shoestore.application import wiring
from shoestore.catalog import (
    AttributeCache,
    AttributeIndex,
    EventPublisher,
    FilterResolver,
    InMemoryCatalogRepository,
    InMemoryLedgerRepository,
    RecordedDecrements,
    StockLedger,
    VariantCatalog,
)
from shoestore.domain import Color, Product, Size, Variant
from shoestore.infrastructure.config import settings


@pytest.fixture(autouse=True)
def reset_state(monkeypatch):
    """Use in-memory storage and fresh singletons for every test."""
    monkeypatch.setattr(settings, "storage_backend", "memory")
    monkeypatch.setattr(settings, "cache_enabled", True)
    wiring.reset_singletons()
    yield
    wiring.reset_singletons()


# ============================================================================
# Components
# ============================================================================


@pytest.fixture
def catalog_repo() -> InMemoryCatalogRepository:
    return InMemoryCatalogRepository()


@pytest.fixture
def ledger_repo() -> InMemoryLedgerRepository:
    return InMemoryLedgerRepository()


@pytest.fixture
def cache() -> AttributeCache:
    return AttributeCache()


@pytest.fixture
def publisher(cache) -> EventPublisher:
    publisher = EventPublisher()
    publisher.subscribe(cache.handle_event)
    return publisher


@pytest.fixture
def decrements() -> RecordedDecrements:
    return RecordedDecrements()


@pytest.fixture
def catalog(catalog_repo, ledger_repo, publisher) -> VariantCatalog:
    return VariantCatalog(catalog_repo, ledger_repo, publisher)


@pytest.fixture
def ledger(catalog_repo, ledger_repo, decrements, publisher) -> StockLedger:
    return StockLedger(
        catalog_repo,
        ledger_repo,
        decrements=decrements,
        publisher=publisher,
        low_stock_threshold=10,
    )


@pytest.fixture
def index(catalog_repo, ledger, cache) -> AttributeIndex:
    return AttributeIndex(catalog_repo, ledger, cache)


@pytest.fixture
def resolver(catalog_repo, index) -> FilterResolver:
    return FilterResolver(catalog_repo, index)


# ============================================================================
# Scenario: Runner X
# ============================================================================


@dataclass
class RunnerX:
    """Runner X with (black,9,3), (black,10,0), (white,9,5)."""

    product: Product
    black: Color
    white: Color
    size_9: Size
    size_10: Size
    black_9: Variant
    black_10: Variant
    white_9: Variant


@pytest_asyncio.fixture
async def runner_x(catalog, ledger) -> RunnerX:
    """Seed the Runner X scenario."""
    black = await catalog.create_color("Black", "#000000")
    white = await catalog.create_color("White", "#FFFFFF")
    size_10 = await catalog.create_size("10")
    size_9 = await catalog.create_size("9")
    product = await catalog.create_product("Runner X", 8999, category_id=1)

    black_9 = await catalog.upsert_variant(product.id, black.id, size_9.id, "RX-BLK-9")
    black_10 = await catalog.upsert_variant(product.id, black.id, size_10.id, "RX-BLK-10")
    white_9 = await catalog.upsert_variant(
        product.id, white.id, size_9.id, "RX-WHT-9", price=9499
    )

    await ledger.record_import(black_9.id, 3, 4000, "op-1")
    await ledger.record_import(white_9.id, 5, 4000, "op-1")

    return RunnerX(product, black, white, size_9, size_10, black_9, black_10, white_9)
