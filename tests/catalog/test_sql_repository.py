"""Tests for the SQLAlchemy repositories on a SQLite database."""

import pytest
import pytest_asyncio

from shoestore.catalog import (
    AttributeIndex,
    SqlCatalogRepository,
    SqlLedgerRepository,
    StockLedger,
    VariantCatalog,
)
from shoestore.domain import DuplicateVariantError, ValidationError, VariantKey
from shoestore.infrastructure.database import Base, create_engine, create_session_factory


# ============================================================================
# Fixtures
# ============================================================================


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    """Session factory for a fresh SQLite file with all tables created."""
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'catalog.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield create_session_factory(engine)
    await engine.dispose()


@pytest.fixture
def sql_catalog_repo(session_factory) -> SqlCatalogRepository:
    return SqlCatalogRepository(session_factory)


@pytest.fixture
def sql_ledger_repo(session_factory) -> SqlLedgerRepository:
    return SqlLedgerRepository(session_factory)


@pytest.fixture
def sql_catalog(sql_catalog_repo, sql_ledger_repo) -> VariantCatalog:
    return VariantCatalog(sql_catalog_repo, sql_ledger_repo)


@pytest.fixture
def sql_ledger(sql_catalog_repo, sql_ledger_repo) -> StockLedger:
    return StockLedger(sql_catalog_repo, sql_ledger_repo, low_stock_threshold=10)


@pytest_asyncio.fixture
async def seeded(sql_catalog, sql_ledger):
    """Runner X in black 9 (3 units) and black 10 (no stock)."""
    black = await sql_catalog.create_color("Black", "#000000")
    size_9 = await sql_catalog.create_size("9")
    size_10 = await sql_catalog.create_size("10")
    product = await sql_catalog.create_product("Runner X", 8999, category_id=1)
    black_9 = await sql_catalog.upsert_variant(product.id, black.id, size_9.id, "RX-BLK-9")
    black_10 = await sql_catalog.upsert_variant(product.id, black.id, size_10.id, "RX-BLK-10")
    await sql_ledger.record_import(black_9.id, 3, 4000, "op-1")
    return {
        "product": product,
        "black": black,
        "size_9": size_9,
        "size_10": size_10,
        "black_9": black_9,
        "black_10": black_10,
    }


# ============================================================================
# Catalog
# ============================================================================


class TestSqlCatalogRepository:
    """Tests for SqlCatalogRepository."""

    @pytest.mark.asyncio
    async def test_round_trip_variant(self, sql_catalog, seeded) -> None:
        """Variants persist with their natural key."""
        variant = await sql_catalog.get_variant(seeded["black_9"].id)
        assert variant.sku == "RX-BLK-9"
        assert variant.key == VariantKey(
            seeded["product"].id, seeded["black"].id, seeded["size_9"].id
        )

    @pytest.mark.asyncio
    async def test_duplicate_triple_rejected(self, sql_catalog, seeded) -> None:
        """The active triple is unique in the database too."""
        with pytest.raises(DuplicateVariantError) as exc_info:
            await sql_catalog.upsert_variant(
                seeded["product"].id, seeded["black"].id, seeded["size_9"].id, "RX-BLK-9-B"
            )
        assert exc_info.value.existing_variant_id == seeded["black_9"].id

    @pytest.mark.asyncio
    async def test_duplicate_sku_rejected(self, sql_catalog, seeded) -> None:
        """SKUs are unique in the database."""
        white = await sql_catalog.create_color("White")
        with pytest.raises(DuplicateVariantError):
            await sql_catalog.upsert_variant(
                seeded["product"].id, white.id, seeded["size_9"].id, "RX-BLK-9"
            )

    @pytest.mark.asyncio
    async def test_inactive_duplicate_allowed(self, sql_catalog, seeded) -> None:
        """The partial unique index ignores inactive rows."""
        shadow = await sql_catalog.upsert_variant(
            seeded["product"].id,
            seeded["black"].id,
            seeded["size_9"].id,
            "RX-BLK-9-OLD",
            is_active=False,
        )
        assert shadow.id > 0

        with pytest.raises(DuplicateVariantError):
            await sql_catalog.set_active(shadow.id, True)

    @pytest.mark.asyncio
    async def test_find_products_sorted(self, sql_catalog, sql_catalog_repo, seeded) -> None:
        """Products sort by price with ties broken by id."""
        await sql_catalog.create_product("Court Classic", 6999, category_id=2)
        await sql_catalog.create_product("Trail Blazer", 12999, category_id=1)

        products = await sql_catalog_repo.find_products(sort_by="price", sort_order="asc")
        assert [p.base_price for p in products] == [6999, 8999, 12999]

        runners = await sql_catalog_repo.find_products(search="runner")
        assert [p.name for p in runners] == ["Runner X"]

    @pytest.mark.asyncio
    async def test_deactivate_product_cascades(self, sql_catalog, sql_catalog_repo, seeded) -> None:
        """Deactivation disables every variant in the same transaction."""
        variant_ids = await sql_catalog.deactivate_product(seeded["product"].id)

        assert variant_ids == [seeded["black_9"].id, seeded["black_10"].id]
        assert await sql_catalog_repo.find_active_variants() == []
        assert await sql_catalog_repo.find_products() == []

    @pytest.mark.asyncio
    async def test_delete_rules(self, sql_catalog, seeded) -> None:
        """Variants with stock history cannot be deleted; others can."""
        with pytest.raises(ValidationError):
            await sql_catalog.delete_variant(seeded["black_9"].id)

        await sql_catalog.delete_variant(seeded["black_10"].id)
        variants = await sql_catalog.find_variants(seeded["product"].id)
        assert [v.id for v in variants] == [seeded["black_9"].id]


# ============================================================================
# Ledger
# ============================================================================


class TestSqlLedgerRepository:
    """Tests for SqlLedgerRepository."""

    @pytest.mark.asyncio
    async def test_totals_and_entries(self, sql_ledger, seeded) -> None:
        """Totals sum imports and adjustments."""
        await sql_ledger.record_import(seeded["black_9"].id, 10, 4000, "op-2")
        await sql_ledger.record_adjustment(seeded["black_9"].id, -4, "op-2", note="recount")

        assert await sql_ledger.current_stock(seeded["black_9"].id) == 9
        assert await sql_ledger.current_stock(seeded["black_10"].id) == 0

        entries = await sql_ledger.entries(operator_id="op-2")
        assert [(e.kind.value, e.quantity) for e in entries] == [
            ("import", 10),
            ("adjustment", -4),
        ]
        assert entries[1].note == "recount"

    @pytest.mark.asyncio
    async def test_index_over_sql(self, sql_catalog_repo, sql_ledger, seeded) -> None:
        """The attribute index works over the SQL repositories."""
        index = AttributeIndex(sql_catalog_repo, sql_ledger)
        sizes = await index.sizes_for(seeded["product"].id, seeded["black"].id)
        assert [(s.size.value, s.stock) for s in sizes] == [("9", 3), ("10", 0)]
