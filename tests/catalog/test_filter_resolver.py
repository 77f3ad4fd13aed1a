"""Tests for the product listing filter resolver."""

import pytest
import pytest_asyncio

from shoestore.catalog import PaginationParams, ProductFilter
from shoestore.domain import ValidationError


def by_name(page_size: int = 20, page: int = 1) -> PaginationParams:
    """Pagination sorted by name ascending."""
    return PaginationParams(page=page, page_size=page_size, sort_by="name", sort_order="asc")


@pytest_asyncio.fixture
async def split_pair(catalog, ledger, runner_x):
    """A product whose red only comes in 8 (sold out) and blue only in 9 (in stock)."""
    red = await catalog.create_color("Red", "#FF0000")
    blue = await catalog.create_color("Blue", "#0000FF")
    size_8 = await catalog.create_size("8")

    product = await catalog.create_product("Split Pair", 5000, category_id=2)
    await catalog.upsert_variant(product.id, red.id, size_8.id, "SP-RED-8")
    blue_9 = await catalog.upsert_variant(product.id, blue.id, runner_x.size_9.id, "SP-BLU-9")
    await ledger.record_import(blue_9.id, 5, 2000, "op-1")

    return {"product": product, "red": red, "blue": blue, "size_8": size_8}


# ============================================================================
# Variant Constraints
# ============================================================================


class TestVariantConstraints:
    """Tests for color/size narrowing."""

    @pytest.mark.asyncio
    async def test_color_and_size_must_match_one_variant(
        self, resolver, runner_x, split_pair
    ) -> None:
        """Red and 9 each exist on Split Pair, but never on the same in-stock variant."""
        result = await resolver.resolve(
            ProductFilter(color_ids={split_pair["red"].id}, size_ids={runner_x.size_9.id}),
            by_name(),
        )
        assert [item.product.name for item in result.items] == []
        assert result.total == 0

    @pytest.mark.asyncio
    async def test_matching_pair_qualifies(self, resolver, runner_x, split_pair) -> None:
        """Blue 9 is one in-stock variant."""
        result = await resolver.resolve(
            ProductFilter(color_ids={split_pair["blue"].id}, size_ids={runner_x.size_9.id}),
            by_name(),
        )
        assert [item.product.name for item in result.items] == ["Split Pair"]
        assert len(result.items[0].matching_variant_ids) == 1

    @pytest.mark.asyncio
    async def test_sold_out_color_excluded(self, resolver, split_pair) -> None:
        """A color whose only variant is sold out does not qualify."""
        result = await resolver.resolve(
            ProductFilter(color_ids={split_pair["red"].id}), by_name()
        )
        assert result.total == 0

    @pytest.mark.asyncio
    async def test_runner_x_black_10_excluded(self, resolver, runner_x) -> None:
        """Black 10 exists but has no stock."""
        result = await resolver.resolve(
            ProductFilter(color_ids={runner_x.black.id}, size_ids={runner_x.size_10.id}),
            by_name(),
        )
        assert result.items == []

    @pytest.mark.asyncio
    async def test_runner_x_black_9_included(self, resolver, runner_x) -> None:
        """Black 9 is in stock."""
        result = await resolver.resolve(
            ProductFilter(color_ids={runner_x.black.id}, size_ids={runner_x.size_9.id}),
            by_name(),
        )
        assert [item.product.id for item in result.items] == [runner_x.product.id]
        assert result.items[0].matching_variant_ids == [runner_x.black_9.id]

    @pytest.mark.asyncio
    async def test_any_of_several_sizes(self, resolver, runner_x, split_pair) -> None:
        """Sets are alternatives: black in 8 or 9 finds Runner X."""
        result = await resolver.resolve(
            ProductFilter(
                color_ids={runner_x.black.id},
                size_ids={split_pair["size_8"].id, runner_x.size_9.id},
            ),
            by_name(),
        )
        assert [item.product.name for item in result.items] == ["Runner X"]

    @pytest.mark.asyncio
    async def test_empty_sets_mean_unconstrained(self, resolver, runner_x, split_pair) -> None:
        """Empty id sets do not filter anything out."""
        result = await resolver.resolve(ProductFilter(color_ids=set(), size_ids=set()), by_name())
        assert [item.product.name for item in result.items] == ["Runner X", "Split Pair"]


# ============================================================================
# Base Predicates
# ============================================================================


class TestBasePredicates:
    """Tests for category, price and text filters."""

    @pytest.mark.asyncio
    async def test_category(self, resolver, runner_x, split_pair) -> None:
        """Category narrows the candidates."""
        result = await resolver.resolve(ProductFilter(category_id=2), by_name())
        assert [item.product.name for item in result.items] == ["Split Pair"]

    @pytest.mark.asyncio
    async def test_price_range(self, resolver, runner_x, split_pair) -> None:
        """Price bounds apply to the base price, inclusive."""
        result = await resolver.resolve(ProductFilter(min_price=5000, max_price=5000), by_name())
        assert [item.product.name for item in result.items] == ["Split Pair"]

    @pytest.mark.asyncio
    async def test_search_is_case_insensitive(self, resolver, runner_x, split_pair) -> None:
        """Text search ignores case."""
        result = await resolver.resolve(ProductFilter(search="  RUNNER "), by_name())
        assert [item.product.name for item in result.items] == ["Runner X"]

    @pytest.mark.asyncio
    async def test_inactive_products_hidden(self, catalog, resolver, runner_x) -> None:
        """Deactivated products never list."""
        await catalog.deactivate_product(runner_x.product.id)
        result = await resolver.resolve(ProductFilter(), by_name())
        assert result.total == 0

    @pytest.mark.asyncio
    async def test_listing_price_span_and_summary(self, resolver, runner_x) -> None:
        """Listings carry min/max effective price and a stock summary."""
        result = await resolver.resolve(ProductFilter(), by_name())
        listing = result.items[0]

        assert listing.min_price == 8999
        assert listing.max_price == 9499
        assert listing.summary.total_stock == 8
        assert listing.summary.has_stock is True


# ============================================================================
# Sorting and Pagination
# ============================================================================


class TestPagination:
    """Tests for ordering and page slicing."""

    @pytest_asyncio.fixture
    async def five_products(self, catalog):
        """Five products priced 1000..5000."""
        for i, name in enumerate(["Echo", "Delta", "Charlie", "Bravo", "Alpha"], start=1):
            await catalog.create_product(name, i * 1000)

    @pytest.mark.asyncio
    async def test_page_totals(self, resolver, five_products) -> None:
        """Totals count the whole filtered set."""
        result = await resolver.resolve(ProductFilter(), by_name(page_size=2, page=2))

        assert [item.product.name for item in result.items] == ["Charlie", "Delta"]
        assert result.total == 5
        assert result.total_pages == 3
        assert result.has_next is True
        assert result.has_prev is True

    @pytest.mark.asyncio
    async def test_last_page(self, resolver, five_products) -> None:
        """The last page may be short."""
        result = await resolver.resolve(ProductFilter(), by_name(page_size=2, page=3))
        assert [item.product.name for item in result.items] == ["Echo"]
        assert result.has_next is False

    @pytest.mark.asyncio
    async def test_page_past_end_is_empty(self, resolver, five_products) -> None:
        """Pages beyond the end are empty but keep totals."""
        result = await resolver.resolve(ProductFilter(), by_name(page_size=2, page=9))
        assert result.items == []
        assert result.total == 5

    @pytest.mark.asyncio
    async def test_sort_by_price_desc(self, resolver, five_products) -> None:
        """Price sorting uses the base price."""
        result = await resolver.resolve(
            ProductFilter(), PaginationParams(sort_by="price", sort_order="desc")
        )
        assert [item.product.base_price for item in result.items] == [5000, 4000, 3000, 2000, 1000]

    @pytest.mark.asyncio
    async def test_pagination_after_filtering(self, resolver, runner_x, split_pair) -> None:
        """Pages are cut from the filtered set, not the candidates."""
        result = await resolver.resolve(
            ProductFilter(size_ids={runner_x.size_9.id}), by_name(page_size=1, page=2)
        )
        assert [item.product.name for item in result.items] == ["Split Pair"]
        assert result.total == 2

    @pytest.mark.asyncio
    async def test_invalid_sort_field(self, resolver) -> None:
        """Unknown sort fields are rejected."""
        with pytest.raises(ValidationError) as exc_info:
            await resolver.resolve(ProductFilter(), PaginationParams(sort_by="color"))
        assert exc_info.value.has_error("sort_by")

    @pytest.mark.asyncio
    async def test_invalid_page_values(self, resolver) -> None:
        """Page must be positive and page size bounded."""
        with pytest.raises(ValidationError) as exc_info:
            await resolver.resolve(ProductFilter(), PaginationParams(page=0, page_size=1000))
        assert exc_info.value.has_error("page")
        assert exc_info.value.has_error("page_size")

    @pytest.mark.asyncio
    async def test_inverted_price_range(self, resolver) -> None:
        """min_price above max_price is rejected."""
        with pytest.raises(ValidationError):
            await resolver.resolve(ProductFilter(min_price=10, max_price=5), by_name())
