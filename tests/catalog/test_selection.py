"""Tests for shopper variant selection."""

import pytest

from shoestore.catalog import VariantSelection
from shoestore.domain import SelectionRejectedError, SelectionStatus


@pytest.fixture
def selection(index, ledger, runner_x) -> VariantSelection:
    """A fresh Runner X selection with a low-stock threshold of 5."""
    return VariantSelection(runner_x.product.id, index, ledger, low_stock_threshold=5)


class TestSelectColor:
    """Tests for choosing a color."""

    @pytest.mark.asyncio
    async def test_starts_with_no_color(self, selection) -> None:
        """New selections have nothing chosen."""
        assert selection.status == SelectionStatus.NO_COLOR_SELECTED
        assert selection.snapshot()["allowed_transitions"] == ["color_selected"]

    @pytest.mark.asyncio
    async def test_select_offered_color(self, selection, runner_x) -> None:
        """An offered color moves to COLOR_SELECTED."""
        await selection.select_color(runner_x.black.id)

        assert selection.status == SelectionStatus.COLOR_SELECTED
        assert selection.color_id == runner_x.black.id

    @pytest.mark.asyncio
    async def test_unknown_color_rejected(self, selection) -> None:
        """A color with no active variant is rejected and nothing changes."""
        with pytest.raises(SelectionRejectedError):
            await selection.select_color(999)
        assert selection.status == SelectionStatus.NO_COLOR_SELECTED

    @pytest.mark.asyncio
    async def test_sold_out_color_still_selectable(self, selection, ledger, runner_x) -> None:
        """Colors are offered regardless of stock."""
        await ledger.record_adjustment(runner_x.white_9.id, -5, "op-1")
        await selection.select_color(runner_x.white.id)

        options = await selection.size_options()
        assert [(o.size.value, o.selectable) for o in options] == [("9", False)]

    @pytest.mark.asyncio
    async def test_changing_color_resets_size(self, selection, runner_x) -> None:
        """Picking another color clears the size."""
        await selection.select_color(runner_x.black.id)
        await selection.select_size(runner_x.size_9.id)
        await selection.select_color(runner_x.white.id)

        assert selection.status == SelectionStatus.COLOR_SELECTED
        assert selection.size_id is None


class TestSelectSize:
    """Tests for choosing a size."""

    @pytest.mark.asyncio
    async def test_size_before_color_rejected(self, selection, runner_x) -> None:
        """Choosing a size first is not allowed."""
        with pytest.raises(SelectionRejectedError) as exc_info:
            await selection.select_size(runner_x.size_9.id)

        assert exc_info.value.reason == "select a color first"
        assert selection.status == SelectionStatus.NO_COLOR_SELECTED

    @pytest.mark.asyncio
    async def test_out_of_stock_size_rejected(self, selection, runner_x) -> None:
        """Black 10 is visible but cannot be chosen."""
        await selection.select_color(runner_x.black.id)

        options = await selection.size_options()
        assert [(o.size.value, o.stock, o.selectable) for o in options] == [
            ("9", 3, True),
            ("10", 0, False),
        ]
        with pytest.raises(SelectionRejectedError) as exc_info:
            await selection.select_size(runner_x.size_10.id)

        assert "out of stock" in exc_info.value.reason
        assert selection.status == SelectionStatus.COLOR_SELECTED

    @pytest.mark.asyncio
    async def test_size_missing_for_color_rejected(self, selection, runner_x) -> None:
        """White has no size 10 variant."""
        await selection.select_color(runner_x.white.id)
        with pytest.raises(SelectionRejectedError):
            await selection.select_size(runner_x.size_10.id)

    @pytest.mark.asyncio
    async def test_size_options_before_color(self, selection) -> None:
        """Before a color is chosen all sizes show, none selectable, stock summed."""
        options = await selection.size_options()
        assert [(o.size.value, o.stock, o.selectable) for o in options] == [
            ("9", 8, False),
            ("10", 0, False),
        ]


class TestResolved:
    """Tests for resolving the complete selection."""

    @pytest.mark.asyncio
    async def test_resolved_variant(self, selection, runner_x) -> None:
        """Black 9 resolves with its price and a low-stock flag."""
        await selection.select_color(runner_x.black.id)
        await selection.select_size(runner_x.size_9.id)

        resolved = await selection.resolved()
        assert resolved.variant_id == runner_x.black_9.id
        assert resolved.sku == "RX-BLK-9"
        assert resolved.price == 8999
        assert resolved.stock == 3
        assert resolved.low_stock is True

    @pytest.mark.asyncio
    async def test_price_override_and_no_low_stock(self, selection, runner_x) -> None:
        """White 9 uses its override; 5 units is not below a threshold of 5."""
        await selection.select_color(runner_x.white.id)
        await selection.select_size(runner_x.size_9.id)

        resolved = await selection.resolved()
        assert resolved.price == 9499
        assert resolved.low_stock is False

    @pytest.mark.asyncio
    async def test_incomplete_selection_rejected(self, selection, runner_x) -> None:
        """Resolving without a size is rejected."""
        await selection.select_color(runner_x.black.id)
        with pytest.raises(SelectionRejectedError):
            await selection.resolved()

    @pytest.mark.asyncio
    async def test_sold_out_after_selection(self, selection, decrements, runner_x) -> None:
        """If the last units sell, resolving drops back to COLOR_SELECTED."""
        await selection.select_color(runner_x.black.id)
        await selection.select_size(runner_x.size_9.id)

        await decrements.record_sale(runner_x.black_9.id, 3)

        with pytest.raises(SelectionRejectedError):
            await selection.resolved()
        assert selection.status == SelectionStatus.COLOR_SELECTED
        assert selection.color_id == runner_x.black.id
        assert selection.size_id is None

    @pytest.mark.asyncio
    async def test_variant_removed_while_resolving(
        self, selection, catalog_repo, runner_x, monkeypatch
    ) -> None:
        """A variant that disappears mid-resolve is a rejection, not a crash."""
        await selection.select_color(runner_x.black.id)
        await selection.select_size(runner_x.size_9.id)

        async def gone(variant_id):
            return None

        monkeypatch.setattr(catalog_repo, "get_variant", gone)

        with pytest.raises(SelectionRejectedError) as exc_info:
            await selection.resolved()
        assert "no longer offered" in exc_info.value.reason
        assert selection.status == SelectionStatus.COLOR_SELECTED

    @pytest.mark.asyncio
    async def test_variant_disabled_after_selection(self, selection, catalog, runner_x) -> None:
        """Disabling the chosen variant clears the size."""
        await selection.select_color(runner_x.white.id)
        await selection.select_size(runner_x.size_9.id)

        await catalog.set_active(runner_x.white_9.id, False)

        with pytest.raises(SelectionRejectedError):
            await selection.resolved()
        assert selection.size_id is None
