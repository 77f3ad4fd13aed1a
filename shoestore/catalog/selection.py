"""Shopper variant selection on a product page.

Drives the SelectionStatus state machine with live availability: a color
must be offered by an active variant, a size must exist for the chosen
color and be in stock. Stock is re-read on every call, so a unit bought by
someone else between two calls is noticed on the next one.
"""

from dataclasses import dataclass
from typing import Any, NoReturn

import structlog

from shoestore.catalog.index import AttributeIndex
from shoestore.catalog.ledger import StockLedger
from shoestore.domain.entities import Color, Size
from shoestore.domain.exceptions import SelectionRejectedError
from shoestore.domain.state_machines import SelectionStatus, validate_selection_transition
from shoestore.infrastructure.config import settings

logger = structlog.get_logger()


@dataclass(frozen=True)
class SizeOption:
    """A size button: always visible, selectable only when buyable."""

    size: Size
    stock: int
    selectable: bool
    variant_id: int | None = None


@dataclass(frozen=True)
class ResolvedVariant:
    """The variant a complete selection points at.

    Attributes:
        variant_id: Resolved variant.
        sku: Its SKU.
        price: Effective price in cents.
        stock: Units available at resolution time (> 0).
        low_stock: True when stock is below the low-stock threshold.
    """

    variant_id: int
    sku: str
    price: int
    stock: int
    low_stock: bool


class VariantSelection:
    """One shopper's in-progress color/size selection for a product.

    Example usage:
        selection = VariantSelection(product_id, index, ledger)
        await selection.select_color(black.id)
        await selection.select_size(size_9.id)
        variant = await selection.resolved()
    """

    def __init__(
        self,
        product_id: int,
        index: AttributeIndex,
        ledger: StockLedger,
        low_stock_threshold: int | None = None,
    ) -> None:
        """Initialize selection in NO_COLOR_SELECTED.

        Args:
            product_id: Product being viewed.
            index: Attribute index for colors and sizes.
            ledger: Stock projection, re-read on resolve.
            low_stock_threshold: Exclusive low-stock limit for shoppers.
        """
        self.product_id = product_id
        self.index = index
        self.ledger = ledger
        self.low_stock_threshold = (
            low_stock_threshold
            if low_stock_threshold is not None
            else settings.low_stock_threshold
        )
        self.status = SelectionStatus.NO_COLOR_SELECTED
        self.color_id: int | None = None
        self.size_id: int | None = None

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def available_colors(self) -> list[Color]:
        """Colors the shopper may pick."""
        return await self.index.colors_for(self.product_id)

    async def size_options(self) -> list[SizeOption]:
        """The full size run for the selected color.

        Before a color is chosen every size of the product is listed, none
        of them selectable, with stock summed across colors.
        """
        if self.color_id is None:
            rows = await self.index.availability_for(self.product_id)
            totals: dict[int, int] = {}
            sizes: dict[int, Size] = {}
            for row in rows:
                sizes[row.size.id] = row.size
                totals[row.size.id] = totals.get(row.size.id, 0) + row.stock
            ordered = sorted(sizes.values(), key=lambda s: (s.sort_key, s.id))
            return [SizeOption(size=s, stock=totals[s.id], selectable=False) for s in ordered]

        return [
            SizeOption(
                size=entry.size,
                stock=entry.stock,
                selectable=entry.stock > 0,
                variant_id=entry.variant_id,
            )
            for entry in await self.index.sizes_for(self.product_id, self.color_id)
        ]

    def snapshot(self) -> dict[str, Any]:
        """Current state for serialization."""
        return {
            "product_id": self.product_id,
            "status": self.status.value,
            "color_id": self.color_id,
            "size_id": self.size_id,
            "allowed_transitions": [s.value for s in self.status.allowed_transitions()],
        }

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    async def select_color(self, color_id: int) -> None:
        """Choose a color; any previous size choice is cleared.

        Raises:
            SelectionRejectedError: The product offers no active variant in that color.
        """
        target = SelectionStatus.COLOR_SELECTED
        validate_selection_transition(self.product_id, self.status, target)

        offered = {color.id for color in await self.available_colors()}
        if color_id not in offered:
            self._reject(target, f"color {color_id} is not offered for this product")

        self.color_id = color_id
        self.size_id = None
        self.status = target
        logger.debug("Color selected", product_id=self.product_id, color_id=color_id)

    async def select_size(self, size_id: int) -> None:
        """Choose a size for the selected color.

        Raises:
            SelectionRejectedError: No color chosen yet, the size does not
                exist for the color, or it is out of stock.
        """
        target = SelectionStatus.COLOR_AND_SIZE_SELECTED
        validate_selection_transition(
            self.product_id, self.status, target, reason="select a color first"
        )

        option = await self._option(size_id)
        if option is None:
            self._reject(target, f"size {size_id} does not exist for color {self.color_id}")
        if not option.selectable:
            self._reject(target, f"size {option.size.value} is out of stock")

        self.size_id = size_id
        self.status = target
        logger.debug(
            "Size selected",
            product_id=self.product_id,
            color_id=self.color_id,
            size_id=size_id,
        )

    async def resolved(self) -> ResolvedVariant:
        """The selected variant, with stock re-read now.

        If the combination sold out since it was selected, the size is
        cleared, the state drops back to COLOR_SELECTED and the call is
        rejected.

        Raises:
            SelectionRejectedError: Selection incomplete or sold out.
        """
        target = SelectionStatus.COLOR_AND_SIZE_SELECTED
        if not self.status.is_complete():
            self._reject(target, "select a color and a size first")

        option = await self._option(self.size_id)
        variant = None
        if option is not None and option.variant_id is not None:
            variant = await self.index.repository.get_variant(option.variant_id)
        product = await self.index.repository.get_product(self.product_id)
        if variant is None or not variant.is_active or product is None or not product.is_active:
            self._drop_size(target, "is no longer offered")

        stock = (await self.ledger.current_stock_many([variant.id]))[variant.id]
        if stock <= 0:
            self._drop_size(target, "is no longer in stock")

        return ResolvedVariant(
            variant_id=variant.id,
            sku=variant.sku,
            price=variant.effective_price(product),
            stock=stock,
            low_stock=0 < stock < self.low_stock_threshold,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _drop_size(self, target: SelectionStatus, problem: str) -> NoReturn:
        dropped_size = self.size_id
        self.size_id = None
        self.status = SelectionStatus.COLOR_SELECTED
        logger.info(
            "Selected size no longer available",
            product_id=self.product_id,
            color_id=self.color_id,
            size_id=dropped_size,
        )
        raise SelectionRejectedError(
            entity_type="Selection",
            entity_id=str(self.product_id),
            current_state=target.value,
            target_state=target.value,
            allowed_transitions=[s.value for s in self.status.allowed_transitions()],
            reason=f"size {dropped_size} {problem}",
        )

    async def _option(self, size_id: int | None) -> SizeOption | None:
        for option in await self.size_options():
            if option.size.id == size_id:
                return option
        return None

    def _reject(self, target: SelectionStatus, reason: str) -> NoReturn:
        raise SelectionRejectedError(
            entity_type="Selection",
            entity_id=str(self.product_id),
            current_state=self.status.value,
            target_state=target.value,
            allowed_transitions=[s.value for s in self.status.allowed_transitions()],
            reason=reason,
        )
