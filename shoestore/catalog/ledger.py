"""Stock ledger service.

Stock is never stored as a mutable counter. It is projected as the sum of
append-only ledger entries (imports and signed adjustments) minus the units
the order subsystem has decremented. A negative projection is an oversell:
it is reported as a StockIntegrityFault, never clamped to zero.
"""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timezone

import structlog

from shoestore.catalog.publisher import EventPublisher
from shoestore.catalog.repository import CatalogRepository, LedgerRepository
from shoestore.domain.entities import LedgerEntry, LedgerEntryKind, Variant
from shoestore.domain.events import StockAdjusted, StockImported
from shoestore.domain.exceptions import NotFoundError, StockIntegrityFault, ValidationError
from shoestore.domain.validation import FieldErrors
from shoestore.infrastructure.config import settings

logger = structlog.get_logger()


# ============================================================================
# Decrement Sources
# ============================================================================


class DecrementSource(ABC):
    """Units sold or reserved per variant, owned by the order subsystem."""

    @abstractmethod
    async def decremented(self, variant_ids: Iterable[int]) -> dict[int, int]:
        """Total decremented units per variant (0 when none)."""


class RecordedDecrements(DecrementSource):
    """In-process decrement totals.

    Stands in for the order subsystem: checkout records sales here and the
    ledger subtracts them when projecting stock.
    """

    def __init__(self) -> None:
        self._totals: dict[int, int] = {}
        self._lock = asyncio.Lock()

    async def record_sale(self, variant_id: int, quantity: int) -> None:
        """Add sold/reserved units for a variant.

        Raises:
            ValidationError: If quantity is not a positive integer.
        """
        _require_positive("quantity", quantity)
        async with self._lock:
            self._totals[variant_id] = self._totals.get(variant_id, 0) + quantity

    async def release(self, variant_id: int, quantity: int) -> None:
        """Give back previously decremented units (e.g. a cancelled order).

        Raises:
            ValidationError: If more units are released than were recorded.
        """
        _require_positive("quantity", quantity)
        async with self._lock:
            current = self._totals.get(variant_id, 0)
            if quantity > current:
                raise ValidationError.for_field(
                    "quantity", f"cannot release {quantity}, only {current} decremented"
                )
            self._totals[variant_id] = current - quantity

    async def decremented(self, variant_ids: Iterable[int]) -> dict[int, int]:
        return {variant_id: self._totals.get(variant_id, 0) for variant_id in variant_ids}


def _as_utc(moment: datetime | None) -> datetime | None:
    """Treat naive datetimes as UTC."""
    if moment is not None and moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def _require_positive(field: str, value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationError.for_field(field, "must be a positive integer")


# ============================================================================
# Result Types
# ============================================================================


@dataclass(frozen=True)
class StockCheck:
    """Result of checking whether a quantity can be supplied.

    Attributes:
        variant_id: Variant checked.
        available: True when current stock covers the request.
        current_stock: Stock at check time.
        requested: Units requested.
        shortfall: Units missing (0 when available).
    """

    variant_id: int
    available: bool
    current_stock: int
    requested: int
    shortfall: int


@dataclass(frozen=True)
class VariantStock:
    """A variant paired with its current stock."""

    variant: Variant
    stock: int


# ============================================================================
# Stock Ledger
# ============================================================================


class StockLedger:
    """Append-only stock ledger with a derived stock projection.

    Example usage:
        ledger = StockLedger(catalog_repo, ledger_repo, RecordedDecrements())

        await ledger.record_import(variant_id=7, quantity=10, unit_cost=4000,
                                   operator_id="u-1")
        await ledger.current_stock(7)  # 10
    """

    def __init__(
        self,
        catalog_repository: CatalogRepository,
        ledger_repository: LedgerRepository,
        decrements: DecrementSource | None = None,
        publisher: EventPublisher | None = None,
        low_stock_threshold: int | None = None,
    ) -> None:
        """Initialize ledger service.

        Args:
            catalog_repository: Variant lookups.
            ledger_repository: Entry storage.
            decrements: Order-side decrements (defaults to an empty in-process source).
            publisher: Receives StockImported/StockAdjusted events.
            low_stock_threshold: Operator alert threshold (inclusive).
        """
        self.catalog_repository = catalog_repository
        self.ledger_repository = ledger_repository
        self.decrements = decrements or RecordedDecrements()
        self.publisher = publisher or EventPublisher()
        self.low_stock_threshold = (
            low_stock_threshold
            if low_stock_threshold is not None
            else settings.admin_low_stock_threshold
        )
        # Serializes check-then-append for negative adjustments
        self._adjust_lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def record_import(
        self,
        variant_id: int,
        quantity: int,
        unit_cost: int,
        operator_id: str,
        note: str | None = None,
    ) -> LedgerEntry:
        """Append a stock-in entry.

        Args:
            variant_id: Variant receiving stock.
            quantity: Units received (> 0).
            unit_cost: Import price per unit in cents (>= 0).
            operator_id: Operator recording the import.
            note: Free-form remark.

        Returns:
            The appended entry.

        Raises:
            ValidationError: Non-positive quantity, negative cost or blank operator.
            NotFoundError: Variant does not exist.
        """
        errors = FieldErrors()
        errors.require_id("variant_id", variant_id)
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            errors.add("quantity", "must be a positive integer")
        errors.require_non_negative("unit_cost", unit_cost)
        errors.require_text("operator_id", operator_id, max_length=64)
        errors.raise_if_any("Invalid stock import")

        variant = await self._require_variant(variant_id)
        entry = await self.ledger_repository.append(
            LedgerEntry(
                variant_id=variant_id,
                quantity=quantity,
                kind=LedgerEntryKind.IMPORT,
                operator_id=operator_id,
                unit_cost=unit_cost,
                note=note,
            )
        )

        self.publisher.publish(
            [
                StockImported(
                    aggregate_id=str(variant_id),
                    aggregate_type="Variant",
                    product_id=variant.product_id,
                    entry_id=entry.id,
                    variant_id=variant_id,
                    quantity=quantity,
                    unit_cost=unit_cost,
                    operator_id=operator_id,
                )
            ]
        )
        logger.info(
            "Stock imported",
            entry_id=entry.id,
            variant_id=variant_id,
            quantity=quantity,
            unit_cost=unit_cost,
            operator_id=operator_id,
        )
        await self._warn_if_low(variant)
        return entry

    async def record_adjustment(
        self,
        variant_id: int,
        quantity: int,
        operator_id: str,
        note: str | None = None,
    ) -> LedgerEntry:
        """Append a signed correction (e.g. shrinkage, recount).

        Args:
            variant_id: Variant to correct.
            quantity: Signed, non-zero unit delta.
            operator_id: Operator recording the correction.
            note: Reason for the correction.

        Returns:
            The appended entry.

        Raises:
            ValidationError: Zero quantity, blank operator, or the correction
                would make stock negative.
            NotFoundError: Variant does not exist.
        """
        errors = FieldErrors()
        errors.require_id("variant_id", variant_id)
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity == 0:
            errors.add("quantity", "must be a non-zero integer")
        errors.require_text("operator_id", operator_id, max_length=64)
        errors.raise_if_any("Invalid stock adjustment")

        variant = await self._require_variant(variant_id)

        async with self._adjust_lock:
            if quantity < 0:
                stock = await self.current_stock(variant_id)
                if stock + quantity < 0:
                    raise ValidationError.for_field(
                        "quantity",
                        f"adjustment of {quantity} exceeds current stock {stock}",
                    )
            entry = await self.ledger_repository.append(
                LedgerEntry(
                    variant_id=variant_id,
                    quantity=quantity,
                    kind=LedgerEntryKind.ADJUSTMENT,
                    operator_id=operator_id,
                    note=note,
                )
            )

        self.publisher.publish(
            [
                StockAdjusted(
                    aggregate_id=str(variant_id),
                    aggregate_type="Variant",
                    product_id=variant.product_id,
                    entry_id=entry.id,
                    variant_id=variant_id,
                    quantity=quantity,
                    operator_id=operator_id,
                    note=note,
                )
            ]
        )
        logger.info(
            "Stock adjusted",
            entry_id=entry.id,
            variant_id=variant_id,
            quantity=quantity,
            operator_id=operator_id,
        )
        await self._warn_if_low(variant)
        return entry

    # ------------------------------------------------------------------
    # Projection
    # ------------------------------------------------------------------

    async def current_stock(self, variant_id: int) -> int:
        """Derived stock of one variant.

        Raises:
            NotFoundError: Variant does not exist.
            StockIntegrityFault: Decrements exceed ledger total.
        """
        await self._require_variant(variant_id)
        stock = await self.current_stock_many([variant_id])
        return stock[variant_id]

    async def current_stock_many(self, variant_ids: Iterable[int]) -> dict[int, int]:
        """Derived stock for a batch of variants.

        Unknown ids project to 0.

        Raises:
            StockIntegrityFault: Decrements exceed ledger total for any variant.
        """
        ids = list(dict.fromkeys(variant_ids))
        totals = await self.ledger_repository.totals(ids)
        decremented = await self.decrements.decremented(ids)

        stock: dict[int, int] = {}
        for variant_id in ids:
            value = totals.get(variant_id, 0) - decremented.get(variant_id, 0)
            if value < 0:
                logger.error(
                    "Stock integrity fault",
                    variant_id=variant_id,
                    ledger_total=totals.get(variant_id, 0),
                    decremented=decremented.get(variant_id, 0),
                )
                raise StockIntegrityFault(
                    variant_id, totals.get(variant_id, 0), decremented.get(variant_id, 0)
                )
            stock[variant_id] = value
        return stock

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def entries(
        self,
        variant_id: int | None = None,
        operator_id: str | None = None,
        since: datetime | None = None,
        until: datetime | None = None,
    ) -> list[LedgerEntry]:
        """Audit history, oldest first.

        Raises:
            ValidationError: If ``since`` is after ``until``.
        """
        since = _as_utc(since)
        until = _as_utc(until)
        if since is not None and until is not None and since > until:
            raise ValidationError.for_field("since", "must not be after 'until'")
        return await self.ledger_repository.entries(
            variant_id=variant_id,
            operator_id=operator_id,
            since=since,
            until=until,
        )

    async def check_stock(self, variant_id: int, requested: int) -> StockCheck:
        """Check whether a quantity can be supplied right now.

        Raises:
            ValidationError: If requested is not a positive integer.
            NotFoundError: Variant does not exist.
        """
        _require_positive("requested", requested)
        stock = await self.current_stock(variant_id)
        return StockCheck(
            variant_id=variant_id,
            available=stock >= requested,
            current_stock=stock,
            requested=requested,
            shortfall=max(0, requested - stock),
        )

    async def low_stock(self, threshold: int | None = None) -> list[VariantStock]:
        """Active variants whose stock is at or below the threshold.

        Args:
            threshold: Inclusive limit (defaults to the operator threshold).

        Returns:
            Variants ascending by stock, then id.
        """
        limit = self.low_stock_threshold if threshold is None else threshold
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 0:
            raise ValidationError.for_field("threshold", "must be a non-negative integer")

        variants = await self.catalog_repository.find_active_variants()
        stock = await self.current_stock_many(v.id for v in variants)
        low = [VariantStock(v, stock[v.id]) for v in variants if stock[v.id] <= limit]
        low.sort(key=lambda item: (item.stock, item.variant.id))
        return low

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _require_variant(self, variant_id: int) -> Variant:
        variant = await self.catalog_repository.get_variant(variant_id)
        if variant is None:
            raise NotFoundError("Variant", variant_id)
        return variant

    async def _warn_if_low(self, variant: Variant) -> None:
        # The write already committed; report the level without raising
        totals = await self.ledger_repository.totals([variant.id])
        decremented = await self.decrements.decremented([variant.id])
        stock = totals[variant.id] - decremented.get(variant.id, 0)
        if stock <= self.low_stock_threshold:
            logger.warning(
                "Low stock",
                variant_id=variant.id,
                sku=variant.sku,
                stock=stock,
                threshold=self.low_stock_threshold,
            )
