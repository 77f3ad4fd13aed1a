"""Tests for domain entities."""

import dataclasses

import pytest

from shoestore.domain import (
    Color,
    LedgerEntry,
    LedgerEntryKind,
    Product,
    ProductDeactivated,
    Size,
    SizeSystem,
    Variant,
    VariantActivationChanged,
    VariantKey,
    VariantUpserted,
)


# ============================================================================
# Test Fixtures
# ============================================================================


def make_product(base_price: int = 8999, product_id: int = 1) -> Product:
    """Create a test product."""
    return Product(id=product_id, name="Runner X", base_price=base_price)


def make_variant(price: int | None = None, variant_id: int = 5) -> Variant:
    """Create a test variant."""
    return Variant(
        id=variant_id,
        product_id=1,
        color_id=2,
        size_id=3,
        sku="RX-BLK-9",
        price=price,
    )


# ============================================================================
# Entity Identity
# ============================================================================


class TestEntityIdentity:
    """Tests for identity-based equality."""

    def test_same_id_is_equal(self) -> None:
        """Entities with the same id are equal regardless of attributes."""
        assert Color(id=1, name="Black") == Color(id=1, name="Noir")

    def test_different_type_is_not_equal(self) -> None:
        """A color and a size never compare equal."""
        assert Color(id=1, name="Black") != Size(id=1, value="9")

    def test_unsaved_entities_compare_by_identity(self) -> None:
        """Two unsaved entities are only equal to themselves."""
        first = make_product(product_id=0)
        second = make_product(product_id=0)
        assert not first.is_persisted
        assert first != second
        assert first == first

    def test_entities_are_hashable(self) -> None:
        """Entities can live in sets."""
        colors = {Color(id=1, name="Black"), Color(id=1, name="Black"), Color(id=2, name="White")}
        assert len(colors) == 2


# ============================================================================
# Product
# ============================================================================


class TestProduct:
    """Tests for the Product aggregate."""

    def test_deactivate_active_product(self) -> None:
        """Deactivation flips the flag once."""
        product = make_product()
        assert product.deactivate() is True
        assert product.is_active is False

    def test_deactivate_twice_is_noop(self) -> None:
        """A second deactivation reports no change."""
        product = make_product()
        product.deactivate()
        assert product.deactivate() is False

    def test_mark_deactivated_records_event(self) -> None:
        """The cascade result is carried on ProductDeactivated."""
        product = make_product()
        product.deactivate()
        product.mark_deactivated([4, 5])

        events = product.collect_events()
        assert len(events) == 1
        assert isinstance(events[0], ProductDeactivated)
        assert events[0].product_id == 1
        assert events[0].deactivated_variant_ids == (4, 5)
        assert product.collect_events() == []


# ============================================================================
# Variant
# ============================================================================


class TestVariant:
    """Tests for the Variant aggregate."""

    def test_key_is_natural_triple(self) -> None:
        """The key is (product, color, size)."""
        assert make_variant().key == VariantKey(1, 2, 3)
        assert str(make_variant().key) == "1/2/3"

    def test_effective_price_falls_back_to_product(self) -> None:
        """Without an override the product base price applies."""
        assert make_variant(price=None).effective_price(make_product(8999)) == 8999

    def test_effective_price_uses_override(self) -> None:
        """An override wins, including a zero price."""
        assert make_variant(price=9499).effective_price(make_product(8999)) == 9499
        assert make_variant(price=0).effective_price(make_product(8999)) == 0

    def test_set_active_records_event_on_change(self) -> None:
        """Disabling an active variant records VariantActivationChanged."""
        variant = make_variant()
        assert variant.set_active(False) is True

        events = variant.collect_events()
        assert len(events) == 1
        assert isinstance(events[0], VariantActivationChanged)
        assert events[0].is_active is False
        assert events[0].product_id == 1

    def test_set_active_same_value_is_noop(self) -> None:
        """Setting the current value records nothing."""
        variant = make_variant()
        assert variant.set_active(True) is False
        assert variant.collect_events() == []

    def test_mark_upserted_event_payload(self) -> None:
        """VariantUpserted serializes its payload."""
        variant = make_variant()
        variant.mark_upserted(created=True)

        event = variant.collect_events()[0]
        assert isinstance(event, VariantUpserted)
        data = event.to_dict()
        assert data["event_type"] == "variant.upserted"
        assert data["product_id"] == 1
        assert data["payload"]["sku"] == "RX-BLK-9"
        assert data["payload"]["created"] is True

    def test_update_replaces_attributes(self) -> None:
        """update() rewrites the identifying fields and bumps updated_at."""
        variant = make_variant()
        before = variant.updated_at
        variant.update(color_id=7, size_id=8, sku="RX-RED-10", price=100, is_active=False)

        assert variant.key == VariantKey(1, 7, 8)
        assert variant.sku == "RX-RED-10"
        assert variant.price == 100
        assert variant.is_active is False
        assert variant.updated_at >= before


# ============================================================================
# Sizes and Ledger Entries
# ============================================================================


class TestSize:
    """Tests for Size."""

    def test_defaults_to_us_system(self) -> None:
        """Sizes default to the US system."""
        assert Size(id=1, value="9").size_system == SizeSystem.US

    def test_sort_key_orders_naturally(self) -> None:
        """Half sizes sit between whole sizes."""
        sizes = [Size(id=1, value="10"), Size(id=2, value="9.5"), Size(id=3, value="9")]
        assert [s.value for s in sorted(sizes, key=lambda s: s.sort_key)] == ["9", "9.5", "10"]


class TestLedgerEntry:
    """Tests for LedgerEntry."""

    def test_entries_are_immutable(self) -> None:
        """Ledger entries cannot be edited."""
        entry = LedgerEntry(
            variant_id=1, quantity=10, kind=LedgerEntryKind.IMPORT, operator_id="op-1"
        )
        with pytest.raises(dataclasses.FrozenInstanceError):
            entry.quantity = 5  # type: ignore[misc]

    def test_created_at_is_timezone_aware(self) -> None:
        """Timestamps are recorded in UTC."""
        entry = LedgerEntry(
            variant_id=1, quantity=-2, kind=LedgerEntryKind.ADJUSTMENT, operator_id="op-1"
        )
        assert entry.created_at.tzinfo is not None
