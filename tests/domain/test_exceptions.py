"""Tests for domain exceptions and field validation."""

import pytest

from shoestore.domain.exceptions import (
    AuthorizationError,
    DuplicateVariantError,
    NotFoundError,
    StockIntegrityFault,
    ValidationError,
)
from shoestore.domain.validation import FieldErrors


class TestErrorEnvelope:
    """Tests for the structured error format."""

    def test_validation_error_for_field(self) -> None:
        """for_field builds one field entry."""
        error = ValidationError.for_field("quantity", "must be a positive integer")
        data = error.to_dict()

        assert error.status_code == 400
        assert data["error_code"] == "VALIDATION_ERROR"
        assert data["details"] == [{"field": "quantity", "message": "must be a positive integer"}]
        assert error.has_error("quantity")
        assert not error.has_error("sku")

    def test_add_error_appends(self) -> None:
        """add_error collects further field problems."""
        error = ValidationError()
        error.add_error("sku", "is required")
        error.add_error("price", "must not be negative")
        assert [f["field"] for f in error.fields] == ["sku", "price"]

    def test_not_found_context(self) -> None:
        """NotFoundError reports what was missing."""
        error = NotFoundError("Variant", 42)
        assert error.status_code == 404
        assert error.to_dict()["context"] == {"entity_type": "Variant", "entity_id": 42}

    def test_duplicate_triple_message(self) -> None:
        """A triple conflict names the existing variant."""
        error = DuplicateVariantError(9, product_id=1, color_id=2, size_id=3)
        assert error.status_code == 409
        assert error.existing_variant_id == 9
        assert "product 1, color 2, size 3" in error.message

    def test_duplicate_sku_message(self) -> None:
        """A SKU conflict mentions the SKU."""
        error = DuplicateVariantError(9, sku="RX-BLK-9")
        assert "RX-BLK-9" in error.message
        assert error.details["sku"] == "RX-BLK-9"

    def test_stock_integrity_fault_is_server_error(self) -> None:
        """Oversell is a 500 with the projected stock in context."""
        error = StockIntegrityFault(variant_id=3, ledger_total=2, decremented=5)
        assert error.status_code == 500
        assert error.details["stock"] == -3

    def test_authorization_error(self) -> None:
        """AuthorizationError is a 403 naming the action."""
        error = AuthorizationError("record_import", role="shopper")
        assert error.status_code == 403
        assert error.details == {"action": "record_import", "role": "shopper"}


class TestFieldErrors:
    """Tests for FieldErrors accumulation."""

    def test_no_errors_does_not_raise(self) -> None:
        """Valid input passes."""
        errors = FieldErrors()
        errors.require_id("product_id", 1)
        errors.require_text("sku", "RX-BLK-9", max_length=50)
        errors.require_non_negative("price", None, optional=True)
        errors.raise_if_any()

    def test_all_problems_reported_together(self) -> None:
        """Every failing field appears in one ValidationError."""
        errors = FieldErrors()
        errors.require_id("product_id", 0)
        errors.require_id("color_id", "2")
        errors.require_text("sku", "   ")
        errors.require_non_negative("price", -1)

        with pytest.raises(ValidationError) as exc_info:
            errors.raise_if_any("Invalid variant")

        error = exc_info.value
        assert error.message == "Invalid variant"
        assert [f["field"] for f in error.fields] == ["product_id", "color_id", "sku", "price"]

    def test_booleans_are_not_ids(self) -> None:
        """True is rejected even though bool subclasses int."""
        errors = FieldErrors()
        errors.require_id("size_id", True)
        with pytest.raises(ValidationError):
            errors.raise_if_any()

    def test_text_length_limit(self) -> None:
        """Over-long text is rejected."""
        errors = FieldErrors()
        errors.require_text("sku", "X" * 51, max_length=50)
        with pytest.raises(ValidationError) as exc_info:
            errors.raise_if_any()
        assert "at most 50" in exc_info.value.fields[0]["message"]
