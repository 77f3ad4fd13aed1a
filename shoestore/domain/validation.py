"""Input validation helpers.

Collect field-level problems into a single ValidationError so callers see
every issue at once.
"""

from typing import Any

from shoestore.domain.exceptions import ValidationError


class FieldErrors:
    """Accumulates field errors and raises them together.

    Example:
        errors = FieldErrors()
        errors.require_id("product_id", product_id)
        errors.require_text("sku", sku, max_length=50)
        errors.raise_if_any("Invalid variant")
    """

    def __init__(self) -> None:
        self._fields: list[dict[str, str]] = []

    def add(self, field: str, message: str) -> None:
        """Record an error for a field."""
        self._fields.append({"field": field, "message": message})

    def require_id(self, field: str, value: Any) -> None:
        """Require a positive integer identifier."""
        if isinstance(value, bool) or not isinstance(value, int):
            self.add(field, "must be an integer")
        elif value <= 0:
            self.add(field, "must be a positive integer")

    def require_text(self, field: str, value: Any, max_length: int | None = None) -> None:
        """Require a non-blank string, optionally bounded in length."""
        if not isinstance(value, str) or not value.strip():
            self.add(field, "is required")
        elif max_length is not None and len(value) > max_length:
            self.add(field, f"must be at most {max_length} characters")

    def require_non_negative(self, field: str, value: Any, optional: bool = False) -> None:
        """Require an integer amount that is zero or more."""
        if value is None and optional:
            return
        if isinstance(value, bool) or not isinstance(value, int):
            self.add(field, "must be an integer")
        elif value < 0:
            self.add(field, "must not be negative")

    def raise_if_any(self, message: str = "Validation failed") -> None:
        """Raise ValidationError if any errors were recorded.

        Raises:
            ValidationError: With all recorded field errors.
        """
        if self._fields:
            raise ValidationError(message, fields=list(self._fields))
