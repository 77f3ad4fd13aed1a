"""Domain exceptions.

All domain-level errors that represent business rule violations.
These exceptions are raised by entities, services and state machines when
invariants are violated or invalid operations are attempted. Each error
carries a machine-readable code and the HTTP status it maps to at the API
boundary.
"""

from typing import Any


class DomainError(Exception):
    """Base class for all domain exceptions.

    All domain errors should inherit from this class to allow
    catching domain-specific errors at the application layer.
    """

    error_code: str = "DOMAIN_ERROR"
    status_code: int = 400

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        fields: list[dict[str, str]] | None = None,
    ) -> None:
        """Initialize domain error.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
            fields: Optional field-level messages ({"field", "message"}).
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.fields = fields or []

    def to_dict(self) -> dict[str, Any]:
        """Convert to a structured error (kind + message + field list)."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.fields,
            "context": self.details,
        }


# ============================================================================
# Input Errors
# ============================================================================


class ValidationError(DomainError):
    """Raised for malformed input (bad ids, non-positive quantities, missing fields).

    Collects field-level messages so the caller can fix every problem at once.
    """

    error_code = "VALIDATION_ERROR"
    status_code = 400

    def __init__(
        self,
        message: str = "Validation failed",
        fields: list[dict[str, str]] | None = None,
    ) -> None:
        super().__init__(message, fields=fields)

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        """Create a validation error for a single field.

        Args:
            field: Offending field name.
            message: What is wrong with it.

        Returns:
            ValidationError with one field entry.
        """
        return cls(f"Invalid {field}: {message}", fields=[{"field": field, "message": message}])

    def add_error(self, field: str, message: str) -> None:
        """Append a field-level error."""
        self.fields.append({"field": field, "message": message})

    def has_error(self, field: str) -> bool:
        """Check whether a field has an error recorded."""
        return any(error["field"] == field for error in self.fields)


class AuthorizationError(DomainError):
    """Raised when an operator-only action is attempted without the role."""

    error_code = "FORBIDDEN"
    status_code = 403

    def __init__(self, action: str, role: str | None = None) -> None:
        """Initialize authorization error.

        Args:
            action: Action that was attempted.
            role: Role presented by the caller, if any.
        """
        super().__init__(
            f"Operator role required for '{action}'",
            details={"action": action, "role": role},
        )


class NotFoundError(DomainError):
    """Raised when a referenced product, color, size or variant does not exist."""

    error_code = "NOT_FOUND"
    status_code = 404

    def __init__(self, entity_type: str, entity_id: Any) -> None:
        """Initialize not found error.

        Args:
            entity_type: Type of entity (e.g., "Product", "Variant").
            entity_id: Identifier that did not resolve.
        """
        super().__init__(
            f"{entity_type} {entity_id} not found",
            details={"entity_type": entity_type, "entity_id": entity_id},
        )
        self.entity_type = entity_type
        self.entity_id = entity_id


# ============================================================================
# Catalog Errors
# ============================================================================


class DuplicateVariantError(DomainError):
    """Raised when a second active variant would exist for a (product, color, size) triple.

    Also raised when a SKU is already taken by another variant. The existing
    variant id is reported so the caller can offer to edit it instead.
    """

    error_code = "DUPLICATE_VARIANT"
    status_code = 409

    def __init__(
        self,
        existing_variant_id: int,
        product_id: int | None = None,
        color_id: int | None = None,
        size_id: int | None = None,
        sku: str | None = None,
    ) -> None:
        """Initialize duplicate variant error.

        Args:
            existing_variant_id: Variant that already holds the key.
            product_id: Product of the conflicting triple.
            color_id: Color of the conflicting triple.
            size_id: Size of the conflicting triple.
            sku: Conflicting SKU, when the conflict is on the SKU.
        """
        if sku is not None:
            message = f"SKU '{sku}' is already used by variant {existing_variant_id}"
        else:
            message = (
                f"Active variant {existing_variant_id} already exists for "
                f"product {product_id}, color {color_id}, size {size_id}"
            )
        super().__init__(
            message,
            details={
                "existing_variant_id": existing_variant_id,
                "product_id": product_id,
                "color_id": color_id,
                "size_id": size_id,
                "sku": sku,
            },
        )
        self.existing_variant_id = existing_variant_id


# ============================================================================
# Inventory Errors
# ============================================================================


class StockIntegrityFault(DomainError):
    """Raised when derived stock would be negative (oversell detected).

    Not recoverable by catalog code: it signals a race or a bug in the
    decrement path upstream.
    """

    error_code = "STOCK_INTEGRITY_FAULT"
    status_code = 500

    def __init__(self, variant_id: int, ledger_total: int, decremented: int) -> None:
        """Initialize stock integrity fault.

        Args:
            variant_id: Variant whose stock went negative.
            ledger_total: Sum of ledger entries.
            decremented: Units sold/reserved by the order subsystem.
        """
        super().__init__(
            f"Variant {variant_id} is oversold: ledger total {ledger_total}, "
            f"decremented {decremented}",
            details={
                "variant_id": variant_id,
                "ledger_total": ledger_total,
                "decremented": decremented,
                "stock": ledger_total - decremented,
            },
        )
        self.variant_id = variant_id


# ============================================================================
# State Machine Errors
# ============================================================================


class InvalidStateTransitionError(DomainError):
    """Raised when an invalid state transition is attempted.

    This error indicates that the requested operation cannot be performed
    in the current state of the entity.
    """

    error_code = "INVALID_STATE_TRANSITION"
    status_code = 409

    def __init__(
        self,
        entity_type: str,
        entity_id: str,
        current_state: str,
        target_state: str,
        allowed_transitions: list[str] | None = None,
        reason: str | None = None,
    ) -> None:
        """Initialize invalid state transition error.

        Args:
            entity_type: Type of entity (e.g., "Selection").
            entity_id: ID of the entity.
            current_state: Current state of the entity.
            target_state: Attempted target state.
            allowed_transitions: List of allowed target states from current state.
            reason: Why the transition was refused.
        """
        allowed = allowed_transitions or []
        message = (
            f"Cannot transition {entity_type}({entity_id}) "
            f"from '{current_state}' to '{target_state}'. "
        )
        message += reason if reason else f"Allowed transitions: {allowed}"
        super().__init__(
            message,
            details={
                "entity_type": entity_type,
                "entity_id": entity_id,
                "current_state": current_state,
                "target_state": target_state,
                "allowed_transitions": allowed,
                "reason": reason,
            },
        )
        self.reason = reason


class SelectionRejectedError(InvalidStateTransitionError):
    """Raised when a shopper's color/size choice is not legal right now."""

    error_code = "SELECTION_REJECTED"
