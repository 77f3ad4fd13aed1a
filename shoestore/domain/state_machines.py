"""State machines for domain entities.

Deterministic state machine for a shopper's in-progress color/size
selection on a product page. It enforces which choices are legal in each
state; stock checks are layered on top by the selection service.
"""

from enum import Enum

from shoestore.domain.exceptions import SelectionRejectedError


# ============================================================================
# Selection State Machine
# ============================================================================


class SelectionStatus(str, Enum):
    """Variant selection states.

    State diagram:
        NO_COLOR_SELECTED
          │
          │ select_color
          ▼
        COLOR_SELECTED ◄──────────────┐
          │        ▲                  │
          │        │ select_color     │ select_color (resets size)
          │        │ (resets size)    │
          │ select_size               │
          ▼                           │
        COLOR_AND_SIZE_SELECTED ──────┘
    """

    NO_COLOR_SELECTED = "no_color_selected"
    COLOR_SELECTED = "color_selected"
    COLOR_AND_SIZE_SELECTED = "color_and_size_selected"

    def can_transition_to(self, target: "SelectionStatus") -> bool:
        """Check if transition to target state is valid.

        Args:
            target: Target state to transition to.

        Returns:
            True if transition is valid.
        """
        return target in _SELECTION_TRANSITIONS.get(self, set())

    def allowed_transitions(self) -> list["SelectionStatus"]:
        """Get list of valid target states.

        Returns:
            List of states that can be transitioned to.
        """
        return sorted(_SELECTION_TRANSITIONS.get(self, set()), key=lambda s: s.value)

    def has_color(self) -> bool:
        """Check if a color has been chosen."""
        return self != SelectionStatus.NO_COLOR_SELECTED

    def is_complete(self) -> bool:
        """Check if a single variant is resolved."""
        return self == SelectionStatus.COLOR_AND_SIZE_SELECTED


# Selection transitions (defined outside enum to avoid Enum restrictions)
_SELECTION_TRANSITIONS: dict[SelectionStatus, set[SelectionStatus]] = {
    SelectionStatus.NO_COLOR_SELECTED: {SelectionStatus.COLOR_SELECTED},
    SelectionStatus.COLOR_SELECTED: {
        SelectionStatus.COLOR_SELECTED,  # pick a different color
        SelectionStatus.COLOR_AND_SIZE_SELECTED,
    },
    SelectionStatus.COLOR_AND_SIZE_SELECTED: {
        SelectionStatus.COLOR_SELECTED,  # color change resets size
        SelectionStatus.COLOR_AND_SIZE_SELECTED,  # pick a different size
    },
}


# ============================================================================
# State Machine Helpers
# ============================================================================


def validate_selection_transition(
    product_id: int,
    current_status: SelectionStatus,
    target_status: SelectionStatus,
    reason: str | None = None,
) -> None:
    """Validate and raise if a selection transition is invalid.

    Args:
        product_id: Product being viewed, for the error message.
        current_status: Current selection status.
        target_status: Target selection status.
        reason: Explanation passed to the caller.

    Raises:
        SelectionRejectedError: If transition is not valid.
    """
    if not current_status.can_transition_to(target_status):
        raise SelectionRejectedError(
            entity_type="Selection",
            entity_id=str(product_id),
            current_state=current_status.value,
            target_state=target_status.value,
            allowed_transitions=[s.value for s in current_status.allowed_transitions()],
            reason=reason,
        )
