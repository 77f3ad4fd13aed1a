"""Tests for the selection state machine."""

import pytest

from shoestore.domain.exceptions import SelectionRejectedError
from shoestore.domain.state_machines import SelectionStatus, validate_selection_transition


class TestSelectionStatus:
    """Tests for SelectionStatus transitions."""

    def test_no_color_can_transition_to_color_selected(self) -> None:
        """NO_COLOR_SELECTED -> COLOR_SELECTED is valid."""
        assert SelectionStatus.NO_COLOR_SELECTED.can_transition_to(
            SelectionStatus.COLOR_SELECTED
        )

    def test_no_color_cannot_jump_to_complete(self) -> None:
        """A size cannot be chosen before a color."""
        assert not SelectionStatus.NO_COLOR_SELECTED.can_transition_to(
            SelectionStatus.COLOR_AND_SIZE_SELECTED
        )

    def test_color_selected_can_change_color(self) -> None:
        """Picking another color keeps COLOR_SELECTED."""
        assert SelectionStatus.COLOR_SELECTED.can_transition_to(SelectionStatus.COLOR_SELECTED)

    def test_color_selected_can_pick_size(self) -> None:
        """COLOR_SELECTED -> COLOR_AND_SIZE_SELECTED is valid."""
        assert SelectionStatus.COLOR_SELECTED.can_transition_to(
            SelectionStatus.COLOR_AND_SIZE_SELECTED
        )

    def test_complete_can_reset_to_color_selected(self) -> None:
        """Changing color from a complete selection drops the size."""
        assert SelectionStatus.COLOR_AND_SIZE_SELECTED.can_transition_to(
            SelectionStatus.COLOR_SELECTED
        )

    def test_nothing_returns_to_no_color(self) -> None:
        """Once a color is chosen there is no way back to NO_COLOR_SELECTED."""
        for status in SelectionStatus:
            assert not status.can_transition_to(SelectionStatus.NO_COLOR_SELECTED)

    def test_allowed_transitions_are_sorted(self) -> None:
        """allowed_transitions is deterministic."""
        allowed = SelectionStatus.COLOR_SELECTED.allowed_transitions()
        assert allowed == [
            SelectionStatus.COLOR_AND_SIZE_SELECTED,
            SelectionStatus.COLOR_SELECTED,
        ]

    def test_has_color_and_is_complete(self) -> None:
        """Status helpers reflect the selection progress."""
        assert not SelectionStatus.NO_COLOR_SELECTED.has_color()
        assert SelectionStatus.COLOR_SELECTED.has_color()
        assert not SelectionStatus.COLOR_SELECTED.is_complete()
        assert SelectionStatus.COLOR_AND_SIZE_SELECTED.is_complete()


class TestValidateSelectionTransition:
    """Tests for validate_selection_transition."""

    def test_valid_transition_passes(self) -> None:
        """Valid transitions do not raise."""
        validate_selection_transition(
            1, SelectionStatus.NO_COLOR_SELECTED, SelectionStatus.COLOR_SELECTED
        )

    def test_invalid_transition_raises_with_reason(self) -> None:
        """Invalid transitions raise SelectionRejectedError carrying the reason."""
        with pytest.raises(SelectionRejectedError) as exc_info:
            validate_selection_transition(
                7,
                SelectionStatus.NO_COLOR_SELECTED,
                SelectionStatus.COLOR_AND_SIZE_SELECTED,
                reason="select a color first",
            )

        error = exc_info.value
        assert error.error_code == "SELECTION_REJECTED"
        assert error.status_code == 409
        assert error.reason == "select a color first"
        assert error.details["current_state"] == "no_color_selected"
        assert error.details["allowed_transitions"] == ["color_selected"]
        assert "select a color first" in error.message
