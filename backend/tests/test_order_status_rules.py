"""
Tests for the order status rules.

Tests: validate_status_transition — no-op rejection, terminal states,
cancellation after shipping, and the allowed forward moves.
"""
import os, sys
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

import pytest

from domain.enums import OrderStatus
from domain.errors import InvalidTransitionError
from services.order_service import validate_status_transition

ALL_STATUSES = list(OrderStatus)
TERMINAL = [OrderStatus.CANCELLED, OrderStatus.REFUNDED]


class TestNoOpTransitions:
    """Moving an order to the status it already has is always rejected."""

    @pytest.mark.unit
    @pytest.mark.parametrize("status", ALL_STATUSES)
    def test_same_status_rejected(self, status):
        with pytest.raises(InvalidTransitionError) as exc_info:
            validate_status_transition(status, status)
        assert "already in" in exc_info.value.message
        assert exc_info.value.status_code == 409


class TestTerminalStates:
    """CANCELLED and REFUNDED accept no further transitions."""

    @pytest.mark.unit
    @pytest.mark.parametrize("old", TERMINAL)
    @pytest.mark.parametrize("new", ALL_STATUSES)
    def test_any_target_rejected(self, old, new):
        with pytest.raises(InvalidTransitionError):
            validate_status_transition(old, new)

    @pytest.mark.unit
    def test_terminal_message(self):
        with pytest.raises(InvalidTransitionError) as exc_info:
            validate_status_transition(OrderStatus.CANCELLED, OrderStatus.SHIPPED)
        assert "cancelled or refunded" in exc_info.value.message
        assert exc_info.value.details == {"old_status": "CANCELLED", "new_status": "SHIPPED"}


class TestCancellation:
    """Only orders that have not shipped can be cancelled."""

    @pytest.mark.unit
    @pytest.mark.parametrize("old", [OrderStatus.SHIPPED, OrderStatus.DELIVERED])
    def test_cancel_after_shipping_rejected(self, old):
        with pytest.raises(InvalidTransitionError) as exc_info:
            validate_status_transition(old, OrderStatus.CANCELLED)
        assert "Cannot cancel shipped or delivered" in exc_info.value.message

    @pytest.mark.unit
    @pytest.mark.parametrize("old", [OrderStatus.PENDING, OrderStatus.PROCESSING])
    def test_cancel_before_shipping_allowed(self, old):
        validate_status_transition(old, OrderStatus.CANCELLED)


class TestAllowedTransitions:

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "old,new",
        [
            (OrderStatus.PENDING, OrderStatus.PROCESSING),
            (OrderStatus.PROCESSING, OrderStatus.SHIPPED),
            (OrderStatus.SHIPPED, OrderStatus.DELIVERED),
            # Skips and reversals are not restricted
            (OrderStatus.PENDING, OrderStatus.DELIVERED),
            (OrderStatus.DELIVERED, OrderStatus.SHIPPED),
        ],
    )
    def test_transition_allowed(self, old, new):
        validate_status_transition(old, new)

    @pytest.mark.unit
    def test_accepts_raw_strings(self):
        """Values read straight from the status column are accepted."""
        validate_status_transition("PENDING", "PROCESSING")
        with pytest.raises(InvalidTransitionError):
            validate_status_transition("REFUNDED", "PENDING")

    @pytest.mark.unit
    def test_unknown_status_rejected(self):
        with pytest.raises(ValueError):
            validate_status_transition(OrderStatus.PENDING, "LOST")
