"""
Tests for checkout domain types (``pos_kernel.domain.checkout``) and Sale.

Invariants tested:
- CHECKOUT_TRANSITIONS defines the only valid transitions; COMMITTED is
  terminal.
- Non-committed outcomes always leave the state machine OPEN.
- SALE_IMMUTABLE / TOTAL_RECONCILES / NON_NEGATIVE_CHANGE on Sale.
"""

from dataclasses import FrozenInstanceError
from datetime import UTC, datetime
from decimal import Decimal

import pytest

from pos_kernel.domain.checkout import (
    CHECKOUT_TRANSITIONS,
    TERMINAL_CHECKOUT_STATES,
    CheckoutOutcome,
    CheckoutState,
    IntegrityViolation,
    OutcomeStatus,
    ValidationRejection,
    can_transition,
)
from pos_kernel.domain.pricing import PaymentMethod, TenderStatus
from pos_kernel.domain.sale import Sale


# =========================================================================
# State machine
# =========================================================================


class TestCheckoutTransitions:

    @pytest.mark.parametrize(
        "from_state, to_state",
        [
            (CheckoutState.OPEN, CheckoutState.VALIDATING),
            (CheckoutState.VALIDATING, CheckoutState.REJECTED),
            (CheckoutState.VALIDATING, CheckoutState.COMMITTED),
            (CheckoutState.REJECTED, CheckoutState.OPEN),
        ],
    )
    def test_valid_transitions(self, from_state, to_state):
        assert can_transition(from_state, to_state)

    @pytest.mark.parametrize(
        "from_state, to_state",
        [
            (CheckoutState.OPEN, CheckoutState.COMMITTED),
            (CheckoutState.OPEN, CheckoutState.REJECTED),
            (CheckoutState.REJECTED, CheckoutState.COMMITTED),
            (CheckoutState.COMMITTED, CheckoutState.OPEN),
        ],
    )
    def test_invalid_transitions(self, from_state, to_state):
        assert not can_transition(from_state, to_state)

    def test_every_state_declared(self):
        assert set(CHECKOUT_TRANSITIONS) == set(CheckoutState)

    def test_terminal_states_have_no_outgoing_edges(self):
        for state in TERMINAL_CHECKOUT_STATES:
            assert CHECKOUT_TRANSITIONS[state] == frozenset()


# =========================================================================
# Outcomes
# =========================================================================


class TestCheckoutOutcome:

    def test_rejected_returns_to_open(self):
        rejection = ValidationRejection(
            code="PAYMENT_INSUFFICIENT",
            payment_method=PaymentMethod.CASH,
            total=Decimal("85.00"),
            tendered=Decimal("50.00"),
            tender_status=TenderStatus.PAYMENT_INSUFFICIENT,
            shortfall=Decimal("35.00"),
        )
        outcome = CheckoutOutcome.rejected(rejection)
        assert outcome.status is OutcomeStatus.REJECTED
        assert outcome.state is CheckoutState.OPEN
        assert outcome.sale is None
        assert not outcome.committed
        assert "35.00" in rejection.message

    def test_rejection_message_without_tender(self):
        rejection = ValidationRejection(
            code="NOT_ENTERED",
            payment_method=PaymentMethod.CASH,
            total=Decimal("85.00"),
            tendered=None,
            tender_status=TenderStatus.NOT_ENTERED,
            shortfall=Decimal("0"),
        )
        assert rejection.message == "Cash tender required for total 85.00"

    def test_empty_cart(self):
        outcome = CheckoutOutcome.empty_cart()
        assert outcome.status is OutcomeStatus.EMPTY_CART_NOOP
        assert outcome.state is CheckoutState.OPEN
        assert outcome.noop is not None

    def test_integrity_violation(self):
        violation = IntegrityViolation(
            code="UNKNOWN_PRODUCT",
            message="Product not found: X",
            invariant="stock_lockstep",
            product_id="X",
        )
        outcome = CheckoutOutcome.integrity_violation(violation)
        assert outcome.status is OutcomeStatus.INTEGRITY_VIOLATION
        assert outcome.violation.product_id == "X"
        assert outcome.state is CheckoutState.OPEN


# =========================================================================
# Sale
# =========================================================================


class TestSale:

    @pytest.fixture
    def lines(self, build_cart):
        return build_cart("1", "1", "5").lines  # 25*2 + 35 = 85

    def _sale(self, lines, **overrides):
        fields = dict(
            sale_id="SALE-20240614-000001",
            timestamp=datetime(2024, 6, 14, 18, 30, tzinfo=UTC),
            lines=lines,
            total=Decimal("85.00"),
            payment_method=PaymentMethod.CARD,
        )
        fields.update(overrides)
        return Sale(**fields)

    def test_valid_card_sale(self, lines):
        sale = self._sale(lines)
        assert sale.item_count == 3
        assert sale.quantities() == {"1": 2, "5": 1}

    def test_is_frozen(self, lines):
        sale = self._sale(lines)
        with pytest.raises(FrozenInstanceError):
            sale.total = Decimal("1")

    def test_rejects_no_lines(self):
        with pytest.raises(ValueError):
            self._sale(())

    def test_rejects_total_mismatch(self, lines):
        with pytest.raises(ValueError, match="does not match"):
            self._sale(lines, total=Decimal("80.00"))

    def test_cash_sale_needs_non_negative_change(self, lines):
        with pytest.raises(ValueError):
            self._sale(lines, payment_method=PaymentMethod.CASH)
        with pytest.raises(ValueError):
            self._sale(
                lines,
                payment_method=PaymentMethod.CASH,
                tendered=Decimal("50.00"),
                change=Decimal("-35.00"),
            )
        sale = self._sale(
            lines,
            payment_method=PaymentMethod.CASH,
            tendered=Decimal("100.00"),
            change=Decimal("15.00"),
        )
        assert sale.change == Decimal("15.00")
