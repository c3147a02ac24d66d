"""Tests for the Order payment lifecycle: configure, confirm, reject, refund."""

import pytest
from ordering.errors import (
    AmountMismatchError,
    InvalidOrderStateError,
    PaymentAlreadyConfirmedError,
    PaymentNotConfiguredError,
)
from ordering.order.events import (
    OrderCancelled,
    OrderPaymentConfigured,
    OrderPaymentConfirmed,
    OrderPaymentRejected,
    OrderRefunded,
)
from ordering.order.order import OrderStatus, PaymentMethod, PaymentStatus


@pytest.fixture()
def order(order_factory):
    order = order_factory()
    order._events.clear()
    return order


@pytest.fixture()
def paid_order(order):
    order.confirm_payment(payment_id="pay-1", payment_type="credit_card", installments=3, amount=8600)
    order._events.clear()
    return order


class TestConfigurePayment:
    def test_attaches_preference(self, order):
        order.configure_payment("pref-123")

        assert order.payment_info.preference_id == "pref-123"
        assert order.payment_reference == "pref-123"
        assert order.status == OrderStatus.PENDING_PAYMENT.value
        assert isinstance(order._events[-1], OrderPaymentConfigured)

    def test_keeps_other_payment_details(self, order):
        order.configure_payment("pref-123")
        assert order.payment_info.amount == 8600.0
        assert order.payment_info.method == PaymentMethod.GATEWAY.value

    def test_cash_orders_have_no_preference(self, order_factory):
        order = order_factory(payment_method=PaymentMethod.CASH)
        with pytest.raises(PaymentNotConfiguredError):
            order.configure_payment("pref-123")

    def test_only_while_pending(self, paid_order):
        with pytest.raises(InvalidOrderStateError):
            paid_order.configure_payment("pref-456")


class TestConfirmPayment:
    def test_approved_payment_marks_order_paid(self, order):
        changed = order.confirm_payment(payment_id="pay-1", payment_type="credit_card", installments=3, amount=8600)

        assert changed is True
        assert order.status == OrderStatus.PAID.value
        assert order.payment_status == PaymentStatus.APPROVED
        assert order.payment_info.payment_id == "pay-1"
        assert order.payment_info.installments == 3
        assert order.payment_id == "pay-1"
        assert order.paid_at is not None

    def test_raises_event(self, order):
        order.confirm_payment(payment_id="pay-1", amount=8600)

        event = order._events[-1]
        assert isinstance(event, OrderPaymentConfirmed)
        assert event.payment_id == "pay-1"
        assert event.amount == 8600.0

    def test_records_status_change(self, order):
        order.confirm_payment(payment_id="pay-1")

        paid = [c for c in order.status_history if c.to_status == OrderStatus.PAID.value]
        assert len(paid) == 1
        assert paid[0].from_status == OrderStatus.PENDING_PAYMENT.value
        assert paid[0].reason == "Payment approved"

    def test_amount_is_optional(self, order):
        assert order.confirm_payment(payment_id="pay-1") is True

    def test_amount_within_a_cent_is_accepted(self, order):
        assert order.confirm_payment(payment_id="pay-1", amount=8600.004) is True

    def test_amount_mismatch_raises(self, order):
        with pytest.raises(AmountMismatchError) as exc:
            order.confirm_payment(payment_id="pay-1", amount=8000)

        assert exc.value.context["expected"] == 8600.0
        assert order.status == OrderStatus.PENDING_PAYMENT.value
        assert order.payment_status == PaymentStatus.PENDING

    def test_repeated_confirmation_is_a_no_op(self, paid_order):
        history_length = len(paid_order.status_history)

        changed = paid_order.confirm_payment(payment_id="pay-1", amount=8600)

        assert changed is False
        assert paid_order.status == OrderStatus.PAID.value
        assert len(paid_order.status_history) == history_length
        assert paid_order._events == []

    def test_numeric_payment_id_matches_stored_id(self, order):
        order.confirm_payment(payment_id=12345)
        assert order.confirm_payment(payment_id="12345") is False

    def test_different_payment_on_paid_order_raises(self, paid_order):
        with pytest.raises(PaymentAlreadyConfirmedError) as exc:
            paid_order.confirm_payment(payment_id="pay-2")
        assert exc.value.context["confirmed_payment_id"] == "pay-1"

    def test_confirming_cancelled_order_is_a_no_op(self, order):
        order.cancel("Changed my mind")
        order._events.clear()

        assert order.confirm_payment(payment_id="pay-1", amount=8600) is False
        assert order.status == OrderStatus.CANCELLED.value
        assert order.payment_status == PaymentStatus.CANCELLED
        assert order._events == []

    def test_confirming_rejected_payment_is_a_no_op(self, order):
        order.reject_payment("cc_rejected_insufficient_amount", payment_id="pay-1")

        assert order.confirm_payment(payment_id="pay-2", amount=8600) is False
        assert order.status == OrderStatus.PAYMENT_REJECTED.value
        assert order.payment_info.payment_id == "pay-1"
        assert order.payment_info.rejection_reason == "cc_rejected_insufficient_amount"

    def test_confirming_refunded_payment_is_a_no_op(self, paid_order):
        paid_order.refund(refund_id="ref-1")

        assert paid_order.confirm_payment(payment_id="pay-2", amount=8600) is False
        assert paid_order.payment_status == PaymentStatus.REFUNDED
        assert paid_order.status == OrderStatus.CANCELLED.value


class TestRejectPayment:
    def test_rejected_payment(self, order):
        changed = order.reject_payment("cc_rejected_bad_filled_card_number", payment_id="pay-1")

        assert changed is True
        assert order.status == OrderStatus.PAYMENT_REJECTED.value
        assert order.payment_status == PaymentStatus.REJECTED
        assert order.payment_info.rejection_reason == "cc_rejected_bad_filled_card_number"
        assert order.payment_id == "pay-1"

        event = order._events[-1]
        assert isinstance(event, OrderPaymentRejected)
        assert event.reason == "cc_rejected_bad_filled_card_number"

    def test_repeated_rejection_is_a_no_op(self, order):
        order.reject_payment("rejected", payment_id="pay-1")
        assert order.reject_payment("rejected", payment_id="pay-1") is False

    def test_rejection_after_approval_is_ignored(self, paid_order):
        assert paid_order.reject_payment("late notification") is False
        assert paid_order.status == OrderStatus.PAID.value
        assert paid_order.payment_status == PaymentStatus.APPROVED

    def test_rejection_of_cancelled_order_is_ignored(self, order):
        order.cancel()
        assert order.reject_payment("rejected") is False
        assert order.status == OrderStatus.CANCELLED.value


class TestRefund:
    def test_refund_cancels_paid_order(self, paid_order):
        paid_order.refund(refund_id="ref-1")

        assert paid_order.payment_status == PaymentStatus.REFUNDED
        assert paid_order.status == OrderStatus.CANCELLED.value
        assert paid_order.cancellation_reason == "Payment refunded"

        refunded, cancelled = paid_order._events
        assert isinstance(refunded, OrderRefunded)
        assert refunded.amount == 8600.0
        assert isinstance(cancelled, OrderCancelled)
        assert cancelled.previous_status == OrderStatus.PAID.value

    def test_partial_refund(self, paid_order):
        paid_order.refund(refund_id="ref-1", amount=1000)
        assert paid_order._events[0].amount == 1000.0

    def test_refund_above_paid_amount_raises(self, paid_order):
        with pytest.raises(AmountMismatchError):
            paid_order.assert_refundable(9000)

    def test_refund_of_order_cancelled_after_payment(self, paid_order):
        paid_order.cancel("Out of stock")
        paid_order._events.clear()

        paid_order.refund(refund_id="ref-1")

        assert paid_order.payment_status == PaymentStatus.REFUNDED
        assert paid_order.status == OrderStatus.CANCELLED.value
        assert len(paid_order._events) == 1
        assert isinstance(paid_order._events[0], OrderRefunded)

    def test_unpaid_order_cannot_be_refunded(self, order):
        with pytest.raises(InvalidOrderStateError):
            order.assert_refundable()

    def test_refunded_order_cannot_be_refunded_again(self, paid_order):
        paid_order.refund(refund_id="ref-1")
        with pytest.raises(InvalidOrderStateError):
            paid_order.refund(refund_id="ref-2")

    def test_delivered_order_cannot_be_refunded(self, paid_order):
        paid_order.start_preparation()
        paid_order.mark_ready()
        paid_order.mark_delivered()

        with pytest.raises(InvalidOrderStateError):
            paid_order.assert_refundable()
