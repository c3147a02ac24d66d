"""Application tests for gateway payment notifications and refunds."""

import asyncio

import pytest
from ordering.checkout.adapters import ProteanOrderRepository
from ordering.checkout.payment_service import PaymentService
from ordering.checkout.schemas import WebhookNotification
from ordering.errors import (
    AmountMismatchError,
    InvalidOrderStateError,
    OrderNotFoundError,
    PaymentGatewayError,
)
from ordering.order.order import Order, OrderStatus, PaymentStatus
from ordering.order.payment import load_order
from payments.gateway import FakeGateway
from protean import current_domain


@pytest.fixture()
def gateway():
    return FakeGateway()


@pytest.fixture()
def service(gateway):
    return PaymentService(order_repository=ProteanOrderRepository(), payment_gateway=gateway)


@pytest.fixture()
def order(order_factory):
    """A pickup order for 8600, paid through the gateway."""
    order = order_factory()
    order.configure_payment("pref-001")
    current_domain.repository_for(Order).add(order)
    return order


def _notification(payment_id, notification_type="payment"):
    return WebhookNotification.model_validate(
        {"id": 991, "type": notification_type, "action": "payment.updated", "data": {"id": payment_id}}
    )


def _notify(service, payment_id, notification_type="payment"):
    return asyncio.run(service.handle_webhook(_notification(payment_id, notification_type)))


class TestApprovedNotification:
    def test_confirms_order(self, service, gateway, order):
        gateway.register_payment("pay-1", "approved", 8600, external_reference=str(order.id), installments=3)

        result = _notify(service, "pay-1")

        assert result.processed is True
        assert result.action == "confirmed"
        assert result.changed is True
        assert result.order_id == str(order.id)
        assert result.previous_status == OrderStatus.PENDING_PAYMENT.value
        assert result.new_status == OrderStatus.PAID.value

        stored = load_order(order.id)
        assert stored.status == OrderStatus.PAID.value
        assert stored.payment_info.installments == 3
        assert stored.payment_id == "pay-1"

    def test_duplicate_notification_changes_nothing(self, service, gateway, order):
        gateway.register_payment("pay-1", "approved", 8600, external_reference=str(order.id))

        _notify(service, "pay-1")
        result = _notify(service, "pay-1")

        assert result.processed is True
        assert result.changed is False
        assert result.new_status == OrderStatus.PAID.value
        stored = load_order(order.id)
        assert stored.status == OrderStatus.PAID.value
        assert len(stored.status_history) == 2

    def test_numeric_payment_id(self, service, gateway, order):
        gateway.register_payment("123456789", "approved", 8600, external_reference=str(order.id))

        result = asyncio.run(
            service.handle_webhook(WebhookNotification.model_validate({"type": "payment", "data": {"id": 123456789}}))
        )

        assert result.changed is True
        assert load_order(order.id).payment_id == "123456789"

    def test_amount_mismatch_is_refused(self, service, gateway, order):
        gateway.register_payment("pay-1", "approved", 100, external_reference=str(order.id))

        with pytest.raises(AmountMismatchError):
            _notify(service, "pay-1")
        assert load_order(order.id).status == OrderStatus.PENDING_PAYMENT.value

    def test_order_found_by_preference_reference(self, service, gateway, order):
        gateway.register_payment("pay-1", "approved", 8600, external_reference="pref-001")

        result = _notify(service, "pay-1")

        assert result.order_id == str(order.id)
        assert result.changed is True


class TestRejectedNotification:
    def test_rejects_payment(self, service, gateway, order):
        gateway.register_payment("pay-1", "rejected", 8600, external_reference=str(order.id))

        result = _notify(service, "pay-1")

        assert result.action == "rejected"
        assert result.changed is True
        stored = load_order(order.id)
        assert stored.status == OrderStatus.PAYMENT_REJECTED.value
        assert stored.payment_info.rejection_reason == "rejected"

    def test_approval_after_rejection_is_ignored(self, service, gateway, order):
        gateway.register_payment("pay-1", "cancelled", 8600, external_reference=str(order.id))
        gateway.register_payment("pay-2", "approved", 8600, external_reference=str(order.id))

        _notify(service, "pay-1")
        result = _notify(service, "pay-2")

        assert result.processed is True
        assert result.changed is False
        assert result.new_status == OrderStatus.PAYMENT_REJECTED.value
        assert load_order(order.id).status == OrderStatus.PAYMENT_REJECTED.value

    def test_approval_for_cancelled_order_is_ignored(self, service, gateway, order):
        order.cancel("Customer request")
        current_domain.repository_for(Order).add(order)
        gateway.register_payment("pay-1", "approved", 8600, external_reference=str(order.id))

        result = _notify(service, "pay-1")

        assert result.changed is False
        stored = load_order(order.id)
        assert stored.status == OrderStatus.CANCELLED.value
        assert stored.payment_status == PaymentStatus.CANCELLED

    def test_late_rejection_after_approval_is_ignored(self, service, gateway, order):
        gateway.register_payment("pay-1", "approved", 8600, external_reference=str(order.id))
        gateway.register_payment("pay-2", "rejected", 8600, external_reference=str(order.id))

        _notify(service, "pay-1")
        result = _notify(service, "pay-2")

        assert result.changed is False
        assert load_order(order.id).status == OrderStatus.PAID.value


class TestOtherNotifications:
    def test_non_payment_notification_is_ignored(self, service, gateway):
        result = _notify(service, "mo-1", notification_type="merchant_order")

        assert result.processed is False
        assert result.action == "ignored"
        assert gateway.calls == []

    def test_pending_payment_changes_nothing(self, service, gateway, order):
        gateway.register_payment("pay-1", "in_process", 8600, external_reference=str(order.id))

        result = _notify(service, "pay-1")

        assert result.action == "none"
        assert result.changed is False
        assert load_order(order.id).status == OrderStatus.PENDING_PAYMENT.value

    def test_unknown_payment_is_a_gateway_error(self, service):
        with pytest.raises(PaymentGatewayError) as exc:
            _notify(service, "missing")
        assert exc.value.context["gateway_status"] == 404

    def test_payment_for_unknown_order(self, service, gateway, order):
        gateway.register_payment("pay-1", "approved", 8600, external_reference="someone-else")

        with pytest.raises(OrderNotFoundError):
            _notify(service, "pay-1")


class TestRefund:
    def test_refund_paid_order(self, service, gateway, order):
        gateway.register_payment("pay-1", "approved", 8600, external_reference=str(order.id))
        _notify(service, "pay-1")

        refunded = asyncio.run(service.refund_order(str(order.id)))

        assert refunded.status == OrderStatus.CANCELLED.value
        stored = load_order(order.id)
        assert stored.payment_status == PaymentStatus.REFUNDED
        assert gateway.calls[-1] == {"method": "refund", "payment_id": "pay-1", "amount": 8600.0}

    def test_refund_unpaid_order_never_reaches_gateway(self, service, gateway, order):
        with pytest.raises(InvalidOrderStateError):
            asyncio.run(service.refund_order(str(order.id)))
        assert gateway.calls == []

    def test_refund_gateway_failure(self, service, gateway, order):
        gateway.register_payment("pay-1", "approved", 8600, external_reference=str(order.id))
        _notify(service, "pay-1")
        gateway.configure(should_succeed=False)

        with pytest.raises(PaymentGatewayError):
            asyncio.run(service.refund_order(str(order.id)))
        assert load_order(order.id).status == OrderStatus.PAID.value

    def test_refund_unknown_order(self, service):
        with pytest.raises(OrderNotFoundError):
            asyncio.run(service.refund_order("missing-order"))
