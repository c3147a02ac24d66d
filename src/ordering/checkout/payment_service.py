"""Gateway payment notifications and refunds.

Gateways redeliver notifications, so every operation here is idempotent:
a notification that matches the order's current payment state changes
nothing and is not an error.
"""

from ordering.checkout.ports import OrderRepository
from ordering.checkout.schemas import WebhookNotification, WebhookResult
from ordering.errors import OrderNotFoundError, PaymentGatewayError
from ordering.order.order import Order
from ordering.utils.logging import get_logger
from payments.gateway.port import GatewayError, PaymentGateway

logger = get_logger(__name__)

_APPROVED = "approved"
_REJECTED = {"rejected", "cancelled"}


class PaymentService:
    def __init__(self, order_repository: OrderRepository, payment_gateway: PaymentGateway) -> None:
        self.order_repository = order_repository
        self.payment_gateway = payment_gateway

    async def handle_webhook(self, notification: WebhookNotification) -> WebhookResult:
        payment_id = notification.data.id
        log = logger.bind(notification_id=notification.id, payment_id=payment_id)

        if notification.type != "payment":
            log.info("webhook_ignored", notification_type=notification.type)
            return WebhookResult(processed=False, action="ignored")

        try:
            payment = await self.payment_gateway.get_payment(payment_id)
        except GatewayError as exc:
            log.error("webhook_payment_lookup_failed", error=str(exc))
            raise PaymentGatewayError(
                f"Could not fetch payment {payment_id}",
                context={"payment_id": payment_id, "gateway_status": exc.status},
            ) from exc

        order = await self._find_order(payment.external_reference, payment_id)
        previous_status = order.status

        if payment.status == _APPROVED:
            action = "confirmed"
            changed = order.confirm_payment(
                payment_id=payment_id,
                payment_type=payment.payment_type,
                installments=payment.installments,
                amount=payment.amount,
            )
        elif payment.status in _REJECTED:
            action = "rejected"
            changed = order.reject_payment(
                reason=payment.status_detail or payment.status,
                payment_id=payment_id,
            )
        else:
            action = "none"
            changed = False

        if changed:
            await self.order_repository.save(order)
            log.info("webhook_applied", order_id=str(order.id), action=action, new_status=order.status)
        else:
            log.info("webhook_noop", order_id=str(order.id), payment_status=payment.status, order_status=order.status)

        return WebhookResult(
            processed=True,
            action=action,
            changed=changed,
            order_id=str(order.id),
            previous_status=previous_status,
            new_status=order.status,
        )

    async def refund_order(self, order_id: str, amount: float | None = None) -> Order:
        order = await self.order_repository.find_by_id(order_id)
        if order is None:
            raise OrderNotFoundError(f"Order {order_id} not found", context={"order_id": order_id})

        refund_amount = order.assert_refundable(amount)
        try:
            refund = await self.payment_gateway.refund(order.payment_info.payment_id, refund_amount)
        except GatewayError as exc:
            logger.error("refund_failed", order_id=order_id, error=str(exc))
            raise PaymentGatewayError(
                "The refund could not be processed",
                context={"order_id": order_id, "gateway_status": exc.status},
            ) from exc

        order.refund(refund_id=refund.refund_id, amount=refund.amount)
        await self.order_repository.save(order)
        logger.info("order_refunded", order_id=order_id, refund_id=refund.refund_id, amount=refund.amount)
        return order

    async def _find_order(self, external_reference: str | None, payment_id: str) -> Order:
        order = None
        if external_reference:
            order = await self.order_repository.find_by_payment_reference(external_reference)
        if order is None:
            order = await self.order_repository.find_by_payment_reference(payment_id)
        if order is None:
            raise OrderNotFoundError(
                "No order matches the payment",
                context={"external_reference": external_reference, "payment_id": payment_id},
            )
        return order
