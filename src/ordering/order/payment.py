"""Order payment: commands and handler.

Used for payments settled outside the gateway flow (cash on pickup, bank
transfer) and by back-office tools. Gateway notifications go through
``ordering.checkout.payment_service`` instead.
"""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.errors import OrderNotFoundError
from ordering.order.order import Order


@ordering.command(part_of="Order")
class ConfirmOrderPayment:
    order_id = Identifier(required=True)
    payment_id = String(required=True, max_length=255)
    payment_type = String(max_length=50)
    installments = Integer(min_value=1)
    amount = Float()


@ordering.command(part_of="Order")
class RejectOrderPayment:
    order_id = Identifier(required=True)
    reason = String(required=True, max_length=500)
    payment_id = String(max_length=255)


def load_order(order_id):
    try:
        return current_domain.repository_for(Order).get(order_id)
    except ObjectNotFoundError as exc:
        raise OrderNotFoundError(f"Order {order_id} not found", context={"order_id": str(order_id)}) from exc


@ordering.command_handler(part_of=Order)
class OrderPaymentHandler:
    @handle(ConfirmOrderPayment)
    def confirm_payment(self, command):
        order = load_order(command.order_id)
        changed = order.confirm_payment(
            payment_id=command.payment_id,
            payment_type=command.payment_type,
            installments=command.installments,
            amount=command.amount,
        )
        if changed:
            current_domain.repository_for(Order).add(order)
        return changed

    @handle(RejectOrderPayment)
    def reject_payment(self, command):
        order = load_order(command.order_id)
        changed = order.reject_payment(reason=command.reason, payment_id=command.payment_id)
        if changed:
            current_domain.repository_for(Order).add(order)
        return changed
