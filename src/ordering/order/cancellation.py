"""Order cancellation: command and handler."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.order import Order
from ordering.order.payment import load_order


@ordering.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    reason = String(max_length=500)


@ordering.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        order = load_order(command.order_id)
        order.cancel(reason=command.reason)
        current_domain.repository_for(Order).add(order)
