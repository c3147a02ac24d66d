"""Order fulfilment: commands and handler.

Moves a paid order through the bakery: preparation, ready for pickup or
dispatch, out for delivery and delivered.
"""

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.order import Order
from ordering.order.payment import load_order


@ordering.command(part_of="Order")
class StartOrderPreparation:
    order_id = Identifier(required=True)


@ordering.command(part_of="Order")
class MarkOrderReady:
    order_id = Identifier(required=True)


@ordering.command(part_of="Order")
class DispatchOrder:
    order_id = Identifier(required=True)


@ordering.command(part_of="Order")
class MarkOrderDelivered:
    order_id = Identifier(required=True)


@ordering.command_handler(part_of=Order)
class OrderFulfillmentHandler:
    @handle(StartOrderPreparation)
    def start_preparation(self, command):
        order = load_order(command.order_id)
        order.start_preparation()
        current_domain.repository_for(Order).add(order)

    @handle(MarkOrderReady)
    def mark_ready(self, command):
        order = load_order(command.order_id)
        order.mark_ready()
        current_domain.repository_for(Order).add(order)

    @handle(DispatchOrder)
    def dispatch(self, command):
        order = load_order(command.order_id)
        order.dispatch()
        current_domain.repository_for(Order).add(order)

    @handle(MarkOrderDelivered)
    def mark_delivered(self, command):
        order = load_order(command.order_id)
        order.mark_delivered()
        current_domain.repository_for(Order).add(order)
