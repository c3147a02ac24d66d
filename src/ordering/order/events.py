"""Domain events for the Order aggregate.

Events are immutable facts raised by the aggregate on every state change.
They travel with the aggregate through the Unit of Work and are what
downstream handlers (notifications, reporting) subscribe to.
"""

from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from ordering.domain import ordering


@ordering.event(part_of="Order")
class OrderPlaced:
    """A new order was created at checkout and awaits payment."""

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of item dicts
    delivery_type = String(required=True)
    payment_method = String(required=True)
    subtotal = Float(required=True)
    shipping_cost = Float(required=True)
    total = Float(required=True)
    placed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderPaymentConfigured:
    """A gateway payment preference was attached to the order."""

    order_id = Identifier(required=True)
    preference_id = String(required=True)


@ordering.event(part_of="Order")
class OrderPaymentConfirmed:
    """The payment for the order was approved."""

    order_id = Identifier(required=True)
    payment_id = String(required=True)
    payment_type = String()
    installments = Integer()
    amount = Float(required=True)
    paid_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderPaymentRejected:
    """The payment attempt was rejected."""

    order_id = Identifier(required=True)
    payment_id = String()
    reason = String(max_length=500)


@ordering.event(part_of="Order")
class OrderRefunded:
    order_id = Identifier(required=True)
    refund_id = String(required=True)
    amount = Float(required=True)


@ordering.event(part_of="Order")
class OrderCancelled:
    order_id = Identifier(required=True)
    previous_status = String(required=True)
    reason = String(max_length=500)


@ordering.event(part_of="Order")
class OrderPreparationStarted:
    order_id = Identifier(required=True)
    started_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderReady:
    """The order is packed and ready for pickup or dispatch."""

    order_id = Identifier(required=True)
    delivery_type = String(required=True)
    ready_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderDispatched:
    order_id = Identifier(required=True)
    dispatched_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderDelivered:
    order_id = Identifier(required=True)
    delivered_at = DateTime(required=True)
