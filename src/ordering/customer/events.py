"""Domain events for the Customer aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from ordering.domain import ordering


@ordering.event(part_of="Customer")
class CustomerRegistered:
    customer_id = Identifier(required=True)
    name = String(required=True)
    email = String(required=True)
    registered_at = DateTime(required=True)


@ordering.event(part_of="Customer")
class CustomerStatusChanged:
    """The customer's standing changed; only ACTIVE customers may order."""

    customer_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    reason = String(max_length=500)
    changed_at = DateTime(required=True)


@ordering.event(part_of="Customer")
class CustomerOrderRecorded:
    customer_id = Identifier(required=True)
    amount = Float(required=True)
    total_orders = Integer(required=True)
    total_spent = Float(required=True)
    recorded_at = DateTime(required=True)
