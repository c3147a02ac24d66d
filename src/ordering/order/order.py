"""Order aggregate: a priced snapshot of a purchase and its payment lifecycle.

Item prices and the customer's details are copied at checkout, so later
catalogue or profile changes never alter an order. State only moves through
the named transition methods below.

State Machine:
    PENDING_PAYMENT → PAID | PAYMENT_REJECTED
    PAYMENT_REJECTED → CANCELLED
    PAID → IN_PREPARATION → READY → [OUT_FOR_DELIVERY →] DELIVERED
    Any state before DELIVERED → CANCELLED
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, Text, ValueObject

from ordering.domain import ordering
from ordering.errors import (
    AmountMismatchError,
    EmptyOrderError,
    InvalidOrderStateError,
    PaymentAlreadyConfirmedError,
    PaymentNotConfiguredError,
    TooManyItemsError,
)
from ordering.order.events import (
    OrderCancelled,
    OrderDelivered,
    OrderDispatched,
    OrderPaymentConfigured,
    OrderPaymentConfirmed,
    OrderPaymentRejected,
    OrderPlaced,
    OrderPreparationStarted,
    OrderReady,
    OrderRefunded,
)
from ordering.shared.email import is_valid_email
from ordering.shared.money import TOLERANCE, Money

MAX_ORDER_LINES = 50
MAX_PAYMENT_AMOUNT = 999999.99


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING_PAYMENT = "PENDING_PAYMENT"
    PAID = "PAID"
    PAYMENT_REJECTED = "PAYMENT_REJECTED"
    IN_PREPARATION = "IN_PREPARATION"
    READY = "READY"
    OUT_FOR_DELIVERY = "OUT_FOR_DELIVERY"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


class DeliveryType(Enum):
    PICKUP = "PICKUP"
    DELIVERY = "DELIVERY"


class PaymentMethod(Enum):
    GATEWAY = "GATEWAY"
    CASH = "CASH"
    TRANSFER = "TRANSFER"


class PaymentStatus(Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    REFUNDED = "REFUNDED"
    CANCELLED = "CANCELLED"


_VALID_TRANSITIONS = {
    OrderStatus.PENDING_PAYMENT: {OrderStatus.PAID, OrderStatus.PAYMENT_REJECTED, OrderStatus.CANCELLED},
    OrderStatus.PAYMENT_REJECTED: {OrderStatus.CANCELLED},
    OrderStatus.PAID: {OrderStatus.IN_PREPARATION, OrderStatus.CANCELLED},
    OrderStatus.IN_PREPARATION: {OrderStatus.READY, OrderStatus.CANCELLED},
    OrderStatus.READY: {OrderStatus.OUT_FOR_DELIVERY, OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.OUT_FOR_DELIVERY: {OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}

# Payment states in which a repeated gateway notification changes nothing
_SETTLED_PAYMENT_STATES = {
    PaymentStatus.APPROVED,
    PaymentStatus.REJECTED,
    PaymentStatus.REFUNDED,
    PaymentStatus.CANCELLED,
}


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@ordering.value_object(part_of="Order")
class CustomerSnapshot:
    """The customer's contact details as they were when the order was placed."""

    customer_id = Identifier(required=True)
    name = String(required=True, max_length=200)
    email = String(required=True, max_length=254)
    phone = String(max_length=30)

    @invariant.post
    def email_must_be_well_formed(self):
        if not is_valid_email(self.email):
            raise ValidationError({"email": [f"Invalid email address: {self.email!r}"]})


@ordering.value_object(part_of="Order")
class DeliveryAddress:
    street = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    postal_code = String(max_length=20)
    reference = String(max_length=255)  # Free text: "blue door", "2nd floor"


@ordering.value_object(part_of="Order")
class DeliveryInfo:
    """How the order reaches the customer, and what that costs."""

    delivery_type = String(required=True, choices=DeliveryType)
    shipping_cost = Float(default=0.0, min_value=0.0)
    estimated_date = String(max_length=10)  # ISO date string
    instructions = String(max_length=500)


@ordering.value_object(part_of="Order")
class PaymentInfo:
    """Payment details; replaced wholesale on every payment event."""

    method = String(required=True, choices=PaymentMethod)
    status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    amount = Float(required=True, min_value=0.0, max_value=MAX_PAYMENT_AMOUNT)
    currency = String(max_length=3, default="ARS")
    preference_id = String(max_length=255)
    payment_id = String(max_length=255)
    payment_type = String(max_length=50)  # credit_card, debit_card, account_money, ...
    installments = Integer(min_value=1)
    rejection_reason = String(max_length=500)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@ordering.entity(part_of="Order")
class OrderItem:
    """A line of the order, with the unit price captured at checkout."""

    product_id = String(required=True, max_length=255)
    name = String(required=True, max_length=255)
    unit_price = ValueObject(Money, required=True)
    quantity = Integer(required=True, min_value=1)
    category = String(max_length=100)

    def subtotal(self) -> Money:
        return self.unit_price.multiply(self.quantity)


@ordering.entity(part_of="Order")
class StatusChange:
    from_status = String(max_length=30)
    to_status = String(required=True, max_length=30)
    reason = String(max_length=500)
    changed_at = DateTime(required=True)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@ordering.aggregate
class Order:
    customer_id = Identifier(required=True)
    customer = ValueObject(CustomerSnapshot, required=True)
    items = HasMany(OrderItem)
    delivery = ValueObject(DeliveryInfo, required=True)
    delivery_address = ValueObject(DeliveryAddress)
    payment_info = ValueObject(PaymentInfo, required=True)
    # Denormalized from payment_info for lookups by gateway notifications
    payment_reference = String(max_length=255)
    payment_id = String(max_length=255)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING_PAYMENT.value)
    status_history = HasMany(StatusChange)
    notes = Text()
    cancellation_reason = String(max_length=500)
    paid_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def delivery_orders_need_an_address(self):
        if (
            self.delivery
            and self.delivery.delivery_type == DeliveryType.DELIVERY.value
            and self.delivery_address is None
        ):
            raise ValidationError({"delivery_address": ["An address is required for home delivery"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, customer, items, delivery, payment_method, delivery_address=None, notes=None, currency="ARS"):
        """Create a new order awaiting payment.

        Args:
            customer: CustomerSnapshot of the buyer.
            items: List of dicts with product_id, name, unit_price (Money or
                number), quantity and optional category.
            delivery: DeliveryInfo for the order.
            payment_method: PaymentMethod or its value.
            delivery_address: DeliveryAddress, required for DELIVERY orders.
        """
        if not items:
            raise EmptyOrderError("An order needs at least one item")
        if len(items) > MAX_ORDER_LINES:
            raise TooManyItemsError(
                f"An order cannot have more than {MAX_ORDER_LINES} lines",
                context={"lines": len(items)},
            )

        method = PaymentMethod(payment_method.value if isinstance(payment_method, PaymentMethod) else payment_method)
        now = datetime.now(UTC)

        order_items = [
            OrderItem(
                product_id=str(item["product_id"]),
                name=item["name"],
                unit_price=(
                    item["unit_price"] if isinstance(item["unit_price"], Money) else Money.create(item["unit_price"])
                ),
                quantity=item["quantity"],
                category=item.get("category"),
            )
            for item in items
        ]

        order = cls(
            customer_id=customer.customer_id,
            customer=customer,
            delivery=delivery,
            delivery_address=delivery_address,
            payment_info=PaymentInfo(method=method.value, amount=0.0, currency=currency),
            status=OrderStatus.PENDING_PAYMENT.value,
            notes=notes,
            created_at=now,
            updated_at=now,
        )
        for order_item in order_items:
            order.add_items(order_item)

        total = order.calculate_total()
        order._update_payment(amount=total.value)
        order.add_status_history(StatusChange(to_status=OrderStatus.PENDING_PAYMENT.value, changed_at=now))

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                customer_id=str(customer.customer_id),
                items=json.dumps(
                    [
                        {
                            "product_id": i.product_id,
                            "name": i.name,
                            "unit_price": i.unit_price.value,
                            "quantity": i.quantity,
                        }
                        for i in order.items
                    ]
                ),
                delivery_type=delivery.delivery_type,
                payment_method=method.value,
                subtotal=order.calculate_subtotal().value,
                shipping_cost=order.calculate_shipping_cost().value,
                total=total.value,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------
    def calculate_subtotal(self) -> Money:
        subtotal = Money.zero()
        for item in self.items:
            subtotal = subtotal.add(item.subtotal())
        return subtotal

    def calculate_shipping_cost(self) -> Money:
        if self.delivery.delivery_type == DeliveryType.PICKUP.value:
            return Money.zero()
        return Money.create(self.delivery.shipping_cost or 0.0)

    def calculate_total(self) -> Money:
        return self.calculate_subtotal().add(self.calculate_shipping_cost()).round()

    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    def product_ids(self) -> list[str]:
        return [item.product_id for item in self.items]

    def categories(self) -> list[str]:
        return list(dict.fromkeys(item.category for item in self.items if item.category))

    @property
    def payment_status(self) -> PaymentStatus:
        return PaymentStatus(self.payment_info.status)

    # -------------------------------------------------------------------
    # State transition helpers
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status):
        current = OrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise InvalidOrderStateError(
                f"Cannot transition from {current.value} to {target_status.value}",
                context={"order_id": str(self.id), "from": current.value, "to": target_status.value},
            )

    def _transition(self, target_status, reason=None, at=None):
        self._assert_can_transition(target_status)
        now = at or datetime.now(UTC)
        self.add_status_history(
            StatusChange(
                from_status=self.status,
                to_status=target_status.value,
                reason=reason,
                changed_at=now,
            )
        )
        self.status = target_status.value
        self.updated_at = now

    def _update_payment(self, **changes):
        current = self.payment_info
        values = {
            name: getattr(current, name)
            for name in (
                "method",
                "status",
                "amount",
                "currency",
                "preference_id",
                "payment_id",
                "payment_type",
                "installments",
                "rejection_reason",
            )
        }
        values.update(changes)
        self.payment_info = PaymentInfo(**values)

    # -------------------------------------------------------------------
    # Payment lifecycle
    # -------------------------------------------------------------------
    def configure_payment(self, preference_id):
        """Attach the gateway preference the customer will pay through."""
        if OrderStatus(self.status) != OrderStatus.PENDING_PAYMENT:
            raise InvalidOrderStateError(
                f"Payment can only be configured while pending, order is {self.status}",
                context={"order_id": str(self.id), "status": self.status},
            )
        if self.payment_info.method != PaymentMethod.GATEWAY.value:
            raise PaymentNotConfiguredError(
                f"Orders paid by {self.payment_info.method} do not use a gateway preference",
                context={"order_id": str(self.id), "method": self.payment_info.method},
            )

        self._update_payment(preference_id=preference_id)
        self.payment_reference = preference_id
        self.updated_at = datetime.now(UTC)

        self.raise_(OrderPaymentConfigured(order_id=str(self.id), preference_id=preference_id))

    def confirm_payment(self, payment_id, payment_type=None, installments=None, amount=None):
        """Record an approved payment. Returns False when it was already recorded.

        A repeated confirmation for the same payment id is a no-op so that
        redelivered gateway notifications are harmless, and so is any
        confirmation once the payment was rejected, refunded or cancelled.
        A different payment against an already paid order is an error.
        """
        payment_id = str(payment_id)

        if self.payment_status == PaymentStatus.APPROVED:
            if self.payment_info.payment_id == payment_id:
                return False
            raise PaymentAlreadyConfirmedError(
                f"Order {self.id} is already paid by payment {self.payment_info.payment_id}",
                context={
                    "order_id": str(self.id),
                    "payment_id": payment_id,
                    "confirmed_payment_id": self.payment_info.payment_id,
                },
            )
        if self.payment_status in _SETTLED_PAYMENT_STATES:
            return False

        self._assert_can_transition(OrderStatus.PAID)

        total = self.calculate_total()
        if amount is not None and abs(float(amount) - total.value) > TOLERANCE:
            raise AmountMismatchError(
                f"Reported amount {amount} does not match order total {total.value}",
                context={"order_id": str(self.id), "reported": float(amount), "expected": total.value},
            )

        now = datetime.now(UTC)
        self._update_payment(
            status=PaymentStatus.APPROVED.value,
            payment_id=payment_id,
            payment_type=payment_type,
            installments=installments,
            rejection_reason=None,
        )
        self.payment_id = payment_id
        self.paid_at = now
        self._transition(OrderStatus.PAID, reason="Payment approved", at=now)

        self.raise_(
            OrderPaymentConfirmed(
                order_id=str(self.id),
                payment_id=payment_id,
                payment_type=payment_type,
                installments=installments,
                amount=total.value,
                paid_at=now,
            )
        )
        return True

    def reject_payment(self, reason, payment_id=None):
        """Record a rejected payment. Returns False when nothing changed."""
        if self.payment_status in _SETTLED_PAYMENT_STATES or OrderStatus(self.status) == OrderStatus.CANCELLED:
            return False

        self._assert_can_transition(OrderStatus.PAYMENT_REJECTED)

        self._update_payment(
            status=PaymentStatus.REJECTED.value,
            payment_id=str(payment_id) if payment_id else self.payment_info.payment_id,
            rejection_reason=reason,
        )
        if payment_id:
            self.payment_id = str(payment_id)
        self._transition(OrderStatus.PAYMENT_REJECTED, reason=reason)

        self.raise_(
            OrderPaymentRejected(
                order_id=str(self.id),
                payment_id=str(payment_id) if payment_id else None,
                reason=reason,
            )
        )
        return True

    def assert_refundable(self, amount=None):
        """Raise unless the payment can be refunded for ``amount`` (default: all of it)."""
        if self.payment_status != PaymentStatus.APPROVED:
            raise InvalidOrderStateError(
                f"Only approved payments can be refunded, payment is {self.payment_info.status}",
                context={"order_id": str(self.id), "payment_status": self.payment_info.status},
            )
        if OrderStatus(self.status) == OrderStatus.DELIVERED:
            raise InvalidOrderStateError(
                "Delivered orders cannot be refunded",
                context={"order_id": str(self.id), "status": self.status},
            )

        paid = self.payment_info.amount
        refunded = paid if amount is None else float(amount)
        if refunded - paid > TOLERANCE:
            raise AmountMismatchError(
                f"Refund {refunded} exceeds the paid amount {paid}",
                context={"order_id": str(self.id), "refund": refunded, "paid": paid},
            )
        return refunded

    def refund(self, refund_id, amount=None):
        """Record a gateway refund and cancel the order."""
        refunded = self.assert_refundable(amount)

        previous_status = self.status
        self._update_payment(status=PaymentStatus.REFUNDED.value)
        self.updated_at = datetime.now(UTC)
        self.raise_(OrderRefunded(order_id=str(self.id), refund_id=str(refund_id), amount=refunded))

        # Orders cancelled after payment only need the money back
        if OrderStatus(previous_status) != OrderStatus.CANCELLED:
            self.cancellation_reason = "Payment refunded"
            self._transition(OrderStatus.CANCELLED, reason="Payment refunded")
            self.raise_(
                OrderCancelled(
                    order_id=str(self.id),
                    previous_status=previous_status,
                    reason="Payment refunded",
                )
            )

    def cancel(self, reason=None):
        current = OrderStatus(self.status)
        if current in (OrderStatus.DELIVERED, OrderStatus.CANCELLED):
            raise InvalidOrderStateError(
                f"Cannot cancel an order that is {current.value}",
                context={"order_id": str(self.id), "status": current.value},
            )

        if self.payment_status in (PaymentStatus.PENDING, PaymentStatus.REJECTED):
            self._update_payment(status=PaymentStatus.CANCELLED.value)

        self.cancellation_reason = reason
        self._transition(OrderStatus.CANCELLED, reason=reason)

        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                previous_status=current.value,
                reason=reason,
            )
        )

    # -------------------------------------------------------------------
    # Fulfilment
    # -------------------------------------------------------------------
    def start_preparation(self):
        self._transition(OrderStatus.IN_PREPARATION)
        self.raise_(OrderPreparationStarted(order_id=str(self.id), started_at=self.updated_at))

    def mark_ready(self):
        self._transition(OrderStatus.READY)
        self.raise_(
            OrderReady(
                order_id=str(self.id),
                delivery_type=self.delivery.delivery_type,
                ready_at=self.updated_at,
            )
        )

    def dispatch(self):
        if self.delivery.delivery_type != DeliveryType.DELIVERY.value:
            raise InvalidOrderStateError(
                "Pickup orders are not dispatched",
                context={"order_id": str(self.id), "delivery_type": self.delivery.delivery_type},
            )
        self._transition(OrderStatus.OUT_FOR_DELIVERY)
        self.raise_(OrderDispatched(order_id=str(self.id), dispatched_at=self.updated_at))

    def mark_delivered(self):
        self._transition(OrderStatus.DELIVERED)
        self.raise_(OrderDelivered(order_id=str(self.id), delivered_at=self.updated_at))
