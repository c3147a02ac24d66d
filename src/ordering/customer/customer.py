"""Customer aggregate: who may order, and what they have bought so far."""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Integer, String, Text

from ordering.customer.events import CustomerOrderRecorded, CustomerRegistered, CustomerStatusChanged
from ordering.domain import ordering
from ordering.shared.email import is_valid_email

FAVOURITES_LIMIT = 10


class CustomerStatus(Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    SUSPENDED = "SUSPENDED"
    BLOCKED = "BLOCKED"


def _merge_favourites(current, recent):
    """Most recent first, deduplicated, capped."""
    merged = list(dict.fromkeys([*recent, *current]))
    return merged[:FAVOURITES_LIMIT]


@ordering.aggregate
class Customer:
    name = String(required=True, max_length=200)
    email = String(required=True, max_length=254)
    phone = String(max_length=30)
    status = String(choices=CustomerStatus, default=CustomerStatus.ACTIVE.value)
    total_orders = Integer(default=0, min_value=0)
    total_spent = Float(default=0.0, min_value=0.0)
    first_order_at = DateTime()
    last_order_at = DateTime()
    favourite_products = Text()  # JSON array of product ids
    favourite_categories = Text()  # JSON array of category names
    registered_at = DateTime()

    @invariant.post
    def email_must_be_well_formed(self):
        if not is_valid_email(self.email):
            raise ValidationError({"email": [f"Invalid email address: {self.email!r}"]})

    @classmethod
    def register(cls, name, email, phone=None):
        now = datetime.now(UTC)
        customer = cls(
            name=name,
            email=email,
            phone=phone,
            status=CustomerStatus.ACTIVE.value,
            favourite_products=json.dumps([]),
            favourite_categories=json.dumps([]),
            registered_at=now,
        )
        customer.raise_(
            CustomerRegistered(
                customer_id=str(customer.id),
                name=name,
                email=email,
                registered_at=now,
            )
        )
        return customer

    # -------------------------------------------------------------------
    # Eligibility
    # -------------------------------------------------------------------
    def can_place_orders(self) -> bool:
        return self.status == CustomerStatus.ACTIVE.value

    def _change_status(self, target, allowed_from, reason=None):
        current = CustomerStatus(self.status)
        if current not in allowed_from:
            raise ValidationError({"status": [f"Cannot move a {current.value} customer to {target.value}"]})

        self.status = target.value
        self.raise_(
            CustomerStatusChanged(
                customer_id=str(self.id),
                previous_status=current.value,
                new_status=target.value,
                reason=reason,
                changed_at=datetime.now(UTC),
            )
        )

    def suspend(self, reason=None):
        self._change_status(CustomerStatus.SUSPENDED, {CustomerStatus.ACTIVE}, reason)

    def deactivate(self, reason=None):
        self._change_status(CustomerStatus.INACTIVE, {CustomerStatus.ACTIVE, CustomerStatus.SUSPENDED}, reason)

    def block(self, reason=None):
        self._change_status(
            CustomerStatus.BLOCKED,
            {CustomerStatus.ACTIVE, CustomerStatus.SUSPENDED, CustomerStatus.INACTIVE},
            reason,
        )

    def reactivate(self):
        self._change_status(CustomerStatus.ACTIVE, {CustomerStatus.SUSPENDED, CustomerStatus.INACTIVE})

    # -------------------------------------------------------------------
    # Purchase statistics
    # -------------------------------------------------------------------
    @property
    def average_order_value(self) -> float:
        if not self.total_orders:
            return 0.0
        return round(self.total_spent / self.total_orders, 2)

    def record_order(self, amount, product_ids, categories):
        now = datetime.now(UTC)

        self.total_orders = (self.total_orders or 0) + 1
        self.total_spent = round((self.total_spent or 0.0) + float(amount), 2)
        if self.first_order_at is None:
            self.first_order_at = now
        self.last_order_at = now

        self.favourite_products = json.dumps(
            _merge_favourites(self.favourite_product_list(), [str(p) for p in product_ids])
        )
        self.favourite_categories = json.dumps(
            _merge_favourites(self.favourite_category_list(), [c for c in categories if c])
        )

        self.raise_(
            CustomerOrderRecorded(
                customer_id=str(self.id),
                amount=float(amount),
                total_orders=self.total_orders,
                total_spent=self.total_spent,
                recorded_at=now,
            )
        )

    def favourite_product_list(self) -> list[str]:
        return json.loads(self.favourite_products) if self.favourite_products else []

    def favourite_category_list(self) -> list[str]:
        return json.loads(self.favourite_categories) if self.favourite_categories else []
