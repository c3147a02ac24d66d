"""Collaborator ports used by checkout and payment handling.

The application services only depend on these interfaces. Protean-backed
implementations live in ``ordering.checkout.adapters``; any other storage
(a browser session store, an external CRM) can stand in for them.
"""

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime

from ordering.cart.cart import Cart
from ordering.customer.customer import Customer
from ordering.order.order import DeliveryType, Order, OrderStatus, PaymentMethod


@dataclass(frozen=True)
class OrderFilters:
    """Criteria for order listings. Unset fields match every order."""

    customer_id: str | None = None
    status: OrderStatus | None = None
    payment_method: PaymentMethod | None = None
    delivery_type: DeliveryType | None = None
    min_total: float | None = None
    max_total: float | None = None
    created_from: datetime | None = None
    created_to: datetime | None = None

    def matches(self, order: Order) -> bool:
        if self.customer_id and str(order.customer_id) != self.customer_id:
            return False
        if self.status and order.status != self.status.value:
            return False
        if self.payment_method and order.payment_info.method != self.payment_method.value:
            return False
        if self.delivery_type and order.delivery.delivery_type != self.delivery_type.value:
            return False

        total = order.calculate_total().value
        if self.min_total is not None and total < self.min_total:
            return False
        if self.max_total is not None and total > self.max_total:
            return False

        if self.created_from and (order.created_at is None or order.created_at < self.created_from):
            return False
        if self.created_to and (order.created_at is None or order.created_at > self.created_to):
            return False
        return True


@dataclass
class OrderPage:
    items: list[Order] = field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = 10

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.total else 0

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.page > 1


class CartRepository(ABC):
    @abstractmethod
    async def find_by_id(self, cart_id: str) -> Cart | None: ...

    @abstractmethod
    async def save(self, cart: Cart) -> None: ...

    @abstractmethod
    async def delete(self, cart_id: str) -> None: ...

    @abstractmethod
    async def exists(self, cart_id: str) -> bool: ...


class OrderRepository(ABC):
    @abstractmethod
    async def find_by_id(self, order_id: str) -> Order | None: ...

    @abstractmethod
    async def find_by_payment_reference(self, reference: str) -> Order | None:
        """Find an order by external reference (its id), preference id or payment id."""
        ...

    @abstractmethod
    async def save(self, order: Order) -> None: ...

    @abstractmethod
    async def find_matching(self, filters: OrderFilters) -> list[Order]:
        """All orders matching ``filters``, newest first."""
        ...

    @abstractmethod
    async def find_recent(self, limit: int = 10, days: int = 30) -> list[Order]:
        """Up to ``limit`` orders placed in the last ``days`` days, newest first."""
        ...

    @abstractmethod
    async def find_ready_for_delivery(self) -> list[Order]:
        """Orders waiting at the counter or for a courier, oldest first."""
        ...

    @abstractmethod
    async def count_by_status(self, status: OrderStatus | None = None) -> int: ...

    async def search(self, filters: OrderFilters, page: int = 1, limit: int = 10) -> OrderPage:
        orders = await self.find_matching(filters)
        start = (page - 1) * limit
        return OrderPage(items=orders[start : start + limit], total=len(orders), page=page, limit=limit)


class CustomerService(ABC):
    @abstractmethod
    async def get_customer(self, customer_id: str) -> Customer | None: ...

    @abstractmethod
    async def validate_eligibility(self, customer_id: str) -> bool:
        """True when the customer exists and may place orders."""
        ...

    @abstractmethod
    async def record_order(
        self,
        customer_id: str,
        amount: float,
        product_ids: list[str],
        categories: list[str],
    ) -> None: ...
