"""Protean-backed implementations of the checkout ports.

Repository calls are synchronous under the hood; the async signatures only
honour the port contract.
"""

from datetime import UTC, datetime, timedelta

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from ordering.cart.cart import Cart
from ordering.checkout.ports import CartRepository, CustomerService, OrderRepository
from ordering.customer.customer import Customer
from ordering.order.order import Order, OrderStatus


def _get_or_none(aggregate_cls, identifier):
    try:
        return current_domain.repository_for(aggregate_cls).get(identifier)
    except ObjectNotFoundError:
        return None


def _query_orders(order_by, **filters):
    """Load every order matching ``filters``, sorted by ``order_by``."""
    repo = current_domain.repository_for(Order)
    query = repo._dao.query
    if filters:
        query = query.filter(**filters)
    # The default page size caps results at 100; listings need them all
    records = query.order_by(order_by).limit(None).all().items
    return [repo.get(record.id) for record in records]


class ProteanCartRepository(CartRepository):
    async def find_by_id(self, cart_id):
        return _get_or_none(Cart, cart_id)

    async def save(self, cart):
        current_domain.repository_for(Cart).add(cart)

    async def delete(self, cart_id):
        cart = _get_or_none(Cart, cart_id)
        if cart is not None:
            current_domain.repository_for(Cart)._dao.delete(cart)

    async def exists(self, cart_id):
        return _get_or_none(Cart, cart_id) is not None


class ProteanOrderRepository(OrderRepository):
    async def find_by_id(self, order_id):
        return _get_or_none(Order, order_id)

    async def find_by_payment_reference(self, reference):
        # The gateway's external reference is the order id
        order = _get_or_none(Order, reference)
        if order is not None:
            return order

        repo = current_domain.repository_for(Order)
        for field in ("payment_reference", "payment_id"):
            matches = repo._dao.query.filter(**{field: str(reference)}).all().items
            if matches:
                return repo.get(matches[0].id)
        return None

    async def save(self, order):
        current_domain.repository_for(Order).add(order)

    async def find_matching(self, filters):
        narrowing = {}
        if filters.customer_id:
            narrowing["customer_id"] = filters.customer_id
        if filters.status:
            narrowing["status"] = filters.status.value
        return [order for order in _query_orders("-created_at", **narrowing) if filters.matches(order)]

    async def find_recent(self, limit=10, days=30):
        cutoff = datetime.now(UTC) - timedelta(days=days)
        recent = [order for order in _query_orders("-created_at") if order.created_at and order.created_at >= cutoff]
        return recent[:limit]

    async def find_ready_for_delivery(self):
        return _query_orders("created_at", status=OrderStatus.READY.value)

    async def count_by_status(self, status=None):
        query = current_domain.repository_for(Order)._dao.query
        if status is not None:
            query = query.filter(status=status.value)
        return query.all().total


class ProteanCustomerService(CustomerService):
    async def get_customer(self, customer_id):
        return _get_or_none(Customer, customer_id)

    async def validate_eligibility(self, customer_id):
        customer = _get_or_none(Customer, customer_id)
        return customer is not None and customer.can_place_orders()

    async def record_order(self, customer_id, amount, product_ids, categories):
        repo = current_domain.repository_for(Customer)
        customer = repo.get(customer_id)
        customer.record_order(amount=amount, product_ids=product_ids, categories=categories)
        repo.add(customer)
