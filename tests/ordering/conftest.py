import pytest
from ordering.order.order import (
    CustomerSnapshot,
    DeliveryAddress,
    DeliveryInfo,
    DeliveryType,
    Order,
    PaymentMethod,
)
from protean.integrations.pytest import DomainFixture

# 2 x 2500 + 1 x 3600 = 8600
DEFAULT_ITEMS = [
    {
        "product_id": "medialunas-12",
        "name": "Medialunas x12",
        "unit_price": 2500.0,
        "quantity": 2,
        "category": "facturas",
    },
    {
        "product_id": "torta-rogel",
        "name": "Torta rogel",
        "unit_price": 3600.0,
        "quantity": 1,
        "category": "tortas",
    },
]


def make_order(
    payment_method=PaymentMethod.GATEWAY,
    delivery_type=DeliveryType.PICKUP,
    shipping_cost=0.0,
    items=None,
    customer_id="cust-001",
    notes=None,
):
    address = None
    if delivery_type == DeliveryType.DELIVERY:
        address = DeliveryAddress(street="Av. Corrientes 1234", city="Buenos Aires", postal_code="C1043")

    return Order.create(
        customer=CustomerSnapshot(
            customer_id=customer_id,
            name="Ana Pérez",
            email="ana@example.com",
            phone="+54 11 5555-0000",
        ),
        items=DEFAULT_ITEMS if items is None else items,
        delivery=DeliveryInfo(delivery_type=delivery_type.value, shipping_cost=shipping_cost),
        delivery_address=address,
        payment_method=payment_method,
        notes=notes,
    )


@pytest.fixture(scope="session")
def ordering_bed():
    from ordering.domain import ordering

    bed = DomainFixture(ordering)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(ordering_bed):
    with ordering_bed.domain_context():
        yield

        from protean import current_domain

        # Clear all databases
        for _, provider in current_domain.providers.items():
            provider._data_reset()

        # Drain event stores
        current_domain.event_store.store._data_reset()


@pytest.fixture()
def order_factory():
    """Build an unsaved order; pickup paid through the gateway by default."""
    return make_order
