"""Explicit conversions between boundary DTOs, aggregates and gateway types."""

from ordering.cart.cart import Cart
from ordering.checkout.schemas import (
    CheckoutData,
    CheckoutItemData,
    CheckoutResponse,
    CheckoutSummary,
    DeliveryData,
    PaymentConfigData,
)
from ordering.config import Settings
from ordering.customer.customer import Customer
from ordering.order.order import (
    CustomerSnapshot,
    DeliveryAddress,
    DeliveryInfo,
    DeliveryType,
    Order,
    PaymentMethod,
)
from ordering.shared.money import Money
from payments.gateway.port import Payer, PreferenceConfig, PreferenceItem


def customer_snapshot(customer: Customer) -> CustomerSnapshot:
    return CustomerSnapshot(
        customer_id=str(customer.id),
        name=customer.name,
        email=customer.email,
        phone=customer.phone,
    )


def order_items(items: list[CheckoutItemData]) -> list[dict]:
    return [
        {
            "product_id": item.product_id,
            "name": item.name,
            "unit_price": Money.create(item.price),
            "quantity": item.quantity,
            "category": item.category,
        }
        for item in items
    ]


def delivery_info(delivery: DeliveryData, default_fee: float) -> tuple[DeliveryInfo, DeliveryAddress | None]:
    if delivery.type == DeliveryType.PICKUP:
        shipping_cost = 0.0
    else:
        shipping_cost = delivery.shipping_cost if delivery.shipping_cost is not None else default_fee

    info = DeliveryInfo(
        delivery_type=delivery.type.value,
        shipping_cost=shipping_cost,
        estimated_date=delivery.estimated_date,
        instructions=delivery.instructions,
    )
    address = None
    if delivery.address is not None:
        address = DeliveryAddress(
            street=delivery.address.street,
            city=delivery.address.city,
            postal_code=delivery.address.postal_code,
            reference=delivery.address.reference,
        )
    return info, address


def checkout_items_from_cart(cart: Cart) -> list[CheckoutItemData]:
    return [
        CheckoutItemData(
            product_id=item.product_id,
            name=item.name,
            price=item.unit_price.value,
            quantity=item.quantity,
            category=item.category,
        )
        for item in cart.items
    ]


def checkout_data_from_cart(
    cart: Cart,
    customer_id: str,
    delivery: DeliveryData,
    payment_method: PaymentMethod,
    notes: str | None = None,
) -> CheckoutData:
    return CheckoutData(
        customer_id=customer_id,
        items=checkout_items_from_cart(cart),
        delivery=delivery,
        payment_method=payment_method,
        notes=notes,
    )


def preference_config(order: Order, settings: Settings) -> PreferenceConfig:
    items = tuple(
        PreferenceItem(
            id=item.product_id,
            title=item.name,
            quantity=item.quantity,
            unit_price=item.unit_price.value,
            category_id=item.category,
        )
        for item in order.items
    )
    shipping = order.calculate_shipping_cost()
    if not shipping.is_zero():
        items += (PreferenceItem(id="shipping", title="Envío", quantity=1, unit_price=shipping.value),)

    return PreferenceConfig(
        items=items,
        payer=Payer(name=order.customer.name, email=order.customer.email, phone=order.customer.phone),
        external_reference=str(order.id),
        back_urls=settings.back_urls,
        auto_return="approved",
        max_installments=settings.max_installments,
        notification_url=settings.notification_url,
        statement_descriptor=settings.statement_descriptor,
    )


def checkout_summary(order: Order) -> CheckoutSummary:
    return CheckoutSummary(
        subtotal=order.calculate_subtotal().to_float(),
        shipping_cost=order.calculate_shipping_cost().to_float(),
        total=order.calculate_total().to_float(),
        item_count=order.item_count(),
        payment_method=PaymentMethod(order.payment_info.method),
        delivery_type=DeliveryType(order.delivery.delivery_type),
    )


def checkout_response(order: Order, summary: CheckoutSummary, payment_config: PaymentConfigData | None) -> CheckoutResponse:
    return CheckoutResponse(
        order_id=str(order.id),
        status=order.status,
        payment_config=payment_config,
        summary=summary,
    )
