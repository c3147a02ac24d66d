"""Pydantic request/response schemas for the Ordering API.

These are external contracts (anti-corruption layer), separate from the
internal Protean commands. Checkout payloads reuse ``ordering.checkout.schemas``.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from ordering.cart.cart import Cart
from ordering.checkout.ports import OrderPage
from ordering.checkout.schemas import DeliveryData
from ordering.customer.customer import Customer
from ordering.order.order import Order, PaymentMethod


# ---------------------------------------------------------------------------
# Shared
# ---------------------------------------------------------------------------
class StatusResponse(BaseModel):
    status: str = "ok"


class ErrorBody(BaseModel):
    code: str
    message: str
    type: str
    context: dict = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class CreateCartRequest(BaseModel):
    customer_id: str | None = None
    session_id: str | None = None


class CartIdResponse(BaseModel):
    cart_id: str


class AddCartItemRequest(BaseModel):
    product_id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    price: float
    quantity: int = 1
    image: str | None = None
    category: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "product_id": "pan-de-campo",
                    "name": "Pan de campo 1kg",
                    "price": 3200.0,
                    "quantity": 1,
                    "category": "panes",
                }
            ]
        }
    }


class UpdateCartItemRequest(BaseModel):
    quantity: int


class AmountRequest(BaseModel):
    amount: float


class CartCheckoutRequest(BaseModel):
    customer_id: str = Field(min_length=1)
    delivery: DeliveryData
    payment_method: PaymentMethod
    notes: str | None = None


class CartItemView(BaseModel):
    product_id: str
    name: str
    unit_price: float
    quantity: int
    subtotal: float
    image: str | None = None
    category: str | None = None


class CartView(BaseModel):
    cart_id: str
    customer_id: str | None = None
    session_id: str | None = None
    items: list[CartItemView]
    subtotal: float
    discount: float
    tax: float
    total: float
    total_items: int

    @classmethod
    def from_cart(cls, cart: Cart) -> "CartView":
        return cls(
            cart_id=str(cart.id),
            customer_id=str(cart.customer_id) if cart.customer_id else None,
            session_id=cart.session_id,
            items=[
                CartItemView(
                    product_id=item.product_id,
                    name=item.name,
                    unit_price=item.unit_price.value,
                    quantity=item.quantity,
                    subtotal=item.subtotal().to_float(),
                    image=item.image,
                    category=item.category,
                )
                for item in cart.items
            ],
            subtotal=cart.calculate_subtotal().to_float(),
            discount=cart.discount.value if cart.discount else 0.0,
            tax=cart.tax.value if cart.tax else 0.0,
            total=cart.calculate_total().to_float(),
            total_items=cart.total_items(),
        )


# ---------------------------------------------------------------------------
# Order
# ---------------------------------------------------------------------------
class CancelOrderRequest(BaseModel):
    reason: str | None = None


class ConfirmPaymentRequest(BaseModel):
    payment_id: str = Field(min_length=1)
    amount: float | None = None
    payment_type: str | None = None
    installments: int | None = Field(None, ge=1)


class RefundRequest(BaseModel):
    amount: float | None = Field(None, gt=0)


class OrderItemView(BaseModel):
    product_id: str
    name: str
    unit_price: float
    quantity: int
    category: str | None = None


class StatusChangeView(BaseModel):
    from_status: str | None = None
    to_status: str
    reason: str | None = None
    changed_at: datetime


class OrderView(BaseModel):
    order_id: str
    customer_id: str
    status: str
    payment_method: str
    payment_status: str
    payment_reference: str | None = None
    delivery_type: str
    items: list[OrderItemView]
    subtotal: float
    shipping_cost: float
    total: float
    item_count: int
    notes: str | None = None
    status_history: list[StatusChangeView]

    @classmethod
    def from_order(cls, order: Order) -> "OrderView":
        return cls(
            order_id=str(order.id),
            customer_id=str(order.customer_id),
            status=order.status,
            payment_method=order.payment_info.method,
            payment_status=order.payment_info.status,
            payment_reference=order.payment_reference,
            delivery_type=order.delivery.delivery_type,
            items=[
                OrderItemView(
                    product_id=item.product_id,
                    name=item.name,
                    unit_price=item.unit_price.value,
                    quantity=item.quantity,
                    category=item.category,
                )
                for item in order.items
            ],
            subtotal=order.calculate_subtotal().to_float(),
            shipping_cost=order.calculate_shipping_cost().to_float(),
            total=order.calculate_total().to_float(),
            item_count=order.item_count(),
            notes=order.notes,
            status_history=[
                StatusChangeView(
                    from_status=change.from_status,
                    to_status=change.to_status,
                    reason=change.reason,
                    changed_at=change.changed_at,
                )
                for change in sorted(order.status_history, key=lambda c: c.changed_at)
            ],
        )


class OrderSummaryView(BaseModel):
    order_id: str
    customer_id: str
    status: str
    payment_status: str
    delivery_type: str
    total: float
    item_count: int
    created_at: datetime | None = None

    @classmethod
    def from_order(cls, order: Order) -> "OrderSummaryView":
        return cls(
            order_id=str(order.id),
            customer_id=str(order.customer_id),
            status=order.status,
            payment_status=order.payment_info.status,
            delivery_type=order.delivery.delivery_type,
            total=order.calculate_total().to_float(),
            item_count=order.item_count(),
            created_at=order.created_at,
        )


class OrderListView(BaseModel):
    items: list[OrderSummaryView]
    total: int
    page: int
    limit: int
    total_pages: int
    has_next: bool
    has_previous: bool

    @classmethod
    def from_page(cls, page: OrderPage) -> "OrderListView":
        return cls(
            items=[OrderSummaryView.from_order(order) for order in page.items],
            total=page.total,
            page=page.page,
            limit=page.limit,
            total_pages=page.total_pages,
            has_next=page.has_next,
            has_previous=page.has_previous,
        )


# ---------------------------------------------------------------------------
# Customer
# ---------------------------------------------------------------------------
class RegisterCustomerRequest(BaseModel):
    name: str = Field(min_length=1)
    email: str
    phone: str | None = None


class CustomerIdResponse(BaseModel):
    customer_id: str


class CustomerStatusRequest(BaseModel):
    reason: str | None = None


class CustomerView(BaseModel):
    customer_id: str
    name: str
    email: str
    status: str
    total_orders: int
    total_spent: float
    average_order_value: float
    favourite_products: list[str]
    favourite_categories: list[str]

    @classmethod
    def from_customer(cls, customer: Customer) -> "CustomerView":
        return cls(
            customer_id=str(customer.id),
            name=customer.name,
            email=customer.email,
            status=customer.status,
            total_orders=customer.total_orders or 0,
            total_spent=customer.total_spent or 0.0,
            average_order_value=customer.average_order_value,
            favourite_products=customer.favourite_product_list(),
            favourite_categories=customer.favourite_category_list(),
        )
