"""FastAPI routes for the Ordering domain: carts, checkout, orders, customers, webhooks."""

from datetime import datetime

from fastapi import APIRouter, Depends, Query, Request
from protean.utils.globals import current_domain

from ordering.api.schemas import (
    AddCartItemRequest,
    AmountRequest,
    CancelOrderRequest,
    CartCheckoutRequest,
    CartIdResponse,
    CartView,
    ConfirmPaymentRequest,
    CreateCartRequest,
    CustomerIdResponse,
    CustomerStatusRequest,
    CustomerView,
    OrderListView,
    OrderSummaryView,
    OrderView,
    RefundRequest,
    RegisterCustomerRequest,
    StatusResponse,
    UpdateCartItemRequest,
)
from ordering.cart.items import AddCartItem, RemoveCartItem, UpdateCartItemQuantity, load_cart
from ordering.cart.management import ApplyCartDiscount, ApplyCartTax, ClearCart, CreateCart
from ordering.checkout.orchestrator import CheckoutOrchestrator
from ordering.checkout.payment_service import PaymentService
from ordering.checkout.ports import OrderFilters
from ordering.checkout.queries import OrderQueryService
from ordering.checkout.schemas import (
    CheckoutData,
    CheckoutResponse,
    OrderStatistics,
    PaymentStatusView,
    WebhookNotification,
    WebhookResult,
)
from ordering.customer.management import (
    BlockCustomer,
    DeactivateCustomer,
    ReactivateCustomer,
    RegisterCustomer,
    SuspendCustomer,
    load_customer,
)
from ordering.order.cancellation import CancelOrder
from ordering.order.fulfillment import DispatchOrder, MarkOrderDelivered, MarkOrderReady, StartOrderPreparation
from ordering.order.order import DeliveryType, OrderStatus, PaymentMethod
from ordering.order.payment import ConfirmOrderPayment, RejectOrderPayment, load_order

MAX_PAGE_SIZE = 100


def get_checkout(request: Request) -> CheckoutOrchestrator:
    return request.app.state.checkout


def get_payment_service(request: Request) -> PaymentService:
    return request.app.state.payment_service


def get_order_queries(request: Request) -> OrderQueryService:
    return request.app.state.order_queries


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/carts", tags=["carts"])


@cart_router.post("", status_code=201, response_model=CartIdResponse)
async def create_cart(body: CreateCartRequest) -> CartIdResponse:
    command = CreateCart(customer_id=body.customer_id, session_id=body.session_id)
    result = current_domain.process(command, asynchronous=False)
    return CartIdResponse(cart_id=result)


@cart_router.get("/{cart_id}", response_model=CartView)
async def get_cart(cart_id: str) -> CartView:
    return CartView.from_cart(load_cart(cart_id))


@cart_router.post("/{cart_id}/items", response_model=CartView)
async def add_cart_item(cart_id: str, body: AddCartItemRequest) -> CartView:
    command = AddCartItem(
        cart_id=cart_id,
        product_id=body.product_id,
        name=body.name,
        price=body.price,
        quantity=body.quantity,
        image=body.image,
        category=body.category,
    )
    current_domain.process(command, asynchronous=False)
    return CartView.from_cart(load_cart(cart_id))


@cart_router.put("/{cart_id}/items/{product_id}", response_model=CartView)
async def update_cart_item(cart_id: str, product_id: str, body: UpdateCartItemRequest) -> CartView:
    command = UpdateCartItemQuantity(cart_id=cart_id, product_id=product_id, quantity=body.quantity)
    current_domain.process(command, asynchronous=False)
    return CartView.from_cart(load_cart(cart_id))


@cart_router.delete("/{cart_id}/items/{product_id}", response_model=CartView)
async def remove_cart_item(cart_id: str, product_id: str) -> CartView:
    current_domain.process(RemoveCartItem(cart_id=cart_id, product_id=product_id), asynchronous=False)
    return CartView.from_cart(load_cart(cart_id))


@cart_router.delete("/{cart_id}/items", response_model=CartView)
async def clear_cart(cart_id: str) -> CartView:
    current_domain.process(ClearCart(cart_id=cart_id), asynchronous=False)
    return CartView.from_cart(load_cart(cart_id))


@cart_router.put("/{cart_id}/discount", response_model=CartView)
async def apply_cart_discount(cart_id: str, body: AmountRequest) -> CartView:
    current_domain.process(ApplyCartDiscount(cart_id=cart_id, amount=body.amount), asynchronous=False)
    return CartView.from_cart(load_cart(cart_id))


@cart_router.put("/{cart_id}/tax", response_model=CartView)
async def apply_cart_tax(cart_id: str, body: AmountRequest) -> CartView:
    current_domain.process(ApplyCartTax(cart_id=cart_id, amount=body.amount), asynchronous=False)
    return CartView.from_cart(load_cart(cart_id))


@cart_router.post("/{cart_id}/checkout", status_code=201, response_model=CheckoutResponse)
async def checkout_cart(
    cart_id: str,
    body: CartCheckoutRequest,
    checkout: CheckoutOrchestrator = Depends(get_checkout),  # noqa: B008
) -> CheckoutResponse:
    result = await checkout.checkout_cart(
        cart_id=cart_id,
        customer_id=body.customer_id,
        delivery=body.delivery,
        payment_method=body.payment_method,
        notes=body.notes,
    )
    return result.to_response()


# ---------------------------------------------------------------------------
# Checkout Router
# ---------------------------------------------------------------------------
checkout_router = APIRouter(prefix="/checkout", tags=["checkout"])


@checkout_router.post("", status_code=201, response_model=CheckoutResponse)
async def process_checkout(
    body: CheckoutData,
    checkout: CheckoutOrchestrator = Depends(get_checkout),  # noqa: B008
) -> CheckoutResponse:
    result = await checkout.process_checkout(body)
    return result.to_response()


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.get("", response_model=OrderListView)
async def list_orders(
    customer_id: str | None = None,
    status: OrderStatus | None = None,
    payment_method: PaymentMethod | None = None,
    delivery_type: DeliveryType | None = None,
    min_total: float | None = Query(None, ge=0),  # noqa: B008
    max_total: float | None = Query(None, ge=0),  # noqa: B008
    page: int = Query(1, ge=1),  # noqa: B008
    limit: int = Query(10, ge=1, le=MAX_PAGE_SIZE),  # noqa: B008
    queries: OrderQueryService = Depends(get_order_queries),  # noqa: B008
) -> OrderListView:
    filters = OrderFilters(
        customer_id=customer_id,
        status=status,
        payment_method=payment_method,
        delivery_type=delivery_type,
        min_total=min_total,
        max_total=max_total,
    )
    return OrderListView.from_page(await queries.search(filters, page=page, limit=limit))


@order_router.get("/recent", response_model=list[OrderSummaryView])
async def recent_orders(
    limit: int = Query(10, ge=1, le=MAX_PAGE_SIZE),  # noqa: B008
    queries: OrderQueryService = Depends(get_order_queries),  # noqa: B008
) -> list[OrderSummaryView]:
    return [OrderSummaryView.from_order(order) for order in await queries.recent(limit=limit)]


@order_router.get("/ready", response_model=list[OrderSummaryView])
async def orders_ready_for_delivery(
    queries: OrderQueryService = Depends(get_order_queries),  # noqa: B008
) -> list[OrderSummaryView]:
    return [OrderSummaryView.from_order(order) for order in await queries.ready_for_delivery()]


@order_router.get("/stats", response_model=OrderStatistics)
async def order_statistics(
    created_from: datetime | None = None,
    created_to: datetime | None = None,
    queries: OrderQueryService = Depends(get_order_queries),  # noqa: B008
) -> OrderStatistics:
    return await queries.statistics(created_from=created_from, created_to=created_to)


@order_router.get("/payments/{reference}", response_model=PaymentStatusView)
async def payment_status_by_reference(
    reference: str,
    queries: OrderQueryService = Depends(get_order_queries),  # noqa: B008
) -> PaymentStatusView:
    return await queries.payment_status(reference=reference)


@order_router.get("/{order_id}/payment", response_model=PaymentStatusView)
async def order_payment_status(
    order_id: str,
    queries: OrderQueryService = Depends(get_order_queries),  # noqa: B008
) -> PaymentStatusView:
    return await queries.payment_status(order_id=order_id)


@order_router.get("/{order_id}", response_model=OrderView)
async def get_order(order_id: str) -> OrderView:
    return OrderView.from_order(load_order(order_id))


@order_router.put("/{order_id}/cancel", response_model=OrderView)
async def cancel_order(order_id: str, body: CancelOrderRequest) -> OrderView:
    current_domain.process(CancelOrder(order_id=order_id, reason=body.reason), asynchronous=False)
    return OrderView.from_order(load_order(order_id))


@order_router.put("/{order_id}/payment/confirm", response_model=OrderView)
async def confirm_order_payment(order_id: str, body: ConfirmPaymentRequest) -> OrderView:
    command = ConfirmOrderPayment(
        order_id=order_id,
        payment_id=body.payment_id,
        payment_type=body.payment_type,
        installments=body.installments,
        amount=body.amount,
    )
    current_domain.process(command, asynchronous=False)
    return OrderView.from_order(load_order(order_id))


@order_router.put("/{order_id}/payment/reject", response_model=OrderView)
async def reject_order_payment(order_id: str, body: CancelOrderRequest) -> OrderView:
    command = RejectOrderPayment(order_id=order_id, reason=body.reason or "Rejected by operator")
    current_domain.process(command, asynchronous=False)
    return OrderView.from_order(load_order(order_id))


@order_router.put("/{order_id}/refund", response_model=OrderView)
async def refund_order(
    order_id: str,
    body: RefundRequest,
    payment_service: PaymentService = Depends(get_payment_service),  # noqa: B008
) -> OrderView:
    order = await payment_service.refund_order(order_id, amount=body.amount)
    return OrderView.from_order(order)


@order_router.put("/{order_id}/prepare", response_model=OrderView)
async def start_preparation(order_id: str) -> OrderView:
    current_domain.process(StartOrderPreparation(order_id=order_id), asynchronous=False)
    return OrderView.from_order(load_order(order_id))


@order_router.put("/{order_id}/ready", response_model=OrderView)
async def mark_ready(order_id: str) -> OrderView:
    current_domain.process(MarkOrderReady(order_id=order_id), asynchronous=False)
    return OrderView.from_order(load_order(order_id))


@order_router.put("/{order_id}/dispatch", response_model=OrderView)
async def dispatch_order(order_id: str) -> OrderView:
    current_domain.process(DispatchOrder(order_id=order_id), asynchronous=False)
    return OrderView.from_order(load_order(order_id))


@order_router.put("/{order_id}/deliver", response_model=OrderView)
async def mark_delivered(order_id: str) -> OrderView:
    current_domain.process(MarkOrderDelivered(order_id=order_id), asynchronous=False)
    return OrderView.from_order(load_order(order_id))


# ---------------------------------------------------------------------------
# Customer Router
# ---------------------------------------------------------------------------
customer_router = APIRouter(prefix="/customers", tags=["customers"])


@customer_router.post("", status_code=201, response_model=CustomerIdResponse)
async def register_customer(body: RegisterCustomerRequest) -> CustomerIdResponse:
    command = RegisterCustomer(name=body.name, email=body.email, phone=body.phone)
    result = current_domain.process(command, asynchronous=False)
    return CustomerIdResponse(customer_id=result)


@customer_router.get("/{customer_id}/orders", response_model=OrderListView)
async def customer_orders(
    customer_id: str,
    page: int = Query(1, ge=1),  # noqa: B008
    limit: int = Query(10, ge=1, le=MAX_PAGE_SIZE),  # noqa: B008
    queries: OrderQueryService = Depends(get_order_queries),  # noqa: B008
) -> OrderListView:
    return OrderListView.from_page(await queries.customer_orders(customer_id, page=page, limit=limit))


@customer_router.get("/{customer_id}", response_model=CustomerView)
async def get_customer(customer_id: str) -> CustomerView:
    return CustomerView.from_customer(load_customer(customer_id))


@customer_router.put("/{customer_id}/suspend", response_model=StatusResponse)
async def suspend_customer(customer_id: str, body: CustomerStatusRequest) -> StatusResponse:
    current_domain.process(SuspendCustomer(customer_id=customer_id, reason=body.reason), asynchronous=False)
    return StatusResponse()


@customer_router.put("/{customer_id}/deactivate", response_model=StatusResponse)
async def deactivate_customer(customer_id: str, body: CustomerStatusRequest) -> StatusResponse:
    current_domain.process(DeactivateCustomer(customer_id=customer_id, reason=body.reason), asynchronous=False)
    return StatusResponse()


@customer_router.put("/{customer_id}/block", response_model=StatusResponse)
async def block_customer(customer_id: str, body: CustomerStatusRequest) -> StatusResponse:
    current_domain.process(BlockCustomer(customer_id=customer_id, reason=body.reason), asynchronous=False)
    return StatusResponse()


@customer_router.put("/{customer_id}/reactivate", response_model=StatusResponse)
async def reactivate_customer(customer_id: str) -> StatusResponse:
    current_domain.process(ReactivateCustomer(customer_id=customer_id), asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Webhook Router
# ---------------------------------------------------------------------------
webhook_router = APIRouter(prefix="/webhooks", tags=["webhooks"])


@webhook_router.post("/payments", response_model=WebhookResult)
async def payment_notification(
    body: WebhookNotification,
    payment_service: PaymentService = Depends(get_payment_service),  # noqa: B008
) -> WebhookResult:
    return await payment_service.handle_webhook(body)
