"""Checkout orchestration: cart + customer + delivery choice → persisted order.

Steps run strictly in sequence, each awaiting the previous one:

1. Check the customer exists and may order.
2. Build the Order from the checkout items and delivery selection.
3. For gateway payments, open a payment preference and attach it.
4. Persist the order.
5. Update the customer's purchase statistics (best effort).

Domain errors from steps 1-4 reach the caller unchanged. Anything else is
logged and re-raised as a ``CheckoutError``. Step 5 never fails a checkout.
"""

from dataclasses import dataclass

from protean.exceptions import ValidationError

from ordering.cart.cart import Cart
from ordering.checkout.mappers import (
    checkout_data_from_cart,
    checkout_response,
    checkout_summary,
    customer_snapshot,
    delivery_info,
    order_items,
    preference_config,
)
from ordering.checkout.ports import CartRepository, CustomerService, OrderRepository
from ordering.checkout.schemas import (
    CheckoutData,
    CheckoutResponse,
    CheckoutSummary,
    DeliveryData,
    PaymentConfigData,
)
from ordering.config import Settings
from ordering.customer.customer import Customer
from ordering.errors import (
    CartNotFoundError,
    CheckoutError,
    CustomerNotEligibleError,
    CustomerNotFoundError,
    DomainError,
    PaymentGatewayError,
)
from ordering.order.order import Order, PaymentMethod
from ordering.utils.logging import get_logger
from payments.gateway.port import GatewayError, PaymentGateway

logger = get_logger(__name__)


@dataclass
class CheckoutResult:
    order: Order
    customer: Customer
    summary: CheckoutSummary
    payment_config: PaymentConfigData | None = None

    def to_response(self) -> CheckoutResponse:
        return checkout_response(self.order, self.summary, self.payment_config)


class CheckoutOrchestrator:
    """Stateless coordinator; owns neither carts nor orders."""

    def __init__(
        self,
        cart_repository: CartRepository,
        order_repository: OrderRepository,
        customer_service: CustomerService,
        payment_gateway: PaymentGateway,
        settings: Settings,
    ) -> None:
        self.cart_repository = cart_repository
        self.order_repository = order_repository
        self.customer_service = customer_service
        self.payment_gateway = payment_gateway
        self.settings = settings

    async def process_checkout(self, data: CheckoutData) -> CheckoutResult:
        log = logger.bind(customer_id=data.customer_id, payment_method=data.payment_method.value)
        log.info("checkout_started", lines=len(data.items), delivery_type=data.delivery.type.value)

        try:
            customer = await self._validate_customer(data.customer_id)
            order = self._build_order(data, customer)

            payment_config = None
            if data.payment_method == PaymentMethod.GATEWAY:
                payment_config = await self._configure_payment(order)

            await self.order_repository.save(order)
        except (DomainError, ValidationError) as exc:
            log.warning("checkout_rejected", error=repr(exc))
            raise
        except Exception as exc:
            log.exception("checkout_failed")
            raise CheckoutError(
                f"Checkout failed: {exc}",
                context={"customer_id": data.customer_id},
            ) from exc

        await self._record_customer_stats(order)

        summary = checkout_summary(order)
        log.info("checkout_completed", order_id=str(order.id), total=summary.total)
        return CheckoutResult(order=order, customer=customer, summary=summary, payment_config=payment_config)

    async def checkout_cart(
        self,
        cart_id: str,
        customer_id: str,
        delivery: DeliveryData,
        payment_method: PaymentMethod,
        notes: str | None = None,
    ) -> CheckoutResult:
        """Check out a stored cart, then empty it."""
        cart: Cart | None = await self.cart_repository.find_by_id(cart_id)
        if cart is None:
            raise CartNotFoundError(f"Cart {cart_id} not found", context={"cart_id": str(cart_id)})
        cart.validate_for_checkout()

        data = checkout_data_from_cart(cart, customer_id, delivery, payment_method, notes)
        result = await self.process_checkout(data)

        await self._empty_cart(cart, result.order)
        return result

    # -------------------------------------------------------------------
    # Steps
    # -------------------------------------------------------------------
    async def _validate_customer(self, customer_id: str) -> Customer:
        customer = await self.customer_service.get_customer(customer_id)
        if customer is None:
            raise CustomerNotFoundError(f"Customer {customer_id} not found", context={"customer_id": customer_id})
        if not await self.customer_service.validate_eligibility(customer_id):
            raise CustomerNotEligibleError(
                f"Customer {customer_id} cannot place orders",
                context={"customer_id": customer_id, "status": customer.status},
            )
        return customer

    def _build_order(self, data: CheckoutData, customer: Customer) -> Order:
        delivery, address = delivery_info(data.delivery, self.settings.default_delivery_fee)
        return Order.create(
            customer=customer_snapshot(customer),
            items=order_items(data.items),
            delivery=delivery,
            delivery_address=address,
            payment_method=data.payment_method,
            notes=data.notes,
            currency=self.settings.currency,
        )

    async def _configure_payment(self, order: Order) -> PaymentConfigData:
        config = preference_config(order, self.settings)
        try:
            preference = await self.payment_gateway.create_preference(config)
        except GatewayError as exc:
            raise PaymentGatewayError(
                "The payment provider is unavailable, please try again",
                context={"order_id": str(order.id), "gateway_status": exc.status},
            ) from exc

        order.configure_payment(preference.preference_id)
        return PaymentConfigData(preference_id=preference.preference_id, init_point=preference.init_point)

    async def _record_customer_stats(self, order: Order) -> None:
        try:
            await self.customer_service.record_order(
                customer_id=str(order.customer_id),
                amount=order.calculate_total().to_float(),
                product_ids=order.product_ids(),
                categories=order.categories(),
            )
        except Exception:
            logger.warning("customer_stats_update_failed", order_id=str(order.id), exc_info=True)

    async def _empty_cart(self, cart: Cart, order: Order) -> None:
        # The order is already placed; a stale cart must not fail the checkout
        try:
            cart.clear()
            await self.cart_repository.save(cart)
        except Exception:
            logger.warning("cart_clear_failed", cart_id=str(cart.id), order_id=str(order.id), exc_info=True)
