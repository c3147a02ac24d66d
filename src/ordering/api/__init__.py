"""Ordering domain API package."""

from fastapi import FastAPI

from ordering.api.errors import register_exception_handlers
from ordering.api.routes import (
    cart_router,
    checkout_router,
    customer_router,
    order_router,
    webhook_router,
)
from ordering.checkout.adapters import ProteanCartRepository, ProteanCustomerService, ProteanOrderRepository
from ordering.checkout.orchestrator import CheckoutOrchestrator
from ordering.checkout.payment_service import PaymentService
from ordering.checkout.queries import OrderQueryService
from ordering.config import Settings
from payments.gateway.port import PaymentGateway

__all__ = [
    "cart_router",
    "checkout_router",
    "customer_router",
    "order_router",
    "webhook_router",
    "install_ordering_api",
]


def install_ordering_api(app: FastAPI, settings: Settings, gateway: PaymentGateway) -> None:
    """Wire services for this app and mount the ordering routers on it."""
    order_repository = ProteanOrderRepository()

    app.state.checkout = CheckoutOrchestrator(
        cart_repository=ProteanCartRepository(),
        order_repository=order_repository,
        customer_service=ProteanCustomerService(),
        payment_gateway=gateway,
        settings=settings,
    )
    app.state.payment_service = PaymentService(order_repository=order_repository, payment_gateway=gateway)
    app.state.order_queries = OrderQueryService(order_repository=order_repository, settings=settings)

    register_exception_handlers(app)

    for router in (cart_router, checkout_router, order_router, customer_router, webhook_router):
        app.include_router(router)
