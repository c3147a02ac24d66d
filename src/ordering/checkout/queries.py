"""Read-side queries over orders: listings, statistics and payment status."""

from collections import Counter
from datetime import UTC, datetime

from ordering.checkout.ports import OrderFilters, OrderPage, OrderRepository
from ordering.checkout.schemas import OrderStatistics, PaymentStatusView, ProductSales
from ordering.config import Settings
from ordering.errors import OrderNotFoundError
from ordering.order.order import Order, OrderStatus, PaymentStatus
from ordering.shared.money import Money
from ordering.utils.logging import get_logger

logger = get_logger(__name__)

TOP_PRODUCTS = 5


def _aware(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class OrderQueryService:
    def __init__(self, order_repository: OrderRepository, settings: Settings) -> None:
        self.order_repository = order_repository
        self.settings = settings

    async def search(self, filters: OrderFilters, page: int = 1, limit: int = 10) -> OrderPage:
        return await self.order_repository.search(filters, page=page, limit=limit)

    async def customer_orders(self, customer_id: str, page: int = 1, limit: int = 10) -> OrderPage:
        return await self.order_repository.search(OrderFilters(customer_id=customer_id), page=page, limit=limit)

    async def recent(self, limit: int = 10) -> list[Order]:
        return await self.order_repository.find_recent(limit=limit)

    async def ready_for_delivery(self) -> list[Order]:
        return await self.order_repository.find_ready_for_delivery()

    async def statistics(self, created_from: datetime | None = None, created_to: datetime | None = None) -> OrderStatistics:
        """Totals over orders placed in the window; sales only count approved payments."""
        filters = OrderFilters(created_from=_aware(created_from), created_to=_aware(created_to))
        orders = await self.order_repository.find_matching(filters)

        if created_from is None and created_to is None:
            by_status = {status.value: await self.order_repository.count_by_status(status) for status in OrderStatus}
            total_orders = await self.order_repository.count_by_status()
        else:
            counts = Counter(order.status for order in orders)
            by_status = {status.value: counts.get(status.value, 0) for status in OrderStatus}
            total_orders = len(orders)

        paid = [order for order in orders if order.payment_status == PaymentStatus.APPROVED]
        sales = Money.zero()
        for order in paid:
            sales = sales.add(order.calculate_total())

        quantities = Counter()
        names = {}
        for order in paid:
            for item in order.items:
                quantities[item.product_id] += item.quantity
                names.setdefault(item.product_id, item.name)

        logger.debug("order_statistics_computed", total_orders=total_orders, paid_orders=len(paid))
        return OrderStatistics(
            total_orders=total_orders,
            orders_by_status=by_status,
            paid_orders=len(paid),
            total_sales=sales.to_float(),
            average_sale=round(sales.value / len(paid), 2) if paid else 0.0,
            top_products=[
                ProductSales(product_id=product_id, name=names[product_id], quantity=quantity)
                for product_id, quantity in quantities.most_common(TOP_PRODUCTS)
            ],
        )

    async def payment_status(self, order_id: str | None = None, reference: str | None = None) -> PaymentStatusView:
        """Look up an order by id, or by a gateway preference or payment id."""
        order = None
        if order_id:
            order = await self.order_repository.find_by_id(order_id)
        elif reference:
            order = await self.order_repository.find_by_payment_reference(reference)
        if order is None:
            raise OrderNotFoundError(
                f"Order {order_id or reference} not found",
                context={"order_id": order_id, "reference": reference},
            )

        info = order.payment_info
        return PaymentStatusView(
            order_id=str(order.id),
            order_status=order.status,
            method=info.method,
            status=info.status,
            amount=info.amount,
            currency=info.currency,
            formatted_amount=Money.create(info.amount).format(currency=info.currency, locale=self.settings.locale),
            preference_id=info.preference_id,
            payment_id=info.payment_id,
            payment_type=info.payment_type,
            installments=info.installments,
            rejection_reason=info.rejection_reason,
        )
