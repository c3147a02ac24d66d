"""Typed boundary objects for checkout and payment notifications.

Request data is validated here, before it is mapped onto the aggregates in
``ordering.checkout.mappers``.
"""

from pydantic import BaseModel, Field, model_validator

from ordering.order.order import DeliveryType, PaymentMethod


class CheckoutItemData(BaseModel):
    product_id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    price: float = Field(ge=0)
    quantity: int = Field(ge=1)
    category: str | None = None


class AddressData(BaseModel):
    street: str = Field(min_length=1)
    city: str = Field(min_length=1)
    postal_code: str | None = None
    reference: str | None = None


class DeliveryData(BaseModel):
    type: DeliveryType
    address: AddressData | None = None
    instructions: str | None = None
    shipping_cost: float | None = Field(None, ge=0)
    estimated_date: str | None = None

    @model_validator(mode="after")
    def delivery_needs_address(self):
        if self.type == DeliveryType.DELIVERY and self.address is None:
            raise ValueError("An address is required for home delivery")
        return self


class CheckoutData(BaseModel):
    customer_id: str = Field(min_length=1)
    items: list[CheckoutItemData] = Field(default_factory=list)
    delivery: DeliveryData
    payment_method: PaymentMethod
    notes: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "customer_id": "cust-001",
                    "items": [
                        {
                            "product_id": "medialunas-12",
                            "name": "Medialunas x12",
                            "price": 2500.0,
                            "quantity": 2,
                            "category": "facturas",
                        }
                    ],
                    "delivery": {"type": "PICKUP"},
                    "payment_method": "GATEWAY",
                }
            ]
        }
    }


class PaymentConfigData(BaseModel):
    preference_id: str
    init_point: str


class CheckoutSummary(BaseModel):
    subtotal: float
    shipping_cost: float
    total: float
    item_count: int
    payment_method: PaymentMethod
    delivery_type: DeliveryType


class CheckoutResponse(BaseModel):
    order_id: str
    status: str
    payment_config: PaymentConfigData | None = None
    summary: CheckoutSummary


class WebhookData(BaseModel):
    id: str

    @model_validator(mode="before")
    @classmethod
    def coerce_numeric_id(cls, values):
        # Gateways send payment ids as numbers
        if isinstance(values, dict) and isinstance(values.get("id"), int):
            values = {**values, "id": str(values["id"])}
        return values


class WebhookNotification(BaseModel):
    id: str | int | None = None
    type: str
    action: str | None = None
    data: WebhookData


class WebhookResult(BaseModel):
    processed: bool
    action: str
    changed: bool = False
    order_id: str | None = None
    previous_status: str | None = None
    new_status: str | None = None


class ProductSales(BaseModel):
    product_id: str
    name: str
    quantity: int


class OrderStatistics(BaseModel):
    total_orders: int
    orders_by_status: dict[str, int]
    paid_orders: int
    total_sales: float
    average_sale: float
    top_products: list[ProductSales] = Field(default_factory=list)


class PaymentStatusView(BaseModel):
    order_id: str
    order_status: str
    method: str
    status: str
    amount: float
    currency: str
    formatted_amount: str
    preference_id: str | None = None
    payment_id: str | None = None
    payment_type: str | None = None
    installments: int | None = None
    rejection_reason: str | None = None
