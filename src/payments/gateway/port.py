"""Payment gateway port (abstract interface).

Defines the contract that all payment gateway adapters must implement.
Checkout and webhook handling only ever talk to this interface; FakeGateway
implements it for development and tests.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


class GatewayError(Exception):
    """The gateway could not be reached or refused the request."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


@dataclass(frozen=True)
class PreferenceItem:
    id: str
    title: str
    quantity: int
    unit_price: float
    category_id: str | None = None


@dataclass(frozen=True)
class Payer:
    name: str
    email: str
    phone: str | None = None


@dataclass(frozen=True)
class PreferenceConfig:
    """Everything the gateway needs to open a checkout for one order."""

    items: tuple[PreferenceItem, ...]
    payer: Payer
    external_reference: str
    back_urls: dict[str, str] = field(default_factory=dict)
    auto_return: str = "approved"
    max_installments: int = 12
    notification_url: str | None = None
    statement_descriptor: str | None = None


@dataclass(frozen=True)
class PreferenceResult:
    preference_id: str
    init_point: str
    external_reference: str


@dataclass(frozen=True)
class PaymentDetails:
    """A payment as reported by the gateway."""

    payment_id: str
    status: str  # approved, rejected, cancelled, pending, in_process, refunded
    amount: float
    method: str | None = None
    installments: int | None = None
    payment_type: str | None = None
    external_reference: str | None = None
    status_detail: str | None = None


@dataclass(frozen=True)
class RefundResult:
    refund_id: str
    amount: float


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    @abstractmethod
    async def create_preference(self, config: PreferenceConfig) -> PreferenceResult:
        """Open a payment preference the customer is redirected to."""
        ...

    @abstractmethod
    async def get_payment(self, payment_id: str) -> PaymentDetails:
        """Fetch the current state of a payment."""
        ...

    @abstractmethod
    async def refund(self, payment_id: str, amount: float | None = None) -> RefundResult:
        """Refund a payment, fully when no amount is given."""
        ...
