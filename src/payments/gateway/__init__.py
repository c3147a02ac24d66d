"""Payment gateway port and adapters.

- FakeGateway for development and testing

There is no module-level gateway: the application's composition root builds
one with ``build_gateway`` and hands it to the services that need it.
"""

from payments.gateway.fake_adapter import FakeGateway
from payments.gateway.port import (
    GatewayError,
    Payer,
    PaymentDetails,
    PaymentGateway,
    PreferenceConfig,
    PreferenceItem,
    PreferenceResult,
    RefundResult,
)

__all__ = [
    "FakeGateway",
    "GatewayError",
    "Payer",
    "PaymentDetails",
    "PaymentGateway",
    "PreferenceConfig",
    "PreferenceItem",
    "PreferenceResult",
    "RefundResult",
    "build_gateway",
]


def build_gateway(name: str) -> PaymentGateway:
    """Return the gateway adapter named in configuration."""
    if name == "fake":
        return FakeGateway()
    raise ValueError(f"Unknown payment gateway: {name}")
