"""Configurable fake payment gateway for development and testing.

This adapter simulates the gateway without any external calls. Payments are
registered up front with ``register_payment`` (what a webhook would later
report), and the whole gateway can be switched to fail, which is how tests
exercise the error paths.
"""

from uuid import uuid4

from payments.gateway.port import (
    GatewayError,
    PaymentDetails,
    PaymentGateway,
    PreferenceConfig,
    PreferenceResult,
    RefundResult,
)


class FakeGateway(PaymentGateway):
    """Configurable fake payment gateway."""

    def __init__(self, checkout_url: str = "https://gateway.test/checkout") -> None:
        self.checkout_url = checkout_url
        self.should_succeed: bool = True
        self.failure_reason: str = "Gateway unavailable"
        self.calls: list[dict] = []
        self.preferences: dict[str, PreferenceConfig] = {}
        self.payments: dict[str, PaymentDetails] = {}

    def configure(self, should_succeed: bool, failure_reason: str = "Gateway unavailable") -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def register_payment(
        self,
        payment_id: str,
        status: str,
        amount: float,
        external_reference: str | None = None,
        payment_type: str = "credit_card",
        installments: int = 1,
        method: str = "visa",
    ) -> PaymentDetails:
        details = PaymentDetails(
            payment_id=str(payment_id),
            status=status,
            amount=amount,
            method=method,
            installments=installments,
            payment_type=payment_type,
            external_reference=external_reference,
        )
        self.payments[str(payment_id)] = details
        return details

    def _fail_if_configured(self) -> None:
        if not self.should_succeed:
            raise GatewayError(self.failure_reason, status=503)

    async def create_preference(self, config: PreferenceConfig) -> PreferenceResult:
        self.calls.append({"method": "create_preference", "external_reference": config.external_reference})
        self._fail_if_configured()

        preference_id = f"fake_pref_{uuid4().hex[:12]}"
        self.preferences[preference_id] = config
        return PreferenceResult(
            preference_id=preference_id,
            init_point=f"{self.checkout_url}?pref_id={preference_id}",
            external_reference=config.external_reference,
        )

    async def get_payment(self, payment_id: str) -> PaymentDetails:
        self.calls.append({"method": "get_payment", "payment_id": str(payment_id)})
        self._fail_if_configured()

        details = self.payments.get(str(payment_id))
        if details is None:
            raise GatewayError(f"Payment {payment_id} not found", status=404)
        return details

    async def refund(self, payment_id: str, amount: float | None = None) -> RefundResult:
        self.calls.append({"method": "refund", "payment_id": str(payment_id), "amount": amount})
        self._fail_if_configured()

        details = self.payments.get(str(payment_id))
        refunded = amount if amount is not None else (details.amount if details else 0.0)
        return RefundResult(refund_id=f"fake_ref_{uuid4().hex[:12]}", amount=refunded)
