"""Tests for the payment gateway port, the fake adapter and gateway selection."""

import asyncio

import pytest
from payments.gateway import (
    FakeGateway,
    GatewayError,
    Payer,
    PreferenceConfig,
    PreferenceItem,
    build_gateway,
)


def _config(external_reference="order-001"):
    return PreferenceConfig(
        items=(PreferenceItem(id="medialunas-12", title="Medialunas x12", quantity=2, unit_price=2500.0),),
        payer=Payer(name="Ana Pérez", email="ana@example.com"),
        external_reference=external_reference,
    )


class TestPreferenceConfig:
    def test_defaults(self):
        config = _config()
        assert config.auto_return == "approved"
        assert config.max_installments == 12
        assert config.back_urls == {}

    def test_is_immutable(self):
        config = _config()
        with pytest.raises(AttributeError):
            config.external_reference = "other"


class TestFakeGateway:
    def test_create_preference(self):
        gateway = FakeGateway(checkout_url="https://pay.test/checkout")

        result = asyncio.run(gateway.create_preference(_config()))

        assert result.preference_id.startswith("fake_pref_")
        assert result.init_point == f"https://pay.test/checkout?pref_id={result.preference_id}"
        assert result.external_reference == "order-001"
        assert gateway.preferences[result.preference_id].payer.email == "ana@example.com"
        assert gateway.calls == [{"method": "create_preference", "external_reference": "order-001"}]

    def test_preference_ids_are_unique(self):
        gateway = FakeGateway()
        first = asyncio.run(gateway.create_preference(_config()))
        second = asyncio.run(gateway.create_preference(_config()))
        assert first.preference_id != second.preference_id

    def test_get_registered_payment(self):
        gateway = FakeGateway()
        gateway.register_payment(123, "approved", 5000.0, external_reference="order-001", installments=6)

        payment = asyncio.run(gateway.get_payment("123"))

        assert payment.payment_id == "123"
        assert payment.status == "approved"
        assert payment.installments == 6
        assert payment.external_reference == "order-001"

    def test_get_unknown_payment(self):
        with pytest.raises(GatewayError) as exc:
            asyncio.run(FakeGateway().get_payment("missing"))
        assert exc.value.status == 404

    def test_refund_defaults_to_full_amount(self):
        gateway = FakeGateway()
        gateway.register_payment("pay-1", "approved", 5000.0)

        refund = asyncio.run(gateway.refund("pay-1"))

        assert refund.refund_id.startswith("fake_ref_")
        assert refund.amount == 5000.0

    def test_partial_refund(self):
        gateway = FakeGateway()
        gateway.register_payment("pay-1", "approved", 5000.0)
        assert asyncio.run(gateway.refund("pay-1", 1200.0)).amount == 1200.0

    def test_configured_failure(self):
        gateway = FakeGateway()
        gateway.configure(should_succeed=False, failure_reason="Timeout")

        with pytest.raises(GatewayError) as exc:
            asyncio.run(gateway.create_preference(_config()))

        assert str(exc.value) == "Timeout"
        assert exc.value.status == 503
        assert gateway.preferences == {}
        assert len(gateway.calls) == 1

    def test_recovers_after_reconfiguration(self):
        gateway = FakeGateway()
        gateway.configure(should_succeed=False)
        gateway.configure(should_succeed=True)
        asyncio.run(gateway.create_preference(_config()))


class TestBuildGateway:
    def test_fake(self):
        assert isinstance(build_gateway("fake"), FakeGateway)

    def test_unknown_gateway(self):
        with pytest.raises(ValueError, match="mercadopago"):
            build_gateway("mercadopago")
