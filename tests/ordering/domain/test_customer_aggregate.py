"""Tests for the Customer aggregate: eligibility and purchase statistics."""

import pytest
from ordering.customer.customer import FAVOURITES_LIMIT, Customer, CustomerStatus
from ordering.customer.events import CustomerOrderRecorded, CustomerRegistered, CustomerStatusChanged
from protean.exceptions import ValidationError


def _customer():
    customer = Customer.register(name="Ana Pérez", email="ana@example.com", phone="+54 11 5555-0000")
    customer._events.clear()
    return customer


class TestRegistration:
    def test_register_active_customer(self):
        customer = Customer.register(name="Ana Pérez", email="ana@example.com")

        assert customer.status == CustomerStatus.ACTIVE.value
        assert customer.can_place_orders()
        assert customer.total_orders == 0
        assert customer.favourite_product_list() == []
        assert customer.registered_at is not None

    def test_register_raises_event(self):
        customer = Customer.register(name="Ana Pérez", email="ana@example.com")

        event = customer._events[0]
        assert isinstance(event, CustomerRegistered)
        assert event.customer_id == str(customer.id)
        assert event.email == "ana@example.com"

    @pytest.mark.parametrize("email", ["ana", "ana@", "@example.com", "ana@example"])
    def test_invalid_email_is_rejected(self, email):
        with pytest.raises(ValidationError) as exc:
            Customer.register(name="Ana", email=email)
        assert "email" in exc.value.messages


class TestStatusChanges:
    def test_suspend(self):
        customer = _customer()
        customer.suspend("Chargeback")

        assert customer.status == CustomerStatus.SUSPENDED.value
        assert not customer.can_place_orders()

        event = customer._events[-1]
        assert isinstance(event, CustomerStatusChanged)
        assert event.previous_status == CustomerStatus.ACTIVE.value
        assert event.new_status == CustomerStatus.SUSPENDED.value
        assert event.reason == "Chargeback"

    def test_deactivate_suspended_customer(self):
        customer = _customer()
        customer.suspend()
        customer.deactivate()
        assert customer.status == CustomerStatus.INACTIVE.value

    def test_block_from_any_state(self):
        customer = _customer()
        customer.deactivate()
        customer.block("Fraud")
        assert customer.status == CustomerStatus.BLOCKED.value
        assert not customer.can_place_orders()

    def test_reactivate(self):
        customer = _customer()
        customer.suspend()
        customer.reactivate()
        assert customer.can_place_orders()

    def test_blocked_customer_cannot_be_reactivated(self):
        customer = _customer()
        customer.block()
        with pytest.raises(ValidationError):
            customer.reactivate()

    def test_cannot_suspend_inactive_customer(self):
        customer = _customer()
        customer.deactivate()
        with pytest.raises(ValidationError):
            customer.suspend()

    def test_cannot_block_twice(self):
        customer = _customer()
        customer.block()
        with pytest.raises(ValidationError):
            customer.block()


class TestPurchaseStatistics:
    def test_record_first_order(self):
        customer = _customer()
        customer.record_order(amount=8600, product_ids=["medialunas-12", "torta-rogel"], categories=["facturas"])

        assert customer.total_orders == 1
        assert customer.total_spent == 8600.0
        assert customer.first_order_at is not None
        assert customer.last_order_at == customer.first_order_at
        assert customer.favourite_product_list() == ["medialunas-12", "torta-rogel"]
        assert customer.favourite_category_list() == ["facturas"]

        event = customer._events[-1]
        assert isinstance(event, CustomerOrderRecorded)
        assert event.total_orders == 1

    def test_average_order_value(self):
        customer = _customer()
        assert customer.average_order_value == 0.0

        customer.record_order(amount=1000, product_ids=[], categories=[])
        customer.record_order(amount=2001, product_ids=[], categories=[])
        assert customer.total_spent == 3001.0
        assert customer.average_order_value == 1500.5

    def test_recent_favourites_come_first_without_duplicates(self):
        customer = _customer()
        customer.record_order(amount=100, product_ids=["p1", "p2"], categories=["panes", None])
        customer.record_order(amount=100, product_ids=["p3", "p1"], categories=["tortas"])

        assert customer.favourite_product_list() == ["p3", "p1", "p2"]
        assert customer.favourite_category_list() == ["tortas", "panes"]

    def test_favourites_are_capped(self):
        customer = _customer()
        customer.record_order(amount=100, product_ids=[f"p{i}" for i in range(FAVOURITES_LIMIT + 5)], categories=[])
        assert len(customer.favourite_product_list()) == FAVOURITES_LIMIT
