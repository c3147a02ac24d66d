"""Shared BDD fixtures and step definitions for the Ordering domain."""

import pytest
from ordering.config import Settings
from ordering.order.payment import load_order
from payments.gateway import FakeGateway
from pytest_bdd import parsers, then


@pytest.fixture()
def error():
    """Container for the domain error raised by a When step."""
    return {"exc": None}


@pytest.fixture()
def gateway():
    return FakeGateway()


@pytest.fixture()
def settings():
    return Settings(base_url="https://panaderia.test")


@then(parsers.cfparse('it fails with "{code}"'))
def fails_with(error, code):
    assert error["exc"] is not None, "expected the step to fail"
    assert error["exc"].code == code


@then(parsers.cfparse('the order is "{status}"'))
def order_has_status(order_id, status):
    assert load_order(order_id).status == status
