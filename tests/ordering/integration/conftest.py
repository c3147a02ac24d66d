import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from ordering.api import install_ordering_api
from ordering.config import Settings
from payments.gateway import FakeGateway


@pytest.fixture()
def gateway():
    return FakeGateway()


@pytest.fixture()
def client(gateway):
    app = FastAPI()
    install_ordering_api(app, settings=Settings(base_url="https://panaderia.test"), gateway=gateway)
    return TestClient(app)


@pytest.fixture()
def customer_id(client):
    response = client.post("/customers", json={"name": "Ana Pérez", "email": "ana@example.com"})
    assert response.status_code == 201
    return response.json()["customer_id"]
