from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from modules.clients.models import Client
from modules.orders.models import Order, OrderActivity
from modules.storage.models import StorageDrawer

User = get_user_model()


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


@pytest.fixture()
def clerk():
    return User.objects.create_user(username="clerk", password="clerk-pass-123")


@pytest.fixture()
def auth_client(clerk):
    """APIClient with a force-authenticated Django user."""
    client = APIClient()
    client.force_authenticate(user=clerk)
    return client


@pytest.fixture()
def client_record():
    return Client.objects.create(name="Aicha Mint Ahmed", phone="+22236001001")


@pytest.fixture()
def other_client_record():
    return Client.objects.create(name="Mohamed Ould Sidi", phone="+22236001002")


@pytest.fixture()
def make_order(client_record):
    """Factory for orders inserted directly, bypassing the service."""
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        data = {
            "local_order_id": f"FCD{2000 + counter['n']}",
            "client": client_record,
            "price": Decimal("100"),
            "price_in_mru": Decimal("1000"),
            "commission_rate": Decimal("10"),
            "commission": Decimal("100"),
            "quantity": 1,
        }
        data.update(overrides)
        order = Order.objects.create(**data)
        OrderActivity.objects.create(order=order, activity="Order Created", user="clerk")
        return order

    return _make


@pytest.fixture()
def drawers():
    return [
        StorageDrawer.objects.create(name="A", rows=1, columns=5, capacity=5, position=0),
        StorageDrawer.objects.create(name="B", rows=1, columns=5, capacity=5, position=1),
    ]
