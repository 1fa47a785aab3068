"""Shared fixtures for E2E tests.

Scenarios run over HTTP against the in-memory storage, with a staff
client and a customer client sharing one API key.
"""

import pytest
from fastapi.testclient import TestClient

from backoffice.api.middleware import ACTOR_HEADER
from backoffice.domain.entities import Warehouse
from backoffice.infrastructure.config import settings
from backoffice.main import app


# ============================================================================
# Client Fixtures
# ============================================================================


@pytest.fixture
def staff_client() -> TestClient:
    """Client acting as staff1."""
    return TestClient(
        app,
        headers={
            "Authorization": f"Bearer {settings.backoffice_api_key}",
            ACTOR_HEADER: "staff1",
            "X-Request-ID": "e2e-test-request",
        },
    )


@pytest.fixture
def customer_client() -> TestClient:
    """Client acting as the customer cust-1."""
    return TestClient(
        app,
        headers={
            "Authorization": f"Bearer {settings.backoffice_api_key}",
            ACTOR_HEADER: "cust-1",
            "X-Request-ID": "e2e-test-request",
        },
    )


# ============================================================================
# Sample Data Fixtures
# ============================================================================


@pytest.fixture
async def warehouse(storage) -> Warehouse:
    """Register warehouse WH1 in the directory."""
    wh = Warehouse(id="WH1", name="Warehouse One")
    await storage.warehouses.add(wh)
    return wh


@pytest.fixture
async def pending_order(order_service, line_items, shipping_address):
    """An order handed over by checkout in status pending."""
    result = await order_service.place_order(
        items=line_items,
        shipping_address=shipping_address,
        user_id="cust-1",
        status="pending",
    )
    assert result.success
    return result.order


@pytest.fixture
def open_return(customer_client, staff_client, pending_order):
    """Deliver the order over HTTP and open a return; yields the return id."""

    def _open() -> str:
        staff_client.patch(f"/orders/{pending_order.id}/deliver")
        response = customer_client.post(
            "/returns",
            json={
                "orderId": pending_order.id,
                "productId": "prod-shirt",
                "variantId": "var-shirt-m",
                "quantity": 1,
                "reason": "Does not fit",
            },
        )
        assert response.status_code == 201
        return response.json()["id"]

    return _open
