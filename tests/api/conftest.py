"""Shared fixtures for API tests."""

import pytest
from fastapi.testclient import TestClient

from backoffice.api.middleware import ACTOR_HEADER
from backoffice.infrastructure.config import settings
from backoffice.main import app


@pytest.fixture
def client() -> TestClient:
    """Create test client without authentication."""
    return TestClient(app)


@pytest.fixture
def auth_headers() -> dict[str, str]:
    """Get authentication headers for a staff member."""
    return {
        "Authorization": f"Bearer {settings.backoffice_api_key}",
        ACTOR_HEADER: "staff-1",
    }


@pytest.fixture
def auth_client(auth_headers) -> TestClient:
    """Create test client authenticated as staff."""
    return TestClient(app, headers=auth_headers)


@pytest.fixture
def customer_client() -> TestClient:
    """Create test client authenticated as the customer cust-1."""
    return TestClient(
        app,
        headers={
            "Authorization": f"Bearer {settings.backoffice_api_key}",
            ACTOR_HEADER: "cust-1",
        },
    )


@pytest.fixture
async def placed_order(order_service, line_items, shipping_address):
    """An order placed through the service."""
    result = await order_service.place_order(
        items=line_items, shipping_address=shipping_address, user_id="cust-1"
    )
    assert result.success
    return result.order


@pytest.fixture
async def delivered_order(order_service, placed_order):
    """A delivered order."""
    result = await order_service.mark_delivered(placed_order.id, actor="staff-1")
    assert result.success
    return result.order
