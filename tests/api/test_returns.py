"""Tests for Return API endpoints."""

from datetime import datetime, timezone

import pytest


def _open(client, order_id, product_id="prod-mug", **extra):
    body = {"orderId": order_id, "productId": product_id, "quantity": 1, **extra}
    return client.post("/returns", json=body)


class TestOpenReturn:
    """Tests for POST /returns endpoint."""

    @pytest.mark.asyncio
    async def test_open_return(self, customer_client, delivered_order):
        """Customers open returns for delivered order lines."""
        response = _open(customer_client, delivered_order.id, reason="Chipped rim")
        assert response.status_code == 201
        data = response.json()
        assert data["orderId"] == delivered_order.id
        assert data["userId"] == "cust-1"
        assert data["status"] == "pending"
        assert data["refundStatus"] == "pending"
        assert data["refundAmount"] == "9.50"
        assert data["item"]["priceAtOrder"] == "9.50"
        assert data["pickupScheduled"] is False
        assert data["processedAt"] is None

    @pytest.mark.asyncio
    async def test_open_return_undelivered(self, customer_client, placed_order):
        """Undelivered orders give 409."""
        response = _open(customer_client, placed_order.id)
        assert response.status_code == 409
        assert response.json()["errorCode"] == "ORDER_NOT_DELIVERED"

    @pytest.mark.asyncio
    async def test_open_return_bad_quantity(self, customer_client, delivered_order):
        """Quantity above the ordered amount gives 400."""
        response = _open(customer_client, delivered_order.id, quantity=2)
        assert response.status_code == 400

    def test_open_return_missing_fields(self, customer_client):
        """Body validation errors use the envelope with 400."""
        response = customer_client.post("/returns", json={"quantity": 1})
        assert response.status_code == 400
        data = response.json()
        assert data["errorCode"] == "VALIDATION_ERROR"
        assert data["kind"] == "invalid_argument"

    def test_open_return_unknown_order(self, customer_client):
        """Unknown order gives 404."""
        assert _open(customer_client, "missing").status_code == 404


class TestReturnWorkflow:
    """Tests for staff PATCH endpoints."""

    @pytest.fixture
    def return_id(self, customer_client, delivered_order):
        return _open(customer_client, delivered_order.id).json()["id"]

    @pytest.mark.asyncio
    async def test_approve_then_complete(self, auth_client, return_id):
        """Approve sets processedAt; complete closes the return."""
        response = auth_client.patch(f"/returns/{return_id}/status", json={"status": "approved"})
        assert response.status_code == 200
        assert response.json()["status"] == "approved"
        assert response.json()["processedAt"] is not None

        response = auth_client.patch(f"/returns/{return_id}/complete")
        assert response.status_code == 200
        assert response.json()["status"] == "completed"

    @pytest.mark.asyncio
    async def test_complete_pending_is_409(self, auth_client, return_id):
        """Completing a pending return is a 409 and leaves it pending."""
        response = auth_client.patch(f"/returns/{return_id}/complete")
        assert response.status_code == 409
        assert response.json()["kind"] == "invalid_state"
        assert auth_client.get(f"/returns/{return_id}").json()["status"] == "pending"

    @pytest.mark.asyncio
    async def test_complete_rejected_is_409(self, auth_client, return_id):
        """Completing a rejected return is a 409 and leaves it rejected."""
        decided = auth_client.patch(
            f"/returns/{return_id}/status", json={"status": "rejected"}
        ).json()
        response = auth_client.patch(f"/returns/{return_id}/complete")
        assert response.status_code == 409
        assert response.json()["errorCode"] == "RETURN_NOT_APPROVED"
        after = auth_client.get(f"/returns/{return_id}").json()
        assert after["status"] == "rejected"
        assert after["processedAt"] == decided["processedAt"]

    @pytest.mark.asyncio
    async def test_invalid_status_is_400(self, auth_client, return_id):
        """Unknown decision is a 400."""
        response = auth_client.patch(f"/returns/{return_id}/status", json={"status": "done"})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_second_decision_is_409(self, auth_client, return_id):
        """A rejected return cannot be approved."""
        auth_client.patch(f"/returns/{return_id}/status", json={"status": "rejected"})
        response = auth_client.patch(f"/returns/{return_id}/status", json={"status": "approved"})
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_refund(self, auth_client, return_id):
        """Refund status is independent of approval."""
        response = auth_client.patch(
            f"/returns/{return_id}/refund", json={"refundStatus": "refunded"}
        )
        assert response.status_code == 200
        data = response.json()
        assert data["refundStatus"] == "refunded"
        assert data["refundedAt"] is not None
        assert data["status"] == "pending"

    @pytest.mark.asyncio
    async def test_refund_invalid(self, auth_client, return_id):
        """Unknown refund status is a 400."""
        response = auth_client.patch(f"/returns/{return_id}/refund", json={"refundStatus": "x"})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_pickup(self, auth_client, return_id):
        """Pickup fields update partially."""
        response = auth_client.patch(
            f"/returns/{return_id}/pickup",
            json={"pickupScheduled": True, "pickupDate": "2024-03-12T10:00:00+00:00"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["pickupScheduled"] is True
        assert data["pickupDate"].startswith("2024-03-12T10:00:00")
        assert data["pickupStatus"] is None

        response = auth_client.patch(
            f"/returns/{return_id}/pickup", json={"pickupStatus": "picked_up"}
        )
        data = response.json()
        assert data["pickupScheduled"] is True
        assert data["pickupStatus"] == "picked_up"

    @pytest.mark.asyncio
    async def test_pickup_bad_date(self, auth_client, return_id):
        """Unparseable pickup date is a 400 validation error; nothing changes."""
        response = auth_client.patch(
            f"/returns/{return_id}/pickup",
            json={"pickupScheduled": True, "pickupDate": "whenever"},
        )
        assert response.status_code == 400
        assert response.json()["errorCode"] == "VALIDATION_ERROR"
        assert auth_client.get(f"/returns/{return_id}").json()["pickupScheduled"] is False

    @pytest.mark.asyncio
    async def test_bad_processed_at(self, auth_client, return_id):
        """Unparseable processedAt is a 400 and the return stays pending."""
        response = auth_client.patch(
            f"/returns/{return_id}/status",
            json={"status": "approved", "processedAt": "yesterday-ish"},
        )
        assert response.status_code == 400
        assert response.json()["errorCode"] == "VALIDATION_ERROR"
        assert auth_client.get(f"/returns/{return_id}").json()["status"] == "pending"

    @pytest.mark.asyncio
    async def test_naive_processed_at_is_utc(self, auth_client, return_id):
        """A processedAt without offset is taken as UTC."""
        response = auth_client.patch(
            f"/returns/{return_id}/status",
            json={"status": "approved", "processedAt": "2024-03-11T08:30:00"},
        )
        assert response.status_code == 200
        stamp = datetime.fromisoformat(response.json()["processedAt"].replace("Z", "+00:00"))
        assert stamp == datetime(2024, 3, 11, 8, 30, tzinfo=timezone.utc)

    def test_unknown_return(self, auth_client):
        """Unknown return is a 404 on every staff endpoint."""
        assert auth_client.get("/returns/missing").status_code == 404
        assert auth_client.patch("/returns/missing/complete").status_code == 404
        assert (
            auth_client.patch("/returns/missing/status", json={"status": "approved"}).status_code
            == 404
        )


class TestCancelReturn:
    """Tests for DELETE /returns/{id} endpoint."""

    @pytest.mark.asyncio
    async def test_cancel(self, customer_client, delivered_order):
        """The requester can withdraw a pending return."""
        return_id = _open(customer_client, delivered_order.id).json()["id"]
        response = customer_client.delete(f"/returns/{return_id}")
        assert response.status_code == 200
        assert response.json() == {"id": return_id, "cancelled": True}
        assert customer_client.get(f"/returns/{return_id}").status_code == 404

    @pytest.mark.asyncio
    async def test_cancel_other_user(self, customer_client, auth_client, delivered_order):
        """Another caller sees 404."""
        return_id = _open(customer_client, delivered_order.id).json()["id"]
        assert auth_client.delete(f"/returns/{return_id}").status_code == 404

    @pytest.mark.asyncio
    async def test_cancel_after_approval(self, customer_client, auth_client, delivered_order):
        """Approved returns cannot be withdrawn."""
        return_id = _open(customer_client, delivered_order.id).json()["id"]
        auth_client.patch(f"/returns/{return_id}/status", json={"status": "approved"})
        assert customer_client.delete(f"/returns/{return_id}").status_code == 409


class TestListReturns:
    """Tests for GET /returns endpoint."""

    def test_list_empty(self, auth_client):
        """Empty list carries paging metadata."""
        response = auth_client.get("/returns")
        assert response.status_code == 200
        assert response.json() == {
            "data": [],
            "meta": {"total": 0, "page": 1, "limit": 10, "totalPages": 0},
        }

    @pytest.mark.asyncio
    async def test_list_paging(self, auth_client, customer_client, delivered_order):
        """Pages are sized by limit and the meta reports totals."""
        for _ in range(3):
            _open(customer_client, delivered_order.id)
        response = auth_client.get("/returns", params={"page": 2, "limit": 2})
        data = response.json()
        assert len(data["data"]) == 1
        assert data["meta"] == {"total": 3, "page": 2, "limit": 2, "totalPages": 2}

    @pytest.mark.asyncio
    async def test_list_joins_order(self, auth_client, customer_client, delivered_order):
        """Listed returns include the order summary and product."""
        _open(customer_client, delivered_order.id)
        item = auth_client.get("/returns").json()["data"][0]
        assert item["order"]["id"] == delivered_order.id
        assert item["order"]["isDelivered"] is True
        assert item["item"]["product"]["name"] == "Stoneware Mug"

    @pytest.mark.asyncio
    async def test_list_by_warehouse(self, auth_client, customer_client, delivered_order):
        """warehouseId filters through the owning order's allocation."""
        _open(customer_client, delivered_order.id)
        auth_client.put(
            f"/orders/allocate-warehouse/{delivered_order.id}", json={"warehouseId": "wh-south"}
        )
        south = auth_client.get("/returns", params={"warehouseId": "wh-south"}).json()
        north = auth_client.get("/returns", params={"warehouseId": "wh-north"}).json()
        assert south["meta"]["total"] == 1
        assert north["meta"]["total"] == 0

    def test_list_limit_too_large(self, auth_client):
        """A limit above the maximum is a 400."""
        response = auth_client.get("/returns", params={"limit": 1000})
        assert response.status_code == 400

    def test_list_bad_page(self, auth_client):
        """page=0 is a 400."""
        assert auth_client.get("/returns", params={"page": 0}).status_code == 400

    def test_list_invalid_filter(self, auth_client):
        """Unknown refundStatus is a 400."""
        assert auth_client.get("/returns", params={"refundStatus": "x"}).status_code == 400

    @pytest.mark.asyncio
    async def test_orphaned_return_listed_with_null_order(
        self, auth_client, customer_client, delivered_order
    ):
        """Returns survive their order's deletion with order=null."""
        return_id = _open(customer_client, delivered_order.id).json()["id"]
        deleted = auth_client.delete(f"/orders/{delivered_order.id}").json()
        assert deleted["orphanedReturns"] == 1
        response = auth_client.get(f"/returns/{return_id}")
        assert response.status_code == 200
        assert response.json()["order"] is None
