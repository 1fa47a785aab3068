"""Tests for Order API endpoints."""

import pytest


class TestListOrders:
    """Tests for GET /orders endpoint."""

    def test_list_orders_empty(self, auth_client):
        """Test listing orders when none exist."""
        response = auth_client.get("/orders")
        assert response.status_code == 200
        assert response.json() == {"data": []}

    @pytest.mark.asyncio
    async def test_list_orders_camel_case(self, auth_client, placed_order):
        """Orders are returned in camelCase with joined descriptors."""
        response = auth_client.get("/orders")
        assert response.status_code == 200
        order = response.json()["data"][0]
        assert order["id"] == placed_order.id
        assert order["orderNumber"] == placed_order.order_number
        assert order["orderStatus"] == "processing"
        assert order["isDelivered"] is False
        assert order["warehouseAllocationStatus"] == "unallocated"
        assert order["allocatedWarehouse"] is None
        assert order["shippingAddress"]["fullName"] == "Asha Rao"
        assert order["items"][0]["product"]["name"] == "Linen Shirt"
        assert order["items"][0]["variant"]["attributes"] == {"size": "M"}
        assert order["items"][0]["priceAtOrder"] == "25.00"
        assert order["totalAmount"] == "59.50"

    @pytest.mark.asyncio
    async def test_list_orders_search(self, auth_client, placed_order):
        """Search is a case-insensitive substring of name or phone."""
        assert len(auth_client.get("/orders", params={"search": "asha"}).json()["data"]) == 1
        assert len(auth_client.get("/orders", params={"search": "3210"}).json()["data"]) == 1
        assert auth_client.get("/orders", params={"search": "nobody"}).json()["data"] == []

    @pytest.mark.asyncio
    async def test_list_orders_same_day(self, auth_client, placed_order):
        """A same-day range includes orders created that day."""
        response = auth_client.get(
            "/orders", params={"startDate": "2024-03-10", "endDate": "2024-03-10"}
        )
        assert response.status_code == 200
        assert len(response.json()["data"]) == 1

    def test_list_orders_inverted_range(self, auth_client):
        """startDate after endDate is a 400."""
        response = auth_client.get(
            "/orders", params={"startDate": "2024-03-11", "endDate": "2024-03-10"}
        )
        assert response.status_code == 400
        assert response.json()["kind"] == "invalid_argument"

    def test_list_orders_invalid_status(self, auth_client):
        """Unknown status filter is a 400."""
        response = auth_client.get("/orders", params={"status": "lost"})
        assert response.status_code == 400
        assert response.json()["errorCode"] == "INVALID_ARGUMENT"


class TestGetOrder:
    """Tests for GET /orders/{id} endpoint."""

    @pytest.mark.asyncio
    async def test_get_order_success(self, auth_client, placed_order):
        """Test getting order details."""
        response = auth_client.get(f"/orders/{placed_order.id}")
        assert response.status_code == 200
        data = response.json()
        assert data["id"] == placed_order.id
        assert len(data["items"]) == 2
        assert len(data["statusHistory"]) == 1
        assert data["version"] == 1

    def test_get_order_not_found(self, auth_client):
        """Unknown order returns the error envelope with 404."""
        response = auth_client.get("/orders/nonexistent", headers={"X-Request-ID": "req-42"})
        assert response.status_code == 404
        data = response.json()
        assert data["kind"] == "not_found"
        assert data["errorCode"] == "ORDER_NOT_FOUND"
        assert data["requestId"] == "req-42"
        assert "message" in data


class TestUpdateOrderStatus:
    """Tests for PATCH /orders/{id}/status endpoint."""

    @pytest.mark.asyncio
    async def test_update_status(self, auth_client, placed_order):
        """Staff can set any status."""
        response = auth_client.patch(
            f"/orders/{placed_order.id}/status", json={"status": "shipped"}
        )
        assert response.status_code == 200
        data = response.json()
        assert data["orderStatus"] == "shipped"
        assert data["statusHistory"][-1]["actor"] == "staff-1"

    @pytest.mark.asyncio
    async def test_update_status_invalid_value(self, auth_client, placed_order):
        """Unknown status is a 400 and the order is unchanged."""
        response = auth_client.patch(f"/orders/{placed_order.id}/status", json={"status": "lost"})
        assert response.status_code == 400
        assert response.json()["kind"] == "invalid_argument"
        assert auth_client.get(f"/orders/{placed_order.id}").json()["orderStatus"] == "processing"

    @pytest.mark.asyncio
    async def test_update_status_missing_value(self, auth_client, placed_order):
        """Missing status is a 400."""
        response = auth_client.patch(f"/orders/{placed_order.id}/status", json={})
        assert response.status_code == 400

    def test_update_status_not_found(self, auth_client):
        """Unknown order is a 404."""
        response = auth_client.patch("/orders/missing/status", json={"status": "shipped"})
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_delivered_order_is_409(self, auth_client, delivered_order):
        """A delivered order cannot move to another status."""
        response = auth_client.patch(
            f"/orders/{delivered_order.id}/status", json={"status": "processing"}
        )
        assert response.status_code == 409
        data = response.json()
        assert data["kind"] == "invalid_state"
        assert data["errorCode"] == "ORDER_ALREADY_DELIVERED"


class TestMarkDelivered:
    """Tests for PATCH /orders/{id}/deliver endpoint."""

    @pytest.mark.asyncio
    async def test_deliver(self, auth_client, placed_order):
        """Delivery sets status, flag and timestamp."""
        response = auth_client.patch(f"/orders/{placed_order.id}/deliver")
        assert response.status_code == 200
        data = response.json()
        assert data["orderStatus"] == "delivered"
        assert data["isDelivered"] is True
        assert data["deliveredAt"] is not None

    @pytest.mark.asyncio
    async def test_deliver_twice(self, auth_client, placed_order):
        """Repeating delivery succeeds and stays delivered."""
        auth_client.patch(f"/orders/{placed_order.id}/deliver")
        response = auth_client.patch(f"/orders/{placed_order.id}/deliver")
        assert response.status_code == 200
        data = response.json()
        assert data["orderStatus"] == "delivered"
        assert data["statusHistory"][-1]["reason"] == "Delivery re-confirmed"


class TestAllocateWarehouse:
    """Tests for PUT /orders/allocate-warehouse/{id} endpoint."""

    @pytest.mark.asyncio
    async def test_allocate(self, auth_client, placed_order):
        """Allocation records the calling actor."""
        response = auth_client.put(
            f"/orders/allocate-warehouse/{placed_order.id}", json={"warehouseId": "wh-north"}
        )
        assert response.status_code == 200
        data = response.json()
        assert data["allocatedWarehouse"] == "wh-north"
        assert data["allocatedBy"] == "staff-1"
        assert data["warehouseAllocationStatus"] == "allocated"
        assert data["allocatedAt"] is not None

        listed = auth_client.get("/orders", params={"warehouseId": "wh-north"}).json()["data"]
        assert [o["id"] for o in listed] == [placed_order.id]
        assert listed[0]["warehouse"]["name"] == "North Hub"

    @pytest.mark.asyncio
    async def test_allocate_requires_actor(self, client, auth_headers, placed_order):
        """Without X-Actor-ID the allocation is a 400."""
        headers = {"Authorization": auth_headers["Authorization"]}
        response = client.put(
            f"/orders/allocate-warehouse/{placed_order.id}",
            json={"warehouseId": "wh-north"},
            headers=headers,
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_allocate_missing_warehouse_id(self, auth_client, placed_order):
        """Missing warehouseId is a 400."""
        response = auth_client.put(f"/orders/allocate-warehouse/{placed_order.id}", json={})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_allocate_unknown_warehouse(self, auth_client, placed_order):
        """Unknown warehouse is a 404."""
        response = auth_client.put(
            f"/orders/allocate-warehouse/{placed_order.id}", json={"warehouseId": "wh-x"}
        )
        assert response.status_code == 404
        assert response.json()["errorCode"] == "WAREHOUSE_NOT_FOUND"

    def test_allocate_unknown_order(self, auth_client):
        """Unknown order is a 404."""
        response = auth_client.put(
            "/orders/allocate-warehouse/missing", json={"warehouseId": "wh-north"}
        )
        assert response.status_code == 404


class TestDeleteOrder:
    """Tests for DELETE /orders/{id} endpoint."""

    @pytest.mark.asyncio
    async def test_delete(self, auth_client, placed_order):
        """Deleted orders are gone."""
        response = auth_client.delete(f"/orders/{placed_order.id}")
        assert response.status_code == 200
        assert response.json() == {"id": placed_order.id, "deleted": True, "orphanedReturns": 0}
        assert auth_client.get(f"/orders/{placed_order.id}").status_code == 404

    def test_delete_not_found(self, auth_client):
        """Unknown order is a 404."""
        assert auth_client.delete("/orders/missing").status_code == 404
