"""Tests for warehouse directory endpoints."""

from fastapi.testclient import TestClient


class TestWarehouses:
    """Tests for GET /warehouses."""

    def test_list_warehouses(self, auth_client: TestClient) -> None:
        """All warehouses are listed by name."""
        response = auth_client.get("/warehouses")
        assert response.status_code == 200
        names = [w["name"] for w in response.json()["data"]]
        assert names == ["North Hub", "South Hub"]

    def test_get_warehouse(self, auth_client: TestClient) -> None:
        """A warehouse carries address, location and status."""
        response = auth_client.get("/warehouses/wh-north")
        assert response.status_code == 200
        data = response.json()
        assert data["address"]["pinCode"] == "411001"
        assert data["location"] == {"lat": 18.52, "lng": 73.85}
        assert data["status"] == "active"

    def test_get_unknown_warehouse(self, auth_client: TestClient) -> None:
        """Unknown warehouse is a 404."""
        response = auth_client.get("/warehouses/wh-x")
        assert response.status_code == 404
        assert response.json()["errorCode"] == "WAREHOUSE_NOT_FOUND"
