"""Tests for the allocation coordinator."""

import pytest

from backoffice.domain import AllocationStatus, ErrorKind, OrderStatus


@pytest.fixture
async def placed(order_service, line_items, shipping_address):
    result = await order_service.place_order(items=line_items, shipping_address=shipping_address)
    return result.order


class TestAllocate:
    """Tests for AllocationService.allocate."""

    async def test_allocate(self, allocation_service, storage, clock, placed) -> None:
        """Allocation persists warehouse, actor and time."""
        result = await allocation_service.allocate(placed.id, "wh-north", "staff-1")
        assert result.success
        assert result.previous_warehouse_id is None

        stored = await storage.orders.get(placed.id)
        assert stored.allocation_status == AllocationStatus.ALLOCATED
        assert stored.allocated_warehouse_id == "wh-north"
        assert stored.allocated_by == "staff-1"
        assert stored.allocated_at == clock()
        assert stored.status == OrderStatus.PROCESSING

    async def test_reallocate_overwrites(self, allocation_service, storage, clock, placed) -> None:
        """Re-allocation replaces the binding and reports the previous one."""
        await allocation_service.allocate(placed.id, "wh-north", "staff-1")
        clock.advance(minutes=30)
        result = await allocation_service.allocate(placed.id, "wh-south", "staff-2")
        assert result.previous_warehouse_id == "wh-north"

        stored = await storage.orders.get(placed.id)
        assert stored.allocated_warehouse_id == "wh-south"
        assert stored.allocated_by == "staff-2"
        assert stored.allocated_at == clock()

    async def test_unknown_order(self, allocation_service) -> None:
        """Unknown order is NOT_FOUND."""
        result = await allocation_service.allocate("missing", "wh-north", "staff-1")
        assert result.error_kind == ErrorKind.NOT_FOUND
        assert result.error_code == "ORDER_NOT_FOUND"

    async def test_unknown_warehouse(self, allocation_service, storage, placed) -> None:
        """Unknown warehouse is NOT_FOUND and the order stays unallocated."""
        result = await allocation_service.allocate(placed.id, "wh-atlantis", "staff-1")
        assert result.error_kind == ErrorKind.NOT_FOUND
        assert result.error_code == "WAREHOUSE_NOT_FOUND"
        stored = await storage.orders.get(placed.id)
        assert stored.allocation is None

    @pytest.mark.parametrize("warehouse_id,actor", [(None, "staff-1"), ("wh-north", None)])
    async def test_missing_ids(self, allocation_service, placed, warehouse_id, actor) -> None:
        """Missing warehouse or actor is INVALID_ARGUMENT."""
        result = await allocation_service.allocate(placed.id, warehouse_id, actor)
        assert result.error_kind == ErrorKind.INVALID_ARGUMENT

    async def test_allocate_delivered_order(self, allocation_service, order_service, placed) -> None:
        """Delivered orders can still be allocated."""
        await order_service.mark_delivered(placed.id)
        result = await allocation_service.allocate(placed.id, "wh-south", "staff-1")
        assert result.success
        assert result.order.status == OrderStatus.DELIVERED
