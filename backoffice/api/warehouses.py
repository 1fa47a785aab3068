"""Warehouse directory endpoints (read-only).

- GET /warehouses - list warehouses
- GET /warehouses/{id} - one warehouse
"""

from fastapi import APIRouter, HTTPException, status

from backoffice.api.schemas import (
    ErrorResponse,
    GeoPointSchema,
    WarehouseAddressSchema,
    WarehouseResponse,
    WarehousesListResponse,
)
from backoffice.domain.entities import Warehouse
from backoffice.infrastructure.storage import get_storage

router = APIRouter(prefix="/warehouses", tags=["Warehouses"])


def warehouse_to_response(warehouse: Warehouse) -> WarehouseResponse:
    """Convert a Warehouse entity to WarehouseResponse."""
    address = None
    if warehouse.address:
        address = WarehouseAddressSchema(
            street=warehouse.address.street,
            city=warehouse.address.city,
            state=warehouse.address.state,
            pin_code=warehouse.address.pin_code,
        )
    location = None
    if warehouse.location:
        location = GeoPointSchema(lat=warehouse.location.lat, lng=warehouse.location.lng)
    return WarehouseResponse(
        id=warehouse.id,
        name=warehouse.name,
        address=address,
        location=location,
        status=warehouse.status.value,
    )


@router.get("", response_model=WarehousesListResponse)
async def list_warehouses() -> WarehousesListResponse:
    """List all warehouses in the directory."""
    warehouses = await get_storage().warehouses.list_all()
    return WarehousesListResponse(data=[warehouse_to_response(w) for w in warehouses])


@router.get(
    "/{warehouse_id}",
    response_model=WarehouseResponse,
    responses={404: {"model": ErrorResponse, "description": "Warehouse not found"}},
)
async def get_warehouse(warehouse_id: str) -> WarehouseResponse:
    """Get one warehouse."""
    warehouse = await get_storage().warehouses.get(warehouse_id)
    if warehouse is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={
                "kind": "not_found",
                "error_code": "WAREHOUSE_NOT_FOUND",
                "message": f"Warehouse not found: {warehouse_id}",
            },
        )
    return warehouse_to_response(warehouse)
