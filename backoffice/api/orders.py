"""Order API endpoints.

Provides endpoints for the order fulfillment workflow:
- GET /orders - list orders (search, status, date range, warehouse)
- GET /orders/{id} - order details joined with descriptors
- PATCH /orders/{id}/status - set order status
- PATCH /orders/{id}/deliver - confirm delivery
- PUT /orders/allocate-warehouse/{id} - allocate to a warehouse
- DELETE /orders/{id} - hard delete
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from backoffice.api.errors import raise_for_result
from backoffice.api.schemas import (
    AddressSchema,
    AllocateWarehouseRequest,
    ErrorResponse,
    MapLocationSchema,
    OrderDeleteResponse,
    OrderItemSchema,
    OrderResponse,
    OrdersListResponse,
    OrderStatusUpdateRequest,
    ProductSummarySchema,
    StatusHistorySchema,
    VariantSummarySchema,
)
from backoffice.api.warehouses import warehouse_to_response
from backoffice.application.allocation_service import (
    AllocationService,
    get_allocation_service,
)
from backoffice.application.order_service import (
    OrderService,
    OrderView,
    get_order_service,
)
from backoffice.domain.entities import Order
from backoffice.domain.value_objects import (
    ProductDescriptor,
    ShippingAddress,
    VariantDescriptor,
)

router = APIRouter(prefix="/orders", tags=["Orders"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid argument"},
    404: {"model": ErrorResponse, "description": "Order not found"},
    409: {"model": ErrorResponse, "description": "Invalid state"},
}


# ============================================================================
# Dependencies
# ============================================================================


def get_service(request: Request) -> OrderService:
    """Get order service with request ID."""
    request_id = getattr(request.state, "request_id", None)
    return get_order_service(request_id=request_id)


def get_allocator(request: Request) -> AllocationService:
    """Get allocation service with request ID."""
    request_id = getattr(request.state, "request_id", None)
    return get_allocation_service(request_id=request_id)


def get_actor(request: Request) -> str | None:
    """Acting identity of the authenticated caller."""
    return getattr(request.state, "actor_id", None)


# ============================================================================
# Converters
# ============================================================================


def address_to_schema(address: ShippingAddress | None) -> AddressSchema | None:
    if address is None:
        return None
    location = None
    if address.map_location:
        location = MapLocationSchema(
            latitude=address.map_location.latitude,
            longitude=address.map_location.longitude,
        )
    return AddressSchema(
        full_name=address.full_name,
        phone=address.phone,
        address_line1=address.address_line1,
        address_line2=address.address_line2,
        city=address.city,
        state=address.state,
        postal_code=address.postal_code,
        country=address.country,
        landmark=address.landmark,
        district=address.district,
        map_location=location,
    )


def product_to_schema(product: ProductDescriptor | None) -> ProductSummarySchema | None:
    if product is None:
        return None
    return ProductSummarySchema(id=product.id, name=product.name, sku=product.sku)


def variant_to_schema(variant: VariantDescriptor | None) -> VariantSummarySchema | None:
    if variant is None:
        return None
    return VariantSummarySchema(id=variant.id, sku=variant.sku, attributes=variant.attribute_map)


def order_to_response(order: Order, view: OrderView | None = None) -> OrderResponse:
    """Convert an Order (optionally joined) to OrderResponse."""
    products = view.products if view else {}
    variants = view.variants if view else {}

    items = [
        OrderItemSchema(
            product_id=item.product_id,
            variant_id=item.variant_id,
            quantity=item.quantity,
            price_at_order=item.unit_price,
            total_price=item.total_price,
            product=product_to_schema(products.get(item.product_id)),
            variant=variant_to_schema(variants.get(item.variant_id)) if item.variant_id else None,
        )
        for item in order.items
    ]

    status_history = [
        StatusHistorySchema(
            from_status=entry.from_status,
            to_status=entry.to_status,
            actor=entry.actor,
            reason=entry.reason,
            at=entry.at,
        )
        for entry in order.status_history
    ]

    return OrderResponse(
        id=order.id,
        order_number=order.order_number,
        user_id=order.user_id,
        items=items,
        shipping_address=address_to_schema(order.shipping_address),
        billing_address=address_to_schema(order.billing_address),
        payment_method=order.payment_method.value,
        payment_status=order.payment_status.value,
        total_amount=order.total_amount,
        final_amount=order.final_amount,
        order_status=order.status.value,
        is_delivered=order.is_delivered,
        delivered_at=order.delivered_at,
        allocated_warehouse=order.allocated_warehouse_id,
        warehouse_allocation_status=order.allocation_status.value,
        allocated_by=order.allocated_by,
        allocated_at=order.allocated_at,
        warehouse=warehouse_to_response(view.warehouse) if view and view.warehouse else None,
        status_history=status_history,
        version=order.version,
        created_at=order.created_at,
        updated_at=order.updated_at,
    )


# ============================================================================
# Endpoints
# ============================================================================


@router.get("", response_model=OrdersListResponse, responses={400: ERROR_RESPONSES[400]})
async def list_orders(
    service: Annotated[OrderService, Depends(get_service)],
    search: Annotated[str | None, Query(description="Name or phone substring")] = None,
    status_filter: Annotated[str | None, Query(alias="status")] = None,
    start_date: Annotated[str | None, Query(alias="startDate")] = None,
    end_date: Annotated[str | None, Query(alias="endDate")] = None,
    warehouse_id: Annotated[str | None, Query(alias="warehouseId")] = None,
) -> OrdersListResponse:
    """List orders, newest first.

    Date bounds are inclusive whole days in the business timezone.
    """
    result = await service.list_orders(
        search=search,
        status=status_filter,
        start_date=start_date,
        end_date=end_date,
        warehouse_id=warehouse_id,
    )
    raise_for_result(result)
    return OrdersListResponse(data=[order_to_response(v.order, v) for v in result.views])


@router.get("/{order_id}", response_model=OrderResponse, responses=ERROR_RESPONSES)
async def get_order(
    order_id: str,
    service: Annotated[OrderService, Depends(get_service)],
) -> OrderResponse:
    """Get an order joined with warehouse and catalog descriptors."""
    result = await service.get_order(order_id)
    raise_for_result(result)
    return order_to_response(result.view.order, result.view)


@router.patch("/{order_id}/status", response_model=OrderResponse, responses=ERROR_RESPONSES)
async def update_order_status(
    order_id: str,
    body: OrderStatusUpdateRequest,
    service: Annotated[OrderService, Depends(get_service)],
    actor: Annotated[str | None, Depends(get_actor)],
) -> OrderResponse:
    """Set the order status to any known value.

    A delivered order cannot be moved to another status.
    """
    result = await service.update_status(order_id, body.status, actor=actor)
    raise_for_result(result)
    return order_to_response(result.order)


@router.patch("/{order_id}/deliver", response_model=OrderResponse, responses=ERROR_RESPONSES)
async def mark_order_delivered(
    order_id: str,
    service: Annotated[OrderService, Depends(get_service)],
    actor: Annotated[str | None, Depends(get_actor)],
) -> OrderResponse:
    """Confirm delivery. Repeating the call re-stamps ``deliveredAt``."""
    result = await service.mark_delivered(order_id, actor=actor)
    raise_for_result(result)
    return order_to_response(result.order)


@router.put(
    "/allocate-warehouse/{order_id}",
    response_model=OrderResponse,
    responses=ERROR_RESPONSES,
)
async def allocate_warehouse(
    order_id: str,
    body: AllocateWarehouseRequest,
    allocator: Annotated[AllocationService, Depends(get_allocator)],
    actor: Annotated[str | None, Depends(get_actor)],
) -> OrderResponse:
    """Allocate an order to a warehouse on behalf of the calling actor."""
    result = await allocator.allocate(order_id, body.warehouse_id, actor)
    raise_for_result(result)
    return order_to_response(result.order)


@router.delete("/{order_id}", response_model=OrderDeleteResponse, responses=ERROR_RESPONSES)
async def delete_order(
    order_id: str,
    service: Annotated[OrderService, Depends(get_service)],
    actor: Annotated[str | None, Depends(get_actor)],
) -> OrderDeleteResponse:
    """Hard-delete an order. Its returns are kept."""
    result = await service.delete_order(order_id, actor=actor)
    raise_for_result(result)
    return OrderDeleteResponse(id=order_id, orphaned_returns=result.orphaned_returns)
