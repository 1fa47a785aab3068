"""Return API endpoints.

Staff endpoints:
- GET /returns - list returns (filters, pagination)
- GET /returns/{id} - return details
- PATCH /returns/{id}/status - approve or reject
- PATCH /returns/{id}/refund - set refund status
- PATCH /returns/{id}/complete - close an approved return
- PATCH /returns/{id}/pickup - update pickup details

Customer endpoints:
- POST /returns - open a return for a delivered order line
- DELETE /returns/{id} - withdraw a pending return
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status

from backoffice.api.errors import raise_for_result
from backoffice.api.orders import get_actor, product_to_schema, variant_to_schema
from backoffice.api.schemas import (
    ErrorResponse,
    PageMetaSchema,
    PickupUpdateRequest,
    RefundStatusUpdateRequest,
    ReturnCancelResponse,
    ReturnCreateRequest,
    ReturnItemSchema,
    ReturnOrderSummarySchema,
    ReturnResponse,
    ReturnsListResponse,
    ReturnStatusUpdateRequest,
)
from backoffice.application.return_service import (
    ReturnService,
    ReturnView,
    get_return_service,
)
from backoffice.domain.entities import Order, Return

router = APIRouter(prefix="/returns", tags=["Returns"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid argument"},
    404: {"model": ErrorResponse, "description": "Return not found"},
    409: {"model": ErrorResponse, "description": "Invalid state"},
}


# ============================================================================
# Dependencies
# ============================================================================


def get_service(request: Request) -> ReturnService:
    """Get return service with request ID."""
    request_id = getattr(request.state, "request_id", None)
    return get_return_service(request_id=request_id)


# ============================================================================
# Converters
# ============================================================================


def order_summary(order: Order | None) -> ReturnOrderSummarySchema | None:
    if order is None:
        return None
    return ReturnOrderSummarySchema(
        id=order.id,
        order_number=order.order_number,
        order_status=order.status.value,
        is_delivered=order.is_delivered,
        allocated_warehouse=order.allocated_warehouse_id,
        warehouse_allocation_status=order.allocation_status.value,
    )


def return_to_response(returned: Return, view: ReturnView | None = None) -> ReturnResponse:
    """Convert a Return (optionally joined) to ReturnResponse."""
    item = ReturnItemSchema(
        product_id=returned.item.product_id,
        variant_id=returned.item.variant_id,
        quantity=returned.item.quantity,
        price_at_order=returned.item.price_at_order,
        product=product_to_schema(view.product) if view else None,
        variant=variant_to_schema(view.variant) if view else None,
    )
    return ReturnResponse(
        id=returned.id,
        order_id=returned.order_id,
        user_id=returned.user_id,
        item=item,
        reason=returned.reason,
        refund_amount=returned.refund_amount,
        comments=returned.comments,
        status=returned.status.value,
        refund_status=returned.refund_status.value,
        refunded_at=returned.refunded_at,
        processed_at=returned.processed_at,
        pickup_scheduled=returned.pickup_scheduled,
        pickup_date=returned.pickup_date,
        pickup_status=returned.pickup_status,
        order=order_summary(view.order) if view else None,
        version=returned.version,
        created_at=returned.created_at,
        updated_at=returned.updated_at,
    )


# ============================================================================
# Endpoints
# ============================================================================


@router.get("", response_model=ReturnsListResponse, responses={400: ERROR_RESPONSES[400]})
async def list_returns(
    service: Annotated[ReturnService, Depends(get_service)],
    status_filter: Annotated[str | None, Query(alias="status")] = None,
    refund_status: Annotated[str | None, Query(alias="refundStatus")] = None,
    order_id: Annotated[str | None, Query(alias="orderId")] = None,
    product_id: Annotated[str | None, Query(alias="productId")] = None,
    user_id: Annotated[str | None, Query(alias="userId")] = None,
    warehouse_id: Annotated[str | None, Query(alias="warehouseId")] = None,
    page: Annotated[int, Query()] = 1,
    limit: Annotated[int | None, Query()] = None,
) -> ReturnsListResponse:
    """List returns, newest first, one page at a time."""
    result = await service.list_returns(
        status=status_filter,
        refund_status=refund_status,
        order_id=order_id,
        product_id=product_id,
        user_id=user_id,
        warehouse_id=warehouse_id,
        page=page,
        limit=limit,
    )
    raise_for_result(result)
    return ReturnsListResponse(
        data=[return_to_response(v.returned, v) for v in result.views],
        meta=PageMetaSchema(
            total=result.meta.total,
            page=result.meta.page,
            limit=result.meta.limit,
            total_pages=result.meta.total_pages,
        ),
    )


@router.post(
    "",
    response_model=ReturnResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
async def open_return(
    body: ReturnCreateRequest,
    service: Annotated[ReturnService, Depends(get_service)],
    actor: Annotated[str | None, Depends(get_actor)],
) -> ReturnResponse:
    """Open a return for one line item of a delivered order."""
    result = await service.open_return(
        order_id=body.order_id,
        product_id=body.product_id,
        variant_id=body.variant_id,
        quantity=body.quantity,
        user_id=actor,
        reason=body.reason,
        refund_amount=body.refund_amount,
        comments=body.comments,
    )
    raise_for_result(result)
    return return_to_response(result.returned)


@router.get("/{return_id}", response_model=ReturnResponse, responses=ERROR_RESPONSES)
async def get_return(
    return_id: str,
    service: Annotated[ReturnService, Depends(get_service)],
) -> ReturnResponse:
    """Get a return joined with its order and descriptors."""
    result = await service.get_return(return_id)
    raise_for_result(result)
    return return_to_response(result.view.returned, result.view)


@router.delete("/{return_id}", response_model=ReturnCancelResponse, responses=ERROR_RESPONSES)
async def cancel_return(
    return_id: str,
    service: Annotated[ReturnService, Depends(get_service)],
    actor: Annotated[str | None, Depends(get_actor)],
) -> ReturnCancelResponse:
    """Withdraw a pending return. Only its requester may do this."""
    result = await service.cancel_return(return_id, actor)
    raise_for_result(result)
    return ReturnCancelResponse(id=return_id)


@router.patch("/{return_id}/status", response_model=ReturnResponse, responses=ERROR_RESPONSES)
async def update_return_status(
    return_id: str,
    body: ReturnStatusUpdateRequest,
    service: Annotated[ReturnService, Depends(get_service)],
) -> ReturnResponse:
    """Approve or reject a pending return."""
    result = await service.update_return_status(
        return_id, body.status, processed_at=body.processed_at
    )
    raise_for_result(result)
    return return_to_response(result.returned)


@router.patch("/{return_id}/refund", response_model=ReturnResponse, responses=ERROR_RESPONSES)
async def update_refund_status(
    return_id: str,
    body: RefundStatusUpdateRequest,
    service: Annotated[ReturnService, Depends(get_service)],
) -> ReturnResponse:
    """Set the refund status."""
    result = await service.set_refund_status(return_id, body.refund_status)
    raise_for_result(result)
    return return_to_response(result.returned)


@router.patch("/{return_id}/complete", response_model=ReturnResponse, responses=ERROR_RESPONSES)
async def mark_return_complete(
    return_id: str,
    service: Annotated[ReturnService, Depends(get_service)],
) -> ReturnResponse:
    """Close an approved return."""
    result = await service.mark_return_complete(return_id)
    raise_for_result(result)
    return return_to_response(result.returned)


@router.patch("/{return_id}/pickup", response_model=ReturnResponse, responses=ERROR_RESPONSES)
async def update_pickup(
    return_id: str,
    body: PickupUpdateRequest,
    service: Annotated[ReturnService, Depends(get_service)],
) -> ReturnResponse:
    """Update pickup details. Omitted fields are left unchanged."""
    result = await service.update_pickup(
        return_id,
        scheduled=body.pickup_scheduled,
        date=body.pickup_date,
        pickup_status=body.pickup_status,
    )
    raise_for_result(result)
    return return_to_response(result.returned)
