"""API schemas for the back-office API.

Pydantic models for request/response validation and serialization.
Field names are camelCase on the wire; snake_case is accepted on input.
Status fields on requests are plain strings so unknown values are
reported by the services as ``invalid_argument``.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model with camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================================
# Common Schemas
# ============================================================================


class ErrorResponse(CamelModel):
    """Standard error response.

    All API errors follow this format for consistency.
    """

    kind: str = Field(..., description="Error taxonomy kind")
    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: Any = Field(default=None, description="Additional error details")
    request_id: str | None = Field(default=None, description="Request ID for correlation")


class PageMetaSchema(CamelModel):
    """Pagination metadata."""

    total: int = Field(..., description="Total number of matching items")
    page: int = Field(..., description="Current page number (1-based)")
    limit: int = Field(..., description="Items per page")
    total_pages: int = Field(..., description="ceil(total / limit)")


# ============================================================================
# Directory Schemas
# ============================================================================


class WarehouseAddressSchema(CamelModel):
    street: str
    city: str
    state: str
    pin_code: str


class GeoPointSchema(CamelModel):
    lat: float
    lng: float


class WarehouseResponse(CamelModel):
    """Warehouse directory entry."""

    id: str = Field(..., description="Warehouse identifier")
    name: str = Field(..., description="Display name")
    address: WarehouseAddressSchema | None = None
    location: GeoPointSchema | None = None
    status: str = Field(..., description="Operating status")


class WarehousesListResponse(CamelModel):
    data: list[WarehouseResponse]


class ProductSummarySchema(CamelModel):
    id: str
    name: str
    sku: str | None = None


class VariantSummarySchema(CamelModel):
    id: str
    sku: str | None = None
    attributes: dict[str, str] = Field(default_factory=dict)


# ============================================================================
# Order Schemas
# ============================================================================


class MapLocationSchema(CamelModel):
    latitude: float
    longitude: float


class AddressSchema(CamelModel):
    """Shipping or billing address snapshot."""

    full_name: str
    phone: str
    address_line1: str
    address_line2: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = None
    country: str | None = None
    landmark: str | None = None
    district: str | None = None
    map_location: MapLocationSchema | None = None


class OrderItemSchema(CamelModel):
    """Order line item joined with catalog descriptors."""

    product_id: str
    variant_id: str | None = None
    quantity: int
    price_at_order: Decimal = Field(..., description="Unit price at order time")
    total_price: Decimal
    product: ProductSummarySchema | None = None
    variant: VariantSummarySchema | None = None


class StatusHistorySchema(CamelModel):
    from_status: str | None = None
    to_status: str
    actor: str | None = None
    reason: str | None = None
    at: datetime


class OrderResponse(CamelModel):
    """Order details."""

    id: str = Field(..., description="Unique order identifier")
    order_number: str = Field(..., description="Human-facing order reference")
    user_id: str | None = None
    items: list[OrderItemSchema]
    shipping_address: AddressSchema
    billing_address: AddressSchema | None = None
    payment_method: str
    payment_status: str
    total_amount: Decimal
    final_amount: Decimal
    order_status: str = Field(..., description="Current order status")
    is_delivered: bool
    delivered_at: datetime | None = None
    allocated_warehouse: str | None = Field(default=None, description="Allocated warehouse id")
    warehouse_allocation_status: str
    allocated_by: str | None = None
    allocated_at: datetime | None = None
    warehouse: WarehouseResponse | None = Field(
        default=None, description="Allocated warehouse descriptor"
    )
    status_history: list[StatusHistorySchema] = Field(default_factory=list)
    version: int
    created_at: datetime
    updated_at: datetime


class OrdersListResponse(CamelModel):
    data: list[OrderResponse]


class OrderStatusUpdateRequest(CamelModel):
    """Request to set an order status."""

    status: str | None = Field(default=None, description="Target order status")


class AllocateWarehouseRequest(CamelModel):
    """Request to allocate an order to a warehouse."""

    warehouse_id: str | None = Field(default=None, description="Target warehouse id")


class OrderDeleteResponse(CamelModel):
    id: str
    deleted: bool = True
    orphaned_returns: int = Field(
        default=0, description="Returns still referencing the deleted order"
    )


# ============================================================================
# Return Schemas
# ============================================================================


class ReturnItemSchema(CamelModel):
    product_id: str
    variant_id: str | None = None
    quantity: int
    price_at_order: Decimal
    product: ProductSummarySchema | None = None
    variant: VariantSummarySchema | None = None


class ReturnOrderSummarySchema(CamelModel):
    """Owning order summary shown with a return."""

    id: str
    order_number: str
    order_status: str
    is_delivered: bool
    allocated_warehouse: str | None = None
    warehouse_allocation_status: str


class ReturnResponse(CamelModel):
    """Return request details."""

    id: str = Field(..., description="Unique return identifier")
    order_id: str = Field(..., description="Owning order id")
    user_id: str | None = None
    item: ReturnItemSchema
    reason: str | None = None
    refund_amount: Decimal | None = None
    comments: str | None = None
    status: str
    refund_status: str
    refunded_at: datetime | None = None
    processed_at: datetime | None = None
    pickup_scheduled: bool
    pickup_date: datetime | None = None
    pickup_status: str | None = None
    order: ReturnOrderSummarySchema | None = Field(
        default=None, description="Owning order; null if it has been deleted"
    )
    version: int
    created_at: datetime
    updated_at: datetime


class ReturnsListResponse(CamelModel):
    data: list[ReturnResponse]
    meta: PageMetaSchema


class ReturnCreateRequest(CamelModel):
    """Customer request to return one line item."""

    order_id: str
    product_id: str
    variant_id: str | None = None
    quantity: int = Field(default=1, description="Quantity to return")
    reason: str | None = Field(default=None, max_length=1000)
    refund_amount: Decimal | None = None
    comments: str | None = Field(default=None, max_length=2000)


class ReturnStatusUpdateRequest(CamelModel):
    """Staff decision on a pending return."""

    status: str | None = Field(default=None, description="approved or rejected")
    processed_at: datetime | None = Field(default=None, description="Processing time")


class RefundStatusUpdateRequest(CamelModel):
    refund_status: str | None = Field(
        default=None, description="pending, refunded or not_applicable"
    )


class PickupUpdateRequest(CamelModel):
    """Pickup fields; omitted fields are left unchanged."""

    pickup_scheduled: bool | None = None
    pickup_date: datetime | None = Field(default=None, description="Scheduled pickup time")
    pickup_status: str | None = Field(default=None, max_length=100)


class ReturnCancelResponse(CamelModel):
    id: str
    cancelled: bool = True
