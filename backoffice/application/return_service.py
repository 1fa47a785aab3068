"""Return application service.

Drives the Return aggregate through its three independent sub-states:
- approval (pending -> approved/rejected, approved -> completed)
- refund (pending / refunded / not_applicable)
- pickup (scheduled flag, date, free-text status)

Customers open returns against delivered orders and may withdraw
them while they are still pending.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

import structlog

from backoffice.application.repositories import (
    CatalogDirectory,
    OrderRepository,
    ReturnRepository,
)
from backoffice.application.results import (
    ServiceResult,
    parse_timestamp,
    publish_events,
)
from backoffice.domain.base import utcnow
from backoffice.domain.criteria import PageMeta, ReturnCriteria
from backoffice.domain.entities import Order, Return
from backoffice.domain.exceptions import (
    DomainError,
    InvalidArgumentError,
    OrderNotFoundError,
    ReturnNotFoundError,
)
from backoffice.domain.state_machines import RefundStatus, ReturnStatus
from backoffice.domain.value_objects import ProductDescriptor, VariantDescriptor
from backoffice.infrastructure.config import settings
from backoffice.infrastructure.storage import get_storage

logger = structlog.get_logger()


# ============================================================================
# Read Models
# ============================================================================


@dataclass
class ReturnView:
    """A return joined with its owning order and catalog descriptors.

    ``order`` is None when the owning order has been deleted.
    """

    returned: Return
    order: Order | None = None
    product: ProductDescriptor | None = None
    variant: VariantDescriptor | None = None


# ============================================================================
# Service Result Types
# ============================================================================


@dataclass
class ReturnResult(ServiceResult):
    """Result of a single-return mutation."""

    returned: Return | None = None


@dataclass
class GetReturnResult(ServiceResult):
    """Result of getting a return."""

    view: ReturnView | None = None


@dataclass
class ListReturnsResult(ServiceResult):
    """Result of listing returns."""

    views: list[ReturnView] = field(default_factory=list)
    meta: PageMeta | None = None


@dataclass
class CancelReturnResult(ServiceResult):
    """Result of withdrawing a return."""

    return_id: str | None = None


# ============================================================================
# Return Service
# ============================================================================


class ReturnService:
    """Application service for the Return aggregate."""

    def __init__(
        self,
        returns: ReturnRepository | None = None,
        orders: OrderRepository | None = None,
        catalog: CatalogDirectory | None = None,
        request_id: str | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        """Initialize service.

        Args:
            returns: Return repository.
            orders: Order repository (joins and warehouse filter).
            catalog: Catalog directory.
            request_id: Request ID for correlation.
            clock: Time source.
        """
        storage = get_storage()
        self.returns = returns or storage.returns
        self.orders = orders or storage.orders
        self.catalog = catalog or storage.catalog
        self.request_id = request_id
        self.clock = clock

    # -------------------------------------------------------------------------
    # Customer Operations
    # -------------------------------------------------------------------------

    async def open_return(
        self,
        *,
        order_id: str,
        product_id: str,
        quantity: int,
        user_id: str | None,
        variant_id: str | None = None,
        reason: str | None = None,
        refund_amount: Decimal | None = None,
        comments: str | None = None,
    ) -> ReturnResult:
        """Open a return for one line item of a delivered order.

        Args:
            order_id: Owning order.
            product_id: Product of the returned line.
            quantity: Quantity returned.
            user_id: Requesting customer.
            variant_id: Variant of the returned line.
            reason: Customer reason.
            refund_amount: Requested refund; defaults to price times quantity.
            comments: Free-text comments.

        Returns:
            ReturnResult with the new return.
        """
        try:
            if not user_id:
                raise InvalidArgumentError("A requesting user is required", field="userId")
            order = await self.orders.get(order_id)
            if order is None:
                raise OrderNotFoundError(order_id)

            returned = Return.open(
                order=order,
                product_id=product_id,
                variant_id=variant_id,
                quantity=quantity,
                user_id=user_id,
                reason=reason,
                refund_amount=refund_amount,
                comments=comments,
                now=self.clock(),
            )
            await self.returns.save(returned)
        except DomainError as e:
            logger.warning(
                "Return request rejected",
                order_id=order_id,
                product_id=product_id,
                error_code=e.error_code,
                request_id=self.request_id,
            )
            return ReturnResult.from_error(e)
        except Exception:
            logger.exception("Failed to open return", order_id=order_id, request_id=self.request_id)
            return ReturnResult.internal("Failed to open return")

        logger.info(
            "Return opened",
            return_id=returned.id,
            order_id=order_id,
            product_id=product_id,
            quantity=quantity,
            user_id=user_id,
            request_id=self.request_id,
        )
        publish_events(returned, self.request_id)
        return ReturnResult(returned=returned)

    async def cancel_return(self, return_id: str, user_id: str | None) -> CancelReturnResult:
        """Withdraw a pending return on behalf of its requester.

        Args:
            return_id: Return identifier.
            user_id: Requesting customer.

        Returns:
            CancelReturnResult with the removed id.
        """
        try:
            if not user_id:
                raise InvalidArgumentError("A requesting user is required", field="userId")
            returned = await self._load(return_id)
            returned.withdraw(user_id)
            await self.returns.delete(return_id)
        except DomainError as e:
            return CancelReturnResult.from_error(e)
        except Exception:
            logger.exception(
                "Failed to cancel return", return_id=return_id, request_id=self.request_id
            )
            return CancelReturnResult.internal("Failed to cancel return")

        logger.info(
            "Return cancelled", return_id=return_id, user_id=user_id, request_id=self.request_id
        )
        publish_events(returned, self.request_id)
        return CancelReturnResult(return_id=return_id)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    async def get_return(self, return_id: str) -> GetReturnResult:
        """Get a return joined with its order and descriptors."""
        try:
            returned = await self._load(return_id)
            views = await self._join([returned])
        except DomainError as e:
            return GetReturnResult.from_error(e)
        except Exception:
            logger.exception("Failed to load return", return_id=return_id, request_id=self.request_id)
            return GetReturnResult.internal("Failed to load return")
        return GetReturnResult(view=views[0])

    async def list_returns(
        self,
        status: ReturnStatus | str | None = None,
        refund_status: RefundStatus | str | None = None,
        order_id: str | None = None,
        product_id: str | None = None,
        user_id: str | None = None,
        warehouse_id: str | None = None,
        page: int = 1,
        limit: int | None = None,
    ) -> ListReturnsResult:
        """List one page of returns, newest first.

        Args:
            status: Approval status filter.
            refund_status: Refund status filter.
            order_id: Owning order filter.
            product_id: Returned product filter.
            user_id: Requesting customer filter.
            warehouse_id: Allocated warehouse of the owning order.
            page: 1-based page number.
            limit: Page size; defaults to the configured page size.

        Returns:
            ListReturnsResult with joined views and paging metadata.
        """
        try:
            limit = settings.default_page_limit if limit is None else limit
            if limit > settings.max_page_limit:
                raise InvalidArgumentError(
                    f"limit must not exceed {settings.max_page_limit}", field="limit", value=limit
                )
            criteria = ReturnCriteria(
                status=ReturnStatus.parse(status) if status else None,
                refund_status=RefundStatus.parse(refund_status) if refund_status else None,
                order_id=order_id or None,
                product_id=product_id or None,
                user_id=user_id or None,
                warehouse_id=warehouse_id or None,
                page=page,
                limit=limit,
            )
            order_ids = None
            if criteria.warehouse_id:
                order_ids = await self.orders.ids_allocated_to(criteria.warehouse_id)
            items, total = await self.returns.list(criteria, order_ids=order_ids)
            views = await self._join(items)
        except DomainError as e:
            return ListReturnsResult.from_error(e)
        except Exception:
            logger.exception("Failed to list returns", request_id=self.request_id)
            return ListReturnsResult.internal("Failed to list returns")

        return ListReturnsResult(
            views=views,
            meta=PageMeta(total=total, page=criteria.page, limit=criteria.limit),
        )

    # -------------------------------------------------------------------------
    # Staff Operations
    # -------------------------------------------------------------------------

    async def update_return_status(
        self,
        return_id: str,
        status: ReturnStatus | str | None,
        processed_at: datetime | str | None = None,
    ) -> ReturnResult:
        """Approve or reject a pending return.

        Args:
            return_id: Return identifier.
            status: ``approved`` or ``rejected``.
            processed_at: Explicit processing time; defaults to now.

        Returns:
            ReturnResult with the updated return.
        """
        try:
            decision = ReturnStatus.parse_decision(status)
            stamp = parse_timestamp(processed_at, "processedAt")
            returned = await self._load(return_id)
            from_status = returned.status
            returned.decide(decision, processed_at=stamp, now=self.clock())
            await self.returns.save(returned)
        except DomainError as e:
            logger.warning(
                "Return status update rejected",
                return_id=return_id,
                target_status=str(status),
                error_code=e.error_code,
                request_id=self.request_id,
            )
            return ReturnResult.from_error(e)
        except Exception:
            logger.exception(
                "Failed to update return status", return_id=return_id, request_id=self.request_id
            )
            return ReturnResult.internal("Failed to update return status")

        self._log_transition("status", returned, from_status.value, returned.status.value)
        publish_events(returned, self.request_id)
        return ReturnResult(returned=returned)

    async def mark_return_complete(self, return_id: str) -> ReturnResult:
        """Close an approved return.

        Args:
            return_id: Return identifier.

        Returns:
            ReturnResult with the completed return.
        """
        try:
            returned = await self._load(return_id)
            returned.complete(now=self.clock())
            await self.returns.save(returned)
        except DomainError as e:
            logger.warning(
                "Return completion rejected",
                return_id=return_id,
                error_code=e.error_code,
                request_id=self.request_id,
            )
            return ReturnResult.from_error(e)
        except Exception:
            logger.exception(
                "Failed to complete return", return_id=return_id, request_id=self.request_id
            )
            return ReturnResult.internal("Failed to complete return")

        self._log_transition(
            "status", returned, ReturnStatus.APPROVED.value, ReturnStatus.COMPLETED.value
        )
        publish_events(returned, self.request_id)
        return ReturnResult(returned=returned)

    async def set_refund_status(
        self,
        return_id: str,
        refund_status: RefundStatus | str | None,
    ) -> ReturnResult:
        """Set the refund sub-state.

        Args:
            return_id: Return identifier.
            refund_status: ``pending``, ``refunded`` or ``not_applicable``.

        Returns:
            ReturnResult with the updated return.
        """
        try:
            target = RefundStatus.parse(refund_status)
            returned = await self._load(return_id)
            from_status = returned.refund_status
            returned.set_refund_status(target, now=self.clock())
            await self.returns.save(returned)
        except DomainError as e:
            return ReturnResult.from_error(e)
        except Exception:
            logger.exception(
                "Failed to update refund status", return_id=return_id, request_id=self.request_id
            )
            return ReturnResult.internal("Failed to update refund status")

        self._log_transition("refund_status", returned, from_status.value, target.value)
        publish_events(returned, self.request_id)
        return ReturnResult(returned=returned)

    async def update_pickup(
        self,
        return_id: str,
        scheduled: bool | None = None,
        date: datetime | str | None = None,
        pickup_status: str | None = None,
    ) -> ReturnResult:
        """Update any supplied pickup fields.

        Args:
            return_id: Return identifier.
            scheduled: Pickup booked flag.
            date: Pickup time; strings are parsed as ISO-8601.
            pickup_status: Free-text pickup progress.

        Returns:
            ReturnResult with the updated return.
        """
        try:
            pickup_date = parse_timestamp(date, "pickupDate")
            returned = await self._load(return_id)
            changed = returned.update_pickup(
                scheduled=scheduled,
                date=pickup_date,
                pickup_status=pickup_status,
                now=self.clock(),
            )
            await self.returns.save(returned)
        except DomainError as e:
            return ReturnResult.from_error(e)
        except Exception:
            logger.exception(
                "Failed to update pickup", return_id=return_id, request_id=self.request_id
            )
            return ReturnResult.internal("Failed to update pickup details")

        logger.info(
            "Return pickup updated",
            return_id=return_id,
            changed_fields=changed,
            request_id=self.request_id,
        )
        publish_events(returned, self.request_id)
        return ReturnResult(returned=returned)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    async def _load(self, return_id: str) -> Return:
        returned = await self.returns.get(return_id)
        if returned is None:
            raise ReturnNotFoundError(return_id)
        return returned

    async def _join(self, items: list[Return]) -> list[ReturnView]:
        """Join returns with owning orders and descriptors.

        Orders are loaded one by one; a missing order yields a null join.
        """
        orders: dict[str, Order | None] = {}
        for order_id in {r.order_id for r in items}:
            orders[order_id] = await self.orders.get(order_id)

        products = await self.catalog.get_products({r.item.product_id for r in items})
        variants = await self.catalog.get_variants(
            {r.item.variant_id for r in items if r.item.variant_id}
        )
        return [
            ReturnView(
                returned=r,
                order=orders.get(r.order_id),
                product=products.get(r.item.product_id),
                variant=variants.get(r.item.variant_id) if r.item.variant_id else None,
            )
            for r in items
        ]

    def _log_transition(self, field_name: str, returned: Return, from_value: str, to_value: str):
        logger.info(
            "Return transitioned",
            return_id=returned.id,
            order_id=returned.order_id,
            field=field_name,
            from_state=from_value,
            to_state=to_value,
            request_id=self.request_id,
        )


# ============================================================================
# Service Factory
# ============================================================================


def get_return_service(request_id: str | None = None) -> ReturnService:
    """Get return service instance."""
    return ReturnService(request_id=request_id)
