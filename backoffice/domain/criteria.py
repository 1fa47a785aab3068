"""Filter criteria for order and return queries.

Criteria are plain values built by the API layer and translated into
store queries by each repository adapter. ``matches`` gives the
reference semantics; the in-memory adapter uses it directly and the
SQL adapter must agree with it.
"""

import math
from dataclasses import dataclass
from datetime import date, datetime, time, timezone, tzinfo
from typing import Generic, TypeVar

from backoffice.domain.exceptions import InvalidArgumentError
from backoffice.domain.state_machines import OrderStatus, RefundStatus, ReturnStatus

T = TypeVar("T")

_END_OF_DAY = time(23, 59, 59, 999000)


def day_bounds(
    start: date | None,
    end: date | None,
    tz: tzinfo = timezone.utc,
) -> tuple[datetime | None, datetime | None]:
    """Expand calendar dates into inclusive UTC instants.

    ``start`` becomes 00:00:00.000 and ``end`` becomes 23:59:59.999 of
    the same calendar day in ``tz``, so a same-day range covers the
    whole day.
    """
    lower = None
    upper = None
    if start is not None:
        lower = datetime.combine(start, time.min, tzinfo=tz).astimezone(timezone.utc)
    if end is not None:
        upper = datetime.combine(end, _END_OF_DAY, tzinfo=tz).astimezone(timezone.utc)
    return lower, upper


@dataclass(frozen=True)
class OrderCriteria:
    """Filters for listing orders.

    Attributes:
        search: Case-insensitive substring of shipping name or phone.
        status: Exact order status.
        start_date: Inclusive creation date lower bound.
        end_date: Inclusive creation date upper bound.
        warehouse_id: Allocated warehouse.
        tz: Business timezone the dates are interpreted in.
    """

    search: str | None = None
    status: OrderStatus | None = None
    start_date: date | None = None
    end_date: date | None = None
    warehouse_id: str | None = None
    tz: tzinfo = timezone.utc

    def __post_init__(self) -> None:
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise InvalidArgumentError(
                "startDate must not be after endDate",
                field="startDate",
                value=self.start_date.isoformat(),
            )

    @property
    def created_bounds(self) -> tuple[datetime | None, datetime | None]:
        return day_bounds(self.start_date, self.end_date, self.tz)

    @property
    def search_term(self) -> str | None:
        if self.search is None:
            return None
        term = self.search.strip()
        return term or None

    def matches(self, order) -> bool:
        """Check whether an Order satisfies every supplied filter."""
        term = self.search_term
        if term and not order.shipping_address.matches(term):
            return False
        if self.status is not None and order.status != self.status:
            return False
        if self.warehouse_id is not None and order.allocated_warehouse_id != self.warehouse_id:
            return False
        lower, upper = self.created_bounds
        if lower is not None and order.created_at < lower:
            return False
        if upper is not None and order.created_at > upper:
            return False
        return True


@dataclass(frozen=True)
class ReturnCriteria:
    """Filters and paging for listing returns.

    ``warehouse_id`` is matched against the owning order's allocation,
    so adapters resolve it through the orders store.
    """

    status: ReturnStatus | None = None
    refund_status: RefundStatus | None = None
    order_id: str | None = None
    product_id: str | None = None
    user_id: str | None = None
    warehouse_id: str | None = None
    page: int = 1
    limit: int = 10

    def __post_init__(self) -> None:
        if self.page < 1:
            raise InvalidArgumentError("page must be at least 1", field="page", value=self.page)
        if self.limit < 1:
            raise InvalidArgumentError("limit must be at least 1", field="limit", value=self.limit)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def matches(self, returned, order_ids: set[str] | None = None) -> bool:
        """Check whether a Return satisfies the filters.

        Args:
            returned: Return aggregate.
            order_ids: Ids of orders allocated to ``warehouse_id``; required
                when that filter is set.
        """
        if self.status is not None and returned.status != self.status:
            return False
        if self.refund_status is not None and returned.refund_status != self.refund_status:
            return False
        if self.order_id is not None and returned.order_id != self.order_id:
            return False
        if self.product_id is not None and returned.item.product_id != self.product_id:
            return False
        if self.user_id is not None and returned.user_id != self.user_id:
            return False
        if self.warehouse_id is not None and returned.order_id not in (order_ids or set()):
            return False
        return True


@dataclass(frozen=True)
class PageMeta:
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of results plus its metadata."""

    items: list[T]
    meta: PageMeta
