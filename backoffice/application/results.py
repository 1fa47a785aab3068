"""Service result base type and audit helpers."""

from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Self

import structlog

from backoffice.domain.base import AggregateRoot
from backoffice.domain.exceptions import DomainError, ErrorKind, InvalidArgumentError

logger = structlog.get_logger()


# ============================================================================
# Service Result Types
# ============================================================================


@dataclass
class ServiceResult:
    """Common fields of every service result.

    Services never raise to their callers. A failed result carries the
    error taxonomy kind, a stable code and a client-safe message.
    """

    success: bool = True
    error: str | None = None
    error_code: str | None = None
    error_kind: ErrorKind | None = None
    error_details: dict | None = None

    @classmethod
    def from_error(cls, exc: DomainError) -> Self:
        return cls(
            success=False,
            error=exc.message,
            error_code=exc.error_code,
            error_kind=exc.kind,
            error_details=exc.details or None,
        )

    @classmethod
    def internal(cls, message: str) -> Self:
        return cls(
            success=False,
            error=message,
            error_code="INTERNAL_ERROR",
            error_kind=ErrorKind.INTERNAL,
        )


# ============================================================================
# Audit Trail
# ============================================================================


def publish_events(aggregate: AggregateRoot, request_id: str | None = None) -> None:
    """Drain an aggregate's events into the audit log."""
    for event in aggregate.collect_events():
        logger.info("Domain event", request_id=request_id, **event.log_fields())


# ============================================================================
# Input Parsing
# ============================================================================


def parse_timestamp(value: datetime | str | None, field: str) -> datetime | None:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC.

    Raises:
        InvalidArgumentError: If the value cannot be parsed.
    """
    if value is None or value == "":
        return None
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            raise InvalidArgumentError(
                f"{field} is not a valid ISO-8601 timestamp", field=field, value=value
            ) from None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def parse_date(value: date | str | None, field: str) -> date | None:
    """Parse a calendar date, accepting a full timestamp as well.

    Raises:
        InvalidArgumentError: If the value cannot be parsed.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(value).date()
    except ValueError:
        raise InvalidArgumentError(
            f"{field} is not a valid date", field=field, value=value
        ) from None
