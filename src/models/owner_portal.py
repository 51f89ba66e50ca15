from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Annotated, Any, Optional

from pydantic import AliasChoices, BaseModel, BeforeValidator, ConfigDict, Field

from src.shared.base import to_camel
from src.shared.time import parse_month


def _coerce_decimal(value: Any) -> Optional[Decimal]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    if isinstance(value, (int, float, str)):
        try:
            parsed = Decimal(str(value).strip())
        except InvalidOperation:
            return None
        return parsed if parsed.is_finite() else None
    return None


def _coerce_date_text(value: Any) -> Optional[str]:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, str):
        return value
    return None


# Backend rows are loosely typed; unreadable values become None instead of failing the row.
LenientAmount = Annotated[Optional[Decimal], BeforeValidator(_coerce_decimal)]
LenientDateText = Annotated[Optional[str], BeforeValidator(_coerce_date_text)]
StatementMonth = Annotated[Optional[date], BeforeValidator(parse_month)]


class RawRecord(BaseModel):
    # Rows come from the backend in snake_case; exported snapshots use camelCase.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ShortTermBookingRecord(RawRecord):
    id: str
    guest_name: Optional[str] = None
    check_in: LenientDateText = None
    check_out: LenientDateText = None
    total_amount: LenientAmount = None
    booking_status: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("booking_status", "bookingStatus", "status")
    )
    ownerrez_listing_name: Optional[str] = None


class MidTermBookingRecord(RawRecord):
    id: str
    tenant_name: Optional[str] = None
    start_date: LenientDateText = None
    end_date: LenientDateText = None
    monthly_rent: LenientAmount = None
    status: Optional[str] = None


class ReconciledStatementRecord(RawRecord):
    id: Optional[str] = None
    period: StatementMonth = Field(
        default=None, validation_alias=AliasChoices("period", "reconciliation_month", "reconciliationMonth")
    )
    total_revenue: LenientAmount = None
    total_expenses: LenientAmount = None
    net_to_owner: LenientAmount = None
    actual_net_earnings: LenientAmount = None
    short_term_revenue: LenientAmount = None
    mid_term_revenue: LenientAmount = None
    status: Optional[str] = None


class PropertyRecord(RawRecord):
    id: str
    name: Optional[str] = None
    rental_type: Optional[str] = None
    owner_id: Optional[str] = None
    service_type: Optional[str] = None
