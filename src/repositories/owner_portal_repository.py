from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from src.core.supabase import SupabaseClient
from src.models.owner_portal import (
    MidTermBookingRecord,
    PropertyRecord,
    ReconciledStatementRecord,
    ShortTermBookingRecord,
)

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)

FINALIZED_STATEMENT_STATUSES = (
    "sent",
    "statement_sent",
    "completed",
    "approved",
    "preview",
    "pending",
)


def _validate_rows(rows: Iterable[Dict[str, Any]], model: Type[RecordT], table: str) -> List[RecordT]:
    records: List[RecordT] = []
    for row in rows:
        try:
            records.append(model.model_validate(row))
        except ValidationError as exc:
            logger.warning(
                "Skipping malformed %s row %s: %s", table, row.get("id"), exc.error_count()
            )
    return records


class OwnerPortalRepository:
    def __init__(self) -> None:
        self.client = SupabaseClient()

    def get_property(self, property_id: str) -> Optional[PropertyRecord]:
        row = self.client.select_one(
            table="properties",
            select="id,name,rental_type,owner_id",
            filters=[("id", f"eq.{property_id}")],
        )
        if not row:
            return None
        owner_id = row.get("owner_id")
        if owner_id:
            owner = self.client.select_one(
                table="property_owners",
                select="id,service_type",
                filters=[("id", f"eq.{owner_id}")],
            )
            if owner:
                row = {**row, "service_type": owner.get("service_type")}
        return PropertyRecord.model_validate(row)

    def list_short_term_bookings(self, property_id: str, limit: int = 500) -> List[ShortTermBookingRecord]:
        rows, _ = self.client.select(
            table="ownerrez_bookings",
            select="id,guest_name,check_in,check_out,total_amount,booking_status,ownerrez_listing_name",
            filters=[("property_id", f"eq.{property_id}")],
            limit=limit,
            order="check_in.desc",
        )
        return _validate_rows(rows, ShortTermBookingRecord, "ownerrez_bookings")

    def list_mid_term_bookings(self, property_id: str, limit: int = 200) -> List[MidTermBookingRecord]:
        rows, _ = self.client.select(
            table="mid_term_bookings",
            select="id,tenant_name,start_date,end_date,monthly_rent,status",
            filters=[("property_id", f"eq.{property_id}")],
            limit=limit,
            order="start_date.desc",
        )
        return _validate_rows(rows, MidTermBookingRecord, "mid_term_bookings")

    def list_statements(self, property_id: str, limit: int = 60) -> List[ReconciledStatementRecord]:
        statuses = ",".join(FINALIZED_STATEMENT_STATUSES)
        rows, _ = self.client.select(
            table="monthly_reconciliations",
            select=(
                "id,reconciliation_month,total_revenue,total_expenses,net_to_owner,"
                "short_term_revenue,mid_term_revenue,status"
            ),
            filters=[
                ("property_id", f"eq.{property_id}"),
                ("status", f"in.({statuses})"),
            ],
            limit=limit,
            order="reconciliation_month.desc",
        )
        return _validate_rows(rows, ReconciledStatementRecord, "monthly_reconciliations")
