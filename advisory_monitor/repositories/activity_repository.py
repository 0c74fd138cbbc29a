from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Tuple

from advisory_monitor.core.supabase import SupabaseClient, chunked, in_filter

MAX_QUERY_ROWS = 5000
LEAD_LABEL_COLUMNS = "id,owner_id,first_name,last_name,company_name"
LEAD_COLUMNS = (
    "id,owner_id,is_agency_client,first_name,last_name,company_name,"
    "email,phone,city,address,source,created_at"
)
APPOINTMENT_COLUMNS = "id,lead_id,ts,mode,notes"


class ActivityRepository:
    """Leads and the activity tables hanging off them (activities, appointments, proposals, contracts)."""

    def __init__(self) -> None:
        self.client = SupabaseClient()

    def count_leads_created(self, owner_ids: Sequence[str], start: str, end: str) -> int:
        owner_filter = in_filter(owner_ids)
        if not owner_filter:
            return 0
        return self.client.count(
            "leads",
            filters=[
                ("owner_id", owner_filter),
                ("created_at", f"gte.{start}"),
                ("created_at", f"lte.{end}"),
            ],
        )

    def list_leads(self, owner_ids: Sequence[str]) -> List[Dict[str, Any]]:
        owner_filter = in_filter(owner_ids)
        if not owner_filter:
            return []
        rows, _ = self.client.select(
            table="leads",
            select=LEAD_LABEL_COLUMNS,
            filters=[("owner_id", owner_filter)],
            limit=MAX_QUERY_ROWS,
        )
        return rows

    def list_lead_details(
        self, owner_ids: Sequence[str], limit: int, offset: int
    ) -> Tuple[List[Dict[str, Any]], int]:
        owner_filter = in_filter(owner_ids)
        if not owner_filter:
            return [], 0
        rows, total = self.client.select(
            table="leads",
            select=LEAD_COLUMNS,
            filters=[("owner_id", owner_filter)],
            limit=limit,
            offset=offset,
            order="created_at.desc",
            count=True,
        )
        return rows, total if total is not None else len(rows)

    def get_lead(self, lead_id: str) -> Optional[Dict[str, Any]]:
        rows, _ = self.client.select(
            table="leads",
            select=LEAD_COLUMNS,
            filters=[("id", f"eq.{lead_id}")],
            limit=1,
        )
        return rows[0] if rows else None

    def insert_lead(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        rows = self.client.insert(table="leads", payload=payload)
        return rows[0] if rows else payload

    def update_lead(self, lead_id: str, payload: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        rows = self.client.update(table="leads", payload=payload, filters=[("id", f"eq.{lead_id}")])
        return rows[0] if rows else None

    def count_by_leads(
        self,
        table: str,
        lead_ids: Sequence[str],
        start: str,
        end: str,
        timestamp_column: str = "ts",
    ) -> int:
        unique_ids = sorted({lead_id for lead_id in lead_ids if lead_id})
        total = 0
        for chunk in chunked(unique_ids):
            total += self.client.count(
                table,
                filters=[
                    ("lead_id", in_filter(chunk) or ""),
                    (timestamp_column, f"gte.{start}"),
                    (timestamp_column, f"lte.{end}"),
                ],
            )
        return total

    def list_appointments(self, lead_ids: Sequence[str], start: str, end: str) -> List[Dict[str, Any]]:
        unique_ids = sorted({lead_id for lead_id in lead_ids if lead_id})
        rows: List[Dict[str, Any]] = []
        for chunk in chunked(unique_ids):
            chunk_rows, _ = self.client.select(
                table="appointments",
                select=APPOINTMENT_COLUMNS,
                filters=[
                    ("lead_id", in_filter(chunk) or ""),
                    ("ts", f"gte.{start}"),
                    ("ts", f"lt.{end}"),
                ],
                limit=MAX_QUERY_ROWS,
                order="ts.asc",
            )
            rows.extend(chunk_rows)
        rows.sort(key=lambda row: str(row.get("ts") or ""))
        return rows

    def get_appointment(self, appointment_id: str) -> Optional[Dict[str, Any]]:
        rows, _ = self.client.select(
            table="appointments",
            select=APPOINTMENT_COLUMNS,
            filters=[("id", f"eq.{appointment_id}")],
            limit=1,
        )
        return rows[0] if rows else None

    def insert_appointment(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        rows = self.client.insert(table="appointments", payload=payload)
        return rows[0] if rows else payload

    def update_appointment(self, appointment_id: str, payload: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        rows = self.client.update(
            table="appointments", payload=payload, filters=[("id", f"eq.{appointment_id}")]
        )
        return rows[0] if rows else None

    def delete_appointment(self, appointment_id: str) -> bool:
        return self.client.delete(table="appointments", filters=[("id", f"eq.{appointment_id}")]) > 0
