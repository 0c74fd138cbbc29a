from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from advisory_monitor.core.supabase import SupabaseClient, in_filter
from advisory_monitor.models.reports import TARGET_COLUMNS, AnnualGoalsRecord, GoalsRecord
from advisory_monitor.schemas.reports import METRIC_FIELDS

MAX_QUERY_ROWS = 5000
TARGET_SELECT = ",".join(TARGET_COLUMNS[field] for field in METRIC_FIELDS)


class GoalsRepository:
    def __init__(self) -> None:
        self.client = SupabaseClient()

    def list_goals_monthly(
        self, year: int, months: Sequence[int], advisor_ids: Sequence[str]
    ) -> List[GoalsRecord]:
        filters = self._build_month_filters(year, months, advisor_ids)
        if filters is None:
            return []
        rows, _ = self.client.select(
            table="goals_monthly",
            select=f"advisor_user_id,year,month,{TARGET_SELECT}",
            filters=filters,
            limit=MAX_QUERY_ROWS,
            order="month.asc",
        )
        return [GoalsRecord.from_table_row(row) for row in rows]

    def list_goals_monthly_view(
        self, year: int, months: Sequence[int], advisor_ids: Sequence[str]
    ) -> List[GoalsRecord]:
        filters = self._build_month_filters(year, months, advisor_ids)
        if filters is None:
            return []
        rows, _ = self.client.select(
            table="v_goals_monthly",
            select=f"advisor_user_id,year,month,{','.join(METRIC_FIELDS)}",
            filters=filters,
            limit=MAX_QUERY_ROWS,
            order="month.asc",
        )
        return [GoalsRecord.from_view_row(row) for row in rows]

    def get_annual_goals(self, advisor_user_id: str, year: int) -> Optional[AnnualGoalsRecord]:
        rows, _ = self.client.select(
            table="goals",
            select=f"advisor_user_id,year,{TARGET_SELECT}",
            filters=[("advisor_user_id", f"eq.{advisor_user_id}"), ("year", f"eq.{year}")],
            limit=1,
        )
        return AnnualGoalsRecord.from_table_row(rows[0]) if rows else None

    def get_monthly_goals(self, advisor_user_id: str, year: int, month: int) -> Optional[GoalsRecord]:
        rows, _ = self.client.select(
            table="goals_monthly",
            select=f"advisor_user_id,year,month,{TARGET_SELECT}",
            filters=[
                ("advisor_user_id", f"eq.{advisor_user_id}"),
                ("year", f"eq.{year}"),
                ("month", f"eq.{month}"),
            ],
            limit=1,
        )
        return GoalsRecord.from_table_row(rows[0]) if rows else None

    def upsert_annual_goals(self, record: AnnualGoalsRecord) -> AnnualGoalsRecord:
        payload = {"advisor_user_id": record.advisor_user_id, "year": record.year}
        payload.update(self._target_payload(record.targets.model_dump(mode="json")))
        rows = self.client.insert("goals", payload, upsert=True, on_conflict="advisor_user_id,year")
        return AnnualGoalsRecord.from_table_row(rows[0]) if rows else record

    def upsert_monthly_goals(self, record: GoalsRecord) -> GoalsRecord:
        payload = {
            "advisor_user_id": record.advisor_scope,
            "year": record.year,
            "month": record.month,
        }
        payload.update(self._target_payload(record.metrics.model_dump(mode="json")))
        rows = self.client.insert(
            "goals_monthly", payload, upsert=True, on_conflict="advisor_user_id,year,month"
        )
        return GoalsRecord.from_table_row(rows[0]) if rows else record

    @staticmethod
    def _target_payload(metrics: dict) -> dict:
        return {TARGET_COLUMNS[field]: metrics[field] for field in METRIC_FIELDS}

    @staticmethod
    def _build_month_filters(
        year: int, months: Sequence[int], advisor_ids: Sequence[str]
    ) -> Optional[List[Tuple[str, str]]]:
        advisor_filter = in_filter(advisor_ids)
        month_filter = in_filter(months)
        if not advisor_filter or not month_filter:
            return None
        return [
            ("year", f"eq.{year}"),
            ("month", month_filter),
            ("advisor_user_id", advisor_filter),
        ]
