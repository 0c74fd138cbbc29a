from __future__ import annotations

from typing import List, Sequence

from advisory_monitor.core.supabase import SupabaseClient, in_filter
from advisory_monitor.models.reports import ProgressRecord
from advisory_monitor.schemas.reports import METRIC_FIELDS

MAX_QUERY_ROWS = 5000


class ProgressRepository:
    def __init__(self) -> None:
        self.client = SupabaseClient()

    def list_progress_monthly(
        self, year: int, months: Sequence[int], advisor_ids: Sequence[str]
    ) -> List[ProgressRecord]:
        advisor_filter = in_filter(advisor_ids)
        month_filter = in_filter(months)
        if not advisor_filter or not month_filter:
            return []
        rows, _ = self.client.select(
            table="v_progress_monthly",
            select=f"advisor_user_id,year,month,{','.join(METRIC_FIELDS)}",
            filters=[
                ("year", f"eq.{year}"),
                ("month", month_filter),
                ("advisor_user_id", advisor_filter),
            ],
            limit=MAX_QUERY_ROWS,
            order="month.asc",
        )
        return [ProgressRecord.from_view_row(row) for row in rows]
