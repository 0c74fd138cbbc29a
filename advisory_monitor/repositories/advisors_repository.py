from __future__ import annotations

from typing import List, Optional

from advisory_monitor.core.supabase import SupabaseClient
from advisory_monitor.models.advisors import AdvisorRecord

ADVISOR_COLUMNS = "id,user_id,email,full_name,role,team_lead_user_id"
MAX_ADVISOR_ROWS = 2000


class AdvisorsRepository:
    def __init__(self) -> None:
        self.client = SupabaseClient()

    def get_by_user_id(self, user_id: str) -> Optional[AdvisorRecord]:
        rows, _ = self.client.select(
            table="advisors",
            select=ADVISOR_COLUMNS,
            filters=[("user_id", f"eq.{user_id}")],
            limit=1,
        )
        return AdvisorRecord.model_validate(rows[0]) if rows else None

    def get_by_email(self, email: str) -> Optional[AdvisorRecord]:
        rows, _ = self.client.select(
            table="advisors",
            select=ADVISOR_COLUMNS,
            filters=[("email", f"eq.{email}")],
            limit=1,
        )
        return AdvisorRecord.model_validate(rows[0]) if rows else None

    def list_advisors(self) -> List[AdvisorRecord]:
        rows, _ = self.client.select(
            table="advisors",
            select=ADVISOR_COLUMNS,
            limit=MAX_ADVISOR_ROWS,
            order="full_name.asc.nullslast",
        )
        return [AdvisorRecord.model_validate(row) for row in rows]
