from __future__ import annotations

from typing import Optional

from advisory_monitor.models.advisors import AdvisorRecord
from advisory_monitor.shared.base import BaseSchema


class AdvisorSummary(BaseSchema):
    id: str
    user_id: Optional[str] = None
    email: str
    full_name: Optional[str] = None
    display_name: str
    role: str
    team_lead_user_id: Optional[str] = None

    @classmethod
    def from_record(cls, record: AdvisorRecord) -> "AdvisorSummary":
        return cls(
            id=record.id,
            user_id=record.user_id,
            email=record.email,
            full_name=record.full_name,
            display_name=record.display_name,
            role=record.role,
            team_lead_user_id=record.team_lead_user_id,
        )
