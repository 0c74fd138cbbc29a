from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

ROLE_ADMIN = "Admin"
ROLE_TEAM_LEAD = "Team Lead"
ROLE_JUNIOR = "Junior"


class AdvisorRecord(BaseModel):
    id: str
    user_id: Optional[str] = None
    email: str
    full_name: Optional[str] = None
    role: str = ROLE_JUNIOR
    team_lead_user_id: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    @property
    def is_team_lead(self) -> bool:
        return self.role == ROLE_TEAM_LEAD

    @property
    def can_manage_team(self) -> bool:
        return self.role in (ROLE_ADMIN, ROLE_TEAM_LEAD)

    @property
    def display_name(self) -> str:
        return self.full_name or self.email
