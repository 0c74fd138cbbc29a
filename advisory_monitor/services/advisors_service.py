from __future__ import annotations

from typing import List, Optional

from advisory_monitor.analytics.scope import selectable_advisors
from advisory_monitor.core.errors import NotFoundError, UnauthorizedError
from advisory_monitor.core.supabase import SupabaseAuthClient
from advisory_monitor.models.advisors import AdvisorRecord
from advisory_monitor.repositories.advisors_repository import AdvisorsRepository
from advisory_monitor.schemas.advisors import AdvisorSummary


class AdvisorsService:
    def __init__(
        self,
        repository: AdvisorsRepository,
        auth_client: Optional[SupabaseAuthClient] = None,
    ) -> None:
        self.repository = repository
        self.auth_client = auth_client

    def resolve_current_advisor(self, access_token: str) -> AdvisorRecord:
        if self.auth_client is None:
            raise UnauthorizedError("Authentication is not configured")
        user = self.auth_client.get_user(access_token)
        user_id = str((user or {}).get("id") or "")
        if not user_id:
            raise UnauthorizedError("Invalid or expired access token")

        advisor = self.repository.get_by_user_id(user_id)
        if advisor is None:
            # Invited advisors exist by e-mail until their first login links the account.
            email = str((user or {}).get("email") or "")
            advisor = self.repository.get_by_email(email) if email else None
            if advisor is not None and not advisor.user_id:
                advisor = advisor.model_copy(update={"user_id": user_id})
        if advisor is None:
            raise NotFoundError("Advisor profile not found")
        return advisor

    def list_selectable(self, current: AdvisorRecord) -> List[AdvisorSummary]:
        directory = self.repository.list_advisors() if current.can_manage_team else [current]
        return [AdvisorSummary.from_record(advisor) for advisor in selectable_advisors(current, directory)]

