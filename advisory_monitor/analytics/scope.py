from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from advisory_monitor.core.errors import BadRequestError, ForbiddenError
from advisory_monitor.models.advisors import AdvisorRecord

OWNER_SCOPE_ME = "me"
OWNER_SCOPE_TEAM = "team"
OWNER_SCOPE_ALL = "all"
OWNER_SCOPE_PATTERN = "^(me|team|all)$"


@dataclass(frozen=True)
class ReportScope:
    advisor_user_id: str
    is_team: bool
    advisor_ids: List[str] = field(default_factory=list)

    @property
    def label(self) -> str:
        return "team" if self.is_team else "advisor"


def team_member_ids(anchor_user_id: str, directory: Iterable[AdvisorRecord]) -> List[str]:
    """The anchor itself plus every advisor reporting to it, in directory order."""
    member_ids: List[str] = []
    for advisor in directory:
        if not advisor.user_id:
            continue
        if advisor.user_id == anchor_user_id or advisor.team_lead_user_id == anchor_user_id:
            if advisor.user_id not in member_ids:
                member_ids.append(advisor.user_id)
    return member_ids


def _require_user_id(current: AdvisorRecord) -> str:
    if not current.user_id:
        raise BadRequestError("Advisor profile is not linked to a user account")
    return current.user_id


def resolve_report_scope(
    current: AdvisorRecord,
    selected_advisor_user_id: Optional[str],
    team: bool,
    directory: Iterable[AdvisorRecord],
) -> ReportScope:
    own_user_id = _require_user_id(current)
    selected = selected_advisor_user_id or own_user_id

    if not current.can_manage_team:
        if selected != own_user_id:
            raise ForbiddenError("Junior advisors can only view their own report")
        return ReportScope(advisor_user_id=own_user_id, is_team=False, advisor_ids=[own_user_id])

    if not team:
        if (
            current.is_team_lead
            and selected != own_user_id
            and selected not in team_member_ids(own_user_id, directory)
        ):
            raise ForbiddenError("Advisor is not part of your team")
        return ReportScope(advisor_user_id=selected, is_team=False, advisor_ids=[selected])

    # A Team Lead always sees their own team; an Admin sees the team led by the selected advisor.
    anchor = own_user_id if current.is_team_lead else selected
    return ReportScope(
        advisor_user_id=anchor,
        is_team=True,
        advisor_ids=team_member_ids(anchor, directory),
    )


def resolve_owner_ids(
    current: AdvisorRecord,
    scope: str,
    directory: Iterable[AdvisorRecord],
) -> List[str]:
    own_user_id = _require_user_id(current)
    if scope not in (OWNER_SCOPE_ME, OWNER_SCOPE_TEAM, OWNER_SCOPE_ALL):
        raise BadRequestError(f"Unsupported scope: {scope}")
    if scope == OWNER_SCOPE_ALL:
        if not current.is_admin:
            raise ForbiddenError("Only admins can view every advisor")
        return [advisor.user_id for advisor in directory if advisor.user_id]
    if scope == OWNER_SCOPE_ME or not current.can_manage_team:
        return [own_user_id]
    return team_member_ids(own_user_id, directory)


def writable_owner_ids(current: AdvisorRecord, directory: Iterable[AdvisorRecord]) -> List[str]:
    """Owners whose leads and appointments the current advisor may change."""
    scope = OWNER_SCOPE_ALL if current.is_admin else OWNER_SCOPE_TEAM
    return resolve_owner_ids(current, scope, directory)


def selectable_advisors(current: AdvisorRecord, directory: Iterable[AdvisorRecord]) -> List[AdvisorRecord]:
    advisors = list(directory)
    if current.is_admin:
        return sorted(advisors, key=lambda advisor: advisor.display_name.lower())
    if current.is_team_lead and current.user_id:
        members = [
            advisor
            for advisor in advisors
            if advisor.user_id
            and (advisor.user_id == current.user_id or advisor.team_lead_user_id == current.user_id)
        ]
        # Team Lead first, then reports alphabetically.
        return sorted(members, key=lambda advisor: (advisor.role != current.role, advisor.display_name.lower()))
    return [current]


def can_edit_goals_for(current: AdvisorRecord, target: AdvisorRecord) -> bool:
    if current.is_admin:
        return True
    if current.is_team_lead and current.user_id:
        return target.user_id == current.user_id or target.team_lead_user_id == current.user_id
    return False
