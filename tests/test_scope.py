from __future__ import annotations

import pytest

from advisory_monitor.analytics.scope import (
    can_edit_goals_for,
    resolve_owner_ids,
    resolve_report_scope,
    selectable_advisors,
    team_member_ids,
)
from advisory_monitor.core.errors import BadRequestError, ForbiddenError
from stubs import ADMIN, DIRECTORY, JUNIOR, JUNIOR_TWO, LEAD, OUTSIDER


def test_team_members_include_anchor_and_reports() -> None:
    assert team_member_ids("u-lead", DIRECTORY) == ["u-lead", "u-j1", "u-j2"]


def test_junior_is_always_scoped_to_self() -> None:
    scope = resolve_report_scope(JUNIOR, None, True, DIRECTORY)
    assert scope.advisor_ids == ["u-j1"]
    assert scope.is_team is False


def test_junior_cannot_select_another_advisor() -> None:
    with pytest.raises(ForbiddenError):
        resolve_report_scope(JUNIOR, "u-j2", False, DIRECTORY)


def test_team_lead_team_scope() -> None:
    scope = resolve_report_scope(LEAD, None, True, DIRECTORY)
    assert scope.label == "team"
    assert scope.advisor_user_id == "u-lead"
    assert scope.advisor_ids == ["u-lead", "u-j1", "u-j2"]


def test_team_lead_can_view_a_direct_report() -> None:
    scope = resolve_report_scope(LEAD, "u-j2", False, DIRECTORY)
    assert scope.advisor_ids == ["u-j2"]


def test_team_lead_cannot_view_advisor_outside_team() -> None:
    with pytest.raises(ForbiddenError):
        resolve_report_scope(LEAD, OUTSIDER.user_id, False, DIRECTORY)


def test_admin_team_scope_follows_selected_lead() -> None:
    scope = resolve_report_scope(ADMIN, "u-lead", True, DIRECTORY)
    assert scope.advisor_ids == ["u-lead", "u-j1", "u-j2"]


def test_admin_single_advisor_scope() -> None:
    scope = resolve_report_scope(ADMIN, "u-other", False, DIRECTORY)
    assert scope.label == "advisor"
    assert scope.advisor_ids == ["u-other"]


def test_owner_ids_for_each_scope() -> None:
    assert resolve_owner_ids(LEAD, "me", DIRECTORY) == ["u-lead"]
    assert resolve_owner_ids(LEAD, "team", DIRECTORY) == ["u-lead", "u-j1", "u-j2"]
    assert resolve_owner_ids(JUNIOR, "team", DIRECTORY) == ["u-j1"]
    assert len(resolve_owner_ids(ADMIN, "all", DIRECTORY)) == len(DIRECTORY)


def test_owner_ids_all_is_admin_only() -> None:
    with pytest.raises(ForbiddenError):
        resolve_owner_ids(LEAD, "all", DIRECTORY)
    with pytest.raises(ForbiddenError):
        resolve_owner_ids(JUNIOR, "all", DIRECTORY)


def test_owner_ids_rejects_unknown_scope() -> None:
    with pytest.raises(BadRequestError):
        resolve_owner_ids(ADMIN, "everyone", DIRECTORY)


def test_selectable_advisors_per_role() -> None:
    assert [advisor.user_id for advisor in selectable_advisors(LEAD, DIRECTORY)] == ["u-lead", "u-j1", "u-j2"]
    assert selectable_advisors(JUNIOR, DIRECTORY) == [JUNIOR]
    admin_view = selectable_advisors(ADMIN, DIRECTORY)
    assert [advisor.display_name for advisor in admin_view] == sorted(
        advisor.display_name for advisor in DIRECTORY
    )


def test_goal_edit_permissions() -> None:
    assert can_edit_goals_for(ADMIN, OUTSIDER)
    assert can_edit_goals_for(LEAD, LEAD)
    assert can_edit_goals_for(LEAD, JUNIOR_TWO)
    assert not can_edit_goals_for(LEAD, OUTSIDER)
    assert not can_edit_goals_for(JUNIOR, JUNIOR)
