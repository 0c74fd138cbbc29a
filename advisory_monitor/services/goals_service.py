from __future__ import annotations

import logging
from typing import List

from advisory_monitor.analytics.report_merge import merge_by_month
from advisory_monitor.analytics.scope import can_edit_goals_for
from advisory_monitor.core.errors import BadRequestError, ForbiddenError, NotFoundError
from advisory_monitor.models.advisors import AdvisorRecord
from advisory_monitor.models.reports import AnnualGoalsRecord, GoalsRecord
from advisory_monitor.repositories.advisors_repository import AdvisorsRepository
from advisory_monitor.repositories.goals_repository import GoalsRepository
from advisory_monitor.repositories.progress_repository import ProgressRepository
from advisory_monitor.schemas.advisors import AdvisorSummary
from advisory_monitor.schemas.goals import (
    AnnualGoals,
    GoalProgressPoint,
    GoalSheet,
    GoalSheetUpdateRequest,
    MonthlyGoals,
)
from advisory_monitor.schemas.reports import METRIC_FIELDS, MetricVector
from advisory_monitor.shared.months import MonthKey

logger = logging.getLogger(__name__)


class GoalsService:
    def __init__(
        self,
        goals_repository: GoalsRepository,
        progress_repository: ProgressRepository,
        advisors_repository: AdvisorsRepository,
    ) -> None:
        self.goals_repository = goals_repository
        self.progress_repository = progress_repository
        self.advisors_repository = advisors_repository

    def get_goal_sheet(self, current: AdvisorRecord, advisor_user_id: str, month_key: str) -> GoalSheet:
        target = self._authorize(current, advisor_user_id)
        key = MonthKey.parse(month_key)
        return self._build_sheet(target, key)

    def save_goal_sheet(self, current: AdvisorRecord, request: GoalSheetUpdateRequest) -> GoalSheet:
        target = self._authorize(current, request.advisor_user_id)
        key = MonthKey.parse(request.month_key)
        if request.annual is None and request.monthly is None:
            raise BadRequestError("Nothing to save: provide annual and/or monthly targets")
        for targets in (request.annual, request.monthly):
            if targets is not None:
                self._validate_targets(targets)

        if request.annual is not None:
            self.goals_repository.upsert_annual_goals(
                AnnualGoalsRecord(advisor_user_id=request.advisor_user_id, year=key.year, targets=request.annual)
            )
        if request.monthly is not None:
            self.goals_repository.upsert_monthly_goals(
                GoalsRecord(
                    advisor_scope=request.advisor_user_id,
                    year=key.year,
                    month=key.month,
                    metrics=request.monthly,
                )
            )
        logger.info(
            "Goals saved for advisor %s (%s) by %s", request.advisor_user_id, key, current.user_id
        )
        return self._build_sheet(target, key)

    def _authorize(self, current: AdvisorRecord, advisor_user_id: str) -> AdvisorRecord:
        if not current.can_manage_team:
            raise ForbiddenError("Only Admin and Team Lead advisors can manage goals")
        target = self.advisors_repository.get_by_user_id(advisor_user_id)
        if target is None:
            raise NotFoundError(f"Advisor {advisor_user_id} not found")
        if not can_edit_goals_for(current, target):
            raise ForbiddenError("Advisor is not part of your team")
        return target

    def _build_sheet(self, target: AdvisorRecord, key: MonthKey) -> GoalSheet:
        user_id = target.user_id or ""
        annual = self.goals_repository.get_annual_goals(user_id, key.year)
        monthly = self.goals_repository.get_monthly_goals(user_id, key.year, key.month)
        return GoalSheet(
            advisor=AdvisorSummary.from_record(target),
            year=key.year,
            month_key=str(key),
            annual=AnnualGoals(
                advisor_user_id=user_id,
                year=key.year,
                targets=annual.targets if annual else MetricVector(),
            ),
            monthly=MonthlyGoals(
                advisor_user_id=user_id,
                year=key.year,
                month=key.month,
                month_key=str(key),
                targets=monthly.metrics if monthly else MetricVector(),
            ),
            progress=self._year_progress(user_id, key.year),
            can_edit=True,
        )

    def _year_progress(self, advisor_user_id: str, year: int) -> List[GoalProgressPoint]:
        records = self.progress_repository.list_progress_monthly(year, list(range(1, 13)), [advisor_user_id])
        rows = merge_by_month([], records, MonthKey(year, 1), MonthKey(year, 12))
        return [
            GoalProgressPoint(
                month=row.month,
                label=row.label,
                metrics=row.actual,
                production_total=row.actual.production_total(),
            )
            for row in rows
        ]

    @staticmethod
    def _validate_targets(targets: MetricVector) -> None:
        negative = [field for field in METRIC_FIELDS if getattr(targets, field) < 0]
        if negative:
            raise BadRequestError(f"Targets must not be negative: {', '.join(negative)}")
