from __future__ import annotations

from typing import List, Optional

from pydantic import Field

from advisory_monitor.schemas.advisors import AdvisorSummary
from advisory_monitor.schemas.reports import MetricVector, Money
from advisory_monitor.shared.base import BaseRequestSchema, BaseSchema
from advisory_monitor.shared.months import MONTH_KEY_PATTERN


class AnnualGoals(BaseSchema):
    advisor_user_id: str
    year: int
    targets: MetricVector


class MonthlyGoals(BaseSchema):
    advisor_user_id: str
    year: int
    month: int
    month_key: str
    targets: MetricVector


class GoalProgressPoint(BaseSchema):
    month: int
    label: str
    metrics: MetricVector
    production_total: Money


class GoalSheet(BaseSchema):
    advisor: AdvisorSummary
    year: int
    month_key: str
    annual: AnnualGoals
    monthly: MonthlyGoals
    progress: List[GoalProgressPoint]
    can_edit: bool


class GoalSheetUpdateRequest(BaseRequestSchema):
    advisor_user_id: str = Field(min_length=1)
    month_key: str = Field(pattern=MONTH_KEY_PATTERN)
    annual: Optional[MetricVector] = None
    monthly: Optional[MetricVector] = None
