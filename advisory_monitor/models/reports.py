from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel, Field

from advisory_monitor.schemas.reports import METRIC_FIELDS, MetricVector
from advisory_monitor.shared.months import MonthKey

TEAM_SCOPE = "TEAM"
TARGET_COLUMNS = {field: f"target_{field}" for field in METRIC_FIELDS}


class MonthlyMetricsRecord(BaseModel):
    advisor_scope: str
    year: int
    month: int = Field(ge=1, le=12)
    metrics: MetricVector = Field(default_factory=MetricVector)

    @property
    def month_key(self) -> MonthKey:
        return MonthKey(self.year, self.month)


class GoalsRecord(MonthlyMetricsRecord):
    @classmethod
    def from_table_row(cls, row: Dict[str, Any]) -> "GoalsRecord":
        return cls(
            advisor_scope=str(row.get("advisor_user_id") or ""),
            year=row.get("year"),
            month=row.get("month"),
            metrics=MetricVector(**{field: row.get(column) for field, column in TARGET_COLUMNS.items()}),
        )

    @classmethod
    def from_view_row(cls, row: Dict[str, Any]) -> "GoalsRecord":
        return cls(
            advisor_scope=str(row.get("advisor_user_id") or ""),
            year=row.get("year"),
            month=row.get("month"),
            metrics=MetricVector(**{field: row.get(field) for field in METRIC_FIELDS}),
        )


class ProgressRecord(MonthlyMetricsRecord):
    @classmethod
    def from_view_row(cls, row: Dict[str, Any]) -> "ProgressRecord":
        return cls(
            advisor_scope=str(row.get("advisor_user_id") or ""),
            year=row.get("year"),
            month=row.get("month"),
            metrics=MetricVector(**{field: row.get(field) for field in METRIC_FIELDS}),
        )


class AnnualGoalsRecord(BaseModel):
    advisor_user_id: str
    year: int
    targets: MetricVector = Field(default_factory=MetricVector)

    @classmethod
    def from_table_row(cls, row: Dict[str, Any]) -> "AnnualGoalsRecord":
        return cls(
            advisor_user_id=str(row.get("advisor_user_id") or ""),
            year=row.get("year"),
            targets=MetricVector(**{field: row.get(column) for field, column in TARGET_COLUMNS.items()}),
        )
