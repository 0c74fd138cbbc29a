from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Sequence, TypeVar

from advisory_monitor.models.reports import TEAM_SCOPE, GoalsRecord, MonthlyMetricsRecord, ProgressRecord
from advisory_monitor.schemas.reports import (
    COUNT_METRIC_FIELDS,
    METRIC_DISPLAY_LABELS,
    METRIC_FIELDS,
    MetricSummary,
    MetricVector,
    ReportMonthRow,
    ReportTotals,
)
from advisory_monitor.shared.months import MonthKey, MonthKeyLike, month_range

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=MonthlyMetricsRecord)

STATUS_ACHIEVED = "achieved"
STATUS_APPROACHING = "approaching"
STATUS_BEHIND = "behind"


def add_metrics(left: MetricVector, right: MetricVector) -> MetricVector:
    return MetricVector(**{field: getattr(left, field) + getattr(right, field) for field in METRIC_FIELDS})


def aggregate_team_rows(rows: Iterable[R]) -> List[R]:
    """Collapse per-advisor rows into one TEAM row per month, summing every metric."""
    by_month: Dict[MonthKey, R] = {}
    for row in rows:
        key = row.month_key
        current = by_month.get(key)
        if current is None:
            by_month[key] = row.__class__(
                advisor_scope=TEAM_SCOPE,
                year=row.year,
                month=row.month,
                metrics=row.metrics,
            )
            continue
        by_month[key] = current.model_copy(update={"metrics": add_metrics(current.metrics, row.metrics)})
    return list(by_month.values())


def _index_by_month(rows: Iterable[MonthlyMetricsRecord], kind: str) -> Dict[MonthKey, MetricVector]:
    indexed: Dict[MonthKey, MetricVector] = {}
    for row in rows:
        key = row.month_key
        if key in indexed:
            # Last write wins; duplicates usually mean a join fan-out in the store.
            logger.warning(
                "Duplicate %s row for %s (scope %s); keeping the last one", kind, key, row.advisor_scope
            )
        indexed[key] = row.metrics
    return indexed


def merge_by_month(
    goals: Sequence[GoalsRecord],
    progress: Sequence[ProgressRecord],
    from_key: MonthKeyLike,
    to_key: MonthKeyLike,
) -> List[ReportMonthRow]:
    """One row per month of the inclusive range, zero-filled where either side is missing."""
    goals_by_month = _index_by_month(goals, "goals")
    progress_by_month = _index_by_month(progress, "progress")
    merged: List[ReportMonthRow] = []
    for key in month_range(from_key, to_key):
        merged.append(
            ReportMonthRow(
                year=key.year,
                month=key.month,
                month_key=str(key),
                label=key.label,
                goal=goals_by_month.get(key, MetricVector()).model_copy(),
                actual=progress_by_month.get(key, MetricVector()).model_copy(),
            )
        )
    return merged


def aggregate_totals(rows: Iterable[ReportMonthRow]) -> ReportTotals:
    goal = MetricVector()
    actual = MetricVector()
    for row in rows:
        goal = add_metrics(goal, row.goal)
        actual = add_metrics(actual, row.actual)
    return ReportTotals(goal=goal, actual=actual)


def percent_complete(actual: float, goal: float) -> float:
    if goal <= 0:
        return 0.0
    return round(actual / goal * 100, 1)


def completion_status(percent: float) -> str:
    if percent >= 100:
        return STATUS_ACHIEVED
    if percent >= 70:
        return STATUS_APPROACHING
    return STATUS_BEHIND


def summarize_metrics(totals: ReportTotals) -> List[MetricSummary]:
    summaries: List[MetricSummary] = []
    for field in METRIC_FIELDS:
        goal_total = getattr(totals.goal, field)
        actual_total = getattr(totals.actual, field)
        percent = percent_complete(float(actual_total), float(goal_total))
        summaries.append(
            MetricSummary(
                metric=field,
                display_label=METRIC_DISPLAY_LABELS[field],
                value_format="int" if field in COUNT_METRIC_FIELDS else "currency",
                goal_total=goal_total,
                actual_total=actual_total,
                percent_complete=percent,
                status=completion_status(percent),
            )
        )
    return summaries
