from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple, TypeVar

import httpx

from advisory_monitor.analytics.report_merge import (
    aggregate_team_rows,
    aggregate_totals,
    merge_by_month,
    summarize_metrics,
)
from advisory_monitor.analytics.scope import ReportScope, resolve_report_scope
from advisory_monitor.core.config import get_settings
from advisory_monitor.core.errors import StaleRequestError
from advisory_monitor.models.advisors import AdvisorRecord
from advisory_monitor.models.reports import GoalsRecord, MonthlyMetricsRecord, ProgressRecord
from advisory_monitor.repositories.advisors_repository import AdvisorsRepository
from advisory_monitor.repositories.goals_repository import GoalsRepository
from advisory_monitor.repositories.progress_repository import ProgressRepository
from advisory_monitor.schemas.reports import ReportFilters, ReportResponse
from advisory_monitor.shared.generation import RequestGenerationTracker
from advisory_monitor.shared.months import MonthKey, month_range, months_by_year, resolve_report_window

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=MonthlyMetricsRecord)
YearFetch = Callable[[int, Sequence[int], Sequence[str]], List[R]]


@dataclass(frozen=True)
class GoalsSource:
    """One way of reading monthly goals; sources are tried in order until one succeeds."""

    name: str
    fetch: YearFetch


class ReportService:
    def __init__(
        self,
        goals_repository: GoalsRepository,
        progress_repository: ProgressRepository,
        advisors_repository: AdvisorsRepository,
        tracker: Optional[RequestGenerationTracker] = None,
        goals_sources: Optional[List[GoalsSource]] = None,
        max_workers: Optional[int] = None,
        default_months: Optional[int] = None,
    ) -> None:
        self.goals_repository = goals_repository
        self.progress_repository = progress_repository
        self.advisors_repository = advisors_repository
        self.tracker = tracker or RequestGenerationTracker()
        # The normalized table is not populated in every deployment; the view is the compatibility path.
        self.goals_sources = goals_sources or [
            GoalsSource(name="goals_monthly", fetch=goals_repository.list_goals_monthly),
            GoalsSource(name="v_goals_monthly", fetch=goals_repository.list_goals_monthly_view),
        ]
        if max_workers is None or default_months is None:
            settings = get_settings()
            max_workers = max_workers or settings.report_fetch_max_workers
            default_months = default_months or settings.report_default_months
        self.max_workers = max_workers
        self.default_months = default_months

    def get_goals_vs_actual(
        self, current: AdvisorRecord, filters: ReportFilters
    ) -> Tuple[ReportResponse, Optional[int]]:
        from_key, to_key = resolve_report_window(filters.from_key, filters.to_key, self.default_months)
        generation = self.tracker.begin(filters.view_id) if filters.view_id else None

        # Team Leads need the directory to check membership even for a single advisor.
        needs_directory = current.can_manage_team and (filters.team or current.is_team_lead)
        directory = self.advisors_repository.list_advisors() if needs_directory else []
        scope = resolve_report_scope(current, filters.advisor_user_id, filters.team, directory)
        report = self.build_report(scope, from_key, to_key)

        if filters.view_id and generation is not None and not self.tracker.is_current(filters.view_id, generation):
            logger.info(
                "Discarding report for view %s: generation %s superseded by %s",
                filters.view_id,
                generation,
                self.tracker.latest(filters.view_id),
            )
            raise StaleRequestError("Report request superseded by a newer selection")
        return report, generation

    def build_report(self, scope: ReportScope, from_key: MonthKey, to_key: MonthKey) -> ReportResponse:
        window = months_by_year(month_range(from_key, to_key))
        # Goals and progress are independent; both must land before merging.
        with ThreadPoolExecutor(max_workers=2) as pool:
            goals_future = pool.submit(self.fetch_goals, window, scope.advisor_ids)
            progress_future = pool.submit(self.fetch_progress, window, scope.advisor_ids)
            goals, goals_source = goals_future.result()
            progress = progress_future.result()

        if scope.is_team:
            goals = aggregate_team_rows(goals)
            progress = aggregate_team_rows(progress)

        rows = merge_by_month(goals, progress, from_key, to_key)
        totals = aggregate_totals(rows)
        return ReportResponse(
            from_key=str(from_key),
            to_key=str(to_key),
            scope=scope.label,
            advisor_user_id=scope.advisor_user_id,
            advisor_ids=list(scope.advisor_ids),
            goals_source=goals_source,
            rows=rows,
            totals=totals,
            summaries=summarize_metrics(totals),
        )

    def fetch_goals(
        self, window: Dict[int, List[int]], advisor_ids: Sequence[str]
    ) -> Tuple[List[GoalsRecord], Optional[str]]:
        if not advisor_ids:
            return [], None
        last_error: Optional[Exception] = None
        for source in self.goals_sources:
            try:
                return self._fetch_by_year(source.fetch, window, advisor_ids), source.name
            except (httpx.HTTPError, ValueError) as exc:
                logger.warning("Goals source %s failed, trying the next one: %s", source.name, exc)
                last_error = exc
        if last_error is not None:
            raise last_error
        return [], None

    def fetch_progress(
        self, window: Dict[int, List[int]], advisor_ids: Sequence[str]
    ) -> List[ProgressRecord]:
        if not advisor_ids:
            return []
        return self._fetch_by_year(self.progress_repository.list_progress_monthly, window, advisor_ids)

    def _fetch_by_year(
        self, fetch: YearFetch, window: Dict[int, List[int]], advisor_ids: Sequence[str]
    ) -> List[R]:
        # The store filters on (year, month list), so each year is its own query.
        years = sorted(window)
        if len(years) <= 1:
            return [row for year in years for row in fetch(year, window[year], advisor_ids)]
        rows: List[R] = []
        with ThreadPoolExecutor(max_workers=min(len(years), self.max_workers)) as pool:
            futures = [pool.submit(fetch, year, window[year], advisor_ids) for year in years]
            for future in futures:
                rows.extend(future.result())
        return rows

