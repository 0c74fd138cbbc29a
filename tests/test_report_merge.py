from __future__ import annotations

import logging
from decimal import Decimal

from advisory_monitor.analytics.report_merge import (
    add_metrics,
    aggregate_team_rows,
    aggregate_totals,
    completion_status,
    merge_by_month,
    percent_complete,
    summarize_metrics,
)
from advisory_monitor.models.reports import TEAM_SCOPE
from advisory_monitor.schemas.reports import MetricVector
from stubs import goals_row, progress_row


def test_merge_zero_fills_missing_months() -> None:
    goals = [goals_row("u-1", 2025, month, consulenze=5) for month in (1, 2, 3)]
    progress = [progress_row("u-1", 2025, 1, consulenze=3), progress_row("u-1", 2025, 3, consulenze=4)]

    rows = merge_by_month(goals, progress, "2025-01", "2025-03")

    assert [row.label for row in rows] == ["01/25", "02/25", "03/25"]
    assert rows[1].actual == MetricVector()
    totals = aggregate_totals(rows)
    assert totals.goal.consulenze == 15
    assert totals.actual.consulenze == 7


def test_merge_aligns_sparse_goals_and_progress() -> None:
    goals = [goals_row("u-1", 2025, 1, consulenze=10), goals_row("u-1", 2025, 3, consulenze=5)]
    progress = [progress_row("u-1", 2025, 1, consulenze=7)]

    rows = merge_by_month(goals, progress, "2025-01", "2025-03")

    assert [(row.month_key, row.goal.consulenze, row.actual.consulenze) for row in rows] == [
        ("2025-01", 10, 7),
        ("2025-02", 0, 0),
        ("2025-03", 5, 0),
    ]
    totals = aggregate_totals(rows)
    assert (totals.goal.consulenze, totals.actual.consulenze) == (15, 7)
    assert merge_by_month(goals, progress, "2025-01", "2025-03") == rows


def test_merge_without_any_data_yields_zero_rows_for_every_month() -> None:
    rows = merge_by_month([], [], "2025-11", "2026-01")
    assert [row.month_key for row in rows] == ["2025-11", "2025-12", "2026-01"]
    assert all(row.goal == MetricVector() and row.actual == MetricVector() for row in rows)


def test_merge_ignores_rows_outside_range() -> None:
    rows = merge_by_month([goals_row("u-1", 2024, 12, consulenze=9)], [], "2025-01", "2025-01")
    assert rows[0].goal.consulenze == 0


def test_duplicate_month_keeps_last_row(caplog) -> None:
    progress = [progress_row("u-1", 2025, 1, contratti=1), progress_row("u-2", 2025, 1, contratti=2)]
    with caplog.at_level(logging.WARNING):
        rows = merge_by_month([], progress, "2025-01", "2025-01")
    assert rows[0].actual.contratti == 2
    assert "Duplicate progress row" in caplog.text


def test_team_aggregation_sums_per_month() -> None:
    rows = aggregate_team_rows(
        [
            progress_row("u-1", 2025, 1, consulenze=3, prod_vpu=100.5),
            progress_row("u-2", 2025, 1, consulenze=4, prod_vpu=50),
            progress_row("u-2", 2025, 2, consulenze=1),
        ]
    )
    assert len(rows) == 2
    january = rows[0]
    assert january.advisor_scope == TEAM_SCOPE
    assert january.metrics.consulenze == 7
    assert january.metrics.prod_vpu == 150.5
    assert rows[1].metrics.consulenze == 1


def test_team_aggregation_keeps_record_type() -> None:
    rows = aggregate_team_rows([goals_row("u-1", 2025, 1, contratti=2)])
    assert type(rows[0]).__name__ == "GoalsRecord"


def test_percent_complete_with_zero_goal() -> None:
    assert percent_complete(5, 0) == 0
    assert percent_complete(0, 0) == 0


def test_percent_complete_rounds_and_can_exceed_hundred() -> None:
    assert percent_complete(7, 15) == 46.7
    assert percent_complete(120, 100) == 120.0


def test_completion_status_bands() -> None:
    assert completion_status(100) == "achieved"
    assert completion_status(70) == "approaching"
    assert completion_status(69.9) == "behind"


def test_summaries_cover_every_metric() -> None:
    rows = merge_by_month(
        [goals_row("u-1", 2025, 1, consulenze=10, prod_danni=1000)],
        [progress_row("u-1", 2025, 1, consulenze=8, prod_danni=1200)],
        "2025-01",
        "2025-01",
    )
    summaries = {summary.metric: summary for summary in summarize_metrics(aggregate_totals(rows))}
    assert len(summaries) == 6
    assert summaries["consulenze"].display_label == "Appuntamenti"
    assert summaries["consulenze"].value_format == "int"
    assert summaries["consulenze"].status == "approaching"
    assert summaries["prod_danni"].value_format == "currency"
    assert summaries["prod_danni"].percent_complete == 120.0
    assert summaries["contratti"].percent_complete == 0


def test_metric_vector_normalizes_store_values() -> None:
    vector = MetricVector(consulenze=None, contratti="3", prod_danni="", prod_vprot=12.5)
    assert vector.consulenze == 0
    assert vector.contratti == 3
    assert vector.prod_danni == 0
    assert vector.production_total() == 12.5


def test_production_amounts_add_exactly() -> None:
    total = add_metrics(MetricVector(prod_danni=0.1, prod_vpu="0.7"), MetricVector(prod_danni=0.2, prod_vpu=0.1))
    assert total.prod_danni == Decimal("0.3")
    assert total.production_total() == Decimal("1.1")


def test_production_amounts_serialize_as_numbers() -> None:
    payload = MetricVector(prod_danni=Decimal("1250.40"), consulenze=2).model_dump(mode="json", by_alias=True)
    assert payload["prodDanni"] == 1250.4
    assert payload["consulenze"] == 2
