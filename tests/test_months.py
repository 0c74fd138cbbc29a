from __future__ import annotations

from datetime import date

import pytest

from advisory_monitor.core.errors import BadRequestError
from advisory_monitor.shared.months import (
    MonthKey,
    month_range,
    months_by_year,
    resolve_report_window,
)


def test_month_range_crosses_year_boundary() -> None:
    keys = month_range("2025-11", "2026-02")
    assert [str(key) for key in keys] == ["2025-11", "2025-12", "2026-01", "2026-02"]
    assert [key.label for key in keys] == ["11/25", "12/25", "01/26", "02/26"]


def test_month_range_single_month() -> None:
    assert month_range("2025-03", "2025-03") == [MonthKey(2025, 3)]


def test_month_range_reversed_is_empty() -> None:
    assert month_range("2025-05", "2025-01") == []


SWEEP_KEYS = [f"{year}-{month:02d}" for year in range(2024, 2027) for month in range(1, 13)]


@pytest.mark.parametrize("from_key", SWEEP_KEYS)
def test_month_range_is_contiguous_from_every_start(from_key: str) -> None:
    start = MonthKey.parse(from_key)
    for to_key in SWEEP_KEYS[SWEEP_KEYS.index(from_key) :]:
        end = MonthKey.parse(to_key)
        keys = month_range(from_key, to_key)
        assert len(keys) == (end.year * 12 + end.month) - (start.year * 12 + start.month) + 1
        assert keys[0] == start
        assert keys[-1] == end
        assert all(earlier < later for earlier, later in zip(keys, keys[1:]))
        assert len({str(key) for key in keys}) == len(keys)


@pytest.mark.parametrize("value", ["2025-13", "25-01", "2025-1", "", "2025/01"])
def test_parse_rejects_malformed_keys(value: str) -> None:
    with pytest.raises(BadRequestError):
        MonthKey.parse(value)


def test_shift_and_ordering() -> None:
    assert MonthKey(2025, 1).shift(-1) == MonthKey(2024, 12)
    assert MonthKey(2025, 12).shift(1) == MonthKey(2026, 1)
    assert MonthKey(2024, 12) < MonthKey(2025, 1)


def test_months_by_year_groups_in_order() -> None:
    grouped = months_by_year(month_range("2024-11", "2025-02"))
    assert list(grouped.items()) == [(2024, [11, 12]), (2025, [1, 2])]


def test_default_window_ends_at_current_month() -> None:
    from_key, to_key = resolve_report_window(None, None, 6, today=date(2026, 3, 15))
    assert (str(from_key), str(to_key)) == ("2025-10", "2026-03")


def test_window_rejects_reversed_range() -> None:
    with pytest.raises(BadRequestError):
        resolve_report_window("2025-06", "2025-01", 6)
