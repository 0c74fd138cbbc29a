from __future__ import annotations

from datetime import date, timedelta
from typing import List, Tuple

MONTH_GRID_CELLS = 42
WEEK_DAYS = 7


def week_start(value: date) -> date:
    # Weeks start on Monday.
    return value - timedelta(days=value.weekday())


def build_month_grid(year: int, month: int) -> List[Tuple[date, bool]]:
    """Six full weeks covering the month, as (day, in_month) pairs."""
    first = date(year, month, 1)
    start = week_start(first)
    cells: List[Tuple[date, bool]] = []
    for offset in range(MONTH_GRID_CELLS):
        day = start + timedelta(days=offset)
        cells.append((day, day.year == year and day.month == month))
    return cells


def build_week_grid(anchor: date) -> List[date]:
    start = week_start(anchor)
    return [start + timedelta(days=offset) for offset in range(WEEK_DAYS)]
