from __future__ import annotations

import re
from datetime import date
from typing import Dict, Iterable, List, NamedTuple, Optional, Tuple, Union

from advisory_monitor.core.errors import BadRequestError

MONTH_KEY_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"
_MONTH_KEY_RE = re.compile(MONTH_KEY_PATTERN)


class MonthKey(NamedTuple):
    """A calendar month. Tuple ordering gives the chronological total order."""

    year: int
    month: int

    @classmethod
    def parse(cls, value: str) -> "MonthKey":
        if not isinstance(value, str) or not _MONTH_KEY_RE.match(value.strip()):
            raise BadRequestError(f"Unsupported month key format: {value!r} (expected YYYY-MM)")
        year_text, month_text = value.strip().split("-")
        return cls(int(year_text), int(month_text))

    @classmethod
    def from_date(cls, value: date) -> "MonthKey":
        return cls(value.year, value.month)

    @property
    def label(self) -> str:
        return f"{self.month:02d}/{self.year % 100:02d}"

    def shift(self, months: int) -> "MonthKey":
        return add_months(self, months)

    def first_day(self) -> date:
        return date(self.year, self.month, 1)

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


MonthKeyLike = Union[MonthKey, str]


def to_month_key(value: MonthKeyLike) -> MonthKey:
    if isinstance(value, MonthKey):
        return value
    return MonthKey.parse(value)


def add_months(value: MonthKey, months: int) -> MonthKey:
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    return MonthKey(year, month)


def month_range(from_key: MonthKeyLike, to_key: MonthKeyLike) -> List[MonthKey]:
    """Every month from ``from_key`` to ``to_key`` inclusive, ascending.

    Callers must pass ``from_key <= to_key``; a reversed pair yields an empty list.
    """
    start = to_month_key(from_key)
    end = to_month_key(to_key)
    keys: List[MonthKey] = []
    year, month = start
    while (year, month) <= end:
        keys.append(MonthKey(year, month))
        month += 1
        if month > 12:
            month = 1
            year += 1
    return keys


def months_by_year(keys: Iterable[MonthKey]) -> Dict[int, List[int]]:
    grouped: Dict[int, List[int]] = {}
    for key in keys:
        grouped.setdefault(key.year, []).append(key.month)
    return grouped


def default_report_window(months: int, today: Optional[date] = None) -> Tuple[MonthKey, MonthKey]:
    current = MonthKey.from_date(today or date.today())
    return current.shift(-(months - 1)), current


def resolve_report_window(
    from_key: Optional[str],
    to_key: Optional[str],
    default_months: int,
    today: Optional[date] = None,
) -> Tuple[MonthKey, MonthKey]:
    default_from, default_to = default_report_window(default_months, today)
    start = MonthKey.parse(from_key) if from_key else default_from
    end = MonthKey.parse(to_key) if to_key else default_to
    if end < start:
        raise BadRequestError("to_key must not precede from_key")
    return start, end
