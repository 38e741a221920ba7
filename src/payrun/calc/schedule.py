"""Schedule resolution and calendar-date helpers."""
from __future__ import annotations

from datetime import date, datetime
from typing import NamedTuple
from zoneinfo import ZoneInfo

from payrun.calc.types import CutoffRange, EmployeeProfile


class ResolvedDay(NamedTuple):
    is_workday: bool
    in_time: str | None
    out_time: str | None
    is_override: bool = False


def to_local_date(value: date | datetime, tz: str = "Asia/Manila") -> date:
    """Calendar date of *value* in the organization's timezone.

    Aware datetimes are converted first; naive datetimes are taken as local.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(ZoneInfo(tz))
        return value.date()
    return value


def day_key(day: date) -> int:
    return day.toordinal()


def parse_hhmm(value: str | None) -> int | None:
    """Minutes after midnight for ``"HH:mm"``; ``None`` when absent or malformed."""
    if not value:
        return None
    parts = value.strip().split(":")
    if len(parts) < 2:
        return None
    try:
        hours, minutes = int(parts[0]), int(parts[1])
    except ValueError:
        return None
    if not (0 <= hours <= 23 and 0 <= minutes <= 59):
        return None
    return hours * 60 + minutes


def resolve_day(employee: EmployeeProfile, day: date) -> ResolvedDay:
    for override in employee.schedule_overrides:
        if override.date == day:
            return ResolvedDay(True, override.in_time, override.out_time, True)
    default = employee.schedule.for_weekday(day.weekday())
    return ResolvedDay(default.is_workday, default.in_time, default.out_time, False)


def is_rest_day(employee: EmployeeProfile, day: date) -> bool:
    return not resolve_day(employee, day).is_workday


def working_days_in_range(employee: EmployeeProfile, cutoff: CutoffRange) -> int:
    return sum(1 for d in cutoff.dates() if resolve_day(employee, d).is_workday)
