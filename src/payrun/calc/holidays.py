"""Holiday registry lookup."""
from __future__ import annotations

from datetime import date
from typing import Iterable, NamedTuple

from payrun.calc.types import AttendanceEntry, HolidayEntry, HolidayType


class HolidayInfo(NamedTuple):
    is_holiday: bool
    holiday_type: HolidayType | None = None
    name: str | None = None


NOT_A_HOLIDAY = HolidayInfo(False)


def _matches(holiday: HolidayEntry, day: date) -> bool:
    if holiday.is_recurring:
        return (holiday.date.month, holiday.date.day) == (day.month, day.day)
    return holiday.date == day


def lookup_holiday(
    day: date,
    holidays: Iterable[HolidayEntry],
    entry: AttendanceEntry | None = None,
) -> HolidayInfo:
    """Resolve the holiday status of *day*.

    An explicit flag on the attendance record wins over the registry.
    """
    if entry is not None and entry.is_holiday and entry.holiday_type is not None:
        return HolidayInfo(True, entry.holiday_type, entry.remarks)
    for holiday in holidays:
        if _matches(holiday, day):
            return HolidayInfo(True, holiday.type, holiday.name)
    return NOT_A_HOLIDAY


def holidays_for_year(holidays: Iterable[HolidayEntry], year: int) -> list[HolidayEntry]:
    """Recurring holidays plus those pinned to *year*."""
    return [
        h for h in holidays
        if h.is_recurring or (h.year if h.year is not None else h.date.year) == year
    ]
