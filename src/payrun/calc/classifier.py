"""Attendance classification: one verdict per employee per cutoff date."""
from __future__ import annotations

from datetime import date
from typing import Iterable, Mapping

from payrun.calc.holidays import lookup_holiday
from payrun.calc.leave import paid_leave_on
from payrun.calc.schedule import day_key, is_rest_day
from payrun.calc.types import (
    AttendanceEntry,
    AttendanceStatus,
    CutoffRange,
    DayClassification,
    DayKind,
    EmployeeProfile,
    HolidayEntry,
    HolidayType,
    LeaveEntry,
    LeaveTypePolicy,
)

_DAY_MULTIPLIER = {
    AttendanceStatus.PRESENT: 1.0,
    AttendanceStatus.HALF_DAY: 0.5,
}


def index_attendance(entries: Iterable[AttendanceEntry]) -> dict[int, AttendanceEntry]:
    """Key attendance by calendar day. Later entries for the same day win."""
    return {day_key(e.date): e for e in entries}


def classify_day(
    employee: EmployeeProfile,
    day: date,
    entry: AttendanceEntry | None,
    holidays: Iterable[HolidayEntry],
    leaves: Iterable[LeaveEntry],
    policies: Iterable[LeaveTypePolicy] = (),
) -> DayClassification:
    rest = is_rest_day(employee, day)
    holiday = lookup_holiday(day, holidays, entry)
    holiday_type = holiday.holiday_type if holiday.is_holiday else None
    base = {"date": day, "is_rest_day": rest, "holiday_type": holiday_type, "entry": entry}

    if entry is not None and entry.status in _DAY_MULTIPLIER:
        return DayClassification(
            kind=DayKind.WORKED, multiplier=_DAY_MULTIPLIER[entry.status], **base
        )

    paid = paid_leave_on(day, leaves, policies) is not None

    if entry is not None:
        if paid:
            return DayClassification(kind=DayKind.PAID_LEAVE, **base)
        if holiday_type == HolidayType.REGULAR:
            return DayClassification(kind=DayKind.HOLIDAY_UNWORKED, **base)
        return DayClassification(kind=DayKind.UNPAID_ABSENCE, **base)

    # Regular holidays are paid whatever the schedule says.
    if holiday_type == HolidayType.REGULAR and not paid:
        return DayClassification(kind=DayKind.HOLIDAY_UNWORKED, **base)
    if rest:
        return DayClassification(kind=DayKind.REST_DAY, **base)
    if paid:
        return DayClassification(kind=DayKind.PAID_LEAVE, **base)
    return DayClassification(kind=DayKind.UNPAID_ABSENCE, **base)


def classify_period(
    employee: EmployeeProfile,
    cutoff: CutoffRange,
    attendance: Mapping[int, AttendanceEntry],
    holidays: Iterable[HolidayEntry],
    leaves: Iterable[LeaveEntry],
    policies: Iterable[LeaveTypePolicy] = (),
) -> list[DayClassification]:
    holidays = list(holidays)
    leaves = [lv for lv in leaves if lv.employee_id == employee.id]
    policies = list(policies)
    return [
        classify_day(employee, d, attendance.get(day_key(d)), holidays, leaves, policies)
        for d in cutoff.dates()
    ]
