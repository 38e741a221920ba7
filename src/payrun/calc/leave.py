"""Leave eligibility for payroll and leave-entitlement arithmetic."""
from __future__ import annotations

import calendar
import math
from datetime import date, timedelta
from typing import Iterable

from payrun.calc.types import LeaveEntry, LeaveStatus, LeaveTypePolicy

PAID_BUILTIN_TYPES = frozenset({"vacation", "sick", "maternity", "paternity"})
MAX_CONVERTIBLE_DAYS = 5


# ---------------------------------------------------------------------------
# Eligibility
# ---------------------------------------------------------------------------


def is_paid_leave_type(leave: LeaveEntry, policies: Iterable[LeaveTypePolicy] = ()) -> bool:
    if leave.leave_type in PAID_BUILTIN_TYPES:
        return True
    if leave.leave_type != "custom":
        return False
    name = (leave.custom_leave_type or "").strip().lower()
    for policy in policies:
        if policy.name.strip().lower() == name:
            return policy.is_paid
    return False


def paid_leave_on(
    day: date,
    leaves: Iterable[LeaveEntry],
    policies: Iterable[LeaveTypePolicy] = (),
) -> LeaveEntry | None:
    """The approved paid leave covering *day*, if any."""
    policies = list(policies)
    for leave in leaves:
        if leave.status != LeaveStatus.APPROVED:
            continue
        if not (leave.start_date <= day <= leave.end_date):
            continue
        if is_paid_leave_type(leave, policies):
            return leave
    return None


def count_working_days(start: date, end: date) -> int:
    """Monday to Friday count over an inclusive range."""
    if end < start:
        return 0
    days = 0
    day = start
    while day <= end:
        if day.weekday() < 5:
            days += 1
        day += timedelta(days=1)
    return days


# ---------------------------------------------------------------------------
# Entitlement
# ---------------------------------------------------------------------------


def _days_in_month(day: date) -> int:
    return calendar.monthrange(day.year, day.month)[1]


def _same_day_in_year(day: date, year: int) -> date:
    try:
        return day.replace(year=year)
    except ValueError:
        # Feb 29 anniversaries fall on Feb 28 in common years.
        return day.replace(year=year, day=28)


def months_worked(start: date, end: date) -> float:
    months = (end.year - start.year) * 12 + (end.month - start.month)
    day_diff = end.day - start.day
    months += day_diff / _days_in_month(end)
    return max(0.0, months)


def prorated_leave(annual: float, hire_date: date, reference: date) -> float:
    """``annual / 12`` per month of service, never more than *annual*."""
    months = min(months_worked(hire_date, reference), 12.0)
    return round(annual / 12 * months, 2)


def years_since(start: date, end: date) -> float:
    if end <= start:
        return 0.0
    years = end.year - start.year
    last_anniversary = _same_day_in_year(start, end.year)
    if last_anniversary > end:
        years -= 1
        last_anniversary = _same_day_in_year(start, end.year - 1)
    days_in_year = 366 if calendar.isleap(end.year) else 365
    return years + (end - last_anniversary).days / days_in_year


def anniversary_leave(regularization_date: date | None, reference: date) -> int:
    """One extra day per full year since regularization."""
    if regularization_date is None:
        return 0
    return math.floor(years_since(regularization_date, reference))


def convertible_leave_days(balance: float) -> float:
    return min(MAX_CONVERTIBLE_DAYS, max(0.0, balance))


def leave_entitlement(
    annual: float,
    hire_date: date | None,
    regularization_date: date | None,
    reference: date,
    prorate: bool = True,
) -> dict[str, float]:
    if prorate and hire_date is not None:
        base = prorated_leave(annual, hire_date, reference)
    else:
        base = float(annual)
    extra = anniversary_leave(regularization_date, reference)
    return {"prorated": base, "anniversary": float(extra), "total": round(base + extra, 2)}
