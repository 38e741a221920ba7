"""Pay components: rates, basic pay, and per-day premiums.

All money values are unrounded floats; rounding to centavos happens once,
when the final result is assembled in :mod:`payrun.calc.payroll`.
"""
from __future__ import annotations

from pydantic import BaseModel

from payrun.calc.rates import (
    HOURS_PER_DAY,
    LEGACY_WORKING_DAYS_PER_MONTH,
    PayrollRates,
)
from payrun.calc.schedule import ResolvedDay, parse_hhmm
from payrun.calc.types import (
    Compensation,
    CutoffRange,
    DayClassification,
    HolidayType,
    SalaryType,
)

MINUTES_PER_DAY = 24 * 60
REGULAR_OVERTIME_HOURS = 8.0

# Night windows on a two-day minute axis: 00:00-06:00, 22:00-06:00(+1), 22:00-24:00(+1).
_NIGHT_WINDOWS = ((0, 360), (1320, 1800), (2760, 2880))


# ---------------------------------------------------------------------------
# Rates and basic pay
# ---------------------------------------------------------------------------


def daily_rate(compensation: Compensation, rates: PayrollRates | None = None) -> float:
    salary = compensation.basic_salary or 0.0
    if compensation.salary_type == SalaryType.DAILY:
        return salary
    if compensation.salary_type == SalaryType.HOURLY:
        return salary * HOURS_PER_DAY
    if rates is None:
        return salary / LEGACY_WORKING_DAYS_PER_MONTH
    base = salary
    if rates.daily_rate_includes_allowance:
        base += compensation.allowance or 0.0
    return base * 12 / rates.effective_working_days_per_year


def hourly_rate(daily: float) -> float:
    return daily / HOURS_PER_DAY


def basic_pay(
    compensation: Compensation,
    cutoff: CutoffRange,
    daily: float,
    paid_days: float,
    rates: PayrollRates,
) -> float:
    """Base earnings before premiums.

    Monthly employees earn half the salary per semi-monthly cutoff and the
    full salary on a longer cutoff. Daily and hourly employees earn the daily
    rate for every day worked or on paid leave.
    """
    if compensation.salary_type == SalaryType.MONTHLY:
        salary = compensation.basic_salary or 0.0
        return salary / 2 if cutoff.is_semi_monthly(rates.semi_monthly_max_days) else salary
    return daily * paid_days


# ---------------------------------------------------------------------------
# Time arithmetic
# ---------------------------------------------------------------------------


def _overlap(a_start: int, a_end: int, b_start: int, b_end: int) -> int:
    return max(0, min(a_end, b_end) - max(a_start, b_start))


def night_diff_hours(
    actual_in: str | None,
    actual_out: str | None,
    scheduled_in: str | None = None,
) -> float:
    """Hours of the shift falling in 22:00-06:00.

    A shift whose clock-out is not after its clock-in crosses midnight. A
    missing clock-in falls back to the scheduled start; with no start at all
    only the clock-out is used (``out - 22`` after 22:00, ``2 + out`` before
    06:00).
    """
    end = parse_hhmm(actual_out)
    if end is None:
        return 0.0
    start = parse_hhmm(actual_in)
    if start is None:
        start = parse_hhmm(scheduled_in)
    if start is None:
        if end >= 22 * 60:
            return (end - 22 * 60) / 60
        if end < 6 * 60:
            return 2 + end / 60
        return 0.0
    if end <= start:
        end += MINUTES_PER_DAY
    minutes = sum(_overlap(start, end, lo, hi) for lo, hi in _NIGHT_WINDOWS)
    return minutes / 60


def late_minutes(scheduled_in: str | None, actual_in: str | None) -> int:
    sched, actual = parse_hhmm(scheduled_in), parse_hhmm(actual_in)
    if sched is None or actual is None:
        return 0
    return max(0, actual - sched)


def undertime_minutes(
    scheduled_out: str | None, actual_out: str | None, actual_in: str | None = None,
) -> int:
    sched, actual = parse_hhmm(scheduled_out), parse_hhmm(actual_out)
    if sched is None or actual is None:
        return 0
    start = parse_hhmm(actual_in)
    if start is not None and actual <= start:
        # Clocked out after midnight.
        actual += MINUTES_PER_DAY
        if sched <= start:
            sched += MINUTES_PER_DAY
    return max(0, sched - actual)


# ---------------------------------------------------------------------------
# Overtime
# ---------------------------------------------------------------------------


def overtime_multiplier(
    is_rest_day: bool, holiday_type: HolidayType | None, rates: PayrollRates,
) -> float:
    """Precedence: rest day + holiday, holiday, rest day, regular."""
    if holiday_type == HolidayType.REGULAR:
        holiday_rate = rates.overtime_regular_holiday_rate
    elif holiday_type == HolidayType.SPECIAL:
        holiday_rate = rates.overtime_special_holiday_rate
    else:
        holiday_rate = None

    if is_rest_day and holiday_rate is not None:
        return holiday_rate + rates.rest_day_premium_rate
    if holiday_rate is not None:
        return holiday_rate
    if is_rest_day:
        return rates.overtime_rest_day_rate
    return rates.overtime_regular_rate


def split_overtime(hours: float) -> tuple[float, float]:
    hours = max(0.0, hours or 0.0)
    regular = min(hours, REGULAR_OVERTIME_HOURS)
    return regular, hours - regular


def overtime_bucket(is_rest_day: bool, holiday_type: HolidayType | None) -> str:
    """Reporting bucket prefix on :class:`~payrun.calc.types.PayBreakdown`."""
    if holiday_type == HolidayType.REGULAR:
        return "overtime_legal_holiday"
    if holiday_type == HolidayType.SPECIAL:
        return "overtime_special_holiday"
    if is_rest_day:
        return "overtime_rest_day"
    return "overtime_regular"


# ---------------------------------------------------------------------------
# Worked day
# ---------------------------------------------------------------------------


class WorkedDayPay(BaseModel):
    rest_day_pay: float = 0.0
    holiday_pay: float = 0.0
    night_diff_hours: float = 0.0
    night_diff_pay: float = 0.0
    overtime_hours: float = 0.0
    overtime_pay: float = 0.0
    overtime_buckets: dict[str, float] = {}
    late_minutes: int = 0
    undertime_minutes: int = 0


def price_worked_day(
    day: DayClassification,
    schedule: ResolvedDay,
    daily: float,
    rates: PayrollRates,
) -> WorkedDayPay:
    entry = day.entry
    m = day.multiplier
    hourly = hourly_rate(daily)
    pay = WorkedDayPay()
    if entry is None:
        return pay

    if day.is_rest_day:
        pay.rest_day_pay = rates.rest_day_premium_rate * m * daily

    if day.holiday_type == HolidayType.REGULAR:
        pay.holiday_pay = daily * rates.regular_holiday_rate * m
    elif day.holiday_type == HolidayType.SPECIAL:
        pay.holiday_pay = daily * rates.special_holiday_rate * m

    if entry.overtime_hours:
        regular, excess = split_overtime(entry.overtime_hours)
        multiplier = overtime_multiplier(day.is_rest_day, day.holiday_type, rates)
        bucket = overtime_bucket(day.is_rest_day, day.holiday_type)
        regular_pay = regular * hourly * multiplier
        excess_pay = excess * hourly * multiplier
        pay.overtime_hours = regular + excess
        pay.overtime_pay = regular_pay + excess_pay
        if bucket == "overtime_regular":
            pay.overtime_buckets = {bucket: regular_pay + excess_pay}
        else:
            pay.overtime_buckets = {bucket: regular_pay, f"{bucket}_excess": excess_pay}

    scheduled_in = entry.scheduled_in or schedule.in_time
    scheduled_out = entry.scheduled_out or schedule.out_time

    pay.night_diff_hours = night_diff_hours(entry.actual_in, entry.actual_out, scheduled_in)
    pay.night_diff_pay = pay.night_diff_hours * hourly * rates.night_diff_rate

    pay.late_minutes = late_minutes(scheduled_in, entry.actual_in)
    pay.undertime_minutes = undertime_minutes(scheduled_out, entry.actual_out, entry.actual_in)
    return pay
