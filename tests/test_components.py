"""Rates, basic pay, time arithmetic and worked-day pricing."""
from datetime import date
import pytest
from payrun.calc.components import (
    basic_pay, daily_rate, hourly_rate, late_minutes, night_diff_hours, overtime_bucket,
    overtime_multiplier, price_worked_day, split_overtime, undertime_minutes,
)
from payrun.calc.rates import PayrollRates
from payrun.calc.schedule import ResolvedDay
from payrun.calc.types import (
    AttendanceEntry, Compensation, CutoffRange, DayClassification, DayKind, HolidayType, SalaryType,
)

RATES = PayrollRates()
MONTHLY = Compensation(basic_salary=30000)
FIRST_HALF = CutoffRange(start=date(2025, 1, 1), end=date(2025, 1, 15))
WHOLE_MONTH = CutoffRange(start=date(2025, 1, 1), end=date(2025, 1, 31))
NINE_TO_SIX = ResolvedDay(True, "09:00", "18:00")


# --- rates ---

def test_monthly_daily_rate_uses_working_days_per_year():
    assert daily_rate(MONTHLY, RATES) == pytest.approx(1379.31, abs=0.01)


def test_zero_working_days_falls_back_to_default():
    assert daily_rate(MONTHLY, PayrollRates(working_days_per_year=0)) == pytest.approx(1379.31, abs=0.01)


def test_daily_rate_without_rates_uses_legacy_divisor():
    assert daily_rate(Compensation(basic_salary=22000)) == pytest.approx(1000.0)


def test_daily_rate_can_include_allowance():
    comp = Compensation(basic_salary=26100, allowance=2610)
    assert daily_rate(comp, PayrollRates(daily_rate_includes_allowance=True)) == pytest.approx(1320.0)


def test_daily_and_hourly_salary_types():
    assert daily_rate(Compensation(basic_salary=800, salary_type=SalaryType.DAILY), RATES) == 800
    assert daily_rate(Compensation(basic_salary=100, salary_type=SalaryType.HOURLY), RATES) == 800
    assert hourly_rate(800) == 100


# --- basic pay ---

def test_monthly_basic_pay_is_half_per_semi_monthly_cutoff():
    assert basic_pay(MONTHLY, FIRST_HALF, 0, 0, RATES) == 15000
    assert basic_pay(MONTHLY, WHOLE_MONTH, 0, 0, RATES) == 30000


def test_daily_basic_pay_counts_paid_days():
    comp = Compensation(basic_salary=800, salary_type=SalaryType.DAILY)
    assert basic_pay(comp, FIRST_HALF, 800, 10.5, RATES) == 8400


# --- time arithmetic ---

@pytest.mark.parametrize("clock_in, clock_out, expected", [
    ("22:00", "06:00", 8.0),
    ("20:00", "23:00", 1.0),
    ("09:00", "18:00", 0.0),
    ("03:00", "07:00", 3.0),
    ("18:00", "02:00", 4.0),
])
def test_night_diff_overlap(clock_in, clock_out, expected):
    assert night_diff_hours(clock_in, clock_out) == pytest.approx(expected)


def test_night_diff_without_clock_in():
    assert night_diff_hours(None, "23:30") == pytest.approx(1.5)
    assert night_diff_hours(None, "02:00") == pytest.approx(4.0)
    assert night_diff_hours(None, "12:00") == 0.0
    assert night_diff_hours(None, "23:00", scheduled_in="21:00") == pytest.approx(1.0)
    assert night_diff_hours("22:00", None) == 0.0


def test_late_and_undertime_minutes():
    assert late_minutes("09:00", "09:30") == 30
    assert late_minutes("09:00", "08:45") == 0
    assert late_minutes("09:00", None) == 0
    assert undertime_minutes("18:00", "17:00") == 60
    assert undertime_minutes("18:00", "19:00") == 0


def test_undertime_after_midnight_clock_out():
    assert undertime_minutes("06:00", "05:00", actual_in="22:00") == 60


# --- overtime ---

def test_overtime_multiplier_precedence():
    assert overtime_multiplier(False, None, RATES) == 1.25
    assert overtime_multiplier(True, None, RATES) == 1.69
    assert overtime_multiplier(False, HolidayType.REGULAR, RATES) == 2.0
    assert overtime_multiplier(False, HolidayType.SPECIAL, RATES) == 1.69
    assert overtime_multiplier(True, HolidayType.REGULAR, RATES) == pytest.approx(2.3)
    assert overtime_multiplier(True, HolidayType.SPECIAL, RATES) == pytest.approx(1.99)


def test_split_overtime_first_eight_hours():
    assert split_overtime(10) == (8.0, 2.0)
    assert split_overtime(3) == (3.0, 0.0)
    assert split_overtime(None) == (0.0, 0.0)


def test_overtime_bucket_names():
    assert overtime_bucket(False, None) == "overtime_regular"
    assert overtime_bucket(True, None) == "overtime_rest_day"
    assert overtime_bucket(True, HolidayType.REGULAR) == "overtime_legal_holiday"
    assert overtime_bucket(False, HolidayType.SPECIAL) == "overtime_special_holiday"


# --- worked-day pricing ---

def _worked(day: date, *, rest=False, holiday=None, multiplier=1.0, **entry) -> DayClassification:
    entry.setdefault("actual_in", "09:00")
    entry.setdefault("actual_out", "18:00")
    return DayClassification(
        date=day, kind=DayKind.WORKED, multiplier=multiplier, is_rest_day=rest, holiday_type=holiday,
        entry=AttendanceEntry(employee_id=1, date=day, status="present", **entry),
    )


def test_regular_day_overtime_and_lateness():
    daily = daily_rate(MONTHLY, RATES)
    pay = price_worked_day(_worked(date(2025, 1, 6), overtime_hours=2, actual_in="09:30"), NINE_TO_SIX, daily, RATES)
    assert pay.overtime_hours == 2
    assert pay.overtime_pay == pytest.approx(2 * daily / 8 * 1.25)
    assert set(pay.overtime_buckets) == {"overtime_regular"}
    assert pay.late_minutes == 30
    assert pay.rest_day_pay == 0
    assert pay.holiday_pay == 0


def test_rest_day_premium_and_excess_bucket():
    pay = price_worked_day(_worked(date(2025, 1, 4), rest=True, overtime_hours=10), NINE_TO_SIX, 1000, RATES)
    assert pay.rest_day_pay == pytest.approx(300)
    assert pay.overtime_buckets["overtime_rest_day"] == pytest.approx(8 * 125 * 1.69)
    assert pay.overtime_buckets["overtime_rest_day_excess"] == pytest.approx(2 * 125 * 1.69)


def test_holiday_premiums_scale_with_half_day():
    regular = price_worked_day(_worked(date(2025, 1, 6), holiday=HolidayType.REGULAR), NINE_TO_SIX, 1000, RATES)
    special = price_worked_day(
        _worked(date(2025, 1, 6), holiday=HolidayType.SPECIAL, multiplier=0.5), NINE_TO_SIX, 1000, RATES,
    )
    assert regular.holiday_pay == pytest.approx(1000)
    assert special.holiday_pay == pytest.approx(150)


def test_night_shift_pays_differential():
    night = ResolvedDay(True, "22:00", "06:00")
    pay = price_worked_day(
        _worked(date(2025, 1, 6), actual_in="22:00", actual_out="06:00"), night, 800, RATES,
    )
    assert pay.night_diff_hours == pytest.approx(8)
    assert pay.night_diff_pay == pytest.approx(8 * 100 * 0.10)
    assert pay.undertime_minutes == 0
