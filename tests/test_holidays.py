"""Holiday registry lookup."""
from datetime import date
from payrun.calc.holidays import NOT_A_HOLIDAY, holidays_for_year, lookup_holiday
from payrun.calc.types import AttendanceEntry, HolidayEntry, HolidayType

NEW_YEAR = HolidayEntry(name="New Year", date=date(2024, 1, 1), type=HolidayType.REGULAR, is_recurring=True)
EDSA = HolidayEntry(name="EDSA", date=date(2025, 2, 25), type=HolidayType.SPECIAL)


def test_recurring_holiday_matches_any_year():
    info = lookup_holiday(date(2025, 1, 1), [NEW_YEAR])
    assert info.is_holiday
    assert info.holiday_type == HolidayType.REGULAR
    assert info.name == "New Year"


def test_one_off_holiday_matches_exact_date_only():
    assert lookup_holiday(date(2025, 2, 25), [EDSA]).holiday_type == HolidayType.SPECIAL
    assert lookup_holiday(date(2026, 2, 25), [EDSA]) == NOT_A_HOLIDAY


def test_attendance_flag_wins_over_registry():
    entry = AttendanceEntry(
        employee_id=1, date=date(2025, 1, 1), status="present",
        is_holiday=True, holiday_type=HolidayType.SPECIAL,
    )
    assert lookup_holiday(date(2025, 1, 1), [NEW_YEAR], entry).holiday_type == HolidayType.SPECIAL


def test_holidays_for_year_keeps_recurring():
    assert holidays_for_year([NEW_YEAR, EDSA], 2026) == [NEW_YEAR]
    assert holidays_for_year([NEW_YEAR, EDSA], 2025) == [NEW_YEAR, EDSA]
