"""Value types consumed and produced by the pay calculation.

These are plain Pydantic models with no ORM coupling; the service layer maps
table rows onto them (see ``payrun.services.mapping``) and the calculator
never sees a session.
"""

from __future__ import annotations

from datetime import date, timedelta
from enum import Enum
from typing import Iterator, Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class SalaryType(str, Enum):
    MONTHLY = "monthly"
    DAILY = "daily"
    HOURLY = "hourly"


class AttendanceStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    HALF_DAY = "half-day"
    LEAVE = "leave"


class HolidayType(str, Enum):
    REGULAR = "regular"
    SPECIAL = "special"


class LeaveStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class DeductionCategory(str, Enum):
    ATTENDANCE = "attendance"
    GOVERNMENT = "government"
    CUSTOM = "custom"


class DayKind(str, Enum):
    WORKED = "worked"
    REST_DAY = "rest_day"
    PAID_LEAVE = "paid_leave"
    UNPAID_ABSENCE = "unpaid_absence"
    HOLIDAY_UNWORKED = "holiday_unworked"


Frequency = Literal["monthly", "per-cutoff"]


# ---------------------------------------------------------------------------
# Employee profile
# ---------------------------------------------------------------------------


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class DaySchedule(_Frozen):
    in_time: str = "09:00"
    out_time: str = "18:00"
    is_workday: bool = True


_REST = DaySchedule(is_workday=False)


class WeeklySchedule(_Frozen):
    monday: DaySchedule = DaySchedule()
    tuesday: DaySchedule = DaySchedule()
    wednesday: DaySchedule = DaySchedule()
    thursday: DaySchedule = DaySchedule()
    friday: DaySchedule = DaySchedule()
    saturday: DaySchedule = _REST
    sunday: DaySchedule = _REST

    def for_weekday(self, weekday: int) -> DaySchedule:
        """Schedule for ``date.weekday()`` (0 = Monday)."""
        return (
            self.monday, self.tuesday, self.wednesday, self.thursday,
            self.friday, self.saturday, self.sunday,
        )[weekday]


class ScheduleOverride(_Frozen):
    date: date
    in_time: str
    out_time: str


class Compensation(_Frozen):
    basic_salary: float = 0.0
    allowance: float = 0.0
    salary_type: SalaryType = SalaryType.MONTHLY
    regular_holiday_rate: float | None = None
    special_holiday_rate: float | None = None
    night_diff_rate: float | None = None
    overtime_regular_rate: float | None = None
    overtime_rest_day_rate: float | None = None
    overtime_regular_holiday_rate: float | None = None
    overtime_special_holiday_rate: float | None = None


class LeaveBalance(_Frozen):
    total: float = 0.0
    used: float = 0.0
    balance: float = 0.0


class LeaveCredits(_Frozen):
    vacation: LeaveBalance = LeaveBalance()
    sick: LeaveBalance = LeaveBalance()
    custom: dict[str, LeaveBalance] = Field(default_factory=dict)


class RecurringAdjustment(_Frozen):
    """An employee-level deduction or incentive applied every cutoff it is active."""

    name: str
    amount: float
    type: str = "other"
    frequency: Frequency = "monthly"
    is_active: bool = True
    start_date: date | None = None
    end_date: date | None = None

    def applies_on(self, day: date) -> bool:
        if not self.is_active:
            return False
        if self.start_date is not None and day < self.start_date:
            return False
        if self.end_date is not None and day > self.end_date:
            return False
        return True


class EmployeeProfile(_Frozen):
    id: int
    organization_id: int
    name: str = ""
    hire_date: date | None = None
    regularization_date: date | None = None
    schedule: WeeklySchedule = WeeklySchedule()
    schedule_overrides: list[ScheduleOverride] = Field(default_factory=list)
    compensation: Compensation = Compensation()
    leave_credits: LeaveCredits = LeaveCredits()
    deductions: list[RecurringAdjustment] = Field(default_factory=list)
    incentives: list[RecurringAdjustment] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Calendar inputs
# ---------------------------------------------------------------------------


class AttendanceEntry(_Frozen):
    employee_id: int
    date: date
    status: AttendanceStatus
    scheduled_in: str | None = None
    scheduled_out: str | None = None
    actual_in: str | None = None
    actual_out: str | None = None
    overtime_hours: float | None = None
    is_holiday: bool | None = None
    holiday_type: HolidayType | None = None
    remarks: str | None = None


class HolidayEntry(_Frozen):
    name: str = ""
    date: date
    type: HolidayType
    is_recurring: bool = False
    year: int | None = None


class LeaveEntry(_Frozen):
    employee_id: int
    leave_type: str
    custom_leave_type: str | None = None
    start_date: date
    end_date: date
    status: LeaveStatus = LeaveStatus.APPROVED
    number_of_days: float = 0.0


class LeaveTypePolicy(_Frozen):
    name: str
    type: str = "custom"
    is_paid: bool = True
    default_credits: float = 0.0
    is_anniversary: bool = False


class CutoffRange(_Frozen):
    """Inclusive pay period."""

    start: date
    end: date

    @model_validator(mode="after")
    def _ordered(self) -> "CutoffRange":
        if self.end < self.start:
            raise ValueError("cutoff end must not precede cutoff start")
        return self

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1

    def is_semi_monthly(self, max_days: int = 18) -> bool:
        return self.days <= max_days

    def dates(self) -> Iterator[date]:
        day = self.start
        while day <= self.end:
            yield day
            day += timedelta(days=1)

    @property
    def label(self) -> str:
        """``"Jan 1 - Jan 15, 2025"``."""
        return (
            f"{self.start:%b} {self.start.day} - "
            f"{self.end:%b} {self.end.day}, {self.end.year}"
        )


# ---------------------------------------------------------------------------
# Statutory overrides
# ---------------------------------------------------------------------------


class GovernmentDeductionSetting(BaseModel):
    enabled: bool = True
    frequency: Literal["full", "half"] = "full"


class GovernmentDeductionSettings(BaseModel):
    """Per-employee statutory overrides for one run. ``None`` means default split."""

    employee_id: int | None = None
    sss: GovernmentDeductionSetting | None = None
    philhealth: GovernmentDeductionSetting | None = None
    pagibig: GovernmentDeductionSetting | None = None
    tax: GovernmentDeductionSetting | None = None


# ---------------------------------------------------------------------------
# Outputs
# ---------------------------------------------------------------------------


class DeductionLine(BaseModel):
    name: str
    amount: float
    category: DeductionCategory = DeductionCategory.CUSTOM


class IncentiveLine(BaseModel):
    name: str
    amount: float
    type: str = "other"


class DayClassification(BaseModel):
    date: date
    kind: DayKind
    multiplier: float = 0.0
    is_rest_day: bool = False
    holiday_type: HolidayType | None = None
    entry: AttendanceEntry | None = None


class PayBreakdown(BaseModel):
    holiday_pay: float = 0.0
    rest_day_pay: float = 0.0
    night_diff_pay: float = 0.0
    overtime_pay: float = 0.0
    overtime_regular: float = 0.0
    overtime_rest_day: float = 0.0
    overtime_rest_day_excess: float = 0.0
    overtime_special_holiday: float = 0.0
    overtime_special_holiday_excess: float = 0.0
    overtime_legal_holiday: float = 0.0
    overtime_legal_holiday_excess: float = 0.0


class EmployerContributions(BaseModel):
    sss: float = 0.0
    philhealth: float = 0.0
    pagibig: float = 0.0


class PayComputationResult(BaseModel):
    employee_id: int
    period: str
    cutoff_start: date
    cutoff_end: date
    daily_rate: float
    hourly_rate: float
    basic_pay: float
    gross_pay: float
    deductions: list[DeductionLine] = Field(default_factory=list)
    incentives: list[IncentiveLine] = Field(default_factory=list)
    non_taxable_allowance: float = 0.0
    breakdown: PayBreakdown = PayBreakdown()
    days_worked: float = 0.0
    absences: float = 0.0
    late_hours: float = 0.0
    undertime_hours: float = 0.0
    overtime_hours: float = 0.0
    net_pay: float = 0.0
    pending_deductions: float = 0.0
    # Pending that entered capping, before any trimmed excess.
    carried_pending: float = 0.0
    has_worked_days: bool = False
    employer_contributions: EmployerContributions = EmployerContributions()

    @computed_field
    @property
    def total_deductions(self) -> float:
        return round(sum(d.amount for d in self.deductions), 2)
