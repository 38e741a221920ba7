"""ORM rows to calculation inputs. The calculator never sees a table row."""
from __future__ import annotations

import logging

from pydantic import ValidationError

from payrun.calc.rates import PayrollRates
from payrun.calc.types import (
    AttendanceEntry,
    Compensation,
    EmployeeProfile,
    HolidayEntry,
    LeaveCredits,
    LeaveEntry,
    LeaveTypePolicy,
    RecurringAdjustment,
    SalaryType,
    ScheduleOverride,
    WeeklySchedule,
)
from payrun.config import settings
from payrun.models.core import AttendanceRecord, Employee, Holiday, LeaveRequest, LeaveTypeSetting
from payrun.models.payroll import PayrollSettings

logger = logging.getLogger(__name__)

_RATE_FIELDS = (
    "night_diff_rate",
    "regular_holiday_rate",
    "special_holiday_rate",
    "rest_day_premium_rate",
    "overtime_regular_rate",
    "overtime_rest_day_rate",
    "overtime_special_holiday_rate",
    "overtime_regular_holiday_rate",
)


def _salary_type(raw: str | None) -> SalaryType:
    try:
        return SalaryType(raw or SalaryType.MONTHLY.value)
    except ValueError:
        logger.warning("Unknown salary type %r; treating as monthly", raw)
        return SalaryType.MONTHLY


def _adjustments(rows: list | None, employee_id: int | None) -> list[RecurringAdjustment]:
    items: list[RecurringAdjustment] = []
    for raw in rows or []:
        try:
            items.append(RecurringAdjustment.model_validate(raw))
        except ValidationError as exc:
            logger.warning("Skipping malformed adjustment on employee %s: %s", employee_id, exc)
    return items


def employee_profile(row: Employee) -> EmployeeProfile:
    overrides = []
    for raw in row.schedule_overrides or []:
        try:
            overrides.append(ScheduleOverride.model_validate(raw))
        except ValidationError as exc:
            logger.warning("Skipping malformed schedule override on employee %s: %s", row.id, exc)

    return EmployeeProfile(
        id=row.id,
        organization_id=row.organization_id,
        name=row.name,
        hire_date=row.hire_date,
        regularization_date=row.regularization_date,
        schedule=WeeklySchedule.model_validate(row.schedule or {}),
        schedule_overrides=overrides,
        compensation=Compensation(
            basic_salary=row.basic_salary or 0.0,
            allowance=row.allowance or 0.0,
            salary_type=_salary_type(row.salary_type),
            regular_holiday_rate=row.regular_holiday_rate,
            special_holiday_rate=row.special_holiday_rate,
            night_diff_rate=row.night_diff_rate,
            overtime_regular_rate=row.overtime_regular_rate,
            overtime_rest_day_rate=row.overtime_rest_day_rate,
            overtime_regular_holiday_rate=row.overtime_regular_holiday_rate,
            overtime_special_holiday_rate=row.overtime_special_holiday_rate,
        ),
        leave_credits=LeaveCredits.model_validate(row.leave_credits or {}),
        deductions=_adjustments(row.deductions, row.id),
        incentives=_adjustments(row.incentives, row.id),
    )


def attendance_entry(row: AttendanceRecord) -> AttendanceEntry:
    return AttendanceEntry(
        employee_id=row.employee_id,
        date=row.date,
        status=row.status,
        scheduled_in=row.scheduled_in,
        scheduled_out=row.scheduled_out,
        actual_in=row.actual_in,
        actual_out=row.actual_out,
        overtime_hours=row.overtime_hours,
        is_holiday=row.is_holiday,
        holiday_type=row.holiday_type,
        remarks=row.remarks,
    )


def holiday_entry(row: Holiday) -> HolidayEntry:
    return HolidayEntry(
        name=row.name, date=row.date, type=row.type,
        is_recurring=row.is_recurring, year=row.year,
    )


def leave_entry(row: LeaveRequest) -> LeaveEntry:
    return LeaveEntry(
        employee_id=row.employee_id,
        leave_type=row.leave_type,
        custom_leave_type=row.custom_leave_type,
        start_date=row.start_date,
        end_date=row.end_date,
        status=row.status,
        number_of_days=row.number_of_days or 0.0,
    )


def leave_policy(row: LeaveTypeSetting) -> LeaveTypePolicy:
    return LeaveTypePolicy(
        name=row.name, type=row.type, is_paid=row.is_paid,
        default_credits=row.default_credits, is_anniversary=row.is_anniversary,
    )


def payroll_rates(row: PayrollSettings | None, night_diff_rate: float | None = None) -> PayrollRates:
    """Resolve the organization's rate table once per run."""
    values: dict = {"semi_monthly_max_days": settings.SEMI_MONTHLY_MAX_DAYS}
    if row is not None:
        for name in _RATE_FIELDS:
            value = getattr(row, name)
            if value is not None:
                values[name] = value
        values["daily_rate_includes_allowance"] = row.daily_rate_includes_allowance
        values["working_days_per_year"] = row.working_days_per_year
    if night_diff_rate is not None:
        values["night_diff_rate"] = night_diff_rate
    return PayrollRates(**values)
