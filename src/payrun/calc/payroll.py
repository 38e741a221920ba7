"""The single pure pay computation shared by preview, run creation and regeneration."""
from __future__ import annotations

from typing import Iterable, Mapping

from payrun.calc.classifier import classify_period, index_attendance
from payrun.calc.components import basic_pay, daily_rate, hourly_rate, price_worked_day
from payrun.calc.deductions import (
    PREVIOUS_PENDING_NAME,
    cap_deductions,
    custom_deduction_lines,
    incentive_lines,
    statutory_for_cutoff,
)
from payrun.calc.rates import PayrollRates
from payrun.calc.schedule import resolve_day
from payrun.calc.types import (
    AttendanceEntry,
    Compensation,
    CutoffRange,
    DayKind,
    DeductionCategory,
    DeductionLine,
    EmployeeProfile,
    EmployerContributions,
    GovernmentDeductionSettings,
    HolidayEntry,
    IncentiveLine,
    LeaveEntry,
    LeaveTypePolicy,
    PayBreakdown,
    PayComputationResult,
    SalaryType,
)


def monthly_basic_equivalent(compensation: Compensation, rates: PayrollRates) -> float:
    """Monthly salary used for statutory brackets."""
    if compensation.salary_type == SalaryType.MONTHLY:
        return compensation.basic_salary or 0.0
    return daily_rate(compensation, rates) * rates.effective_working_days_per_year / 12


def _absence_label(days: float) -> str:
    n = int(days) if float(days).is_integer() else days
    return f"Absent ({n} day{'' if days == 1 else 's'})"


def compute_pay(
    employee: EmployeeProfile,
    attendance: Iterable[AttendanceEntry] | Mapping[int, AttendanceEntry],
    holidays: Iterable[HolidayEntry],
    leaves: Iterable[LeaveEntry],
    rates: PayrollRates,
    cutoff: CutoffRange,
    *,
    policies: Iterable[LeaveTypePolicy] = (),
    government_settings: GovernmentDeductionSettings | None = None,
    manual_deductions: Iterable[DeductionLine] = (),
    manual_incentives: Iterable[IncentiveLine] = (),
    previous_pending: float = 0.0,
    deductions_enabled: bool = True,
) -> PayComputationResult:
    """Compute one employee's pay for *cutoff*.

    *attendance* may be a list of entries or an index from
    :func:`~payrun.calc.classifier.index_attendance`. Entries for other
    employees are ignored.
    """
    comp = employee.compensation
    rates_e = rates.for_employee(comp)
    semi = cutoff.is_semi_monthly(rates.semi_monthly_max_days)
    daily = daily_rate(comp, rates_e)
    hourly = hourly_rate(daily)

    if not isinstance(attendance, Mapping):
        attendance = index_attendance(a for a in attendance if a.employee_id == employee.id)

    days = classify_period(employee, cutoff, attendance, holidays, leaves, policies)

    breakdown = PayBreakdown()
    buckets: dict[str, float] = {}
    days_worked = 0.0
    absences = 0.0
    late_min = 0
    undertime_min = 0
    overtime_hours = 0.0

    for day in days:
        if day.kind == DayKind.WORKED:
            days_worked += day.multiplier
            priced = price_worked_day(day, resolve_day(employee, day.date), daily, rates_e)
            breakdown.rest_day_pay += priced.rest_day_pay
            breakdown.holiday_pay += priced.holiday_pay
            breakdown.night_diff_pay += priced.night_diff_pay
            breakdown.overtime_pay += priced.overtime_pay
            overtime_hours += priced.overtime_hours
            late_min += priced.late_minutes
            undertime_min += priced.undertime_minutes
            for name, amount in priced.overtime_buckets.items():
                buckets[name] = buckets.get(name, 0.0) + amount
        elif day.kind == DayKind.PAID_LEAVE:
            days_worked += 1
        elif day.kind == DayKind.HOLIDAY_UNWORKED:
            breakdown.holiday_pay += daily * rates_e.regular_holiday_rate
        elif day.kind == DayKind.UNPAID_ABSENCE:
            absences += 1

    for name, amount in buckets.items():
        setattr(breakdown, name, round(amount, 2))
    for field in ("rest_day_pay", "holiday_pay", "night_diff_pay", "overtime_pay"):
        setattr(breakdown, field, round(getattr(breakdown, field), 2))

    base = basic_pay(comp, cutoff, daily, days_worked, rates_e)
    has_worked = days_worked > 0

    # --- Deductions ---
    lines: list[DeductionLine] = []
    late_hours = late_min / 60
    undertime_hours = undertime_min / 60
    if late_min:
        lines.append(DeductionLine(
            name="Late", amount=round(late_hours * hourly, 2), category=DeductionCategory.ATTENDANCE,
        ))
    if undertime_min:
        lines.append(DeductionLine(
            name="Undertime", amount=round(undertime_hours * hourly, 2),
            category=DeductionCategory.ATTENDANCE,
        ))
    if absences and comp.salary_type == SalaryType.MONTHLY:
        lines.append(DeductionLine(
            name=_absence_label(absences), amount=round(daily * absences, 2),
            category=DeductionCategory.ATTENDANCE,
        ))

    pending = 0.0
    employer = EmployerContributions()
    if deductions_enabled:
        statutory = statutory_for_cutoff(
            monthly_basic_equivalent(comp, rates_e), semi, rates_e, government_settings,
        )
        if has_worked:
            lines.extend(statutory.lines)
            employer = statutory.employer
        else:
            pending += sum(line.amount for line in statutory.lines)

    if previous_pending > 0:
        if has_worked:
            lines.append(DeductionLine(
                name=PREVIOUS_PENDING_NAME, amount=round(previous_pending, 2),
                category=DeductionCategory.GOVERNMENT,
            ))
        else:
            pending += previous_pending

    lines.extend(custom_deduction_lines(employee.deductions, cutoff.end, semi))
    lines.extend(line.model_copy() for line in manual_deductions if line.amount > 0)

    # --- Earnings ---
    incentives = incentive_lines(employee.incentives, cutoff.end, semi)
    incentives.extend(i.model_copy() for i in manual_incentives if i.amount > 0)
    incentive_total = sum(i.amount for i in incentives)

    allowance = (comp.allowance or 0.0) / 2 if semi else (comp.allowance or 0.0)
    allowance = round(allowance, 2)

    gross = round(
        base
        + breakdown.holiday_pay
        + breakdown.rest_day_pay
        + breakdown.night_diff_pay
        + breakdown.overtime_pay
        + incentive_total,
        2,
    )
    carried = round(pending, 2)
    capped = cap_deductions(lines, round(gross + allowance, 2), carried)
    total_deductions = sum(line.amount for line in capped.lines)
    net = max(0.0, round(gross + allowance - total_deductions, 2))

    return PayComputationResult(
        employee_id=employee.id,
        period=cutoff.label,
        cutoff_start=cutoff.start,
        cutoff_end=cutoff.end,
        daily_rate=round(daily, 2),
        hourly_rate=round(hourly, 2),
        basic_pay=round(base, 2),
        gross_pay=gross,
        deductions=capped.lines,
        incentives=incentives,
        non_taxable_allowance=allowance,
        breakdown=breakdown,
        days_worked=days_worked,
        absences=absences,
        late_hours=round(late_hours, 2),
        undertime_hours=round(undertime_hours, 2),
        overtime_hours=round(overtime_hours, 2),
        net_pay=net,
        pending_deductions=capped.pending,
        carried_pending=carried,
        has_worked_days=has_worked,
        employer_contributions=employer,
    )
