"""Deduction aggregation, statutory gating and capping against payable pay."""
from __future__ import annotations

from datetime import date
from typing import Iterable, NamedTuple

from payrun.calc.rates import PayrollRates
from payrun.calc.statutory import monthly_statutory
from payrun.calc.types import (
    DeductionCategory,
    DeductionLine,
    EmployerContributions,
    GovernmentDeductionSetting,
    GovernmentDeductionSettings,
    IncentiveLine,
    RecurringAdjustment,
)

PREVIOUS_PENDING_NAME = "Pending Deductions (Previous Cutoff)"

SSS_LINE = "SSS"
PHILHEALTH_LINE = "PhilHealth"
PAGIBIG_LINE = "Pag-IBIG"
TAX_LINE = "Withholding Tax"

_EPSILON = 1e-9


class StatutorySplit(NamedTuple):
    lines: list[DeductionLine]
    employer: EmployerContributions


class CapResult(NamedTuple):
    lines: list[DeductionLine]
    pending: float


def _factor(setting: GovernmentDeductionSetting | None, semi_monthly: bool) -> float:
    if setting is None:
        return 0.5 if semi_monthly else 1.0
    if not setting.enabled:
        return 0.0
    return 0.5 if setting.frequency == "half" else 1.0


def statutory_for_cutoff(
    monthly_salary: float,
    semi_monthly: bool,
    rates: PayrollRates,
    overrides: GovernmentDeductionSettings | None = None,
) -> StatutorySplit:
    """This cutoff's share of each monthly statutory figure.

    Default split is half per semi-monthly cutoff and the whole amount on a
    longer cutoff; a per-employee override may disable a line or force
    ``full``/``half``.
    """
    overrides = overrides or GovernmentDeductionSettings()
    monthly = monthly_statutory(monthly_salary, rates)
    f_sss = _factor(overrides.sss, semi_monthly)
    f_ph = _factor(overrides.philhealth, semi_monthly)
    f_hdmf = _factor(overrides.pagibig, semi_monthly)
    f_tax = _factor(overrides.tax, semi_monthly)

    candidates = (
        (SSS_LINE, monthly.sss.employee_share * f_sss),
        (PHILHEALTH_LINE, monthly.philhealth.employee_share * f_ph),
        (PAGIBIG_LINE, monthly.pagibig.employee_share * f_hdmf),
        (TAX_LINE, monthly.withholding_tax * f_tax),
    )
    lines = [
        DeductionLine(name=name, amount=round(amount, 2), category=DeductionCategory.GOVERNMENT)
        for name, amount in candidates
        if amount > 0
    ]
    employer = EmployerContributions(
        sss=round(monthly.sss.employer_share * f_sss, 2),
        philhealth=round(monthly.philhealth.employer_share * f_ph, 2),
        pagibig=round(monthly.pagibig.employer_share * f_hdmf, 2),
    )
    return StatutorySplit(lines, employer)


def recurring_amount(adjustment: RecurringAdjustment, semi_monthly: bool) -> float:
    if adjustment.frequency == "monthly" and semi_monthly:
        return adjustment.amount / 2
    return adjustment.amount


def custom_deduction_lines(
    adjustments: Iterable[RecurringAdjustment], reference: date, semi_monthly: bool,
) -> list[DeductionLine]:
    return [
        DeductionLine(
            name=a.name,
            amount=round(recurring_amount(a, semi_monthly), 2),
            category=DeductionCategory.CUSTOM,
        )
        for a in adjustments
        if a.applies_on(reference) and a.amount > 0
    ]


def incentive_lines(
    adjustments: Iterable[RecurringAdjustment], reference: date, semi_monthly: bool,
) -> list[IncentiveLine]:
    return [
        IncentiveLine(name=a.name, amount=round(recurring_amount(a, semi_monthly), 2), type=a.type)
        for a in adjustments
        if a.applies_on(reference) and a.amount > 0
    ]


def _deferral_rank(line: DeductionLine) -> int:
    if line.name == PREVIOUS_PENDING_NAME:
        return 0
    return {
        DeductionCategory.CUSTOM: 1,
        DeductionCategory.GOVERNMENT: 2,
        DeductionCategory.ATTENDANCE: 3,
    }[line.category]


def cap_deductions(
    lines: Iterable[DeductionLine], payable: float, pending: float = 0.0,
) -> CapResult:
    """Trim *lines* so their total never exceeds *payable*.

    With nothing payable every line is deferred. Otherwise lines are trimmed
    in deferral order (previous-cutoff carry, custom, government, attendance)
    and the trimmed amount joins *pending*.
    """
    lines = [line.model_copy() for line in lines]
    total = sum(line.amount for line in lines)
    if payable <= 0:
        return CapResult([], round(pending + total, 2))
    excess = total - payable
    if excess <= _EPSILON:
        return CapResult(lines, round(pending, 2))

    for line in sorted(lines, key=_deferral_rank):
        if excess <= _EPSILON:
            break
        cut = min(line.amount, excess)
        line.amount = round(line.amount - cut, 2)
        excess -= cut
        pending += cut

    kept = [line for line in lines if line.amount > 0]
    return CapResult(kept, round(pending, 2))
