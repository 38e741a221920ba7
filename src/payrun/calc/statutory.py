"""Statutory contributions: SSS, PhilHealth, Pag-IBIG and withholding tax.

Every function here takes the *monthly* basic salary (allowances excluded)
and returns *monthly* amounts. Splitting across cutoffs is the caller's job.
"""
from __future__ import annotations

from bisect import bisect_right
from typing import NamedTuple

from payrun.calc.rates import PayrollRates


class SSSBracket(NamedTuple):
    min_salary: float
    employee_share: float
    employer_share: float
    total: float
    monthly_salary_credit: float


class Contribution(NamedTuple):
    employee_share: float
    employer_share: float
    total: float
    monthly_salary_credit: float | None = None


# Range of compensation lower bounds; a bracket covers [min, next min).
# The last bracket is open-ended.
SSS_TABLE: tuple[SSSBracket, ...] = (
    SSSBracket(0, 180, 410, 590, 4000),
    SSSBracket(4250, 202.5, 452.5, 655, 4500),
    SSSBracket(4750, 225, 495, 720, 5000),
    SSSBracket(5250, 247.5, 537.5, 785, 5500),
    SSSBracket(5750, 270, 580, 850, 6000),
    SSSBracket(6250, 292.5, 622.5, 915, 6500),
    SSSBracket(6750, 315, 665, 980, 7000),
    SSSBracket(7250, 337.5, 707.5, 1045, 7500),
    SSSBracket(7750, 360, 750, 1110, 8000),
    SSSBracket(8250, 382.5, 792.5, 1175, 8500),
    SSSBracket(8750, 405, 835, 1240, 9000),
    SSSBracket(9250, 427.5, 877.5, 1305, 9500),
    SSSBracket(9750, 450, 920, 1370, 10000),
    SSSBracket(10250, 472.5, 962.5, 1435, 10500),
    SSSBracket(10750, 495, 1005, 1500, 11000),
    SSSBracket(11250, 517.5, 1047.5, 1565, 11500),
    SSSBracket(11750, 540, 1090, 1630, 12000),
    SSSBracket(12250, 562.5, 1132.5, 1695, 12500),
    SSSBracket(12750, 585, 1175, 1760, 13000),
    SSSBracket(13250, 607.5, 1217.5, 1825, 13500),
    SSSBracket(13750, 630, 1260, 1890, 14000),
    SSSBracket(14250, 652.5, 1302.5, 1955, 14500),
    SSSBracket(14750, 675, 1365, 2040, 15000),
    SSSBracket(15250, 697.5, 1407.5, 2105, 15500),
    SSSBracket(15750, 720, 1450, 2170, 16000),
    SSSBracket(16250, 742.5, 1492.5, 2235, 16500),
    SSSBracket(16750, 765, 1535, 2300, 17000),
    SSSBracket(17250, 787.5, 1577.5, 2365, 17500),
    SSSBracket(17750, 810, 1620, 2430, 18000),
    SSSBracket(18250, 832.5, 1662.5, 2495, 18500),
    SSSBracket(18750, 855, 1705, 2560, 19000),
    SSSBracket(19250, 877.5, 1747.5, 2625, 19500),
    SSSBracket(19750, 900, 1790, 2690, 20000),
    SSSBracket(20250, 922.5, 1977.5, 2900, 20500),
    SSSBracket(20750, 945, 2020, 2965, 21000),
    SSSBracket(21250, 967.5, 2062.5, 3030, 21500),
    SSSBracket(21750, 990, 2105, 3095, 22000),
    SSSBracket(22250, 1012.5, 2147.5, 3160, 22500),
    SSSBracket(22750, 1035, 2190, 3225, 23000),
    SSSBracket(23250, 1057.5, 2232.5, 3290, 23500),
    SSSBracket(23750, 1080, 2275, 3355, 24000),
    SSSBracket(24250, 1102.5, 2317.5, 3420, 24500),
    SSSBracket(24750, 1125, 2360, 3485, 25000),
    SSSBracket(25250, 1147.5, 2402.5, 3550, 25500),
    SSSBracket(25750, 1170, 2445, 3615, 26000),
    SSSBracket(26250, 1192.5, 2487.5, 3680, 26500),
    SSSBracket(26750, 1215, 2530, 3745, 27000),
    SSSBracket(27250, 1237.5, 2572.5, 3810, 27500),
    SSSBracket(27750, 1260, 2615, 3875, 28000),
    SSSBracket(28250, 1282.5, 2657.5, 3940, 28500),
    SSSBracket(28750, 1305, 2700, 4005, 29000),
    SSSBracket(29250, 1327.5, 2742.5, 4070, 29500),
    SSSBracket(29750, 1350, 2880, 4230, 30000),
)

_SSS_MINIMUMS = [b.min_salary for b in SSS_TABLE]


def sss_contribution(monthly_salary: float) -> Contribution:
    salary = max(0.0, monthly_salary or 0.0)
    bracket = SSS_TABLE[max(0, bisect_right(_SSS_MINIMUMS, salary) - 1)]
    return Contribution(
        bracket.employee_share,
        bracket.employer_share,
        bracket.total,
        bracket.monthly_salary_credit,
    )


def philhealth_contribution(monthly_salary: float, rates: PayrollRates | None = None) -> Contribution:
    share = (rates or PayrollRates()).philhealth_monthly_share
    return Contribution(share, share, share * 2)


def pagibig_contribution(monthly_salary: float, rates: PayrollRates | None = None) -> Contribution:
    share = (rates or PayrollRates()).pagibig_monthly_share
    return Contribution(share, share, share * 2)


def withholding_tax(monthly_salary: float, rates: PayrollRates | None = None) -> float:
    rates = rates or PayrollRates()
    salary = max(0.0, monthly_salary or 0.0)
    if salary < rates.withholding_tax_threshold:
        return 0.0
    return round(salary * rates.withholding_tax_rate, 2)


class StatutoryBreakdown(NamedTuple):
    sss: Contribution
    philhealth: Contribution
    pagibig: Contribution
    withholding_tax: float


def monthly_statutory(monthly_salary: float, rates: PayrollRates | None = None) -> StatutoryBreakdown:
    return StatutoryBreakdown(
        sss=sss_contribution(monthly_salary),
        philhealth=philhealth_contribution(monthly_salary, rates),
        pagibig=pagibig_contribution(monthly_salary, rates),
        withholding_tax=withholding_tax(monthly_salary, rates),
    )
