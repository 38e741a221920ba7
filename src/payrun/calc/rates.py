"""Tunable pay multipliers, resolved once per run and passed explicitly."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from payrun.calc.types import Compensation

DEFAULT_WORKING_DAYS_PER_YEAR = 261
LEGACY_WORKING_DAYS_PER_MONTH = 22
HOURS_PER_DAY = 8


class PayrollRates(BaseModel):
    """Organization-level rate table.

    Multipliers are fractions of the daily or hourly rate (``1.25`` means
    125%). Premiums (``night_diff_rate``, ``special_holiday_rate``,
    ``rest_day_premium_rate``) are the extra share on top of base pay.
    """

    model_config = ConfigDict(frozen=True)

    night_diff_rate: float = 0.10
    regular_holiday_rate: float = 1.0
    special_holiday_rate: float = 0.30
    rest_day_premium_rate: float = 0.30

    overtime_regular_rate: float = 1.25
    overtime_rest_day_rate: float = 1.69
    overtime_special_holiday_rate: float = 1.69
    overtime_regular_holiday_rate: float = 2.0

    daily_rate_includes_allowance: bool = False
    working_days_per_year: int | None = DEFAULT_WORKING_DAYS_PER_YEAR
    semi_monthly_max_days: int = 18

    philhealth_monthly_share: float = 500.0
    pagibig_monthly_share: float = 200.0
    withholding_tax_rate: float = 0.12
    withholding_tax_threshold: float = 23_000.0

    @property
    def effective_working_days_per_year(self) -> int:
        return self.working_days_per_year or DEFAULT_WORKING_DAYS_PER_YEAR

    def for_employee(self, compensation: Compensation) -> "PayrollRates":
        """Apply the employee's own rate overrides on top of these rates."""
        overrides = {
            "regular_holiday_rate": compensation.regular_holiday_rate,
            "special_holiday_rate": compensation.special_holiday_rate,
            "night_diff_rate": compensation.night_diff_rate,
            "overtime_regular_rate": compensation.overtime_regular_rate,
            "overtime_rest_day_rate": compensation.overtime_rest_day_rate,
            "overtime_regular_holiday_rate": compensation.overtime_regular_holiday_rate,
            "overtime_special_holiday_rate": compensation.overtime_special_holiday_rate,
        }
        update = {k: v for k, v in overrides.items() if v is not None}
        return self.model_copy(update=update) if update else self
