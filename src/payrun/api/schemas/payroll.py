"""Payroll DTOs: pure Pydantic, zero ORM imports."""
from __future__ import annotations
from datetime import date, datetime
from typing import Literal
from pydantic import BaseModel, Field, field_validator, model_validator
from payrun.calc.types import (
    DeductionCategory, DeductionLine, EmployerContributions, GovernmentDeductionSettings,
    IncentiveLine, PayBreakdown,
)


# ---------------------------------------------------------------------------
# Run inputs
# ---------------------------------------------------------------------------


class ManualDeduction(BaseModel):
    employee_id: int
    name: str
    amount: float = Field(ge=0)
    category: DeductionCategory = DeductionCategory.CUSTOM


class ManualIncentive(BaseModel):
    employee_id: int
    name: str
    amount: float = Field(ge=0)
    type: str = "other"


class PayrollRunCreate(BaseModel):
    cutoff_start: date
    cutoff_end: date
    employee_ids: list[int] | None = None  # None = every employee of the organization
    manual_deductions: list[ManualDeduction] = Field(default_factory=list)
    incentives: list[ManualIncentive] = Field(default_factory=list)
    government_deduction_settings: list[GovernmentDeductionSettings] = Field(default_factory=list)
    deductions_enabled: bool = True
    night_diff_rate: float | None = None

    @model_validator(mode="after")
    def _cutoff_ordered(self) -> "PayrollRunCreate":
        if self.cutoff_end < self.cutoff_start:
            raise ValueError("cutoff_end must not precede cutoff_start")
        return self


class PayrollRunUpdate(BaseModel):
    cutoff_start: date | None = None
    cutoff_end: date | None = None
    employee_ids: list[int] | None = None
    manual_deductions: list[ManualDeduction] | None = None
    incentives: list[ManualIncentive] | None = None
    government_deduction_settings: list[GovernmentDeductionSettings] | None = None
    deductions_enabled: bool | None = None


class RunStatusUpdate(BaseModel):
    status: Literal["draft", "finalized", "paid", "archived", "cancelled"]


class RunNoteCreate(BaseModel):
    employee_id: int
    date: date
    note: str
    added_by: str | None = None


# ---------------------------------------------------------------------------
# Run outputs
# ---------------------------------------------------------------------------


class PayrollRunRead(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    organization_id: int
    cutoff_start: date
    cutoff_end: date
    period: str
    status: str
    deductions_enabled: bool
    night_diff_rate: float | None = None
    employee_ids: list[int]
    manual_deductions: list[dict]
    incentives: list[dict]
    government_deduction_settings: list[dict]
    notes: list[dict] = Field(default_factory=list)
    processed_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    @field_validator("status", mode="before")
    @classmethod
    def _status_value(cls, v):
        return getattr(v, "value", v)


class PayrollRunList(BaseModel):
    items: list[PayrollRunRead]
    total: int


# ---------------------------------------------------------------------------
# Payslips
# ---------------------------------------------------------------------------


class PayslipRead(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    organization_id: int
    employee_id: int
    payroll_run_id: int
    period: str
    cutoff_start: date
    cutoff_end: date
    basic_pay: float
    gross_pay: float
    non_taxable_allowance: float
    net_pay: float
    pending_deductions: float
    has_worked_days: bool
    days_worked: float
    absences: float
    late_hours: float
    undertime_hours: float
    overtime_hours: float
    deductions: list[DeductionLine]
    incentives: list[IncentiveLine]
    breakdown: PayBreakdown
    employer_contributions: EmployerContributions
    edit_history: list[dict]
    total_deductions: float = 0.0

    @model_validator(mode="after")
    def _total(self) -> "PayslipRead":
        self.total_deductions = round(sum(d.amount for d in self.deductions), 2)
        return self


class PayslipList(BaseModel):
    items: list[PayslipRead]
    total: int


class PayslipUpdate(BaseModel):
    deductions: list[DeductionLine] | None = None
    incentives: list[IncentiveLine] | None = None
    non_taxable_allowance: float | None = Field(default=None, ge=0)
    edited_by: str | None = None


# ---------------------------------------------------------------------------
# Preview
# ---------------------------------------------------------------------------


class PayrollPreviewRequest(BaseModel):
    cutoff_start: date
    cutoff_end: date
    manual_deductions: list[DeductionLine] = Field(default_factory=list)
    incentives: list[IncentiveLine] = Field(default_factory=list)
    government_deduction_settings: GovernmentDeductionSettings | None = None
    deductions_enabled: bool = True
    night_diff_rate: float | None = None

    @model_validator(mode="after")
    def _cutoff_ordered(self) -> "PayrollPreviewRequest":
        if self.cutoff_end < self.cutoff_start:
            raise ValueError("cutoff_end must not precede cutoff_start")
        return self


# ---------------------------------------------------------------------------
# Run summary
# ---------------------------------------------------------------------------


class DailySummaryRow(BaseModel):
    date: date
    status: str | None = None
    time_in: str | None = None
    time_out: str | None = None
    late_minutes: int = 0
    undertime_minutes: int = 0
    regular_ot_hours: float = 0.0
    special_ot_hours: float = 0.0
    night_diff_hours: float = 0.0
    is_absent: bool = False
    note: str | None = None


class SummaryTotals(BaseModel):
    late_minutes: int = 0
    undertime_minutes: int = 0
    regular_ot_hours: float = 0.0
    special_ot_hours: float = 0.0
    night_diff_hours: float = 0.0
    absent_days: int = 0


class EmployeeRunSummary(BaseModel):
    employee_id: int
    name: str
    days: list[DailySummaryRow]
    totals: SummaryTotals


class RunSummaryResponse(BaseModel):
    run: PayrollRunRead
    dates: list[date]
    employees: list[EmployeeRunSummary]
