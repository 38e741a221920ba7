"""Payroll tables: organization rate settings, runs and payslips."""

from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RunStatus(str, Enum):
    DRAFT = "draft"
    FINALIZED = "finalized"
    PAID = "paid"
    ARCHIVED = "archived"
    CANCELLED = "cancelled"


class PayrollSettings(SQLModel, table=True):
    """One row per organization. ``None`` means use the built-in default."""

    id: Optional[int] = Field(default=None, primary_key=True)
    organization_id: int = Field(index=True, unique=True)
    night_diff_rate: Optional[float] = None
    regular_holiday_rate: Optional[float] = None
    special_holiday_rate: Optional[float] = None
    rest_day_premium_rate: Optional[float] = None
    overtime_regular_rate: Optional[float] = None
    overtime_rest_day_rate: Optional[float] = None
    overtime_special_holiday_rate: Optional[float] = None
    overtime_regular_holiday_rate: Optional[float] = None
    daily_rate_includes_allowance: bool = False
    working_days_per_year: Optional[int] = None
    updated_at: datetime = Field(default_factory=_utcnow)


class PayrollRun(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    organization_id: int = Field(index=True)
    cutoff_start: date
    cutoff_end: date
    period: str
    status: RunStatus = Field(default=RunStatus.DRAFT, index=True)
    deductions_enabled: bool = True
    night_diff_rate: Optional[float] = None

    employee_ids: list = Field(default_factory=list, sa_column=Column(JSON))
    # [{"employee_id": 1, "name": "Cash advance", "amount": 500.0}]
    manual_deductions: list = Field(default_factory=list, sa_column=Column(JSON))
    # [{"employee_id": 1, "name": "Bonus", "amount": 1000.0, "type": "bonus"}]
    incentives: list = Field(default_factory=list, sa_column=Column(JSON))
    # [{"employee_id": 1, "sss": {"enabled": true, "frequency": "full"}, ...}]
    government_deduction_settings: list = Field(default_factory=list, sa_column=Column(JSON))
    # [{"employee_id": 1, "date": "2025-01-06", "note": "...", "added_by": "hr", "added_at": "..."}]
    notes: list = Field(default_factory=list, sa_column=Column(JSON))

    processed_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class Payslip(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    organization_id: int = Field(index=True)
    employee_id: int = Field(foreign_key="employee.id", index=True)
    payroll_run_id: int = Field(foreign_key="payrollrun.id", index=True)
    period: str
    cutoff_start: date = Field(index=True)
    cutoff_end: date

    basic_pay: float = 0.0
    gross_pay: float = 0.0
    non_taxable_allowance: float = 0.0
    net_pay: float = 0.0
    pending_deductions: float = 0.0
    # None on payslips stored before the column existed.
    carried_pending: Optional[float] = None
    has_worked_days: bool = False

    days_worked: float = 0.0
    absences: float = 0.0
    late_hours: float = 0.0
    undertime_hours: float = 0.0
    overtime_hours: float = 0.0

    # [{"name": "SSS", "amount": 337.5, "category": "government"}]
    deductions: list = Field(default_factory=list, sa_column=Column(JSON))
    incentives: list = Field(default_factory=list, sa_column=Column(JSON))
    breakdown: dict = Field(default_factory=dict, sa_column=Column(JSON))
    employer_contributions: dict = Field(default_factory=dict, sa_column=Column(JSON))
    edit_history: list = Field(default_factory=list, sa_column=Column(JSON))

    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)
