"""Employee-side tables: employees, attendance, holidays and leave."""

from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import JSON, Column, UniqueConstraint
from sqlmodel import Field, SQLModel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Employee(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    organization_id: int = Field(index=True)
    name: str
    hire_date: Optional[date] = None
    regularization_date: Optional[date] = None
    is_active: bool = True

    # Compensation
    salary_type: str = "monthly"
    basic_salary: float = 0.0
    allowance: float = 0.0
    regular_holiday_rate: Optional[float] = None
    special_holiday_rate: Optional[float] = None
    night_diff_rate: Optional[float] = None
    overtime_regular_rate: Optional[float] = None
    overtime_rest_day_rate: Optional[float] = None
    overtime_regular_holiday_rate: Optional[float] = None
    overtime_special_holiday_rate: Optional[float] = None

    # {"monday": {"in_time": "09:00", "out_time": "18:00", "is_workday": true}, ...}
    schedule: dict = Field(default_factory=dict, sa_column=Column(JSON))
    # [{"date": "2025-01-04", "in_time": "08:00", "out_time": "17:00"}]
    schedule_overrides: list = Field(default_factory=list, sa_column=Column(JSON))
    leave_credits: dict = Field(default_factory=dict, sa_column=Column(JSON))
    deductions: list = Field(default_factory=list, sa_column=Column(JSON))
    incentives: list = Field(default_factory=list, sa_column=Column(JSON))

    created_at: datetime = Field(default_factory=_utcnow)


class AttendanceRecord(SQLModel, table=True):
    __table_args__ = (UniqueConstraint("employee_id", "date", name="uq_attendance_employee_date"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    organization_id: int = Field(index=True)
    employee_id: int = Field(foreign_key="employee.id", index=True)
    date: date
    status: str = "present"
    scheduled_in: Optional[str] = None
    scheduled_out: Optional[str] = None
    actual_in: Optional[str] = None
    actual_out: Optional[str] = None
    overtime_hours: Optional[float] = None
    is_holiday: Optional[bool] = None
    holiday_type: Optional[str] = None
    remarks: Optional[str] = None


class Holiday(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    organization_id: int = Field(index=True)
    name: str
    date: date
    type: str = "regular"
    is_recurring: bool = False
    year: Optional[int] = None


class LeaveRequest(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    organization_id: int = Field(index=True)
    employee_id: int = Field(foreign_key="employee.id", index=True)
    leave_type: str
    custom_leave_type: Optional[str] = None
    start_date: date
    end_date: date
    number_of_days: float = 0.0
    status: str = "pending"
    reason: Optional[str] = None


class LeaveTypeSetting(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    organization_id: int = Field(index=True)
    name: str
    type: str = "custom"
    is_paid: bool = True
    default_credits: float = 0.0
    is_anniversary: bool = False
