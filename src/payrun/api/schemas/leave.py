"""Leave entitlement DTOs: pure Pydantic, zero ORM imports."""
from __future__ import annotations
from datetime import date
from pydantic import BaseModel


class LeaveTypeEntitlement(BaseModel):
    leave_type: str
    annual: float
    prorated: float
    anniversary: float
    total: float
    used: float
    balance: float
    convertible_days: float


class LeaveEntitlementResponse(BaseModel):
    employee_id: int
    reference_date: date
    hire_date: date | None = None
    regularization_date: date | None = None
    months_of_service: float
    years_since_regularization: float
    items: list[LeaveTypeEntitlement]
