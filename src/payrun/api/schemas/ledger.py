"""Cost-ledger DTOs: pure Pydantic, zero ORM imports."""
from __future__ import annotations
from datetime import date, datetime
from pydantic import BaseModel, field_validator


class CostLedgerEntryRead(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    organization_id: int
    payroll_run_id: int | None = None
    name: str
    category: str
    description: str | None = None
    amount: float
    amount_paid: float
    status: str
    due_date: date | None = None
    notes: str | None = None
    created_at: datetime
    updated_at: datetime

    @field_validator("status", mode="before")
    @classmethod
    def _status_value(cls, v):
        return getattr(v, "value", v)


class CostLedgerEntryList(BaseModel):
    items: list[CostLedgerEntryRead]
    total: int
