"""Cost-ledger lines derived from finalized payroll runs."""

from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel


class LedgerStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"


class CostLedgerEntry(SQLModel, table=True):
    __table_args__ = (UniqueConstraint("organization_id", "name", name="uq_ledger_org_name"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    organization_id: int = Field(index=True)
    payroll_run_id: Optional[int] = Field(default=None, foreign_key="payrollrun.id", index=True)
    name: str
    category: str
    description: Optional[str] = None
    amount: float
    amount_paid: float = 0.0
    status: LedgerStatus = LedgerStatus.PENDING
    due_date: Optional[date] = None
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
