"""Repository for cost-ledger lines. No business logic; caller owns the transaction."""
from __future__ import annotations
from sqlalchemy import func
from sqlmodel import Session, col, select
from payrun.models.ledger import CostLedgerEntry


class LedgerRepository:
    def __init__(self, session: Session) -> None:
        self._s = session

    def list_by_names(self, organization_id: int, names: list[str]) -> list[CostLedgerEntry]:
        return list(self._s.exec(
            select(CostLedgerEntry).where(
                CostLedgerEntry.organization_id == organization_id,
                col(CostLedgerEntry.name).in_(names),
            ).order_by(CostLedgerEntry.id)
        ).all())

    def list_for_organization(
        self, organization_id: int, limit: int = 100, offset: int = 0,
    ) -> list[CostLedgerEntry]:
        return list(self._s.exec(
            select(CostLedgerEntry)
            .where(CostLedgerEntry.organization_id == organization_id)
            .order_by(col(CostLedgerEntry.id).desc())
            .offset(offset).limit(limit)
        ).all())

    def count_for_organization(self, organization_id: int) -> int:
        return self._s.exec(
            select(func.count()).select_from(CostLedgerEntry).where(
                CostLedgerEntry.organization_id == organization_id,
            )
        ).one()

    def delete_by_names(self, organization_id: int, names: list[str]) -> int:
        entries = self.list_by_names(organization_id, names)
        for entry in entries:
            self._s.delete(entry)
        self._s.flush()
        return len(entries)

    def add(self, entry: CostLedgerEntry) -> CostLedgerEntry:
        self._s.add(entry)
        self._s.flush()
        return entry
