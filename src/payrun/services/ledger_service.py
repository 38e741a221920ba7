"""Cost-ledger synchronisation for payroll runs.

Ledger lines are derived data: they are named ``"<Category> - <period>"`` and
always rebuilt wholesale (delete, then insert) inside the caller's unit of
work, so finalizing twice yields the same lines.
"""
from __future__ import annotations
import logging
from datetime import timedelta
from payrun.calc.deductions import TAX_LINE
from payrun.config import settings
from payrun.infra.db.uow import UnitOfWork
from payrun.infra.db.repositories.ledger_repository import LedgerRepository
from payrun.infra.db.repositories.payroll_repository import PayrollRepository
from payrun.api.schemas.ledger import CostLedgerEntryList, CostLedgerEntryRead
from payrun.models.ledger import CostLedgerEntry, LedgerStatus
from payrun.models.payroll import PayrollRun

logger = logging.getLogger(__name__)

PAYROLL = "Payroll"
SSS = "SSS Contribution"
PHILHEALTH = "PhilHealth Contribution"
PAGIBIG = "Pag-IBIG Contribution"
WITHHOLDING_TAX = "Withholding Tax"

_CATEGORIES = {
    PAYROLL: "salary",
    SSS: "employer_contribution",
    PHILHEALTH: "employer_contribution",
    PAGIBIG: "employer_contribution",
    WITHHOLDING_TAX: "withholding_tax",
}


def ledger_names(period: str) -> dict[str, str]:
    return {label: f"{label} - {period}" for label in _CATEGORIES}


class LedgerService:
    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def _totals(self, run: PayrollRun) -> dict[str, float]:
        payslips = PayrollRepository(self._uow.session).list_payslips(run.id)
        totals = {label: 0.0 for label in _CATEGORIES}
        for p in payslips:
            employer = p.employer_contributions or {}
            totals[PAYROLL] += p.net_pay or 0.0
            totals[SSS] += employer.get("sss", 0.0)
            totals[PHILHEALTH] += employer.get("philhealth", 0.0)
            totals[PAGIBIG] += employer.get("pagibig", 0.0)
            totals[WITHHOLDING_TAX] += sum(
                d.get("amount", 0.0) for d in (p.deductions or []) if d.get("name") == TAX_LINE
            )
        return {label: round(amount, 2) for label, amount in totals.items()}

    def sync_for_run(self, run: PayrollRun) -> list[CostLedgerEntry]:
        """Delete then recreate the run's ledger lines. Zero totals are skipped."""
        repo = LedgerRepository(self._uow.session)
        names = ledger_names(run.period)
        repo.delete_by_names(run.organization_id, list(names.values()))

        count = len(PayrollRepository(self._uow.session).list_payslips(run.id))
        due = run.cutoff_end + timedelta(days=settings.LEDGER_DUE_DAYS)
        created: list[CostLedgerEntry] = []
        for label, amount in self._totals(run).items():
            if amount <= 0:
                continue
            created.append(repo.add(CostLedgerEntry(
                organization_id=run.organization_id,
                payroll_run_id=run.id,
                name=names[label],
                category=_CATEGORIES[label],
                description=f"{label} for cutoff period {run.period}",
                amount=amount,
                amount_paid=0.0,
                status=LedgerStatus.PENDING,
                due_date=due,
                notes=f"Auto-generated from payroll run {run.period}. Payslips: {count}",
            )))
        logger.info("Synced %d ledger entries for payroll run %s", len(created), run.id)
        return created

    def remove_for_run(self, run: PayrollRun) -> int:
        deleted = LedgerRepository(self._uow.session).delete_by_names(
            run.organization_id, list(ledger_names(run.period).values()),
        )
        if deleted:
            logger.info("Removed %d ledger entries for payroll run %s", deleted, run.id)
        return deleted

    def mark_paid(self, run: PayrollRun) -> int:
        entries = LedgerRepository(self._uow.session).list_by_names(
            run.organization_id, list(ledger_names(run.period).values()),
        )
        for entry in entries:
            entry.amount_paid = entry.amount
            entry.status = LedgerStatus.PAID
            self._uow.session.add(entry)
        self._uow.session.flush()
        return len(entries)

    def list_entries(self, organization_id: int, limit: int = 100, offset: int = 0) -> CostLedgerEntryList:
        repo = LedgerRepository(self._uow.session)
        entries = repo.list_for_organization(organization_id, limit=limit, offset=offset)
        return CostLedgerEntryList(
            items=[CostLedgerEntryRead.model_validate(e) for e in entries],
            total=repo.count_for_organization(organization_id),
        )
