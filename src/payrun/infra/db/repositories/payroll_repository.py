"""Repository for payroll runs, payslips and rate settings. No business logic; caller owns the transaction."""
from __future__ import annotations
from datetime import date
from sqlalchemy import func
from sqlmodel import Session, col, select
from payrun.models.payroll import PayrollRun, PayrollSettings, Payslip, RunStatus


class PayrollRepository:
    def __init__(self, session: Session) -> None:
        self._s = session

    # --- PayrollSettings ---

    def get_settings(self, organization_id: int) -> PayrollSettings | None:
        return self._s.exec(
            select(PayrollSettings).where(PayrollSettings.organization_id == organization_id)
        ).first()

    # --- PayrollRun ---

    def get_run(self, run_id: int) -> PayrollRun | None:
        return self._s.get(PayrollRun, run_id)

    def list_runs(self, organization_id: int, limit: int = 100, offset: int = 0) -> list[PayrollRun]:
        return list(self._s.exec(
            select(PayrollRun)
            .where(PayrollRun.organization_id == organization_id)
            .order_by(col(PayrollRun.cutoff_start).desc(), col(PayrollRun.id).desc())
            .offset(offset).limit(limit)
        ).all())

    def count_runs(self, organization_id: int) -> int:
        return self._s.exec(
            select(func.count()).select_from(PayrollRun).where(
                PayrollRun.organization_id == organization_id,
            )
        ).one()

    def add_run(self, run: PayrollRun) -> PayrollRun:
        self._s.add(run)
        self._s.flush()  # get generated PK without committing
        return run

    def delete_run(self, run: PayrollRun) -> None:
        self._s.delete(run)
        self._s.flush()

    # --- Payslip ---

    def get_payslip(self, payslip_id: int) -> Payslip | None:
        return self._s.get(Payslip, payslip_id)

    def list_payslips(self, run_id: int) -> list[Payslip]:
        return list(self._s.exec(
            select(Payslip).where(Payslip.payroll_run_id == run_id).order_by(Payslip.employee_id)
        ).all())

    def list_payslips_for_employee(
        self, employee_id: int, limit: int = 100, offset: int = 0,
    ) -> list[Payslip]:
        return list(self._s.exec(
            select(Payslip)
            .where(Payslip.employee_id == employee_id)
            .order_by(col(Payslip.cutoff_start).desc())
            .offset(offset).limit(limit)
        ).all())

    def add_payslip(self, payslip: Payslip) -> Payslip:
        self._s.add(payslip)
        self._s.flush()
        return payslip

    def delete_payslips(self, run_id: int) -> int:
        payslips = self.list_payslips(run_id)
        for payslip in payslips:
            self._s.delete(payslip)
        self._s.flush()
        return len(payslips)

    def latest_prior_payslip(
        self, employee_id: int, month_start: date, before: date, exclude_run_id: int | None,
    ) -> Payslip | None:
        """Most recent same-month payslip from an earlier cutoff of a run that was not cancelled.

        Its ``pending_deductions`` is the unresolved carry; 0 means an earlier
        cutoff already settled it.
        """
        stmt = (
            select(Payslip)
            .join(PayrollRun, col(PayrollRun.id) == col(Payslip.payroll_run_id))
            .where(
                Payslip.employee_id == employee_id,
                Payslip.cutoff_start >= month_start,
                Payslip.cutoff_start < before,
                PayrollRun.status != RunStatus.CANCELLED,
            )
        )
        if exclude_run_id is not None:
            stmt = stmt.where(Payslip.payroll_run_id != exclude_run_id)
        return self._s.exec(
            stmt.order_by(col(Payslip.cutoff_start).desc(), col(Payslip.id).desc())
        ).first()
