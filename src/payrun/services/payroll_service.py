"""Payroll run use-case service. Owns ORM→DTO mapping; routers never see ORM objects.

Every payslip, whether previewed, created or regenerated, comes out of the
single pure :func:`payrun.calc.payroll.compute_pay`. This service only loads
inputs, persists outputs and walks the run lifecycle.
"""
from __future__ import annotations
import logging
from datetime import datetime, timezone
from payrun.calc.classifier import classify_period, index_attendance
from payrun.calc.components import (
    late_minutes, night_diff_hours, split_overtime, undertime_minutes,
)
from payrun.calc.deductions import cap_deductions
from payrun.calc.payroll import compute_pay
from payrun.calc.rates import PayrollRates
from payrun.calc.schedule import resolve_day
from payrun.calc.types import (
    CutoffRange, DayKind, DeductionLine, GovernmentDeductionSettings, HolidayType,
    IncentiveLine, PayComputationResult,
)
from payrun.domain.exceptions import ConflictError, InvalidTransitionError, NotFoundError
from payrun.infra.db.uow import UnitOfWork
from payrun.infra.db.repositories.employee_repository import EmployeeRepository
from payrun.infra.db.repositories.payroll_repository import PayrollRepository
from payrun.api.schemas.payroll import (
    DailySummaryRow, EmployeeRunSummary, PayrollPreviewRequest, PayrollRunCreate,
    PayrollRunList, PayrollRunRead, PayrollRunUpdate, PayslipList, PayslipRead,
    PayslipUpdate, RunNoteCreate, RunSummaryResponse, SummaryTotals,
)
from payrun.models.core import Employee
from payrun.models.payroll import PayrollRun, Payslip, RunStatus
from payrun.services import mapping
from payrun.services.ledger_service import LedgerService

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: dict[RunStatus, frozenset[RunStatus]] = {
    RunStatus.DRAFT: frozenset({RunStatus.FINALIZED, RunStatus.CANCELLED}),
    RunStatus.FINALIZED: frozenset({
        RunStatus.FINALIZED, RunStatus.DRAFT, RunStatus.PAID,
        RunStatus.ARCHIVED, RunStatus.CANCELLED,
    }),
    RunStatus.PAID: frozenset({RunStatus.ARCHIVED, RunStatus.CANCELLED}),
    RunStatus.ARCHIVED: frozenset(),
    RunStatus.CANCELLED: frozenset(),
}


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _dump(items) -> list[dict]:
    return [i.model_dump(mode="json") for i in items]


def _describe_changes(old: list[dict], new: list[dict]) -> list[str]:
    """Human-readable Added / Removed / Modified lines between two item lists."""
    details: list[str] = []
    matched_old: set[int] = set()
    new_names = {item["name"] for item in new}
    old_names = {item["name"] for item in old}

    for item in new:
        idx = next(
            (i for i, o in enumerate(old) if o["name"] == item["name"] and i not in matched_old),
            None,
        )
        if idx is None:
            if item["name"] not in old_names:
                details.append(f'Added "{item["name"]}": {item["amount"]:.2f}')
            continue
        matched_old.add(idx)
        if old[idx]["amount"] != item["amount"]:
            details.append(
                f'Modified "{item["name"]}": {old[idx]["amount"]:.2f} -> {item["amount"]:.2f}'
            )

    for i, item in enumerate(old):
        if i not in matched_old and item["name"] not in new_names:
            details.append(f'Removed "{item["name"]}": {item["amount"]:.2f}')
    return details


class PayrollService:
    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    # --- lookups ---

    def _get_run(self, run_id: int) -> PayrollRun:
        run = PayrollRepository(self._uow.session).get_run(run_id)
        if run is None:
            raise NotFoundError(f"Payroll run {run_id} not found")
        return run

    def _get_payslip(self, payslip_id: int) -> Payslip:
        payslip = PayrollRepository(self._uow.session).get_payslip(payslip_id)
        if payslip is None:
            raise NotFoundError(f"Payslip {payslip_id} not found")
        return payslip

    def _get_employee(self, employee_id: int) -> Employee:
        employee = EmployeeRepository(self._uow.session).get_by_id(employee_id)
        if employee is None:
            raise NotFoundError(f"Employee {employee_id} not found")
        return employee

    def _rates(self, organization_id: int, night_diff_rate: float | None = None) -> PayrollRates:
        row = PayrollRepository(self._uow.session).get_settings(organization_id)
        return mapping.payroll_rates(row, night_diff_rate)

    # --- computation ---

    def _previous_pending(self, employee_id: int, cutoff: CutoffRange, exclude_run_id: int | None) -> float:
        previous = PayrollRepository(self._uow.session).latest_prior_payslip(
            employee_id,
            month_start=cutoff.start.replace(day=1),
            before=cutoff.start,
            exclude_run_id=exclude_run_id,
        )
        return previous.pending_deductions if previous is not None else 0.0

    def _compute(
        self,
        employee: Employee,
        cutoff: CutoffRange,
        rates: PayrollRates,
        *,
        government_settings: GovernmentDeductionSettings | None = None,
        manual_deductions: list[DeductionLine] | None = None,
        manual_incentives: list[IncentiveLine] | None = None,
        deductions_enabled: bool = True,
        exclude_run_id: int | None = None,
    ) -> PayComputationResult:
        repo = EmployeeRepository(self._uow.session)
        attendance = repo.list_attendance(employee.id, cutoff.start, cutoff.end)
        leaves = repo.list_leave_requests(employee.id, cutoff.start, cutoff.end)
        return compute_pay(
            mapping.employee_profile(employee),
            [mapping.attendance_entry(a) for a in attendance],
            [mapping.holiday_entry(h) for h in repo.list_holidays(employee.organization_id)],
            [mapping.leave_entry(lv) for lv in leaves],
            rates,
            cutoff,
            policies=[mapping.leave_policy(p) for p in repo.list_leave_types(employee.organization_id)],
            government_settings=government_settings,
            manual_deductions=manual_deductions or [],
            manual_incentives=manual_incentives or [],
            previous_pending=self._previous_pending(employee.id, cutoff, exclude_run_id),
            deductions_enabled=deductions_enabled,
        )

    def _generate_payslips(self, run: PayrollRun) -> int:
        """Compute and persist one payslip per selected employee of the run's organization."""
        emp_repo = EmployeeRepository(self._uow.session)
        pay_repo = PayrollRepository(self._uow.session)
        cutoff = CutoffRange(start=run.cutoff_start, end=run.cutoff_end)
        rates = self._rates(run.organization_id, run.night_diff_rate)

        employees = emp_repo.list_for_organization(run.organization_id, run.employee_ids or [])
        found = {e.id for e in employees}
        for missing in sorted(set(run.employee_ids or []) - found):
            logger.warning(
                "Skipping employee %s for payroll run %s: not in organization %s",
                missing, run.id, run.organization_id,
            )

        overrides = {
            s.get("employee_id"): GovernmentDeductionSettings.model_validate(s)
            for s in (run.government_deduction_settings or [])
        }
        for employee in employees:
            result = self._compute(
                employee,
                cutoff,
                rates,
                government_settings=overrides.get(employee.id),
                manual_deductions=[
                    DeductionLine(name=d["name"], amount=d["amount"], category=d.get("category", "custom"))
                    for d in (run.manual_deductions or []) if d.get("employee_id") == employee.id
                ],
                manual_incentives=[
                    IncentiveLine(name=i["name"], amount=i["amount"], type=i.get("type", "other"))
                    for i in (run.incentives or []) if i.get("employee_id") == employee.id
                ],
                deductions_enabled=run.deductions_enabled,
                exclude_run_id=run.id,
            )
            pay_repo.add_payslip(Payslip(
                organization_id=run.organization_id,
                employee_id=employee.id,
                payroll_run_id=run.id,
                period=result.period,
                cutoff_start=result.cutoff_start,
                cutoff_end=result.cutoff_end,
                basic_pay=result.basic_pay,
                gross_pay=result.gross_pay,
                non_taxable_allowance=result.non_taxable_allowance,
                net_pay=result.net_pay,
                pending_deductions=result.pending_deductions,
                carried_pending=result.carried_pending,
                has_worked_days=result.has_worked_days,
                days_worked=result.days_worked,
                absences=result.absences,
                late_hours=result.late_hours,
                undertime_hours=result.undertime_hours,
                overtime_hours=result.overtime_hours,
                deductions=_dump(result.deductions),
                incentives=_dump(result.incentives),
                breakdown=result.breakdown.model_dump(mode="json"),
                employer_contributions=result.employer_contributions.model_dump(mode="json"),
                edit_history=[],
            ))
        return len(employees)

    # --- runs ---

    def create_run(self, organization_id: int, payload: PayrollRunCreate) -> PayrollRunRead:
        cutoff = CutoffRange(start=payload.cutoff_start, end=payload.cutoff_end)
        employee_ids = payload.employee_ids
        if employee_ids is None:
            employee_ids = [
                e.id for e in EmployeeRepository(self._uow.session).list_for_organization(organization_id)
                if e.is_active
            ]
        run = PayrollRepository(self._uow.session).add_run(PayrollRun(
            organization_id=organization_id,
            cutoff_start=cutoff.start,
            cutoff_end=cutoff.end,
            period=cutoff.label,
            status=RunStatus.DRAFT,
            deductions_enabled=payload.deductions_enabled,
            night_diff_rate=payload.night_diff_rate,
            employee_ids=list(employee_ids),
            manual_deductions=_dump(payload.manual_deductions),
            incentives=_dump(payload.incentives),
            government_deduction_settings=_dump(payload.government_deduction_settings),
            notes=[],
        ))
        count = self._generate_payslips(run)
        self._uow.commit()
        logger.info("Created payroll run %s (%s) with %d payslips", run.id, run.period, count)
        return PayrollRunRead.model_validate(run)

    def list_runs(self, organization_id: int, limit: int = 100, offset: int = 0) -> PayrollRunList:
        repo = PayrollRepository(self._uow.session)
        runs = repo.list_runs(organization_id, limit=limit, offset=offset)
        return PayrollRunList(
            items=[PayrollRunRead.model_validate(r) for r in runs],
            total=repo.count_runs(organization_id),
        )

    def get_run(self, run_id: int) -> PayrollRunRead:
        return PayrollRunRead.model_validate(self._get_run(run_id))

    def update_run(self, run_id: int, payload: PayrollRunUpdate) -> PayrollRunRead:
        """Edit a draft run and regenerate all of its payslips from the stored inputs."""
        run = self._get_run(run_id)
        if run.status != RunStatus.DRAFT:
            raise ConflictError(f"Payroll run {run_id} is {run.status.value}; only draft runs can be edited")

        changes = payload.model_dump(exclude_unset=True)
        if not changes:
            return PayrollRunRead.model_validate(run)

        start = payload.cutoff_start or run.cutoff_start
        end = payload.cutoff_end or run.cutoff_end
        if end < start:
            raise ConflictError("cutoff_end must not precede cutoff_start")
        cutoff = CutoffRange(start=start, end=end)
        run.cutoff_start, run.cutoff_end, run.period = cutoff.start, cutoff.end, cutoff.label

        if payload.employee_ids is not None:
            run.employee_ids = list(payload.employee_ids)
        if payload.manual_deductions is not None:
            run.manual_deductions = _dump(payload.manual_deductions)
        if payload.incentives is not None:
            run.incentives = _dump(payload.incentives)
        if payload.government_deduction_settings is not None:
            run.government_deduction_settings = _dump(payload.government_deduction_settings)
        if payload.deductions_enabled is not None:
            run.deductions_enabled = payload.deductions_enabled
        run.updated_at = _now()

        repo = PayrollRepository(self._uow.session)
        repo.delete_payslips(run.id)
        count = self._generate_payslips(run)
        self._uow.session.add(run)
        self._uow.commit()
        logger.info("Regenerated %d payslips for payroll run %s (%s)", count, run.id, ", ".join(changes))
        return PayrollRunRead.model_validate(run)

    def update_status(self, run_id: int, status: str) -> PayrollRunRead:
        run = self._get_run(run_id)
        current = RunStatus(run.status)
        target = RunStatus(status)
        if target not in ALLOWED_TRANSITIONS[current]:
            raise InvalidTransitionError(current.value, target.value)

        ledger = LedgerService(self._uow)
        if current in (RunStatus.FINALIZED, RunStatus.PAID) and target in (RunStatus.DRAFT, RunStatus.ARCHIVED):
            ledger.remove_for_run(run)
        elif current == RunStatus.FINALIZED and target == RunStatus.CANCELLED:
            ledger.remove_for_run(run)

        run.status = target
        run.updated_at = _now()
        if target == RunStatus.FINALIZED:
            run.processed_at = _now()
        self._uow.session.add(run)
        self._uow.session.flush()

        if target == RunStatus.FINALIZED:
            ledger.sync_for_run(run)
        elif target == RunStatus.PAID:
            ledger.mark_paid(run)

        self._uow.commit()
        logger.info("Payroll run %s moved %s -> %s", run.id, current.value, target.value)
        return PayrollRunRead.model_validate(run)

    def delete_run(self, run_id: int) -> None:
        run = self._get_run(run_id)
        LedgerService(self._uow).remove_for_run(run)
        repo = PayrollRepository(self._uow.session)
        repo.delete_payslips(run.id)
        repo.delete_run(run)
        self._uow.commit()
        logger.info("Deleted payroll run %s", run_id)

    def add_note(self, run_id: int, payload: RunNoteCreate) -> PayrollRunRead:
        run = self._get_run(run_id)
        run.notes = [*(run.notes or []), {
            "employee_id": payload.employee_id,
            "date": payload.date.isoformat(),
            "note": payload.note,
            "added_by": payload.added_by,
            "added_at": _now().isoformat(),
        }]
        run.updated_at = _now()
        self._uow.session.add(run)
        self._uow.commit()
        return PayrollRunRead.model_validate(run)

    # --- payslips ---

    def list_payslips(self, run_id: int) -> PayslipList:
        self._get_run(run_id)
        payslips = PayrollRepository(self._uow.session).list_payslips(run_id)
        return PayslipList(items=[PayslipRead.model_validate(p) for p in payslips], total=len(payslips))

    def list_employee_payslips(self, employee_id: int, limit: int = 100, offset: int = 0) -> PayslipList:
        self._get_employee(employee_id)
        payslips = PayrollRepository(self._uow.session).list_payslips_for_employee(
            employee_id, limit=limit, offset=offset,
        )
        return PayslipList(items=[PayslipRead.model_validate(p) for p in payslips], total=len(payslips))

    def get_payslip(self, payslip_id: int) -> PayslipRead:
        return PayslipRead.model_validate(self._get_payslip(payslip_id))

    def update_payslip(self, payslip_id: int, payload: PayslipUpdate) -> PayslipRead:
        """Hand-edit a payslip's items; gross, capping and the ledger follow."""
        payslip = self._get_payslip(payslip_id)
        run = self._get_run(payslip.payroll_run_id)
        if run.status in (RunStatus.ARCHIVED, RunStatus.CANCELLED):
            raise ConflictError(f"Payslips of a {run.status.value} payroll run cannot be edited")

        old_deductions = list(payslip.deductions or [])
        old_incentives = list(payslip.incentives or [])
        old_allowance = payslip.non_taxable_allowance or 0.0

        new_deductions = _dump(payload.deductions) if payload.deductions is not None else old_deductions
        new_incentives = _dump(payload.incentives) if payload.incentives is not None else old_incentives
        new_allowance = (
            payload.non_taxable_allowance if payload.non_taxable_allowance is not None else old_allowance
        )

        gross = round(
            payslip.gross_pay
            - sum(i["amount"] for i in old_incentives)
            + sum(i["amount"] for i in new_incentives),
            2,
        )
        if payslip.carried_pending is None:
            payslip.carried_pending = payslip.pending_deductions or 0.0
        capped = cap_deductions(
            [DeductionLine.model_validate(d) for d in new_deductions],
            round(gross + new_allowance, 2),
            payslip.carried_pending,
        )
        final_deductions = _dump(capped.lines)

        changes: list[dict] = []
        if final_deductions != old_deductions:
            changes.append({
                "field": "deductions", "old_value": old_deductions, "new_value": final_deductions,
                "details": _describe_changes(old_deductions, final_deductions),
            })
        if new_incentives != old_incentives:
            changes.append({
                "field": "incentives", "old_value": old_incentives, "new_value": new_incentives,
                "details": _describe_changes(old_incentives, new_incentives),
            })
        if new_allowance != old_allowance:
            changes.append({
                "field": "non_taxable_allowance", "old_value": old_allowance, "new_value": new_allowance,
            })

        payslip.deductions = final_deductions
        payslip.incentives = new_incentives
        payslip.non_taxable_allowance = new_allowance
        payslip.gross_pay = gross
        payslip.pending_deductions = capped.pending
        payslip.net_pay = max(0.0, round(gross + new_allowance - sum(d.amount for d in capped.lines), 2))
        if changes:
            payslip.edit_history = [*(payslip.edit_history or []), {
                "edited_by": payload.edited_by or "unknown",
                "edited_at": _now().isoformat(),
                "changes": changes,
            }]
        payslip.updated_at = _now()
        self._uow.session.add(payslip)
        self._uow.session.flush()

        if run.status in (RunStatus.FINALIZED, RunStatus.PAID):
            ledger = LedgerService(self._uow)
            ledger.sync_for_run(run)
            if run.status == RunStatus.PAID:
                ledger.mark_paid(run)

        self._uow.commit()
        return PayslipRead.model_validate(payslip)

    # --- read-only computations ---

    def preview(self, employee_id: int, payload: PayrollPreviewRequest) -> PayComputationResult:
        """Compute one employee's pay for any cutoff without persisting anything."""
        employee = self._get_employee(employee_id)
        cutoff = CutoffRange(start=payload.cutoff_start, end=payload.cutoff_end)
        return self._compute(
            employee,
            cutoff,
            self._rates(employee.organization_id, payload.night_diff_rate),
            government_settings=payload.government_deduction_settings,
            manual_deductions=payload.manual_deductions,
            manual_incentives=payload.incentives,
            deductions_enabled=payload.deductions_enabled,
        )

    def get_summary(self, run_id: int) -> RunSummaryResponse:
        """Per-employee, per-day attendance view of a run's cutoff."""
        run = self._get_run(run_id)
        repo = EmployeeRepository(self._uow.session)
        cutoff = CutoffRange(start=run.cutoff_start, end=run.cutoff_end)
        holidays = [mapping.holiday_entry(h) for h in repo.list_holidays(run.organization_id)]
        policies = [mapping.leave_policy(p) for p in repo.list_leave_types(run.organization_id)]
        employee_ids = sorted({p.employee_id for p in PayrollRepository(self._uow.session).list_payslips(run.id)})

        summaries: list[EmployeeRunSummary] = []
        for employee in repo.list_for_organization(run.organization_id, employee_ids):
            profile = mapping.employee_profile(employee)
            attendance = index_attendance(
                mapping.attendance_entry(a) for a in repo.list_attendance(employee.id, cutoff.start, cutoff.end)
            )
            leaves = [mapping.leave_entry(lv) for lv in repo.list_leave_requests(employee.id, cutoff.start, cutoff.end)]
            totals = SummaryTotals()
            rows: list[DailySummaryRow] = []
            for day in classify_period(profile, cutoff, attendance, holidays, leaves, policies):
                row = self._summary_row(profile, day)
                totals.late_minutes += row.late_minutes
                totals.undertime_minutes += row.undertime_minutes
                totals.regular_ot_hours += row.regular_ot_hours
                totals.special_ot_hours += row.special_ot_hours
                totals.night_diff_hours += row.night_diff_hours
                totals.absent_days += int(row.is_absent)
                rows.append(row)
            summaries.append(EmployeeRunSummary(
                employee_id=employee.id, name=employee.name, days=rows, totals=totals,
            ))

        return RunSummaryResponse(
            run=PayrollRunRead.model_validate(run),
            dates=list(cutoff.dates()),
            employees=summaries,
        )

    @staticmethod
    def _summary_row(profile, day) -> DailySummaryRow:
        entry = day.entry
        row = DailySummaryRow(date=day.date, is_absent=day.kind == DayKind.UNPAID_ABSENCE)
        if entry is None:
            return row
        row.status = entry.status.value
        row.time_in = entry.actual_in
        row.time_out = entry.actual_out
        row.note = entry.remarks
        if day.kind != DayKind.WORKED:
            return row

        schedule = resolve_day(profile, day.date)
        scheduled_in = entry.scheduled_in or schedule.in_time
        scheduled_out = entry.scheduled_out or schedule.out_time
        row.late_minutes = late_minutes(scheduled_in, entry.actual_in)
        row.undertime_minutes = undertime_minutes(scheduled_out, entry.actual_out, entry.actual_in)
        row.night_diff_hours = round(night_diff_hours(entry.actual_in, entry.actual_out, scheduled_in), 2)
        regular, excess = split_overtime(entry.overtime_hours or 0.0)
        if day.holiday_type == HolidayType.SPECIAL:
            row.special_ot_hours = regular + excess
        else:
            row.regular_ot_hours = regular + excess
        return row
