"""Integration tests for PayrollService / LedgerService against a temp SQLite DB."""
from datetime import date
import pytest
from sqlmodel import Session, select
from payrun.api.schemas.payroll import (
    ManualDeduction, PayrollPreviewRequest, PayrollRunCreate, PayrollRunUpdate, PayslipUpdate,
    RunNoteCreate,
)
from payrun.calc.deductions import PREVIOUS_PENDING_NAME
from payrun.calc.types import DeductionLine, IncentiveLine
from payrun.domain.exceptions import ConflictError, InvalidTransitionError, NotFoundError
from payrun.infra.db.uow import UnitOfWork
from payrun.models.ledger import CostLedgerEntry, LedgerStatus
from payrun.models.payroll import Payslip
from payrun.services.payroll_service import PayrollService

JAN_1, JAN_15 = date(2025, 1, 1), date(2025, 1, 15)
JAN_16, JAN_31 = date(2025, 1, 16), date(2025, 1, 31)


def _create(employee_ids=None, start=JAN_1, end=JAN_15, **fields):
    with UnitOfWork() as uow:
        return PayrollService(uow).create_run(
            1, PayrollRunCreate(cutoff_start=start, cutoff_end=end, employee_ids=employee_ids, **fields),
        )


def _transition(run_id: int, status: str):
    with UnitOfWork() as uow:
        return PayrollService(uow).update_status(run_id, status)


def _payslips(run_id: int):
    with UnitOfWork() as uow:
        return PayrollService(uow).list_payslips(run_id).items


def _ledger(engine) -> dict[str, CostLedgerEntry]:
    with Session(engine) as s:
        return {e.name: e for e in s.exec(select(CostLedgerEntry)).all()}


@pytest.fixture
def worker(seed):
    emp = seed.employee(name="Maria Santos")
    seed.full_attendance(emp, JAN_1, JAN_31)
    return emp


def test_create_run_computes_one_payslip_per_employee(worker, seed):
    seed.employee(organization_id=2, name="Other Org")
    run = _create()
    assert run.status == "draft"
    assert run.period == "Jan 1 - Jan 15, 2025"
    assert run.employee_ids == [worker.id]

    payslips = _payslips(run.id)
    assert len(payslips) == 1
    slip = payslips[0]
    assert slip.gross_pay == 15000
    assert slip.net_pay == 12175
    assert slip.total_deductions == 2825
    assert slip.employer_contributions.sss == 1440


def test_create_run_skips_employees_of_other_organizations(worker, seed):
    outsider = seed.employee(organization_id=2, name="Outsider")
    run = _create(employee_ids=[worker.id, outsider.id])
    assert [p.employee_id for p in _payslips(run.id)] == [worker.id]


def test_manual_inputs_are_applied_per_employee(worker, seed):
    other = seed.employee(name="Pedro Reyes")
    run = _create(
        manual_deductions=[ManualDeduction(employee_id=worker.id, name="Cash advance", amount=500)],
        incentives=[{"employee_id": other.id, "name": "Bonus", "amount": 1000}],
    )
    by_employee = {p.employee_id: p for p in _payslips(run.id)}
    assert "Cash advance" in {d.name for d in by_employee[worker.id].deductions}
    assert by_employee[other.id].incentives[0].name == "Bonus"
    assert by_employee[worker.id].incentives == []


def test_pending_deductions_carry_into_the_next_cutoff(seed):
    emp = seed.employee()
    seed.full_attendance(emp, JAN_16, JAN_31)  # nothing worked in the first half
    first = _payslips(_create().id)[0]
    assert not first.has_worked_days
    assert first.pending_deductions > 0

    second = _payslips(_create(start=JAN_16, end=JAN_31).id)[0]
    carry = {d.name: d.amount for d in second.deductions}[PREVIOUS_PENDING_NAME]
    assert carry == first.pending_deductions


def test_settled_pending_is_not_carried_again(seed):
    emp = seed.employee()
    seed.full_attendance(emp, date(2025, 1, 11), JAN_31)  # nothing worked Jan 1-10
    first = _payslips(_create(end=date(2025, 1, 10)).id)[0]
    assert first.pending_deductions == 2825

    second = _payslips(_create(start=date(2025, 1, 11), end=date(2025, 1, 20)).id)[0]
    assert {d.name: d.amount for d in second.deductions}[PREVIOUS_PENDING_NAME] == 2825
    assert second.pending_deductions == 0

    third = _payslips(_create(start=date(2025, 1, 21), end=JAN_31).id)[0]
    assert PREVIOUS_PENDING_NAME not in {d.name for d in third.deductions}


def test_pending_of_cancelled_run_is_not_carried(seed):
    emp = seed.employee()
    seed.full_attendance(emp, JAN_16, JAN_31)
    first = _create()
    assert _payslips(first.id)[0].pending_deductions > 0
    _transition(first.id, "cancelled")

    second = _payslips(_create(start=JAN_16, end=JAN_31).id)[0]
    assert PREVIOUS_PENDING_NAME not in {d.name for d in second.deductions}


def test_overlapping_runs_are_accepted(worker):
    first = _create()
    second = _create()
    assert first.id != second.id
    assert len(_payslips(second.id)) == 1


def test_update_draft_regenerates_payslips(worker):
    run = _create()
    with UnitOfWork() as uow:
        updated = PayrollService(uow).update_run(run.id, PayrollRunUpdate(cutoff_start=JAN_16, cutoff_end=JAN_31))
    assert updated.period == "Jan 16 - Jan 31, 2025"
    payslips = _payslips(run.id)
    assert len(payslips) == 1
    assert payslips[0].cutoff_start == JAN_16
    assert payslips[0].days_worked == 12


def test_update_rejects_bad_cutoff_and_non_draft(worker):
    run = _create()
    with UnitOfWork() as uow:
        with pytest.raises(ConflictError):
            PayrollService(uow).update_run(run.id, PayrollRunUpdate(cutoff_end=date(2024, 12, 31)))
    _transition(run.id, "finalized")
    with UnitOfWork() as uow:
        with pytest.raises(ConflictError):
            PayrollService(uow).update_run(run.id, PayrollRunUpdate(deductions_enabled=False))


def test_finalize_creates_ledger_lines(worker, use_test_engine):
    run = _create()
    finalized = _transition(run.id, "finalized")
    assert finalized.processed_at is not None

    ledger = _ledger(use_test_engine)
    period = "Jan 1 - Jan 15, 2025"
    assert ledger[f"Payroll - {period}"].amount == 12175
    assert ledger[f"SSS Contribution - {period}"].amount == 1440
    assert ledger[f"PhilHealth Contribution - {period}"].amount == 250
    assert ledger[f"Pag-IBIG Contribution - {period}"].amount == 100
    assert ledger[f"Withholding Tax - {period}"].amount == 1800
    entry = ledger[f"Payroll - {period}"]
    assert entry.due_date == date(2025, 1, 22)
    assert entry.status == LedgerStatus.PENDING
    assert entry.amount_paid == 0


def test_finalizing_twice_is_idempotent(worker, use_test_engine):
    run = _create()
    _transition(run.id, "finalized")
    before = {name: e.amount for name, e in _ledger(use_test_engine).items()}
    _transition(run.id, "finalized")
    after = {name: e.amount for name, e in _ledger(use_test_engine).items()}
    assert before == after
    assert len(after) == 5


def test_paid_marks_ledger_settled_and_archive_removes_it(worker, use_test_engine):
    run = _create()
    _transition(run.id, "finalized")
    _transition(run.id, "paid")
    for entry in _ledger(use_test_engine).values():
        assert entry.status == LedgerStatus.PAID
        assert entry.amount_paid == entry.amount
    _transition(run.id, "archived")
    assert _ledger(use_test_engine) == {}


def test_reverting_to_draft_removes_ledger(worker, use_test_engine):
    run = _create()
    _transition(run.id, "finalized")
    assert _transition(run.id, "draft").status == "draft"
    assert _ledger(use_test_engine) == {}


@pytest.mark.parametrize("path", [
    ["paid"],
    ["draft"],
    ["finalized", "paid", "draft"],
    ["cancelled", "draft"],
    ["finalized", "archived", "finalized"],
])
def test_invalid_transitions_raise(worker, path):
    run = _create()
    *allowed, rejected = path
    for status in allowed:
        _transition(run.id, status)
    with pytest.raises(InvalidTransitionError):
        _transition(run.id, rejected)


def test_delete_run_removes_payslips_and_ledger(worker, use_test_engine):
    run = _create()
    _transition(run.id, "finalized")
    with UnitOfWork() as uow:
        PayrollService(uow).delete_run(run.id)
    with Session(use_test_engine) as s:
        assert s.exec(select(Payslip)).all() == []
    assert _ledger(use_test_engine) == {}
    with UnitOfWork() as uow:
        with pytest.raises(NotFoundError):
            PayrollService(uow).get_run(run.id)


def test_edit_payslip_recomputes_and_records_history(worker):
    run = _create()
    slip = _payslips(run.id)[0]
    deductions = [d for d in slip.deductions if d.name != "PhilHealth"]
    deductions.append(DeductionLine(name="Uniform", amount=300))
    with UnitOfWork() as uow:
        edited = PayrollService(uow).update_payslip(slip.id, PayslipUpdate(
            deductions=deductions,
            incentives=[IncentiveLine(name="Bonus", amount=1000, type="bonus")],
            edited_by="hr@example.com",
        ))
    assert edited.gross_pay == 16000
    assert edited.total_deductions == 2825 - 250 + 300
    assert edited.net_pay == 16000 - 2875

    entry = edited.edit_history[-1]
    assert entry["edited_by"] == "hr@example.com"
    details = {c["field"]: c["details"] for c in entry["changes"]}
    assert 'Removed "PhilHealth": 250.00' in details["deductions"]
    assert 'Added "Uniform": 300.00' in details["deductions"]
    assert 'Added "Bonus": 1000.00' in details["incentives"]


def test_edit_payslip_caps_and_resyncs_finalized_ledger(worker, use_test_engine):
    run = _create()
    _transition(run.id, "finalized")
    slip = _payslips(run.id)[0]
    with UnitOfWork() as uow:
        edited = PayrollService(uow).update_payslip(slip.id, PayslipUpdate(
            deductions=[DeductionLine(name="Damage", amount=20000)],
        ))
    assert edited.net_pay == 0
    assert edited.total_deductions == 15000
    assert edited.pending_deductions == 5000
    ledger = _ledger(use_test_engine)
    assert "Payroll - Jan 1 - Jan 15, 2025" not in ledger
    assert "Withholding Tax - Jan 1 - Jan 15, 2025" not in ledger


def test_repeating_an_oversized_edit_keeps_pending_stable(worker):
    slip = _payslips(_create().id)[0]
    oversized = PayslipUpdate(deductions=[DeductionLine(name="Loan", amount=20000)])
    for _ in range(2):
        with UnitOfWork() as uow:
            edited = PayrollService(uow).update_payslip(slip.id, oversized)
        assert edited.pending_deductions == 5000

    with UnitOfWork() as uow:
        lowered = PayrollService(uow).update_payslip(slip.id, PayslipUpdate(
            deductions=[DeductionLine(name="Loan", amount=1000)],
        ))
    assert lowered.pending_deductions == 0
    assert lowered.net_pay == 14000


def test_edit_keeps_pending_carried_from_unworked_cutoff(seed):
    emp = seed.employee()
    seed.full_attendance(emp, JAN_16, JAN_31)
    slip = _payslips(_create().id)[0]
    assert slip.pending_deductions == pytest.approx(2997.41, abs=0.01)
    for _ in range(2):
        with UnitOfWork() as uow:
            edited = PayrollService(uow).update_payslip(slip.id, PayslipUpdate(non_taxable_allowance=500))
        # deferred statutory stays pending; the absence line now fits
        assert edited.pending_deductions == 2825


def test_edit_payslip_modification_detail(worker):
    slip = _payslips(_create().id)[0]
    deductions = [
        DeductionLine(name=d.name, amount=700 if d.name == "SSS" else d.amount, category=d.category)
        for d in slip.deductions
    ]
    with UnitOfWork() as uow:
        edited = PayrollService(uow).update_payslip(slip.id, PayslipUpdate(deductions=deductions))
    assert edited.edit_history[-1]["changes"][0]["details"] == ['Modified "SSS": 675.00 -> 700.00']


def test_edit_is_refused_on_cancelled_run(worker):
    run = _create()
    _transition(run.id, "cancelled")
    slip = _payslips(run.id)[0]
    with UnitOfWork() as uow:
        with pytest.raises(ConflictError):
            PayrollService(uow).update_payslip(slip.id, PayslipUpdate(non_taxable_allowance=10))


def test_preview_does_not_persist(worker, use_test_engine):
    with UnitOfWork() as uow:
        result = PayrollService(uow).preview(
            worker.id, PayrollPreviewRequest(cutoff_start=JAN_1, cutoff_end=JAN_15),
        )
    assert result.net_pay == 12175
    with Session(use_test_engine) as s:
        assert s.exec(select(Payslip)).all() == []


def test_run_summary_reports_lateness_overtime_and_absences(seed):
    emp = seed.employee(name="Night Owl")
    seed.attendance(emp, date(2025, 1, 2), actual_in="09:15", actual_out="18:00", overtime_hours=2)
    seed.attendance(emp, date(2025, 1, 3), actual_in="14:00", actual_out="23:00", remarks="swing shift")
    seed.holiday(1, date(2025, 1, 6), type="special", name="Special day")
    seed.attendance(emp, date(2025, 1, 6), overtime_hours=1)
    run = _create(start=date(2025, 1, 2), end=date(2025, 1, 7))
    with UnitOfWork() as uow:
        summary = PayrollService(uow).get_summary(run.id)

    assert summary.dates[0] == date(2025, 1, 2)
    assert len(summary.dates) == 6
    days = {d.date: d for d in summary.employees[0].days}
    assert days[date(2025, 1, 2)].late_minutes == 15
    assert days[date(2025, 1, 2)].regular_ot_hours == 2
    assert days[date(2025, 1, 3)].night_diff_hours == 1
    assert days[date(2025, 1, 3)].undertime_minutes == 0
    assert days[date(2025, 1, 3)].note == "swing shift"
    assert days[date(2025, 1, 6)].special_ot_hours == 1
    assert days[date(2025, 1, 7)].is_absent
    assert not days[date(2025, 1, 4)].is_absent

    totals = summary.employees[0].totals
    assert totals.absent_days == 1
    assert totals.late_minutes == 15 + 300
    assert totals.regular_ot_hours == 2
    assert totals.special_ot_hours == 1


def test_add_note(worker):
    run = _create()
    with UnitOfWork() as uow:
        updated = PayrollService(uow).add_note(run.id, RunNoteCreate(
            employee_id=worker.id, date=JAN_1, note="Forgot to clock out", added_by="hr",
        ))
    assert updated.notes[0]["note"] == "Forgot to clock out"
    assert updated.notes[0]["date"] == "2025-01-01"


def test_missing_run_and_payslip_raise_not_found(use_test_engine):
    with UnitOfWork() as uow:
        service = PayrollService(uow)
        with pytest.raises(NotFoundError):
            service.get_run(404)
        with pytest.raises(NotFoundError):
            service.get_payslip(404)
        with pytest.raises(NotFoundError):
            service.list_employee_payslips(404)
