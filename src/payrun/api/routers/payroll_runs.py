"""Payroll run endpoints: edit, lifecycle, payslips, summary, notes."""
from fastapi import APIRouter, Depends
from payrun.api.deps import get_uow
from payrun.api.schemas.payroll import (
    PayrollRunRead, PayrollRunUpdate, PayslipList, RunNoteCreate, RunStatusUpdate,
    RunSummaryResponse,
)
from payrun.infra.db.uow import UnitOfWork
from payrun.services.payroll_service import PayrollService

router = APIRouter(prefix="/payroll-runs", tags=["payroll-runs"])


@router.get("/{run_id}", response_model=PayrollRunRead)
def get_payroll_run(run_id: int, uow: UnitOfWork = Depends(get_uow)) -> PayrollRunRead:
    return PayrollService(uow).get_run(run_id)


@router.patch("/{run_id}", response_model=PayrollRunRead)
def update_payroll_run(
    run_id: int, payload: PayrollRunUpdate, uow: UnitOfWork = Depends(get_uow),
) -> PayrollRunRead:
    return PayrollService(uow).update_run(run_id, payload)


@router.delete("/{run_id}", status_code=204)
def delete_payroll_run(run_id: int, uow: UnitOfWork = Depends(get_uow)) -> None:
    PayrollService(uow).delete_run(run_id)


@router.post("/{run_id}/status", response_model=PayrollRunRead)
def update_payroll_run_status(
    run_id: int, payload: RunStatusUpdate, uow: UnitOfWork = Depends(get_uow),
) -> PayrollRunRead:
    return PayrollService(uow).update_status(run_id, payload.status)


@router.get("/{run_id}/payslips", response_model=PayslipList)
def list_run_payslips(run_id: int, uow: UnitOfWork = Depends(get_uow)) -> PayslipList:
    return PayrollService(uow).list_payslips(run_id)


@router.get("/{run_id}/summary", response_model=RunSummaryResponse)
def get_run_summary(run_id: int, uow: UnitOfWork = Depends(get_uow)) -> RunSummaryResponse:
    return PayrollService(uow).get_summary(run_id)


@router.post("/{run_id}/notes", response_model=PayrollRunRead, status_code=201)
def add_run_note(
    run_id: int, payload: RunNoteCreate, uow: UnitOfWork = Depends(get_uow),
) -> PayrollRunRead:
    return PayrollService(uow).add_note(run_id, payload)
