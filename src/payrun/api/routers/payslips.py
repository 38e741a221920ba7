"""Payslip endpoints."""
from fastapi import APIRouter, Depends
from payrun.api.deps import get_uow
from payrun.api.schemas.payroll import PayslipRead, PayslipUpdate
from payrun.infra.db.uow import UnitOfWork
from payrun.services.payroll_service import PayrollService

router = APIRouter(prefix="/payslips", tags=["payslips"])


@router.get("/{payslip_id}", response_model=PayslipRead)
def get_payslip(payslip_id: int, uow: UnitOfWork = Depends(get_uow)) -> PayslipRead:
    return PayrollService(uow).get_payslip(payslip_id)


@router.patch("/{payslip_id}", response_model=PayslipRead)
def update_payslip(
    payslip_id: int, payload: PayslipUpdate, uow: UnitOfWork = Depends(get_uow),
) -> PayslipRead:
    return PayrollService(uow).update_payslip(payslip_id, payload)
