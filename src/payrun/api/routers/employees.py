"""Employee-scoped payroll endpoints."""
from datetime import date
from fastapi import APIRouter, Depends
from payrun.api.deps import get_uow
from payrun.api.schemas.leave import LeaveEntitlementResponse
from payrun.api.schemas.payroll import PayrollPreviewRequest, PayslipList
from payrun.calc.types import PayComputationResult
from payrun.infra.db.uow import UnitOfWork
from payrun.services.leave_service import LeaveService
from payrun.services.payroll_service import PayrollService

router = APIRouter(prefix="/employees/{employee_id}", tags=["employees"])


@router.get("/payslips", response_model=PayslipList)
def list_employee_payslips(
    employee_id: int,
    limit: int = 100,
    offset: int = 0,
    uow: UnitOfWork = Depends(get_uow),
) -> PayslipList:
    return PayrollService(uow).list_employee_payslips(employee_id, limit=limit, offset=offset)


@router.post("/payroll-preview", response_model=PayComputationResult)
def preview_payroll(
    employee_id: int, payload: PayrollPreviewRequest, uow: UnitOfWork = Depends(get_uow),
) -> PayComputationResult:
    return PayrollService(uow).preview(employee_id, payload)


@router.get("/leave-entitlement", response_model=LeaveEntitlementResponse)
def get_leave_entitlement(
    employee_id: int,
    reference_date: date | None = None,
    uow: UnitOfWork = Depends(get_uow),
) -> LeaveEntitlementResponse:
    return LeaveService(uow).get_entitlement(employee_id, reference_date)
