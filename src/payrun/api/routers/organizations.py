"""Organization-scoped payroll run endpoints."""
from fastapi import APIRouter, Depends
from payrun.api.deps import get_uow
from payrun.api.schemas.payroll import PayrollRunCreate, PayrollRunList, PayrollRunRead
from payrun.infra.db.uow import UnitOfWork
from payrun.services.payroll_service import PayrollService

router = APIRouter(prefix="/organizations/{organization_id}/payroll-runs", tags=["payroll-runs"])


@router.post("", response_model=PayrollRunRead, status_code=201)
def create_payroll_run(
    organization_id: int, payload: PayrollRunCreate, uow: UnitOfWork = Depends(get_uow),
) -> PayrollRunRead:
    return PayrollService(uow).create_run(organization_id, payload)


@router.get("", response_model=PayrollRunList)
def list_payroll_runs(
    organization_id: int,
    limit: int = 100,
    offset: int = 0,
    uow: UnitOfWork = Depends(get_uow),
) -> PayrollRunList:
    return PayrollService(uow).list_runs(organization_id, limit=limit, offset=offset)
