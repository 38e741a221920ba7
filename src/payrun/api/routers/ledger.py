"""Cost-ledger endpoints."""
from fastapi import APIRouter, Depends
from payrun.api.deps import get_uow
from payrun.api.schemas.ledger import CostLedgerEntryList
from payrun.infra.db.uow import UnitOfWork
from payrun.services.ledger_service import LedgerService

router = APIRouter(prefix="/organizations/{organization_id}", tags=["ledger"])


@router.get("/cost-ledger", response_model=CostLedgerEntryList)
def list_cost_ledger(
    organization_id: int,
    limit: int = 100,
    offset: int = 0,
    uow: UnitOfWork = Depends(get_uow),
) -> CostLedgerEntryList:
    return LedgerService(uow).list_entries(organization_id, limit=limit, offset=offset)
