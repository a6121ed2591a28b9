"""Settlements router: pending balance, settlement rows, finance stats."""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import get_current_user
from app.auth.rbac import Capability, require_capability
from app.auth.schemas import CurrentUser
from app.core.enums import SettlementStatus
from app.core.exceptions import ServiceError
from app.db.session import get_db

from .schemas import FinanceStatsResponse, PendingSettlementResponse, SettlementCreate, SettlementResponse
from . import service

router = APIRouter(prefix="/api/v1/settlements", tags=["settlements"])


@router.get(
    "",
    response_model=List[SettlementResponse],
    dependencies=[Depends(require_capability(Capability.VIEW_LEDGER))],
)
async def list_settlements(
    status_filter: Optional[SettlementStatus] = Query(None, alias="status"),
    ambassador_id: Optional[UUID] = Query(None),
    db: AsyncSession = Depends(get_db),
) -> List[SettlementResponse]:
    return await service.list_settlements(db, status_filter=status_filter, ambassador_id=ambassador_id)


@router.get(
    "/stats",
    response_model=FinanceStatsResponse,
    dependencies=[Depends(require_capability(Capability.VIEW_LEDGER))],
)
async def get_finance_stats(db: AsyncSession = Depends(get_db)) -> FinanceStatsResponse:
    return await service.get_finance_stats(db)


@router.get(
    "/pending/{ambassador_id}",
    response_model=PendingSettlementResponse,
    dependencies=[Depends(require_capability(Capability.VIEW_LEDGER))],
)
async def get_pending_settlement(
    ambassador_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> PendingSettlementResponse:
    try:
        return await service.calculate_pending_settlement(db, ambassador_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post(
    "",
    response_model=SettlementResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_capability(Capability.CREATE_SETTLEMENT))],
)
async def create_settlement(
    payload: SettlementCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> SettlementResponse:
    try:
        return await service.create_settlement(
            db, current_user, payload.ambassador_id, amount=payload.amount, remarks=payload.remarks
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get(
    "/{settlement_id}",
    response_model=SettlementResponse,
    dependencies=[Depends(require_capability(Capability.VIEW_LEDGER))],
)
async def get_settlement(
    settlement_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> SettlementResponse:
    try:
        return await service.get_settlement(db, settlement_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.delete(
    "/{settlement_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_capability(Capability.DELETE_SETTLEMENT))],
)
async def delete_settlement(
    settlement_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> None:
    try:
        await service.delete_settlement(db, current_user, settlement_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
