"""Payouts router: single and bulk settlement payouts."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import get_current_user
from app.auth.rbac import Capability, require_capability
from app.auth.schemas import CurrentUser
from app.core.exceptions import ServiceError
from app.db.session import get_db

from .schemas import BulkPayoutRequest, BulkPayoutResponse, PayoutRequest, PayoutResponse
from . import service

router = APIRouter(prefix="/api/v1/payouts", tags=["payouts"])


@router.post(
    "/bulk",
    response_model=BulkPayoutResponse,
    dependencies=[Depends(require_capability(Capability.PROCESS_PAYOUT))],
)
async def process_bulk_payouts(
    payload: BulkPayoutRequest,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> BulkPayoutResponse:
    try:
        return await service.process_bulk_payouts(db, current_user, payload.items)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post(
    "/{settlement_id}",
    response_model=PayoutResponse,
    dependencies=[Depends(require_capability(Capability.PROCESS_PAYOUT))],
)
async def process_payout(
    settlement_id: UUID,
    payload: PayoutRequest,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> PayoutResponse:
    try:
        return await service.process_payout(
            db, current_user, settlement_id, payload.transaction_reference, payload.remarks
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
