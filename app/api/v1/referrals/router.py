"""Referrals router: ambassador referral list and the confirmation transition."""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import get_current_user
from app.auth.rbac import Capability, require_capability
from app.auth.schemas import CurrentUser
from app.core.exceptions import ServiceError
from app.db.session import get_db

from .schemas import ConfirmReferralRequest, ConfirmReferralResponse, ReferralLeadResponse
from . import service

router = APIRouter(prefix="/api/v1/referrals", tags=["referrals"])


@router.get(
    "/ambassador/{ambassador_id}",
    response_model=List[ReferralLeadResponse],
    dependencies=[Depends(require_capability(Capability.VIEW_BENEFITS))],
)
async def list_referrals(
    ambassador_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> List[ReferralLeadResponse]:
    leads = await service.list_referrals(db, ambassador_id)
    return [ReferralLeadResponse.model_validate(lead) for lead in leads]


@router.post(
    "/{lead_id}/confirm",
    response_model=ConfirmReferralResponse,
    dependencies=[Depends(require_capability(Capability.CONFIRM_REFERRAL))],
)
async def confirm_referral(
    lead_id: UUID,
    payload: ConfirmReferralRequest,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> ConfirmReferralResponse:
    try:
        return await service.confirm_referral(
            db,
            current_user,
            lead_id,
            admitted_academic_year=payload.admitted_academic_year,
            student_id=payload.student_id,
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
