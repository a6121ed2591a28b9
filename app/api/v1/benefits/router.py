"""Benefits router: ambassador benefit summary and benefit slab administration."""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import get_current_user
from app.auth.rbac import Capability, require_capability
from app.auth.schemas import CurrentUser
from app.core.exceptions import ServiceError
from app.db.session import get_db

from .schemas import BenefitSlabCreate, BenefitSlabResponse, BenefitSlabUpdate, BenefitSummaryResponse
from . import service

router = APIRouter(prefix="/api/v1/benefits", tags=["benefits"])


@router.get(
    "/ambassador/{ambassador_id}",
    response_model=BenefitSummaryResponse,
    dependencies=[Depends(require_capability(Capability.VIEW_BENEFITS))],
)
async def get_benefit_summary(
    ambassador_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> BenefitSummaryResponse:
    try:
        return await service.get_benefit_summary(db, ambassador_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


# --- Benefit slabs ---
@router.get(
    "/slabs",
    response_model=List[BenefitSlabResponse],
    dependencies=[Depends(require_capability(Capability.VIEW_BENEFITS))],
)
async def list_benefit_slabs(db: AsyncSession = Depends(get_db)) -> List[BenefitSlabResponse]:
    return await service.list_benefit_slabs(db)


@router.post(
    "/slabs",
    response_model=BenefitSlabResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_capability(Capability.MANAGE_BENEFIT_SLABS))],
)
async def add_benefit_slab(
    payload: BenefitSlabCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> BenefitSlabResponse:
    try:
        return await service.add_benefit_slab(db, current_user, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.patch(
    "/slabs/{slab_id}",
    response_model=BenefitSlabResponse,
    dependencies=[Depends(require_capability(Capability.MANAGE_BENEFIT_SLABS))],
)
async def update_benefit_slab(
    slab_id: UUID,
    payload: BenefitSlabUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> BenefitSlabResponse:
    try:
        return await service.update_benefit_slab(db, current_user, slab_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.delete(
    "/slabs/{slab_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_capability(Capability.MANAGE_BENEFIT_SLABS))],
)
async def delete_benefit_slab(
    slab_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> None:
    try:
        await service.delete_benefit_slab(db, current_user, slab_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
