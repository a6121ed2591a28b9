"""
Settlement ledger: pending balance per ambassador and the settlement rows that draw it down.

pending = max(0, earned - settled) over the ambassador's whole history: earned is recomputed
from confirmed referral rows, one calculator run per academic year, and settled counts
Processed settlements only. Pending settlements are reservations.
"""

from decimal import Decimal
from typing import List, Optional
from uuid import UUID

import structlog
from fastapi import status
from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.benefits.service import evaluate_ambassador_all_years, get_ambassador
from app.auth.rbac import Capability, ensure_capability
from app.auth.schemas import CurrentUser
from app.core.audit_service import log_action
from app.core.enums import SettlementStatus
from app.core.exceptions import InvalidStateTransitionError, NotFoundError, ServiceError, StorageError
from app.core.models import Settlement

from .schemas import FinanceStatsResponse, PendingSettlementResponse, SettlementResponse

logger = structlog.get_logger()


def _to_decimal(val) -> Decimal:
    if val is None:
        return Decimal("0")
    return val if isinstance(val, Decimal) else Decimal(str(val))


async def _sum_settlements(db: AsyncSession, ambassador_id: UUID, settlement_status: SettlementStatus) -> Decimal:
    total = (
        await db.execute(
            select(func.coalesce(func.sum(Settlement.amount), 0)).where(
                Settlement.ambassador_id == ambassador_id,
                Settlement.status == settlement_status.value,
            )
        )
    ).scalar_one()
    return _to_decimal(total)


async def calculate_pending_settlement(db: AsyncSession, ambassador_id: UUID) -> PendingSettlementResponse:
    """Amount still owed to the ambassador. Never negative; over-settlement floors at zero."""
    ambassador = await get_ambassador(db, ambassador_id)
    earned = await evaluate_ambassador_all_years(db, ambassador)
    total_earned = _to_decimal(earned.total_amount)
    total_settled = await _sum_settlements(db, ambassador_id, SettlementStatus.PROCESSED)
    pending = max(Decimal("0"), total_earned - total_settled)
    if total_settled > total_earned:
        logger.warning(
            "settled_exceeds_earned",
            ambassador_id=str(ambassador_id),
            total_earned=str(total_earned),
            total_settled=str(total_settled),
        )
    return PendingSettlementResponse(
        ambassador_id=ambassador_id,
        pending=pending,
        total_earned=total_earned,
        total_settled=total_settled,
        benefit_percent=earned.current.percent,
        earned_by_year={y.academic_year: y.result.total_amount for y in earned.years},
    )


async def create_settlement(
    db: AsyncSession,
    actor: CurrentUser,
    ambassador_id: UUID,
    amount: Optional[Decimal] = None,
    remarks: Optional[str] = None,
) -> SettlementResponse:
    """
    Open a Pending settlement. Without an explicit amount, snapshots the pending balance
    minus whatever is already reserved by other Pending settlements.
    """
    ensure_capability(actor, Capability.CREATE_SETTLEMENT)
    ledger = await calculate_pending_settlement(db, ambassador_id)
    reserved = await _sum_settlements(db, ambassador_id, SettlementStatus.PENDING)
    available = max(Decimal("0"), ledger.pending - reserved)
    if amount is None:
        amount = available
    if amount <= 0:
        raise ServiceError("Nothing pending to settle for this ambassador", status.HTTP_400_BAD_REQUEST)

    settlement = Settlement(
        ambassador_id=ambassador_id,
        amount=amount,
        status=SettlementStatus.PENDING.value,
        remarks=remarks,
        created_by=actor.id,
    )
    db.add(settlement)
    try:
        await db.flush()
        await log_action(
            db, "CREATE", "settlement",
            f"Created pending settlement for ambassador {ambassador_id}: ₹{amount}",
            str(settlement.id),
            {"pending": str(ledger.pending), "reserved": str(reserved)},
            performed_by=actor.id,
            performed_by_role=actor.role.value,
        )
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        raise StorageError() from exc
    await db.refresh(settlement)
    logger.info("settlement_created", settlement_id=str(settlement.id), amount=str(amount))
    return SettlementResponse.model_validate(settlement)


async def delete_settlement(db: AsyncSession, actor: CurrentUser, settlement_id: UUID) -> None:
    """Remove a Pending settlement. Processed rows are part of the permanent ledger."""
    ensure_capability(actor, Capability.DELETE_SETTLEMENT)
    try:
        result = await db.execute(
            delete(Settlement).where(
                Settlement.id == settlement_id,
                Settlement.status == SettlementStatus.PENDING.value,
            )
        )
        if result.rowcount != 1:
            await db.rollback()
            if await db.get(Settlement, settlement_id) is None:
                raise NotFoundError("Settlement not found")
            raise InvalidStateTransitionError("Processed settlement cannot be deleted")
        await log_action(
            db, "DELETE", "settlement",
            f"Deleted settlement entry {settlement_id}",
            str(settlement_id),
            performed_by=actor.id,
            performed_by_role=actor.role.value,
        )
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        raise StorageError() from exc


async def get_settlement(db: AsyncSession, settlement_id: UUID) -> SettlementResponse:
    settlement = await db.get(Settlement, settlement_id)
    if settlement is None:
        raise NotFoundError("Settlement not found")
    return SettlementResponse.model_validate(settlement)


async def list_settlements(
    db: AsyncSession,
    status_filter: Optional[SettlementStatus] = None,
    ambassador_id: Optional[UUID] = None,
) -> List[SettlementResponse]:
    stmt = select(Settlement)
    if status_filter is not None:
        stmt = stmt.where(Settlement.status == status_filter.value)
    if ambassador_id is not None:
        stmt = stmt.where(Settlement.ambassador_id == ambassador_id)
    stmt = stmt.order_by(Settlement.created_at.desc())
    result = await db.execute(stmt)
    return [SettlementResponse.model_validate(s) for s in result.scalars().all()]


async def get_finance_stats(db: AsyncSession) -> FinanceStatsResponse:
    rows = (
        await db.execute(
            select(Settlement.status, func.coalesce(func.sum(Settlement.amount), 0), func.count(Settlement.id))
            .group_by(Settlement.status)
        )
    ).all()
    totals = {row[0]: (_to_decimal(row[1]), row[2]) for row in rows}
    return FinanceStatsResponse(
        pending=totals.get(SettlementStatus.PENDING.value, (Decimal("0"), 0))[0],
        processed=totals.get(SettlementStatus.PROCESSED.value, (Decimal("0"), 0))[0],
        total_count=sum(count for _, count in totals.values()),
    )
