"""
Payout processor: moves a Pending settlement to Processed exactly once.

The transition is a single conditional UPDATE guarded on status = 'Pending'; of any number
of concurrent callers on one settlement, only the one whose UPDATE matches a row wins.
Audit and notification run after the commit and are best-effort.
"""

from datetime import datetime
from typing import List, Optional, Sequence
from uuid import UUID

import structlog
from fastapi import status
from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.settlements.schemas import SettlementResponse
from app.auth.rbac import Capability, ensure_capability
from app.auth.schemas import CurrentUser
from app.core.audit_service import log_action
from app.core.enums import PayoutOutcome, SettlementStatus
from app.core.exceptions import InvalidStateTransitionError, NotFoundError, ServiceError, StorageError
from app.core.models import Ambassador, Settlement
from app.core.notification_service import notify

from .schemas import BulkPayoutItem, BulkPayoutItemResult, BulkPayoutResponse, PayoutResponse

logger = structlog.get_logger()

DEFAULT_PAYOUT_REMARKS = "Processed via Admin Portal"


async def _load_settlement(db: AsyncSession, settlement_id: UUID) -> Optional[Settlement]:
    result = await db.execute(
        select(Settlement)
        .where(Settlement.id == settlement_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def _record_audit(db: AsyncSession, actor: CurrentUser, settlement: Settlement, ambassador_name: str) -> None:
    try:
        await log_action(
            db, "UPDATE", "finance",
            f"Processed payout of ₹{settlement.amount} for {ambassador_name}",
            str(settlement.id),
            {"bank_reference": settlement.bank_reference},
            performed_by=actor.id,
            performed_by_role=actor.role.value,
        )
        await db.commit()
    except Exception:
        await db.rollback()
        logger.exception("payout_audit_failed", settlement_id=str(settlement.id))


async def _send_notification(db: AsyncSession, settlement: Settlement) -> None:
    try:
        await notify(
            db,
            settlement.ambassador_id,
            "Payment Processed",
            f"Your payout of ₹{settlement.amount:,} has been processed. Transaction Ref: {settlement.bank_reference}",
            "payment",
            link="/finance",
        )
        await db.commit()
    except Exception:
        await db.rollback()
        logger.exception("payout_notification_failed", settlement_id=str(settlement.id))


async def _transition_to_processed(
    db: AsyncSession,
    actor: CurrentUser,
    settlement_id: UUID,
    transaction_reference: str,
    remarks: Optional[str],
) -> Settlement:
    reference = (transaction_reference or "").strip()
    if not reference:
        raise ServiceError("Transaction reference is required", status.HTTP_400_BAD_REQUEST)

    try:
        result = await db.execute(
            update(Settlement)
            .where(
                Settlement.id == settlement_id,
                Settlement.status == SettlementStatus.PENDING.value,
            )
            .values(
                status=SettlementStatus.PROCESSED.value,
                bank_reference=reference,
                remarks=remarks or DEFAULT_PAYOUT_REMARKS,
                processed_by=actor.id,
                payout_date=datetime.utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            await db.rollback()
            if await _load_settlement(db, settlement_id) is None:
                raise NotFoundError("Settlement not found")
            raise InvalidStateTransitionError("Settlement already processed")
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error("payout_storage_failed", settlement_id=str(settlement_id), error=str(exc))
        raise StorageError() from exc

    settlement = await _load_settlement(db, settlement_id)
    if settlement is None:
        # Removed between the commit and the reload
        raise NotFoundError("Settlement not found")
    logger.info(
        "payout_processed",
        settlement_id=str(settlement_id),
        amount=str(settlement.amount),
        bank_reference=reference,
        processed_by=str(actor.id),
    )
    return settlement


async def process_payout(
    db: AsyncSession,
    actor: CurrentUser,
    settlement_id: UUID,
    transaction_reference: str,
    remarks: Optional[str] = None,
) -> PayoutResponse:
    """
    Mark a settlement Processed with its bank reference.

    Raises NotFoundError for unknown ids and InvalidStateTransitionError when the settlement
    was already processed; in both cases nothing is written and no side effect fires.
    """
    ensure_capability(actor, Capability.PROCESS_PAYOUT)
    settlement = await _transition_to_processed(db, actor, settlement_id, transaction_reference, remarks)

    ambassador = await db.get(Ambassador, settlement.ambassador_id)
    await _record_audit(db, actor, settlement, ambassador.full_name if ambassador else str(settlement.ambassador_id))
    await _send_notification(db, settlement)

    return PayoutResponse(ok=True, settlement=SettlementResponse.model_validate(settlement))


async def process_bulk_payouts(
    db: AsyncSession,
    actor: CurrentUser,
    items: Sequence[BulkPayoutItem],
) -> BulkPayoutResponse:
    """
    Process payouts item by item. A bad item is recorded and skipped; it never undoes the
    items before it or stops the items after it.
    """
    ensure_capability(actor, Capability.PROCESS_PAYOUT)

    results: List[BulkPayoutItemResult] = []
    for item in items:
        try:
            await process_payout(db, actor, item.settlement_id, item.transaction_reference, item.remarks)
        except NotFoundError as e:
            outcome, reason = PayoutOutcome.NOT_FOUND, e.message
        except InvalidStateTransitionError as e:
            outcome, reason = PayoutOutcome.ALREADY_PROCESSED, e.message
        except ServiceError as e:
            outcome, reason = PayoutOutcome.FAILED, e.message
        except Exception:
            await db.rollback()
            logger.exception("bulk_payout_item_failed", settlement_id=str(item.settlement_id))
            outcome, reason = PayoutOutcome.FAILED, "Unexpected error while processing payout"
        else:
            outcome, reason = PayoutOutcome.PROCESSED, None

        if outcome != PayoutOutcome.PROCESSED:
            logger.info("bulk_payout_item_skipped", settlement_id=str(item.settlement_id), outcome=outcome.value, reason=reason)
        results.append(BulkPayoutItemResult(settlement_id=item.settlement_id, outcome=outcome, reason=reason))

    success_count = sum(1 for r in results if r.outcome == PayoutOutcome.PROCESSED)
    return BulkPayoutResponse(
        success_count=success_count,
        failure_count=len(results) - success_count,
        results=results,
    )
