"""
Audit logging for ledger and referral state changes. Call on every state change.
"""

from datetime import datetime
from typing import Any, Dict, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.models import AuditLog


async def log_action(
    db: AsyncSession,
    kind: str,
    subject: str,
    description: str,
    ref_id: Optional[str],
    metadata: Optional[Dict[str, Any]] = None,
    *,
    performed_by: Optional[UUID] = None,
    performed_by_role: Optional[str] = None,
) -> None:
    """Append one audit log entry. Caller must commit."""
    entry = AuditLog(
        kind=kind,
        subject=subject,
        description=description,
        ref_id=ref_id,
        performed_by=performed_by,
        performed_by_role=performed_by_role,
        extra=metadata,
        timestamp=datetime.utcnow(),
    )
    db.add(entry)
