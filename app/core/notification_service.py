"""In-app notifications. Caller must commit."""

from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.models import Notification


async def notify(
    db: AsyncSession,
    user_id: UUID,
    title: str,
    message: str,
    type: str,
    link: Optional[str] = None,
) -> None:
    db.add(
        Notification(
            user_id=user_id,
            title=title,
            message=message,
            type=type,
            link=link,
        )
    )
