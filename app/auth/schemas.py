from typing import Optional
from uuid import UUID

from pydantic import BaseModel

from app.core.enums import StaffRole


class CurrentUser(BaseModel):
    """Authenticated actor resolved from the bearer token."""

    id: UUID
    role: StaffRole
    full_name: Optional[str] = None
