"""
Capability sets per back-office role.

Roles are resolved into StaffRole once, when the token is decoded; services and
routes check capabilities, never role strings.
"""

from enum import Enum
from typing import Dict, FrozenSet, Optional

from fastapi import Depends, HTTPException, status

from app.auth.dependencies import get_current_user
from app.auth.schemas import CurrentUser
from app.core.enums import StaffRole
from app.core.exceptions import AuthorizationError


class Capability(str, Enum):
    VIEW_LEDGER = "ledger:view"
    CREATE_SETTLEMENT = "settlements:create"
    DELETE_SETTLEMENT = "settlements:delete"
    PROCESS_PAYOUT = "payouts:process"
    MANAGE_BENEFIT_SLABS = "benefit_slabs:manage"
    CONFIRM_REFERRAL = "referrals:confirm"
    VIEW_BENEFITS = "benefits:view"


ROLE_CAPABILITIES: Dict[StaffRole, FrozenSet[Capability]] = {
    StaffRole.SUPER_ADMIN: frozenset(Capability),
    StaffRole.FINANCE_ADMIN: frozenset(
        {
            Capability.VIEW_LEDGER,
            Capability.CREATE_SETTLEMENT,
            Capability.DELETE_SETTLEMENT,
            Capability.PROCESS_PAYOUT,
            Capability.VIEW_BENEFITS,
        }
    ),
    StaffRole.CAMPUS_HEAD: frozenset(
        {Capability.VIEW_LEDGER, Capability.CONFIRM_REFERRAL, Capability.VIEW_BENEFITS}
    ),
    StaffRole.CAMPUS_ADMIN: frozenset({Capability.CONFIRM_REFERRAL, Capability.VIEW_BENEFITS}),
    StaffRole.AMBASSADOR: frozenset(),
}


def has_capability(role: Optional[StaffRole], capability: Capability) -> bool:
    if role is None:
        return False
    return capability in ROLE_CAPABILITIES.get(role, frozenset())


def ensure_capability(actor: Optional[CurrentUser], capability: Capability) -> None:
    """Raise AuthorizationError unless the actor's role grants the capability. Call before any write."""
    if actor is None or not has_capability(actor.role, capability):
        raise AuthorizationError()


def require_capability(capability: Capability):
    """
    Dependency factory to enforce a capability at the route boundary.

    Example:
        Depends(require_capability(Capability.PROCESS_PAYOUT))
    """

    async def _checker(current_user: CurrentUser = Depends(get_current_user)) -> None:
        if not has_capability(current_user.role, capability):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )

    return _checker
