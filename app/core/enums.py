from enum import Enum
from typing import Optional


class AmbassadorRole(str, Enum):
    PARENT = "Parent"
    STAFF = "Staff"
    ALUMNI = "Alumni"
    OTHER = "Other"


class BenefitStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"


class LeadStatus(str, Enum):
    NEW = "New"
    FOLLOW_UP = "Follow-up"
    CONFIRMED = "Confirmed"
    REJECTED = "Rejected"


class FeeType(str, Enum):
    OTP = "OTP"
    WOTP = "WOTP"


class SettlementStatus(str, Enum):
    PENDING = "Pending"
    PROCESSED = "Processed"


class PayoutOutcome(str, Enum):
    PROCESSED = "processed"
    ALREADY_PROCESSED = "already_processed"
    NOT_FOUND = "not_found"
    FAILED = "failed"


class StaffRole(str, Enum):
    """Closed set of back-office roles. Raw identity-provider labels are normalised via parse()."""

    SUPER_ADMIN = "SUPER_ADMIN"
    FINANCE_ADMIN = "FINANCE_ADMIN"
    CAMPUS_HEAD = "CAMPUS_HEAD"
    CAMPUS_ADMIN = "CAMPUS_ADMIN"
    AMBASSADOR = "AMBASSADOR"

    @classmethod
    def parse(cls, raw: Optional[str]) -> Optional["StaffRole"]:
        """Map "Campus Admin", "CampusHead", "super_admin" and friends to a member; None when unknown."""
        if not raw:
            return None
        key = "".join(ch for ch in str(raw).upper() if ch.isalnum())
        return _STAFF_ROLE_ALIASES.get(key)


_STAFF_ROLE_ALIASES = {
    "SUPERADMIN": StaffRole.SUPER_ADMIN,
    "FINANCEADMIN": StaffRole.FINANCE_ADMIN,
    "FINANCE": StaffRole.FINANCE_ADMIN,
    "CAMPUSHEAD": StaffRole.CAMPUS_HEAD,
    "CAMPUSADMIN": StaffRole.CAMPUS_ADMIN,
    "AMBASSADOR": StaffRole.AMBASSADOR,
    "PARENT": StaffRole.AMBASSADOR,
    "STAFF": StaffRole.AMBASSADOR,
    "ALUMNI": StaffRole.AMBASSADOR,
    "OTHER": StaffRole.AMBASSADOR,
}
