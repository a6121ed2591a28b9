from app.core.models.academic_year import AcademicYear
from app.core.models.admitted_student import AdmittedStudent
from app.core.models.ambassador import Ambassador
from app.core.models.audit_log import AuditLog
from app.core.models.benefit_slab import BenefitSlab
from app.core.models.campus_fee import CampusFee
from app.core.models.notification import Notification
from app.core.models.referral_lead import ReferralLead
from app.core.models.settlement import Settlement

__all__ = [
    "AcademicYear",
    "AdmittedStudent",
    "Ambassador",
    "AuditLog",
    "BenefitSlab",
    "CampusFee",
    "Notification",
    "ReferralLead",
    "Settlement",
]
