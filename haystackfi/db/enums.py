"""
Marketplace enumerations shared by ORM models and API schemas.
"""

from enum import Enum


class UserRole(str, Enum):
    ADMIN = "admin"
    VENDOR = "vendor"
    BANK = "bank"
    CREDIT_UNION = "credit-union"


INSTITUTION_ROLES = (UserRole.BANK.value, UserRole.CREDIT_UNION.value)


class VendorSize(str, Enum):
    STARTUP = "startup"
    SMALL_BUSINESS = "small-business"
    MID_MARKET = "mid-market"
    ENTERPRISE = "enterprise"


class VendorStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    SUSPENDED = "suspended"
    REJECTED = "rejected"


class PricingModel(str, Enum):
    SUBSCRIPTION = "subscription"
    ONE_TIME = "one-time"
    USAGE_BASED = "usage-based"
    CUSTOM = "custom"


class VerificationStatus(str, Enum):
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"


class VendorCategory(str, Enum):
    CORE_LENDING_DIGITAL_BANKING = "Core, Lending & Digital Banking"
    CORE_DIGITAL_BANKING = "Core & Digital Banking"
    CORE_PAYMENTS_RISK = "Core, Payments & Risk"
    CORE_BANKING = "Core Banking"
    CORE_PAYMENTS_DIGITAL = "Core, Payments & Digital"
    DIGITAL_BANKING_PLATFORM = "Digital Banking Platform"
    PAYMENTS = "Payments"
    LENDING = "Lending"
    RISK_COMPLIANCE = "Risk & Compliance"
    ANALYTICS = "Analytics"
    FINTECH = "Fintech"
    OTHER = "Other"


class ResearchStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


class DemoStatus(str, Enum):
    PENDING = "pending"
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Allowed demo request status changes
DEMO_TRANSITIONS = {
    DemoStatus.PENDING.value: {DemoStatus.SCHEDULED.value, DemoStatus.CANCELLED.value},
    DemoStatus.SCHEDULED.value: {DemoStatus.COMPLETED.value, DemoStatus.CANCELLED.value},
    DemoStatus.COMPLETED.value: set(),
    DemoStatus.CANCELLED.value: set(),
}


class ClaimStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class VerificationMethod(str, Enum):
    EMAIL = "email"
    PHONE = "phone"
    WEBSITE = "website"
    LINKEDIN = "linkedin"


class DocumentType(str, Enum):
    SECURITY_AUDIT = "security-audit"
    SECURITY_CERTIFICATION = "security-certification"
    REGULATORY_ASSESSMENT = "regulatory-assessment"
    OPERATIONAL_DOCUMENTATION = "operational-documentation"
    LEGAL_DOCUMENTATION = "legal-documentation"


class Confidentiality(str, Enum):
    PUBLIC = "public"
    RESTRICTED = "restricted"
    CONFIDENTIAL = "confidential"


class DocumentStatus(str, Enum):
    CURRENT = "current"
    EXPIRING = "expiring"
    EXPIRED = "expired"


class AccessRequestStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class NotificationType(str, Enum):
    DEMO_REQUEST = "demo_request"
    CLAIM_APPROVED = "claim_approved"
    CLAIM_REJECTED = "claim_rejected"
    DOCUMENT_REQUEST = "document_request"
    REVIEW_SUBMITTED = "review_submitted"


class ProductStatus(str, Enum):
    ACTIVE = "active"
    DEPRECATED = "deprecated"
    BETA = "beta"
    COMING_SOON = "coming-soon"
