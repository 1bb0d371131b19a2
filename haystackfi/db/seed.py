"""
Mock marketplace dataset.

Seeds users, vendors, products, reviews, compliance documents, demo requests
and profile views into an empty database. Timestamps are relative to the
seeding time so dashboard windows have data in them.
"""

import logging
from datetime import datetime, timedelta
from typing import Dict, Optional

from sqlalchemy.orm import Session

from ..api.security import hash_password
from .enums import (
    ClaimStatus,
    Confidentiality,
    DemoStatus,
    DocumentType,
    PricingModel,
    ProductStatus,
    UserRole,
    VendorCategory,
    VendorSize,
    VendorStatus,
    VerificationMethod,
    VerificationStatus,
)
from .models import (
    ComplianceDocument,
    DemoRequest,
    Product,
    Review,
    User,
    Vendor,
    VendorClaim,
    VendorProfile,
    VendorView,
)

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "Haystack2024"

USERS = [
    {
        "key": "admin",
        "email": "admin@haystackfi.com",
        "role": UserRole.ADMIN,
        "first_name": "Avery",
        "last_name": "Admin",
        "title": "Marketplace Operations",
        "state": "TX",
    },
    {
        "key": "coretech_owner",
        "email": "jordan.lee@coretech-solutions.com",
        "role": UserRole.VENDOR,
        "first_name": "Jordan",
        "last_name": "Lee",
        "title": "VP Partnerships",
        "state": "TX",
    },
    {
        "key": "securebank_owner",
        "email": "priya.patel@securebank-digital.com",
        "role": UserRole.VENDOR,
        "first_name": "Priya",
        "last_name": "Patel",
        "title": "Head of Sales",
        "state": "CA",
    },
    {
        "key": "payflow_rep",
        "email": "sam.ortiz@payflow-systems.com",
        "role": UserRole.VENDOR,
        "first_name": "Sam",
        "last_name": "Ortiz",
        "title": "Director of Business Development",
        "state": "GA",
    },
    {
        "key": "sarah",
        "email": "sarah.johnson@firstnational.com",
        "role": UserRole.BANK,
        "first_name": "Sarah",
        "last_name": "Johnson",
        "title": "CTO",
        "institution_name": "First National Bank",
        "city": "Austin",
        "state": "TX",
    },
    {
        "key": "michael",
        "email": "michael.chen@communitycu.org",
        "role": UserRole.CREDIT_UNION,
        "first_name": "Michael",
        "last_name": "Chen",
        "title": "VP Technology",
        "institution_name": "Community Credit Union",
        "city": "Sacramento",
        "state": "CA",
    },
    {
        "key": "lisa",
        "email": "lisa.rodriguez@regionalbank.com",
        "role": UserRole.BANK,
        "first_name": "Lisa",
        "last_name": "Rodriguez",
        "title": "IT Director",
        "institution_name": "Regional Bank",
        "city": "Atlanta",
        "state": "GA",
    },
]

VENDORS = [
    {
        "key": "coretech",
        "company_name": "CoreTech Solutions",
        "website": "https://coretech-solutions.com",
        "owner": "coretech_owner",
        "created_days_ago": 200,
        "profile": {
            "summary": "Modern core banking platform for community banks",
            "detailed_description": (
                "CoreTech Solutions builds cloud-native core banking for community banks "
                "and credit unions.\n\nReal-time processing, 200+ APIs and a microservices "
                "architecture let institutions launch products faster."
            ),
            "category": VendorCategory.CORE_BANKING.value,
            "subcategories": ["Real-time Processing", "Cloud Banking", "API Banking"],
            "location": "Austin, TX",
            "size": VendorSize.MID_MARKET.value,
            "founded": "2012",
            "employees": "250-500",
            "compatibility": 92.0,
            "phone": "(512) 555-0142",
            "email": "sales@coretech-solutions.com",
            "tags": ["core banking", "real-time", "api", "cloud"],
            "features": ["Real-time transaction processing", "Open API suite", "Multi-entity support"],
            "integrations": ["Q2", "Alkami", "Jack Henry"],
            "certifications": ["SOC 2 Type II", "PCI DSS Level 1", "ISO 27001"],
            "client_size": ["community bank", "credit union"],
            "pricing_model": PricingModel.SUBSCRIPTION.value,
            "price_range": "$50k - $250k / year",
            "status": VendorStatus.ACTIVE.value,
            "verification_status": VerificationStatus.VERIFIED.value,
            "target_customers": ["Community banks", "Credit unions"],
            "compliance_certifications": ["SOC 2 Type II", "FFIEC"],
            "notable_customers": ["First National Bank"],
        },
    },
    {
        "key": "securebank",
        "company_name": "SecureBank Digital",
        "website": "https://securebank-digital.com",
        "owner": "securebank_owner",
        "created_days_ago": 120,
        "profile": {
            "summary": "Complete digital banking suite with mobile apps",
            "detailed_description": "Retail and business digital banking with white-label mobile apps.",
            "category": VendorCategory.DIGITAL_BANKING_PLATFORM.value,
            "subcategories": ["Mobile Banking", "Online Banking"],
            "location": "San Jose, CA",
            "size": VendorSize.SMALL_BUSINESS.value,
            "founded": "2016",
            "employees": "50-100",
            "compatibility": 85.0,
            "email": "hello@securebank-digital.com",
            "tags": ["digital banking", "mobile", "api"],
            "features": ["White-label mobile apps", "Business banking portal"],
            "integrations": ["Fiserv", "FIS"],
            "certifications": ["SOC 2 Type II"],
            "client_size": ["community bank"],
            "pricing_model": PricingModel.USAGE_BASED.value,
            "price_range": "$2 per active user / month",
            "status": VendorStatus.ACTIVE.value,
            "verification_status": VerificationStatus.VERIFIED.value,
        },
    },
    {
        "key": "payflow",
        "company_name": "PayFlow Systems",
        "website": "https://payflow-systems.com",
        "owner": None,
        "created_days_ago": 20,
        "profile": {
            "summary": "Next-generation payment processing platform",
            "category": VendorCategory.PAYMENTS.value,
            "subcategories": ["Real-time Payments", "ACH"],
            "location": "Atlanta, GA",
            "size": VendorSize.STARTUP.value,
            "founded": "2020",
            "compatibility": 78.0,
            "tags": ["payments", "fednow", "ach"],
            "pricing_model": PricingModel.USAGE_BASED.value,
            "status": VendorStatus.ACTIVE.value,
            "verification_status": VerificationStatus.PENDING.value,
        },
    },
    {
        "key": "lendwise",
        "company_name": "LendWise Analytics",
        "website": "https://lendwise.io",
        "owner": None,
        "created_days_ago": 10,
        "profile": {
            "summary": "Loan origination and credit decisioning for community lenders",
            "category": VendorCategory.LENDING.value,
            "location": "Denver, CO",
            "size": VendorSize.STARTUP.value,
            "founded": "2021",
            "compatibility": 71.0,
            "tags": ["lending", "credit decisioning", "analytics"],
            "pricing_model": PricingModel.SUBSCRIPTION.value,
            "status": VendorStatus.PENDING.value,
            "verification_status": VerificationStatus.PENDING.value,
        },
    },
    {
        "key": "complyguard",
        "company_name": "ComplyGuard",
        "website": "",
        "owner": None,
        "created_days_ago": 45,
        "profile": {
            "summary": "BSA/AML monitoring and regulatory reporting",
            "category": VendorCategory.RISK_COMPLIANCE.value,
            "location": "Charlotte, NC",
            "size": VendorSize.ENTERPRISE.value,
            "founded": "2008",
            "compatibility": 80.0,
            "tags": ["compliance", "aml", "bsa"],
            "pricing_model": PricingModel.CUSTOM.value,
            "status": VendorStatus.ACTIVE.value,
            "verification_status": VerificationStatus.VERIFIED.value,
        },
    },
]

# (title, description, type, days since update, size, confidentiality, approval)
COMPLIANCE_DOCUMENTS = [
    ("SOC 2 Type II Report", "Security, Availability, and Confidentiality audit report",
     DocumentType.SECURITY_AUDIT, 60, "2.3 MB", Confidentiality.RESTRICTED, True),
    ("PCI DSS Compliance Certificate", "Payment Card Industry Data Security Standard compliance",
     DocumentType.SECURITY_CERTIFICATION, 45, "856 KB", Confidentiality.PUBLIC, False),
    ("FFIEC Cybersecurity Assessment", "Federal Financial Institutions Examination Council assessment",
     DocumentType.REGULATORY_ASSESSMENT, 55, "4.1 MB", Confidentiality.RESTRICTED, True),
    ("ISO 27001 Certification", "Information security management system certification",
     DocumentType.SECURITY_CERTIFICATION, 120, "1.2 MB", Confidentiality.PUBLIC, False),
    ("Third-Party Penetration Test Results", "Annual security penetration testing report",
     DocumentType.SECURITY_AUDIT, 40, "3.7 MB", Confidentiality.CONFIDENTIAL, True),
    ("Business Continuity & Disaster Recovery Plan", "Comprehensive BCP/DR documentation and testing results",
     DocumentType.OPERATIONAL_DOCUMENTATION, 30, "5.2 MB", Confidentiality.RESTRICTED, True),
    ("Data Processing Agreement (DPA)", "GDPR and privacy compliance documentation",
     DocumentType.LEGAL_DOCUMENTATION, 70, "892 KB", Confidentiality.RESTRICTED, True),
]

# (vendor, reviewer, rating, title, content, days ago)
REVIEWS = [
    ("coretech", "sarah", 5, "Transformed our operations",
     "CoreTech has transformed our operations. The real-time processing and robust API have "
     "enabled us to innovate faster than ever before.", 25),
    ("coretech", "michael", 5, "Seamless migration",
     "Excellent platform with outstanding support. The migration was seamless and the team was "
     "incredibly helpful throughout the process.", 40),
    ("coretech", "lisa", 4, "Solid core banking solution",
     "Solid core banking solution. Good feature set and reliable performance. Would recommend to "
     "other community banks.", 70),
    ("securebank", "sarah", 4, "Members love the app",
     "Our members adopted the mobile app quickly and support tickets dropped.", 12),
]

# (vendor, requester, status, created days ago, scheduled days after, completed days after)
DEMOS = [
    ("coretech", "sarah", DemoStatus.COMPLETED, 50, 3, 10),
    ("coretech", "michael", DemoStatus.SCHEDULED, 8, 2, None),
    ("coretech", "lisa", DemoStatus.PENDING, 2, None, None),
    ("securebank", "michael", DemoStatus.COMPLETED, 20, 1, 5),
    ("payflow", "lisa", DemoStatus.PENDING, 5, None, None),
]

# (vendor, views per day for the last N days)
VIEWS = [("coretech", 3, 30), ("securebank", 2, 20), ("payflow", 1, 10)]


def _build_users(session: Session, now: datetime) -> Dict[str, User]:
    password_hash = hash_password(DEMO_PASSWORD)
    users = {}
    for i, row in enumerate(USERS):
        row = dict(row)
        key = row.pop("key")
        role = row.pop("role")
        user = User(
            role=role.value,
            password_hash=password_hash,
            is_email_verified=True,
            created_at=now - timedelta(days=90 - i * 12),
            **row,
        )
        session.add(user)
        users[key] = user
    return users


def _build_vendors(session: Session, users: Dict[str, User], now: datetime) -> Dict[str, Vendor]:
    vendors = {}
    for row in VENDORS:
        created_at = now - timedelta(days=row["created_days_ago"])
        owner = users.get(row["owner"]) if row["owner"] else None
        vendor = Vendor(
            company_name=row["company_name"],
            website=row["website"],
            owner=owner,
            claimed_at=created_at + timedelta(days=7) if owner else None,
            created_at=created_at,
        )
        vendor.profile = VendorProfile(
            website=row["website"] or None,
            last_activity_at=now - timedelta(days=1),
            **row["profile"],
        )
        session.add(vendor)
        vendors[row["key"]] = vendor
    return vendors


def seed_marketplace(session: Session, now: Optional[datetime] = None) -> Dict[str, int]:
    """
    Seed the mock marketplace into an empty database.

    Returns:
        Row counts per entity, or an empty dict when data already exists
    """
    if session.query(User).first() is not None or session.query(Vendor).first() is not None:
        logger.info("Database already populated; skipping mock data")
        return {}

    now = now or datetime.utcnow()
    users = _build_users(session, now)
    vendors = _build_vendors(session, users, now)
    session.flush()

    coretech = vendors["coretech"]
    session.add(
        Product(
            vendor=coretech,
            name="CoreBanking Pro",
            slug="corebanking-pro",
            category=VendorCategory.CORE_BANKING.value,
            subcategories=["Real-time Processing", "Cloud Banking", "API Banking"],
            description=(
                "Next-generation core banking platform designed for community banks and credit "
                "unions with real-time processing, comprehensive APIs, and modern cloud architecture."
            ),
            long_description=(
                "CoreBanking Pro combines the reliability banks need with the innovation they want. "
                "With over 200 API endpoints and a microservices architecture, institutions launch "
                "new products faster and scale efficiently."
            ),
            version="3.2.1",
            rating=4.8,
            review_count=89,
            integrations=["Q2", "Alkami", "Jack Henry"],
            pricing_model=PricingModel.SUBSCRIPTION.value,
            price_range="$50k - $250k / year",
            supported_client_sizes=["community bank", "credit union"],
            certifications=["SOC 2 Type II", "PCI DSS Level 1", "FFIEC Compliance", "ISO 27001"],
            tags=["core banking", "real-time", "api"],
            status=ProductStatus.ACTIVE.value,
            release_date=now - timedelta(days=180),
        )
    )
    session.add(
        Product(
            vendor=vendors["securebank"],
            name="SecureBank Mobile",
            slug="securebank-mobile",
            category=VendorCategory.DIGITAL_BANKING_PLATFORM.value,
            description="White-label mobile banking app for retail and business members.",
            version="5.0.0",
            rating=4.5,
            review_count=34,
            tags=["mobile", "digital banking"],
            status=ProductStatus.ACTIVE.value,
        )
    )

    for title, description, doc_type, days, size, confidentiality, approval in COMPLIANCE_DOCUMENTS:
        session.add(
            ComplianceDocument(
                vendor=coretech,
                title=title,
                description=description,
                type=doc_type.value,
                confidentiality=confidentiality.value,
                last_updated=now - timedelta(days=days),
                expires_at=now + timedelta(days=365 - days),
                size=size,
                file_url=f"/documents/coretech/{title.lower().replace(' ', '-')}.pdf",
                required_approval=approval,
            )
        )

    for vendor_key, user_key, rating, title, content, days in REVIEWS:
        user = users[user_key]
        session.add(
            Review(
                vendor=vendors[vendor_key],
                user_id=user.id,
                reviewer=user.display_name,
                reviewer_title=f"{user.title}, {user.institution_name}",
                title=title,
                rating=rating,
                content=content,
                is_verified=True,
                tags=[],
                created_at=now - timedelta(days=days),
            )
        )

    for key, vendor in vendors.items():
        ratings = [rating for vendor_key, _, rating, *_ in REVIEWS if vendor_key == key]
        vendor.profile.rating = round(sum(ratings) / len(ratings), 1) if ratings else None

    for vendor_key, user_key, status, days, scheduled_after, completed_after in DEMOS:
        user = users[user_key]
        created_at = now - timedelta(days=days)
        session.add(
            DemoRequest(
                vendor=vendors[vendor_key],
                user_id=user.id,
                status=status.value,
                first_name=user.first_name,
                last_name=user.last_name,
                email=user.email,
                bank_name=user.institution_name or "",
                title=user.title or "",
                assets_under_management="$500M - $1B",
                timeline="3-6 months",
                preferred_time="Weekday mornings",
                created_at=created_at,
                scheduled_at=created_at + timedelta(days=scheduled_after) if scheduled_after else None,
                completed_at=created_at + timedelta(days=completed_after) if completed_after else None,
            )
        )

    for vendor_key, per_day, days in VIEWS:
        for day in range(days):
            for _ in range(per_day):
                session.add(VendorView(vendor=vendors[vendor_key], viewed_at=now - timedelta(days=day)))

    session.add(
        VendorClaim(
            vendor=vendors["payflow"],
            user_id=users["payflow_rep"].id,
            status=ClaimStatus.PENDING.value,
            first_name="Sam",
            last_name="Ortiz",
            email=users["payflow_rep"].email,
            phone="(404) 555-0117",
            title="Director of Business Development",
            company_email=users["payflow_rep"].email,
            verification_method=VerificationMethod.EMAIL.value,
            message="I lead partnerships at PayFlow and would like to manage our listing.",
            submitted_at=now - timedelta(days=3),
        )
    )

    session.commit()

    counts = {
        "users": len(users),
        "vendors": len(vendors),
        "products": 2,
        "documents": len(COMPLIANCE_DOCUMENTS),
        "reviews": len(REVIEWS),
        "demo_requests": len(DEMOS),
        "views": sum(per_day * days for _, per_day, days in VIEWS),
        "claims": 1,
    }
    logger.info(f"Seeded marketplace: {counts}")
    return counts
