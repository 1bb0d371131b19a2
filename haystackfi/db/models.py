"""
SQLAlchemy ORM Models
Database table definitions for the marketplace.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    Column, String, Integer, Float, Boolean, DateTime,
    ForeignKey, Text, Index, JSON, UniqueConstraint
)
from sqlalchemy.orm import declarative_base, relationship

from .enums import (
    AccessRequestStatus,
    ClaimStatus,
    Confidentiality,
    DemoStatus,
    DocumentStatus,
    ProductStatus,
    ResearchStatus,
    UserRole,
    VendorStatus,
    VerificationStatus,
)

Base = declarative_base()


class User(Base):
    """
    User model.

    Institutions (bank, credit union), vendor representatives and admins.
    """
    __tablename__ = 'users'

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, index=True, nullable=False,
                   comment='User email address (required for authentication)')
    role = Column(String(32), nullable=False, default=UserRole.BANK.value, index=True)

    # Authentication fields
    password_hash = Column(String(255), nullable=False, comment='Bcrypt hashed password')
    is_active = Column(Boolean, nullable=False, default=True)
    is_email_verified = Column(Boolean, nullable=False, default=False)
    token_version = Column(Integer, nullable=False, default=0,
                           comment='Bumped on password reset to invalidate issued tokens')
    refresh_token_jti = Column(String(64), nullable=True,
                               comment='jti of the one refresh token that may still be exchanged')
    last_login = Column(DateTime, nullable=True)

    # Profile
    first_name = Column(String(100), nullable=False, default='')
    last_name = Column(String(100), nullable=False, default='')
    phone = Column(String(50), nullable=False, default='')
    address = Column(String(255), nullable=False, default='')
    city = Column(String(100), nullable=False, default='')
    state = Column(String(50), nullable=False, default='')
    zip = Column(String(20), nullable=False, default='')
    country = Column(String(100), nullable=False, default='')
    website = Column(String(255), nullable=True)
    linkedin_profile = Column(String(255), nullable=True)
    facebook_profile = Column(String(255), nullable=True)
    twitter_profile = Column(String(255), nullable=True)
    instagram_profile = Column(String(255), nullable=True)
    youtube_profile = Column(String(255), nullable=True)
    institution_name = Column(String(255), nullable=True)
    title = Column(String(255), nullable=True)

    # Timestamps
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    owned_vendors = relationship("Vendor", back_populates="owner")
    notifications = relationship("Notification", back_populates="user", cascade="all, delete-orphan")

    @property
    def display_name(self) -> str:
        name = f"{self.first_name} {self.last_name}".strip()
        return name or self.email

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"


class Vendor(Base):
    """
    Vendor model.

    A company listed in the marketplace. Listings may be unclaimed (no owner).
    """
    __tablename__ = 'vendors'

    id = Column(Integer, primary_key=True, autoincrement=True)
    company_name = Column(String(255), nullable=False, index=True)
    website = Column(String(500), nullable=False, default='')
    is_active = Column(Boolean, nullable=False, default=True)

    owner_id = Column(Integer, ForeignKey('users.id', ondelete='SET NULL'), nullable=True, index=True)
    claimed_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    owner = relationship("User", back_populates="owned_vendors")
    profile = relationship("VendorProfile", back_populates="vendor", uselist=False,
                           cascade="all, delete-orphan")
    reviews = relationship("Review", back_populates="vendor", cascade="all, delete-orphan",
                           order_by="Review.created_at.desc()")
    products = relationship("Product", back_populates="vendor", cascade="all, delete-orphan")
    documents = relationship("ComplianceDocument", back_populates="vendor",
                             cascade="all, delete-orphan")
    demo_requests = relationship("DemoRequest", back_populates="vendor",
                                 cascade="all, delete-orphan")
    claims = relationship("VendorClaim", back_populates="vendor", cascade="all, delete-orphan")
    research_records = relationship("VendorResearchRecord", back_populates="vendor",
                                    cascade="all, delete-orphan")
    views = relationship("VendorView", back_populates="vendor", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Vendor(id={self.id}, company_name={self.company_name})>"


class VendorProfile(Base):
    """
    Vendor profile model.

    Descriptive marketplace data for a vendor (one per vendor).
    """
    __tablename__ = 'vendor_profiles'

    id = Column(Integer, primary_key=True, autoincrement=True)
    vendor_id = Column(Integer, ForeignKey('vendors.id', ondelete='CASCADE'),
                       nullable=False, unique=True)

    summary = Column(Text, nullable=True)
    detailed_description = Column(Text, nullable=True)
    category = Column(String(100), nullable=True, index=True)
    subcategories = Column(JSON, nullable=False, default=list)
    location = Column(String(255), nullable=True)
    size = Column(String(32), nullable=True)
    founded = Column(String(10), nullable=True)
    employees = Column(String(50), nullable=True)
    rating = Column(Float, nullable=True)
    compatibility = Column(Float, nullable=True, comment='Fit score for institutions (0-100)')
    website = Column(String(500), nullable=True)
    phone = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)
    logo_url = Column(String(500), nullable=True)
    tags = Column(JSON, nullable=False, default=list)
    features = Column(JSON, nullable=False, default=list)
    integrations = Column(JSON, nullable=False, default=list)
    certifications = Column(JSON, nullable=False, default=list)
    client_size = Column(JSON, nullable=False, default=list)
    pricing_model = Column(String(32), nullable=True)
    price_range = Column(String(100), nullable=True)
    status = Column(String(32), nullable=False, default=VendorStatus.PENDING.value, index=True)
    verification_status = Column(String(32), nullable=False,
                                 default=VerificationStatus.PENDING.value, index=True)
    last_activity_at = Column(DateTime, nullable=True)
    target_customers = Column(JSON, nullable=False, default=list)
    search_hints_keywords = Column(JSON, nullable=False, default=list)
    compliance_certifications = Column(JSON, nullable=False, default=list)
    integrations_core_support = Column(JSON, nullable=False, default=list)
    digital_banking_partners = Column(JSON, nullable=False, default=list)
    notable_customers = Column(JSON, nullable=False, default=list)
    pricing_notes = Column(Text, nullable=True)
    source_url = Column(String(500), nullable=True)
    confidence = Column(Float, nullable=True, comment='Confidence of researched data (0-1)')
    last_verified = Column(DateTime, nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    vendor = relationship("Vendor", back_populates="profile")

    def __repr__(self):
        return f"<VendorProfile(vendor_id={self.vendor_id}, category={self.category})>"


class VendorView(Base):
    """Profile view event, used for vendor performance analytics."""
    __tablename__ = 'vendor_views'

    id = Column(Integer, primary_key=True, autoincrement=True)
    vendor_id = Column(Integer, ForeignKey('vendors.id', ondelete='CASCADE'), nullable=False)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    viewed_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    vendor = relationship("Vendor", back_populates="views")

    __table_args__ = (
        Index('idx_vendor_views_vendor_viewed', 'vendor_id', 'viewed_at'),
    )


class Product(Base):
    """Product offered by a vendor."""
    __tablename__ = 'products'

    id = Column(Integer, primary_key=True, autoincrement=True)
    vendor_id = Column(Integer, ForeignKey('vendors.id', ondelete='CASCADE'),
                       nullable=False, index=True)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False, unique=True)
    category = Column(String(100), nullable=True, index=True)
    subcategories = Column(JSON, nullable=False, default=list)
    description = Column(Text, nullable=False, default='')
    long_description = Column(Text, nullable=False, default='')
    version = Column(String(50), nullable=False, default='1.0')
    rating = Column(Float, nullable=False, default=0.0)
    review_count = Column(Integer, nullable=False, default=0)
    logo_url = Column(String(500), nullable=True)
    integrations = Column(JSON, nullable=False, default=list)
    pricing_model = Column(String(32), nullable=True)
    price_range = Column(String(100), nullable=True)
    supported_client_sizes = Column(JSON, nullable=False, default=list)
    certifications = Column(JSON, nullable=False, default=list)
    tags = Column(JSON, nullable=False, default=list)
    status = Column(String(32), nullable=False, default=ProductStatus.ACTIVE.value)
    release_date = Column(DateTime, nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    vendor = relationship("Vendor", back_populates="products")


class Review(Base):
    """Institution review of a vendor."""
    __tablename__ = 'reviews'

    id = Column(Integer, primary_key=True, autoincrement=True)
    vendor_id = Column(Integer, ForeignKey('vendors.id', ondelete='CASCADE'),
                       nullable=False, index=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    reviewer = Column(String(255), nullable=False, default='')
    reviewer_title = Column(String(255), nullable=True)
    title = Column(String(255), nullable=False)
    rating = Column(Integer, nullable=False)
    content = Column(Text, nullable=False)
    is_verified = Column(Boolean, nullable=False, default=False)
    is_anonymous = Column(Boolean, nullable=False, default=False)
    helpful_count = Column(Integer, nullable=False, default=0)
    tags = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    vendor = relationship("Vendor", back_populates="reviews")

    __table_args__ = (
        UniqueConstraint('vendor_id', 'user_id', name='uq_reviews_vendor_user'),
    )


class DemoRequest(Base):
    """Lead-generation demo request from an institution to a vendor."""
    __tablename__ = 'demo_requests'

    id = Column(Integer, primary_key=True, autoincrement=True)
    vendor_id = Column(Integer, ForeignKey('vendors.id', ondelete='CASCADE'),
                       nullable=False, index=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='SET NULL'), nullable=True, index=True)
    status = Column(String(32), nullable=False, default=DemoStatus.PENDING.value, index=True)

    first_name = Column(String(100), nullable=False, default='')
    last_name = Column(String(100), nullable=False, default='')
    email = Column(String(255), nullable=False, default='')
    phone = Column(String(50), nullable=True)
    bank_name = Column(String(255), nullable=False, default='')
    title = Column(String(255), nullable=False, default='')
    assets_under_management = Column(String(100), nullable=False, default='')
    current_provider = Column(String(255), nullable=True)
    timeline = Column(String(100), nullable=False)
    preferred_time = Column(String(100), nullable=False)
    message = Column(Text, nullable=True)

    scheduled_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    vendor = relationship("Vendor", back_populates="demo_requests")


class VendorClaim(Base):
    """Request by a vendor representative to take ownership of a listing."""
    __tablename__ = 'vendor_claims'

    id = Column(Integer, primary_key=True, autoincrement=True)
    vendor_id = Column(Integer, ForeignKey('vendors.id', ondelete='CASCADE'),
                       nullable=False, index=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='SET NULL'), nullable=True, index=True)
    status = Column(String(32), nullable=False, default=ClaimStatus.PENDING.value, index=True)

    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=False)
    title = Column(String(255), nullable=False)
    company_email = Column(String(255), nullable=False)
    verification_method = Column(String(32), nullable=False)
    message = Column(Text, nullable=True)

    submitted_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    reviewed_at = Column(DateTime, nullable=True)
    reviewed_by = Column(Integer, ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    rejection_reason = Column(Text, nullable=True)

    vendor = relationship("Vendor", back_populates="claims")


class ComplianceDocument(Base):
    """Compliance document published by a vendor."""
    __tablename__ = 'compliance_documents'

    id = Column(Integer, primary_key=True, autoincrement=True)
    vendor_id = Column(Integer, ForeignKey('vendors.id', ondelete='CASCADE'),
                       nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default='')
    type = Column(String(64), nullable=False)
    confidentiality = Column(String(32), nullable=False, default=Confidentiality.PUBLIC.value)
    status = Column(String(32), nullable=False, default=DocumentStatus.CURRENT.value)
    last_updated = Column(DateTime, nullable=False, default=datetime.utcnow)
    expires_at = Column(DateTime, nullable=True)
    size = Column(String(32), nullable=False, default='')
    file_url = Column(String(500), nullable=False, default='')
    required_approval = Column(Boolean, nullable=False, default=False)
    download_count = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    vendor = relationship("Vendor", back_populates="documents")
    access_requests = relationship("DocumentAccessRequest", back_populates="document",
                                   cascade="all, delete-orphan")


class DocumentAccessRequest(Base):
    """Institution request to access a restricted compliance document."""
    __tablename__ = 'document_access_requests'

    id = Column(Integer, primary_key=True, autoincrement=True)
    document_id = Column(Integer, ForeignKey('compliance_documents.id', ondelete='CASCADE'),
                         nullable=False, index=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='SET NULL'), nullable=True, index=True)
    justification = Column(Text, nullable=True)
    status = Column(String(32), nullable=False, default=AccessRequestStatus.PENDING.value)

    requested_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    approved_at = Column(DateTime, nullable=True)
    approved_by = Column(Integer, ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    rejected_at = Column(DateTime, nullable=True)
    rejection_reason = Column(Text, nullable=True)

    document = relationship("ComplianceDocument", back_populates="access_requests")


class VendorResearchRecord(Base):
    """
    AI-assisted research run for a vendor.

    Populated by the research Celery task and reviewed by admins.
    """
    __tablename__ = 'vendor_research_records'

    id = Column(Integer, primary_key=True, autoincrement=True)
    vendor_id = Column(Integer, ForeignKey('vendors.id', ondelete='CASCADE'),
                       nullable=False, index=True)
    status = Column(String(32), nullable=False, default=ResearchStatus.PENDING.value, index=True)
    website_url = Column(String(500), nullable=True)
    website_snapshot = Column(JSON, nullable=True)
    extracted_profile = Column(JSON, nullable=True)
    discovered_logo_url = Column(String(500), nullable=True)
    deep_research_insights = Column(JSON, nullable=True)
    raw_research_artifacts = Column(JSON, nullable=True)
    error_message = Column(Text, nullable=True)
    llm_model = Column(String(100), nullable=True)
    task_id = Column(String(255), nullable=True, comment='Celery task ID')
    # Using research_metadata to avoid SQLAlchemy reserved name
    research_metadata = Column('metadata', JSON, nullable=True)

    requested_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    started_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    vendor = relationship("Vendor", back_populates="research_records")

    def __repr__(self):
        return f"<VendorResearchRecord(id={self.id}, vendor_id={self.vendor_id}, status={self.status})>"


class Notification(Base):
    """In-app notification for a user."""
    __tablename__ = 'notifications'

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    type = Column(String(32), nullable=False)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    is_read = Column(Boolean, nullable=False, default=False)
    action_url = Column(String(500), nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)

    user = relationship("User", back_populates="notifications")
