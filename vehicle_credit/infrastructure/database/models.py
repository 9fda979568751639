"""SQLAlchemy ORM models for credit applications and the rate catalog"""

import uuid
from sqlalchemy import Column, String, BigInteger, Boolean, DateTime, Integer, ForeignKey, Numeric, Text, JSON
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class CreditApplicationRecord(Base):
    """Credit application aggregate; each form section is a JSON document"""

    __tablename__ = "credit_application"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    applicant_id = Column(Text, nullable=False, index=True)
    listing_id = Column(Text, nullable=True, index=True)
    personal_info = Column(JSON, nullable=False)
    employment_info = Column(JSON, nullable=False)
    financial_info = Column(JSON, nullable=False)
    emergency_contact = Column(JSON, nullable=False)
    # Denormalized for search and statistics
    full_name = Column(Text, nullable=False)
    email = Column(Text, nullable=False)
    phone = Column(String(20), nullable=False)
    national_id = Column(String(18), nullable=False)
    requested_amount = Column(Numeric(14, 2), nullable=False)
    status = Column(String(20), nullable=False, default="pending", index=True)
    review_info = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    submitted_at = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    documents = relationship(
        "CreditDocumentRecord",
        back_populates="application",
        cascade="all, delete-orphan",
        order_by="CreditDocumentRecord.position",
    )


class CreditDocumentRecord(Base):
    """Append-only reference to a document in the blob store"""

    __tablename__ = "credit_document"

    id = Column(String(64), primary_key=True)
    application_id = Column(
        UUID(as_uuid=True), ForeignKey("credit_application.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position = Column(Integer, nullable=False)
    type = Column(String(32), nullable=False)
    name = Column(Text, nullable=False)
    url = Column(Text, nullable=False)
    size = Column(BigInteger, nullable=False)
    uploaded_at = Column(DateTime(timezone=True), nullable=False)

    application = relationship("CreditApplicationRecord", back_populates="documents")


class LendingPartnerRecord(Base):
    """Rate catalog entry administered by the platform"""

    __tablename__ = "lending_partner"

    id = Column(String(64), primary_key=True)
    name = Column(Text, nullable=False)
    annual_rate = Column(Numeric(6, 3), nullable=False)
    min_term = Column(Integer, nullable=False)
    max_term = Column(Integer, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    min_vehicle_year = Column(Integer, nullable=True)
    max_vehicle_age_years = Column(Integer, nullable=True)
    requirements = Column(JSON, nullable=False, default=list)
    processing_days = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
