"""Data access layer for credit applications and lending partners"""

import uuid
from dataclasses import asdict
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional
from sqlalchemy import func, or_, update
from sqlalchemy.orm import Session
from vehicle_credit.domain.exceptions import NotFoundError
from vehicle_credit.domain.models import (
    OPEN_STATUSES,
    AccountType,
    ApplicationFilter,
    ApplicationStats,
    ApplicationStatus,
    ApprovedReview,
    CreditApplication,
    DocumentFile,
    DocumentType,
    EmergencyContact,
    EmploymentInfo,
    EmploymentType,
    FinancialInfo,
    LendingPartner,
    MaritalStatus,
    Page,
    PersonalInfo,
    RejectedReview,
    RejectionReason,
    ReviewInfo,
    StatusStats,
)
from vehicle_credit.infrastructure.database.models import (
    CreditApplicationRecord,
    CreditDocumentRecord,
    LendingPartnerRecord,
)
from vehicle_credit.utils.money import round_money, to_decimal, utcnow

RECENT_WINDOW = timedelta(days=30)


def _jsonable(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return value


def _to_json(section: Any) -> Dict[str, Any]:
    """Flat dataclass -> JSON-safe dict (money as decimal strings)"""
    return {key: _jsonable(value) for key, value in asdict(section).items()}


def _aware(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes; everything is stored in UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _decimal(value: Any) -> Optional[Decimal]:
    return to_decimal(value) if value is not None else None


def _personal_info(data: Dict[str, Any]) -> PersonalInfo:
    return PersonalInfo(
        full_name=data["full_name"],
        email=data["email"],
        phone=data["phone"],
        date_of_birth=date.fromisoformat(data["date_of_birth"]),
        national_id=data["national_id"],
        tax_id=data.get("tax_id"),
        marital_status=MaritalStatus(data["marital_status"]),
        dependents=data["dependents"],
    )


def _employment_info(data: Dict[str, Any]) -> EmploymentInfo:
    return EmploymentInfo(
        employment_type=EmploymentType(data["employment_type"]),
        monthly_income=_decimal(data["monthly_income"]),
        work_experience_years=data["work_experience_years"],
        company_name=data.get("company_name"),
        position=data.get("position"),
        work_address=data.get("work_address"),
        work_phone=data.get("work_phone"),
    )


def _financial_info(data: Dict[str, Any]) -> FinancialInfo:
    return FinancialInfo(
        requested_amount=_decimal(data["requested_amount"]),
        down_payment=_decimal(data["down_payment"]),
        preferred_term=data["preferred_term"],
        monthly_expenses=_decimal(data["monthly_expenses"]),
        other_debts=_decimal(data["other_debts"]),
        bank_name=data["bank_name"],
        account_type=AccountType(data["account_type"]),
    )


def _emergency_contact(data: Dict[str, Any]) -> EmergencyContact:
    return EmergencyContact(
        name=data["name"],
        relationship=data["relationship"],
        phone=data["phone"],
        address=data.get("address"),
    )


def _review_info(data: Optional[Dict[str, Any]]) -> Optional[ReviewInfo]:
    """Decode the discriminated review document stored alongside the status"""
    if data is None:
        return None
    reviewed_at = datetime.fromisoformat(data["reviewed_at"])
    if data["kind"] == "approved":
        return ApprovedReview(
            reviewer_id=data["reviewer_id"],
            reviewed_at=reviewed_at,
            approved_amount=_decimal(data["approved_amount"]),
            approved_term=data["approved_term"],
            interest_rate=_decimal(data["interest_rate"]),
            monthly_payment=_decimal(data["monthly_payment"]),
            comments=data.get("comments"),
        )
    return RejectedReview(
        reviewer_id=data["reviewer_id"],
        reviewed_at=reviewed_at,
        rejection_reason=RejectionReason(data["rejection_reason"]),
        comments=data.get("comments"),
    )


def _document(record: CreditDocumentRecord) -> DocumentFile:
    return DocumentFile(
        id=record.id,
        type=DocumentType(record.type),
        name=record.name,
        url=record.url,
        size=record.size,
        uploaded_at=_aware(record.uploaded_at),
    )


def _document_record(document: DocumentFile, position: int) -> CreditDocumentRecord:
    return CreditDocumentRecord(
        id=document.id,
        position=position,
        type=document.type.value,
        name=document.name,
        url=document.url,
        size=document.size,
        uploaded_at=document.uploaded_at,
    )


def to_domain(record: CreditApplicationRecord) -> CreditApplication:
    return CreditApplication(
        id=record.id,
        applicant_id=record.applicant_id,
        listing_id=record.listing_id,
        personal_info=_personal_info(record.personal_info),
        employment_info=_employment_info(record.employment_info),
        financial_info=_financial_info(record.financial_info),
        emergency_contact=_emergency_contact(record.emergency_contact),
        documents=[_document(doc) for doc in record.documents],
        status=ApplicationStatus(record.status),
        review_info=_review_info(record.review_info),
        created_at=_aware(record.created_at),
        submitted_at=_aware(record.submitted_at),
        updated_at=_aware(record.updated_at),
    )


class ApplicationRepository:
    """
    SQLAlchemy-backed application store.

    Each write commits on its own: every service operation is a single store
    round trip, and the conditional status update must be visible to
    concurrent sessions as soon as it succeeds.
    """

    def __init__(self, db: Session):
        self.db = db

    def create(self, application: CreditApplication) -> CreditApplication:
        """Persist a new application with its initial documents"""
        record = CreditApplicationRecord(
            id=application.id,
            applicant_id=application.applicant_id,
            listing_id=application.listing_id,
            personal_info=_to_json(application.personal_info),
            employment_info=_to_json(application.employment_info),
            financial_info=_to_json(application.financial_info),
            emergency_contact=_to_json(application.emergency_contact),
            full_name=application.personal_info.full_name,
            email=application.personal_info.email,
            phone=application.personal_info.phone,
            national_id=application.personal_info.national_id,
            requested_amount=application.financial_info.requested_amount,
            status=application.status.value,
            review_info=_to_json(application.review_info) if application.review_info else None,
            created_at=application.created_at,
            submitted_at=application.submitted_at,
            updated_at=application.updated_at,
            documents=[_document_record(doc, i) for i, doc in enumerate(application.documents)],
        )
        self.db.add(record)
        self.db.commit()
        return to_domain(record)

    def find_by_id(self, application_id: uuid.UUID) -> Optional[CreditApplication]:
        record = self._get_record(application_id)
        return to_domain(record) if record else None

    def find_many(self, filters: ApplicationFilter, page: Page) -> List[CreditApplication]:
        """Filtered listing, newest first"""
        query = self.db.query(CreditApplicationRecord)

        if filters.status is not None:
            query = query.filter(CreditApplicationRecord.status == filters.status.value)
        if filters.applicant_id is not None:
            query = query.filter(CreditApplicationRecord.applicant_id == filters.applicant_id)
        if filters.listing_id is not None:
            query = query.filter(CreditApplicationRecord.listing_id == filters.listing_id)
        if filters.search:
            pattern = f"%{filters.search.strip()}%"
            query = query.filter(
                or_(
                    CreditApplicationRecord.full_name.ilike(pattern),
                    CreditApplicationRecord.email.ilike(pattern),
                    CreditApplicationRecord.phone.ilike(pattern),
                    CreditApplicationRecord.national_id.ilike(pattern),
                )
            )
        if filters.created_from is not None:
            query = query.filter(CreditApplicationRecord.created_at >= filters.created_from)
        if filters.created_to is not None:
            query = query.filter(CreditApplicationRecord.created_at <= filters.created_to)

        records = (
            query.order_by(CreditApplicationRecord.created_at.desc(), CreditApplicationRecord.id)
            .offset(page.offset)
            .limit(page.limit)
            .all()
        )
        return [to_domain(r) for r in records]

    def has_open_application(self, applicant_id: str, listing_id: str) -> bool:
        query = self.db.query(CreditApplicationRecord.id).filter(
            CreditApplicationRecord.applicant_id == applicant_id,
            CreditApplicationRecord.listing_id == listing_id,
            CreditApplicationRecord.status.in_([s.value for s in OPEN_STATUSES]),
        )
        return self.db.query(query.exists()).scalar()

    def update_status(
        self,
        application_id: uuid.UUID,
        expected_status: ApplicationStatus,
        new_status: ApplicationStatus,
        review_info: Optional[ReviewInfo] = None,
    ) -> Optional[CreditApplication]:
        """
        Compare-and-swap on status.

        The UPDATE only matches while the row still holds expected_status, so
        of two concurrent transitions exactly one affects a row. Returns None
        for the loser.
        """
        values: Dict[str, Any] = {"status": new_status.value, "updated_at": utcnow()}
        if review_info is not None:
            values["review_info"] = _to_json(review_info)

        result = self.db.execute(
            update(CreditApplicationRecord)
            .where(
                CreditApplicationRecord.id == application_id,
                CreditApplicationRecord.status == expected_status.value,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            self.db.rollback()
            return None

        self.db.commit()
        return self.find_by_id(application_id)

    def append_document(self, application_id: uuid.UUID, document: DocumentFile) -> Optional[CreditApplication]:
        """
        Attach a document while the application is still open.

        The status guard and the row write share one UPDATE, so a document
        never lands on an application a concurrent transition has closed.
        Returns None when the application is no longer open.
        """
        now = utcnow()
        guarded = self.db.execute(
            update(CreditApplicationRecord)
            .where(
                CreditApplicationRecord.id == application_id,
                CreditApplicationRecord.status.in_([s.value for s in OPEN_STATUSES]),
            )
            .values(updated_at=now)
            .execution_options(synchronize_session=False)
        )
        if guarded.rowcount == 0:
            self.db.rollback()
            if self._get_record(application_id) is None:
                raise NotFoundError(f"Application {application_id} not found")
            return None

        record = self._get_record(application_id)
        record.documents.append(_document_record(document, position=len(record.documents)))
        record.updated_at = now
        self.db.commit()
        return to_domain(record)

    def stats(self) -> ApplicationStats:
        """Counts and requested-amount aggregates per status"""
        rows = (
            self.db.query(
                CreditApplicationRecord.status,
                func.count(CreditApplicationRecord.id),
                func.avg(CreditApplicationRecord.requested_amount),
                func.sum(CreditApplicationRecord.requested_amount),
            )
            .group_by(CreditApplicationRecord.status)
            .all()
        )
        total = self.db.query(func.count(CreditApplicationRecord.id)).scalar() or 0
        recent = (
            self.db.query(func.count(CreditApplicationRecord.id))
            .filter(CreditApplicationRecord.created_at >= utcnow() - RECENT_WINDOW)
            .scalar()
            or 0
        )

        by_status = {
            ApplicationStatus(status): StatusStats(
                count=count,
                avg_requested_amount=round_money(to_decimal(avg or 0)),
                total_requested_amount=round_money(to_decimal(total_amount or 0)),
            )
            for status, count, avg, total_amount in rows
        }
        return ApplicationStats(total=total, recent_count=recent, by_status=by_status)

    def _get_record(self, application_id: uuid.UUID) -> Optional[CreditApplicationRecord]:
        return (
            self.db.query(CreditApplicationRecord)
            .filter(CreditApplicationRecord.id == application_id)
            .first()
        )


class LendingPartnerRepository:
    """Repository for the rate catalog"""

    def __init__(self, db: Session):
        self.db = db

    def list_all(self) -> List[LendingPartner]:
        records = self.db.query(LendingPartnerRecord).order_by(LendingPartnerRecord.id).all()
        return [
            LendingPartner(
                id=r.id,
                name=r.name,
                annual_rate=to_decimal(r.annual_rate),
                min_term=r.min_term,
                max_term=r.max_term,
                is_active=r.is_active,
                min_vehicle_year=r.min_vehicle_year,
                max_vehicle_age_years=r.max_vehicle_age_years,
                requirements=list(r.requirements or []),
                processing_days=r.processing_days,
            )
            for r in records
        ]

    def upsert(self, partner: LendingPartner) -> None:
        """Insert or replace a partner by id (used by seeding and administration)"""
        self.db.merge(
            LendingPartnerRecord(
                id=partner.id,
                name=partner.name,
                annual_rate=partner.annual_rate,
                min_term=partner.min_term,
                max_term=partner.max_term,
                is_active=partner.is_active,
                min_vehicle_year=partner.min_vehicle_year,
                max_vehicle_age_years=partner.max_vehicle_age_years,
                requirements=list(partner.requirements),
                processing_days=partner.processing_days,
            )
        )
        self.db.commit()
