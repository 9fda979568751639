"""Domain models - pure Python dataclasses representing business entities"""

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional, Union


class ApplicationStatus(str, Enum):
    PENDING = "pending"
    UNDER_REVIEW = "under_review"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset(
    {ApplicationStatus.APPROVED, ApplicationStatus.REJECTED, ApplicationStatus.CANCELLED}
)
OPEN_STATUSES = frozenset({ApplicationStatus.PENDING, ApplicationStatus.UNDER_REVIEW})


class MaritalStatus(str, Enum):
    SINGLE = "single"
    MARRIED = "married"
    DIVORCED = "divorced"
    WIDOWED = "widowed"


class EmploymentType(str, Enum):
    EMPLOYEE = "employee"
    SELF_EMPLOYED = "self_employed"
    BUSINESS_OWNER = "business_owner"
    RETIRED = "retired"
    UNEMPLOYED = "unemployed"


class AccountType(str, Enum):
    CHECKING = "checking"
    SAVINGS = "savings"


class DocumentType(str, Enum):
    IDENTIFICATION = "identification"
    INCOME_PROOF = "income_proof"
    ADDRESS_PROOF = "address_proof"
    BANK_STATEMENT = "bank_statement"
    OTHER = "other"


class RejectionReason(str, Enum):
    INSUFFICIENT_INCOME = "insufficient_income"
    POOR_CREDIT_HISTORY = "poor_credit_history"
    INCOMPLETE_DOCUMENTATION = "incomplete_documentation"
    HIGH_DEBT_RATIO = "high_debt_ratio"
    EMPLOYMENT_INSTABILITY = "employment_instability"
    OTHER = "other"


@dataclass
class PersonalInfo:
    full_name: str
    email: str
    phone: str
    date_of_birth: date
    national_id: str
    marital_status: MaritalStatus
    dependents: int
    tax_id: Optional[str] = None


@dataclass
class EmploymentInfo:
    employment_type: EmploymentType
    monthly_income: Decimal
    work_experience_years: int
    company_name: Optional[str] = None
    position: Optional[str] = None
    work_address: Optional[str] = None
    work_phone: Optional[str] = None


@dataclass
class FinancialInfo:
    requested_amount: Decimal
    down_payment: Decimal
    preferred_term: int  # months
    monthly_expenses: Decimal
    other_debts: Decimal
    bank_name: str
    account_type: AccountType


@dataclass
class EmergencyContact:
    name: str
    relationship: str
    phone: str
    address: Optional[str] = None


@dataclass(frozen=True)
class DocumentFile:
    """Reference to a document held by the external blob store"""

    id: str
    type: DocumentType
    name: str
    url: str
    size: int  # bytes
    uploaded_at: datetime


@dataclass(frozen=True)
class ApprovedReview:
    """Review outcome for an approved application; monthly_payment is derived"""

    reviewer_id: str
    reviewed_at: datetime
    approved_amount: Decimal
    approved_term: int
    interest_rate: Decimal
    monthly_payment: Decimal
    comments: Optional[str] = None
    kind: str = field(default="approved", init=False)


@dataclass(frozen=True)
class RejectedReview:
    """Review outcome for a rejected application"""

    reviewer_id: str
    reviewed_at: datetime
    rejection_reason: RejectionReason
    comments: Optional[str] = None
    kind: str = field(default="rejected", init=False)


ReviewInfo = Union[ApprovedReview, RejectedReview]


@dataclass
class CreditApplication:
    """Aggregate root of the credit lifecycle"""

    id: uuid.UUID
    applicant_id: str
    personal_info: PersonalInfo
    employment_info: EmploymentInfo
    financial_info: FinancialInfo
    emergency_contact: EmergencyContact
    status: ApplicationStatus
    created_at: datetime
    updated_at: datetime
    submitted_at: Optional[datetime] = None
    listing_id: Optional[str] = None
    documents: List[DocumentFile] = field(default_factory=list)
    review_info: Optional[ReviewInfo] = None


@dataclass(frozen=True)
class LendingPartner:
    """Rate catalog entry for a financial institution"""

    id: str
    name: str
    annual_rate: Decimal  # percent
    min_term: int  # months
    max_term: int  # months
    is_active: bool = True
    min_vehicle_year: Optional[int] = None
    max_vehicle_age_years: Optional[int] = None
    requirements: List[str] = field(default_factory=list)
    processing_days: Optional[int] = None

    def accepts_vehicle_year(self, vehicle_year: int, current_year: int) -> bool:
        """Both constraints must hold when set; no constraint accepts any year"""
        if self.min_vehicle_year is not None and vehicle_year < self.min_vehicle_year:
            return False
        if self.max_vehicle_age_years is not None and vehicle_year < current_year - self.max_vehicle_age_years:
            return False
        return True

    def covers_term(self, term_months: int) -> bool:
        return self.min_term <= term_months <= self.max_term


@dataclass
class Installment:
    """Single monthly row in an amortization schedule"""

    period: int
    payment: Decimal
    interest: Decimal
    principal: Decimal
    balance: Decimal


@dataclass
class Quote:
    """Loan economics for one partner, or the reason it cannot be computed"""

    computable: bool
    partner_id: str
    reason: Optional[str] = None
    annual_rate: Optional[Decimal] = None
    term_months: Optional[int] = None
    principal: Optional[Decimal] = None
    monthly_payment: Optional[Decimal] = None
    total_payment: Optional[Decimal] = None
    total_interest: Optional[Decimal] = None
    schedule: Optional[List[Installment]] = None


@dataclass(frozen=True)
class Identity:
    """Verified principal supplied by the identity provider"""

    id: str
    role: str


@dataclass
class ApplicationFilter:
    status: Optional[ApplicationStatus] = None
    applicant_id: Optional[str] = None
    listing_id: Optional[str] = None
    search: Optional[str] = None
    created_from: Optional[datetime] = None
    created_to: Optional[datetime] = None


@dataclass
class Page:
    limit: int = 20
    offset: int = 0


@dataclass
class StatusStats:
    count: int
    avg_requested_amount: Decimal
    total_requested_amount: Decimal


@dataclass
class ApplicationStats:
    total: int
    recent_count: int  # created in the last 30 days
    by_status: dict = field(default_factory=dict)
