"""Pydantic schemas for API request/response validation

Submission, transition and document bodies are passed through as raw objects:
the domain validates them so that every violated field is reported together.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, computed_field

from vehicle_credit.api.v1.labels import (
    ACCOUNT_TYPE_LABELS,
    EMPLOYMENT_TYPE_LABELS,
    MARITAL_STATUS_LABELS,
    label,
)
from vehicle_credit.domain.models import (
    AccountType,
    ApplicationStatus,
    DocumentType,
    EmploymentType,
    MaritalStatus,
    RejectionReason,
)

# Money is exact inside the service and a JSON number on the wire
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class _FromDomain(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class ViolationSchema(BaseModel):
    field: str
    message: str


class ErrorResponse(BaseModel):
    """Body of 4xx responses raised by the credit routes"""

    message: str
    violations: List[ViolationSchema] = []


class TransitionRequest(BaseModel):
    """Request body for POST /v1/applications/{id}/transitions"""

    action: str = Field(..., description="review | approve | reject | cancel")
    payload: Dict[str, Any] = Field(default_factory=dict, description="Action-specific fields")


class QuoteRequest(BaseModel):
    """Request body for POST /v1/quote"""

    partner_id: str = Field(..., min_length=1)
    term_months: int
    down_payment: Decimal
    vehicle_price: Optional[Decimal] = Field(None, description="Required unless listing_id is given")
    vehicle_year: Optional[int] = None
    listing_id: Optional[str] = Field(None, description="Takes price and year from the listing")
    include_schedule: bool = False


class SimulateRequest(BaseModel):
    """Request body for POST /v1/simulate"""

    term_months: int
    down_payment: Decimal
    vehicle_price: Optional[Decimal] = None
    vehicle_year: Optional[int] = None
    listing_id: Optional[str] = None


class PersonalInfoSchema(_FromDomain):
    full_name: str
    email: str
    phone: str
    date_of_birth: date
    national_id: str
    tax_id: Optional[str] = None
    marital_status: MaritalStatus
    dependents: int

    @computed_field
    @property
    def marital_status_label(self) -> str:
        return label(MARITAL_STATUS_LABELS, self.marital_status)


class EmploymentInfoSchema(_FromDomain):
    employment_type: EmploymentType
    company_name: Optional[str] = None
    position: Optional[str] = None
    work_address: Optional[str] = None
    work_phone: Optional[str] = None
    monthly_income: Money
    work_experience_years: int

    @computed_field
    @property
    def employment_type_label(self) -> str:
        return label(EMPLOYMENT_TYPE_LABELS, self.employment_type)


class FinancialInfoSchema(_FromDomain):
    requested_amount: Money
    down_payment: Money
    preferred_term: int
    monthly_expenses: Money
    other_debts: Money
    bank_name: str
    account_type: AccountType

    @computed_field
    @property
    def account_type_label(self) -> str:
        return label(ACCOUNT_TYPE_LABELS, self.account_type)


class EmergencyContactSchema(_FromDomain):
    name: str
    relationship: str
    phone: str
    address: Optional[str] = None


class DocumentSchema(BaseModel):
    id: str
    type: DocumentType
    type_label: str
    name: str
    url: str
    size: int
    uploaded_at: datetime


class ReviewInfoSchema(BaseModel):
    """Approved and rejected reviews share this shape; `kind` tells them apart"""

    kind: str
    reviewer_id: str
    reviewed_at: datetime
    approved_amount: Optional[Money] = None
    approved_term: Optional[int] = None
    interest_rate: Optional[Money] = None
    monthly_payment: Optional[Money] = None
    rejection_reason: Optional[RejectionReason] = None
    rejection_reason_label: Optional[str] = None
    comments: Optional[str] = None


class ApplicationResponse(BaseModel):
    """Credit application as seen by applicants and reviewers"""

    id: str
    applicant_id: str
    listing_id: Optional[str] = None
    status: ApplicationStatus
    status_label: str
    personal_info: PersonalInfoSchema
    employment_info: EmploymentInfoSchema
    financial_info: FinancialInfoSchema
    emergency_contact: EmergencyContactSchema
    documents: List[DocumentSchema]
    review_info: Optional[ReviewInfoSchema] = None
    allowed_actions: List[str]
    created_at: datetime
    submitted_at: Optional[datetime] = None
    updated_at: datetime


class ApplicationListResponse(BaseModel):
    applications: List[ApplicationResponse]
    limit: int
    offset: int


class StatusStatsSchema(BaseModel):
    count: int
    avg_requested_amount: Money
    total_requested_amount: Money


class StatsResponse(BaseModel):
    """Response for GET /v1/applications/stats"""

    total: int
    recent_count: int
    by_status: Dict[str, StatusStatsSchema]


class InstallmentSchema(_FromDomain):
    period: int
    payment: Money
    interest: Money
    principal: Money
    balance: Money


class QuoteResponse(_FromDomain):
    """Loan economics for a partner, or why they cannot be computed"""

    computable: bool
    partner_id: str
    reason: Optional[str] = None
    annual_rate: Optional[Money] = None
    term_months: Optional[int] = None
    principal: Optional[Money] = None
    monthly_payment: Optional[Money] = None
    total_payment: Optional[Money] = None
    total_interest: Optional[Money] = None
    schedule: Optional[List[InstallmentSchema]] = None


class SimulateResponse(BaseModel):
    vehicle_price: Money
    down_payment: Money
    term_months: int
    quotes: List[QuoteResponse]


class PartnerSchema(_FromDomain):
    id: str
    name: str
    annual_rate: Money
    min_term: int
    max_term: int
    min_vehicle_year: Optional[int] = None
    max_vehicle_age_years: Optional[int] = None
    requirements: List[str] = []
    processing_days: Optional[int] = None


class PartnersResponse(BaseModel):
    """Response for GET /v1/partners"""

    vehicle_year: Optional[int] = None
    term_months: Optional[int] = None
    partners: List[PartnerSchema]


class PartnerSummaryResponse(BaseModel):
    """Response for GET /v1/partners/summary"""

    total: int
    active: int
    avg_rate: Money
    min_rate: Money
    max_rate: Money
