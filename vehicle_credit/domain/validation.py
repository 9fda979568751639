"""Payload validation for submissions, review decisions and document uploads.

Payloads arrive as plain mappings from the transport layer and are checked with
Pydantic so that every violated field is reported in a single pass. Pydantic's
own error is translated into the domain ValidationError at this boundary.
"""

import re
from datetime import date
from decimal import Decimal
from typing import Any, List, Mapping, Optional, Type, TypeVar
from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic import ValidationError as PydanticValidationError
from vehicle_credit.domain.exceptions import FieldViolation, ValidationError
from vehicle_credit.domain.models import (
    AccountType,
    DocumentType,
    EmergencyContact,
    EmploymentInfo,
    EmploymentType,
    FinancialInfo,
    MaritalStatus,
    PersonalInfo,
    RejectionReason,
)

PHONE_DIGITS = 10
NATIONAL_ID_LENGTH = 18
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
MAX_APPROVED_TERM = 600  # months
MAX_ANNUAL_RATE = Decimal(100)  # percent

M = TypeVar("M", bound=BaseModel)


def _normalize_phone(value: str) -> str:
    digits = re.sub(r"\D", "", value)
    if len(digits) != PHONE_DIGITS:
        raise ValueError(f"phone must contain exactly {PHONE_DIGITS} digits")
    return digits


class _Payload(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")


class PersonalInfoPayload(_Payload):
    full_name: str = Field(..., min_length=1)
    email: str = Field(..., pattern=EMAIL_PATTERN)
    phone: str
    date_of_birth: date
    national_id: str = Field(..., min_length=NATIONAL_ID_LENGTH, max_length=NATIONAL_ID_LENGTH)
    tax_id: Optional[str] = None
    marital_status: MaritalStatus
    dependents: int = Field(0, ge=0)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, value: str) -> str:
        return _normalize_phone(value)

    @field_validator("date_of_birth")
    @classmethod
    def check_born_in_past(cls, value: date) -> date:
        if value >= date.today():
            raise ValueError("date_of_birth must be in the past")
        return value


class EmploymentInfoPayload(_Payload):
    employment_type: EmploymentType
    company_name: Optional[str] = None
    position: Optional[str] = None
    work_address: Optional[str] = None
    work_phone: Optional[str] = None
    monthly_income: Decimal = Field(..., ge=0)
    work_experience_years: int = Field(0, ge=0)

    @field_validator("work_phone")
    @classmethod
    def check_work_phone(cls, value: Optional[str]) -> Optional[str]:
        return _normalize_phone(value) if value else None


class FinancialInfoPayload(_Payload):
    requested_amount: Decimal = Field(..., gt=0)
    down_payment: Decimal = Field(..., ge=0)
    preferred_term: int = Field(..., gt=0)
    monthly_expenses: Decimal = Field(0, ge=0)
    other_debts: Decimal = Field(0, ge=0)
    bank_name: str = Field(..., min_length=1)
    account_type: AccountType

    @field_validator("down_payment")
    @classmethod
    def check_down_payment_bounds(cls, value: Decimal, info: ValidationInfo) -> Decimal:
        requested = info.data.get("requested_amount")
        if requested is not None and value > requested:
            raise ValueError("down_payment must not exceed requested_amount")
        vehicle_price = (info.context or {}).get("vehicle_price")
        if vehicle_price is not None and value > vehicle_price:
            raise ValueError("down_payment must not exceed the vehicle price")
        return value


class EmergencyContactPayload(_Payload):
    name: str = Field(..., min_length=1)
    relationship: str = Field(..., min_length=1)
    phone: str
    address: Optional[str] = None

    @field_validator("phone")
    @classmethod
    def check_phone(cls, value: str) -> str:
        return _normalize_phone(value)


class DocumentPayload(_Payload):
    type: DocumentType
    name: str = Field(..., min_length=1)
    url: str = Field(..., pattern=r"^https?://")
    size: int = Field(..., ge=0)


class SubmissionPayload(_Payload):
    listing_id: Optional[str] = None
    personal_info: PersonalInfoPayload
    employment_info: EmploymentInfoPayload
    financial_info: FinancialInfoPayload
    emergency_contact: EmergencyContactPayload
    documents: List[DocumentPayload] = Field(default_factory=list)


class ApprovalPayload(_Payload):
    approved_amount: Decimal = Field(..., gt=0)
    approved_term: int = Field(..., gt=0, le=MAX_APPROVED_TERM)
    interest_rate: Decimal = Field(..., ge=0, le=MAX_ANNUAL_RATE)
    comments: Optional[str] = None


class RejectionPayload(_Payload):
    rejection_reason: RejectionReason
    comments: Optional[str] = None


def _violations(error: PydanticValidationError) -> List[FieldViolation]:
    violations = []
    for err in error.errors():
        field = ".".join(str(part) for part in err["loc"]) or "payload"
        message = err["msg"].removeprefix("Value error, ")
        violations.append(FieldViolation(field=field, message=message))
    return violations


def parse_payload(model: Type[M], payload: Any, context: Optional[Mapping[str, Any]] = None) -> M:
    """
    Validate a raw payload against a model.

    Raises:
        ValidationError: with one FieldViolation per failing field
    """
    try:
        return model.model_validate(payload if payload is not None else {}, context=context)
    except PydanticValidationError as e:
        raise ValidationError(_violations(e)) from e


def parse_submission(payload: Any, vehicle_price: Optional[Decimal] = None) -> SubmissionPayload:
    return parse_payload(SubmissionPayload, payload, context={"vehicle_price": vehicle_price})


def to_personal_info(p: PersonalInfoPayload) -> PersonalInfo:
    return PersonalInfo(
        full_name=p.full_name,
        email=p.email,
        phone=p.phone,
        date_of_birth=p.date_of_birth,
        national_id=p.national_id.upper(),
        tax_id=p.tax_id.upper() if p.tax_id else None,
        marital_status=p.marital_status,
        dependents=p.dependents,
    )


def to_employment_info(p: EmploymentInfoPayload) -> EmploymentInfo:
    return EmploymentInfo(
        employment_type=p.employment_type,
        monthly_income=p.monthly_income,
        work_experience_years=p.work_experience_years,
        company_name=p.company_name,
        position=p.position,
        work_address=p.work_address,
        work_phone=p.work_phone,
    )


def to_financial_info(p: FinancialInfoPayload) -> FinancialInfo:
    return FinancialInfo(
        requested_amount=p.requested_amount,
        down_payment=p.down_payment,
        preferred_term=p.preferred_term,
        monthly_expenses=p.monthly_expenses,
        other_debts=p.other_debts,
        bank_name=p.bank_name,
        account_type=p.account_type,
    )


def to_emergency_contact(p: EmergencyContactPayload) -> EmergencyContact:
    return EmergencyContact(name=p.name, relationship=p.relationship, phone=p.phone, address=p.address)
