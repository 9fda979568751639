"""Unit tests for submission and review payload validation"""

import pytest
from datetime import date, timedelta
from decimal import Decimal
from vehicle_credit.domain.exceptions import ValidationError
from vehicle_credit.domain.models import RejectionReason
from vehicle_credit.domain.validation import (
    ApprovalPayload,
    RejectionPayload,
    parse_payload,
    parse_submission,
    to_personal_info,
)


def test_valid_submission(sample_payload):
    """Test a complete payload parses"""
    submission = parse_submission(sample_payload)
    assert submission.financial_info.requested_amount == Decimal("250000")
    assert len(submission.documents) == 1


def test_phones_normalized_to_digits(sample_payload):
    """Test punctuation and spaces are stripped from phone numbers"""
    submission = parse_submission(sample_payload)
    assert submission.personal_info.phone == "5551234567"
    assert submission.emergency_contact.phone == "5559876543"


def test_national_id_uppercased(sample_payload):
    """Test identifiers are stored in canonical case"""
    personal = to_personal_info(parse_submission(sample_payload).personal_info)
    assert personal.national_id == "TOAA900517MDFRRN09"


def test_requested_amount_zero_rejected(sample_payload):
    """Test requested_amount must be positive"""
    sample_payload["financial_info"]["requested_amount"] = 0

    with pytest.raises(ValidationError) as exc_info:
        parse_submission(sample_payload)

    assert "financial_info.requested_amount" in exc_info.value.fields


def test_all_violations_reported_together(sample_payload):
    """Test every invalid field appears in one error"""
    sample_payload["personal_info"]["email"] = "not-an-email"
    sample_payload["personal_info"]["phone"] = "12345"
    sample_payload["employment_info"]["monthly_income"] = -1
    sample_payload["emergency_contact"]["name"] = "   "
    del sample_payload["financial_info"]["bank_name"]

    with pytest.raises(ValidationError) as exc_info:
        parse_submission(sample_payload)

    assert set(exc_info.value.fields) == {
        "personal_info.email",
        "personal_info.phone",
        "employment_info.monthly_income",
        "emergency_contact.name",
        "financial_info.bank_name",
    }


def test_missing_section(sample_payload):
    """Test a missing section is reported by name"""
    del sample_payload["emergency_contact"]

    with pytest.raises(ValidationError) as exc_info:
        parse_submission(sample_payload)

    assert exc_info.value.fields == ["emergency_contact"]


def test_national_id_length(sample_payload):
    """Test national id must be exactly 18 characters"""
    sample_payload["personal_info"]["national_id"] = "TOAA900517"

    with pytest.raises(ValidationError) as exc_info:
        parse_submission(sample_payload)

    assert exc_info.value.fields == ["personal_info.national_id"]


def test_date_of_birth_in_future(sample_payload):
    """Test birth date must be in the past"""
    sample_payload["personal_info"]["date_of_birth"] = (date.today() + timedelta(days=1)).isoformat()

    with pytest.raises(ValidationError) as exc_info:
        parse_submission(sample_payload)

    assert exc_info.value.violations[0].field == "personal_info.date_of_birth"
    assert exc_info.value.violations[0].message == "date_of_birth must be in the past"


def test_down_payment_exceeds_requested_amount(sample_payload):
    """Test down payment cannot exceed the requested amount"""
    sample_payload["financial_info"]["down_payment"] = 300000

    with pytest.raises(ValidationError) as exc_info:
        parse_submission(sample_payload)

    assert exc_info.value.fields == ["financial_info.down_payment"]


def test_down_payment_exceeds_vehicle_price(sample_payload):
    """Test down payment is bounded by the listing price when known"""
    with pytest.raises(ValidationError) as exc_info:
        parse_submission(sample_payload, vehicle_price=Decimal("80000"))

    assert exc_info.value.fields == ["financial_info.down_payment"]
    assert "vehicle price" in exc_info.value.violations[0].message


def test_invalid_enum(sample_payload):
    """Test unknown enum values are rejected"""
    sample_payload["employment_info"]["employment_type"] = "astronaut"

    with pytest.raises(ValidationError) as exc_info:
        parse_submission(sample_payload)

    assert exc_info.value.fields == ["employment_info.employment_type"]


def test_document_url_must_be_http(sample_payload):
    """Test document references point at the blob store over http(s)"""
    sample_payload["documents"][0]["url"] = "file:///etc/passwd"

    with pytest.raises(ValidationError) as exc_info:
        parse_submission(sample_payload)

    assert exc_info.value.fields == ["documents.0.url"]


def test_optional_work_phone(sample_payload):
    """Test work phone is optional but validated when present"""
    assert parse_submission(sample_payload).employment_info.work_phone is None

    sample_payload["employment_info"]["work_phone"] = "555 000 1111"
    assert parse_submission(sample_payload).employment_info.work_phone == "5550001111"


def test_approval_payload():
    """Test approval needs positive amount and term and a non-negative rate"""
    approval = parse_payload(ApprovalPayload, {"approved_amount": 250000, "approved_term": 48, "interest_rate": 0})
    assert approval.interest_rate == 0

    with pytest.raises(ValidationError) as exc_info:
        parse_payload(ApprovalPayload, {"approved_amount": 0, "approved_term": 0, "interest_rate": -1})

    assert set(exc_info.value.fields) == {"approved_amount", "approved_term", "interest_rate"}


def test_approval_payload_upper_bounds():
    """Test approval terms are capped at 600 months and rates at 100%"""
    at_cap = parse_payload(ApprovalPayload, {"approved_amount": 1000, "approved_term": 600, "interest_rate": 100})
    assert at_cap.approved_term == 600

    with pytest.raises(ValidationError) as exc_info:
        parse_payload(ApprovalPayload, {"approved_amount": 1000, "approved_term": 601, "interest_rate": "100.01"})

    assert set(exc_info.value.fields) == {"approved_term", "interest_rate"}


def test_rejection_payload():
    """Test rejection needs a known reason"""
    rejection = parse_payload(RejectionPayload, {"rejection_reason": "insufficient_income"})
    assert rejection.rejection_reason == RejectionReason.INSUFFICIENT_INCOME

    with pytest.raises(ValidationError) as exc_info:
        parse_payload(RejectionPayload, None)

    assert exc_info.value.fields == ["rejection_reason"]
