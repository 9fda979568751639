"""Display labels for enum values; presentation only, never consulted by the domain"""

from vehicle_credit.domain.models import (
    AccountType,
    ApplicationStatus,
    DocumentType,
    EmploymentType,
    MaritalStatus,
    RejectionReason,
)

STATUS_LABELS = {
    ApplicationStatus.PENDING: "Pending",
    ApplicationStatus.UNDER_REVIEW: "Under review",
    ApplicationStatus.APPROVED: "Approved",
    ApplicationStatus.REJECTED: "Rejected",
    ApplicationStatus.CANCELLED: "Cancelled",
}

REJECTION_REASON_LABELS = {
    RejectionReason.INSUFFICIENT_INCOME: "Insufficient income",
    RejectionReason.POOR_CREDIT_HISTORY: "Poor credit history",
    RejectionReason.INCOMPLETE_DOCUMENTATION: "Incomplete documentation",
    RejectionReason.HIGH_DEBT_RATIO: "Debt-to-income ratio too high",
    RejectionReason.EMPLOYMENT_INSTABILITY: "Employment instability",
    RejectionReason.OTHER: "Other reason",
}

EMPLOYMENT_TYPE_LABELS = {
    EmploymentType.EMPLOYEE: "Employee",
    EmploymentType.SELF_EMPLOYED: "Self-employed",
    EmploymentType.BUSINESS_OWNER: "Business owner",
    EmploymentType.RETIRED: "Retired",
    EmploymentType.UNEMPLOYED: "Unemployed",
}

MARITAL_STATUS_LABELS = {
    MaritalStatus.SINGLE: "Single",
    MaritalStatus.MARRIED: "Married",
    MaritalStatus.DIVORCED: "Divorced",
    MaritalStatus.WIDOWED: "Widowed",
}

ACCOUNT_TYPE_LABELS = {
    AccountType.CHECKING: "Checking account",
    AccountType.SAVINGS: "Savings account",
}

DOCUMENT_TYPE_LABELS = {
    DocumentType.IDENTIFICATION: "Official identification",
    DocumentType.INCOME_PROOF: "Proof of income",
    DocumentType.ADDRESS_PROOF: "Proof of address",
    DocumentType.BANK_STATEMENT: "Bank statement",
    DocumentType.OTHER: "Other",
}


def label(table: dict, value) -> str:
    """Label for a value, falling back to its raw string"""
    return table.get(value, getattr(value, "value", str(value)))
