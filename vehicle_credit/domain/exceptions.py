"""Domain-specific exceptions"""

from dataclasses import dataclass
from typing import List


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


@dataclass(frozen=True)
class FieldViolation:
    """One rejected field of a submission or review payload"""

    field: str
    message: str


class ValidationError(DomainException):
    """Submission or action payload is malformed; carries every violation"""

    def __init__(self, violations: List[FieldViolation]):
        self.violations = list(violations)
        fields = ", ".join(v.field for v in self.violations)
        super().__init__(f"Invalid fields: {fields}")

    @property
    def fields(self) -> List[str]:
        return [v.field for v in self.violations]


class NotFoundError(DomainException):
    """Unknown application or lending partner"""

    pass


class ForbiddenError(DomainException):
    """Authorization gate denied the acting identity"""

    pass


class IllegalTransitionError(DomainException):
    """Transition not permitted from the current status, or lost to a concurrent one"""

    pass


class DuplicateApplicationError(DomainException):
    """Applicant already has an open application for the same listing"""

    pass


class InvalidInputError(DomainException):
    """Amortization math called with negative or zero inputs"""

    pass


class ListingAPIError(DomainException):
    """Listing API returned an error or is unavailable"""

    pass


class TransitionConflictError(IllegalTransitionError):
    """Another transition changed the status between load and conditional update"""

    pass
