"""Translation of domain errors into HTTP errors"""

from fastapi import HTTPException
from vehicle_credit.domain.exceptions import DomainException, ValidationError


def http_error(status_code: int, error: DomainException) -> HTTPException:
    """HTTPException whose detail follows ErrorResponse; validation errors carry their violations"""
    violations = []
    if isinstance(error, ValidationError):
        violations = [{"field": v.field, "message": v.message} for v in error.violations]
    return HTTPException(status_code=status_code, detail={"message": str(error), "violations": violations})
