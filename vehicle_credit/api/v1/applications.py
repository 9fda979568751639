"""/v1/applications - credit application lifecycle endpoints"""

import logging
import uuid
from datetime import datetime
from typing import Any, Dict, Optional
from fastapi import APIRouter, Body, Depends, HTTPException, Query, Request

from vehicle_credit.api.dependencies import get_credit_service, get_identity, get_listing_client, get_request_id
from vehicle_credit.api.v1.errors import http_error
from vehicle_credit.api.v1.labels import DOCUMENT_TYPE_LABELS, REJECTION_REASON_LABELS, STATUS_LABELS, label
from vehicle_credit.api.v1.schemas import (
    ApplicationListResponse,
    ApplicationResponse,
    DocumentSchema,
    EmergencyContactSchema,
    EmploymentInfoSchema,
    FinancialInfoSchema,
    PersonalInfoSchema,
    ReviewInfoSchema,
    StatsResponse,
    StatusStatsSchema,
    TransitionRequest,
)
from vehicle_credit.domain.exceptions import (
    DuplicateApplicationError,
    ForbiddenError,
    IllegalTransitionError,
    ListingAPIError,
    NotFoundError,
    TransitionConflictError,
    ValidationError,
)
from vehicle_credit.domain.models import (
    ApplicationFilter,
    ApplicationStatus,
    ApprovedReview,
    CreditApplication,
    Identity,
    Page,
    RejectedReview,
)
from vehicle_credit.domain.service import CreditApplicationService
from vehicle_credit.domain.state_machine import Action, allowed_actions
from vehicle_credit.infrastructure.clients.listings import ListingClient
from vehicle_credit.infrastructure.observability.logging import log_submission, log_transition
from vehicle_credit.infrastructure.observability.metrics import (
    listing_fetch_failures_counter,
    record_transition,
    submission_counter,
)
from vehicle_credit.config import settings

router = APIRouter()


def _parse_id(application_id: str) -> uuid.UUID:
    try:
        return uuid.UUID(application_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid application ID format")


def _review_schema(application: CreditApplication) -> Optional[ReviewInfoSchema]:
    review = application.review_info
    if isinstance(review, ApprovedReview):
        return ReviewInfoSchema(
            kind=review.kind,
            reviewer_id=review.reviewer_id,
            reviewed_at=review.reviewed_at,
            approved_amount=review.approved_amount,
            approved_term=review.approved_term,
            interest_rate=review.interest_rate,
            monthly_payment=review.monthly_payment,
            comments=review.comments,
        )
    if isinstance(review, RejectedReview):
        return ReviewInfoSchema(
            kind=review.kind,
            reviewer_id=review.reviewer_id,
            reviewed_at=review.reviewed_at,
            rejection_reason=review.rejection_reason,
            rejection_reason_label=label(REJECTION_REASON_LABELS, review.rejection_reason),
            comments=review.comments,
        )
    return None


def to_response(application: CreditApplication) -> ApplicationResponse:
    return ApplicationResponse(
        id=str(application.id),
        applicant_id=application.applicant_id,
        listing_id=application.listing_id,
        status=application.status,
        status_label=label(STATUS_LABELS, application.status),
        personal_info=PersonalInfoSchema.model_validate(application.personal_info),
        employment_info=EmploymentInfoSchema.model_validate(application.employment_info),
        financial_info=FinancialInfoSchema.model_validate(application.financial_info),
        emergency_contact=EmergencyContactSchema.model_validate(application.emergency_contact),
        documents=[
            DocumentSchema(
                id=doc.id,
                type=doc.type,
                type_label=label(DOCUMENT_TYPE_LABELS, doc.type),
                name=doc.name,
                url=doc.url,
                size=doc.size,
                uploaded_at=doc.uploaded_at,
            )
            for doc in application.documents
        ],
        review_info=_review_schema(application),
        allowed_actions=[a.value for a in allowed_actions(application.status)],
        created_at=application.created_at,
        submitted_at=application.submitted_at,
        updated_at=application.updated_at,
    )


@router.post("/applications", response_model=ApplicationResponse, status_code=201)
async def submit_application(
    request: Request,
    payload: Dict[str, Any] = Body(...),
    identity: Identity = Depends(get_identity),
    service: CreditApplicationService = Depends(get_credit_service),
    listing_client: ListingClient = Depends(get_listing_client),
):
    """
    Submit a credit application in `pending`.

    When the payload references a listing, its price bounds the down payment.
    Every invalid field is reported in one 422 response.
    """
    request_id = get_request_id(request)

    try:
        vehicle_price = None
        listing_id = payload.get("listing_id")
        if listing_id:
            vehicle = await listing_client.get_vehicle(str(listing_id))
            vehicle_price = vehicle.price

        application = service.submit(identity.id, payload, vehicle_price=vehicle_price)

    except ValidationError as e:
        raise http_error(422, e)

    except DuplicateApplicationError as e:
        raise http_error(409, e)

    except NotFoundError as e:
        raise http_error(404, e)

    except ListingAPIError as e:
        listing_fetch_failures_counter.inc()
        logging.error(f"Listing API error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Listing service unavailable")

    submission_counter.inc()
    log_submission(request_id, str(application.id), identity.id, application.listing_id)
    return to_response(application)


@router.get("/applications", response_model=ApplicationListResponse)
def list_applications(
    status: Optional[ApplicationStatus] = Query(None),
    search: Optional[str] = Query(None, description="Matches name, email, phone or national id"),
    applicant_id: Optional[str] = Query(None),
    listing_id: Optional[str] = Query(None),
    created_from: Optional[datetime] = Query(None),
    created_to: Optional[datetime] = Query(None),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    offset: int = Query(0, ge=0),
    identity: Identity = Depends(get_identity),
    service: CreditApplicationService = Depends(get_credit_service),
):
    """Reviewers list every application; applicants get their own only"""
    filters = ApplicationFilter(
        status=status,
        applicant_id=applicant_id,
        listing_id=listing_id,
        search=search,
        created_from=created_from,
        created_to=created_to,
    )
    page = Page(limit=limit, offset=offset)
    applications = service.list_applications(identity, filters, page)

    return ApplicationListResponse(
        applications=[to_response(a) for a in applications],
        limit=limit,
        offset=offset,
    )


@router.get("/applications/stats", response_model=StatsResponse)
def get_application_stats(
    identity: Identity = Depends(get_identity),
    service: CreditApplicationService = Depends(get_credit_service),
):
    """Per-status counts and requested amounts (reviewers only)"""
    try:
        stats = service.statistics(identity)
    except ForbiddenError as e:
        raise http_error(403, e)

    return StatsResponse(
        total=stats.total,
        recent_count=stats.recent_count,
        by_status={
            status.value: StatusStatsSchema(
                count=s.count,
                avg_requested_amount=s.avg_requested_amount,
                total_requested_amount=s.total_requested_amount,
            )
            for status, s in stats.by_status.items()
        },
    )


@router.get("/applications/{application_id}", response_model=ApplicationResponse)
def get_application(
    application_id: str,
    identity: Identity = Depends(get_identity),
    service: CreditApplicationService = Depends(get_credit_service),
):
    try:
        application = service.get_application(_parse_id(application_id), identity)
    except NotFoundError as e:
        raise http_error(404, e)
    except ForbiddenError as e:
        raise http_error(403, e)

    return to_response(application)


@router.post("/applications/{application_id}/transitions", response_model=ApplicationResponse)
def transition_application(
    application_id: str,
    body: TransitionRequest,
    request: Request,
    identity: Identity = Depends(get_identity),
    service: CreditApplicationService = Depends(get_credit_service),
):
    """
    Move an application through the review lifecycle.

    Status codes:
    - 403: caller may not perform the action
    - 404: unknown application
    - 409: action not allowed from the current status, or lost to a concurrent action
    - 422: missing or invalid action fields
    """
    request_id = get_request_id(request)
    app_uuid = _parse_id(application_id)
    action = body.action if body.action in {a.value for a in Action} else "unknown"

    try:
        application = service.transition(app_uuid, identity, body.action, body.payload)

    except NotFoundError as e:
        record_transition(action, "not_found")
        raise http_error(404, e)

    except ForbiddenError as e:
        record_transition(action, "forbidden")
        log_transition(request_id, application_id, identity.id, action, "forbidden")
        raise http_error(403, e)

    except TransitionConflictError as e:
        record_transition(action, "conflict")
        log_transition(request_id, application_id, identity.id, action, "conflict")
        raise http_error(409, e)

    except IllegalTransitionError as e:
        record_transition(action, "illegal")
        raise http_error(409, e)

    except ValidationError as e:
        record_transition(action, "invalid")
        raise http_error(422, e)

    approved_amount = None
    if isinstance(application.review_info, ApprovedReview):
        approved_amount = float(application.review_info.approved_amount)

    record_transition(action, "applied", approved_amount)
    log_transition(request_id, application_id, identity.id, action, "applied", application.status.value)
    return to_response(application)


@router.post("/applications/{application_id}/documents", response_model=ApplicationResponse, status_code=201)
def add_document(
    application_id: str,
    payload: Dict[str, Any] = Body(...),
    identity: Identity = Depends(get_identity),
    service: CreditApplicationService = Depends(get_credit_service),
):
    """Attach a blob-store document reference to an open application"""
    try:
        application = service.add_document(_parse_id(application_id), identity, payload)
    except NotFoundError as e:
        raise http_error(404, e)
    except ForbiddenError as e:
        raise http_error(403, e)
    except IllegalTransitionError as e:
        raise http_error(409, e)
    except ValidationError as e:
        raise http_error(422, e)

    return to_response(application)
