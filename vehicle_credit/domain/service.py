"""Credit application lifecycle: submission, review transitions and quotes"""

import logging
import uuid
from dataclasses import replace
from decimal import Decimal
from typing import Any, List, Mapping, Optional, Union
from vehicle_credit.domain import amortization
from vehicle_credit.domain.authorization import AuthorizationGate
from vehicle_credit.domain.exceptions import (
    DuplicateApplicationError,
    FieldViolation,
    ForbiddenError,
    IllegalTransitionError,
    NotFoundError,
    TransitionConflictError,
    ValidationError,
)
from vehicle_credit.domain.models import (
    ApplicationFilter,
    ApplicationStats,
    ApplicationStatus,
    ApprovedReview,
    CreditApplication,
    DocumentFile,
    Identity,
    LendingPartner,
    Page,
    Quote,
    RejectedReview,
    ReviewInfo,
)
from vehicle_credit.domain.ports import ApplicationStore
from vehicle_credit.domain.rate_catalog import RateCatalog
from vehicle_credit.domain.state_machine import Action, next_status
from vehicle_credit.domain.validation import (
    ApprovalPayload,
    DocumentPayload,
    RejectionPayload,
    parse_payload,
    parse_submission,
    to_emergency_contact,
    to_employment_info,
    to_financial_info,
    to_personal_info,
)
from vehicle_credit.utils.money import Number, round_money, to_decimal, utcnow

logger = logging.getLogger(__name__)

DEFAULT_MIN_DOWN_PAYMENT_RATIO = Decimal("0.30")


class CreditApplicationService:
    """
    Orchestrates the credit lifecycle.

    Request-scoped: holds no state between calls beyond its collaborators.
    Every status change goes through the store's conditional update so two
    concurrent reviewer decisions cannot both succeed.
    """

    def __init__(
        self,
        store: ApplicationStore,
        catalog: RateCatalog,
        gate: AuthorizationGate,
        min_down_payment_ratio: Decimal = DEFAULT_MIN_DOWN_PAYMENT_RATIO,
        conceal_forbidden_records: bool = False,
        max_page_size: int = 100,
    ):
        self.store = store
        self.catalog = catalog
        self.gate = gate
        self.min_down_payment_ratio = to_decimal(min_down_payment_ratio)
        self.conceal_forbidden_records = conceal_forbidden_records
        self.max_page_size = max_page_size

    # Submission

    def submit(
        self,
        applicant_id: str,
        payload: Mapping[str, Any],
        vehicle_price: Optional[Number] = None,
    ) -> CreditApplication:
        """
        Validate and create an application in `pending`.

        Raises:
            ValidationError: listing every violated field
            DuplicateApplicationError: an open application exists for the same listing
        """
        price = to_decimal(vehicle_price) if vehicle_price is not None else None
        submission = parse_submission(payload, vehicle_price=price)

        if submission.listing_id and self.store.has_open_application(applicant_id, submission.listing_id):
            raise DuplicateApplicationError(
                f"Applicant {applicant_id} already has an open application for listing {submission.listing_id}"
            )

        now = utcnow()
        application = CreditApplication(
            id=uuid.uuid4(),
            applicant_id=applicant_id,
            listing_id=submission.listing_id,
            personal_info=to_personal_info(submission.personal_info),
            employment_info=to_employment_info(submission.employment_info),
            financial_info=to_financial_info(submission.financial_info),
            emergency_contact=to_emergency_contact(submission.emergency_contact),
            documents=[_new_document(doc) for doc in submission.documents],
            status=ApplicationStatus.PENDING,
            created_at=now,
            submitted_at=now,
            updated_at=now,
        )
        return self.store.create(application)

    # Reads

    def get_application(self, application_id: uuid.UUID, identity: Identity) -> CreditApplication:
        return self._load_visible(application_id, identity)

    def list_applications(
        self,
        identity: Identity,
        filters: Optional[ApplicationFilter] = None,
        page: Optional[Page] = None,
    ) -> List[CreditApplication]:
        """Reviewers see every application; applicants only their own"""
        filters = filters or ApplicationFilter()
        page = page or Page()
        if not self.gate.can_review(identity):
            filters = replace(filters, applicant_id=identity.id)
        page = Page(limit=max(1, min(page.limit, self.max_page_size)), offset=max(0, page.offset))
        return self.store.find_many(filters, page)

    def statistics(self, identity: Identity) -> ApplicationStats:
        if not self.gate.can_review(identity):
            raise ForbiddenError("Only reviewers may read application statistics")
        return self.store.stats()

    # Lifecycle

    def transition(
        self,
        application_id: uuid.UUID,
        identity: Identity,
        action: Union[Action, str],
        payload: Optional[Mapping[str, Any]] = None,
    ) -> CreditApplication:
        """
        Apply a review or cancellation action.

        Order of checks:
        1. Application exists and is visible to the caller (NotFoundError / ForbiddenError)
        2. Review decisions require a reviewer who is not the applicant (ForbiddenError)
        3. Action is legal from the current status (IllegalTransitionError)
        4. Cancellation requires the owning applicant (ForbiddenError)
        5. Action payload is well-formed (ValidationError)
        6. Conditional update on the loaded status (TransitionConflictError on a lost race)
        """
        action = _parse_action(action)
        application = self._load_visible(application_id, identity)

        if action.is_review_decision:
            if not self.gate.can_review(identity):
                raise ForbiddenError(f"Identity {identity.id} may not {action.value} applications")
            if identity.id == application.applicant_id:
                raise ForbiddenError("Reviewers cannot decide on their own application")

        target = next_status(application.status, action)

        if action is Action.CANCEL and not self.gate.can_cancel(identity, application):
            raise ForbiddenError(f"Identity {identity.id} may not cancel application {application.id}")

        review_info = self._review_info(action, identity, payload)

        updated = self.store.update_status(application.id, application.status, target, review_info)
        if updated is None:
            logger.warning(
                "Transition lost to a concurrent update",
                extra={"application_id": str(application.id), "action": action.value},
            )
            raise TransitionConflictError(
                f"Application {application.id} is no longer {application.status.value}; reload and retry"
            )
        return updated

    def add_document(
        self,
        application_id: uuid.UUID,
        identity: Identity,
        payload: Mapping[str, Any],
    ) -> CreditApplication:
        """Append a document reference; only the applicant, only while the application is open"""
        application = self._load_visible(application_id, identity)
        if identity.id != application.applicant_id:
            raise ForbiddenError("Only the applicant may attach documents")
        if application.status.is_terminal:
            raise IllegalTransitionError(f"Application {application.id} is {application.status.value}")

        document = _new_document(parse_payload(DocumentPayload, payload))
        updated = self.store.append_document(application.id, document)
        if updated is None:
            raise TransitionConflictError(f"Application {application.id} was closed before the document was attached")
        return updated

    # Quotes

    def quote(
        self,
        vehicle_price: Number,
        down_payment: Number,
        term_months: int,
        partner_id: str,
        vehicle_year: Optional[int] = None,
        include_schedule: bool = False,
    ) -> Quote:
        """
        Loan economics for one partner.

        Out-of-policy inputs are an expected simulator state, so they yield
        Quote(computable=False, reason=...) instead of raising.

        Raises:
            NotFoundError: unknown partner
        """
        partner = self.catalog.get(partner_id)
        price = to_decimal(vehicle_price)
        down = to_decimal(down_payment)

        reason = self._quote_blocker(partner, price, down, term_months, vehicle_year)
        if reason is not None:
            return Quote(
                computable=False,
                partner_id=partner.id,
                reason=reason,
                annual_rate=partner.annual_rate,
                term_months=term_months,
            )

        principal = price - down
        monthly = amortization.monthly_payment(principal, partner.annual_rate, term_months)
        total = amortization.total_payment(down, monthly, term_months)
        schedule = (
            amortization.amortization_schedule(principal, partner.annual_rate, term_months)
            if include_schedule
            else None
        )
        return Quote(
            computable=True,
            partner_id=partner.id,
            annual_rate=partner.annual_rate,
            term_months=term_months,
            principal=round_money(principal),
            monthly_payment=monthly,
            total_payment=total,
            total_interest=amortization.total_interest(total, price),
            schedule=schedule,
        )

    def simulate(
        self,
        vehicle_price: Number,
        down_payment: Number,
        term_months: int,
        vehicle_year: Optional[int] = None,
    ) -> List[Quote]:
        """Quote every partner eligible for the vehicle, best rate first"""
        return [
            self.quote(vehicle_price, down_payment, term_months, partner.id, vehicle_year)
            for partner in self.catalog.find_eligible(vehicle_year)
        ]

    def _quote_blocker(
        self,
        partner: LendingPartner,
        price: Decimal,
        down: Decimal,
        term_months: int,
        vehicle_year: Optional[int],
    ) -> Optional[str]:
        if not partner.is_active:
            return "lending partner is not active"
        if not price.is_finite() or price <= 0:
            return "vehicle_price must be positive"
        if not down.is_finite():
            return "down_payment must be a finite amount"
        minimum_down = price * self.min_down_payment_ratio
        if down < minimum_down:
            return f"down_payment must be at least {round_money(minimum_down)}"
        if down > price:
            return "down_payment exceeds vehicle_price"
        if not self.catalog.term_is_valid(partner.id, term_months):
            return f"term_months must be between {partner.min_term} and {partner.max_term}"
        if vehicle_year is not None and not self.catalog.accepts(partner, vehicle_year):
            return f"vehicle year {vehicle_year} is not financed by {partner.name}"
        return None

    # Helpers

    def _load_visible(self, application_id: uuid.UUID, identity: Identity) -> CreditApplication:
        application = self.store.find_by_id(application_id)
        if application is None:
            raise NotFoundError(f"Application {application_id} not found")
        if not self.gate.can_view(identity, application):
            if self.conceal_forbidden_records:
                raise NotFoundError(f"Application {application_id} not found")
            raise ForbiddenError(f"Identity {identity.id} may not view application {application_id}")
        return application

    def _review_info(
        self,
        action: Action,
        identity: Identity,
        payload: Optional[Mapping[str, Any]],
    ) -> Optional[ReviewInfo]:
        if action is Action.APPROVE:
            approval = parse_payload(ApprovalPayload, payload)
            return ApprovedReview(
                reviewer_id=identity.id,
                reviewed_at=utcnow(),
                approved_amount=approval.approved_amount,
                approved_term=approval.approved_term,
                interest_rate=approval.interest_rate,
                monthly_payment=amortization.monthly_payment(
                    approval.approved_amount, approval.interest_rate, approval.approved_term
                ),
                comments=approval.comments,
            )
        if action is Action.REJECT:
            rejection = parse_payload(RejectionPayload, payload)
            return RejectedReview(
                reviewer_id=identity.id,
                reviewed_at=utcnow(),
                rejection_reason=rejection.rejection_reason,
                comments=rejection.comments,
            )
        return None


def _parse_action(action: Union[Action, str]) -> Action:
    try:
        return Action(action)
    except ValueError:
        raise ValidationError([FieldViolation(field="action", message=f"unknown action {action!r}")])


def _new_document(payload: DocumentPayload) -> DocumentFile:
    return DocumentFile(
        id=uuid.uuid4().hex,
        type=payload.type,
        name=payload.name,
        url=payload.url,
        size=payload.size,
        uploaded_at=utcnow(),
    )
