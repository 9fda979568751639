"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.orm import Session
from vehicle_credit.config import settings
from vehicle_credit.domain.authorization import AuthorizationGate, RoleAuthorizationGate
from vehicle_credit.domain.models import Identity
from vehicle_credit.domain.rate_catalog import RateCatalog
from vehicle_credit.domain.service import CreditApplicationService
from vehicle_credit.infrastructure.clients.listings import ListingClient
from vehicle_credit.infrastructure.database.repositories import ApplicationRepository, LendingPartnerRepository
from vehicle_credit.infrastructure.database.session import get_db


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_identity(
    x_user_id: str | None = Header(None),
    x_user_role: str = Header("user"),
) -> Identity:
    """Verified identity forwarded by the upstream auth proxy"""
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    return Identity(id=x_user_id, role=x_user_role)


def get_listing_client() -> ListingClient:
    """Provide Listing API client instance"""
    return ListingClient()


def get_authorization_gate() -> AuthorizationGate:
    return RoleAuthorizationGate(settings.reviewer_roles)


def get_rate_catalog(db: Session = Depends(get_db)) -> RateCatalog:
    """Catalog snapshot for the duration of one request"""
    return RateCatalog(LendingPartnerRepository(db).list_all())


def get_credit_service(
    db: Session = Depends(get_db),
    catalog: RateCatalog = Depends(get_rate_catalog),
    gate: AuthorizationGate = Depends(get_authorization_gate),
) -> CreditApplicationService:
    return CreditApplicationService(
        store=ApplicationRepository(db),
        catalog=catalog,
        gate=gate,
        min_down_payment_ratio=settings.min_down_payment_ratio,
        conceal_forbidden_records=settings.conceal_forbidden_records,
        max_page_size=settings.max_page_size,
    )
