"""Pytest fixtures for testing"""

import pytest
from datetime import date
from decimal import Decimal
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from vehicle_credit.api.dependencies import get_listing_client
from vehicle_credit.api.main import create_app
from vehicle_credit.domain.authorization import RoleAuthorizationGate
from vehicle_credit.domain.exceptions import ListingAPIError, NotFoundError
from vehicle_credit.domain.models import LendingPartner
from vehicle_credit.domain.rate_catalog import RateCatalog
from vehicle_credit.domain.service import CreditApplicationService
from vehicle_credit.infrastructure.clients.listings import VehicleListing
from vehicle_credit.infrastructure.database.models import Base
from vehicle_credit.infrastructure.database.repositories import ApplicationRepository, LendingPartnerRepository
from vehicle_credit.infrastructure.database.session import engine_options, get_db, init_db


# Test database
TEST_DATABASE_URL = "sqlite://"
engine = create_engine(TEST_DATABASE_URL, **engine_options(TEST_DATABASE_URL))
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

REVIEWER_ROLES = ["reviewer", "admin", "superadmin"]
CATALOG_YEAR = 2026

PARTNERS = [
    LendingPartner(
        id="banco-norte",
        name="Banco Norte",
        annual_rate=Decimal("12"),
        min_term=12,
        max_term=72,
        max_vehicle_age_years=10,
        requirements=["Proof of income", "Official ID"],
        processing_days=3,
    ),
    LendingPartner(
        id="credito-sur",
        name="Credito Sur",
        annual_rate=Decimal("10.5"),
        min_term=12,
        max_term=48,
        min_vehicle_year=2018,
    ),
    LendingPartner(
        id="financiera-este",
        name="Financiera Este",
        annual_rate=Decimal("15"),
        min_term=6,
        max_term=60,
    ),
    LendingPartner(
        id="auto-capital",
        name="Auto Capital",
        annual_rate=Decimal("12"),
        min_term=24,
        max_term=84,
    ),
    LendingPartner(
        id="banco-inactivo",
        name="Banco Inactivo",
        annual_rate=Decimal("9"),
        min_term=12,
        max_term=60,
        is_active=False,
    ),
]


class FakeListingClient:
    """Listing API stand-in serving a fixed set of listings"""

    def __init__(self, listings: dict[str, VehicleListing], unavailable: bool = False):
        self.listings = listings
        self.unavailable = unavailable

    async def get_vehicle(self, listing_id: str) -> VehicleListing:
        if self.unavailable:
            raise ListingAPIError("Listing API timeout after 5.0s")
        if listing_id not in self.listings:
            raise NotFoundError(f"Listing {listing_id} not found")
        return self.listings[listing_id]


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    init_db(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def partners(db: Session) -> list[LendingPartner]:
    """Seed the rate catalog"""
    repo = LendingPartnerRepository(db)
    for partner in PARTNERS:
        repo.upsert(partner)
    return PARTNERS


@pytest.fixture
def catalog() -> RateCatalog:
    return RateCatalog(PARTNERS, current_year=CATALOG_YEAR)


@pytest.fixture
def service(db: Session, catalog: RateCatalog) -> CreditApplicationService:
    """Credit service over the test database"""
    return CreditApplicationService(
        store=ApplicationRepository(db),
        catalog=catalog,
        gate=RoleAuthorizationGate(REVIEWER_ROLES),
    )


@pytest.fixture
def listing_client() -> FakeListingClient:
    this_year = date.today().year
    return FakeListingClient(
        {
            "listing-1": VehicleListing(listing_id="listing-1", year=this_year - 2, price=Decimal("300000")),
            "listing-2": VehicleListing(listing_id="listing-2", year=this_year - 1, price=Decimal("150000")),
        }
    )


@pytest.fixture
def client(db: Session, partners: list[LendingPartner], listing_client: FakeListingClient) -> TestClient:
    """Create FastAPI test client with test database and listing API"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_listing_client] = lambda: listing_client
    return TestClient(app)


@pytest.fixture
def sample_payload() -> dict:
    """Complete, valid submission body"""
    return {
        "personal_info": {
            "full_name": "Ana Torres",
            "email": "ana.torres@example.com",
            "phone": "555-123-4567",
            "date_of_birth": "1990-05-17",
            "national_id": "toaa900517mdfrrn09",
            "marital_status": "single",
            "dependents": 1,
        },
        "employment_info": {
            "employment_type": "employee",
            "company_name": "Acme Logistics",
            "position": "Analyst",
            "monthly_income": 45000,
            "work_experience_years": 5,
        },
        "financial_info": {
            "requested_amount": 250000,
            "down_payment": 90000,
            "preferred_term": 48,
            "monthly_expenses": 15000,
            "other_debts": 2000,
            "bank_name": "Banco Norte",
            "account_type": "checking",
        },
        "emergency_contact": {
            "name": "Luis Torres",
            "relationship": "brother",
            "phone": "(555) 987 6543",
        },
        "documents": [
            {
                "type": "identification",
                "name": "ine.pdf",
                "url": "https://blobs.example.com/docs/ine.pdf",
                "size": 120394,
            }
        ],
    }
