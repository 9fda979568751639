"""/v1/quote, /v1/simulate and /v1/partners - public financing simulator"""

import logging
from decimal import Decimal
from typing import Optional, Tuple
from fastapi import APIRouter, Depends, HTTPException, Query, Request

from vehicle_credit.api.dependencies import get_credit_service, get_listing_client, get_rate_catalog, get_request_id
from vehicle_credit.api.v1.errors import http_error
from vehicle_credit.api.v1.schemas import (
    PartnerSchema,
    PartnerSummaryResponse,
    PartnersResponse,
    QuoteRequest,
    QuoteResponse,
    SimulateRequest,
    SimulateResponse,
)
from vehicle_credit.config import settings
from vehicle_credit.domain.exceptions import InvalidInputError, ListingAPIError, NotFoundError
from vehicle_credit.domain.rate_catalog import RateCatalog
from vehicle_credit.domain.service import CreditApplicationService
from vehicle_credit.infrastructure.clients.listings import ListingClient
from vehicle_credit.infrastructure.observability.logging import log_quote
from vehicle_credit.infrastructure.observability.metrics import listing_fetch_failures_counter, record_quote

router = APIRouter()


async def _resolve_vehicle(
    listing_client: ListingClient,
    listing_id: Optional[str],
    vehicle_price: Optional[Decimal],
    vehicle_year: Optional[int],
    request_id: str,
) -> Tuple[Decimal, Optional[int]]:
    """Price and year from the listing when one is referenced, else from the request"""
    if listing_id:
        try:
            vehicle = await listing_client.get_vehicle(listing_id)
        except NotFoundError as e:
            raise http_error(404, e)
        except ListingAPIError as e:
            listing_fetch_failures_counter.inc()
            logging.error(f"Listing API error: {e}", extra={"request_id": request_id})
            raise HTTPException(status_code=503, detail="Listing service unavailable")
        return vehicle.price, vehicle.year

    if vehicle_price is None:
        raise HTTPException(status_code=422, detail="vehicle_price or listing_id is required")
    return vehicle_price, vehicle_year


@router.post("/quote", response_model=QuoteResponse)
async def quote(
    body: QuoteRequest,
    request: Request,
    service: CreditApplicationService = Depends(get_credit_service),
    listing_client: ListingClient = Depends(get_listing_client),
):
    """
    Monthly payment and totals for one lending partner.

    Inputs outside policy (down payment under the minimum ratio, term outside
    the partner's range, vehicle too old) answer 200 with computable=false.
    """
    request_id = get_request_id(request)
    price, year = await _resolve_vehicle(
        listing_client, body.listing_id, body.vehicle_price, body.vehicle_year, request_id
    )

    try:
        result = service.quote(
            price,
            body.down_payment,
            body.term_months,
            body.partner_id,
            vehicle_year=year,
            include_schedule=body.include_schedule,
        )
    except NotFoundError as e:
        raise http_error(404, e)
    except InvalidInputError as e:
        # Policy checks run first; reaching the calculator with bad input is a bug
        logging.error(f"Amortization contract violated: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    record_quote(result.computable)
    log_quote(request_id, result.partner_id, result.computable, result.reason)
    return QuoteResponse.model_validate(result)


@router.post("/simulate", response_model=SimulateResponse)
async def simulate(
    body: SimulateRequest,
    request: Request,
    service: CreditApplicationService = Depends(get_credit_service),
    listing_client: ListingClient = Depends(get_listing_client),
):
    """Quotes from every partner that finances the vehicle, best rate first"""
    request_id = get_request_id(request)
    price, year = await _resolve_vehicle(
        listing_client, body.listing_id, body.vehicle_price, body.vehicle_year, request_id
    )

    quotes = service.simulate(price, body.down_payment, body.term_months, vehicle_year=year)
    for q in quotes:
        record_quote(q.computable)

    return SimulateResponse(
        vehicle_price=price,
        down_payment=body.down_payment,
        term_months=body.term_months,
        quotes=[QuoteResponse.model_validate(q) for q in quotes],
    )


@router.get("/partners", response_model=PartnersResponse)
def list_partners(
    vehicle_year: Optional[int] = Query(None, description="Only partners financing this model year"),
    term_months: Optional[int] = Query(None, gt=0, description="Only partners offering this term"),
    catalog: RateCatalog = Depends(get_rate_catalog),
):
    """Active lending partners, best rate first"""
    if term_months is not None:
        partners = catalog.best_matches(term_months, vehicle_year, limit=settings.best_match_limit)
    else:
        partners = catalog.find_eligible(vehicle_year)

    return PartnersResponse(
        vehicle_year=vehicle_year,
        term_months=term_months,
        partners=[PartnerSchema.model_validate(p) for p in partners],
    )


@router.get("/partners/summary", response_model=PartnerSummaryResponse)
def partners_summary(catalog: RateCatalog = Depends(get_rate_catalog)):
    """Catalog size and rate range"""
    summary = catalog.summary()
    return PartnerSummaryResponse(**summary)
