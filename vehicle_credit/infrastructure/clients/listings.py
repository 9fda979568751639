"""Listing API HTTP client for vehicle year and price lookups"""

import httpx
from dataclasses import dataclass
from decimal import Decimal
from vehicle_credit.domain.exceptions import ListingAPIError, NotFoundError
from vehicle_credit.config import settings


@dataclass(frozen=True)
class VehicleListing:
    """The parts of a marketplace listing the credit engine cares about"""

    listing_id: str
    year: int
    price: Decimal


class ListingClient:
    """Client for the marketplace listing API"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url or settings.listing_api_base
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def get_vehicle(self, listing_id: str) -> VehicleListing:
        """
        Fetch manufacture year and price for a listing.

        Raises:
            NotFoundError: listing does not exist
            ListingAPIError: On timeout, HTTP errors, or invalid response
        """
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.get(f"{self.base_url}/listings/{listing_id}")
                if response.status_code == 404:
                    raise NotFoundError(f"Listing {listing_id} not found")
                response.raise_for_status()
                data = response.json()

                price = Decimal(str(data["price"]))
                if not price.is_finite() or price < 0:
                    raise ValueError(f"price {price} is not a finite non-negative amount")

                return VehicleListing(listing_id=listing_id, year=int(data["year"]), price=price)

            except httpx.TimeoutException as e:
                raise ListingAPIError(f"Listing API timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise ListingAPIError(f"Listing API error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise ListingAPIError(f"Listing API unreachable: {e}") from e
            except (KeyError, ValueError, TypeError, ArithmeticError) as e:
                raise ListingAPIError(f"Invalid listing data: {e}") from e
