"""Lending partner catalog: eligibility by vehicle year and term envelopes"""

from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional
from vehicle_credit.domain.exceptions import NotFoundError
from vehicle_credit.domain.models import LendingPartner


def _offer_order(partner: LendingPartner) -> tuple:
    # Best rate first, id breaks ties so equal rates list deterministically
    return (partner.annual_rate, partner.id)


class RateCatalog:
    """Read-only view over the lending partners administered by the platform"""

    def __init__(self, partners: Iterable[LendingPartner], current_year: int | None = None):
        self._partners: Dict[str, LendingPartner] = {p.id: p for p in partners}
        self.current_year = current_year or date.today().year

    def get(self, partner_id: str) -> LendingPartner:
        partner = self._partners.get(partner_id)
        if partner is None:
            raise NotFoundError(f"Lending partner {partner_id} not found")
        return partner

    def accepts(self, partner: LendingPartner, vehicle_year: Optional[int]) -> bool:
        if not partner.is_active:
            return False
        if vehicle_year is None:
            return True
        return partner.accepts_vehicle_year(vehicle_year, self.current_year)

    def find_eligible(self, vehicle_year: Optional[int] = None) -> List[LendingPartner]:
        """
        Active partners, best offer first.

        With a vehicle year only partners financing that year are returned;
        without one every active partner is usable by the generic simulator.
        """
        eligible = [p for p in self._partners.values() if self.accepts(p, vehicle_year)]
        return sorted(eligible, key=_offer_order)

    def term_is_valid(self, partner_id: str, term_months: int) -> bool:
        return self.get(partner_id).covers_term(term_months)

    def best_matches(self, term_months: int, vehicle_year: Optional[int] = None, limit: int = 3) -> List[LendingPartner]:
        """Top offers whose term envelope covers the requested term"""
        matches = [p for p in self.find_eligible(vehicle_year) if p.covers_term(term_months)]
        return matches[:limit]

    def summary(self) -> dict:
        partners = list(self._partners.values())
        rates = [p.annual_rate for p in partners]
        return {
            "total": len(partners),
            "active": sum(1 for p in partners if p.is_active),
            "avg_rate": (sum(rates, Decimal(0)) / len(rates)) if rates else Decimal(0),
            "min_rate": min(rates) if rates else Decimal(0),
            "max_rate": max(rates) if rates else Decimal(0),
        }
