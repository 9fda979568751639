"""Unit tests for the lending partner catalog"""

import pytest
from decimal import Decimal
from vehicle_credit.domain.exceptions import NotFoundError
from vehicle_credit.domain.models import LendingPartner
from vehicle_credit.domain.rate_catalog import RateCatalog


def ids(partners):
    return [p.id for p in partners]


def test_find_eligible_orders_by_rate_then_id(catalog: RateCatalog):
    """Test best rate first; equal rates fall back to partner id"""
    assert ids(catalog.find_eligible()) == ["credito-sur", "auto-capital", "banco-norte", "financiera-este"]


def test_find_eligible_excludes_inactive(catalog: RateCatalog):
    """Test inactive partners never appear, even with the best rate"""
    assert "banco-inactivo" not in ids(catalog.find_eligible())
    assert "banco-inactivo" not in ids(catalog.find_eligible(2025))


def test_find_eligible_by_vehicle_year(catalog: RateCatalog):
    """Test minimum model year and maximum vehicle age both apply"""
    # 2015: older than credito-sur's 2018 floor and than banco-norte's 10 years
    assert ids(catalog.find_eligible(2015)) == ["auto-capital", "financiera-este"]
    assert ids(catalog.find_eligible(2016)) == ["auto-capital", "banco-norte", "financiera-este"]
    assert ids(catalog.find_eligible(2018)) == ["credito-sur", "auto-capital", "banco-norte", "financiera-este"]


def test_find_eligible_is_stable():
    """Test ordering does not depend on insertion order"""
    a = LendingPartner(id="a", name="A", annual_rate=Decimal("11"), min_term=12, max_term=24)
    b = LendingPartner(id="b", name="B", annual_rate=Decimal("11"), min_term=12, max_term=24)
    assert ids(RateCatalog([b, a]).find_eligible()) == ["a", "b"]
    assert ids(RateCatalog([a, b]).find_eligible()) == ["a", "b"]


def test_term_is_valid_bounds_inclusive(catalog: RateCatalog):
    """Test min and max terms are accepted"""
    assert catalog.term_is_valid("credito-sur", 12)
    assert catalog.term_is_valid("credito-sur", 48)
    assert not catalog.term_is_valid("credito-sur", 11)
    assert not catalog.term_is_valid("credito-sur", 60)


def test_term_is_valid_unknown_partner(catalog: RateCatalog):
    """Test unknown partner raises NotFoundError"""
    with pytest.raises(NotFoundError):
        catalog.term_is_valid("nope", 12)


def test_get_returns_inactive_partner(catalog: RateCatalog):
    """Test lookup by id does not filter on status"""
    assert catalog.get("banco-inactivo").is_active is False


def test_best_matches_filters_by_term(catalog: RateCatalog):
    """Test only partners covering the term, limited to the top offers"""
    assert ids(catalog.best_matches(60)) == ["auto-capital", "banco-norte", "financiera-este"]
    assert ids(catalog.best_matches(72)) == ["auto-capital", "banco-norte"]
    assert ids(catalog.best_matches(36, limit=2)) == ["credito-sur", "auto-capital"]


def test_best_matches_by_vehicle_year(catalog: RateCatalog):
    """Test vehicle year narrows best matches"""
    assert ids(catalog.best_matches(36, vehicle_year=2015)) == ["auto-capital", "financiera-este"]


def test_summary(catalog: RateCatalog):
    """Test catalog aggregates"""
    summary = catalog.summary()
    assert summary["total"] == 5
    assert summary["active"] == 4
    assert summary["min_rate"] == Decimal("9")
    assert summary["max_rate"] == Decimal("15")


def test_summary_empty_catalog():
    """Test empty catalog summary has zeros"""
    summary = RateCatalog([]).summary()
    assert summary["total"] == 0
    assert summary["avg_rate"] == 0
