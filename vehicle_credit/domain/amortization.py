"""Fixed-rate amortization math for vehicle loans"""

from decimal import Decimal, Overflow, localcontext
from typing import List
from vehicle_credit.domain.exceptions import InvalidInputError
from vehicle_credit.domain.models import Installment
from vehicle_credit.utils.money import Number, round_money, to_decimal

MONTHS_PER_YEAR = 12
HUNDRED = Decimal(100)
WORKING_PRECISION = 60


def _exact_monthly_payment(principal: Decimal, annual_rate_percent: Decimal, term_months: int) -> Decimal:
    if not principal.is_finite() or principal < 0:
        raise InvalidInputError(f"principal must be non-negative, got {principal}")
    if term_months <= 0:
        raise InvalidInputError(f"term_months must be positive, got {term_months}")
    if not annual_rate_percent.is_finite() or annual_rate_percent < 0:
        raise InvalidInputError(f"annual_rate_percent must be non-negative, got {annual_rate_percent}")

    if annual_rate_percent == 0:
        return principal / term_months

    with localcontext() as ctx:
        ctx.prec = WORKING_PRECISION
        r = annual_rate_percent / HUNDRED / MONTHS_PER_YEAR
        try:
            compound = (1 + r) ** term_months
        except Overflow as e:
            raise InvalidInputError(f"term_months {term_months} overflows at {annual_rate_percent}%") from e

        # A rate too small to register in (1+r)^n behaves like a zero rate
        if compound == 1:
            return principal / term_months
        return principal * r * compound / (compound - 1)


def monthly_payment(principal: Number, annual_rate_percent: Number, term_months: int) -> Decimal:
    """
    Monthly installment of a fixed-rate loan.

    Formula:
        r = annual_rate_percent / 100 / 12
        payment = P * r * (1+r)^n / ((1+r)^n - 1)
    With a zero rate the loan is split evenly: P / n.

    The result is rounded once to cents (half-up); intermediate values
    keep full Decimal precision.

    Raises:
        InvalidInputError: principal < 0, term_months <= 0 or rate < 0
    """
    exact = _exact_monthly_payment(to_decimal(principal), to_decimal(annual_rate_percent), int(term_months))
    return round_money(exact)


def total_payment(down_payment: Number, monthly: Number, term_months: int) -> Decimal:
    """Everything the buyer pays: down payment plus every installment"""
    return round_money(to_decimal(down_payment) + to_decimal(monthly) * term_months)


def total_interest(total_paid: Number, vehicle_price: Number) -> Decimal:
    """Cost of financing over the sticker price"""
    return round_money(to_decimal(total_paid) - to_decimal(vehicle_price))


def amortization_schedule(principal: Number, annual_rate_percent: Number, term_months: int) -> List[Installment]:
    """
    Month-by-month breakdown of a fixed-rate loan.

    Every row pays the rounded monthly payment; the last row absorbs the
    rounding remainder so principal portions sum exactly to the principal
    and the final balance is zero.
    """
    principal = to_decimal(principal)
    rate = to_decimal(annual_rate_percent)
    payment = monthly_payment(principal, rate, term_months)
    monthly_rate = rate / HUNDRED / MONTHS_PER_YEAR

    balance = principal
    schedule = []
    for period in range(1, term_months + 1):
        interest = round_money(balance * monthly_rate)

        if period == term_months:
            # Last installment clears whatever balance rounding left behind
            principal_part = balance
            row_payment = principal_part + interest
        else:
            principal_part = min(payment - interest, balance)
            row_payment = payment

        balance = balance - principal_part
        schedule.append(
            Installment(
                period=period,
                payment=row_payment,
                interest=interest,
                principal=principal_part,
                balance=balance,
            )
        )

    return schedule
