"""Commission arithmetic.

Pure functions only: callers load rows and metrics, this module never
touches the database.  Monetary inputs go through ``core.money.to_decimal``
so stored values may arrive as Decimal, float, str or wrapped numerics.

Platform earnings are *not* clamped: a performance bonus larger than the
commission plus fee yields a negative figure, which is reported as is.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from core.money import ZERO, quantize_money, to_decimal


@dataclass(frozen=True)
class PerformanceMetrics:
    """Trailing-window vendor performance used to derive the bonus."""

    order_count: int = 0
    average_rating: Decimal = ZERO
    fulfillment_rate: Decimal = ZERO
    return_rate: Decimal = ZERO
    review_count: int = 0


@dataclass(frozen=True)
class CommissionBreakdown:
    sale_amount: Decimal
    commission_rate: Decimal
    commission_amount: Decimal
    transaction_fee: Decimal
    performance_bonus: Decimal

    @property
    def platform_earnings(self) -> Decimal:
        return platform_earnings(
            self.sale_amount,
            self.commission_rate,
            self.transaction_fee,
            self.performance_bonus,
        )


# (condition, multiplier) pairs; each matching rule adds its multiplier.
_BONUS_RULES = (
    (lambda m: m.average_rating >= Decimal("4.5"), Decimal("0.005")),
    (lambda m: m.fulfillment_rate >= Decimal("0.98"), Decimal("0.005")),
    (lambda m: m.return_rate <= Decimal("0.02"), Decimal("0.003")),
    (lambda m: m.order_count >= 100, Decimal("0.002")),
    (lambda m: m.average_rating < Decimal("3.0"), Decimal("-0.01")),
    (lambda m: m.fulfillment_rate < Decimal("0.9"), Decimal("-0.008")),
    (lambda m: m.return_rate > Decimal("0.1"), Decimal("-0.005")),
)


def platform_earnings(sale_amount, commission_rate, transaction_fee=None, performance_bonus=None) -> Decimal:
    """``sale_amount * commission_rate + transaction_fee - performance_bonus``."""
    return (
        to_decimal(sale_amount) * to_decimal(commission_rate)
        + to_decimal(transaction_fee)
        - to_decimal(performance_bonus)
    )


def commission_amount(sale_amount, commission_rate) -> Decimal:
    return quantize_money(to_decimal(sale_amount) * to_decimal(commission_rate))


def performance_bonus_rate(metrics: PerformanceMetrics) -> Decimal:
    rate = ZERO
    for condition, multiplier in _BONUS_RULES:
        if condition(metrics):
            rate += multiplier
    return rate


def performance_bonus(metrics: PerformanceMetrics | None, sale_amount) -> Decimal:
    """Bonus (positive) or penalty (negative) owed on a sale of *sale_amount*."""
    if metrics is None:
        return ZERO
    return quantize_money(to_decimal(sale_amount) * performance_bonus_rate(metrics))


def calculate_commission(terms, sale_amount, metrics: PerformanceMetrics | None = None) -> CommissionBreakdown:
    """Build the stored figures for one sale.

    *terms* is anything exposing ``commission_rate`` and ``transaction_fee``:
    a :class:`commissions.plans.VendorPlan` or a vendor's
    ``VendorCommissionSettings``.
    """
    sale_amount = to_decimal(sale_amount)
    commission_rate = to_decimal(terms.commission_rate)
    return CommissionBreakdown(
        sale_amount=sale_amount,
        commission_rate=commission_rate,
        commission_amount=commission_amount(sale_amount, commission_rate),
        transaction_fee=to_decimal(terms.transaction_fee),
        performance_bonus=performance_bonus(metrics, sale_amount),
    )
