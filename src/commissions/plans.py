"""Vendor subscription plans.

A plan fixes the platform's commission rate, the flat per-transaction fee and
the monthly subscription fee charged to a vendor.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class VendorPlan:
    code: str
    name: str
    monthly_fee: Decimal
    transaction_fee: Decimal
    commission_rate: Decimal
    max_products: Optional[int]
    priority_support: bool
    analytics_level: str
    benefits: tuple = field(default_factory=tuple)


STARTER = "STARTER"
PROFESSIONAL = "PROFESSIONAL"
ENTERPRISE = "ENTERPRISE"

PLAN_CHOICES = [
    (STARTER, "Starter"),
    (PROFESSIONAL, "Professional"),
    (ENTERPRISE, "Enterprise"),
]

VENDOR_PLANS = {
    STARTER: VendorPlan(
        code=STARTER,
        name="Starter Plan",
        monthly_fee=Decimal("0.00"),
        transaction_fee=Decimal("0.30"),
        commission_rate=Decimal("0.08"),
        max_products=50,
        priority_support=False,
        analytics_level="basic",
        benefits=(
            "Up to 50 products",
            "Basic analytics",
            "Standard support",
        ),
    ),
    PROFESSIONAL: VendorPlan(
        code=PROFESSIONAL,
        name="Professional Plan",
        monthly_fee=Decimal("39.99"),
        transaction_fee=Decimal("0.20"),
        commission_rate=Decimal("0.05"),
        max_products=500,
        priority_support=True,
        analytics_level="advanced",
        benefits=(
            "Up to 500 products",
            "Advanced analytics & reports",
            "Priority customer support",
            "Bulk product management",
        ),
    ),
    ENTERPRISE: VendorPlan(
        code=ENTERPRISE,
        name="Enterprise Plan",
        monthly_fee=Decimal("99.99"),
        transaction_fee=Decimal("0.15"),
        commission_rate=Decimal("0.03"),
        max_products=None,
        priority_support=True,
        analytics_level="premium",
        benefits=(
            "Unlimited products",
            "Premium analytics",
            "Dedicated account manager",
            "API access",
        ),
    ),
}


def get_plan(code):
    """Return the plan for *code*, falling back to the starter plan."""
    return VENDOR_PLANS.get(code) or VENDOR_PLANS[STARTER]
