"""Business services for commission creation, status changes and payouts."""
from __future__ import annotations

import logging
from datetime import timedelta
from decimal import Decimal

from django.conf import settings
from django.db import transaction
from django.db.models import Avg, Count, Q
from django.utils import timezone

from accounts.models import User
from commissions.calculator import PerformanceMetrics, calculate_commission
from commissions.models import Commission, VendorCommissionSettings, VendorPayout
from commissions.plans import VENDOR_PLANS, get_plan
from core.exceptions import DomainError
from core.money import ZERO, to_decimal
from currency.services import CurrencyConverter

logger = logging.getLogger("uniqverse")

PERFORMANCE_WINDOW_DAYS = 30

ALLOWED_TRANSITIONS = {
    Commission.Status.PENDING: {Commission.Status.APPROVED, Commission.Status.CANCELLED},
    Commission.Status.APPROVED: {Commission.Status.PAID, Commission.Status.CANCELLED},
    Commission.Status.PAID: set(),
    Commission.Status.CANCELLED: set(),
}


class InvalidStatusTransition(DomainError):
    default_message = "Commission status change not allowed."


# ---------------------------------------------------------------------------
# Vendor settings and performance
# ---------------------------------------------------------------------------

def get_or_create_vendor_settings(vendor) -> VendorCommissionSettings:
    """Return the vendor's settings, initialising them from the default plan."""
    plan = get_plan(settings.DEFAULT_COMMISSION_PLAN)
    vendor_settings, created = VendorCommissionSettings.objects.get_or_create(
        vendor=vendor,
        defaults={
            "plan_type": plan.code,
            "commission_rate": plan.commission_rate,
        },
    )
    if created:
        logger.info("Commission settings initialised for vendor %s (%s)", vendor.pk, plan.code)
    return vendor_settings


def vendor_performance_metrics(vendor, now=None) -> PerformanceMetrics:
    """Trailing 30-day order, fulfilment, return and rating figures for *vendor*."""
    from catalog.models import Review
    from orders.models import Order

    now = now or timezone.now()
    since = now - timedelta(days=PERFORMANCE_WINDOW_DAYS)

    orders = Order.objects.filter(
        items__product__vendor=vendor,
        created_at__gte=since,
        created_at__lte=now,
    )
    counts = orders.aggregate(
        total=Count("id", distinct=True),
        delivered=Count("id", filter=Q(status=Order.Status.DELIVERED), distinct=True),
        returned=Count("id", filter=Q(status=Order.Status.REFUNDED), distinct=True),
    )
    ratings = Review.objects.filter(
        product__vendor=vendor,
        created_at__gte=since,
        created_at__lte=now,
    ).aggregate(
        average=Avg("rating"),
        count=Count("id"),
    )

    total = counts["total"] or 0
    if total:
        fulfillment_rate = Decimal(counts["delivered"]) / Decimal(total)
        return_rate = Decimal(counts["returned"]) / Decimal(total)
    else:
        fulfillment_rate = ZERO
        return_rate = ZERO

    return PerformanceMetrics(
        order_count=total,
        average_rating=to_decimal(ratings["average"]),
        fulfillment_rate=fulfillment_rate,
        return_rate=return_rate,
        review_count=ratings["count"] or 0,
    )


def list_vendor_plans(currency=None, *, vendor=None, provider=None) -> dict:
    """All plans with fees in *currency*; *vendor* adds their current plan."""
    convert = CurrencyConverter(currency, provider=provider)
    plans = [
        {
            "code": plan.code,
            "name": plan.name,
            "monthlyFee": convert(plan.monthly_fee),
            "transactionFee": convert(plan.transaction_fee),
            "commissionRate": plan.commission_rate,
            "maxProducts": plan.max_products,
            "prioritySupport": plan.priority_support,
            "analyticsLevel": plan.analytics_level,
            "benefits": list(plan.benefits),
        }
        for plan in VENDOR_PLANS.values()
    ]
    data = {"plans": plans, "currency": convert.currency}
    if vendor is not None:
        vendor_settings = VendorCommissionSettings.objects.filter(vendor=vendor).first()
        data["currentPlan"] = (
            vendor_settings.plan_type if vendor_settings is not None else settings.DEFAULT_COMMISSION_PLAN
        )
    return data


# ---------------------------------------------------------------------------
# Commission lifecycle
# ---------------------------------------------------------------------------

@transaction.atomic
def create_commissions_for_order(order) -> list[Commission]:
    """Record one commission per vendor line item of *order*.

    Items whose product has no vendor, or whose owner is not a vendor, are
    skipped.  Items that already carry a commission are skipped too, so the
    call is safe to repeat.
    """
    items = (
        order.items
        .select_related("product__vendor")
        .filter(commission__isnull=True, product__vendor__role=User.Role.VENDOR)
    )

    created = []
    terms_by_vendor = {}
    metrics_by_vendor = {}
    for item in items:
        vendor = item.product.vendor
        if vendor.pk not in terms_by_vendor:
            terms_by_vendor[vendor.pk] = get_or_create_vendor_settings(vendor)
            metrics_by_vendor[vendor.pk] = vendor_performance_metrics(vendor)

        breakdown = calculate_commission(
            terms_by_vendor[vendor.pk],
            item.total,
            metrics_by_vendor[vendor.pk],
        )
        commission = Commission.objects.create(
            vendor=vendor,
            product=item.product,
            order=order,
            order_item=item,
            sale_amount=breakdown.sale_amount,
            commission_rate=breakdown.commission_rate,
            commission_amount=breakdown.commission_amount,
            transaction_fee=breakdown.transaction_fee,
            performance_bonus=breakdown.performance_bonus,
        )
        created.append(commission)
        logger.info(
            "Commission %s created for order %s vendor %s: %s on %s",
            commission.pk,
            order.order_number,
            vendor.pk,
            breakdown.commission_amount,
            breakdown.sale_amount,
        )
    return created


def change_commission_status(commission: Commission, new_status: str) -> Commission:
    """Move *commission* to *new_status* if the transition is allowed.

    Setting the current status again is a no-op.
    """
    if new_status not in Commission.Status.values:
        raise InvalidStatusTransition(
            f"Unknown commission status '{new_status}'.",
            details={"status": [f"Must be one of {', '.join(Commission.Status.values)}."]},
        )
    current = commission.status
    if new_status == current:
        return commission
    if new_status not in ALLOWED_TRANSITIONS[current]:
        raise InvalidStatusTransition(
            f"Cannot change commission status from {current} to {new_status}.",
            details={"status": [f"{current} -> {new_status} is not allowed."]},
        )

    commission.status = new_status
    commission.processed_at = timezone.now()
    commission.save(update_fields=["status", "processed_at", "updated_at"])
    logger.info("Commission %s status %s -> %s", commission.pk, current, new_status)
    return commission


# ---------------------------------------------------------------------------
# Payouts
# ---------------------------------------------------------------------------

@transaction.atomic
def generate_vendor_payout(vendor, period_start, period_end) -> VendorPayout | None:
    """Batch the vendor's approved, unpaid commissions of a period into a payout.

    Returns ``None`` when nothing is payable or the total is below the
    vendor's minimum payout.
    """
    commissions = list(
        Commission.objects.select_for_update()
        .payable()
        .filter(vendor=vendor, created_at__gte=period_start, created_at__lte=period_end)
    )
    if not commissions:
        return None

    total = sum((c.commission_amount for c in commissions), ZERO)
    vendor_settings = VendorCommissionSettings.objects.filter(vendor=vendor).first()
    if vendor_settings is not None and total < vendor_settings.minimum_payout:
        logger.info(
            "Payout skipped for vendor %s: %s below minimum %s",
            vendor.pk,
            total,
            vendor_settings.minimum_payout,
        )
        return None

    payout_kwargs = {}
    if vendor_settings is not None:
        payout_kwargs["payment_method"] = vendor_settings.payment_method
    payout = VendorPayout.objects.create(
        vendor=vendor,
        total_amount=total,
        commission_count=len(commissions),
        period_start=period_start,
        period_end=period_end,
        status=VendorPayout.Status.PENDING,
        **payout_kwargs,
    )

    now = timezone.now()
    Commission.objects.filter(pk__in=[c.pk for c in commissions]).update(
        payout=payout,
        status=Commission.Status.PAID,
        processed_at=now,
        updated_at=now,
    )
    logger.info(
        "Payout %s generated for vendor %s: %s over %s commissions",
        payout.pk,
        vendor.pk,
        total,
        len(commissions),
    )
    return payout


def vendors_with_payable_commissions(period_start, period_end):
    return User.objects.vendors().filter(
        commissions__status=Commission.Status.APPROVED,
        commissions__payout__isnull=True,
        commissions__created_at__gte=period_start,
        commissions__created_at__lte=period_end,
    ).distinct()

