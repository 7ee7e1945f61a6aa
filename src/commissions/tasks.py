"""Celery tasks for the commissions app."""
from __future__ import annotations

import logging
from datetime import datetime, time, timedelta

from celery import shared_task
from django.utils import timezone

from commissions.services import generate_vendor_payout, vendors_with_payable_commissions

logger = logging.getLogger("uniqverse")


def previous_month_bounds(now=None):
    """Return ``(start, end)`` of the calendar month before *now*, local time."""
    today = timezone.localdate(now or timezone.now())
    first_of_month = today.replace(day=1)
    last_of_previous = first_of_month - timedelta(days=1)
    first_of_previous = last_of_previous.replace(day=1)
    tz = timezone.get_current_timezone()
    start = timezone.make_aware(datetime.combine(first_of_previous, time.min), tz)
    end = timezone.make_aware(datetime.combine(last_of_previous, time.max), tz)
    return start, end


@shared_task(name="commissions.tasks.generate_monthly_payouts")
def generate_monthly_payouts():
    """Generate last month's payout for every vendor with approved commissions."""
    period_start, period_end = previous_month_bounds()
    generated_ids = []
    skipped = 0
    for vendor in vendors_with_payable_commissions(period_start, period_end):
        payout = generate_vendor_payout(vendor, period_start, period_end)
        if payout is None:
            skipped += 1
            continue
        generated_ids.append(str(payout.pk))

    logger.info(
        "Monthly payouts generated=%s skipped=%s period=%s..%s",
        len(generated_ids),
        skipped,
        period_start.date(),
        period_end.date(),
    )
    return {
        "generated_count": len(generated_ids),
        "generated_ids": generated_ids,
        "skipped_count": skipped,
    }
