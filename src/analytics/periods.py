"""Day buckets, reporting windows and period-over-period change.

Timestamps are bucketed by *local* calendar day (``settings.TIME_ZONE``): a
record belongs to day ``d`` when ``dayStart(d) <= ts < dayStart(d + 1)``.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from decimal import Decimal

from django.utils import timezone

from core.money import ZERO, quantize_money, to_decimal

PERIOD_DAYS = {"month": 30, "quarter": 90, "year": 365}
RANGE_DAYS = {"week": 7, "month": 30, "year": 365}
DEFAULT_PERIOD = "month"
DEFAULT_RANGE = "week"


@dataclass
class PeriodBucket:
    """Commission earnings for one calendar day."""

    date: date
    platform_earnings: Decimal = ZERO
    vendor_earnings: Decimal = ZERO
    total_volume: Decimal = ZERO
    transaction_count: int = 0


@dataclass
class DayTotals:
    date: date
    sums: dict = field(default_factory=dict)
    count: int = 0


@dataclass(frozen=True)
class Window:
    """Current reporting window and the equally long one just before it.

    ``start``/``end`` are inclusive; ``previous_end`` equals ``start`` and is
    exclusive.
    """

    days: int
    start: datetime
    end: datetime
    previous_start: datetime
    previous_end: datetime

    @property
    def start_date(self):
        return timezone.localdate(self.start)

    @property
    def end_date(self):
        return timezone.localdate(self.end)


def local_midnight(day: date) -> datetime:
    return timezone.make_aware(datetime.combine(day, time.min), timezone.get_current_timezone())


def local_date(value) -> date:
    """Local calendar date of a datetime; dates pass through."""
    if isinstance(value, datetime):
        if timezone.is_naive(value):
            return value.date()
        return timezone.localdate(value)
    return value


def day_range(start, end) -> list[date]:
    """Every calendar date from *start* to *end* inclusive."""
    first, last = local_date(start), local_date(end)
    return [first + timedelta(days=offset) for offset in range((last - first).days + 1)]


def _getter(source):
    if callable(source):
        return source
    return lambda record: getattr(record, source)


def bucket_by_day(records, start, end, *, timestamp, fields) -> list[DayTotals]:
    """Sum *fields* of *records* per local day between *start* and *end*.

    *timestamp* and each value of *fields* are either attribute names or
    callables taking a record.  Records outside the range are ignored.
    """
    buckets = {day: DayTotals(day, {name: ZERO for name in fields}) for day in day_range(start, end)}
    get_ts = _getter(timestamp)
    getters = {name: _getter(source) for name, source in fields.items()}

    for record in records:
        bucket = buckets.get(local_date(get_ts(record)))
        if bucket is None:
            continue
        for name, get in getters.items():
            bucket.sums[name] += to_decimal(get(record))
        bucket.count += 1

    return list(buckets.values())


def earnings_by_day(commissions, start, end) -> list[PeriodBucket]:
    """Daily platform/vendor earnings and volume for commission records."""
    days = bucket_by_day(
        commissions,
        start,
        end,
        timestamp="created_at",
        fields={
            "platform_earnings": lambda c: c.platform_earnings,
            "vendor_earnings": "commission_amount",
            "total_volume": "sale_amount",
        },
    )
    return [
        PeriodBucket(
            date=day.date,
            platform_earnings=day.sums["platform_earnings"],
            vendor_earnings=day.sums["vendor_earnings"],
            total_volume=day.sums["total_volume"],
            transaction_count=day.count,
        )
        for day in days
    ]


def percent_change(previous, current) -> Decimal:
    """Change from *previous* to *current* in percent, rounded to 2 places.

    With no previous value the change is 0 when *current* is 0 as well and a
    flat 100 otherwise.
    """
    previous, current = to_decimal(previous), to_decimal(current)
    if previous == 0:
        return Decimal("0.00") if current == 0 else Decimal("100.00")
    return quantize_money((current - previous) / previous * 100)


def window(days: int, now=None) -> Window:
    """Last *days* local calendar days up to *now*, plus the window before."""
    now = now or timezone.now()
    start = local_midnight(timezone.localdate(now) - timedelta(days=days - 1))
    return Window(
        days=days,
        start=start,
        end=now,
        previous_start=start - timedelta(days=days),
        previous_end=start,
    )


def period_window(period, now=None) -> Window:
    return window(PERIOD_DAYS.get(period, PERIOD_DAYS[DEFAULT_PERIOD]), now=now)


def range_window(range_name, now=None) -> Window:
    return window(RANGE_DAYS.get(range_name, RANGE_DAYS[DEFAULT_RANGE]), now=now)
