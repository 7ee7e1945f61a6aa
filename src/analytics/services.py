"""Report builders for the admin and vendor dashboards.

Each builder issues its independent reads through
:func:`analytics.queries.run_concurrently`, then aggregates in Python with
``Decimal`` arithmetic and converts money into the requested currency last.
Monetary values stay ``Decimal``; the API renderer turns them into JSON
numbers.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from decimal import Decimal

from django.conf import settings
from django.db.models import Count, Prefetch, Q, Sum

from accounts.models import User
from analytics.periods import (
    bucket_by_day,
    earnings_by_day,
    local_date,
    percent_change,
    period_window,
    range_window,
    window,
)
from analytics.queries import run_concurrently
from catalog.models import Product, Review
from commissions.models import Commission, VendorCommissionSettings, VendorPayout
from commissions.plans import get_plan
from core.cache import ReadThroughCache, make_cache_key
from core.money import ZERO, money_str, quantize_money, to_decimal
from currency.services import CurrencyConverter, currency_places
from orders.models import Order, OrderItem

logger = logging.getLogger("uniqverse")

TOP_VENDOR_LIMIT = 10
RECENT_TRANSACTION_LIMIT = 20
TOP_PRODUCT_LIMIT = 10
RECENT_PAYOUT_LIMIT = 5
RECENT_ORDER_LIMIT = 5
LOW_STOCK_LIMIT = 5

EXPORT_HEADERS = [
    "Date",
    "Order Number",
    "Vendor Name",
    "Vendor Email",
    "Product Name",
    "Sale Amount",
    "Commission Rate (%)",
    "Vendor Earnings",
    "Transaction Fee",
    "Performance Bonus",
    "Platform Earnings",
    "Status",
    "Currency",
]


def _iso(value):
    return value.isoformat() if value is not None else None


def _sum(values):
    return sum((to_decimal(v) for v in values), ZERO)


def _mean(values):
    values = [to_decimal(v) for v in values]
    if not values:
        return ZERO
    return sum(values, ZERO) / len(values)


def _whole_percent(value):
    return int(quantize_money(value, 0))


# ---------------------------------------------------------------------------
# Admin commission report
# ---------------------------------------------------------------------------

def build_admin_commission_report(days=30, currency=None, *, now=None, provider=None) -> dict:
    """Platform-wide commission overview for the last *days* days."""
    win = window(days, now=now)
    convert = CurrencyConverter(currency, provider=provider)

    results = run_concurrently({
        "current": lambda: list(
            Commission.objects.select_related("vendor", "product", "order")
            .filter(created_at__gte=win.start, created_at__lte=win.end)
            .order_by("created_at")
        ),
        "previous": lambda: list(
            Commission.objects.filter(
                created_at__gte=win.previous_start,
                created_at__lt=win.previous_end,
            )
        ),
        "vendors": lambda: list(
            User.objects.vendors().annotate(
                period_commissions=Count(
                    "commissions",
                    filter=Q(
                        commissions__created_at__gte=win.start,
                        commissions__created_at__lte=win.end,
                    ),
                ),
            )
        ),
    })
    current, previous, vendors = results["current"], results["previous"], results["vendors"]

    platform_total = _sum(c.platform_earnings for c in current)
    vendor_total = _sum(c.commission_amount for c in current)
    previous_platform = _sum(c.platform_earnings for c in previous)
    previous_vendor = _sum(c.commission_amount for c in previous)

    daily_earnings = [
        {
            "date": bucket.date.isoformat(),
            "platformEarnings": convert(bucket.platform_earnings),
            "vendorEarnings": convert(bucket.vendor_earnings),
            "totalVolume": convert(bucket.total_volume),
            "transactionCount": bucket.transaction_count,
        }
        for bucket in earnings_by_day(current, win.start, win.end)
    ]

    # converted totals are the sum of the converted days
    overview = {
        "totalPlatformEarnings": _sum(day["platformEarnings"] for day in daily_earnings),
        "totalVendorEarnings": _sum(day["vendorEarnings"] for day in daily_earnings),
        "totalTransactionFees": convert(_sum(c.transaction_fee for c in current)),
        "totalCommissionVolume": _sum(day["totalVolume"] for day in daily_earnings),
        "activeVendors": sum(1 for v in vendors if v.period_commissions > 0),
        "averageCommissionRate": _mean(c.commission_rate for c in current),
        "earningsChange": percent_change(previous_platform, platform_total),
        "volumeChange": percent_change(previous_vendor, vendor_total),
    }

    by_vendor = {}
    for commission in current:
        entry = by_vendor.setdefault(commission.vendor_id, {
            "vendorId": str(commission.vendor_id),
            "vendorName": commission.vendor.name,
            "vendorEmail": commission.vendor.email,
            "totalEarnings": ZERO,
            "totalSales": ZERO,
            "orderCount": 0,
            "commissionRate": ZERO,
        })
        entry["totalEarnings"] += to_decimal(commission.commission_amount)
        entry["totalSales"] += to_decimal(commission.sale_amount)
        entry["orderCount"] += 1
        # current is ordered oldest first, so the last rate seen is the latest
        entry["commissionRate"] = commission.commission_rate

    top_vendors = sorted(by_vendor.values(), key=lambda v: v["totalEarnings"], reverse=True)
    top_vendors = top_vendors[:TOP_VENDOR_LIMIT]
    for entry in top_vendors:
        entry["totalEarnings"] = convert(entry["totalEarnings"])
        entry["totalSales"] = convert(entry["totalSales"])

    recent = sorted(current, key=lambda c: c.created_at, reverse=True)[:RECENT_TRANSACTION_LIMIT]
    recent_transactions = [
        {
            "id": str(c.pk),
            "vendorName": c.vendor.name,
            "productName": c.product.name,
            "orderNumber": c.order.order_number,
            "saleAmount": convert(c.sale_amount),
            "commissionAmount": convert(c.commission_amount),
            "platformEarnings": convert(c.platform_earnings),
            "status": c.status,
            "createdAt": _iso(c.created_at),
        }
        for c in recent
    ]

    return {
        "overview": overview,
        "topVendorEarnings": top_vendors,
        "recentTransactions": recent_transactions,
        "dailyEarnings": daily_earnings,
        "currency": convert.currency,
    }


def commission_export_rows(days=30, currency=None, *, now=None, provider=None):
    """Rows for the admin commission CSV export, newest first."""
    win = window(days, now=now)
    convert = CurrencyConverter(currency, provider=provider)
    places = currency_places(convert.currency)

    commissions = (
        Commission.objects.select_related("vendor", "product", "order")
        .filter(created_at__gte=win.start, created_at__lte=win.end)
        .order_by("-created_at")
    )
    for c in commissions.iterator():
        yield [
            local_date(c.created_at).isoformat(),
            c.order.order_number,
            c.vendor.name,
            c.vendor.email,
            c.product.name,
            money_str(convert(c.sale_amount), places),
            f"{money_str(to_decimal(c.commission_rate) * 100)}%",
            money_str(convert(c.commission_amount), places),
            money_str(convert(c.transaction_fee), places),
            money_str(convert(c.performance_bonus), places),
            money_str(convert(c.platform_earnings), places),
            c.status,
            convert.currency,
        ]


# ---------------------------------------------------------------------------
# Vendor commission analytics
# ---------------------------------------------------------------------------

def build_vendor_commission_analytics(vendor, days=30, currency=None, *, now=None, provider=None) -> dict:
    """The calling vendor's commission totals, payouts and daily breakdown."""
    win = window(days, now=now)
    convert = CurrencyConverter(currency, provider=provider)
    vendor_commissions = Commission.objects.for_vendor(vendor)

    results = run_concurrently({
        "current": lambda: list(
            vendor_commissions.select_related("product")
            .filter(created_at__gte=win.start, created_at__lte=win.end)
        ),
        "previous": lambda: list(
            vendor_commissions.filter(
                created_at__gte=win.previous_start,
                created_at__lt=win.previous_end,
            )
        ),
        "payouts": lambda: list(VendorPayout.objects.filter(vendor=vendor).order_by("-created_at")),
        "settings": lambda: VendorCommissionSettings.objects.filter(vendor=vendor).first(),
    })
    current, previous, payouts = results["current"], results["previous"], results["payouts"]
    vendor_settings = results["settings"]

    total = _sum(c.commission_amount for c in current)
    previous_total = _sum(c.commission_amount for c in previous)

    daily = bucket_by_day(
        current,
        win.start,
        win.end,
        timestamp="created_at",
        fields={"commissions": "commission_amount"},
    )
    daily_commissions = [
        {
            "date": day.date.isoformat(),
            "commissions": convert(day.sums["commissions"]),
            "orders": day.count,
        }
        for day in daily
    ]

    by_product = {}
    for c in current:
        entry = by_product.setdefault(c.product_id, {
            "productId": str(c.product_id),
            "productName": c.product.name,
            "totalCommissions": ZERO,
            "totalSales": ZERO,
            "commissionRate": c.commission_rate,
        })
        entry["totalCommissions"] += to_decimal(c.commission_amount)
        entry["totalSales"] += to_decimal(c.sale_amount)
    top_products = sorted(by_product.values(), key=lambda p: p["totalCommissions"], reverse=True)
    top_products = top_products[:TOP_PRODUCT_LIMIT]
    for entry in top_products:
        entry["totalCommissions"] = convert(entry["totalCommissions"])
        entry["totalSales"] = convert(entry["totalSales"])

    if vendor_settings is not None:
        average_rate = vendor_settings.commission_rate
    else:
        average_rate = get_plan(settings.DEFAULT_COMMISSION_PLAN).commission_rate

    return {
        "totalCommissions": _sum(day["commissions"] for day in daily_commissions),
        "commissionsChange": percent_change(previous_total, total),
        "pendingPayouts": convert(_sum(
            p.total_amount for p in payouts if p.status == VendorPayout.Status.PENDING
        )),
        "completedPayouts": convert(_sum(
            p.total_amount for p in payouts if p.status == VendorPayout.Status.COMPLETED
        )),
        "averageCommissionRate": average_rate,
        "dailyCommissions": daily_commissions,
        "topCommissionProducts": top_products,
        "recentPayouts": [
            {
                "id": str(p.pk),
                "amount": convert(p.total_amount),
                "status": p.status,
                "createdAt": _iso(p.created_at),
                "processedAt": _iso(p.processed_at),
            }
            for p in payouts[:RECENT_PAYOUT_LIMIT]
        ],
        "currency": convert.currency,
    }


# ---------------------------------------------------------------------------
# Vendor performance
# ---------------------------------------------------------------------------

def _product_metrics(products, items, reviews):
    items_by_product = defaultdict(list)
    for item in items:
        items_by_product[item.product_id].append(item)
    reviews_by_product = defaultdict(list)
    for review in reviews:
        reviews_by_product[review.product_id].append(review)

    metrics = []
    for product in products:
        product_items = items_by_product[product.pk]
        product_reviews = reviews_by_product[product.pk]
        revenue = _sum(item.total for item in product_items)
        units = sum(item.quantity for item in product_items)
        metrics.append({
            "id": str(product.pk),
            "name": product.name,
            "category": product.category.name if product.category else "Uncategorized",
            "revenue": revenue,
            "unitsSold": units,
            "orderCount": len({item.order_id for item in product_items}),
            "reviewCount": len(product_reviews),
            "averageRating": _mean(r.rating for r in product_reviews),
            "revenuePerUnit": revenue / units if units else ZERO,
        })
    metrics.sort(key=lambda m: m["revenue"], reverse=True)
    return metrics


def _category_performance(product_metrics):
    categories = {}
    for metric in product_metrics:
        entry = categories.setdefault(metric["category"], {
            "category": metric["category"],
            "revenue": ZERO,
            "unitsSold": 0,
            "productCount": 0,
            "ratings": [],
        })
        entry["revenue"] += metric["revenue"]
        entry["unitsSold"] += metric["unitsSold"]
        entry["productCount"] += 1
        if metric["reviewCount"]:
            entry["ratings"].append(metric["averageRating"])
    for entry in categories.values():
        entry["averageRating"] = _mean(entry.pop("ratings"))
    return sorted(categories.values(), key=lambda c: c["revenue"], reverse=True)


def _converted_metric(metric, convert):
    if metric is None:
        return None
    return {
        **metric,
        "revenue": convert(metric["revenue"]),
        "revenuePerUnit": convert(metric["revenuePerUnit"]),
    }


def build_vendor_performance(vendor, period="month", currency=None, *, now=None, provider=None) -> dict:
    """Sales, product, rating and commission performance of one vendor."""
    win = period_window(period, now=now)
    convert = CurrencyConverter(currency, provider=provider)
    in_window = {"created_at__gte": win.start, "created_at__lte": win.end}

    vendor_items = OrderItem.objects.filter(product__vendor=vendor)
    results = run_concurrently({
        "orders": lambda: list(
            Order.objects.revenue()
            .filter(items__product__vendor=vendor, **in_window)
            .distinct()
            .prefetch_related(Prefetch("items", queryset=vendor_items, to_attr="vendor_items"))
        ),
        "products": lambda: list(Product.objects.for_vendor(vendor).select_related("category")),
        "items": lambda: list(
            vendor_items.exclude(order__status=Order.Status.CANCELLED).filter(
                order__created_at__gte=win.start,
                order__created_at__lte=win.end,
            )
        ),
        "reviews": lambda: list(Review.objects.filter(product__vendor=vendor, **in_window)),
        "commissions": lambda: Commission.objects.for_vendor(vendor).filter(**in_window).aggregate(
            total=Sum("commission_amount"),
            count=Count("id"),
        ),
        "settings": lambda: VendorCommissionSettings.objects.filter(vendor=vendor).first(),
    })
    orders, products = results["orders"], results["products"]
    reviews = results["reviews"]

    def vendor_revenue(order):
        return _sum(item.total for item in order.vendor_items)

    total_revenue = _sum(vendor_revenue(order) for order in orders)
    order_count = len(orders)

    orders_per_customer = defaultdict(int)
    for order in orders:
        if order.user_id is not None:
            orders_per_customer[order.user_id] += 1
    unique_customers = len(orders_per_customer)
    returning = sum(1 for count in orders_per_customer.values() if count > 1)

    product_metrics = _product_metrics(products, results["items"], reviews)
    rating_distribution = {str(stars): 0 for stars in range(5, 0, -1)}
    for review in reviews:
        rating_distribution[str(review.rating)] += 1

    trends = bucket_by_day(
        orders,
        win.start,
        win.end,
        timestamp="created_at",
        fields={"revenue": vendor_revenue},
    )
    customers_by_day = defaultdict(set)
    for order in orders:
        if order.user_id is not None:
            customers_by_day[local_date(order.created_at)].add(order.user_id)

    vendor_settings = results["settings"]
    commission_rate = (
        vendor_settings.commission_rate
        if vendor_settings is not None
        else get_plan(settings.DEFAULT_COMMISSION_PLAN).commission_rate
    )

    best_selling = product_metrics[0] if product_metrics else None
    highest_rated = max(product_metrics, key=lambda m: m["averageRating"], default=None)
    most_reviewed = max(product_metrics, key=lambda m: m["reviewCount"], default=None)

    return {
        "summary": {
            "totalRevenue": convert(total_revenue),
            "totalOrders": order_count,
            "uniqueCustomers": unique_customers,
            "averageOrderValue": convert(total_revenue / order_count if order_count else ZERO),
            "retentionRate": quantize_money(
                Decimal(returning) / unique_customers * 100 if unique_customers else ZERO
            ),
            "overallRating": _mean(r.rating for r in reviews),
            "totalReviews": len(reviews),
            "totalProducts": len(products),
            "totalCommissions": convert(to_decimal(results["commissions"]["total"])),
            "commissionCount": results["commissions"]["count"],
            "averageCommissionRate": commission_rate,
        },
        "productMetrics": [_converted_metric(m, convert) for m in product_metrics[:TOP_PRODUCT_LIMIT]],
        "categoryPerformance": [
            {**entry, "revenue": convert(entry["revenue"])}
            for entry in _category_performance(product_metrics)
        ],
        "ratingDistribution": rating_distribution,
        "performanceTrends": [
            {
                "date": day.date.isoformat(),
                "revenue": convert(day.sums["revenue"]),
                "orders": day.count,
                "customers": len(customers_by_day.get(day.date, ())),
            }
            for day in trends
        ],
        "topPerformers": {
            "bestSellingProduct": _converted_metric(best_selling, convert),
            "highestRatedProduct": _converted_metric(highest_rated, convert),
            "mostReviewedProduct": _converted_metric(most_reviewed, convert),
        },
        "period": period,
        "dateRange": {
            "start": win.start_date.isoformat(),
            "end": win.end_date.isoformat(),
        },
        "currency": convert.currency,
    }


# ---------------------------------------------------------------------------
# Admin dashboard stats
# ---------------------------------------------------------------------------

def _compute_admin_stats(range_name, now=None) -> dict:
    win = range_window(range_name, now=now)
    in_window = {"created_at__gte": win.start, "created_at__lte": win.end}
    before_window = {"created_at__lt": win.start}

    results = run_concurrently({
        "orders": lambda: list(Order.objects.revenue().filter(**in_window).only("id", "total", "created_at")),
        "previous_orders": lambda: Order.objects.revenue().filter(
            created_at__gte=win.previous_start,
            created_at__lt=win.previous_end,
        ).aggregate(total=Sum("total"), count=Count("id")),
        "total_products": lambda: Product.objects.count(),
        "previous_products": lambda: Product.objects.filter(**before_window).count(),
        "total_users": lambda: User.objects.customers().count(),
        "previous_users": lambda: User.objects.customers().filter(**before_window).count(),
        "recent_orders": lambda: list(
            Order.objects.filter(**in_window).select_related("user")[:RECENT_ORDER_LIMIT]
        ),
        "low_stock": lambda: list(
            Product.objects.published()
            .low_stock(settings.LOW_STOCK_THRESHOLD)
            .order_by("inventory", "name")[:LOW_STOCK_LIMIT]
        ),
        "pending_orders": lambda: Order.objects.filter(status=Order.Status.PENDING).count(),
        "pending_reviews": lambda: Review.objects.filter(status=Review.Status.PENDING).count(),
    })
    orders = results["orders"]
    total_sales = _sum(order.total for order in orders)
    previous = results["previous_orders"]

    sales_by_day = bucket_by_day(
        orders,
        win.start,
        win.end,
        timestamp="created_at",
        fields={"sales": "total"},
    )

    return {
        "totalSales": total_sales,
        "totalOrders": len(orders),
        "totalProducts": results["total_products"],
        "totalUsers": results["total_users"],
        "recentOrders": [
            {
                "id": str(order.pk),
                "orderNumber": order.order_number,
                "status": order.status,
                "total": order.total,
                "createdAt": _iso(order.created_at),
                "user": (
                    {"name": order.user.name, "email": order.user.email}
                    if order.user is not None
                    else None
                ),
            }
            for order in results["recent_orders"]
        ],
        "lowStockProducts": [
            {
                "id": str(product.pk),
                "name": product.name,
                "inventory": product.inventory,
                "lowStockThreshold": product.low_stock_threshold,
            }
            for product in results["low_stock"]
        ],
        "salesByDay": [
            {"date": day.date.isoformat(), "sales": day.sums["sales"], "orders": day.count}
            for day in sales_by_day
        ],
        "pendingOrderCount": results["pending_orders"],
        "pendingReviewsCount": results["pending_reviews"],
        "growthRates": {
            "sales": _whole_percent(percent_change(previous["total"], total_sales)),
            "orders": _whole_percent(percent_change(previous["count"], len(orders))),
            "products": _whole_percent(
                percent_change(results["previous_products"], results["total_products"])
            ),
            "users": _whole_percent(percent_change(results["previous_users"], results["total_users"])),
        },
        "range": range_name,
        "currency": settings.BASE_CURRENCY,
    }


def admin_stats_cache():
    return ReadThroughCache(ttl=settings.ANALYTICS_CACHE_SECONDS)


def build_admin_stats(range_name="week", *, now=None, cache=None) -> dict:
    """Dashboard totals for ``week|month|year``, served from a short-lived cache."""
    cache = cache or admin_stats_cache()
    key = make_cache_key("admin:stats", {"range": range_name})
    return cache.get_or_compute(key, lambda: _compute_admin_stats(range_name, now=now))
