"""Models for the commissions app (per-sale commissions, vendor settings, payouts)."""
from decimal import Decimal

from django.conf import settings
from django.db import models

from commissions.plans import PLAN_CHOICES, STARTER, get_plan
from core.models import TimeStampedModel


class PaymentMethod(models.TextChoices):
    PAYPAL = "PAYPAL", "PayPal"
    BANK_TRANSFER = "BANK_TRANSFER", "Bank transfer"
    STRIPE = "STRIPE", "Stripe"


# ---------------------------------------------------------------------------
# Vendor settings
# ---------------------------------------------------------------------------

class VendorCommissionSettings(TimeStampedModel):
    """Per-vendor plan, commission rate and payout preferences."""

    vendor = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="commission_settings",
        verbose_name="vendor",
    )
    plan_type = models.CharField(
        "plan",
        max_length=20,
        choices=PLAN_CHOICES,
        default=STARTER,
    )
    commission_rate = models.DecimalField(
        "commission rate",
        max_digits=6,
        decimal_places=4,
        default=Decimal("0.0800"),
        help_text="Fraction of the sale kept by the platform (0.08 = 8%).",
    )
    minimum_payout = models.DecimalField(
        "minimum payout",
        max_digits=12,
        decimal_places=2,
        default=Decimal("50.00"),
    )
    payment_method = models.CharField(
        "payment method",
        max_length=20,
        choices=PaymentMethod.choices,
        default=PaymentMethod.PAYPAL,
    )

    class Meta:
        verbose_name = "vendor commission settings"
        verbose_name_plural = "vendor commission settings"

    def __str__(self):
        return f"{self.vendor} ({self.plan_type})"

    @property
    def plan(self):
        return get_plan(self.plan_type)

    @property
    def transaction_fee(self):
        return self.plan.transaction_fee


# ---------------------------------------------------------------------------
# Payouts
# ---------------------------------------------------------------------------

class VendorPayout(TimeStampedModel):
    """A batch of approved commissions paid to a vendor."""

    class Status(models.TextChoices):
        PENDING = "PENDING", "Pending"
        COMPLETED = "COMPLETED", "Completed"
        FAILED = "FAILED", "Failed"

    vendor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="payouts",
        verbose_name="vendor",
    )
    total_amount = models.DecimalField(
        "total amount",
        max_digits=14,
        decimal_places=2,
        default=Decimal("0.00"),
    )
    commission_count = models.PositiveIntegerField("commission count", default=0)
    period_start = models.DateTimeField("period start")
    period_end = models.DateTimeField("period end")
    status = models.CharField(
        "status",
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True,
    )
    payment_method = models.CharField(
        "payment method",
        max_length=20,
        choices=PaymentMethod.choices,
        default=PaymentMethod.PAYPAL,
    )
    processed_at = models.DateTimeField("processed at", null=True, blank=True)

    class Meta:
        verbose_name = "vendor payout"
        verbose_name_plural = "vendor payouts"
        ordering = ["-created_at"]

    def __str__(self):
        return f"Payout {self.total_amount} to {self.vendor}"


# ---------------------------------------------------------------------------
# Commission
# ---------------------------------------------------------------------------

class CommissionQuerySet(models.QuerySet):

    def created_between(self, start, end):
        """Half-open ``[start, end)`` window on ``created_at``."""
        return self.filter(created_at__gte=start, created_at__lt=end)

    def for_vendor(self, vendor):
        return self.filter(vendor=vendor)

    def payable(self):
        return self.filter(status=Commission.Status.APPROVED, payout__isnull=True)


class Commission(TimeStampedModel):
    """Platform commission recorded for one vendor's line in a completed order."""

    class Status(models.TextChoices):
        PENDING = "PENDING", "Pending"
        APPROVED = "APPROVED", "Approved"
        PAID = "PAID", "Paid"
        CANCELLED = "CANCELLED", "Cancelled"

    vendor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="commissions",
        verbose_name="vendor",
    )
    product = models.ForeignKey(
        "catalog.Product",
        on_delete=models.PROTECT,
        related_name="commissions",
        verbose_name="product",
    )
    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="commissions",
        verbose_name="order",
    )
    order_item = models.OneToOneField(
        "orders.OrderItem",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="commission",
        verbose_name="order item",
    )
    sale_amount = models.DecimalField("sale amount", max_digits=14, decimal_places=2)
    commission_rate = models.DecimalField("commission rate", max_digits=6, decimal_places=4)
    commission_amount = models.DecimalField("commission amount", max_digits=14, decimal_places=2)
    transaction_fee = models.DecimalField(
        "transaction fee",
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
    )
    performance_bonus = models.DecimalField(
        "performance bonus",
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Negative values are penalties.",
    )
    status = models.CharField(
        "status",
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True,
    )
    payout = models.ForeignKey(
        VendorPayout,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="commissions",
        verbose_name="payout",
    )
    processed_at = models.DateTimeField("processed at", null=True, blank=True)

    objects = CommissionQuerySet.as_manager()

    class Meta:
        verbose_name = "commission"
        verbose_name_plural = "commissions"
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.commission_amount} on {self.sale_amount} ({self.status})"

    @property
    def platform_earnings(self):
        from commissions.calculator import platform_earnings

        return platform_earnings(
            self.sale_amount,
            self.commission_rate,
            self.transaction_fee,
            self.performance_bonus,
        )
