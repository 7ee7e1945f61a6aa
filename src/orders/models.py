"""Models for the orders app."""
from decimal import Decimal

from django.conf import settings
from django.db import models

from core.models import TimeStampedModel


class OrderQuerySet(models.QuerySet):

    def revenue(self):
        """Orders that count towards revenue: everything except cancelled."""
        return self.exclude(status=Order.Status.CANCELLED)

    def created_between(self, start, end):
        return self.filter(created_at__gte=start, created_at__lte=end)

    def with_vendor_items(self, vendor):
        return self.filter(items__product__vendor=vendor).distinct()


class Order(TimeStampedModel):
    """A storefront order placed by a customer."""

    class Status(models.TextChoices):
        PENDING = "PENDING", "Pending"
        PROCESSING = "PROCESSING", "Processing"
        SHIPPED = "SHIPPED", "Shipped"
        DELIVERED = "DELIVERED", "Delivered"
        CANCELLED = "CANCELLED", "Cancelled"
        REFUNDED = "REFUNDED", "Refunded"

    order_number = models.CharField("order number", max_length=50, unique=True)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders",
        verbose_name="customer",
    )
    status = models.CharField(
        "status",
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True,
    )
    total = models.DecimalField(
        "total",
        max_digits=14,
        decimal_places=2,
        default=Decimal("0.00"),
    )

    objects = OrderQuerySet.as_manager()

    class Meta:
        verbose_name = "order"
        verbose_name_plural = "orders"
        ordering = ["-created_at"]

    def __str__(self):
        return self.order_number


class OrderItem(TimeStampedModel):
    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name="items",
        verbose_name="order",
    )
    product = models.ForeignKey(
        "catalog.Product",
        on_delete=models.PROTECT,
        related_name="order_items",
        verbose_name="product",
    )
    quantity = models.PositiveIntegerField("quantity", default=1)
    price = models.DecimalField(
        "unit price",
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
    )
    total = models.DecimalField(
        "line total",
        max_digits=14,
        decimal_places=2,
        default=Decimal("0.00"),
    )

    class Meta:
        verbose_name = "order item"
        verbose_name_plural = "order items"
        ordering = ["created_at"]

    def __str__(self):
        return f"{self.quantity} x {self.product_id}"

    def save(self, *args, **kwargs):
        if not self.total:
            self.total = (self.price or Decimal("0.00")) * self.quantity
        super().save(*args, **kwargs)
