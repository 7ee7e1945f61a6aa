"""Models for the catalog app (categories, vendor products, reviews)."""
from decimal import Decimal

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import F
from django.utils.text import slugify

from core.models import TimeStampedModel


# ---------------------------------------------------------------------------
# Category
# ---------------------------------------------------------------------------

class Category(TimeStampedModel):
    name = models.CharField("name", max_length=255)
    slug = models.SlugField("slug", max_length=255, unique=True)

    class Meta:
        verbose_name = "category"
        verbose_name_plural = "categories"
        ordering = ["name"]

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = slugify(self.name) or "cat"
        super().save(*args, **kwargs)


# ---------------------------------------------------------------------------
# Product
# ---------------------------------------------------------------------------

class ProductQuerySet(models.QuerySet):

    def published(self):
        return self.filter(is_published=True)

    def for_vendor(self, vendor):
        return self.filter(vendor=vendor)

    def low_stock(self, threshold=None):
        if threshold is None:
            return self.filter(inventory__lte=F("low_stock_threshold"))
        return self.filter(inventory__lte=threshold)


class Product(TimeStampedModel):
    """A sellable product, optionally owned by a marketplace vendor."""

    vendor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="products",
        verbose_name="vendor",
    )
    category = models.ForeignKey(
        Category,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="products",
        verbose_name="category",
    )
    name = models.CharField("name", max_length=255)
    slug = models.SlugField("slug", max_length=255, unique=True)
    sku = models.CharField("SKU", max_length=64, unique=True)
    price = models.DecimalField(
        "price",
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
    )
    inventory = models.IntegerField("inventory", default=0)
    low_stock_threshold = models.PositiveIntegerField("low stock threshold", default=10)
    is_published = models.BooleanField("published", default=True, db_index=True)

    objects = ProductQuerySet.as_manager()

    class Meta:
        verbose_name = "product"
        verbose_name_plural = "products"
        ordering = ["name"]

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = slugify(f"{self.name}-{self.sku}") or "product"
        super().save(*args, **kwargs)


# ---------------------------------------------------------------------------
# Review
# ---------------------------------------------------------------------------

class Review(TimeStampedModel):
    """Customer rating of a product; moderated before publication."""

    class Status(models.TextChoices):
        PENDING = "PENDING", "Pending"
        APPROVED = "APPROVED", "Approved"
        REJECTED = "REJECTED", "Rejected"

    product = models.ForeignKey(
        Product,
        on_delete=models.CASCADE,
        related_name="reviews",
        verbose_name="product",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="reviews",
        verbose_name="author",
    )
    rating = models.PositiveSmallIntegerField(
        "rating",
        validators=[MinValueValidator(1), MaxValueValidator(5)],
    )
    comment = models.TextField("comment", blank=True, default="")
    status = models.CharField(
        "status",
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True,
    )

    class Meta:
        verbose_name = "review"
        verbose_name_plural = "reviews"
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.product} ({self.rating}/5)"
