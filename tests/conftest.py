from datetime import timedelta
from decimal import Decimal

import pytest
from django.core.cache import cache
from django.utils import timezone
from rest_framework.test import APIClient

from accounts.models import User
from catalog.models import Category, Product
from commissions.models import Commission
from core.money import quantize_money
from orders.models import Order, OrderItem


@pytest.fixture(autouse=True)
def clear_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def admin_user(db):
    return User.objects.create_user(
        email="admin@test.com",
        password="testpass123",
        name="Admin User",
        role=User.Role.ADMIN,
    )


@pytest.fixture
def vendor_user(db):
    return User.objects.create_user(
        email="vendor@test.com",
        password="testpass123",
        name="Vendor One",
        role=User.Role.VENDOR,
    )


@pytest.fixture
def other_vendor(db):
    return User.objects.create_user(
        email="vendor2@test.com",
        password="testpass123",
        name="Vendor Two",
        role=User.Role.VENDOR,
    )


@pytest.fixture
def customer_user(db):
    return User.objects.create_user(
        email="customer@test.com",
        password="testpass123",
        name="Customer User",
        role=User.Role.CUSTOMER,
    )


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def admin_client(admin_user):
    client = APIClient()
    client.force_authenticate(user=admin_user)
    return client


@pytest.fixture
def vendor_client(vendor_user):
    client = APIClient()
    client.force_authenticate(user=vendor_user)
    return client


@pytest.fixture
def customer_client(customer_user):
    client = APIClient()
    client.force_authenticate(user=customer_user)
    return client


@pytest.fixture
def category(db):
    return Category.objects.create(name="Apparel", slug="apparel")


@pytest.fixture
def product(vendor_user, category):
    return Product.objects.create(
        vendor=vendor_user,
        category=category,
        name="Graphic Tee",
        sku="TEE-001",
        price=Decimal("100.00"),
        inventory=50,
    )


@pytest.fixture
def other_product(other_vendor, category):
    return Product.objects.create(
        vendor=other_vendor,
        category=category,
        name="Canvas Tote",
        sku="TOTE-001",
        price=Decimal("70.00"),
        inventory=50,
    )


@pytest.fixture
def backdate():
    """Rewrite ``created_at`` (set by auto_now_add) on a saved instance."""

    def _backdate(instance, when):
        type(instance).objects.filter(pk=instance.pk).update(created_at=when)
        instance.created_at = when
        return instance

    return _backdate


@pytest.fixture
def make_order(db, customer_user, backdate):
    counter = {"n": 0}

    def _make_order(lines, *, user=customer_user, status=Order.Status.PENDING, created_at=None):
        counter["n"] += 1
        order = Order.objects.create(
            order_number=f"ORD-{counter['n']:05d}",
            user=user,
            status=status,
        )
        total = Decimal("0.00")
        for line_product, quantity, price in lines:
            item = OrderItem.objects.create(
                order=order,
                product=line_product,
                quantity=quantity,
                price=Decimal(str(price)),
            )
            total += item.total
        order.total = total
        order.save(update_fields=["total"])
        if created_at is not None:
            backdate(order, created_at)
        return order

    return _make_order


@pytest.fixture
def make_commission(db, make_order, backdate):
    def _make_commission(
        vendor,
        product,
        sale_amount="100.00",
        rate="0.10",
        *,
        fee="0.00",
        bonus="0.00",
        status=Commission.Status.PENDING,
        created_at=None,
        order=None,
    ):
        sale_amount, rate = Decimal(sale_amount), Decimal(rate)
        order = order or make_order([(product, 1, sale_amount)], status=Order.Status.DELIVERED)
        commission = Commission.objects.create(
            vendor=vendor,
            product=product,
            order=order,
            sale_amount=sale_amount,
            commission_rate=rate,
            commission_amount=quantize_money(sale_amount * rate),
            transaction_fee=Decimal(fee),
            performance_bonus=Decimal(bonus),
            status=status,
        )
        if created_at is not None:
            backdate(commission, created_at)
        return commission

    return _make_commission


@pytest.fixture
def days_ago():
    def _days_ago(days, hours=0):
        return timezone.now() - timedelta(days=days, hours=hours)

    return _days_ago
