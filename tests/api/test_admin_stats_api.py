from decimal import Decimal

import pytest

from catalog.models import Product
from orders.models import Order

STATS_URL = "/api/v1/admin/stats/"


@pytest.mark.django_db
class TestAdminStatsAPI:
    def test_requires_admin(self, vendor_client, api_client):
        assert vendor_client.get(STATS_URL).status_code == 401
        assert api_client.get(STATS_URL).status_code == 401

    def test_totals_exclude_cancelled_orders(self, admin_client, make_order, product, other_product):
        make_order([(product, 2, "100.00")])
        make_order([(other_product, 1, "70.00")], status=Order.Status.DELIVERED)
        make_order([(product, 5, "100.00")], status=Order.Status.CANCELLED)

        response = admin_client.get(STATS_URL, {"range": "week"})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["range"] == "week"
        assert data["totalSales"] == 270
        assert data["totalOrders"] == 2
        assert data["totalProducts"] == 2
        assert data["totalUsers"] == 1
        assert data["pendingOrderCount"] == 1
        assert len(data["salesByDay"]) == 7
        assert sum(day["sales"] for day in data["salesByDay"]) == data["totalSales"]
        assert data["salesByDay"][-1]["orders"] == 2
        assert len(data["recentOrders"]) == 3

    def test_growth_without_previous_period(self, admin_client, make_order, product):
        make_order([(product, 1, "100.00")])

        growth = admin_client.get(STATS_URL).json()["data"]["growthRates"]

        assert growth == {"sales": 100, "orders": 100, "products": 100, "users": 100}

    def test_growth_against_previous_period(self, admin_client, make_order, product, days_ago):
        make_order([(product, 1, "100.00")], created_at=days_ago(10))
        make_order([(product, 1, "150.00")])

        growth = admin_client.get(STATS_URL, {"range": "week"}).json()["data"]["growthRates"]

        assert growth["sales"] == 50
        assert growth["orders"] == 0

    def test_unknown_range_falls_back_to_week(self, admin_client):
        data = admin_client.get(STATS_URL, {"range": "decade"}).json()["data"]

        assert data["range"] == "week"
        assert len(data["salesByDay"]) == 7

    def test_low_stock_products(self, admin_client, category, vendor_user, product):
        Product.objects.create(
            vendor=vendor_user, category=category, name="Cap", sku="CAP-1",
            price=Decimal("15.00"), inventory=3,
        )
        Product.objects.create(
            vendor=vendor_user, category=category, name="Scarf", sku="SCARF-1",
            price=Decimal("25.00"), inventory=0, is_published=False,
        )

        low_stock = admin_client.get(STATS_URL).json()["data"]["lowStockProducts"]

        assert [p["name"] for p in low_stock] == ["Cap"]
        assert low_stock[0]["inventory"] == 3

    def test_results_are_cached_per_range(self, admin_client, make_order, product):
        make_order([(product, 1, "100.00")])
        first = admin_client.get(STATS_URL, {"range": "month"}).json()["data"]

        make_order([(product, 1, "100.00")])
        cached = admin_client.get(STATS_URL, {"range": "month"}).json()["data"]
        other_range = admin_client.get(STATS_URL, {"range": "year"}).json()["data"]

        assert cached["totalOrders"] == first["totalOrders"] == 1
        assert other_range["totalOrders"] == 2
