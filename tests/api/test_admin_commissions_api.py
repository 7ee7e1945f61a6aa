import csv
import io
import uuid
from decimal import Decimal

import pytest

from commissions.models import Commission, VendorPayout

REPORT_URL = "/api/v1/admin/commissions/"


@pytest.mark.django_db
class TestAdminCommissionReportAccess:
    def test_anonymous_is_unauthorized(self, api_client):
        response = api_client.get(REPORT_URL)

        assert response.status_code == 401
        assert response.json() == {"success": False, "error": "Unauthorized"}

    @pytest.mark.parametrize("client_fixture", ["customer_client", "vendor_client"])
    def test_non_admin_roles_are_unauthorized(self, request, client_fixture):
        response = request.getfixturevalue(client_fixture).get(REPORT_URL)

        assert response.status_code == 401

    def test_non_integer_days_is_a_validation_error(self, admin_client):
        response = admin_client.get(REPORT_URL, {"days": "abc"})

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "Invalid request"
        assert "days" in body["details"]


@pytest.mark.django_db
class TestAdminCommissionReport:
    def test_three_sales_on_one_day(self, admin_client, make_commission, vendor_user, product):
        for _ in range(3):
            make_commission(vendor_user, product, "100.00", "0.10")

        response = admin_client.get(REPORT_URL, {"days": 30, "currency": "XYZ"})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        data = body["data"]
        assert data["currency"] == "USD"
        overview = data["overview"]
        assert overview["totalPlatformEarnings"] == 30
        assert overview["totalVendorEarnings"] == 30
        assert overview["totalCommissionVolume"] == 300
        assert overview["activeVendors"] == 1
        assert overview["averageCommissionRate"] == pytest.approx(0.1)

        daily = data["dailyEarnings"]
        assert len(daily) == 30
        today = daily[-1]
        assert today["transactionCount"] == 3
        assert today["vendorEarnings"] == 30
        assert today["platformEarnings"] == 30
        assert sum(day["totalVolume"] for day in daily) == overview["totalCommissionVolume"]

    def test_period_over_period_change(self, admin_client, make_commission, vendor_user, product, days_ago):
        make_commission(vendor_user, product, "100.00", "0.10", created_at=days_ago(10))
        for _ in range(3):
            make_commission(vendor_user, product, "100.00", "0.10")

        data = admin_client.get(REPORT_URL, {"days": 7}).json()["data"]

        assert data["overview"]["earningsChange"] == 200
        assert data["overview"]["volumeChange"] == 200

    def test_no_previous_period_reports_flat_100(self, admin_client, make_commission, vendor_user, product):
        make_commission(vendor_user, product)

        overview = admin_client.get(REPORT_URL).json()["data"]["overview"]

        assert overview["earningsChange"] == 100

    def test_negative_platform_earnings_are_reported(self, admin_client, make_commission, vendor_user, product):
        make_commission(vendor_user, product, "100.00", "0.05", bonus="20.00")

        data = admin_client.get(REPORT_URL).json()["data"]

        assert data["overview"]["totalPlatformEarnings"] == -15
        assert data["recentTransactions"][0]["platformEarnings"] == -15

    def test_amounts_are_converted(self, admin_client, make_commission, vendor_user, product):
        for _ in range(3):
            make_commission(vendor_user, product, "100.00", "0.10")

        data = admin_client.get(REPORT_URL, {"currency": "eur"}).json()["data"]

        assert data["currency"] == "EUR"
        assert data["overview"]["totalVendorEarnings"] == pytest.approx(27.6)
        assert data["overview"]["totalCommissionVolume"] == pytest.approx(276)

    def test_converted_totals_match_daily_buckets(
        self, admin_client, make_commission, vendor_user, product, days_ago
    ):
        make_commission(vendor_user, product, "0.05", "0.10", created_at=days_ago(1))
        make_commission(vendor_user, product, "0.05", "0.10")

        data = admin_client.get(REPORT_URL, {"days": 7, "currency": "EUR"}).json()["data"]

        daily = data["dailyEarnings"]
        overview = data["overview"]
        assert overview["totalCommissionVolume"] == pytest.approx(0.1)
        assert sum(day["totalVolume"] for day in daily) == pytest.approx(overview["totalCommissionVolume"])
        assert sum(day["vendorEarnings"] for day in daily) == pytest.approx(overview["totalVendorEarnings"])
        assert sum(day["platformEarnings"] for day in daily) == pytest.approx(
            overview["totalPlatformEarnings"]
        )

    def test_top_vendors_and_recent_transactions(
        self, admin_client, make_commission, vendor_user, other_vendor, product, other_product
    ):
        make_commission(vendor_user, product, "100.00", "0.10")
        make_commission(other_vendor, other_product, "500.00", "0.10")
        make_commission(other_vendor, other_product, "100.00", "0.10")

        data = admin_client.get(REPORT_URL).json()["data"]

        top = data["topVendorEarnings"]
        assert [v["vendorEmail"] for v in top] == [other_vendor.email, vendor_user.email]
        assert top[0]["totalEarnings"] == 60
        assert top[0]["orderCount"] == 2
        assert len(data["recentTransactions"]) == 3
        assert {"orderNumber", "productName", "vendorName", "status"} <= set(data["recentTransactions"][0])

    def test_old_commissions_are_outside_the_window(
        self, admin_client, make_commission, vendor_user, product, days_ago
    ):
        make_commission(vendor_user, product, created_at=days_ago(40))

        overview = admin_client.get(REPORT_URL, {"days": 30}).json()["data"]["overview"]

        assert overview["totalCommissionVolume"] == 0
        assert overview["activeVendors"] == 0


@pytest.mark.django_db
def test_commission_export_csv(admin_client, make_commission, vendor_user, product):
    commission = make_commission(vendor_user, product, "100.00", "0.08", fee="0.30")

    response = admin_client.get("/api/v1/admin/commissions/export/", {"days": 7, "currency": "USD"})

    assert response.status_code == 200
    assert response["Content-Type"].startswith("text/csv")
    assert "admin-commission-report-7days-USD.csv" in response["Content-Disposition"]
    rows = list(csv.reader(io.StringIO(response.content.decode("utf-8-sig"))))
    assert rows[0][0] == "Date"
    assert rows[0][6] == "Commission Rate (%)"
    assert rows[1][1] == commission.order.order_number
    assert rows[1][5:11] == ["100.00", "8.00%", "8.00", "0.30", "0.00", "8.30"]
    assert rows[1][-1] == "USD"


@pytest.mark.django_db
def test_commission_export_requires_admin(vendor_client):
    assert vendor_client.get("/api/v1/admin/commissions/export/").status_code == 401


@pytest.mark.django_db
class TestCommissionStatusAPI:
    def _post(self, client, commission_id, status):
        return client.post(
            f"/api/v1/admin/commissions/{commission_id}/status/",
            {"status": status},
            format="json",
        )

    def test_approve(self, admin_client, make_commission, vendor_user, product):
        commission = make_commission(vendor_user, product)

        response = self._post(admin_client, commission.pk, "APPROVED")

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "APPROVED"
        commission.refresh_from_db()
        assert commission.status == Commission.Status.APPROVED

    def test_illegal_transition_is_400(self, admin_client, make_commission, vendor_user, product):
        commission = make_commission(vendor_user, product, status=Commission.Status.PAID)

        response = self._post(admin_client, commission.pk, "PENDING")

        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_unknown_status_value_is_400(self, admin_client, make_commission, vendor_user, product):
        commission = make_commission(vendor_user, product)

        response = self._post(admin_client, commission.pk, "ARCHIVED")

        assert response.status_code == 400
        assert "status" in response.json()["details"]

    def test_unknown_commission_is_404(self, admin_client):
        response = self._post(admin_client, uuid.uuid4(), "APPROVED")

        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "Not found"}


@pytest.mark.django_db
class TestPayoutAPI:
    def _post(self, client, vendor, days_ago):
        return client.post(
            "/api/v1/admin/payouts/",
            {
                "vendor": str(vendor.pk),
                "period_start": days_ago(30).isoformat(),
                "period_end": days_ago(0).isoformat(),
            },
            format="json",
        )

    def test_creates_payout(self, admin_client, make_commission, vendor_user, product, days_ago):
        for _ in range(2):
            make_commission(vendor_user, product, "400.00", "0.10", status=Commission.Status.APPROVED)

        response = self._post(admin_client, vendor_user, days_ago)

        assert response.status_code == 201
        data = response.json()["data"]
        assert Decimal(data["total_amount"]) == Decimal("80.00")
        assert data["commission_count"] == 2
        assert VendorPayout.objects.count() == 1

    def test_nothing_to_pay(self, admin_client, vendor_user, days_ago):
        response = self._post(admin_client, vendor_user, days_ago)

        assert response.status_code == 200
        assert response.json() == {"success": True, "data": None}

    def test_customer_is_not_a_payable_vendor(self, admin_client, customer_user, days_ago):
        response = self._post(admin_client, customer_user, days_ago)

        assert response.status_code == 400
        assert "vendor" in response.json()["details"]
