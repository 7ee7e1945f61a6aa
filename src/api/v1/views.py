"""Marketplace analytics and commission API (``/api/v1/``)."""
import logging

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.models import User
from accounts.roles import has_role
from analytics.services import (
    EXPORT_HEADERS,
    build_admin_commission_report,
    build_admin_stats,
    build_vendor_commission_analytics,
    build_vendor_performance,
    commission_export_rows,
)
from api.v1.permissions import IsAdminRole, IsVendorRole
from api.v1.serializers import (
    CommissionSerializer,
    CommissionStatusSerializer,
    CurrencyQuerySerializer,
    DaysQuerySerializer,
    PayoutRequestSerializer,
    PeriodQuerySerializer,
    StatsQuerySerializer,
    VendorCommissionSettingsSerializer,
    VendorPayoutSerializer,
)
from commissions.models import Commission
from commissions.services import (
    change_commission_status,
    generate_vendor_payout,
    get_or_create_vendor_settings,
    list_vendor_plans,
)
from core.export import rows_to_csv_response
from currency.rates import get_rates_provider

logger = logging.getLogger("uniqverse")


def _query(serializer_class, request):
    serializer = serializer_class(data=request.query_params)
    serializer.is_valid(raise_exception=True)
    return serializer.validated_data


def _ok(data, status_code=status.HTTP_200_OK):
    return Response({"success": True, "data": data}, status=status_code)


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------

class AdminCommissionReportAPIView(APIView):
    permission_classes = [IsAdminRole]

    def get(self, request):
        params = _query(DaysQuerySerializer, request)
        return _ok(build_admin_commission_report(params["days"], params["currency"]))


class AdminCommissionExportAPIView(APIView):
    permission_classes = [IsAdminRole]

    def get(self, request):
        params = _query(DaysQuerySerializer, request)
        days, currency = params["days"], params["currency"]
        logger.info("Commission export requested by %s (%s days, %s)", request.user.pk, days, currency)
        return rows_to_csv_response(
            EXPORT_HEADERS,
            commission_export_rows(days, currency),
            f"admin-commission-report-{days}days-{currency}",
        )


class AdminCommissionStatusAPIView(APIView):
    permission_classes = [IsAdminRole]

    def post(self, request, pk):
        commission = get_object_or_404(Commission.objects.select_related("vendor", "product", "order"), pk=pk)
        serializer = CommissionStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        change_commission_status(commission, serializer.validated_data["status"])
        return _ok(CommissionSerializer(commission).data)


class AdminPayoutAPIView(APIView):
    permission_classes = [IsAdminRole]

    def post(self, request):
        serializer = PayoutRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        payout = generate_vendor_payout(
            serializer.validated_data["vendor"],
            serializer.validated_data["period_start"],
            serializer.validated_data["period_end"],
        )
        if payout is None:
            return _ok(None)
        return _ok(VendorPayoutSerializer(payout).data, status.HTTP_201_CREATED)


class AdminStatsAPIView(APIView):
    permission_classes = [IsAdminRole]

    def get(self, request):
        params = _query(StatsQuerySerializer, request)
        return _ok(build_admin_stats(params["range"]))


# ---------------------------------------------------------------------------
# Vendor
# ---------------------------------------------------------------------------

class VendorPerformanceAPIView(APIView):
    permission_classes = [IsVendorRole]

    def get(self, request):
        params = _query(PeriodQuerySerializer, request)
        return _ok(build_vendor_performance(request.user, params["period"], params["currency"]))


class VendorCommissionAnalyticsAPIView(APIView):
    permission_classes = [IsVendorRole]

    def get(self, request):
        params = _query(DaysQuerySerializer, request)
        return _ok(build_vendor_commission_analytics(request.user, params["days"], params["currency"]))


class VendorCommissionSettingsAPIView(APIView):
    permission_classes = [IsVendorRole]

    def get(self, request):
        vendor_settings = get_or_create_vendor_settings(request.user)
        return _ok(VendorCommissionSettingsSerializer(vendor_settings).data)

    def patch(self, request):
        vendor_settings = get_or_create_vendor_settings(request.user)
        serializer = VendorCommissionSettingsSerializer(vendor_settings, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        logger.info("Commission settings updated for vendor %s", request.user.pk)
        return _ok(serializer.data)


class VendorPlansAPIView(APIView):
    permission_classes = [AllowAny]

    def get(self, request):
        params = _query(CurrencyQuerySerializer, request)
        vendor = request.user if has_role(request.user, User.Role.VENDOR) else None
        return _ok(list_vendor_plans(params["currency"], vendor=vendor))


# ---------------------------------------------------------------------------
# Currency
# ---------------------------------------------------------------------------

class ExchangeRatesAPIView(APIView):
    permission_classes = [AllowAny]

    def get(self, request):
        table = get_rates_provider().get_rate_table()
        payload = {
            "success": True,
            "base": table.base,
            "date": table.date,
            "provider": table.provider,
            "rates": table.rates,
        }
        if table.is_fallback:
            payload["isFallback"] = True
            payload["error"] = table.error
        return Response(payload)
