"""Main API URL router for /api/v1/."""
from django.urls import path

from api.v1 import views

urlpatterns = [
    # Admin
    path("admin/commissions/", views.AdminCommissionReportAPIView.as_view(), name="admin-commissions"),
    path(
        "admin/commissions/export/",
        views.AdminCommissionExportAPIView.as_view(),
        name="admin-commissions-export",
    ),
    path(
        "admin/commissions/<uuid:pk>/status/",
        views.AdminCommissionStatusAPIView.as_view(),
        name="admin-commission-status",
    ),
    path("admin/payouts/", views.AdminPayoutAPIView.as_view(), name="admin-payouts"),
    path("admin/stats/", views.AdminStatsAPIView.as_view(), name="admin-stats"),
    # Vendor
    path("vendor/performance/", views.VendorPerformanceAPIView.as_view(), name="vendor-performance"),
    path(
        "vendor/commissions/",
        views.VendorCommissionAnalyticsAPIView.as_view(),
        name="vendor-commissions",
    ),
    path(
        "vendor/commission-settings/",
        views.VendorCommissionSettingsAPIView.as_view(),
        name="vendor-commission-settings",
    ),
    path("vendor/plans/", views.VendorPlansAPIView.as_view(), name="vendor-plans"),
    # Currency
    path("currency/exchange-rates/", views.ExchangeRatesAPIView.as_view(), name="exchange-rates"),
]
