"""Admin configuration for the commissions app."""
from django.contrib import admin

from .models import Commission, VendorCommissionSettings, VendorPayout


@admin.register(Commission)
class CommissionAdmin(admin.ModelAdmin):
    list_display = (
        "order", "vendor", "product", "sale_amount", "commission_rate",
        "commission_amount", "status", "created_at",
    )
    list_filter = ("status",)
    search_fields = ("order__order_number", "vendor__email", "product__name")
    readonly_fields = (
        "id", "sale_amount", "commission_rate", "commission_amount",
        "transaction_fee", "performance_bonus", "created_at", "updated_at",
    )
    raw_id_fields = ("order", "order_item", "product", "vendor", "payout")
    list_select_related = ("order", "vendor", "product")


@admin.register(VendorCommissionSettings)
class VendorCommissionSettingsAdmin(admin.ModelAdmin):
    list_display = ("vendor", "plan_type", "commission_rate", "minimum_payout", "payment_method")
    list_filter = ("plan_type", "payment_method")
    search_fields = ("vendor__email",)
    raw_id_fields = ("vendor",)


@admin.register(VendorPayout)
class VendorPayoutAdmin(admin.ModelAdmin):
    list_display = ("vendor", "total_amount", "commission_count", "period_start", "period_end", "status")
    list_filter = ("status",)
    search_fields = ("vendor__email",)
    readonly_fields = ("id", "created_at", "updated_at")
    raw_id_fields = ("vendor",)
