"""DRF serializers for query validation and commission resources."""
from decimal import Decimal

from rest_framework import serializers

from accounts.models import User
from analytics.periods import DEFAULT_PERIOD, DEFAULT_RANGE, PERIOD_DAYS, RANGE_DAYS
from commissions.models import Commission, VendorCommissionSettings, VendorPayout
from commissions.plans import get_plan
from currency.services import resolve_currency


# ---------------------------------------------------------------------------
# Query parameters
# ---------------------------------------------------------------------------

class CurrencyQuerySerializer(serializers.Serializer):
    currency = serializers.CharField(required=False, allow_blank=True, default="")

    def validate_currency(self, value):
        return resolve_currency(value.strip())


class DaysQuerySerializer(CurrencyQuerySerializer):
    days = serializers.IntegerField(required=False, default=30, min_value=1, max_value=365)


class PeriodQuerySerializer(CurrencyQuerySerializer):
    period = serializers.CharField(required=False, allow_blank=True, default=DEFAULT_PERIOD)

    def validate_period(self, value):
        return value if value in PERIOD_DAYS else DEFAULT_PERIOD


class StatsQuerySerializer(serializers.Serializer):
    range = serializers.CharField(required=False, allow_blank=True, default=DEFAULT_RANGE)

    def validate_range(self, value):
        return value if value in RANGE_DAYS else DEFAULT_RANGE


# ---------------------------------------------------------------------------
# Commissions
# ---------------------------------------------------------------------------

class CommissionSerializer(serializers.ModelSerializer):
    vendor_email = serializers.EmailField(source="vendor.email", read_only=True)
    product_name = serializers.CharField(source="product.name", read_only=True)
    order_number = serializers.CharField(source="order.order_number", read_only=True)
    platform_earnings = serializers.SerializerMethodField()

    class Meta:
        model = Commission
        fields = [
            "id", "vendor", "vendor_email", "product", "product_name",
            "order", "order_number", "sale_amount", "commission_rate",
            "commission_amount", "transaction_fee", "performance_bonus",
            "platform_earnings", "status", "payout", "processed_at", "created_at",
        ]
        read_only_fields = fields

    def get_platform_earnings(self, obj):
        return str(obj.platform_earnings)


class CommissionStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Commission.Status.choices)


class VendorPayoutSerializer(serializers.ModelSerializer):
    vendor_email = serializers.EmailField(source="vendor.email", read_only=True)

    class Meta:
        model = VendorPayout
        fields = [
            "id", "vendor", "vendor_email", "total_amount", "commission_count",
            "period_start", "period_end", "status", "payment_method",
            "processed_at", "created_at",
        ]
        read_only_fields = fields


class PayoutRequestSerializer(serializers.Serializer):
    vendor = serializers.PrimaryKeyRelatedField(queryset=User.objects.vendors())
    period_start = serializers.DateTimeField()
    period_end = serializers.DateTimeField()

    def validate(self, attrs):
        if attrs["period_start"] > attrs["period_end"]:
            raise serializers.ValidationError(
                {"period_end": "period_end must not be before period_start."}
            )
        return attrs


class VendorCommissionSettingsSerializer(serializers.ModelSerializer):
    """The vendor's own settings; the rate follows the chosen plan."""

    transaction_fee = serializers.SerializerMethodField()
    monthly_fee = serializers.SerializerMethodField()
    max_products = serializers.SerializerMethodField()
    minimum_payout = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=Decimal("0.00"),
        required=False,
    )

    class Meta:
        model = VendorCommissionSettings
        fields = [
            "plan_type", "commission_rate", "transaction_fee", "monthly_fee",
            "max_products", "minimum_payout", "payment_method", "updated_at",
        ]
        read_only_fields = ["commission_rate", "updated_at"]

    def get_transaction_fee(self, obj):
        return str(obj.plan.transaction_fee)

    def get_monthly_fee(self, obj):
        return str(obj.plan.monthly_fee)

    def get_max_products(self, obj):
        return obj.plan.max_products

    def update(self, instance, validated_data):
        plan_type = validated_data.get("plan_type")
        if plan_type and plan_type != instance.plan_type:
            validated_data["commission_rate"] = get_plan(plan_type).commission_rate
        return super().update(instance, validated_data)

