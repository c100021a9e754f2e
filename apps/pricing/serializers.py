"""Serializers for pricing settings, price ranges, rules and costs."""

from __future__ import annotations

from decimal import Decimal

from rest_framework import serializers  # type: ignore

from apps.bookings.serializers import END_AFTER_START, validate_date_order

from .calculations import calculate_commission_amount
from .models import MinimumStayRule, OperationalCost, PriceRange, PropertyPricing

COMMISSION_BELOW_100 = "Commission must be below 100%"


class PropertyPricingSerializer(serializers.ModelSerializer):
    class Meta:
        model = PropertyPricing
        fields = [
            "id",
            "property",
            "currency",
            "display_on_website",
            "retro_commission",
            "last_pricing_update",
            "security_deposit",
            "payment_schedule",
            "min_owner_accepted_price",
            "min_lc_accepted_price",
            "public_minimum_price",
            "net_owner_commission",
            "public_price_commission",
            "b2b2c_partner_commission",
            "public_taxes_commission",
            "client_fees_commission",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "property", "last_pricing_update", "created_at", "updated_at"]


class PriceRangeSerializer(serializers.ModelSerializer):
    commission_amount = serializers.SerializerMethodField()

    class Meta:
        model = PriceRange
        fields = [
            "id",
            "property",
            "name",
            "start_date",
            "end_date",
            "owner_nightly_rate",
            "owner_weekly_rate",
            "commission_rate",
            "public_nightly_rate",
            "public_weekly_rate",
            "commission_amount",
            "is_validated",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "property",
            "public_nightly_rate",
            "public_weekly_rate",
            "created_at",
            "updated_at",
        ]

    def get_commission_amount(self, obj: PriceRange) -> str:
        return f"{calculate_commission_amount(obj.owner_nightly_rate, obj.public_nightly_rate):.2f}"

    def validate_name(self, value: str) -> str:
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Name is required")
        return value

    def validate_commission_rate(self, value: Decimal) -> Decimal:
        if value >= 100:
            raise serializers.ValidationError(COMMISSION_BELOW_100)
        return value

    def validate(self, attrs):  # type: ignore
        validate_date_order(attrs, self.instance)
        return attrs


class MinimumStayRuleSerializer(serializers.ModelSerializer):
    class Meta:
        model = MinimumStayRule
        fields = [
            "id",
            "property",
            "booking_condition",
            "minimum_nights",
            "start_date",
            "end_date",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "property", "created_at", "updated_at"]

    def validate(self, attrs):  # type: ignore
        validate_date_order(attrs, self.instance)
        return attrs


class OperationalCostSerializer(serializers.ModelSerializer):
    class Meta:
        model = OperationalCost
        fields = [
            "id",
            "property",
            "cost_type",
            "price_type",
            "estimated_price",
            "public_price",
            "paid_by",
            "comment",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "property", "created_at", "updated_at"]


class PricingOverviewSerializer(serializers.Serializer):
    pricing = PropertyPricingSerializer(allow_null=True)
    price_ranges = PriceRangeSerializer(many=True)
    minimum_stay_rules = MinimumStayRuleSerializer(many=True)
    operational_costs = OperationalCostSerializer(many=True)


class PriceRangeImportRowSerializer(serializers.Serializer):
    property_id = serializers.IntegerField()
    period_name = serializers.CharField(max_length=100)
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    owner_nightly_rate = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0.01"))
    owner_weekly_rate = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal("0.01"), required=False, allow_null=True
    )
    commission_rate = serializers.DecimalField(
        max_digits=5, decimal_places=2, min_value=Decimal("0"), required=False, default=Decimal("25")
    )
    is_validated = serializers.BooleanField(required=False, default=False)

    def validate_commission_rate(self, value: Decimal) -> Decimal:
        if value >= 100:
            raise serializers.ValidationError(COMMISSION_BELOW_100)
        return value

    def validate(self, attrs):  # type: ignore
        if attrs["end_date"] <= attrs["start_date"]:
            raise serializers.ValidationError({"end_date": [END_AFTER_START]})
        return attrs


class PriceRangeImportSerializer(serializers.Serializer):
    price_ranges = serializers.ListField(child=serializers.DictField(), allow_empty=False)
    skip_conflicts = serializers.BooleanField(required=False, default=False)
    update_existing = serializers.BooleanField(required=False, default=False)


class StayQuerySerializer(serializers.Serializer):
    start_date = serializers.DateField()
    end_date = serializers.DateField()

    def validate(self, attrs):  # type: ignore
        validate_date_order(attrs)
        return attrs


class QuoteCostSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    cost_type = serializers.CharField()
    price_type = serializers.CharField()
    units = serializers.IntegerField()
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)


class QuoteSerializer(serializers.Serializer):
    nights = serializers.IntegerField()
    accommodation = serializers.DecimalField(max_digits=14, decimal_places=2)
    operational_costs = QuoteCostSerializer(many=True)
    total = serializers.DecimalField(max_digits=14, decimal_places=2)
    currency = serializers.CharField()
    unpriced_dates = serializers.ListField(child=serializers.DateField())


class MinimumStayRuleImportRowSerializer(MinimumStayRuleSerializer):
    property_id = serializers.IntegerField()

    class Meta(MinimumStayRuleSerializer.Meta):
        fields = ["property_id", "booking_condition", "minimum_nights", "start_date", "end_date"]
        read_only_fields: list[str] = []


class OperationalCostImportRowSerializer(OperationalCostSerializer):
    property_id = serializers.IntegerField()

    class Meta(OperationalCostSerializer.Meta):
        fields = ["property_id", "cost_type", "price_type", "estimated_price", "public_price", "paid_by", "comment"]
        read_only_fields: list[str] = []


class PricingItemImportSerializer(serializers.Serializer):
    rows = serializers.ListField(child=serializers.DictField(), allow_empty=False)


class PriceRangeExportQuerySerializer(serializers.Serializer):
    property_ids = serializers.CharField(required=False)
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)

    def validate_property_ids(self, value: str) -> list[int]:
        try:
            return [int(part) for part in value.split(",") if part.strip()]
        except ValueError:
            raise serializers.ValidationError("property_ids must be a comma separated list of numbers")

    def validate(self, attrs):  # type: ignore
        validate_date_order(attrs)
        return attrs
