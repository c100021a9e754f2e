"""Pricing API views. Everything here is financial data."""

from __future__ import annotations

from django.http import HttpResponse  # type: ignore
from rest_framework import serializers, views, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.properties.mixins import PropertyScopedMixin
from apps.users.permissions import HasPermission, Permission

from . import services
from .models import MinimumStayRule, OperationalCost, PriceRange
from .serializers import (
    MinimumStayRuleSerializer,
    OperationalCostSerializer,
    PriceRangeExportQuerySerializer,
    PriceRangeImportSerializer,
    PriceRangeSerializer,
    PricingItemImportSerializer,
    PricingOverviewSerializer,
    PropertyPricingSerializer,
    QuoteSerializer,
    StayQuerySerializer,
)

FinancialPermission = HasPermission(Permission.FINANCIAL_VIEW, Permission.FINANCIAL_EDIT)


class PropertyPricingView(PropertyScopedMixin, views.APIView):
    """Pricing overview of a property (GET) and its general settings (PUT/PATCH)."""

    permission_classes = [FinancialPermission]

    def get(self, request, property_id=None):  # type: ignore
        overview = services.get_property_pricing(self.get_property(), request.user)
        return Response(PricingOverviewSerializer(overview).data)

    def put(self, request, property_id=None):  # type: ignore
        return self._save(request, partial=False)

    def patch(self, request, property_id=None):  # type: ignore
        return self._save(request, partial=True)

    def _save(self, request, partial: bool):  # type: ignore
        existing = getattr(self.get_property(), "pricing", None)
        serializer = PropertyPricingSerializer(existing, data=request.data, partial=partial or existing is None)
        serializer.is_valid(raise_exception=True)
        pricing = services.upsert_property_pricing(self.get_property(), serializer.validated_data, request.user)
        return Response(PropertyPricingSerializer(pricing).data)


class PriceRangeViewSet(PropertyScopedMixin, viewsets.ModelViewSet):
    serializer_class = PriceRangeSerializer
    queryset = PriceRange.objects.all()
    permission_classes = [FinancialPermission]
    pagination_class = None

    def get_queryset(self):  # type: ignore
        return super().get_queryset().filter(property=self.get_property()).order_by("start_date", "id")

    def perform_create(self, serializer):  # type: ignore
        try:
            serializer.instance = services.create_price_range(
                self.get_property(), serializer.validated_data, self.request.user
            )
        except services.PricingConflictError as exc:
            raise serializers.ValidationError({"non_field_errors": [exc.message]})

    def perform_update(self, serializer):  # type: ignore
        try:
            serializer.instance = services.update_price_range(
                serializer.instance, serializer.validated_data, self.request.user
            )
        except services.PricingConflictError as exc:
            raise serializers.ValidationError({"non_field_errors": [exc.message]})

    def perform_destroy(self, instance):  # type: ignore
        services.delete_pricing_item(instance, self.request.user)

    @action(detail=False, methods=["get"])
    def quote(self, request, property_id=None):  # type: ignore
        query = StayQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        data = query.validated_data
        return Response(QuoteSerializer(services.quote_stay(self.get_property(), data["start_date"], data["end_date"])).data)


class PricingItemViewSet(PropertyScopedMixin, viewsets.ModelViewSet):
    """Shared CRUD of minimum stay rules and operational costs."""

    permission_classes = [FinancialPermission]
    pagination_class = None

    def get_queryset(self):  # type: ignore
        return super().get_queryset().filter(property=self.get_property())

    def perform_create(self, serializer):  # type: ignore
        model = serializer.Meta.model
        serializer.instance = services.save_pricing_item(
            model(property=self.get_property()), serializer.validated_data, self.request.user
        )

    def perform_update(self, serializer):  # type: ignore
        serializer.instance = services.save_pricing_item(
            serializer.instance, serializer.validated_data, self.request.user
        )

    def perform_destroy(self, instance):  # type: ignore
        services.delete_pricing_item(instance, self.request.user)


class MinimumStayRuleViewSet(PricingItemViewSet):
    serializer_class = MinimumStayRuleSerializer
    queryset = MinimumStayRule.objects.order_by("start_date", "id")

    @action(detail=False, methods=["get"], url_path="check")
    def check_stay(self, request, property_id=None):  # type: ignore
        query = StayQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        data = query.validated_data
        violations = services.evaluate_minimum_stay(self.get_property(), data["start_date"], data["end_date"])
        return Response({"valid": not violations, "violations": violations})


class OperationalCostViewSet(PricingItemViewSet):
    serializer_class = OperationalCostSerializer
    queryset = OperationalCost.objects.order_by("created_at", "id")


class PriceRangeImportView(views.APIView):
    permission_classes = [FinancialPermission]

    def post(self, request):  # type: ignore
        serializer = PriceRangeImportSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        result = services.import_price_ranges(
            data["price_ranges"],
            skip_conflicts=data["skip_conflicts"],
            update_existing=data["update_existing"],
            user=request.user,
        )
        return Response(result)


class PriceRangeExportView(views.APIView):
    permission_classes = [FinancialPermission]

    def get(self, request):  # type: ignore
        query = PriceRangeExportQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        params = query.validated_data
        queryset = services.price_ranges_for_export(
            params.get("property_ids"), params.get("start_date"), params.get("end_date")
        )
        content = services.export_price_ranges_csv(queryset, request.user)
        response = HttpResponse(content, content_type="text/csv; charset=utf-8")
        response["Content-Disposition"] = f'attachment; filename="{services.price_ranges_export_filename()}"'
        return response


class PricingItemImportView(views.APIView):
    """Bulk creation of minimum stay rules or operational costs across properties."""

    permission_classes = [FinancialPermission]
    importer = None

    def post(self, request):  # type: ignore
        serializer = PricingItemImportSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return Response(self.importer(serializer.validated_data["rows"], user=request.user))


class MinimumStayRuleImportView(PricingItemImportView):
    importer = staticmethod(services.import_minimum_stay_rules)


class OperationalCostImportView(PricingItemImportView):
    importer = staticmethod(services.import_operational_costs)
