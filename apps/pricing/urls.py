"""URL routing for pricing."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import SimpleRouter  # type: ignore

from .views import (
    MinimumStayRuleImportView,
    MinimumStayRuleViewSet,
    OperationalCostImportView,
    OperationalCostViewSet,
    PriceRangeExportView,
    PriceRangeImportView,
    PriceRangeViewSet,
    PropertyPricingView,
)

PREFIX = r"properties/(?P<property_id>\d+)/pricing"

router = SimpleRouter()
router.register(rf"{PREFIX}/price-ranges", PriceRangeViewSet, basename="price-range")
router.register(rf"{PREFIX}/minimum-stay-rules", MinimumStayRuleViewSet, basename="minimum-stay-rule")
router.register(rf"{PREFIX}/operational-costs", OperationalCostViewSet, basename="operational-cost")

urlpatterns = [
    path("properties/<int:property_id>/pricing/", PropertyPricingView.as_view(), name="property-pricing"),
    path("pricing/price-ranges/import/", PriceRangeImportView.as_view(), name="price-range-import"),
    path("pricing/price-ranges/export/", PriceRangeExportView.as_view(), name="price-range-export"),
    path(
        "pricing/minimum-stay-rules/import/",
        MinimumStayRuleImportView.as_view(),
        name="minimum-stay-rule-import",
    ),
    path("pricing/operational-costs/import/", OperationalCostImportView.as_view(), name="operational-cost-import"),
    path("", include(router.urls)),
]
