"""URL routing for bookings, availability checks and availability requests."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import SimpleRouter  # type: ignore

from .views import AvailabilityImportView, AvailabilityRequestViewSet, BookingViewSet

router = SimpleRouter()
router.register(r"properties/(?P<property_id>\d+)/bookings", BookingViewSet, basename="property-booking")
router.register(r"availability-requests", AvailabilityRequestViewSet, basename="availability-request")

urlpatterns = [
    path("bookings/import-csv/", AvailabilityImportView.as_view(), name="availability-import"),
    path("", include(router.urls)),
]
