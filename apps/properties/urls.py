"""URL routing for properties and destinations."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import DestinationViewSet, PropertyViewSet

router = DefaultRouter()
router.register(r"destinations", DestinationViewSet, basename="destination")
router.register(r"", PropertyViewSet, basename="property")

urlpatterns = [
    path("", include(router.urls)),
]
