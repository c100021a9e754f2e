"""URL routing for legal documents and property resources."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import SimpleRouter  # type: ignore

from .views import LegalDocumentViewSet, ResourceViewSet

router = SimpleRouter()
router.register(r"legal-documents", LegalDocumentViewSet, basename="legal-document")
router.register(r"properties/(?P<property_id>\d+)/resources", ResourceViewSet, basename="property-resource")

urlpatterns = [
    path("", include(router.urls)),
]
