"""URL routing for the audit trail."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import AuditLogViewSet, SensitiveDataAccessViewSet

router = DefaultRouter()
router.register(r"logs", AuditLogViewSet, basename="audit-log")
router.register(r"sensitive-access", SensitiveDataAccessViewSet, basename="sensitive-access")

urlpatterns = [
    path("", include(router.urls)),
]
