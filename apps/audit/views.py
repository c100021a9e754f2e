"""Read-only audit trail API, restricted to administrators."""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import viewsets  # type: ignore

from apps.users.permissions import IsAdminRole
from shared.infrastructure.pagination import PageLimitPagination

from .filters import AuditLogFilterSet, SensitiveDataAccessFilterSet
from .models import AuditLog, SensitiveDataAccess
from .serializers import AuditLogSerializer, SensitiveDataAccessSerializer


class AuditLogPagination(PageLimitPagination):
    results_key = "logs"


class AuditLogViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = AuditLog.objects.select_related("user").all()
    serializer_class = AuditLogSerializer
    permission_classes = [IsAdminRole]
    pagination_class = AuditLogPagination
    filter_backends = [DjangoFilterBackend]
    filterset_class = AuditLogFilterSet


class SensitiveDataAccessViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = SensitiveDataAccess.objects.select_related("user", "property").all()
    serializer_class = SensitiveDataAccessSerializer
    permission_classes = [IsAdminRole]
    pagination_class = PageLimitPagination
    filter_backends = [DjangoFilterBackend]
    filterset_class = SensitiveDataAccessFilterSet
