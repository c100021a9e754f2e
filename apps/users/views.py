"""User API views."""

from __future__ import annotations

from django.contrib.auth import get_user_model  # type: ignore
from rest_framework import viewsets  # type: ignore
from rest_framework.filters import OrderingFilter, SearchFilter  # type: ignore

from .permissions import IsAdminRole
from .serializers import UserAdminSerializer

User = get_user_model()


class UserViewSet(viewsets.ModelViewSet):
    """Account management, available to administrators only."""

    serializer_class = UserAdminSerializer
    queryset = User.objects.all()
    permission_classes = [IsAdminRole]
    filter_backends = [SearchFilter, OrderingFilter]
    search_fields = ["email", "first_name", "last_name"]
    ordering_fields = ["email", "created_at", "role"]

    def perform_destroy(self, instance):  # type: ignore
        # Accounts are deactivated so audit history keeps its author.
        instance.is_active = False
        instance.save(update_fields=["is_active"])
