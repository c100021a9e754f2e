"""Contact API views."""

from __future__ import annotations

from django.http import HttpResponse  # type: ignore
from django.shortcuts import get_object_or_404  # type: ignore
from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import serializers, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.filters import OrderingFilter  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.properties.models import Property
from apps.users.permissions import HasPermission, Permission
from shared.infrastructure.pagination import PageLimitPagination

from . import services
from .filters import ContactFilterSet
from .models import Contact
from .serializers import (
    BulkDeleteSerializer,
    ContactImportSerializer,
    ContactLinkInputSerializer,
    ContactPropertySerializer,
    ContactSerializer,
    EmailCheckSerializer,
    ExportQuerySerializer,
)


class ContactPagination(PageLimitPagination):
    results_key = "contacts"


class ContactViewSet(viewsets.ModelViewSet):
    serializer_class = ContactSerializer
    queryset = Contact.objects.prefetch_related("property_links__property").all()
    permission_classes = [HasPermission(Permission.CONTACTS_VIEW, Permission.CONTACTS_EDIT)]
    pagination_class = ContactPagination
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_class = ContactFilterSet
    ordering_fields = ["first_name", "last_name", "email", "category", "created_at", "updated_at"]
    ordering = ["last_name", "first_name", "id"]

    def perform_create(self, serializer):  # type: ignore
        data = dict(serializer.validated_data)
        links = data.pop("properties", [])
        serializer.instance = services.create_contact(data, links, self.request.user)

    def perform_update(self, serializer):  # type: ignore
        data = dict(serializer.validated_data)
        links = data.pop("properties", None)
        serializer.instance = services.update_contact(serializer.instance, data, links, self.request.user)

    def perform_destroy(self, instance):  # type: ignore
        services.delete_contact(instance, self.request.user)

    @action(detail=False, methods=["post"], url_path="bulk-delete")
    def bulk_delete(self, request):  # type: ignore
        serializer = BulkDeleteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        deleted = services.bulk_delete_contacts(serializer.validated_data["ids"], request.user)
        return Response({"deleted": deleted})

    @action(detail=False, methods=["get"], url_path="check-email")
    def check_email(self, request):  # type: ignore
        serializer = EmailCheckSerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        return Response({"unique": services.check_email_unique(data["email"], data.get("exclude_id"))})

    @action(detail=False, methods=["get"])
    def export(self, request):  # type: ignore
        query = ExportQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        params = query.validated_data
        queryset = Contact.objects.all()
        if params.get("ids"):
            queryset = queryset.filter(pk__in=params["ids"])
        elif params.get("category") and params["category"] != "ALL":
            queryset = queryset.filter(category=params["category"])

        content = services.export_contacts_csv(queryset, request.user)
        response = HttpResponse(content, content_type="text/csv; charset=utf-8")
        response["Content-Disposition"] = f'attachment; filename="{services.export_filename()}"'
        return response

    @action(detail=False, methods=["post"], url_path="import")
    def import_contacts(self, request):  # type: ignore
        serializer = ContactImportSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        result = services.import_contacts(
            data["contacts"],
            skip_duplicates=data["skip_duplicates"],
            update_existing=data["update_existing"],
            user=request.user,
        )
        return Response(result)

    @action(detail=True, methods=["post"], url_path="properties")
    def link_property(self, request, pk=None):  # type: ignore
        contact = self.get_object()
        serializer = ContactLinkInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        try:
            link = services.link_property(contact, data["property"], data["relationship"], request.user)
        except services.ContactLinkError as exc:
            raise serializers.ValidationError({"non_field_errors": [exc.message]})
        return Response(ContactPropertySerializer(link).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["delete"], url_path=r"properties/(?P<property_id>\d+)")
    def unlink_property(self, request, pk=None, property_id=None):  # type: ignore
        contact = self.get_object()
        property_obj = get_object_or_404(Property, pk=property_id)
        try:
            services.unlink_property(contact, property_obj, request.user)
        except services.ContactLinkError as exc:
            raise serializers.ValidationError({"non_field_errors": [exc.message]})
        return Response(status=status.HTTP_204_NO_CONTENT)
