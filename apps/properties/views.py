"""Property API views."""

from __future__ import annotations

from django.db.models import Count  # type: ignore
from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import serializers, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.filters import OrderingFilter, SearchFilter  # type: ignore
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.audit.services import log_action
from apps.users.permissions import HasPermission, Permission
from shared.infrastructure.uploads import UploadValidationError

from .filters import PropertyFilterSet
from .models import Destination, Property
from .serializers import (
    DestinationImageUploadSerializer,
    DestinationSerializer,
    PropertySerializer,
    PropertyWriteSerializer,
)
from .services import remove_destination_image, upload_destination_image


class PropertyViewSet(viewsets.ModelViewSet):
    """Back-office property registry."""

    queryset = Property.objects.select_related("destination").all()
    permission_classes = [
        HasPermission(Permission.PROPERTY_VIEW, Permission.PROPERTY_EDIT, Permission.PROPERTY_DELETE)
    ]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_class = PropertyFilterSet
    ordering_fields = ["name", "created_at", "max_guests"]
    ordering = ["name"]

    def get_serializer_class(self):  # type: ignore
        if self.action in {"create", "update", "partial_update"}:
            return PropertyWriteSerializer
        return PropertySerializer

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        property_obj = serializer.save(created_by=request.user)
        log_action(request.user, "create_property", property_obj, serializer.validated_data)
        read_serializer = PropertySerializer(property_obj, context=self.get_serializer_context())
        return Response(read_serializer.data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):  # type: ignore
        partial = kwargs.pop("partial", False)
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        property_obj = serializer.save()
        log_action(request.user, "update_property", property_obj, serializer.validated_data)
        return Response(PropertySerializer(property_obj, context=self.get_serializer_context()).data)

    def perform_destroy(self, instance):  # type: ignore
        log_action(self.request.user, "delete_property", instance, {"name": instance.name})
        instance.delete()


class DestinationViewSet(viewsets.ModelViewSet):
    serializer_class = DestinationSerializer
    queryset = Destination.objects.annotate(properties_count=Count("properties")).all()
    permission_classes = [HasPermission(Permission.PROPERTY_VIEW, Permission.PROPERTY_EDIT)]
    filter_backends = [SearchFilter, OrderingFilter]
    search_fields = ["name", "country", "region"]
    ordering_fields = ["name", "country"]

    @action(
        detail=True,
        methods=["post", "delete"],
        url_path="image",
        parser_classes=[MultiPartParser, FormParser, JSONParser],
    )
    def image(self, request, pk=None):  # type: ignore
        destination = self.get_object()
        if request.method == "DELETE":
            remove_destination_image(destination, user=request.user)
            return Response(status=status.HTTP_204_NO_CONTENT)

        serializer = DestinationImageUploadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            upload_destination_image(
                destination,
                serializer.validated_data["image"],
                serializer.validated_data.get("alt_text", ""),
                user=request.user,
            )
        except UploadValidationError as exc:
            raise serializers.ValidationError({"image": [exc.message]})
        return Response(DestinationSerializer(destination, context=self.get_serializer_context()).data)
