"""Legal document and resource API views."""

from __future__ import annotations

import os

from django.http import FileResponse, Http404, HttpResponse  # type: ignore
from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import serializers, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.filters import OrderingFilter  # type: ignore
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.properties.mixins import PropertyScopedMixin
from apps.users.permissions import HasPermission, Permission
from shared.infrastructure.pagination import PageLimitPagination
from shared.infrastructure.uploads import UploadValidationError

from . import services
from .filters import LegalDocumentFilterSet
from .models import LegalDocument, Resource
from .serializers import (
    BulkDownloadQuerySerializer,
    DocumentExportQuerySerializer,
    DocumentIdsSerializer,
    DownloadQuerySerializer,
    LegalDocumentSerializer,
    LegalDocumentVersionSerializer,
    LegalDocumentVersionUploadSerializer,
    ResourceSerializer,
)

InternalPermission = HasPermission(Permission.INTERNAL_VIEW, Permission.INTERNAL_EDIT)


class LegalDocumentPagination(PageLimitPagination):
    results_key = "documents"


class LegalDocumentViewSet(viewsets.ModelViewSet):
    serializer_class = LegalDocumentSerializer
    queryset = LegalDocument.objects.select_related("property").prefetch_related("versions").all()
    permission_classes = [InternalPermission]
    parser_classes = [MultiPartParser, FormParser, JSONParser]
    pagination_class = LegalDocumentPagination
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_class = LegalDocumentFilterSet
    ordering_fields = ["name", "category", "status", "expiry_date", "uploaded_at"]
    ordering = ["-uploaded_at", "-id"]

    def perform_create(self, serializer):  # type: ignore
        data = dict(serializer.validated_data)
        upload = data.pop("file")
        try:
            serializer.instance = services.create_document(data, upload, self.request.user)
        except UploadValidationError as exc:
            raise serializers.ValidationError({"file": [exc.message]})

    def perform_update(self, serializer):  # type: ignore
        serializer.instance = services.update_document(
            serializer.instance, serializer.validated_data, self.request.user
        )

    def perform_destroy(self, instance):  # type: ignore
        services.delete_document(instance, self.request.user)

    @action(detail=True, methods=["get", "post"])
    def versions(self, request, pk=None):  # type: ignore
        document = self.get_object()
        if request.method == "GET":
            return Response(LegalDocumentVersionSerializer(document.versions.all(), many=True).data)

        serializer = LegalDocumentVersionUploadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            version = services.upload_version(
                document,
                serializer.validated_data["file"],
                serializer.validated_data["comment"],
                request.user,
            )
        except UploadValidationError as exc:
            raise serializers.ValidationError({"file": [exc.message]})
        return Response(LegalDocumentVersionSerializer(version).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["get"])
    def download(self, request, pk=None):  # type: ignore
        document = self.get_object()
        query = DownloadQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        try:
            stored = services.file_for_download(document, query.validated_data.get("version"))
        except services.VersionNotFound as exc:
            raise Http404(exc.message)
        if not stored or not stored.storage.exists(stored.name):
            raise Http404("File not found")
        return FileResponse(
            stored.open("rb"),
            as_attachment=True,
            filename=os.path.basename(stored.name),
        )

    @action(detail=False, methods=["post"], url_path="bulk-delete")
    def bulk_delete(self, request):  # type: ignore
        serializer = DocumentIdsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        deleted = services.bulk_delete_documents(serializer.validated_data["ids"], request.user)
        return Response({"deleted": deleted})

    @action(detail=False, methods=["get"])
    def export(self, request):  # type: ignore
        query = DocumentExportQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        export_format = query.validated_data["export_format"]
        rows = services.export_documents(self.filter_queryset(self.get_queryset()), request.user)
        if export_format == "json":
            return Response({"format": export_format, "documents": rows})

        response = HttpResponse(services.documents_csv(rows), content_type="text/csv; charset=utf-8")
        response["Content-Disposition"] = f'attachment; filename="{services.documents_export_filename()}"'
        return response

    @action(detail=False, methods=["get"], url_path="bulk-download")
    def bulk_download(self, request):  # type: ignore
        query = BulkDownloadQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        params = query.validated_data
        try:
            archive = services.build_documents_archive(params["ids"], params["include_versions"], request.user)
        except services.NoDocumentsFound as exc:
            raise Http404(exc.message)
        return FileResponse(
            archive,
            as_attachment=True,
            filename=services.archive_filename(),
            content_type="application/zip",
        )


class ResourceViewSet(PropertyScopedMixin, viewsets.ModelViewSet):
    serializer_class = ResourceSerializer
    queryset = Resource.objects.all()
    permission_classes = [InternalPermission]
    parser_classes = [MultiPartParser, FormParser, JSONParser]
    pagination_class = None

    def get_queryset(self):  # type: ignore
        return super().get_queryset().filter(property=self.get_property()).order_by("type", "-created_at")

    def _save(self, resource, serializer):  # type: ignore
        data = dict(serializer.validated_data)
        upload = data.pop("file", None)
        try:
            return services.save_resource(resource, data, upload, self.request.user)
        except UploadValidationError as exc:
            raise serializers.ValidationError({"file": [exc.message]})

    def perform_create(self, serializer):  # type: ignore
        serializer.instance = self._save(Resource(property=self.get_property()), serializer)

    def perform_update(self, serializer):  # type: ignore
        serializer.instance = self._save(serializer.instance, serializer)

    def perform_destroy(self, instance):  # type: ignore
        services.delete_resource(instance, self.request.user)
