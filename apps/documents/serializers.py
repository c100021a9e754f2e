"""Serializers for legal documents and resources."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import LegalDocument, LegalDocumentVersion, Resource


class LegalDocumentVersionSerializer(serializers.ModelSerializer):
    class Meta:
        model = LegalDocumentVersion
        fields = ["id", "version_number", "file", "file_size", "mime_type", "comment", "uploaded_by", "uploaded_at"]
        read_only_fields = fields


class LegalDocumentSerializer(serializers.ModelSerializer):
    """Document metadata. The file itself is only accepted on create."""

    property_name = serializers.ReadOnlyField(source="property.name")
    file = serializers.FileField(write_only=True, required=False)
    file_url = serializers.SerializerMethodField()
    versions = LegalDocumentVersionSerializer(many=True, read_only=True)
    tags = serializers.ListField(child=serializers.CharField(max_length=50), required=False)

    class Meta:
        model = LegalDocument
        fields = [
            "id",
            "name",
            "description",
            "category",
            "subcategory",
            "status",
            "property",
            "property_name",
            "expiry_date",
            "reminder_days",
            "file",
            "file_url",
            "file_size",
            "mime_type",
            "uploaded_by",
            "tags",
            "metadata",
            "versions",
            "uploaded_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "property_name",
            "file_url",
            "file_size",
            "mime_type",
            "uploaded_by",
            "versions",
            "uploaded_at",
            "updated_at",
        ]
        extra_kwargs = {
            "description": {"required": False, "allow_blank": True},
            "subcategory": {"required": False, "allow_blank": True},
        }

    def get_file_url(self, obj: LegalDocument) -> str | None:
        return obj.file.url if obj.file else None

    def validate_name(self, value: str) -> str:
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Name is required")
        return value

    def validate(self, attrs):  # type: ignore
        if self.instance is None and not attrs.get("file"):
            raise serializers.ValidationError({"file": ["No file provided"]})
        if self.instance is not None:
            attrs.pop("file", None)
        return attrs


class LegalDocumentVersionUploadSerializer(serializers.Serializer):
    file = serializers.FileField()
    comment = serializers.CharField(max_length=500, required=False, allow_blank=True, default="")


class DownloadQuerySerializer(serializers.Serializer):
    version = serializers.IntegerField(required=False, min_value=1)


class ResourceSerializer(serializers.ModelSerializer):
    location = serializers.ReadOnlyField()

    class Meta:
        model = Resource
        fields = ["id", "property", "type", "name", "file", "url", "location", "uploaded_by", "created_at", "updated_at"]
        read_only_fields = ["id", "property", "location", "uploaded_by", "created_at", "updated_at"]
        extra_kwargs = {
            "file": {"required": False},
            "url": {"required": False, "allow_blank": True},
        }

    def validate(self, attrs):  # type: ignore
        has_file = bool(attrs.get("file") or getattr(self.instance, "file", None))
        has_url = bool(attrs.get("url", getattr(self.instance, "url", "")))
        if not has_file and not has_url:
            raise serializers.ValidationError({"non_field_errors": ["Either a file or a URL is required"]})
        return attrs


class DocumentIdsSerializer(serializers.Serializer):
    ids = serializers.ListField(child=serializers.IntegerField(min_value=1), allow_empty=False)


class DocumentExportQuerySerializer(serializers.Serializer):
    export_format = serializers.ChoiceField(choices=["csv", "json"], required=False, default="csv")


class BulkDownloadQuerySerializer(serializers.Serializer):
    ids = serializers.CharField()
    include_versions = serializers.BooleanField(required=False, default=False)

    def validate_ids(self, value: str) -> list[int]:
        try:
            ids = [int(part) for part in value.split(",") if part.strip()]
        except ValueError:
            raise serializers.ValidationError("ids must be a comma separated list of numbers")
        if not ids:
            raise serializers.ValidationError("Select at least one document")
        return ids
