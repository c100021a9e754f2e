"""Serializers for the property domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Destination, Property


class DestinationSerializer(serializers.ModelSerializer):
    properties_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = Destination
        fields = [
            "id",
            "name",
            "country",
            "region",
            "image",
            "image_alt_text",
            "latitude",
            "longitude",
            "properties_count",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "image", "properties_count", "created_at", "updated_at"]


class DestinationImageUploadSerializer(serializers.Serializer):
    image = serializers.ImageField()
    alt_text = serializers.CharField(max_length=255, required=False, allow_blank=True)


class PropertySerializer(serializers.ModelSerializer):
    """Read representation of a property."""

    destination_name = serializers.ReadOnlyField(source="destination.name")
    status_label = serializers.SerializerMethodField()

    class Meta:
        model = Property
        fields = [
            "id",
            "name",
            "slug",
            "destination",
            "destination_name",
            "status",
            "status_label",
            "address",
            "city",
            "max_guests",
            "bedrooms",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_status_label(self, obj: Property) -> str:
        return obj.get_status_display()


class PropertyWriteSerializer(serializers.ModelSerializer):
    class Meta:
        model = Property
        fields = [
            "name",
            "destination",
            "status",
            "address",
            "city",
            "max_guests",
            "bedrooms",
        ]

    def validate_name(self, value: str) -> str:
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Property name is required")
        qs = Property.objects.filter(name__iexact=value)
        if self.instance is not None:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise serializers.ValidationError("A property with this name already exists")
        return value
