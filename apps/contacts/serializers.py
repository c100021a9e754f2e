"""Serializers for contacts."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.properties.models import Property

from .models import Contact, ContactProperty


class ContactPropertySerializer(serializers.ModelSerializer):
    property_name = serializers.ReadOnlyField(source="property.name")

    class Meta:
        model = ContactProperty
        fields = ["id", "property", "property_name", "relationship", "created_at"]
        read_only_fields = ["id", "property_name", "created_at"]


class ContactLinkInputSerializer(serializers.Serializer):
    property = serializers.PrimaryKeyRelatedField(queryset=Property.objects.all())
    relationship = serializers.ChoiceField(
        choices=ContactProperty.Relationship.choices, default=ContactProperty.Relationship.OTHER
    )


class ContactSerializer(serializers.ModelSerializer):
    """Contact with its property links. ``properties`` replaces the links on write."""

    full_name = serializers.ReadOnlyField()
    property_links = ContactPropertySerializer(many=True, read_only=True)
    properties = ContactLinkInputSerializer(many=True, write_only=True, required=False)

    class Meta:
        model = Contact
        fields = [
            "id",
            "first_name",
            "last_name",
            "full_name",
            "phone",
            "email",
            "language",
            "category",
            "comments",
            "property_links",
            "properties",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "full_name", "property_links", "created_at", "updated_at"]
        extra_kwargs = {
            "phone": {"required": False, "allow_blank": True},
            "email": {"required": False, "allow_blank": True},
            "comments": {"required": False, "allow_blank": True},
        }

    def validate_first_name(self, value: str) -> str:
        value = value.strip()
        if not value:
            raise serializers.ValidationError("First name is required")
        return value

    def validate_last_name(self, value: str) -> str:
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Last name is required")
        return value

    def validate_phone(self, value: str) -> str:
        return value.strip()

    def validate_email(self, value: str) -> str:
        return value.strip().lower()


class ContactImportRowSerializer(ContactSerializer):
    """An imported contact; linked properties are given by name."""

    full_name = None
    property_links = None
    properties = serializers.ListField(child=serializers.JSONField(), required=False)

    class Meta(ContactSerializer.Meta):
        fields = ["first_name", "last_name", "phone", "email", "language", "category", "comments", "properties"]
        read_only_fields: list[str] = []

    def validate_properties(self, value):  # type: ignore
        for entry in value:
            if isinstance(entry, dict):
                if not str(entry.get("name") or "").strip():
                    raise serializers.ValidationError("Each linked property needs a name")
                relationship = entry.get("relationship")
                if relationship and relationship not in ContactProperty.Relationship.values:
                    raise serializers.ValidationError(f'Invalid relationship "{relationship}"')
            elif not isinstance(entry, str):
                raise serializers.ValidationError("Linked properties must be names or objects")
        return value


class ContactImportSerializer(serializers.Serializer):
    contacts = serializers.ListField(child=serializers.DictField(), allow_empty=False)
    skip_duplicates = serializers.BooleanField(required=False, default=True)
    update_existing = serializers.BooleanField(required=False, default=False)


class BulkDeleteSerializer(serializers.Serializer):
    ids = serializers.ListField(child=serializers.IntegerField(min_value=1), allow_empty=False)


class EmailCheckSerializer(serializers.Serializer):
    email = serializers.EmailField()
    exclude_id = serializers.IntegerField(required=False)


class ExportQuerySerializer(serializers.Serializer):
    ids = serializers.CharField(required=False)
    category = serializers.ChoiceField(choices=[*Contact.Category.values, "ALL"], required=False)

    def validate_ids(self, value: str) -> list[int]:
        try:
            return [int(part) for part in value.split(",") if part.strip()]
        except ValueError:
            raise serializers.ValidationError("ids must be a comma separated list of numbers")
