"""Serializers for the booking domain."""

from __future__ import annotations

from typing import Any

from rest_framework import serializers  # type: ignore

from .models import AvailabilityRequest, Booking

END_AFTER_START = "End date must be after start date"


def validate_date_order(attrs: dict[str, Any], instance=None) -> None:
    start = attrs.get("start_date", getattr(instance, "start_date", None))
    end = attrs.get("end_date", getattr(instance, "end_date", None))
    if start and end and end <= start:
        raise serializers.ValidationError({"end_date": [END_AFTER_START]})


def flatten_errors(errors) -> str:
    """Render serializer errors as 'field: message' pairs joined by semicolons."""
    parts = []
    for field, messages in errors.items():
        if not isinstance(messages, (list, tuple)):
            messages = [messages]
        for message in messages:
            parts.append(f"{field}: {message}" if field != "non_field_errors" else str(message))
    return "; ".join(parts)


class BookingSerializer(serializers.ModelSerializer):
    """Read representation of a booking."""

    property_name = serializers.ReadOnlyField(source="property.name")
    nights = serializers.IntegerField(read_only=True)
    type_label = serializers.SerializerMethodField()

    class Meta:
        model = Booking
        fields = [
            "id",
            "property",
            "property_name",
            "type",
            "type_label",
            "status",
            "source",
            "start_date",
            "end_date",
            "nights",
            "guest_name",
            "guest_email",
            "guest_phone",
            "number_of_guests",
            "total_amount",
            "notes",
            "external_id",
            "metadata",
            "created_by",
            "updated_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_type_label(self, obj: Booking) -> str:
        return obj.get_type_display()


class BookingWriteSerializer(serializers.ModelSerializer):
    """Create/update payload; guest details are mandatory for guest bookings."""

    class Meta:
        model = Booking
        fields = [
            "type",
            "status",
            "start_date",
            "end_date",
            "guest_name",
            "guest_email",
            "guest_phone",
            "number_of_guests",
            "total_amount",
            "notes",
            "external_id",
            "metadata",
        ]
        extra_kwargs = {
            "guest_name": {"required": False, "allow_blank": True},
            "guest_email": {"required": False, "allow_blank": True},
            "guest_phone": {"required": False, "allow_blank": True},
            "notes": {"required": False, "allow_blank": True},
            "external_id": {"required": False, "allow_blank": True},
        }

    def validate(self, attrs):  # type: ignore
        validate_date_order(attrs, self.instance)
        booking_type = attrs.get("type", getattr(self.instance, "type", None))
        if booking_type in Booking.GUEST_TYPES:
            errors = {}
            for field, label in (("guest_name", "Guest name"), ("guest_email", "Guest email")):
                value = attrs.get(field, getattr(self.instance, field, ""))
                if not (value or "").strip():
                    errors[field] = [f"{label} is required for {booking_type.lower()} bookings"]
            if errors:
                raise serializers.ValidationError(errors)
        if "guest_name" in attrs:
            attrs["guest_name"] = attrs["guest_name"].strip()
        return attrs


class BookingImportSerializer(serializers.Serializer):
    """Raw booking payloads; each one is validated on its own during the import."""

    bookings = serializers.ListField(child=serializers.DictField(), allow_empty=False)

    def validate_bookings(self, value):  # type: ignore
        limit = self.context.get("max_rows", 100)
        if len(value) > limit:
            raise serializers.ValidationError(f"At most {limit} bookings can be imported at once")
        return value


class DateRangeQuerySerializer(serializers.Serializer):
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    exclude_booking_id = serializers.IntegerField(required=False)

    def validate(self, attrs):  # type: ignore
        validate_date_order(attrs)
        return attrs


class AdvancedAvailabilitySerializer(DateRangeQuerySerializer):
    include_nearby_dates = serializers.BooleanField(required=False, default=True)
    suggest_alternatives = serializers.BooleanField(required=False, default=True)
    grace_period_hours = serializers.FloatField(required=False, min_value=0, max_value=48, default=2)


class CalendarQuerySerializer(serializers.Serializer):
    start = serializers.DateField(required=False)
    end = serializers.DateField(required=False)

    def validate(self, attrs):  # type: ignore
        start, end = attrs.get("start"), attrs.get("end")
        if start and end and end < start:
            raise serializers.ValidationError({"end": ["End date must not be before start date"]})
        if start and end and (end - start).days > 366:
            raise serializers.ValidationError({"end": ["Calendar range is limited to one year"]})
        return attrs


class CalendarBookingSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    type = serializers.CharField()
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    guest_name = serializers.CharField()


class CalendarDaySerializer(serializers.Serializer):
    date = serializers.DateField()
    bookings = CalendarBookingSerializer(many=True)
    is_booked = serializers.BooleanField()
    is_check_in = serializers.BooleanField()
    is_check_out = serializers.BooleanField()


class ConflictSerializer(serializers.Serializer):
    id = serializers.IntegerField(source="booking.id")
    type = serializers.CharField(source="booking.type")
    start_date = serializers.DateField(source="booking.start_date")
    end_date = serializers.DateField(source="booking.end_date")
    guest_name = serializers.CharField(source="booking.guest_name")
    severity = serializers.CharField()
    conflict_type = serializers.CharField()


class GracePeriodViolationSerializer(serializers.Serializer):
    booking_id = serializers.IntegerField()
    hours = serializers.FloatField()
    type = serializers.CharField()


class SuggestionSerializer(serializers.Serializer):
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    reason = serializers.CharField()
    confidence = serializers.CharField()


class AvailabilityAnalysisSerializer(serializers.Serializer):
    available = serializers.BooleanField()
    conflicts = ConflictSerializer(many=True)
    warnings = serializers.ListField(child=serializers.DictField())
    grace_period_violations = GracePeriodViolationSerializer(many=True)
    suggestions = SuggestionSerializer(many=True)


class AvailabilityImportSerializer(serializers.Serializer):
    """CSV text in ``csv`` or an uploaded ``file``."""

    MODES = ("create", "validate")

    file = serializers.FileField(required=False)
    csv = serializers.CharField(required=False, trim_whitespace=False)
    mode = serializers.ChoiceField(choices=MODES, default="create")

    def validate(self, attrs):  # type: ignore
        upload = attrs.pop("file", None)
        if upload is not None:
            raw = upload.read()
            try:
                attrs["csv"] = raw.decode("utf-8-sig")
            except UnicodeDecodeError:
                raise serializers.ValidationError({"file": ["CSV file must be UTF-8 encoded"]})
        if not attrs.get("csv", "").strip():
            raise serializers.ValidationError({"csv": ["CSV content is required"]})
        return attrs


class AvailabilityRequestSerializer(serializers.ModelSerializer):
    property_name = serializers.ReadOnlyField(source="property.name")

    class Meta:
        model = AvailabilityRequest
        fields = [
            "id",
            "property",
            "property_name",
            "start_date",
            "end_date",
            "guest_name",
            "guest_email",
            "guest_phone",
            "number_of_guests",
            "urgency",
            "message",
            "status",
            "requested_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "property_name", "status", "requested_by", "created_at", "updated_at"]

    def validate(self, attrs):  # type: ignore
        validate_date_order(attrs, self.instance)
        for field in ("guest_name", "guest_phone"):
            if field in attrs:
                attrs[field] = attrs[field].strip()
        return attrs


class AvailabilityRequestStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(
        choices=[AvailabilityRequest.Status.CONFIRMED, AvailabilityRequest.Status.REJECTED]
    )


class BookingStatsSerializer(serializers.Serializer):
    total_bookings = serializers.IntegerField()
    by_type = serializers.DictField(child=serializers.IntegerField())
    total_revenue = serializers.DecimalField(max_digits=14, decimal_places=2)
    occupied_nights = serializers.IntegerField()
    available_nights = serializers.IntegerField()
    occupancy_rate = serializers.DecimalField(max_digits=6, decimal_places=2)
    average_stay_length = serializers.DecimalField(max_digits=8, decimal_places=2)
