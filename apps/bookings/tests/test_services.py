"""Service tests for booking conflicts, imports, statistics and periodic jobs."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from unittest import mock

from django.test import TestCase, override_settings

from apps.audit.models import AuditLog
from apps.bookings import services
from apps.bookings.models import AvailabilityRequest, Booking
from apps.pricing.models import MinimumStayRule
from apps.properties.models import Property
from apps.users.models import User
from shared.domain.value_objects import DateRange


def guest_stay(start: date, end: date, **extra):
    data = {
        "type": Booking.Type.CONFIRMED,
        "start_date": start,
        "end_date": end,
        "guest_name": "Claire Martin",
        "guest_email": "claire@example.com",
    }
    data.update(extra)
    return data


class BookingServiceTests(TestCase):
    def setUp(self) -> None:
        self.user = User.objects.create_user(
            email="staff@example.com", password="StrongPass123", role=User.RoleChoices.STAFF
        )
        self.property = Property.objects.create(name="Villa Azur")
        self.booking = services.create_booking(
            self.property, guest_stay(date(2025, 6, 1), date(2025, 6, 5)), self.user
        )

    def test_model_exposes_stay_helpers(self) -> None:
        self.assertEqual(self.booking.nights, 4)
        self.assertEqual(self.booking.date_range, DateRange(date(2025, 6, 1), date(2025, 6, 5)))
        self.assertEqual(self.booking.label, "Claire Martin")
        self.assertEqual(self.booking.property, self.property)

        blocked = Booking(property=self.property, type=Booking.Type.BLOCKED)
        self.assertEqual(blocked.label, "BLOCKED")

    def test_back_to_back_bookings_do_not_conflict(self) -> None:
        services.create_booking(self.property, guest_stay(date(2025, 6, 5), date(2025, 6, 8)), self.user)
        services.create_booking(
            self.property,
            {"type": Booking.Type.MAINTENANCE, "start_date": date(2025, 5, 28), "end_date": date(2025, 6, 1)},
            self.user,
        )

        self.assertEqual(Booking.objects.filter(property=self.property).count(), 3)

    def test_overlap_raises_conflict_with_types(self) -> None:
        with self.assertRaises(services.BookingConflictError) as ctx:
            services.create_booking(
                self.property,
                {"type": Booking.Type.BLOCKED, "start_date": date(2025, 6, 4), "end_date": date(2025, 6, 6)},
                self.user,
            )

        self.assertEqual(ctx.exception.message, "Booking conflicts with existing bookings: CONFIRMED")
        self.assertEqual(ctx.exception.conflicts, [self.booking])

    def test_create_writes_audit_entry(self) -> None:
        entry = AuditLog.objects.get(action="create_booking")
        self.assertEqual(entry.entity_type, "Booking")
        self.assertEqual(entry.entity_id, str(self.booking.pk))
        self.assertEqual(entry.user, self.user)

        services.create_booking(
            self.property,
            {"type": Booking.Type.OWNER_STAY, "start_date": date(2025, 7, 1), "end_date": date(2025, 7, 5)},
            self.user,
        )
        self.assertTrue(AuditLog.objects.filter(action="create_owner_booking").exists())

    def test_update_excludes_itself_and_records_changes(self) -> None:
        services.update_booking(self.booking, {"end_date": date(2025, 6, 6), "notes": "Late arrival"}, self.user)

        entry = AuditLog.objects.get(action="update_booking")
        self.assertEqual(entry.changes["end_date"], {"from": "2025-06-05", "to": "2025-06-06"})
        self.assertEqual(entry.changes["notes"], {"from": "", "to": "Late arrival"})

    def test_cancelled_booking_frees_dates(self) -> None:
        services.cancel_booking(self.booking, self.user)

        result = services.check_availability(self.property, date(2025, 6, 2), date(2025, 6, 4))
        self.assertTrue(result["available"])
        self.assertEqual(result["conflicts"], [])

    def test_check_availability_lists_conflicts(self) -> None:
        result = services.check_availability(self.property, date(2025, 6, 4), date(2025, 6, 10))

        self.assertFalse(result["available"])
        self.assertEqual(result["conflicts"][0]["id"], self.booking.pk)
        self.assertEqual(result["conflicts"][0]["guest_name"], "Claire Martin")

        excluded = services.check_availability(
            self.property, date(2025, 6, 4), date(2025, 6, 10), exclude_booking_id=self.booking.pk
        )
        self.assertTrue(excluded["available"])

    def test_delete_keeps_audit_trail(self) -> None:
        booking_id = self.booking.pk
        services.delete_booking(self.booking, self.user)

        self.assertFalse(Booking.objects.filter(pk=booking_id).exists())
        entry = AuditLog.objects.get(action="delete_booking")
        self.assertEqual(entry.entity_id, str(booking_id))

    @override_settings(AVAILABILITY_SEARCH_WINDOW_DAYS=7, AVAILABILITY_MAX_SUGGESTIONS=5)
    def test_advanced_availability_adds_minimum_stay_warnings(self) -> None:
        MinimumStayRule.objects.create(property=self.property, minimum_nights=7)

        analysis = services.check_advanced_availability(
            self.property, date(2025, 6, 3), date(2025, 6, 6), grace_period_hours=2
        )

        self.assertFalse(analysis.available)
        self.assertEqual(analysis.conflicts[0].conflict_type, "overlap")
        self.assertEqual(analysis.warnings[0]["message"], "Minimum stay is 7 nights")
        self.assertEqual(analysis.warnings[0]["severity"], "warning")
        self.assertEqual([s.start_date for s in analysis.suggestions], [date(2025, 5, 29), date(2025, 6, 5)])

    def test_stats_use_confirmed_bookings_clipped_to_window(self) -> None:
        self.booking.total_amount = Decimal("800")
        self.booking.save()
        services.create_booking(
            self.property,
            {"type": Booking.Type.OWNER, "start_date": date(2025, 6, 9), "end_date": date(2025, 6, 14)},
            self.user,
        )
        cancelled = services.create_booking(
            self.property, guest_stay(date(2025, 6, 20), date(2025, 6, 25)), self.user
        )
        services.cancel_booking(cancelled, self.user)

        stats = services.booking_stats(self.property, date(2025, 6, 3), date(2025, 6, 13))

        self.assertEqual(stats["total_bookings"], 2)
        self.assertEqual(stats["occupied_nights"], 6)
        self.assertEqual(stats["occupancy_rate"], Decimal("60.00"))
        self.assertEqual(stats["average_stay_length"], Decimal("4.50"))
        self.assertEqual(stats["total_revenue"], Decimal("800"))

    def test_complete_finished_bookings(self) -> None:
        upcoming = services.create_booking(self.property, guest_stay(date(2025, 7, 1), date(2025, 7, 5)), self.user)

        completed = services.complete_finished_bookings(today=date(2025, 6, 10))

        self.assertEqual(completed, 1)
        self.booking.refresh_from_db()
        upcoming.refresh_from_db()
        self.assertEqual(self.booking.status, Booking.Status.COMPLETED)
        self.assertEqual(upcoming.status, Booking.Status.CONFIRMED)


class BookingImportServiceTests(TestCase):
    def setUp(self) -> None:
        self.property = Property.objects.create(name="Villa Azur")
        Booking.objects.create(
            property=self.property,
            type=Booking.Type.BLOCKED,
            start_date=date(2025, 6, 10),
            end_date=date(2025, 6, 15),
        )

    def test_rows_are_checked_against_store_and_batch(self) -> None:
        rows = [
            {"type": "BLOCKED", "start_date": "2025-06-01", "end_date": "2025-06-05"},
            {"type": "BLOCKED", "start_date": "2025-06-03", "end_date": "2025-06-07"},
            {"type": "MAINTENANCE", "start_date": "2025-06-12", "end_date": "2025-06-16"},
            {"type": "CONFIRMED", "start_date": "2025-06-20", "end_date": "2025-06-22"},
            {"type": "OWNER", "start_date": "2025-06-15", "end_date": "2025-06-18"},
        ]

        result = services.import_bookings(self.property, rows)

        self.assertEqual(result["imported"], 2)
        self.assertEqual(result["failed"], 3)
        self.assertEqual(
            result["errors"][0], "Booking 2: Conflicts with existing bookings (2025-06-03 to 2025-06-07)"
        )
        self.assertEqual(
            result["errors"][1], "Booking 3: Conflicts with existing bookings (2025-06-12 to 2025-06-16)"
        )
        self.assertTrue(result["errors"][2].startswith("Booking 4: guest_name: Guest name is required"))
        self.assertEqual(
            set(Booking.objects.filter(source=Booking.Source.IMPORT).values_list("type", flat=True)),
            {"BLOCKED", "OWNER"},
        )

    def test_rows_are_checked_after_the_property_lock_is_taken(self) -> None:
        lock_property = services._lock_property

        def lock_after_concurrent_write(property_obj):
            Booking.objects.create(
                property=property_obj,
                type=Booking.Type.OWNER,
                start_date=date(2025, 7, 1),
                end_date=date(2025, 7, 8),
            )
            lock_property(property_obj)

        rows = [{"type": "BLOCKED", "start_date": "2025-07-05", "end_date": "2025-07-10"}]
        with mock.patch.object(services, "_lock_property", side_effect=lock_after_concurrent_write):
            result = services.import_bookings(self.property, rows)

        self.assertEqual((result["imported"], result["failed"]), (0, 1))
        self.assertFalse(Booking.objects.filter(source=Booking.Source.IMPORT).exists())


class AvailabilityRequestServiceTests(TestCase):
    def test_only_pending_requests_change_status(self) -> None:
        request = AvailabilityRequest.objects.create(
            property=Property.objects.create(name="Villa Azur"),
            start_date=date(2025, 8, 1),
            end_date=date(2025, 8, 8),
            guest_name="Paul",
            guest_email="paul@example.com",
            guest_phone="+33 6 00 00 00 00",
        )

        services.set_request_status(request, AvailabilityRequest.Status.CONFIRMED)
        self.assertEqual(request.status, AvailabilityRequest.Status.CONFIRMED)

        with self.assertRaises(services.InvalidStatusTransition):
            services.set_request_status(request, AvailabilityRequest.Status.REJECTED)
