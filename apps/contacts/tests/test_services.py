"""Service tests for contacts."""

from __future__ import annotations

from datetime import date

from django.test import TestCase

from apps.audit.models import AuditLog, SensitiveDataAccess
from apps.contacts import services
from apps.contacts.models import Contact, ContactProperty
from apps.properties.models import Property
from apps.users.models import User


class ContactServiceTests(TestCase):
    def setUp(self) -> None:
        self.admin = User.objects.create_user(
            email="admin@example.com", password="StrongPass123", role=User.RoleChoices.ADMIN
        )
        self.villa = Property.objects.create(name="Villa Azur")
        self.chalet = Property.objects.create(name="Chalet Blanc")

    def _contact(self, **extra) -> Contact:
        data = {"first_name": "Marie", "last_name": "Curie", "category": Contact.Category.OWNER}
        data.update(extra)
        return services.create_contact(data, user=self.admin)

    def test_create_with_links_writes_audit_entry(self) -> None:
        contact = services.create_contact(
            {"first_name": "Marie", "last_name": "Curie", "category": Contact.Category.OWNER},
            [{"property": self.villa, "relationship": ContactProperty.Relationship.OWNER}],
            self.admin,
        )

        self.assertEqual(contact.language, "English")
        link = ContactProperty.objects.get(contact=contact)
        self.assertEqual(link.property, self.villa)
        entry = AuditLog.objects.get(action="create_contact")
        self.assertEqual(entry.changes["properties"], [self.villa.pk])

    def test_update_replaces_links_only_when_given(self) -> None:
        contact = services.create_contact(
            {"first_name": "Marie", "last_name": "Curie", "category": Contact.Category.OWNER},
            [{"property": self.villa}],
            self.admin,
        )

        services.update_contact(contact, {"phone": "+33 6 00 00 00 00"}, user=self.admin)
        self.assertEqual(contact.property_links.count(), 1)

        services.update_contact(contact, {}, [{"property": self.chalet, "relationship": "MANAGER"}], self.admin)
        link = contact.property_links.get()
        self.assertEqual(link.property, self.chalet)
        self.assertEqual(link.relationship, "MANAGER")

    def test_check_email_unique_ignores_case_and_excluded_contact(self) -> None:
        contact = self._contact(email="marie@example.com")

        self.assertFalse(services.check_email_unique("MARIE@example.com"))
        self.assertTrue(services.check_email_unique("marie@example.com", exclude_id=contact.pk))
        self.assertTrue(services.check_email_unique("pierre@example.com"))
        self.assertTrue(services.check_email_unique(""))

    def test_link_twice_is_rejected_and_unlink_requires_link(self) -> None:
        contact = self._contact()
        services.link_property(contact, self.villa, "OWNER", self.admin)

        with self.assertRaises(services.ContactLinkError) as ctx:
            services.link_property(contact, self.villa, "MANAGER", self.admin)
        self.assertEqual(ctx.exception.message, "Contact is already linked to this property")

        services.unlink_property(contact, self.villa, self.admin)
        with self.assertRaises(services.ContactLinkError):
            services.unlink_property(contact, self.villa, self.admin)

    def test_bulk_delete_counts_existing_contacts(self) -> None:
        first = self._contact()
        second = self._contact(first_name="Pierre")

        deleted = services.bulk_delete_contacts([first.pk, second.pk, 999], self.admin)

        self.assertEqual(deleted, 2)
        self.assertFalse(Contact.objects.exists())
        self.assertTrue(AuditLog.objects.filter(action="bulk_delete_contacts").exists())

    def test_export_quotes_every_cell_and_records_access(self) -> None:
        contact = self._contact(email="marie@example.com", comments='Says "hello"')
        services.link_property(contact, self.villa, "OWNER")
        services.link_property(contact, self.chalet, "OWNER")

        content = services.export_contacts_csv(Contact.objects.all(), self.admin)

        lines = content.splitlines()
        self.assertEqual(
            lines[0],
            '"firstName","lastName","email","phone","category","language","comments","linkedProperties"',
        )
        self.assertIn('"Says ""hello"""', lines[1])
        self.assertTrue(lines[1].endswith('"Villa Azur; Chalet Blanc"') or lines[1].endswith('"Chalet Blanc; Villa Azur"'))
        access = SensitiveDataAccess.objects.get()
        self.assertEqual(access.action, SensitiveDataAccess.Action.EXPORT)
        self.assertEqual(access.data_type, SensitiveDataAccess.DataType.CONTACT_DATA)

    def test_export_filename_uses_date(self) -> None:
        self.assertEqual(services.export_filename(date(2025, 3, 9)), "contacts_export_2025-03-09.csv")


class ContactImportTests(TestCase):
    def setUp(self) -> None:
        self.villa = Property.objects.create(name="Villa Azur")
        self.existing = Contact.objects.create(
            first_name="Marie", last_name="Curie", email="marie@example.com", category=Contact.Category.OWNER
        )

    def test_duplicates_are_skipped_by_default(self) -> None:
        result = services.import_contacts(
            [
                {"first_name": "Marie", "last_name": "C.", "email": "MARIE@example.com", "category": "OWNER"},
                {"first_name": "Pierre", "last_name": "Curie", "email": "pierre@example.com", "category": "CLIENT"},
            ]
        )

        self.assertEqual(result, {"imported": 1, "skipped": 1, "updated": 0, "errors": []})
        self.existing.refresh_from_db()
        self.assertEqual(self.existing.last_name, "Curie")

    def test_update_existing_overwrites_matching_contact(self) -> None:
        result = services.import_contacts(
            [{"first_name": "Marie", "last_name": "Sklodowska", "email": "marie@example.com", "category": "OWNER"}],
            skip_duplicates=False,
            update_existing=True,
        )

        self.assertEqual(result["updated"], 1)
        self.existing.refresh_from_db()
        self.assertEqual(self.existing.last_name, "Sklodowska")
        self.assertTrue(AuditLog.objects.filter(action="import_update_contact").exists())

    def test_duplicate_is_created_when_neither_option_is_set(self) -> None:
        result = services.import_contacts(
            [{"first_name": "Marie", "last_name": "Curie", "email": "marie@example.com", "category": "OWNER"}],
            skip_duplicates=False,
        )

        self.assertEqual(result["imported"], 1)
        self.assertEqual(Contact.objects.filter(email="marie@example.com").count(), 2)

    def test_property_links_by_name_and_unknown_names(self) -> None:
        result = services.import_contacts(
            [
                {
                    "first_name": "Jean",
                    "last_name": "Moulin",
                    "category": "PROVIDER",
                    "properties": [{"name": "villa azur", "relationship": "MAINTENANCE"}, "name:Villa Azzurra"],
                }
            ]
        )

        self.assertEqual(result["imported"], 1)
        self.assertEqual(
            result["errors"],
            [{"row": 1, "error": 'Property "Villa Azzurra" not found. Similar properties: Villa Azur'}],
        )
        contact = Contact.objects.get(last_name="Moulin")
        link = contact.property_links.get()
        self.assertEqual(link.property, self.villa)
        self.assertEqual(link.relationship, "MAINTENANCE")

    def test_invalid_rows_are_reported_with_row_numbers(self) -> None:
        result = services.import_contacts(
            [
                {"first_name": "Ok", "last_name": "Row", "category": "CLIENT"},
                {"first_name": "  ", "last_name": "Row", "category": "CLIENT"},
                {"first_name": "Bad", "last_name": "Category", "category": "FRIEND"},
            ]
        )

        self.assertEqual(result["imported"], 1)
        self.assertEqual([error["row"] for error in result["errors"]], [2, 3])
        self.assertIn("first_name", result["errors"][0]["error"])
        self.assertIn("category", result["errors"][1]["error"])
