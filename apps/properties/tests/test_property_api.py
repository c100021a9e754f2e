"""Tests for property and destination endpoints."""

from __future__ import annotations

import io
import shutil
import tempfile

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import override_settings
from django.urls import reverse
from PIL import Image
from rest_framework import status
from rest_framework.test import APITestCase

from apps.audit.models import AuditLog
from apps.properties.models import Destination, Property
from apps.users.models import User

MEDIA_ROOT = tempfile.mkdtemp()


def _image_file(name: str = "beach.png", fmt: str = "PNG", content_type: str = "image/png") -> SimpleUploadedFile:
    buffer = io.BytesIO()
    Image.new("RGB", (8, 8), color=(20, 120, 200)).save(buffer, format=fmt)
    return SimpleUploadedFile(name, buffer.getvalue(), content_type=content_type)


class PropertyAPITests(APITestCase):
    def setUp(self) -> None:
        self.manager = User.objects.create_user(
            email="manager@example.com",
            password="StrongPass123",
            role=User.RoleChoices.MANAGER,
        )
        self.viewer = User.objects.create_user(email="viewer@example.com", password="StrongPass123")
        self.destination = Destination.objects.create(name="Saint-Tropez", country="France")
        self.property = Property.objects.create(
            name="Villa Azur",
            destination=self.destination,
            status=Property.Status.PUBLISHED,
            city="Ramatuelle",
            max_guests=8,
            bedrooms=4,
        )
        Property.objects.create(name="Mas des Oliviers", status=Property.Status.HIDDEN, city="Gordes")

    def test_list_filters_by_status_and_search(self) -> None:
        self.client.force_authenticate(self.viewer)

        response = self.client.get(reverse("property-list"), {"status": "PUBLISHED"})
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["total"], 1)
        self.assertEqual(response.data["results"][0]["name"], "Villa Azur")

        response = self.client.get(reverse("property-list"), {"status": "ALL", "search": "gordes"})
        self.assertEqual(response.data["total"], 1)
        self.assertEqual(response.data["results"][0]["name"], "Mas des Oliviers")

    def test_viewer_cannot_create_property(self) -> None:
        self.client.force_authenticate(self.viewer)
        response = self.client.post(reverse("property-list"), {"name": "Villa Nova"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_manager_creates_property_and_audit_entry(self) -> None:
        self.client.force_authenticate(self.manager)
        response = self.client.post(
            reverse("property-list"),
            {"name": "Villa Nova", "destination": self.destination.id, "max_guests": 6},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["slug"], "villa-nova")
        self.assertEqual(response.data["status"], Property.Status.ONBOARDING)
        self.assertTrue(
            AuditLog.objects.filter(action="create_property", entity_id=str(response.data["id"])).exists()
        )

    def test_property_names_are_unique_ignoring_case(self) -> None:
        self.client.force_authenticate(self.manager)
        response = self.client.post(reverse("property-list"), {"name": "villa azur"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("name", response.data)

    def test_manager_cannot_delete_property(self) -> None:
        self.client.force_authenticate(self.manager)
        response = self.client.delete(reverse("property-detail", args=[self.property.id]))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_lookup_by_name_is_case_insensitive(self) -> None:
        self.assertEqual(Property.objects.by_name("  VILLA azur "), self.property)
        self.assertIsNone(Property.objects.by_name("Unknown"))
        self.assertEqual(Property.objects.similar_to("Villa"), ["Villa Azur"])


@override_settings(MEDIA_ROOT=MEDIA_ROOT)
class DestinationImageAPITests(APITestCase):
    @classmethod
    def tearDownClass(cls) -> None:
        shutil.rmtree(MEDIA_ROOT, ignore_errors=True)
        super().tearDownClass()

    def setUp(self) -> None:
        self.manager = User.objects.create_user(
            email="manager@example.com",
            password="StrongPass123",
            role=User.RoleChoices.MANAGER,
        )
        self.destination = Destination.objects.create(name="Ibiza", country="Spain")
        self.client.force_authenticate(self.manager)
        self.url = reverse("destination-image", args=[self.destination.id])

    def test_upload_replaces_image(self) -> None:
        first = self.client.post(self.url, {"image": _image_file("one.png"), "alt_text": "Cala"}, format="multipart")
        self.assertEqual(first.status_code, status.HTTP_200_OK, first.data)
        self.destination.refresh_from_db()
        first_name = self.destination.image.name
        self.assertEqual(self.destination.image_alt_text, "Cala")

        second = self.client.post(self.url, {"image": _image_file("two.png")}, format="multipart")
        self.assertEqual(second.status_code, status.HTTP_200_OK, second.data)
        self.destination.refresh_from_db()
        self.assertNotEqual(self.destination.image.name, first_name)
        self.assertFalse(self.destination.image.storage.exists(first_name))

    def test_rejects_unsupported_image_type(self) -> None:
        upload = _image_file("anim.gif", fmt="GIF", content_type="image/gif")
        response = self.client.post(self.url, {"image": upload}, format="multipart")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("Invalid file type", response.data["image"][0])

    @override_settings(DESTINATION_IMAGE_MAX_UPLOAD_SIZE=10)
    def test_rejects_oversized_image(self) -> None:
        response = self.client.post(self.url, {"image": _image_file()}, format="multipart")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("size must be less than", response.data["image"][0])

    def test_delete_removes_image(self) -> None:
        self.client.post(self.url, {"image": _image_file()}, format="multipart")
        response = self.client.delete(self.url)
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.destination.refresh_from_db()
        self.assertFalse(self.destination.image)
