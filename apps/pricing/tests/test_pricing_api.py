"""API tests for pricing endpoints."""

from __future__ import annotations

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.pricing.models import PriceRange
from apps.properties.models import Property
from apps.users.models import User


class PricingAPITests(APITestCase):
    def setUp(self) -> None:
        self.admin = User.objects.create_user(
            email="admin@example.com", password="StrongPass123", role=User.RoleChoices.ADMIN
        )
        self.manager = User.objects.create_user(
            email="manager@example.com", password="StrongPass123", role=User.RoleChoices.MANAGER
        )
        self.property = Property.objects.create(name="Villa Azur")
        self.ranges_url = reverse("price-range-list", kwargs={"property_id": self.property.pk})

    def _payload(self, **overrides):
        payload = {
            "name": "High season",
            "start_date": "2025-07-01",
            "end_date": "2025-08-31",
            "owner_nightly_rate": "400.00",
            "commission_rate": "20.00",
            "is_validated": True,
        }
        payload.update(overrides)
        return payload

    def test_manager_has_no_access_to_financial_data(self) -> None:
        self.client.force_authenticate(self.manager)

        response = self.client.get(reverse("property-pricing", kwargs={"property_id": self.property.pk}))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        response = self.client.post(self.ranges_url, self._payload(), format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_creates_range_with_derived_rates(self) -> None:
        self.client.force_authenticate(self.admin)

        response = self.client.post(self.ranges_url, self._payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["public_nightly_rate"], "500.00")
        self.assertEqual(response.data["commission_amount"], "100.00")

        conflict = self.client.post(
            self.ranges_url, self._payload(start_date="2025-08-31", end_date="2025-09-15"), format="json"
        )
        self.assertEqual(conflict.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(conflict.data["non_field_errors"][0], "Date range conflicts with existing price range")

    def test_full_commission_is_rejected(self) -> None:
        self.client.force_authenticate(self.admin)

        response = self.client.post(self.ranges_url, self._payload(commission_rate="100"), format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("commission_rate", response.data)
        self.assertFalse(PriceRange.objects.exists())

    def test_pricing_settings_upsert_and_overview(self) -> None:
        self.client.force_authenticate(self.admin)
        url = reverse("property-pricing", kwargs={"property_id": self.property.pk})

        response = self.client.patch(url, {"payment_schedule": "30 - 40 - 30", "currency": "EUR"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertIsNotNone(response.data["last_pricing_update"])
        self.assertEqual(response.data["net_owner_commission"], "25.00")

        bad = self.client.patch(url, {"payment_schedule": "thirty"}, format="json")
        self.assertEqual(bad.status_code, status.HTTP_400_BAD_REQUEST)

        overview = self.client.get(url)
        self.assertEqual(overview.status_code, status.HTTP_200_OK)
        self.assertEqual(overview.data["pricing"]["payment_schedule"], "30 - 40 - 30")
        self.assertEqual(overview.data["price_ranges"], [])

    def test_quote_endpoint(self) -> None:
        self.client.force_authenticate(self.admin)
        self.client.post(self.ranges_url, self._payload(), format="json")

        response = self.client.get(
            reverse("price-range-quote", kwargs={"property_id": self.property.pk}),
            {"start_date": "2025-07-05", "end_date": "2025-07-08"},
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["nights"], 3)
        self.assertEqual(response.data["total"], "1500.00")

    def test_minimum_stay_check_endpoint(self) -> None:
        self.client.force_authenticate(self.admin)
        rules_url = reverse("minimum-stay-rule-list", kwargs={"property_id": self.property.pk})
        created = self.client.post(rules_url, {"booking_condition": "PER_NIGHT", "minimum_nights": 5}, format="json")
        self.assertEqual(created.status_code, status.HTTP_201_CREATED, created.data)

        response = self.client.get(
            reverse("minimum-stay-rule-check-stay", kwargs={"property_id": self.property.pk}),
            {"start_date": "2025-07-05", "end_date": "2025-07-08"},
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data["valid"])
        self.assertEqual(response.data["violations"][0]["message"], "Minimum stay is 5 nights")

    def test_export_price_ranges_as_csv_attachment(self) -> None:
        self.client.force_authenticate(self.admin)
        self.client.post(self.ranges_url, self._payload(), format="json")

        response = self.client.get(reverse("price-range-export"), {"property_ids": str(self.property.pk)})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response["Content-Type"], "text/csv; charset=utf-8")
        self.assertIn('filename="price_ranges_export_', response["Content-Disposition"])
        self.assertIn('"Villa Azur","High season","2025-07-01","2025-08-31"', response.content.decode())

        self.client.force_authenticate(self.manager)
        self.assertEqual(self.client.get(reverse("price-range-export")).status_code, status.HTTP_403_FORBIDDEN)

    def test_import_operational_costs_endpoint(self) -> None:
        self.client.force_authenticate(self.admin)
        rows = [{"property_id": self.property.pk, "cost_type": "LINEN_CHANGE", "price_type": "PER_STAY"}]

        response = self.client.post(reverse("operational-cost-import"), {"rows": rows}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data, {"imported": 1, "skipped": 0, "updated": 0, "errors": []})
