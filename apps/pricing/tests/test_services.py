"""Service tests for price ranges, minimum stays, quotes and imports."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from django.test import TestCase

from apps.audit.models import AuditLog, SensitiveDataAccess
from apps.pricing import services
from apps.pricing.models import MinimumStayRule, OperationalCost, PriceRange, PropertyPricing
from apps.properties.models import Property
from apps.users.models import User


class PricingServiceTests(TestCase):
    def setUp(self) -> None:
        self.admin = User.objects.create_user(
            email="admin@example.com", password="StrongPass123", role=User.RoleChoices.ADMIN
        )
        self.property = Property.objects.create(name="Villa Azur", city="Ramatuelle")

    def _range(self, start: date, end: date, **extra) -> PriceRange:
        data = {
            "name": "High season",
            "start_date": start,
            "end_date": end,
            "owner_nightly_rate": Decimal("100"),
            "commission_rate": Decimal("20"),
        }
        data.update(extra)
        return services.create_price_range(self.property, data, self.admin)

    def test_create_derives_public_rates_and_stamps_pricing(self) -> None:
        price_range = self._range(date(2025, 6, 1), date(2025, 6, 30), owner_weekly_rate=Decimal("600"))

        self.assertEqual(price_range.public_nightly_rate, Decimal("125"))
        self.assertEqual(price_range.public_weekly_rate, Decimal("750"))
        pricing = PropertyPricing.objects.get(property=self.property)
        self.assertIsNotNone(pricing.last_pricing_update)
        self.assertTrue(AuditLog.objects.filter(action="create_price_range").exists())

    def test_boundary_day_conflicts_with_existing_range(self) -> None:
        self._range(date(2025, 6, 1), date(2025, 6, 30))

        with self.assertRaises(services.PricingConflictError):
            self._range(date(2025, 6, 30), date(2025, 7, 15))

        self._range(date(2025, 7, 1), date(2025, 7, 15))
        self.assertEqual(PriceRange.objects.filter(property=self.property).count(), 2)

    def test_update_rederives_public_rate_on_commission_change(self) -> None:
        price_range = self._range(date(2025, 6, 1), date(2025, 6, 30))

        services.update_price_range(price_range, {"commission_rate": Decimal("50")}, self.admin)

        price_range.refresh_from_db()
        self.assertEqual(price_range.public_nightly_rate, Decimal("200"))

    def test_update_may_keep_its_own_dates(self) -> None:
        price_range = self._range(date(2025, 6, 1), date(2025, 6, 30))

        services.update_price_range(price_range, {"end_date": date(2025, 7, 5)}, self.admin)

        price_range.refresh_from_db()
        self.assertEqual(price_range.end_date, date(2025, 7, 5))

    def test_get_property_pricing_records_financial_access(self) -> None:
        self._range(date(2025, 7, 1), date(2025, 7, 31))
        self._range(date(2025, 6, 1), date(2025, 6, 30))

        overview = services.get_property_pricing(self.property, self.admin)

        self.assertEqual([r.start_date for r in overview["price_ranges"]], [date(2025, 6, 1), date(2025, 7, 1)])
        access = SensitiveDataAccess.objects.get()
        self.assertEqual(access.action, SensitiveDataAccess.Action.VIEW)
        self.assertEqual(access.data_type, SensitiveDataAccess.DataType.FINANCIAL_DATA)
        self.assertEqual(access.property, self.property)

    def test_evaluate_minimum_stay_only_applies_rules_covering_check_in(self) -> None:
        summer = MinimumStayRule.objects.create(
            property=self.property,
            booking_condition=MinimumStayRule.BookingCondition.WEEKLY_SATURDAY_TO_SATURDAY,
            minimum_nights=7,
            start_date=date(2025, 7, 1),
            end_date=date(2025, 8, 31),
        )
        all_year = MinimumStayRule.objects.create(property=self.property, minimum_nights=2)

        self.assertEqual(services.evaluate_minimum_stay(self.property, date(2025, 6, 2), date(2025, 6, 5)), [])

        violations = services.evaluate_minimum_stay(self.property, date(2025, 7, 2), date(2025, 7, 3))
        messages = {v["rule_id"]: v["message"] for v in violations}
        self.assertEqual(len(messages), 2)
        self.assertEqual(messages[summer.pk], "Check-in and check-out must be on a Saturday")
        self.assertEqual(messages[all_year.pk], "Minimum stay is 2 nights")

    def test_quote_prices_each_night_and_adds_costs(self) -> None:
        self._range(date(2025, 6, 1), date(2025, 6, 10))
        OperationalCost.objects.create(
            property=self.property,
            cost_type=OperationalCost.CostType.HOUSEKEEPING_AT_CHECKOUT,
            price_type=OperationalCost.PriceType.PER_STAY,
            public_price=Decimal("150"),
        )
        OperationalCost.objects.create(
            property=self.property,
            cost_type=OperationalCost.CostType.HOUSEKEEPING,
            price_type=OperationalCost.PriceType.PER_DAY,
            public_price=Decimal("10"),
        )
        OperationalCost.objects.create(
            property=self.property,
            cost_type=OperationalCost.CostType.LINEN_CHANGE,
            price_type=OperationalCost.PriceType.PER_WEEK,
            public_price=Decimal("70"),
        )
        OperationalCost.objects.create(
            property=self.property,
            cost_type=OperationalCost.CostType.OPERATIONAL_PACKAGE,
            estimated_price=Decimal("99"),
        )

        quote = services.quote_stay(self.property, date(2025, 6, 9), date(2025, 6, 13))

        self.assertEqual(quote["nights"], 4)
        self.assertEqual(quote["accommodation"], Decimal("250.00"))
        self.assertEqual(quote["unpriced_dates"], [date(2025, 6, 11), date(2025, 6, 12)])
        self.assertEqual([c["amount"] for c in quote["operational_costs"]], [Decimal("150.00"), Decimal("40.00"), Decimal("70.00")])
        self.assertEqual(quote["total"], Decimal("510.00"))
        self.assertEqual(quote["currency"], "EUR")


class PriceRangeImportTests(TestCase):
    def setUp(self) -> None:
        self.property = Property.objects.create(name="Villa Azur")
        PriceRange.objects.create(
            property=self.property,
            name="June",
            start_date=date(2025, 6, 1),
            end_date=date(2025, 6, 30),
            owner_nightly_rate=Decimal("100"),
            public_nightly_rate=Decimal("133"),
        )

    def _row(self, **overrides):
        row = {
            "property_id": self.property.pk,
            "period_name": "July",
            "start_date": "2025-07-01",
            "end_date": "2025-07-31",
            "owner_nightly_rate": "200",
            "commission_rate": "20",
        }
        row.update(overrides)
        return row

    def test_import_reports_conflicts_and_unknown_properties(self) -> None:
        rows = [
            self._row(),
            self._row(period_name="Late June", start_date="2025-06-20", end_date="2025-07-05"),
            self._row(property_id=999999),
            self._row(start_date="2025-08-10", end_date="2025-08-01"),
        ]

        result = services.import_price_ranges(rows)

        self.assertEqual(result["imported"], 1)
        self.assertEqual(
            [error["row"] for error in result["errors"]],
            [2, 3, 4],
        )
        self.assertEqual(result["errors"][0]["error"], "Date range conflicts with existing price range")
        self.assertEqual(result["errors"][1]["error"], "Property with ID '999999' not found")
        july = PriceRange.objects.get(name="July")
        self.assertEqual(july.public_nightly_rate, Decimal("250"))
        self.assertIsNotNone(PropertyPricing.objects.get(property=self.property).last_pricing_update)

    def test_skip_conflicts(self) -> None:
        result = services.import_price_ranges([self._row(start_date="2025-06-15")], skip_conflicts=True)

        self.assertEqual((result["imported"], result["skipped"], result["errors"]), (0, 1, []))

    def test_update_existing_overwrites_overlapping_range(self) -> None:
        result = services.import_price_ranges(
            [self._row(period_name="June revised", start_date="2025-06-01", end_date="2025-06-30")],
            update_existing=True,
        )

        self.assertEqual(result["updated"], 1)
        june = PriceRange.objects.get(property=self.property)
        self.assertEqual(june.name, "June revised")
        self.assertEqual(june.public_nightly_rate, Decimal("250"))
        self.assertTrue(AuditLog.objects.filter(action="import_price_ranges").exists())

    def test_skip_conflicts_wins_over_update_existing(self) -> None:
        result = services.import_price_ranges(
            [self._row(period_name="Revised", start_date="2025-06-10", end_date="2025-06-20")],
            skip_conflicts=True,
            update_existing=True,
        )

        self.assertEqual((result["imported"], result["skipped"], result["updated"]), (0, 1, 0))
        june = PriceRange.objects.get(property=self.property)
        self.assertEqual((june.name, june.start_date), ("June", date(2025, 6, 1)))


class PricingItemImportTests(TestCase):
    def setUp(self) -> None:
        self.admin = User.objects.create_user(
            email="admin@example.com", password="StrongPass123", role=User.RoleChoices.ADMIN
        )
        self.property = Property.objects.create(name="Villa Azur")

    def test_import_minimum_stay_rules(self) -> None:
        rows = [
            {
                "property_id": self.property.pk,
                "booking_condition": "WEEKLY_SATURDAY_TO_SATURDAY",
                "minimum_nights": 7,
                "start_date": "2025-07-01",
                "end_date": "2025-08-31",
            },
            {"property_id": self.property.pk, "booking_condition": "PER_NIGHT", "minimum_nights": 0},
            {"property_id": 999999, "booking_condition": "PER_NIGHT", "minimum_nights": 3},
        ]

        result = services.import_minimum_stay_rules(rows, user=self.admin)

        self.assertEqual((result["imported"], result["skipped"], result["updated"]), (1, 0, 0))
        self.assertEqual([error["row"] for error in result["errors"]], [2, 3])
        self.assertEqual(result["errors"][1]["error"], "Property with ID '999999' not found")
        rule = MinimumStayRule.objects.get(property=self.property)
        self.assertEqual((rule.booking_condition, rule.minimum_nights), ("WEEKLY_SATURDAY_TO_SATURDAY", 7))
        self.assertIsNotNone(PropertyPricing.objects.get(property=self.property).last_pricing_update)
        self.assertTrue(AuditLog.objects.filter(action="import_minimum_stay_rules", user=self.admin).exists())

    def test_import_operational_costs(self) -> None:
        rows = [
            {
                "property_id": self.property.pk,
                "cost_type": "HOUSEKEEPING",
                "price_type": "PER_WEEK",
                "estimated_price": "80",
                "public_price": "100",
                "paid_by": "Client",
            },
            {"property_id": self.property.pk, "cost_type": "GARDENING"},
        ]

        result = services.import_operational_costs(rows, user=self.admin)

        self.assertEqual(result["imported"], 1)
        self.assertEqual(result["errors"][0]["row"], 2)
        self.assertIn("cost_type", result["errors"][0]["error"])
        cost = OperationalCost.objects.get(property=self.property)
        self.assertEqual((cost.price_type, cost.public_price), ("PER_WEEK", Decimal("100.00")))


class PriceRangeExportTests(TestCase):
    def setUp(self) -> None:
        self.azur = Property.objects.create(name="Villa Azur")
        self.olivier = Property.objects.create(name='Mas "Olivier"')
        for property_obj, name, start, end in [
            (self.azur, "June", date(2025, 6, 1), date(2025, 6, 30)),
            (self.azur, "August", date(2025, 8, 1), date(2025, 8, 31)),
            (self.olivier, "June", date(2025, 6, 1), date(2025, 6, 30)),
        ]:
            PriceRange.objects.create(
                property=property_obj,
                name=name,
                start_date=start,
                end_date=end,
                owner_nightly_rate=Decimal("100"),
                public_nightly_rate=Decimal("133"),
            )

    def test_filters_by_property_and_period(self) -> None:
        queryset = services.price_ranges_for_export([self.azur.pk], date(2025, 7, 1), date(2025, 12, 31))

        self.assertEqual([r.name for r in queryset], ["August"])
        self.assertEqual(services.price_ranges_for_export().count(), 3)

    def test_csv_quotes_every_cell_and_records_access(self) -> None:
        content = services.export_price_ranges_csv(services.price_ranges_for_export([self.olivier.pk]))

        lines = content.splitlines()
        self.assertEqual(lines[0].split(",")[:3], ['"Property ID"', '"Property Name"', '"Period Name"'])
        self.assertIn('"Mas ""Olivier""","June","2025-06-01","2025-06-30"', lines[1])
        self.assertEqual(len(lines), 2)
        self.assertTrue(
            SensitiveDataAccess.objects.filter(
                action=SensitiveDataAccess.Action.EXPORT,
                data_type=SensitiveDataAccess.DataType.FINANCIAL_DATA,
            ).exists()
        )

    def test_export_filename_is_dated(self) -> None:
        self.assertEqual(
            services.price_ranges_export_filename(date(2025, 3, 9)),
            "price_ranges_export_2025-03-09.csv",
        )
