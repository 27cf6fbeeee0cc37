"""Tests for the public venue catalog, calendar and quote endpoints."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from shared.application.message_bus import message_bus
from apps.bookings.application.command_handlers import CreateBookingCommand
from apps.venues.catalog import VenueCatalog
from apps.venues.models import Venue

UTC = timezone.utc


class VenueCatalogAPITests(APITestCase):
    def setUp(self) -> None:
        User = get_user_model()
        self.owner = User.objects.create_user(username="venue-owner", password="OwnerPass123")
        self.renter = User.objects.create_user(username="renter", password="RenterPass123")
        self.hall = Venue.objects.create(
            owner=self.owner,
            name="Grand hall",
            location="Sao Paulo, Pinheiros",
            category="Ballroom",
            capacity=200,
            pricing_model=Venue.PricingModel.HOURLY,
            price_per_hour=Decimal("100.00"),
            amenities=["Parking", "Stage"],
        )
        self.studio = Venue.objects.create(
            owner=self.owner,
            name="Studio",
            location="Rio de Janeiro",
            category="Studio",
            capacity=20,
            pricing_model=Venue.PricingModel.DAILY,
            price_per_day=Decimal("1000.00"),
            price_per_weekend=Decimal("1500.00"),
        )
        self.garden = Venue.objects.create(
            owner=self.owner,
            name="Open garden",
            location="Sao Paulo, Moema",
            category="Outdoor",
            capacity=0,
            pricing_model=Venue.PricingModel.HOURLY,
            price_per_hour=Decimal("50.00"),
        )
        self.closed = Venue.objects.create(
            owner=self.owner,
            name="Closed room",
            pricing_model=Venue.PricingModel.HOURLY,
            price_per_hour=Decimal("10.00"),
            active=False,
        )

    def _book(self, venue: Venue, start_hour: int, end_hour: int):
        return message_bus.handle_command(CreateBookingCommand(
            venue_id=venue.id,
            booker_id=self.renter.id,
            start_at=datetime(2030, 6, 3, start_hour, tzinfo=UTC),
            end_at=datetime(2030, 6, 3, end_hour, tzinfo=UTC),
        ))

    def _names(self, response) -> set[str]:
        return {venue["name"] for venue in response.data}

    def test_list_hides_inactive_venues(self) -> None:
        response = self.client.get(reverse("venue-list"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(self._names(response), {"Grand hall", "Studio", "Open garden"})

    def test_filter_by_capacity_location_and_category(self) -> None:
        by_capacity = self.client.get(reverse("venue-list"), {"capacity": 100})
        by_location = self.client.get(reverse("venue-list"), {"location": "sao paulo"})
        by_category = self.client.get(reverse("venue-list"), {"category": "studio"})
        by_amenity = self.client.get(reverse("venue-list"), {"amenity": "parking"})

        # capacity 0 is unlimited
        self.assertEqual(self._names(by_capacity), {"Grand hall", "Open garden"})
        self.assertEqual(self._names(by_location), {"Grand hall", "Open garden"})
        self.assertEqual(self._names(by_category), {"Studio"})
        self.assertEqual(self._names(by_amenity), {"Grand hall"})

    def test_retrieve_venue(self) -> None:
        response = self.client.get(reverse("venue-detail", args=[self.hall.id]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["price_per_hour"], "100.00")
        self.assertEqual(response.data["owner_id"], self.owner.id)

    def test_availability_lists_reserved_intervals(self) -> None:
        self._book(self.hall, 10, 12)
        self._book(self.hall, 14, 16)
        self._book(self.garden, 10, 12)

        response = self.client.get(
            reverse("venue-availability", args=[self.hall.id]),
            {"from": "2030-06-03T11:00:00Z", "to": "2030-06-03T15:00:00Z"},
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(len(response.data), 2)

    def test_availability_rejects_inverted_window(self) -> None:
        response = self.client.get(
            reverse("venue-availability", args=[self.hall.id]),
            {"from": "2030-06-03T15:00:00Z", "to": "2030-06-03T11:00:00Z"},
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_availability_of_inactive_or_unknown_venue(self) -> None:
        window = {"from": "2030-06-03T11:00:00Z", "to": "2030-06-03T15:00:00Z"}

        inactive = self.client.get(reverse("venue-availability", args=[self.closed.id]), window)
        unknown = self.client.get(
            reverse("venue-availability", args=["00000000-0000-0000-0000-000000000000"]), window
        )

        self.assertEqual(inactive.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(inactive.data["error"]["code"], "venue_inactive")
        self.assertEqual(unknown.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(unknown.data["error"]["code"], "venue_not_found")

    def test_quote_hourly_venue(self) -> None:
        response = self.client.get(
            reverse("venue-quote", args=[self.hall.id]),
            {"start": "2030-06-03T14:00:00Z", "end": "2030-06-03T16:00:00Z"},
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["total_price"], "200.00")
        self.assertEqual(response.data["currency"], "BRL")
        self.assertTrue(response.data["available"])

    def test_quote_weekend_day(self) -> None:
        # Saturday noon in Sao Paulo
        response = self.client.get(
            reverse("venue-quote", args=[self.studio.id]),
            {"start": "2030-06-01T15:00:00Z", "end": "2030-06-02T15:00:00Z"},
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["total_price"], "1500.00")

    def test_quote_reports_taken_slot(self) -> None:
        self._book(self.hall, 14, 16)

        response = self.client.get(
            reverse("venue-quote", args=[self.hall.id]),
            {"start": "2030-06-03T15:00:00Z", "end": "2030-06-03T17:00:00Z"},
        )

        self.assertFalse(response.data["available"])

    def test_quote_inactive_venue(self) -> None:
        response = self.client.get(
            reverse("venue-quote", args=[self.closed.id]),
            {"start": "2030-06-03T14:00:00Z", "end": "2030-06-03T16:00:00Z"},
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"]["code"], "venue_inactive")

    def test_quote_invalid_interval(self) -> None:
        response = self.client.get(
            reverse("venue-quote", args=[self.hall.id]),
            {"start": "2030-06-03T16:00:00Z", "end": "2030-06-03T16:00:00Z"},
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"]["code"], "invalid_interval")

    def test_quote_unsupported_currency(self) -> None:
        Venue.objects.filter(pk=self.hall.pk).update(currency="GBP")

        response = self.client.get(
            reverse("venue-quote", args=[self.hall.id]),
            {"start": "2030-06-03T14:00:00Z", "end": "2030-06-03T16:00:00Z"},
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"]["code"], "pricing_unavailable")


class VenueCatalogTests(TestCase):
    def test_snapshot_reflects_current_rates(self) -> None:
        owner = get_user_model().objects.create_user(username="o", password="OwnerPass123")
        venue = Venue.objects.create(
            owner=owner,
            name="Hall",
            pricing_model=Venue.PricingModel.HOURLY,
            price_per_hour=Decimal("100.00"),
        )
        catalog = VenueCatalog()

        Venue.objects.filter(pk=venue.pk).update(price_per_hour=Decimal("130.00"))
        snapshot = catalog.get_venue(venue.id)

        self.assertEqual(snapshot.price_per_hour, Decimal("130.00"))
        self.assertEqual(snapshot.owner_id, owner.id)
        self.assertEqual(catalog.owner_of(venue.id), owner.id)

    def test_unknown_or_malformed_id(self) -> None:
        catalog = VenueCatalog()

        self.assertIsNone(catalog.get_venue("00000000-0000-0000-0000-000000000000"))
        self.assertIsNone(catalog.get_venue("not-a-uuid"))

    def test_unsupported_currency_fails_model_validation(self) -> None:
        owner = get_user_model().objects.create_user(username="o", password="OwnerPass123")
        venue = Venue(
            owner=owner,
            name="Pub",
            pricing_model=Venue.PricingModel.HOURLY,
            price_per_hour=Decimal("40.00"),
            currency="GBP",
        )

        with self.assertRaises(ValidationError) as ctx:
            venue.full_clean()
        self.assertIn("currency", ctx.exception.message_dict)
