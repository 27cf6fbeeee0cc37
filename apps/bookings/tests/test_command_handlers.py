"""Tests for the booking use cases."""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from unittest import mock

from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings

from shared.application.message_bus import message_bus
from apps.bookings.application.command_handlers import (
    CancelBookingCommand,
    CancelBookingHandler,
    ConfirmBookingCommand,
    ConfirmBookingHandler,
    CreateBookingCommand,
    CreateBookingHandler,
    PaymentProof,
    RequoteBookingCommand,
    RequoteBookingHandler,
)
from apps.bookings.application.queries import get_bookings_for_owner, get_bookings_for_user
from apps.bookings.domain.entities import BookingStatus, PaymentStatus
from apps.bookings.domain.events import BookingCancelled, BookingConfirmed, BookingCreated
from apps.bookings.domain.exceptions import (
    AlreadyCancelled,
    BookingNotFound,
    BookingNotPending,
    BookingSystemBusy,
    CapacityExceeded,
    InvalidInterval,
    NotAuthorized,
    PriceMismatch,
    PricingUnavailable,
    SlotUnavailable,
    ValidationError,
    VenueInactive,
    VenueNotFound,
)
from apps.bookings.ledger import AvailabilityLedger
from apps.bookings.models import AvailabilityInterval, Booking as BookingModel
from apps.bookings.repositories import DjangoBookingRepository
from apps.venues.catalog import VenueCatalog
from apps.venues.models import Venue

UTC = timezone.utc


def _at(hour: int) -> datetime:
    # 2030-06-03 is a Monday
    return datetime(2030, 6, 3, hour, tzinfo=UTC)


class FlakyLedger(AvailabilityLedger):
    """Ledger whose first ``failures`` reservations time out on the venue lock."""

    def __init__(self, failures: int):
        super().__init__()
        self.failures = failures
        self.calls = 0

    def reserve(self, venue_id, period, booking_id):
        self.calls += 1
        if self.calls <= self.failures:
            raise BookingSystemBusy(venue_id=venue_id)
        return super().reserve(venue_id, period, booking_id)


class BookingHandlerTestCase(TestCase):
    def setUp(self) -> None:
        User = get_user_model()
        self.owner = User.objects.create_user(username="owner", password="OwnerPass123")
        self.booker = User.objects.create_user(username="renter", password="RenterPass123")
        self.other = User.objects.create_user(username="other", password="OtherPass123")
        self.venue = Venue.objects.create(
            owner=self.owner,
            name="Loft",
            capacity=50,
            pricing_model=Venue.PricingModel.HOURLY,
            price_per_hour=Decimal("100.00"),
        )

        self.repo = DjangoBookingRepository()
        self.ledger = AvailabilityLedger()
        self.catalog = VenueCatalog()
        self.create_handler = CreateBookingHandler(self.repo, self.ledger, self.catalog)
        self.confirm_handler = ConfirmBookingHandler(self.repo, self.catalog)
        self.cancel_handler = CancelBookingHandler(self.repo, self.ledger, self.catalog)
        self.requote_handler = RequoteBookingHandler(self.repo, self.catalog)

    def _create(self, start: int, end: int, booker=None, **extra):
        return self.create_handler.handle(CreateBookingCommand(
            venue_id=self.venue.id,
            booker_id=(booker or self.booker).id,
            start_at=_at(start),
            end_at=_at(end),
            **extra,
        ))

    def _confirm(self, booking, amount=None):
        return self.confirm_handler.handle(ConfirmBookingCommand(
            booking_id=booking.id,
            payment_proof=PaymentProof(
                reference="PAY-123",
                amount=booking.total_price.amount if amount is None else amount,
            ),
        ))

    def _cancel(self, booking, actor=None, reason="plans changed"):
        return self.cancel_handler.handle(CancelBookingCommand(
            booking_id=booking.id,
            actor_id=(actor or self.booker).id,
            reason=reason,
        ))


class CreateBookingTests(BookingHandlerTestCase):
    def test_hourly_booking_is_quoted_and_pending(self) -> None:
        booking = self._create(14, 16)

        self.assertEqual(booking.status, BookingStatus.PENDING)
        self.assertEqual(booking.total_price.amount, Decimal("200.00"))
        row = BookingModel.objects.get(pk=booking.id)
        self.assertEqual(row.total_price, Decimal("200.00"))
        self.assertEqual(row.currency, "BRL")
        self.assertTrue(AvailabilityInterval.objects.filter(booking_id=booking.id).exists())

    def test_overlap_with_pending_booking_is_rejected(self) -> None:
        self._create(14, 16)

        with self.assertRaises(SlotUnavailable):
            self._create(15, 17, booker=self.other)

        # The rejected booking leaves no row behind
        self.assertEqual(BookingModel.objects.count(), 1)

    def test_back_to_back_bookings(self) -> None:
        self._create(14, 16)
        second = self._create(16, 18, booker=self.other)

        self.assertEqual(second.status, BookingStatus.PENDING)

    def test_inverted_interval(self) -> None:
        with self.assertRaises(InvalidInterval):
            self._create(16, 14)
        with self.assertRaises(InvalidInterval):
            self._create(14, 14)

    def test_start_in_the_past(self) -> None:
        handler = CreateBookingHandler(
            self.repo, self.ledger, self.catalog,
            clock=lambda: _at(15),
        )

        with self.assertRaises(InvalidInterval):
            handler.handle(CreateBookingCommand(
                venue_id=self.venue.id,
                booker_id=self.booker.id,
                start_at=_at(14),
                end_at=_at(16),
            ))

    @override_settings(BOOKING_ALLOW_PAST_START=True)
    def test_past_start_allowed_by_setting(self) -> None:
        handler = CreateBookingHandler(
            self.repo, self.ledger, self.catalog,
            clock=lambda: _at(15),
        )

        booking = handler.handle(CreateBookingCommand(
            venue_id=self.venue.id,
            booker_id=self.booker.id,
            start_at=_at(14),
            end_at=_at(16),
        ))

        self.assertEqual(booking.status, BookingStatus.PENDING)

    def test_unknown_venue(self) -> None:
        with self.assertRaises(VenueNotFound):
            self.create_handler.handle(CreateBookingCommand(
                venue_id=uuid.uuid4(),
                booker_id=self.booker.id,
                start_at=_at(14),
                end_at=_at(16),
            ))

    def test_inactive_venue(self) -> None:
        Venue.objects.filter(pk=self.venue.pk).update(active=False)

        with self.assertRaises(VenueInactive):
            self._create(14, 16)

    def test_capacity_exceeded(self) -> None:
        with self.assertRaises(CapacityExceeded):
            self._create(14, 16, attendees=51)

        booking = self._create(14, 16, attendees=50)
        self.assertEqual(booking.attendees, 50)

    def test_unsupported_venue_currency_is_a_pricing_error(self) -> None:
        Venue.objects.filter(pk=self.venue.pk).update(currency="GBP")

        with self.assertRaises(PricingUnavailable):
            self._create(14, 16)
        self.assertFalse(BookingModel.objects.exists())
        self.assertFalse(AvailabilityInterval.objects.exists())

    def test_busy_venue_is_retried_with_backoff(self) -> None:
        handler = CreateBookingHandler(self.repo, FlakyLedger(failures=2), self.catalog)

        with override_settings(BOOKING_BUSY_BACKOFF_SECONDS=0.05), \
                mock.patch("apps.bookings.application.command_handlers.time.sleep") as sleep:
            booking = handler.handle(CreateBookingCommand(
                venue_id=self.venue.id,
                booker_id=self.booker.id,
                start_at=_at(14),
                end_at=_at(16),
            ))

        self.assertEqual(handler.ledger.calls, 3)
        self.assertEqual([c.args[0] for c in sleep.call_args_list], [0.05, 0.1])
        # Only the successful attempt left a booking behind
        self.assertEqual(list(BookingModel.objects.values_list("id", flat=True)), [booking.id])

    def test_busy_venue_surfaces_after_retries(self) -> None:
        ledger = FlakyLedger(failures=100)
        handler = CreateBookingHandler(self.repo, ledger, self.catalog)

        with override_settings(BOOKING_BUSY_RETRIES=2):
            with self.assertRaises(BookingSystemBusy):
                handler.handle(CreateBookingCommand(
                    venue_id=self.venue.id,
                    booker_id=self.booker.id,
                    start_at=_at(14),
                    end_at=_at(16),
                ))

        self.assertEqual(ledger.calls, 3)
        self.assertFalse(BookingModel.objects.exists())

    def test_taken_booking_code_is_redrawn(self) -> None:
        codes = ["ABCDEF0123", "ABCDEF0123", "9876543210"]
        with mock.patch("apps.bookings.domain.entities.token_hex", side_effect=lambda _: codes.pop(0).lower()):
            first = self._create(10, 12)
            second = self._create(14, 16)

        self.assertTrue(first.booking_code.endswith("ABCDEF0123"))
        self.assertTrue(second.booking_code.endswith("9876543210"))
        self.assertEqual(
            set(BookingModel.objects.values_list("booking_code", flat=True)),
            {first.booking_code, second.booking_code},
        )
        self.assertEqual(AvailabilityInterval.objects.count(), 2)

    def test_created_event_is_published_after_commit(self) -> None:
        published = []
        with mock.patch.object(message_bus, "publish_events", side_effect=published.extend):
            with self.captureOnCommitCallbacks(execute=True):
                booking = self._create(14, 16)

        self.assertEqual([type(e) for e in published], [BookingCreated])
        self.assertEqual(published[0].booking_id, booking.id)
        self.assertEqual(published[0].owner_id, self.owner.id)

    def test_failed_create_publishes_nothing(self) -> None:
        self._create(14, 16)

        with self.captureOnCommitCallbacks(execute=False) as callbacks:
            with self.assertRaises(SlotUnavailable):
                self._create(15, 17)

        self.assertEqual(callbacks, [])


class ConfirmBookingTests(BookingHandlerTestCase):
    def test_confirm_then_cancel_frees_the_slot(self) -> None:
        booking = self._create(14, 16)

        confirmed = self._confirm(booking)
        self.assertEqual(confirmed.status, BookingStatus.CONFIRMED)
        self.assertEqual(confirmed.payment_status, PaymentStatus.PAID)

        cancelled = self._cancel(booking)
        self.assertEqual(cancelled.status, BookingStatus.CANCELLED)
        self.assertEqual(cancelled.payment_status, PaymentStatus.REFUNDED)
        self.assertFalse(AvailabilityInterval.objects.filter(booking_id=booking.id).exists())

        replacement = self._create(15, 17, booker=self.other)
        self.assertEqual(replacement.status, BookingStatus.PENDING)

    def test_price_change_requires_requote(self) -> None:
        booking = self._create(14, 16)
        Venue.objects.filter(pk=self.venue.pk).update(price_per_hour=Decimal("120.00"))

        with self.assertRaises(PriceMismatch) as ctx:
            self._confirm(booking)
        self.assertEqual(ctx.exception.details["current"], Decimal("240.00"))
        self.assertEqual(BookingModel.objects.get(pk=booking.id).status, "pending")

        requoted = self.requote_handler.handle(RequoteBookingCommand(
            booking_id=booking.id,
            actor_id=self.booker.id,
        ))
        self.assertEqual(requoted.total_price.amount, Decimal("240.00"))

        confirmed = self._confirm(requoted)
        self.assertEqual(confirmed.status, BookingStatus.CONFIRMED)
        self.assertEqual(BookingModel.objects.get(pk=booking.id).total_price, Decimal("240.00"))

    def test_paid_amount_must_match_quote(self) -> None:
        booking = self._create(14, 16)

        with self.assertRaises(PriceMismatch):
            self._confirm(booking, amount=Decimal("150.00"))

    def test_confirm_twice(self) -> None:
        booking = self._create(14, 16)
        self._confirm(booking)

        with self.assertRaises(BookingNotPending):
            self._confirm(booking)

    def test_confirm_cancelled_booking(self) -> None:
        booking = self._create(14, 16)
        self._cancel(booking)

        with self.assertRaises(BookingNotPending):
            self._confirm(booking)

    def test_confirm_unknown_booking(self) -> None:
        with self.assertRaises(BookingNotFound):
            self.confirm_handler.handle(ConfirmBookingCommand(
                booking_id=uuid.uuid4(),
                payment_proof=PaymentProof(reference="PAY", amount=Decimal("1")),
            ))

    def test_confirmed_event_carries_payment_reference(self) -> None:
        booking = self._create(14, 16)
        published = []

        with mock.patch.object(message_bus, "publish_events", side_effect=published.extend):
            with self.captureOnCommitCallbacks(execute=True):
                self._confirm(booking)

        [event] = published
        self.assertIsInstance(event, BookingConfirmed)
        self.assertEqual(event.payment_reference, "PAY-123")


class CancelBookingTests(BookingHandlerTestCase):
    def test_second_cancel_raises_already_cancelled(self) -> None:
        booking = self._create(14, 16)
        self._cancel(booking)

        with self.assertRaises(AlreadyCancelled):
            self._cancel(booking)

    def test_owner_may_cancel(self) -> None:
        booking = self._create(14, 16)

        cancelled = self._cancel(booking, actor=self.owner, reason="maintenance")

        self.assertEqual(cancelled.cancelled_by_id, self.owner.id)
        self.assertEqual(BookingModel.objects.get(pk=booking.id).cancellation_reason, "maintenance")

    def test_stranger_may_not_cancel(self) -> None:
        booking = self._create(14, 16)

        with self.assertRaises(NotAuthorized):
            self._cancel(booking, actor=self.other)

        self.assertEqual(BookingModel.objects.get(pk=booking.id).status, "pending")
        self.assertTrue(AvailabilityInterval.objects.filter(booking_id=booking.id).exists())

    def test_cancelled_event_is_published(self) -> None:
        booking = self._create(14, 16)
        published = []

        with mock.patch.object(message_bus, "publish_events", side_effect=published.extend):
            with self.captureOnCommitCallbacks(execute=True):
                self._cancel(booking)

        [event] = published
        self.assertIsInstance(event, BookingCancelled)
        self.assertEqual(event.previous_status, "pending")


class RequoteBookingTests(BookingHandlerTestCase):
    def test_only_booker_may_requote(self) -> None:
        booking = self._create(14, 16)

        with self.assertRaises(NotAuthorized):
            self.requote_handler.handle(RequoteBookingCommand(booking_id=booking.id, actor_id=self.owner.id))

    def test_requote_without_price_change_keeps_price(self) -> None:
        booking = self._create(14, 16)

        requoted = self.requote_handler.handle(RequoteBookingCommand(
            booking_id=booking.id,
            actor_id=self.booker.id,
        ))

        self.assertEqual(requoted.total_price, booking.total_price)


class BookingQueryTests(BookingHandlerTestCase):
    def test_bookings_for_user_with_status_filter(self) -> None:
        first = self._create(10, 12)
        second = self._create(14, 16)
        self._cancel(first)

        self.assertEqual([b.id for b in get_bookings_for_user(self.booker.id)], [second.id, first.id])
        self.assertEqual([b.id for b in get_bookings_for_user(self.booker.id, "cancelled")], [first.id])
        self.assertEqual(get_bookings_for_user(self.other.id), [])

    def test_unknown_status_is_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            get_bookings_for_user(self.booker.id, "expired")

    def test_bookings_for_owner(self) -> None:
        booking = self._create(14, 16)

        self.assertEqual([b.id for b in get_bookings_for_owner(self.owner.id)], [booking.id])
        self.assertEqual(get_bookings_for_owner(self.booker.id), [])
