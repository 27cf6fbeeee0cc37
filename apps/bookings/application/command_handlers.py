"""
Booking Command Handlers

The use cases of the booking context. Each handler runs its domain
operation inside a DjangoUnitOfWork so state changes and ledger writes
commit together and events are published only after the commit.

Commands:
- CreateBookingCommand: Quote, reserve the slot and create a pending booking
- ConfirmBookingCommand: Re-quote and confirm a pending booking after payment
- CancelBookingCommand: Cancel a booking and free its slot
- RequoteBookingCommand: Accept the current price of a pending booking
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from uuid import UUID
import logging
import time

from django.conf import settings
from django.utils import timezone

from shared.application.retry import retry_transient
from shared.application.uow import DjangoUnitOfWork
from shared.domain.value_objects import Money, TimeRange
from apps.bookings.domain.entities import Booking, BookingStatus
from apps.bookings.domain.exceptions import (
    BookingNotFound,
    BookingNotPending,
    BookingSystemBusy,
    CapacityExceeded,
    InvalidInterval,
    NotAuthorized,
    PriceMismatch,
    VenueInactive,
    VenueNotFound,
)
from apps.bookings.domain.pricing import calculate_price
from apps.bookings.ledger import busy_on_lock_timeout

logger = logging.getLogger(__name__)


# ===== Commands =====

@dataclass
class CreateBookingCommand:
    """
    Request to book a venue for [start_at, end_at)

    Carries no price: the price is always computed by the server.
    """
    venue_id: UUID
    booker_id: int
    start_at: datetime
    end_at: datetime
    event_id: int | None = None
    special_requests: str = ''
    attendees: int | None = None


@dataclass(frozen=True)
class PaymentProof:
    """What the payment collaborator reports back: its reference and the amount captured"""
    reference: str
    amount: Decimal


@dataclass
class ConfirmBookingCommand:
    booking_id: UUID
    payment_proof: PaymentProof


@dataclass
class CancelBookingCommand:
    booking_id: UUID
    actor_id: int  # booker or venue owner
    reason: str = ''


@dataclass
class RequoteBookingCommand:
    booking_id: UUID
    actor_id: int


def _pricing_timezone():
    return timezone.get_current_timezone()


def _busy_retries() -> int:
    return int(settings.BOOKING_BUSY_RETRIES)


def _busy_backoff() -> float:
    return float(settings.BOOKING_BUSY_BACKOFF_SECONDS)


def _sleep(seconds: float):
    time.sleep(seconds)


def _get_venue_or_raise(catalog, venue_id):
    venue = catalog.get_venue(venue_id)
    if venue is None:
        raise VenueNotFound(f"Venue {venue_id} not found.")
    return venue


def _get_booking_or_raise(booking_repo, booking_id, *, lock=False) -> Booking:
    booking = booking_repo.get(booking_id, lock=lock)
    if booking is None:
        raise BookingNotFound(f"Booking {booking_id} not found.")
    return booking


# ===== Command Handlers =====

class CreateBookingHandler:
    """
    Handler for CreateBooking command

    1. Validate the interval and the venue (active, capacity)
    2. Quote the price with the pricing calculator
    3. In one transaction: insert the pending booking and reserve its
       interval in the ledger (per-venue lock + overlap check + insert)
    4. Commit; BookingCreated is published afterwards

    If the venue lock cannot be acquired in time the whole transaction is
    retried with exponential backoff before BookingSystemBusy reaches the
    caller.
    """

    def __init__(self, booking_repo, ledger, catalog, clock=timezone.now):
        self.booking_repo = booking_repo
        self.ledger = ledger
        self.catalog = catalog
        self.clock = clock

    def handle(self, command: CreateBookingCommand) -> Booking:
        logger.info(
            f"Creating booking for venue {command.venue_id}, booker {command.booker_id}, "
            f"interval {command.start_at} - {command.end_at}"
        )

        period = self._validate_period(command)

        venue = _get_venue_or_raise(self.catalog, command.venue_id)
        if not venue.active:
            raise VenueInactive(f"Venue {venue.id} is not active.")

        if command.attendees is not None and venue.capacity and command.attendees > venue.capacity:
            raise CapacityExceeded(
                f"{command.attendees} attendees exceed the capacity of {venue.capacity}.",
                capacity=venue.capacity,
            )

        quote = calculate_price(venue, period, _pricing_timezone())

        booking = self._reserve_and_persist(command, venue, period, quote)

        logger.info(
            f"Booking created successfully: {booking.booking_code} "
            f"(ID: {booking.id}, price {booking.total_price})"
        )
        return booking

    @retry_transient(
        (BookingSystemBusy,),
        attempts=_busy_retries,
        backoff=_busy_backoff,
        sleep=_sleep,
    )
    def _reserve_and_persist(self, command: CreateBookingCommand, venue, period: TimeRange, quote: Money) -> Booking:
        with busy_on_lock_timeout(venue.id):
            with DjangoUnitOfWork() as uow:
                booking = Booking.request(
                    venue_id=venue.id,
                    owner_id=venue.owner_id,
                    booker_id=command.booker_id,
                    period=period,
                    total_price=quote,
                    event_id=command.event_id,
                    attendees=command.attendees,
                    special_requests=command.special_requests or '',
                )

                # Booking row first: the interval references it. A
                # SlotUnavailable from reserve() rolls both back.
                self.booking_repo.add(booking)
                self.ledger.reserve(venue.id, period, booking.id)

                uow.collect_events(booking)
        return booking

    def _validate_period(self, command: CreateBookingCommand) -> TimeRange:
        try:
            period = TimeRange(command.start_at, command.end_at)
        except (AttributeError, TypeError, ValueError) as exc:
            raise InvalidInterval(str(exc)) from exc

        if not settings.BOOKING_ALLOW_PAST_START and period.start < self.clock():
            raise InvalidInterval("The booking cannot start in the past.")
        return period


class ConfirmBookingHandler:
    """
    Handler for confirming a booking after payment

    The price is re-quoted from the venue's current pricing; if it differs
    from the quoted price, or the captured amount differs from the quote,
    PriceMismatch is raised and the booking stays pending until the booker
    accepts a re-quote.
    """

    def __init__(self, booking_repo, catalog):
        self.booking_repo = booking_repo
        self.catalog = catalog

    def handle(self, command: ConfirmBookingCommand) -> Booking:
        proof = command.payment_proof
        logger.info(f"Confirming booking {command.booking_id} with payment {proof.reference}")

        with DjangoUnitOfWork() as uow:
            booking = _get_booking_or_raise(self.booking_repo, command.booking_id, lock=True)

            if booking.status != BookingStatus.PENDING:
                raise BookingNotPending(
                    f"Booking {booking.booking_code} is {booking.status.value}, not pending.",
                    status=booking.status.value,
                )

            venue = _get_venue_or_raise(self.catalog, booking.venue_id)
            current_price = calculate_price(venue, booking.period, _pricing_timezone())

            if current_price != booking.total_price:
                logger.warning(
                    f"Re-quote required for {booking.booking_code}: "
                    f"quoted {booking.total_price}, now {current_price}"
                )
                raise PriceMismatch(
                    quoted=booking.total_price.amount,
                    current=current_price.amount,
                )

            if Money(proof.amount, booking.total_price.currency) != booking.total_price:
                raise PriceMismatch(
                    "The paid amount does not match the quoted price.",
                    quoted=booking.total_price.amount,
                    paid=proof.amount,
                )

            booking.confirm(proof.reference, owner_id=venue.owner_id)

            uow.collect_events(booking)
            self.booking_repo.save(booking)

        logger.info(f"Booking {booking.booking_code} confirmed successfully")
        return booking


class CancelBookingHandler:
    """
    Handler for cancelling a booking

    Only the booker or the venue owner may cancel. The status change and
    the ledger release happen in the same transaction, so the slot is free
    exactly when the cancellation is visible.
    """

    def __init__(self, booking_repo, ledger, catalog):
        self.booking_repo = booking_repo
        self.ledger = ledger
        self.catalog = catalog

    def handle(self, command: CancelBookingCommand) -> Booking:
        logger.info(
            f"Cancelling booking {command.booking_id} by user {command.actor_id}, "
            f"reason: {command.reason}"
        )

        with busy_on_lock_timeout():
            with DjangoUnitOfWork() as uow:
                booking = _get_booking_or_raise(self.booking_repo, command.booking_id, lock=True)

                owner_id = self.catalog.owner_of(booking.venue_id)
                if not booking.may_be_cancelled_by(command.actor_id, owner_id):
                    raise NotAuthorized(
                        f"User {command.actor_id} may not cancel booking {booking.booking_code}."
                    )

                # Raises AlreadyCancelled for a second cancellation
                booking.cancel(command.actor_id, command.reason, owner_id=owner_id)
                self.ledger.release(booking.venue_id, booking.id)

                uow.collect_events(booking)
                self.booking_repo.save(booking)

        logger.info(f"Booking {booking.booking_code} cancelled successfully")
        return booking


class RequoteBookingHandler:
    """Handler for accepting the current price of a pending booking"""

    def __init__(self, booking_repo, catalog):
        self.booking_repo = booking_repo
        self.catalog = catalog

    def handle(self, command: RequoteBookingCommand) -> Booking:
        logger.info(f"Re-quoting booking {command.booking_id} for user {command.actor_id}")

        with DjangoUnitOfWork() as uow:
            booking = _get_booking_or_raise(self.booking_repo, command.booking_id, lock=True)

            if command.actor_id != booking.booker_id:
                raise NotAuthorized(f"Only the booker may accept a re-quote of {booking.booking_code}.")

            venue = _get_venue_or_raise(self.catalog, booking.venue_id)
            new_price = calculate_price(venue, booking.period, _pricing_timezone())
            booking.requote(new_price, owner_id=venue.owner_id)

            uow.collect_events(booking)
            self.booking_repo.save(booking)

        logger.info(f"Booking {booking.booking_code} now quoted at {booking.total_price}")
        return booking
