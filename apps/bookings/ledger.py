"""
Availability Ledger

The single source of truth for "is this venue free during this interval".
All writes to AvailabilityInterval go through reserve() and release().

Double booking is prevented in depth:
1. Per-venue serialization: reserve() takes SELECT ... FOR UPDATE on the
   venue row, so the overlap check and the insert run as one unit for
   that venue while other venues proceed in parallel. Waiting for the lock
   is bounded (lock_timeout on PostgreSQL, the busy timeout on SQLite);
   running out of time raises BookingSystemBusy, never SlotUnavailable.
2. Database constraint: on PostgreSQL an EXCLUDE USING gist constraint
   over (venue, tstzrange(start_at, end_at, '[)')) rejects any overlapping
   row that slipped past step 1; the IntegrityError becomes SlotUnavailable.

Intervals are half-open: [14:00, 16:00) and [16:00, 18:00) do not overlap.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import List
from uuid import UUID

from django.conf import settings  # type: ignore
from django.db import IntegrityError, OperationalError, connection, transaction  # type: ignore

from shared.domain.base import ValueObject
from shared.domain.value_objects import TimeRange
from apps.venues.models import Venue

from .domain.exceptions import BookingSystemBusy, SlotUnavailable, VenueNotFound
from .models import AvailabilityInterval

logger = logging.getLogger(__name__)

# SQLSTATE lock_not_available
PG_LOCK_NOT_AVAILABLE = "55P03"


@dataclass(frozen=True)
class ReservedInterval(ValueObject):
    venue_id: UUID
    booking_id: UUID
    period: TimeRange

    @property
    def start(self):
        return self.period.start

    @property
    def end(self):
        return self.period.end


def is_lock_timeout(exc: OperationalError) -> bool:
    """Whether a driver error means "could not get the lock in time"."""
    cause = exc.__cause__
    sqlstate = getattr(cause, "sqlstate", None) or getattr(cause, "pgcode", None)
    if sqlstate == PG_LOCK_NOT_AVAILABLE:
        return True
    message = str(exc).lower()
    return "database is locked" in message or "lock timeout" in message


@contextmanager
def busy_on_lock_timeout(venue_id=None):
    """Turn "could not get the lock in time" driver errors into BookingSystemBusy"""
    try:
        yield
    except OperationalError as exc:
        if is_lock_timeout(exc):
            logger.warning(f"Timed out waiting for the booking lock (venue {venue_id})")
            raise BookingSystemBusy(venue_id=venue_id) from exc
        raise


def _overlapping(venue_id, period: TimeRange):
    return AvailabilityInterval.objects.filter(
        venue_id=venue_id,
        start_at__lt=period.end,
        end_at__gt=period.start,
    )


def _to_reserved(row: AvailabilityInterval) -> ReservedInterval:
    return ReservedInterval(
        venue_id=row.venue_id,
        booking_id=row.booking_id,
        period=TimeRange(row.start_at, row.end_at),
    )


class AvailabilityLedger:
    """Transactional, per-venue-serialized ledger of reserved intervals."""

    def __init__(self, lock_timeout_ms: int | None = None):
        self._lock_timeout_ms = lock_timeout_ms

    @property
    def lock_timeout_ms(self) -> int:
        if self._lock_timeout_ms is not None:
            return self._lock_timeout_ms
        return int(settings.BOOKING_LOCK_TIMEOUT_MS)

    def is_available(self, venue_id: UUID, period: TimeRange) -> bool:
        """True iff no reserved interval of the venue overlaps ``period``"""
        return not _overlapping(venue_id, period).exists()

    def reserve(self, venue_id: UUID, period: TimeRange, booking_id: UUID) -> ReservedInterval:
        """
        Atomically check for overlap and record the interval

        Runs inside the caller's transaction when there is one (the booking
        row and its interval then commit or roll back together).

        Raises:
            VenueNotFound: the venue row does not exist
            SlotUnavailable: an active interval overlaps ``period``
            BookingSystemBusy: the venue lock was not acquired in time
        """
        with transaction.atomic():
            self._lock_venue(venue_id)

            conflict = _overlapping(venue_id, period).first()
            if conflict is not None:
                logger.info(
                    f"Slot {period} on venue {venue_id} conflicts with "
                    f"booking {conflict.booking_id}"
                )
                raise SlotUnavailable(
                    f"Venue is already booked between "
                    f"{conflict.start_at.isoformat()} and {conflict.end_at.isoformat()}.",
                    venue_id=venue_id,
                )

            try:
                # Savepoint so a constraint violation leaves the outer transaction usable
                with transaction.atomic():
                    row = AvailabilityInterval.objects.create(
                        venue_id=venue_id,
                        booking_id=booking_id,
                        start_at=period.start,
                        end_at=period.end,
                    )
            except IntegrityError as exc:
                logger.warning(f"Exclusion constraint rejected {period} on venue {venue_id}: {exc}")
                raise SlotUnavailable(venue_id=venue_id) from exc

        logger.info(f"Reserved {period} on venue {venue_id} for booking {booking_id}")
        return _to_reserved(row)

    def release(self, venue_id: UUID, booking_id: UUID) -> None:
        """Free the interval held by ``booking_id``; no-op if there is none"""
        with transaction.atomic():
            deleted, _ = AvailabilityInterval.objects.filter(
                venue_id=venue_id,
                booking_id=booking_id,
            ).delete()

        if deleted:
            logger.info(f"Released interval of booking {booking_id} on venue {venue_id}")
        else:
            logger.warning(f"No interval to release for booking {booking_id} on venue {venue_id}")

    def list_availability(self, venue_id: UUID, window: TimeRange) -> List[ReservedInterval]:
        """Reserved intervals overlapping ``window``, ordered by start"""
        rows = _overlapping(venue_id, window).order_by("start_at", "end_at")
        return [_to_reserved(row) for row in rows]

    def _lock_venue(self, venue_id: UUID) -> None:
        """
        Serialize writers of one venue for the rest of the transaction

        SQLite has no row locks; there the whole database is the lock
        (immediate transactions plus the busy timeout give the same
        bounded wait).
        """
        with busy_on_lock_timeout(venue_id):
            if connection.vendor == "postgresql":
                with connection.cursor() as cursor:
                    cursor.execute(f"SET LOCAL lock_timeout = '{int(self.lock_timeout_ms)}ms'")
            locked = Venue.objects.select_for_update().filter(pk=venue_id).values_list("pk", flat=True)
            if not list(locked):
                raise VenueNotFound(f"Venue {venue_id} not found.")
