"""
Booking repository

Maps the Booking aggregate to and from the ORM model. Handlers only see
domain objects; this is the one place that knows both shapes.
"""

from __future__ import annotations

import logging
from typing import List
from uuid import UUID

from django.core.exceptions import ValidationError as DjangoValidationError  # type: ignore
from django.db import IntegrityError, transaction  # type: ignore

from shared.domain.value_objects import Money, TimeRange

from .domain.entities import Booking, BookingStatus, PaymentStatus, generate_booking_code
from .models import Booking as BookingModel

logger = logging.getLogger(__name__)

BOOKING_CODE_ATTEMPTS = 5


def to_domain(row: BookingModel) -> Booking:
    return Booking(
        id=row.id,
        booking_code=row.booking_code,
        venue_id=row.venue_id,
        booker_id=row.booker_id,
        period=TimeRange(row.start_at, row.end_at),
        total_price=Money(row.total_price, row.currency),
        event_id=row.event_id,
        attendees=row.attendees,
        special_requests=row.special_requests,
        status=BookingStatus(row.status),
        payment_status=PaymentStatus(row.payment_status),
        payment_reference=row.payment_reference,
        cancellation_reason=row.cancellation_reason,
        cancelled_by_id=row.cancelled_by_id,
        confirmed_at=row.confirmed_at,
        cancelled_at=row.cancelled_at,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _fields(booking: Booking) -> dict:
    return {
        "booking_code": booking.booking_code,
        "venue_id": booking.venue_id,
        "booker_id": booking.booker_id,
        "event_id": booking.event_id,
        "start_at": booking.period.start,
        "end_at": booking.period.end,
        "attendees": booking.attendees,
        "total_price": booking.total_price.amount,
        "currency": booking.total_price.currency,
        "status": booking.status.value,
        "payment_status": booking.payment_status.value,
        "payment_reference": booking.payment_reference,
        "special_requests": booking.special_requests,
        "cancellation_reason": booking.cancellation_reason,
        "cancelled_by_id": booking.cancelled_by_id,
        "confirmed_at": booking.confirmed_at,
        "cancelled_at": booking.cancelled_at,
        "created_at": booking.created_at,
        "updated_at": booking.updated_at,
    }


class DjangoBookingRepository:
    """Booking aggregates stored in the ``bookings_booking`` table."""

    def get(self, booking_id: UUID | str, *, lock: bool = False) -> Booking | None:
        """
        Load a booking; ``lock=True`` takes a row lock until commit
        (must be called inside a transaction).
        """
        queryset = BookingModel.objects.all()
        if lock:
            queryset = queryset.select_for_update()
        try:
            row = queryset.get(pk=booking_id)
        except (BookingModel.DoesNotExist, DjangoValidationError, ValueError):
            return None
        return to_domain(row)

    def add(self, booking: Booking) -> None:
        """Insert a new booking, drawing a fresh booking_code if the one it has is taken."""
        for attempt in range(1, BOOKING_CODE_ATTEMPTS + 1):
            try:
                with transaction.atomic():
                    BookingModel.objects.create(id=booking.id, **_fields(booking))
            except IntegrityError:
                code_taken = BookingModel.objects.filter(booking_code=booking.booking_code).exists()
                if not code_taken or attempt == BOOKING_CODE_ATTEMPTS:
                    raise
                logger.warning(f"Booking code {booking.booking_code} already taken, drawing another")
                booking.booking_code = generate_booking_code()
            else:
                break
        logger.debug(f"Inserted booking {booking.booking_code}")

    def save(self, booking: Booking) -> None:
        updated = BookingModel.objects.filter(pk=booking.id).update(**_fields(booking))
        if not updated:
            raise LookupError(f"Booking {booking.id} vanished before it could be saved")

    def list_for_booker(self, booker_id: int, status: BookingStatus | None = None) -> List[Booking]:
        queryset = BookingModel.objects.filter(booker_id=booker_id)
        if status is not None:
            queryset = queryset.filter(status=status.value)
        return [to_domain(row) for row in queryset.order_by("-start_at")]

    def list_for_owner(self, owner_id: int) -> List[Booking]:
        queryset = BookingModel.objects.filter(venue__owner_id=owner_id)
        return [to_domain(row) for row in queryset.order_by("-start_at")]
