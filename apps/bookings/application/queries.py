"""
Booking read paths

Plain queries over the booking repository; they never lock and never
touch the ledger.
"""

from __future__ import annotations

from typing import List

from apps.bookings.domain.entities import Booking, BookingStatus
from apps.bookings.domain.exceptions import ValidationError
from apps.bookings.repositories import DjangoBookingRepository


def _parse_status(status: BookingStatus | str | None) -> BookingStatus | None:
    if status is None or isinstance(status, BookingStatus):
        return status
    try:
        return BookingStatus(status)
    except ValueError as exc:
        raise ValidationError(f"Unknown booking status '{status}'.") from exc


def get_bookings_for_user(
    user_id: int,
    status: BookingStatus | str | None = None,
    *,
    repo: DjangoBookingRepository | None = None,
) -> List[Booking]:
    """Bookings made by ``user_id``, newest start first, optionally filtered by status"""
    repo = repo or DjangoBookingRepository()
    return repo.list_for_booker(user_id, _parse_status(status))


def get_bookings_for_owner(owner_id: int, *, repo: DjangoBookingRepository | None = None) -> List[Booking]:
    """Bookings on every venue owned by ``owner_id``, newest start first"""
    repo = repo or DjangoBookingRepository()
    return repo.list_for_owner(owner_id)
