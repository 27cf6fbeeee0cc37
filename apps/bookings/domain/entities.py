"""
Booking Domain Entities

- Booking: Aggregate root representing a venue reservation
- BookingStatus: FSM states for the booking lifecycle
- PaymentStatus: Payment state tracking
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from secrets import token_hex
from uuid import UUID

from shared.domain.base import Aggregate, utcnow
from shared.domain.value_objects import Money, TimeRange
from apps.bookings.domain import events
from apps.bookings.domain.exceptions import AlreadyCancelled, BookingNotPending


class BookingStatus(Enum):
    """
    Booking Status Finite State Machine

    State transitions:
    - PENDING -> CONFIRMED (payment verified)
    - PENDING -> CANCELLED (booker or venue owner cancelled)
    - CONFIRMED -> CANCELLED (booker or venue owner cancelled, refund follows)

    CANCELLED is terminal.
    """
    PENDING = 'pending'
    CONFIRMED = 'confirmed'
    CANCELLED = 'cancelled'


class PaymentStatus(Enum):
    PENDING = 'pending'
    PAID = 'paid'
    REFUNDED = 'refunded'


ALLOWED_TRANSITIONS = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.CANCELLED}),
    BookingStatus.CANCELLED: frozenset(),
}


def generate_booking_code() -> str:
    """Human-readable code: VB{yyyymmdd}{10 hex}"""
    return f"VB{utcnow():%Y%m%d}{token_hex(5).upper()}"


@dataclass(kw_only=True, eq=False)
class Booking(Aggregate):
    """
    Booking Aggregate Root

    Key invariants:
    - period is a valid half-open interval (enforced by TimeRange)
    - total_price is computed by the server, never taken from the client
    - status only moves along ALLOWED_TRANSITIONS
    - a pending or confirmed booking owns exactly one ledger interval
    """

    booking_code: str
    venue_id: UUID
    booker_id: int
    period: TimeRange
    total_price: Money

    event_id: int | None = None
    attendees: int | None = None
    special_requests: str = ''

    status: BookingStatus = BookingStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    payment_reference: str = ''

    cancellation_reason: str = ''
    cancelled_by_id: int | None = None

    confirmed_at: datetime | None = None
    cancelled_at: datetime | None = None

    @classmethod
    def request(
        cls,
        *,
        venue_id: UUID,
        owner_id: int,
        booker_id: int,
        period: TimeRange,
        total_price: Money,
        event_id: int | None = None,
        attendees: int | None = None,
        special_requests: str = '',
    ) -> 'Booking':
        """Create a new pending booking and record BookingCreated"""
        booking = cls(
            booking_code=generate_booking_code(),
            venue_id=venue_id,
            booker_id=booker_id,
            period=period,
            total_price=total_price,
            event_id=event_id,
            attendees=attendees,
            special_requests=special_requests,
        )
        booking.add_event(events.BookingCreated(
            aggregate_id=booking.id,
            booking_id=booking.id,
            venue_id=venue_id,
            booker_id=booker_id,
            owner_id=owner_id,
            period=period,
            total_price=total_price,
        ))
        return booking

    def confirm(self, payment_reference: str, owner_id: int):
        """
        Confirm payment (PENDING -> CONFIRMED)

        The caller is responsible for re-quoting the price first.
        """
        if self.status != BookingStatus.PENDING:
            raise BookingNotPending(
                f"Cannot confirm booking {self.booking_code} from status {self.status.value}.",
                status=self.status.value,
            )

        self._transition(BookingStatus.CONFIRMED)
        self.payment_status = PaymentStatus.PAID
        self.payment_reference = payment_reference
        self.confirmed_at = utcnow()

        self.add_event(events.BookingConfirmed(
            aggregate_id=self.id,
            booking_id=self.id,
            venue_id=self.venue_id,
            booker_id=self.booker_id,
            owner_id=owner_id,
            payment_reference=payment_reference,
            total_price=self.total_price,
        ))

    def cancel(self, actor_id: int, reason: str, owner_id: int):
        """
        Cancel booking (PENDING|CONFIRMED -> CANCELLED)

        A paid booking is marked REFUNDED; moving the money is the payment
        collaborator's job, triggered by the BookingCancelled event.
        """
        if self.status == BookingStatus.CANCELLED:
            raise AlreadyCancelled(f"Booking {self.booking_code} is already cancelled.")

        previous_status = self.status
        self._transition(BookingStatus.CANCELLED)
        self.cancellation_reason = reason
        self.cancelled_by_id = actor_id
        self.cancelled_at = utcnow()

        refund_due = self.payment_status == PaymentStatus.PAID
        if refund_due:
            self.payment_status = PaymentStatus.REFUNDED

        self.add_event(events.BookingCancelled(
            aggregate_id=self.id,
            booking_id=self.id,
            venue_id=self.venue_id,
            booker_id=self.booker_id,
            owner_id=owner_id,
            cancelled_by_id=actor_id,
            reason=reason,
            previous_status=previous_status.value,
            refund_amount=self.total_price if refund_due else None,
        ))

    def requote(self, new_price: Money, owner_id: int):
        """Replace the quoted price of a pending booking"""
        if self.status != BookingStatus.PENDING:
            raise BookingNotPending(
                f"Cannot re-quote booking {self.booking_code} in status {self.status.value}.",
                status=self.status.value,
            )
        if new_price == self.total_price:
            return

        old_price = self.total_price
        self.total_price = new_price
        self.touch()

        self.add_event(events.BookingRequoted(
            aggregate_id=self.id,
            booking_id=self.id,
            venue_id=self.venue_id,
            booker_id=self.booker_id,
            owner_id=owner_id,
            old_price=old_price,
            new_price=new_price,
        ))

    def _transition(self, target: BookingStatus):
        # Callers raise the specific domain error first; this guards the table itself
        if target not in ALLOWED_TRANSITIONS[self.status]:
            raise ValueError(f"Illegal transition {self.status.value} -> {target.value}")
        self.status = target
        self.touch()

    def may_be_cancelled_by(self, actor_id: int, owner_id: int | None) -> bool:
        return actor_id == self.booker_id or (owner_id is not None and actor_id == owner_id)

    def __str__(self):
        return f"Booking {self.booking_code} ({self.status.value})"

    def __repr__(self):
        return (
            f"Booking(id={self.id}, booking_code={self.booking_code}, "
            f"status={self.status.value}, period={self.period!r})"
        )
