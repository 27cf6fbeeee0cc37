"""
Booking Domain Events

Published through the message bus after the transaction that produced
them commits. Every booking event carries the booker and the venue owner
so subscribers can notify both without reading the database again.
"""

from dataclasses import dataclass
from uuid import UUID

from shared.domain.base import DomainEvent
from shared.domain.value_objects import Money, TimeRange


@dataclass(kw_only=True)
class BookingEvent(DomainEvent):
    booking_id: UUID
    venue_id: UUID
    booker_id: int
    owner_id: int


@dataclass(kw_only=True)
class BookingCreated(BookingEvent):
    """
    A pending booking was created and its interval reserved

    Triggers:
    - Notify booker (request received) and venue owner (new request)
    """
    period: TimeRange
    total_price: Money


@dataclass(kw_only=True)
class BookingConfirmed(BookingEvent):
    """
    Payment verified (PENDING -> CONFIRMED)

    Triggers:
    - Notify booker and venue owner
    """
    payment_reference: str
    total_price: Money


@dataclass(kw_only=True)
class BookingCancelled(BookingEvent):
    """
    Booking cancelled and its interval released

    Triggers:
    - Notify booker and venue owner
    - Refund through the payment collaborator when refund_amount is set
    """
    cancelled_by_id: int
    reason: str
    previous_status: str
    refund_amount: Money | None = None


@dataclass(kw_only=True)
class BookingRequoted(BookingEvent):
    """Quoted price of a pending booking replaced by the current price"""
    old_price: Money
    new_price: Money
