"""
Notification Dispatcher

Subscribes to booking domain events and hands a compact payload to the
delivery task. Dispatch is best-effort: a broker outage or a failing
task is logged and swallowed, because the booking has already been
committed when events are published.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Callable

from shared.application.message_bus import MessageBus
from apps.bookings.domain.events import (
    BookingCancelled,
    BookingConfirmed,
    BookingCreated,
    BookingEvent,
    BookingRequoted,
)

from .models import Notification

logger = logging.getLogger(__name__)

EVENT_TYPES = {
    BookingCreated: Notification.Type.BOOKING_CREATED,
    BookingConfirmed: Notification.Type.BOOKING_CONFIRMED,
    BookingCancelled: Notification.Type.BOOKING_CANCELLED,
    BookingRequoted: Notification.Type.BOOKING_REQUOTED,
}


@dataclass(frozen=True)
class NotificationPayload:
    type: str
    booking_id: str
    venue_id: str
    booker_id: int
    owner_id: int

    @classmethod
    def from_event(cls, event: BookingEvent) -> "NotificationPayload":
        return cls(
            type=str(EVENT_TYPES[type(event)].value),
            booking_id=str(event.booking_id),
            venue_id=str(event.venue_id),
            booker_id=event.booker_id,
            owner_id=event.owner_id,
        )

    def to_dict(self) -> dict:
        return asdict(self)


def _enqueue_delivery(payload: dict) -> None:
    from .tasks import deliver_notification

    deliver_notification.delay(payload)


class NotificationDispatcher:
    """Fire-and-forget sender; ``notify`` never raises."""

    def __init__(self, enqueue: Callable[[dict], None] | None = None):
        self._enqueue = enqueue or _enqueue_delivery

    def notify(self, payload: NotificationPayload) -> bool:
        try:
            self._enqueue(payload.to_dict())
        except Exception as e:
            logger.error(
                f"Failed to dispatch {payload.type} notification for booking {payload.booking_id}: {e}",
                exc_info=True,
            )
            return False
        logger.info(f"Dispatched {payload.type} notification for booking {payload.booking_id}")
        return True

    def __call__(self, event: BookingEvent) -> None:
        """Message bus event handler"""
        self.notify(NotificationPayload.from_event(event))


dispatcher = NotificationDispatcher()


def subscribe(bus: MessageBus, handler: NotificationDispatcher = dispatcher) -> None:
    for event_type in EVENT_TYPES:
        bus.register_event_handler(event_type, handler)
