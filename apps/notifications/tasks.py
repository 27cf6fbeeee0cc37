"""Celery tasks for notification delivery."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore
from django.contrib.auth import get_user_model  # type: ignore

from .models import Notification

logger = logging.getLogger(__name__)

MESSAGES = {
    Notification.Type.BOOKING_CREATED: (
        "Booking request received",
        "Your booking request is pending payment.",
        "A new booking request arrived for your venue.",
    ),
    Notification.Type.BOOKING_CONFIRMED: (
        "Booking confirmed",
        "Your payment was received and the booking is confirmed.",
        "A booking on your venue was paid and confirmed.",
    ),
    Notification.Type.BOOKING_CANCELLED: (
        "Booking cancelled",
        "Your booking was cancelled.",
        "A booking on your venue was cancelled; the slot is free again.",
    ),
    Notification.Type.BOOKING_REQUOTED: (
        "Booking price updated",
        "You accepted the current price of your booking.",
        "A pending booking on your venue was re-quoted.",
    ),
}


@shared_task(name="notifications.deliver", ignore_result=True)
def deliver_notification(payload: dict) -> int:
    """
    Store an in-app notification for the booker and the venue owner.

    Returns the number of notifications created. Unknown types and missing
    users are logged and skipped.
    """
    try:
        notification_type = Notification.Type(payload["type"])
    except (KeyError, ValueError):
        logger.warning(f"Dropping notification with unknown type: {payload!r}")
        return 0

    title, booker_text, owner_text = MESSAGES[notification_type]
    recipients = [
        (payload.get("booker_id"), booker_text),
        (payload.get("owner_id"), owner_text),
    ]

    user_ids = {user_id for user_id, _ in recipients if user_id is not None}
    existing = set(get_user_model().objects.filter(pk__in=user_ids).values_list("pk", flat=True))

    created = 0
    seen: set[int] = set()
    for user_id, text in recipients:
        if user_id not in existing or user_id in seen:
            continue
        seen.add(user_id)
        Notification.objects.create(
            user_id=user_id,
            type=notification_type,
            title=title,
            message=text,
            booking_id=payload.get("booking_id"),
            venue_id=payload.get("venue_id"),
        )
        created += 1

    logger.info(f"Delivered {created} {notification_type.value} notifications for booking {payload.get('booking_id')}")
    return created
