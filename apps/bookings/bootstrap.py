"""
Wiring of the booking context

Builds the command handlers with their Django-backed collaborators and
registers them on the message bus. Called from BookingsConfig.ready().
"""

from __future__ import annotations

import logging

from shared.application.message_bus import MessageBus, message_bus
from apps.venues.catalog import VenueCatalog

from .application.command_handlers import (
    CancelBookingCommand,
    CancelBookingHandler,
    ConfirmBookingCommand,
    ConfirmBookingHandler,
    CreateBookingCommand,
    CreateBookingHandler,
    RequoteBookingCommand,
    RequoteBookingHandler,
)
from .ledger import AvailabilityLedger
from .repositories import DjangoBookingRepository

logger = logging.getLogger(__name__)


def register_command_handlers(bus: MessageBus = message_bus) -> None:
    if bus.has_command_handler(CreateBookingCommand):
        return

    booking_repo = DjangoBookingRepository()
    ledger = AvailabilityLedger()
    catalog = VenueCatalog()

    bus.register_command_handler(
        CreateBookingCommand,
        CreateBookingHandler(booking_repo, ledger, catalog).handle,
    )
    bus.register_command_handler(
        ConfirmBookingCommand,
        ConfirmBookingHandler(booking_repo, catalog).handle,
    )
    bus.register_command_handler(
        CancelBookingCommand,
        CancelBookingHandler(booking_repo, ledger, catalog).handle,
    )
    bus.register_command_handler(
        RequoteBookingCommand,
        RequoteBookingHandler(booking_repo, catalog).handle,
    )
    logger.debug("Booking command handlers registered")
