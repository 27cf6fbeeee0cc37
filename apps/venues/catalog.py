"""
Venue Catalog read interface

The booking context never touches the Venue ORM model directly; it asks
the catalog for an immutable snapshot of the pricing rules, capacity,
active flag and owner.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from django.conf import settings  # type: ignore
from django.core.exceptions import ValidationError as DjangoValidationError  # type: ignore

from shared.domain.base import ValueObject

from .models import Venue

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VenueSnapshot(ValueObject):
    """Point-in-time view of a venue as seen by the booking context."""

    id: UUID
    owner_id: int
    name: str
    pricing_model: str
    price_per_hour: Decimal | None
    price_per_day: Decimal | None
    price_per_weekend: Decimal | None
    currency: str
    capacity: int
    active: bool

    @classmethod
    def from_model(cls, venue: Venue) -> "VenueSnapshot":
        return cls(
            id=venue.id,
            owner_id=venue.owner_id,
            name=venue.name,
            pricing_model=venue.pricing_model,
            price_per_hour=venue.price_per_hour,
            price_per_day=venue.price_per_day,
            price_per_weekend=venue.price_per_weekend,
            currency=venue.currency or settings.BOOKING_CURRENCY,
            capacity=venue.capacity,
            active=venue.active,
        )


class VenueCatalog:
    """Read-only access to venues."""

    def get_venue(self, venue_id: UUID | str) -> VenueSnapshot | None:
        try:
            venue = Venue.objects.get(pk=venue_id)
        except (Venue.DoesNotExist, DjangoValidationError, ValueError):
            logger.info("Venue %s not found in catalog", venue_id)
            return None
        return VenueSnapshot.from_model(venue)

    def owner_of(self, venue_id: UUID | str) -> int | None:
        return Venue.objects.filter(pk=venue_id).values_list("owner_id", flat=True).first()

