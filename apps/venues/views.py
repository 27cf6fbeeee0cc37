"""Venue catalog API views."""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from django.utils import timezone  # type: ignore
from rest_framework import permissions, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.filters import OrderingFilter  # type: ignore
from rest_framework.response import Response  # type: ignore

from shared.domain.value_objects import TimeRange
from apps.bookings.domain.exceptions import InvalidInterval, VenueInactive, VenueNotFound
from apps.bookings.domain.pricing import calculate_price
from apps.bookings.ledger import AvailabilityLedger
from apps.bookings.views import BookingErrorMixin

from .catalog import VenueCatalog
from .filters import VenueFilterSet
from .models import Venue
from .serializers import (
    AvailabilityQuerySerializer,
    QuoteQuerySerializer,
    QuoteSerializer,
    ReservedIntervalSerializer,
    VenueSerializer,
)


def _bookable_venue(pk):
    venue = VenueCatalog().get_venue(pk)
    if venue is None:
        raise VenueNotFound(f"Venue {pk} not found.")
    if not venue.active:
        raise VenueInactive(f"Venue {venue.id} is not active.")
    return venue


def _time_range(start, end) -> TimeRange:
    try:
        return TimeRange(start, end)
    except (TypeError, ValueError) as exc:
        raise InvalidInterval(str(exc)) from exc


class VenueViewSet(BookingErrorMixin, viewsets.ReadOnlyModelViewSet):
    """Public venue catalog with its reserved calendar and price quotes."""

    serializer_class = VenueSerializer
    permission_classes = [permissions.AllowAny]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_class = VenueFilterSet
    ordering_fields = ["name", "capacity", "price_per_hour", "price_per_day", "created_at"]

    def get_queryset(self):  # type: ignore
        return Venue.objects.filter(active=True)

    @action(detail=True, methods=["get"])
    def availability(self, request, pk=None):  # type: ignore
        """Reserved intervals of the venue that overlap [from, to)."""
        query = AvailabilityQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        venue = _bookable_venue(pk)
        window = _time_range(query.validated_data["from"], query.validated_data["to"])
        reserved = AvailabilityLedger().list_availability(venue.id, window)
        return Response(ReservedIntervalSerializer(reserved, many=True).data)

    @action(detail=True, methods=["get"])
    def quote(self, request, pk=None):  # type: ignore
        """Price of [start, end) at the venue's current rates, plus whether it is free."""
        query = QuoteQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        venue = _bookable_venue(pk)
        period = _time_range(query.validated_data["start"], query.validated_data["end"])
        price = calculate_price(venue, period, timezone.get_current_timezone())
        payload = {
            "venue_id": venue.id,
            "start": period.start,
            "end": period.end,
            "total_price": price.amount,
            "currency": price.currency,
            "available": AvailabilityLedger().is_available(venue.id, period),
        }
        return Response(QuoteSerializer(payload).data)
