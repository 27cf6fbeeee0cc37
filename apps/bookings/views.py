"""API views for the booking domain."""

from __future__ import annotations

from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from shared.application.message_bus import message_bus
from apps.venues.catalog import VenueCatalog

from .application.command_handlers import (
    CancelBookingCommand,
    ConfirmBookingCommand,
    CreateBookingCommand,
    PaymentProof,
    RequoteBookingCommand,
)
from .application.queries import get_bookings_for_owner, get_bookings_for_user
from .domain.exceptions import BookingError, BookingNotFound, TransientError
from .repositories import DjangoBookingRepository
from .serializers import (
    BookingCancelSerializer,
    BookingConfirmSerializer,
    BookingCreateSerializer,
    BookingListQuerySerializer,
    BookingSerializer,
)


class BookingErrorMixin:
    """Render BookingError as ``{"error": {"code", "message"}}`` with its HTTP status."""

    def handle_exception(self, exc):  # type: ignore
        if isinstance(exc, BookingError):
            response = Response({"error": exc.to_dict()}, status=exc.http_status)
            if isinstance(exc, TransientError):
                response["Retry-After"] = str(exc.retry_after_seconds)
            return response
        return super().handle_exception(exc)


class BookingViewSet(BookingErrorMixin, viewsets.ViewSet):
    """Create, confirm, cancel and list venue bookings."""

    permission_classes = [permissions.IsAuthenticated]

    def _get_visible_booking(self, request, pk):
        """The booking if the user is its booker, the venue owner or staff; else 404."""
        booking = DjangoBookingRepository().get(pk)
        if booking is None:
            raise BookingNotFound(f"Booking {pk} not found.")
        user = request.user
        if getattr(user, "is_staff", False):
            return booking
        if booking.booker_id == user.id or VenueCatalog().owner_of(booking.venue_id) == user.id:
            return booking
        raise BookingNotFound(f"Booking {pk} not found.")

    def list(self, request):  # type: ignore
        query = BookingListQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        bookings = get_bookings_for_user(request.user.id, query.validated_data.get("status"))
        return Response(BookingSerializer(bookings, many=True).data)

    def retrieve(self, request, pk=None):  # type: ignore
        booking = self._get_visible_booking(request, pk)
        return Response(BookingSerializer(booking).data)

    def create(self, request):  # type: ignore
        serializer = BookingCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        booking = message_bus.handle_command(CreateBookingCommand(
            venue_id=data["venue"],
            booker_id=request.user.id,
            start_at=data["start_at"],
            end_at=data["end_at"],
            event_id=data.get("event_id"),
            special_requests=data.get("special_requests", ""),
            attendees=data.get("attendees"),
        ))
        return Response(BookingSerializer(booking).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["get"])
    def owned(self, request):  # type: ignore
        bookings = get_bookings_for_owner(request.user.id)
        return Response(BookingSerializer(bookings, many=True).data)

    @action(detail=True, methods=["post"])
    def confirm(self, request, pk=None):  # type: ignore
        self._get_visible_booking(request, pk)
        serializer = BookingConfirmSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        booking = message_bus.handle_command(ConfirmBookingCommand(
            booking_id=pk,
            payment_proof=PaymentProof(
                reference=serializer.validated_data["payment_reference"],
                amount=serializer.validated_data["amount"],
            ),
        ))
        return Response({
            "id": str(booking.id),
            "status": booking.status.value,
            "payment_status": booking.payment_status.value,
        })

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):  # type: ignore
        serializer = BookingCancelSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        booking = message_bus.handle_command(CancelBookingCommand(
            booking_id=pk,
            actor_id=request.user.id,
            reason=serializer.validated_data["reason"],
        ))
        return Response({"id": str(booking.id), "status": booking.status.value})

    @action(detail=True, methods=["post"])
    def requote(self, request, pk=None):  # type: ignore
        booking = message_bus.handle_command(RequoteBookingCommand(
            booking_id=pk,
            actor_id=request.user.id,
        ))
        return Response(BookingSerializer(booking).data)
