"""Serializers for the booking API.

Request serializers only validate shapes; business validation (interval,
venue state, availability, price) belongs to the command handlers.
Response serializers read the domain Booking aggregate.
"""

from __future__ import annotations

from decimal import Decimal

from rest_framework import serializers  # type: ignore

from .domain.entities import BookingStatus

SERVER_COMPUTED_FIELDS = ("total_price", "price", "amount")


class BookingCreateSerializer(serializers.Serializer):
    venue = serializers.UUIDField()
    start_at = serializers.DateTimeField()
    end_at = serializers.DateTimeField()
    event_id = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    attendees = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    special_requests = serializers.CharField(required=False, allow_blank=True, default="")

    def validate(self, attrs):  # type: ignore
        submitted = [name for name in SERVER_COMPUTED_FIELDS if name in self.initial_data]
        if submitted:
            raise serializers.ValidationError(
                {name: "The price is computed by the server and cannot be submitted." for name in submitted}
            )
        return attrs


class BookingConfirmSerializer(serializers.Serializer):
    payment_reference = serializers.CharField(max_length=255)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0.00"))


class BookingCancelSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")


class BookingListQuerySerializer(serializers.Serializer):
    status = serializers.ChoiceField(
        choices=[status.value for status in BookingStatus],
        required=False,
    )


class BookingSerializer(serializers.Serializer):
    """Read-only view of a Booking aggregate."""

    id = serializers.UUIDField()
    booking_code = serializers.CharField()
    venue_id = serializers.UUIDField()
    booker_id = serializers.IntegerField()
    event_id = serializers.IntegerField(allow_null=True)
    start_at = serializers.DateTimeField(source="period.start")
    end_at = serializers.DateTimeField(source="period.end")
    attendees = serializers.IntegerField(allow_null=True)
    total_price = serializers.DecimalField(source="total_price.amount", max_digits=12, decimal_places=2)
    currency = serializers.CharField(source="total_price.currency")
    status = serializers.CharField(source="status.value")
    payment_status = serializers.CharField(source="payment_status.value")
    payment_reference = serializers.CharField()
    special_requests = serializers.CharField()
    cancellation_reason = serializers.CharField()
    confirmed_at = serializers.DateTimeField(allow_null=True)
    cancelled_at = serializers.DateTimeField(allow_null=True)
    created_at = serializers.DateTimeField()
    updated_at = serializers.DateTimeField()
