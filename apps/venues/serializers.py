"""Serializers for the venue catalog and its calendar."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Venue


class VenueSerializer(serializers.ModelSerializer):
    owner_id = serializers.ReadOnlyField()

    class Meta:
        model = Venue
        fields = [
            "id",
            "owner_id",
            "name",
            "description",
            "location",
            "category",
            "capacity",
            "pricing_model",
            "price_per_hour",
            "price_per_day",
            "price_per_weekend",
            "currency",
            "amenities",
            "active",
        ]
        read_only_fields = fields


class AvailabilityQuerySerializer(serializers.Serializer):
    """Calendar window; ``from`` is a Python keyword so the field is renamed in get_fields."""

    from_ = serializers.DateTimeField()
    to = serializers.DateTimeField()

    def get_fields(self):  # type: ignore
        fields = super().get_fields()
        fields["from"] = fields.pop("from_")
        return fields

    def validate(self, attrs):  # type: ignore
        if attrs["from"] >= attrs["to"]:
            raise serializers.ValidationError("'from' must be before 'to'.")
        return attrs


class QuoteQuerySerializer(serializers.Serializer):
    start = serializers.DateTimeField()
    end = serializers.DateTimeField()


class ReservedIntervalSerializer(serializers.Serializer):
    start = serializers.DateTimeField()
    end = serializers.DateTimeField()


class QuoteSerializer(serializers.Serializer):
    venue_id = serializers.UUIDField()
    start = serializers.DateTimeField()
    end = serializers.DateTimeField()
    total_price = serializers.DecimalField(max_digits=12, decimal_places=2)
    currency = serializers.CharField()
    available = serializers.BooleanField()
