"""FilterSet definitions for the venue catalog."""

from __future__ import annotations

import django_filters  # type: ignore
from django.db.models import Q  # type: ignore

from .models import Venue


class VenueFilterSet(django_filters.FilterSet):
    """Public catalog filters: minimum capacity, location and category."""

    capacity = django_filters.NumberFilter(method="filter_capacity")
    location = django_filters.CharFilter(field_name="location", lookup_expr="icontains")
    category = django_filters.CharFilter(field_name="category", lookup_expr="iexact")
    pricing_model = django_filters.ChoiceFilter(choices=Venue.PricingModel.choices)
    amenity = django_filters.CharFilter(method="filter_amenity")

    class Meta:
        model = Venue
        fields = ["capacity", "location", "category", "pricing_model"]

    def filter_capacity(self, queryset, name, value):  # type: ignore
        # capacity 0 means unlimited
        return queryset.filter(Q(capacity__gte=value) | Q(capacity=0))

    def filter_amenity(self, queryset, name, value):  # type: ignore
        wanted = value.strip().lower()
        if not wanted:
            return queryset
        # JSON list containment is not portable across backends
        matching = [
            venue_id
            for venue_id, amenities in queryset.values_list("id", "amenities")
            if any(wanted in str(item).lower() for item in amenities or [])
        ]
        return queryset.filter(id__in=matching)
