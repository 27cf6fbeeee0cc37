"""Admin registration for venues."""

from __future__ import annotations

from django.contrib import admin

from .models import Venue


@admin.register(Venue)
class VenueAdmin(admin.ModelAdmin):
    list_display = (
        "name",
        "owner",
        "category",
        "capacity",
        "pricing_model",
        "price_per_hour",
        "price_per_day",
        "price_per_weekend",
        "active",
    )
    list_filter = ("active", "pricing_model", "category")
    search_fields = ("name", "location", "owner__username", "owner__email")
    readonly_fields = ("id", "created_at", "updated_at")
