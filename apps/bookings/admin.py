"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin

from .models import AvailabilityInterval, Booking


class AvailabilityIntervalInline(admin.StackedInline):
    model = AvailabilityInterval
    can_delete = False
    extra = 0
    readonly_fields = ("venue", "start_at", "end_at", "created_at")


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "booking_code",
        "venue",
        "booker",
        "status",
        "payment_status",
        "start_at",
        "end_at",
        "total_price",
        "created_at",
    )
    list_filter = ("status", "payment_status", "start_at")
    search_fields = ("booking_code", "venue__name", "booker__username", "payment_reference")
    # State changes go through the command handlers, never through the admin
    readonly_fields = (
        "booking_code",
        "venue",
        "booker",
        "start_at",
        "end_at",
        "total_price",
        "currency",
        "status",
        "payment_status",
        "payment_reference",
        "cancelled_by",
        "confirmed_at",
        "cancelled_at",
        "created_at",
        "updated_at",
    )
    inlines = [AvailabilityIntervalInline]

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(AvailabilityInterval)
class AvailabilityIntervalAdmin(admin.ModelAdmin):
    list_display = ("venue", "booking", "start_at", "end_at", "created_at")
    list_filter = ("venue",)
    readonly_fields = ("venue", "booking", "start_at", "end_at", "created_at")

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    # Rows are written and removed only by reserve and release
    def has_delete_permission(self, request, obj=None):
        return False
