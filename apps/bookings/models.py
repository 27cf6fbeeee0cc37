"""Booking persistence models."""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.db.models import F, Q  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Booking(models.Model):
    """Reservation of a venue for a half-open interval [start_at, end_at)."""

    class Status(models.TextChoices):
        PENDING = "pending", _("Pending")
        CONFIRMED = "confirmed", _("Confirmed")
        CANCELLED = "cancelled", _("Cancelled")

    class PaymentStatus(models.TextChoices):
        PENDING = "pending", _("Pending")
        PAID = "paid", _("Paid")
        REFUNDED = "refunded", _("Refunded")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    booking_code = models.CharField(max_length=20, unique=True, editable=False)
    venue = models.ForeignKey(
        "venues.Venue",
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    booker = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="venue_bookings",
    )
    event_id = models.PositiveBigIntegerField(
        null=True,
        blank=True,
        help_text=_("Optional reference to the event this venue is booked for."),
    )
    start_at = models.DateTimeField()
    end_at = models.DateTimeField()
    attendees = models.PositiveIntegerField(null=True, blank=True)
    total_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    currency = models.CharField(max_length=3, default="BRL")
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
    )
    payment_reference = models.CharField(max_length=255, blank=True)
    special_requests = models.TextField(blank=True)
    cancellation_reason = models.CharField(max_length=255, blank=True)
    cancelled_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="cancelled_venue_bookings",
    )
    confirmed_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField()
    updated_at = models.DateTimeField()

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["-start_at"]
        constraints = [
            models.CheckConstraint(
                condition=Q(end_at__gt=F("start_at")),
                name="booking_valid_interval",
            ),
        ]
        indexes = [
            models.Index(fields=["venue", "start_at", "end_at"], name="booking_venue_period_idx"),
            models.Index(fields=["booker", "status"], name="booking_booker_status_idx"),
        ]

    def __str__(self) -> str:
        return f"Booking #{self.booking_code} for venue {self.venue_id}"


class AvailabilityInterval(models.Model):
    """
    Ledger entry: a reserved range on a venue's calendar.

    Rows are written and deleted only by ``apps.bookings.ledger``. On
    PostgreSQL migration 0002 adds an exclusion constraint so overlapping
    rows for one venue cannot be committed at all.
    """

    venue = models.ForeignKey(
        "venues.Venue",
        on_delete=models.CASCADE,
        related_name="reserved_intervals",
    )
    booking = models.OneToOneField(
        Booking,
        on_delete=models.CASCADE,
        related_name="interval",
    )
    start_at = models.DateTimeField()
    end_at = models.DateTimeField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Reserved interval")
        verbose_name_plural = _("Reserved intervals")
        ordering = ["start_at"]
        constraints = [
            models.CheckConstraint(
                condition=Q(end_at__gt=F("start_at")),
                name="interval_valid_range",
            ),
        ]
        indexes = [
            models.Index(fields=["venue", "start_at", "end_at"], name="interval_venue_period_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.venue_id}: [{self.start_at.isoformat()}, {self.end_at.isoformat()})"
