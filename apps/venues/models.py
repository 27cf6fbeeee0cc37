"""Venue catalog models."""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.conf import settings  # type: ignore
from django.core.exceptions import ValidationError  # type: ignore
from django.core.validators import MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.value_objects import SUPPORTED_CURRENCIES


class Venue(models.Model):
    """A bookable space listed by its owner."""

    class PricingModel(models.TextChoices):
        HOURLY = "hourly", _("Hourly")
        DAILY = "daily", _("Daily with weekend rate")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="venues",
    )
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    location = models.CharField(max_length=255, blank=True)
    category = models.CharField(max_length=100, blank=True)
    capacity = models.PositiveIntegerField(default=0, help_text=_("Maximum number of attendees, 0 = unlimited."))
    pricing_model = models.CharField(
        max_length=20,
        choices=PricingModel.choices,
        default=PricingModel.HOURLY,
    )
    price_per_hour = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    price_per_day = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    price_per_weekend = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text=_("Per-day rate applied when a daily booking starts on Saturday or Sunday."),
    )
    currency = models.CharField(
        max_length=3,
        choices=[(code, code) for code in SUPPORTED_CURRENCIES],
        default="BRL",
    )
    amenities = models.JSONField(default=list, blank=True)
    active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Venue")
        verbose_name_plural = _("Venues")
        ordering = ["name"]
        indexes = [
            models.Index(fields=["owner"], name="venue_owner_idx"),
            models.Index(fields=["active", "category"], name="venue_active_category_idx"),
        ]

    def __str__(self) -> str:
        return self.name

    def clean(self) -> None:
        if self.pricing_model == self.PricingModel.HOURLY and self.price_per_hour is None:
            raise ValidationError({"price_per_hour": _("Hourly venues need an hourly rate.")})
        if self.pricing_model == self.PricingModel.DAILY and self.price_per_day is None:
            raise ValidationError({"price_per_day": _("Daily venues need a daily rate.")})
