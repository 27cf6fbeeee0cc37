"""
Pricing Calculator

Pure, deterministic price computation from a venue's pricing rule and a
requested interval. No I/O and no clock: the same inputs always give the
same Money.

Models:
- hourly: price_per_hour * duration_hours (fractional hours allowed)
- daily:  ceil(duration_hours / 24) days, billed at price_per_weekend when
          the interval starts on a Saturday or Sunday and a weekend rate is
          set, otherwise at price_per_day
"""

from datetime import tzinfo
from decimal import ROUND_CEILING, Decimal

from shared.domain.value_objects import SUPPORTED_CURRENCIES, Money, TimeRange
from apps.bookings.domain.exceptions import PricingUnavailable

HOURS_PER_DAY = Decimal(24)


def billable_days(period: TimeRange) -> int:
    """Started 24h blocks; a 25 hour booking is two days"""
    return int((period.duration_hours / HOURS_PER_DAY).to_integral_value(rounding=ROUND_CEILING))


def calculate_price(venue, period: TimeRange, tz: tzinfo | None = None) -> Money:
    """
    Price of booking ``venue`` for ``period``

    ``venue`` is anything exposing pricing_model, price_per_hour,
    price_per_day, price_per_weekend and currency (a VenueSnapshot in
    practice). ``tz`` is the zone the weekend rule is evaluated in.

    Raises PricingUnavailable if the venue lacks the rate its model needs
    or is priced in an unsupported currency.
    """
    if venue.currency not in SUPPORTED_CURRENCIES:
        raise PricingUnavailable(f"Venue {venue.id} is priced in unsupported currency {venue.currency!r}.")

    if venue.pricing_model == 'daily':
        days = billable_days(period)
        weekend_rate = venue.price_per_weekend
        if weekend_rate is not None and period.starts_on_weekend(tz):
            return Money(Decimal(weekend_rate), venue.currency) * days
        if venue.price_per_day is None:
            raise PricingUnavailable(f"Venue {venue.id} has no daily rate.")
        return Money(Decimal(venue.price_per_day), venue.currency) * days

    # Hourly is also the fallback for unknown models
    if venue.price_per_hour is None:
        raise PricingUnavailable(f"Venue {venue.id} has no hourly rate.")
    return Money(Decimal(venue.price_per_hour) * period.duration_hours, venue.currency)
