"""
Common Value Objects

Value objects used across the venue and booking contexts:
- Money: A monetary amount with currency
- TimeRange: A half-open datetime interval [start, end)
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo
from decimal import ROUND_HALF_UP, Decimal

from shared.domain.base import ValueObject

CENT = Decimal('0.01')
SUPPORTED_CURRENCIES = ('BRL', 'USD', 'EUR')


@dataclass(frozen=True)
class Money(ValueObject):
    """
    Money value object

    Amounts are kept as Decimal and quantized to cents on construction,
    so two Money values compare equal exactly when they would be charged
    the same.
    """
    amount: Decimal
    currency: str = 'BRL'

    def __post_init__(self):
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, 'amount', Decimal(str(self.amount)))
        object.__setattr__(self, 'amount', self.amount.quantize(CENT, rounding=ROUND_HALF_UP))

        if self.amount < 0:
            raise ValueError("Amount cannot be negative")
        if self.currency not in SUPPORTED_CURRENCIES:
            raise ValueError(f"Unsupported currency: {self.currency}")

    def __add__(self, other: 'Money') -> 'Money':
        self._check_same_currency(other)
        return Money(self.amount + other.amount, self.currency)

    def __sub__(self, other: 'Money') -> 'Money':
        self._check_same_currency(other)
        return Money(self.amount - other.amount, self.currency)

    def __mul__(self, factor) -> 'Money':
        if not isinstance(factor, (int, Decimal)):
            raise TypeError("Money can only be multiplied by int or Decimal")
        return Money(self.amount * factor, self.currency)

    __rmul__ = __mul__

    def _check_same_currency(self, other):
        if not isinstance(other, Money):
            raise TypeError("Can only combine Money with Money")
        if self.currency != other.currency:
            raise ValueError(f"Currency mismatch: {self.currency} and {other.currency}")

    def to_dict(self) -> dict:
        return {'amount': str(self.amount), 'currency': self.currency}

    def __str__(self):
        return f"{self.amount:,.2f} {self.currency}"

    def __repr__(self):
        return f"Money({self.amount}, '{self.currency}')"


@dataclass(frozen=True)
class TimeRange(ValueObject):
    """
    Half-open time interval [start, end)

    Both bounds must be timezone-aware and start must be strictly before
    end. Adjacent ranges (one ends exactly when the other starts) do not
    overlap.
    """
    start: datetime
    end: datetime

    def __post_init__(self):
        if self.start.tzinfo is None or self.end.tzinfo is None:
            raise ValueError("TimeRange bounds must be timezone-aware")
        if self.start >= self.end:
            raise ValueError(f"Start ({self.start.isoformat()}) must be before end ({self.end.isoformat()})")

    def overlaps_with(self, other: 'TimeRange') -> bool:
        """
        Check if this range overlaps with another

        Examples (hours):
            - [14, 16) overlaps with [15, 17) -> True
            - [14, 16) overlaps with [16, 18) -> False (adjacent)
        """
        if not isinstance(other, TimeRange):
            raise TypeError("Can only check overlap with another TimeRange")
        return self.start < other.end and self.end > other.start

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    @property
    def duration_hours(self) -> Decimal:
        """Length in hours, fractional; exact to the microsecond"""
        micros = self.duration // timedelta(microseconds=1)
        return Decimal(micros) / Decimal(3_600_000_000)

    def starts_on_weekend(self, tz: tzinfo | None = None) -> bool:
        """True if the start falls on Saturday or Sunday in the given zone"""
        local_start = self.start.astimezone(tz) if tz else self.start
        return local_start.weekday() >= 5

    def to_dict(self) -> dict:
        return {'start': self.start.isoformat(), 'end': self.end.isoformat()}

    def __str__(self):
        return f"[{self.start.isoformat()}, {self.end.isoformat()})"

    def __repr__(self):
        return f"TimeRange({self.start.isoformat()}, {self.end.isoformat()})"
