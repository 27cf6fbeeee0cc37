"""
Booking Domain Errors

Every failure the booking context reports is a BookingError with a stable
machine-readable ``code`` and the HTTP status the API maps it to.
The five families tell a client how to react:

- ValidationError: fix the request (bad interval, inactive venue, ...)
- NotFoundError: the venue or booking does not exist
- ConflictError: a real business condition (slot taken, price changed)
- AuthorizationError: the actor may not touch this booking
- TransientError: nothing is wrong with the request, retry it as is
"""

from __future__ import annotations


class BookingError(Exception):
    code = "booking_error"
    http_status = 400
    default_message = "Booking operation failed."

    def __init__(self, message: str | None = None, **details):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.details = details

    def to_dict(self) -> dict:
        payload = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = {key: str(value) for key, value in self.details.items()}
        return payload


# ===== Families =====

class ValidationError(BookingError):
    code = "validation_error"
    http_status = 400


class NotFoundError(BookingError):
    code = "not_found"
    http_status = 404


class ConflictError(BookingError):
    code = "conflict"
    http_status = 409


class AuthorizationError(BookingError):
    code = "not_authorized"
    http_status = 403


class TransientError(BookingError):
    code = "transient_error"
    http_status = 503
    retry_after_seconds = 1


# ===== Validation =====

class InvalidInterval(ValidationError):
    code = "invalid_interval"
    default_message = "The requested interval is not valid."


class VenueInactive(ValidationError):
    code = "venue_inactive"
    default_message = "The venue is not accepting bookings."


class CapacityExceeded(ValidationError):
    code = "capacity_exceeded"
    default_message = "The number of attendees exceeds the venue capacity."


class PricingUnavailable(ValidationError):
    code = "pricing_unavailable"
    default_message = "The venue has no rate for its pricing model."


# ===== Not found =====

class VenueNotFound(NotFoundError):
    code = "venue_not_found"
    default_message = "Venue not found."


class BookingNotFound(NotFoundError):
    code = "booking_not_found"
    default_message = "Booking not found."


# ===== Conflicts =====

class SlotUnavailable(ConflictError):
    code = "slot_unavailable"
    default_message = "The venue is already booked for part of the requested interval."


class PriceMismatch(ConflictError):
    code = "price_mismatch"
    default_message = "The price changed since the booking was quoted; a re-quote is required."


class BookingNotPending(ConflictError):
    code = "booking_not_pending"
    default_message = "Only pending bookings can be confirmed or re-quoted."


class AlreadyCancelled(ConflictError):
    code = "already_cancelled"
    default_message = "The booking is already cancelled."


# ===== Authorization =====

class NotAuthorized(AuthorizationError):
    code = "not_authorized"
    default_message = "You are not allowed to act on this booking."


# ===== Transient =====

class BookingSystemBusy(TransientError):
    code = "booking_system_busy"
    default_message = "The booking system is busy for this venue; retry the same request."
