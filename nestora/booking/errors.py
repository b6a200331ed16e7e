"""Booking domain errors.

Every rejection the booking engine can produce has a stable, machine-readable
``code`` so clients can render specific messaging. ``nestora.main`` turns
these into JSON responses of the form ``{"detail": ..., "code": ...}``.
"""

from fastapi import status


class BookingError(Exception):
    """Base class for booking rejections."""

    code: str = "booking_error"
    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Booking request rejected"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class PropertyUnavailable(BookingError):
    """The property does not exist or is unlisted."""

    code = "property_unavailable"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Property not found"


class InvalidDateRange(BookingError):
    """check_out is not strictly after check_in."""

    code = "invalid_date_range"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "check_out must be after check_in"


class DatesUnavailable(BookingError):
    """An active booking already covers part of the requested stay."""

    code = "dates_unavailable"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Property is not available for the selected dates"


class InvalidStatusTransition(BookingError):
    code = "invalid_status_transition"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid booking status transition"


class NotFound(BookingError):
    """The booking (or property) is absent or not owned by the caller."""

    code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Booking not found"


class ConflictOnCommit(BookingError):
    """A concurrent request booked overlapping dates before this one committed."""

    code = "conflict_on_commit"
    status_code = status.HTTP_409_CONFLICT
    default_message = "The selected dates were booked by another request"


class PaymentNotCompleted(BookingError):
    code = "payment_not_completed"
    status_code = status.HTTP_402_PAYMENT_REQUIRED
    default_message = "Payment not completed"


class PaymentMismatch(BookingError):
    """The payment was taken for a different stay, guest or amount."""

    code = "payment_mismatch"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Payment does not match the requested booking"
