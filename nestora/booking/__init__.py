"""Booking availability & pricing engine."""

from nestora.booking.availability import has_conflict, overlap_clause, ranges_overlap
from nestora.booking.errors import (
    BookingError,
    ConflictOnCommit,
    DatesUnavailable,
    InvalidDateRange,
    InvalidStatusTransition,
    NotFound,
    PaymentMismatch,
    PaymentNotCompleted,
    PropertyUnavailable,
)
from nestora.booking.pricing import Quote, compute_quote
from nestora.booking.search import SearchFilters, search_properties
from nestora.booking.service import (
    confirm_payment,
    quote_booking,
    request_booking,
    transition_booking,
)
from nestora.booking.state import BOOKING_TRANSITIONS, assert_transition, can_transition

__all__ = [
    "BOOKING_TRANSITIONS",
    "BookingError",
    "ConflictOnCommit",
    "DatesUnavailable",
    "InvalidDateRange",
    "InvalidStatusTransition",
    "NotFound",
    "PaymentMismatch",
    "PaymentNotCompleted",
    "PropertyUnavailable",
    "Quote",
    "SearchFilters",
    "assert_transition",
    "can_transition",
    "compute_quote",
    "confirm_payment",
    "has_conflict",
    "overlap_clause",
    "quote_booking",
    "ranges_overlap",
    "request_booking",
    "search_properties",
    "transition_booking",
]
