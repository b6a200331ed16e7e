"""Booking request ⇄ PaymentIntent metadata.

Stripe metadata values are strings, so dates travel as ISO strings and ids as
UUID strings. Notes are truncated to Stripe's 500-character value limit.
"""

import uuid
from dataclasses import dataclass
from datetime import date
from typing import Any

_STRIPE_METADATA_VALUE_LIMIT = 500


@dataclass(frozen=True)
class BookingMetadata:
    property_id: uuid.UUID
    guest_id: uuid.UUID
    check_in: date
    check_out: date
    guests_count: int = 1
    guest_notes: str | None = None


def encode_booking_metadata(
    *,
    property_id: uuid.UUID,
    property_title: str,
    guest_id: uuid.UUID,
    check_in: date,
    check_out: date,
    nights: int,
    guests_count: int,
    guest_notes: str | None,
) -> dict[str, str]:
    metadata = {
        "property_id": str(property_id),
        "property_title": property_title[:_STRIPE_METADATA_VALUE_LIMIT],
        "guest_id": str(guest_id),
        "check_in": check_in.isoformat(),
        "check_out": check_out.isoformat(),
        "nights": str(nights),
        "guests_count": str(guests_count),
    }
    if guest_notes:
        metadata["guest_notes"] = guest_notes[:_STRIPE_METADATA_VALUE_LIMIT]
    return metadata


def _optional(metadata: Any, key: str) -> str | None:
    try:
        return metadata[key]
    except KeyError:
        return None


def decode_booking_metadata(metadata: Any) -> BookingMetadata:
    """Parse metadata written by :func:`encode_booking_metadata`.

    Raises:
        KeyError: A required key is missing.
        ValueError: A value is malformed.
    """
    guests_count = _optional(metadata, "guests_count")
    return BookingMetadata(
        property_id=uuid.UUID(metadata["property_id"]),
        guest_id=uuid.UUID(metadata["guest_id"]),
        check_in=date.fromisoformat(metadata["check_in"]),
        check_out=date.fromisoformat(metadata["check_out"]),
        guests_count=int(guests_count) if guests_count else 1,
        guest_notes=_optional(metadata, "guest_notes"),
    )
