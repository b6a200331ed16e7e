"""Price calculator — nightly rate × nights, split into platform fee and host payout."""

from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from nestora.booking.errors import InvalidDateRange


@dataclass(frozen=True)
class Quote:
    """Price breakdown for a stay, in minor currency units."""

    nights: int
    total_cents: int
    platform_fee_cents: int
    host_payout_cents: int


def count_nights(check_in: date, check_out: date) -> int:
    """Whole calendar days between check-in and check-out."""
    return (check_out - check_in).days


def platform_fee(total_cents: int, fee_rate: Decimal) -> int:
    """Marketplace share of ``total_cents``, rounded half-up to a whole cent."""
    fee = (Decimal(total_cents) * fee_rate).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return int(fee)


def compute_quote(
    nightly_price_cents: int,
    check_in: date,
    check_out: date,
    fee_rate: Decimal,
) -> Quote:
    """Compute the quote for a stay.

    The host payout is the remainder of the total after the platform fee, so
    ``platform_fee_cents + host_payout_cents == total_cents`` always holds.

    Raises:
        InvalidDateRange: If ``check_out`` is not after ``check_in``.
    """
    nights = count_nights(check_in, check_out)
    if nights < 1:
        raise InvalidDateRange()

    total_cents = nightly_price_cents * nights
    fee_cents = platform_fee(total_cents, fee_rate)
    return Quote(
        nights=nights,
        total_cents=total_cents,
        platform_fee_cents=fee_cents,
        host_payout_cents=total_cents - fee_cents,
    )
