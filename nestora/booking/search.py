"""Public property search with availability filtering."""

import uuid
from dataclasses import dataclass, field
from datetime import date

from sqlalchemy import ColumnElement, cast, func, or_, select
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.asyncio import AsyncSession

from nestora.booking.availability import conflicting_property_ids
from nestora.booking.errors import InvalidDateRange, PropertyUnavailable
from nestora.models.property import Property, PropertyStatus


@dataclass(frozen=True)
class SearchFilters:
    """Criteria accepted by :func:`search_properties`. ``None`` means no filter."""

    q: str | None = None
    city: str | None = None
    min_price_cents: int | None = None
    max_price_cents: int | None = None
    bedrooms: int | None = None
    guests: int | None = None
    amenities: list[str] = field(default_factory=list)
    check_in: date | None = None
    check_out: date | None = None


def _filter_clauses(filters: SearchFilters) -> list[ColumnElement[bool]]:
    clauses: list[ColumnElement[bool]] = [Property.status != PropertyStatus.UNLISTED]

    # autoescape: "%" and "_" in user text match literally
    if filters.q:
        clauses.append(
            or_(
                Property.title.icontains(filters.q, autoescape=True),
                Property.description.icontains(filters.q, autoescape=True),
                Property.address.icontains(filters.q, autoescape=True),
            )
        )
    if filters.city:
        clauses.append(Property.city.icontains(filters.city, autoescape=True))
    if filters.min_price_cents is not None:
        clauses.append(Property.price_per_night_cents >= filters.min_price_cents)
    if filters.max_price_cents is not None:
        clauses.append(Property.price_per_night_cents <= filters.max_price_cents)
    if filters.bedrooms is not None:
        clauses.append(Property.bedrooms >= filters.bedrooms)
    if filters.guests is not None:
        clauses.append(Property.max_guests >= filters.guests)
    # JSONB containment; amenity filtering requires PostgreSQL.
    for amenity in filters.amenities:
        clauses.append(cast(Property.amenities, JSONB).contains([amenity]))

    if filters.check_in is not None or filters.check_out is not None:
        if filters.check_in is None or filters.check_out is None:
            raise InvalidDateRange("check_in and check_out must be provided together")
        if filters.check_in >= filters.check_out:
            raise InvalidDateRange()
        clauses.append(Property.id.not_in(conflicting_property_ids(filters.check_in, filters.check_out)))

    return clauses


async def search_properties(
    db: AsyncSession,
    filters: SearchFilters,
    *,
    limit: int = 20,
    offset: int = 0,
) -> tuple[list[Property], int]:
    """Return one page of listed properties matching ``filters`` and the total count.

    A date range excludes every property with an active booking overlapping
    it, using the same predicate as the single-property conflict check.
    """
    clauses = _filter_clauses(filters)

    total_result = await db.execute(select(func.count()).select_from(Property).where(*clauses))
    total = total_result.scalar_one()

    result = await db.execute(
        select(Property)
        .where(*clauses)
        .order_by(Property.created_at.desc(), Property.id)
        .offset(offset)
        .limit(limit)
    )
    return list(result.scalars().all()), total


async def get_public_property(db: AsyncSession, property_id: uuid.UUID) -> Property:
    """Public view of a listed property."""
    result = await db.execute(
        select(Property).where(Property.id == property_id, Property.status != PropertyStatus.UNLISTED)
    )
    prop = result.scalar_one_or_none()
    if prop is None:
        raise PropertyUnavailable()
    return prop
