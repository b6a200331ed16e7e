"""Public property search API."""

import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from nestora.api.deps import get_db
from nestora.booking.search import SearchFilters, get_public_property, search_properties
from nestora.schemas.common import ErrorResponse
from nestora.schemas.property import PropertyResponse, PropertySearchResponse

router = APIRouter(prefix="/api/v1/search", tags=["search"])


def _split_amenities(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [a.strip() for a in raw.split(",") if a.strip()]


@router.get(
    "/properties",
    response_model=PropertySearchResponse,
    responses={status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse}},
    summary="Search listed properties",
)
async def search(
    q: str | None = Query(None, description="Text in title, description, or address"),
    city: str | None = Query(None),
    min_price: int | None = Query(None, ge=0, description="Minimum nightly price in cents"),
    max_price: int | None = Query(None, ge=0, description="Maximum nightly price in cents"),
    bedrooms: int | None = Query(None, ge=0, description="Minimum bedrooms"),
    guests: int | None = Query(None, ge=1, description="Party size the property must sleep"),
    amenities: str | None = Query(None, description="Comma-separated amenities, all required"),
    check_in: date | None = Query(None),
    check_out: date | None = Query(None),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
) -> PropertySearchResponse:
    """Return listed properties matching the filters.

    With ``check_in`` and ``check_out`` the results exclude every property
    that already has a pending or confirmed booking overlapping those dates.
    """
    filters = SearchFilters(
        q=q,
        city=city,
        min_price_cents=min_price,
        max_price_cents=max_price,
        bedrooms=bedrooms,
        guests=guests,
        amenities=_split_amenities(amenities),
        check_in=check_in,
        check_out=check_out,
    )
    items, total = await search_properties(db, filters, limit=limit, offset=offset)
    return PropertySearchResponse(
        items=[PropertyResponse.model_validate(p) for p in items],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get(
    "/properties/{property_id}",
    response_model=PropertyResponse,
    responses={status.HTTP_404_NOT_FOUND: {"model": ErrorResponse}},
    summary="Public listing detail",
)
async def get_listing(
    property_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
) -> PropertyResponse:
    prop = await get_public_property(db, property_id)
    return PropertyResponse.model_validate(prop)
