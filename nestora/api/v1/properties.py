"""Properties API routes — host listing management, ownership-scoped."""

import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from nestora.api.deps import get_current_host, get_db
from nestora.models.property import Property, PropertyStatus
from nestora.models.user import User
from nestora.schemas.property import (
    PropertyCreate,
    PropertyListResponse,
    PropertyResponse,
    PropertyStatsResponse,
    PropertyUpdate,
)

router = APIRouter(prefix="/api/v1/properties", tags=["properties"])


async def _get_owned_property(property_id: uuid.UUID, current_user: User, db: AsyncSession) -> Property:
    """Fetch a property owned by the user, else 404."""
    result = await db.execute(select(Property).where(Property.id == property_id))
    prop = result.scalar_one_or_none()

    if prop is None or prop.owner_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Property not found",
        )
    return prop


@router.post(
    "",
    response_model=PropertyResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new listing",
)
async def create_property(
    body: PropertyCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_host),
) -> PropertyResponse:
    """Create a property owned by the authenticated host."""
    prop = Property(
        owner_id=current_user.id,
        **body.model_dump(),
    )
    db.add(prop)
    await db.flush()
    await db.refresh(prop)
    return PropertyResponse.model_validate(prop)


@router.get(
    "",
    response_model=PropertyListResponse,
    summary="List properties owned by the current host",
)
async def list_properties(
    status_filter: PropertyStatus | None = Query(None, alias="status"),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_host),
) -> PropertyListResponse:
    """Return paginated properties belonging to the current host."""
    filters = [Property.owner_id == current_user.id]
    if status_filter is not None:
        filters.append(Property.status == status_filter)

    total_result = await db.execute(select(func.count()).select_from(Property).where(*filters))
    total = total_result.scalar_one()

    items_query = select(Property).where(*filters).order_by(Property.created_at.desc()).offset(skip).limit(limit)
    result = await db.execute(items_query)
    items = list(result.scalars().all())

    return PropertyListResponse(
        items=[PropertyResponse.model_validate(p) for p in items],
        total=total,
    )


@router.get(
    "/stats",
    response_model=PropertyStatsResponse,
    summary="Listing counts by status",
)
async def property_stats(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_host),
) -> PropertyStatsResponse:
    result = await db.execute(
        select(Property.status, func.count())
        .where(Property.owner_id == current_user.id)
        .group_by(Property.status)
    )
    counts = {row_status: count for row_status, count in result.all()}

    return PropertyStatsResponse(
        total_properties=sum(counts.values()),
        vacant=counts.get(PropertyStatus.VACANT, 0),
        occupied=counts.get(PropertyStatus.OCCUPIED, 0),
        unlisted=counts.get(PropertyStatus.UNLISTED, 0),
    )


@router.get(
    "/{property_id}",
    response_model=PropertyResponse,
    summary="Get a property by ID",
)
async def get_property(
    property_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_host),
) -> PropertyResponse:
    """Retrieve a single property. Returns 404 if not found or not owned."""
    prop = await _get_owned_property(property_id, current_user, db)
    return PropertyResponse.model_validate(prop)


@router.patch(
    "/{property_id}",
    response_model=PropertyResponse,
    summary="Update a listing or toggle its status",
)
async def update_property(
    property_id: uuid.UUID,
    body: PropertyUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_host),
) -> PropertyResponse:
    """Partially update a property. Only explicitly set fields are changed.

    Price changes apply to future quotes only; existing bookings keep the
    amounts computed when they were made.
    """
    prop = await _get_owned_property(property_id, current_user, db)

    update_data = body.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        setattr(prop, field, value)

    db.add(prop)
    await db.flush()
    await db.refresh(prop)

    return PropertyResponse.model_validate(prop)
