"""SQLAlchemy models for Nestora.

All models are imported here so that Alembic's autogenerate can discover
them via Base.metadata. If you add a new model, import it in this file.
"""

from nestora.models.booking import ACTIVE_STATUSES, Booking, BookingStatus
from nestora.models.property import Property, PropertyStatus
from nestora.models.user import User, UserRole

__all__ = [
    "ACTIVE_STATUSES",
    "Booking",
    "BookingStatus",
    "Property",
    "PropertyStatus",
    "User",
    "UserRole",
]
