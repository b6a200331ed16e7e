"""Shared API dependencies — single import point for all routers.

Re-exports database session and authentication dependencies so that router
modules can import everything they need from one place::

    from nestora.api.deps import get_db, get_current_active_user
"""

from decimal import Decimal

from nestora.auth.dependencies import (
    get_current_active_user,
    get_current_host,
    get_current_user,
)
from nestora.config import settings
from nestora.database import get_db


def get_fee_rate() -> Decimal:
    """Platform fee rate handed to the price calculator."""
    return settings.platform_fee_rate


__all__ = [
    "get_db",
    "get_current_user",
    "get_current_active_user",
    "get_current_host",
    "get_fee_rate",
]
