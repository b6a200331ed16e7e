"""Shared test configuration and fixtures.

Uses a transactional rollback strategy per test for full isolation:
- Each test gets a fresh schema and a session whose transaction rolls back.
- ``TEST_DATABASE_URL`` selects the database. Point it at PostgreSQL
  (``postgresql+asyncpg://.../nestora_test``) to exercise the overlap
  exclusion constraint; the default is an in-memory SQLite database.
"""

import os
import uuid
from collections.abc import AsyncGenerator, Awaitable, Callable
from datetime import date
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from nestora.auth.jwt import auth_header_for
from nestora.booking.pricing import compute_quote
from nestora.database import Base, get_db
from nestora.main import app
from nestora.models.booking import Booking, BookingStatus
from nestora.models.property import Property, PropertyStatus
from nestora.models.user import User, UserRole

FEE_RATE = Decimal("0.12")

_test_db_url = os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")


def _make_engine() -> AsyncEngine:
    if _test_db_url.startswith("sqlite"):
        # One shared connection, otherwise every checkout sees an empty in-memory DB.
        return create_async_engine(_test_db_url, poolclass=StaticPool)
    return create_async_engine(_test_db_url, pool_pre_ping=True)


# ---------------------------------------------------------------------------
# Per-test: schema + transactional rollback for isolation
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create all tables for one test and drop them afterwards."""
    engine = _make_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Yield an async session wrapped in a transaction that always rolls back."""
    async with test_engine.connect() as connection:
        transaction = await connection.begin()
        session = AsyncSession(bind=connection, expire_on_commit=False)

        try:
            yield session
        finally:
            await session.close()
            await transaction.rollback()


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Provide an httpx AsyncClient wired to use the test DB session."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def simulation_mode(monkeypatch: pytest.MonkeyPatch) -> None:
    """Force checkout into payment simulation mode."""
    from nestora.config import settings

    monkeypatch.setattr(settings, "stripe_secret_key", "")


@pytest.fixture
def stripe_mode(monkeypatch: pytest.MonkeyPatch) -> None:
    """Pretend a Stripe key is configured; Stripe calls must be patched."""
    from nestora.config import settings

    monkeypatch.setattr(settings, "stripe_secret_key", "sk_test_dummy")


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


async def _create_user(db_session: AsyncSession, role: UserRole, prefix: str, is_active: bool = True) -> User:
    unique = uuid.uuid4().hex[:8]
    user = User(
        email=f"{prefix}-{unique}@test.com",
        name=f"Test {prefix.title()}",
        role=role,
        is_active=is_active,
    )
    db_session.add(user)
    await db_session.flush()
    await db_session.refresh(user)
    return user


@pytest_asyncio.fixture
async def host_user(db_session: AsyncSession) -> User:
    """A host who owns the test listings."""
    return await _create_user(db_session, UserRole.HOST, "host")


@pytest_asyncio.fixture
async def guest_user(db_session: AsyncSession) -> User:
    """A guest-only account."""
    return await _create_user(db_session, UserRole.GUEST, "guest")


@pytest_asyncio.fixture
async def other_host(db_session: AsyncSession) -> User:
    """A second host, for ownership checks."""
    return await _create_user(db_session, UserRole.HOST, "otherhost")


@pytest_asyncio.fixture
async def inactive_user(db_session: AsyncSession) -> User:
    return await _create_user(db_session, UserRole.GUEST, "inactive", is_active=False)


@pytest.fixture
def host_headers(host_user: User) -> dict[str, str]:
    return auth_header_for(str(host_user.id))


@pytest.fixture
def guest_headers(guest_user: User) -> dict[str, str]:
    return auth_header_for(str(guest_user.id))


@pytest.fixture
def other_host_headers(other_host: User) -> dict[str, str]:
    return auth_header_for(str(other_host.id))


# ---------------------------------------------------------------------------
# Properties & bookings written straight to the DB
# ---------------------------------------------------------------------------

PropertyFactory = Callable[..., Awaitable[Property]]
BookingFactory = Callable[..., Awaitable[Booking]]


@pytest_asyncio.fixture
async def make_property(db_session: AsyncSession, host_user: User) -> PropertyFactory:
    """Factory for properties owned by ``host_user`` unless told otherwise."""

    async def _make(
        *,
        owner: User | None = None,
        title: str = "Seaside Loft",
        price_per_night_cents: int = 10000,
        status: PropertyStatus = PropertyStatus.VACANT,
        **fields,
    ) -> Property:
        prop = Property(
            owner_id=(owner or host_user).id,
            title=title,
            price_per_night_cents=price_per_night_cents,
            status=status,
            **fields,
        )
        db_session.add(prop)
        await db_session.flush()
        await db_session.refresh(prop)
        return prop

    return _make


@pytest_asyncio.fixture
async def make_booking(db_session: AsyncSession, guest_user: User) -> BookingFactory:
    """Factory inserting a booking row directly, bypassing the engine's gates."""

    async def _make(
        prop: Property,
        check_in: date,
        check_out: date,
        *,
        status: BookingStatus = BookingStatus.CONFIRMED,
        guest: User | None = None,
    ) -> Booking:
        guest = guest or guest_user
        quote = compute_quote(prop.price_per_night_cents, check_in, check_out, FEE_RATE)
        booking = Booking(
            property_id=prop.id,
            guest_id=guest.id,
            guest_email=guest.email,
            guest_name=guest.display_name,
            check_in=check_in,
            check_out=check_out,
            nights=quote.nights,
            guests_count=1,
            total_cents=quote.total_cents,
            platform_fee_cents=quote.platform_fee_cents,
            host_payout_cents=quote.host_payout_cents,
            status=status,
        )
        db_session.add(booking)
        await db_session.flush()
        await db_session.refresh(booking)
        return booking

    return _make


@pytest_asyncio.fixture
async def test_property(client: AsyncClient, host_headers: dict) -> dict:
    """Create and return a listing via the API."""
    response = await client.post(
        "/api/v1/properties",
        json={
            "title": "Test Cabin",
            "description": "A cabin for automated tests.",
            "address": "1 Pine Road",
            "city": "Asheville",
            "country": "US",
            "bedrooms": 2,
            "bathrooms": 1,
            "max_guests": 4,
            "price_per_night_cents": 10000,
            "amenities": ["wifi", "kitchen"],
        },
        headers=host_headers,
    )
    assert response.status_code == 201, f"Failed to create test property: {response.text}"
    return response.json()
