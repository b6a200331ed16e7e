"""Seed the database with sample Nestora listings and bookings.

Creates one demo host, a handful of guests, five listings and a spread of
bookings in every status. Bookings go through the booking service, so the
seeded data obeys the same availability and pricing rules as live traffic.

Usage:
    python -m scripts.seed_data
"""

import asyncio
from datetime import date, timedelta

from sqlalchemy import delete, or_, select

from nestora.auth.jwt import create_access_token
from nestora.booking.service import request_booking, transition_booking
from nestora.config import settings
from nestora.database import async_session_factory
from nestora.models.booking import Booking, BookingStatus
from nestora.models.property import Property, PropertyStatus
from nestora.models.user import User, UserRole

DEMO_HOST = {
    "email": "host@nestora.example",
    "name": "Demo Host",
}

PROPERTIES = [
    {
        "title": "Harbour View Loft",
        "description": "Open-plan loft above the marina with a balcony facing the harbour.",
        "address": "4 Quay Street",
        "city": "Lisbon",
        "country": "PT",
        "bedrooms": 1,
        "bathrooms": 1,
        "max_guests": 2,
        "price_per_night_cents": 12900,
        "amenities": ["wifi", "kitchen", "balcony"],
    },
    {
        "title": "Old Town Family Flat",
        "description": "Three bedrooms on a quiet square, five minutes from the cathedral.",
        "address": "17 Rua Augusta",
        "city": "Lisbon",
        "country": "PT",
        "bedrooms": 3,
        "bathrooms": 2,
        "max_guests": 6,
        "price_per_night_cents": 21000,
        "amenities": ["wifi", "kitchen", "washer", "crib"],
    },
    {
        "title": "Ridge Cabin",
        "description": "Timber cabin with a wood stove and trail access from the porch.",
        "address": "Ridge Road 9",
        "city": "Asheville",
        "country": "US",
        "bedrooms": 2,
        "bathrooms": 1,
        "max_guests": 4,
        "price_per_night_cents": 15500,
        "amenities": ["wifi", "fireplace", "parking"],
    },
    {
        "title": "Canal House Studio",
        "description": "Compact studio in a restored canal house, bikes included.",
        "address": "Prinsengracht 210",
        "city": "Amsterdam",
        "country": "NL",
        "bedrooms": 0,
        "bathrooms": 1,
        "max_guests": 2,
        "price_per_night_cents": 9800,
        "amenities": ["wifi", "bikes"],
    },
    {
        "title": "Dune Beach House",
        "description": "Whole house behind the dunes with an outdoor shower and garden.",
        "address": "Strandweg 3",
        "city": "Zandvoort",
        "country": "NL",
        "bedrooms": 4,
        "bathrooms": 2,
        "max_guests": 8,
        "price_per_night_cents": 34500,
        "amenities": ["wifi", "kitchen", "garden", "parking", "pool"],
        "status": PropertyStatus.UNLISTED,
    },
]

GUESTS = [
    {"name": "Emma Thompson", "email": "emma.thompson@guest.example"},
    {"name": "James Wilson", "email": "j.wilson@guest.example"},
    {"name": "Sarah Chen", "email": "sarah.chen@guest.example"},
    {"name": "Klaus Mueller", "email": "k.mueller@guest.example"},
    {"name": "Yuki Tanaka", "email": "yuki.tanaka@guest.example"},
]

# Status a booking ends in -> transitions applied after the pending request.
_PATHS = {
    BookingStatus.PENDING: [],
    BookingStatus.CONFIRMED: [BookingStatus.CONFIRMED],
    BookingStatus.COMPLETED: [BookingStatus.CONFIRMED, BookingStatus.COMPLETED],
    BookingStatus.CANCELLED: [BookingStatus.CANCELLED],
}


def _build_bookings(properties: dict[str, Property], guests: dict[str, User], today: date) -> list[dict]:
    """Bookings spread over past, present and future.

    Cancelled stays come before stays on the same dates so the dates are
    free again by the time the later request is made.
    """
    return [
        # --- Harbour View Loft ---
        {
            "property": properties["Harbour View Loft"],
            "guest": guests["James Wilson"],
            "check_in": today - timedelta(days=30),
            "check_out": today - timedelta(days=25),
            "status": BookingStatus.COMPLETED,
            "notes": "Late check-out if possible",
        },
        {
            "property": properties["Harbour View Loft"],
            "guest": guests["Emma Thompson"],
            "check_in": today - timedelta(days=2),
            "check_out": today + timedelta(days=5),
            "status": BookingStatus.CONFIRMED,
            "guests_count": 2,
        },
        {
            # Turnover day: starts when the previous stay checks out.
            "property": properties["Harbour View Loft"],
            "guest": guests["Sarah Chen"],
            "check_in": today + timedelta(days=5),
            "check_out": today + timedelta(days=9),
            "status": BookingStatus.PENDING,
        },
        # --- Old Town Family Flat ---
        {
            "property": properties["Old Town Family Flat"],
            "guest": guests["Klaus Mueller"],
            "check_in": today + timedelta(days=10),
            "check_out": today + timedelta(days=14),
            "status": BookingStatus.CANCELLED,
            "reason": "Guest changed travel plans",
        },
        {
            "property": properties["Old Town Family Flat"],
            "guest": guests["Yuki Tanaka"],
            "check_in": today + timedelta(days=10),
            "check_out": today + timedelta(days=17),
            "status": BookingStatus.CONFIRMED,
            "guests_count": 4,
            "notes": "Travelling with two children",
        },
        # --- Ridge Cabin ---
        {
            "property": properties["Ridge Cabin"],
            "guest": guests["Sarah Chen"],
            "check_in": today - timedelta(days=45),
            "check_out": today - timedelta(days=40),
            "status": BookingStatus.COMPLETED,
            "guests_count": 3,
        },
        {
            "property": properties["Ridge Cabin"],
            "guest": guests["Emma Thompson"],
            "check_in": today + timedelta(days=20),
            "check_out": today + timedelta(days=23),
            "status": BookingStatus.PENDING,
        },
        # --- Canal House Studio ---
        {
            "property": properties["Canal House Studio"],
            "guest": guests["James Wilson"],
            "check_in": today + timedelta(days=3),
            "check_out": today + timedelta(days=6),
            "status": BookingStatus.CONFIRMED,
        },
    ]


async def _clear_previous_seed(session) -> None:
    seeded_emails = [DEMO_HOST["email"], *(g["email"] for g in GUESTS)]
    result = await session.execute(select(User.id).where(User.email.in_(seeded_emails)))
    user_ids = list(result.scalars().all())
    if not user_ids:
        return

    print("⚠️  Previous seed data found. Deleting and re-seeding...")
    property_ids = select(Property.id).where(Property.owner_id.in_(user_ids))
    await session.execute(
        delete(Booking).where(or_(Booking.property_id.in_(property_ids), Booking.guest_id.in_(user_ids)))
    )
    await session.execute(delete(Property).where(Property.owner_id.in_(user_ids)))
    await session.execute(delete(User).where(User.id.in_(user_ids)))
    await session.flush()


# ---------------------------------------------------------------------------
# Main seed function
# ---------------------------------------------------------------------------


async def seed() -> None:
    """Populate the database with sample data. Re-running replaces the previous seed."""
    async with async_session_factory() as session:
        await _clear_previous_seed(session)

        # ------------------------------------------------------------------
        # 1. Users
        # ------------------------------------------------------------------
        host = User(role=UserRole.HOST, **DEMO_HOST)
        session.add(host)
        guests = {g["name"]: User(role=UserRole.GUEST, **g) for g in GUESTS}
        session.add_all(guests.values())
        await session.flush()

        print(f"✅ Created demo host: {host.email} (id={host.id})")
        print(f"✅ Created {len(guests)} guests")

        # ------------------------------------------------------------------
        # 2. Properties
        # ------------------------------------------------------------------
        properties: dict[str, Property] = {}
        for prop_data in PROPERTIES:
            prop = Property(owner_id=host.id, **prop_data)
            session.add(prop)
            await session.flush()
            properties[prop.title] = prop
            print(f"   🏠 {prop.title} — {prop.city} ({prop.price_per_night_cents / 100:.2f}/night)")

        # ------------------------------------------------------------------
        # 3. Bookings, through the booking service
        # ------------------------------------------------------------------
        bookings = _build_bookings(properties, guests, date.today())
        for bdata in bookings:
            booking = await request_booking(
                session,
                property_id=bdata["property"].id,
                guest=bdata["guest"],
                check_in=bdata["check_in"],
                check_out=bdata["check_out"],
                fee_rate=settings.platform_fee_rate,
                guests_count=bdata.get("guests_count", 1),
                notes=bdata.get("notes"),
            )
            for target in _PATHS[bdata["status"]]:
                booking = await transition_booking(
                    session,
                    booking.id,
                    host,
                    target,
                    cancellation_reason=bdata.get("reason"),
                )

        await session.commit()

        print(f"✅ Created {len(bookings)} bookings")
        print()
        print("=" * 60)
        print("📊 Seed Summary")
        print("=" * 60)
        print(f"   Hosts:      1 ({host.email})")
        print(f"   Guests:     {len(guests)}")
        print(f"   Properties: {len(properties)}")
        print(f"   Bookings:   {len(bookings)}")
        print("=" * 60)
        print("🔑 Host access token:")
        print(f"   {create_access_token({'sub': str(host.id)})}")


if __name__ == "__main__":
    asyncio.run(seed())
