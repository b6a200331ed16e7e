"""Tests for booking endpoints."""

import uuid
from datetime import date, timedelta

from httpx import AsyncClient

from nestora.models.booking import BookingStatus
from nestora.models.property import Property

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _future_dates(offset_start: int = 30, nights: int = 5) -> tuple[str, str]:
    """Return a (check_in, check_out) pair safely in the future as ISO strings."""
    check_in = date.today() + timedelta(days=offset_start)
    check_out = check_in + timedelta(days=nights)
    return check_in.isoformat(), check_out.isoformat()


async def _book(client: AsyncClient, headers: dict, property_id: str, ci: str, co: str, **extra):
    return await client.post(
        "/api/v1/bookings",
        json={"property_id": property_id, "check_in": ci, "check_out": co, **extra},
        headers=headers,
    )


# ---------------------------------------------------------------------------
# POST /api/v1/bookings/quote
# ---------------------------------------------------------------------------


class TestQuote:
    """Tests for pricing a stay."""

    async def test_quote_breakdown(self, client: AsyncClient, guest_headers: dict, test_property: dict) -> None:
        response = await client.post(
            "/api/v1/bookings/quote",
            json={"property_id": test_property["id"], "check_in": "2026-03-01", "check_out": "2026-03-04"},
            headers=guest_headers,
        )
        assert response.status_code == 200
        data = response.json()
        assert data["nights"] == 3
        assert data["price_per_night_cents"] == 10000
        assert data["total_cents"] == 30000
        assert data["platform_fee_cents"] == 3600
        assert data["host_payout_cents"] == 26400
        assert data["currency"] == "usd"

    async def test_quote_invalid_range(self, client: AsyncClient, guest_headers: dict, test_property: dict) -> None:
        response = await client.post(
            "/api/v1/bookings/quote",
            json={"property_id": test_property["id"], "check_in": "2026-03-04", "check_out": "2026-03-04"},
            headers=guest_headers,
        )
        assert response.status_code == 400
        assert response.json()["code"] == "invalid_date_range"

    async def test_quote_requires_auth(self, client: AsyncClient, test_property: dict) -> None:
        response = await client.post(
            "/api/v1/bookings/quote",
            json={"property_id": test_property["id"], "check_in": "2026-03-01", "check_out": "2026-03-04"},
        )
        assert response.status_code == 401


# ---------------------------------------------------------------------------
# POST /api/v1/bookings
# ---------------------------------------------------------------------------


class TestCreateBooking:
    """Tests for requesting bookings."""

    async def test_create_success(
        self,
        client: AsyncClient,
        guest_headers: dict,
        guest_user,
        test_property: dict,
    ) -> None:
        ci, co = _future_dates(30, 5)
        response = await _book(
            client, guest_headers, test_property["id"], ci, co, guests_count=2, guest_notes="Late check-in around 10pm"
        )
        assert response.status_code == 201
        data = response.json()
        assert data["property_id"] == test_property["id"]
        assert data["guest_id"] == str(guest_user.id)
        assert data["guest_email"] == guest_user.email
        assert data["check_in"] == ci
        assert data["check_out"] == co
        assert data["nights"] == 5
        assert data["guests_count"] == 2
        assert data["status"] == "pending"
        assert data["total_cents"] == 50000
        assert data["platform_fee_cents"] + data["host_payout_cents"] == data["total_cents"]
        assert data["guest_notes"] == "Late check-in around 10pm"
        assert "id" in data
        assert "created_at" in data

    async def test_create_defaults_to_one_guest(
        self, client: AsyncClient, guest_headers: dict, test_property: dict
    ) -> None:
        ci, co = _future_dates(40, 3)
        response = await _book(client, guest_headers, test_property["id"], ci, co)
        assert response.status_code == 201
        assert response.json()["guests_count"] == 1

    async def test_create_date_conflict(self, client: AsyncClient, guest_headers: dict, test_property: dict) -> None:
        """Overlapping pending bookings on the same property are rejected."""
        ci, co = _future_dates(50, 5)

        resp1 = await _book(client, guest_headers, test_property["id"], ci, co)
        assert resp1.status_code == 201

        resp2 = await _book(client, guest_headers, test_property["id"], ci, co)
        assert resp2.status_code == 409
        assert resp2.json()["code"] == "dates_unavailable"

    async def test_create_partial_overlap_conflict(
        self, client: AsyncClient, guest_headers: dict, test_property: dict
    ) -> None:
        ci1 = (date.today() + timedelta(days=60)).isoformat()
        co1 = (date.today() + timedelta(days=65)).isoformat()
        await _book(client, guest_headers, test_property["id"], ci1, co1)

        # Overlap: starts one day before the first booking ends
        ci2 = (date.today() + timedelta(days=64)).isoformat()
        co2 = (date.today() + timedelta(days=68)).isoformat()
        response = await _book(client, guest_headers, test_property["id"], ci2, co2)
        assert response.status_code == 409

    async def test_create_on_checkout_day(self, client: AsyncClient, guest_headers: dict, test_property: dict) -> None:
        """Checking in on another guest's check-out day is allowed."""
        ci1 = (date.today() + timedelta(days=70)).isoformat()
        co1 = (date.today() + timedelta(days=75)).isoformat()
        await _book(client, guest_headers, test_property["id"], ci1, co1)

        co2 = (date.today() + timedelta(days=78)).isoformat()
        response = await _book(client, guest_headers, test_property["id"], co1, co2)
        assert response.status_code == 201

    async def test_create_invalid_dates(self, client: AsyncClient, guest_headers: dict, test_property: dict) -> None:
        ci = (date.today() + timedelta(days=35)).isoformat()
        co = (date.today() + timedelta(days=30)).isoformat()
        response = await _book(client, guest_headers, test_property["id"], ci, co)
        assert response.status_code == 400
        assert response.json()["code"] == "invalid_date_range"

    async def test_create_unlisted_property(
        self, client: AsyncClient, guest_headers: dict, host_headers: dict, test_property: dict
    ) -> None:
        """Unlisted wins over bad dates."""
        await client.patch(
            f"/api/v1/properties/{test_property['id']}", json={"status": "unlisted"}, headers=host_headers
        )
        response = await _book(client, guest_headers, test_property["id"], "2026-03-05", "2026-03-01")
        assert response.status_code == 404
        assert response.json()["code"] == "property_unavailable"

    async def test_create_missing_property(self, client: AsyncClient, guest_headers: dict) -> None:
        ci, co = _future_dates()
        response = await _book(client, guest_headers, str(uuid.uuid4()), ci, co)
        assert response.status_code == 404
        assert response.json()["code"] == "property_unavailable"

    async def test_create_zero_guests_rejected(
        self, client: AsyncClient, guest_headers: dict, test_property: dict
    ) -> None:
        ci, co = _future_dates()
        response = await _book(client, guest_headers, test_property["id"], ci, co, guests_count=0)
        assert response.status_code == 422


# ---------------------------------------------------------------------------
# Listings
# ---------------------------------------------------------------------------


class TestListBookings:
    """Tests for guest and host booking lists."""

    async def test_mine_lists_only_own_bookings(
        self,
        client: AsyncClient,
        guest_headers: dict,
        host_headers: dict,
        test_property: dict,
    ) -> None:
        await _book(client, guest_headers, test_property["id"], *_future_dates(10, 2))
        await _book(client, host_headers, test_property["id"], *_future_dates(20, 2))

        response = await client.get("/api/v1/bookings/mine", headers=guest_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert len(data["items"]) == 1

    async def test_host_sees_bookings_on_own_properties(
        self,
        client: AsyncClient,
        guest_headers: dict,
        host_headers: dict,
        other_host_headers: dict,
        test_property: dict,
    ) -> None:
        await _book(client, guest_headers, test_property["id"], *_future_dates(10, 2))
        await _book(client, guest_headers, test_property["id"], *_future_dates(20, 2))

        response = await client.get("/api/v1/bookings", headers=host_headers)
        assert response.status_code == 200
        assert response.json()["total"] == 2

        response = await client.get("/api/v1/bookings", headers=other_host_headers)
        assert response.json()["total"] == 0

    async def test_host_views_require_host_account(
        self, client: AsyncClient, guest_headers: dict, test_property: dict
    ) -> None:
        await _book(client, guest_headers, test_property["id"], *_future_dates(10, 2))

        for path in ("/api/v1/bookings", "/api/v1/bookings/stats"):
            response = await client.get(path, headers=guest_headers)
            assert response.status_code == 403, path
            assert response.json()["detail"] == "Host account required"

        # Guests still see their own stays.
        mine = await client.get("/api/v1/bookings/mine", headers=guest_headers)
        assert mine.json()["total"] == 1

    async def test_host_filters_by_status(
        self,
        client: AsyncClient,
        guest_headers: dict,
        host_headers: dict,
        test_property: dict,
    ) -> None:
        first = await _book(client, guest_headers, test_property["id"], *_future_dates(10, 2))
        await _book(client, guest_headers, test_property["id"], *_future_dates(20, 2))
        await client.patch(
            f"/api/v1/bookings/{first.json()['id']}", json={"status": "confirmed"}, headers=host_headers
        )

        response = await client.get("/api/v1/bookings", params={"status": "confirmed"}, headers=host_headers)
        data = response.json()
        assert data["total"] == 1
        assert data["items"][0]["id"] == first.json()["id"]


# ---------------------------------------------------------------------------
# GET /api/v1/bookings/{id}
# ---------------------------------------------------------------------------


class TestGetBooking:
    """Tests for booking detail."""

    async def test_get_with_nested_property(
        self, client: AsyncClient, guest_headers: dict, host_headers: dict, test_property: dict
    ) -> None:
        created = await _book(client, guest_headers, test_property["id"], *_future_dates(15, 3))
        booking_id = created.json()["id"]

        response = await client.get(f"/api/v1/bookings/{booking_id}", headers=host_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["id"] == booking_id
        assert data["property"]["id"] == test_property["id"]
        assert data["property"]["title"] == "Test Cabin"

    async def test_get_not_found(self, client: AsyncClient, host_headers: dict) -> None:
        response = await client.get(f"/api/v1/bookings/{uuid.uuid4()}", headers=host_headers)
        assert response.status_code == 404
        assert response.json()["code"] == "not_found"

    async def test_get_other_host_forbidden_as_404(
        self, client: AsyncClient, guest_headers: dict, other_host_headers: dict, test_property: dict
    ) -> None:
        created = await _book(client, guest_headers, test_property["id"], *_future_dates(15, 3))
        response = await client.get(f"/api/v1/bookings/{created.json()['id']}", headers=other_host_headers)
        assert response.status_code == 404


# ---------------------------------------------------------------------------
# PATCH /api/v1/bookings/{id}
# ---------------------------------------------------------------------------


class TestUpdateBookingStatus:
    """Tests for host status transitions."""

    async def test_confirm_then_complete(
        self, client: AsyncClient, guest_headers: dict, host_headers: dict, test_property: dict
    ) -> None:
        created = await _book(client, guest_headers, test_property["id"], *_future_dates(15, 3))
        booking_id = created.json()["id"]

        response = await client.patch(
            f"/api/v1/bookings/{booking_id}", json={"status": "confirmed"}, headers=host_headers
        )
        assert response.status_code == 200
        assert response.json()["status"] == "confirmed"

        response = await client.patch(
            f"/api/v1/bookings/{booking_id}", json={"status": "completed"}, headers=host_headers
        )
        assert response.status_code == 200
        assert response.json()["status"] == "completed"

    async def test_completed_cannot_be_confirmed(
        self, client: AsyncClient, host_headers: dict, test_property: dict, make_booking, db_session
    ) -> None:
        prop = await db_session.get(Property, uuid.UUID(test_property["id"]))
        booking = await make_booking(prop, date(2026, 3, 1), date(2026, 3, 4), status=BookingStatus.COMPLETED)

        response = await client.patch(
            f"/api/v1/bookings/{booking.id}", json={"status": "confirmed"}, headers=host_headers
        )
        assert response.status_code == 400
        assert response.json()["code"] == "invalid_status_transition"

        detail = await client.get(f"/api/v1/bookings/{booking.id}", headers=host_headers)
        assert detail.json()["status"] == "completed"

    async def test_cancel_records_reason_and_frees_dates(
        self, client: AsyncClient, guest_headers: dict, host_headers: dict, test_property: dict
    ) -> None:
        ci, co = _future_dates(90, 4)
        created = await _book(client, guest_headers, test_property["id"], ci, co)

        response = await client.patch(
            f"/api/v1/bookings/{created.json()['id']}",
            json={"status": "cancelled", "cancellation_reason": "Plumbing repair"},
            headers=host_headers,
        )
        assert response.status_code == 200
        assert response.json()["cancellation_reason"] == "Plumbing repair"

        rebook = await _book(client, guest_headers, test_property["id"], ci, co)
        assert rebook.status_code == 201

    async def test_guest_cannot_transition(
        self, client: AsyncClient, guest_headers: dict, test_property: dict
    ) -> None:
        created = await _book(client, guest_headers, test_property["id"], *_future_dates(15, 3))
        response = await client.patch(
            f"/api/v1/bookings/{created.json()['id']}", json={"status": "confirmed"}, headers=guest_headers
        )
        assert response.status_code == 403

        detail = await client.get(f"/api/v1/bookings/{created.json()['id']}", headers=guest_headers)
        assert detail.status_code == 403

    async def test_unknown_status_rejected(
        self, client: AsyncClient, guest_headers: dict, host_headers: dict, test_property: dict
    ) -> None:
        created = await _book(client, guest_headers, test_property["id"], *_future_dates(15, 3))
        response = await client.patch(
            f"/api/v1/bookings/{created.json()['id']}", json={"status": "archived"}, headers=host_headers
        )
        assert response.status_code == 422


# ---------------------------------------------------------------------------
# Calendar & stats
# ---------------------------------------------------------------------------


class TestCalendarAndStats:
    async def test_calendar_is_public_and_lists_active_ranges(
        self, client: AsyncClient, guest_headers: dict, host_headers: dict, test_property: dict
    ) -> None:
        ci, co = _future_dates(5, 3)
        kept = await _book(client, guest_headers, test_property["id"], ci, co)
        dropped = await _book(client, guest_headers, test_property["id"], *_future_dates(20, 3))
        await client.patch(
            f"/api/v1/bookings/{dropped.json()['id']}", json={"status": "cancelled"}, headers=host_headers
        )

        response = await client.get(f"/api/v1/bookings/calendar/{test_property['id']}")
        assert response.status_code == 200
        blocked = response.json()["blocked_dates"]
        assert blocked == [{"check_in": ci, "check_out": co, "status": "pending"}]
        assert kept.status_code == 201

    async def test_stats(
        self, client: AsyncClient, guest_headers: dict, host_headers: dict, test_property: dict
    ) -> None:
        pending = await _book(client, guest_headers, test_property["id"], *_future_dates(5, 2))
        confirmed = await _book(client, guest_headers, test_property["id"], *_future_dates(10, 3))
        await client.patch(
            f"/api/v1/bookings/{confirmed.json()['id']}", json={"status": "confirmed"}, headers=host_headers
        )

        response = await client.get("/api/v1/bookings/stats", headers=host_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["pending_bookings"] == 1
        assert data["active_bookings"] == 1
        assert data["upcoming_check_ins"] == 1
        assert data["total_earnings_cents"] == confirmed.json()["host_payout_cents"]
        assert pending.status_code == 201
