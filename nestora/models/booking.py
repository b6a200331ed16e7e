"""Booking model — tracks property reservations."""

import enum
import uuid
from datetime import date

from sqlalchemy import DDL, CheckConstraint, Date, Enum, ForeignKey, Index, Integer, String, Text, event
from sqlalchemy.orm import Mapped, mapped_column, relationship

from nestora.database import Base, TimestampMixin, UUIDPrimaryKeyMixin

OVERLAP_CONSTRAINT = "bookings_no_overlap_per_property"


class BookingStatus(str, enum.Enum):
    """Lifecycle states of a booking. ``completed`` and ``cancelled`` are terminal."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


# Statuses that hold inventory: they take part in conflict detection.
ACTIVE_STATUSES: tuple[BookingStatus, ...] = (BookingStatus.PENDING, BookingStatus.CONFIRMED)


class Booking(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A guest's reservation of a property for a half-open date range."""

    __tablename__ = "bookings"

    property_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("properties.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    guest_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    guest_email: Mapped[str] = mapped_column(String(255), nullable=False)
    guest_name: Mapped[str] = mapped_column(String(255), nullable=False)
    check_in: Mapped[date] = mapped_column(Date, nullable=False)
    check_out: Mapped[date] = mapped_column(Date, nullable=False)
    nights: Mapped[int] = mapped_column(Integer, nullable=False)
    guests_count: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    total_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    platform_fee_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    host_payout_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[BookingStatus] = mapped_column(
        Enum(
            BookingStatus,
            name="booking_status",
            native_enum=False,
            length=20,
            values_callable=lambda statuses: [s.value for s in statuses],
        ),
        default=BookingStatus.PENDING,
        nullable=False,
        index=True,
    )
    cancellation_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    guest_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    payment_intent_id: Mapped[str | None] = mapped_column(String(255), nullable=True, unique=True)

    # Relationships
    property: Mapped["Property"] = relationship(lazy="selectin")  # type: ignore[name-defined]  # noqa: F821
    guest: Mapped["User"] = relationship(lazy="selectin")  # type: ignore[name-defined]  # noqa: F821

    __table_args__ = (
        CheckConstraint("check_out > check_in", name="dates_ordered"),
        CheckConstraint("nights >= 1", name="nights_positive"),
        CheckConstraint("guests_count >= 1", name="guests_count_positive"),
        CheckConstraint("platform_fee_cents + host_payout_cents = total_cents", name="fee_split"),
        Index("ix_bookings_property_dates", "property_id", "check_in", "check_out"),
    )

    def __repr__(self) -> str:
        return (
            f"<Booking(id={self.id}, property_id={self.property_id}, guest_id={self.guest_id}, "
            f"status={self.status.value})>"
        )


# PostgreSQL enforces the no-overlap invariant for active bookings. Other
# dialects rely on the service-level check alone.
event.listen(
    Booking.__table__,
    "before_create",
    DDL("CREATE EXTENSION IF NOT EXISTS btree_gist").execute_if(dialect="postgresql"),
)
event.listen(
    Booking.__table__,
    "after_create",
    DDL(
        f"ALTER TABLE bookings ADD CONSTRAINT {OVERLAP_CONSTRAINT} "
        "EXCLUDE USING gist ("
        "property_id WITH =, "
        "daterange(check_in, check_out, '[)') WITH &&"
        ") WHERE (status IN ('pending', 'confirmed'))"
    ).execute_if(dialect="postgresql"),
)
