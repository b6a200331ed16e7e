"""Property model — listings offered by hosts."""

import enum
import uuid

from sqlalchemy import JSON, CheckConstraint, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from nestora.database import Base, TimestampMixin, UUIDPrimaryKeyMixin


class PropertyStatus(str, enum.Enum):
    """Listing status, toggled by the host."""

    VACANT = "vacant"
    OCCUPIED = "occupied"
    UNLISTED = "unlisted"


class Property(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A rentable property owned by a host."""

    __tablename__ = "properties"

    owner_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    address: Mapped[str | None] = mapped_column(String(255), default=None)
    city: Mapped[str | None] = mapped_column(String(120), default=None, index=True)
    country: Mapped[str | None] = mapped_column(String(120), default=None)
    bedrooms: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    bathrooms: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    max_guests: Mapped[int] = mapped_column(Integer, default=2, nullable=False)
    price_per_night_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    amenities: Mapped[list[str] | None] = mapped_column(
        JSON().with_variant(JSONB(), "postgresql"),
        default=list,
    )
    status: Mapped[PropertyStatus] = mapped_column(
        Enum(
            PropertyStatus,
            name="property_status",
            native_enum=False,
            length=20,
            values_callable=lambda statuses: [s.value for s in statuses],
        ),
        default=PropertyStatus.VACANT,
        nullable=False,
        index=True,
    )

    # Relationships
    owner: Mapped["User"] = relationship(lazy="selectin")  # type: ignore[name-defined]  # noqa: F821

    __table_args__ = (
        CheckConstraint("price_per_night_cents >= 0", name="price_non_negative"),
        CheckConstraint("max_guests >= 1", name="max_guests_positive"),
    )

    @property
    def is_listed(self) -> bool:
        return self.status != PropertyStatus.UNLISTED

    def __repr__(self) -> str:
        return f"<Property(id={self.id}, title={self.title!r}, status={self.status.value!r})>"
