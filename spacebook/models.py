from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import Enum, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .extensions import db
from .utils.datetime import utcnow


class UserRole(enum.Enum):
    student = "student"
    admin = "admin"


class SpaceStatus(enum.Enum):
    available = "available"
    reserved = "reserved"


class BookingStatus(enum.Enum):
    booked = "booked"
    cancelled = "cancelled"


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        default=utcnow, onupdate=utcnow, nullable=False
    )


class User(db.Model, TimestampMixin):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    username: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole), default=UserRole.student, nullable=False
    )
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    bookings: Mapped[list[Booking]] = relationship("Booking", back_populates="user")


class Space(db.Model, TimestampMixin):
    __tablename__ = "spaces"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    location: Mapped[str | None] = mapped_column(String(255))
    status: Mapped[SpaceStatus] = mapped_column(
        Enum(SpaceStatus), default=SpaceStatus.available, nullable=False, index=True
    )
    start_time: Mapped[datetime | None]
    end_time: Mapped[datetime | None]
    usage_notes: Mapped[str | None] = mapped_column(String(1024))
    image_url: Mapped[str | None] = mapped_column(String(1024))

    bookings: Mapped[list[Booking]] = relationship("Booking", back_populates="space")


class Booking(db.Model, TimestampMixin):
    __tablename__ = "bookings"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    space_id: Mapped[int] = mapped_column(ForeignKey("spaces.id"), nullable=False, index=True)
    start_time: Mapped[datetime] = mapped_column(nullable=False, index=True)
    end_time: Mapped[datetime] = mapped_column(nullable=False, index=True)
    status: Mapped[BookingStatus] = mapped_column(
        Enum(BookingStatus), default=BookingStatus.booked, nullable=False
    )

    space: Mapped[Space] = relationship("Space", back_populates="bookings")
    user: Mapped[User] = relationship("User", back_populates="bookings")
