"""Booking ledger: admission, cancellation and per-user listing.

Admission and cancellation each run in a single transaction that starts by
locking the space row, so the overlap check, the booking write and the space
status flip commit together or not at all.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Sequence

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from ..errors import ConflictError, NotFoundError, ValidationError
from ..extensions import db
from ..models import Booking, BookingStatus, Space, SpaceStatus
from ..utils.datetime import parse_datetime


class TimeConflictError(ConflictError):
    """Raised when a requested window overlaps an existing booking."""

    default_message = "The space is already booked for the selected time."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message, code="time_conflict")


class SpaceUnavailableError(ConflictError):
    default_message = "Space is not available for booking"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message, code="space_unavailable")


def windows_overlap(start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime) -> bool:
    """Half-open windows [start_a, end_a) and [start_b, end_b) share an instant."""
    return start_a < end_b and start_b < end_a


def _normalize_window(start_raw: Any, end_raw: Any) -> tuple[datetime, datetime]:
    try:
        start = parse_datetime(start_raw)
        end = parse_datetime(end_raw)
    except ValueError as exc:
        raise ValidationError(str(exc)) from exc
    if start >= end:
        raise ValidationError("Invalid time range: start must be before end")
    return start, end


def _lock_space(space_id: int) -> Space | None:
    return db.session.execute(
        select(Space).filter_by(id=space_id).with_for_update()
    ).scalar_one_or_none()


def _conflicting_booking(space_id: int, start: datetime, end: datetime) -> Booking | None:
    return db.session.execute(
        select(Booking)
        .filter(
            Booking.space_id == space_id,
            Booking.status == BookingStatus.booked,
            Booking.start_time < end,
            Booking.end_time > start,
        )
        .order_by(Booking.start_time.asc())
        .limit(1)
    ).scalars().first()


def _remaining_booked(space_id: int) -> bool:
    return db.session.execute(
        select(Booking.id)
        .filter(Booking.space_id == space_id, Booking.status == BookingStatus.booked)
        .limit(1)
    ).first() is not None


def book(*, user_id: int | None, space_id: Any, start_time: Any, end_time: Any) -> Booking:
    if not user_id or not space_id or not start_time or not end_time:
        raise ValidationError("user_id, space_id, start_time, and end_time are required")
    try:
        space_id = int(space_id)
    except (TypeError, ValueError) as exc:
        raise ValidationError("space_id must be an integer") from exc

    start, end = _normalize_window(start_time, end_time)

    try:
        space = _lock_space(space_id)
        if space is None:
            raise NotFoundError("space not found")
        # Overlap is reported ahead of the status check so a clash with an
        # existing booking always surfaces as a time conflict.
        if _conflicting_booking(space.id, start, end) is not None:
            raise TimeConflictError()
        if space.status != SpaceStatus.available:
            raise SpaceUnavailableError()

        booking = Booking(
            user_id=user_id,
            space_id=space.id,
            start_time=start,
            end_time=end,
            status=BookingStatus.booked,
        )
        db.session.add(booking)
        space.status = SpaceStatus.reserved
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return booking


def cancel(*, user_id: int | None, space_id: Any) -> Booking:
    if not user_id or not space_id:
        raise ValidationError("user_id and space_id are required")
    try:
        space_id = int(space_id)
    except (TypeError, ValueError) as exc:
        raise ValidationError("space_id must be an integer") from exc

    try:
        space = _lock_space(space_id)
        booking = None
        if space is not None:
            booking = db.session.execute(
                select(Booking)
                .filter(
                    Booking.user_id == user_id,
                    Booking.space_id == space_id,
                    Booking.status == BookingStatus.booked,
                )
                .order_by(Booking.start_time.asc())
                .limit(1)
            ).scalars().first()
        if booking is None:
            raise NotFoundError("Booking not found or already cancelled")

        booking.status = BookingStatus.cancelled
        db.session.flush()
        if not _remaining_booked(space_id):
            space.status = SpaceStatus.available
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return booking


def bookings_for_user(user_id: int) -> Sequence[Booking]:
    return list(
        db.session.execute(
            select(Booking)
            .options(selectinload(Booking.space))
            .filter_by(user_id=user_id)
            .order_by(Booking.start_time.desc(), Booking.id.desc())
        ).scalars()
    )
