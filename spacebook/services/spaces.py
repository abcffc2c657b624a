from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional

from sqlalchemy import Select, and_, func, select
from sqlalchemy.orm import aliased

from ..errors import ConflictError, NotFoundError, ValidationError
from ..extensions import db
from ..models import Booking, BookingStatus, Space, SpaceStatus, User
from ..utils.datetime import parse_datetime

EDITABLE_FIELDS = ("name", "location", "status", "start_time", "end_time", "usage_notes", "image_url")


def get_space(space_id: int) -> Optional[Space]:
    return db.session.get(Space, space_id)


def parse_status(value: Any) -> SpaceStatus:
    try:
        return SpaceStatus(value)
    except ValueError as exc:
        raise ValidationError(f"invalid space status: {value!r}") from exc


def _optional_datetime(value: Any, field: str) -> datetime | None:
    if value in (None, ""):
        return None
    try:
        return parse_datetime(value)
    except ValueError as exc:
        raise ValidationError(f"{field}: {exc}") from exc


def _clean_fields(payload: Mapping[str, Any]) -> dict[str, Any]:
    fields: dict[str, Any] = {}
    for key in EDITABLE_FIELDS:
        if key not in payload:
            continue
        value = payload[key]
        if key == "status":
            fields[key] = parse_status(value)
        elif key in ("start_time", "end_time"):
            fields[key] = _optional_datetime(value, key)
        else:
            fields[key] = value
    return fields


def _check_window(start: datetime | None, end: datetime | None) -> None:
    if start is not None and end is not None and start >= end:
        raise ValidationError("start_time must be before end_time")


def list_spaces(*, location: str | None = None, status: SpaceStatus | None = None) -> list[dict[str, Any]]:
    """Spaces matching the optional filters, each with its current booker."""
    active = aliased(Booking)
    query: Select = (
        select(Space, active.user_id, User.username)
        .outerjoin(active, and_(active.space_id == Space.id, active.status == BookingStatus.booked))
        .outerjoin(User, User.id == active.user_id)
        .order_by(Space.id)
    )

    conditions = []
    if location:
        conditions.append(func.lower(Space.location).contains(location.lower(), autoescape=True))
    if status is not None:
        conditions.append(Space.status == status)
    if conditions:
        query = query.filter(and_(*conditions))

    rows: dict[int, dict[str, Any]] = {}
    for space, booked_by_id, booked_by_name in db.session.execute(query):
        # A space has at most one booked row; keep the first if data says otherwise.
        rows.setdefault(
            space.id,
            {"space": space, "booked_by_user_id": booked_by_id, "booked_by_username": booked_by_name},
        )
    return list(rows.values())


def create_space(payload: Mapping[str, Any]) -> Space:
    fields = _clean_fields(payload)
    if not fields.get("name"):
        raise ValidationError("name is required")
    _check_window(fields.get("start_time"), fields.get("end_time"))
    if fields.setdefault("status", SpaceStatus.available) == SpaceStatus.reserved:
        raise ConflictError("a new space has no booking to reserve it", code="space_not_booked")

    space = Space(**fields)
    db.session.add(space)
    db.session.commit()
    return space


def update_space(space_id: int, payload: Mapping[str, Any]) -> Space:
    space = db.session.execute(
        select(Space).filter_by(id=space_id).with_for_update()
    ).scalar_one_or_none()
    if space is None:
        raise NotFoundError("space not found")

    fields = _clean_fields(payload)
    if "name" in fields and not fields["name"]:
        raise ValidationError("name cannot be empty")
    _check_window(
        fields.get("start_time", space.start_time),
        fields.get("end_time", space.end_time),
    )
    requested = fields.get("status")
    if requested is not None and requested != space.status:
        booked = _has_active_booking(space.id)
        if requested == SpaceStatus.available and booked:
            db.session.rollback()
            raise ConflictError("space has an active booking; cancel it first", code="space_reserved")
        if requested == SpaceStatus.reserved and not booked:
            db.session.rollback()
            raise ConflictError("space has no active booking to reserve it", code="space_not_booked")

    for key, value in fields.items():
        setattr(space, key, value)
    db.session.commit()
    return space


def delete_space(space_id: int) -> None:
    space = db.session.execute(
        select(Space).filter_by(id=space_id).with_for_update()
    ).scalar_one_or_none()
    if space is None:
        raise NotFoundError("space not found")
    try:
        db.session.execute(
            db.delete(Booking)
            .where(Booking.space_id == space_id)
            .execution_options(synchronize_session=False)
        )
        db.session.delete(space)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise


def _has_active_booking(space_id: int) -> bool:
    return db.session.execute(
        select(Booking.id)
        .filter(Booking.space_id == space_id, Booking.status == BookingStatus.booked)
        .limit(1)
    ).first() is not None
