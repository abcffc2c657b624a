from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy import and_, or_, select

from ..extensions import db
from ..models import Booking, BookingStatus, Space, SpaceStatus
from ..utils.datetime import utcnow


@dataclass(slots=True)
class SweepResult:
    released_spaces: list[int] = field(default_factory=list)
    removed_bookings: int = 0

    def __bool__(self) -> bool:
        return bool(self.released_spaces or self.removed_bookings)


def sweep_expired(*, now: datetime | None = None) -> SweepResult:
    """Release reservations whose window has elapsed.

    A booked row expires when its own end_time has passed, or when it sits on
    a reserved space whose usage window has ended. Expired rows are deleted and
    each affected space with no booked rows left goes back to available.

    Space rows are locked before their bookings are read or written, the same
    order book, cancel and delete_space take.
    """
    ref = now or utcnow()
    result = SweepResult()

    try:
        lapsed = and_(
            Space.status == SpaceStatus.reserved,
            Space.end_time.is_not(None),
            Space.end_time < ref,
        )
        elapsed_owners = select(Booking.space_id).filter(
            Booking.status == BookingStatus.booked,
            Booking.end_time <= ref,
        )
        spaces = {
            space.id: space
            for space in db.session.execute(
                select(Space)
                .filter(or_(lapsed, Space.id.in_(elapsed_owners)))
                .order_by(Space.id)
                .with_for_update()
            ).scalars()
        }
        if not spaces:
            db.session.commit()
            return result

        # Status and window are re-checked on the locked rows.
        lapsed_ids = {
            space.id
            for space in spaces.values()
            if space.status == SpaceStatus.reserved and space.end_time is not None and space.end_time < ref
        }
        expired = list(
            db.session.execute(
                select(Booking).filter(
                    Booking.space_id.in_(list(spaces)),
                    Booking.status == BookingStatus.booked,
                    or_(Booking.end_time <= ref, Booking.space_id.in_(list(lapsed_ids))),
                )
            ).scalars()
        )
        touched = lapsed_ids | {booking.space_id for booking in expired}

        for booking in expired:
            db.session.delete(booking)
        db.session.flush()
        result.removed_bookings = len(expired)

        still_booked = set(
            db.session.execute(
                select(Booking.space_id).filter(
                    Booking.space_id.in_(list(touched)),
                    Booking.status == BookingStatus.booked,
                )
            ).scalars()
        )
        for space_id in sorted(touched - still_booked):
            space = spaces[space_id]
            if space.status == SpaceStatus.reserved:
                space.status = SpaceStatus.available
                result.released_spaces.append(space_id)

        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return result
