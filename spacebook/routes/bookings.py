from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, current_app, jsonify, request

from ..extensions import limiter
from ..security import Capability, authenticated_rate_limit_key, current_identity, requires
from ..services import bookings
from ..utils.datetime import as_utc_iso

bp = Blueprint("bookings", __name__)


@bp.post("/bookspace")
@requires(Capability.any_authenticated)
@limiter.limit("180 per minute", key_func=authenticated_rate_limit_key)
def book_space():
    identity = current_identity()
    payload = request.get_json(silent=True) or {}

    booking = bookings.book(
        user_id=identity.id,
        space_id=payload.get("space_id"),
        start_time=payload.get("start_time"),
        end_time=payload.get("end_time"),
    )
    current_app.logger.info(
        "user %s booked space %s from %s to %s",
        identity.id,
        booking.space_id,
        as_utc_iso(booking.start_time),
        as_utc_iso(booking.end_time),
    )
    return (
        jsonify({"message": "Space booked successfully!", "booking_id": booking.id}),
        HTTPStatus.CREATED,
    )


@bp.post("/cancelbooking")
@requires(Capability.any_authenticated)
@limiter.limit("180 per minute", key_func=authenticated_rate_limit_key)
def cancel_booking():
    identity = current_identity()
    payload = request.get_json(silent=True) or {}

    booking = bookings.cancel(user_id=identity.id, space_id=payload.get("space_id"))
    current_app.logger.info("user %s cancelled booking %s", identity.id, booking.id)
    return (
        jsonify({"message": "Booking cancelled successfully, space is now available"}),
        HTTPStatus.OK,
    )


@bp.get("/viewbooking")
@requires(Capability.any_authenticated)
@limiter.limit("600 per minute", key_func=authenticated_rate_limit_key)
def view_bookings():
    identity = current_identity()
    data = [
        {
            "booking_id": booking.id,
            "space_id": booking.space_id,
            "start_time": as_utc_iso(booking.start_time),
            "end_time": as_utc_iso(booking.end_time),
            "status": booking.status.value,
            "space_name": booking.space.name if booking.space else None,
            "location": booking.space.location if booking.space else None,
            "image_url": booking.space.image_url if booking.space else None,
        }
        for booking in bookings.bookings_for_user(identity.id)
    ]
    return jsonify(data), HTTPStatus.OK
