from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, current_app, jsonify, request

from ..models import Space
from ..security import Capability, current_identity, requires
from ..services import spaces
from ..utils.datetime import as_utc_iso

bp = Blueprint("spaces", __name__)


def _serialize_space(space: Space, *, booked_by_user_id=None, booked_by_username=None) -> dict:
    return {
        "id": space.id,
        "name": space.name,
        "location": space.location,
        "status": space.status.value,
        "start_time": as_utc_iso(space.start_time),
        "end_time": as_utc_iso(space.end_time),
        "usage_notes": space.usage_notes,
        "image_url": space.image_url,
        "booked_by_user_id": booked_by_user_id,
        "booked_by_username": booked_by_username,
    }


@bp.get("/allspaces")
@bp.get("/allcards", endpoint="list_cards")
@requires(Capability.public)
def list_spaces():
    location = request.args.get("location") or None
    status_value = request.args.get("status") or None
    status = spaces.parse_status(status_value) if status_value else None

    data = [
        _serialize_space(
            row["space"],
            booked_by_user_id=row["booked_by_user_id"],
            booked_by_username=row["booked_by_username"],
        )
        for row in spaces.list_spaces(location=location, status=status)
    ]
    return jsonify(data), HTTPStatus.OK


@bp.post("/addspace")
@requires(Capability.admin_only)
def add_space():
    payload = request.get_json(silent=True) or {}
    space = spaces.create_space(payload)
    current_app.logger.info("space %s created by user %s", space.id, current_identity().id)
    return (
        jsonify({"message": f"Space {space.name} added successfully", "id": space.id}),
        HTTPStatus.CREATED,
    )


@bp.put("/updatespace/<int:space_id>")
@requires(Capability.admin_only)
def update_space(space_id: int):
    payload = request.get_json(silent=True) or {}
    spaces.update_space(space_id, payload)
    return jsonify({"message": f"Space {space_id} updated successfully!"}), HTTPStatus.CREATED


@bp.delete("/deletespace/<int:space_id>")
@requires(Capability.admin_only)
def delete_space(space_id: int):
    spaces.delete_space(space_id)
    current_app.logger.info("space %s deleted by user %s", space_id, current_identity().id)
    return jsonify({"message": "Space and its bookings deleted successfully!"}), HTTPStatus.OK
