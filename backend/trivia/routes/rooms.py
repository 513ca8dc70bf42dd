from __future__ import annotations

from flask import Blueprint, current_app, jsonify

bp = Blueprint("rooms", __name__)


@bp.get("/rooms/<room>")
def get_room(room: str):
    coordinator = current_app.extensions["trivia"]
    state = coordinator.room_public_state(room)
    if state is None:
        return jsonify({"error": "room_not_found"}), 404
    return jsonify(state)
