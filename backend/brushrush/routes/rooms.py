from __future__ import annotations

from flask import Blueprint, current_app, jsonify

from ..game.service import public_room_summary

bp = Blueprint("rooms", __name__)


@bp.get("/rooms")
def list_public_rooms():
    directory = current_app.extensions["brushrush"]["directory"]
    return jsonify({"rooms": [public_room_summary(r) for r in directory.public_rooms()]})
