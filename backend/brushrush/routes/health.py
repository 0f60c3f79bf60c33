from __future__ import annotations

import time

from flask import Blueprint, current_app, jsonify

bp = Blueprint("health", __name__)

_started_at = time.monotonic()


@bp.get("/")
def index():
    return "Brush Rush Server", 200, {"Content-Type": "text/plain; charset=utf-8"}


@bp.get("/health")
def health():
    stats = current_app.extensions["brushrush"]["directory"].stats()
    return jsonify(
        {
            "status": "ok",
            "rooms": stats["totalRooms"],
            "players": stats["totalPlayers"],
            "uptime": round(time.monotonic() - _started_at, 3),
        }
    )
