from __future__ import annotations

import logging

from flask_socketio import SocketIO

from ..game.service import RoomDirectory
from . import events


logger = logging.getLogger(__name__)


def start_stats_broadcaster(socketio: SocketIO, directory: RoomDirectory, interval_sec: float):
    """One process-wide loop pushing server-stats to every connected client."""

    def _runner() -> None:
        while True:
            socketio.sleep(interval_sec)
            try:
                socketio.emit(events.SERVER_STATS, directory.stats())
            except Exception:
                logger.exception("Stats broadcast failed")

    return socketio.start_background_task(_runner)
