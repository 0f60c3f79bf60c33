from __future__ import annotations

import logging
import re
import sys
from typing import Callable

from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO

from .config import Config
from .game.scheduler import RoundScheduler
from .game.service import RoomDirectory
from .realtime.handlers import register_socketio_handlers
from .realtime.stats import start_stats_broadcaster
from .routes.health import bp as health_bp
from .routes.rooms import bp as rooms_bp


def origin_checker(origins: list[str], pattern: str) -> Callable[..., bool]:
    compiled = re.compile(pattern) if pattern else None

    def allowed(origin: str | None, environ: dict | None = None) -> bool:
        if not origin:
            return False
        if origin in origins:
            return True
        return bool(compiled and compiled.match(origin))

    return allowed


def create_app(config_class=Config) -> tuple[Flask, SocketIO]:
    app = Flask(__name__)
    app.config.from_object(config_class)

    logging.getLogger("brushrush").setLevel(app.config.get("LOG_LEVEL", "INFO"))

    cors_origins = list(app.config.get("CORS_ORIGINS", []))
    cors_pattern = app.config.get("CORS_ORIGIN_PATTERN", "")
    http_origins: list = list(cors_origins)
    if cors_pattern:
        http_origins.append(re.compile(cors_pattern))
    CORS(app, origins=http_origins, supports_credentials=True)

    env_async_mode = app.config.get("SOCKETIO_ASYNC_MODE", "")
    if env_async_mode:
        async_mode = env_async_mode
    else:
        # Default choice:
        # - Windows: threading (eventlet has known compatibility issues on newer Python)
        # - Python >= 3.13: threading (safer default)
        # - Otherwise: eventlet
        if sys.platform.startswith("win") or sys.version_info >= (3, 13):
            async_mode = "threading"
        else:
            async_mode = "eventlet"

    socketio = SocketIO(
        app,
        cors_allowed_origins=origin_checker(cors_origins, cors_pattern),
        async_mode=async_mode,
        ping_timeout=60,
        ping_interval=25,
    )

    background = bool(app.config.get("ENABLE_BACKGROUND_TASKS", True))
    directory = RoomDirectory()
    scheduler = RoundScheduler(
        socketio,
        directory,
        tick_interval=float(app.config.get("TICK_INTERVAL_SEC", 1)),
        reveal_delay=float(app.config.get("REVEAL_DELAY_SEC", 2)),
        background=background,
        hide_word=bool(app.config.get("HIDE_WORD_FROM_GUESSERS", False)),
        avoid_repeats=bool(app.config.get("AVOID_REPEAT_WORDS", False)),
    )
    app.extensions["brushrush"] = {"directory": directory, "scheduler": scheduler}

    app.register_blueprint(health_bp)
    app.register_blueprint(rooms_bp, url_prefix="/api")

    register_socketio_handlers(
        socketio,
        directory,
        scheduler,
        min_players=int(app.config.get("MIN_PLAYERS", 2)),
        room_defaults=config_class,
    )

    if background:
        start_stats_broadcaster(socketio, directory, float(app.config.get("STATS_INTERVAL_SEC", 30)))

    return app, socketio
