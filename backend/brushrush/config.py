import os


def _csv(value: str) -> list[str]:
    return [v.strip() for v in value.split(",") if v.strip()]


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev")

    HOST = os.environ.get("HOST", "0.0.0.0")
    PORT = int(os.environ.get("PORT") or os.environ.get("SOCKET_PORT") or "3001")

    # CORS: exact origins plus one wildcard subdomain family
    CORS_ORIGINS = _csv(
        os.environ.get("CORS_ORIGINS", "https://brush-rush.vercel.app,http://localhost:3000")
    )
    CORS_ORIGIN_PATTERN = os.environ.get("CORS_ORIGIN_PATTERN", r"^https://.*\.vercel\.app$")

    SOCKETIO_ASYNC_MODE = os.environ.get("SOCKETIO_ASYNC_MODE", "").strip()

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Room defaults
    DEFAULT_MAX_PLAYERS = int(os.environ.get("DEFAULT_MAX_PLAYERS", "8"))
    DEFAULT_ROUNDS = int(os.environ.get("DEFAULT_ROUNDS", "3"))
    DEFAULT_DRAW_TIME_SEC = int(os.environ.get("DEFAULT_DRAW_TIME_SEC", "60"))
    DEFAULT_CATEGORIES = _csv(os.environ.get("DEFAULT_CATEGORIES", "Animals,Objects,Food,Nature"))
    DEFAULT_DIFFICULTY = os.environ.get("DEFAULT_DIFFICULTY", "mixed")
    MIN_PLAYERS = int(os.environ.get("MIN_PLAYERS", "2"))

    # Game timing
    TICK_INTERVAL_SEC = float(os.environ.get("TICK_INTERVAL_SEC", "1"))
    REVEAL_DELAY_SEC = float(os.environ.get("REVEAL_DELAY_SEC", "2"))
    STATS_INTERVAL_SEC = float(os.environ.get("STATS_INTERVAL_SEC", "30"))

    # Off in tests: timers and delayed continuations are queued, not spawned.
    ENABLE_BACKGROUND_TASKS = os.environ.get("ENABLE_BACKGROUND_TASKS", "1") == "1"

    # Keep the secret word out of snapshots sent to guessers.
    HIDE_WORD_FROM_GUESSERS = os.environ.get("HIDE_WORD_FROM_GUESSERS", "0") == "1"

    # Skip words already drawn this game until the pool runs out.
    AVOID_REPEAT_WORDS = os.environ.get("AVOID_REPEAT_WORDS", "0") == "1"
