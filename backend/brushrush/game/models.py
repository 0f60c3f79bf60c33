from __future__ import annotations

from dataclasses import dataclass, field
from threading import RLock
from typing import Any, Literal

from .errors import InvalidPayload
from .words import CATEGORIES, DIFFICULTIES


GameState = Literal["waiting", "playing", "finished"]
GamePhase = Literal["waiting", "drawing"]

MAX_NAME_LEN = 32
MAX_PASSWORD_LEN = 64
MAX_CUSTOM_WORDS = 200


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value in (0, 1):
        return bool(value)
    raise ValueError(value)


def _as_int(value: Any, lo: int, hi: int) -> int:
    if isinstance(value, bool):
        raise ValueError(value)
    n = int(value)
    if n < lo or n > hi:
        raise ValueError(value)
    return n


def _as_name(value: Any) -> str:
    n = str(value or "").strip()
    if not n or len(n) > MAX_NAME_LEN:
        raise ValueError(value)
    return n


def _as_password(value: Any) -> str | None:
    if value is None:
        return None
    p = str(value)
    if len(p) > MAX_PASSWORD_LEN:
        raise ValueError(value)
    return p or None


def _as_words(value: Any) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(value)
    words = [w.strip() for w in value if isinstance(w, str) and w.strip()]
    return words[:MAX_CUSTOM_WORDS]


def _as_categories(value: Any) -> list[str]:
    if not isinstance(value, list):
        raise ValueError(value)
    # Closed enumeration: anything not in the table is dropped.
    return [c for c in value if c in CATEGORIES]


def _as_difficulty(value: Any) -> str:
    if value not in DIFFICULTIES:
        raise ValueError(value)
    return value


@dataclass
class RoomSettings:
    name: str = "Drawing Room"
    max_players: int = 8
    is_private: bool = False
    password: str | None = None
    custom_words: list[str] = field(default_factory=list)
    rounds: int = 3
    draw_time: int = 60
    categories: list[str] = field(default_factory=list)
    difficulty: str = "mixed"

    # payload key -> (attribute, coercion)
    FIELDS = {
        "name": ("name", _as_name),
        "maxPlayers": ("max_players", lambda v: _as_int(v, 2, 20)),
        "isPrivate": ("is_private", _as_bool),
        "password": ("password", _as_password),
        "customWords": ("custom_words", _as_words),
        "rounds": ("rounds", lambda v: _as_int(v, 1, 20)),
        "drawTime": ("draw_time", lambda v: _as_int(v, 10, 300)),
        "categories": ("categories", _as_categories),
        "difficulty": ("difficulty", _as_difficulty),
    }

    @classmethod
    def from_payload(cls, data: dict | None, defaults: Any = None) -> "RoomSettings":
        """Build settings for a new room; missing fields take `defaults`.

        Unlike `apply`, any invalid field rejects the whole payload.
        """
        settings = cls()
        if defaults is not None:
            settings.max_players = defaults.DEFAULT_MAX_PLAYERS
            settings.rounds = defaults.DEFAULT_ROUNDS
            settings.draw_time = defaults.DEFAULT_DRAW_TIME_SEC
            settings.categories = list(defaults.DEFAULT_CATEGORIES)
            settings.difficulty = defaults.DEFAULT_DIFFICULTY

        invalid = settings.apply(data or {})
        if invalid:
            raise InvalidPayload(f"Invalid room settings: {', '.join(invalid)}")
        return settings

    def apply(self, data: dict) -> list[str]:
        """Apply whichever fields are present and valid; return the invalid keys."""
        invalid: list[str] = []
        for key, (attr, coerce) in self.FIELDS.items():
            if key not in data:
                continue
            try:
                setattr(self, attr, coerce(data[key]))
            except (TypeError, ValueError):
                invalid.append(key)
        return invalid

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "maxPlayers": self.max_players,
            "isPrivate": self.is_private,
            "password": self.password,
            "customWords": list(self.custom_words),
            "rounds": self.rounds,
            "drawTime": self.draw_time,
            "categories": list(self.categories),
            "difficulty": self.difficulty,
        }


@dataclass
class Player:
    id: str
    name: str
    avatar: str = ""
    score: int = 0
    is_host: bool = False
    is_drawing: bool = False
    has_guessed: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "avatar": self.avatar,
            "score": self.score,
            "isHost": self.is_host,
            "isDrawing": self.is_drawing,
            "hasGuessed": self.has_guessed,
        }


@dataclass
class Room:
    id: str
    settings: RoomSettings
    players: dict[str, Player]
    scores: dict[str, int]
    current_round: int = 0
    drawer_id: str | None = None
    current_word: str | None = None
    current_word_category: str = ""
    current_word_is_custom: bool = False
    game_state: GameState = "waiting"
    game_phase: GamePhase = "waiting"
    time_left: int = 0
    used_words: list[str] = field(default_factory=list)
    drawing_data: list[Any] = field(default_factory=list)
    # Bumped on every round end and reset; delayed continuations compare it.
    epoch: int = 0
    # Position the drawer held when removed mid-game, so rotation resumes there.
    drawer_slot: int | None = None
    lock: RLock = field(default_factory=RLock, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not self.players:
            raise ValueError("a room needs at least one player")
        if sum(1 for p in self.players.values() if p.is_host) != 1:
            raise ValueError("a room needs exactly one host")
        if set(self.scores) != set(self.players):
            raise ValueError("score table must match players")

    @classmethod
    def create(cls, room_id: str, settings: RoomSettings, host: Player) -> "Room":
        host.is_host = True
        host.score = 0
        return cls(id=room_id, settings=settings, players={host.id: host}, scores={host.id: 0})

    @property
    def drawer(self) -> Player | None:
        if self.drawer_id is None:
            return None
        return self.players.get(self.drawer_id)

    @property
    def host(self) -> Player | None:
        for p in self.players.values():
            if p.is_host:
                return p
        return None

    def is_full(self) -> bool:
        return len(self.players) >= self.settings.max_players

    def add_player(self, player: Player) -> None:
        player.score = 0
        player.is_host = False
        player.is_drawing = False
        player.has_guessed = False
        self.players[player.id] = player
        self.scores[player.id] = 0

    def remove_player(self, player_id: str) -> Player | None:
        player = self.players.get(player_id)
        if player is None:
            return None

        index = list(self.players).index(player_id)
        if player_id == self.drawer_id:
            self.drawer_slot = index
            self.drawer_id = None
        elif self.drawer_slot is not None and index < self.drawer_slot:
            # Everyone after the leaver moves up one seat, the pending drawer too.
            self.drawer_slot -= 1

        del self.players[player_id]
        self.scores.pop(player_id, None)
        return player

    def ensure_host(self) -> Player | None:
        """Promote the first player if nobody holds host. Returns the new host."""
        if not self.players or self.host is not None:
            return None
        first = next(iter(self.players.values()))
        first.is_host = True
        return first

    def award(self, player_id: str, points: int) -> None:
        self.scores[player_id] = self.scores.get(player_id, 0) + points
        self.players[player_id].score += points

    def next_drawer(self) -> Player | None:
        ids = list(self.players)
        if not ids:
            return None
        if self.drawer_id in self.players:
            idx = (ids.index(self.drawer_id) + 1) % len(ids)
        elif self.drawer_slot is not None:
            idx = self.drawer_slot % len(ids)
        else:
            idx = 0
        return self.players[ids[idx]]

    def assign_drawer(self, player: Player) -> None:
        for p in self.players.values():
            p.is_drawing = False
            p.has_guessed = False
        player.is_drawing = True
        self.drawer_id = player.id
        self.drawer_slot = None

    def clear_round_flags(self) -> None:
        for p in self.players.values():
            p.is_drawing = False
            p.has_guessed = False

    def non_drawers_all_guessed(self) -> bool:
        non_drawers = [p for p in self.players.values() if p.id != self.drawer_id]
        return bool(non_drawers) and all(p.has_guessed for p in non_drawers)

    def reset_game(self) -> None:
        self.game_state = "waiting"
        self.game_phase = "waiting"
        self.current_round = 0
        self.drawer_id = None
        self.drawer_slot = None
        self.current_word = None
        self.current_word_category = ""
        self.current_word_is_custom = False
        self.time_left = 0
        self.used_words = []
        self.drawing_data = []
        self.epoch += 1
        for p in self.players.values():
            p.score = 0
            p.is_drawing = False
            p.has_guessed = False
            self.scores[p.id] = 0
