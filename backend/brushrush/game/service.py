from __future__ import annotations

import itertools
import logging
import random
import string
from dataclasses import dataclass
from threading import RLock

from .errors import RoomNotFound
from .models import Player, Room, RoomSettings


logger = logging.getLogger(__name__)

ROOM_ID_ALPHABET = string.ascii_uppercase + string.digits
ROOM_ID_LENGTH = 6


def generate_room_id(rng: random.Random | None = None) -> str:
    return "".join((rng or random).choices(ROOM_ID_ALPHABET, k=ROOM_ID_LENGTH))


@dataclass(frozen=True)
class RoundTimer:
    room_id: str
    generation: int


@dataclass
class Departure:
    player: Player
    room: Room
    room_deleted: bool = False
    new_host: Player | None = None
    was_drawing: bool = False


class RoomDirectory:
    """Process-wide registry of live rooms.

    Owns three maps: room id -> Room, connection id -> room id, and
    room id -> live RoundTimer. The directory lock only guards these maps;
    room contents are guarded by each room's own lock.
    """

    def __init__(self, id_factory=generate_room_id):
        self._lock = RLock()
        self._rooms: dict[str, Room] = {}
        self._seats: dict[str, str] = {}
        self._timers: dict[str, RoundTimer] = {}
        self._generation = itertools.count(1)
        self._id_factory = id_factory

    # -- rooms --

    def create_room(self, settings: RoomSettings, host: Player) -> Room:
        with self._lock:
            room_id = self._id_factory()
            while room_id in self._rooms:
                room_id = self._id_factory()

            room = Room.create(room_id, settings, host)
            self._rooms[room_id] = room
            self._seats[host.id] = room_id

        logger.info("Room %s created by %s", room_id, host.name)
        return room

    def get_room(self, room_id: str) -> Room | None:
        with self._lock:
            return self._rooms.get(room_id)

    def require_room(self, room_id: str) -> Room:
        room = self.get_room(room_id)
        if room is None:
            raise RoomNotFound(room_id)
        return room

    def list_rooms(self) -> list[Room]:
        with self._lock:
            return list(self._rooms.values())

    def public_rooms(self) -> list[Room]:
        return [r for r in self.list_rooms() if not r.settings.is_private]

    def delete_room(self, room_id: str) -> bool:
        with self._lock:
            room = self._rooms.pop(room_id, None)
            self._timers.pop(room_id, None)
            if room is None:
                return False
            for sid in [s for s, rid in self._seats.items() if rid == room_id]:
                del self._seats[sid]

        logger.info("Room %s deleted", room_id)
        return True

    # -- membership --

    def room_of(self, connection_id: str) -> Room | None:
        with self._lock:
            room_id = self._seats.get(connection_id)
            if room_id is None:
                return None
            return self._rooms.get(room_id)

    def seat(self, room: Room, player: Player) -> None:
        """Add `player` to `room`. Caller holds the room lock."""
        room.add_player(player)
        with self._lock:
            self._seats[player.id] = room.id

    def remove_player(self, connection_id: str) -> Departure | None:
        """Unseat a connection from whatever room it occupies.

        Tolerates connections that are not seated (returns None). Deletes the
        room and its timer when it empties; otherwise hands host to the new
        first player if the host left. Ending an interrupted round is left to
        the caller, which knows how to broadcast.
        """
        with self._lock:
            room_id = self._seats.pop(connection_id, None)
            room = self._rooms.get(room_id) if room_id else None
        if room is None:
            return None

        with room.lock:
            was_drawing = False
            target = room.players.get(connection_id)
            if target is not None:
                was_drawing = target.is_drawing and room.game_state == "playing"

            player = room.remove_player(connection_id)
            if player is None:
                return None

            logger.info(
                "Player %s removed from room %s. Remaining players: %d",
                player.name, room.id, len(room.players),
            )

            if not room.players:
                self.delete_room(room.id)
                return Departure(player=player, room=room, room_deleted=True)

            new_host = room.ensure_host() if player.is_host else None
            if new_host is not None:
                logger.info("Host transferred to %s in room %s", new_host.name, room.id)

            if was_drawing:
                self.cancel_timer(room.id)

            return Departure(player=player, room=room, new_host=new_host, was_drawing=was_drawing)

    # -- timers --

    def arm_timer(self, room_id: str) -> RoundTimer:
        """Replace any live timer for the room with a fresh generation."""
        with self._lock:
            timer = RoundTimer(room_id=room_id, generation=next(self._generation))
            self._timers[room_id] = timer
            return timer

    def cancel_timer(self, room_id: str) -> bool:
        with self._lock:
            return self._timers.pop(room_id, None) is not None

    def current_timer(self, room_id: str) -> RoundTimer | None:
        with self._lock:
            return self._timers.get(room_id)

    def is_current(self, timer: RoundTimer) -> bool:
        with self._lock:
            return self._timers.get(timer.room_id) == timer

    # -- telemetry --

    def stats(self) -> dict:
        rooms = self.list_rooms()
        return {
            "totalRooms": len(rooms),
            "totalPlayers": sum(len(r.players) for r in rooms),
            "activeGames": sum(1 for r in rooms if r.game_state == "playing"),
        }


def room_snapshot(room: Room, hide_word: bool = False, viewer_id: str | None = None) -> dict:
    """Serializable view of a room as broadcast to its members.

    With `hide_word`, the secret word is masked unless the viewer is the
    drawer or the round is over.
    """
    word = room.current_word
    if hide_word and word and viewer_id != room.drawer_id and room.game_state == "playing":
        word = None

    drawer = room.drawer
    payload = {
        "id": room.id,
        **room.settings.to_dict(),
        "players": [p.to_dict() for p in room.players.values()],
        "currentRound": room.current_round,
        "currentDrawer": drawer.to_dict() if drawer else None,
        "currentWord": word,
        "currentWordCategory": room.current_word_category,
        "currentWordIsCustom": room.current_word_is_custom,
        "gameState": room.game_state,
        "gamePhase": room.game_phase,
        "timeLeft": room.time_left,
        "scores": dict(room.scores),
        "usedWords": list(room.used_words),
    }
    payload.pop("password", None)
    payload["hasPassword"] = bool(room.settings.password)
    if word is None and room.current_word:
        payload["wordHint"] = "".join(" " if ch == " " else "_" for ch in room.current_word)
        payload["usedWords"] = [w for w in room.used_words if w != room.current_word]
    return payload


def public_room_summary(room: Room) -> dict:
    host = room.host
    return {
        "id": room.id,
        "name": room.settings.name,
        "playerCount": len(room.players),
        "maxPlayers": room.settings.max_players,
        "gamePhase": room.game_phase,
        "round": room.current_round,
        "maxRounds": room.settings.rounds,
        "difficulty": room.settings.difficulty,
        "categories": list(room.settings.categories),
        "host": host.name if host else "Unknown",
        "isPrivate": room.settings.is_private,
        "hasPassword": bool(room.settings.password),
    }
