from __future__ import annotations

import functools
import logging
import time
from typing import Any, Callable

from flask import request
from flask_socketio import SocketIO, emit, join_room, leave_room

from ..game.errors import GameError, InvalidPayload, NotHost, PreconditionFailed, RoomNotFound
from ..game.models import MAX_NAME_LEN, Player, Room, RoomSettings
from ..game.scheduler import RoundScheduler
from ..game.service import Departure, RoomDirectory, public_room_summary
from . import events


logger = logging.getLogger(__name__)

MAX_CHAT_LEN = 500
MAX_AVATAR_LEN = 512


def now_ms() -> int:
    return int(time.time() * 1000)


def _normalize_guess(text: str) -> str:
    return " ".join(text.split()).lower()


def _validate_name(name: str) -> bool:
    n = (name or "").strip()
    if not n:
        return False
    if len(n) > MAX_NAME_LEN:
        return False
    # No control characters.
    for ch in n:
        if ord(ch) < 32:
            return False
    return True


def _player_from_payload(sid: str, raw: Any) -> Player:
    data = raw if isinstance(raw, dict) else {}
    name = str(data.get("name", "")).strip()
    if not _validate_name(name):
        raise InvalidPayload("A player name is required")
    avatar = str(data.get("avatar") or "")[:MAX_AVATAR_LEN]
    return Player(id=sid, name=name, avatar=avatar)


def _room_id(payload: dict) -> str:
    room_id = str(payload.get("roomId") or "").strip().upper()
    if not room_id:
        raise InvalidPayload("roomId is required")
    return room_id


def _require_member(room: Room, sid: str) -> Player:
    player = room.players.get(sid)
    if player is None:
        raise PreconditionFailed("You are not in this room", "not_in_room")
    return player


def _require_host(room: Room, sid: str, action: str) -> Player:
    player = room.players.get(sid)
    if player is None or not player.is_host:
        raise NotHost(action)
    return player


def register_socketio_handlers(
    socketio: SocketIO,
    directory: RoomDirectory,
    scheduler: RoundScheduler,
    min_players: int = 2,
    room_defaults: Any = None,
) -> None:
    def intent(name: str, action: str) -> Callable:
        """Register a handler; rejected intents answer the sender privately."""

        def decorator(fn: Callable[[dict], Any]) -> Callable:
            @functools.wraps(fn)
            def handler(data=None):
                try:
                    return fn(data if isinstance(data, dict) else {})
                except GameError as exc:
                    logger.warning("%s from %s rejected: %s", name, request.sid, exc.message)
                    emit(events.ERROR, exc.to_dict())
                except Exception as exc:
                    logger.exception("%s from %s failed", name, request.sid)
                    emit(events.ERROR, {"code": "internal_error", "message": f"Failed to {action}: {exc}"})

            socketio.on_event(name, handler)
            return handler

        return decorator

    def _announce_departure(dep: Departure, skip: str | None = None) -> None:
        if dep.room_deleted:
            return

        room = dep.room
        payload = {
            "player": dep.player.to_dict(),
            "players": [p.to_dict() for p in room.players.values()],
            "host": dep.new_host.to_dict() if dep.new_host else None,
        }
        skip_sids = [dep.player.id] + ([skip] if skip else [])
        socketio.emit(events.PLAYER_LEFT, payload, to=room.id, skip_sid=skip_sids)

        if dep.was_drawing:
            logger.info("Drawer %s left room %s, ending round early", dep.player.name, room.id)
            scheduler.end_round(room)

    def _depart(sid: str, unsubscribe: bool = True, skip: str | None = None) -> Departure | None:
        """Shared path for leave, kick, migration and disconnect."""
        room = directory.room_of(sid)
        if room is None:
            return None

        with room.lock:
            dep = directory.remove_player(sid)
            if dep is None:
                return None
            if unsubscribe:
                leave_room(room.id, sid=sid)
            _announce_departure(dep, skip)
            return dep

    @intent(events.CREATE_ROOM, "create room")
    def create_room(payload: dict):
        sid = request.sid
        settings = RoomSettings.from_payload(payload.get("roomData"), room_defaults)
        player = _player_from_payload(sid, payload.get("player"))

        # A connection sits in at most one room.
        _depart(sid)

        room = directory.create_room(settings, player)
        with room.lock:
            join_room(room.id)
            emit(events.ROOM_CREATED, {"roomId": room.id, "room": scheduler.snapshot(room, viewer_id=sid)})

    @intent(events.JOIN_ROOM, "join room")
    def join_room_intent(payload: dict):
        sid = request.sid
        room_id = _room_id(payload)
        player = _player_from_payload(sid, payload.get("player"))
        password = payload.get("password")

        room = directory.require_room(room_id)

        def check_admission() -> bool:
            if sid in room.players:
                logger.info("Player %s already in room %s", player.name, room_id)
                emit(events.ROOM_JOINED, {"room": scheduler.snapshot(room, viewer_id=sid)})
                return False
            if room.is_full():
                raise PreconditionFailed("Room is full", "room_full")
            if room.settings.is_private and room.settings.password and password != room.settings.password:
                raise PreconditionFailed("Incorrect password", "wrong_password")
            return True

        with room.lock:
            if not check_admission():
                return

        current = directory.room_of(sid)
        if current is not None and current is not room:
            logger.info("Moving %s out of room %s", player.name, current.id)
            _depart(sid)

        with room.lock:
            # Re-check: the room may have changed while we left the old one.
            if directory.get_room(room_id) is not room:
                raise RoomNotFound(room_id)
            if not check_admission():
                return

            directory.seat(room, player)
            join_room(room.id)
            logger.info("%s joined room %s", player.name, room.id)

            # Joiner hears about itself before the others hear about it.
            emit(events.ROOM_JOINED, {"room": scheduler.snapshot(room, viewer_id=sid)})
            emit(
                events.PLAYER_JOINED,
                {"player": player.to_dict(), "players": [p.to_dict() for p in room.players.values()]},
                to=room.id,
                include_self=False,
            )

            if room.game_state == "playing":
                for drawing_event in room.drawing_data:
                    emit(events.DRAWING_EVENT, drawing_event)

    @intent(events.LEAVE_ROOM, "leave room")
    def leave_room_intent(payload: dict):
        sid = request.sid
        room_id = _room_id(payload)

        current = directory.room_of(sid)
        if current is None or current.id != room_id:
            logger.debug("Leave for %s ignored, %s is not seated there", room_id, sid)
            leave_room(room_id)
            return

        dep = _depart(sid)
        if dep is not None:
            logger.info("Player %s left room %s", dep.player.name, room_id)

    @intent(events.UPDATE_ROOM, "update room")
    def update_room(payload: dict):
        room = directory.require_room(_room_id(payload))
        with room.lock:
            _require_host(room, request.sid, "update room settings")
            invalid = room.settings.apply(payload)
            logger.info("Room %s settings updated", room.id)
            socketio.emit(events.ROOM_UPDATED, {"room": scheduler.snapshot(room)}, to=room.id)

        if invalid:
            raise InvalidPayload(f"Ignored invalid settings: {', '.join(invalid)}")

    @intent(events.RESTART_GAME, "restart game")
    def restart_game(payload: dict):
        room = directory.require_room(_room_id(payload))
        overrides = payload.get("roomData")
        with room.lock:
            _require_host(room, request.sid, "restart the game")
            invalid = scheduler.restart_game(room, overrides if isinstance(overrides, dict) else None)

        if invalid:
            raise InvalidPayload(f"Ignored invalid settings: {', '.join(invalid)}")

    @intent(events.START_GAME, "start game")
    def start_game(payload: dict):
        room = directory.require_room(_room_id(payload))
        with room.lock:
            _require_host(room, request.sid, "start the game")
            if len(room.players) < min_players:
                raise PreconditionFailed(f"Need at least {min_players} players to start", "not_enough_players")
            if room.game_state == "playing":
                raise PreconditionFailed("Game is already in progress", "already_playing")
            scheduler.start_game(room)

    @intent(events.CHAT_MESSAGE, "send message")
    def chat_message(payload: dict):
        sid = request.sid
        room = directory.require_room(_room_id(payload))
        message = payload.get("message")
        if not isinstance(message, str):
            raise InvalidPayload("message must be a string")
        message = message[:MAX_CHAT_LEN]
        if not message.strip():
            return

        with room.lock:
            player = _require_member(room, sid)

            is_guess = (
                room.game_state == "playing"
                and room.current_word
                and directory.current_timer(room.id) is not None
                and sid != room.drawer_id
                and not player.has_guessed
                and _normalize_guess(message) == _normalize_guess(room.current_word)
            )
            if not is_guess:
                ts = now_ms()
                socketio.emit(
                    events.CHAT_MESSAGE,
                    {
                        "id": ts,
                        "player": player.name,
                        "playerId": player.id,
                        "message": message,
                        "type": "chat",
                        "timestamp": ts,
                    },
                    to=room.id,
                )
                return

            points = max(10, room.time_left // 2)
            player.has_guessed = True
            room.award(sid, points)
            logger.info("%s guessed the word in room %s for %d points", player.name, room.id, points)

            socketio.emit(
                events.CORRECT_GUESS,
                {
                    "player": player.name,
                    "playerId": player.id,
                    "word": None if scheduler.hide_word else room.current_word,
                    "points": points,
                },
                to=room.id,
            )

            if room.non_drawers_all_guessed():
                scheduler.end_round(room)

    @intent(events.DRAWING_EVENT, "relay drawing")
    def drawing_event(payload: dict):
        sid = request.sid
        room = directory.require_room(_room_id(payload))
        event = payload.get("event")
        if event is None:
            raise InvalidPayload("event is required")

        with room.lock:
            player = _require_member(room, sid)
            if not player.is_drawing:
                raise PreconditionFailed("Only the drawer can draw", "not_drawer")

            room.drawing_data.append(event)
            emit(events.DRAWING_EVENT, event, to=room.id, include_self=False)
            logger.debug("Drawing event relayed in room %s (%d stored)", room.id, len(room.drawing_data))

    @intent(events.CLEAR_CANVAS, "clear canvas")
    def clear_canvas(payload: dict):
        sid = request.sid
        room = directory.require_room(_room_id(payload))
        with room.lock:
            player = _require_member(room, sid)
            if not player.is_drawing:
                raise PreconditionFailed("Only the drawer can clear the canvas", "not_drawer")

            room.drawing_data = []
            emit(events.CANVAS_CLEARED, {}, to=room.id, include_self=False)
            logger.debug("Canvas cleared in room %s", room.id)

    @intent(events.KICK_PLAYER, "kick player")
    def kick_player(payload: dict):
        sid = request.sid
        room = directory.require_room(_room_id(payload))
        target_id = str(payload.get("playerId") or "")

        with room.lock:
            _require_host(room, sid, "kick players")
            target = room.players.get(target_id)
            if target is None or target_id == sid:
                raise PreconditionFailed("Cannot kick that player", "invalid_target")

            socketio.emit(events.KICKED, {"roomId": room.id}, to=target_id)
            # player-left goes to bystanders only
            _depart(target_id, skip=sid)
            logger.info("%s was kicked from room %s", target.name, room.id)

    @intent(events.GET_PUBLIC_ROOMS, "list rooms")
    def get_public_rooms(payload: dict):
        rooms = [public_room_summary(r) for r in directory.public_rooms()]
        logger.debug("Sending %d public rooms", len(rooms))
        emit(events.PUBLIC_ROOMS, {"rooms": rooms})

    @socketio.on("disconnect")
    def on_disconnect(reason=None):
        sid = request.sid
        try:
            dep = _depart(sid, unsubscribe=False)
        except Exception:
            logger.exception("Cleanup for disconnected %s failed", sid)
            return

        if dep is None:
            logger.info("Player %s disconnected (no room)", sid)
        else:
            logger.info("Player %s disconnected from room %s", dep.player.name, dep.room.id)
