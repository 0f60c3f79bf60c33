from __future__ import annotations

import logging
from typing import Any, Callable

from flask_socketio import SocketIO

from ..realtime import events
from .models import Player, Room
from .service import RoomDirectory, RoundTimer, room_snapshot
from .words import select_word, word_category


logger = logging.getLogger(__name__)


class RoundScheduler:
    """Drives a room through its rounds on the server clock.

    - start_game: waiting/finished -> playing, round 1, first player draws
    - tick: once per interval while drawing; reaching zero ends the round
    - end_round: reveal the word, then either finish or queue the next round
    - restart_game: back to waiting with scores cleared

    With background tasks disabled (tests), nothing is spawned: ticks are
    driven by calling `tick` and delayed continuations wait in `pending`
    until `run_pending` is called.
    """

    def __init__(
        self,
        socketio: SocketIO,
        directory: RoomDirectory,
        *,
        tick_interval: float = 1.0,
        reveal_delay: float = 2.0,
        background: bool = True,
        hide_word: bool = False,
        avoid_repeats: bool = False,
    ):
        self.socketio = socketio
        self.directory = directory
        self.tick_interval = tick_interval
        self.reveal_delay = reveal_delay
        self.background = background
        self.hide_word = hide_word
        self.avoid_repeats = avoid_repeats
        self.pending: list[tuple[Callable[..., Any], tuple]] = []

    # -- continuations --

    def call_later(self, delay: float, fn: Callable[..., Any], *args: Any) -> None:
        if not self.background:
            self.pending.append((fn, args))
            return
        self.socketio.start_background_task(self._run_later, delay, fn, args)

    def _run_later(self, delay: float, fn: Callable[..., Any], args: tuple) -> None:
        self.socketio.sleep(delay)
        try:
            fn(*args)
        except Exception:
            logger.exception("Delayed continuation %s failed", getattr(fn, "__name__", fn))

    def run_pending(self) -> int:
        """Run the queued continuations once. Returns how many ran."""
        batch, self.pending = self.pending, []
        for fn, args in batch:
            fn(*args)
        return len(batch)

    # -- timer --

    def arm(self, room: Room) -> RoundTimer:
        timer = self.directory.arm_timer(room.id)
        room.time_left = room.settings.draw_time
        room.game_phase = "drawing"
        logger.debug("Timer armed for room %s (gen %d, %ss)", room.id, timer.generation, room.time_left)
        if self.background:
            self.socketio.start_background_task(self._run_timer, timer)
        return timer

    def _run_timer(self, timer: RoundTimer) -> None:
        while True:
            self.socketio.sleep(self.tick_interval)
            try:
                if not self.tick(timer.room_id, timer):
                    return
            except Exception:
                logger.exception("Timer for room %s failed", timer.room_id)
                return

    def tick(self, room_id: str, timer: RoundTimer | None = None) -> bool:
        """Advance the room's countdown by one unit. Returns False once the
        timer is no longer live (stale, cancelled or expired)."""
        room = self.directory.get_room(room_id)
        if room is None:
            return False

        with room.lock:
            current = self.directory.current_timer(room_id)
            if current is None or (timer is not None and current != timer):
                return False

            room.time_left -= 1
            self.socketio.emit(events.TIMER_UPDATE, {"timeLeft": room.time_left}, to=room_id)

            if room.time_left <= 0:
                self.directory.cancel_timer(room_id)
                self.end_round(room)
                return False
            return True

    # -- phase transitions --

    def start_game(self, room: Room) -> None:
        with room.lock:
            room.game_state = "playing"
            room.current_round = 1
            room.used_words = []
            first = next(iter(room.players.values()))
            logger.info("Game started in room %s", room.id)
            self.socketio.emit(events.GAME_STARTED, {"room": self.snapshot(room)}, to=room.id)
            self._begin_round(room, first)

    def _begin_round(self, room: Room, drawer: Player) -> None:
        room.assign_drawer(drawer)

        settings = room.settings
        word = select_word(
            settings.custom_words,
            settings.categories,
            settings.difficulty,
            exclude=room.used_words if self.avoid_repeats else (),
        )
        room.current_word = word
        room.used_words.append(word)
        room.current_word_category = word_category(word, settings.custom_words)
        room.current_word_is_custom = room.current_word_category == "Custom"
        room.drawing_data = []

        self.arm(room)
        logger.info(
            "Round %d started in room %s, drawer %s",
            room.current_round, room.id, drawer.name,
        )
        self._emit_round_started(room, drawer)

    def _emit_round_started(self, room: Room, drawer: Player) -> None:
        if not self.hide_word:
            payload = {"room": self.snapshot(room), "word": room.current_word, "drawer": drawer.to_dict()}
            self.socketio.emit(events.ROUND_STARTED, payload, to=room.id)
            return

        public = {"room": self.snapshot(room), "word": None, "drawer": drawer.to_dict()}
        self.socketio.emit(events.ROUND_STARTED, public, to=room.id, skip_sid=drawer.id)
        private = {
            "room": self.snapshot(room, viewer_id=drawer.id),
            "word": room.current_word,
            "drawer": drawer.to_dict(),
        }
        self.socketio.emit(events.ROUND_STARTED, private, to=drawer.id)

    def end_round(self, room: Room) -> None:
        with room.lock:
            self.directory.cancel_timer(room.id)

            self.socketio.emit(
                events.ROUND_ENDED,
                {"room": self.snapshot(room, reveal=True), "word": room.current_word},
                to=room.id,
            )
            logger.info("Round %d ended in room %s, word was %r", room.current_round, room.id, room.current_word)

            room.clear_round_flags()
            room.current_round += 1
            room.epoch += 1

            if room.current_round > room.settings.rounds:
                room.game_state = "finished"
                room.game_phase = "waiting"
                room.time_left = 0
                logger.info("Game finished in room %s", room.id)
                self.socketio.emit(events.GAME_FINISHED, {"room": self.snapshot(room, reveal=True)}, to=room.id)
                return

            self.call_later(self.reveal_delay, self.start_next_round, room.id, room, room.epoch)

    def start_next_round(self, room_id: str, room: Room, epoch: int) -> bool:
        with room.lock:
            if self.directory.get_room(room_id) is not room:
                logger.debug("Skipping next round for deleted room %s", room_id)
                return False
            if room.epoch != epoch or room.game_state != "playing":
                logger.debug("Skipping stale next round for room %s", room_id)
                return False

            drawer = room.next_drawer()
            if drawer is None:
                return False
            self._begin_round(room, drawer)
            return True

    def restart_game(self, room: Room, overrides: dict | None = None) -> list[str]:
        """Reset the room to waiting. Returns the override keys that were rejected."""
        with room.lock:
            self.directory.cancel_timer(room.id)
            invalid = room.settings.apply(overrides or {})
            room.reset_game()
            logger.info("Game restarted in room %s", room.id)
            self.socketio.emit(events.GAME_RESTARTED, {"room": self.snapshot(room)}, to=room.id)
            return invalid

    def snapshot(self, room: Room, viewer_id: str | None = None, reveal: bool = False) -> dict:
        return room_snapshot(room, hide_word=self.hide_word and not reveal, viewer_id=viewer_id)
