from __future__ import annotations


class GameError(Exception):
    """Rejected intent. Reported privately to the sender, never broadcast."""

    code = "game_error"

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message}


class RoomNotFound(GameError):
    code = "room_not_found"

    def __init__(self, room_id: str = ""):
        super().__init__("Room not found")
        self.room_id = room_id


class NotHost(GameError):
    code = "only_host"

    def __init__(self, action: str):
        super().__init__(f"Only the host can {action}")


class PreconditionFailed(GameError):
    code = "precondition_failed"


class InvalidPayload(GameError):
    code = "invalid_payload"
