# Inbound intents (client -> server)
CREATE_ROOM = "create-room"
JOIN_ROOM = "join-room"
LEAVE_ROOM = "leave-room"
UPDATE_ROOM = "update-room"
RESTART_GAME = "restart-game"
START_GAME = "start-game"
CHAT_MESSAGE = "chat-message"
DRAWING_EVENT = "drawing-event"
CLEAR_CANVAS = "clear-canvas"
KICK_PLAYER = "kick-player"
GET_PUBLIC_ROOMS = "get-public-rooms"

# Outbound events (server -> client)
ROOM_CREATED = "room-created"
ROOM_JOINED = "room-joined"
PLAYER_JOINED = "player-joined"
PLAYER_LEFT = "player-left"
ROOM_UPDATED = "room-updated"
GAME_RESTARTED = "game-restarted"
GAME_STARTED = "game-started"
ROUND_STARTED = "round-started"
ROUND_ENDED = "round-ended"
GAME_FINISHED = "game-finished"
TIMER_UPDATE = "timer-update"
CORRECT_GUESS = "correct-guess"
CANVAS_CLEARED = "canvas-cleared"
KICKED = "kicked"
PUBLIC_ROOMS = "public-rooms"
SERVER_STATS = "server-stats"
ERROR = "error"
# CHAT_MESSAGE and DRAWING_EVENT are relayed under their inbound names.
