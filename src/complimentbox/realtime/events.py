"""WebSocket event names.

Every frame on the wire is JSON: {"event": <name>, "data": <payload>}.
"""

# ─── Client → server ─────────────────────────────────────

JOIN_ROOM = "join-room"
PING = "ping"

# ─── Server → client ─────────────────────────────────────

CONNECTED = "connected"
ROOM_JOINED = "room-joined"
NEW_COMPLIMENT = "new-compliment"
PONG = "pong"
ERROR = "error"
