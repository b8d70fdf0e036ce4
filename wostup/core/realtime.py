"""
Realtime notification push over WebSockets.

Each logged-in user may hold several sockets (tabs, devices). Sockets are
tracked in this process only: a user connected to another worker misses
the push but still finds the stored notification over REST.

Frames sent to clients:
    {"event": "notification" | "new_notification" | "applicationStatusUpdated",
     "data": {...}}

"notification" carries messages written by startup staff, "new_notification"
the ones the platform generates.
"""

import asyncio
import logging
from typing import Dict, List

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Registry of open notification sockets keyed by user id."""

    def __init__(self) -> None:
        self._sockets: Dict[str, List[WebSocket]] = {}

    async def connect(self, user_id: str, websocket: WebSocket) -> None:
        await websocket.accept()
        self._sockets.setdefault(user_id, []).append(websocket)

    async def disconnect(self, user_id: str, websocket: WebSocket) -> None:
        self._forget(user_id, [websocket])

    def is_connected(self, user_id: str) -> bool:
        return bool(self._sockets.get(user_id))

    async def send(self, user_id: str, event: str, data: dict) -> int:
        """Push one event to every socket of `user_id`. Returns how many got it."""
        sockets = list(self._sockets.get(user_id, ()))
        if not sockets:
            return 0

        frame = {"event": event, "data": data}
        results = await asyncio.gather(
            *(socket.send_json(frame) for socket in sockets), return_exceptions=True
        )
        failed = [s for s, result in zip(sockets, results) if isinstance(result, Exception)]
        if failed:
            logger.debug("Dropping %d closed socket(s) of user %s", len(failed), user_id)
            self._forget(user_id, failed)
        return len(sockets) - len(failed)

    def _forget(self, user_id: str, sockets: List[WebSocket]) -> None:
        remaining = [s for s in self._sockets.get(user_id, []) if s not in sockets]
        if remaining:
            self._sockets[user_id] = remaining
        else:
            self._sockets.pop(user_id, None)


manager = ConnectionManager()
