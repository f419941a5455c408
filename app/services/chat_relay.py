"""In-memory chat relay between users and the support desk.

History lives only in process memory and is lost on restart. Each room
keeps at most ``history_limit`` messages.
"""
import logging
from collections import deque
from typing import Any, Deque, Dict, List, Set

from fastapi import WebSocket

from app.core.config import settings

logger = logging.getLogger(__name__)


class ChatRelay:
    def __init__(self, history_limit: int = 500):
        self.history_limit = history_limit
        self.history: Dict[str, Deque[Any]] = {}
        self.active: Dict[str, Set[WebSocket]] = {}

    def rooms(self) -> List[str]:
        return list(self.history)

    def room_history(self, room: str) -> List[Any]:
        return list(self.history.get(room, ()))

    async def join(self, room: str, websocket: WebSocket):
        await websocket.accept()
        self.active.setdefault(room, set()).add(websocket)
        self.history.setdefault(room, deque(maxlen=self.history_limit))
        await websocket.send_json({"event": "chatHistory", "room": room, "messages": self.room_history(room)})

    def leave(self, room: str, websocket: WebSocket):
        self.active.get(room, set()).discard(websocket)

    async def publish(self, room: str, message: Any):
        self.history.setdefault(room, deque(maxlen=self.history_limit)).append(message)
        payload = {"event": "receiveMessage", "room": room, "message": message}
        for ws in list(self.active.get(room, set())):
            try:
                await ws.send_json(payload)
            except Exception as e:
                logger.info(f"Dropping chat subscriber in {room}: {e}")
                self.leave(room, ws)


chat_relay = ChatRelay(settings.CHAT_HISTORY_LIMIT)
