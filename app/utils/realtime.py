# app/utils/realtime.py
from typing import Any, Dict, List
from datetime import datetime
import uuid
import logging

from fastapi import Request, WebSocket

logger = logging.getLogger(__name__)

SETTINGS_TABLE = "user_settings"


class SettingsChangeHub:
    """
    Push channel for changes to a user's settings row.

    One hub belongs to one application instance (``app.state.settings_hub``);
    each WebSocket subscribes on connect and must unsubscribe when it closes.
    """

    def __init__(self):
        self._subscribers: Dict[uuid.UUID, List[WebSocket]] = {}

    def subscribe(self, websocket: WebSocket, user_id: uuid.UUID) -> None:
        """Register a WebSocket connection for a user"""
        self._subscribers.setdefault(user_id, []).append(websocket)
        logger.info(f"User {user_id} subscribed to settings changes. Total connections: {len(self._subscribers[user_id])}")

    def unsubscribe(self, websocket: WebSocket, user_id: uuid.UUID) -> None:
        """Remove a WebSocket connection for a user"""
        if user_id in self._subscribers:
            if websocket in self._subscribers[user_id]:
                self._subscribers[user_id].remove(websocket)

            # Clean up if no connections left
            if not self._subscribers[user_id]:
                del self._subscribers[user_id]

        logger.info(f"User {user_id} unsubscribed. Remaining connections: {self.subscriber_count(user_id)}")

    def subscriber_count(self, user_id: uuid.UUID) -> int:
        return len(self._subscribers.get(user_id, []))

    async def publish(self, user_id: uuid.UUID, event: str, row: Dict[str, Any]) -> int:
        """
        Send an INSERT/UPDATE event to every connection of ``user_id``.

        Returns the number of connections that received it; connections that
        fail to send are dropped.
        """
        if user_id not in self._subscribers:
            return 0

        payload = {
            "event": event,
            "table": SETTINGS_TABLE,
            "new": _serialize_row(row),
        }

        delivered = 0
        dead_connections = []
        for websocket in list(self._subscribers[user_id]):
            try:
                await websocket.send_json(payload)
                delivered += 1
            except Exception as e:
                logger.warning(f"Failed to push settings change to user {user_id}: {str(e)}")
                dead_connections.append(websocket)

        for websocket in dead_connections:
            self.unsubscribe(websocket, user_id)

        return delivered

    async def close(self) -> None:
        """Close every open connection; called on application shutdown."""
        for user_id, sockets in list(self._subscribers.items()):
            for websocket in list(sockets):
                try:
                    await websocket.close(code=1001)
                except Exception as e:
                    logger.debug(f"Ignoring close error for user {user_id}: {str(e)}")
        self._subscribers.clear()


def _serialize_row(row: Dict[str, Any]) -> Dict[str, Any]:
    data = {}
    for key, value in row.items():
        if isinstance(value, uuid.UUID):
            data[key] = str(value)
        elif isinstance(value, datetime):
            data[key] = value.isoformat()
        else:
            data[key] = value
    return data


def get_settings_hub(request: Request) -> SettingsChangeHub:
    return request.app.state.settings_hub
