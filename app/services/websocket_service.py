"""
WebSocket Service for Real-time Updates
Fans "review changed" notifications out to every connected client
"""

from fastapi import WebSocket, WebSocketDisconnect
from redis.asyncio import Redis
from typing import Any, Dict, List, Optional, Protocol, Set
import asyncio
import json
import logging
import uuid
from datetime import datetime, timezone

from app.config import settings
from app.core.redis import get_redis

logger = logging.getLogger(__name__)


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class Notifier(Protocol):
    """Publish point the API layer calls after a mutation"""

    async def notify(self, event: str, payload: Dict[str, Any]) -> None:
        ...


class NullNotifier:
    """Notifier that drops every message"""

    async def notify(self, event: str, payload: Dict[str, Any]) -> None:
        return None


class ConnectionManager:
    """Tracks connected sessions and broadcasts to all of them"""

    def __init__(self):
        self.active_connections: Set[WebSocket] = set()
        # Connection metadata
        self.connection_metadata: Dict[WebSocket, Dict] = {}
        self.relay: Optional["RedisBroadcastRelay"] = None

    @property
    def connection_count(self) -> int:
        return len(self.active_connections)

    async def connect(self, websocket: WebSocket) -> str:
        """Accept and register a new WebSocket connection"""
        await websocket.accept()

        client_id = uuid.uuid4().hex
        self.active_connections.add(websocket)
        self.connection_metadata[websocket] = {
            "client_id": client_id,
            "connected_at": utc_now()
        }
        logger.info(f"Client {client_id} connected ({self.connection_count} active)")

        # Send initial connection confirmation
        await websocket.send_json({
            "type": "connection",
            "status": "connected",
            "client_id": client_id,
            "timestamp": utc_now()
        })
        return client_id

    def disconnect(self, websocket: WebSocket):
        """Remove a WebSocket connection"""
        self.active_connections.discard(websocket)
        metadata = self.connection_metadata.pop(websocket, {})
        logger.info(
            f"Client {metadata.get('client_id', 'unknown')} disconnected "
            f"({self.connection_count} active)"
        )

    async def broadcast(self, message: Dict) -> int:
        """Send a message to every connected client; returns how many received it"""
        disconnected: List[WebSocket] = []
        delivered = 0

        for websocket in list(self.active_connections):
            try:
                await websocket.send_json(message)
                delivered += 1
            except Exception as e:
                logger.error(f"Error broadcasting {message.get('type')}: {e}")
                disconnected.append(websocket)

        # Clean up disconnected clients
        for websocket in disconnected:
            self.disconnect(websocket)

        return delivered

    async def notify(self, event: str, payload: Dict[str, Any]) -> None:
        """Broadcast locally and, when configured, to the other instances"""
        message = {"type": event, **payload, "timestamp": utc_now()}
        delivered = await self.broadcast(message)
        logger.info(f"Broadcast {event} to {delivered} client(s)")

        if self.relay:
            await self.relay.publish(message)


class RedisBroadcastRelay:
    """
    Mirrors broadcasts across server instances over a Redis channel.
    Each instance tags what it publishes and ignores its own messages.
    """

    def __init__(
        self,
        manager: ConnectionManager,
        channel: Optional[str] = None,
        redis: Optional[Redis] = None
    ):
        self.manager = manager
        self.channel = channel or settings.REDIS_BROADCAST_CHANNEL
        self.redis = redis
        self.instance_id = uuid.uuid4().hex
        self._pubsub = None
        self._task: Optional[asyncio.Task] = None

    async def get_client(self) -> Redis:
        if self.redis is None:
            self.redis = await get_redis()
        return self.redis

    async def start(self):
        client = await self.get_client()
        self._pubsub = client.pubsub()
        await self._pubsub.subscribe(self.channel)
        self._task = asyncio.create_task(self._listen())
        self.manager.relay = self
        logger.info(f"Broadcast relay subscribed to {self.channel}")

    @property
    def listening(self) -> bool:
        return self._task is not None and not self._task.done()

    async def stop(self):
        if self.manager.relay is self:
            self.manager.relay = None
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        if self._pubsub is not None:
            try:
                await self._pubsub.unsubscribe(self.channel)
            except Exception as e:
                logger.warning(f"Could not unsubscribe from {self.channel}: {e}")
            finally:
                await self._pubsub.aclose()
                self._pubsub = None
        logger.info("Broadcast relay stopped")

    async def publish(self, message: Dict) -> None:
        envelope = {"origin": self.instance_id, "message": message}
        try:
            client = await self.get_client()
            await client.publish(self.channel, json.dumps(envelope, default=str))
        except Exception as e:
            # Local clients already have the message
            logger.error(f"Failed to relay {message.get('type')} to Redis: {e}")

    async def handle_raw(self, data: Any) -> bool:
        """Re-broadcast a relayed message; returns False when it was skipped"""
        try:
            envelope = json.loads(data)
        except (TypeError, ValueError):
            logger.warning("Ignoring malformed relay message")
            return False

        if not isinstance(envelope, dict) or envelope.get("origin") == self.instance_id:
            return False
        message = envelope.get("message")
        if not isinstance(message, dict):
            return False

        await self.manager.broadcast(message)
        return True

    async def _listen(self):
        try:
            async for raw in self._pubsub.listen():
                if raw.get("type") != "message":
                    continue
                await self.handle_raw(raw.get("data"))
        except Exception as e:
            # Local broadcasts keep working; only cross-instance delivery stops
            logger.error(f"Broadcast relay listener on {self.channel} stopped: {e}")


class WebSocketHandler:
    """Handles WebSocket message processing"""

    def __init__(self, manager: ConnectionManager):
        self.manager = manager

    @staticmethod
    def parse_message(data: str) -> Dict:
        try:
            message = json.loads(data)
        except ValueError:
            # Bare text frames such as "ping"
            return {"type": data.strip()}
        return message if isinstance(message, dict) else {}

    async def handle_client_message(self, websocket: WebSocket, message: Dict):
        """Process messages received from clients"""
        if message.get("type") == "ping":
            await websocket.send_json({
                "type": "pong",
                "timestamp": utc_now()
            })
        # Anything else is ignored; the channel is server-to-client


# Global connection manager
connection_manager = ConnectionManager()
websocket_handler = WebSocketHandler(connection_manager)


def get_notifier() -> Notifier:
    """Dependency returning the application notifier"""
    return connection_manager


async def websocket_endpoint(websocket: WebSocket):
    """Session loop: Disconnected -> Connected until the client goes away"""
    await connection_manager.connect(websocket)

    try:
        while True:
            try:
                data = await asyncio.wait_for(
                    websocket.receive_text(),
                    timeout=settings.WS_HEARTBEAT_INTERVAL
                )
            except asyncio.TimeoutError:
                await websocket.send_json({"type": "heartbeat", "timestamp": utc_now()})
                continue
            message = websocket_handler.parse_message(data)
            await websocket_handler.handle_client_message(websocket, message)

    except WebSocketDisconnect:
        connection_manager.disconnect(websocket)
    except Exception as e:
        logger.error(f"WebSocket error: {e}")
        connection_manager.disconnect(websocket)
