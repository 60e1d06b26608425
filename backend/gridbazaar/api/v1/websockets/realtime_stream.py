"""
WebSocket endpoint for realtime table changes.

Clients subscribe to a table (optionally an event type and a
``column=eq.value`` filter) and receive every matching change event.
"""
import asyncio
import json
from typing import Dict, Optional, Set

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect
from loguru import logger

from gridbazaar.core.security import verify_token
from gridbazaar.realtime.broker import RealtimeBroker, Subscription

router = APIRouter()


class RealtimeConnection:
    """Subscriptions of one WebSocket and the tasks forwarding them."""
    
    def __init__(self, websocket: WebSocket, broker: RealtimeBroker, user_id: int):
        self.websocket = websocket
        self.broker = broker
        self.user_id = user_id
        self.forwarders: Dict[int, asyncio.Task] = {}
        self.subscriptions: Dict[int, Subscription] = {}
    
    def subscribe(self, table: str, event: str = "INSERT", filter: Optional[str] = None) -> Subscription:
        subscription = self.broker.subscribe(table, event=event, filter=filter)
        self.subscriptions[subscription.id] = subscription
        self.forwarders[subscription.id] = asyncio.create_task(self._forward(subscription))
        return subscription
    
    def unsubscribe(self, subscription_id: int) -> bool:
        subscription = self.subscriptions.pop(subscription_id, None)
        if subscription is None:
            return False
        self.broker.unsubscribe(subscription)
        task = self.forwarders.pop(subscription_id, None)
        if task is not None:
            task.cancel()
        return True
    
    async def _forward(self, subscription: Subscription):
        while True:
            change = await subscription.get()
            await self.websocket.send_json({
                "type": "change",
                "subscription_id": subscription.id,
                "payload": change.to_dict(),
            })
    
    def close(self):
        for subscription_id in list(self.subscriptions):
            self.unsubscribe(subscription_id)


class RealtimeConnectionManager:
    """Tracks open realtime connections per user."""
    
    def __init__(self):
        self.active_connections: Dict[int, Set[RealtimeConnection]] = {}
    
    async def connect(self, connection: RealtimeConnection):
        await connection.websocket.accept()
        self.active_connections.setdefault(connection.user_id, set()).add(connection)
        logger.info(f"Realtime WebSocket connected: user_id={connection.user_id}")
    
    def disconnect(self, connection: RealtimeConnection):
        connection.close()
        connections = self.active_connections.get(connection.user_id)
        if connections is not None:
            connections.discard(connection)
            if not connections:
                del self.active_connections[connection.user_id]
        logger.info(f"Realtime WebSocket disconnected: user_id={connection.user_id}")
    
    def get_stats(self) -> dict:
        return {
            "total_connections": sum(len(c) for c in self.active_connections.values()),
            "unique_users": len(self.active_connections),
            "subscriptions": sum(
                len(conn.subscriptions)
                for conns in self.active_connections.values()
                for conn in conns
            ),
        }


realtime_manager = RealtimeConnectionManager()


def verify_ws_token(token: str) -> Optional[int]:
    """User id of a valid access token."""
    subject = verify_token(token, token_type="access")
    try:
        return int(subject) if subject is not None else None
    except ValueError:
        return None


async def _handle_message(connection: RealtimeConnection, message: dict):
    websocket = connection.websocket
    action = message.get("action")
    
    if action == "subscribe":
        table = message.get("table")
        if not table:
            await websocket.send_json({"type": "error", "message": "table is required"})
            return
        try:
            subscription = connection.subscribe(
                table,
                event=message.get("event", "INSERT"),
                filter=message.get("filter"),
            )
        except ValueError as e:
            await websocket.send_json({"type": "error", "message": str(e)})
            return
        await websocket.send_json({
            "type": "subscribed",
            "subscription_id": subscription.id,
            "table": subscription.table,
            "event": subscription.event,
            "filter": subscription.filter,
        })
    
    elif action == "unsubscribe":
        subscription_id = message.get("subscription_id")
        removed = isinstance(subscription_id, int) and connection.unsubscribe(subscription_id)
        if removed:
            await websocket.send_json({"type": "unsubscribed", "subscription_id": subscription_id})
        else:
            await websocket.send_json({
                "type": "error",
                "message": f"Unknown subscription: {subscription_id}"
            })
    
    elif action == "ping":
        await websocket.send_json({"type": "pong"})
    
    else:
        await websocket.send_json({
            "type": "error",
            "message": f"Unknown action: {action}"
        })


@router.websocket("/ws/realtime")
async def websocket_realtime_endpoint(
    websocket: WebSocket,
    token: str = Query(...)
):
    """
    WebSocket endpoint for realtime change events.
    
    Connect with: ws://localhost:8000/api/v1/ws/realtime?token=<jwt_token>
    
    Message types to send:
    - {"action": "subscribe", "table": "voltmarket_listings", "event": "INSERT", "filter": "seller_id=eq.7"}
    - {"action": "unsubscribe", "subscription_id": 1}
    - {"action": "ping"}
    
    Message types received:
    - {"type": "connected", "user_id": 1}
    - {"type": "subscribed", "subscription_id": 1, ...}
    - {"type": "change", "subscription_id": 1, "payload": {...}}
    - {"type": "pong"}
    - {"type": "error", "message": "..."}
    """
    user_id = verify_ws_token(token)
    if user_id is None:
        await websocket.close(code=4001, reason="Invalid or expired token")
        return
    
    broker: RealtimeBroker = websocket.app.state.realtime_broker
    connection = RealtimeConnection(websocket, broker, user_id)
    await realtime_manager.connect(connection)
    
    try:
        await websocket.send_json({
            "type": "connected",
            "message": "Successfully connected to realtime changes",
            "user_id": user_id
        })
        
        while True:
            data = await websocket.receive_text()
            try:
                message = json.loads(data)
            except json.JSONDecodeError:
                await websocket.send_json({
                    "type": "error",
                    "message": "Invalid JSON format"
                })
                continue
            if not isinstance(message, dict):
                await websocket.send_json({"type": "error", "message": "Expected a JSON object"})
                continue
            await _handle_message(connection, message)
    
    except WebSocketDisconnect:
        realtime_manager.disconnect(connection)
    except Exception as e:
        logger.error(f"Realtime WebSocket error for user {user_id}: {e}")
        realtime_manager.disconnect(connection)


@router.get("/ws/realtime/stats")
async def get_realtime_ws_stats():
    """Realtime connection and broker statistics."""
    return realtime_manager.get_stats()
