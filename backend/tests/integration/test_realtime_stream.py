"""
Integration Tests - Realtime WebSocket
Subscribe, receive forwarded changes, unsubscribe.
"""
import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from gridbazaar.config import settings
from gridbazaar.realtime.broker import ChangeEvent


API = settings.API_V1_PREFIX
LISTINGS = "voltmarket_listings"


@pytest.fixture
def ws_client(app):
    return TestClient(app)


def connect(client, token):
    return client.websocket_connect(f"{API}/ws/realtime?token={token}")


class TestRealtimeStream:

    def test_rejects_invalid_token(self, ws_client):
        with pytest.raises(WebSocketDisconnect) as exc_info:
            with connect(ws_client, "not-a-jwt") as ws:
                ws.receive_json()

        assert exc_info.value.code == 4001

    def test_rejects_expired_token(self, ws_client, expired_access_token):
        with pytest.raises(WebSocketDisconnect) as exc_info:
            with connect(ws_client, expired_access_token) as ws:
                ws.receive_json()

        assert exc_info.value.code == 4001

    def test_subscribe_forward_unsubscribe(self, ws_client, broker, valid_access_token):
        with connect(ws_client, valid_access_token) as ws:
            assert ws.receive_json() == {
                "type": "connected",
                "message": "Successfully connected to realtime changes",
                "user_id": 1,
            }

            ws.send_json({"action": "subscribe", "table": LISTINGS, "filter": "seller_id=eq.7"})
            subscribed = ws.receive_json()
            assert subscribed["type"] == "subscribed"
            assert subscribed["event"] == "INSERT"
            assert subscribed["filter"] == "seller_id=eq.7"
            assert broker.subscription_count == 1

            # Published on the connection's own event loop
            ws.portal.call(broker.publish, ChangeEvent(LISTINGS, "INSERT", new={"id": 1, "seller_id": 8}))
            ws.portal.call(broker.publish, ChangeEvent(LISTINGS, "INSERT", new={"id": 2, "seller_id": 7}))

            change = ws.receive_json()
            assert change["type"] == "change"
            assert change["subscription_id"] == subscribed["subscription_id"]
            assert change["payload"]["table"] == LISTINGS
            assert change["payload"]["eventType"] == "INSERT"
            assert change["payload"]["new"] == {"id": 2, "seller_id": 7}

            ws.send_json({"action": "unsubscribe", "subscription_id": subscribed["subscription_id"]})
            assert ws.receive_json() == {
                "type": "unsubscribed",
                "subscription_id": subscribed["subscription_id"],
            }
            assert broker.subscription_count == 0

            delivered = ws.portal.call(broker.publish, ChangeEvent(LISTINGS, "INSERT", new={"seller_id": 7}))
            assert delivered == 0

    def test_ping(self, ws_client, valid_access_token):
        with connect(ws_client, valid_access_token) as ws:
            ws.receive_json()
            ws.send_json({"action": "ping"})

            assert ws.receive_json() == {"type": "pong"}

    def test_protocol_errors(self, ws_client, valid_access_token):
        with connect(ws_client, valid_access_token) as ws:
            ws.receive_json()

            ws.send_text("{not json")
            assert ws.receive_json() == {"type": "error", "message": "Invalid JSON format"}

            ws.send_json({"action": "subscribe"})
            assert ws.receive_json() == {"type": "error", "message": "table is required"}

            ws.send_json({"action": "unsubscribe", "subscription_id": 99})
            assert ws.receive_json()["message"] == "Unknown subscription: 99"

            ws.send_json({"action": "shout"})
            assert ws.receive_json()["message"] == "Unknown action: shout"

    def test_disconnect_releases_subscriptions(self, ws_client, broker, valid_access_token):
        with connect(ws_client, valid_access_token) as ws:
            ws.receive_json()
            ws.send_json({"action": "subscribe", "table": LISTINGS, "event": "*"})
            ws.receive_json()
            assert broker.subscription_count == 1

        assert broker.subscription_count == 0
