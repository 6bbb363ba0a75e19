"""Chat Socket tests — end-to-end WebSocket handshake, chat:send, and assistant reply.

Tests cover:
    - Each credential source admits the connection
    - No credential / expired / malformed → connect_error + close 4401, never admitted
    - Disallowed origin closed with 1008 before accept
    - "hello" → broadcast + success ack, then an assistant chat:message
    - Empty text → failure ack, nothing broadcast
    - Malformed frames and unknown events keep the socket open
    - Disconnect removes the connection from the registry

Design Decisions:
    - Starlette TestClient (sync) drives the socket; assistant sleep is a no-op
    - One socket per test: each TestClient session runs its own event loop
"""

from datetime import timedelta

import pytest
from starlette.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from tunechat.core.domain_types import ASSISTANT_USER_ID

from tests.services.fakes import make_token


@pytest.fixture
def client(app):
    return TestClient(app)


def _connect_frame(token=None):
    data = {"auth": {"token": token}} if token else {}
    return {"event": "connect", "data": data}


def _receive_until(ws, count):
    return [ws.receive_json() for _ in range(count)]


def test_auth_field_admits_and_greets(client, gateway, alice_id):
    with client.websocket_connect("/ws/chat") as ws:
        ws.send_json(_connect_frame(make_token(alice_id)))
        frame = ws.receive_json()
        assert frame == {
            "event": "connect",
            "data": {"userId": str(alice_id), "userName": "Alice"},
        }
        assert len(gateway.registry) == 1


def test_query_token_admits(client, alice_id):
    with client.websocket_connect(f"/ws/chat?token={make_token(alice_id)}") as ws:
        ws.send_json(_connect_frame())
        assert ws.receive_json()["event"] == "connect"


def test_bearer_header_admits(client, alice_id):
    headers = {"Authorization": f"Bearer {make_token(alice_id)}"}
    with client.websocket_connect("/ws/chat", headers=headers) as ws:
        ws.send_json(_connect_frame())
        assert ws.receive_json()["event"] == "connect"


@pytest.mark.parametrize("token_factory", [
    lambda uid: None,
    lambda uid: make_token(uid, expires_in=timedelta(seconds=-5)),
    lambda uid: "malformed.token.value",
    lambda uid: make_token(uid, secret="wrong"),
])
def test_bad_credentials_are_never_admitted(client, gateway, alice_id, token_factory):
    with client.websocket_connect("/ws/chat") as ws:
        ws.send_json(_connect_frame(token_factory(alice_id)))
        frame = ws.receive_json()
        assert frame["event"] == "connect_error"
        assert frame["data"]["message"] == "Authentication error"
        with pytest.raises(WebSocketDisconnect) as exc:
            ws.receive_json()
        assert exc.value.code == 4401
    assert len(gateway.registry) == 0


def test_first_frame_must_be_connect(client, gateway, alice_id):
    with client.websocket_connect(f"/ws/chat?token={make_token(alice_id)}") as ws:
        ws.send_json({"event": "chat:send", "data": {"text": "hi"}})
        assert ws.receive_json()["event"] == "connect_error"
    assert len(gateway.registry) == 0


def test_handshake_timeout_rejects(client, gateway):
    gateway.handshake_timeout_seconds = 0.05
    with client.websocket_connect("/ws/chat") as ws:
        assert ws.receive_json()["event"] == "connect_error"


def test_disallowed_origin_closed_before_accept(client, gateway):
    gateway.allowed_origins = ["http://a.com"]
    with pytest.raises(WebSocketDisconnect) as exc:
        with client.websocket_connect(
            "/ws/chat", headers={"origin": "http://b.com"},
        ):
            pass
    assert exc.value.code == 1008


def test_same_host_origin_on_other_port_is_accepted(client, gateway, alice_id):
    gateway.allowed_origins = ["http://a.com"]
    with client.websocket_connect(
        "/ws/chat", headers={"origin": "http://a.com:9999"},
    ) as ws:
        ws.send_json(_connect_frame(make_token(alice_id)))
        assert ws.receive_json()["event"] == "connect"


def test_hello_gets_broadcast_ack_and_assistant_reply(client, store, alice_id):
    with client.websocket_connect("/ws/chat") as ws:
        ws.send_json(_connect_frame(make_token(alice_id)))
        ws.receive_json()
        ws.send_json({"event": "chat:send", "data": {"text": " hello "}, "ackId": 1})

        frames = _receive_until(ws, 3)

    acks = [f for f in frames if f["event"] == "ack"]
    messages = [f["data"] for f in frames if f["event"] == "chat:message"]
    assert len(acks) == 1
    assert acks[0]["ackId"] == 1
    assert acks[0]["data"]["success"] is True
    assert len(messages) == 2
    user_msg, bot_msg = messages
    assert user_msg["userName"] == "Alice"
    assert user_msg["text"] == "hello"
    assert acks[0]["data"]["message"]["id"] == user_msg["id"]
    assert bot_msg["userId"] == str(ASSISTANT_USER_ID)
    assert bot_msg["text"].strip()
    assert len(store.records) == 2


def test_empty_text_acks_failure_without_broadcast(client, store, alice_id):
    with client.websocket_connect("/ws/chat") as ws:
        ws.send_json(_connect_frame(make_token(alice_id)))
        ws.receive_json()
        ws.send_json({"event": "chat:send", "data": {"text": "   "}, "ackId": 9})
        frame = ws.receive_json()

    assert frame == {
        "event": "ack",
        "ackId": 9,
        "data": {"success": False, "message": "Message is required"},
    }
    assert store.records == []


def test_malformed_frames_and_unknown_events_are_ignored(client, alice_id):
    with client.websocket_connect("/ws/chat") as ws:
        ws.send_json(_connect_frame(make_token(alice_id)))
        ws.receive_json()
        ws.send_text("not json")
        ws.send_json(["not", "an", "object"])
        ws.send_json({"event": "typing", "data": {}})
        ws.send_json({"event": "chat:send", "data": {"text": ""}, "ackId": 2})
        frame = ws.receive_json()

    assert frame["event"] == "ack"
    assert frame["ackId"] == 2


def test_disconnect_removes_connection(client, gateway, alice_id):
    with client.websocket_connect("/ws/chat") as ws:
        ws.send_json(_connect_frame(make_token(alice_id)))
        ws.receive_json()
        assert len(gateway.registry) == 1
    # the server task finishes its finally block before the session exits
    assert len(gateway.registry) == 0
