"""Message Formatting tests — wire shape of chat:message, ack, and connect frames."""

from datetime import datetime, timezone
from uuid import uuid4

from tunechat.core.domain_types import ChatMessageRecord, MessageId, UserId
from tunechat.core.format_messages import (
    ack_frame, chat_message_frame, connect_frame, to_message_view,
)
from tunechat.schemas.chat import Ack


def _record(text="hello"):
    return ChatMessageRecord(
        id=MessageId(uuid4()),
        user_id=UserId(uuid4()),
        user_name="Alice",
        text=text,
        created_at=datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
    )


def test_view_stringifies_ids():
    record = _record()
    view = to_message_view(record)
    assert view.id == str(record.id)
    assert view.userId == str(record.user_id)
    assert view.userName == "Alice"
    assert view.text == "hello"


def test_chat_message_frame_is_json_ready():
    frame = chat_message_frame(to_message_view(_record()))
    assert frame["event"] == "chat:message"
    assert "ackId" not in frame
    assert set(frame["data"]) == {"id", "userId", "userName", "text", "createdAt"}
    assert frame["data"]["createdAt"].startswith("2026-01-02T03:04:05")


def test_ack_frame_carries_ack_id_and_view():
    view = to_message_view(_record())
    frame = ack_frame(7, Ack(success=True, message=view))
    assert frame["event"] == "ack"
    assert frame["ackId"] == 7
    assert frame["data"]["success"] is True
    assert frame["data"]["message"]["id"] == view.id


def test_failed_ack_frame_carries_error_text():
    frame = ack_frame(1, Ack(success=False, message="Message is required"))
    assert frame["data"] == {"success": False, "message": "Message is required"}


def test_connect_frame():
    frame = connect_frame("u1", "Alice")
    assert frame == {"event": "connect", "data": {"userId": "u1", "userName": "Alice"}}
