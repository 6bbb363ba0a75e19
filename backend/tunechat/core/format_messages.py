"""Message Formatting — persisted records to wire views and socket frames."""

from tunechat.core.domain_types import ChatEvent, ChatMessageRecord
from tunechat.schemas.chat import Ack, ChatMessageView, OutboundFrame


def to_message_view(record: ChatMessageRecord) -> ChatMessageView:
    return ChatMessageView(
        id=str(record.id),
        userId=str(record.user_id),
        userName=record.user_name,
        text=record.text,
        createdAt=record.created_at,
    )


def chat_message_frame(view: ChatMessageView) -> dict:
    return OutboundFrame(event=ChatEvent.MESSAGE.value, data=view).to_wire()


def ack_frame(ack_id: int, ack: Ack) -> dict:
    return OutboundFrame(event=ChatEvent.ACK.value, data=ack, ackId=ack_id).to_wire()


def connect_frame(user_id: str, user_name: str) -> dict:
    return OutboundFrame(
        event=ChatEvent.CONNECT.value,
        data={"userId": user_id, "userName": user_name},
    ).to_wire()
