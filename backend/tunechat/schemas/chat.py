"""Chat Schemas — socket frames, chat message views, and acknowledgements.

Invariants:
    - ChatSendPayload.text is optional and strictly a string when present
    - ChatMessageView.id / userId are always strings on the wire
    - Ack.message is an error string on failure, the broadcast view on success
    - InboundFrame tolerates missing data (defaults to empty object)
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictStr


class ChatSendPayload(BaseModel):
    """chat:send payload — unknown keys ignored, text type-checked strictly."""
    model_config = ConfigDict(extra="ignore")

    text: StrictStr | None = None


class ChatMessageView(BaseModel):
    """chat:message payload broadcast to every admitted connection."""
    id: str
    userId: str
    userName: str
    text: str
    createdAt: datetime


class Ack(BaseModel):
    """Acknowledgement returned to the sender of chat:send."""
    success: bool
    message: str | ChatMessageView


class ConnectPayload(BaseModel):
    """Data of the first client frame — the handshake payload."""
    model_config = ConfigDict(extra="ignore")

    auth: dict[str, Any] | None = None


class InboundFrame(BaseModel):
    """Client → Server."""
    event: str
    data: Any = Field(default_factory=dict)
    ackId: int | None = None


class OutboundFrame(BaseModel):
    """Server → Client."""
    event: str
    data: Any = Field(default_factory=dict)
    ackId: int | None = None

    def to_wire(self) -> dict:
        frame = self.model_dump(mode="json")
        if frame["ackId"] is None:
            del frame["ackId"]
        return frame


class ChatHistoryResponse(BaseModel):
    messages: list[ChatMessageView]
