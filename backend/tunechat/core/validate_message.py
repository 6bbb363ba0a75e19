"""Message Validation — total function from raw chat:send payload to a tagged result.

Invariants:
    - Never raises: every input maps to MessageAccepted or MessageRejected
    - Accepted text is trimmed and non-empty
    - Missing, non-string, empty, or whitespace-only text → "Message is required"
    - Non-object payloads are treated as an empty payload
"""

from dataclasses import dataclass
from typing import Any

import pydantic

from tunechat.core.errors import ValidationError
from tunechat.schemas.chat import ChatSendPayload

MESSAGE_REQUIRED = "Message is required"


@dataclass(frozen=True)
class MessageAccepted:
    text: str


@dataclass(frozen=True)
class MessageRejected:
    error: ValidationError


MessageValidation = MessageAccepted | MessageRejected


def _rejected() -> MessageRejected:
    return MessageRejected(ValidationError(MESSAGE_REQUIRED, field="text"))


def validate_chat_send(payload: Any) -> MessageValidation:
    """Validate a chat:send payload against ChatSendPayload."""
    if not isinstance(payload, dict):
        payload = {}
    try:
        parsed = ChatSendPayload.model_validate(payload)
    except pydantic.ValidationError:
        return _rejected()
    text = (parsed.text or "").strip()
    if not text:
        return _rejected()
    return MessageAccepted(text)
