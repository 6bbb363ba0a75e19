"""Message Validation tests — total function over arbitrary chat:send payloads."""

import pytest

from tunechat.core.errors import ValidationError
from tunechat.core.validate_message import (
    MESSAGE_REQUIRED, MessageAccepted, MessageRejected, validate_chat_send,
)


def test_text_is_trimmed():
    assert validate_chat_send({"text": "  hello  "}) == MessageAccepted("hello")


@pytest.mark.parametrize("payload", [
    {"text": ""},
    {"text": "   \n\t "},
    {},
    {"text": None},
    {"text": 42},
    {"text": ["hello"]},
    None,
    "hello",
    [1, 2],
])
def test_missing_or_blank_text_is_rejected(payload):
    result = validate_chat_send(payload)
    assert isinstance(result, MessageRejected)
    assert isinstance(result.error, ValidationError)
    assert result.error.message == MESSAGE_REQUIRED
    assert result.error.field == "text"


def test_unknown_keys_are_ignored():
    result = validate_chat_send({"text": "hi", "room": "general"})
    assert result == MessageAccepted("hi")
