"""Chat Socket — WebSocket endpoint: origin check, handshake auth, frame loop.

Invariants:
    - Origin checked BEFORE accept; denied → close 1008, never accepted
    - First frame must be ``connect`` within the handshake timeout; its
      ``data.auth`` is the highest-priority credential source
    - Auth failure → connect_error frame, close 4401, never admitted
    - Malformed frames and unknown events are ignored; the socket stays open
    - chat:send with ackId gets exactly one ack frame, after the broadcast
    - The connection is removed from the registry however the loop exits
    - A connection evicted by a failed or stalled broadcast ends its loop

Design Decisions:
    - Frames handled sequentially per connection; connections run concurrently
      with each other (one task per socket)
    - JSON envelope {event, data, ackId} mirrors the event/ack model browsers
      already use for realtime chat, on a plain WebSocket
"""

import asyncio
import logging
from typing import Any

import pydantic
from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from tunechat.core.domain_types import ChatEvent, CloseCode, Identity
from tunechat.core.errors import AuthenticationError, PolicyError
from tunechat.core.format_messages import ack_frame, connect_frame
from tunechat.core.origin_policy import check_origin
from tunechat.schemas.chat import ConnectPayload, InboundFrame
from tunechat.services.connection_registry import Connection
from tunechat.services.gateway import ChatGateway

logger = logging.getLogger(__name__)
router = APIRouter(tags=["chat"])


@router.websocket("/ws/chat")
async def chat_socket(websocket: WebSocket):
    gateway: ChatGateway = websocket.app.state.gateway
    origin = websocket.headers.get("origin")
    try:
        check_origin(origin, gateway.allowed_origins)
    except PolicyError as e:
        logger.warning(e.message, extra={"error_code": e.code, "origin": origin})
        await websocket.close(code=CloseCode.POLICY_VIOLATION.value)
        return

    await websocket.accept()
    try:
        identity = await _authenticate(websocket, gateway)
    except AuthenticationError as e:
        logger.warning(
            f"Connection rejected: {e.reason}",
            extra={"error_code": e.code, "user_id": e.context.user_id},
        )
        await _reject(websocket, e)
        return
    except WebSocketDisconnect:
        return

    connection = gateway.registry.admit(websocket, identity)
    try:
        await connection.send(
            connect_frame(str(identity.user_id), identity.user_name),
        )
        await _serve(connection, websocket, gateway)
    except WebSocketDisconnect:
        pass
    except Exception as e:
        logger.error(
            f"Socket loop failed: {e}",
            extra={"connection_id": connection.connection_id},
            exc_info=True,
        )
    finally:
        gateway.registry.remove(connection)


# -- Handshake ---------------------------------------------------------------

async def _receive_text(websocket: WebSocket) -> str | None:
    """Next text frame; None for binary frames. Raises WebSocketDisconnect."""
    message = await websocket.receive()
    if message["type"] == "websocket.disconnect":
        raise WebSocketDisconnect(message.get("code", 1000))
    return message.get("text")


def _parse_frame(raw: str | None) -> InboundFrame | None:
    if raw is None:
        return None
    try:
        return InboundFrame.model_validate_json(raw)
    except pydantic.ValidationError:
        return None


async def _read_handshake_auth(
    websocket: WebSocket, timeout: float,
) -> dict[str, Any] | None:
    try:
        raw = await asyncio.wait_for(_receive_text(websocket), timeout)
    except asyncio.TimeoutError as e:
        raise AuthenticationError("handshake timed out") from e
    frame = _parse_frame(raw)
    if frame is None or frame.event != ChatEvent.CONNECT.value:
        raise AuthenticationError("expected connect frame")
    try:
        payload = ConnectPayload.model_validate(frame.data or {})
    except pydantic.ValidationError as e:
        raise AuthenticationError("malformed connect frame") from e
    return payload.auth


async def _authenticate(websocket: WebSocket, gateway: ChatGateway) -> Identity:
    auth = await _read_handshake_auth(websocket, gateway.handshake_timeout_seconds)
    return await gateway.verifier.verify(
        auth, websocket.query_params, websocket.headers,
    )


async def _reject(websocket: WebSocket, error: AuthenticationError) -> None:
    try:
        await websocket.send_json(error.to_event())
        await websocket.close(code=CloseCode.UNAUTHORIZED.value)
    except (WebSocketDisconnect, RuntimeError) as e:
        logger.debug(f"Client gone before rejection was delivered: {e}")


# -- Frame loop ----------------------------------------------------------------

async def _serve(
    connection: Connection, websocket: WebSocket, gateway: ChatGateway,
) -> None:
    while True:
        frame = _parse_frame(await _receive_text(websocket))
        if frame is None:
            logger.debug(
                "Ignoring malformed frame",
                extra={"connection_id": connection.connection_id},
            )
            continue
        if frame.event != ChatEvent.SEND.value:
            logger.debug(
                f"Ignoring event {frame.event}",
                extra={"connection_id": connection.connection_id, "event": frame.event},
            )
            continue
        ack = await gateway.pipeline.handle(connection, frame.data)
        if connection not in gateway.registry:
            logger.info(
                "Connection evicted by broadcast, closing",
                extra={"connection_id": connection.connection_id},
            )
            return
        if frame.ackId is not None:
            await connection.send(ack_frame(frame.ackId, ack))
