"""Route Dependencies — gateway lookup and bearer-credential guard for HTTP routes."""

from fastapi import Request

from tunechat.core.domain_types import Identity
from tunechat.services.gateway import ChatGateway


def get_gateway(request: Request) -> ChatGateway:
    return request.app.state.gateway


async def require_identity(request: Request) -> Identity:
    """Same verifier as the socket handshake, minus the handshake auth field."""
    gateway = get_gateway(request)
    return await gateway.verifier.verify(
        None, request.query_params, request.headers,
    )
