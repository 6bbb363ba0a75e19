"""Origin-Policy CORS — Starlette CORS middleware driven by core/origin_policy.py.

Invariants:
    - HTTP CORS and the WebSocket handshake answer with the same allow set
    - Allowed origins are echoed explicitly (never "*"), credentials allowed
    - Non-HTTP scopes pass through untouched (the socket route checks origin itself)
    - A denied origin is still served on simple requests, only without CORS
      headers, so the browser withholds the response; a denied preflight gets 400.
      The socket route instead closes a denied origin with 1008 before accept
"""

from starlette.middleware.cors import CORSMiddleware
from starlette.types import ASGIApp

from tunechat.core.origin_policy import is_origin_allowed


class OriginPolicyCORSMiddleware(CORSMiddleware):
    def __init__(self, app: ASGIApp, allowed_origins: list[str]) -> None:
        super().__init__(
            app,
            allow_origins=(),
            allow_methods=["*"],
            allow_headers=["*"],
            allow_credentials=True,
        )
        self.allowed_origins = list(allowed_origins)

    def is_allowed_origin(self, origin: str) -> bool:
        return is_origin_allowed(origin, self.allowed_origins)
