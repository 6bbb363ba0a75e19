"""Origin Policy — allow/deny decision for HTTP CORS and WebSocket handshakes.

Invariants:
    - Pure function: no IO, no async
    - No declared origin → allow (non-browser clients send none)
    - Empty allow-list → allow everything
    - Exact string match → allow
    - Same hostname (scheme and port ignored) as any allow-list entry → allow
    - Unparseable origin or entry never matches and never raises
    - HTTP CORS middleware and the socket handshake share is_origin_allowed()

Design Decisions:
    - Hostname match lets a frontend on :5173 reach the gateway on :4000 from the
      same LAN host without listing every port
"""

from urllib.parse import urlsplit

from tunechat.core.errors import PolicyError


def parse_allowed_origins(raw: str | list[str] | None) -> list[str]:
    """Split a comma-separated allow-list, trimming and dropping blanks."""
    if raw is None:
        return []
    items = raw.split(",") if isinstance(raw, str) else raw
    return [s.strip() for s in items if s and s.strip()]


def _hostname(url: str) -> str | None:
    try:
        host = urlsplit(url).hostname
    except ValueError:
        return None
    return host or None


def is_origin_allowed(origin: str | None, allowed_origins: list[str]) -> bool:
    """Decide whether a declared origin may connect."""
    if not origin:
        return True
    if not allowed_origins:
        return True
    if origin in allowed_origins:
        return True
    host = _hostname(origin)
    if host is None:
        return False
    return any(_hostname(entry) == host for entry in allowed_origins)


def check_origin(origin: str | None, allowed_origins: list[str]) -> None:
    """Raise PolicyError when the origin is denied."""
    if not is_origin_allowed(origin, allowed_origins):
        raise PolicyError(origin or "")
