"""Credential Extraction — picks the bearer token out of a connection handshake.

Invariants:
    - Priority: handshake auth field → ``token`` query param → Authorization: Bearer
    - Exactly one source is used: the first non-empty one wins
    - Returns None when no source carries a token (caller raises AuthenticationError)
"""

from collections.abc import Mapping
from typing import Any

_BEARER_PREFIX = "Bearer "


def _non_empty_str(value: Any) -> str | None:
    if isinstance(value, str) and value:
        return value
    return None


def token_from_authorization(header: str | None) -> str | None:
    """Strip the ``Bearer `` prefix; any other scheme yields None."""
    if not header or not header.startswith(_BEARER_PREFIX):
        return None
    return _non_empty_str(header[len(_BEARER_PREFIX):])


def extract_credential(
    auth: Mapping[str, Any] | None,
    query: Mapping[str, str],
    headers: Mapping[str, str],
) -> str | None:
    """Return the credential from the highest-priority source present."""
    if auth:
        token = _non_empty_str(auth.get("token"))
        if token:
            return token
    token = _non_empty_str(query.get("token"))
    if token:
        return token
    return token_from_authorization(headers.get("authorization"))
