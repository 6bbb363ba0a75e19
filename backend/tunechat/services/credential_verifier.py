"""Credential Verifier — bearer token → authenticated Identity.

Invariants:
    - Exactly one credential source used (see core/extract_credential.py)
    - Missing, malformed, badly signed, or expired token → AuthenticationError
    - Subject id taken from the ``id`` claim (``sub`` accepted as fallback)
    - Subject must resolve in the user directory, else AuthenticationError
    - Directory outages are reported as AuthenticationError too: the attempt
      fails, the gateway keeps running
    - No partial state escapes: the caller gets an Identity or an exception
"""

import logging
from collections.abc import Mapping
from typing import Any
from uuid import UUID

import jwt

from tunechat.core.domain_types import Identity, UserId
from tunechat.core.errors import AuthenticationError, ErrorContext, PersistenceError
from tunechat.core.extract_credential import extract_credential
from tunechat.core.repository_protocols import UserDirectory

logger = logging.getLogger(__name__)


class CredentialVerifier:
    def __init__(
        self,
        users: UserDirectory,
        secret: str,
        algorithm: str = "HS256",
        leeway_seconds: int = 0,
    ):
        self._users = users
        self._secret = secret
        self._algorithm = algorithm
        self._leeway = leeway_seconds

    async def verify(
        self,
        auth: Mapping[str, Any] | None,
        query: Mapping[str, str],
        headers: Mapping[str, str],
    ) -> Identity:
        """Extract and verify the credential from a connection handshake."""
        token = extract_credential(auth, query, headers)
        return await self.verify_token(token)

    async def verify_token(self, token: str | None) -> Identity:
        if not token:
            raise AuthenticationError("no credential supplied")
        user_id = self._decode_subject(token)
        try:
            user = await self._users.find_by_id(user_id)
        except PersistenceError as e:
            logger.error(
                f"User lookup failed during authentication: {e.message}",
                extra={"error_code": e.code, "user_id": str(user_id)},
            )
            raise AuthenticationError(
                "user directory unavailable", ErrorContext(user_id=str(user_id)),
            ) from e
        if user is None:
            raise AuthenticationError(
                "unknown user", ErrorContext(user_id=str(user_id)),
            )
        return Identity(user_id=user.id, user_name=user.name)

    def _decode_subject(self, token: str) -> UserId:
        try:
            claims = jwt.decode(
                token, self._secret,
                algorithms=[self._algorithm],
                leeway=self._leeway,
            )
        except jwt.ExpiredSignatureError as e:
            raise AuthenticationError("credential expired") from e
        except jwt.InvalidTokenError as e:
            raise AuthenticationError(f"invalid credential: {e}") from e
        subject = claims.get("id") or claims.get("sub")
        try:
            return UserId(UUID(str(subject)))
        except (TypeError, ValueError) as e:
            raise AuthenticationError("credential subject is not a user id") from e
