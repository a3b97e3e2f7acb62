"""Scoped platform tokens carried by webhook callbacks.

Uses python-jose for JWT encoding/decoding. Tokens are signed with the
application SECRET_KEY using HS256 and carry:

- ``sub``: the platform user id
- ``scope``: the single capability the token grants (e.g. ``prebuilds``)
- ``subject``: the clone URL the token was minted for

Webhook URLs transport the token as ``?token=<user id>|<token>``.
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Protocol, Tuple

from jose import JWTError, jwt

from ..models.tokens import ScopedTokenEntry, TokenValue
from ..models.user import User

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
CREDENTIAL_SEPARATOR = "|"


class ScopedTokenIssuer(Protocol):
    """Mints platform tokens limited to one scope and subject."""

    async def create_scoped_token(self, user: User, scope: str, subject_url: str) -> ScopedTokenEntry:
        ...


class JWTScopedTokenIssuer:
    """ScopedTokenIssuer backed by signed JWTs.

    Tokens are self-contained, so revocation is by expiry or key rotation.
    """

    def __init__(self, secret_key: str, expires_delta: Optional[timedelta] = None):
        self.secret_key = secret_key
        self.expires_delta = expires_delta or timedelta(days=365)

    async def create_scoped_token(self, user: User, scope: str, subject_url: str) -> ScopedTokenEntry:
        now = datetime.now(timezone.utc)
        payload: Dict[str, Any] = {
            "sub": user.id,
            "scope": scope,
            "subject": subject_url,
            "type": "scoped",
            "jti": str(uuid.uuid4()),
            "iat": now,
            "exp": now + self.expires_delta,
        }
        value = jwt.encode(payload, self.secret_key, algorithm=ALGORITHM)
        logger.info("Issued '%s' token for user %s on %s", scope, user.id, subject_url)
        return ScopedTokenEntry(token=TokenValue(value=value), scope=scope, subject_url=subject_url)

    def decode_scoped_token(self, token: str, scope: str) -> Dict[str, Any]:
        """Decode and validate a scoped token.

        Validates signature, expiry and scope. Returns the full payload dict on success.

        Raises:
            JWTError: On invalid signature, expired token, malformed JWT or wrong scope.
        """
        payload = jwt.decode(token, self.secret_key, algorithms=[ALGORITHM])
        if payload.get("scope") != scope:
            raise JWTError(f"Token scope '{payload.get('scope')}' does not grant '{scope}'")
        return payload


def build_webhook_credential(user_id: str, token: str) -> str:
    """Compose the ``token`` query value of a webhook callback URL."""
    return f"{user_id}{CREDENTIAL_SEPARATOR}{token}"


def parse_webhook_credential(value: str) -> Tuple[str, str]:
    """Split a webhook ``token`` query value into (user id, token).

    Raises:
        ValueError: If either part is missing.
    """
    user_id, separator, token = (value or "").partition(CREDENTIAL_SEPARATOR)
    if not separator or not user_id or not token:
        raise ValueError("Malformed webhook credential")
    return user_id, token
