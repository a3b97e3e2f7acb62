"""Delegated token lookup for Bitbucket Server requests."""

import logging
from typing import Optional, Protocol, Sequence

from ..models.provider import ProviderConfig
from ..models.tokens import Token
from ..models.user import User
from .exceptions import UnauthorizedError

logger = logging.getLogger(__name__)


class TokenProvider(Protocol):
    """Token storage owned by the platform."""

    async def get_token_for_host(self, user: User, host: str) -> Optional[Token]:
        """Return the user's token for host, or None if the user never linked it."""
        ...


class TokenGateway(Protocol):
    """Supplies a bearer token for a user, optionally checked against scopes."""

    async def get_token_with_scopes(self, user: User, scopes: Sequence[str]) -> Token:
        ...


class BitbucketServerTokenHelper:
    """TokenGateway for one Bitbucket Server host.

    The helper never mints or caches tokens; every call asks the token
    provider again.
    """

    def __init__(self, config: ProviderConfig, token_provider: TokenProvider):
        self.config = config
        self.token_provider = token_provider

    async def get_token_with_scopes(self, user: User, scopes: Sequence[str]) -> Token:
        host = self.config.host
        token = await self.token_provider.get_token_for_host(user, host)
        if token is None:
            logger.debug("No token for %s linked to user %s", host, user.id)
            raise UnauthorizedError(host, scopes, reason="missing-identity")
        if not self.contains_scopes(token, scopes):
            logger.debug("Token of user %s for %s lacks scopes %s", user.id, host, list(scopes))
            raise UnauthorizedError(host, scopes, reason="missing-scopes")
        return token

    @staticmethod
    def contains_scopes(token: Token, wanted: Sequence[str]) -> bool:
        if not wanted:
            return True
        granted = set(token.scopes)
        return all(scope in granted for scope in wanted)
