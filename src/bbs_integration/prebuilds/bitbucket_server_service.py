"""Prebuild webhook provisioning for Bitbucket Server repositories.

Idempotency comes from inspecting remote state: existing webhooks are
listed before anything is created. No state survives a call except the
per-repository locks that serialize concurrent installs in this process.
"""

import asyncio
import logging
import weakref
from dataclasses import dataclass
from typing import Optional, Union

from ..bitbucket_server.api import BitbucketServerApi
from ..bitbucket_server.context_parser import BitbucketServerContextParser
from ..bitbucket_server.exceptions import (
    BitbucketServerError,
    ProviderMismatchError,
    WebhookVerificationError,
)
from ..models.bitbucket_server import (
    REFS_CHANGED_EVENT,
    REPO_ADMIN,
    Webhook,
    WebhookConfiguration,
    WebhookParams,
)
from ..models.provider import ProviderConfig
from ..models.repository import RepositoryCoordinates
from ..models.user import User
from ..observability.logging import reset_log_context, set_log_context
from ..security.tokens import ScopedTokenIssuer, build_webhook_credential
from ..security.webhook_secrets import derive_webhook_secret
from .repository_service import RepositoryService

logger = logging.getLogger(__name__)

PREBUILD_TOKEN_SCOPE = "prebuilds"


@dataclass(frozen=True)
class Authorized:
    def __bool__(self) -> bool:
        return True


@dataclass(frozen=True)
class Denied:
    reason: str

    def __bool__(self) -> bool:
        return False


AuthorizationDecision = Union[Authorized, Denied]


class BitbucketServerService(RepositoryService):
    """Installs push webhooks that trigger prebuilds."""

    def __init__(
        self,
        api: BitbucketServerApi,
        context_parser: BitbucketServerContextParser,
        provider_config: ProviderConfig,
        token_issuer: ScopedTokenIssuer,
        hook_url: str,
        webhook_secret_key: str,
    ):
        self.api = api
        self.context_parser = context_parser
        self.provider_config = provider_config
        self.token_issuer = token_issuer
        self.hook_url = hook_url
        self.webhook_secret_key = webhook_secret_key
        self._install_locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

    async def can_install_automated_prebuilds(self, user: User, clone_url: str) -> bool:
        decision = await self.check_install_permission(user, clone_url)
        if not decision:
            logger.debug("User %s is not allowed to install webhooks on %s: %s", user.id, clone_url, decision.reason)
        return bool(decision)

    async def check_install_permission(self, user: User, clone_url: str) -> AuthorizationDecision:
        """Decide whether user may install webhooks on the repository.

        The webhook listing needs admin-equivalent access, so reading it
        doubles as a capability probe. The decision itself comes from the
        user's entry in the repository permission listing.
        """
        try:
            coordinates = self.context_parser.parse_url(user, clone_url)
        except ProviderMismatchError as e:
            return Denied(str(e))

        identity = user.identity_for(self.provider_config.id)
        if identity is None:
            logger.error(
                "Unexpected call of can_install_automated_prebuilds. Not authorized with %s.",
                self.provider_config.host,
            )
            return Denied(f"no identity linked to {self.provider_config.id}")

        try:
            await self.api.get_webhooks(user, coordinates)
        except BitbucketServerError as e:
            return Denied(f"cannot read webhooks: {e}")

        async for entry in self.api.iter_repository_user_permissions(user, coordinates):
            if entry.user.name != identity.auth_name:
                continue
            if entry.permission == REPO_ADMIN:
                return Authorized()
            return Denied(f"permission {entry.permission} of {identity.auth_name} is not {REPO_ADMIN}")

        return Denied(f"no permission entry for {identity.auth_name}")

    async def install_automated_prebuilds(self, user: User, clone_url: str) -> None:
        coordinates = self.context_parser.parse_url(user, clone_url)
        log_context = set_log_context(user_id=user.id, repository=coordinates.api_path)
        try:
            await self._install(user, clone_url, coordinates)
        finally:
            reset_log_context(log_context)

    async def _install(self, user: User, clone_url: str, coordinates: RepositoryCoordinates) -> None:
        async with self._lock_for(coordinates):
            if await self._find_installed_hook(user, coordinates) is not None:
                logger.info("BBS webhook already installed on %s", clone_url)
                return

            token_entry = await self.token_issuer.create_scoped_token(user, PREBUILD_TOKEN_SCOPE, clone_url)
            credential = build_webhook_credential(user.id, token_entry.token.value)
            created = await self.api.set_webhook(
                user,
                coordinates,
                WebhookParams(
                    name=f"Gitpod Prebuilds for {self.hook_url}",
                    active=True,
                    configuration=WebhookConfiguration(
                        secret=derive_webhook_secret(self.webhook_secret_key, clone_url),
                    ),
                    url=f"{self.hook_url}?token={credential}",
                    events=[REFS_CHANGED_EVENT],
                ),
            )

            # Bitbucket Server may accept a hook it then does not list
            if await self._find_installed_hook(user, coordinates) is None:
                raise WebhookVerificationError(clone_url)

        logger.info("Installed Bitbucket Server webhook %s for %s", created.id, clone_url)

    async def _find_installed_hook(self, user: User, coordinates: RepositoryCoordinates) -> Optional[Webhook]:
        for hook in await self.api.list_webhooks(user, coordinates):
            if hook.url and self.hook_url in hook.url:
                return hook
        return None

    def _lock_for(self, coordinates: RepositoryCoordinates) -> asyncio.Lock:
        key = f"{coordinates.host.lower()}{coordinates.api_path}"
        lock = self._install_locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._install_locks[key] = lock
        return lock
