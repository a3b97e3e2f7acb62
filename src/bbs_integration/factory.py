"""Explicit wiring of the Bitbucket Server integration components."""

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

import httpx

from .bitbucket_server.api import BitbucketServerApi
from .bitbucket_server.context_parser import BitbucketServerContextParser
from .bitbucket_server.file_provider import BitbucketServerFileProvider
from .bitbucket_server.token_helper import BitbucketServerTokenHelper, TokenProvider
from .config import Settings
from .prebuilds.bitbucket_server_service import BitbucketServerService
from .security.tokens import JWTScopedTokenIssuer, ScopedTokenIssuer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BitbucketServerIntegration:
    """Components serving one Bitbucket Server host."""

    context_parser: BitbucketServerContextParser
    api: BitbucketServerApi
    file_provider: BitbucketServerFileProvider
    repository_service: BitbucketServerService


def create_bitbucket_server_integration(
    settings: Settings,
    token_provider: TokenProvider,
    token_issuer: Optional[ScopedTokenIssuer] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> BitbucketServerIntegration:
    """Build all components with their collaborators passed explicitly.

    Args:
        settings: Application settings; read once here.
        token_provider: Platform token storage for delegated user tokens.
        token_issuer: Issuer of scoped webhook tokens. Defaults to a JWT issuer
                      signing with ``settings.secret_key``.
        transport: Optional httpx transport, e.g. for tests or proxies.
    """
    provider_config = settings.provider_config()
    if token_issuer is None:
        token_issuer = JWTScopedTokenIssuer(
            settings.secret_key,
            timedelta(days=settings.scoped_token_expire_days),
        )

    context_parser = BitbucketServerContextParser(provider_config)
    api = BitbucketServerApi(
        provider_config,
        BitbucketServerTokenHelper(provider_config, token_provider),
        timeout=settings.bitbucket_server_request_timeout,
        transport=transport,
    )
    logger.info("Bitbucket Server integration configured for %s (%s)", provider_config.host, provider_config.id)

    return BitbucketServerIntegration(
        context_parser=context_parser,
        api=api,
        file_provider=BitbucketServerFileProvider(api, context_parser),
        repository_service=BitbucketServerService(
            api,
            context_parser,
            provider_config,
            token_issuer,
            hook_url=settings.hook_url(),
            webhook_secret_key=settings.secret_key,
        ),
    )
