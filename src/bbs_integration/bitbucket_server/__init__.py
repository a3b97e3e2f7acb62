"""Bitbucket Server REST client, URL parser and file provider."""

from .api import BitbucketServerApi
from .context_parser import BitbucketServerContextParser
from .exceptions import (
    BitbucketServerError,
    InvalidURLError,
    ProviderMismatchError,
    RemoteAuthError,
    RemoteError,
    RemoteNotFoundError,
    RemoteTimeoutError,
    UnauthorizedError,
    UnexpectedResponseError,
    WebhookVerificationError,
)
from .file_provider import BitbucketServerFileProvider
from .token_helper import BitbucketServerTokenHelper

__all__ = [
    "BitbucketServerApi",
    "BitbucketServerContextParser",
    "BitbucketServerFileProvider",
    "BitbucketServerTokenHelper",
    "BitbucketServerError",
    "InvalidURLError",
    "ProviderMismatchError",
    "RemoteAuthError",
    "RemoteError",
    "RemoteNotFoundError",
    "RemoteTimeoutError",
    "UnauthorizedError",
    "UnexpectedResponseError",
    "WebhookVerificationError",
]
