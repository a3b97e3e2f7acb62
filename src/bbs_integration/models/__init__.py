"""Data models for the Bitbucket Server integration."""

from .provider import OAuthSettings, ProviderConfig
from .repository import Commit, Repository, RepositoryCoordinates, ResourceKind
from .tokens import ScopedTokenEntry, Token, TokenValue
from .user import Identity, User

__all__ = [
    "OAuthSettings",
    "ProviderConfig",
    "Commit",
    "Repository",
    "RepositoryCoordinates",
    "ResourceKind",
    "ScopedTokenEntry",
    "Token",
    "TokenValue",
    "Identity",
    "User",
]
