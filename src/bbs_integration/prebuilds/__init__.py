"""Prebuild automation for repository hosts."""

from .bitbucket_server_service import BitbucketServerService
from .repository_service import RepositoryService

__all__ = ["BitbucketServerService", "RepositoryService"]
