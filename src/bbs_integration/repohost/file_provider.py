"""File access capability offered to the rest of the platform."""

from abc import ABC, abstractmethod
from typing import Optional

from ..models.repository import Commit, Repository
from ..models.user import User

GITPOD_FILE_NAME = ".gitpod.yml"

MaybeContent = Optional[str]


class FileProvider(ABC):
    """Reads files from a hosted repository on a user's behalf."""

    @abstractmethod
    async def get_gitpod_file_content(self, commit: Commit, user: User) -> MaybeContent:
        """Get the platform configuration file at the commit, if present."""
        pass

    @abstractmethod
    async def get_last_change_revision(
        self,
        repository: Repository,
        revision_or_branch: str,
        user: User,
        path: str,
    ) -> str:
        """Get the revision that last changed path."""
        pass

    @abstractmethod
    async def get_file_content(self, commit: Commit, user: User, path: str) -> MaybeContent:
        """Get a file's content at the commit, or None if it cannot be read."""
        pass
