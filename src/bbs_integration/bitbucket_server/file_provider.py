"""Best-effort file reads from Bitbucket Server repositories."""

import logging
from urllib.parse import quote

from ..models.repository import Commit, Repository
from ..models.user import User
from ..repohost.file_provider import GITPOD_FILE_NAME, FileProvider, MaybeContent
from .api import BitbucketServerApi
from .context_parser import BitbucketServerContextParser
from .exceptions import BitbucketServerError

logger = logging.getLogger(__name__)

# Returned until the "latest commit touching a path" query is settled
LAST_CHANGE_REVISION_PLACEHOLDER = "f00"


class BitbucketServerFileProvider(FileProvider):
    """Reads files through the raw-content endpoint.

    Lookups never raise: a missing revision, an unparsable URL or a remote
    failure all yield None.
    """

    def __init__(self, api: BitbucketServerApi, context_parser: BitbucketServerContextParser):
        self.api = api
        self.context_parser = context_parser

    async def get_gitpod_file_content(self, commit: Commit, user: User) -> MaybeContent:
        return await self.get_file_content(commit, user, GITPOD_FILE_NAME)

    async def get_last_change_revision(
        self,
        repository: Repository,
        revision_or_branch: str,
        user: User,
        path: str,
    ) -> str:
        logger.debug(
            "Last change revision of %s in %s/%s@%s not resolved, returning placeholder",
            path,
            repository.owner,
            repository.name,
            revision_or_branch,
        )
        return LAST_CHANGE_REVISION_PLACEHOLDER

    async def get_file_content(self, commit: Commit, user: User, path: str) -> MaybeContent:
        if not commit.revision or not commit.repository.web_url:
            return None

        try:
            coordinates = self.context_parser.parse_url(user, commit.repository.web_url)
            return await self.api.fetch_content(
                user,
                f"{coordinates.api_path}/raw/{quote(path.lstrip('/'), safe='/')}",
                params={"at": commit.revision},
            )
        except BitbucketServerError as e:
            logger.error(
                "Could not fetch %s of %s for user %s: %s",
                path,
                commit.repository.web_url,
                user.id,
                e,
            )
            return None
        except Exception:
            # Collaborator failures such as a token store outage end the lookup too
            logger.exception(
                "Unexpected error fetching %s of %s for user %s",
                path,
                commit.repository.web_url,
                user.id,
            )
            return None
