"""Resolve Bitbucket Server clone and browse URLs into repository coordinates.

Bitbucket Server exposes the same repository under several URL shapes:

    https://<host>/projects/<PROJECT>/repos/<slug>/browse
    https://<host>/users/<user>/repos/<slug>/browse
    https://<host>/scm/<project>/<slug>.git
    https://<host>/scm/~<user>/<slug>.git
    ssh://git@<host>:7999/<project>/<slug>.git
    ssh://git@<host>:7999/~<user>/<slug>.git

All of them resolve to the same ``RepositoryCoordinates``.
"""

import logging
from typing import List, Optional
from urllib.parse import SplitResult, unquote, urlsplit

from ..models.provider import ProviderConfig
from ..models.repository import RepositoryCoordinates
from ..models.user import User
from .exceptions import InvalidURLError, ProviderMismatchError

logger = logging.getLogger(__name__)

RESOURCE_KINDS = ("projects", "users")
SCM_SEGMENT = "scm"
PERSONAL_PREFIX = "~"
GIT_SUFFIX = ".git"


class BitbucketServerContextParser:
    """Pure URL parser bound to one configured Bitbucket Server host."""

    def __init__(self, config: ProviderConfig):
        self.config = config

    def parse_url(self, user: Optional[User], url: str) -> RepositoryCoordinates:
        """Parse a clone or browse URL.

        Raises:
            InvalidURLError: URL does not have a repository shape.
            ProviderMismatchError: URL host is not the configured host.
        """
        parsed = urlsplit((url or "").strip())
        if parsed.scheme.lower() not in ("http", "https", "ssh") or not parsed.netloc:
            raise InvalidURLError(url, "unsupported scheme")

        host = self._host_of(parsed)
        if host.lower() != self.config.host.lower():
            raise ProviderMismatchError(url, host, self.config.host)

        segments = [unquote(s) for s in parsed.path.split("/") if s]
        if parsed.scheme.lower() == "ssh":
            coordinates = self._from_clone_segments(url, segments)
        elif segments and segments[0].lower() == SCM_SEGMENT:
            coordinates = self._from_clone_segments(url, segments[1:])
        else:
            coordinates = self._from_browse_segments(url, segments)

        logger.debug(
            "Resolved %s to %s for user %s",
            url,
            coordinates.api_path,
            user.id if user else None,
        )
        return coordinates

    def _host_of(self, parsed: SplitResult) -> str:
        if parsed.scheme.lower() == "ssh":
            # SSH runs on its own port; only the hostname identifies the instance
            return parsed.hostname or ""
        return parsed.netloc.rsplit("@", 1)[-1]

    def _from_clone_segments(self, url: str, segments: List[str]) -> RepositoryCoordinates:
        if len(segments) != 2:
            raise InvalidURLError(url, "expected <project>/<repository> clone path")
        owner, slug = segments
        if owner.startswith(PERSONAL_PREFIX):
            return self._coordinates(url, "users", owner[len(PERSONAL_PREFIX):], slug)
        return self._coordinates(url, "projects", owner, slug)

    def _from_browse_segments(self, url: str, segments: List[str]) -> RepositoryCoordinates:
        if (
            len(segments) < 4
            or segments[0].lower() not in RESOURCE_KINDS
            or segments[2].lower() != "repos"
        ):
            raise InvalidURLError(url, "expected /(projects|users)/<owner>/repos/<repository>")
        return self._coordinates(url, segments[0].lower(), segments[1], segments[3])

    def _coordinates(self, url: str, resource_kind: str, owner: str, slug: str) -> RepositoryCoordinates:
        if slug.endswith(GIT_SUFFIX):
            slug = slug[: -len(GIT_SUFFIX)]
        if not owner or not slug:
            raise InvalidURLError(url, "empty owner or repository")
        if resource_kind == "projects":
            # Project keys are uppercase; clone links carry them lowercased
            owner = owner.upper()
        return RepositoryCoordinates(
            host=self.config.host,
            resource_kind=resource_kind,
            owner=owner,
            repository_slug=slug,
        )
