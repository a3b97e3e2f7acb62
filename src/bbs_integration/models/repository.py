"""Repository coordinates and the platform's content model."""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict

ResourceKind = Literal["projects", "users"]


class RepositoryCoordinates(BaseModel):
    """Addressable location of a repository on a Bitbucket Server instance."""

    model_config = ConfigDict(frozen=True)

    host: str
    resource_kind: ResourceKind
    owner: str
    repository_slug: str

    @property
    def api_path(self) -> str:
        return f"/{self.resource_kind}/{self.owner}/repos/{self.repository_slug}"

    @property
    def web_url(self) -> str:
        return f"https://{self.host}{self.api_path}"


class Repository(BaseModel):
    host: str
    owner: str
    name: str
    clone_url: Optional[str] = None
    web_url: Optional[str] = None


class Commit(BaseModel):
    repository: Repository
    revision: Optional[str] = None
