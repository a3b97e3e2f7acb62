"""Bitbucket Server REST API 1.0 payload models.

Field names follow the wire format through aliases; unknown fields are kept
so callers can reach data these models do not declare.
"""

from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")

REPO_ADMIN = "REPO_ADMIN"
REFS_CHANGED_EVENT = "repo:refs_changed"


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")


class Link(_WireModel):
    href: str
    name: Optional[str] = None


class BitbucketServerUser(_WireModel):
    name: str
    id: Optional[int] = None
    email_address: Optional[str] = Field(None, alias="emailAddress")
    display_name: Optional[str] = Field(None, alias="displayName")
    active: Optional[bool] = None
    slug: Optional[str] = None
    type: Optional[str] = None


class Project(_WireModel):
    key: str
    id: Optional[int] = None
    name: Optional[str] = None
    public: Optional[bool] = None
    owner: Optional[BitbucketServerUser] = None


class Repository(_WireModel):
    id: int
    slug: str
    name: str
    public: Optional[bool] = None
    project: Optional[Project] = None
    links: Dict[str, List[Link]] = Field(default_factory=dict)

    def clone_url(self, protocol: str = "http") -> Optional[str]:
        for link in self.links.get("clone", []):
            if link.name == protocol:
                return link.href
        return None


class Branch(_WireModel):
    id: str
    display_id: str = Field(..., alias="displayId")
    type: str = "BRANCH"
    latest_commit: Optional[str] = Field(None, alias="latestCommit")
    is_default: bool = Field(False, alias="isDefault")


class Commit(_WireModel):
    id: str
    display_id: str = Field(..., alias="displayId")
    author: Optional[BitbucketServerUser] = None
    message: Optional[str] = None


class Paginated(_WireModel, Generic[T]):
    is_last_page: bool = Field(True, alias="isLastPage")
    limit: Optional[int] = None
    size: Optional[int] = None
    start: Optional[int] = None
    next_page_start: Optional[int] = Field(None, alias="nextPageStart")
    values: List[T] = Field(default_factory=list)


class Webhook(_WireModel):
    id: int
    name: Optional[str] = None
    created_date: Optional[int] = Field(None, alias="createdDate")
    updated_date: Optional[int] = Field(None, alias="updatedDate")
    events: List[str] = Field(default_factory=list)
    configuration: Dict[str, Any] = Field(default_factory=dict)
    url: Optional[str] = None
    active: bool = True


class PermissionEntry(_WireModel):
    user: BitbucketServerUser
    permission: str


class WebhookConfiguration(_WireModel):
    secret: str


class WebhookParams(_WireModel):
    name: str
    events: List[str]
    configuration: WebhookConfiguration
    url: str
    active: bool = True
