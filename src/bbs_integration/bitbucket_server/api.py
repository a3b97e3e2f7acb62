"""Authenticated client for the Bitbucket Server REST API 1.0."""

import logging
from typing import Any, AsyncIterator, Callable, Dict, List, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from ..models.bitbucket_server import (
    Branch,
    Commit,
    Paginated,
    PermissionEntry,
    Repository,
    Webhook,
    WebhookParams,
)
from ..models.provider import ProviderConfig
from ..models.repository import RepositoryCoordinates
from ..models.user import User
from .exceptions import (
    RemoteAuthError,
    RemoteError,
    RemoteNotFoundError,
    RemoteTimeoutError,
    UnexpectedResponseError,
)
from .pagination import DEFAULT_MAX_PAGES, DEFAULT_PAGE_LIMIT, collect_all_values, iterate_values, paginate_start
from .token_helper import TokenGateway

logger = logging.getLogger(__name__)

API_PATH = "/rest/api/1.0"
DEFAULT_TIMEOUT = 10.0

AUTH_FAILURE_CODES = {401, 403}

M = TypeVar("M", bound=BaseModel)


class BitbucketServerApi:
    """Executes REST calls on behalf of a platform user.

    Every call looks up a fresh delegated token, applies a bounded timeout
    and never retries. Non-2xx answers raise ``RemoteError``.
    """

    def __init__(
        self,
        config: ProviderConfig,
        token_gateway: TokenGateway,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        self.token_gateway = token_gateway
        self.timeout = timeout
        self.transport = transport

    @property
    def base_url(self) -> str:
        return f"https://{self.config.host}{API_PATH}"

    async def run_query(
        self,
        user: User,
        path: str,
        method: str = "GET",
        body: Optional[Any] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Run a call and return the decoded JSON body (None for empty bodies)."""
        return await self._call(user, method, path, params, body, self._read_json)

    async def fetch_content(
        self,
        user: User,
        path: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> str:
        """Run a GET and return the raw text body."""
        return await self._call(user, "GET", path, params, None, lambda response: response.text)

    async def _call(
        self,
        user: User,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]],
        body: Optional[Any],
        read: Callable[[httpx.Response], Any],
    ) -> Any:
        url = f"{self.base_url}{path}"
        outcome = "OK"
        try:
            token = (await self.token_gateway.get_token_with_scopes(user, [])).value
            response = await self._send(method, url, token, params, body)
            _raise_for_status(response)
            return read(response)
        except Exception as e:
            outcome = f"error {e}"
            raise
        finally:
            logger.debug("BBS %s %s - %s", method, url, outcome)

    async def _send(
        self,
        method: str,
        url: str,
        token: str,
        params: Optional[Dict[str, Any]],
        body: Optional[Any],
    ) -> httpx.Response:
        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                return await client.request(method, url, params=params, json=body, headers=headers)
        except httpx.TimeoutException as exc:
            raise RemoteTimeoutError(f"Request timed out: {type(exc).__name__}") from exc
        except httpx.RequestError as exc:
            raise RemoteError(0, f"{type(exc).__name__}: {exc}") from exc

    @staticmethod
    def _read_json(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise UnexpectedResponseError(response.url.path, "body is not JSON") from exc

    # ── Typed wrappers ───────────────────────────────────────────────

    async def get_repository(self, user: User, coordinates: RepositoryCoordinates) -> Repository:
        path = coordinates.api_path
        return _validate(Repository, await self.run_query(user, path), path)

    async def get_commits(
        self,
        user: User,
        coordinates: RepositoryCoordinates,
        limit: Optional[int] = None,
    ) -> Paginated[Commit]:
        path = f"{coordinates.api_path}/commits"
        params = {"limit": limit} if limit else None
        return _validate(Paginated[Commit], await self.run_query(user, path, params=params), path)

    async def get_default_branch(self, user: User, coordinates: RepositoryCoordinates) -> Branch:
        path = f"{coordinates.api_path}/default-branch"
        return _validate(Branch, await self.run_query(user, path), path)

    async def get_webhooks(self, user: User, coordinates: RepositoryCoordinates) -> Paginated[Webhook]:
        """First page of the repository's webhooks. Requires admin-equivalent access."""
        path = f"{coordinates.api_path}/webhooks"
        return _validate(Paginated[Webhook], await self.run_query(user, path), path)

    async def set_webhook(
        self,
        user: User,
        coordinates: RepositoryCoordinates,
        webhook: WebhookParams,
    ) -> Webhook:
        path = f"{coordinates.api_path}/webhooks"
        body = webhook.model_dump(by_alias=True)
        return _validate(Webhook, await self.run_query(user, path, "POST", body), path)

    async def get_repository_user_permissions(
        self,
        user: User,
        coordinates: RepositoryCoordinates,
    ) -> Paginated[PermissionEntry]:
        path = f"{coordinates.api_path}/permissions/users"
        return _validate(Paginated[PermissionEntry], await self.run_query(user, path), path)

    # ── Paged listings ───────────────────────────────────────────────

    def iter_pages(
        self,
        user: User,
        path: str,
        model: Type[M],
        params: Optional[Dict[str, Any]] = None,
        limit: int = DEFAULT_PAGE_LIMIT,
        max_pages: int = DEFAULT_MAX_PAGES,
    ) -> AsyncIterator[Paginated[M]]:
        """Lazily walk every page of a paged resource, starting at the first page."""
        page_model = Paginated[model]

        async def fetch_page(page_params: Dict[str, Any]) -> Paginated[M]:
            merged = dict(params or {})
            merged.update(page_params)
            return _validate(page_model, await self.run_query(user, path, params=merged), path)

        return paginate_start(fetch_page, limit=limit, max_pages=max_pages)

    async def list_webhooks(self, user: User, coordinates: RepositoryCoordinates) -> List[Webhook]:
        return await collect_all_values(
            self.iter_pages(user, f"{coordinates.api_path}/webhooks", Webhook)
        )

    def iter_repository_user_permissions(
        self,
        user: User,
        coordinates: RepositoryCoordinates,
    ) -> AsyncIterator[PermissionEntry]:
        return iterate_values(
            self.iter_pages(user, f"{coordinates.api_path}/permissions/users", PermissionEntry)
        )


def _raise_for_status(response: httpx.Response) -> None:
    if response.is_success:
        return
    status = response.status_code
    status_text = response.reason_phrase
    body = response.text[:500]
    if status in AUTH_FAILURE_CODES:
        raise RemoteAuthError(status, status_text, body)
    if status == 404:
        raise RemoteNotFoundError(status, status_text, body)
    raise RemoteError(status, status_text, body, retry_after=_parse_retry_after(response))


def _parse_retry_after(response: httpx.Response) -> Optional[float]:
    """Parse Retry-After header (seconds only, not HTTP-date)."""
    value = response.headers.get("Retry-After")
    if value is None:
        return None
    try:
        return float(value)
    except (ValueError, TypeError):
        return None


def _validate(model: Type[M], data: Any, path: str) -> M:
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise UnexpectedResponseError(path, str(exc)) from exc
