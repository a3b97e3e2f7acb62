"""Test configuration and fixtures."""

import json
import os
from typing import Any, Dict, List, Optional, Tuple
from unittest.mock import AsyncMock

import httpx
import pytest

# Set test environment variables BEFORE importing the package
os.environ["ENVIRONMENT"] = "test"
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only"

from bbs_integration.bitbucket_server.api import API_PATH, BitbucketServerApi
from bbs_integration.bitbucket_server.context_parser import BitbucketServerContextParser
from bbs_integration.bitbucket_server.file_provider import BitbucketServerFileProvider
from bbs_integration.models.provider import ProviderConfig
from bbs_integration.models.tokens import Token
from bbs_integration.models.user import Identity, User
from bbs_integration.prebuilds.bitbucket_server_service import BitbucketServerService
from bbs_integration.security.tokens import JWTScopedTokenIssuer

HOST = "bitbucket.gitpod-self-hosted.com"
PROVIDER_ID = "MyBitbucketServer"
HOOK_URL = "https://gitpod.example.com/"
REPO_URL = f"https://{HOST}/projects/FOO/repos/repo123"
REPO_PATH = "/projects/FOO/repos/repo123"


class FakeBitbucketServer:
    """In-memory Bitbucket Server REST API served through httpx.MockTransport."""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.webhooks: List[Dict[str, Any]] = []
        self.permissions: List[Dict[str, Any]] = []
        self.commits: List[Dict[str, Any]] = []
        self.files: Dict[str, str] = {}
        self.failures: Dict[Tuple[str, str], int] = {}
        self.page_size: Optional[int] = None
        self.list_created_hooks = True
        self._next_hook_id = 1

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path[len(API_PATH):]

        status = self.failures.get((request.method, path))
        if status is not None:
            return httpx.Response(status, json={"errors": [{"message": "failure"}]})

        if path.endswith("/webhooks"):
            if request.method == "POST":
                hook = json.loads(request.content)
                hook["id"] = self._next_hook_id
                self._next_hook_id += 1
                if self.list_created_hooks:
                    self.webhooks.append(hook)
                return httpx.Response(201, json=hook)
            return self._page(self.webhooks, request)

        if path.endswith("/permissions/users"):
            return self._page(self.permissions, request)

        if path.endswith("/commits"):
            return self._page(self.commits, request)

        if path.endswith("/default-branch"):
            return httpx.Response(200, json={
                "id": "refs/heads/main",
                "displayId": "main",
                "type": "BRANCH",
                "latestCommit": "abc123",
                "isDefault": True,
            })

        if "/raw/" in path:
            name = path.split("/raw/", 1)[1]
            if name in self.files:
                return httpx.Response(200, text=self.files[name])
            return httpx.Response(404, json={"errors": [{"message": "not found"}]})

        if path == REPO_PATH:
            return httpx.Response(200, json={
                "id": 1,
                "slug": "repo123",
                "name": "repo123",
                "public": False,
                "project": {"key": "FOO", "id": 7, "name": "Foo"},
                "links": {
                    "clone": [
                        {"href": f"https://{HOST}/scm/foo/repo123.git", "name": "http"},
                        {"href": f"ssh://git@{HOST}:7999/foo/repo123.git", "name": "ssh"},
                    ],
                    "self": [{"href": REPO_URL + "/browse"}],
                },
            })

        return httpx.Response(404, json={"errors": [{"message": "no such resource"}]})

    def _page(self, values: List[Dict[str, Any]], request: httpx.Request) -> httpx.Response:
        start = int(request.url.params.get("start", 0))
        limit = int(request.url.params.get("limit", 25))
        if self.page_size:
            limit = min(limit, self.page_size)
        chunk = values[start:start + limit]
        is_last = start + limit >= len(values)
        body = {"size": len(chunk), "limit": limit, "start": start, "isLastPage": is_last, "values": chunk}
        if not is_last:
            body["nextPageStart"] = start + limit
        return httpx.Response(200, json=body)

    def requests_for(self, method: str, suffix: str = "") -> List[httpx.Request]:
        return [
            r for r in self.requests
            if r.method == method and r.url.path.endswith(suffix)
        ]


@pytest.fixture
def provider_config() -> ProviderConfig:
    return ProviderConfig(id=PROVIDER_ID, host=HOST)


@pytest.fixture
def user() -> User:
    return User(
        id="user1",
        identities=[
            Identity(auth_provider_id=PROVIDER_ID, auth_id="user1", auth_name="AlexTugarev"),
        ],
    )


@pytest.fixture
def token_gateway():
    """Mock TokenGateway handing out a fixed bearer token."""
    gateway = AsyncMock()
    gateway.get_token_with_scopes.return_value = Token(value="test-bearer-token")
    return gateway


@pytest.fixture
def fake_server() -> FakeBitbucketServer:
    return FakeBitbucketServer()


@pytest.fixture
def context_parser(provider_config) -> BitbucketServerContextParser:
    return BitbucketServerContextParser(provider_config)


@pytest.fixture
def api(provider_config, token_gateway, fake_server) -> BitbucketServerApi:
    return BitbucketServerApi(provider_config, token_gateway, transport=fake_server.transport())


@pytest.fixture
def file_provider(api, context_parser) -> BitbucketServerFileProvider:
    return BitbucketServerFileProvider(api, context_parser)


@pytest.fixture
def token_issuer() -> JWTScopedTokenIssuer:
    return JWTScopedTokenIssuer("test-secret-key-for-testing-only")


@pytest.fixture
def service(api, context_parser, provider_config, token_issuer) -> BitbucketServerService:
    return BitbucketServerService(
        api,
        context_parser,
        provider_config,
        token_issuer,
        hook_url=HOOK_URL,
        webhook_secret_key="test-secret-key-for-testing-only",
    )
