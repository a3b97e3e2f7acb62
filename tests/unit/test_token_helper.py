"""Tests for BitbucketServerTokenHelper."""

import pytest
from unittest.mock import AsyncMock

from bbs_integration.bitbucket_server.exceptions import UnauthorizedError
from bbs_integration.bitbucket_server.token_helper import BitbucketServerTokenHelper
from bbs_integration.models.tokens import Token
from tests.conftest import HOST

pytestmark = pytest.mark.asyncio


@pytest.fixture
def token_provider():
    return AsyncMock()


@pytest.fixture
def helper(provider_config, token_provider):
    return BitbucketServerTokenHelper(provider_config, token_provider)


async def test_returns_token_for_configured_host(helper, token_provider, user):
    token = Token(value="abc", scopes=["REPO_READ"])
    token_provider.get_token_for_host.return_value = token

    assert await helper.get_token_with_scopes(user, []) is token
    token_provider.get_token_for_host.assert_awaited_once_with(user, HOST)


async def test_missing_token(helper, token_provider, user):
    token_provider.get_token_for_host.return_value = None

    with pytest.raises(UnauthorizedError) as exc_info:
        await helper.get_token_with_scopes(user, ["REPO_ADMIN"])

    assert exc_info.value.reason == "missing-identity"
    assert exc_info.value.host == HOST
    assert exc_info.value.required_scopes == ["REPO_ADMIN"]


async def test_missing_scopes(helper, token_provider, user):
    token_provider.get_token_for_host.return_value = Token(value="abc", scopes=["REPO_READ"])

    with pytest.raises(UnauthorizedError) as exc_info:
        await helper.get_token_with_scopes(user, ["REPO_READ", "REPO_ADMIN"])

    assert exc_info.value.reason == "missing-scopes"


async def test_all_scopes_granted(helper, token_provider, user):
    token_provider.get_token_for_host.return_value = Token(value="abc", scopes=["REPO_ADMIN", "REPO_READ"])

    token = await helper.get_token_with_scopes(user, ["REPO_READ", "REPO_ADMIN"])

    assert token.value == "abc"


async def test_asks_provider_on_every_call(helper, token_provider, user):
    token_provider.get_token_for_host.side_effect = [Token(value="first"), Token(value="second")]

    assert (await helper.get_token_with_scopes(user, [])).value == "first"
    assert (await helper.get_token_with_scopes(user, [])).value == "second"
