"""Test configuration module."""

import os
from unittest.mock import patch

from bbs_integration.config import Settings, get_settings


def setup_module():
    """Clear settings cache before tests."""
    get_settings.cache_clear()


def teardown_module():
    """Clear settings cache after tests."""
    get_settings.cache_clear()


class TestSettings:
    """Test Settings class."""

    def setup_method(self):
        get_settings.cache_clear()

    def teardown_method(self):
        get_settings.cache_clear()

    def test_default_settings(self):
        with patch.dict(os.environ, {"ENVIRONMENT": "test"}, clear=True):
            settings = Settings()

        assert settings.app_name == "Bitbucket Server Integration"
        assert settings.bitbucket_server_provider_id == "BitbucketServer"
        assert settings.bitbucket_server_request_timeout == 10.0
        assert settings.scoped_token_expire_days == 365
        assert settings.webhook_path == ""

    def test_environment_override(self):
        env_vars = {
            "ENVIRONMENT": "test",
            "BITBUCKET_SERVER_HOST": "bitbucket.corp.example",
            "BITBUCKET_SERVER_PROVIDER_ID": "CorpBitbucket",
            "BITBUCKET_SERVER_REQUEST_TIMEOUT": "2.5",
            "HOST_URL": "https://gitpod.corp.example",
        }
        with patch.dict(os.environ, env_vars, clear=True):
            settings = Settings()

        assert settings.bitbucket_server_host == "bitbucket.corp.example"
        assert settings.bitbucket_server_provider_id == "CorpBitbucket"
        assert settings.bitbucket_server_request_timeout == 2.5
        assert settings.host_url == "https://gitpod.corp.example"

    def test_secret_key_generated_when_empty(self):
        with patch.dict(os.environ, {"ENVIRONMENT": "test", "SECRET_KEY": ""}, clear=True):
            settings = Settings()

        assert len(settings.secret_key) >= 32

    def test_get_settings_cached(self):
        assert get_settings() is get_settings()


class TestHostNormalization:

    def test_scheme_and_trailing_slash_stripped(self):
        settings = Settings(bitbucket_server_host="https://bitbucket.example.com/")

        assert settings.bitbucket_server_host == "bitbucket.example.com"

    def test_bare_host_unchanged(self):
        settings = Settings(bitbucket_server_host="bitbucket.example.com:7990")

        assert settings.bitbucket_server_host == "bitbucket.example.com:7990"


class TestProviderConfig:

    def test_provider_config(self):
        settings = Settings(
            bitbucket_server_host="bitbucket.example.com",
            bitbucket_server_provider_id="MyBitbucketServer",
            bitbucket_server_client_id="client",
            host_url="https://gitpod.example.com/",
        )

        config = settings.provider_config()

        assert config.id == "MyBitbucketServer"
        assert config.host == "bitbucket.example.com"
        assert config.type == "BitbucketServer"
        assert config.oauth.client_id == "client"
        assert config.oauth.callback_url == "https://gitpod.example.com/auth/callback"
        assert config.oauth.token_url == "https://bitbucket.example.com/rest/oauth2/latest/token"


class TestHookUrl:

    def test_without_path(self):
        assert Settings(host_url="https://gitpod.example.com").hook_url() == "https://gitpod.example.com/"

    def test_with_path(self):
        settings = Settings(host_url="https://gitpod.example.com/", webhook_path="/apps/bbs/")

        assert settings.hook_url() == "https://gitpod.example.com/apps/bbs/"
