"""Configuration management for the Bitbucket Server integration."""

import os
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models.provider import OAuthSettings, ProviderConfig


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env" if os.getenv("ENVIRONMENT") != "test" else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="allow"
    )

    # Application
    app_name: str = "Bitbucket Server Integration"
    environment: str = Field(default="development")
    log_level: str = Field(default="INFO")

    # Platform
    host_url: str = Field(
        default="http://localhost:8000",
        description="Public base URL of the platform, used as webhook callback base",
    )
    webhook_path: str = Field(
        default="",
        description="Path below host_url that receives Bitbucket Server push events",
    )

    # Security
    secret_key: str = Field(default="")
    scoped_token_expire_days: int = Field(default=365)

    # Bitbucket Server auth provider
    bitbucket_server_host: str = Field(default="bitbucket.example.com")
    bitbucket_server_provider_id: str = Field(default="BitbucketServer")
    bitbucket_server_client_id: Optional[str] = Field(default=None)
    bitbucket_server_client_secret: Optional[str] = Field(default=None)
    bitbucket_server_scope: str = Field(default="PUBLIC_REPOS REPO_READ REPO_ADMIN")

    # HTTP
    bitbucket_server_request_timeout: float = Field(default=10.0)

    @field_validator("secret_key", mode="before")
    @classmethod
    def validate_secret_key(cls, v):
        if not v:
            # Generate a random secret key for development
            import secrets
            return secrets.token_urlsafe(32)
        return v

    @field_validator("bitbucket_server_host", mode="before")
    @classmethod
    def normalize_host(cls, v):
        # Accept "https://host/" as well as a bare authority
        host = str(v).strip()
        for prefix in ("https://", "http://"):
            if host.lower().startswith(prefix):
                host = host[len(prefix):]
        return host.rstrip("/")

    def provider_config(self) -> ProviderConfig:
        """Build the immutable auth provider configuration."""
        host = self.bitbucket_server_host
        return ProviderConfig(
            id=self.bitbucket_server_provider_id,
            host=host,
            oauth=OAuthSettings(
                client_id=self.bitbucket_server_client_id or "",
                client_secret=self.bitbucket_server_client_secret or "",
                callback_url=f"{self.host_url.rstrip('/')}/auth/callback",
                authorization_url=f"https://{host}/rest/oauth2/latest/authorize",
                token_url=f"https://{host}/rest/oauth2/latest/token",
                scope=self.bitbucket_server_scope,
            ),
        )

    def hook_url(self) -> str:
        """Callback URL that webhooks deliver to, without credentials."""
        base = self.host_url.rstrip("/")
        path = self.webhook_path.strip("/")
        if path:
            return f"{base}/{path}/"
        return f"{base}/"


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
