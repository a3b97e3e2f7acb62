"""Auth provider configuration models."""

from pydantic import BaseModel, ConfigDict, Field


class OAuthSettings(BaseModel):
    """OAuth client registration of the platform on Bitbucket Server."""

    model_config = ConfigDict(frozen=True)

    client_id: str = ""
    client_secret: str = ""
    callback_url: str = ""
    authorization_url: str = ""
    token_url: str = ""
    scope: str = ""


class ProviderConfig(BaseModel):
    """Identifies the Bitbucket Server instance this integration serves.

    Loaded once at startup and never mutated.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Auth provider id, matched against Identity.auth_provider_id")
    host: str = Field(..., description="Bitbucket Server authority, e.g. bitbucket.example.com")
    type: str = "BitbucketServer"
    oauth: OAuthSettings = Field(default_factory=OAuthSettings)
