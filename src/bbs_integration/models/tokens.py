"""Credential values handed between this integration and its token collaborators."""

from typing import List

from pydantic import BaseModel, Field


class Token(BaseModel):
    """Delegated bearer token for Bitbucket Server. Never cached beyond one request."""

    value: str
    scopes: List[str] = Field(default_factory=list)


class TokenValue(BaseModel):
    value: str


class ScopedTokenEntry(BaseModel):
    """Platform token minted for a single capability and subject."""

    token: TokenValue
    scope: str
    subject_url: str
