"""Platform user and linked identity models."""

from typing import List, Optional

from pydantic import BaseModel, Field


class Identity(BaseModel):
    """An account on an auth provider linked to a platform user."""

    auth_provider_id: str
    auth_id: str
    auth_name: str
    primary_email: Optional[str] = None


class User(BaseModel):
    """Subset of the platform user record used by this integration."""

    id: str
    name: Optional[str] = None
    identities: List[Identity] = Field(default_factory=list)

    def identity_for(self, auth_provider_id: str) -> Optional[Identity]:
        """Return the identity linked to the given auth provider, if any."""
        for identity in self.identities:
            if identity.auth_provider_id == auth_provider_id:
                return identity
        return None
