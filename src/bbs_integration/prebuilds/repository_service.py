"""Repository automation capability offered to the rest of the platform."""

from ..models.user import User


class RepositoryService:
    """Default service for hosts without prebuild automation."""

    async def can_install_automated_prebuilds(self, user: User, clone_url: str) -> bool:
        return False

    async def install_automated_prebuilds(self, user: User, clone_url: str) -> None:
        raise NotImplementedError(f"Automated prebuilds are not supported for {clone_url}")
