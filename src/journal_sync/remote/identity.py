"""Seam to the external OAuth identity provider."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from journal_sync.config import Settings
from journal_sync.exceptions import RemoteAuthFailure


@dataclass(frozen=True)
class AuthSession:
    """Credentials granted by the identity provider for one signed-in user."""

    user_id: str
    access_token: str
    email: str | None = None


class IdentityProvider(Protocol):
    """Performs the interactive OAuth step (consent screen, popup, device flow)."""

    async def authorize(self, scope: str, client_id: str | None = None) -> AuthSession:
        """Return a session for ``scope`` or raise RemoteAuthFailure."""
        ...

    async def revoke(self, session: AuthSession) -> None:
        """Forget or revoke ``session``."""
        ...


class StaticTokenIdentityProvider:
    """Identity provider backed by an access token obtained out of band."""

    def __init__(self, access_token: str, user_id: str = "", email: str = ""):
        self.access_token = access_token
        self.user_id = user_id
        self.email = email

    async def authorize(self, scope: str, client_id: str | None = None) -> AuthSession:
        if not self.access_token:
            raise RemoteAuthFailure(
                "No OAuth access token configured (set JOURNAL_OAUTH_ACCESS_TOKEN)",
                operation="authorize",
            )
        return AuthSession(
            user_id=self.user_id or "me",
            access_token=self.access_token,
            email=self.email or None,
        )

    async def revoke(self, session: AuthSession) -> None:
        return None


def create_identity_provider(settings: Settings) -> StaticTokenIdentityProvider:
    """Factory function to create the default identity provider from settings."""
    return StaticTokenIdentityProvider(
        access_token=settings.oauth_access_token,
        user_id=settings.oauth_user_id,
        email=settings.oauth_email,
    )
