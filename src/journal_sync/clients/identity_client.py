"""Identity Toolkit client exchanging a Google credential for a Firebase user."""

from typing import Any
from urllib.parse import urlencode

from journal_sync.clients.base import GoogleApiClient
from journal_sync.exceptions import RemoteAuthFailure


class IdentityToolkitClient(GoogleApiClient):
    """Client for the ``accounts:signInWithIdp`` endpoint."""

    def __init__(self, api_key: str, **kwargs: Any):
        super().__init__(**kwargs)
        self.api_key = api_key

    async def sign_in_with_google(
        self,
        google_access_token: str,
        request_uri: str = "http://localhost",
    ) -> dict[str, Any]:
        """Sign in to Firebase Auth with a Google OAuth access token.

        Returns the response payload; ``localId`` is the user's uid and
        ``idToken`` authorizes Firestore requests.
        """
        post_body = urlencode({"access_token": google_access_token, "providerId": "google.com"})
        data = await self._send_json(
            "sign_in_with_idp",
            "POST",
            "/accounts:signInWithIdp",
            params={"key": self.api_key},
            json={
                "postBody": post_body,
                "requestUri": request_uri,
                "returnSecureToken": True,
                "returnIdpCredential": True,
            },
        )
        if not isinstance(data, dict) or not data.get("localId") or not data.get("idToken"):
            raise RemoteAuthFailure(
                "Identity provider response is missing the user id or token",
                operation="sign_in_with_idp",
            )
        return data


def create_identity_client(
    base_url: str,
    api_key: str,
    *,
    timeout: float = 30.0,
    max_attempts: int = 1,
    transport=None,
) -> IdentityToolkitClient:
    """Factory function to create an IdentityToolkitClient."""
    return IdentityToolkitClient(
        api_key=api_key,
        base_url=base_url,
        timeout=timeout,
        max_attempts=max_attempts,
        transport=transport,
    )
