"""Remote adapter storing the collection inside the signed-in user's document."""

from __future__ import annotations

from typing import Any

from journal_sync.clients.firestore_client import FirestoreClient, create_firestore_client
from journal_sync.clients.identity_client import create_identity_client
from journal_sync.models.credentials import FirebaseConfig
from journal_sync.remote.base import RemoteAdapter
from journal_sync.remote.identity import AuthSession


FIREBASE_CONFIG_KEY = "firebase_config"
GOOGLE_SIGN_IN_SCOPE = "openid email profile"


class FirestoreRemoteAdapter(RemoteAdapter):
    """Keeps the collection in the ``posts`` field of ``users/<uid>``.

    Writes merge that single field into the document, so any other fields
    on the user's document are preserved.
    """

    name = "firebase"
    credentials_key = FIREBASE_CONFIG_KEY

    def load_credentials(self) -> FirebaseConfig:
        return FirebaseConfig.model_validate(self._read_credentials())

    def _client(self) -> FirestoreClient:
        return create_firestore_client(
            self.settings.firestore_api_url,
            self.load_credentials().project_id,
            access_token=self.session.access_token if self.session else None,
            timeout=self.settings.remote_timeout,
            max_attempts=self.settings.remote_max_attempts,
            transport=self.transport,
        )

    async def _probe(self) -> None:
        # App initialization is local; configuration completeness is the whole check.
        return None

    async def _authenticate(self) -> AuthSession:
        google = await self.identity_provider.authorize(GOOGLE_SIGN_IN_SCOPE)
        config = self.load_credentials()
        async with create_identity_client(
            self.settings.identity_toolkit_url,
            config.api_key,
            timeout=self.settings.remote_timeout,
            max_attempts=self.settings.remote_max_attempts,
            transport=self.transport,
        ) as client:
            data = await client.sign_in_with_google(
                google.access_token, request_uri=f"https://{config.auth_domain}"
            )
        return AuthSession(
            user_id=str(data["localId"]),
            access_token=str(data["idToken"]),
            email=data.get("email") or google.email,
        )

    async def _revoke(self, session: AuthSession) -> None:
        # Firebase sign-out only discards the local auth state.
        return None

    async def _load_payload(self) -> Any | None:
        async with self._client() as client:
            return await client.get_field(self.session.user_id)

    async def _save_payload(self, payload: list[dict[str, Any]]) -> None:
        async with self._client() as client:
            await client.merge_field(self.session.user_id, payload)
