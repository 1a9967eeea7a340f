"""Remote adapter storing the collection as one JSON file in Google Drive."""

from __future__ import annotations

import json
from typing import Any

from journal_sync.clients.drive_client import DRIVE_SCOPE, DriveClient, create_drive_client
from journal_sync.exceptions import RemoteSyncFailure
from journal_sync.models.credentials import DriveCredentials
from journal_sync.remote.base import RemoteAdapter
from journal_sync.remote.identity import AuthSession


DRIVE_CREDENTIALS_KEY = "google_drive_credentials"


class DriveRemoteAdapter(RemoteAdapter):
    """Keeps the whole collection in a single named file; no versioning."""

    name = "google-drive"
    credentials_key = DRIVE_CREDENTIALS_KEY

    def load_credentials(self) -> DriveCredentials:
        return DriveCredentials.model_validate(self._read_credentials())

    def _client(self, access_token: str | None = None) -> DriveClient:
        return create_drive_client(
            self.settings.drive_api_url,
            access_token=access_token,
            timeout=self.settings.remote_timeout,
            max_attempts=self.settings.remote_max_attempts,
            transport=self.transport,
        )

    async def _probe(self) -> None:
        async with self._client() as client:
            await client.probe(self.load_credentials().api_key)

    async def _authenticate(self) -> AuthSession:
        return await self.identity_provider.authorize(
            DRIVE_SCOPE, client_id=self.load_credentials().client_id
        )

    async def _load_payload(self) -> Any | None:
        async with self._client(self.session.access_token) as client:
            file_id = await client.find_file(self.settings.drive_file_name)
            if not file_id:
                return None
            return await client.download_file(file_id)

    async def _save_payload(self, payload: list[dict[str, Any]]) -> None:
        content = json.dumps(payload, ensure_ascii=False)
        async with self._client(self.session.access_token) as client:
            file_id = await client.find_file(self.settings.drive_file_name)
            if file_id:
                await client.update_file(file_id, content)
                return
            created = await client.create_file(self.settings.drive_file_name, content)
            if not created:
                raise RemoteSyncFailure("Drive did not return an id for the new file", operation="create_file")
