"""Google Drive v3 REST client for the posts file."""

import json
import uuid
from typing import Any

from journal_sync.clients.base import GoogleApiClient


DRIVE_SCOPE = "https://www.googleapis.com/auth/drive.file"
DISCOVERY_PATH = "/discovery/v1/apis/drive/v3/rest"


def _quote_query_value(value: str) -> str:
    return value.replace("\\", "\\\\").replace("'", "\\'")


class DriveClient(GoogleApiClient):
    """Client for the Drive endpoints needed to keep one JSON file in sync."""

    async def probe(self, api_key: str) -> dict[str, Any]:
        """Fetch the Drive discovery document, validating the API key."""
        return await self._send_json(
            "probe", "GET", DISCOVERY_PATH, params={"key": api_key}
        )

    async def find_file(self, name: str) -> str | None:
        """Return the id of the first non-trashed file named exactly ``name``."""
        data = await self._send_json(
            "find_file",
            "GET",
            "/drive/v3/files",
            params={
                "q": f"name='{_quote_query_value(name)}' and trashed=false",
                "fields": "files(id, name)",
                "spaces": "drive",
            },
        )
        files = (data.get("files") or []) if isinstance(data, dict) else []
        for item in files:
            if isinstance(item, dict) and item.get("id"):
                return str(item["id"])
        return None

    async def create_file(self, name: str, content: str) -> str | None:
        """Create a JSON file with a multipart upload and return its id."""
        boundary = f"journal-sync-{uuid.uuid4().hex}"
        metadata = json.dumps({"name": name, "mimeType": "application/json"})
        body = (
            f"--{boundary}\r\n"
            "Content-Type: application/json; charset=UTF-8\r\n\r\n"
            f"{metadata}\r\n"
            f"--{boundary}\r\n"
            "Content-Type: application/json\r\n\r\n"
            f"{content}\r\n"
            f"--{boundary}--\r\n"
        ).encode("utf-8")

        data = await self._send_json(
            "create_file",
            "POST",
            "/upload/drive/v3/files",
            params={"uploadType": "multipart"},
            content=body,
            headers={"Content-Type": f"multipart/related; boundary={boundary}"},
        )
        if isinstance(data, dict) and data.get("id"):
            return str(data["id"])
        return None

    async def update_file(self, file_id: str, content: str) -> None:
        """Overwrite a file's content in place."""
        await self._send(
            "update_file",
            "PATCH",
            f"/upload/drive/v3/files/{file_id}",
            params={"uploadType": "media"},
            content=content.encode("utf-8"),
            headers={"Content-Type": "application/json"},
        )

    async def download_file(self, file_id: str) -> Any:
        """Download a file's media and decode it as JSON."""
        return await self._send_json(
            "download_file",
            "GET",
            f"/drive/v3/files/{file_id}",
            params={"alt": "media"},
        )


def create_drive_client(
    base_url: str,
    *,
    access_token: str | None = None,
    timeout: float = 30.0,
    max_attempts: int = 1,
    transport=None,
) -> DriveClient:
    """Factory function to create a DriveClient."""
    return DriveClient(
        base_url=base_url,
        timeout=timeout,
        max_attempts=max_attempts,
        access_token=access_token,
        transport=transport,
    )
