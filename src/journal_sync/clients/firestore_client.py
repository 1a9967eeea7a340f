"""Firestore REST client for the per-user posts document."""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

from journal_sync.clients.base import GoogleApiClient
from journal_sync.exceptions import RemoteSyncFailure


USERS_COLLECTION = "users"
POSTS_FIELD = "posts"


def to_firestore_value(value: Any) -> dict[str, Any]:
    """Encode a JSON value in Firestore's typed value format."""
    if value is None:
        return {"nullValue": None}
    if isinstance(value, bool):
        return {"booleanValue": value}
    if isinstance(value, int):
        return {"integerValue": str(value)}
    if isinstance(value, float):
        return {"doubleValue": value}
    if isinstance(value, str):
        return {"stringValue": value}
    if isinstance(value, (list, tuple)):
        return {"arrayValue": {"values": [to_firestore_value(v) for v in value]}}
    if isinstance(value, dict):
        return {"mapValue": {"fields": {str(k): to_firestore_value(v) for k, v in value.items()}}}
    raise TypeError(f"Unsupported Firestore value: {type(value).__name__}")


def from_firestore_value(value: dict[str, Any]) -> Any:
    """Decode a Firestore typed value into plain JSON data."""
    if "nullValue" in value:
        return None
    if "booleanValue" in value:
        return bool(value["booleanValue"])
    if "integerValue" in value:
        return int(value["integerValue"])
    if "doubleValue" in value:
        return float(value["doubleValue"])
    if "stringValue" in value:
        return value["stringValue"]
    if "timestampValue" in value:
        return value["timestampValue"]
    if "arrayValue" in value:
        return [from_firestore_value(v) for v in value["arrayValue"].get("values", [])]
    if "mapValue" in value:
        fields = value["mapValue"].get("fields", {})
        return {k: from_firestore_value(v) for k, v in fields.items()}
    raise ValueError(f"Unsupported Firestore value: {sorted(value)}")


class FirestoreClient(GoogleApiClient):
    """Client for reading and merging one field of a user document."""

    def __init__(self, project_id: str, **kwargs: Any):
        super().__init__(**kwargs)
        self.project_id = project_id

    def _document_path(self, user_id: str) -> str:
        return (
            f"/projects/{quote(self.project_id, safe='')}/databases/(default)/documents/"
            f"{USERS_COLLECTION}/{quote(user_id, safe='')}"
        )

    async def get_field(self, user_id: str, field: str = POSTS_FIELD) -> Any | None:
        """Return a decoded field of ``users/<user_id>``, or None if absent."""
        try:
            document = await self._send_json("get_document", "GET", self._document_path(user_id))
        except RemoteSyncFailure as exc:
            if exc.status_code == 404:
                return None
            raise

        fields = document.get("fields", {}) if isinstance(document, dict) else {}
        if field not in fields:
            return None
        try:
            return from_firestore_value(fields[field])
        except (ValueError, TypeError, AttributeError) as exc:
            raise RemoteSyncFailure(
                f"Undecodable '{field}' field: {exc}", operation="get_document"
            ) from exc

    async def merge_field(self, user_id: str, value: Any, field: str = POSTS_FIELD) -> None:
        """Write one field of ``users/<user_id>``, leaving other fields untouched."""
        await self._send(
            "merge_document",
            "PATCH",
            self._document_path(user_id),
            params={"updateMask.fieldPaths": field},
            json={"fields": {field: to_firestore_value(value)}},
        )


def create_firestore_client(
    base_url: str,
    project_id: str,
    *,
    access_token: str | None = None,
    timeout: float = 30.0,
    max_attempts: int = 1,
    transport=None,
) -> FirestoreClient:
    """Factory function to create a FirestoreClient."""
    return FirestoreClient(
        project_id=project_id,
        base_url=base_url,
        timeout=timeout,
        max_attempts=max_attempts,
        access_token=access_token,
        transport=transport,
    )
