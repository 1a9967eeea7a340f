"""Local key-value store backed by one JSON file per key."""

from __future__ import annotations

import json
import os
import re
import tempfile
from pathlib import Path
from typing import Any

from journal_sync.exceptions import StorageFailure, ValidationFailure
from journal_sync.models.post import Post, posts_from_payload, posts_to_payload
from journal_sync.utils.logging import get_logger


POSTS_KEY = "blog_posts"

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")

logger = get_logger(__name__)


class LocalStore:
    """Synchronous durable storage scoped to one profile directory.

    Keys map to ``<root>/<key>.json``. Every I/O, quota or serialization
    fault surfaces as :class:`StorageFailure`.
    """

    def __init__(self, root: Path, *, quota_bytes: int = 0):
        self.root = root
        self.quota_bytes = quota_bytes

    def _path(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key):
            raise StorageFailure(f"Invalid storage key: {key!r}", key=key)
        return self.root / f"{key}.json"

    # --- Generic key-value API ---

    def get_item(self, key: str) -> Any | None:
        """Return the decoded value stored under ``key``, or None."""
        path = self._path(key)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageFailure(f"Failed to read '{key}': {exc}", key=key) from exc
        if not raw.strip():
            return None
        try:
            return json.loads(raw)
        except ValueError as exc:
            raise StorageFailure(f"Corrupt data under '{key}': {exc}", key=key) from exc

    def set_item(self, key: str, value: Any) -> None:
        """Serialize ``value`` and store it atomically under ``key``."""
        path = self._path(key)
        try:
            data = json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            raise StorageFailure(f"Cannot serialize '{key}': {exc}", key=key) from exc

        size = len(data.encode("utf-8"))
        if self.quota_bytes and size > self.quota_bytes:
            raise StorageFailure(
                f"Quota exceeded writing '{key}': {size} bytes > {self.quota_bytes} bytes",
                key=key,
            )

        try:
            self.root.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.root, prefix=f".{key}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(data)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise StorageFailure(f"Failed to write '{key}': {exc}", key=key) from exc

    def remove_item(self, key: str) -> None:
        """Delete ``key``; missing keys are ignored."""
        path = self._path(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise StorageFailure(f"Failed to remove '{key}': {exc}", key=key) from exc

    # --- Post collection API ---

    def read(self) -> list[Post] | None:
        """Return the stored collection, or None when nothing is stored."""
        data = self.get_item(POSTS_KEY)
        if data is None:
            return None
        try:
            return posts_from_payload(data)
        except ValidationFailure as exc:
            raise StorageFailure(f"Stored posts are unreadable: {exc}", key=POSTS_KEY) from exc

    def read_raw(self) -> list[Any]:
        """Return the stored collection as plain JSON data (empty list if absent)."""
        data = self.get_item(POSTS_KEY)
        return data if isinstance(data, list) else []

    def write(self, posts: list[Post]) -> None:
        """Replace the stored collection."""
        self.set_item(POSTS_KEY, posts_to_payload(posts))
        logger.debug("Wrote %d posts to local store at %s", len(posts), self.root)

    def clear(self) -> None:
        """Destroy the stored collection."""
        self.remove_item(POSTS_KEY)
        logger.info("Cleared local post data at %s", self.root)


def create_local_store(root: Path, quota_bytes: int = 0) -> LocalStore:
    """Factory function to create a LocalStore."""
    return LocalStore(root=root, quota_bytes=quota_bytes)
