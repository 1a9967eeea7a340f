"""Import and export of the full post collection as a JSON backup file."""

from __future__ import annotations

import json
from pathlib import Path

import aiofiles

from journal_sync.config import DEFAULT_PRODUCT_NAME, backup_file_name
from journal_sync.core.orchestrator import SyncOrchestrator
from journal_sync.exceptions import InvalidFormat, ValidationFailure
from journal_sync.models.post import Post, is_valid_post, posts_from_payload
from journal_sync.storage.local_store import LocalStore
from journal_sync.utils.logging import LogContext, get_logger


DEFAULT_EXPORT_FILE_NAME = backup_file_name(DEFAULT_PRODUCT_NAME)

logger = get_logger(__name__)


def parse_posts_payload(text: str) -> list[Post]:
    """Parse backup file content into a collection.

    Raises:
        InvalidFormat: If the content is not JSON, not an array, or any
            element lacks the required post fields.
    """
    try:
        data = json.loads(text)
    except ValueError as exc:
        raise InvalidFormat(f"Invalid posts data format: {exc}") from exc

    if not isinstance(data, list):
        raise InvalidFormat("Invalid posts data format: expected a JSON array")
    for index, item in enumerate(data):
        if not is_valid_post(item):
            raise InvalidFormat(f"Invalid posts data format: element {index} is not a post", index=index)

    try:
        return posts_from_payload(data)
    except ValidationFailure as exc:
        raise InvalidFormat(f"Invalid posts data format: {exc}") from exc


class PostTransfer:
    """Backup and restore of the collection, independent of the active tier."""

    def __init__(
        self,
        orchestrator: SyncOrchestrator,
        local_store: LocalStore,
        file_name: str = DEFAULT_EXPORT_FILE_NAME,
    ):
        self.orchestrator = orchestrator
        self.local_store = local_store
        self.file_name = file_name

    async def export_posts(self, output_dir: Path) -> Path:
        """Write the local store's collection to ``output_dir/<file_name>``.

        The local store is the source, not the in-memory cache.

        Raises:
            StorageFailure: If the local store cannot be read.
        """
        posts = self.local_store.read_raw()
        output_dir.mkdir(parents=True, exist_ok=True)
        file_path = output_dir / self.file_name

        async with aiofiles.open(file_path, "w", encoding="utf-8") as f:
            await f.write(json.dumps(posts, indent=2, ensure_ascii=False))

        logger.info("Exported %d posts to %s", len(posts), file_path)
        return file_path

    async def import_posts(self, file_path: Path) -> bool:
        """Replace the whole collection with the posts in ``file_path``.

        Nothing is written unless every element validates.

        Raises:
            ValidationFailure: If the file cannot be read or is not a valid
                backup (:class:`InvalidFormat`).
            StorageFailure: If the local write failed.
        """
        try:
            async with aiofiles.open(file_path, "r", encoding="utf-8") as f:
                text = await f.read()
        except (OSError, UnicodeDecodeError) as exc:
            raise ValidationFailure(f"Failed to read file: {exc}") from exc

        with LogContext(logger, f"import from {file_path}"):
            posts = parse_posts_payload(text)
            await self.orchestrator.replace_posts(posts)
        logger.info("Imported %d posts from %s", len(posts), file_path)
        return True


def create_post_transfer(
    orchestrator: SyncOrchestrator,
    file_name: str = DEFAULT_EXPORT_FILE_NAME,
) -> PostTransfer:
    """Factory function to create a PostTransfer bound to the orchestrator's local store."""
    return PostTransfer(
        orchestrator=orchestrator,
        local_store=orchestrator.local_store,
        file_name=file_name,
    )
