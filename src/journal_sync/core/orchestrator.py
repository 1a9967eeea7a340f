"""Sync orchestrator: tier precedence, the in-memory cache and change events."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Callable, Iterable, Literal

import httpx

from journal_sync.config import Settings
from journal_sync.core.defaults import default_posts
from journal_sync.exceptions import RemoteError, StorageFailure
from journal_sync.models.post import Post, sort_posts_by_date
from journal_sync.remote.base import RemoteAdapter
from journal_sync.remote.factory import create_remote_adapter
from journal_sync.remote.identity import IdentityProvider
from journal_sync.storage.local_store import LocalStore, create_local_store
from journal_sync.utils.logging import get_logger


logger = get_logger(__name__)


@dataclass(frozen=True)
class PostsChangedEvent:
    """Fired after a successful add or import."""

    reason: Literal["add", "import"]
    count: int
    slug: str | None = None


Listener = Callable[[PostsChangedEvent], None]


class SyncOrchestrator:
    """Mediates every read and write of the post collection.

    Reads resolve Remote > Local > built-in defaults once, then serve from
    the cache for the rest of the orchestrator's lifetime. Writes update the
    cache, then the local store, then dispatch a detached remote save whose
    outcome is only logged.
    """

    def __init__(self, local_store: LocalStore, remote: RemoteAdapter | None = None):
        self.local_store = local_store
        self.remote = remote
        self._cache: list[Post] | None = None
        self._listeners: list[Listener] = []
        self._pending: set[asyncio.Task] = set()

    def _remote_ready(self) -> bool:
        return (
            self.remote is not None
            and self.remote.is_configured()
            and self.remote.is_available()
            and self.remote.is_signed_in()
        )

    # --- Read path ---

    async def load_posts(self) -> list[Post]:
        """Return the collection, resolving tier precedence on first use."""
        if self._cache is not None:
            return list(self._cache)

        if self._remote_ready():
            try:
                remote_posts = await self.remote.load()
            except RemoteError as exc:
                logger.warning("Error loading posts from %s: %s", self.remote.name, exc)
                remote_posts = None
            # A write may have landed while the remote load was in flight.
            if self._cache is not None:
                return list(self._cache)
            if remote_posts:
                logger.info("Loaded %d posts from %s", len(remote_posts), self.remote.name)
                self._cache = remote_posts
                return list(remote_posts)

        try:
            stored = self.local_store.read()
        except StorageFailure as exc:
            logger.error("Error loading posts: %s", exc)
            self._cache = default_posts()
            return list(self._cache)

        if stored is not None:
            self._cache = stored
            return list(stored)

        seeded = default_posts()
        try:
            self.local_store.write(seeded)
        except StorageFailure as exc:
            logger.error("Error seeding default posts: %s", exc)
        logger.info("Seeded %d default posts", len(seeded))
        self._cache = seeded
        return list(seeded)

    async def get_all_posts(self) -> list[Post]:
        """All posts, newest first."""
        return sort_posts_by_date(await self.load_posts())

    async def get_post_by_slug(self, slug: str) -> Post | None:
        for post in await self.load_posts():
            if post.slug == slug:
                return post
        return None

    # --- Write path ---

    async def save_posts(self, posts: Iterable[Post]) -> None:
        """Persist the whole collection.

        The cache is updated before any I/O. A local store failure is logged,
        does not prevent the remote dispatch, and is then re-raised. The
        remote save runs as a detached task and never affects the result.

        Raises:
            StorageFailure: If the local write failed.
        """
        posts = list(posts)
        self._cache = posts

        local_error: StorageFailure | None = None
        try:
            self.local_store.write(posts)
        except StorageFailure as exc:
            logger.error("Error saving posts to local store: %s", exc)
            local_error = exc

        if self._remote_ready():
            self._dispatch_remote_save(list(posts))

        if local_error is not None:
            raise local_error

    def _dispatch_remote_save(self, posts: list[Post]) -> None:
        task = asyncio.get_running_loop().create_task(self._remote_save(posts))
        self._pending.add(task)
        task.add_done_callback(self._on_remote_save_done)

    async def _remote_save(self, posts: list[Post]) -> bool:
        try:
            saved = await self.remote.save(posts)
        except RemoteError as exc:
            logger.warning("Error saving posts to %s: %s", self.remote.name, exc)
            return False
        if not saved:
            logger.warning("Posts were not synced to %s; they are stored locally only", self.remote.name)
        return saved

    def _on_remote_save_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Remote save crashed: %s", exc, exc_info=exc)

    async def wait_for_sync(self) -> None:
        """Wait for every dispatched remote save to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    @property
    def has_pending_sync(self) -> bool:
        return bool(self._pending)

    # --- Mutations ---

    async def add_post(self, post: Post) -> None:
        """Insert a post, replacing any post with the same slug in place."""
        posts = await self.load_posts()
        for index, existing in enumerate(posts):
            if existing.slug == post.slug:
                posts[index] = post
                break
        else:
            posts.insert(0, post)

        await self.save_posts(posts)
        self._notify(PostsChangedEvent(reason="add", count=len(posts), slug=post.slug))

    async def replace_posts(self, posts: Iterable[Post]) -> None:
        """Replace the whole collection (used by import)."""
        posts = list(posts)
        await self.save_posts(posts)
        self._notify(PostsChangedEvent(reason="import", count=len(posts)))

    def clear_local_data(self) -> None:
        """Delete the locally stored collection and forget the cache.

        Raises:
            StorageFailure: If the local key could not be removed.
        """
        self.local_store.clear()
        self._cache = None

    # --- Change notification ---

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, event: PostsChangedEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Posts listener %r failed", listener)


def create_orchestrator(
    settings: Settings,
    identity_provider: IdentityProvider | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> SyncOrchestrator:
    """Factory function wiring the local store and remote adapter from settings."""
    local_store = create_local_store(settings.local_store_dir, settings.local_quota_bytes)
    remote = create_remote_adapter(settings, local_store, identity_provider, transport=transport)
    return SyncOrchestrator(local_store=local_store, remote=remote)
