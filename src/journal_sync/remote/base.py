"""Remote store adapter interface shared by every cloud backend."""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any

import httpx
from pydantic import BaseModel

from journal_sync.config import Settings
from journal_sync.exceptions import (
    RemoteAuthFailure,
    RemoteError,
    RemoteSyncFailure,
    RemoteUnavailable,
    StorageFailure,
    ValidationFailure,
)
from journal_sync.models.post import Post, posts_from_payload, posts_to_payload
from journal_sync.remote.identity import AuthSession, IdentityProvider
from journal_sync.storage.local_store import LocalStore
from journal_sync.utils.logging import get_logger


logger = get_logger(__name__)


class RemoteStatus(str, Enum):
    """Presentation-level projection of an adapter's state."""

    not_configured = "not-configured"
    unavailable = "unavailable"
    signed_out = "available-signed-out"
    signed_in = "available-signed-in"


class RemoteAdapter(ABC):
    """Whole-collection load/save against one cloud backend.

    Public operations never raise transport errors: failures are logged,
    kept on :attr:`last_error` and reported as ``False`` / ``None``.
    Nothing touches the network while :meth:`is_configured` is false.
    """

    name: str = "remote"
    credentials_key: str = ""

    def __init__(
        self,
        settings: Settings,
        local_store: LocalStore,
        identity_provider: IdentityProvider,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings
        self.local_store = local_store
        self.identity_provider = identity_provider
        self.transport = transport
        self.session: AuthSession | None = None
        self.last_error: RemoteError | None = None
        self._available = False
        self._probe_task: asyncio.Task | None = None
        self._probe_generation = 0

    @property
    def signed_out_key(self) -> str:
        """Local store key marking an explicit sign-out of this backend."""
        return f"{self.name}_signed_out"

    # --- Credentials ---

    @abstractmethod
    def load_credentials(self) -> BaseModel:
        """Return the stored credentials (defaults when none are stored)."""

    def _read_credentials(self) -> dict[str, Any]:
        try:
            data = self.local_store.get_item(self.credentials_key)
        except StorageFailure as exc:
            logger.error("Error reading %s credentials: %s", self.name, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def save_credentials(self, credentials: BaseModel) -> bool:
        """Persist new credentials and force a fresh capability probe."""
        try:
            self.local_store.set_item(
                self.credentials_key, credentials.model_dump(by_alias=True)
            )
        except StorageFailure as exc:
            logger.error("Error saving %s credentials: %s", self.name, exc)
            return False
        self.reset_api_state()
        return True

    def is_configured(self) -> bool:
        return bool(getattr(self.load_credentials(), "is_complete", False))

    # --- Capability probe ---

    def is_available(self) -> bool:
        return self._available

    def is_signed_in(self) -> bool:
        return self._available and self.session is not None

    def status(self) -> RemoteStatus:
        if not self.is_configured():
            return RemoteStatus.not_configured
        if not self._available:
            return RemoteStatus.unavailable
        if self.session is None:
            return RemoteStatus.signed_out
        return RemoteStatus.signed_in

    async def initialize(self) -> bool:
        """Probe the backend once; concurrent callers share the same probe."""
        if self._available:
            return True
        if not self.is_configured():
            logger.info("Skipping %s initialization - credentials not configured", self.name)
            self._record(RemoteUnavailable(f"{self.name} is not configured", operation="initialize"))
            return False

        if self._probe_task is None:
            self._probe_task = asyncio.ensure_future(self._run_probe())
        task = self._probe_task
        try:
            return await task
        finally:
            if self._probe_task is task:
                self._probe_task = None

    async def _run_probe(self) -> bool:
        generation = self._probe_generation
        try:
            await self._probe()
        except RemoteError as exc:
            if generation != self._probe_generation:
                return False
            self._available = False
            self._record(RemoteUnavailable(str(exc), operation="initialize", status_code=exc.status_code))
            return False
        if generation != self._probe_generation:
            # State was reset while this probe ran; its credentials are stale.
            logger.debug("Discarding stale %s probe result", self.name)
            return False
        self._available = True
        self.last_error = None
        logger.info("%s remote store available", self.name)
        return True

    def reset_api_state(self) -> None:
        """Drop the cached probe result and session (used when credentials change).

        A probe still in flight finishes, but its result is ignored.
        """
        self._probe_generation += 1
        self._available = False
        self._probe_task = None
        self.session = None

    async def retry_connection(self) -> bool:
        """Manual retry: reset state and run the initialization path again."""
        self.reset_api_state()
        return await self.initialize()

    async def test_connection(self) -> bool:
        """Check the stored credentials against the backend."""
        return await self.retry_connection()

    # --- Authentication ---

    def is_signed_out(self) -> bool:
        """True after an explicit sign-out, until the next explicit sign-in."""
        try:
            return bool(self.local_store.get_item(self.signed_out_key))
        except StorageFailure as exc:
            logger.error("Error reading %s sign-in state: %s", self.name, exc)
            return False

    def _remember_signed_out(self, signed_out: bool) -> None:
        try:
            if signed_out:
                self.local_store.set_item(self.signed_out_key, True)
            else:
                self.local_store.remove_item(self.signed_out_key)
        except StorageFailure as exc:
            logger.error("Error saving %s sign-in state: %s", self.name, exc)

    async def sign_in(self) -> bool:
        """Explicit sign-in; also lifts a previous explicit sign-out."""
        if not self._available and not await self.initialize():
            return False
        try:
            self.session = await self._authenticate()
        except (RemoteError, httpx.HTTPError) as exc:
            self._record(RemoteAuthFailure(f"Sign in error: {exc}", operation="sign_in"))
            return False
        self._remember_signed_out(False)
        logger.info("Signed in to %s as %s", self.name, self.session.email or self.session.user_id)
        return True

    async def sign_out(self) -> bool:
        """Sign out and keep it that way across processes until :meth:`sign_in`."""
        if not self._available or self.session is None:
            return False
        try:
            await self._revoke(self.session)
        except (RemoteError, httpx.HTTPError) as exc:
            self._record(RemoteAuthFailure(f"Sign out error: {exc}", operation="sign_out"))
            return False
        self.session = None
        self._remember_signed_out(True)
        logger.info("Signed out of %s", self.name)
        return True

    async def _ensure_session(self) -> bool:
        if not self.is_configured():
            self._record(RemoteUnavailable(f"{self.name} is not configured", operation="connect"))
            return False
        if self.session is None and self.is_signed_out():
            self._record(RemoteAuthFailure(f"Signed out of {self.name}", operation="connect"))
            return False
        if not self._available and not await self.initialize():
            return False
        if self.session is None:
            return await self.sign_in()
        return True

    # --- Collection transfer ---

    async def load(self) -> list[Post] | None:
        """Load the remote collection, or None when absent or unreachable."""
        if not await self._ensure_session():
            return None
        try:
            data = await self._load_payload()
        except RemoteError as exc:
            self._record(exc)
            return None
        if data is None:
            return None
        try:
            posts = posts_from_payload(data)
        except ValidationFailure as exc:
            self._record(RemoteSyncFailure(f"Remote posts are malformed: {exc}", operation="load"))
            return None
        logger.debug("Loaded %d posts from %s", len(posts), self.name)
        return posts

    async def save(self, posts: list[Post]) -> bool:
        """Overwrite the remote collection; False on any failure."""
        if not await self._ensure_session():
            return False
        try:
            await self._save_payload(posts_to_payload(posts))
        except RemoteError as exc:
            self._record(exc)
            return False
        logger.debug("Saved %d posts to %s", len(posts), self.name)
        return True

    def _record(self, exc: RemoteError) -> None:
        self.last_error = exc
        logger.warning("%s %s failed: %s", self.name, exc.operation, exc)

    # --- Backend hooks ---

    @abstractmethod
    async def _probe(self) -> None:
        """Verify the backend is reachable with the stored credentials."""

    @abstractmethod
    async def _authenticate(self) -> AuthSession:
        """Obtain a session for the backend."""

    async def _revoke(self, session: AuthSession) -> None:
        await self.identity_provider.revoke(session)

    @abstractmethod
    async def _load_payload(self) -> Any | None:
        """Return the stored collection as JSON data, or None if absent."""

    @abstractmethod
    async def _save_payload(self, payload: list[dict[str, Any]]) -> None:
        """Store the collection JSON data."""
