"""Remote adapter selection."""

from __future__ import annotations

import httpx

from journal_sync.config import Settings
from journal_sync.remote.base import RemoteAdapter
from journal_sync.remote.drive import DriveRemoteAdapter
from journal_sync.remote.firestore import FirestoreRemoteAdapter
from journal_sync.remote.identity import IdentityProvider, create_identity_provider
from journal_sync.storage.local_store import LocalStore


ADAPTERS: dict[str, type[RemoteAdapter]] = {
    "firestore": FirestoreRemoteAdapter,
    "drive": DriveRemoteAdapter,
}


def create_remote_adapter(
    settings: Settings,
    local_store: LocalStore,
    identity_provider: IdentityProvider | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> RemoteAdapter | None:
    """Pick the remote adapter for these settings.

    An explicit ``remote_backend`` wins. With ``auto`` the first backend
    whose credentials are stored is used (document store, then drive);
    None means the app runs local-only.
    """
    provider = identity_provider or create_identity_provider(settings)
    if settings.remote_backend == "none":
        return None

    if settings.remote_backend != "auto":
        adapter_cls = ADAPTERS[settings.remote_backend]
        return adapter_cls(settings, local_store, provider, transport=transport)

    for adapter_cls in ADAPTERS.values():
        adapter = adapter_cls(settings, local_store, provider, transport=transport)
        if adapter.is_configured():
            return adapter
    return None
