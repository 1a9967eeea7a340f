"""Error taxonomy for the post persistence layer."""

from __future__ import annotations


class JournalSyncError(Exception):
    """Base class for all journal-sync errors."""


class ValidationFailure(JournalSyncError):
    """Raised when a payload does not have the shape of a post collection."""


class InvalidFormat(ValidationFailure):
    """Raised when an import file is not a JSON array of valid posts."""

    def __init__(self, message: str, *, index: int | None = None) -> None:
        super().__init__(message)
        self.index = index


class StorageFailure(JournalSyncError):
    """Raised when the local store cannot read or write a key."""

    def __init__(self, message: str, *, key: str | None = None) -> None:
        super().__init__(message)
        self.key = key


class RemoteError(JournalSyncError):
    """Base class for remote tier failures."""

    def __init__(self, message: str, *, operation: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.operation = operation
        self.status_code = status_code


class RemoteUnavailable(RemoteError):
    """Raised when the remote tier is not configured or failed to initialize."""


class RemoteAuthFailure(RemoteError):
    """Raised when sign-in or sign-out is rejected."""


class RemoteSyncFailure(RemoteError):
    """Raised when a load or save fails in transport."""
