"""
Errors reported by a command synchronization pass.

Per-command failures are collected on the pass result instead of being
raised, so one failing command never stops the others. The underlying
exception, if any, is kept as `__cause__`.
"""

from typing import Optional


class SyncError(Exception):
    """Base class for synchronization errors."""

    def __init__(self, message: str, command: Optional[str] = None):
        super().__init__(message)
        self.command = command


class DuplicateCommandName(SyncError):
    """Raised for an enabled command whose name was already declared earlier."""
    pass


class RemoteRegistrationFailed(SyncError):
    """Raised when creating a command on Discord fails or times out."""
    pass


class RemoteDeletionFailed(SyncError):
    """Raised when deleting a command on Discord fails or times out."""
    pass


class PersistenceWriteFailed(SyncError):
    """Raised when the registered command names could not be saved."""
    pass


class RemoteListingFailed(SyncError):
    """Raised when the live global commands could not be fetched. Aborts the pass."""
    pass


class RegisteredStateUnavailable(SyncError):
    """Raised when the registered command names could not be loaded. Aborts the pass."""
    pass
