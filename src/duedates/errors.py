from __future__ import annotations


# PUBLIC_INTERFACE
class DueDateStorageError(Exception):
    """Base class for every failure raised by a due date storage provider."""


# PUBLIC_INTERFACE
class NotInitializedError(DueDateStorageError):
    """The shared structured store handle was used before init_store() ran."""


# PUBLIC_INTERFACE
class DecodeError(DueDateStorageError):
    """Persisted due date content could not be decoded."""


# PUBLIC_INTERFACE
class StorageIOError(DueDateStorageError):
    """Filesystem or database access failed."""
