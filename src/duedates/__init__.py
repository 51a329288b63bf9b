"""
Due dates plugin package.

Attaches an optional due date to tasks owned by a host application, stored
either in a structured SQLAlchemy store or in a single JSON document.
"""

from .errors import DecodeError, DueDateStorageError, NotInitializedError, StorageIOError  # noqa: F401
from .models import DueDateRecord  # noqa: F401
from .plugin import DueDatePlugin  # noqa: F401
from .repositories import FileStorageProvider, StorageProvider, get_provider  # noqa: F401
