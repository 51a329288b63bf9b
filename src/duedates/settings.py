from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import List


# PUBLIC_INTERFACE
class StorageType(str, Enum):
    """Storage backend selectable through DUE_DATES_STORAGE."""

    STRUCTURED = "structured"
    FILE = "file"


_STORAGE_ALIASES = {
    "structured": StorageType.STRUCTURED,
    "sqlite": StorageType.STRUCTURED,
    "database": StorageType.STRUCTURED,
    "file": StorageType.FILE,
    "json": StorageType.FILE,
}


@dataclass(frozen=True)
class Settings:
    """
    Plugin settings loaded from environment variables.

    Env vars:
    - DUE_DATES_ENABLED: 'false' turns the whole plugin into a no-op (default: true)
    - DUE_DATES_STORAGE: 'file' (default) or 'structured' ('json' and 'sqlite' are accepted aliases)
    - DUE_DATES_DATABASE_URL: SQLAlchemy URL of the structured store. Default 'sqlite:///./data/duedates.db'
    - DUE_DATES_DOCUMENTS_DIR: directory holding the JSON document. Default './data'
    - DUE_DATES_FILENAME: name of the JSON document. Default 'duedates.json'
    - LOG_LEVEL: logging level name for the 'duedates' logger (default: INFO)
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    """

    enabled: bool = True
    storage_type: StorageType = StorageType.FILE
    database_url: str = "sqlite:///./data/duedates.db"
    documents_dir: str = "./data"
    filename: str = "duedates.json"
    log_level: str = "INFO"
    cors_allow_origins: List[str] = field(default_factory=lambda: ["*"])

    @property
    def file_path(self) -> str:
        return os.path.join(self.documents_dir, self.filename)


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_bool(value: str, default: bool = False) -> bool:
    v = value.strip().lower()
    if v in {"1", "true", "yes", "on"}:
        return True
    if v in {"0", "false", "no", "off"}:
        return False
    return default


def _parse_storage(value: str) -> StorageType:
    # Unknown names fall back to the file backend
    return _STORAGE_ALIASES.get(value.strip().lower(), StorageType.FILE)


def _parse_origins(origins_value: str) -> List[str]:
    value = origins_value.strip()
    if value == "*":
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return plugin settings loaded from environment variables."""
    return Settings(
        enabled=_parse_bool(_get_env("DUE_DATES_ENABLED", "true"), True),
        storage_type=_parse_storage(_get_env("DUE_DATES_STORAGE", "file")),
        database_url=_get_env("DUE_DATES_DATABASE_URL", "sqlite:///./data/duedates.db").strip(),
        documents_dir=_get_env("DUE_DATES_DOCUMENTS_DIR", "./data").strip(),
        filename=_get_env("DUE_DATES_FILENAME", "duedates.json").strip(),
        log_level=_get_env("LOG_LEVEL", "INFO").strip().upper(),
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*")),
    )
