"""Where shelfwise keeps its database, HTTP cache and exports."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

APP_DIR_NAME: Final[str] = "shelfwise"
DEFAULT_DB_FILENAME: Final[str] = "shelfwise.db"
HTTP_CACHE_FILENAME: Final[str] = "http_cache.db"
EXPORT_SUBDIR: Final[str] = "exports"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path
    export_dir: Path | None = None

    def _ensured(self, path: Path) -> Path:
        resolved = path.expanduser().resolve()
        resolved.mkdir(parents=True, exist_ok=True)
        return resolved

    @property
    def database_path(self) -> Path:
        return self._ensured(self.data_dir) / DEFAULT_DB_FILENAME

    @property
    def http_cache_path(self) -> Path:
        return self._ensured(self.data_dir) / HTTP_CACHE_FILENAME

    def exports_path(self, filename: str) -> Path:
        """Return the target path for an export file, creating its directory."""

        directory = self.export_dir or (self.data_dir / EXPORT_SUBDIR)
        return self._ensured(directory) / filename

    def database_uri(self) -> str:
        return f"sqlite+pysqlite:///{self.database_path}"


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str
    echo: bool = False


def platform_data_dir() -> Path:
    if os.name == "nt":
        base = os.getenv("LOCALAPPDATA")
        root = Path(base) if base else Path.home() / "AppData" / "Local"
    else:
        base = os.getenv("XDG_DATA_HOME")
        root = Path(base) if base else Path.home() / ".local" / "share"
    return root / APP_DIR_NAME


def get_storage_config() -> StorageConfig:
    data_dir = os.getenv("SHELFWISE_DATA_DIR")
    export_dir = os.getenv("SHELFWISE_EXPORT_DIR")
    return StorageConfig(
        data_dir=Path(data_dir) if data_dir else platform_data_dir(),
        export_dir=Path(export_dir) if export_dir else None,
    )


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    """Resolve the database URI; ``DATABASE_URI`` overrides the file under the data dir."""

    echo = os.getenv("SHELFWISE_SQL_ECHO", "").lower() in {"1", "true", "yes"}
    env_uri = os.getenv("DATABASE_URI")
    if env_uri:
        return DatabaseConfig(uri=env_uri, echo=echo)
    return DatabaseConfig(uri=(storage or get_storage_config()).database_uri(), echo=echo)
