"""Data storage configuration helpers."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

APP_DIR_NAME: Final[str] = "geofacts"
OUTPUT_DIRNAME: Final[str] = "output"
HTTP_CACHE_FILENAME: Final[str] = "http_cache.db"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path
    output_dir: Path | None = None
    http_cache_filename: str = HTTP_CACHE_FILENAME

    def resolve_data_dir(self) -> Path:
        return self.data_dir.expanduser().resolve()

    def ensure_data_dir(self) -> Path:
        data_dir = self.resolve_data_dir()
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir

    def output_path(self, *, ensure: bool = True) -> Path:
        path = (self.output_dir or self.resolve_data_dir() / OUTPUT_DIRNAME).expanduser().resolve()
        if ensure:
            path.mkdir(parents=True, exist_ok=True)
        return path

    def http_cache_path(self, *, ensure: bool = True) -> Path:
        base = self.ensure_data_dir() if ensure else self.resolve_data_dir()
        return base / self.http_cache_filename


def _default_data_dir() -> Path:
    if os.name == "nt":
        base = os.getenv("LOCALAPPDATA")
        base_path = Path(base) if base else (Path.home() / "AppData" / "Local")
    else:
        base = os.getenv("XDG_DATA_HOME")
        base_path = Path(base) if base else (Path.home() / ".local" / "share")
    return (base_path / APP_DIR_NAME).expanduser().resolve()


def get_storage_config(*, output_dir: Path | None = None) -> StorageConfig:
    env_dir = os.getenv("GEOFACTS_DATA_DIR")
    data_dir = Path(env_dir) if env_dir else _default_data_dir()
    env_output = os.getenv("GEOFACTS_OUTPUT_DIR")
    if output_dir is None and env_output:
        output_dir = Path(env_output)
    return StorageConfig(data_dir=data_dir, output_dir=output_dir)
