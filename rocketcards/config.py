"""
Environment configuration.

    ROCKETCARDS_DATA_DIR       Directory of collection JSON files (bundled data if unset)
    ROCKETCARDS_SNAPSHOT_PATH  File the CLI persists its match snapshot to (off if unset)
    ROCKETCARDS_SNAPSHOT_DIR   Directory the API persists one snapshot per match to (off if unset)
    ALLOWED_ORIGINS            Comma-separated CORS origins for the HTTP API
"""

from __future__ import annotations
import os
from pathlib import Path


def _path_from_env(name: str) -> Path | None:
    value = os.getenv(name)
    return Path(value).expanduser() if value else None


def data_dir() -> Path | None:
    return _path_from_env("ROCKETCARDS_DATA_DIR")


def snapshot_path() -> Path | None:
    return _path_from_env("ROCKETCARDS_SNAPSHOT_PATH")


def snapshot_dir() -> Path | None:
    return _path_from_env("ROCKETCARDS_SNAPSHOT_DIR")


def allowed_origins() -> list[str]:
    return [origin.strip() for origin in os.getenv("ALLOWED_ORIGINS", "*").split(",") if origin.strip()]
