"""
Snapshot Store - Persists the live match so it survives a restart.

The store:
- Holds at most one snapshot per file
- Writes plain JSON, replaced atomically on every save
- Treats an unreadable file as "no saved match"

Design decisions:
- Snapshot documents carry a format version; other versions are ignored
- Persistence is optional (a controller without a store keeps state in memory)
"""

from __future__ import annotations
import json
import logging
import os
from pathlib import Path
from typing import Any

from ..engine_core.state import MatchSnapshot

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1


def snapshot_to_dict(snapshot: MatchSnapshot) -> dict[str, Any]:
    return {"version": SNAPSHOT_VERSION, **snapshot.to_dict()}


def snapshot_from_dict(data: dict[str, Any]) -> MatchSnapshot:
    """Raises ValueError for an unknown version, KeyError if fields are missing."""
    version = data.get("version", SNAPSHOT_VERSION)
    if version != SNAPSHOT_VERSION:
        raise ValueError(f"Unsupported snapshot version: {version}")
    return MatchSnapshot.from_dict(data)


class SnapshotStore:
    """
    File-based store for one match snapshot.

    Usage:
        store = SnapshotStore("~/.rocketcards/match.json")
        store.save(snapshot)
        snapshot = store.load()   # None if nothing saved
        store.clear()
    """

    def __init__(self, path: str | Path):
        self.path = Path(path).expanduser()

    def save(self, snapshot: MatchSnapshot):
        """Write the snapshot, replacing any previous one."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(snapshot_to_dict(snapshot), f, indent=2)
        os.replace(tmp_path, self.path)

    def load(self) -> MatchSnapshot | None:
        """Read the saved snapshot; None if missing or unreadable."""
        if not self.path.exists():
            return None
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return snapshot_from_dict(json.load(f))
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            logger.warning("Ignoring unreadable snapshot %s: %s", self.path, e)
            return None

    def clear(self):
        """Remove the saved snapshot."""
        self.path.unlink(missing_ok=True)

    def exists(self) -> bool:
        return self.path.exists()
