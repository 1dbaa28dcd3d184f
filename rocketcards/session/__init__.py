"""
Session module - Live match ownership and persistence.
"""

from .snapshot import SNAPSHOT_VERSION, SnapshotStore, snapshot_from_dict, snapshot_to_dict
from .controller import MatchController
from .manager import MatchManager, MatchNotFoundError, MatchSession

__all__ = [
    "SNAPSHOT_VERSION",
    "SnapshotStore",
    "snapshot_from_dict",
    "snapshot_to_dict",
    "MatchController",
    "MatchManager",
    "MatchNotFoundError",
    "MatchSession",
]
