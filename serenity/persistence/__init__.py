"""
Persistence module for exporting and restoring system snapshots.
"""

from .snapshot_manager import SnapshotManager, SystemSnapshot, SessionRecord, PersonRecord

__all__ = [
    "SnapshotManager",
    "SystemSnapshot",
    "SessionRecord",
    "PersonRecord",
]
