"""
Migration tracking for content models.

- diff: structural comparison of two registry snapshots
- tracker: the append-only migration log

Invariants:
    - The log is ordered; last applied follows list order
    - Changes are detected structurally, field order included
"""

from .diff import (
    ChangeKind,
    ChangeSet,
    SchemaChange,
    describe_changes,
    detect_changes,
    structurally_equal,
)
from .tracker import MigrationRecord, MigrationTracker, generate_migration_name

__all__ = [
    # Diff
    "ChangeKind",
    "ChangeSet",
    "SchemaChange",
    "describe_changes",
    "detect_changes",
    "structurally_equal",
    # Tracker
    "MigrationRecord",
    "MigrationTracker",
    "generate_migration_name",
]
