"""
Migration tracker.

Keeps the migration log: an append-only, ordered JSON array of migration
records stored in a single file. Each record carries the forward (up)
and reverse (down) schema and an applied flag.

Invariants:
    - Records are never removed individually; only clear_migrations()
      empties the log
    - Record timestamps are strictly increasing, so ids are unique and
      sort in creation order
    - A missing log is empty; a corrupt log is treated as empty and
      logged, never raised
    - Every mutation is a whole-file rewrite (no locking, last writer wins)

How to change safely:
    - Keep record keys (camelCase) stable; existing logs depend on them
    - Never reorder the log; "last applied" follows list order

Example:
    >>> tracker = MigrationTracker("content-types/migrations/migrations.json")
    >>> record = tracker.create_migration("Add tags", ["api::tag.tag"], up, down)
    >>> record.id
    '1718000000000_add_tags'
    >>> tracker.mark_applied(record.id)
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from ..errors import PersistenceError
from ..schema.naming import slugify
from .diff import ChangeSet, Snapshot, detect_changes

logger = logging.getLogger(__name__)


@dataclass
class MigrationRecord:
    """One entry of the migration log.

    Attributes:
        id: "<timestamp>_<slug of name>"
        name: Human-readable name
        timestamp: Creation time in Unix milliseconds
        content_types: UIDs touched by this migration
        up: Schema text after the migration
        down: Schema text before the migration
        applied: Whether the migration has been applied
        applied_at: When it was applied (UTC), None while pending
    """

    id: str
    name: str
    timestamp: int
    content_types: List[str] = field(default_factory=list)
    up: str = ""
    down: str = ""
    applied: bool = False
    applied_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to log document representation."""
        result: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "timestamp": self.timestamp,
            "contentTypes": list(self.content_types),
            "up": self.up,
            "down": self.down,
            "applied": self.applied,
        }
        if self.applied_at is not None:
            result["appliedAt"] = self.applied_at.isoformat()
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> MigrationRecord:
        """Create from log document representation."""
        applied_at = data.get("appliedAt")
        return cls(
            id=data["id"],
            name=data["name"],
            timestamp=int(data["timestamp"]),
            content_types=list(data.get("contentTypes", [])),
            up=data.get("up", ""),
            down=data.get("down", ""),
            applied=bool(data.get("applied", False)),
            applied_at=_parse_datetime(applied_at) if applied_at else None,
        )


def _parse_datetime(value: str) -> datetime:
    # "Z" suffix is what JavaScript's Date.toJSON() writes
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def generate_migration_name(content_types: Sequence[str]) -> str:
    """Default migration name for a set of touched content types."""
    if len(content_types) == 1:
        return f"update_{content_types[0]}"
    return "update_content_types"


class MigrationTracker:
    """File-backed migration log.

    Every call re-reads the log file; the tracker holds no state besides
    its path and clock.

    Attributes:
        migrations_path: Path of the JSON log
    """

    def __init__(
        self,
        migrations_path: Union[str, Path],
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.migrations_path = Path(migrations_path)
        self._clock = clock

    def load_migrations(self) -> List[MigrationRecord]:
        """Load every record in log order.

        Returns:
            Records, or an empty list if the log is missing or corrupt

        Raises:
            PersistenceError: If the log exists but cannot be read
        """
        try:
            content = self.migrations_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except UnicodeDecodeError as e:
            logger.error(f"Error loading migrations from {self.migrations_path}: {e}")
            return []
        except OSError as e:
            raise PersistenceError(
                f"Cannot read migrations file {self.migrations_path}: {e}",
                path=str(self.migrations_path),
            ) from e

        try:
            data = json.loads(content)
            if not isinstance(data, list):
                raise ValueError("migrations document must be a JSON array")
            return [MigrationRecord.from_dict(item) for item in data]
        except (ValueError, KeyError, TypeError) as e:
            logger.error(f"Error loading migrations from {self.migrations_path}: {e}")
            return []

    def save_migrations(self, migrations: Sequence[MigrationRecord]) -> None:
        """Rewrite the whole log.

        Raises:
            PersistenceError: If the log cannot be written
        """
        document = json.dumps([m.to_dict() for m in migrations], indent=2)
        try:
            self.migrations_path.parent.mkdir(parents=True, exist_ok=True)
            self.migrations_path.write_text(document, encoding="utf-8")
        except OSError as e:
            raise PersistenceError(
                f"Cannot write migrations file {self.migrations_path}: {e}",
                path=str(self.migrations_path),
            ) from e

    def create_migration(
        self,
        name: str,
        content_types: Sequence[str],
        up: str,
        down: str,
    ) -> MigrationRecord:
        """Append a pending migration to the log.

        Args:
            name: Migration name; derived from content_types if empty
            content_types: UIDs touched by the migration
            up: Forward schema text
            down: Reverse schema text

        Returns:
            The new record
        """
        migrations = self.load_migrations()
        name = name or generate_migration_name(content_types)

        timestamp = int(self._clock() * 1000)
        if migrations:
            last = max(m.timestamp for m in migrations)
            if timestamp <= last:
                timestamp = last + 1

        record = MigrationRecord(
            id=f"{timestamp}_{slugify(name)}",
            name=name,
            timestamp=timestamp,
            content_types=list(content_types),
            up=up,
            down=down,
        )
        migrations.append(record)
        self.save_migrations(migrations)

        logger.info(f"Created migration {record.id} ({len(record.content_types)} content types)")
        return record

    def mark_applied(self, migration_id: str) -> None:
        """Mark a migration applied. Unknown ids are ignored."""
        self._set_applied(migration_id, True)

    def mark_unapplied(self, migration_id: str) -> None:
        """Mark a migration pending again (rollback). Unknown ids are ignored."""
        self._set_applied(migration_id, False)

    def _set_applied(self, migration_id: str, applied: bool) -> None:
        migrations = self.load_migrations()
        for record in migrations:
            if record.id == migration_id:
                record.applied = applied
                record.applied_at = (
                    datetime.fromtimestamp(self._clock(), tz=timezone.utc) if applied else None
                )
                self.save_migrations(migrations)
                logger.info(f"Marked migration {migration_id} {'applied' if applied else 'unapplied'}")
                return
        logger.debug(f"Migration {migration_id} not found; nothing to mark")

    def get_migration(self, migration_id: str) -> Optional[MigrationRecord]:
        for record in self.load_migrations():
            if record.id == migration_id:
                return record
        return None

    def get_pending_migrations(self) -> List[MigrationRecord]:
        return [m for m in self.load_migrations() if not m.applied]

    def get_applied_migrations(self) -> List[MigrationRecord]:
        return [m for m in self.load_migrations() if m.applied]

    def get_last_applied_migration(self) -> Optional[MigrationRecord]:
        """Last applied record in log order (not by applied_at)."""
        applied = self.get_applied_migrations()
        return applied[-1] if applied else None

    def has_pending_migrations(self) -> bool:
        return bool(self.get_pending_migrations())

    def detect_changes(self, old: Snapshot, new: Snapshot) -> ChangeSet:
        """Compare two registry snapshots by uid."""
        return detect_changes(old, new)

    def clear_migrations(self) -> None:
        """Empty the log. Intended for tests and resets only."""
        if self.migrations_path.exists():
            self.save_migrations([])
            logger.warning(f"Cleared migrations file {self.migrations_path}")
