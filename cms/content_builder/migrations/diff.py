"""
Structural diff between two registry snapshots.

Two levels of detail:
- detect_changes(): which content types were added, removed or modified
  (what a migration record lists)
- describe_changes(): what changed inside them, field by field, with a
  flag for changes that lose data

Invariants:
    - Equality is deep and structural, field declaration order included
      (order is visible in the compiled schema)
    - Metadata-only edits (display name, description) count as modified
    - Result lists follow registry order, new snapshot first for additions

How to change safely:
    - New field attributes must appear in to_dict() to be diffed
    - Adding a ChangeKind that loses data requires listing it in
      DESTRUCTIVE_KINDS

Example:
    >>> changes = detect_changes(old_registry, new_registry)
    >>> changes.added
    ['api::tag.tag']
    >>> [str(c) for c in describe_changes(old_registry, new_registry)]
    ['[OK] CONTENT_TYPE_ADDED: api::tag.tag - Content type api::tag.tag added']
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, List, Mapping, Optional, Union

from ..schema.registry import ContentTypeRegistry
from ..schema.types import ContentTypeDefinition

logger = logging.getLogger(__name__)

Snapshot = Union[ContentTypeRegistry, Mapping[str, ContentTypeDefinition]]


@dataclass
class ChangeSet:
    """Content types that differ between two snapshots.

    Attributes:
        added: UIDs only in the new snapshot
        removed: UIDs only in the old snapshot
        modified: UIDs in both whose definitions differ
    """

    added: List[str] = field(default_factory=list)
    removed: List[str] = field(default_factory=list)
    modified: List[str] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return bool(self.added or self.removed or self.modified)

    @property
    def content_types(self) -> List[str]:
        """Every affected uid: added, then modified, then removed."""
        return self.added + self.modified + self.removed

    def to_dict(self) -> Dict[str, List[str]]:
        return {"added": list(self.added), "removed": list(self.removed), "modified": list(self.modified)}


class ChangeKind(Enum):
    """Kinds of content model changes."""

    CONTENT_TYPE_ADDED = auto()
    FIELD_ADDED = auto()
    ENUM_VALUE_ADDED = auto()
    OPTIONS_CHANGED = auto()
    METADATA_CHANGED = auto()

    # Lose or reshape existing data
    CONTENT_TYPE_REMOVED = auto()
    FIELD_REMOVED = auto()
    FIELD_TYPE_CHANGED = auto()
    REQUIRED_ADDED = auto()
    ENUM_VALUE_REMOVED = auto()
    RELATION_CHANGED = auto()

    @property
    def is_destructive(self) -> bool:
        """Whether existing rows can lose data or fail to migrate."""
        return self in DESTRUCTIVE_KINDS


DESTRUCTIVE_KINDS = frozenset({
    ChangeKind.CONTENT_TYPE_REMOVED,
    ChangeKind.FIELD_REMOVED,
    ChangeKind.FIELD_TYPE_CHANGED,
    ChangeKind.REQUIRED_ADDED,
    ChangeKind.ENUM_VALUE_REMOVED,
    ChangeKind.RELATION_CHANGED,
})


@dataclass
class SchemaChange:
    """A single change between two snapshots.

    Attributes:
        kind: The type of change
        path: Path to the changed element (e.g., "api::article.article.title")
        old_value: Previous value (if applicable)
        new_value: New value (if applicable)
        message: Human-readable description of the change
    """

    kind: ChangeKind
    path: str
    old_value: Optional[Any] = None
    new_value: Optional[Any] = None
    message: str = ""

    @property
    def is_destructive(self) -> bool:
        return self.kind.is_destructive

    def __str__(self) -> str:
        status = "DESTRUCTIVE" if self.is_destructive else "OK"
        return f"[{status}] {self.kind.name}: {self.path} - {self.message}"


def _as_definitions(snapshot: Snapshot) -> Dict[str, ContentTypeDefinition]:
    if isinstance(snapshot, ContentTypeRegistry):
        return snapshot.get_all()
    return dict(snapshot)


def structurally_equal(a: ContentTypeDefinition, b: ContentTypeDefinition) -> bool:
    """Deep equality of two definitions, including field order."""
    return a.to_dict() == b.to_dict() and a.field_names() == b.field_names()


def detect_changes(old: Snapshot, new: Snapshot) -> ChangeSet:
    """Compare two registry snapshots by uid.

    Args:
        old: Baseline snapshot
        new: Current snapshot

    Returns:
        ChangeSet with added, removed and modified uids
    """
    old_defs = _as_definitions(old)
    new_defs = _as_definitions(new)

    changes = ChangeSet()
    for uid, definition in new_defs.items():
        if uid not in old_defs:
            changes.added.append(uid)
        elif not structurally_equal(old_defs[uid], definition):
            changes.modified.append(uid)
    for uid in old_defs:
        if uid not in new_defs:
            changes.removed.append(uid)

    logger.debug(
        f"Detected changes: {len(changes.added)} added, "
        f"{len(changes.removed)} removed, {len(changes.modified)} modified"
    )
    return changes


def describe_changes(old: Snapshot, new: Snapshot) -> List[SchemaChange]:
    """List field-level changes between two snapshots.

    Returns:
        SchemaChange objects; check is_destructive before applying
    """
    old_defs = _as_definitions(old)
    new_defs = _as_definitions(new)
    changes: List[SchemaChange] = []

    for uid in old_defs:
        if uid not in new_defs:
            changes.append(SchemaChange(
                kind=ChangeKind.CONTENT_TYPE_REMOVED,
                path=uid,
                message=f"Content type {uid} was removed",
            ))

    for uid, new_def in new_defs.items():
        if uid not in old_defs:
            changes.append(SchemaChange(
                kind=ChangeKind.CONTENT_TYPE_ADDED,
                path=uid,
                message=f"Content type {uid} added",
            ))
        else:
            changes.extend(_check_definition_diff(old_defs[uid], new_def))

    return changes


def _check_definition_diff(
    old_def: ContentTypeDefinition,
    new_def: ContentTypeDefinition,
) -> List[SchemaChange]:
    """Check differences between two versions of a content type."""
    changes: List[SchemaChange] = []
    uid = new_def.uid
    old_dict = old_def.to_dict()
    new_dict = new_def.to_dict()

    for key in ("displayName", "singularName", "pluralName", "description"):
        if old_dict.get(key, "") != new_dict.get(key, ""):
            changes.append(SchemaChange(
                kind=ChangeKind.METADATA_CHANGED,
                path=f"{uid}.{key}",
                old_value=old_dict.get(key),
                new_value=new_dict.get(key),
                message=f"{key} changed",
            ))

    if old_dict["options"] != new_dict["options"]:
        changes.append(SchemaChange(
            kind=ChangeKind.OPTIONS_CHANGED,
            path=f"{uid}.options",
            old_value=old_dict["options"],
            new_value=new_dict["options"],
            message="Options changed",
        ))

    old_fields = old_dict["fields"]
    new_fields = new_dict["fields"]

    for name in old_fields:
        if name not in new_fields:
            changes.append(SchemaChange(
                kind=ChangeKind.FIELD_REMOVED,
                path=f"{uid}.{name}",
                old_value=old_fields[name]["type"],
                message=f"Field {name} was removed",
            ))

    for name, new_field in new_fields.items():
        if name not in old_fields:
            changes.append(SchemaChange(
                kind=ChangeKind.FIELD_ADDED,
                path=f"{uid}.{name}",
                new_value=new_field["type"],
                message=f"Field {name} added",
            ))
        else:
            changes.extend(_check_field_diff(old_fields[name], new_field, f"{uid}.{name}"))

    return changes


def _check_field_diff(old_field: dict, new_field: dict, path: str) -> List[SchemaChange]:
    """Check differences between two versions of a field."""
    changes: List[SchemaChange] = []

    if old_field["type"] != new_field["type"]:
        changes.append(SchemaChange(
            kind=ChangeKind.FIELD_TYPE_CHANGED,
            path=path,
            old_value=old_field["type"],
            new_value=new_field["type"],
            message=f"Field type changed from {old_field['type']} to {new_field['type']}",
        ))
        return changes

    if not old_field.get("required", False) and new_field.get("required", False):
        changes.append(SchemaChange(
            kind=ChangeKind.REQUIRED_ADDED,
            path=path,
            message="Field changed from optional to required",
        ))

    if new_field["type"] == "enumeration":
        changes.extend(_check_enum_values(old_field["values"], new_field["values"], path))

    if new_field["type"] == "relation":
        relation_keys = ("relationType", "target", "mappedBy", "inversedBy")
        old_relation = {k: old_field.get(k) for k in relation_keys}
        new_relation = {k: new_field.get(k) for k in relation_keys}
        if old_relation != new_relation:
            changes.append(SchemaChange(
                kind=ChangeKind.RELATION_CHANGED,
                path=path,
                old_value=old_relation,
                new_value=new_relation,
                message="Relation changed",
            ))

    return changes


def _check_enum_values(old_values: List[str], new_values: List[str], path: str) -> List[SchemaChange]:
    """Check enum value changes, reporting values in declaration order."""
    changes: List[SchemaChange] = []

    for value in old_values:
        if value not in new_values:
            changes.append(SchemaChange(
                kind=ChangeKind.ENUM_VALUE_REMOVED,
                path=path,
                old_value=value,
                message=f"Enum value {value} was removed",
            ))

    for value in new_values:
        if value not in old_values:
            changes.append(SchemaChange(
                kind=ChangeKind.ENUM_VALUE_ADDED,
                path=path,
                new_value=value,
                message=f"Enum value {value} was added",
            ))

    return changes
