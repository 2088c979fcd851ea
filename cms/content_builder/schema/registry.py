"""
Content type registry.

The ContentTypeRegistry holds every known content type definition keyed
by uid. It provides:
- Definition (validate in isolation, then insert or overwrite)
- Lookup by uid
- Snapshots for diffing (get_all) and serialization
- Schema fingerprinting for consistency checks

Invariants:
    - define() validates a definition on its own; relation targets are
      never checked here so forward and mutual references are legal
    - Redefining a uid overwrites it silently (clear + redefine must be
      idempotent when reloading from storage)
    - Insertion order is preserved so compilation is deterministic

How to change safely:
    - Cross-model checks belong to the compiler, not to define()
    - Uniqueness-on-create belongs to the store above the registry

Example:
    >>> registry = ContentTypeRegistry()
    >>> registry.define(article).define(user)
    >>> registry.get("api::article.article").display_name
    'Article'
"""

from __future__ import annotations

import hashlib
import json
import logging
import re
import threading
from typing import Dict, Iterator, List, Mapping, Optional

from ..errors import ValidationError
from .types import (
    ContentTypeDefinition,
    EnumerationField,
    Field,
    RelationField,
    RelationKind,
    ScalarField,
)

logger = logging.getLogger(__name__)

RESERVED_FIELD_NAMES = ("id",)
TIMESTAMP_FIELD_NAMES = ("createdAt", "updatedAt")
SOFT_DELETE_FIELD_NAME = "deletedAt"

# Field names and enum values become Prisma identifiers
IDENTIFIER_PATTERN = re.compile(r"[A-Za-z][A-Za-z0-9_]*")


def validate_definition(definition: ContentTypeDefinition) -> None:
    """Validate a content type definition in isolation.

    Args:
        definition: The definition to validate

    Raises:
        ValidationError: Naming the first missing or invalid attribute
    """
    if _is_blank(definition.uid):
        raise ValidationError("Content type must have a uid", attribute="uid")
    uid = definition.uid
    if _is_blank(definition.display_name):
        raise ValidationError(
            "Content type must have a displayName", attribute="displayName", content_type=uid
        )
    if _is_blank(definition.singular_name):
        raise ValidationError(
            "Content type must have a singularName", attribute="singularName", content_type=uid
        )
    if _is_blank(definition.plural_name):
        raise ValidationError(
            "Content type must have a pluralName", attribute="pluralName", content_type=uid
        )
    if not definition.fields:
        raise ValidationError(
            "Content type must have at least one field", attribute="fields", content_type=uid
        )

    reserved = set(RESERVED_FIELD_NAMES)
    if definition.options.timestamps:
        reserved.update(TIMESTAMP_FIELD_NAMES)
    if definition.options.soft_delete:
        reserved.add(SOFT_DELETE_FIELD_NAME)

    for name, f in definition.fields.items():
        if isinstance(name, str) and not name.strip():
            raise ValidationError(
                f"Field name cannot be empty in content type {uid}",
                attribute="fields",
                content_type=uid,
            )
        if not isinstance(name, str) or not IDENTIFIER_PATTERN.fullmatch(name):
            raise ValidationError(
                f"Field name {name!r} in content type {uid} must start with a letter "
                f"and contain only letters, digits and underscores",
                attribute="fields",
                content_type=uid,
            )
        if name in reserved:
            raise ValidationError(
                f"Field name {name} is reserved in content type {uid}",
                attribute=name,
                content_type=uid,
            )
        _validate_field(name, f, uid)


def _is_blank(value: object) -> bool:
    return not isinstance(value, str) or not value.strip()


def _validate_field(name: str, f: Field, uid: str) -> None:
    """Validate a single field."""
    if isinstance(f, EnumerationField):
        if not isinstance(f.values, (list, tuple)):
            raise ValidationError(
                f"Enumeration field {name} in content type {uid} must list its values",
                attribute=name,
                content_type=uid,
            )
        if not f.values:
            raise ValidationError(
                f"Enumeration field {name} in content type {uid} must have values",
                attribute=name,
                content_type=uid,
            )
        if any(not isinstance(v, str) or not v.strip() for v in f.values):
            raise ValidationError(
                f"Enumeration field {name} in content type {uid} has an empty value",
                attribute=name,
                content_type=uid,
            )
        invalid = [v for v in f.values if not IDENTIFIER_PATTERN.fullmatch(v)]
        if invalid:
            raise ValidationError(
                f"Enumeration field {name} in content type {uid} has values that are not "
                f"identifiers: {invalid}",
                attribute=name,
                content_type=uid,
            )
        if len(set(f.values)) != len(f.values):
            raise ValidationError(
                f"Enumeration field {name} in content type {uid} has duplicate values",
                attribute=name,
                content_type=uid,
            )
        if f.default is not None and f.default not in f.values:
            raise ValidationError(
                f"Default '{f.default}' of enumeration field {name} in content type {uid} "
                f"must be one of {list(f.values)}",
                attribute=name,
                content_type=uid,
            )

    elif isinstance(f, RelationField):
        if not f.target:
            raise ValidationError(
                f"Relation field {name} in content type {uid} must have a target",
                attribute=name,
                content_type=uid,
            )
        if not isinstance(f.relation, RelationKind):
            raise ValidationError(
                f"Relation field {name} in content type {uid} must have a relationType",
                attribute=name,
                content_type=uid,
            )
        if f.mapped_by and f.inversed_by:
            raise ValidationError(
                f"Relation field {name} in content type {uid} cannot set both "
                f"mappedBy and inversedBy",
                attribute=name,
                content_type=uid,
            )

    elif isinstance(f, ScalarField):
        for attr in ("min_length", "max_length"):
            value = getattr(f, attr)
            if value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValidationError(
                    f"Field {name} in content type {uid}: {attr} must be an integer, got {value!r}",
                    attribute=name,
                    content_type=uid,
                )
            if value < 0:
                raise ValidationError(
                    f"Field {name} in content type {uid}: {attr} must be >= 0, got {value}",
                    attribute=name,
                    content_type=uid,
                )
        for attr in ("min", "max"):
            value = getattr(f, attr)
            if value is not None and (isinstance(value, bool) or not isinstance(value, (int, float))):
                raise ValidationError(
                    f"Field {name} in content type {uid}: {attr} must be a number, got {value!r}",
                    attribute=name,
                    content_type=uid,
                )
        if f.min_length is not None and f.max_length is not None and f.min_length > f.max_length:
            raise ValidationError(
                f"Field {name} in content type {uid}: minLength exceeds maxLength",
                attribute=name,
                content_type=uid,
            )
        if f.min is not None and f.max is not None and f.min > f.max:
            raise ValidationError(
                f"Field {name} in content type {uid}: min exceeds max",
                attribute=name,
                content_type=uid,
            )

    else:
        raise ValidationError(
            f"Field {name} in content type {uid} must have a type",
            attribute=name,
            content_type=uid,
        )


class ContentTypeRegistry:
    """Registry of content type definitions keyed by uid.

    Thread-safety:
        - define/remove/clear take an internal lock
        - Lookups are lock-free

    Example:
        >>> registry = ContentTypeRegistry()
        >>> registry.define(article)
        >>> registry.has("api::article.article")
        True
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._definitions: Dict[str, ContentTypeDefinition] = {}
        self._lock = threading.Lock()

    def define(self, definition: ContentTypeDefinition) -> ContentTypeRegistry:
        """Validate and store a definition, overwriting any previous one.

        Args:
            definition: The content type to define

        Returns:
            The registry, for chaining

        Raises:
            ValidationError: If the definition is structurally invalid
        """
        validate_definition(definition)
        with self._lock:
            replaced = definition.uid in self._definitions
            self._definitions[definition.uid] = definition
        logger.debug(
            f"{'Redefined' if replaced else 'Defined'} content type: {definition.uid} "
            f"({len(definition.fields)} fields)"
        )
        return self

    def get(self, uid: str) -> Optional[ContentTypeDefinition]:
        """Get a definition by uid."""
        return self._definitions.get(uid)

    def has(self, uid: str) -> bool:
        """Check whether a uid is defined."""
        return uid in self._definitions

    def get_all(self) -> Dict[str, ContentTypeDefinition]:
        """Snapshot of all definitions (a copy, in insertion order)."""
        return dict(self._definitions)

    def remove(self, uid: str) -> bool:
        """Remove a definition. Returns False if it was not defined."""
        with self._lock:
            if uid in self._definitions:
                del self._definitions[uid]
                return True
            return False

    def clear(self) -> None:
        """Remove every definition (used when reloading from storage)."""
        with self._lock:
            self._definitions = {}

    def __contains__(self, uid: object) -> bool:
        return uid in self._definitions

    def __iter__(self) -> Iterator[ContentTypeDefinition]:
        return iter(list(self._definitions.values()))

    def __len__(self) -> int:
        return len(self._definitions)

    def fingerprint(self) -> str:
        """Compute SHA-256 fingerprint of the registry.

        The fingerprint is computed from a canonical JSON representation
        sorted by key, so it only changes when the content model changes.

        Returns:
            Fingerprint string in format 'sha256:<hash>'
        """
        canonical = json.dumps(self.to_dict(), sort_keys=True, separators=(",", ":"))
        return f"sha256:{hashlib.sha256(canonical.encode('utf-8')).hexdigest()}"

    def to_dict(self) -> Dict[str, dict]:
        """Convert to the definitions document (uid -> definition)."""
        return {uid: d.to_dict() for uid, d in self._definitions.items()}

    def to_json(self, indent: Optional[int] = 2) -> str:
        """Convert to a JSON definitions document."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Mapping[str, dict]) -> ContentTypeRegistry:
        """Create a registry from a definitions document.

        Raises:
            ValidationError: If any definition is invalid
        """
        registry = cls()
        for definition_data in data.values():
            registry.define(ContentTypeDefinition.from_dict(definition_data))
        return registry

    @classmethod
    def from_definitions(
        cls, definitions: Mapping[str, ContentTypeDefinition]
    ) -> ContentTypeRegistry:
        """Create a registry from an existing uid -> definition mapping."""
        registry = cls()
        for definition in definitions.values():
            registry.define(definition)
        return registry

    def validate_all(self) -> List[str]:
        """Check cross-model consistency without compiling.

        Returns:
            List of problems (empty if every relation target is defined)
        """
        errors: List[str] = []
        for definition in self._definitions.values():
            for name, f in definition.relation_fields():
                if f.target not in self._definitions:
                    errors.append(
                        f"Relation field '{name}' in content type '{definition.uid}' "
                        f"references unknown content type '{f.target}'"
                    )
        return errors
