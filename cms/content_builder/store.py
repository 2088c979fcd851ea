"""
File-backed definitions store.

Sits above the registry and owns the definitions document
(content-types/definitions.json by default). It adds what the registry
deliberately leaves out:
- Uniqueness on create (the registry overwrites silently)
- Update with rename, and delete
- A short-lived read cache, held by the caller as a RegistryCache value

Invariants:
    - Every load re-validates each stored definition by clearing and
      redefining the store's registry
    - A fresh cache is returned unchanged; no file access happens
    - Writes always start from the file, never from a cache
    - Whole-file read/modify/rewrite, no locking (last writer wins)

Example:
    >>> store = DefinitionStore("content-types/definitions.json")
    >>> cache = store.load()
    >>> store.create(article)
    >>> cache = store.load(cache)  # still fresh, still without article
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Mapping, Optional, Union

from .errors import ContentTypeExistsError, ContentTypeNotFoundError, PersistenceError
from .schema.document import YAML_SUFFIXES, dump_definitions, load_definitions
from .schema.registry import ContentTypeRegistry
from .schema.types import ContentTypeDefinition

logger = logging.getLogger(__name__)

DEFAULT_CACHE_TTL = 5.0


@dataclass(frozen=True)
class RegistryCache:
    """A loaded snapshot and when it was taken.

    Attributes:
        value: uid -> definition snapshot
        timestamp: Clock reading at load time
        ttl: Seconds the snapshot stays fresh
    """

    value: Dict[str, ContentTypeDefinition]
    timestamp: float
    ttl: float

    def is_fresh(self, now: float) -> bool:
        return now - self.timestamp < self.ttl


class DefinitionStore:
    """Reads and writes the definitions document.

    Attributes:
        definitions_path: Path of the definitions document
        cache_ttl: Freshness of caches returned by load()
        registry: Registry holding the most recently loaded definitions
    """

    def __init__(
        self,
        definitions_path: Union[str, Path],
        cache_ttl: float = DEFAULT_CACHE_TTL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.definitions_path = Path(definitions_path)
        self.cache_ttl = cache_ttl
        self.registry = ContentTypeRegistry()
        self._clock = clock

    def load(self, cache: Optional[RegistryCache] = None) -> RegistryCache:
        """Load definitions, reusing a fresh cache.

        Args:
            cache: Result of a previous load, if any

        Returns:
            The same cache if still fresh, otherwise a new one

        Raises:
            PersistenceError: If the document exists but cannot be read or decoded
            ValidationError: If a stored definition is invalid
        """
        now = self._clock()
        if cache is not None and cache.is_fresh(now):
            return cache

        self.registry.clear()
        if self.definitions_path.exists():
            for definition in load_definitions(self.definitions_path):
                self.registry.define(definition)
        else:
            logger.debug(f"Definitions file {self.definitions_path} not found; starting empty")

        return RegistryCache(value=self.registry.get_all(), timestamp=now, ttl=self.cache_ttl)

    def get_all(self, cache: Optional[RegistryCache] = None) -> Dict[str, ContentTypeDefinition]:
        return dict(self.load(cache).value)

    def get(self, uid: str, cache: Optional[RegistryCache] = None) -> Optional[ContentTypeDefinition]:
        return self.load(cache).value.get(uid)

    def create(self, definition: ContentTypeDefinition) -> ContentTypeDefinition:
        """Store a new content type.

        Raises:
            ContentTypeExistsError: If the uid is already stored
            ValidationError: If the definition is invalid
        """
        definitions = self.get_all()
        if definition.uid in definitions:
            raise ContentTypeExistsError(definition.uid)
        definitions[definition.uid] = definition
        self.save(definitions)
        logger.info(f"Created content type {definition.uid}")
        return definition

    def update(self, uid: str, definition: ContentTypeDefinition) -> ContentTypeDefinition:
        """Replace a stored content type, renaming it if the uid changed.

        A renamed content type keeps its position in the document.

        Raises:
            ContentTypeNotFoundError: If uid is not stored
            ContentTypeExistsError: If the new uid belongs to another content type
            ValidationError: If the definition is invalid
        """
        definitions = self.get_all()
        if uid not in definitions:
            raise ContentTypeNotFoundError(uid)
        if definition.uid != uid and definition.uid in definitions:
            raise ContentTypeExistsError(definition.uid)

        updated: Dict[str, ContentTypeDefinition] = {}
        for existing_uid, existing in definitions.items():
            if existing_uid == uid:
                updated[definition.uid] = definition
            else:
                updated[existing_uid] = existing
        self.save(updated)

        if definition.uid != uid:
            logger.info(f"Renamed content type {uid} to {definition.uid}")
        else:
            logger.info(f"Updated content type {uid}")
        return definition

    def delete(self, uid: str) -> bool:
        """Remove a stored content type. Returns False if it was not stored."""
        definitions = self.get_all()
        if uid not in definitions:
            return False
        del definitions[uid]
        self.save(definitions)
        logger.info(f"Deleted content type {uid}")
        return True

    def save(self, definitions: Mapping[str, ContentTypeDefinition]) -> None:
        """Rewrite the whole document.

        Raises:
            PersistenceError: If the document cannot be written
            ValidationError: If a definition is invalid
        """
        registry = ContentTypeRegistry.from_definitions(definitions)
        fmt = "yaml" if self.definitions_path.suffix.lower() in YAML_SUFFIXES else "json"
        document = dump_definitions(registry, fmt=fmt)
        try:
            self.definitions_path.parent.mkdir(parents=True, exist_ok=True)
            self.definitions_path.write_text(document, encoding="utf-8")
        except OSError as e:
            raise PersistenceError(
                f"Cannot write definitions file {self.definitions_path}: {e}",
                path=str(self.definitions_path),
            ) from e
        logger.debug(f"Saved {len(registry)} content types to {self.definitions_path}")
