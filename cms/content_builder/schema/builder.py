"""
Fluent builder for content type definitions.

build() validates and returns a definition without registering it;
registration is a separate, explicit call to ContentTypeRegistry.define().
This lets callers validate speculative definitions (previews) without
touching any registry.

Example:
    >>> article = (
    ...     ContentTypeBuilder("api::article.article")
    ...     .display_name("Article")
    ...     .singular_name("article")
    ...     .plural_name("articles")
    ...     .field("title", fields.string(required=True))
    ...     .build()
    ... )
    >>> registry.define(article)
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from .naming import generate_plural_name, generate_singular_name, generate_uid
from .registry import validate_definition
from .types import ContentTypeDefinition, ContentTypeOptions, Field


class ContentTypeBuilder:
    """Accumulates names, fields and options for one content type.

    Timestamps are enabled by default.
    """

    def __init__(self, uid: str) -> None:
        self._uid = uid
        self._display_name = ""
        self._singular_name = ""
        self._plural_name = ""
        self._description = ""
        self._fields: Dict[str, Field] = {}
        self._options: Dict[str, Any] = {"timestamps": True, "soft_delete": False, "table_name": None}

    @classmethod
    def create(cls, uid: str) -> ContentTypeBuilder:
        return cls(uid)

    @classmethod
    def from_display_name(cls, display_name: str) -> ContentTypeBuilder:
        """Start a builder with uid and names derived from a display name."""
        singular = generate_singular_name(display_name)
        return (
            cls(generate_uid(display_name))
            .display_name(display_name)
            .singular_name(singular)
            .plural_name(generate_plural_name(singular))
        )

    def display_name(self, name: str) -> ContentTypeBuilder:
        self._display_name = name
        return self

    def singular_name(self, name: str) -> ContentTypeBuilder:
        self._singular_name = name
        return self

    def plural_name(self, name: str) -> ContentTypeBuilder:
        self._plural_name = name
        return self

    def description(self, description: str) -> ContentTypeBuilder:
        self._description = description
        return self

    def field(self, name: str, field: Field) -> ContentTypeBuilder:
        """Add (or replace) a field; declaration order is kept."""
        self._fields[name] = field
        return self

    def options(
        self,
        *,
        timestamps: Optional[bool] = None,
        soft_delete: Optional[bool] = None,
        table_name: Optional[str] = None,
    ) -> ContentTypeBuilder:
        """Merge options; arguments left as None keep their current value."""
        if timestamps is not None:
            self._options["timestamps"] = timestamps
        if soft_delete is not None:
            self._options["soft_delete"] = soft_delete
        if table_name is not None:
            self._options["table_name"] = table_name
        return self

    def timestamps(self, enabled: bool = True) -> ContentTypeBuilder:
        return self.options(timestamps=enabled)

    def soft_delete(self, enabled: bool = True) -> ContentTypeBuilder:
        return self.options(soft_delete=enabled)

    def table_name(self, name: str) -> ContentTypeBuilder:
        return self.options(table_name=name)

    def build(self) -> ContentTypeDefinition:
        """Validate and return the definition (not registered).

        Raises:
            ValidationError: If the accumulated definition is invalid
        """
        definition = ContentTypeDefinition(
            uid=self._uid,
            display_name=self._display_name,
            singular_name=self._singular_name,
            plural_name=self._plural_name,
            fields=dict(self._fields),
            description=self._description,
            options=ContentTypeOptions(**self._options),
        )
        validate_definition(definition)
        return definition
