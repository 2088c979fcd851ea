"""
Content type builder.

Describe a content model once, then:
- compile it into a Prisma schema (cms.content_builder.compiler)
- track its evolution as a ledger of reversible migrations
  (cms.content_builder.migrations)

Example:
    >>> from cms.content_builder import ContentTypeBuilder, ContentTypeRegistry, fields
    >>> from cms.content_builder import PrismaSchemaCompiler
    >>> registry = ContentTypeRegistry()
    >>> registry.define(
    ...     ContentTypeBuilder.from_display_name("Article")
    ...     .field("title", fields.string(required=True))
    ...     .build()
    ... )
    >>> print(PrismaSchemaCompiler().render(registry))
"""

from ._version import __version__
from .compiler import CompiledSchema, PrismaSchemaCompiler
from .errors import (
    CompilationError,
    ContentTypeError,
    ContentTypeExistsError,
    ContentTypeNotFoundError,
    PersistenceError,
    ValidationError,
)
from .migrations import ChangeSet, MigrationRecord, MigrationTracker, detect_changes
from .schema import (
    ContentTypeBuilder,
    ContentTypeDefinition,
    ContentTypeRegistry,
    FieldKind,
    RelationKind,
    fields,
)
from .store import DefinitionStore, RegistryCache

__all__ = [
    "__version__",
    # Schema
    "ContentTypeBuilder",
    "ContentTypeDefinition",
    "ContentTypeRegistry",
    "FieldKind",
    "RelationKind",
    "fields",
    # Compiler
    "CompiledSchema",
    "PrismaSchemaCompiler",
    # Migrations
    "ChangeSet",
    "MigrationRecord",
    "MigrationTracker",
    "detect_changes",
    # Store
    "DefinitionStore",
    "RegistryCache",
    # Errors
    "ContentTypeError",
    "ValidationError",
    "CompilationError",
    "PersistenceError",
    "ContentTypeExistsError",
    "ContentTypeNotFoundError",
]
