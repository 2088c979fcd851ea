"""
Schema module for the content type builder.

This module provides the content model vocabulary, including:
- Type definitions (ScalarField, EnumerationField, RelationField,
  ContentTypeDefinition)
- Field helpers and a fluent builder
- The registry that holds definitions keyed by uid
- The definitions document format (JSON, YAML input)

Invariants:
    - uid is unique within a registry
    - Every definition has at least one field
    - Relation targets may be defined later; they are resolved at compile time

How to change safely:
    - Add new field kinds in types.py and map them in the compiler
    - Keep document keys stable; stored definitions depend on them
"""

from . import fields
from .builder import ContentTypeBuilder
from .document import dump_definitions, load_definitions, parse_definitions, parse_json, parse_yaml
from .naming import generate_plural_name, generate_singular_name, generate_uid
from .registry import ContentTypeRegistry, validate_definition
from .types import (
    ContentTypeDefinition,
    ContentTypeOptions,
    EnumerationField,
    Field,
    FieldKind,
    RelationField,
    RelationKind,
    ScalarField,
    field_from_dict,
)

__all__ = [
    # Types
    "ContentTypeDefinition",
    "ContentTypeOptions",
    "EnumerationField",
    "Field",
    "FieldKind",
    "RelationField",
    "RelationKind",
    "ScalarField",
    "field_from_dict",
    "fields",
    # Builder and registry
    "ContentTypeBuilder",
    "ContentTypeRegistry",
    "validate_definition",
    # Naming
    "generate_uid",
    "generate_singular_name",
    "generate_plural_name",
    # Documents
    "parse_definitions",
    "parse_json",
    "parse_yaml",
    "load_definitions",
    "dump_definitions",
]
