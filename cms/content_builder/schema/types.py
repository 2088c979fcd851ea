"""
Core type definitions for the content type schema system.

This module defines the vocabulary used to describe a content model:
- FieldKind: Closed set of field kinds (scalars, enumeration, relation)
- RelationKind: Cardinality of a relation between two content types
- ScalarField / EnumerationField / RelationField: The three field families
- ContentTypeOptions: Timestamps, soft delete and table name switches
- ContentTypeDefinition: A named content type with its ordered fields

Invariants:
    - The field kind set is closed; Field is exactly one of the three families
    - Field declaration order is preserved (dict insertion order)
    - Relation targets are UIDs and are not resolved here
    - Types only shape data; validation happens in the registry layer

How to change safely:
    - Adding a FieldKind requires a mapping in the Prisma compiler
      (the compiler raises on unmapped kinds)
    - Keep document keys (camelCase) stable; stored definitions depend on them

Example:
    >>> from cms.content_builder.schema import fields
    >>> Article = ContentTypeDefinition(
    ...     uid="api::article.article",
    ...     display_name="Article",
    ...     singular_name="article",
    ...     plural_name="articles",
    ...     fields={
    ...         "title": fields.string(required=True),
    ...         "status": fields.enumeration(["draft", "published"]),
    ...     },
    ... )
"""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field as dataclass_field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from ..errors import ValidationError


class FieldKind(Enum):
    """Supported field kinds.

    The value is the document representation (the ``type`` key).
    """

    STRING = "string"
    TEXT = "text"
    RICHTEXT = "richtext"
    EMAIL = "email"
    PASSWORD = "password"
    UID = "uid"
    INTEGER = "integer"
    BIGINTEGER = "biginteger"
    FLOAT = "float"
    DECIMAL = "decimal"
    BOOLEAN = "boolean"
    DATE = "date"
    DATETIME = "datetime"
    TIME = "time"
    JSON = "json"
    ENUMERATION = "enumeration"
    RELATION = "relation"

    @classmethod
    def from_str(cls, value: str) -> FieldKind:
        """Convert string representation to FieldKind.

        Args:
            value: Document name of the field kind

        Returns:
            Corresponding FieldKind enum value

        Raises:
            ValueError: If value is not a valid field kind
        """
        for kind in cls:
            if kind.value == value:
                return kind
        valid = [k.value for k in cls]
        raise ValueError(f"Invalid field kind '{value}'. Valid kinds: {valid}")

    @property
    def is_text(self) -> bool:
        """Whether values of this kind are strings."""
        return self in _TEXT_KINDS

    @property
    def is_numeric(self) -> bool:
        """Whether values of this kind are numbers."""
        return self in _NUMERIC_KINDS

    @property
    def is_temporal(self) -> bool:
        """Whether values of this kind are dates or times."""
        return self in (FieldKind.DATE, FieldKind.DATETIME, FieldKind.TIME)

    @property
    def is_scalar(self) -> bool:
        """Whether this kind belongs to the scalar family."""
        return self not in (FieldKind.ENUMERATION, FieldKind.RELATION)


_TEXT_KINDS = frozenset({
    FieldKind.STRING,
    FieldKind.TEXT,
    FieldKind.RICHTEXT,
    FieldKind.EMAIL,
    FieldKind.PASSWORD,
    FieldKind.UID,
})

_NUMERIC_KINDS = frozenset({
    FieldKind.INTEGER,
    FieldKind.BIGINTEGER,
    FieldKind.FLOAT,
    FieldKind.DECIMAL,
})


class RelationKind(Enum):
    """Cardinality of a relation, seen from the declaring side."""

    ONE_TO_ONE = "oneToOne"
    ONE_TO_MANY = "oneToMany"
    MANY_TO_ONE = "manyToOne"
    MANY_TO_MANY = "manyToMany"

    @classmethod
    def from_str(cls, value: str) -> RelationKind:
        """Convert string representation to RelationKind.

        Raises:
            ValueError: If value is not a valid relation kind
        """
        for kind in cls:
            if kind.value == value:
                return kind
        valid = [k.value for k in cls]
        raise ValueError(f"Invalid relation kind '{value}'. Valid kinds: {valid}")

    @property
    def complement(self) -> RelationKind:
        """The kind the partner field must have on the other side."""
        if self == RelationKind.MANY_TO_ONE:
            return RelationKind.ONE_TO_MANY
        if self == RelationKind.ONE_TO_MANY:
            return RelationKind.MANY_TO_ONE
        return self


@dataclass(frozen=True)
class ScalarField:
    """A scalar field (text, number, boolean, temporal or JSON).

    Attributes:
        kind: The scalar kind
        required: Whether a value must be present (non-nullable column)
        unique: Whether values must be unique across entries
        default: Default value if not provided
        min_length: Minimum length (text kinds)
        max_length: Maximum length (text kinds)
        regex: Pattern values must match (text kinds)
        min: Minimum value (numeric kinds)
        max: Maximum value (numeric kinds)
    """

    kind: FieldKind
    required: bool = False
    unique: bool = False
    default: Any = None
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    regex: Optional[str] = None
    min: Optional[Union[int, float]] = None
    max: Optional[Union[int, float]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to document representation."""
        result: Dict[str, Any] = {"type": self.kind.value}
        if self.required:
            result["required"] = True
        if self.unique:
            result["unique"] = True
        if self.default is not None:
            result["default"] = self.default
        if self.min_length is not None:
            result["minLength"] = self.min_length
        if self.max_length is not None:
            result["maxLength"] = self.max_length
        if self.regex is not None:
            result["regex"] = self.regex
        if self.min is not None:
            result["min"] = self.min
        if self.max is not None:
            result["max"] = self.max
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ScalarField:
        """Create from document representation."""
        return cls(
            kind=FieldKind.from_str(data["type"]),
            required=data.get("required", False),
            unique=data.get("unique", False),
            default=data.get("default"),
            min_length=data.get("minLength"),
            max_length=data.get("maxLength"),
            regex=data.get("regex"),
            min=data.get("min"),
            max=data.get("max"),
        )


@dataclass(frozen=True)
class EnumerationField:
    """A field restricted to an ordered set of string values.

    Attributes:
        values: Allowed values, in declaration order
        required: Whether a value must be present
        default: Default value; must be one of ``values``
    """

    values: Tuple[str, ...]
    required: bool = False
    default: Optional[str] = None

    @property
    def kind(self) -> FieldKind:
        return FieldKind.ENUMERATION

    def to_dict(self) -> Dict[str, Any]:
        """Convert to document representation."""
        result: Dict[str, Any] = {
            "type": FieldKind.ENUMERATION.value,
            "values": list(self.values),
        }
        if self.required:
            result["required"] = True
        if self.default is not None:
            result["default"] = self.default
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> EnumerationField:
        """Create from document representation.

        Raises:
            ValidationError: If values is not a list
        """
        values = data.get("values")
        if values is None:
            values = ()
        if not isinstance(values, (list, tuple)):
            raise ValidationError(
                f"Enumeration values must be a list, got {values!r}", attribute="values"
            )
        return cls(
            values=tuple(values),
            required=data.get("required", False),
            default=data.get("default"),
        )


@dataclass(frozen=True)
class RelationField:
    """A relation to another content type.

    Attributes:
        target: UID of the target content type (may be defined later)
        relation: Cardinality seen from this side
        required: Whether the owning side must reference an entry
        mapped_by: Name of the owning field on the target (inverse side)
        inversed_by: Name of the inverse field on the target (owning side)
    """

    target: str
    relation: RelationKind
    required: bool = False
    mapped_by: Optional[str] = None
    inversed_by: Optional[str] = None

    @property
    def kind(self) -> FieldKind:
        return FieldKind.RELATION

    @property
    def is_list(self) -> bool:
        """Whether this side holds many entries of the target."""
        return self.relation in (RelationKind.ONE_TO_MANY, RelationKind.MANY_TO_MANY)

    @property
    def partner_name(self) -> Optional[str]:
        """Explicitly named partner field on the target, if any."""
        return self.mapped_by or self.inversed_by

    def to_dict(self) -> Dict[str, Any]:
        """Convert to document representation."""
        result: Dict[str, Any] = {
            "type": FieldKind.RELATION.value,
            "relationType": self.relation.value,
            "target": self.target,
        }
        if self.required:
            result["required"] = True
        if self.mapped_by:
            result["mappedBy"] = self.mapped_by
        if self.inversed_by:
            result["inversedBy"] = self.inversed_by
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> RelationField:
        """Create from document representation."""
        relation_type = data.get("relationType")
        if not relation_type:
            raise ValidationError("Relation field must have a relationType", attribute="relationType")
        try:
            relation = RelationKind.from_str(relation_type)
        except ValueError as e:
            raise ValidationError(str(e), attribute="relationType") from e
        return cls(
            target=data.get("target", ""),
            relation=relation,
            required=data.get("required", False),
            mapped_by=data.get("mappedBy"),
            inversed_by=data.get("inversedBy"),
        )


Field = Union[ScalarField, EnumerationField, RelationField]


def field_from_dict(data: Dict[str, Any]) -> Field:
    """Create a field of the right family from its document representation.

    Raises:
        ValidationError: If the field is not a mapping or its ``type`` key is missing or unknown
    """
    if not isinstance(data, dict):
        raise ValidationError(f"Field must be a mapping with a type, got {data!r}", attribute="type")
    type_name = data.get("type")
    if not type_name:
        raise ValidationError("Field must have a type", attribute="type")
    if type_name == FieldKind.ENUMERATION.value:
        return EnumerationField.from_dict(data)
    if type_name == FieldKind.RELATION.value:
        return RelationField.from_dict(data)
    try:
        return ScalarField.from_dict(data)
    except ValueError as e:
        raise ValidationError(str(e), attribute="type") from e


@dataclass(frozen=True)
class ContentTypeOptions:
    """Per content type switches.

    Attributes:
        timestamps: Add createdAt/updatedAt columns
        soft_delete: Add a nullable deletedAt column
        table_name: Custom table name for the model
    """

    timestamps: bool = False
    soft_delete: bool = False
    table_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "timestamps": self.timestamps,
            "softDelete": self.soft_delete,
        }
        if self.table_name:
            result["tableName"] = self.table_name
        return result

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> ContentTypeOptions:
        data = data or {}
        return cls(
            timestamps=bool(data.get("timestamps", False)),
            soft_delete=bool(data.get("softDelete", False)),
            table_name=data.get("tableName") or None,
        )


@dataclass(frozen=True)
class ContentTypeDefinition:
    """Definition of a content type.

    Two definitions are equal when they are structurally equal, which is
    what the migration diff relies on.

    Attributes:
        uid: Globally unique key within a registry (e.g. "api::article.article")
        display_name: Human-readable name
        singular_name: Singular API name (e.g. "article")
        plural_name: Plural API name (e.g. "articles")
        fields: Ordered mapping of field name to field definition
        description: Human-readable description
        options: Timestamps, soft delete and table name switches

    Invariants:
        - fields is non-empty once validated
        - field names are unique (mapping keys)
        - relation targets are resolved only at compile time
    """

    uid: str
    display_name: str
    singular_name: str
    plural_name: str
    fields: Dict[str, Field] = dataclass_field(default_factory=dict)
    description: str = ""
    options: ContentTypeOptions = dataclass_field(default_factory=ContentTypeOptions)

    def __hash__(self) -> int:
        """Hash based on uid (equal definitions share a uid)."""
        return hash(self.uid)

    def get_field(self, name: str) -> Optional[Field]:
        """Get a field by name."""
        return self.fields.get(name)

    def field_names(self) -> List[str]:
        """Field names in declaration order."""
        return list(self.fields)

    def relation_fields(self) -> List[Tuple[str, RelationField]]:
        """Relation fields in declaration order."""
        return [(n, f) for n, f in self.fields.items() if isinstance(f, RelationField)]

    def enumeration_fields(self) -> List[Tuple[str, EnumerationField]]:
        """Enumeration fields in declaration order."""
        return [(n, f) for n, f in self.fields.items() if isinstance(f, EnumerationField)]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to document representation."""
        result: Dict[str, Any] = {
            "uid": self.uid,
            "displayName": self.display_name,
            "singularName": self.singular_name,
            "pluralName": self.plural_name,
        }
        if self.description:
            result["description"] = self.description
        result["fields"] = {name: f.to_dict() for name, f in self.fields.items()}
        result["options"] = self.options.to_dict()
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ContentTypeDefinition:
        """Create from document representation.

        Missing descriptive attributes become empty strings so that
        validation can report them by name.
        """
        raw_fields = data.get("fields") or {}
        if not isinstance(raw_fields, dict):
            raise ValidationError(
                "Content type fields must be a mapping of name to field",
                attribute="fields",
                content_type=data.get("uid"),
            )
        raw_options = data.get("options")
        if raw_options is not None and not isinstance(raw_options, dict):
            raise ValidationError(
                "Content type options must be a mapping",
                attribute="options",
                content_type=data.get("uid"),
            )
        fields: Dict[str, Field] = {}
        for name, raw in raw_fields.items():
            try:
                fields[name] = field_from_dict(raw)
            except ValidationError as e:
                raise ValidationError(
                    f"Field {name} in content type {data.get('uid')}: {e.message}",
                    attribute=name,
                    content_type=data.get("uid"),
                ) from e
        return cls(
            uid=data.get("uid", ""),
            display_name=data.get("displayName", ""),
            singular_name=data.get("singularName", ""),
            plural_name=data.get("pluralName", ""),
            fields=fields,
            description=data.get("description") or "",
            options=ContentTypeOptions.from_dict(raw_options),
        )
