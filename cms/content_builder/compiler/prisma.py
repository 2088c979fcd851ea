"""
Prisma schema compiler.

Lowers a complete content type registry into Prisma schema text:
- One model per content type, fields in declaration order
- One enum block per enumeration field
- Relation pairing across models, with foreign keys on the owning side

Relation lowering:
    manyToOne / owning oneToOne:
        author   User?  @relation(fields: [authorId], references: [id])
        authorId Int?
    oneToMany / inverse oneToOne:
        articles Article[]
    manyToMany:
        tags Tag[]   (both sides, implicit join table downstream)

    Each declared relation is paired with a field on the target, either
    explicitly (mappedBy / inversedBy) or implicitly (the single field of
    the complementary kind pointing back). A relation without a partner
    gets a back-relation synthesized on the target, because Prisma needs
    both ends. Self-relations, and models linked by more than one
    relation, get a relation name on both ends.

Invariants:
    - Relation targets are resolved here, against the complete registry;
      forward references are legal until compile time
    - Same registry => byte-identical output
    - Any unresolvable relation or name clash aborts the whole compile;
      no partial schema is returned
    - Enum blocks are emitted per field, never de-duplicated by value set

How to change safely:
    - Adding a FieldKind requires an entry in SCALAR_TYPES
    - Changing generated names (enums, foreign keys, back-relations)
      changes every downstream schema; record a migration

Example:
    >>> compiler = PrismaSchemaCompiler(provider="postgresql")
    >>> result = compiler.compile(registry)
    >>> result.model_names
    ['Article', 'User']
    >>> schema = result.schema_text + compiler.compile_enums(registry)
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from ..errors import CompilationError
from ..schema.naming import lower_first, pascal_case, upper_first
from ..schema.registry import ContentTypeRegistry
from ..schema.types import (
    ContentTypeDefinition,
    EnumerationField,
    FieldKind,
    RelationField,
    RelationKind,
    ScalarField,
)

logger = logging.getLogger(__name__)

SCALAR_TYPES: Dict[FieldKind, str] = {
    FieldKind.STRING: "String",
    FieldKind.TEXT: "String",
    FieldKind.RICHTEXT: "String",
    FieldKind.EMAIL: "String",
    FieldKind.PASSWORD: "String",
    FieldKind.UID: "String",
    FieldKind.INTEGER: "Int",
    FieldKind.BIGINTEGER: "BigInt",
    FieldKind.FLOAT: "Float",
    FieldKind.DECIMAL: "Decimal",
    FieldKind.BOOLEAN: "Boolean",
    FieldKind.DATE: "DateTime",
    FieldKind.DATETIME: "DateTime",
    FieldKind.TIME: "DateTime",
    FieldKind.JSON: "Json",
}

# Providers with a native VARCHAR(n) type
VARCHAR_PROVIDERS = frozenset({"postgresql", "mysql", "cockroachdb", "sqlserver"})

ID_FIELD = ("id", "Int", "@id @default(autoincrement())")
CREATED_AT_FIELD = ("createdAt", "DateTime", "@default(now())")
UPDATED_AT_FIELD = ("updatedAt", "DateTime", "@updatedAt")
DELETED_AT_FIELD = ("deletedAt", "DateTime?", "")

Registry = Union[ContentTypeRegistry, Mapping[str, ContentTypeDefinition]]
Line = Tuple[str, str, str]


@dataclass(frozen=True)
class CompiledSchema:
    """Result of compiling a registry.

    Attributes:
        schema_text: Header and model blocks (enums come from compile_enums)
        model_names: Generated model names in registry order
    """

    schema_text: str
    model_names: List[str]


@dataclass(frozen=True)
class _RelationEnd:
    """One end of a relation: a declared field or a synthesized back-relation."""

    uid: str
    name: str
    target: str
    kind: RelationKind
    field: Optional[RelationField] = None

    @property
    def key(self) -> Tuple[str, str]:
        return (self.uid, self.name)

    @property
    def synthesized(self) -> bool:
        return self.field is None

    @property
    def required(self) -> bool:
        return self.field is not None and self.field.required


@dataclass
class _Relation:
    """A paired relation. The owner carries the foreign key (if any)."""

    owner: _RelationEnd
    inverse: _RelationEnd
    name: Optional[str] = None

    def other(self, end: _RelationEnd) -> _RelationEnd:
        return self.inverse if end.key == self.owner.key else self.owner


class PrismaSchemaCompiler:
    """Compiles a content type registry into Prisma schema text.

    The compiler holds no state between calls; everything is derived
    from the registry passed in.

    Attributes:
        provider: Datasource provider (postgresql, mysql, sqlite, ...)
        include_header: Whether to emit the generator/datasource blocks
    """

    def __init__(self, provider: str = "postgresql", include_header: bool = True) -> None:
        self.provider = provider
        self.include_header = include_header

    def compile(self, registry: Registry) -> CompiledSchema:
        """Compile every content type into a model block.

        Args:
            registry: Complete registry (or uid -> definition snapshot)

        Returns:
            CompiledSchema with the schema text and model names

        Raises:
            CompilationError: If a relation cannot be resolved or generated
                names collide
        """
        definitions = _as_definitions(registry)
        model_names = _model_names(definitions)
        enum_names = _enum_names(definitions, model_names)
        relations = _resolve_relations(definitions, model_names)

        blocks: List[str] = []
        if self.include_header:
            blocks.append(self._header())
        for definition in definitions.values():
            blocks.append(
                self._model_block(definition, model_names, enum_names, relations)
            )

        logger.info(
            f"Compiled {len(model_names)} models with {len(relations)} relations "
            f"and {len(enum_names)} enums"
        )
        return CompiledSchema(
            schema_text="\n\n".join(blocks) + "\n",
            model_names=[model_names[uid] for uid in definitions],
        )

    def compile_enums(self, registry: Registry) -> str:
        """Emit one enum block per enumeration field.

        Returns:
            Enum blocks preceded by a blank line, or "" if there are none
        """
        definitions = _as_definitions(registry)
        model_names = _model_names(definitions)
        enum_names = _enum_names(definitions, model_names)

        blocks: List[str] = []
        for uid, definition in definitions.items():
            for field_name, f in definition.enumeration_fields():
                lines = [f"enum {enum_names[(uid, field_name)]} {{"]
                lines.extend(f"  {value}" for value in f.values)
                lines.append("}")
                blocks.append("\n".join(lines))

        if not blocks:
            return ""
        return "\n" + "\n\n".join(blocks) + "\n"

    def render(self, registry: Registry) -> str:
        """Full schema document: models followed by enums."""
        return self.compile(registry).schema_text + self.compile_enums(registry)

    def _header(self) -> str:
        return "\n".join([
            "// Generated from content type definitions. Do not edit by hand.",
            "",
            "generator client {",
            '  provider = "prisma-client-js"',
            "}",
            "",
            "datasource db {",
            f'  provider = "{self.provider}"',
            '  url      = env("DATABASE_URL")',
            "}",
        ])

    def _model_block(
        self,
        definition: ContentTypeDefinition,
        model_names: Dict[str, str],
        enum_names: Dict[Tuple[str, str], str],
        relations: Dict[Tuple[str, str], _Relation],
    ) -> str:
        uid = definition.uid
        lines: List[Line] = [ID_FIELD]

        for name, f in definition.fields.items():
            if isinstance(f, ScalarField):
                lines.append(self._scalar_line(name, f))
            elif isinstance(f, EnumerationField):
                lines.append(_enum_line(name, f, enum_names[(uid, name)]))
            elif isinstance(f, RelationField):
                relation = relations[(uid, name)]
                end = relation.owner if relation.owner.key == (uid, name) else relation.inverse
                lines.extend(_relation_lines(end, relation, model_names))
            else:
                raise CompilationError(
                    f"Field {name} in content type {uid} has unsupported type "
                    f"{type(f).__name__}",
                    content_type=uid,
                    field_name=name,
                )

        if definition.options.timestamps:
            lines.append(CREATED_AT_FIELD)
            lines.append(UPDATED_AT_FIELD)
        if definition.options.soft_delete:
            lines.append(DELETED_AT_FIELD)

        for relation in _synthesized_on(uid, relations):
            end = relation.owner if relation.owner.synthesized else relation.inverse
            lines.extend(_relation_lines(end, relation, model_names))

        _check_collisions(uid, lines)

        body = _align(lines)
        block = [f"model {model_names[uid]} {{"]
        block.extend(body)
        if definition.options.table_name:
            block.append("")
            block.append(f'  @@map("{definition.options.table_name}")')
        block.append("}")
        return "\n".join(block)

    def _scalar_line(self, name: str, f: ScalarField) -> Line:
        try:
            prisma_type = SCALAR_TYPES[f.kind]
        except KeyError:
            raise CompilationError(
                f"Field {name} has unsupported type {f.kind.value}", field_name=name
            ) from None

        attrs: List[str] = []
        if f.unique:
            attrs.append("@unique")
        if f.default is not None:
            attrs.append(f"@default({_format_default(f.kind, f.default)})")
        if f.max_length is not None and f.kind.is_text and self.provider in VARCHAR_PROVIDERS:
            attrs.append(f"@db.VarChar({f.max_length})")
        return (name, prisma_type + ("" if f.required else "?"), " ".join(attrs))


def _as_definitions(registry: Registry) -> Dict[str, ContentTypeDefinition]:
    if isinstance(registry, ContentTypeRegistry):
        return registry.get_all()
    return dict(registry)


def _model_names(definitions: Mapping[str, ContentTypeDefinition]) -> Dict[str, str]:
    """Map uid -> model name, rejecting empty and duplicate names."""
    names: Dict[str, str] = {}
    seen: Dict[str, str] = {}
    for uid, definition in definitions.items():
        model_name = pascal_case(definition.singular_name)
        if not model_name:
            raise CompilationError(
                f"Content type {uid} has no usable singularName for a model name",
                content_type=uid,
            )
        if model_name in seen:
            raise CompilationError(
                f"Content types {seen[model_name]} and {uid} both compile to model {model_name}",
                content_type=uid,
            )
        seen[model_name] = uid
        names[uid] = model_name
    return names


def _enum_names(
    definitions: Mapping[str, ContentTypeDefinition],
    model_names: Mapping[str, str],
) -> Dict[Tuple[str, str], str]:
    """Map (uid, field) -> enum name, e.g. ArticleStatus."""
    names: Dict[Tuple[str, str], str] = {}
    taken = set(model_names.values())
    for uid, definition in definitions.items():
        for field_name, _ in definition.enumeration_fields():
            enum_name = model_names[uid] + pascal_case(field_name)
            if enum_name in taken:
                raise CompilationError(
                    f"Enumeration field {field_name} in content type {uid} compiles to "
                    f"enum {enum_name}, which is already used",
                    content_type=uid,
                    field_name=field_name,
                )
            taken.add(enum_name)
            names[(uid, field_name)] = enum_name
    return names


def _resolve_relations(
    definitions: Mapping[str, ContentTypeDefinition],
    model_names: Mapping[str, str],
) -> Dict[Tuple[str, str], _Relation]:
    """Pair every relation end and orient it.

    Returns:
        Mapping (uid, field name) -> relation, for declared and
        synthesized ends alike
    """
    ends: List[_RelationEnd] = []
    for uid, definition in definitions.items():
        for name, f in definition.relation_fields():
            if f.target not in definitions:
                raise CompilationError(
                    f"Relation field {name} in content type {uid} targets unknown "
                    f"content type {f.target}",
                    content_type=uid,
                    field_name=name,
                )
            ends.append(_RelationEnd(uid=uid, name=name, target=f.target, kind=f.relation, field=f))

    by_key = {end.key: end for end in ends}
    partners: Dict[Tuple[str, str], Tuple[str, str]] = {}
    _pair_explicit(ends, by_key, partners)
    _pair_implicit(ends, partners)

    relations: List[_Relation] = []
    done = set()
    for end in ends:
        if end.key in done:
            continue
        if end.key in partners:
            other = by_key[partners[end.key]]
        else:
            other = _synthesize_partner(end, definitions, model_names)
        done.add(end.key)
        done.add(other.key)
        owner, inverse = _orient(end, other, model_names)
        relations.append(_Relation(owner=owner, inverse=inverse))

    _name_relations(relations, model_names)

    resolved: Dict[Tuple[str, str], _Relation] = {}
    for relation in relations:
        resolved[relation.owner.key] = relation
        resolved[relation.inverse.key] = relation
    return resolved


def _pair_explicit(
    ends: Sequence[_RelationEnd],
    by_key: Mapping[Tuple[str, str], _RelationEnd],
    partners: Dict[Tuple[str, str], Tuple[str, str]],
) -> None:
    """Pair ends that name their partner through mappedBy / inversedBy."""
    for end in ends:
        if end.field is None:
            continue
        partner_name = end.field.partner_name
        if not partner_name:
            continue
        where = f"Relation field {end.name} in content type {end.uid}"
        other = by_key.get((end.target, partner_name))
        if other is None:
            raise CompilationError(
                f"{where} refers to {partner_name}, which is not a relation field "
                f"on {end.target}",
                content_type=end.uid,
                field_name=end.name,
            )
        if other.key == end.key:
            raise CompilationError(
                f"{where} cannot be paired with itself",
                content_type=end.uid,
                field_name=end.name,
            )
        if other.target != end.uid:
            raise CompilationError(
                f"{where} refers to {end.target}.{partner_name}, which targets "
                f"{other.target} instead of {end.uid}",
                content_type=end.uid,
                field_name=end.name,
            )
        if other.kind != end.kind.complement:
            raise CompilationError(
                f"{where} is {end.kind.value} but its partner {end.target}.{partner_name} "
                f"is {other.kind.value}; expected {end.kind.complement.value}",
                content_type=end.uid,
                field_name=end.name,
            )
        for a, b in ((end, other), (other, end)):
            current = partners.get(a.key)
            if current is not None and current != b.key:
                raise CompilationError(
                    f"Relation field {a.name} in content type {a.uid} is paired with both "
                    f"{current[0]}.{current[1]} and {b.uid}.{b.name}",
                    content_type=a.uid,
                    field_name=a.name,
                )
        partners[end.key] = other.key
        partners[other.key] = end.key


def _pair_implicit(
    ends: Sequence[_RelationEnd],
    partners: Dict[Tuple[str, str], Tuple[str, str]],
) -> None:
    """Pair remaining ends with the single complementary field pointing back."""
    for end in ends:
        if end.key in partners:
            continue
        unpaired = [e for e in ends if e.key not in partners]
        if end.uid == end.target and end.kind.complement == end.kind:
            # symmetric self-relation: both ends come from the same pool
            pool = [e for e in unpaired if e.uid == end.uid and e.target == end.uid and e.kind == end.kind]
            if len(pool) == 1:
                continue
            if len(pool) > 2:
                _ambiguous(end, [e for e in pool if e.key != end.key])
            other = next(e for e in pool if e.key != end.key)
        else:
            candidates = [
                e for e in unpaired
                if e.uid == end.target and e.target == end.uid
                and e.kind == end.kind.complement and e.key != end.key
            ]
            if not candidates:
                continue
            rivals = [
                e for e in unpaired
                if e.uid == end.uid and e.target == end.target and e.kind == end.kind
            ]
            if len(candidates) > 1 or len(rivals) > 1:
                _ambiguous(end, candidates)
            other = candidates[0]
        partners[end.key] = other.key
        partners[other.key] = end.key


def _ambiguous(end: _RelationEnd, candidates: Sequence[_RelationEnd]) -> None:
    names = ", ".join(f"{c.uid}.{c.name}" for c in candidates)
    raise CompilationError(
        f"Relation field {end.name} in content type {end.uid} cannot be paired "
        f"unambiguously (candidates: {names}); set mappedBy or inversedBy",
        content_type=end.uid,
        field_name=end.name,
    )


def _synthesize_partner(
    end: _RelationEnd,
    definitions: Mapping[str, ContentTypeDefinition],
    model_names: Mapping[str, str],
) -> _RelationEnd:
    """Create the back-relation Prisma needs on the target of an unpaired end."""
    name = lower_first(model_names[end.uid]) + upper_first(end.name)
    if name in definitions[end.target].fields:
        raise CompilationError(
            f"Back-relation {name} for relation field {end.name} in content type "
            f"{end.uid} collides with a field on {end.target}; pair the relation "
            f"with mappedBy or inversedBy",
            content_type=end.uid,
            field_name=end.name,
        )
    return _RelationEnd(uid=end.target, name=name, target=end.uid, kind=end.kind.complement)


def _orient(
    a: _RelationEnd,
    b: _RelationEnd,
    model_names: Mapping[str, str],
) -> Tuple[_RelationEnd, _RelationEnd]:
    """Return (owner, inverse) for a paired relation."""
    if a.kind == RelationKind.MANY_TO_ONE:
        return a, b
    if b.kind == RelationKind.MANY_TO_ONE:
        return b, a
    if a.kind == RelationKind.ONE_TO_ONE:
        for first, second in ((a, b), (b, a)):
            if first.field is not None and first.field.inversed_by:
                return first, second
            if first.field is not None and first.field.mapped_by:
                return second, first
        if b.synthesized:
            return a, b
        if a.synthesized:
            return b, a
    # oneToOne without hints, or manyToMany: first end by (model, field) owns
    ordered = sorted((a, b), key=lambda e: (model_names[e.uid], e.name))
    return ordered[0], ordered[1]


def _name_relations(relations: Sequence[_Relation], model_names: Mapping[str, str]) -> None:
    """Name self-relations and relations between models linked more than once."""
    counts: Dict[frozenset, int] = {}
    for relation in relations:
        pair = frozenset((relation.owner.uid, relation.inverse.uid))
        counts[pair] = counts.get(pair, 0) + 1
    for relation in relations:
        pair = frozenset((relation.owner.uid, relation.inverse.uid))
        if relation.owner.uid == relation.inverse.uid or counts[pair] > 1:
            relation.name = f"{model_names[relation.owner.uid]}_{relation.owner.name}"


def _synthesized_on(uid: str, relations: Mapping[Tuple[str, str], _Relation]) -> List[_Relation]:
    """Relations with a synthesized end on this model, in discovery order."""
    result: List[_Relation] = []
    for key, relation in relations.items():
        if key[0] != uid:
            continue
        end = relation.owner if relation.owner.key == key else relation.inverse
        if end.synthesized and relation not in result:
            result.append(relation)
    return result


def _relation_lines(
    end: _RelationEnd,
    relation: _Relation,
    model_names: Mapping[str, str],
) -> List[Line]:
    target_model = model_names[end.target]
    is_owner = end.key == relation.owner.key
    name_arg = f'"{relation.name}"' if relation.name else ""

    if is_owner and end.kind in (RelationKind.MANY_TO_ONE, RelationKind.ONE_TO_ONE):
        fk = f"{end.name}Id"
        optional = "" if end.required else "?"
        args = ", ".join(a for a in (name_arg, f"fields: [{fk}], references: [id]") if a)
        return [
            (end.name, target_model + optional, f"@relation({args})"),
            (fk, "Int" + optional, "@unique" if end.kind == RelationKind.ONE_TO_ONE else ""),
        ]

    attrs = f"@relation({name_arg})" if name_arg else ""
    if end.kind == RelationKind.ONE_TO_ONE:
        return [(end.name, target_model + "?", attrs)]
    return [(end.name, target_model + "[]", attrs)]


def _enum_line(name: str, f: EnumerationField, enum_name: str) -> Line:
    attrs = f"@default({f.default})" if f.default is not None else ""
    return (name, enum_name + ("" if f.required else "?"), attrs)


def _format_default(kind: FieldKind, value: Any) -> str:
    """Render a default value as a Prisma @default argument."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if kind.is_temporal and value == "now":
        return "now()"
    if kind == FieldKind.JSON and not isinstance(value, str):
        return json.dumps(json.dumps(value, sort_keys=True))
    if kind.is_numeric and isinstance(value, (int, float)):
        return str(value)
    return json.dumps(str(value), ensure_ascii=False)


def _check_collisions(uid: str, lines: Sequence[Line]) -> None:
    seen = set()
    for name, _, _ in lines:
        if name in seen:
            raise CompilationError(
                f"Content type {uid} compiles to a duplicate field {name}",
                content_type=uid,
                field_name=name,
            )
        seen.add(name)


def _align(lines: Sequence[Line]) -> List[str]:
    """Lay out field lines in columns, the way prisma format does."""
    name_width = max(len(name) for name, _, _ in lines)
    type_width = max(len(type_) for _, type_, _ in lines)
    result = []
    for name, type_, attrs in lines:
        result.append(f"  {name.ljust(name_width)} {type_.ljust(type_width)} {attrs}".rstrip())
    return result
