"""
Field helper functions.

One construction helper per field kind. These are the preferred way to
declare fields in definitions; they only shape the inputs and apply
kind-specific defaults (a uid field is unique unless told otherwise).
Malformed input is rejected when the definition is validated.

Example:
    >>> from cms.content_builder.schema import fields
    >>> fields.string(required=True, max_length=255)
    ScalarField(kind=<FieldKind.STRING: 'string'>, required=True, ...)
    >>> fields.many_to_one("api::user.user", required=True)
    RelationField(target='api::user.user', relation=<RelationKind.MANY_TO_ONE: 'manyToOne'>, ...)
"""

from __future__ import annotations

from typing import Any, Iterable, Optional, Union

from .types import (
    EnumerationField,
    FieldKind,
    RelationField,
    RelationKind,
    ScalarField,
)

Number = Union[int, float]


def string(
    *,
    required: bool = False,
    unique: bool = False,
    default: Optional[str] = None,
    min_length: Optional[int] = None,
    max_length: Optional[int] = None,
    regex: Optional[str] = None,
) -> ScalarField:
    """Create a short text field."""
    return ScalarField(
        FieldKind.STRING,
        required=required,
        unique=unique,
        default=default,
        min_length=min_length,
        max_length=max_length,
        regex=regex,
    )


def text(*, required: bool = False, default: Optional[str] = None) -> ScalarField:
    """Create a long text field."""
    return ScalarField(FieldKind.TEXT, required=required, default=default)


def richtext(*, required: bool = False) -> ScalarField:
    """Create a rich text (formatted) field."""
    return ScalarField(FieldKind.RICHTEXT, required=required)


def email(*, required: bool = False, unique: bool = False) -> ScalarField:
    """Create an email address field."""
    return ScalarField(FieldKind.EMAIL, required=required, unique=unique)


def password(*, required: bool = False) -> ScalarField:
    """Create a password field."""
    return ScalarField(FieldKind.PASSWORD, required=required)


def uid(*, required: bool = False, unique: bool = True) -> ScalarField:
    """Create an identifier text field. Unique by default."""
    return ScalarField(FieldKind.UID, required=required, unique=unique)


def integer(
    *,
    required: bool = False,
    unique: bool = False,
    default: Optional[int] = None,
    min: Optional[Number] = None,
    max: Optional[Number] = None,
) -> ScalarField:
    """Create an integer field."""
    return ScalarField(
        FieldKind.INTEGER, required=required, unique=unique, default=default, min=min, max=max
    )


def biginteger(
    *,
    required: bool = False,
    unique: bool = False,
    default: Optional[int] = None,
    min: Optional[Number] = None,
    max: Optional[Number] = None,
) -> ScalarField:
    """Create a large integer field."""
    return ScalarField(
        FieldKind.BIGINTEGER, required=required, unique=unique, default=default, min=min, max=max
    )


def float_(
    *,
    required: bool = False,
    default: Optional[Number] = None,
    min: Optional[Number] = None,
    max: Optional[Number] = None,
) -> ScalarField:
    """Create a floating point field."""
    return ScalarField(FieldKind.FLOAT, required=required, default=default, min=min, max=max)


def decimal(
    *,
    required: bool = False,
    default: Optional[Number] = None,
    min: Optional[Number] = None,
    max: Optional[Number] = None,
) -> ScalarField:
    """Create a fixed precision decimal field."""
    return ScalarField(FieldKind.DECIMAL, required=required, default=default, min=min, max=max)


def boolean(*, required: bool = False, default: Optional[bool] = None) -> ScalarField:
    """Create a boolean field."""
    return ScalarField(FieldKind.BOOLEAN, required=required, default=default)


def date(*, required: bool = False, default: Optional[str] = None) -> ScalarField:
    """Create a date-only field."""
    return ScalarField(FieldKind.DATE, required=required, default=default)


def datetime(*, required: bool = False, default: Optional[str] = None) -> ScalarField:
    """Create a date-time field. ``default="now"`` means creation time."""
    return ScalarField(FieldKind.DATETIME, required=required, default=default)


def time(*, required: bool = False) -> ScalarField:
    """Create a time-only field."""
    return ScalarField(FieldKind.TIME, required=required)


def json(*, required: bool = False, default: Any = None) -> ScalarField:
    """Create an opaque structured (JSON) field."""
    return ScalarField(FieldKind.JSON, required=required, default=default)


def enumeration(
    values: Iterable[str],
    *,
    required: bool = False,
    default: Optional[str] = None,
) -> EnumerationField:
    """Create an enumeration field. Value order is preserved."""
    return EnumerationField(values=tuple(values), required=required, default=default)


def relation(
    target: str,
    relation_type: Union[str, RelationKind],
    *,
    required: bool = False,
    mapped_by: Optional[str] = None,
    inversed_by: Optional[str] = None,
) -> RelationField:
    """Create a relation field.

    Args:
        target: UID of the target content type
        relation_type: Relation kind (string or RelationKind)
        required: Whether the owning side must reference an entry
        mapped_by: Owning field on the target (this side is the inverse)
        inversed_by: Inverse field on the target (this side owns)
    """
    if isinstance(relation_type, str):
        relation_type = RelationKind.from_str(relation_type)
    return RelationField(
        target=target,
        relation=relation_type,
        required=required,
        mapped_by=mapped_by,
        inversed_by=inversed_by,
    )


def one_to_one(
    target: str,
    *,
    required: bool = False,
    mapped_by: Optional[str] = None,
    inversed_by: Optional[str] = None,
) -> RelationField:
    return relation(
        target, RelationKind.ONE_TO_ONE, required=required, mapped_by=mapped_by, inversed_by=inversed_by
    )


def one_to_many(target: str, *, mapped_by: Optional[str] = None) -> RelationField:
    return relation(target, RelationKind.ONE_TO_MANY, mapped_by=mapped_by)


def many_to_one(
    target: str,
    *,
    required: bool = False,
    inversed_by: Optional[str] = None,
) -> RelationField:
    return relation(target, RelationKind.MANY_TO_ONE, required=required, inversed_by=inversed_by)


def many_to_many(
    target: str,
    *,
    mapped_by: Optional[str] = None,
    inversed_by: Optional[str] = None,
) -> RelationField:
    return relation(
        target, RelationKind.MANY_TO_MANY, mapped_by=mapped_by, inversed_by=inversed_by
    )
