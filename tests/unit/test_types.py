"""
Unit tests for the content type model.

Tests cover:
- Field kind and relation kind parsing
- Field helpers and their defaults
- Document conversion of fields and definitions
- Naming helpers
"""

import pytest

from cms.content_builder.errors import ValidationError
from cms.content_builder.schema import fields
from cms.content_builder.schema.naming import (
    generate_plural_name,
    generate_singular_name,
    generate_uid,
    lower_first,
    pascal_case,
    slugify,
)
from cms.content_builder.schema.types import (
    ContentTypeDefinition,
    ContentTypeOptions,
    EnumerationField,
    FieldKind,
    RelationField,
    RelationKind,
    ScalarField,
    field_from_dict,
)


class TestFieldKind:
    """Tests for FieldKind."""

    def test_from_str(self):
        """Document names map to kinds."""
        assert FieldKind.from_str("string") == FieldKind.STRING
        assert FieldKind.from_str("biginteger") == FieldKind.BIGINTEGER
        assert FieldKind.from_str("relation") == FieldKind.RELATION

    def test_from_str_invalid(self):
        """Unknown names raise ValueError."""
        with pytest.raises(ValueError, match="Invalid field kind"):
            FieldKind.from_str("geometry")

    def test_families(self):
        """Kinds report their family."""
        assert FieldKind.EMAIL.is_text
        assert FieldKind.DECIMAL.is_numeric
        assert FieldKind.TIME.is_temporal
        assert FieldKind.JSON.is_scalar
        assert not FieldKind.ENUMERATION.is_scalar
        assert not FieldKind.RELATION.is_scalar


class TestRelationKind:
    """Tests for RelationKind."""

    def test_complement(self):
        """Partner kinds pair up."""
        assert RelationKind.MANY_TO_ONE.complement == RelationKind.ONE_TO_MANY
        assert RelationKind.ONE_TO_MANY.complement == RelationKind.MANY_TO_ONE
        assert RelationKind.ONE_TO_ONE.complement == RelationKind.ONE_TO_ONE
        assert RelationKind.MANY_TO_MANY.complement == RelationKind.MANY_TO_MANY

    def test_from_str_invalid(self):
        with pytest.raises(ValueError):
            RelationKind.from_str("manyToFew")


class TestFieldHelpers:
    """Tests for the field helper functions."""

    def test_string_options(self):
        f = fields.string(required=True, max_length=255)
        assert f == ScalarField(FieldKind.STRING, required=True, max_length=255)

    def test_uid_is_unique_by_default(self):
        """uid fields default to unique."""
        assert fields.uid().unique
        assert not fields.uid(unique=False).unique

    def test_float_helper(self):
        assert fields.float_(min=0, max=1).kind == FieldKind.FLOAT

    def test_enumeration_keeps_order(self):
        f = fields.enumeration(["draft", "published", "archived"], default="draft")
        assert f.values == ("draft", "published", "archived")
        assert f.default == "draft"

    def test_relation_accepts_string_kind(self):
        f = fields.relation("api::user.user", "manyToOne", required=True)
        assert f.relation == RelationKind.MANY_TO_ONE
        assert f.required

    def test_relation_shortcuts(self):
        assert fields.one_to_many("api::a.a").is_list
        assert fields.many_to_many("api::a.a").is_list
        assert not fields.many_to_one("api::a.a").is_list
        assert fields.one_to_one("api::a.a", mapped_by="b").partner_name == "b"


class TestFieldDocuments:
    """Tests for field document conversion."""

    def test_scalar_to_dict_uses_document_keys(self):
        f = fields.string(required=True, min_length=2, max_length=10)
        assert f.to_dict() == {"type": "string", "required": True, "minLength": 2, "maxLength": 10}

    def test_relation_to_dict(self):
        f = fields.many_to_one("api::user.user", inversed_by="articles")
        assert f.to_dict() == {
            "type": "relation",
            "relationType": "manyToOne",
            "target": "api::user.user",
            "inversedBy": "articles",
        }

    def test_field_from_dict_dispatches(self):
        assert isinstance(field_from_dict({"type": "integer"}), ScalarField)
        assert isinstance(field_from_dict({"type": "enumeration", "values": ["a"]}), EnumerationField)
        assert isinstance(
            field_from_dict({"type": "relation", "relationType": "oneToOne", "target": "x"}),
            RelationField,
        )

    def test_missing_type(self):
        with pytest.raises(ValidationError) as exc_info:
            field_from_dict({"required": True})
        assert exc_info.value.attribute == "type"

    def test_unknown_type(self):
        with pytest.raises(ValidationError, match="Invalid field kind"):
            field_from_dict({"type": "geometry"})

    def test_field_must_be_a_mapping(self):
        with pytest.raises(ValidationError, match="must be a mapping") as exc_info:
            field_from_dict("string")
        assert exc_info.value.attribute == "type"

    @pytest.mark.parametrize("values", ["draft", 5])
    def test_enumeration_values_must_be_a_list(self, values):
        """A scalar is not split into single-character values."""
        with pytest.raises(ValidationError, match="must be a list") as exc_info:
            EnumerationField.from_dict({"type": "enumeration", "values": values})
        assert exc_info.value.attribute == "values"

    def test_relation_without_relation_type(self):
        with pytest.raises(ValidationError) as exc_info:
            field_from_dict({"type": "relation", "target": "api::user.user"})
        assert exc_info.value.attribute == "relationType"


class TestContentTypeDefinition:
    """Tests for ContentTypeDefinition."""

    def make_article(self):
        return ContentTypeDefinition(
            uid="api::article.article",
            display_name="Article",
            singular_name="article",
            plural_name="articles",
            description="Blog articles",
            fields={
                "title": fields.string(required=True),
                "status": fields.enumeration(["draft", "published"]),
                "author": fields.many_to_one("api::user.user"),
            },
            options=ContentTypeOptions(timestamps=True, table_name="posts"),
        )

    def test_document_round_trip(self):
        """to_dict/from_dict preserve the definition and its field order."""
        article = self.make_article()
        restored = ContentTypeDefinition.from_dict(article.to_dict())
        assert restored == article
        assert restored.field_names() == ["title", "status", "author"]

    def test_to_dict_keys(self):
        data = self.make_article().to_dict()
        assert data["displayName"] == "Article"
        assert data["options"] == {"timestamps": True, "softDelete": False, "tableName": "posts"}

    def test_field_accessors(self):
        article = self.make_article()
        assert [name for name, _ in article.relation_fields()] == ["author"]
        assert [name for name, _ in article.enumeration_fields()] == ["status"]
        assert article.get_field("missing") is None

    def test_from_dict_wraps_field_errors(self):
        """Field errors name the field and content type."""
        with pytest.raises(ValidationError, match="Field broken in content type api::x.x") as exc_info:
            ContentTypeDefinition.from_dict({"uid": "api::x.x", "fields": {"broken": {}}})
        assert exc_info.value.content_type == "api::x.x"

    def test_missing_names_become_empty(self):
        definition = ContentTypeDefinition.from_dict({"fields": {"a": {"type": "string"}}})
        assert definition.uid == ""
        assert definition.display_name == ""

    def test_bare_string_field_names_the_field(self):
        with pytest.raises(ValidationError, match="Field title in content type api::x.x") as exc_info:
            ContentTypeDefinition.from_dict({"uid": "api::x.x", "fields": {"title": "string"}})
        assert exc_info.value.attribute == "title"

    def test_scalar_enumeration_values_name_the_field(self):
        with pytest.raises(ValidationError, match="must be a list") as exc_info:
            ContentTypeDefinition.from_dict({
                "uid": "api::x.x",
                "fields": {"status": {"type": "enumeration", "values": "draft"}},
            })
        assert exc_info.value.attribute == "status"

    def test_options_must_be_a_mapping(self):
        with pytest.raises(ValidationError, match="options must be a mapping") as exc_info:
            ContentTypeDefinition.from_dict({
                "uid": "api::x.x",
                "fields": {"a": {"type": "string"}},
                "options": "yes",
            })
        assert exc_info.value.attribute == "options"


class TestNaming:
    """Tests for naming helpers."""

    def test_generate_uid(self):
        assert generate_uid("Blog Post") == "api::blog-post.blog-post"
        assert generate_uid("") == ""

    def test_generate_singular_name(self):
        assert generate_singular_name("Blog Post") == "blogpost"

    def test_generate_plural_name(self):
        assert generate_plural_name("article") == "articles"
        assert generate_plural_name("category") == "categories"
        assert generate_plural_name("day") == "days"
        assert generate_plural_name("box") == "boxes"
        assert generate_plural_name("match") == "matches"

    def test_case_helpers(self):
        assert pascal_case("blog-post") == "BlogPost"
        assert pascal_case("blogPost") == "BlogPost"
        assert lower_first("Article") == "article"

    def test_slugify(self):
        assert slugify("Add  Tags\tNow") == "add_tags_now"
