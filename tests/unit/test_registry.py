"""
Unit tests for the content type registry.

Tests cover:
- Definition validation rules
- Overwrite on redefine
- Snapshots, removal and iteration
- Fingerprint generation
- Cross-model checks
"""

import pytest

from cms.content_builder.errors import ValidationError
from cms.content_builder.schema import fields
from cms.content_builder.schema.registry import ContentTypeRegistry, validate_definition
from cms.content_builder.schema.types import ContentTypeDefinition, ContentTypeOptions, EnumerationField
from tests.helpers import make_registry, make_type


def definition_with(**overrides):
    values = dict(
        uid="api::tag.tag",
        display_name="Tag",
        singular_name="tag",
        plural_name="tags",
        fields={"name": fields.string()},
    )
    values.update(overrides)
    return ContentTypeDefinition(**values)


class TestValidation:
    """Tests for validate_definition."""

    @pytest.mark.parametrize(
        "attribute,overrides",
        [
            ("uid", {"uid": ""}),
            ("displayName", {"display_name": ""}),
            ("singularName", {"singular_name": ""}),
            ("pluralName", {"plural_name": ""}),
            ("fields", {"fields": {}}),
        ],
    )
    def test_missing_attribute(self, attribute, overrides):
        """Missing descriptive attributes are reported by name."""
        with pytest.raises(ValidationError) as exc_info:
            validate_definition(definition_with(**overrides))
        assert exc_info.value.attribute == attribute

    def test_valid_definition(self):
        validate_definition(definition_with())

    def test_blank_field_name(self):
        with pytest.raises(ValidationError, match="Field name cannot be empty"):
            validate_definition(definition_with(fields={" ": fields.string()}))

    def test_id_is_reserved(self):
        with pytest.raises(ValidationError, match="reserved"):
            validate_definition(definition_with(fields={"id": fields.integer()}))

    def test_timestamp_names_reserved_only_with_timestamps(self):
        """createdAt is free unless timestamps are on."""
        validate_definition(definition_with(fields={"createdAt": fields.datetime()}))
        with pytest.raises(ValidationError, match="reserved"):
            validate_definition(definition_with(
                fields={"createdAt": fields.datetime()},
                options=ContentTypeOptions(timestamps=True),
            ))

    def test_deleted_at_reserved_with_soft_delete(self):
        with pytest.raises(ValidationError, match="reserved"):
            validate_definition(definition_with(
                fields={"deletedAt": fields.datetime()},
                options=ContentTypeOptions(soft_delete=True),
            ))

    def test_enumeration_needs_values(self):
        with pytest.raises(ValidationError, match="must have values"):
            validate_definition(definition_with(fields={"status": fields.enumeration([])}))

    def test_enumeration_rejects_blank_and_duplicate_values(self):
        with pytest.raises(ValidationError, match="empty value"):
            validate_definition(definition_with(fields={"status": fields.enumeration(["a", ""])}))
        with pytest.raises(ValidationError, match="duplicate values"):
            validate_definition(definition_with(fields={"status": fields.enumeration(["a", "a"])}))

    def test_enumeration_default_must_be_member(self):
        """Enum default outside the value set is rejected."""
        with pytest.raises(ValidationError) as exc_info:
            validate_definition(definition_with(
                fields={"status": fields.enumeration(["draft", "published"], default="archived")}
            ))
        assert exc_info.value.attribute == "status"

    def test_relation_needs_target(self):
        with pytest.raises(ValidationError, match="must have a target"):
            validate_definition(definition_with(fields={"owner": fields.many_to_one("")}))

    def test_relation_partner_attributes_are_exclusive(self):
        with pytest.raises(ValidationError, match="cannot set both"):
            validate_definition(definition_with(
                fields={"peer": fields.one_to_one("api::tag.tag", mapped_by="a", inversed_by="b")}
            ))

    def test_bounds(self):
        with pytest.raises(ValidationError, match="must be >= 0"):
            validate_definition(definition_with(fields={"name": fields.string(max_length=-1)}))
        with pytest.raises(ValidationError, match="minLength exceeds maxLength"):
            validate_definition(definition_with(fields={"name": fields.string(min_length=5, max_length=2)}))
        with pytest.raises(ValidationError, match="min exceeds max"):
            validate_definition(definition_with(fields={"count": fields.integer(min=10, max=1)}))

    @pytest.mark.parametrize("name", ["first name", "1st", "_hidden", "title-text", "größe"])
    def test_field_name_must_be_an_identifier(self, name):
        with pytest.raises(ValidationError, match="must start with a letter") as exc_info:
            validate_definition(definition_with(fields={name: fields.string()}))
        assert exc_info.value.attribute == "fields"

    def test_field_name_may_use_digits_and_underscores(self):
        validate_definition(definition_with(fields={"line_2": fields.string()}))

    def test_enumeration_values_must_be_identifiers(self):
        with pytest.raises(ValidationError, match="not identifiers") as exc_info:
            validate_definition(definition_with(
                fields={"state": fields.enumeration(["in progress", "done", "re-opened"])}
            ))
        assert exc_info.value.attribute == "state"
        assert "['in progress', 're-opened']" in exc_info.value.message

    def test_enumeration_values_must_be_a_sequence(self):
        with pytest.raises(ValidationError, match="must list its values"):
            validate_definition(definition_with(fields={"state": EnumerationField(values=5)}))

    @pytest.mark.parametrize(
        "field,message",
        [
            (fields.string(min_length="x"), "min_length must be an integer"),
            (fields.string(max_length=2.5), "max_length must be an integer"),
            (fields.integer(min="0"), "min must be a number"),
            (fields.integer(max=True), "max must be a number"),
        ],
    )
    def test_bounds_must_be_numbers(self, field, message):
        with pytest.raises(ValidationError, match=message):
            validate_definition(definition_with(fields={"value": field}))

    def test_names_must_be_strings(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_definition(definition_with(display_name=5))
        assert exc_info.value.attribute == "displayName"


class TestContentTypeRegistry:
    """Tests for ContentTypeRegistry."""

    def test_define_and_get(self):
        registry = ContentTypeRegistry()
        tag = make_type("tag", {"name": fields.string()})

        result = registry.define(tag)

        assert result is registry
        assert registry.get("api::tag.tag") == tag
        assert registry.has("api::tag.tag")
        assert "api::tag.tag" in registry
        assert registry.get("api::missing.missing") is None

    def test_define_validates(self):
        registry = ContentTypeRegistry()
        with pytest.raises(ValidationError):
            registry.define(definition_with(fields={}))
        assert len(registry) == 0

    def test_redefine_overwrites(self):
        """Redefining a uid replaces the definition without error."""
        registry = ContentTypeRegistry()
        registry.define(make_type("tag", {"name": fields.string()}))
        registry.define(make_type("tag", {"label": fields.string()}))

        assert len(registry) == 1
        assert registry.get("api::tag.tag").field_names() == ["label"]

    def test_forward_references_are_accepted(self):
        """A relation target need not be defined yet."""
        registry = ContentTypeRegistry()
        registry.define(make_type("article", {"author": fields.many_to_one("api::user.user")}))
        assert registry.has("api::article.article")

    def test_get_all_is_a_copy(self):
        registry = make_registry(make_type("tag", {"name": fields.string()}))
        snapshot = registry.get_all()
        snapshot.clear()
        assert len(registry) == 1

    def test_insertion_order(self):
        registry = make_registry(
            make_type("user", {"name": fields.string()}),
            make_type("article", {"title": fields.string()}),
        )
        assert [d.uid for d in registry] == ["api::user.user", "api::article.article"]

    def test_remove_and_clear(self):
        registry = make_registry(
            make_type("user", {"name": fields.string()}),
            make_type("tag", {"name": fields.string()}),
        )
        assert registry.remove("api::user.user")
        assert not registry.remove("api::user.user")
        registry.clear()
        assert len(registry) == 0

    def test_fingerprint(self):
        """Same content model, same fingerprint."""
        a = make_registry(make_type("tag", {"name": fields.string()}))
        b = make_registry(make_type("tag", {"name": fields.string()}))
        c = make_registry(make_type("tag", {"name": fields.string(required=True)}))

        assert a.fingerprint().startswith("sha256:")
        assert a.fingerprint() == b.fingerprint()
        assert a.fingerprint() != c.fingerprint()

    def test_document_round_trip(self):
        registry = make_registry(
            make_type("article", {"author": fields.many_to_one("api::user.user")}),
            make_type("user", {"email": fields.email(required=True, unique=True)}),
        )
        restored = ContentTypeRegistry.from_dict(registry.to_dict())
        assert restored.get_all() == registry.get_all()

    def test_validate_all_reports_unknown_targets(self):
        registry = make_registry(make_type("article", {"author": fields.many_to_one("api::user.user")}))

        errors = registry.validate_all()

        assert len(errors) == 1
        assert "api::user.user" in errors[0]
