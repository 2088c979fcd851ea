"""
Unit tests for structural diffing of registry snapshots.

Tests cover:
- Added / removed / modified detection
- Field order sensitivity
- Field-level change reports and destructive flags
"""

from cms.content_builder.migrations.diff import (
    ChangeKind,
    describe_changes,
    detect_changes,
    structurally_equal,
)
from cms.content_builder.schema import ContentTypeBuilder, fields
from cms.content_builder.schema.types import ContentTypeDefinition, EnumerationField
from tests.helpers import make_registry, make_type


def article(**field_overrides):
    article_fields = {
        "title": fields.string(required=True),
        "status": fields.enumeration(["draft", "published"]),
        "author": fields.many_to_one("api::user.user"),
    }
    article_fields.update(field_overrides)
    return make_type("article", article_fields)


class TestDetectChanges:
    """Tests for detect_changes."""

    def test_identical_snapshots(self):
        changes = detect_changes(make_registry(article()), make_registry(article()))

        assert not changes.has_changes
        assert changes.to_dict() == {"added": [], "removed": [], "modified": []}

    def test_equal_definitions_from_different_constructions(self):
        """Builder, document and direct construction of one definition compare equal."""
        built = (
            ContentTypeBuilder.create("api::article.article")
            .display_name("Article")
            .singular_name("article")
            .plural_name("articles")
            .field("title", fields.string(required=True))
            .field("status", fields.enumeration(["draft", "published"]))
            .build()
        )
        direct = make_type(
            "article",
            {
                "title": fields.string(required=True),
                "status": EnumerationField(values=["draft", "published"]),
            },
            timestamps=True,
        )
        restored = ContentTypeDefinition.from_dict(built.to_dict())

        assert detect_changes(make_registry(built), make_registry(direct)).modified == []
        assert detect_changes(make_registry(built), make_registry(restored)).modified == []
        assert structurally_equal(direct, restored)

    def test_added_removed_modified(self):
        old = make_registry(article(), make_type("tag", {"name": fields.string()}))
        new = make_registry(
            article(body=fields.richtext()),
            make_type("user", {"name": fields.string()}),
        )

        changes = detect_changes(old, new)

        assert changes.added == ["api::user.user"]
        assert changes.removed == ["api::tag.tag"]
        assert changes.modified == ["api::article.article"]
        assert changes.content_types == ["api::user.user", "api::article.article", "api::tag.tag"]

    def test_metadata_change_is_a_modification(self):
        old = make_registry(make_type("tag", {"name": fields.string()}))
        new = make_registry(make_type("tag", {"name": fields.string()}, description="Labels"))

        assert detect_changes(old, new).modified == ["api::tag.tag"]

    def test_field_order_matters(self):
        """Reordering fields changes the compiled schema, so it is a modification."""
        a = make_type("tag", {"name": fields.string(), "slug": fields.uid()})
        b = make_type("tag", {"slug": fields.uid(), "name": fields.string()})

        assert not structurally_equal(a, b)
        assert detect_changes(make_registry(a), make_registry(b)).modified == ["api::tag.tag"]

    def test_accepts_mappings(self):
        old = {"api::article.article": article()}
        new = {}

        assert detect_changes(old, new).removed == ["api::article.article"]


class TestDescribeChanges:
    """Tests for field-level change reports."""

    def kinds(self, old, new):
        return [c.kind for c in describe_changes(make_registry(old), make_registry(new))]

    def test_no_changes(self):
        assert self.kinds(article(), article()) == []

    def test_content_type_added_and_removed(self):
        old = make_registry(article())
        new = make_registry(make_type("tag", {"name": fields.string()}))

        changes = describe_changes(old, new)

        assert [c.kind for c in changes] == [ChangeKind.CONTENT_TYPE_REMOVED, ChangeKind.CONTENT_TYPE_ADDED]
        assert changes[0].is_destructive
        assert not changes[1].is_destructive

    def test_field_added_is_safe(self):
        changes = describe_changes(make_registry(article()), make_registry(article(body=fields.text())))

        assert len(changes) == 1
        assert changes[0].kind == ChangeKind.FIELD_ADDED
        assert changes[0].path == "api::article.article.body"
        assert not changes[0].is_destructive

    def test_field_removed_is_destructive(self):
        old = article(body=fields.text())
        changes = describe_changes(make_registry(old), make_registry(article()))

        assert [c.kind for c in changes] == [ChangeKind.FIELD_REMOVED]
        assert changes[0].is_destructive

    def test_type_change(self):
        assert self.kinds(article(), article(title=fields.text(required=True))) == [
            ChangeKind.FIELD_TYPE_CHANGED
        ]

    def test_required_added(self):
        assert self.kinds(article(), article(status=fields.enumeration(["draft", "published"], required=True))) == [
            ChangeKind.REQUIRED_ADDED
        ]

    def test_enum_values(self):
        new = article(status=fields.enumeration(["draft", "review"]))

        changes = describe_changes(make_registry(article()), make_registry(new))

        assert [(c.kind, c.old_value, c.new_value) for c in changes] == [
            (ChangeKind.ENUM_VALUE_REMOVED, "published", None),
            (ChangeKind.ENUM_VALUE_ADDED, None, "review"),
        ]

    def test_relation_changed(self):
        new = article(author=fields.many_to_one("api::user.user", inversed_by="articles"))
        assert self.kinds(article(), new) == [ChangeKind.RELATION_CHANGED]

    def test_options_and_metadata(self):
        old = make_type("tag", {"name": fields.string()})
        new = make_type("tag", {"name": fields.string()}, description="Labels", timestamps=True)

        changes = describe_changes(make_registry(old), make_registry(new))

        assert [c.kind for c in changes] == [ChangeKind.METADATA_CHANGED, ChangeKind.OPTIONS_CHANGED]
        assert not any(c.is_destructive for c in changes)

    def test_str(self):
        changes = describe_changes(make_registry(article(body=fields.text())), make_registry(article()))
        assert str(changes[0]) == "[DESTRUCTIVE] FIELD_REMOVED: api::article.article.body - Field body was removed"
