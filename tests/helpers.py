"""Shared builders for content builder tests."""

from typing import List

from cms.content_builder.schema.registry import ContentTypeRegistry
from cms.content_builder.schema.types import ContentTypeDefinition, ContentTypeOptions


def make_type(name, fields, description="", **options) -> ContentTypeDefinition:
    """Definition with uid/names derived from a lower-case name."""
    return ContentTypeDefinition(
        uid=f"api::{name}.{name}",
        display_name=name.title(),
        singular_name=name,
        plural_name=f"{name}s",
        fields=fields,
        description=description,
        options=ContentTypeOptions(**options),
    )


def make_registry(*definitions) -> ContentTypeRegistry:
    """Helper to create a registry with content types."""
    registry = ContentTypeRegistry()
    for definition in definitions:
        registry.define(definition)
    return registry


def model_lines(schema_text: str, model_name: str) -> List[str]:
    """Body lines of a model block with column padding collapsed."""
    lines = schema_text.splitlines()
    start = lines.index(f"model {model_name} {{")
    end = lines.index("}", start)
    return [" ".join(line.split()) for line in lines[start + 1:end] if line.strip()]


class FakeClock:
    """Settable clock returning seconds."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds
