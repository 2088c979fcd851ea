"""
Definitions document format.

The definitions document maps uid -> content type definition. It is
stored as pretty-printed JSON; YAML is accepted as input so operators
can hand-write definitions.

Example document (YAML):
    api::article.article:
      uid: api::article.article
      displayName: Article
      singularName: article
      pluralName: articles
      fields:
        title:
          type: string
          required: true
        author:
          type: relation
          relationType: manyToOne
          target: api::user.user
      options:
        timestamps: true
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Union

import yaml

from ..errors import PersistenceError, ValidationError
from .registry import ContentTypeRegistry

YAML_SUFFIXES = (".yaml", ".yml")


def parse_definitions(data: Any) -> ContentTypeRegistry:
    """Build a registry from a decoded definitions document.

    A list of definitions is accepted as well as a uid-keyed mapping. In
    the mapping form a definition without a uid takes its key.

    Raises:
        ValidationError: If the document shape or any definition is invalid
    """
    keyed = isinstance(data, dict)
    if isinstance(data, list):
        data = {str(i): d for i, d in enumerate(data)}
    if not isinstance(data, dict):
        raise ValidationError("Definitions document must be a mapping of uid to definition")
    documents: Dict[str, Any] = {}
    for key, definition in data.items():
        if not isinstance(definition, dict):
            raise ValidationError(f"Definition '{key}' must be a mapping", content_type=str(key))
        if keyed:
            uid = definition.get("uid")
            if not uid:
                definition = {**definition, "uid": key}
            elif uid != key:
                raise ValidationError(
                    f"Definition '{key}' declares a different uid '{uid}'",
                    attribute="uid",
                    content_type=str(key),
                )
        documents[str(key)] = definition
    return ContentTypeRegistry.from_dict(documents)


def parse_yaml(yaml_str: str) -> ContentTypeRegistry:
    """Parse a YAML definitions document."""
    data = yaml.safe_load(yaml_str)
    return parse_definitions(data or {})


def parse_json(json_str: str) -> ContentTypeRegistry:
    """Parse a JSON definitions document."""
    data = json.loads(json_str)
    return parse_definitions(data)


def load_definitions(path: Union[str, Path]) -> ContentTypeRegistry:
    """Load a definitions document, choosing the parser by file suffix.

    Raises:
        PersistenceError: If the file cannot be read or decoded
        ValidationError: If a definition is invalid
    """
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise PersistenceError(
            f"Definitions file {path} is not valid UTF-8: {e}", path=str(path)
        ) from e
    except OSError as e:
        raise PersistenceError(f"Cannot read definitions file {path}: {e}", path=str(path)) from e
    try:
        if path.suffix.lower() in YAML_SUFFIXES:
            return parse_yaml(content)
        return parse_json(content)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise PersistenceError(
            f"Definitions file {path} is not valid: {e}", path=str(path)
        ) from e


def dump_definitions(registry: ContentTypeRegistry, fmt: str = "json") -> str:
    """Serialize a registry as a definitions document."""
    data: Dict[str, Any] = registry.to_dict()
    if fmt == "yaml":
        return yaml.dump(data, default_flow_style=False, sort_keys=False)
    return json.dumps(data, indent=2)
