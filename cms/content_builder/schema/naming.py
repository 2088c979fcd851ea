"""
Naming helpers shared by the builder and the compiler.

Pure functions with no I/O.
"""

from __future__ import annotations

import re

_NON_ALNUM = re.compile(r"[^a-z0-9\s]")
_WHITESPACE = re.compile(r"\s+")
_WORD_SPLIT = re.compile(r"[^A-Za-z0-9]+")


def generate_uid(display_name: str) -> str:
    """Derive a content type uid from its display name.

    Example:
        >>> generate_uid("Blog Post")
        'api::blog-post.blog-post'
    """
    if not display_name:
        return ""
    normalized = _WHITESPACE.sub("-", _NON_ALNUM.sub("", display_name.lower()).strip())
    return f"api::{normalized}.{normalized}"


def generate_singular_name(display_name: str) -> str:
    """Derive the singular API name from a display name ("Blog Post" -> "blogpost")."""
    if not display_name:
        return ""
    return _WHITESPACE.sub("", _NON_ALNUM.sub("", display_name.lower()))


def generate_plural_name(singular_name: str) -> str:
    """Pluralize a singular name with simple English rules."""
    if not singular_name:
        return ""
    if singular_name.endswith(("s", "sh", "ch", "x", "z")):
        return singular_name + "es"
    if (
        singular_name.endswith("y")
        and len(singular_name) > 1
        and singular_name[-2] not in "aeiou"
    ):
        return singular_name[:-1] + "ies"
    return singular_name + "s"


def pascal_case(name: str) -> str:
    """Convert a name to PascalCase ("blog-post" -> "BlogPost", "blogPost" -> "BlogPost")."""
    return "".join(upper_first(part) for part in _WORD_SPLIT.split(name) if part)


def upper_first(name: str) -> str:
    return name[:1].upper() + name[1:]


def lower_first(name: str) -> str:
    return name[:1].lower() + name[1:]


def slugify(name: str) -> str:
    """Replace whitespace runs with underscores and lower-case ("Add Tags" -> "add_tags")."""
    return _WHITESPACE.sub("_", name).lower()
