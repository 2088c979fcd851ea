"""
Error types for the content type builder.

This module defines all exception types raised by the package:
- ContentTypeError: Base exception
- ValidationError: Structurally invalid definition (builder/registry)
- CompilationError: Registry cannot be lowered to schema text
- PersistenceError: Definitions or migrations document cannot be read/written
- ContentTypeExistsError / ContentTypeNotFoundError: Store-level lookups

Invariants:
    - All errors inherit from ContentTypeError
    - Errors include context for debugging (content type, field, path)
    - Nothing is retried internally; errors surface to the caller
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class ContentTypeError(Exception):
    """Base exception for all content type builder errors.

    Attributes:
        message: Error message
        code: Error code for programmatic handling
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or "CONTENT_TYPE_ERROR"
        self.details = details or {}


class ValidationError(ContentTypeError):
    """Definition failed validation.

    Raised when:
    - A descriptive attribute (uid, names) is missing
    - The field set is empty
    - An enumeration default is not one of its values
    - A relation is missing its target or kind
    """

    def __init__(
        self,
        message: str,
        attribute: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> None:
        super().__init__(
            message,
            code="VALIDATION_ERROR",
            details={"attribute": attribute, "content_type": content_type},
        )
        self.attribute = attribute
        self.content_type = content_type


class CompilationError(ContentTypeError):
    """Registry could not be compiled.

    Raised when a relation cannot be resolved against the registry or
    the generated schema would contain conflicting names. A compilation
    error aborts the whole compile; no partial schema is returned.
    """

    def __init__(
        self,
        message: str,
        content_type: Optional[str] = None,
        field_name: Optional[str] = None,
    ) -> None:
        super().__init__(
            message,
            code="COMPILATION_ERROR",
            details={"content_type": content_type, "field": field_name},
        )
        self.content_type = content_type
        self.field_name = field_name


class PersistenceError(ContentTypeError):
    """Backing document could not be read or written."""

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        super().__init__(message, code="PERSISTENCE_ERROR", details={"path": path})
        self.path = path


class ContentTypeExistsError(ContentTypeError):
    """A content type with this uid is already stored."""

    def __init__(self, uid: str) -> None:
        super().__init__(
            f"Content type with UID {uid} already exists",
            code="CONTENT_TYPE_EXISTS",
            details={"uid": uid},
        )
        self.uid = uid


class ContentTypeNotFoundError(ContentTypeError):
    """No content type with this uid is stored."""

    def __init__(self, uid: str) -> None:
        super().__init__(
            f"Content type with UID {uid} not found",
            code="CONTENT_TYPE_NOT_FOUND",
            details={"uid": uid},
        )
        self.uid = uid
