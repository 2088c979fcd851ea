"""
CLI tools for the content builder.

This module provides command-line tools for:
- generate: Compile definitions into a Prisma schema, optionally logging a migration
- check / diff: Validate definitions and compare documents
- migrations: Inspect and update the migration log

Invariants:
    - Tools work on files only (no database connection required)
    - Errors exit non-zero with a one-line message
"""

from .schema_cli import SchemaCLI, main

__all__ = ["SchemaCLI", "main"]
