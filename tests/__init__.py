"""
Content builder test suite.

This package contains:
- unit/: Unit tests (pure functions, temp files only)
- integration/: Integration tests (CLI and the generate/migrate flow)
"""
