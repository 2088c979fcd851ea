"""
Configuration for the content type builder.

Uses pydantic-settings for environment variable loading
(prefix CONTENT_BUILDER_, e.g. CONTENT_BUILDER_PROVIDER=sqlite).

Invariants:
    - Every setting has a default suitable for a project checkout
    - Relative paths resolve against project_root, never the process cwd

How to change safely:
    - Add new settings with defaults that keep existing projects working
"""

import logging
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Content type builder configuration loaded from environment."""

    # Project layout
    project_root: Path = Field(default=Path("."), description="Base directory for relative paths")
    definitions_file: Path = Field(
        default=Path("content-types/definitions.json"),
        description="Definitions document (JSON, or YAML by suffix)",
    )
    migrations_file: Path = Field(
        default=Path("content-types/migrations/migrations.json"),
        description="Migration log",
    )
    snapshot_file: Path = Field(
        default=Path("content-types/migrations/snapshot.json"),
        description="Definitions as of the last generate --migrate",
    )
    schema_file: Path = Field(default=Path("prisma/schema.prisma"), description="Generated schema")

    # Compiler
    provider: str = Field(default="postgresql", description="Prisma datasource provider")

    # Store
    cache_ttl: float = Field(default=5.0, description="Definitions cache freshness in seconds")

    # Observability
    log_level: str = Field(default="INFO", description="Root log level")
    log_format: Literal["text", "json"] = Field(default="text", description="Log output format")

    model_config = {"env_prefix": "CONTENT_BUILDER_"}

    def resolve(self, path: Path) -> Path:
        """Resolve a configured path against project_root."""
        return path if path.is_absolute() else self.project_root / path

    @property
    def definitions_path(self) -> Path:
        return self.resolve(self.definitions_file)

    @property
    def migrations_path(self) -> Path:
        return self.resolve(self.migrations_file)

    @property
    def snapshot_path(self) -> Path:
        return self.resolve(self.snapshot_file)

    @property
    def schema_path(self) -> Path:
        return self.resolve(self.schema_file)

    def log_config(self) -> None:
        """Log the effective configuration."""
        logger.info(
            "Content builder configuration loaded",
            extra={
                "project_root": str(self.project_root),
                "definitions_file": str(self.definitions_path),
                "migrations_file": str(self.migrations_path),
                "schema_file": str(self.schema_path),
                "provider": self.provider,
                "log_level": self.log_level,
            },
        )
