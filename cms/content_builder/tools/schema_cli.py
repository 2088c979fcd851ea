"""
Content builder CLI.

This tool turns the definitions document into a Prisma schema and keeps
the migration log:
- generate: Compile definitions and write schema.prisma
  (--migrate also logs a migration against the last snapshot)
- check: Validate and compile without writing anything
- diff: Show field-level differences between two definitions documents
- migrations: list | pending | apply ID | rollback ID | clear

Usage:
    content-builder generate --migrate --name "add tags"
    content-builder check
    content-builder diff --old definitions.v1.json --new definitions.v2.json
    content-builder migrations pending

Invariants:
    - Any ContentTypeError exits with code 1 and a one-line message
    - generate never writes a partial schema (compile happens first)
    - The snapshot is only advanced when a migration is logged

How to change safely:
    - Add new commands, don't modify existing ones
    - Keep output format stable for scripts parsing it
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any, List, Optional, Tuple

from ..compiler import CompiledSchema, PrismaSchemaCompiler
from ..config import Settings
from ..errors import CompilationError, ContentTypeError, PersistenceError
from ..logging_setup import setup_logging
from ..migrations import MigrationRecord, MigrationTracker, describe_changes, detect_changes
from ..schema import ContentTypeRegistry, load_definitions
from ..store import DefinitionStore

logger = logging.getLogger(__name__)


class SchemaCLI:
    """Commands behind the content-builder entry point.

    Example:
        >>> cli = SchemaCLI(Settings(project_root=Path("my-cms")))
        >>> compiled, record = cli.generate(migrate=True)
        >>> compiled.model_names
        ['Article', 'User']
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or Settings()
        self.compiler = PrismaSchemaCompiler(provider=self.settings.provider)
        self.store = DefinitionStore(self.settings.definitions_path, cache_ttl=self.settings.cache_ttl)
        self.tracker = MigrationTracker(self.settings.migrations_path)

    def load_registry(self) -> ContentTypeRegistry:
        """Load and validate the definitions document.

        Raises:
            PersistenceError: If the definitions document is missing or unreadable
        """
        path = self.settings.definitions_path
        if not path.exists():
            raise PersistenceError(f"No content types found at {path}", path=str(path))
        self.store.load()
        return self.store.registry

    def load_snapshot(self) -> ContentTypeRegistry:
        """Definitions as of the last logged migration (empty if none)."""
        path = self.settings.snapshot_path
        if not path.exists():
            return ContentTypeRegistry()
        return load_definitions(path)

    def generate(
        self, migrate: bool = False, name: str = ""
    ) -> Tuple[CompiledSchema, Optional[MigrationRecord]]:
        """Compile definitions and write the schema file.

        Args:
            migrate: Also log a migration if definitions changed since the snapshot
            name: Migration name (derived from the changes if empty)

        Returns:
            Tuple of (compiled schema, logged migration or None)
        """
        registry = self.load_registry()
        compiled = self.compiler.compile(registry)
        schema_text = compiled.schema_text + self.compiler.compile_enums(registry)

        schema_path = self.settings.schema_path
        try:
            schema_path.parent.mkdir(parents=True, exist_ok=True)
            schema_path.write_text(schema_text, encoding="utf-8")
        except OSError as e:
            raise PersistenceError(f"Cannot write schema {schema_path}: {e}", path=str(schema_path)) from e
        logger.info(f"Schema written to {schema_path}")

        record = None
        if migrate:
            record = self._log_migration(registry, schema_text, name)
        return compiled, record

    def _log_migration(
        self, registry: ContentTypeRegistry, schema_text: str, name: str
    ) -> Optional[MigrationRecord]:
        snapshot = self.load_snapshot()
        changes = detect_changes(snapshot, registry)
        if not changes.has_changes:
            logger.info("No content type changes since the last migration")
            return None

        down = self.compiler.render(snapshot) if len(snapshot) else ""
        record = self.tracker.create_migration(name, changes.content_types, up=schema_text, down=down)

        snapshot_path = self.settings.snapshot_path
        try:
            snapshot_path.parent.mkdir(parents=True, exist_ok=True)
            snapshot_path.write_text(registry.to_json(), encoding="utf-8")
        except OSError as e:
            raise PersistenceError(
                f"Cannot write snapshot {snapshot_path}: {e}", path=str(snapshot_path)
            ) from e
        return record

    def check(self) -> List[str]:
        """Validate and compile without writing.

        Returns:
            List of problems (empty if the definitions compile)
        """
        registry = self.load_registry()
        problems = registry.validate_all()
        if problems:
            return problems
        try:
            self.compiler.render(registry)
        except CompilationError as e:
            return [e.message]
        return []

    def diff(self, old_path: str, new_path: str) -> List[dict[str, Any]]:
        """Field-level differences between two definitions documents.

        Returns:
            List of change dictionaries
        """
        old_registry = load_definitions(old_path)
        new_registry = load_definitions(new_path)
        return [
            {
                "kind": change.kind.name,
                "path": change.path,
                "old_value": change.old_value,
                "new_value": change.new_value,
                "message": change.message,
                "is_destructive": change.is_destructive,
            }
            for change in describe_changes(old_registry, new_registry)
        ]


def _print_migrations(records: List[MigrationRecord]) -> None:
    if not records:
        print("No migrations")
        return
    for record in records:
        status = "applied" if record.applied else "pending"
        print(f"  [{status}] {record.id}  {', '.join(record.content_types)}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="content-builder", description="Content type schema and migration tool"
    )
    parser.add_argument("--project-root", help="Base directory for configured paths")
    parser.add_argument("--provider", help="Prisma datasource provider")
    parser.add_argument("--log-level", help="Log level (DEBUG, INFO, ...)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # generate command
    generate_parser = subparsers.add_parser("generate", help="Compile definitions into schema.prisma")
    generate_parser.add_argument(
        "--migrate", action="store_true", help="Log a migration if definitions changed"
    )
    generate_parser.add_argument("--name", default="", help="Migration name")

    # check command
    subparsers.add_parser("check", help="Validate and compile without writing")

    # diff command
    diff_parser = subparsers.add_parser("diff", help="Show differences between definitions documents")
    diff_parser.add_argument("--old", required=True, help="Path to old definitions document")
    diff_parser.add_argument("--new", required=True, help="Path to new definitions document")
    diff_parser.add_argument(
        "--format", choices=["text", "json"], default="text", help="Output format"
    )

    # migrations command
    migrations_parser = subparsers.add_parser("migrations", help="Inspect and update the migration log")
    migration_commands = migrations_parser.add_subparsers(dest="migration_command", required=True)
    migration_commands.add_parser("list", help="List every migration")
    migration_commands.add_parser("pending", help="List pending migrations")
    apply_parser = migration_commands.add_parser("apply", help="Mark a migration applied")
    apply_parser.add_argument("id")
    rollback_parser = migration_commands.add_parser("rollback", help="Mark a migration unapplied")
    rollback_parser.add_argument("id")
    migration_commands.add_parser("clear", help="Empty the migration log")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point for the content builder."""
    args = build_parser().parse_args(argv)

    overrides = {}
    if args.project_root:
        overrides["project_root"] = args.project_root
    if args.provider:
        overrides["provider"] = args.provider
    if args.log_level:
        overrides["log_level"] = args.log_level
    settings = Settings(**overrides)
    setup_logging(settings)

    cli = SchemaCLI(settings)
    try:
        return _run(cli, args)
    except ContentTypeError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1


def _run(cli: SchemaCLI, args: argparse.Namespace) -> int:
    if args.command == "generate":
        compiled, record = cli.generate(migrate=args.migrate, name=args.name)
        print(f"Schema written to {cli.settings.schema_path}")
        print(f"Models generated: {len(compiled.model_names)}")
        for model_name in compiled.model_names:
            print(f"  - {model_name}")
        if record is not None:
            print(f"Migration logged: {record.id}")
        return 0

    if args.command == "check":
        problems = cli.check()
        if not problems:
            print("Content types are valid")
            return 0
        print(f"Content type check failed with {len(problems)} error(s):")
        for problem in problems:
            print(f"  - {problem}")
        return 1

    if args.command == "diff":
        changes = cli.diff(args.old, args.new)
        if args.format == "json":
            print(json.dumps(changes, indent=2))
        elif not changes:
            print("No changes detected")
        else:
            print(f"Found {len(changes)} change(s):")
            for change in changes:
                status = "DESTRUCTIVE" if change["is_destructive"] else "OK"
                print(f"  [{status}] {change['kind']}: {change['path']}")
                print(f"          {change['message']}")
        return 0

    tracker = cli.tracker
    if args.migration_command == "list":
        _print_migrations(tracker.load_migrations())
    elif args.migration_command == "pending":
        _print_migrations(tracker.get_pending_migrations())
    elif args.migration_command in ("apply", "rollback"):
        if tracker.get_migration(args.id) is None:
            print(f"Error: migration {args.id} not found", file=sys.stderr)
            return 1
        if args.migration_command == "apply":
            tracker.mark_applied(args.id)
            print(f"Marked {args.id} applied")
        else:
            tracker.mark_unapplied(args.id)
            print(f"Marked {args.id} unapplied")
    elif args.migration_command == "clear":
        tracker.clear_migrations()
        print("Migration log cleared")
    return 0


if __name__ == "__main__":
    sys.exit(main())
