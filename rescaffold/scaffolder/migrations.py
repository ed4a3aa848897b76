"""Migration file generation and the migrations ledger.

Writes timestamped migration modules into the migrations folder and keeps a
JSON ledger standing in for the migrations table.  Nothing here connects to
a database or runs a migration.
"""

from __future__ import annotations

import json
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from jinja2 import TemplateError

from ..config import Config
from ..logger import LogQueue
from ..utils import write_text_file
from .inflector import Inflector
from .models import ArtifactKind, ArtifactStatus, MigrationResult
from .templates import TemplateRenderer


def migration_timestamp(now: Optional[datetime] = None) -> str:
    """UTC timestamp prefix, e.g. ``20261019174501123456``."""
    now = now or datetime.now(timezone.utc)
    return now.strftime("%Y%m%d%H%M%S%f")


class MigrationWriter:
    """Creates migration files under ``config.migrations_path``."""

    def __init__(
        self,
        config: Config,
        renderer: TemplateRenderer,
        log: LogQueue,
    ) -> None:
        self.config = config
        self.renderer = renderer
        self.log = log

    # -- Public API --------------------------------------------------------

    def new_table(
        self, migration_name: str, table_name: str, *, persist: bool = True
    ) -> MigrationResult:
        """Create a table-creation migration for *table_name*."""
        return self._create(
            ArtifactKind.MIGRATION_CREATE_TABLE,
            migration_name,
            table_name=table_name,
            persist=persist,
        )

    def new(self, migration_name: str, *, persist: bool = True) -> MigrationResult:
        """Create an empty migration named *migration_name*."""
        return self._create(ArtifactKind.MIGRATION_GENERIC, migration_name, persist=persist)

    def find(self, migration_name: str) -> Optional[Path]:
        """Return the existing migration file for *migration_name*, if any."""
        folder = self.config.migrations_path
        if not folder.is_dir():
            return None
        pattern = re.compile(rf"^\d+_{re.escape(migration_name)}\.py$")
        for file in sorted(folder.iterdir()):
            if pattern.match(file.name):
                return file
        return None

    def create_migrations_table(self, table_name: Optional[str] = None) -> bool:
        """Write the empty migrations ledger if it does not exist yet.

        Returns:
            ``True`` if the ledger was created, ``False`` if it already existed.
        """
        name = table_name or self.config.migrations_table_name
        ledger = self.config.migrations_path / f"{name}.json"
        if ledger.exists():
            self.log.debug(f"Migrations table {name} already exists at {ledger}")
            return False

        payload = {"table": name, "applied": []}
        write_text_file(ledger, json.dumps(payload, indent=2) + "\n")
        self.log.info(f"Created migrations table {name} at {ledger}")
        return True

    # -- Internals ---------------------------------------------------------

    def _create(
        self,
        kind: ArtifactKind,
        migration_name: str,
        *,
        table_name: Optional[str] = None,
        persist: bool,
    ) -> MigrationResult:
        existing = self.find(migration_name)
        if existing is not None:
            self.log.debug(f"Migration {migration_name} already exists, {existing} - skipping")
            return MigrationResult(
                kind=kind,
                status=ArtifactStatus.SKIPPED_EXISTING,
                path=existing,
                migration_name=migration_name,
                table_name=table_name,
            )

        path = self.config.migrations_path / f"{migration_timestamp()}_{migration_name}.py"
        extra = {"migration_name": migration_name}
        if table_name is not None:
            extra["table_name"] = table_name

        try:
            content = self.renderer.render_artifact(
                kind, Inflector.from_underscores(migration_name), **extra
            )
            if persist:
                write_text_file(path, content)
        except (OSError, UnicodeError, TemplateError) as exc:
            self.log.error(
                f"Failed to write migration {path}: {exc}",
                show_stack=isinstance(exc, TemplateError),
            )
            return MigrationResult(
                kind=kind,
                status=ArtifactStatus.FAILED,
                path=path,
                cause=str(exc),
                migration_name=migration_name,
                table_name=table_name,
            )

        if persist:
            self.log.info(f"New migration created at {path}")
        return MigrationResult(
            kind=kind,
            status=ArtifactStatus.CREATED if persist else ArtifactStatus.PLANNED,
            path=path,
            migration_name=migration_name,
            table_name=table_name,
        )
