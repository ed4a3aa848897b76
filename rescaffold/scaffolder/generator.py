"""Main scaffolding orchestrator.

Takes a resource name and generates the model, validator, unit test and
table migration for it.  Existing files are never overwritten: a second run
over the same resource leaves every hand-edited file untouched and reports
it as skipped.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

from jinja2 import TemplateError

from ..config import Config
from ..logger import LogQueue
from ..registry import ResourceRegistry
from ..utils import ensure_dir, underscore_whitespace, write_text_file
from .inflector import Inflector
from .migrations import MigrationWriter
from .models import (
    RESOURCE_FILE_KINDS,
    ArtifactKind,
    ArtifactOutcome,
    ArtifactStatus,
    MigrationResult,
    ResourceName,
    ScaffoldError,
    ScaffoldRequest,
    ScaffoldResult,
    UnsupportedArtifactKind,
    clean_name,
)
from .templates import TemplateRenderer


SUPPORTED_ADAPTERS: tuple[str, ...] = ("sqlite", "postgresql", "mysql")


class ResourceGenerator:
    """Resource scaffolding engine.

    Every entry point derives a single ``ResourceName`` up front and hands it
    to each artifact step, so file names and the class/collection names
    inside the rendered code always agree.  Artifact writes are best effort:
    IO and template failures are logged and reported per artifact, while
    contract violations (blank names, unknown kinds) propagate.
    """

    def __init__(
        self,
        config: Config,
        *,
        log: Optional[LogQueue] = None,
        renderer: Optional[TemplateRenderer] = None,
        inflector: Optional[Inflector] = None,
        migrations: Optional[MigrationWriter] = None,
        registry: Optional[ResourceRegistry] = None,
    ) -> None:
        self.config = config
        self.log = log or LogQueue(config.logging.output_length)
        self.renderer = renderer or TemplateRenderer()
        self.inflector = inflector or Inflector()
        self.migrations = migrations or MigrationWriter(config, self.renderer, self.log)
        self.registry = registry or ResourceRegistry(config, self.inflector)

    # -- Public API --------------------------------------------------------

    def resource_name(self, raw_name: str) -> ResourceName:
        """Derive the singular/plural pair for *raw_name*."""
        return ResourceName.from_raw(raw_name, self.inflector)

    def new_model(self, raw_name: str, *, persist: bool = True) -> ScaffoldResult:
        """Generate the model file under ``resources/<plural>/``."""
        name = self.resource_name(raw_name)
        result = ScaffoldResult(resource=name)
        result.add(self._generate(name, ArtifactKind.MODEL, persist))
        return result

    def new_resource(self, raw_name: str, *, persist: bool = True) -> ScaffoldResult:
        """Generate model, table migration, validator and unit test."""
        return self.scaffold(ScaffoldRequest(raw_name=raw_name, persist=persist))

    def scaffold(self, request: ScaffoldRequest) -> ScaffoldResult:
        """Run every requested artifact step for one resource.

        Steps are independent; a failed step does not stop or undo the
        others.  Resources are reloaded once at the end when any resource
        file was requested.
        """
        name = self.resource_name(request.raw_name)
        result = ScaffoldResult(resource=name)

        for kind in request.kinds:
            if kind is ArtifactKind.MIGRATION_CREATE_TABLE:
                result.add(self._generate_table_migration(name, request.persist))
            elif kind is ArtifactKind.MIGRATION_GENERIC:
                result.add(self.new_migration(request.raw_name, persist=request.persist))
            else:
                result.add(self._generate(name, kind, request.persist))

        if request.persist and RESOURCE_FILE_KINDS.intersection(request.kinds):
            self._reload_resources()
        return result

    def new_table_migration(self, raw_name: str, *, persist: bool = True) -> MigrationResult:
        """Create the ``create_table_<plural>`` migration for a resource."""
        return self._generate_table_migration(self.resource_name(raw_name), persist)

    def new_migration(self, raw_name: str, *, persist: bool = True) -> MigrationResult:
        """Create a free-form migration named after *raw_name*.

        ``"Add Index To Users"`` becomes ``add_index_to_users``.

        Raises:
            InvalidResourceName: If the name is blank or holds anything but
                letters, digits, underscores and whitespace.
        """
        migration_name = clean_name(
            underscore_whitespace(raw_name), "Migration name", leading_digit=True
        )
        return self.migrations.new(migration_name, persist=persist)

    def setup_resource_path(self, name: str, *, persist: bool = True) -> Path:
        """Ensure ``resources/<lowercase name>`` exists and register it.

        Safe to call repeatedly: the folder is created once and registered
        once.
        """
        resource_path = self.config.resources_path / name.lower()
        if persist:
            _, created = ensure_dir(resource_path)
            if created:
                self.log.debug(f"Created resource folder {resource_path}")
        self.registry.register_path(resource_path)
        return resource_path

    def write_resource_file(
        self,
        path: str | Path,
        file_name: str,
        name: ResourceName | str,
        kind: ArtifactKind | str,
        *,
        persist: bool = True,
    ) -> ArtifactOutcome:
        """Render and write one resource file unless it already exists.

        An existing file is not an error: the write is skipped and reported
        as ``skipped_existing``.

        Raises:
            UnsupportedArtifactKind: If *kind* is not a model, validator or
                test.  Raised before any filesystem access.
        """
        try:
            kind = ArtifactKind(kind)
        except ValueError:
            raise UnsupportedArtifactKind(kind, file_name) from None
        if kind not in RESOURCE_FILE_KINDS:
            raise UnsupportedArtifactKind(kind, file_name)

        if isinstance(name, str):
            name = self.resource_name(name)

        target = Path(path) / file_name
        if target.is_file():
            self.log.debug(f"File already exists, {target} - skipping")
            return ArtifactOutcome(kind=kind, status=ArtifactStatus.SKIPPED_EXISTING, path=target)

        try:
            content = self.renderer.render_artifact(
                kind,
                name.class_name,
                name.plural_class_name,
                **self._template_context(name),
            )
            if persist:
                write_text_file(target, content)
        except (OSError, UnicodeError, TemplateError) as exc:
            # Stack traces only for template errors.
            self.log.error(
                f"Failed to write {target}: {exc}", show_stack=isinstance(exc, TemplateError)
            )
            return ArtifactOutcome(
                kind=kind, status=ArtifactStatus.FAILED, path=target, cause=str(exc)
            )

        status = ArtifactStatus.CREATED if persist else ArtifactStatus.PLANNED
        return ArtifactOutcome(kind=kind, status=status, path=target)

    def new_db_config(self, adapter: str = "sqlite") -> Path:
        """Write ``config/<db_config_file_name>`` and initialise the ledger.

        An existing config file is left alone.
        """
        if adapter not in SUPPORTED_ADAPTERS:
            raise ScaffoldError(
                f"Unsupported database adapter {adapter!r}; expected one of {SUPPORTED_ADAPTERS}"
            )

        self.config.ensure_directories()
        ensure_dir(self.config.config_path)
        ensure_dir(self.config.log_path)

        target = self.config.db_config_path
        if target.is_file():
            self.log.debug(f"File already exists, {target} - skipping")
        else:
            content = self.renderer.render(
                "config/database.json.j2", _db_config_context(self.config, adapter)
            )
            write_text_file(target, content)
            self.log.info(f"New database config created at {target}")

        self.migrations.create_migrations_table()
        self._reload_resources()
        self.log.info("New app ready")
        return target

    def db_init(self) -> bool:
        """Create the migrations ledger.

        Returns:
            ``True`` when the ledger was created, ``False`` if it existed.
        """
        return self.migrations.create_migrations_table()

    # -- File names --------------------------------------------------------

    def model_file_name(self, name: ResourceName) -> str:
        return name.file_stem + self.config.model_file_postfix

    def validator_file_name(self, name: ResourceName) -> str:
        return name.file_stem + self.config.validator_file_postfix

    def test_file_name(self, name: ResourceName) -> str:
        return name.file_stem + self.config.test_file_identifier

    # -- Artifact steps ----------------------------------------------------

    def _generate(self, name: ResourceName, kind: ArtifactKind, persist: bool) -> ArtifactOutcome:
        """Prepare the target folder for *kind* and write its file."""
        if kind is ArtifactKind.MODEL:
            file_name = self.model_file_name(name)
        elif kind is ArtifactKind.VALIDATOR:
            file_name = self.validator_file_name(name)
        elif kind is ArtifactKind.TEST:
            file_name = self.test_file_name(name)
        else:
            raise UnsupportedArtifactKind(kind)

        try:
            if kind is ArtifactKind.TEST:
                folder = self.config.test_unit_path
                if persist:
                    ensure_dir(folder)
            else:
                folder = self.setup_resource_path(name.plural, persist=persist)
        except OSError as exc:
            self.log.error(f"Failed to prepare folder for {file_name}: {exc}")
            return ArtifactOutcome(
                kind=kind,
                status=ArtifactStatus.FAILED,
                path=Path(file_name),
                cause=str(exc),
            )

        outcome = self.write_resource_file(folder, file_name, name, kind, persist=persist)
        if outcome.status is ArtifactStatus.CREATED:
            if kind is ArtifactKind.MODEL:
                self.log.info(f"New model created at {outcome.path}")
            else:
                self.log.info(f"New {file_name} created at {outcome.path}")
        return outcome

    def _generate_table_migration(self, name: ResourceName, persist: bool) -> MigrationResult:
        migration_name = f"create_table_{name.table_name}"
        return self.migrations.new_table(migration_name, name.table_name, persist=persist)

    def _template_context(self, name: ResourceName) -> dict[str, Any]:
        return {
            "module_name": name.file_stem,
            "table_name": name.table_name,
            "model_module": Path(self.model_file_name(name)).stem,
            "validator_module": Path(self.validator_file_name(name)).stem,
        }

    def _reload_resources(self) -> None:
        try:
            found = self.registry.reload_resources()
        except OSError as exc:
            self.log.warn(f"Reloading resources failed: {exc}")
            return
        self.log.debug(f"Loaded {len(found)} resource(s)")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _db_config_context(config: Config, adapter: str) -> dict[str, Any]:
    """Template variables for ``config/database.json.j2``."""
    app = config.app_root.resolve().name or "app"
    if adapter == "sqlite":
        database = f"db/{config.app_env}.sqlite3"
        test_database = "db/test.sqlite3"
    else:
        database = f"{app}_{config.app_env}"
        test_database = f"{app}_test"
    return {
        "app_env": config.app_env,
        "adapter": adapter,
        "database": database,
        "test_database": test_database,
        "migrations_table_name": config.migrations_table_name,
    }
