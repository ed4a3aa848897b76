"""rescaffold configuration.

Describes where an application keeps its resources, unit tests, migrations,
config and logs, plus the file-name conventions for generated files.  Values
come from defaults, a saved JSON file or ``RESCAFFOLD_*`` variables.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from .utils import ensure_dir, write_text_file


class LogConfig(BaseModel):
    """Logging sink settings."""

    level: str = Field(default="debug", description="Minimum level emitted by the sink")
    output_length: int = Field(
        default=10_000, ge=1, description="Maximum logged message length before truncation"
    )
    suppress_output: bool = Field(default=False, description="Silence the sink entirely")
    file_logging: bool = Field(
        default=True, description="Also write to <log_dir>/<app_env>.log when log_dir exists"
    )


class Config(BaseModel):
    """Global rescaffold configuration.

    Holds the application layout the engine writes into and the naming
    conventions applied to generated files.  Instances are typically created
    once by the CLI entry point and then passed through the rest of the system.
    """

    app_root: Path = Field(default=Path("."))
    app_env: str = Field(default="dev")

    resources_dir: str = Field(default="resources")
    test_unit_dir: str = Field(default="test/unit")
    migrations_dir: str = Field(default="db/migrations")
    config_dir: str = Field(default="config")
    log_dir: str = Field(default="log")

    model_file_postfix: str = Field(default=".py")
    validator_file_postfix: str = Field(default="_validator.py")
    test_file_identifier: str = Field(default="_test.py")

    migrations_table_name: str = Field(default="schema_migrations")
    db_config_file_name: str = Field(default="database.json")

    logging: LogConfig = Field(default_factory=LogConfig)

    # ------------------------------------------------------------------
    # Layout paths
    # ------------------------------------------------------------------

    @property
    def resources_path(self) -> Path:
        """Root folder holding one sub-directory per resource."""
        return self.app_root / self.resources_dir

    @property
    def test_unit_path(self) -> Path:
        """Framework-wide unit test folder."""
        return self.app_root / self.test_unit_dir

    @property
    def migrations_path(self) -> Path:
        return self.app_root / self.migrations_dir

    @property
    def config_path(self) -> Path:
        return self.app_root / self.config_dir

    @property
    def log_path(self) -> Path:
        return self.app_root / self.log_dir

    @property
    def log_file_path(self) -> Path:
        """Per-environment log file, e.g. ``log/dev.log``."""
        return self.log_path / f"{self.app_env}.log"

    @property
    def db_config_path(self) -> Path:
        return self.config_path / self.db_config_file_name

    # ------------------------------------------------------------------
    # Persistence & environment
    # ------------------------------------------------------------------

    def save(self, path: Path | None = None) -> Path:
        """Write this config as indented JSON.

        Defaults to ``<config_path>/rescaffold.json`` and returns the file
        written.
        """
        target = path or (self.config_path / "rescaffold.json")
        write_text_file(target, self.model_dump_json(indent=2))
        return target

    @classmethod
    def load(cls, path: Path) -> "Config":
        return cls.model_validate_json(Path(path).read_text(encoding="utf-8"))

    @classmethod
    def from_env(cls) -> "Config":
        """Defaults overridden by any ``RESCAFFOLD_*`` variables that are set.

        See ``_ENV_FIELDS`` and ``_ENV_LOG_FIELDS`` for the variable names.
        """
        fields: dict[str, Any] = {
            field: os.environ[var] for var, field in _ENV_FIELDS.items() if os.environ.get(var)
        }
        log_fields: dict[str, Any] = {
            field: os.environ[var]
            for var, field in _ENV_LOG_FIELDS.items()
            if os.environ.get(var)
        }
        if "suppress_output" in log_fields:
            log_fields["suppress_output"] = log_fields["suppress_output"].lower() in _TRUTHY
        return cls(logging=LogConfig(**log_fields), **fields)

    def ensure_directories(self) -> None:
        """Create the resources, unit test and migrations folders."""
        for folder in (self.resources_path, self.test_unit_path, self.migrations_path):
            ensure_dir(folder)


_ENV_FIELDS: dict[str, str] = {
    "RESCAFFOLD_APP_ROOT": "app_root",
    "RESCAFFOLD_ENV": "app_env",
    "RESCAFFOLD_RESOURCES_DIR": "resources_dir",
    "RESCAFFOLD_TEST_UNIT_DIR": "test_unit_dir",
    "RESCAFFOLD_MIGRATIONS_DIR": "migrations_dir",
}

_ENV_LOG_FIELDS: dict[str, str] = {
    "RESCAFFOLD_LOG_LEVEL": "level",
    "RESCAFFOLD_OUTPUT_LENGTH": "output_length",
    "RESCAFFOLD_SUPPRESS_OUTPUT": "suppress_output",
}

_TRUTHY = ("1", "true", "yes")
