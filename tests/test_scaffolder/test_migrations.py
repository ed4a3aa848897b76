"""Tests for migration file generation and the migrations ledger.

Covers:
- new_table / new write timestamped files with the rendered content
- Same-name migrations are skipped, not duplicated
- Dry runs write nothing
- Write failures are reported and logged, not raised
- create_migrations_table idempotence
"""

from __future__ import annotations

import json
import re
from datetime import datetime, timezone
from unittest.mock import patch

import pytest

from rescaffold.logger import LogLevel
from rescaffold.scaffolder.migrations import MigrationWriter, migration_timestamp
from rescaffold.scaffolder.models import ArtifactKind, ArtifactStatus
from rescaffold.scaffolder.templates import TemplateRenderer

pytestmark = pytest.mark.unit


@pytest.fixture
def writer(config, log_queue) -> MigrationWriter:
    return MigrationWriter(config, TemplateRenderer(), log_queue)


class TestMigrationTimestamp:
    def test_format(self):
        now = datetime(2026, 10, 19, 17, 45, 1, 123456, tzinfo=timezone.utc)
        assert migration_timestamp(now) == "20261019174501123456"

    def test_default_is_digits(self):
        assert re.fullmatch(r"\d{20}", migration_timestamp())


class TestNewTable:
    def test_creates_file(self, writer, config, sink):
        result = writer.new_table("create_table_widgets", "widgets")

        assert result.status is ArtifactStatus.CREATED
        assert result.kind is ArtifactKind.MIGRATION_CREATE_TABLE
        assert result.migration_name == "create_table_widgets"
        assert result.table_name == "widgets"
        assert result.path.parent == config.migrations_path
        assert re.fullmatch(r"\d{20}_create_table_widgets\.py", result.path.name)
        assert 'TABLE_NAME = "widgets"' in result.path.read_text(encoding="utf-8")
        assert f"New migration created at {result.path}" in sink.messages(LogLevel.INFO)

    def test_second_call_skips(self, writer, config):
        first = writer.new_table("create_table_widgets", "widgets")
        second = writer.new_table("create_table_widgets", "widgets")

        assert second.status is ArtifactStatus.SKIPPED_EXISTING
        assert second.path == first.path
        assert len(list(config.migrations_path.glob("*.py"))) == 1

    def test_dry_run_writes_nothing(self, writer, config):
        result = writer.new_table("create_table_widgets", "widgets", persist=False)
        assert result.status is ArtifactStatus.PLANNED
        assert not config.migrations_path.exists()

    def test_write_failure_reported(self, writer, sink):
        with patch(
            "rescaffold.scaffolder.migrations.write_text_file",
            side_effect=PermissionError("denied"),
        ):
            result = writer.new_table("create_table_widgets", "widgets")

        assert result.status is ArtifactStatus.FAILED
        assert result.cause == "denied"
        assert any("denied" in m for m in sink.messages(LogLevel.ERROR))
        assert sink.with_stack == []

    def test_template_error_logged_with_stack(self, config, log_queue, sink, tmp_path):
        broken = tmp_path / "templates"
        (broken / "migrations").mkdir(parents=True)
        (broken / "migrations" / "create_table.py.j2").write_text("{{ nope }}", encoding="utf-8")
        writer = MigrationWriter(config, TemplateRenderer(broken), log_queue)

        result = writer.new_table("create_table_widgets", "widgets")

        assert result.status is ArtifactStatus.FAILED
        [error] = sink.messages(LogLevel.ERROR)
        assert sink.with_stack == [error]


class TestNewGeneric:
    def test_creates_file(self, writer):
        result = writer.new("add_index_to_users")
        assert result.kind is ArtifactKind.MIGRATION_GENERIC
        assert result.table_name is None
        assert result.path.name.endswith("_add_index_to_users.py")
        assert result.path.is_file()

    def test_find_ignores_other_names(self, writer):
        writer.new("add_index_to_users")
        assert writer.find("add_index") is None
        assert writer.find("add_index_to_users") is not None


class TestMigrationsTable:
    def test_creates_ledger(self, writer, config):
        assert writer.create_migrations_table() is True
        ledger = config.migrations_path / "schema_migrations.json"
        assert json.loads(ledger.read_text(encoding="utf-8")) == {
            "table": "schema_migrations",
            "applied": [],
        }

    def test_idempotent(self, writer, config):
        writer.create_migrations_table()
        ledger = config.migrations_path / "schema_migrations.json"
        ledger.write_text('{"table": "schema_migrations", "applied": ["x"]}', encoding="utf-8")

        assert writer.create_migrations_table() is False
        assert "x" in ledger.read_text(encoding="utf-8")

    def test_custom_name(self, writer, config):
        writer.create_migrations_table("migrations")
        assert (config.migrations_path / "migrations.json").is_file()
