"""Tests for the rescaffold command line.

Covers:
- Argument parsing for every command
- load_config overrides
- main(): scaffolding commands, dry runs, db commands
- Exit codes: 0 on best-effort failures, 1 on contract violations
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from rescaffold.cli import NAMED_COMMANDS, build_parser, load_config, main

pytestmark = pytest.mark.unit


@pytest.fixture(autouse=True)
def clean_env():
    with patch.dict(os.environ, {}, clear=True):
        yield


@pytest.fixture
def summary():
    with patch("rescaffold.cli.print_summary_table") as mock_table:
        yield mock_table


def _rows(mock_table) -> list[tuple[str, str, str]]:
    return mock_table.call_args.args[0]


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


class TestParser:
    @pytest.mark.parametrize("command", list(NAMED_COMMANDS))
    def test_named_commands(self, command):
        args = build_parser().parse_args([command, "Widget", "--dry-run", "--root", "/app"])
        assert args.command == command
        assert args.name == "Widget"
        assert args.dry_run is True
        assert args.root == "/app"

    def test_db_config_adapter(self):
        args = build_parser().parse_args(["db:config", "--adapter", "mysql"])
        assert args.adapter == "mysql"

    def test_db_config_rejects_unknown_adapter(self):
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(["db:config", "--adapter", "oracle"])
        assert exc_info.value.code == 2

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_load_config_overrides(self, tmp_path):
        args = build_parser().parse_args(["db:init", "--root", str(tmp_path), "--env", "prod"])
        config = load_config(args)
        assert config.app_root == tmp_path
        assert config.app_env == "prod"

    def test_load_config_from_env(self, tmp_path):
        args = build_parser().parse_args(["db:init"])
        with patch.dict(os.environ, {"RESCAFFOLD_APP_ROOT": str(tmp_path)}):
            assert load_config(args).app_root == tmp_path


# ---------------------------------------------------------------------------
# main()
# ---------------------------------------------------------------------------


class TestMain:
    def test_model_new(self, app_root: Path, summary):
        main(["model:new", "Widget", "--root", str(app_root)])

        assert (app_root / "resources" / "widgets" / "widget.py").is_file()
        [(kind, status, path)] = _rows(summary)
        assert (kind, status) == ("model", "created")
        assert path.endswith("widget.py")

    def test_resource_new(self, app_root: Path, summary):
        main(["resource:new", "Categories", "--root", str(app_root)])

        assert (app_root / "resources" / "categories" / "category.py").is_file()
        assert (app_root / "resources" / "categories" / "category_validator.py").is_file()
        assert (app_root / "test" / "unit" / "category_test.py").is_file()
        assert [row[1] for row in _rows(summary)] == ["created"] * 4

    def test_migration_commands(self, app_root: Path, summary):
        main(["migration:new", "add index to users", "--root", str(app_root)])
        main(["migration:new:table", "Widget", "--root", str(app_root)])

        names = sorted(p.name.split("_", 1)[1] for p in (app_root / "db" / "migrations").iterdir())
        assert names == ["add_index_to_users.py", "create_table_widgets.py"]

    def test_dry_run(self, app_root: Path, summary):
        main(["resource:new", "Widget", "--dry-run", "--root", str(app_root)])

        assert not (app_root / "resources").exists()
        assert {row[1] for row in _rows(summary)} == {"planned"}

    def test_best_effort_failure_exits_zero(self, app_root: Path, summary):
        with patch(
            "rescaffold.scaffolder.generator.write_text_file",
            side_effect=PermissionError("denied"),
        ):
            main(["model:new", "Widget", "--root", str(app_root)])

        assert _rows(summary)[0][1] == "failed"

    def test_blank_name_exits_one(self, app_root: Path, summary):
        with pytest.raises(SystemExit) as exc_info:
            main(["model:new", "   ", "--root", str(app_root)])
        assert exc_info.value.code == 1
        summary.assert_not_called()

    @pytest.mark.parametrize("command", ["model:new", "migration:new"])
    def test_path_like_name_exits_one(self, app_root: Path, summary, command):
        with pytest.raises(SystemExit) as exc_info:
            main([command, "../../evil", "--root", str(app_root)])
        assert exc_info.value.code == 1
        assert list(app_root.iterdir()) == []

    def test_db_init(self, app_root: Path):
        with patch("rescaffold.cli.print_success") as success:
            main(["db:init", "--root", str(app_root)])
            main(["db:init", "--root", str(app_root)])

        assert [c.args[0] for c in success.call_args_list] == [
            "Migrations table created",
            "Migrations table already exists",
        ]
        assert (app_root / "db" / "migrations" / "schema_migrations.json").is_file()

    def test_db_config(self, app_root: Path):
        main(["db:config", "--adapter", "postgresql", "--env", "prod", "--root", str(app_root)])

        data = json.loads((app_root / "config" / "database.json").read_text(encoding="utf-8"))
        assert data["prod"]["adapter"] == "postgresql"
        assert data["prod"]["database"] == "app_prod"
        assert (app_root / "log").is_dir()
