"""rescaffold command line.

Usage::

    rescaffold model:new Widget
    rescaffold resource:new Categories --root ./my-app
    rescaffold migration:new "Add index to users"
    rescaffold migration:new:table Widget --dry-run
    rescaffold db:init
    rescaffold db:config --adapter postgresql
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional

from .config import Config
from .logger import LogQueue, configure_logging
from .scaffolder import ResourceGenerator
from .scaffolder.generator import SUPPORTED_ADAPTERS
from .scaffolder.models import ScaffoldError, ScaffoldResult
from .utils import console, print_error, print_success, print_summary_table

NAMED_COMMANDS: dict[str, str] = {
    "model:new": "Generate a model file for a resource",
    "resource:new": "Generate model, validator, unit test and table migration",
    "migration:new": "Generate an empty migration",
    "migration:new:table": "Generate a create-table migration for a resource",
}


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--root",
        default=None,
        help="Application root (default: $RESCAFFOLD_APP_ROOT or the current directory)",
    )
    common.add_argument("--env", default=None, help="Application environment (default: dev)")

    parser = argparse.ArgumentParser(
        prog="rescaffold",
        description="Resource scaffolding for web applications",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    commands = parser.add_subparsers(dest="command", required=True)

    for command, help_text in NAMED_COMMANDS.items():
        sub = commands.add_parser(command, parents=[common], help=help_text)
        sub.add_argument("name", help="Resource or migration name")
        sub.add_argument(
            "--dry-run",
            action="store_true",
            help="Render everything but write nothing",
        )

    commands.add_parser("db:init", parents=[common], help="Create the migrations table")

    db_config = commands.add_parser(
        "db:config", parents=[common], help="Generate the database config file"
    )
    db_config.add_argument(
        "--adapter",
        default="sqlite",
        choices=SUPPORTED_ADAPTERS,
        help="Database adapter (default: sqlite)",
    )
    return parser


def load_config(args: argparse.Namespace) -> Config:
    config = Config.from_env()
    if args.root:
        config.app_root = Path(args.root)
    if args.env:
        config.app_env = args.env
    return config


def main(argv: Optional[list[str]] = None) -> None:
    """CLI entry point for ``rescaffold``."""
    log = LogQueue()
    args = build_parser().parse_args(argv)

    config = load_config(args)
    log.output_length = config.logging.output_length
    log.debug(f"Using application root {config.app_root.resolve()} ({config.app_env})")
    dry_run = getattr(args, "dry_run", False)
    if dry_run:
        log.info("Dry run: no files will be written")

    sink = configure_logging(config)
    log.attach(sink)

    generator = ResourceGenerator(config, log=log)
    persist = not dry_run
    try:
        result = _dispatch(generator, args, persist)
    except ScaffoldError as exc:
        print_error(f"Error: {exc}")
        sys.exit(1)
    finally:
        sink.close()

    if result is not None:
        rows = [(o.kind.value, o.status.value, str(o.path)) for o in result.outcomes]
        print_summary_table(rows, title=f"{args.command} {getattr(args, 'name', '')}".strip())
        if result.failed:
            console.print(
                f"[yellow]{len(result.failed)} artifact(s) could not be written; see log above.[/yellow]"
            )


def _dispatch(
    generator: ResourceGenerator, args: argparse.Namespace, persist: bool
) -> Optional[ScaffoldResult]:
    command = args.command
    if command == "model:new":
        return generator.new_model(args.name, persist=persist)
    if command == "resource:new":
        return generator.new_resource(args.name, persist=persist)
    if command == "migration:new":
        return ScaffoldResult(outcomes=[generator.new_migration(args.name, persist=persist)])
    if command == "migration:new:table":
        return ScaffoldResult(
            outcomes=[generator.new_table_migration(args.name, persist=persist)]
        )
    if command == "db:init":
        created = generator.db_init()
        print_success("Migrations table created" if created else "Migrations table already exists")
        return None
    if command == "db:config":
        path = generator.new_db_config(args.adapter)
        print_success(f"Database config ready at {path}")
        return None
    raise ScaffoldError(f"Unknown command {command!r}")


if __name__ == "__main__":
    main()
