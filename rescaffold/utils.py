"""Shared utility functions for rescaffold.

Provides file-system helpers, name normalisation and Rich-based console
reporting used by the engine and the CLI.
"""

from __future__ import annotations

import re
from pathlib import Path

from rich.console import Console
from rich.table import Table

console = Console()

# ---------------------------------------------------------------------------
# String / name helpers
# ---------------------------------------------------------------------------


def ucfirst(text: str) -> str:
    """Upper-case the first character and leave the rest untouched.

    Examples::

        ucfirst("blog_post") -> "Blog_post"
        ucfirst("iPhone")    -> "IPhone"
    """
    return text[:1].upper() + text[1:]


def underscore_whitespace(text: str) -> str:
    """Lowercase *text* and collapse whitespace runs into single underscores.

    Examples::

        underscore_whitespace("Add Index To Users") -> "add_index_to_users"
    """
    return re.sub(r"\s+", "_", text.strip().lower())


# ---------------------------------------------------------------------------
# File-system helpers
# ---------------------------------------------------------------------------


def ensure_dir(path: str | Path) -> tuple[Path, bool]:
    """Make sure *path* exists as a directory.

    Returns:
        ``(path, created)`` where *created* is ``True`` only when the
        directory did not exist before the call.
    """
    dir_path = Path(path)
    if dir_path.is_dir():
        return dir_path, False
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path, True


def write_text_file(path: Path, content: str) -> None:
    """Write *content* as UTF-8, creating missing parent folders."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_summary_table(rows: list[tuple[str, str, str]], title: str = "Summary") -> None:
    """Print a three-column artifact/status/path table.

    Args:
        rows: ``(artifact, status, path)`` tuples.
        title: Table title.
    """
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Artifact", style="dim", no_wrap=True)
    table.add_column("Status")
    table.add_column("Path")

    for artifact, status, path in rows:
        table.add_row(artifact, status, path)

    console.print(table)
    console.print()


def print_success(message: str) -> None:
    """Print *message* in bold green."""
    console.print(f"[bold green]{message}[/bold green]")


def print_error(message: str) -> None:
    """Print *message* in bold red."""
    console.print(f"[bold red]{message}[/bold red]")
