"""Rich consoles shared by the CLI commands and the listening loop."""

from rich.console import Console
from rich.table import Table

_console: Console | None = None
_error_console: Console | None = None


def get_console() -> Console:
    """Get or create the stdout Console."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def get_error_console() -> Console:
    """Get or create the stderr Console used for failures."""
    global _error_console
    if _error_console is None:
        _error_console = Console(stderr=True)
    return _error_console


def safe_print(message: str, style: str | None = None) -> None:
    """Print a status line, optionally styled (e.g. "green", "bold cyan")."""
    get_console().print(message, style=style, highlight=False)


def print_error(message: str) -> None:
    get_error_console().print(message, style="red", highlight=False)


def print_table(title: str, columns: list[str], rows: list[list[str]]) -> None:
    """Render rows as a table. Columns prefixed with '>' are right-aligned."""
    table = Table(title=title)
    for column in columns:
        if column.startswith(">"):
            table.add_column(column[1:], justify="right")
        else:
            table.add_column(column)
    for row in rows:
        table.add_row(*row)
    get_console().print(table)
