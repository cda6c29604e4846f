"""Console output for the ftpsync CLI."""

from typing import Optional

from rich.console import Console
from rich.markup import escape

from .utils import format_size


class OutputFormatter:
    """Prints user-facing messages.

    Regular messages go to stdout and are suppressed in quiet mode;
    errors always go to stderr.
    """

    def __init__(
        self,
        quiet: bool = False,
        console: Optional[Console] = None,
        error_console: Optional[Console] = None,
    ):
        self.quiet = quiet
        self.console = console or Console(highlight=False)
        self.error_console = error_console or Console(stderr=True, highlight=False)

    def print(self, message: str = "") -> None:
        if not self.quiet:
            self.console.print(message)

    def info(self, message: str) -> None:
        if not self.quiet:
            self.console.print(escape(message))

    def success(self, message: str) -> None:
        if not self.quiet:
            self.console.print(f"[green]{escape(message)}[/green]")

    def warning(self, message: str) -> None:
        if not self.quiet:
            self.console.print(f"[yellow]{escape(message)}[/yellow]")

    def error(self, message: str) -> None:
        self.error_console.print(f"[red]{escape(message)}[/red]")

    def error_pair(self, name: str, message: str) -> None:
        """Print an error as ``Name: message`` on stderr."""
        self.error_console.print(f"[bold]{escape(name)}[/bold]: [red]{escape(message)}[/red]")

    def action(self, tag: str, path: str) -> None:
        """Print a transfer log line such as ``[UPLD] ./index.html``."""
        if not self.quiet:
            self.console.print(f"[bold]{escape('[' + tag + ']')}[/bold] [yellow]{escape(path)}[/yellow]")

    def format_size(self, size_bytes: int) -> str:
        return format_size(size_bytes)
