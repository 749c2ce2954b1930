#!/usr/bin/env python3
"""
Console UI Module using Rich

Provides the console interface shared by the kenosis tools: colored messages,
header panels, settings tables, progress bars and interactive prompts.
"""

from typing import Any, Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)
from rich.prompt import Confirm, Prompt
from rich.table import Table


class ConsoleUI:
    """Console UI handler using Rich for the cleanup CLIs"""

    def __init__(self, force_terminal: Optional[bool] = None, console: Optional[Console] = None):
        """Initialize console with optional terminal forcing or an existing console"""
        self.console = console or Console(force_terminal=force_terminal, highlight=False)
        self.error_console = Console(stderr=True, force_terminal=force_terminal, highlight=False)

    # Basic styled output methods
    def print_success(self, message: str):
        """Print success message in green"""
        self.console.print(message, style="green")

    def print_error(self, message: str):
        """Print error message in red on stderr"""
        self.error_console.print(message, style="red bold")

    def print_warning(self, message: str):
        """Print warning message in yellow"""
        self.console.print(message, style="yellow")

    def print_info(self, message: str):
        """Print info message in cyan"""
        self.console.print(message, style="cyan")

    def print_plain(self, message: str):
        """Print message in plain white"""
        self.console.print(message, style="white", markup=False)

    def print_section(self, title: str):
        """Print a bold section title"""
        self.console.print(f"\n[bold blue]{title}[/bold blue]")

    def print_header(self, title: str, subtitle: Optional[str] = None):
        """Print a header with optional subtitle"""
        if subtitle:
            header_text = f"[bold]{title}[/bold]\n[dim]{subtitle}[/dim]"
        else:
            header_text = f"[bold]{title}[/bold]"

        panel = Panel(header_text, box=box.ROUNDED, padding=(0, 1))
        self.console.print(panel)

    # Configuration display
    def show_configuration(self, config: dict[str, Any]):
        """Display run settings in a formatted table"""
        table = Table(show_header=False, box=box.SIMPLE)
        table.add_column("Setting", style="cyan dim", min_width=20, justify="right")
        table.add_column("Value", style="cyan", min_width=30)

        for key, value in config.items():
            if isinstance(value, (list, tuple, set, frozenset)):
                value = ", ".join(sorted(str(v) for v in value)) or "-"
            table.add_row(key, str(value))

        self.console.print(table)

    # Progress bar management
    def create_progress(self) -> Progress:
        """Create a Rich progress context manager for batch operations"""
        return Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            TextColumn("({task.completed}/{task.total})"),
            TimeElapsedColumn(),
            TimeRemainingColumn(),
            console=self.console,
        )

    def create_activity_progress(self) -> Progress:
        """Create a Rich progress context manager for activity-only display (no counts)"""
        return Progress(
            SpinnerColumn(),
            TextColumn("{task.description}"),
            TimeElapsedColumn(),
            console=self.console,
        )

    # Interactive prompts
    def confirm(self, question: str, default: bool = False) -> bool:
        """Ask for yes/no confirmation; a closed stdin counts as the default"""
        try:
            return Confirm.ask(question, default=default, console=self.console)
        except EOFError:
            return default

    def prompt(self, question: str, default: Optional[str] = None) -> str:
        """Ask for text input with optional default"""
        return Prompt.ask(question, default=default, console=self.console)

    def confirm_token(self, question: str, token: str) -> bool:
        """Require the operator to type *token* exactly; anything else declines"""
        try:
            answer = self.prompt(question)
        except EOFError:
            return False
        return answer == token
