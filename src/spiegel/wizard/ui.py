"""
Spiegel Wizard UI Components

Console output helpers for the wizard command line using rich library.
"""

import re
from typing import Optional, List, Sequence, Mapping, Any
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm
from rich.table import Table

from spiegel.wizard.exceptions import SpiegelError


# Patterns that indicate a secret value
SECRET_PATTERNS = [
    "token", "password", "secret", "key", "credential",
    "api_key", "apikey", "auth", "bearer", "jwt",
]

# Regex patterns for common secret formats
SECRET_REGEXES = [
    r'sk-[a-zA-Z0-9\-]{20,}',  # API keys
    r'ghp_[a-zA-Z0-9]{36,}',  # GitHub PAT
    r'AKIA[A-Z0-9]{16}',  # AWS Access Key ID
]


def mask_secrets(text: str, mask: str = "********") -> str:
    """Mask secrets in a string.

    Step contexts often carry user input, so anything that looks like a
    credential is hidden before it reaches the console or a log file.

    Args:
        text: The text that may contain secrets
        mask: The string to replace secrets with

    Returns:
        Text with secrets masked
    """
    if not text:
        return text

    result = text

    # Mask known secret patterns in key=value format
    for pattern in SECRET_PATTERNS:
        regex = rf'({pattern}["\']?\s*[=:]\s*["\']?)([^"\'\s]+)(["\']?)'
        result = re.sub(regex, rf'\1{mask}\3', result, flags=re.IGNORECASE)

    for regex in SECRET_REGEXES:
        result = re.sub(regex, mask, result)

    return result


def is_secret_key(key: str) -> bool:
    """Check if a key name indicates it holds a secret value."""
    key_lower = key.lower()
    return any(pattern in key_lower for pattern in SECRET_PATTERNS)


class WizardUI:
    """Console output for the Spiegel command line."""

    def __init__(self, console: Optional[Console] = None, total_steps: int = 0):
        self.console = console or Console()
        self.total_steps = total_steps

    def print_header(self, title: str = "Spiegel Step Wizard"):
        """Print the wizard header."""
        self.console.print()
        self.console.print(Panel(
            f"[bold blue]{title}[/bold blue]",
            border_style="blue",
            padding=(0, 2)
        ))
        self.console.print()

    def print_step_header(self, step_num: int, title: str, description: str = ""):
        """Print a step header with number and title."""
        self.console.print(f"[bold cyan]Step {step_num}/{self.total_steps}:[/bold cyan] [bold]{title}[/bold]")
        if description:
            self.console.print(f"[dim]{description}[/dim]")

    def print_success(self, message: str):
        """Print a success message."""
        self.console.print(f"[green]✓[/green] {message}")

    def print_error(self, message: str):
        """Print an error message."""
        self.console.print(f"[red]✗[/red] {message}")

    def print_warning(self, message: str):
        """Print a warning message."""
        self.console.print(f"[yellow]⚠[/yellow] {message}")

    def print_info(self, message: str):
        """Print an info message."""
        self.console.print(f"[blue]ℹ[/blue] {message}")

    def print_spiegel_error(self, error: SpiegelError):
        """Print a Spiegel error with its details and remediation."""
        self.print_error(f"Error: {error.message}")
        if error.details:
            self.console.print(f"[dim]{error.details}[/dim]")
        if error.remediation:
            self.print_info(f"To fix: {error.remediation}")

    def prompt_confirm(self, prompt: str, default: bool = False) -> bool:
        """Prompt for yes/no confirmation."""
        return Confirm.ask(prompt, default=default, console=self.console)

    def show_steps_table(self, steps: Sequence[str], current: Optional[int] = None):
        """Show the ordered step list, marking the current position."""
        table = Table(title="Installed Steps", border_style="blue")
        table.add_column("#", style="dim", justify="right")
        table.add_column("Step", style="cyan")

        for i, name in enumerate(steps):
            label = f"[bold green]→ {name}[/bold green]" if i == current else name
            table.add_row(str(i + 1), label)

        self.console.print(table)

    def show_checklist(self, items: List[tuple[str, bool, str]]):
        """Show a checklist of items with status.

        Args:
            items: List of (name, passed, message) tuples
        """
        for name, passed, message in items:
            if passed:
                self.print_success(f"{name}: {message}")
            else:
                self.print_error(f"{name}: {message}")

    def show_summary_table(self, title: str, data: Mapping[str, Any]):
        """Show a summary table with secrets masked."""
        table = Table(title=title, border_style="blue")
        table.add_column("Setting", style="cyan")
        table.add_column("Value", style="white")

        for key, value in data.items():
            if isinstance(value, (list, tuple)):
                value = ", ".join(str(item) for item in value)
            value = str(value) if value is not None else ""
            if is_secret_key(key):
                display_value = "********" if value else "[dim]not set[/dim]"
            else:
                display_value = mask_secrets(value) if value else "[dim]not set[/dim]"
            table.add_row(key, display_value)

        self.console.print(table)
