"""Rich terminal display for monosplit."""

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from monosplit.models import OutputMode


console = Console()
# Notices go to stderr so a dry-run transcript on stdout stays a valid script
err_console = Console(stderr=True)


def print_command(command: str) -> None:
    """Print a shell command exactly as a user would type it."""
    console.print(command, markup=False, highlight=False, soft_wrap=True)


def print_verbose(mode: OutputMode, message: str) -> None:
    """Print a narration line, commented out when simulating."""
    console.print(f"{mode.prefix}{message}", markup=False, highlight=False, soft_wrap=True)


def print_message(message: str) -> None:
    """Print a plain message."""
    console.print(message, markup=False, highlight=False, soft_wrap=True)


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[bold red]Error:[/bold red] {escape(message)}", soft_wrap=True)


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[bold green]{escape(message)}[/bold green]")


def print_dependency(name: str, available: bool) -> None:
    """Print whether an external tool can be run."""
    if available:
        console.print(f"[green]✓[/green] {name}")
    else:
        console.print(f"[red]✗[/red] {name}: not found")


def print_dry_run_notice() -> None:
    """Print dry run notice."""
    err_console.print(Panel(
        "[yellow]DRY RUN MODE[/yellow] - No changes will be made. "
        "The commands below show what would run.",
        style="yellow",
    ))
