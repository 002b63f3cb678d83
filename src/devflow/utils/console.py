"""Rich console helpers shared by the CLI commands."""

from rich.console import Console
from rich.panel import Panel

from devflow.config.messages import PROJECT_TAGLINE

console = Console()
# Diagnostics go to stderr so that stdout stays clean for piped JSONL
err_console = Console(stderr=True)


def print_success(message: str) -> None:
    err_console.print(f"[green]✓[/green] {message}")


def print_error(message: str) -> None:
    err_console.print(f"[bold red]✗[/bold red] {message}")


def print_warning(message: str) -> None:
    err_console.print(f"[yellow]![/yellow] {message}")


def print_info(message: str) -> None:
    err_console.print(f"[cyan]i[/cyan] {message}")


def print_panel(content: str, title: str | None = None, style: str = "cyan") -> None:
    """Print content inside a bordered panel."""
    console.print(Panel(content, title=title, border_style=style, expand=False))


def print_banner() -> None:
    console.print(f"[bold cyan]devflow[/bold cyan] [dim]{PROJECT_TAGLINE}[/dim]\n")
