"""Main CLI entry point for devflow."""

import sys
from pathlib import Path

import typer
from dotenv import load_dotenv

from devflow.commands.config_cmd import config_app
from devflow.commands.privacy_cmd import privacy_app
from devflow.commands.replay_cmd import replay_command
from devflow.config.messages import HELP_TEXT, PROJECT_TAGLINE, PROJECT_URL
from devflow.config.paths import ENV_FILENAME
from devflow.constants import VERSION
from devflow.utils import console, print_banner, print_error, print_panel

# Load .env file from current directory if it exists
load_dotenv(Path.cwd() / ENV_FILENAME, verbose=False)

# Create main Typer app
app = typer.Typer(
    name="devflow",
    help=PROJECT_TAGLINE,
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

# Add command groups
app.add_typer(config_app, name="config")
app.add_typer(privacy_app, name="privacy")


@app.command("replay")
def replay(
    events: Path = typer.Argument(..., help="Recorded editor event log (JSON Lines)"),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Write records to this file instead of stdout",
    ),
    config_root: Path | None = typer.Option(
        None,
        "--config-root",
        "-r",
        help="Project root holding .devflow/ (default: cwd)",
    ),
    ignore_consent: bool = typer.Option(
        False,
        "--ignore-consent",
        help="Emit every record regardless of stored consent",
    ),
    focused: bool = typer.Option(
        False,
        "--focused",
        help="Treat the window as focused before the first event",
    ),
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Log level (DEBUG, INFO, WARNING, ERROR); overrides config",
    ),
) -> None:
    """Replay a recorded event log through the telemetry engine.

    Timers run on virtual time, so a replay of an hour-long recording
    finishes instantly with the same records the live engine would emit.
    """
    replay_command(
        events=events,
        output=output,
        config_root=config_root,
        ignore_consent=ignore_consent,
        focused=focused,
        log_level=log_level,
    )


@app.command("version")
def version() -> None:
    """Show version information."""
    print_panel(
        f"[bold cyan]devflow[/bold cyan] version [green]{VERSION}[/green]\n\n"
        f"{PROJECT_TAGLINE}\n\n"
        f"[dim]{PROJECT_URL}[/dim]",
        title="Version",
        style="cyan",
    )


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version_flag: bool | None = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version information",
        is_eager=True,
    ),
) -> None:
    """devflow - activity telemetry for the DevFlow editor plugin.

    Get started:
        devflow privacy accept            # Allow telemetry collection
        devflow config init               # Write default thresholds
        devflow replay events.jsonl       # Replay a recorded session
    """
    if version_flag:
        version()
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        print_banner()
        console.print(HELP_TEXT)
        raise typer.Exit()


def cli_main() -> None:
    """Main entry point for the CLI.

    This is the function that gets called when running the 'devflow' command.
    It handles exceptions and provides user-friendly error messages.
    """
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Cancelled by user[/yellow]")
        sys.exit(130)
    except Exception as e:
        if isinstance(e, typer.Exit):
            sys.exit(e.exit_code)

        from devflow.config.messages import ERROR_MESSAGES

        print_error(ERROR_MESSAGES["generic_error"].format(error=str(e)))
        sys.exit(1)


if __name__ == "__main__":
    cli_main()
