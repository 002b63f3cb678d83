"""Telemetry configuration commands: show, init."""

import json
from pathlib import Path

import typer
import yaml

from devflow.config.messages import ERROR_MESSAGES, SUCCESS_MESSAGES
from devflow.config.settings import get_settings
from devflow.constants import JSON_INDENT
from devflow.telemetry.config import (
    TelemetryConfig,
    load_telemetry_config,
    save_telemetry_config,
)
from devflow.utils import print_error, print_info, print_panel, print_success

config_app = typer.Typer(
    name="config",
    help="Show or initialize telemetry configuration",
    no_args_is_help=True,
)


@config_app.command("show")
def config_show(
    config_root: Path | None = typer.Option(
        None, "--config-root", "-r", help="Project root holding .devflow/ (default: cwd)"
    ),
    json_output: bool = typer.Option(False, "--json", help="Output JSON"),
) -> None:
    """Show the effective telemetry configuration.

    Values missing from the config file are filled with defaults, so the
    output is always complete.
    """
    project_root = config_root or Path.cwd()
    settings = get_settings()
    config_file = settings.config_path(project_root)
    config = load_telemetry_config(project_root, settings)

    if json_output:
        print(json.dumps(config.to_dict(), indent=JSON_INDENT))
        return

    if not config_file.exists():
        print_info(f"No config file at {config_file}; showing defaults")
    print_panel(
        yaml.safe_dump(config.to_dict(), default_flow_style=False, sort_keys=False).rstrip(),
        title="Telemetry Config",
    )


@config_app.command("init")
def config_init(
    config_root: Path | None = typer.Option(
        None, "--config-root", "-r", help="Project root holding .devflow/ (default: cwd)"
    ),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite existing telemetry config"),
) -> None:
    """Write a config file holding the default telemetry settings.

    Example:
        devflow config init
        devflow config init --force
    """
    project_root = config_root or Path.cwd()
    settings = get_settings()
    config_file = settings.config_path(project_root)

    if config_file.exists() and not force:
        print_error(ERROR_MESSAGES["config_exists"].format(path=config_file))
        raise typer.Exit(code=1)

    path = save_telemetry_config(project_root, TelemetryConfig(), settings)
    print_success(SUCCESS_MESSAGES["config_written"].format(path=path))
