"""Telemetry consent commands: show, accept, decline.

Nothing is recorded by ``devflow replay`` until consent is on file.
"""

from pathlib import Path

import typer
from rich.table import Table

from devflow.config.messages import INFO_MESSAGES, SUCCESS_MESSAGES
from devflow.config.settings import get_settings
from devflow.telemetry.constants import DATA_TYPES
from devflow.telemetry.exceptions import ConfigurationError, ValidationError
from devflow.telemetry.privacy import (
    PrivacyConsent,
    declined_consent,
    default_consent,
    load_consent,
    save_consent,
)
from devflow.utils import console, print_error, print_info, print_success

privacy_app = typer.Typer(
    name="privacy",
    help="Manage telemetry consent",
    no_args_is_help=True,
)

_CONFIG_ROOT_OPTION = typer.Option(
    None, "--config-root", "-r", help="Project root holding .devflow/ (default: cwd)"
)


def _existing_user_id(project_root: Path) -> str | None:
    """Keep the anonymous id stable across consent changes."""
    try:
        consent = load_consent(project_root, get_settings())
    except ConfigurationError:
        return None
    return consent.user_id if consent else None


@privacy_app.command("show")
def privacy_show(config_root: Path | None = _CONFIG_ROOT_OPTION) -> None:
    """Show the stored consent decision."""
    project_root = config_root or Path.cwd()
    try:
        consent = load_consent(project_root, get_settings())
    except ConfigurationError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    if consent is None:
        print_info(INFO_MESSAGES["no_consent"])
        return

    table = Table(title="Telemetry Consent")
    table.add_column("Data type", style="cyan")
    table.add_column("Allowed")
    for data_type in DATA_TYPES:
        allowed = consent.allows(data_type)
        table.add_row(data_type, "[green]yes[/green]" if allowed else "[dim]no[/dim]")
    console.print(table)

    console.print(f"User id: {consent.user_id}")
    console.print(f"Consent given: {'yes' if consent.consent_given else 'no'}")
    console.print(f"Recorded: {consent.consent_timestamp.isoformat()}")
    console.print(f"Retention: {consent.retention_period_days} day(s)")


@privacy_app.command("accept")
def privacy_accept(
    data_type: list[str] = typer.Option(
        None,
        "--data-type",
        "-t",
        help=f"Allow only these data types (repeatable). Options: {', '.join(DATA_TYPES)}",
    ),
    retention_days: int | None = typer.Option(
        None, "--retention-days", help="Retention period in days (0, 30, 90, 180, 365, 730)"
    ),
    config_root: Path | None = _CONFIG_ROOT_OPTION,
) -> None:
    """Record consent to collect telemetry.

    Example:
        devflow privacy accept
        devflow privacy accept -t focus_time -t build_events
    """
    project_root = config_root or Path.cwd()
    base = default_consent(_existing_user_id(project_root))

    try:
        consent = PrivacyConsent(
            user_id=base.user_id,
            consent_given=True,
            data_types=(
                {t: t in data_type for t in DATA_TYPES} | dict.fromkeys(data_type, True)
                if data_type
                else base.data_types
            ),
            retention_period_days=(
                base.retention_period_days if retention_days is None else retention_days
            ),
        )
    except ValidationError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    save_consent(project_root, consent, get_settings())
    allowed = sum(1 for t in DATA_TYPES if consent.allows(t))
    print_success(SUCCESS_MESSAGES["consent_accepted"].format(count=allowed))


@privacy_app.command("decline")
def privacy_decline(config_root: Path | None = _CONFIG_ROOT_OPTION) -> None:
    """Record refusal; every data type is disabled."""
    project_root = config_root or Path.cwd()
    save_consent(
        project_root, declined_consent(_existing_user_id(project_root)), get_settings()
    )
    print_success(SUCCESS_MESSAGES["consent_declined"])
