"""Replay command for devflow.

Runs a recorded editor event log through the telemetry engine against a
virtual clock and writes the resulting records as JSON Lines.
"""

import logging
import sys
from collections import Counter
from pathlib import Path
from typing import TextIO

import typer
from rich.table import Table

from devflow.config.messages import ERROR_MESSAGES, INFO_MESSAGES, SUCCESS_MESSAGES
from devflow.config.settings import get_settings
from devflow.telemetry.config import load_telemetry_config
from devflow.telemetry.constants import RECORD_TYPES, VALID_LOG_LEVELS
from devflow.telemetry.exceptions import ConfigurationError, ReplayError
from devflow.telemetry.logging_config import configure_logging
from devflow.telemetry.privacy import load_consent
from devflow.telemetry.replay import replay_events
from devflow.telemetry.sinks import (
    ConsentFilteringSink,
    FanOutSink,
    JsonlSink,
    MemorySink,
    TelemetrySink,
)
from devflow.utils import (
    err_console,
    print_error,
    print_info,
    print_success,
    print_warning,
)

logger = logging.getLogger(__name__)


def replay_command(
    events: Path,
    output: Path | None = None,
    config_root: Path | None = None,
    ignore_consent: bool = False,
    focused: bool = False,
    log_level: str | None = None,
) -> None:
    """Replay an event log and emit telemetry records.

    Args:
        events: JSONL event log to replay.
        output: File for JSONL records; stdout when omitted.
        config_root: Project root holding .devflow/ (defaults to cwd).
        ignore_consent: Emit every record regardless of stored consent.
        focused: Whether the window is focused before the first event.
        log_level: Override for the configured log level.
    """
    project_root = config_root or Path.cwd()
    settings = get_settings()
    config = load_telemetry_config(project_root, settings)

    level = (log_level or config.log_level).upper()
    if level not in VALID_LOG_LEVELS:
        print_error(f"Invalid log level: {log_level} (use {', '.join(VALID_LOG_LEVELS)})")
        raise typer.Exit(code=1)
    configure_logging(
        level,
        log_file=Path(settings.log_file) if settings.log_file else None,
        log_rotation=config.log_rotation,
    )

    if not events.is_file():
        print_error(ERROR_MESSAGES["events_not_found"].format(path=events))
        raise typer.Exit(code=1)

    memory = MemorySink()
    stream: TextIO = open(output, "w", encoding="utf-8") if output else sys.stdout
    sink: TelemetrySink = FanOutSink(JsonlSink(stream), memory)

    consent_sink: ConsentFilteringSink | None = None
    if ignore_consent:
        print_info(INFO_MESSAGES["consent_ignored"])
    else:
        try:
            consent = load_consent(project_root, settings)
        except ConfigurationError as e:
            if output:
                stream.close()
            print_error(str(e))
            raise typer.Exit(code=1) from e
        if consent is None:
            print_warning(INFO_MESSAGES["no_consent"])
        consent_sink = ConsentFilteringSink(sink, consent)
        sink = consent_sink

    try:
        with open(events, encoding="utf-8") as f:
            summary = replay_events(f, sink, config, initially_focused=focused)
    except ReplayError as e:
        print_error(ERROR_MESSAGES["replay_failed"].format(error=e))
        raise typer.Exit(code=1) from e
    finally:
        if output:
            stream.close()

    _print_summary(memory, consent_sink)
    if summary.sink_failures:
        print_warning(f"{summary.sink_failures} record(s) failed to write")
    print_success(
        SUCCESS_MESSAGES["replay_complete"].format(
            events=summary.events, records=len(memory.records)
        )
    )


def _print_summary(memory: MemorySink, consent_sink: ConsentFilteringSink | None) -> None:
    counts = Counter(record.type for record in memory.records)

    table = Table(title="Telemetry Records")
    table.add_column("Record", style="cyan")
    table.add_column("Count", justify="right", style="green")
    for record_type in RECORD_TYPES:
        table.add_row(record_type, str(counts.get(record_type, 0)))
    err_console.print(table)

    if consent_sink is not None and consent_sink.dropped:
        print_info(f"{consent_sink.dropped} record(s) dropped without consent")
