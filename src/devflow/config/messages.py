"""UI messages and strings for DevFlow."""

# =============================================================================
# Project Metadata
# =============================================================================

PROJECT_TAGLINE = "Activity telemetry for the DevFlow editor plugin"
PROJECT_URL = "https://github.com/devflow-intelligence/devflow"

HELP_TEXT = f"""
[bold cyan]devflow[/bold cyan] - {PROJECT_TAGLINE}

[bold]Commands:[/bold]
  [cyan]replay[/cyan]      Replay a recorded editor event log through the telemetry engine
  [cyan]config[/cyan]      Show or initialize telemetry configuration
  [cyan]privacy[/cyan]     Manage telemetry consent
  [cyan]version[/cyan]     Show version information

[bold]Examples:[/bold]
  [dim]$ devflow privacy accept[/dim]
  [dim]$ devflow replay events.jsonl --output records.jsonl[/dim]
"""

# =============================================================================
# Success Messages
# =============================================================================

SUCCESS_MESSAGES = {
    "config_written": "Telemetry config written to {path}",
    "consent_accepted": "Telemetry consent saved ({count} data type(s) allowed)",
    "consent_declined": "Telemetry consent declined; nothing will be recorded",
    "replay_complete": "Replayed {events} event(s), emitted {records} record(s)",
}

# =============================================================================
# Error Messages
# =============================================================================

ERROR_MESSAGES = {
    "generic_error": "An error occurred: {error}",
    "events_not_found": "Event log not found: {path}",
    "replay_failed": "Replay failed: {error}",
    "config_exists": "Config already exists at {path} (use --force to overwrite)",
}

# =============================================================================
# Info / Warning Messages
# =============================================================================

INFO_MESSAGES = {
    "no_consent": "No telemetry consent on file. Run 'devflow privacy accept' to record telemetry.",
    "consent_ignored": "Consent checks disabled for this replay",
}
