"""CLI commands for devflow."""
