"""Constants for DevFlow.

For paths, messages, and runtime settings, import from:
- devflow.config.paths
- devflow.config.messages
- devflow.config.settings

Telemetry engine thresholds live in devflow.telemetry.constants.
"""

from devflow import __version__

VERSION = __version__

JSON_INDENT = 2
