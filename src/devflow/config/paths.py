"""Path constants for DevFlow.

These define where devflow keeps its project-level configuration.
The directory name can be overridden with DEVFLOW_CONFIG_DIR
(see devflow.config.settings).
"""

DEVFLOW_DIR = ".devflow"
CONFIG_FILENAME = "config.yaml"
PRIVACY_FILENAME = "privacy.yaml"

ENV_FILENAME = ".env"
