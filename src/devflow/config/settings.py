"""Runtime configuration settings for DevFlow.

Uses Pydantic Settings so values can be overridden via environment
variables with the DEVFLOW_ prefix.
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from devflow.config.paths import CONFIG_FILENAME, DEVFLOW_DIR, PRIVACY_FILENAME


class RuntimeSettings(BaseSettings):
    """Process-wide settings.

    Can be overridden via environment variables with DEVFLOW_ prefix.
    """

    model_config = SettingsConfigDict(env_prefix="DEVFLOW_")

    config_dir: str = Field(
        default=DEVFLOW_DIR,
        description="Directory (relative to the project root) holding devflow config",
    )
    log_file: str | None = Field(
        default=None,
        description="Optional log file path; logs go to stderr when unset",
    )

    def config_path(self, project_root: Path) -> Path:
        """Path of the telemetry config file for a project."""
        return project_root / self.config_dir / CONFIG_FILENAME

    def privacy_path(self, project_root: Path) -> Path:
        """Path of the privacy consent file for a project."""
        return project_root / self.config_dir / PRIVACY_FILENAME


def get_settings() -> RuntimeSettings:
    """Build settings from the current environment."""
    return RuntimeSettings()
